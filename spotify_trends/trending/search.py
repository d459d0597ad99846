"""
Interactive search session

Free text typed by the user is debounced; when the input settles the query is
sent as one combined artist+track search and the result is overlaid on the
dashboard without touching the trending baseline.

Ordering: every settled query takes a sequence number. A completion whose
number is no longer the latest is discarded, so a slow response for an old
query never overwrites the result of a newer one or a cleared search.
"""

from typing import Callable, Optional

from ..config.auth import CredentialBroker, get_broker
from ..config.settings import get_settings
from ..exceptions import AuthError, AuthExpired, SearchError
from ..spotify.client import CatalogClient, get_catalog_client
from ..utils.debounce import Debouncer
from ..utils.helpers import normalize_query
from ..utils.logger import get_logger
from .state import DashboardState


NO_TOKEN_MESSAGE = "Access token not available for search"


class SearchSession:
    """
    Debounced consumer of search-box input

    Attributes:
        sequence: Number of the latest settled query
        applied: Number of results written to the state
    """

    def __init__(
        self,
        state: DashboardState,
        client: Optional[CatalogClient] = None,
        broker: Optional[CredentialBroker] = None,
        debounce_ms: Optional[int] = None,
        limit: Optional[int] = None,
        market_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        """
        Args:
            state: Shared dashboard state the result is written to
            client: Catalog client, defaults to the global instance
            broker: Credential broker, defaults to the global instance
            debounce_ms: Quiet period before a query is sent (300-500 ms)
            limit: Maximum artists and tracks per search
            market_provider: Returns the market for the current language
        """
        search_settings = get_settings().search
        debounce_ms = debounce_ms if debounce_ms is not None else search_settings.debounce_ms

        self.state = state
        self.client = client or get_catalog_client()
        self.broker = broker or get_broker()
        self.limit = limit if limit is not None else search_settings.limit
        self.market_provider = market_provider
        self.logger = get_logger(__name__)

        self.sequence = 0
        self.applied = 0
        self.last_query: Optional[str] = None
        self._closed = False
        self._debouncer = Debouncer(debounce_ms / 1000, self._settle, name="search")

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def submit(self, text: str) -> None:
        """Feed raw input; the query is sent once typing pauses"""
        if self._closed:
            return
        self._debouncer.push(text)

    async def search_now(self, text: str) -> None:
        """Settle a query immediately, bypassing the debounce window"""
        if self._closed:
            return
        self._debouncer.cancel()
        await self._settle(text)

    def _is_current(self, sequence: int) -> bool:
        return not self._closed and sequence == self.sequence

    async def _settle(self, text: str) -> None:
        query = normalize_query(text)
        self.sequence += 1
        sequence = self.sequence
        self.last_query = query or None

        if not query:
            self.state.update(search_result=None)
            return

        self.state.update(error_message=None)

        token = self.broker.token
        if not token:
            self.state.update(error_message=NO_TOKEN_MESSAGE)
            return

        market = self.market_provider() if self.market_provider else None

        try:
            result = await self.client.combined_search(token, query, limit=self.limit, market=market)
        except AuthExpired as e:
            self.logger.info(f"Search token rejected, re-acquiring: {query}")
            try:
                await self.broker.acquire()
            except AuthError as auth_error:
                self.logger.warning(f"Token re-acquisition failed: {auth_error.reason}")
            if self._is_current(sequence):
                self.state.update(error_message=f"Search failed: {e.message}")
            return
        except SearchError as e:
            self.logger.warning(f"Search failed for '{query}': {e}")
            if self._is_current(sequence):
                self.state.update(error_message=e.message)
            return

        if not self._is_current(sequence):
            self.logger.debug(f"Discarding stale search result for '{query}'")
            return

        self.applied += 1
        self.state.update(search_result=result)

    def clear(self) -> None:
        """Cancel any pending query and remove the search overlay"""
        self._debouncer.cancel()
        self.sequence += 1
        self.last_query = None
        self.state.update(search_result=None)

    def close(self) -> None:
        """Stop accepting input and ignore results still in flight"""
        self._debouncer.close()
        self._closed = True
        self.sequence += 1
