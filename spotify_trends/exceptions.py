"""
Exception classes for spotify-trends.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide a clear, user-presentable message and
to distinguish between the different failure modes of the refresh pipeline.

Exception Hierarchy:
    TrendsError (base)
        ConfigError - Configuration file or value issues
        AuthError - Client-credentials token exchange failed
        CatalogError - Spotify search endpoint issues
            NetworkError - Transport failure or unexpected HTTP status
            DecodingError - Response body did not have the expected shape
            AuthExpired - HTTP 401, the bearer token must be re-acquired
            SearchError - Interactive combined search failed
        AggregationError - A refresh could not start (no credential at all)
        FeedError - Reddit feed fetch or decode failed
"""


class TrendsError(Exception):
    """
    Base exception for all spotify-trends errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch every application error with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., query, status).

    Example:
        try:
            # some operation
        except TrendsError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'query': search text involved in the error
                     - 'status': HTTP status code returned by the server
                     - 'url': endpoint that was called
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(TrendsError):
    """
    Raised when there's an issue with the configuration.

    Common causes:
        - Unknown language name in config.yaml or on the command line
        - Non-positive refresh interval
        - Search debounce outside the supported 300-500 ms window
    """
    pass


class AuthError(TrendsError):
    """
    Raised when the client-credentials token exchange fails.

    This is fatal to that acquisition attempt only. A previously obtained
    token (if any) stays in place and remains usable.

    Common causes:
        - Missing or invalid client_id / client_secret
        - Token endpoint unreachable
        - Token endpoint answered without an access_token field

    Attributes:
        reason: Short description of why the exchange failed.
    """

    def __init__(self, reason: str, details: dict | None = None) -> None:
        super().__init__(f"Failed to get access token: {reason}", details)
        self.reason = reason


class CatalogError(TrendsError):
    """
    Base class for failures talking to the catalog search endpoint.

    Fan-out operations swallow these per keyword / per artist and count the
    failed call as a zero contribution.
    """
    pass


class NetworkError(CatalogError):
    """Raised on a transport-level failure or a non-success HTTP status."""
    pass


class DecodingError(CatalogError):
    """Raised when a response cannot be decoded into the expected models."""
    pass


class AuthExpired(CatalogError):
    """
    Raised when the catalog answers HTTP 401.

    The caller must call CredentialBroker.acquire() before issuing another
    request. The client itself never retries.
    """

    def __init__(self, message: str = "Access token expired", details: dict | None = None) -> None:
        super().__init__(message, details)


class SearchError(CatalogError):
    """
    Raised when an interactive combined search fails.

    Wraps the underlying NetworkError or DecodingError so the search session
    can surface a single message to the user.
    """
    pass


class AggregationError(TrendsError):
    """
    Raised when a refresh cannot start because no credential is available.

    Individual keyword or artist failures never raise this; they only reduce
    the size of the result.
    """
    pass


class FeedError(TrendsError):
    """
    Raised when the Reddit feed cannot be fetched or decoded.

    The message is shown to the user as-is; there is no retry.
    """
    pass
