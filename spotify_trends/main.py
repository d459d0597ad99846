"""
Main CLI interface for spotify-trends

This module provides the command-line surface over the refresh core. It only
renders published state and feeds user input into the core; all ordering and
refresh decisions stay in the trending package.

The CLI is built using Click framework and provides commands for:
- Trending data (languages, trending, artists, search, watch)
- Social feed (feed)
- Configuration management (config show, config set)
- System diagnostics (doctor)
"""

import asyncio
import functools
import sys
from typing import List, Mapping, Optional, Sequence

import click

from . import __version__
from .config.settings import get_settings, reload_settings
from .config.auth import get_broker, reset_broker
from .exceptions import AuthError
from .feed.reddit import FeedClient
from .spotify.client import get_catalog_client, reset_catalog_client
from .spotify.languages import Language
from .spotify.models import SpotifyArtist, SpotifyTrack
from .trending.aggregator import TrendingAggregator
from .trending.manager import TrendsManager
from .trending.search import SearchSession
from .trending.state import DashboardSnapshot, DashboardState
from .trending.views import average_popularity, total_followers
from .utils.helpers import (
    format_number,
    format_popularity,
    format_relative_time,
    format_timestamp,
    truncate_string,
)
from .utils.logger import configure_from_settings, get_logger, get_current_log_file
from .utils.validation import (
    validate_debounce,
    validate_interval,
    validate_language,
    validate_subreddit,
)


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)


LANGUAGE_CHOICES = [language.key for language in Language]


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                        spotify-trends                         ║
║                                                               ║
║     Popular artists and trending tracks, per language         ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Catches exceptions escaping a command, logs them and exits with a
    non-zero status and a red message instead of a traceback.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop"""
    return asyncio.run(coro)


def _resolve_language(value: Optional[str]) -> Language:
    return Language.from_name(value or get_settings().trending.language)


async def _close_shared_sessions() -> None:
    await get_catalog_client().close()
    await get_broker().close()


def _render_tracks(tracks: Sequence[SpotifyTrack], limit: Optional[int] = None) -> None:
    shown = list(tracks)[:limit] if limit else list(tracks)
    if not shown:
        click.echo("   No tracks")
        return
    for position, track in enumerate(shown, 1):
        title = truncate_string(track.name, 40)
        artists = truncate_string(track.all_artists, 35)
        click.echo(f"  {position:>2}. {title:<40}  {artists:<35}  {format_popularity(track.popularity)}")


def _render_artists(artists: Sequence[SpotifyArtist], images: Optional[Mapping[str, str]] = None) -> None:
    if not artists:
        click.echo("   No artists")
        return
    images = images or {}
    for position, artist in enumerate(artists, 1):
        followers = format_number(artist.followers) if artist.followers is not None else "-"
        image = artist.image_url or images.get(artist.id)
        marker = "" if image else "  (no image)"
        click.echo(
            f"  {position:>2}. {truncate_string(artist.name, 35):<35}  "
            f"{format_popularity(artist.popularity)}  {followers:>7}{marker}"
        )


def _render_snapshot(snapshot: DashboardSnapshot, limit: Optional[int] = None) -> None:
    language = snapshot.selected_language
    click.echo(click.style(
        f"\n{language.display_name} ({language.key}) - updated {format_timestamp(snapshot.last_updated)}",
        bold=True
    ))

    click.echo("\nTrending tracks:")
    _render_tracks(snapshot.trending_tracks, limit)

    click.echo("\nArtists in the charts:")
    _render_artists(snapshot.language_artists, snapshot.artist_images)

    avg = average_popularity(snapshot.popular_artists, snapshot.trending_tracks)
    click.echo(
        f"\nPopular artists loaded: {len(snapshot.popular_artists)}  "
        f"Followers: {format_number(total_followers(snapshot.popular_artists))}  "
        f"Avg popularity: {avg}"
    )

    if snapshot.error_message:
        click.echo(click.style(f"\n{snapshot.error_message}", fg='red'))


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    spotify-trends - Popular artists and trending tracks per language

    Builds a trending view on top of Spotify catalog searches, refreshed on a
    timer, with debounced language switching and interactive search.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"spotify-trends v{__version__}")
        return

    if config:
        reload_settings(config)
        reset_broker()
        reset_catalog_client()
        configure_from_settings()
        click.echo(f"Loaded config: {config}")

    if verbose:
        ctx.obj['verbose'] = True
        get_settings().logging.level = "DEBUG"
        configure_from_settings()
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@handle_error
def languages():
    """List supported languages and their trending keywords"""
    current = get_settings().trending.language
    for language in Language:
        marker = "*" if language.key == current else " "
        click.echo(f" {marker} {language.key:<11} {language.value}  {language.market}  {language.display_name}")
        click.echo(f"      {', '.join(language.trending_queries)}")


@cli.command()
@click.option('--language', '-l', type=click.Choice(LANGUAGE_CHOICES), help='Language to aggregate')
@click.option('--limit', '-n', type=click.IntRange(1, 20), default=20, show_default=True, help='Tracks to show')
@handle_error
def trending(language, limit):
    """
    Show trending tracks for a language

    Runs one keyword aggregation and prints the merged result.
    """
    selected = _resolve_language(language)

    async def _run():
        try:
            aggregator = TrendingAggregator()
            return await aggregator.refresh_for_language(selected)
        finally:
            await _close_shared_sessions()

    trending_set = run_async(_run())
    click.echo(click.style(
        f"\nTrending in {selected.display_name} ({len(trending_set)} tracks, "
        f"{format_timestamp(trending_set.refreshed_at)}):\n", bold=True
    ))
    _render_tracks(trending_set.tracks, limit)


@cli.command()
@click.option('--language', '-l', type=click.Choice(LANGUAGE_CHOICES), help='Language to aggregate')
@handle_error
def artists(language):
    """
    Show artists found in the trending tracks

    Loads the popular-artist roster and the trending tracks, then lists the
    artists credited on those tracks with roster data where available.
    """
    selected = _resolve_language(language)

    async def _run():
        manager = TrendsManager(language=selected, refresh_interval=0)
        try:
            task = await manager.start()
            if task is not None:
                await task
            return manager.snapshot
        finally:
            await manager.close()

    snapshot = run_async(_run())

    click.echo(click.style(f"\nPopular artists ({len(snapshot.popular_artists)}):", bold=True))
    _render_artists(snapshot.popular_artists)
    click.echo(click.style(
        f"\nArtists trending in {selected.display_name} ({len(snapshot.language_artists)}):", bold=True
    ))
    _render_artists(snapshot.language_artists, snapshot.artist_images)

    if snapshot.error_message:
        raise click.ClickException(snapshot.error_message)


@cli.command()
@click.argument('query')
@click.option('--language', '-l', type=click.Choice(LANGUAGE_CHOICES), help='Market bias for the search')
@handle_error
def search(query, language):
    """
    Search artists and tracks

    QUERY is free text; it is sent as a single combined search.
    """
    selected = _resolve_language(language)

    async def _run():
        broker = get_broker()
        state = DashboardState(DashboardSnapshot(selected_language=selected))
        session = SearchSession(state, market_provider=lambda: selected.market)
        try:
            try:
                await broker.acquire()
            except AuthError as e:
                state.update(error_message=e.message)
                return state.snapshot
            await session.search_now(query)
            return state.snapshot
        finally:
            session.close()
            await _close_shared_sessions()

    snapshot = run_async(_run())

    if snapshot.error_message:
        raise click.ClickException(snapshot.error_message)

    result = snapshot.search_result
    if result is None or result.is_empty:
        click.echo(f"No results for '{query}'")
        return

    click.echo(click.style(f"\nArtists ({len(result.artists)}):", bold=True))
    _render_artists(result.artists)
    click.echo(click.style(f"\nTracks ({len(result.tracks)}):", bold=True))
    _render_tracks(result.tracks)


@cli.command()
@click.option('--language', '-l', type=click.Choice(LANGUAGE_CHOICES), help='Language to follow')
@click.option('--interval', '-i', type=click.IntRange(min=1), help='Refresh interval in seconds')
@click.option('--cycles', '-c', type=click.IntRange(min=1), help='Stop after this many refreshes')
@click.option('--limit', '-n', type=click.IntRange(1, 20), default=10, show_default=True, help='Tracks to show')
@handle_error
def watch(language, interval, cycles, limit):
    """
    Keep the dashboard refreshing on a timer

    Prints the dashboard after every trending refresh until interrupted or
    until --cycles refreshes have completed.
    """
    selected = _resolve_language(language)
    period = interval or get_settings().trending.refresh_interval

    async def _run():
        manager = TrendsManager(language=selected, refresh_interval=period)
        refreshed = asyncio.Event()
        seen = {'last_updated': None}

        def on_change(snapshot: DashboardSnapshot):
            if snapshot.last_updated != seen['last_updated'] and not snapshot.is_loading:
                seen['last_updated'] = snapshot.last_updated
                refreshed.set()

        manager.subscribe(on_change)
        completed = 0
        try:
            task = await manager.start()
            if task is None:
                _render_snapshot(manager.snapshot, limit)
                return
            await task
            while True:
                _render_snapshot(manager.snapshot, limit)
                completed += 1
                if cycles and completed >= cycles:
                    return
                click.echo(f"\nNext refresh in {period}s (Ctrl+C to stop)")
                refreshed.clear()
                await refreshed.wait()
        finally:
            await manager.close()

    run_async(_run())


@cli.command()
@click.option('--subreddit', '-s', help='Subreddit to read (default from config)')
@click.option('--query', '-q', help='Search the subreddit instead of listing hot posts')
@click.option('--limit', '-n', type=click.IntRange(1, 100), help='Number of posts')
@handle_error
def feed(subreddit, query, limit):
    """Show hot or matching posts from a music subreddit"""
    if subreddit:
        valid, error = validate_subreddit(subreddit)
        if not valid:
            raise click.BadParameter(error, param_hint='--subreddit')

    async def _run():
        client = FeedClient(subreddit=subreddit, limit=limit)
        try:
            if query:
                return await client.search(query)
            return await client.hot()
        finally:
            await client.close()

    posts = run_async(_run())
    if not posts:
        click.echo("No posts found")
        return

    for post in posts:
        click.echo(click.style(truncate_string(post.title, 90), bold=True))
        click.echo(
            f"   r/{post.subreddit} - u/{post.author} - {format_number(post.score)} points - "
            f"{post.num_comments} comments - {format_relative_time(post.created_utc)}"
        )
        if post.selftext:
            click.echo(f"   {truncate_string(' '.join(post.selftext.split()), 120)}")


# Configuration management command group
@cli.group()
def config():
    """
    Configuration management

    View and change the trending language, refresh interval and search options.
    """
    pass


@config.command()
@handle_error
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Spotify:")
    click.echo(f"   Client ID: {'set' if settings.spotify.client_id else 'not set'}")
    click.echo(f"   Client secret: {'set' if settings.spotify.client_secret else 'not set'}")

    click.echo("\nTrending:")
    click.echo(f"   Language: {settings.trending.language}")
    click.echo(f"   Refresh interval: {settings.trending.refresh_interval}s")
    click.echo(f"   Language debounce: {settings.trending.language_debounce_ms}ms")
    click.echo(f"   Tracks per keyword: {settings.trending.per_query_take}/{settings.trending.per_query_limit}")
    click.echo(f"   Max tracks: {settings.trending.max_tracks}")
    click.echo(f"   Market bias: {settings.trending.use_market}")
    click.echo(f"   Recent years only: {settings.trending.recent_years_only}")
    click.echo(f"   Strict language: {settings.trending.strict_language}")
    click.echo(f"   Roster: {', '.join(settings.trending.roster)}")

    click.echo("\nSearch:")
    click.echo(f"   Debounce: {settings.search.debounce_ms}ms")
    click.echo(f"   Limit: {settings.search.limit}")

    click.echo("\nFeed:")
    click.echo(f"   Subreddit: r/{settings.feed.subreddit}")
    click.echo(f"   Limit: {settings.feed.limit}")


@config.command(name='set')
@click.option('--language', type=click.Choice(LANGUAGE_CHOICES), help='Set default language')
@click.option('--interval', type=int, help='Set refresh interval in seconds')
@click.option('--search-debounce', type=int, help='Set search debounce in milliseconds (300-500)')
@click.option('--subreddit', help='Set default subreddit for the feed')
@handle_error
def set_config(language, interval, search_debounce, subreddit):
    """
    Update configuration settings

    Changes are written to the user configuration file (credentials are never
    written).
    """
    settings = get_settings()
    changes: List[str] = []

    if language:
        valid, error = validate_language(language)
        if not valid:
            raise click.BadParameter(error, param_hint='--language')
        settings.trending.language = Language.from_name(language).key
        changes.append(f"Language: {settings.trending.language}")

    if interval is not None:
        valid, error = validate_interval(interval)
        if not valid:
            raise click.BadParameter(error, param_hint='--interval')
        settings.trending.refresh_interval = interval
        changes.append(f"Refresh interval: {interval}s")

    if search_debounce is not None:
        valid, error = validate_debounce(search_debounce)
        if not valid:
            raise click.BadParameter(error, param_hint='--search-debounce')
        settings.search.debounce_ms = search_debounce
        changes.append(f"Search debounce: {search_debounce}ms")

    if subreddit:
        valid, error = validate_subreddit(subreddit)
        if not valid:
            raise click.BadParameter(error, param_hint='--subreddit')
        settings.feed.subreddit = subreddit
        changes.append(f"Subreddit: r/{subreddit}")

    if changes:
        path = settings.save_config()
        click.echo(f"Configuration updated ({path}):")
        for change in changes:
            click.echo(f"   • {change}")
    else:
        click.echo("No changes specified")


# System diagnostic commands
@cli.command()
@handle_error
def doctor():
    """
    Run system diagnostics

    Validates the configuration and checks that a Spotify access token can be
    obtained with the configured client credentials.
    """
    click.echo("Running diagnostics...\n")

    issues = get_settings().validate()
    if issues:
        click.echo("Configuration: problems found")
    else:
        click.echo("Configuration: OK")

    async def _check_token():
        broker = get_broker()
        try:
            await broker.acquire()
            return None
        except AuthError as e:
            return e.message
        finally:
            await broker.close()

    token_error = run_async(_check_token())
    if token_error:
        click.echo(f"Spotify token: {token_error}")
        issues.append("Check SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET")
    else:
        click.echo("Spotify token: OK")

    current_log = get_current_log_file()
    if current_log:
        click.echo(f"Logging: {current_log}")
    else:
        click.echo("Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


# Entry point for module execution
if __name__ == '__main__':
    cli()
