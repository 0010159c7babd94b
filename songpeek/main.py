"""
Main CLI interface for songpeek

This module provides the command-line interface and is the orchestrating
layer that wires the catalog, playback, lyrics and favorites components
together.

The CLI is built using Click and provides:
- Catalog search (search)
- Preview playback through mpv (play)
- Lyrics lookup, locally or through the companion service (lyrics)
- Favorites management (favorites list, add, remove)
- The lyrics companion HTTP service (serve)
- Configuration and diagnostics (config show, doctor)
"""

import asyncio
import functools
import shutil
import sys
from typing import List

import click

from . import __version__
from .catalog import Track, create_catalog_client
from .config.settings import get_settings, reload_settings
from .core.exceptions import NoPreviewAvailable, SongpeekError
from .favorites import FavoritesStore, JsonFileBlobStore
from .lyrics import (
    Failed,
    Found,
    GeniusLyricsIndex,
    LyricsLink,
    LyricsResolver,
    LyricsResult,
    LyricsServiceClient
)
from .playback import MpvResourceAcquirer, PlaybackSessionManager, PlaybackState
from .utils.helpers import truncate_string
from .utils.logger import configure_from_settings, get_logger, get_current_log_file


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                           songpeek                            ║
║                                                               ║
║      Search tracks, play previews, look up lyrics             ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='green', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Wraps CLI command functions to provide consistent error handling across
    all commands: cancellation exits with 130, any other failure is logged,
    shown in red and exits with 1.

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
        except click.ClickException:
            raise
        except SongpeekError as e:
            logger.error(f"Command failed: {e.message} {e.details or ''}")
            click.echo(click.style(f"Error: {e.message}", fg='red'), err=True)
            sys.exit(1)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


async def _search_tracks(query: str, backend: str = None, limit: int = None) -> List[Track]:
    async with create_catalog_client(backend=backend) as client:
        return await client.search(query, limit=limit)


def _favorites_store() -> FavoritesStore:
    settings = get_settings()
    return FavoritesStore(JsonFileBlobStore(settings.get_favorites_path()), settings.favorites.key)


def _pick_track(tracks: List[Track], index: int) -> Track:
    """Return the 1-based index-th search result"""
    if not tracks:
        raise click.ClickException("No tracks found")
    if not 1 <= index <= len(tracks):
        raise click.BadParameter(f"must be between 1 and {len(tracks)}", param_hint='--index')
    return tracks[index - 1]


def _echo_tracks(tracks: List[Track], favorites: FavoritesStore = None) -> None:
    for i, track in enumerate(tracks, 1):
        marker = click.style("♪", fg='green') if track.has_preview else click.style("-", fg='bright_black')
        star = click.style(" ★", fg='yellow') if favorites and favorites.contains(track.id) else ""
        click.echo(f"{i:3d}. {marker} {truncate_string(track.display_name, 70)}{star}")
        click.echo(click.style(f"       {track.id}  {track.external_url}", fg='bright_black'))


def _echo_lyrics_result(result: LyricsResult) -> None:
    """Print a lookup result; Failed results exit with status 1"""
    if isinstance(result, Found):
        if isinstance(result.payload, LyricsLink):
            click.echo(f"Lyrics: {result.payload.url}")
        else:
            if result.payload.source_url:
                click.echo(click.style(f"Source: {result.payload.source_url}\n", fg='bright_black'))
            click.echo(result.payload.text)
    elif isinstance(result, Failed):
        hint = " (try again)" if result.retryable else ""
        click.echo(click.style(f"Lyrics lookup failed: {result.message}{hint}", fg='red'), err=True)
        sys.exit(1)
    else:
        click.echo(click.style(get_settings().lyrics.not_found_text, fg='yellow'))


# Main CLI group - root command that all subcommands attach to
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    songpeek - Search music, preview tracks and find lyrics

    When invoked without a subcommand, shows the banner and usage.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"songpeek v{__version__}")
        return

    if config:
        reload_settings(config)
        configure_from_settings()
        click.echo(f"Loaded config: {config}")

    if verbose:
        ctx.obj['verbose'] = True
        get_settings().logging.level = 'DEBUG'
        configure_from_settings()
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@click.argument('query')
@click.option('--backend', type=click.Choice(['spotify', 'youtube']), help='Catalog backend')
@click.option('--limit', '-l', type=click.IntRange(1, 50), help='Maximum number of results')
@handle_error
def search(query, backend, limit):
    """
    Search the music catalog

    Lists matching tracks; a note marks tracks with a playable preview and a
    star marks favorites.
    """
    async def run():
        favorites = _favorites_store()
        await favorites.load()
        tracks = await _search_tracks(query, backend, limit)
        return tracks, favorites

    tracks, favorites = asyncio.run(run())

    if not tracks:
        click.echo("No tracks found")
        return

    logger.console_info(f"{len(tracks)} results for: {query}")
    _echo_tracks(tracks, favorites)


@cli.command()
@click.argument('query')
@click.option('--index', '-i', type=int, default=1, show_default=True, help='Result to play (1-based)')
@click.option('--backend', type=click.Choice(['spotify', 'youtube']), help='Catalog backend')
@handle_error
def play(query, index, backend):
    """
    Play the preview of a search result

    Plays until the preview ends; Ctrl+C stops playback.
    """
    settings = get_settings()

    async def run():
        tracks = await _search_tracks(query, backend)
        track = _pick_track(tracks, index)

        async with PlaybackSessionManager(MpvResourceAcquirer.from_settings(settings)) as manager:
            try:
                state = await manager.toggle(track)
            except NoPreviewAvailable:
                click.echo(click.style(f"No preview available for {track.display_name}", fg='yellow'))
                return

            if state is PlaybackState.PLAYING:
                logger.console_info(f"Playing preview: {track.display_name}")
                await manager.wait_until_idle()
                logger.console_info("Preview finished")

    asyncio.run(run())


@cli.command()
@click.argument('title')
@click.argument('artist', required=False, default="")
@click.option('--mode', type=click.Choice(['link', 'text']), help='Return a page link or the lyrics text')
@click.option('--via-service', is_flag=True, help='Ask the lyrics companion service instead of Genius directly')
@handle_error
def lyrics(title, artist, mode, via_service):
    """
    Look up lyrics for TITLE by ARTIST

    Annotations such as "(Live)" or "- Remastered" are stripped from the
    title before searching.
    """
    settings = get_settings()
    if mode:
        settings.lyrics.delivery_mode = mode

    async def run() -> LyricsResult:
        if via_service:
            async with LyricsServiceClient.from_settings(settings) as client:
                return await client.fetch(title, artist)

        async with GeniusLyricsIndex.from_settings(settings) as index:
            resolver = LyricsResolver.from_settings(index, settings)
            return await resolver.resolve(title, artist)

    _echo_lyrics_result(asyncio.run(run()))


# Favorites commands group
@cli.group()
def favorites():
    """
    Favorite tracks

    Favorites are kept in a local JSON file and de-duplicated by track id.
    """
    pass


@favorites.command('list')
@handle_error
def favorites_list():
    """List favorite tracks"""
    store = _favorites_store()
    tracks = asyncio.run(store.load())

    if not tracks:
        click.echo("No favorites yet")
        return

    logger.console_info(f"{len(tracks)} favorites")
    _echo_tracks(tracks)


@favorites.command('add')
@click.argument('query')
@click.option('--index', '-i', type=int, default=1, show_default=True, help='Result to add (1-based)')
@click.option('--backend', type=click.Choice(['spotify', 'youtube']), help='Catalog backend')
@handle_error
def favorites_add(query, index, backend):
    """Search the catalog and add a result to favorites"""
    store = _favorites_store()

    async def run():
        await store.load()
        track = _pick_track(await _search_tracks(query, backend), index)
        return track, await store.add(track)

    track, added = asyncio.run(run())
    if added:
        click.echo(click.style(f"Added to favorites: {track.display_name}", fg='green'))
    else:
        click.echo(f"Already a favorite: {track.display_name}")


@favorites.command('remove')
@click.argument('track_id')
@handle_error
def favorites_remove(track_id):
    """Remove a track from favorites by id"""
    store = _favorites_store()

    async def run():
        await store.load()
        return await store.remove(track_id)

    if asyncio.run(run()):
        click.echo(click.style(f"Removed from favorites: {track_id}", fg='green'))
    else:
        click.echo(click.style(f"Not a favorite: {track_id}", fg='yellow'))


@cli.command()
@click.option('--host', help='Bind address')
@click.option('--port', '-p', type=click.IntRange(1, 65535), help='Port')
@click.option('--mode', type=click.Choice(['link', 'text']), help='Lyrics delivery mode')
@handle_error
def serve(host, port, mode):
    """Run the lyrics companion HTTP service (GET /lyrics)"""
    from .lyrics.server import run_server

    settings = get_settings()
    if mode:
        settings.lyrics.delivery_mode = mode

    errors = [e for e in settings.validate() if 'lyrics' in e.lower() or 'genius' in e.lower()]
    if errors:
        for error in errors:
            click.echo(click.style(f"Config error: {error}", fg='red'), err=True)
        sys.exit(1)

    run_server(host=host, port=port, settings=settings)


# Configuration commands group
@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Catalog:")
    click.echo(f"   Backend: {settings.catalog.backend}")
    click.echo(f"   Spotify credentials: {'set' if settings.catalog.spotify_client_id else 'missing'}")
    click.echo(f"   YouTube API key: {'set' if settings.catalog.youtube_api_key else 'missing'}")
    click.echo(f"   Search limit: {settings.catalog.search_limit}")

    click.echo("\nLyrics:")
    click.echo(f"   Delivery mode: {settings.lyrics.delivery_mode}")
    click.echo(f"   Timeout: {settings.lyrics.timeout}s")
    click.echo(f"   Candidates scanned: {settings.lyrics.max_candidates}")
    click.echo(f"   Genius API key: {'set' if settings.lyrics.genius_api_key else 'missing'}")
    click.echo(f"   Service URL: {settings.lyrics.service_url}")

    click.echo("\nServer:")
    click.echo(f"   Address: {settings.server.host}:{settings.server.port}")

    click.echo("\nPlayback:")
    click.echo(f"   mpv: {settings.playback.mpv_path}")

    click.echo("\nFavorites:")
    click.echo(f"   File: {settings.get_favorites_path()}")


@config.command('set')
@click.option('--backend', type=click.Choice(['spotify', 'youtube']), help='Set catalog backend')
@click.option('--mode', type=click.Choice(['link', 'text']), help='Set lyrics delivery mode')
@click.option('--timeout', type=click.FloatRange(min=0.1), help='Set lyrics lookup deadline in seconds')
@click.option('--port', type=click.IntRange(1, 65535), help='Set companion service port')
@handle_error
def set_config(backend, mode, timeout, port):
    """
    Update configuration settings

    Changes are written to the user config file; credentials are never saved
    and keep coming from the environment.
    """
    settings = get_settings()
    changes = []

    if backend:
        settings.catalog.backend = backend
        changes.append(f"Catalog backend: {backend}")

    if mode:
        settings.lyrics.delivery_mode = mode
        if mode == 'text' and not settings.lyrics.genius_api_key:
            click.echo(click.style("Text mode needs GENIUS_API_KEY in the environment.", fg='yellow'))
        changes.append(f"Lyrics mode: {mode}")

    if timeout is not None:
        settings.lyrics.timeout = timeout
        changes.append(f"Lyrics timeout: {timeout:g}s")

    if port is not None:
        settings.server.port = port
        changes.append(f"Service port: {port}")

    if changes:
        settings.save_config()
        click.echo("Configuration updated:")
        for change in changes:
            click.echo(f"   • {change}")
    else:
        click.echo("No changes specified")


@cli.command()
def doctor():
    """Check configuration and external tools"""
    settings = get_settings()
    issues = settings.validate()

    mpv = shutil.which(settings.playback.mpv_path)
    if mpv:
        click.echo(f"mpv: {mpv}")
    else:
        click.echo("mpv: Not found")
        issues.append(f"'{settings.playback.mpv_path}' is required for preview playback")

    current_log = get_current_log_file()
    click.echo(f"Logging: {current_log if current_log else 'Console only'}")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


# Entry point for module execution
if __name__ == '__main__':
    cli()
