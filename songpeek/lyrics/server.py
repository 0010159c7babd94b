"""
Lyrics companion HTTP service

Exposes the resolver over HTTP so a thin client (mobile app, browser) can
look up lyrics without holding upstream credentials:

    GET /lyrics?song=<title>&artist=<artist>

Responses:
    400 {"error": "..."}                       song missing or blank
    200 {"url": "..."} / {"url": null}         link mode, found / not found
    200 {"lyrics": "..."} / {"lyrics": null}   text mode, found / not found
    200 {"error": "...", "retryable": bool}    any lookup failure, timeouts retryable

CORS is open to any origin.
"""

from typing import Any, Dict, Optional

from aiohttp import web

from ..config.settings import get_settings, Settings
from ..core.exceptions import SongpeekError, ValidationError
from ..utils.logger import get_logger
from .genius import GeniusLyricsIndex
from .models import DeliveryMode, Failed, Found, LyricsLink, LyricsResult, NotFound
from .resolver import LyricsResolver

logger = get_logger(__name__)

RESOLVER_KEY = web.AppKey('resolver', LyricsResolver)


def result_to_payload(result: LyricsResult, mode: DeliveryMode) -> Dict[str, Any]:
    """
    Convert a lookup result into the JSON body returned by GET /lyrics

    Args:
        result: Resolver outcome
        mode: Delivery mode of the resolver, decides the NotFound shape

    Returns:
        JSON-serializable response body
    """
    if isinstance(result, Found):
        if isinstance(result.payload, LyricsLink):
            return {'url': result.payload.url}
        return {'lyrics': result.payload.text}

    if isinstance(result, Failed):
        return {'error': result.message or result.reason.value, 'retryable': result.retryable}

    field_name = 'url' if mode is DeliveryMode.LINK else 'lyrics'
    return {field_name: None}


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    if request.method == 'OPTIONS':
        response = web.Response(status=204)
    else:
        response = await handler(request)
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
    response.headers['Access-Control-Allow-Headers'] = '*'
    return response


async def lyrics_handler(request: web.Request) -> web.Response:
    song = request.query.get('song', '')
    artist = request.query.get('artist', '')
    logger.info(f"[REQUEST] {artist} - {song}")

    if not song.strip():
        return web.json_response({'error': "Song title is required"}, status=400)

    resolver = request.app[RESOLVER_KEY]
    try:
        result = await resolver.resolve(song, artist)
    except ValidationError as e:
        return web.json_response({'error': e.message}, status=400)
    except SongpeekError as e:
        logger.error(f"--> Failed: {e}")
        return web.json_response({'error': e.message, 'retryable': False})
    except Exception as e:
        logger.exception(f"--> Unexpected error: {e}")
        return web.json_response({'error': str(e) or type(e).__name__, 'retryable': False})

    if isinstance(result, Found):
        logger.info(f"--> Found: {getattr(result.payload, 'url', None) or result.payload.source_url}")
    elif isinstance(result, NotFound):
        logger.info("--> Not found")
    else:
        logger.warning(f"--> Failed ({result.reason.value}): {result.message}")

    return web.json_response(result_to_payload(result, resolver.mode))


def _genius_resolver_ctx(settings: Settings):
    async def ctx(app: web.Application):
        index = GeniusLyricsIndex.from_settings(settings)
        app[RESOLVER_KEY] = LyricsResolver.from_settings(index, settings)
        yield
        await index.close()
    return ctx


def create_app(resolver: Optional[LyricsResolver] = None, settings: Optional[Settings] = None) -> web.Application:
    """
    Build the companion service application

    Args:
        resolver: Resolver to serve; when None a Genius-backed resolver is
                  built from settings at startup and closed at shutdown
        settings: Settings used to build the default resolver

    Returns:
        aiohttp application
    """
    app = web.Application(middlewares=[cors_middleware])
    app.router.add_get('/lyrics', lyrics_handler)

    if resolver is not None:
        app[RESOLVER_KEY] = resolver
    else:
        app.cleanup_ctx.append(_genius_resolver_ctx(settings or get_settings()))

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, settings: Optional[Settings] = None) -> None:
    """Serve the companion service until interrupted"""
    settings = settings or get_settings()
    host = host or settings.server.host
    port = int(port or settings.server.port)

    logger.console_info("-" * 50)
    logger.console_info(f"Lyrics server running at http://localhost:{port} ({settings.lyrics.delivery_mode} mode)")
    logger.console_info("-" * 50)

    web.run_app(create_app(settings=settings), host=host, port=port, print=None)
