"""
Playback session management

PlaybackSessionManager owns at most one audio resource at a time and moves
it through load, play, stop and dispose. The resource itself is produced by
a ResourceAcquirer (the mpv backend in production, fakes in tests), and the
manager is the only component that ever holds a reference to it.

State machine:

    IDLE --toggle--> LOADING --acquired--> PLAYING
    PLAYING --toggle same track / stop / natural completion--> IDLE
    PLAYING(A) --toggle B--> LOADING(B)   (A released first)

While a resource is being released the session reads STOPPED with no handle;
it becomes IDLE as soon as the release has finished.

Every public operation runs under one asyncio.Lock, so rapid repeated toggles
are queued and executed one after another. A new resource is only created
after the previous one has been released, which keeps the number of live
resources at one or zero even though callers never block.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Set

from ..catalog.models import Track
from ..core.exceptions import NoPreviewAvailable, PlaybackFailed
from ..utils.logger import get_logger

logger = get_logger(__name__)


class PlaybackState(Enum):
    """Lifecycle state of the playback session"""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    STOPPED = "stopped"


# States in which the session must hold a resource handle
HOLDING_STATES = (PlaybackState.LOADING, PlaybackState.PLAYING)


class AudioResource:
    """
    One exclusively owned, playable audio stream

    Implementations must make release() idempotent and must call the
    completion callback they were created with when playback ends on its own.
    """

    async def load(self) -> None:
        """Acquire the underlying stream; raise PlaybackFailed if it cannot be opened"""
        raise NotImplementedError

    async def play(self) -> None:
        """Start audible playback of a loaded stream"""
        raise NotImplementedError

    async def release(self) -> None:
        """Stop playback and free every system resource"""
        raise NotImplementedError


CompletionCallback = Callable[[AudioResource], None]


class ResourceAcquirer:
    """Factory for audio resources"""

    def create(self, url: str, on_complete: CompletionCallback) -> AudioResource:
        raise NotImplementedError


@dataclass(frozen=True)
class PlaybackSession:
    """
    Snapshot of what is currently playing

    Attributes:
        track_id: Track owning the session, None when idle
        resource_handle: The live audio resource, non-null iff state is
                         LOADING or PLAYING
        state: Current lifecycle state
    """
    track_id: Optional[str] = None
    resource_handle: Optional[AudioResource] = None
    state: PlaybackState = PlaybackState.IDLE

    def __post_init__(self):
        holds = self.resource_handle is not None
        if holds != (self.state in HOLDING_STATES):
            raise ValueError(
                f"Playback session in state {self.state.value} "
                f"{'must not' if holds else 'must'} hold a resource"
            )


class PlaybackSessionManager:
    """
    Mediates exclusive ownership of one audio resource

    Usage:
        async with PlaybackSessionManager(MpvResourceAcquirer()) as player:
            await player.toggle(track)       # starts playing
            await player.toggle(track)       # stops again
    """

    def __init__(self, acquirer: ResourceAcquirer):
        self._acquirer = acquirer
        self._session = PlaybackSession()
        self._lock = asyncio.Lock()
        self._idle = asyncio.Event()
        self._idle.set()
        self._completion_tasks: Set[asyncio.Task] = set()
        self._disposed = False

    @property
    def session(self) -> PlaybackSession:
        return self._session

    @property
    def state(self) -> PlaybackState:
        return self._session.state

    @property
    def current_track_id(self) -> Optional[str]:
        return self._session.track_id

    def is_playing(self, track_id: str) -> bool:
        return self._session.track_id == track_id and self._session.state is PlaybackState.PLAYING

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.dispose()

    async def toggle(self, track: Track) -> PlaybackState:
        """
        Play the track, or stop it if it is the one currently playing

        Args:
            track: Track to toggle

        Returns:
            Session state after the call (PLAYING or IDLE)

        Raises:
            NoPreviewAvailable: If a new track has no preview URL (session stays IDLE)
            PlaybackFailed: If the resource cannot be acquired (session stays IDLE)
        """
        async with self._lock:
            if self._disposed:
                raise PlaybackFailed("Playback manager has been disposed")

            if self.is_playing(track.id):
                logger.info(f"Stopping preview: {track.display_name}")
                await self._release_current()
                return self._session.state

            await self._release_current()

            if not track.preview_url:
                logger.info(f"No preview for {track.display_name}")
                raise NoPreviewAvailable(track.id)

            await self._start(track)
            return self._session.state

    async def stop(self) -> bool:
        """
        Stop whatever is playing

        Returns:
            True if a resource was released
        """
        async with self._lock:
            had_resource = self._session.resource_handle is not None
            await self._release_current()
            return had_resource

    async def on_natural_completion(self, resource: AudioResource) -> bool:
        """
        Handle the end of playback reported by a resource

        Completions from resources the session no longer owns are ignored.

        Returns:
            True if the session was returned to IDLE
        """
        async with self._lock:
            if resource is None or resource is not self._session.resource_handle:
                logger.debug("Ignoring completion from a released resource")
                return False
            logger.info(f"Preview finished: {self._session.track_id}")
            await self._release_current()
            return True

    async def dispose(self) -> None:
        """Release any held resource and refuse further playback"""
        async with self._lock:
            self._disposed = True
            await self._release_current()

        current = asyncio.current_task()
        for task in list(self._completion_tasks):
            if task is not current:
                task.cancel()

    async def wait_until_idle(self) -> None:
        """Block until the session has no resource"""
        await self._idle.wait()

    async def _start(self, track: Track) -> None:
        try:
            resource = self._acquirer.create(track.preview_url, self._on_resource_complete)
        except PlaybackFailed:
            raise
        except Exception as e:
            raise PlaybackFailed(
                f"Could not create audio resource for {track.display_name}: {e}",
                details={'track_id': track.id, 'url': track.preview_url}
            ) from e

        self._idle.clear()
        self._session = PlaybackSession(track.id, resource, PlaybackState.LOADING)
        logger.debug(f"Loading preview for {track.id}: {track.preview_url}")

        try:
            await resource.load()
            await resource.play()
        except asyncio.CancelledError:
            await self._release_current()
            raise
        except PlaybackFailed:
            await self._release_current()
            raise
        except Exception as e:
            await self._release_current()
            raise PlaybackFailed(
                f"Playback failed for {track.display_name}: {e}",
                details={'track_id': track.id, 'url': track.preview_url}
            ) from e

        self._session = PlaybackSession(track.id, resource, PlaybackState.PLAYING)
        logger.info(f"Playing preview: {track.display_name}")

    async def _release_current(self) -> None:
        session = self._session
        resource = session.resource_handle

        if resource is not None:
            self._session = PlaybackSession(track_id=session.track_id, state=PlaybackState.STOPPED)
            try:
                await resource.release()
            except Exception as e:
                logger.warning(f"Failed to release audio resource for {session.track_id}: {e}")
            finally:
                self._session = PlaybackSession()
                self._idle.set()
            return

        self._session = PlaybackSession()
        self._idle.set()

    def _on_resource_complete(self, resource: AudioResource) -> None:
        task = asyncio.ensure_future(self.on_natural_completion(resource))
        self._completion_tasks.add(task)
        task.add_done_callback(self._completion_tasks.discard)
