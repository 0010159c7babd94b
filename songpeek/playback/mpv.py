"""
mpv-backed audio resources

Each preview is played by a dedicated mpv child process started in
audio-only mode. Loading spawns the process and waits a short grace period
so that unreachable streams (mpv exits immediately with an error) surface as
PlaybackFailed during acquisition rather than as a silent completion.
Playback ends either when mpv exits on its own, which fires the completion
callback, or when the resource is released, which terminates the process.

mpv resolves YouTube watch URLs through its yt-dlp hook, so the same backend
serves both catalog variants.
"""

import asyncio
import shutil
from typing import List, Optional

from ..config.settings import get_settings, Settings
from ..core.exceptions import PlaybackFailed
from ..utils.logger import get_logger
from .session import AudioResource, CompletionCallback, ResourceAcquirer

logger = get_logger(__name__)


MPV_BASE_ARGS = [
    "--no-video",
    "--audio-display=no",
    "--terminal=no",
    "--msg-level=all=warn",
    "--keep-open=no",
]


class MpvAudioResource(AudioResource):
    """
    One mpv process playing one URL

    Attributes:
        url: Stream URL handed to mpv
        returncode: Exit status once the process has ended, else None
    """

    def __init__(
        self,
        url: str,
        on_complete: CompletionCallback,
        mpv_path: str = "mpv",
        extra_args: Optional[List[str]] = None,
        startup_grace: float = 0.5,
        terminate_timeout: float = 2.0
    ):
        self.url = url
        self._on_complete = on_complete
        self._mpv_path = mpv_path
        self._extra_args = list(extra_args or [])
        self._startup_grace = startup_grace
        self._terminate_timeout = terminate_timeout
        self._process: Optional[asyncio.subprocess.Process] = None
        self._watcher: Optional[asyncio.Task] = None
        self._released = False

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process else None

    def _command(self) -> List[str]:
        return [self._mpv_path, *MPV_BASE_ARGS, *self._extra_args, self.url]

    async def load(self) -> None:
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._command(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            raise PlaybackFailed(
                f"Could not start mpv ({self._mpv_path}): {e}",
                details={'url': self.url, 'mpv_path': self._mpv_path}
            ) from e

        try:
            returncode = await asyncio.wait_for(self._process.wait(), timeout=self._startup_grace)
        except asyncio.TimeoutError:
            # Still running after the grace period: the stream opened
            return

        if returncode != 0:
            raise PlaybackFailed(
                f"mpv could not open the stream (exit code {returncode})",
                details={'url': self.url, 'returncode': returncode}
            )

    async def play(self) -> None:
        if self._process is None:
            raise PlaybackFailed("Audio resource was not loaded", details={'url': self.url})
        self._watcher = asyncio.ensure_future(self._watch())

    async def _watch(self) -> None:
        returncode = await self._process.wait()
        if self._released:
            return
        if returncode != 0:
            logger.warning(f"mpv exited with code {returncode} while playing {self.url}")
        self._on_complete(self)

    async def release(self) -> None:
        if self._released:
            return
        self._released = True

        if self._watcher is not None and not self._watcher.done() \
                and self._watcher is not asyncio.current_task():
            self._watcher.cancel()

        process = self._process
        if process is None or process.returncode is not None:
            return

        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            await asyncio.wait_for(process.wait(), timeout=self._terminate_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"mpv did not exit after terminate, killing pid {process.pid}")
            process.kill()
            await process.wait()


class MpvResourceAcquirer(ResourceAcquirer):
    """Creates MpvAudioResource instances with shared mpv settings"""

    def __init__(self, mpv_path: str = "mpv", extra_args: Optional[List[str]] = None, startup_grace: float = 0.5):
        self.mpv_path = shutil.which(mpv_path) or mpv_path
        self.extra_args = list(extra_args or [])
        self.startup_grace = startup_grace

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'MpvResourceAcquirer':
        settings = settings or get_settings()
        return cls(mpv_path=settings.playback.mpv_path, extra_args=settings.playback.extra_args)

    def create(self, url: str, on_complete: CompletionCallback) -> MpvAudioResource:
        return MpvAudioResource(
            url,
            on_complete,
            mpv_path=self.mpv_path,
            extra_args=self.extra_args,
            startup_grace=self.startup_grace
        )
