"""
Exception classes for songpeek.

Each exception carries a human-readable message plus an optional details
dictionary, so callers can log the context of a failure without parsing
the message.

Exception Hierarchy:
    SongpeekError (base)
        ConfigError - Configuration file or environment issues
        ValidationError - Input rejected before any network call
            NoPreviewAvailable - Track has no preview URL to play
        UpstreamError - Catalog, token or lyrics service failed or answered garbage
        PlaybackFailed - Audio resource could not be acquired or played

There is no not-found exception: an empty search or an unknown song is
returned as a value (an empty list, the NotFound lyrics result). Lyrics
timeouts are returned as Failed(TIMEOUT) for the same reason.
"""

from typing import Any, Dict, Optional


class SongpeekError(Exception):
    """
    Base exception for all songpeek errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (track id, url, ...).

    Example:
        try:
            await catalog.search(query)
        except SongpeekError as e:
            logger.error(f"Search failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(SongpeekError):
    """
    Raised when the configuration cannot be used.

    Common causes:
        - YAML syntax errors in config.yaml
        - Missing credentials for the selected catalog backend
        - Unknown lyrics delivery mode
    """
    pass


class ValidationError(SongpeekError):
    """
    Raised when user input is rejected before any network call.

    Example:
        raise ValidationError("Search query must not be empty", details={'query': query})
    """
    pass


class NoPreviewAvailable(ValidationError):
    """
    Raised by the playback manager when a track carries no preview URL.

    The session stays idle; nothing was acquired.
    """

    def __init__(self, track_id: str) -> None:
        super().__init__(
            f"No preview available for track {track_id}",
            details={'track_id': track_id}
        )
        self.track_id = track_id


class UpstreamError(SongpeekError):
    """
    Raised when an external service fails or returns an unexpected payload.

    Covers transport errors, non-2xx statuses and responses that do not match
    the expected schema (catalog search, token exchange, lyrics index).

    Attributes:
        service: Short name of the failing service ("spotify", "youtube", "genius", ...).
        status_code: HTTP status if the failure was an HTTP response, else None.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        service: Optional[str] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message, details)
        self.service = service
        self.status_code = status_code


class PlaybackFailed(SongpeekError):
    """
    Raised when an audio resource cannot be acquired or started.

    The playback session is left idle with no resource held. Acquisition is
    never retried automatically.
    """
    pass
