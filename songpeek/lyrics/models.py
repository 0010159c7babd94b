"""
Lyrics query, candidate and result types

A lyrics lookup ends in exactly one of three outcomes:

    Found(payload)   payload is LyricsLink (link mode) or LyricsText (text mode)
    NotFound()       both searches succeeded but returned nothing
    Failed(reason)   TIMEOUT (retryable) or UPSTREAM_ERROR

A caller may retry a timeout, never an empty result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..utils.helpers import sanitize_title


class DeliveryMode(Enum):
    """What a successful lookup hands back to the user"""
    LINK = "link"
    TEXT = "text"


class FailureReason(Enum):
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class LyricsQuery:
    """A title/artist pair as shown by the catalog"""
    raw_title: str
    artist: str

    @property
    def title(self) -> str:
        return sanitize_title(self.raw_title)


@dataclass(frozen=True)
class LyricsCandidate:
    """
    One hit from the lyrics index

    Attributes:
        id: Index-specific song identifier
        title: Song title on the index
        artist: Primary artist on the index
        url: Page URL; also the source identifier checked by the
             romanization heuristic
    """
    id: str
    title: str
    artist: str
    url: str

    def is_romanized(self, marker: str = "romanized") -> bool:
        return bool(marker) and marker.lower() in self.url.lower()


@dataclass(frozen=True)
class LyricsLink:
    url: str


@dataclass(frozen=True)
class LyricsText:
    text: str
    source_url: Optional[str] = None


@dataclass(frozen=True)
class Found:
    payload: Union[LyricsLink, LyricsText]


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    message: str = ""

    @property
    def retryable(self) -> bool:
        return self.reason is FailureReason.TIMEOUT


LyricsResult = Union[Found, NotFound, Failed]
