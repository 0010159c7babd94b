"""
Lyrics resolution pipeline

Maps a (title, artist) pair to a lyrics link or lyrics text while coping
with the titles catalogs actually produce ("Song (Live Version)",
"Song - 2011 Remaster") and with romanized transcriptions that lyrics
indexes tend to rank first for non-Latin songs.

Resolution steps:
1. Sanitize the title (cut at the first '(', '[' or '-', trim)
2. Search "{artist} {title}"
3. If that returns nothing, search "{title}" alone, which recovers matches
   lost to artist-name variants (feat., romanization, localization)
4. Nothing from either search: NotFound
5. Scan the first five candidates in upstream order and take the first one
   whose page URL does not carry the romanization marker; if all do, take
   the first candidate
6. Link mode returns the page URL; text mode returns the page lyrics, or the
   configured not-found text when the page has no plain lyrics

The whole resolution shares one deadline. When it expires the in-flight
upstream call is cancelled and the result is Failed(TIMEOUT), which is
distinct from NotFound.
"""

import asyncio
from typing import List, Optional, Sequence

from ..config.settings import get_settings, Settings
from ..core.exceptions import ConfigError, UpstreamError, ValidationError
from ..utils.logger import get_logger
from .models import (
    DeliveryMode,
    FailureReason,
    Failed,
    Found,
    LyricsCandidate,
    LyricsLink,
    LyricsQuery,
    LyricsResult,
    LyricsText,
    NotFound
)
from .index import LyricsIndex

logger = get_logger(__name__)


DEFAULT_MAX_CANDIDATES = 5
DEFAULT_ROMANIZED_MARKER = "romanized"


def select_candidate(
    candidates: Sequence[LyricsCandidate],
    max_candidates: int = DEFAULT_MAX_CANDIDATES,
    romanized_marker: str = DEFAULT_ROMANIZED_MARKER
) -> Optional[LyricsCandidate]:
    """
    Pick the first non-romanized candidate among the leading ones

    Args:
        candidates: Candidates in upstream order
        max_candidates: How many leading candidates to inspect
        romanized_marker: Substring of the URL that flags a romanization

    Returns:
        The chosen candidate, the first candidate if every inspected one is
        flagged, or None for an empty list
    """
    if not candidates:
        return None

    for candidate in candidates[:max_candidates]:
        if not candidate.is_romanized(romanized_marker):
            return candidate

    return candidates[0]


class LyricsResolver:
    """
    Resolves lyrics for catalog tracks against a LyricsIndex

    Attributes:
        index: Upstream lyrics index
        mode: Link or text delivery
        timeout: Deadline in seconds for one whole resolution
    """

    def __init__(
        self,
        index: LyricsIndex,
        mode: DeliveryMode = DeliveryMode.LINK,
        timeout: float = 5.0,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
        romanized_marker: str = DEFAULT_ROMANIZED_MARKER,
        not_found_text: str = "Lyrics not found"
    ):
        self.index = index
        self.mode = mode
        self.timeout = timeout
        self.max_candidates = max_candidates
        self.romanized_marker = romanized_marker
        self.not_found_text = not_found_text

    @classmethod
    def from_settings(cls, index: LyricsIndex, settings: Optional[Settings] = None) -> 'LyricsResolver':
        """
        Build a resolver from the lyrics settings section

        Raises:
            ConfigError: If the configured delivery mode is unknown
        """
        settings = settings or get_settings()
        lyrics = settings.lyrics
        try:
            mode = DeliveryMode(lyrics.delivery_mode)
        except ValueError:
            raise ConfigError(
                f"Invalid lyrics delivery mode: {lyrics.delivery_mode}",
                details={'setting': 'lyrics.delivery_mode'}
            )
        return cls(
            index,
            mode=mode,
            timeout=float(lyrics.timeout),
            max_candidates=int(lyrics.max_candidates),
            romanized_marker=lyrics.romanized_marker,
            not_found_text=lyrics.not_found_text
        )

    async def resolve(self, title: str, artist: str = "") -> LyricsResult:
        """
        Resolve lyrics for a title/artist pair

        Args:
            title: Raw title as shown by the catalog
            artist: Artist name, may be empty

        Returns:
            Found, NotFound or Failed; upstream, configuration and timeout
            failures are returned, never raised

        Raises:
            ValidationError: If the title is empty after sanitizing
        """
        query = LyricsQuery(raw_title=title or "", artist=(artist or "").strip())
        if not query.title:
            raise ValidationError("Song title is required", details={'title': title})

        try:
            result = await asyncio.wait_for(self._resolve(query), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Lyrics lookup timed out after {self.timeout:g}s: {query.artist} - {query.title}")
            return Failed(FailureReason.TIMEOUT, f"Timed out after {self.timeout:g}s")
        except UpstreamError as e:
            logger.error(f"Lyrics lookup failed for {query.artist} - {query.title}: {e}")
            return Failed(FailureReason.UPSTREAM_ERROR, e.message)
        except ConfigError as e:
            logger.error(f"Lyrics index is not configured for {self.mode.value} mode: {e}")
            return Failed(FailureReason.UPSTREAM_ERROR, e.message)

        return result

    def search_queries(self, query: LyricsQuery) -> List[str]:
        """Queries tried in order: artist-qualified first, then title only"""
        qualified = f"{query.artist} {query.title}".strip()
        if qualified == query.title:
            return [query.title]
        return [qualified, query.title]

    async def _resolve(self, query: LyricsQuery) -> LyricsResult:
        candidates: List[LyricsCandidate] = []
        for search_query in self.search_queries(query):
            logger.debug(f"Searching lyrics index for: {search_query}")
            candidates = await self.index.search(search_query)
            if candidates:
                break
            logger.debug(f"No candidates for: {search_query}")

        if not candidates:
            logger.info(f"No lyrics found for {query.artist} - {query.title}")
            return NotFound()

        chosen = select_candidate(candidates, self.max_candidates, self.romanized_marker)
        logger.info(f"Lyrics source for {query.artist} - {query.title}: {chosen.url}")

        if self.mode is DeliveryMode.LINK:
            return Found(LyricsLink(chosen.url))

        text = await self.index.fetch_lyrics(chosen)
        return Found(LyricsText(text or self.not_found_text, source_url=chosen.url))
