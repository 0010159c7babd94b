"""
Lyrics index interface

search() returns candidates in upstream order; fetch_lyrics() returns the
plain lyrics of one candidate or None when the index has none. Both raise
UpstreamError on transport or payload failures.
"""

from typing import List, Optional

from .models import LyricsCandidate


class LyricsIndex:
    """Searchable lyrics index"""

    async def search(self, query: str) -> List[LyricsCandidate]:
        raise NotImplementedError

    async def fetch_lyrics(self, candidate: LyricsCandidate) -> Optional[str]:
        raise NotImplementedError

    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
