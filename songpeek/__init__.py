"""
songpeek: search a music catalog, preview tracks and look up lyrics

Package layout:

**Catalog (`songpeek/catalog/`)**
- Track model decoded from Spotify or YouTube search responses
- Search clients; Spotify exchanges client credentials on every search,
  YouTube keeps only embeddable videos

**Playback (`songpeek/playback/`)**
- PlaybackSessionManager: at most one audio resource alive at any time,
  toggle-to-play/stop, track switching, natural completion
- mpv backend: one audio-only mpv process per preview

**Lyrics (`songpeek/lyrics/`)**
- LyricsResolver: title sanitizing, artist+title search with a title-only
  fallback, romanization-avoiding candidate choice, one overall deadline
- Genius index (aiohttp search, lyricsgenius page scraping)
- Companion HTTP service (GET /lyrics) and its client

**Favorites (`songpeek/favorites/`)**
- De-duplicated, ordered favorites persisted as a JSON blob

**Configuration and utilities (`songpeek/config/`, `songpeek/utils/`)**
- YAML + environment settings, colored console and rotating file logging
"""

__version__ = "1.0.0"

__author__ = "songpeek developers"

__description__ = "Search music, play track previews and look up lyrics from the terminal"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
