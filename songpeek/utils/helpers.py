"""
Utility helper functions for songpeek
Title cleanup, lyrics page cleanup and small formatting helpers shared across modules
"""

import re
from typing import Optional


# Everything from the first of these characters onward is dropped from a title
TITLE_CUT_CHARACTERS = ('(', '[', '-')


def sanitize_title(title: str) -> str:
    """
    Strip annotations from a track title before a lyrics lookup

    Cuts the title at the first '(', '[' or '-' and trims whitespace, so
    "Song (Live Version)" and "Song - Remix" both become "Song".

    Args:
        title: Raw title as shown by the catalog

    Returns:
        Cleaned title, possibly empty
    """
    if not title:
        return ""

    cut = len(title)
    for char in TITLE_CUT_CHARACTERS:
        index = title.find(char)
        if index != -1:
            cut = min(cut, index)

    return title[:cut].strip()


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace to single spaces and trim"""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def clean_lyrics_text(lyrics: Optional[str]) -> str:
    """
    Clean scraped lyrics page text

    Removes the page artifacts Genius mixes into the lyrics (contributor
    header, "You might also like" inserts, trailing "Embed") and collapses
    blank lines. Section headers such as [Chorus] are kept.

    Args:
        lyrics: Raw lyrics text

    Returns:
        Cleaned lyrics text, empty when nothing meaningful remains
    """
    if not lyrics:
        return ""

    lines = lyrics.strip().split('\n')

    # "12 ContributorsSong Title Lyrics[Verse 1]..." header on the first line
    if lines and re.match(r'^\d*\s*Contributors?', lines[0]):
        header = lines[0]
        lyrics_marker = header.find('Lyrics')
        lines[0] = header[lyrics_marker + len('Lyrics'):] if lyrics_marker != -1 else ''

    cleaned = []
    for line in lines:
        line = line.rstrip()
        if line.strip() == 'You might also like':
            continue
        cleaned.append(line)

    text = '\n'.join(cleaned)
    text = re.sub(r'\d*\s*Embed\s*$', '', text)
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()
