"""
Lyrics package: resolver, Genius index, companion service and its client
"""

from .models import (
    DeliveryMode,
    FailureReason,
    LyricsQuery,
    LyricsCandidate,
    LyricsLink,
    LyricsText,
    Found,
    NotFound,
    Failed,
    LyricsResult
)
from .index import LyricsIndex
from .genius import GeniusLyricsIndex
from .resolver import LyricsResolver, select_candidate
from .service_client import LyricsServiceClient

__all__ = [
    'DeliveryMode',
    'FailureReason',
    'LyricsQuery',
    'LyricsCandidate',
    'LyricsLink',
    'LyricsText',
    'Found',
    'NotFound',
    'Failed',
    'LyricsResult',
    'LyricsIndex',
    'GeniusLyricsIndex',
    'LyricsResolver',
    'select_candidate',
    'LyricsServiceClient',
]
