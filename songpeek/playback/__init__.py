"""
Playback package: the single-resource session manager and its mpv backend
"""

from .session import (
    PlaybackState,
    PlaybackSession,
    AudioResource,
    ResourceAcquirer,
    PlaybackSessionManager
)
from .mpv import MpvAudioResource, MpvResourceAcquirer

__all__ = [
    'PlaybackState',
    'PlaybackSession',
    'AudioResource',
    'ResourceAcquirer',
    'PlaybackSessionManager',
    'MpvAudioResource',
    'MpvResourceAcquirer',
]
