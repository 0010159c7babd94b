"""Test catalog track models"""

import pytest

from songpeek.catalog.models import Track, decode_tracks
from songpeek.core.exceptions import UpstreamError


class TestSpotifyDecoding:
    """Test Track creation from Spotify search items"""

    def test_full_record(self, sample_spotify_track):
        track = Track.from_spotify_data(sample_spotify_track)

        assert track.id == '7ovUcF5uHTBRzUpB6ZOmvt'
        assert track.title == 'Idol'
        assert track.artist == 'YOASOBI, Guest'
        assert track.artwork_url == 'https://i.scdn.co/image/large'
        assert track.preview_url == 'https://p.scdn.co/mp3-preview/abc'
        assert track.external_url == 'https://open.spotify.com/track/7ovUcF5uHTBRzUpB6ZOmvt'
        assert track.has_preview
        assert track.display_name == 'YOASOBI, Guest - Idol'

    def test_missing_optional_fields(self, sample_spotify_track):
        """Test that missing artwork and preview degrade to None"""
        data = dict(sample_spotify_track)
        data['album'] = {'images': []}
        data['preview_url'] = None
        del data['external_urls']

        track = Track.from_spotify_data(data)

        assert track.artwork_url is None
        assert track.preview_url is None
        assert not track.has_preview
        assert track.external_url == 'https://open.spotify.com/track/7ovUcF5uHTBRzUpB6ZOmvt'

    def test_missing_id_rejected(self, sample_spotify_track):
        data = dict(sample_spotify_track)
        del data['id']

        with pytest.raises(UpstreamError):
            Track.from_spotify_data(data)


class TestYouTubeDecoding:
    """Test Track creation from YouTube video resources"""

    def test_full_record(self, sample_youtube_video):
        track = Track.from_youtube_data(sample_youtube_video)

        assert track.id == 'ZRtdQ81jPUQ'
        assert track.title == 'YOASOBI「アイドル」 Official Music Video & Lyrics'
        assert track.artist == 'Ayase / YOASOBI'
        assert track.artwork_url == 'https://i.ytimg.com/vi/ZRtdQ81jPUQ/mqdefault.jpg'
        assert track.preview_url == 'https://www.youtube.com/watch?v=ZRtdQ81jPUQ'
        assert track.external_url == track.preview_url

    def test_missing_snippet_rejected(self):
        with pytest.raises(UpstreamError):
            Track.from_youtube_data({'id': 'abc'})


class TestDecodeTracks:
    """Test list decoding"""

    def test_malformed_items_skipped(self, sample_spotify_track):
        items = [sample_spotify_track, {'name': 'no id'}, "not a dict"]

        tracks = decode_tracks(items, Track.from_spotify_data)

        assert [track.id for track in tracks] == ['7ovUcF5uHTBRzUpB6ZOmvt']

    def test_storage_shape(self, sample_spotify_track):
        """Test that to_dict output rebuilds the same track"""
        track = Track.from_spotify_data(sample_spotify_track)
        assert Track.from_dict(track.to_dict()) == track
