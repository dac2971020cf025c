"""Shared fixtures for countscooper tests."""

from typing import Union

import pytest

from countscooper.track import Track


def make_track(
    id: Union[int, str],
    title: str = "Test Song",
    artist: str = "Test Artist",
    play_count: int = 0,
    album: str = "Test Album",
    duration_seconds: float = 200,
    has_local_asset: bool = True,
) -> Track:
    """Build a track with sensible defaults."""
    return Track(
        id=id,
        title=title,
        artist=artist,
        album=album,
        play_count=play_count,
        duration_seconds=duration_seconds,
        has_local_asset=has_local_asset,
    )


@pytest.fixture
def track_factory():
    """Expose make_track to tests as a fixture."""
    return make_track
