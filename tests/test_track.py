"""Tests for the Track model and library statistics."""

import pytest

from countscooper.track import LibraryStats, Track


class TestTrackDuration:
    """Test duration formatting."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (45, "0:45"),
            (60, "1:00"),
            (225, "3:45"),
            (123, "2:03"),
            (3725, "1:02:05"),
            (0, "0:00"),
            (59.9, "0:59"),
        ],
    )
    def test_formatted_duration(self, track_factory, seconds, expected) -> None:
        """Test m:ss and h:mm:ss formatting."""
        track = track_factory(1, duration_seconds=seconds)
        assert track.formatted_duration == expected

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (45, "45 seconds"),
            (1, "1 second"),
            (60, "1 minute"),
            (225, "3 minutes 45 seconds"),
            (3725, "1 hour 2 minutes 5 seconds"),
            (3661, "1 hour 1 minute 1 second"),
            (0, "0 seconds"),
        ],
    )
    def test_accessible_duration(self, track_factory, seconds, expected) -> None:
        """Test spoken duration uses singular forms and skips zero parts."""
        track = track_factory(1, duration_seconds=seconds)
        assert track.accessible_duration == expected


class TestTrackEquality:
    """Test structural equality."""

    def test_identical_tracks_are_equal(self, track_factory) -> None:
        """Test tracks with identical fields are equal."""
        assert track_factory(1, play_count=5) == track_factory(1, play_count=5)

    def test_different_ids_not_equal(self, track_factory) -> None:
        """Test tracks differing only by id are not equal."""
        assert track_factory(1) != track_factory(2)

    def test_same_id_different_fields_not_equal(self, track_factory) -> None:
        """Test same id but different play count is not equal."""
        assert track_factory(1, play_count=1) != track_factory(1, play_count=2)

    def test_track_is_immutable(self, track_factory) -> None:
        """Test fields cannot be reassigned."""
        track = track_factory(1)
        with pytest.raises(AttributeError):
            track.play_count = 99  # type: ignore[misc]


class TestTrackFromDict:
    """Test building tracks from catalog mappings."""

    def test_full_entry(self) -> None:
        """Test every field is read."""
        track = Track.from_dict(
            {
                "id": 42,
                "title": "Hello",
                "artist": "Adele",
                "album": "25",
                "play_count": 100,
                "duration_seconds": 295.5,
                "has_local_asset": True,
            }
        )
        assert track.id == 42
        assert track.title == "Hello"
        assert track.play_count == 100
        assert track.duration_seconds == 295.5
        assert track.has_local_asset is True
        assert track.media_type == "Music"

    def test_missing_text_fields_use_placeholders(self) -> None:
        """Test placeholders for missing title/artist/album."""
        track = Track.from_dict({"id": 1})
        assert track.title == "Unknown Title"
        assert track.artist == "Unknown Artist"
        assert track.album == "Unknown Album"
        assert track.play_count == 0

    def test_string_booleans(self) -> None:
        """Test CSV-style boolean strings."""
        assert Track.from_dict({"id": 1, "has_local_asset": "true"}).has_local_asset
        assert not Track.from_dict({"id": 1, "has_local_asset": "false"}).has_local_asset

    def test_missing_id_raises(self) -> None:
        """Test entries without id are rejected."""
        with pytest.raises(ValueError, match="id"):
            Track.from_dict({"title": "No id"})

    def test_negative_play_count_raises(self) -> None:
        """Test negative play counts are rejected."""
        with pytest.raises(ValueError, match="play count"):
            Track.from_dict({"id": 1, "play_count": -1})

    def test_to_dict_round_trip(self, track_factory) -> None:
        """Test to_dict output can rebuild the same track."""
        track = track_factory("abc", play_count=7)
        assert Track.from_dict(track.to_dict()) == track


class TestLibraryStats:
    """Test LibraryStats."""

    def test_counts(self, track_factory) -> None:
        """Test totals, played and local asset counts."""
        tracks = [
            track_factory(1, play_count=0, has_local_asset=True),
            track_factory(2, play_count=10, has_local_asset=False),
            track_factory(3, play_count=0, has_local_asset=True),
            track_factory(4, play_count=5, has_local_asset=False),
        ]
        stats = LibraryStats(tracks)
        assert stats.total_tracks == 4
        assert stats.tracks_with_play_counts == 2
        assert stats.tracks_with_local_assets == 2

    def test_average_play_count(self, track_factory) -> None:
        """Test average play count including unplayed tracks."""
        tracks = [
            track_factory(1, play_count=0),
            track_factory(2, play_count=0),
            track_factory(3, play_count=30),
        ]
        assert LibraryStats(tracks).average_play_count == 10.0

    def test_average_play_count_decimal(self, track_factory) -> None:
        """Test fractional average."""
        tracks = [track_factory(1, play_count=1), track_factory(2, play_count=2)]
        assert LibraryStats(tracks).average_play_count == 1.5

    def test_empty_library(self) -> None:
        """Test empty library stats are zero."""
        stats = LibraryStats([])
        assert stats.total_tracks == 0
        assert stats.average_play_count == 0.0
