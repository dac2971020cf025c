"""Track entity and library statistics."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Union

TrackId = Union[int, str]


@dataclass(frozen=True)
class Track:
    """
    A single catalog entry as reported by the media library.

    Tracks are immutable snapshots. Two tracks are equal only if every
    field matches, including the id.
    """

    id: TrackId
    title: str
    artist: str
    album: str
    play_count: int
    duration_seconds: float
    has_local_asset: bool
    media_type: str = "Music"

    @property
    def formatted_duration(self) -> str:
        """Duration as m:ss, or h:mm:ss for an hour or more."""
        total = int(self.duration_seconds)
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def accessible_duration(self) -> str:
        """Duration spelled out for screen readers (e.g. '3 minutes 45 seconds')."""
        total = int(self.duration_seconds)
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)

        parts: List[str] = []
        for value, unit in ((hours, "hour"), (minutes, "minute"), (seconds, "second")):
            if value > 0:
                parts.append(f"{value} {unit}" if value == 1 else f"{value} {unit}s")

        return " ".join(parts) if parts else "0 seconds"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        """
        Build a track from a catalog mapping.

        Args:
            data: Mapping with at least an "id" entry. Missing text fields
                fall back to "Unknown ..." placeholders.

        Returns:
            Track instance

        Raises:
            ValueError: If id is missing or a numeric field is negative
        """
        if data.get("id") in (None, ""):
            raise ValueError("Track entry is missing an 'id'")

        play_count = int(data.get("play_count", 0) or 0)
        duration = float(data.get("duration_seconds", 0) or 0)
        if play_count < 0:
            raise ValueError(f"Negative play count for track {data['id']}")
        if duration < 0:
            raise ValueError(f"Negative duration for track {data['id']}")

        return cls(
            id=data["id"],
            title=data.get("title") or "Unknown Title",
            artist=data.get("artist") or "Unknown Artist",
            album=data.get("album") or "Unknown Album",
            play_count=play_count,
            duration_seconds=duration,
            has_local_asset=_parse_bool(data.get("has_local_asset", False)),
            media_type=data.get("media_type") or "Music",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict for JSON output."""
        return asdict(self)


def _parse_bool(value: Any) -> bool:
    """Accept real booleans as well as CSV-style 'true'/'1'/'yes' strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


class LibraryStats:
    """Summary numbers for a track catalog."""

    def __init__(self, tracks: Sequence[Track]):
        self.total_tracks = len(tracks)
        self.tracks_with_play_counts = sum(1 for t in tracks if t.play_count > 0)
        self.tracks_with_local_assets = sum(1 for t in tracks if t.has_local_asset)
        self.total_plays = sum(t.play_count for t in tracks)

    @property
    def average_play_count(self) -> float:
        if self.total_tracks == 0:
            return 0.0
        return self.total_plays / self.total_tracks
