"""Duplicate group model."""

import uuid
from typing import Optional, Sequence, Tuple

from .track import Track


class DuplicateGroup:
    """
    Tracks sharing one title/artist but living under separate catalog entries.

    shared_title and shared_artist are the literal values of one member and
    are only meant for display. Members are held as an immutable tuple;
    with_members() returns a new group instead of changing this one.
    """

    def __init__(
        self,
        shared_title: str,
        shared_artist: str,
        members: Sequence[Track],
        id: Optional[str] = None,
    ):
        """
        Create a duplicate group.

        Args:
            shared_title: Display title
            shared_artist: Display artist
            members: Tracks in the group (at least two)
            id: Group identifier (default: fresh uuid4 hex)

        Raises:
            ValueError: If fewer than two members are given
        """
        self.id = id if id is not None else uuid.uuid4().hex
        self.shared_title = shared_title
        self.shared_artist = shared_artist
        self._members = _checked_members(members)

    @property
    def members(self) -> Tuple[Track, ...]:
        return self._members

    @property
    def lowest(self) -> Track:
        """Member with the lowest play count (first one wins on ties)."""
        return min(self._members, key=lambda t: t.play_count)

    @property
    def highest(self) -> Track:
        """Member with the highest play count (first one wins on ties)."""
        return max(self._members, key=lambda t: t.play_count)

    @property
    def play_count_gap(self) -> int:
        return self.highest.play_count - self.lowest.play_count

    @property
    def version_count(self) -> str:
        return f"{len(self._members)} versions"

    @property
    def can_dismiss_individually(self) -> bool:
        # Dismissing one of two members would leave nothing to compare
        return len(self._members) > 2

    def with_members(self, members: Sequence[Track]) -> "DuplicateGroup":
        """
        Return a copy of this group (same id) holding different members.

        Raises:
            ValueError: If fewer than two members are given
        """
        return DuplicateGroup(
            self.shared_title, self.shared_artist, members, id=self.id
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DuplicateGroup):
            return NotImplemented
        return (
            self.id == other.id
            and self.shared_title == other.shared_title
            and self.shared_artist == other.shared_artist
            and self._members == other._members
        )

    def __hash__(self) -> int:
        return hash((self.id, self.shared_title, self.shared_artist, self._members))

    def __repr__(self) -> str:
        return (
            f"DuplicateGroup(id={self.id!r}, shared_title={self.shared_title!r}, "
            f"shared_artist={self.shared_artist!r}, members={len(self._members)})"
        )


def _checked_members(members: Sequence[Track]) -> Tuple[Track, ...]:
    checked = tuple(members)
    if len(checked) < 2:
        raise ValueError(
            f"Duplicate group must contain at least 2 tracks (got {len(checked)})"
        )
    return checked
