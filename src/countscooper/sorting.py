"""Sort orders for the track list."""

import re
import unicodedata
from enum import Enum
from functools import cmp_to_key
from typing import Callable, List, Sequence, Tuple, Union

from .track import Track

_DIGIT_RUN = re.compile(r"(\d+)")
CollationKey = Tuple[Union[int, str], ...]


def collation_key(text: str) -> CollationKey:
    """
    Build a comparison key that ignores case and diacritics.

    Runs of digits compare by value, so "Track 2" sorts before "Track 10".
    """
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    folded = stripped.casefold().strip()

    parts: List[Union[int, str]] = []
    for chunk in _DIGIT_RUN.split(folded):
        if not chunk:
            continue
        parts.append(int(chunk) if chunk.isdecimal() else chunk)
    return tuple(parts)


def _compare_keys(left: CollationKey, right: CollationKey) -> int:
    for a, b in zip(left, right):
        if a == b:
            continue
        if isinstance(a, int) and isinstance(b, int):
            return -1 if a < b else 1
        if isinstance(a, int) or isinstance(b, int):
            # Numbers sort ahead of letters
            return -1 if isinstance(a, int) else 1
        return -1 if a < b else 1
    return (len(left) > len(right)) - (len(left) < len(right))


def collation_compare(left: str, right: str) -> int:
    """
    Compare two strings the way a person alphabetizes them.

    Returns:
        -1, 0 or 1
    """
    return _compare_keys(collation_key(left), collation_key(right))


class SortKey(Enum):
    """Field and direction for ordering the track list."""

    PLAY_COUNT_DESC = "play-count-desc"
    PLAY_COUNT_ASC = "play-count-asc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"
    ARTIST_ASC = "artist-asc"
    ARTIST_DESC = "artist-desc"
    ALBUM_ASC = "album-asc"
    ALBUM_DESC = "album-desc"

    @property
    def field(self) -> str:
        return self.value.rsplit("-", 1)[0].replace("-", "_")

    @property
    def descending(self) -> bool:
        return self.value.endswith("-desc")

    @property
    def display_name(self) -> str:
        return _LABELS[self.field]

    @property
    def short_label(self) -> str:
        """Label for toolbar buttons."""
        return _LABELS[self.field]

    def icon(self, is_selected: bool = False) -> str:
        """Direction icon name, filled when the option is selected."""
        suffix = ".fill" if is_selected else ""
        arrow = "down" if self.descending else "up"
        return f"arrow.{arrow}.circle{suffix}"

    def sort(self, tracks: Sequence[Track]) -> List[Track]:
        return sort_by(self, tracks)


_LABELS = {
    "play_count": "Play Count",
    "title": "Title",
    "artist": "Artist",
    "album": "Album",
}


def _comparator(key: SortKey) -> Callable[[Track, Track], int]:
    """Build a three-way comparator with the direction baked in."""
    sign = -1 if key.descending else 1

    if key.field == "play_count":

        def compare(left: Track, right: Track) -> int:
            diff = left.play_count - right.play_count
            return sign * ((diff > 0) - (diff < 0))

    else:
        field = key.field

        def compare(left: Track, right: Track) -> int:
            return sign * collation_compare(getattr(left, field), getattr(right, field))

    return compare


def sort_by(key: SortKey, tracks: Sequence[Track]) -> List[Track]:
    """
    Return tracks ordered by the given key.

    The input is left untouched. Tracks that compare equal keep their
    input order, for descending keys too.

    Args:
        key: Field and direction
        tracks: Tracks to order

    Returns:
        New sorted list
    """
    return sorted(tracks, key=cmp_to_key(_comparator(key)))
