"""Duplicate track grouping and dismissal handling."""

import sqlite3
import sys
import threading
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from colorama import Fore, Style

from .store import DismissalStore, MemoryDismissalStore
from .suggestion import DuplicateGroup
from .track import Track, TrackId

# Joins the parts of bucket and dismissal keys. Never appears in real titles.
KEY_SEPARATOR = "\x1f"


def normalize(text: str) -> str:
    """Lowercase and strip surrounding whitespace."""
    return text.lower().strip()


def group_key(title: str, artist: str) -> str:
    """Bucket key for a title/artist pair."""
    return f"{normalize(title)}{KEY_SEPARATOR}{normalize(artist)}"


def group_dismissal_key(title: str, artist: str) -> str:
    """Dismissal key that hides a whole group."""
    return f"group{KEY_SEPARATOR}{group_key(title, artist)}"


def song_dismissal_key(title: str, artist: str, track_id: TrackId) -> str:
    """Dismissal key that hides one member of a group."""
    return f"song{KEY_SEPARATOR}{group_key(title, artist)}{KEY_SEPARATOR}{track_id}"


class SuggestionEngine:
    """
    Groups tracks by title/artist and tracks which suggestions were dismissed.

    The raw groups from the last analyze() call are kept untouched; the
    active view is rebuilt from them and the dismissal set on every read.
    """

    def __init__(
        self, store: Optional[DismissalStore] = None, verbose: bool = False
    ):
        """
        Initialize suggestion engine.

        Args:
            store: Dismissal persistence backend (default: in-memory)
            verbose: Print progress and errors to the console
        """
        self.store: DismissalStore = store if store is not None else MemoryDismissalStore()
        self.verbose = verbose
        self.error_count = 0
        self._lock = threading.Lock()
        self._groups: Tuple[DuplicateGroup, ...] = ()
        self._dismissed: Set[str] = self._load_dismissed()

    def analyze(self, tracks: Sequence[Track]) -> None:
        """
        Rebuild raw duplicate groups from a full catalog.

        Replaces the previous result. Members of each group are sorted by
        play count ascending; tracks with equal counts keep catalog order.

        Args:
            tracks: Every track in the library
        """
        buckets: Dict[str, List[Track]] = {}
        for track in tracks:
            buckets.setdefault(group_key(track.title, track.artist), []).append(track)

        groups = tuple(
            DuplicateGroup(
                shared_title=bucket[0].title,
                shared_artist=bucket[0].artist,
                members=sorted(bucket, key=lambda t: t.play_count),
            )
            for bucket in buckets.values()
            if len(bucket) >= 2
        )

        with self._lock:
            self._groups = groups

        if self.verbose:
            redundant = sum(len(g.members) - 1 for g in groups)
            print(
                f"{Fore.CYAN}Analyzed {len(tracks)} track(s): "
                f"{len(groups)} duplicate group(s) "
                f"({redundant} redundant entr{'y' if redundant == 1 else 'ies'})"
                f"{Style.RESET_ALL}"
            )

    @property
    def raw_groups(self) -> Tuple[DuplicateGroup, ...]:
        """Groups from the last analyze() call, before dismissals."""
        with self._lock:
            return self._groups

    @property
    def active_suggestions(self) -> List[DuplicateGroup]:
        """Groups left after dismissals, largest play count gap first."""
        with self._lock:
            groups = self._groups
            dismissed = set(self._dismissed)

        active: List[DuplicateGroup] = []
        for group in groups:
            if group_dismissal_key(group.shared_title, group.shared_artist) in dismissed:
                continue

            members = [
                track
                for track in group.members
                if song_dismissal_key(group.shared_title, group.shared_artist, track.id)
                not in dismissed
            ]
            if len(members) < 2:
                continue

            if len(members) == len(group.members):
                active.append(group)
            else:
                active.append(group.with_members(members))

        # sorted() is stable, so equal gaps keep analyze() order
        return sorted(active, key=lambda g: g.play_count_gap, reverse=True)

    @property
    def dismissed_keys(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._dismissed)

    def dismiss_song(self, title: str, artist: str, track_id: TrackId) -> None:
        """
        Hide one track from its group.

        Args:
            title: Title of the group (any casing/padding)
            artist: Artist of the group (any casing/padding)
            track_id: Id of the track to hide
        """
        self._add_dismissal(song_dismissal_key(title, artist, track_id))

    def dismiss_group(self, title: str, artist: str) -> None:
        """
        Hide every track sharing this title/artist.

        Args:
            title: Title of the group (any casing/padding)
            artist: Artist of the group (any casing/padding)
        """
        self._add_dismissal(group_dismissal_key(title, artist))

    def reset_dismissals(self) -> None:
        """Forget every dismissal and remove the persisted record."""
        with self._lock:
            self._dismissed.clear()
            try:
                self.store.clear()
            except (OSError, RuntimeError, sqlite3.Error) as e:
                self._log_error(f"Failed to clear dismissals: {e}")

    def _add_dismissal(self, key: str) -> None:
        with self._lock:
            self._dismissed.add(key)
            self._persist()

    def _persist(self) -> None:
        """Write the dismissal set through to the store (lock held)."""
        try:
            self.store.save(self._dismissed)
        except (OSError, RuntimeError, sqlite3.Error) as e:
            self._log_error(f"Failed to save dismissals: {e}")

    def _load_dismissed(self) -> Set[str]:
        try:
            keys = self.store.load()
        except (OSError, RuntimeError, sqlite3.Error) as e:
            self._log_error(f"Failed to load dismissals: {e}")
            return set()
        return set(keys) if keys else set()

    def _log_error(self, message: str) -> None:
        """Log error message to stderr."""
        print(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}", file=sys.stderr)
        self.error_count += 1
