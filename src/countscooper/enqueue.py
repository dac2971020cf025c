"""Work out which track to queue, and how many times, to even out play counts."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .track import Track, TrackId


class QueueBehavior(Enum):
    """How a queue request is applied by the player."""

    INSERT_NEXT = "prepend"
    REPLACE_QUEUE = "replace"

    @property
    def display_name(self) -> str:
        if self is QueueBehavior.INSERT_NEXT:
            return "Insert Next"
        return "Replace Queue"

    @property
    def description(self) -> str:
        if self is QueueBehavior.INSERT_NEXT:
            return "Adds the songs to play next, after the current song."
        return "Wipes the current queue and starts playing the songs right away."

    @property
    def icon(self) -> str:
        if self is QueueBehavior.INSERT_NEXT:
            return "text.insert.circle"
        return "arrow.triangle.2.circlepath.circle"

    @classmethod
    def parse(cls, value: Optional[str]) -> "QueueBehavior":
        """Parse a stored value, falling back to INSERT_NEXT."""
        try:
            return cls(value)
        except ValueError:
            return cls.INSERT_NEXT


class QueueMode(Enum):
    """
    How the repeat count is derived.

    MATCH adds just enough plays to reach the other track's count.
    ADD adds one play per play the other track has.
    """

    MATCH = "match"
    ADD = "add"


@dataclass(frozen=True)
class QueueRequest:
    """A track id and repeat count to hand to the player."""

    track_id: TrackId
    count: int
    behavior: QueueBehavior
    target_play_count: int


class QueueErrorKind(Enum):
    SONG_NOT_FOUND = "song_not_found"
    NO_STORE_ID = "no_store_id"
    QUEUE_FAILED = "queue_failed"
    UNKNOWN = "unknown"


_ERROR_MESSAGES = {
    QueueErrorKind.SONG_NOT_FOUND: "The song could not be found in your library.",
    QueueErrorKind.NO_STORE_ID: (
        "This song cannot be queued because it's not available in the catalog."
    ),
    QueueErrorKind.QUEUE_FAILED: (
        "Failed to add the song to the queue. Please try again."
    ),
    QueueErrorKind.UNKNOWN: "An unexpected error occurred while queueing.",
}


class QueueError(Exception):
    """Raised when the player cannot queue a request."""

    def __init__(self, kind: QueueErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        base = _ERROR_MESSAGES[self.kind]
        return f"{base} ({self.detail})" if self.detail else base


class Enqueuer(Protocol):
    """Player integration that performs the actual queueing."""

    def enqueue(self, track_id: TrackId, count: int, behavior: QueueBehavior) -> None:
        """Queue track_id count times, raising QueueError on failure."""
        ...


def default_selection(first: Track, second: Track) -> Optional[Track]:
    """The track that should catch up, or None if both have equal plays."""
    if first.play_count == second.play_count:
        return None
    return first if first.play_count < second.play_count else second


def repeat_count(selected: Track, other: Track, mode: QueueMode) -> int:
    """Number of plays to queue for selected (may be <= 0 when not applicable)."""
    if mode is QueueMode.MATCH:
        return other.play_count - selected.play_count
    return other.play_count


def plan_queue(
    selected: Track,
    other: Track,
    mode: QueueMode,
    behavior: QueueBehavior = QueueBehavior.INSERT_NEXT,
) -> Optional[QueueRequest]:
    """
    Build a queue request for selected, compared against other.

    Args:
        selected: Track to queue
        other: Track whose play count is the reference
        mode: MATCH or ADD
        behavior: Configured player queue behavior

    Returns:
        QueueRequest, or None if the mode has nothing to queue
    """
    count = repeat_count(selected, other, mode)
    if count <= 0:
        return None
    return QueueRequest(
        track_id=selected.id,
        count=count,
        behavior=behavior,
        target_play_count=selected.play_count + count,
    )


def submit(request: QueueRequest, enqueuer: Enqueuer) -> None:
    """
    Hand a request to the player.

    Raises:
        QueueError: Passed through from the enqueuer, or UNKNOWN wrapping
            any other failure
    """
    try:
        enqueuer.enqueue(request.track_id, request.count, request.behavior)
    except QueueError:
        raise
    except Exception as e:
        raise QueueError(QueueErrorKind.UNKNOWN, str(e)) from e
