"""Tests for queue planning."""

import pytest

from countscooper.enqueue import (
    QueueBehavior,
    QueueError,
    QueueErrorKind,
    QueueMode,
    QueueRequest,
    default_selection,
    plan_queue,
    submit,
)


class RecordingEnqueuer:
    """Enqueuer that records calls instead of talking to a player."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def enqueue(self, track_id, count, behavior):
        if self.error is not None:
            raise self.error
        self.calls.append((track_id, count, behavior))


class TestQueueBehavior:
    """Test QueueBehavior enum."""

    def test_raw_values(self) -> None:
        """Test stored values."""
        assert QueueBehavior.INSERT_NEXT.value == "prepend"
        assert QueueBehavior.REPLACE_QUEUE.value == "replace"

    def test_display(self) -> None:
        """Test display names and descriptions."""
        assert QueueBehavior.INSERT_NEXT.display_name == "Insert Next"
        assert QueueBehavior.REPLACE_QUEUE.display_name == "Replace Queue"
        assert "next" in QueueBehavior.INSERT_NEXT.description
        assert "Wipes" in QueueBehavior.REPLACE_QUEUE.description

    def test_icons(self) -> None:
        """Test every behavior has a circle icon."""
        for behavior in QueueBehavior:
            assert "circle" in behavior.icon

    def test_parse(self) -> None:
        """Test parsing stored values with fallback."""
        assert QueueBehavior.parse("replace") is QueueBehavior.REPLACE_QUEUE
        assert QueueBehavior.parse("prepend") is QueueBehavior.INSERT_NEXT
        assert QueueBehavior.parse("invalid") is QueueBehavior.INSERT_NEXT
        assert QueueBehavior.parse(None) is QueueBehavior.INSERT_NEXT


class TestPlanning:
    """Test selection and repeat counts."""

    def test_default_selection_lower_count(self, track_factory) -> None:
        """Test the less played track is selected."""
        low = track_factory(1, play_count=3)
        high = track_factory(2, play_count=10)
        assert default_selection(low, high) == low
        assert default_selection(high, low) == low

    def test_default_selection_tie(self, track_factory) -> None:
        """Test no selection when play counts match."""
        assert default_selection(track_factory(1, play_count=4), track_factory(2, play_count=4)) is None

    def test_match_mode(self, track_factory) -> None:
        """Test match mode queues the difference."""
        selected = track_factory(1, play_count=3)
        other = track_factory(2, play_count=10)

        request = plan_queue(selected, other, QueueMode.MATCH)
        assert request == QueueRequest(
            track_id=1,
            count=7,
            behavior=QueueBehavior.INSERT_NEXT,
            target_play_count=10,
        )

    def test_match_mode_disabled_when_ahead(self, track_factory) -> None:
        """Test nothing to match when selected already has more plays."""
        selected = track_factory(1, play_count=10)
        other = track_factory(2, play_count=3)
        assert plan_queue(selected, other, QueueMode.MATCH) is None

    def test_add_mode(self, track_factory) -> None:
        """Test add mode queues one play per play of the other track."""
        selected = track_factory(1, play_count=3)
        other = track_factory(2, play_count=10)

        request = plan_queue(selected, other, QueueMode.ADD, QueueBehavior.REPLACE_QUEUE)
        assert request is not None
        assert request.count == 10
        assert request.target_play_count == 13
        assert request.behavior is QueueBehavior.REPLACE_QUEUE

    def test_add_mode_disabled_for_unplayed_other(self, track_factory) -> None:
        """Test add mode has nothing to add when the other track is unplayed."""
        assert (
            plan_queue(track_factory(1, play_count=5), track_factory(2), QueueMode.ADD)
            is None
        )


class TestSubmit:
    """Test handing requests to an enqueuer."""

    def _request(self) -> QueueRequest:
        return QueueRequest(
            track_id=1,
            count=4,
            behavior=QueueBehavior.INSERT_NEXT,
            target_play_count=10,
        )

    def test_submit_calls_enqueuer(self) -> None:
        """Test the request reaches the enqueuer."""
        enqueuer = RecordingEnqueuer()
        submit(self._request(), enqueuer)
        assert enqueuer.calls == [(1, 4, QueueBehavior.INSERT_NEXT)]

    def test_queue_error_passes_through(self) -> None:
        """Test known errors keep their kind."""
        enqueuer = RecordingEnqueuer(QueueError(QueueErrorKind.NO_STORE_ID))
        with pytest.raises(QueueError) as exc_info:
            submit(self._request(), enqueuer)
        assert exc_info.value.kind is QueueErrorKind.NO_STORE_ID

    def test_other_errors_become_unknown(self) -> None:
        """Test unexpected failures map to UNKNOWN with the cause chained."""
        enqueuer = RecordingEnqueuer(ConnectionError("player offline"))
        with pytest.raises(QueueError) as exc_info:
            submit(self._request(), enqueuer)
        assert exc_info.value.kind is QueueErrorKind.UNKNOWN
        assert "player offline" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_error_messages(self) -> None:
        """Test each kind has a user-facing message."""
        for kind in QueueErrorKind:
            assert QueueError(kind).message
        assert "could not be found" in str(QueueError(QueueErrorKind.SONG_NOT_FOUND))
