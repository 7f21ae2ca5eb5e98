# Copyright (c) 2024 Aiven, Helsinki, Finland. https://aiven.io/
from compmatrix.errors import DoubleCloseError, UsedAfterCloseError
from compmatrix.input_stream import AsyncFragmentReader, AsyncOutputCollector, FragmentReader, OutputCollector
from compmatrix.track_closed import AsyncTrackClosed, TrackClosed
from unittest.mock import MagicMock

import pytest


def test_forwards_operations() -> None:
    tracker = TrackClosed(OutputCollector())
    assert tracker.write(b"abc") == 3
    tracker.flush()
    assert tracker.writable()
    assert tracker.get_ref().getvalue() == b"abc"
    assert tracker.get_ref().flushes == 1
    assert not tracker.was_closed_exactly_once()


def test_close_exactly_once() -> None:
    collector = OutputCollector()
    tracker = TrackClosed(collector)
    tracker.close()
    assert collector.closed
    assert tracker.closed
    assert tracker.close_count == 1
    assert tracker.was_closed_exactly_once()


@pytest.mark.parametrize(
    "operation",
    [
        lambda tracker: tracker.write(b"x"),
        lambda tracker: tracker.read(1),
        lambda tracker: tracker.flush(),
    ],
    ids=["write", "read", "flush"],
)
def test_rejects_use_after_close(operation) -> None:
    inner = MagicMock()
    tracker = TrackClosed(inner)
    tracker.close()
    with pytest.raises(UsedAfterCloseError):
        operation(tracker)
    inner.write.assert_not_called()
    inner.read.assert_not_called()
    inner.flush.assert_not_called()


def test_double_close_leaves_state_unchanged() -> None:
    inner = MagicMock()
    tracker = TrackClosed(inner)
    tracker.close()
    with pytest.raises(DoubleCloseError):
        tracker.close()
    assert tracker.close_count == 1
    assert tracker.closed
    assert tracker.was_closed_exactly_once()
    inner.close.assert_called_once_with()


def test_failed_close_does_not_set_closed_flag() -> None:
    inner = MagicMock()
    inner.close.side_effect = OSError("disk on fire")
    tracker = TrackClosed(inner)
    with pytest.raises(OSError, match="disk on fire"):
        tracker.close()
    assert not tracker.closed
    assert tracker.close_count == 1
    assert not tracker.was_closed_exactly_once()
    # the resource is still usable and a retry is counted as a second close
    inner.close.side_effect = None
    tracker.write(b"x")
    tracker.close()
    assert tracker.closed
    assert tracker.close_count == 2
    assert not tracker.was_closed_exactly_once()


def test_read_forwarding() -> None:
    tracker = TrackClosed(FragmentReader([b"ab", b"c"]))
    assert tracker.readable()
    assert tracker.read(-1) == b"ab"
    assert tracker.read(5) == b"c"
    assert tracker.read(5) == b""


def test_context_manager_closes_once() -> None:
    with TrackClosed(OutputCollector()) as tracker:
        tracker.write(b"abc")
    assert tracker.was_closed_exactly_once()

    with TrackClosed(OutputCollector()) as tracker:
        tracker.close()
    assert tracker.was_closed_exactly_once()


@pytest.mark.asyncio
async def test_async_tracker_forwards_and_closes() -> None:
    tracker = AsyncTrackClosed(AsyncOutputCollector())
    assert await tracker.write(b"abc") == 3
    await tracker.flush()
    await tracker.aclose()
    assert tracker.was_closed_exactly_once()
    assert tracker.get_ref().getvalue() == b"abc"
    with pytest.raises(UsedAfterCloseError):
        await tracker.write(b"x")
    with pytest.raises(DoubleCloseError):
        await tracker.aclose()
    assert tracker.close_count == 1


@pytest.mark.asyncio
async def test_async_tracker_read() -> None:
    async with AsyncTrackClosed(AsyncFragmentReader([b"a", b"bc"])) as tracker:
        assert await tracker.read(0) == b""
        assert await tracker.read() == b"a"
        assert await tracker.read() == b"bc"
    assert tracker.was_closed_exactly_once()
    with pytest.raises(UsedAfterCloseError):
        await tracker.read()
