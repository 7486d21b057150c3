import pytest

from minictl.core.log_buffer import DEFAULT_LOG_CAPACITY, LogBuffer
from minictl.models.project import LogEntry, LogStream


def test_log_buffer_default_capacity() -> None:
    assert LogBuffer().capacity == DEFAULT_LOG_CAPACITY == 500


def test_log_buffer_evicts_oldest_entries() -> None:
    buffer = LogBuffer(capacity=3)
    for index in range(5):
        buffer.write(LogStream.STDOUT, f"line-{index}")

    assert len(buffer) == 3
    assert buffer.total_written == 5
    assert [entry.text for entry in buffer.tail()] == ["line-2", "line-3", "line-4"]


def test_log_buffer_tail_returns_most_recent_in_order() -> None:
    buffer = LogBuffer(capacity=10)
    for index in range(4):
        buffer.append(LogEntry(stream=LogStream.STDERR, text=str(index)))

    assert [entry.text for entry in buffer.tail(2)] == ["2", "3"]
    assert [entry.text for entry in buffer.tail(100)] == ["0", "1", "2", "3"]
    assert buffer.tail(0) == []


def test_log_buffer_tail_does_not_mutate() -> None:
    buffer = LogBuffer(capacity=2)
    buffer.write(LogStream.SYSTEM, "started")
    buffer.tail(1)
    buffer.tail()
    assert len(buffer) == 1


def test_log_buffer_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        LogBuffer(capacity=0)
