from hypothesis import given
from hypothesis import strategies as st

from minictl.core.log_buffer import LogBuffer
from minictl.models.project import LogStream, is_valid_identifier


@given(
    capacity=st.integers(min_value=1, max_value=50),
    count=st.integers(min_value=0, max_value=200),
)
def test_log_buffer_keeps_newest_entries_in_order(capacity: int, count: int) -> None:
    buffer = LogBuffer(capacity=capacity)
    for index in range(count):
        buffer.write(LogStream.STDOUT, str(index))

    kept = [int(entry.text) for entry in buffer.tail()]
    assert len(buffer) == min(capacity, count)
    assert kept == list(range(max(0, count - capacity), count))


@given(
    capacity=st.integers(min_value=1, max_value=50),
    count=st.integers(min_value=0, max_value=100),
    limit=st.integers(min_value=1, max_value=120),
)
def test_log_buffer_tail_size(capacity: int, count: int, limit: int) -> None:
    buffer = LogBuffer(capacity=capacity)
    for index in range(count):
        buffer.write(LogStream.STDERR, str(index))

    tail = [int(entry.text) for entry in buffer.tail(limit)]
    assert len(tail) == min(limit, capacity, count)
    assert tail == list(range(count - len(tail), count))


@given(st.text(alphabet=st.characters(codec="ascii"), max_size=20))
def test_identifier_grammar(value: str) -> None:
    expected = bool(value) and all(ch.isascii() and (ch.isalnum() or ch in "-_") for ch in value)
    assert is_valid_identifier(value) is expected
