import pytest

from minictl.core.errors import InvalidIdentifier
from minictl.models.project import (
    LogEntry,
    LogStream,
    RunningStatus,
    is_valid_identifier,
    validate_identifier,
)


@pytest.mark.parametrize("value", ["demo", "my-app", "app_2", "A1-b_C"])
def test_valid_identifiers(value: str) -> None:
    assert validate_identifier(value) == value


@pytest.mark.parametrize(
    "value",
    ["", "../etc", "a/b", "a\\b", "..", "demo app", "demo.js", "démo", None, 42, ["demo"]],
)
def test_invalid_identifiers_are_rejected(value: object) -> None:
    assert is_valid_identifier(value) is False
    with pytest.raises(InvalidIdentifier) as excinfo:
        validate_identifier(value)
    assert excinfo.value.status_code == 400
    assert excinfo.value.as_detail()["error"] == "invalid_identifier"


def test_identifier_rejects_trailing_newline() -> None:
    assert is_valid_identifier("demo\n") is False


def test_log_entry_defaults() -> None:
    entry = LogEntry(stream=LogStream.STDOUT, text="hello")
    payload = entry.as_payload()
    assert payload["stream"] == "stdout"
    assert payload["text"] == "hello"
    assert entry.timestamp.tzinfo is not None


def test_running_status_values() -> None:
    assert [status.value for status in RunningStatus] == ["running", "stopping"]
