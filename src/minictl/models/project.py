"""Project domain models."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import Enum
from typing import TypeGuard

from pydantic import BaseModel, Field

from minictl.core.errors import InvalidIdentifier

PROJECT_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class RunningStatus(str, Enum):
    """Lifecycle status for a tracked process."""

    RUNNING = "running"
    STOPPING = "stopping"


class LogStream(str, Enum):
    """Origin of a captured log line."""

    STDOUT = "stdout"
    STDERR = "stderr"
    SYSTEM = "system"


class LogEntry(BaseModel):
    """One timestamped line of captured output."""

    stream: LogStream
    text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def as_payload(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "stream": self.stream.value,
            "text": self.text,
        }


def is_valid_identifier(value: object) -> TypeGuard[str]:
    return isinstance(value, str) and PROJECT_IDENTIFIER_PATTERN.fullmatch(value) is not None


def validate_identifier(value: object, *, label: str = "project name") -> str:
    """Return ``value`` if it is a safe project or template identifier.

    Identifiers are joined directly onto filesystem roots, so anything other
    than letters, digits, ``_`` and ``-`` is rejected.
    """
    if is_valid_identifier(value):
        return value
    raise InvalidIdentifier(f"Valid {label} required", value=str(value))
