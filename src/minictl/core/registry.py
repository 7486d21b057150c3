"""Registry of currently running projects."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeAlias

from minictl.core.errors import AlreadyRunning, NotRunning
from minictl.core.log_buffer import LogBuffer
from minictl.models.project import RunningStatus

RecordPayloadValue: TypeAlias = str | int | list[str] | None


@dataclass(slots=True, eq=False)
class RunningProjectRecord:
    """In-memory state for one running project process."""

    name: str
    project_path: Path
    command: str
    args: tuple[str, ...]
    log_buffer: LogBuffer
    process: asyncio.subprocess.Process | None = None
    pid: int | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    status: RunningStatus = RunningStatus.RUNNING
    escalation: asyncio.TimerHandle | None = None

    def cancel_escalation(self) -> None:
        if self.escalation is not None:
            self.escalation.cancel()
            self.escalation = None

    def as_payload(self) -> dict[str, RecordPayloadValue]:
        """Return the record without its process handle."""
        return {
            "name": self.name,
            "pid": self.pid,
            "projectPath": str(self.project_path),
            "command": self.command,
            "args": list(self.args),
            "startedAt": self.started_at.isoformat(),
            "status": self.status.value,
            "logCount": len(self.log_buffer),
        }


class ProcessRegistry:
    """Name-keyed map of running records; at most one record per name."""

    def __init__(self) -> None:
        self._records: dict[str, RunningProjectRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._records

    def is_running(self, name: str) -> bool:
        return name in self

    def try_reserve(self, record: RunningProjectRecord) -> RunningProjectRecord:
        with self._lock:
            if record.name in self._records:
                raise AlreadyRunning("Project already running", name=record.name)
            self._records[record.name] = record
        return record

    def get(self, name: str) -> RunningProjectRecord:
        with self._lock:
            record = self._records.get(name)
        if record is None:
            raise NotRunning("Project is not running", name=name)
        return record

    def remove(self, name: str, record: RunningProjectRecord | None = None) -> bool:
        """Drop ``name`` if present; with ``record``, only when it is still that record."""
        with self._lock:
            current = self._records.get(name)
            if current is None or (record is not None and current is not record):
                return False
            del self._records[name]
            return True

    def list_all(self) -> list[RunningProjectRecord]:
        with self._lock:
            return list(self._records.values())
