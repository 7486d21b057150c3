"""Graceful-then-forced termination of tracked processes."""

from __future__ import annotations

import asyncio
import logging

from minictl.core.errors import NotRunning, ProjectStarting, SignalFailed
from minictl.core.registry import ProcessRegistry, RunningProjectRecord
from minictl.models.project import LogStream, RunningStatus, validate_identifier

logger = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 5.0


class TerminationCoordinator:
    """Send SIGTERM to a tracked process and SIGKILL it if it outlives the grace period.

    Records are never removed here. The supervisor's exit observer removes
    them once the OS reports the exit, and cancels any pending escalation.
    """

    def __init__(
        self,
        registry: ProcessRegistry,
        *,
        grace_seconds: float = DEFAULT_GRACE_SECONDS,
    ) -> None:
        self._registry = registry
        self._grace_seconds = grace_seconds

    @property
    def grace_seconds(self) -> float:
        return self._grace_seconds

    def stop(self, name: object) -> RunningProjectRecord:
        """Request termination of ``name`` and return without waiting for exit."""
        project_name = validate_identifier(name)
        record = self._registry.get(project_name)
        process = record.process
        if process is None:
            raise ProjectStarting("Project is still starting", name=project_name)

        record.status = RunningStatus.STOPPING
        record.log_buffer.write(LogStream.SYSTEM, "Stop requested, sending SIGTERM")
        logger.info("Stopping project %s (pid %s)", project_name, record.pid)
        if not self._deliver(record, force=False):
            return record

        if record.escalation is None and process.returncode is None:
            loop = asyncio.get_running_loop()
            record.escalation = loop.call_later(self._grace_seconds, self._escalate, record)
        return record

    def stop_all(self) -> list[str]:
        """Request termination of every tracked process; return the names signalled."""
        stopped: list[str] = []
        for record in self._registry.list_all():
            try:
                self.stop(record.name)
            except (NotRunning, ProjectStarting):
                continue
            except SignalFailed:
                logger.warning("Could not signal project %s during shutdown", record.name)
                continue
            stopped.append(record.name)
        return stopped

    def _escalate(self, record: RunningProjectRecord) -> None:
        record.escalation = None
        process = record.process
        if process is None or process.returncode is not None:
            return
        record.log_buffer.write(
            LogStream.SYSTEM,
            f"Process still running after {self._grace_seconds:g}s, sending SIGKILL",
        )
        logger.warning(
            "Project %s (pid %s) ignored SIGTERM, killing", record.name, record.pid
        )
        try:
            self._deliver(record, force=True)
        except SignalFailed:
            logger.exception("Failed to kill project %s", record.name)

    @staticmethod
    def _deliver(record: RunningProjectRecord, *, force: bool) -> bool:
        """Signal the record's process; return False when it had already exited.

        Signalling a reaped process raises ``ProcessLookupError`` on some
        platforms instead of being a no-op. That case is treated as success
        since the exit observer is about to remove the record anyway.
        """
        process = record.process
        if process is None:
            return False
        try:
            if force:
                process.kill()
            else:
                process.terminate()
        except ProcessLookupError:
            logger.debug("Project %s (pid %s) already exited", record.name, record.pid)
            return False
        except OSError as exc:
            logger.exception("Failed to signal project %s", record.name)
            raise SignalFailed(
                f"Failed to stop project: {exc}", name=record.name, pid=record.pid
            ) from exc
        return True
