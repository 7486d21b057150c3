"""Spawn project processes and observe their output and exit."""

from __future__ import annotations

import asyncio
import logging
import shlex
import signal
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TextIO

from minictl.config import ControllerSettings
from minictl.core.errors import (
    CommandNotAllowed,
    NoManifestFound,
    ProjectDirectoryNotFound,
    SpawnFailed,
)
from minictl.core.log_buffer import LogBuffer
from minictl.core.project_store import ProjectStore
from minictl.core.registry import ProcessRegistry, RunningProjectRecord
from minictl.models.project import LogStream, RunningStatus, validate_identifier

logger = logging.getLogger(__name__)

# How long the exit observer waits for stream readers once the process is gone.
# Grandchildren that inherited the pipes can keep them open indefinitely.
READER_DRAIN_TIMEOUT_SECONDS = 1.0
SPAWN_POLL_SECONDS = 0.05
LINE_SEPARATOR = b"\n"
OVERLONG_LINE_NOTICE = "[output line exceeded the stream limit and was dropped]"
SHUTDOWN_NOTICE = "Controller shutting down, sending SIGTERM"


def describe_exit(returncode: int | None) -> str:
    if returncode is None:
        return "Process exit status unknown"
    if returncode < 0:
        try:
            signal_name = signal.Signals(-returncode).name
        except ValueError:
            signal_name = f"signal {-returncode}"
        return f"Process terminated by {signal_name}"
    return f"Process exited with code {returncode}"


class ProcessSupervisor:
    """Launch one child process per project and keep the registry in sync with it."""

    def __init__(
        self,
        store: ProjectStore,
        registry: ProcessRegistry,
        settings: ControllerSettings | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._settings = settings if settings is not None else ControllerSettings()
        self._observers: set[asyncio.Task[None]] = set()
        self._spawning = 0
        self._closing = False

    @property
    def closing(self) -> bool:
        return self._closing

    def close(self) -> None:
        """Mark the supervisor as shutting down.

        A process whose spawn completes after this point is sent SIGTERM as
        soon as it is attached to its record.
        """
        self._closing = True

    async def start_process(
        self,
        name: str,
        command: str | None = None,
        args: Sequence[str] | None = None,
    ) -> RunningProjectRecord:
        project_name = validate_identifier(name)
        launch_command, launch_args = self._resolve_launch(command, args)

        project_path = self._store.resolve_project_path(project_name)
        if not project_path.is_dir():
            raise ProjectDirectoryNotFound(
                "Project directory not found", projectPath=str(project_path)
            )
        if self._settings.is_package_manager(launch_command):
            manifest = project_path / self._settings.manifest_name
            if not manifest.is_file():
                raise NoManifestFound(
                    f"No {self._settings.manifest_name} found for project",
                    projectPath=str(project_path),
                )

        record = self._registry.try_reserve(
            RunningProjectRecord(
                name=project_name,
                project_path=project_path,
                command=launch_command,
                args=launch_args,
                log_buffer=LogBuffer(self._settings.log_capacity),
            )
        )
        self._spawning += 1
        try:
            process = await asyncio.create_subprocess_exec(
                launch_command,
                *launch_args,
                cwd=project_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            self._registry.remove(project_name, record)
            logger.exception("Failed to start project %s", project_name)
            raise SpawnFailed(f"Failed to start project: {exc}", name=project_name) from exc
        except BaseException:
            self._registry.remove(project_name, record)
            raise
        finally:
            self._spawning -= 1

        record.process = process
        record.pid = process.pid
        record.started_at = datetime.now(UTC)
        command_line = shlex.join([launch_command, *launch_args])
        record.log_buffer.write(LogStream.SYSTEM, f"Started `{command_line}` (pid {process.pid})")
        logger.info("Started project %s with pid %s: %s", project_name, process.pid, command_line)

        observer = asyncio.create_task(
            self._observe(record, process), name=f"minictl-observe-{project_name}"
        )
        self._observers.add(observer)
        observer.add_done_callback(self._observers.discard)

        if self._closing:
            self._terminate_on_shutdown(record, process)
        return record

    async def wait_idle(self, timeout: float | None = None) -> bool:
        """Wait for in-flight spawns and exit observers; return whether all finished."""
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._observers or self._spawning:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False
            if self._spawning:
                remaining = (
                    SPAWN_POLL_SECONDS if remaining is None else min(remaining, SPAWN_POLL_SECONDS)
                )
            if self._observers:
                await asyncio.wait(set(self._observers), timeout=remaining)
            else:
                await asyncio.sleep(remaining if remaining is not None else SPAWN_POLL_SECONDS)
        return True

    def _resolve_launch(
        self, command: str | None, args: Sequence[str] | None
    ) -> tuple[str, tuple[str, ...]]:
        if command is None:
            command = self._settings.default_command
            if args is None:
                args = self._settings.default_args
        if not self._settings.command_allowed(command):
            raise CommandNotAllowed("Command is not allowed", command=command)
        return command, tuple(args or ())

    @staticmethod
    def _terminate_on_shutdown(
        record: RunningProjectRecord, process: asyncio.subprocess.Process
    ) -> None:
        record.status = RunningStatus.STOPPING
        record.log_buffer.write(LogStream.SYSTEM, SHUTDOWN_NOTICE)
        logger.info("Terminating project %s started during shutdown", record.name)
        try:
            process.terminate()
        except ProcessLookupError:
            logger.debug("Project %s (pid %s) already exited", record.name, record.pid)

    async def _observe(
        self,
        record: RunningProjectRecord,
        process: asyncio.subprocess.Process,
    ) -> None:
        readers = [
            asyncio.create_task(self._pump(record, process.stdout, LogStream.STDOUT)),
            asyncio.create_task(self._pump(record, process.stderr, LogStream.STDERR)),
        ]
        try:
            await process.wait()
            await asyncio.wait(readers, timeout=READER_DRAIN_TIMEOUT_SECONDS)
        finally:
            for reader in readers:
                if not reader.done():
                    reader.cancel()
            record.cancel_escalation()
            record.log_buffer.write(LogStream.SYSTEM, describe_exit(process.returncode))
            self._registry.remove(record.name, record)
            logger.info(
                "Project %s (pid %s) finished: %s",
                record.name,
                record.pid,
                describe_exit(process.returncode),
            )

    async def _pump(
        self,
        record: RunningProjectRecord,
        stream: asyncio.StreamReader | None,
        log_stream: LogStream,
    ) -> None:
        if stream is None:
            return
        # Set while discarding the rest of a line longer than the stream limit.
        skipping = False
        while True:
            try:
                line = await stream.readuntil(LINE_SEPARATOR)
            except asyncio.IncompleteReadError as exc:
                if exc.partial and not skipping:
                    self._record_line(record, log_stream, exc.partial)
                return
            except asyncio.LimitOverrunError as exc:
                await stream.readexactly(exc.consumed)
                if not skipping:
                    skipping = True
                    record.log_buffer.write(log_stream, OVERLONG_LINE_NOTICE)
                    self._echo(record.name, OVERLONG_LINE_NOTICE, log_stream)
                continue
            if skipping:
                skipping = False
                continue
            self._record_line(record, log_stream, line)

    def _record_line(
        self, record: RunningProjectRecord, log_stream: LogStream, line: bytes
    ) -> None:
        text = line.decode("utf-8", errors="replace").rstrip("\r\n")
        record.log_buffer.write(log_stream, text)
        self._echo(record.name, text, log_stream)

    def _echo(self, name: str, text: str, log_stream: LogStream) -> None:
        if not self._settings.echo_output:
            return
        target: TextIO = sys.stderr if log_stream is LogStream.STDERR else sys.stdout
        target.write(f"[{name}] {text}\n")
        target.flush()
