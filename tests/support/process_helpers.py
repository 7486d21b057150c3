from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from minictl.config import ControllerSettings
from minictl.core.project_store import ProjectStore
from minictl.core.registry import ProcessRegistry, RunningProjectRecord
from minictl.core.supervisor import ProcessSupervisor
from minictl.core.termination import TerminationCoordinator

PYTHON = sys.executable
IGNORE_SIGTERM_SCRIPT = (
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(30)\n"
)
SLEEP_SCRIPT = "import time\nprint('ready', flush=True)\ntime.sleep(30)\n"


def make_settings(tmp_path: Path, **overrides: object) -> ControllerSettings:
    values: dict[str, object] = {
        "root_dir": tmp_path,
        "allowed_commands": ("*",),
        "echo_output": False,
        "stop_grace_seconds": 5.0,
    }
    values.update(overrides)
    return ControllerSettings.model_validate(values)


def make_controller(
    tmp_path: Path, **overrides: object
) -> tuple[ProjectStore, ProcessRegistry, ProcessSupervisor, TerminationCoordinator]:
    settings = make_settings(tmp_path, **overrides)
    store = ProjectStore(settings.resolved_projects_dir, settings.resolved_templates_dir)
    store.ensure_projects_dir()
    registry = ProcessRegistry()
    supervisor = ProcessSupervisor(store, registry, settings)
    coordinator = TerminationCoordinator(registry, grace_seconds=settings.stop_grace_seconds)
    return store, registry, supervisor, coordinator


def make_project(store: ProjectStore, name: str = "demo") -> Path:
    path = store.resolve_project_path(name)
    path.mkdir(parents=True, exist_ok=True)
    return path


def log_texts(record: RunningProjectRecord) -> list[str]:
    return [entry.text for entry in record.log_buffer.tail()]


async def wait_for_log(record: RunningProjectRecord, text: str, timeout: float = 10.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while text not in log_texts(record):
        if loop.time() > deadline:
            msg = f"log line {text!r} not seen; got {log_texts(record)!r}"
            raise AssertionError(msg)
        await asyncio.sleep(0.01)
