"""Controller settings."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

ENV_PREFIX = "MINICTL_"
ANY_COMMAND = "*"


def _env(name: str) -> str | None:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _split(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


class ControllerSettings(BaseModel):
    """Runtime configuration for the controller."""

    root_dir: Path = Field(default_factory=Path.cwd)
    projects_dir: Path | None = None
    templates_dir: Path | None = None
    host: str = "0.0.0.0"
    port: int = 7000
    log_capacity: int = Field(default=500, ge=1)
    default_log_limit: int = Field(default=200, ge=1)
    stop_grace_seconds: float = Field(default=5.0, gt=0)
    default_template: str = "basic-app"
    default_command: str = "npm"
    default_args: tuple[str, ...] = ("start",)
    manifest_name: str = "package.json"
    package_manager_commands: tuple[str, ...] = ("npm",)
    allowed_commands: tuple[str, ...] = ("npm", "node")
    echo_output: bool = True
    log_level: str = "INFO"
    service_name: str = "mini-emergent-controller"

    @property
    def resolved_projects_dir(self) -> Path:
        return self.projects_dir if self.projects_dir is not None else self.root_dir / "projects"

    @property
    def resolved_templates_dir(self) -> Path:
        return (
            self.templates_dir if self.templates_dir is not None else self.root_dir / "templates"
        )

    def command_allowed(self, command: str) -> bool:
        """Return whether ``command`` may be launched for a project.

        Commands are matched by basename, so ``/usr/bin/npm`` is allowed when
        ``npm`` is.
        """
        if ANY_COMMAND in self.allowed_commands:
            return True
        return Path(command).name in self.allowed_commands

    def is_package_manager(self, command: str) -> bool:
        return Path(command).name in self.package_manager_commands

    @classmethod
    def from_env(cls) -> ControllerSettings:
        """Build settings from ``MINICTL_*`` environment variables."""
        values: dict[str, object] = {}
        for field_name in ("root_dir", "projects_dir", "templates_dir"):
            raw = _env(field_name.upper())
            if raw is not None:
                values[field_name] = Path(raw).expanduser()
        for field_name in (
            "host",
            "port",
            "log_capacity",
            "default_log_limit",
            "stop_grace_seconds",
            "default_template",
            "default_command",
            "manifest_name",
            "log_level",
            "service_name",
        ):
            raw = _env(field_name.upper())
            if raw is not None:
                values[field_name] = raw
        for field_name in ("default_args", "package_manager_commands", "allowed_commands"):
            raw = _env(field_name.upper())
            if raw is not None:
                values[field_name] = _split(raw)
        echo = _env("ECHO_OUTPUT")
        if echo is not None:
            values["echo_output"] = echo.lower() in {"1", "true", "yes", "on"}
        return cls.model_validate(values)
