"""Shared API dependency providers."""

from __future__ import annotations

from minictl.config import ControllerSettings
from minictl.core.project_store import ProjectStore
from minictl.core.registry import ProcessRegistry
from minictl.core.supervisor import ProcessSupervisor
from minictl.core.termination import TerminationCoordinator

_SETTINGS = ControllerSettings.from_env()
_PROJECT_STORE = ProjectStore(
    projects_dir=_SETTINGS.resolved_projects_dir,
    templates_dir=_SETTINGS.resolved_templates_dir,
)
_REGISTRY = ProcessRegistry()
_SUPERVISOR = ProcessSupervisor(_PROJECT_STORE, _REGISTRY, _SETTINGS)
_TERMINATION = TerminationCoordinator(_REGISTRY, grace_seconds=_SETTINGS.stop_grace_seconds)


def get_settings() -> ControllerSettings:
    return _SETTINGS


def get_project_store() -> ProjectStore:
    return _PROJECT_STORE


def get_registry() -> ProcessRegistry:
    return _REGISTRY


def get_supervisor() -> ProcessSupervisor:
    return _SUPERVISOR


def get_termination_coordinator() -> TerminationCoordinator:
    return _TERMINATION
