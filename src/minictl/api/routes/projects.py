"""Project routes."""

from __future__ import annotations

from typing import Any, TypeAlias

from fastapi import APIRouter, Depends, Query

from minictl.api.deps import (
    get_project_store,
    get_registry,
    get_settings,
    get_supervisor,
    get_termination_coordinator,
)
from minictl.api.routes.common import as_http_exception
from minictl.api.schemas.projects import (
    CreateProjectRequest,
    StartProjectRequest,
    StopProjectRequest,
)
from minictl.config import ControllerSettings
from minictl.core.errors import ControllerError
from minictl.core.project_store import ProjectStore
from minictl.core.registry import ProcessRegistry
from minictl.core.supervisor import ProcessSupervisor
from minictl.core.termination import TerminationCoordinator
from minictl.models.project import validate_identifier

ProjectSummary: TypeAlias = dict[str, str | bool]

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(
    store: ProjectStore = Depends(get_project_store),
    registry: ProcessRegistry = Depends(get_registry),
) -> dict[str, Any]:
    projects: list[ProjectSummary] = [
        {
            "name": name,
            "projectPath": str(store.resolve_project_path(name)),
            "running": registry.is_running(name),
        }
        for name in store.list_projects()
    ]
    return {"ok": True, "count": len(projects), "projects": projects}


@router.post("/create")
async def create_project(
    request: CreateProjectRequest,
    store: ProjectStore = Depends(get_project_store),
    settings: ControllerSettings = Depends(get_settings),
) -> dict[str, Any]:
    template = request.template if request.template is not None else settings.default_template
    try:
        project_path = await store.create_project(request.name, template)
    except ControllerError as exc:
        raise as_http_exception(exc) from exc
    return {
        "ok": True,
        "message": "Project created",
        "name": project_path.name,
        "template": template,
        "projectPath": str(project_path),
    }


@router.post("/start")
async def start_project(
    request: StartProjectRequest,
    supervisor: ProcessSupervisor = Depends(get_supervisor),
) -> dict[str, Any]:
    try:
        record = await supervisor.start_process(request.name, request.command, request.args)
    except ControllerError as exc:
        raise as_http_exception(exc) from exc
    return {"ok": True, "message": "Project started", **record.as_payload()}


@router.post("/stop")
async def stop_project(
    request: StopProjectRequest,
    coordinator: TerminationCoordinator = Depends(get_termination_coordinator),
) -> dict[str, Any]:
    try:
        record = coordinator.stop(request.name)
    except ControllerError as exc:
        raise as_http_exception(exc) from exc
    return {"ok": True, "message": "Stop signal sent", "name": record.name, "pid": record.pid}


@router.get("/running")
async def list_running(registry: ProcessRegistry = Depends(get_registry)) -> dict[str, Any]:
    projects = [record.as_payload() for record in registry.list_all()]
    return {"ok": True, "count": len(projects), "projects": projects}


@router.get("/{name}/logs")
async def project_logs(
    name: str,
    limit: int | None = Query(default=None, ge=1),
    registry: ProcessRegistry = Depends(get_registry),
    settings: ControllerSettings = Depends(get_settings),
) -> dict[str, Any]:
    try:
        record = registry.get(validate_identifier(name))
    except ControllerError as exc:
        raise as_http_exception(exc) from exc
    requested = limit if limit is not None else settings.default_log_limit
    buffer = record.log_buffer
    logs = [entry.as_payload() for entry in buffer.tail(min(requested, buffer.capacity))]
    return {
        "ok": True,
        "name": record.name,
        "count": len(logs),
        "total": buffer.total_written,
        "logs": logs,
    }
