"""FastAPI app entrypoint."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from minictl import __version__
from minictl.api.deps import (
    get_project_store,
    get_settings,
    get_supervisor,
    get_termination_coordinator,
)
from minictl.api.routes.common import invalid_request_handler
from minictl.api.routes.projects import router as projects_router
from minictl.core.supervisor import READER_DRAIN_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _resolve(app: FastAPI, provider: Any) -> Any:
    return app.dependency_overrides.get(provider, provider)()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    _resolve(app, get_project_store).ensure_projects_dir()
    yield
    supervisor = _resolve(app, get_supervisor)
    supervisor.close()
    coordinator = _resolve(app, get_termination_coordinator)
    stopped = coordinator.stop_all()
    if stopped:
        logger.info("Waiting for %d project(s) to exit", len(stopped))
    finished = await supervisor.wait_idle(
        timeout=coordinator.grace_seconds + READER_DRAIN_TIMEOUT_SECONDS + 1.0
    )
    if not finished:
        logger.warning("Some project processes did not exit before shutdown")


def create_app() -> FastAPI:
    app = FastAPI(title="Mini Emergent Controller", version=__version__, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, invalid_request_handler)
    app.include_router(projects_router)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, bool | str]:
        settings = _resolve(app, get_settings)
        return {"ok": True, "service": settings.service_name}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Controller listening on http://localhost:%d", settings.port)
    uvicorn.run("minictl.api.app:app", host=settings.host, port=settings.port, reload=False)
