"""Project API schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateProjectRequest(BaseModel):
    """Payload for creating a project from a template."""

    name: str
    template: str | None = None


class StartProjectRequest(BaseModel):
    """Payload for launching a project process."""

    name: str
    command: str | None = Field(default=None, min_length=1)
    args: list[str] | None = None


class StopProjectRequest(BaseModel):
    """Payload for stopping a running project."""

    name: str
