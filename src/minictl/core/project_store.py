"""Project directories and template materialization."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Iterator
from pathlib import Path

from minictl.core.errors import CreateFailed, ProjectAlreadyExists, TemplateNotFound
from minictl.models.project import validate_identifier

logger = logging.getLogger(__name__)


class ProjectStore:
    """Resolve, list and create project directories on disk."""

    def __init__(self, projects_dir: Path, templates_dir: Path) -> None:
        self._projects_dir = projects_dir
        self._templates_dir = templates_dir

    @property
    def projects_dir(self) -> Path:
        return self._projects_dir

    @property
    def templates_dir(self) -> Path:
        return self._templates_dir

    def ensure_projects_dir(self) -> None:
        self._projects_dir.mkdir(parents=True, exist_ok=True)

    def resolve_project_path(self, name: str) -> Path:
        return self._projects_dir / validate_identifier(name)

    def resolve_template_path(self, template: str) -> Path:
        return self._templates_dir / validate_identifier(template, label="template name")

    def list_projects(self) -> Iterator[str]:
        """Yield project directory names, rescanning the disk on every call."""
        if not self._projects_dir.is_dir():
            return
        for entry in sorted(self._projects_dir.iterdir()):
            if entry.is_dir():
                yield entry.name

    async def create_project(self, name: str, template: str) -> Path:
        project_path = self.resolve_project_path(name)
        template_path = self.resolve_template_path(template)

        if not template_path.is_dir():
            raise TemplateNotFound("Template not found", template=template_path.name)
        if project_path.exists():
            raise ProjectAlreadyExists("Project already exists", name=project_path.name)

        try:
            await asyncio.to_thread(shutil.copytree, template_path, project_path)
        except FileExistsError as exc:
            raise ProjectAlreadyExists(
                "Project already exists", name=project_path.name
            ) from exc
        except OSError as exc:
            logger.exception("Failed to create project %s from %s", project_path.name, template_path)
            raise CreateFailed(
                f"Failed to create project: {exc}", name=project_path.name
            ) from exc

        logger.info("Created project %s from template %s", project_path.name, template_path.name)
        return project_path
