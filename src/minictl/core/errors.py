"""Controller error taxonomy."""

from __future__ import annotations

from typing import TypeAlias

ErrorContextValue: TypeAlias = str | int | None


class ControllerError(Exception):
    """Base class for errors surfaced to API callers."""

    kind = "controller_error"
    status_code = 500

    def __init__(self, message: str, **context: ErrorContextValue) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def as_detail(self) -> dict[str, ErrorContextValue]:
        """Return a transport-friendly error payload."""
        return {"error": self.kind, "message": self.message, **self.context}


class InvalidIdentifier(ControllerError):
    kind = "invalid_identifier"
    status_code = 400


class InvalidArguments(ControllerError):
    kind = "invalid_arguments"
    status_code = 400


class CommandNotAllowed(ControllerError):
    kind = "command_not_allowed"
    status_code = 400


class NotFoundError(ControllerError):
    kind = "not_found"
    status_code = 404


class TemplateNotFound(NotFoundError):
    kind = "template_not_found"


class ProjectDirectoryNotFound(NotFoundError):
    kind = "project_directory_not_found"


class NoManifestFound(NotFoundError):
    """Manifest missing for a package-manager launch; a client mistake, not a lookup miss."""

    kind = "no_manifest_found"
    status_code = 400


class NotRunning(NotFoundError):
    kind = "not_running"


class ConflictError(ControllerError):
    kind = "conflict"
    status_code = 409


class ProjectAlreadyExists(ConflictError):
    kind = "project_already_exists"


class AlreadyRunning(ConflictError):
    kind = "already_running"


class ProjectStarting(ConflictError):
    kind = "project_starting"


class OperationFailed(ControllerError):
    kind = "operation_failed"
    status_code = 500


class CreateFailed(OperationFailed):
    kind = "create_failed"


class SpawnFailed(OperationFailed):
    kind = "spawn_failed"


class SignalFailed(OperationFailed):
    kind = "signal_failed"
