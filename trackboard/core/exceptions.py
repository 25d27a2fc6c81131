"""
Platform-wide exception hierarchy.

Services raise these types; the blueprint layer registers one handler per
type (see ``trackboard.blueprints.register_error_handlers``) so every route
answers with the same status code and JSON shape.

Usage:
    from trackboard.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=project_id)
    raise ValidationError("Title is required", details={"title": "required"})
"""


class NotFoundError(Exception):
    """Raised when a referenced entity does not exist.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Work item").
        resource_id: The identity that was looked up. Logged, not returned.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)

    @property
    def public_message(self) -> str:
        return f"{self.resource} not found"


class ValidationError(Exception):
    """Raised when input is malformed or violates a business invariant.

    Duplicate member, removing a project creator, re-setting an existing
    password, missing required fields. Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique value.

    Maps to HTTP 409.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")

    @property
    def public_message(self) -> str:
        return f"{self.resource} with this {self.field} already exists"


class AuthenticationError(Exception):
    """Missing, invalid or expired credentials. Maps to HTTP 401."""


class PermissionDenied(Exception):
    """Authenticated caller lacks the role or membership. Maps to HTTP 403."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)
