"""Domain error taxonomy shared by services and the HTTP layer."""

from typing import Any


class DomainError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    code: str = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class ValidationError(DomainError):
    """
    Malformed or missing input.

    Always carries every violated field so callers can show all problems at once.
    """

    status_code = 422
    code = "validation_error"

    def __init__(self, errors: list[dict[str, str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    @property
    def fields(self) -> list[str]:
        return [error["field"] for error in self.errors]

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, "errors": self.errors}


class AuthorizationError(DomainError):
    """Caller's role or ownership does not permit the operation."""

    status_code = 403
    code = "access_denied"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(DomainError):
    """Referenced entity id does not resolve."""

    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id: str | None = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(DomainError):
    """Requested transition is illegal from the entity's current state."""

    status_code = 400
    code = "invalid_state"


class ConflictError(DomainError):
    """A concurrent transition won the race for the same entity."""

    status_code = 409
    code = "conflict"


class NotificationError(Exception):
    """Outbound email/SMS delivery failed. Never surfaced to API callers."""

    pass
