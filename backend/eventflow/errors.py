"""Workflow error taxonomy.

Every error carries a user-facing message and the HTTP status the API layer
renders it with. Services raise these; SQLAlchemy errors are wrapped in
StoreError before leaving the service layer.
"""
from typing import Optional


class WorkflowError(Exception):
    status_code = 400

    def __init__(self, message: str, field_errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}


class ValidationError(WorkflowError):
    """Malformed or missing input; rejected before any write."""

    status_code = 422


class PermissionDeniedError(WorkflowError):
    """Actor lacks the role or ownership for the requested operation."""

    status_code = 403


class PreconditionError(WorkflowError):
    """Current status does not permit the requested transition."""

    status_code = 409


class NotFoundError(WorkflowError):
    status_code = 404


class StoreError(WorkflowError):
    """The backing store rejected a read or write."""

    status_code = 503


class CompensationError(WorkflowError):
    """Undoing a partially applied sequence failed; manual investigation needed."""

    status_code = 500
