"""
Failure classification for the inventory migration.

Only fatal conditions are exceptions:
- ValidationFailed: a migrated session did not pass validation (rolled back)
- BatchMigrationFailed: summary raised after a full batch pass

Malformed legacy entries and catalog misses are recorded as values
(ParseWarning, ResolutionMiss) and never raised.

Persistence failures are sqlalchemy.exc.SQLAlchemyError and propagate unchanged.
"""

from enum import Enum

from pydantic import BaseModel, Field

from zombitrack.models.inventory import BatchMigrationReport


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Constraint violations
    VALIDATION_FAILED = "validation_failed"
    PARTIAL_FAILURE = "partial_failure"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"

    UNKNOWN = "unknown"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    errors: list[str] = Field(
        default_factory=list,
        description="Every violated rule, when more than one applies",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the operator",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable failure description."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class MigrationError(KnownError):
    """Base class for inventory migration failures."""


class ValidationFailed(MigrationError):
    """
    Raised when a migrated session fails post-migration validation.

    The session has already been rolled back when this is raised; its
    legacy inventory strings remain the source of truth.
    """

    def __init__(self, errors: list[str], session_id: str | None = None):
        self.errors = list(errors)
        self.session_id = session_id
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message="Migration validation failed:\n" + "\n".join(self.errors),
            detail=f"session={session_id}" if session_id else None,
            suggestion="Inspect the legacy inventory strings and the weapon catalog.",
            status_code=422,
        )

    def to_detail(self) -> FailureDetail:
        detail = super().to_detail()
        detail.errors = list(self.errors)
        return detail


class BatchMigrationFailed(MigrationError):
    """
    Raised after a batch pass in which at least one session failed.

    Every session has been attempted by the time this is raised.
    """

    def __init__(
        self,
        failed_count: int,
        failed_session_ids: list[str] | None = None,
        report: BatchMigrationReport | None = None,
    ):
        self.failed_count = failed_count
        self.failed_session_ids = list(failed_session_ids or [])
        self.report = report
        super().__init__(
            kind=FailureKind.PARTIAL_FAILURE,
            message=f"Batch migration failed: {failed_count} sessions failed",
            detail=", ".join(self.failed_session_ids) or None,
            suggestion="Re-run the migration for the failed sessions after fixing their data.",
            status_code=409,
        )
