"""Value objects returned by the SLA configuration engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sla_engine.core.exceptions import ReferentialViolationError, ValidationFailedError
from sla_engine.models.sla_configuration import SLAConfiguration

REQUIRED_FIELD = "REQUIRED_FIELD"
INVALID_VALUE = "INVALID_VALUE"
BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
REFERENTIAL_VIOLATION = "REFERENTIAL_VIOLATION"
DUPLICATE_CONFIGURATION = "DUPLICATE_CONFIGURATION"
NOT_FOUND = "NOT_FOUND"
COVERAGE_GAP = "COVERAGE_GAP"
ATYPICAL_THRESHOLD = "ATYPICAL_THRESHOLD"


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


def duplicate_issue() -> ValidationIssue:
    return ValidationIssue("configuration", "configuration_already_exists", DUPLICATE_CONFIGURATION)


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise the matching validation exception when any blocking error was found."""
        if self.is_valid:
            return
        errors = [issue.to_dict() for issue in self.errors]
        warnings = [issue.to_dict() for issue in self.warnings]
        if all(issue.code == REFERENTIAL_VIOLATION for issue in self.errors):
            raise ReferentialViolationError(errors, warnings=warnings)
        raise ValidationFailedError(errors, warnings=warnings)


@dataclass(frozen=True)
class BatchItemError:
    """One failed item of a best-effort batch, reported at its input position."""

    index: int
    item: dict[str, Any]
    code: str
    message: str
    errors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_validation(cls, index: int, item: dict[str, Any], exc: ValidationFailedError) -> BatchItemError:
        codes = {str(error.get("code")) for error in exc.errors}
        code = codes.pop() if len(codes) == 1 else str(exc.error_code)
        return cls(index=index, item=item, code=code, message=exc.message, errors=list(exc.errors))


@dataclass
class BulkCreateResult:
    created: list[SLAConfiguration] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)


@dataclass
class BulkUpdateResult:
    updated: list[SLAConfiguration] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)


@dataclass(frozen=True)
class BulkDeleteResult:
    deleted_count: int
    requested_count: int

    @property
    def is_partial(self) -> bool:
        return self.deleted_count < self.requested_count


@dataclass
class CopyResult:
    copied: list[SLAConfiguration] = field(default_factory=list)
    skipped: int = 0
    errors: list[BatchItemError] = field(default_factory=list)


@dataclass(frozen=True)
class EffectiveSLA:
    response_time_hours: float
    resolution_time_hours: float
    source: str
    configuration_id: int


@dataclass(frozen=True)
class CsvLineSuccess:
    line: int
    id: int
    message: str = "configuration_created"


@dataclass(frozen=True)
class CsvLineIssue:
    line: int
    message: str
    errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class CsvImportResult:
    processed: int = 0
    success: list[CsvLineSuccess] = field(default_factory=list)
    errors: list[CsvLineIssue] = field(default_factory=list)
    duplicates: list[CsvLineIssue] = field(default_factory=list)


# toggling reports the same shape as a bulk update
BulkToggleResult = BulkUpdateResult
