"""Structural, referential and uniqueness checks for SLA configuration candidates."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sla_engine.core.config import Settings
from sla_engine.schemas.sla_configuration import SLAConfigurationCandidate
from sla_engine.services.sla.results import (
    ATYPICAL_THRESHOLD,
    BUSINESS_RULE_VIOLATION,
    COVERAGE_GAP,
    INVALID_VALUE,
    REFERENTIAL_VIOLATION,
    REQUIRED_FIELD,
    ValidationIssue,
    ValidationResult,
    duplicate_issue,
)
from sla_engine.services.sla.store import SLAConfigurationStore

logger = logging.getLogger(__name__)

_REQUIRED_SCOPE_FIELDS = (
    ("company_id", "companyId"),
    ("department_id", "departmentId"),
    ("incident_type_id", "incidentTypeId"),
)


@dataclass(frozen=True)
class ThresholdLimits:
    min_response_hours: float = 1.0
    min_resolution_hours: float = 2.0
    max_response_hours: float = 168.0
    max_resolution_hours: float = 720.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ThresholdLimits:
        return cls(
            min_response_hours=settings.SLA_MIN_TYPICAL_RESPONSE_HOURS,
            min_resolution_hours=settings.SLA_MIN_TYPICAL_RESOLUTION_HOURS,
            max_response_hours=settings.SLA_MAX_TYPICAL_RESPONSE_HOURS,
            max_resolution_hours=settings.SLA_MAX_TYPICAL_RESOLUTION_HOURS,
        )


class SLAConfigurationValidator:
    """Checks a candidate before any mutation happens.

    Errors block the operation; warnings (coverage gaps, unusual thresholds)
    are returned alongside a successful result. Only store reads are issued.
    """

    def __init__(self, store: SLAConfigurationStore, limits: ThresholdLimits | None = None) -> None:
        self._store = store
        self._limits = limits or ThresholdLimits()

    def validate(self, candidate: SLAConfigurationCandidate, *, exclude_id: int | None = None) -> ValidationResult:
        result = ValidationResult()

        for attr, field_name in _REQUIRED_SCOPE_FIELDS:
            if not getattr(candidate, attr):
                result.errors.append(ValidationIssue(field_name, f"{field_name}_required", REQUIRED_FIELD))

        errors, warnings = self.check_thresholds(candidate.response_time_hours, candidate.resolution_time_hours)
        result.errors.extend(errors)
        result.warnings.extend(warnings)

        if candidate.company_id:
            result.errors.extend(
                self.referential_issues(
                    candidate.company_id,
                    department_id=candidate.department_id,
                    incident_type_id=candidate.incident_type_id,
                    priority_id=candidate.priority_id,
                )
            )

        if candidate.company_id and candidate.department_id and candidate.incident_type_id:
            if candidate.is_active and self.is_scope_taken(
                candidate.company_id,
                candidate.department_id,
                candidate.incident_type_id,
                candidate.priority_id,
                exclude_id=exclude_id,
            ):
                result.errors.append(duplicate_issue())
            if candidate.priority_id is not None and not self._store.find_by_scope(
                candidate.company_id,
                candidate.department_id,
                candidate.incident_type_id,
                None,
                active_only=True,
            ):
                result.warnings.append(ValidationIssue("priorityId", "no_wildcard_default_for_scope", COVERAGE_GAP))

        if not result.is_valid:
            logger.info(
                "SLA configuration rejected: %s",
                ", ".join(f"{issue.field}:{issue.code}" for issue in result.errors),
            )
        return result

    def check_thresholds(
        self,
        response_time_hours: float | None,
        resolution_time_hours: float | None,
    ) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for value, field_name in (
            (response_time_hours, "responseTimeHours"),
            (resolution_time_hours, "resolutionTimeHours"),
        ):
            if value is None:
                errors.append(ValidationIssue(field_name, f"{field_name}_required", REQUIRED_FIELD))
            elif not math.isfinite(value):
                errors.append(ValidationIssue(field_name, f"{field_name}_must_be_finite", INVALID_VALUE))
            elif value <= 0:
                errors.append(ValidationIssue(field_name, f"{field_name}_must_be_positive", INVALID_VALUE))

        if errors:
            return errors, warnings

        if response_time_hours > resolution_time_hours:
            errors.append(
                ValidationIssue(
                    "responseTimeHours",
                    "response_time_exceeds_resolution_time",
                    BUSINESS_RULE_VIOLATION,
                )
            )

        limits = self._limits
        if response_time_hours < limits.min_response_hours:
            warnings.append(ValidationIssue("responseTimeHours", "response_time_below_typical_range", ATYPICAL_THRESHOLD))
        elif response_time_hours > limits.max_response_hours:
            warnings.append(ValidationIssue("responseTimeHours", "response_time_above_typical_range", ATYPICAL_THRESHOLD))
        if resolution_time_hours < limits.min_resolution_hours:
            warnings.append(
                ValidationIssue("resolutionTimeHours", "resolution_time_below_typical_range", ATYPICAL_THRESHOLD)
            )
        elif resolution_time_hours > limits.max_resolution_hours:
            warnings.append(
                ValidationIssue("resolutionTimeHours", "resolution_time_above_typical_range", ATYPICAL_THRESHOLD)
            )
        return errors, warnings

    def referential_issues(
        self,
        company_id: int,
        *,
        department_id: int | None = None,
        incident_type_id: int | None = None,
        priority_id: int | None = None,
    ) -> list[ValidationIssue]:
        """Every referenced entity must exist and belong to ``company_id``.

        Priorities are defined per department, so a priority must also belong
        to ``department_id`` when one is given.
        """
        issues: list[ValidationIssue] = []
        checks = (
            (department_id, "departmentId", "department", self._store.department_company_id),
            (incident_type_id, "incidentTypeId", "incident_type", self._store.incident_type_company_id),
        )
        for entity_id, field_name, label, owner_of in checks:
            if not entity_id:
                continue
            owner = owner_of(entity_id)
            if owner is None:
                issues.append(ValidationIssue(field_name, f"{label}_not_found", REFERENTIAL_VIOLATION))
            elif owner != company_id:
                issues.append(ValidationIssue(field_name, f"{label}_not_in_company", REFERENTIAL_VIOLATION))

        if priority_id is not None:
            scope = self._store.priority_scope(priority_id)
            if scope is None:
                issues.append(ValidationIssue("priorityId", "priority_not_found", REFERENTIAL_VIOLATION))
            elif scope[0] != company_id:
                issues.append(ValidationIssue("priorityId", "priority_not_in_company", REFERENTIAL_VIOLATION))
            elif department_id and scope[1] != department_id:
                issues.append(ValidationIssue("priorityId", "priority_not_in_department", REFERENTIAL_VIOLATION))
        return issues

    def is_scope_taken(
        self,
        company_id: int,
        department_id: int,
        incident_type_id: int,
        priority_id: int | None,
        *,
        exclude_id: int | None = None,
    ) -> bool:
        return bool(
            self._store.find_by_scope(
                company_id,
                department_id,
                incident_type_id,
                priority_id,
                active_only=True,
                exclude_id=exclude_id,
            )
        )
