"""Clone the active SLA rules of one department onto another of the same company."""

from __future__ import annotations

import logging
from typing import Any

from sla_engine.core.exceptions import (
    BadRequestError,
    DuplicateConfigurationError,
    NotFoundError,
    ReferentialViolationError,
    StoreFailureError,
    ValidationFailedError,
)
from sla_engine.models.sla_configuration import SLAConfiguration
from sla_engine.schemas.sla_configuration import SLAConfigurationCandidate
from sla_engine.services.sla.results import (
    BatchItemError,
    CopyResult,
    ValidationResult,
    duplicate_issue,
)
from sla_engine.services.sla.store import SLAConfigurationFilters, SLAConfigurationStore
from sla_engine.services.sla.validator import SLAConfigurationValidator

logger = logging.getLogger(__name__)


class SLAConfigurationCopier:
    def __init__(self, store: SLAConfigurationStore, validator: SLAConfigurationValidator) -> None:
        self._store = store
        self._validator = validator

    def copy(
        self,
        from_department_id: int,
        to_department_id: int,
        company_id: int,
        overwrite_existing: bool = False,
    ) -> CopyResult:
        """Copy every active source row to ``to_department_id``.

        A target tuple that is already occupied (active or not) is skipped, or
        has its thresholds overwritten in place when ``overwrite_existing`` is
        set. Failures of individual rows are reported without stopping the copy.
        """
        if from_department_id == to_department_id:
            raise BadRequestError(
                "source_and_target_departments_must_differ",
                details={"department_id": from_department_id},
            )

        department_issues = self._validator.referential_issues(
            company_id, department_id=from_department_id
        ) + self._validator.referential_issues(company_id, department_id=to_department_id)
        if department_issues:
            raise ReferentialViolationError([issue.to_dict() for issue in department_issues])

        sources = self._store.list(
            SLAConfigurationFilters(company_id=company_id, department_id=from_department_id, is_active=True)
        )
        if not sources:
            raise NotFoundError(
                "source_department_has_no_configurations",
                details={"department_id": from_department_id},
            )

        result = CopyResult()
        for index, source in enumerate(sources):
            payload = _source_payload(source)
            existing = self._store.find_by_scope(
                company_id,
                to_department_id,
                source.incident_type_id,
                source.priority_id,
            )
            try:
                if existing and not overwrite_existing:
                    result.skipped += 1
                    continue
                if existing:
                    result.copied.append(self._overwrite(existing[0], source))
                else:
                    result.copied.append(self._clone(source, to_department_id))
            except ValidationFailedError as exc:
                result.errors.append(BatchItemError.from_validation(index, payload, exc))
            except StoreFailureError as exc:
                result.errors.append(
                    BatchItemError(index=index, item=payload, code=str(exc.error_code), message=exc.message)
                )

        logger.info(
            "SLA copy: company=%s from=%s to=%s copied=%s skipped=%s failed=%s overwrite=%s",
            company_id,
            from_department_id,
            to_department_id,
            len(result.copied),
            result.skipped,
            len(result.errors),
            overwrite_existing,
        )
        return result

    def _clone(self, source: SLAConfiguration, to_department_id: int) -> SLAConfiguration:
        candidate = SLAConfigurationCandidate(
            company_id=source.company_id,
            department_id=to_department_id,
            incident_type_id=source.incident_type_id,
            priority_id=source.priority_id,
            response_time_hours=source.response_time_hours,
            resolution_time_hours=source.resolution_time_hours,
            is_active=source.is_active,
        )
        check = self._validator.validate(candidate)
        check.raise_for_errors()
        try:
            return self._store.add(candidate.model_dump())
        except DuplicateConfigurationError as exc:
            raise ValidationFailedError([duplicate_issue().to_dict()]) from exc

    def _overwrite(self, target: SLAConfiguration, source: SLAConfiguration) -> SLAConfiguration:
        check = ValidationResult()
        check.errors, check.warnings = self._validator.check_thresholds(
            source.response_time_hours, source.resolution_time_hours
        )
        check.errors.extend(
            self._validator.referential_issues(
                target.company_id,
                department_id=target.department_id,
                incident_type_id=target.incident_type_id,
                priority_id=target.priority_id,
            )
        )
        check.raise_for_errors()
        return self._store.update(
            target,
            {
                "response_time_hours": source.response_time_hours,
                "resolution_time_hours": source.resolution_time_hours,
            },
        )


def _source_payload(source: SLAConfiguration) -> dict[str, Any]:
    return {
        "id": source.id,
        "incidentTypeId": source.incident_type_id,
        "priorityId": source.priority_id,
        "responseTimeHours": source.response_time_hours,
        "resolutionTimeHours": source.resolution_time_hours,
    }
