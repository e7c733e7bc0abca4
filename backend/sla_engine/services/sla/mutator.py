"""Single and bulk mutations of SLA configurations.

Bulk calls are best-effort: items run in input order, each one validated and
committed on its own, and a failing item is reported at its position without
rolling back or blocking its siblings.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sla_engine.core.exceptions import (
    DuplicateConfigurationError,
    NotFoundError,
    StoreFailureError,
    ValidationFailedError,
)
from sla_engine.models.sla_configuration import SLAConfiguration
from sla_engine.schemas.sla_configuration import (
    BulkConfigurationItem,
    BulkUpdateItem,
    SLAConfigurationCandidate,
    SLAConfigurationUpdate,
)
from sla_engine.services.sla.results import (
    NOT_FOUND,
    BatchItemError,
    BulkCreateResult,
    BulkDeleteResult,
    BulkToggleResult,
    BulkUpdateResult,
    ValidationIssue,
    ValidationResult,
    duplicate_issue,
)
from sla_engine.services.sla.store import SLAConfigurationStore
from sla_engine.services.sla.validator import SLAConfigurationValidator

logger = logging.getLogger(__name__)


class SLAConfigurationMutator:
    def __init__(self, store: SLAConfigurationStore, validator: SLAConfigurationValidator) -> None:
        self._store = store
        self._validator = validator

    # ===== SINGLE ROW =====

    def get(self, config_id: int) -> SLAConfiguration:
        config = self._store.get(config_id)
        if config is None:
            logger.warning("SLA configuration not found: %s", config_id)
            raise NotFoundError("sla_configuration_not_found", details={"id": config_id})
        return config

    def create(self, candidate: SLAConfigurationCandidate) -> tuple[SLAConfiguration, list[ValidationIssue]]:
        result = self._validator.validate(candidate)
        result.raise_for_errors()

        values = {
            "company_id": candidate.company_id,
            "department_id": candidate.department_id,
            "incident_type_id": candidate.incident_type_id,
            "priority_id": candidate.priority_id,
            "response_time_hours": candidate.response_time_hours,
            "resolution_time_hours": candidate.resolution_time_hours,
            "is_active": candidate.is_active,
        }
        try:
            config = self._store.add(values)
        except DuplicateConfigurationError as exc:
            # lost the race against a concurrent writer after the pre-check passed
            raise _duplicate_failure(result) from exc

        logger.info(
            "SLA configuration created: id=%s company=%s department=%s incident_type=%s priority=%s",
            config.id,
            config.company_id,
            config.department_id,
            config.incident_type_id,
            config.priority_id,
        )
        return config, result.warnings

    def update(self, config_id: int, changes: SLAConfigurationUpdate) -> SLAConfiguration:
        config = self.get(config_id)
        return self._apply_update(config, changes)

    def delete(self, config_id: int) -> None:
        config = self.get(config_id)
        self._store.delete(config)
        logger.info("SLA configuration deleted: %s", config_id)

    # ===== BULK =====

    def bulk_create(
        self,
        company_id: int,
        department_id: int,
        configurations: Iterable[BulkConfigurationItem],
    ) -> BulkCreateResult:
        result = BulkCreateResult()
        for index, item in enumerate(configurations):
            payload = item.model_dump(by_alias=True)
            candidate = SLAConfigurationCandidate(
                company_id=company_id,
                department_id=department_id,
                incident_type_id=item.incident_type_id,
                priority_id=item.priority_id,
                response_time_hours=item.response_time_hours,
                resolution_time_hours=item.resolution_time_hours,
                is_active=item.is_active,
            )
            try:
                config, _ = self.create(candidate)
            except ValidationFailedError as exc:
                result.errors.append(BatchItemError.from_validation(index, payload, exc))
            except StoreFailureError as exc:
                result.errors.append(_store_failure_item(index, payload, exc))
            else:
                result.created.append(config)

        logger.info(
            "SLA bulk create: company=%s department=%s created=%s failed=%s",
            company_id,
            department_id,
            len(result.created),
            len(result.errors),
        )
        return result

    def bulk_update(
        self,
        company_id: int,
        department_id: int,
        updates: Iterable[BulkUpdateItem],
    ) -> BulkUpdateResult:
        result = BulkUpdateResult()
        for index, item in enumerate(updates):
            payload = item.model_dump(by_alias=True, exclude_unset=True)
            payload["id"] = item.id
            config = self._store.get(item.id)
            if config is None or config.company_id != company_id or config.department_id != department_id:
                logger.warning(
                    "SLA bulk update skipped id=%s (not in company=%s department=%s)",
                    item.id,
                    company_id,
                    department_id,
                )
                result.errors.append(
                    BatchItemError(index=index, item=payload, code=NOT_FOUND, message="sla_configuration_not_found")
                )
                continue
            try:
                result.updated.append(self._apply_update(config, item))
            except ValidationFailedError as exc:
                result.errors.append(BatchItemError.from_validation(index, payload, exc))
            except StoreFailureError as exc:
                result.errors.append(_store_failure_item(index, payload, exc))

        logger.info(
            "SLA bulk update: company=%s department=%s updated=%s failed=%s",
            company_id,
            department_id,
            len(result.updated),
            len(result.errors),
        )
        return result

    def bulk_delete(self, config_ids: list[int]) -> BulkDeleteResult:
        deleted = self._store.delete_many(config_ids) if config_ids else 0
        result = BulkDeleteResult(deleted_count=deleted, requested_count=len(config_ids))
        if result.is_partial:
            logger.warning("SLA bulk delete partial: deleted=%s requested=%s", deleted, len(config_ids))
        else:
            logger.info("SLA bulk delete: deleted=%s", deleted)
        return result

    def bulk_toggle_active(self, config_ids: list[int], is_active: bool) -> BulkToggleResult:
        result = BulkToggleResult()
        for index, config_id in enumerate(config_ids):
            payload = {"id": config_id, "isActive": is_active}
            config = self._store.get(config_id)
            if config is None:
                result.errors.append(
                    BatchItemError(index=index, item=payload, code=NOT_FOUND, message="sla_configuration_not_found")
                )
                continue
            try:
                result.updated.append(self._apply_update(config, SLAConfigurationUpdate(is_active=is_active)))
            except ValidationFailedError as exc:
                result.errors.append(BatchItemError.from_validation(index, payload, exc))
            except StoreFailureError as exc:
                result.errors.append(_store_failure_item(index, payload, exc))

        logger.info(
            "SLA bulk toggle: is_active=%s updated=%s failed=%s",
            is_active,
            len(result.updated),
            len(result.errors),
        )
        return result

    # ===== HELPERS =====

    def _apply_update(self, config: SLAConfiguration, changes: SLAConfigurationUpdate) -> SLAConfiguration:
        fields: dict[str, Any] = {
            name: value
            for name, value in changes.model_dump(
                include={"response_time_hours", "resolution_time_hours", "is_active"},
                exclude_unset=True,
            ).items()
            if value is not None
        }

        response = fields.get("response_time_hours", config.response_time_hours)
        resolution = fields.get("resolution_time_hours", config.resolution_time_hours)
        check = ValidationResult()
        check.errors, check.warnings = self._validator.check_thresholds(response, resolution)

        activating = fields.get("is_active") is True and not config.is_active
        if activating and self._validator.is_scope_taken(
            config.company_id,
            config.department_id,
            config.incident_type_id,
            config.priority_id,
            exclude_id=config.id,
        ):
            check.errors.append(duplicate_issue())
        check.raise_for_errors()

        try:
            updated = self._store.update(config, fields)
        except DuplicateConfigurationError as exc:
            raise _duplicate_failure(check) from exc
        logger.info("SLA configuration updated: id=%s fields=%s", config.id, sorted(fields))
        return updated


def _duplicate_failure(result: ValidationResult) -> ValidationFailedError:
    return ValidationFailedError(
        [duplicate_issue().to_dict()],
        warnings=[issue.to_dict() for issue in result.warnings],
    )


def _store_failure_item(index: int, payload: dict[str, Any], exc: StoreFailureError) -> BatchItemError:
    return BatchItemError(index=index, item=payload, code=str(exc.error_code), message=exc.message)
