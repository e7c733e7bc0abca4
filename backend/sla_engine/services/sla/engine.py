"""Facade wiring the validator, resolver, mutator, copier and CSV importer over one store."""

from __future__ import annotations

from typing import Iterable

from sla_engine.models.sla_configuration import SLAConfiguration
from sla_engine.schemas.sla_configuration import (
    BulkConfigurationItem,
    BulkUpdateItem,
    SLAConfigurationCandidate,
    SLAConfigurationUpdate,
)
from sla_engine.services.sla.copier import SLAConfigurationCopier
from sla_engine.services.sla.csv_import import SLAConfigurationCsvImporter
from sla_engine.services.sla.mutator import SLAConfigurationMutator
from sla_engine.services.sla.resolver import SLAConfigurationResolver
from sla_engine.services.sla.results import (
    BulkCreateResult,
    BulkDeleteResult,
    BulkToggleResult,
    BulkUpdateResult,
    CopyResult,
    CsvImportResult,
    EffectiveSLA,
    ValidationIssue,
    ValidationResult,
)
from sla_engine.services.sla.store import SLAConfigurationFilters, SLAConfigurationStore
from sla_engine.services.sla.validator import SLAConfigurationValidator, ThresholdLimits


class SLAConfigurationEngine:
    """Entry point for every SLA configuration operation.

    Holds no state of its own; a new instance per request over a
    request-scoped store is the expected usage.
    """

    def __init__(
        self,
        store: SLAConfigurationStore,
        *,
        limits: ThresholdLimits | None = None,
        csv_max_rows: int = 2000,
    ) -> None:
        self.store = store
        self.validator = SLAConfigurationValidator(store, limits)
        self.resolver = SLAConfigurationResolver(store)
        self.mutator = SLAConfigurationMutator(store, self.validator)
        self.copier = SLAConfigurationCopier(store, self.validator)
        self.csv_importer = SLAConfigurationCsvImporter(self.mutator, max_rows=csv_max_rows)

    def validate(self, candidate: SLAConfigurationCandidate, *, exclude_id: int | None = None) -> ValidationResult:
        return self.validator.validate(candidate, exclude_id=exclude_id)

    def resolve(self, filters: SLAConfigurationFilters) -> list[SLAConfiguration]:
        return self.resolver.resolve(filters)

    def resolve_effective(
        self,
        company_id: int,
        department_id: int,
        incident_type_id: int,
        priority_id: int | None = None,
    ) -> EffectiveSLA | None:
        return self.resolver.resolve_effective(company_id, department_id, incident_type_id, priority_id)

    def get(self, config_id: int) -> SLAConfiguration:
        return self.mutator.get(config_id)

    def create(self, candidate: SLAConfigurationCandidate) -> tuple[SLAConfiguration, list[ValidationIssue]]:
        return self.mutator.create(candidate)

    def update(self, config_id: int, changes: SLAConfigurationUpdate) -> SLAConfiguration:
        return self.mutator.update(config_id, changes)

    def delete(self, config_id: int) -> None:
        self.mutator.delete(config_id)

    def bulk_create(
        self,
        company_id: int,
        department_id: int,
        configurations: Iterable[BulkConfigurationItem],
    ) -> BulkCreateResult:
        return self.mutator.bulk_create(company_id, department_id, configurations)

    def bulk_update(
        self,
        company_id: int,
        department_id: int,
        updates: Iterable[BulkUpdateItem],
    ) -> BulkUpdateResult:
        return self.mutator.bulk_update(company_id, department_id, updates)

    def bulk_delete(self, config_ids: list[int]) -> BulkDeleteResult:
        return self.mutator.bulk_delete(config_ids)

    def bulk_toggle_active(self, config_ids: list[int], is_active: bool) -> BulkToggleResult:
        return self.mutator.bulk_toggle_active(config_ids, is_active)

    def copy(
        self,
        from_department_id: int,
        to_department_id: int,
        company_id: int,
        overwrite_existing: bool = False,
    ) -> CopyResult:
        return self.copier.copy(from_department_id, to_department_id, company_id, overwrite_existing)

    def import_csv(self, csv_data: str) -> CsvImportResult:
        return self.csv_importer.import_csv(csv_data)
