"""Read-only lookups over SLA configurations."""

from __future__ import annotations

import logging

from sla_engine.models.sla_configuration import SLAConfiguration
from sla_engine.services.sla.results import EffectiveSLA
from sla_engine.services.sla.store import SLAConfigurationFilters, SLAConfigurationStore

logger = logging.getLogger(__name__)

SOURCE_SPECIFIC = "specific"
SOURCE_DEPARTMENT_DEFAULT = "department_default"


class SLAConfigurationResolver:
    def __init__(self, store: SLAConfigurationStore) -> None:
        self._store = store

    def resolve(self, filters: SLAConfigurationFilters) -> list[SLAConfiguration]:
        """Return every configuration matching ``filters``; never picks a winner."""
        return self._store.list(filters)

    def resolve_effective(
        self,
        company_id: int,
        department_id: int,
        incident_type_id: int,
        priority_id: int | None = None,
    ) -> EffectiveSLA | None:
        """Pick the SLA for one concrete ticket.

        The active row for the exact priority wins; otherwise the active
        wildcard row of the same company, department and incident type
        applies; otherwise no SLA applies and ``None`` is returned.
        """
        if priority_id is not None:
            specific = self._active_row(company_id, department_id, incident_type_id, priority_id)
            if specific is not None:
                return _effective(specific, SOURCE_SPECIFIC)

        wildcard = self._active_row(company_id, department_id, incident_type_id, None)
        if wildcard is not None:
            return _effective(wildcard, SOURCE_DEPARTMENT_DEFAULT)

        logger.info(
            "No SLA configured: company=%s department=%s incident_type=%s priority=%s",
            company_id,
            department_id,
            incident_type_id,
            priority_id,
        )
        return None

    def _active_row(
        self,
        company_id: int,
        department_id: int,
        incident_type_id: int,
        priority_id: int | None,
    ) -> SLAConfiguration | None:
        rows = self._store.find_by_scope(
            company_id,
            department_id,
            incident_type_id,
            priority_id,
            active_only=True,
        )
        return rows[0] if rows else None


def _effective(config: SLAConfiguration, source: str) -> EffectiveSLA:
    return EffectiveSLA(
        response_time_hours=config.response_time_hours,
        resolution_time_hours=config.resolution_time_hours,
        source=source,
        configuration_id=config.id,
    )
