from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Iterable

import pytest


BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from sla_engine.core.exceptions import DuplicateConfigurationError, StoreFailureError  # noqa: E402
from sla_engine.models.sla_configuration import SLAConfiguration  # noqa: E402
from sla_engine.models.tenant import utcnow  # noqa: E402
from sla_engine.services.sla import SLAConfigurationEngine  # noqa: E402
from sla_engine.services.sla.store import (  # noqa: E402
    MUTABLE_FIELDS,
    SLAConfigurationFilters,
    SLAConfigurationStore,
    sort_key,
)

# company 1 owns departments 2 and 4; company 9 is a second tenant
DEPARTMENTS = {2: 1, 4: 1, 90: 9}
INCIDENT_TYPES = {3: 1, 8: 1, 93: 9}
PRIORITIES = {5: (1, 2), 6: (1, 2), 7: (1, 4), 95: (9, 90)}


class InMemorySLAStore(SLAConfigurationStore):
    """Dict-backed store enforcing the same active-tuple uniqueness as the database."""

    def __init__(self) -> None:
        self.rows: dict[int, SLAConfiguration] = {}
        self.departments = dict(DEPARTMENTS)
        self.incident_types = dict(INCIDENT_TYPES)
        self.priorities = dict(PRIORITIES)
        self._next_id = 1
        self.writes = 0
        # set to simulate a concurrent writer or a broken database on the next add
        self.fail_next_add: Exception | None = None

    def get(self, config_id: int) -> SLAConfiguration | None:
        return self.rows.get(config_id)

    def list(self, filters: SLAConfigurationFilters) -> list[SLAConfiguration]:
        return sorted((row for row in self.rows.values() if filters.matches(row)), key=sort_key)

    def find_by_scope(
        self,
        company_id: int,
        department_id: int,
        incident_type_id: int,
        priority_id: int | None,
        *,
        active_only: bool = False,
        exclude_id: int | None = None,
    ) -> list[SLAConfiguration]:
        matches = [
            row
            for row in self.rows.values()
            if row.scope_key() == (company_id, department_id, incident_type_id, priority_id)
            and (row.is_active or not active_only)
            and row.id != exclude_id
        ]
        return sorted(matches, key=lambda row: (not row.is_active, row.id))

    def add(self, values: dict[str, Any]) -> SLAConfiguration:
        if self.fail_next_add is not None:
            exc, self.fail_next_add = self.fail_next_add, None
            raise exc
        config = SLAConfiguration(**values)
        if config.is_active is None:
            config.is_active = True
        if config.is_active and self._active_taken(config.scope_key(), exclude_id=None):
            raise DuplicateConfigurationError()
        now = utcnow()
        config.id = self._next_id
        config.created_at = now
        config.updated_at = now
        self._next_id += 1
        self.rows[config.id] = config
        self.writes += 1
        return config

    def update(self, config: SLAConfiguration, changes: dict[str, Any]) -> SLAConfiguration:
        changed = {name: value for name, value in changes.items() if getattr(config, name) != value}
        for name in changed:
            if name not in MUTABLE_FIELDS:
                raise ValueError(f"unsupported_field:{name}")
        if not changed:
            return config
        if changed.get("is_active") and self._active_taken(config.scope_key(), exclude_id=config.id):
            raise DuplicateConfigurationError()
        for name, value in changed.items():
            setattr(config, name, value)
        config.updated_at = utcnow()
        self.writes += 1
        return config

    def delete(self, config: SLAConfiguration) -> None:
        self.rows.pop(config.id, None)
        self.writes += 1

    def delete_many(self, config_ids: Iterable[int]) -> int:
        deleted = 0
        for config_id in dict.fromkeys(config_ids):
            if self.rows.pop(config_id, None) is not None:
                deleted += 1
        self.writes += 1
        return deleted

    def department_company_id(self, department_id: int) -> int | None:
        return self.departments.get(department_id)

    def incident_type_company_id(self, incident_type_id: int) -> int | None:
        return self.incident_types.get(incident_type_id)

    def priority_scope(self, priority_id: int) -> tuple[int, int] | None:
        return self.priorities.get(priority_id)

    def _active_taken(self, key: tuple, *, exclude_id: int | None) -> bool:
        return any(row.is_active and row.scope_key() == key and row.id != exclude_id for row in self.rows.values())


def seed(store: InMemorySLAStore, **values: Any) -> SLAConfiguration:
    """Insert a row directly, bypassing validation."""
    row = {
        "company_id": 1,
        "department_id": 2,
        "incident_type_id": 3,
        "priority_id": None,
        "response_time_hours": 4.0,
        "resolution_time_hours": 24.0,
        "is_active": True,
    }
    row.update(values)
    return store.add(row)


@pytest.fixture
def store() -> InMemorySLAStore:
    return InMemorySLAStore()


@pytest.fixture
def engine(store: InMemorySLAStore) -> SLAConfigurationEngine:
    return SLAConfigurationEngine(store)


@pytest.fixture
def broken_store_error() -> StoreFailureError:
    return StoreFailureError(operation="add")
