from __future__ import annotations

import pytest

from conftest import seed
from sla_engine.core.exceptions import BadRequestError, NotFoundError, ReferentialViolationError
from sla_engine.services.sla import SLAConfigurationFilters
from sla_engine.services.sla.results import REFERENTIAL_VIOLATION


def _target_rows(engine):
    return engine.resolve(SLAConfigurationFilters(company_id=1, department_id=4))


def test_copy_clones_active_rows_into_empty_department(engine, store) -> None:
    seed(store, response_time_hours=4, resolution_time_hours=24)
    seed(store, incident_type_id=8, response_time_hours=2, resolution_time_hours=12)
    seed(store, incident_type_id=8, priority_id=6, is_active=False)

    result = engine.copy(2, 4, 1)

    assert len(result.copied) == 2
    assert result.skipped == 0
    assert result.errors == []
    rows = _target_rows(engine)
    assert [(row.incident_type_id, row.priority_id, row.resolution_time_hours) for row in rows] == [
        (3, None, 24),
        (8, None, 12),
    ]
    assert all(row.department_id == 4 for row in rows)


def test_copy_skips_occupied_tuple_without_overwrite(engine, store) -> None:
    seed(store, resolution_time_hours=24)
    seed(store, incident_type_id=8, resolution_time_hours=12)
    existing = seed(store, department_id=4, resolution_time_hours=72)

    result = engine.copy(2, 4, 1, overwrite_existing=False)

    assert [config.incident_type_id for config in result.copied] == [8]
    assert result.skipped == 1
    assert result.errors == []
    assert store.get(existing.id).resolution_time_hours == 72


def test_copy_overwrite_updates_target_in_place(engine, store) -> None:
    seed(store, response_time_hours=3, resolution_time_hours=24)
    existing = seed(store, department_id=4, response_time_hours=8, resolution_time_hours=72)

    result = engine.copy(2, 4, 1, overwrite_existing=True)

    assert [config.id for config in result.copied] == [existing.id]
    rows = _target_rows(engine)
    assert len(rows) == 1
    assert rows[0].id == existing.id
    assert rows[0].response_time_hours == 3
    assert rows[0].resolution_time_hours == 24


def test_copy_treats_inactive_target_as_occupied(engine, store) -> None:
    seed(store)
    seed(store, department_id=4, is_active=False)

    result = engine.copy(2, 4, 1)

    assert result.skipped == 1
    assert len(_target_rows(engine)) == 1


def test_copy_reports_priorities_foreign_to_target_department(engine, store) -> None:
    seed(store)
    seed(store, priority_id=5, response_time_hours=1, resolution_time_hours=4)

    result = engine.copy(2, 4, 1)

    assert [config.priority_id for config in result.copied] == [None]
    assert len(result.errors) == 1
    assert result.errors[0].code == REFERENTIAL_VIOLATION
    assert result.errors[0].item["priorityId"] == 5
    assert result.errors[0].errors[0]["message"] == "priority_not_in_department"


def test_copy_from_empty_department_is_not_found(engine, store) -> None:
    seed(store, is_active=False)
    with pytest.raises(NotFoundError):
        engine.copy(2, 4, 1)


def test_copy_requires_distinct_departments_of_the_company(engine, store) -> None:
    seed(store)
    with pytest.raises(BadRequestError):
        engine.copy(2, 2, 1)
    with pytest.raises(ReferentialViolationError):
        engine.copy(2, 90, 1)
    assert store.writes == 1
