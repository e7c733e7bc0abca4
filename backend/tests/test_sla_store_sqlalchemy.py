from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sla_engine.core.exceptions import DuplicateConfigurationError, StoreFailureError
from sla_engine.db.base import Base
from sla_engine.models import Company, Department, DepartmentPriority, IncidentType
from sla_engine.schemas.sla_configuration import BulkConfigurationItem
from sla_engine.services.sla import SLAConfigurationEngine, SLAConfigurationFilters, SqlAlchemySLAConfigurationStore
from sla_engine.services.sla.results import DUPLICATE_CONFIGURATION


@pytest.fixture
def db() -> Session:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    session.add_all(
        [
            Company(id=1, name="Acme"),
            Department(id=2, company_id=1, name="Service Desk"),
            Department(id=4, company_id=1, name="Infrastructure"),
            IncidentType(id=3, company_id=1, name="Outage", value="outage"),
            DepartmentPriority(id=5, company_id=1, department_id=2, name="High", weight=3),
        ]
    )
    session.commit()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def _values(**overrides):
    values = {
        "company_id": 1,
        "department_id": 2,
        "incident_type_id": 3,
        "priority_id": None,
        "response_time_hours": 4.0,
        "resolution_time_hours": 24.0,
        "is_active": True,
    }
    values.update(overrides)
    return values


def test_add_then_find_by_scope(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    wildcard = store.add(_values())
    specific = store.add(_values(priority_id=5))

    assert store.get(wildcard.id).resolution_time_hours == 24.0
    assert [row.id for row in store.find_by_scope(1, 2, 3, None)] == [wildcard.id]
    assert [row.id for row in store.find_by_scope(1, 2, 3, 5, active_only=True)] == [specific.id]
    assert store.find_by_scope(1, 2, 3, 5, exclude_id=specific.id) == []


def test_list_orders_wildcard_first_and_honors_null_sentinel(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    specific = store.add(_values(priority_id=5))
    wildcard = store.add(_values())

    assert [row.id for row in store.list(SLAConfigurationFilters(company_id=1))] == [wildcard.id, specific.id]
    assert [row.id for row in store.list(SLAConfigurationFilters(company_id=1, priority_is_null=True))] == [
        wildcard.id
    ]
    assert store.list(SLAConfigurationFilters(company_id=1, is_active=False)) == []


def test_unique_index_rejects_second_active_wildcard(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    store.add(_values())

    with pytest.raises(DuplicateConfigurationError):
        store.add(_values(response_time_hours=1.0))

    # session is usable after the rollback and inactive twins are allowed
    inactive = store.add(_values(is_active=False))
    assert inactive.id is not None
    assert len(store.list(SLAConfigurationFilters(company_id=1))) == 2


def test_check_constraint_failure_is_store_failure(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    with pytest.raises(StoreFailureError):
        store.add(_values(response_time_hours=48.0, resolution_time_hours=24.0))


def test_update_without_changes_keeps_timestamp(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    config = store.add(_values())
    stamp = config.updated_at

    store.update(config, {"is_active": True, "response_time_hours": 4.0})
    assert config.updated_at == stamp

    store.update(config, {"is_active": False})
    assert config.is_active is False
    assert config.updated_at >= stamp

    with pytest.raises(ValueError):
        store.update(config, {"company_id": 9})


def test_delete_many_counts_existing_rows(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    first = store.add(_values())
    second = store.add(_values(priority_id=5))

    assert store.delete_many([first.id, first.id, second.id, 999]) == 2
    assert store.list(SLAConfigurationFilters(company_id=1)) == []


def test_reference_lookups(db) -> None:
    store = SqlAlchemySLAConfigurationStore(db)
    assert store.department_company_id(4) == 1
    assert store.department_company_id(404) is None
    assert store.incident_type_company_id(3) == 1
    assert store.priority_scope(5) == (1, 2)
    assert store.priority_scope(404) is None


def test_engine_bulk_create_over_database(db) -> None:
    engine = SLAConfigurationEngine(SqlAlchemySLAConfigurationStore(db))

    result = engine.bulk_create(
        1,
        2,
        [
            BulkConfigurationItem(incident_type_id=3, response_time_hours=4, resolution_time_hours=24),
            BulkConfigurationItem(incident_type_id=3, priority_id=5, response_time_hours=1, resolution_time_hours=8),
            BulkConfigurationItem(incident_type_id=3, response_time_hours=2, resolution_time_hours=12),
        ],
    )

    assert len(result.created) == 2
    assert [(error.index, error.code) for error in result.errors] == [(2, DUPLICATE_CONFIGURATION)]
    effective = engine.resolve_effective(1, 2, 3, 5)
    assert effective is not None and effective.resolution_time_hours == 8.0
