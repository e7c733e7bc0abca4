"""Persistence boundary for SLA configurations.

The engine only talks to :class:`SLAConfigurationStore`; the SQLAlchemy
implementation below is what the API uses, tests substitute an in-memory fake.
Every write commits on its own, so each row mutation is atomic while a batch of
them is not.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy import case, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sla_engine.core.exceptions import DuplicateConfigurationError, StoreFailureError
from sla_engine.models.sla_configuration import SLAConfiguration
from sla_engine.models.tenant import Department, DepartmentPriority, IncidentType, utcnow

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = frozenset({"response_time_hours", "resolution_time_hours", "is_active"})


@dataclass(frozen=True)
class SLAConfigurationFilters:
    company_id: int
    department_id: int | None = None
    incident_type_id: int | None = None
    priority_id: int | None = None
    # the HTTP "null" sentinel: match wildcard rows only
    priority_is_null: bool = False
    is_active: bool | None = None

    def matches(self, config: Any) -> bool:
        if config.company_id != self.company_id:
            return False
        if self.department_id is not None and config.department_id != self.department_id:
            return False
        if self.incident_type_id is not None and config.incident_type_id != self.incident_type_id:
            return False
        if self.priority_is_null and config.priority_id is not None:
            return False
        if self.priority_id is not None and config.priority_id != self.priority_id:
            return False
        if self.is_active is not None and bool(config.is_active) != self.is_active:
            return False
        return True


def sort_key(config: Any) -> tuple:
    """Company, department, incident type, wildcard before specific priorities, then id."""
    priority = config.priority_id
    return (
        config.company_id,
        config.department_id,
        config.incident_type_id,
        0 if priority is None else 1,
        priority or 0,
        config.id or 0,
    )


class SLAConfigurationStore(ABC):
    """Rule store consumed by the engine."""

    @abstractmethod
    def get(self, config_id: int) -> SLAConfiguration | None:
        """Return one configuration by id."""

    @abstractmethod
    def list(self, filters: SLAConfigurationFilters) -> list[SLAConfiguration]:
        """Return every configuration matching the filters, in :func:`sort_key` order."""

    @abstractmethod
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
        """Return rows occupying one exact tuple; ``priority_id=None`` means the wildcard row."""

    @abstractmethod
    def add(self, values: dict[str, Any]) -> SLAConfiguration:
        """Insert a row. Raises DuplicateConfigurationError when the active tuple is taken."""

    @abstractmethod
    def update(self, config: SLAConfiguration, changes: dict[str, Any]) -> SLAConfiguration:
        """Apply threshold/active changes in place, keeping the id."""

    @abstractmethod
    def delete(self, config: SLAConfiguration) -> None:
        """Hard-delete one row."""

    @abstractmethod
    def delete_many(self, config_ids: Iterable[int]) -> int:
        """Hard-delete rows by id and return how many existed."""

    @abstractmethod
    def department_company_id(self, department_id: int) -> int | None:
        """Owning company of a department, or None when it does not exist."""

    @abstractmethod
    def incident_type_company_id(self, incident_type_id: int) -> int | None:
        """Owning company of an incident type, or None when it does not exist."""

    @abstractmethod
    def priority_scope(self, priority_id: int) -> tuple[int, int] | None:
        """Owning (company_id, department_id) of a priority, or None when it does not exist."""


class SqlAlchemySLAConfigurationStore(SLAConfigurationStore):
    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, config_id: int) -> SLAConfiguration | None:
        try:
            return self._db.get(SLAConfiguration, config_id)
        except SQLAlchemyError as exc:
            raise self._fault("get", exc) from exc

    def list(self, filters: SLAConfigurationFilters) -> list[SLAConfiguration]:
        stmt = select(SLAConfiguration).where(SLAConfiguration.company_id == filters.company_id)
        if filters.department_id is not None:
            stmt = stmt.where(SLAConfiguration.department_id == filters.department_id)
        if filters.incident_type_id is not None:
            stmt = stmt.where(SLAConfiguration.incident_type_id == filters.incident_type_id)
        if filters.priority_is_null:
            stmt = stmt.where(SLAConfiguration.priority_id.is_(None))
        elif filters.priority_id is not None:
            stmt = stmt.where(SLAConfiguration.priority_id == filters.priority_id)
        if filters.is_active is not None:
            stmt = stmt.where(SLAConfiguration.is_active.is_(filters.is_active))
        stmt = stmt.order_by(
            SLAConfiguration.company_id,
            SLAConfiguration.department_id,
            SLAConfiguration.incident_type_id,
            case((SLAConfiguration.priority_id.is_(None), 0), else_=1),
            SLAConfiguration.priority_id,
            SLAConfiguration.id,
        )
        try:
            return list(self._db.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise self._fault("list", exc) from exc

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
        stmt = select(SLAConfiguration).where(
            SLAConfiguration.company_id == company_id,
            SLAConfiguration.department_id == department_id,
            SLAConfiguration.incident_type_id == incident_type_id,
        )
        if priority_id is None:
            stmt = stmt.where(SLAConfiguration.priority_id.is_(None))
        else:
            stmt = stmt.where(SLAConfiguration.priority_id == priority_id)
        if active_only:
            stmt = stmt.where(SLAConfiguration.is_active.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(SLAConfiguration.id != exclude_id)
        stmt = stmt.order_by(SLAConfiguration.is_active.desc(), SLAConfiguration.id)
        try:
            return list(self._db.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise self._fault("find_by_scope", exc) from exc

    def add(self, values: dict[str, Any]) -> SLAConfiguration:
        now = utcnow()
        config = SLAConfiguration(created_at=now, updated_at=now, **values)
        self._db.add(config)
        self._commit("add", details=_scope_details(values))
        self._db.refresh(config)
        return config

    def update(self, config: SLAConfiguration, changes: dict[str, Any]) -> SLAConfiguration:
        changed = False
        for name, value in changes.items():
            if name not in MUTABLE_FIELDS:
                raise ValueError(f"unsupported_field:{name}")
            if getattr(config, name) != value:
                setattr(config, name, value)
                changed = True
        if not changed:
            return config
        config.updated_at = utcnow()
        self._db.add(config)
        self._commit("update", details={"id": config.id})
        self._db.refresh(config)
        return config

    def delete(self, config: SLAConfiguration) -> None:
        self._db.delete(config)
        self._commit("delete", details={"id": config.id})

    def delete_many(self, config_ids: Iterable[int]) -> int:
        ids = list(dict.fromkeys(config_ids))
        if not ids:
            return 0
        try:
            result = self._db.execute(
                delete(SLAConfiguration)
                .where(SLAConfiguration.id.in_(ids))
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise self._fault("delete_many", exc) from exc
        self._commit("delete_many", details={"ids": ids})
        return int(result.rowcount or 0)

    def department_company_id(self, department_id: int) -> int | None:
        return self._owner(select(Department.company_id).where(Department.id == department_id))

    def incident_type_company_id(self, incident_type_id: int) -> int | None:
        return self._owner(select(IncidentType.company_id).where(IncidentType.id == incident_type_id))

    def priority_scope(self, priority_id: int) -> tuple[int, int] | None:
        stmt = select(DepartmentPriority.company_id, DepartmentPriority.department_id).where(
            DepartmentPriority.id == priority_id
        )
        try:
            row = self._db.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise self._fault("lookup", exc) from exc
        return (row.company_id, row.department_id) if row is not None else None

    def _owner(self, stmt) -> int | None:
        try:
            return self._db.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise self._fault("lookup", exc) from exc

    def _commit(self, operation: str, *, details: dict[str, Any]) -> None:
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            if _is_unique_violation(exc):
                logger.info("SLA store %s rejected by unique index: %s", operation, details)
                raise DuplicateConfigurationError(details=details) from exc
            raise self._fault(operation, exc) from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise self._fault(operation, exc) from exc

    @staticmethod
    def _fault(operation: str, exc: Exception) -> StoreFailureError:
        logger.exception("SLA store %s failed: %s", operation, exc)
        return StoreFailureError(operation=operation)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg reports SQLSTATE 23505, sqlite only the message text
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate:
        return sqlstate == "23505"
    return "unique" in str(exc.orig).lower()


def _scope_details(values: dict[str, Any]) -> dict[str, Any]:
    return {
        "company_id": values.get("company_id"),
        "department_id": values.get("department_id"),
        "incident_type_id": values.get("incident_type_id"),
        "priority_id": values.get("priority_id"),
    }
