"""Convenience imports for Alembic metadata discovery."""

from sla_engine.models.tenant import Company, Department, DepartmentPriority, IncidentType
from sla_engine.models.sla_configuration import SLAConfiguration

__all__ = [
    "Company",
    "Department",
    "DepartmentPriority",
    "IncidentType",
    "SLAConfiguration",
]
