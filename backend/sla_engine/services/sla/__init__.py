"""SLA configuration engine: validation, resolution and bulk mutation of SLA rules."""

from sla_engine.services.sla.engine import SLAConfigurationEngine
from sla_engine.services.sla.store import (
    SLAConfigurationFilters,
    SLAConfigurationStore,
    SqlAlchemySLAConfigurationStore,
)
from sla_engine.services.sla.validator import ThresholdLimits

__all__ = [
    "SLAConfigurationEngine",
    "SLAConfigurationFilters",
    "SLAConfigurationStore",
    "SqlAlchemySLAConfigurationStore",
    "ThresholdLimits",
]
