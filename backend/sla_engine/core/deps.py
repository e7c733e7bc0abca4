"""Common FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from sla_engine.core.config import settings
from sla_engine.db.session import get_db
from sla_engine.services.sla import SLAConfigurationEngine, SqlAlchemySLAConfigurationStore, ThresholdLimits


def get_sla_engine(db: Session = Depends(get_db)) -> SLAConfigurationEngine:
    return SLAConfigurationEngine(
        SqlAlchemySLAConfigurationStore(db),
        limits=ThresholdLimits.from_settings(settings),
        csv_max_rows=settings.SLA_CSV_MAX_ROWS,
    )
