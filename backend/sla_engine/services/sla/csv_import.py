"""Import SLA configurations from CSV text, one independent create per line."""

from __future__ import annotations

import csv
import io
import logging
import math
from typing import Any

from sla_engine.core.exceptions import BadRequestError, StoreFailureError, ValidationFailedError
from sla_engine.schemas.sla_configuration import SLAConfigurationCandidate
from sla_engine.services.sla.mutator import SLAConfigurationMutator
from sla_engine.services.sla.results import (
    DUPLICATE_CONFIGURATION,
    INVALID_VALUE,
    REQUIRED_FIELD,
    CsvImportResult,
    CsvLineIssue,
    CsvLineSuccess,
)

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = (
    "company_id",
    "department_id",
    "incident_type_id",
    "response_time_hours",
    "resolution_time_hours",
)

_INT_COLUMNS = ("company_id", "department_id", "incident_type_id", "priority_id")
_FLOAT_COLUMNS = ("response_time_hours", "resolution_time_hours")
_TRUE_VALUES = {"true", "1", "yes", "y"}
_FALSE_VALUES = {"false", "0", "no", "n"}


class SLAConfigurationCsvImporter:
    def __init__(self, mutator: SLAConfigurationMutator, *, max_rows: int = 2000) -> None:
        self._mutator = mutator
        self._max_rows = max_rows

    def import_csv(self, csv_data: str) -> CsvImportResult:
        body = csv_data.lstrip()
        # blank lines ahead of the header still count toward reported line numbers
        leading_lines = csv_data[: len(csv_data) - len(body)].count("\n")
        reader = csv.DictReader(io.StringIO(body.rstrip()))
        if not reader.fieldnames:
            raise BadRequestError("csv_requires_header_and_data")
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

        missing = [name for name in REQUIRED_HEADERS if name not in reader.fieldnames]
        if missing:
            raise BadRequestError("csv_missing_headers", details={"missing": missing})

        rows = [(reader.line_num + leading_lines, row) for row in reader]
        if not rows:
            raise BadRequestError("csv_requires_header_and_data")
        if len(rows) > self._max_rows:
            raise BadRequestError(
                "csv_too_many_rows",
                details={"rows": len(rows), "max_rows": self._max_rows},
            )

        result = CsvImportResult(processed=len(rows))
        for line, row in rows:
            self._import_line(line, row, result)

        logger.info(
            "SLA CSV import: processed=%s created=%s errors=%s duplicates=%s",
            result.processed,
            len(result.success),
            len(result.errors),
            len(result.duplicates),
        )
        return result

    def _import_line(self, line: int, row: dict[Any, Any], result: CsvImportResult) -> None:
        # DictReader files surplus cells under the None key and pads short rows with None
        if None in row or any(value is None for value in row.values()):
            result.errors.append(CsvLineIssue(line=line, message="column_count_mismatch"))
            return

        values = {str(key): str(value).strip() for key, value in row.items()}
        candidate, issues = _parse_row(values)
        if issues:
            result.errors.append(CsvLineIssue(line=line, message="invalid_row", errors=issues))
            return

        try:
            config, _ = self._mutator.create(candidate)
        except ValidationFailedError as exc:
            issue = CsvLineIssue(line=line, message=exc.message, errors=list(exc.errors))
            if any(error.get("code") == DUPLICATE_CONFIGURATION for error in exc.errors):
                result.duplicates.append(issue)
            else:
                result.errors.append(issue)
            return
        except StoreFailureError as exc:
            logger.warning("SLA CSV import line %s failed in store", line)
            result.errors.append(CsvLineIssue(line=line, message=exc.message))
            return

        result.success.append(CsvLineSuccess(line=line, id=config.id))


def _parse_row(values: dict[str, str]) -> tuple[SLAConfigurationCandidate | None, list[dict[str, str]]]:
    issues: list[dict[str, str]] = []
    parsed: dict[str, Any] = {}

    for column in REQUIRED_HEADERS:
        if not values.get(column):
            issues.append({"field": column, "message": f"{column}_required", "code": REQUIRED_FIELD})

    for column in _INT_COLUMNS:
        raw = values.get(column)
        if not raw:
            continue
        try:
            parsed[column] = int(raw)
        except ValueError:
            issues.append({"field": column, "message": f"{column}_must_be_integer", "code": INVALID_VALUE})

    for column in _FLOAT_COLUMNS:
        raw = values.get(column)
        if not raw:
            continue
        try:
            value = float(raw)
        except ValueError:
            value = math.nan
        if math.isfinite(value):
            parsed[column] = value
        else:
            issues.append({"field": column, "message": f"{column}_must_be_number", "code": INVALID_VALUE})

    raw_active = values.get("is_active", "").lower()
    if not raw_active or raw_active in _TRUE_VALUES:
        parsed["is_active"] = True
    elif raw_active in _FALSE_VALUES:
        parsed["is_active"] = False
    else:
        issues.append({"field": "is_active", "message": "is_active_must_be_boolean", "code": INVALID_VALUE})

    if issues:
        return None, issues
    return SLAConfigurationCandidate(**parsed), issues
