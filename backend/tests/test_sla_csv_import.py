from __future__ import annotations

import pytest

from conftest import seed
from sla_engine.core.exceptions import BadRequestError
from sla_engine.services.sla import SLAConfigurationEngine

HEADER = "company_id,department_id,incident_type_id,priority_id,response_time_hours,resolution_time_hours,is_active"


def test_import_creates_rows_and_splits_outcomes(engine, store) -> None:
    seed(store, incident_type_id=8)
    csv_data = "\n".join(
        [
            HEADER,
            "1,2,3,,4,24,true",
            "1,2,3,5,1.5,8,1",
            "1,2,8,,2,12,true",
            "1,2,3,6,30,10,true",
            "1,2,3,6,2",
            "1,2,x,6,2,10,true",
        ]
    )

    result = engine.import_csv(csv_data)

    assert result.processed == 6
    assert [(line.line, line.id) for line in result.success] == [(2, 2), (3, 3)]
    assert [line.line for line in result.duplicates] == [4]
    assert [line.line for line in result.errors] == [5, 6, 7]
    assert result.errors[0].errors[0]["code"] == "BUSINESS_RULE_VIOLATION"
    assert result.errors[1].message == "column_count_mismatch"
    assert result.errors[2].errors == [
        {"field": "incident_type_id", "message": "incident_type_id_must_be_integer", "code": "INVALID_VALUE"}
    ]


def test_import_accepts_minimal_header_and_inactive_rows(engine, store) -> None:
    csv_data = (
        "company_id, department_id, incident_type_id, response_time_hours, resolution_time_hours, is_active\n"
        "1,2,3,4,24,false\n"
    )

    result = engine.import_csv(csv_data)

    assert len(result.success) == 1
    assert store.get(result.success[0].id).is_active is False


def test_import_reports_missing_required_values(engine) -> None:
    result = engine.import_csv(HEADER + "\n1,,3,,4,24,true\n")

    assert result.success == []
    assert result.errors[0].errors == [
        {"field": "department_id", "message": "department_id_required", "code": "REQUIRED_FIELD"}
    ]


def test_import_rejects_missing_headers(engine) -> None:
    with pytest.raises(BadRequestError) as exc_info:
        engine.import_csv("company_id,department_id\n1,2\n")
    assert exc_info.value.details["missing"] == ["incident_type_id", "response_time_hours", "resolution_time_hours"]


def test_import_requires_a_data_row(engine) -> None:
    with pytest.raises(BadRequestError):
        engine.import_csv(HEADER + "\n")


def test_import_enforces_row_limit(store) -> None:
    engine = SLAConfigurationEngine(store, csv_max_rows=1)
    with pytest.raises(BadRequestError) as exc_info:
        engine.import_csv("\n".join([HEADER, "1,2,3,,4,24,true", "1,2,8,,4,24,true"]))
    assert exc_info.value.message == "csv_too_many_rows"
    assert store.rows == {}


def test_import_rejects_non_finite_thresholds(engine, store) -> None:
    result = engine.import_csv("\n".join([HEADER, "1,2,3,,nan,nan,true", "1,2,3,,4,inf,true"]))

    assert result.success == []
    assert [line.line for line in result.errors] == [2, 3]
    assert [error["field"] for error in result.errors[0].errors] == ["response_time_hours", "resolution_time_hours"]
    assert result.errors[1].errors == [
        {"field": "resolution_time_hours", "message": "resolution_time_hours_must_be_number", "code": "INVALID_VALUE"}
    ]
    assert store.rows == {}


def test_import_line_numbers_count_leading_blank_lines(engine) -> None:
    result = engine.import_csv("\n\n" + HEADER + "\n1,2,3,,4,24,true\n1,2,x,,4,24,true\n")

    assert [line.line for line in result.success] == [4]
    assert [line.line for line in result.errors] == [5]
