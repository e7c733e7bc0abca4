from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from conftest import seed
from sla_engine.core.exceptions import ReferentialViolationError, ValidationFailedError
from sla_engine.schemas.sla_configuration import SLAConfigurationCandidate
from sla_engine.services.sla.results import (
    ATYPICAL_THRESHOLD,
    BUSINESS_RULE_VIOLATION,
    COVERAGE_GAP,
    DUPLICATE_CONFIGURATION,
    INVALID_VALUE,
    REFERENTIAL_VIOLATION,
    REQUIRED_FIELD,
)
from sla_engine.services.sla.validator import SLAConfigurationValidator, ThresholdLimits


def _candidate(**overrides) -> SLAConfigurationCandidate:
    values = {
        "company_id": 1,
        "department_id": 2,
        "incident_type_id": 3,
        "priority_id": None,
        "response_time_hours": 4,
        "resolution_time_hours": 24,
    }
    values.update(overrides)
    return SLAConfigurationCandidate(**values)


def _codes(issues) -> list[tuple[str, str]]:
    return [(issue.field, issue.code) for issue in issues]


def test_valid_wildcard_candidate_has_no_issues(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate())
    assert result.is_valid is True
    assert result.errors == []
    assert result.warnings == []


def test_missing_fields_are_all_reported(store) -> None:
    result = SLAConfigurationValidator(store).validate(SLAConfigurationCandidate())
    assert result.is_valid is False
    assert _codes(result.errors) == [
        ("companyId", REQUIRED_FIELD),
        ("departmentId", REQUIRED_FIELD),
        ("incidentTypeId", REQUIRED_FIELD),
        ("responseTimeHours", REQUIRED_FIELD),
        ("resolutionTimeHours", REQUIRED_FIELD),
    ]


def test_non_positive_thresholds_are_invalid(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(response_time_hours=0, resolution_time_hours=-2))
    assert _codes(result.errors) == [
        ("responseTimeHours", INVALID_VALUE),
        ("resolutionTimeHours", INVALID_VALUE),
    ]


def test_non_finite_thresholds_are_invalid(store) -> None:
    errors, warnings = SLAConfigurationValidator(store).check_thresholds(math.nan, math.inf)
    assert _codes(errors) == [
        ("responseTimeHours", INVALID_VALUE),
        ("resolutionTimeHours", INVALID_VALUE),
    ]
    assert [issue.message for issue in errors] == [
        "responseTimeHours_must_be_finite",
        "resolutionTimeHours_must_be_finite",
    ]
    assert warnings == []


def test_candidate_schema_rejects_nan_and_infinity() -> None:
    with pytest.raises(ValidationError):
        _candidate(response_time_hours=float("nan"))
    with pytest.raises(ValidationError):
        SLAConfigurationCandidate.model_validate({"resolutionTimeHours": float("inf")})


def test_response_above_resolution_is_business_rule_violation(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(response_time_hours=48, resolution_time_hours=24))
    assert _codes(result.errors) == [("responseTimeHours", BUSINESS_RULE_VIOLATION)]


def test_equal_response_and_resolution_is_allowed(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(response_time_hours=8, resolution_time_hours=8))
    assert result.is_valid is True


def test_atypical_thresholds_only_warn(store) -> None:
    validator = SLAConfigurationValidator(store)

    low = validator.validate(_candidate(response_time_hours=0.5, resolution_time_hours=1))
    assert low.is_valid is True
    assert _codes(low.warnings) == [
        ("responseTimeHours", ATYPICAL_THRESHOLD),
        ("resolutionTimeHours", ATYPICAL_THRESHOLD),
    ]

    high = validator.validate(_candidate(response_time_hours=200, resolution_time_hours=800))
    assert high.is_valid is True
    assert [issue.message for issue in high.warnings] == [
        "response_time_above_typical_range",
        "resolution_time_above_typical_range",
    ]


def test_threshold_limits_are_configurable(store) -> None:
    validator = SLAConfigurationValidator(store, ThresholdLimits(min_response_hours=8))
    result = validator.validate(_candidate(response_time_hours=4))
    assert [issue.message for issue in result.warnings] == ["response_time_below_typical_range"]


def test_cross_tenant_references_are_rejected(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(department_id=90, incident_type_id=93))
    assert _codes(result.errors) == [
        ("departmentId", REFERENTIAL_VIOLATION),
        ("incidentTypeId", REFERENTIAL_VIOLATION),
    ]
    assert [issue.message for issue in result.errors] == ["department_not_in_company", "incident_type_not_in_company"]


def test_unknown_references_are_not_found(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(department_id=404, priority_id=505))
    assert [issue.message for issue in result.errors] == ["department_not_found", "priority_not_found"]


def test_priority_zero_is_checked_as_a_reference(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(priority_id=0))
    assert _codes(result.errors) == [("priorityId", REFERENTIAL_VIOLATION)]
    assert result.errors[0].message == "priority_not_found"


def test_priority_must_belong_to_the_department(store) -> None:
    seed(store)
    result = SLAConfigurationValidator(store).validate(_candidate(priority_id=7))
    assert [issue.message for issue in result.errors] == ["priority_not_in_department"]


def test_duplicate_active_tuple_is_rejected(store) -> None:
    seed(store, priority_id=5)
    result = SLAConfigurationValidator(store).validate(_candidate(priority_id=5))
    assert _codes(result.errors) == [("configuration", DUPLICATE_CONFIGURATION)]


def test_inactive_candidate_skips_duplicate_check(store) -> None:
    seed(store)
    result = SLAConfigurationValidator(store).validate(_candidate(is_active=False))
    assert result.is_valid is True


def test_exclude_id_ignores_the_row_being_updated(store) -> None:
    existing = seed(store)
    result = SLAConfigurationValidator(store).validate(_candidate(), exclude_id=existing.id)
    assert result.is_valid is True


def test_priority_rule_without_wildcard_warns_coverage_gap(store) -> None:
    result = SLAConfigurationValidator(store).validate(_candidate(priority_id=5))
    assert result.is_valid is True
    assert _codes(result.warnings) == [("priorityId", COVERAGE_GAP)]

    seed(store)
    covered = SLAConfigurationValidator(store).validate(_candidate(priority_id=5))
    assert covered.warnings == []


def test_raise_for_errors_picks_referential_exception(store) -> None:
    validator = SLAConfigurationValidator(store)

    with pytest.raises(ReferentialViolationError) as referential:
        validator.validate(_candidate(department_id=90)).raise_for_errors()
    assert referential.value.error_code == "REFERENTIAL_VIOLATION"

    with pytest.raises(ValidationFailedError) as mixed:
        validator.validate(_candidate(department_id=90, response_time_hours=-1)).raise_for_errors()
    assert not isinstance(mixed.value, ReferentialViolationError)
    assert len(mixed.value.errors) == 2
