"""Pydantic schemas for SLA configuration payloads and responses.

Wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic.alias_generators import to_camel

from sla_engine.core.config import settings

MAX_BULK_ITEMS = settings.SLA_BULK_MAX_ITEMS


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===== REQUESTS =====


class SLAConfigurationCandidate(CamelModel):
    """A rule to create or dry-run validate; scope fields are optional so the
    validator can report every missing one instead of a bare 422."""

    company_id: int | None = None
    department_id: int | None = None
    incident_type_id: int | None = None
    priority_id: int | None = None
    response_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    resolution_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    is_active: bool = True


class SLAConfigurationUpdate(CamelModel):
    response_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    resolution_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    is_active: bool | None = None


class BulkConfigurationItem(CamelModel):
    incident_type_id: int | None = None
    priority_id: int | None = None
    response_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    resolution_time_hours: float | None = Field(default=None, allow_inf_nan=False)
    is_active: bool = True


class BulkCreateRequest(CamelModel):
    company_id: int
    department_id: int
    configurations: list[BulkConfigurationItem] = Field(min_length=1, max_length=MAX_BULK_ITEMS)


class BulkUpdateItem(SLAConfigurationUpdate):
    id: int


class BulkUpdateRequest(CamelModel):
    company_id: int
    department_id: int
    updates: list[BulkUpdateItem] = Field(min_length=1, max_length=MAX_BULK_ITEMS)


class BulkDeleteRequest(CamelModel):
    ids: list[int] = Field(min_length=1, max_length=MAX_BULK_ITEMS)


class BulkToggleRequest(CamelModel):
    ids: list[int] = Field(min_length=1, max_length=MAX_BULK_ITEMS)
    is_active: StrictBool


class CopyRequest(CamelModel):
    from_department_id: int
    to_department_id: int
    company_id: int
    overwrite_existing: bool = False


class EffectiveSLARequest(CamelModel):
    company_id: int
    department_id: int
    incident_type_id: int
    priority_id: int | None = None


class CsvImportRequest(CamelModel):
    csv_data: str = Field(min_length=1)


# ===== RESPONSES =====


class ValidationIssueOut(CamelModel):
    field: str
    message: str
    code: str


class SLAConfigurationOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    company_id: int
    department_id: int
    incident_type_id: int
    priority_id: int | None = None
    response_time_hours: float
    resolution_time_hours: float
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class BatchItemErrorOut(CamelModel):
    index: int
    item: dict[str, Any]
    code: str
    message: str
    errors: list[ValidationIssueOut] = Field(default_factory=list)


class ValidationResultOut(CamelModel):
    is_valid: bool
    errors: list[ValidationIssueOut]
    warnings: list[ValidationIssueOut]


class SLAConfigurationListResponse(CamelModel):
    success: bool = True
    data: list[SLAConfigurationOut]
    count: int


class SLAConfigurationResponse(CamelModel):
    success: bool = True
    data: SLAConfigurationOut


class SLAConfigurationCreatedResponse(SLAConfigurationResponse):
    warnings: list[ValidationIssueOut] = Field(default_factory=list)


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class BulkCreateData(CamelModel):
    created: list[SLAConfigurationOut]
    created_count: int
    errors: list[BatchItemErrorOut]
    error_count: int


class BulkCreateResponse(CamelModel):
    success: bool = True
    data: BulkCreateData


class BulkMutationResponse(CamelModel):
    success: bool = True
    data: list[SLAConfigurationOut]
    count: int
    errors: list[BatchItemErrorOut] = Field(default_factory=list)
    error_count: int = 0


class BulkDeleteData(CamelModel):
    deleted_count: int
    requested_count: int


class BulkDeleteResponse(CamelModel):
    success: bool = True
    data: BulkDeleteData


class CopyData(CamelModel):
    copied: list[SLAConfigurationOut]
    copied_count: int
    skipped_count: int
    errors: list[BatchItemErrorOut]
    error_count: int


class CopyResponse(CamelModel):
    success: bool = True
    data: CopyData


class ValidationResponse(CamelModel):
    success: bool = True
    data: ValidationResultOut


class EffectiveSLAOut(CamelModel):
    response_time_hours: float
    resolution_time_hours: float
    source: str
    configuration_id: int


class EffectiveSLAResponse(CamelModel):
    success: bool = True
    data: EffectiveSLAOut | None = None


class CsvLineSuccessOut(CamelModel):
    line: int
    id: int
    message: str


class CsvLineIssueOut(CamelModel):
    line: int
    message: str
    errors: list[ValidationIssueOut] = Field(default_factory=list)


class CsvImportDetails(CamelModel):
    success: list[CsvLineSuccessOut]
    errors: list[CsvLineIssueOut]
    duplicates: list[CsvLineIssueOut]


class CsvImportData(CamelModel):
    processed: int
    successful: int
    errors: int
    duplicates: int
    details: CsvImportDetails


class CsvImportResponse(CamelModel):
    success: bool = True
    data: CsvImportData
