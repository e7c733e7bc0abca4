"""SLA configuration CRUD, bulk, copy and resolution endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Path, Query, status

from sla_engine.core.deps import get_sla_engine
from sla_engine.core.exceptions import BadRequestError
from sla_engine.core.rate_limit import rate_limit
from sla_engine.schemas.sla_configuration import (
    BatchItemErrorOut,
    BulkCreateData,
    BulkCreateRequest,
    BulkCreateResponse,
    BulkDeleteData,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkMutationResponse,
    BulkToggleRequest,
    BulkUpdateRequest,
    CopyData,
    CopyRequest,
    CopyResponse,
    CsvImportData,
    CsvImportDetails,
    CsvImportRequest,
    CsvImportResponse,
    CsvLineIssueOut,
    CsvLineSuccessOut,
    EffectiveSLAOut,
    EffectiveSLARequest,
    EffectiveSLAResponse,
    MessageResponse,
    SLAConfigurationCandidate,
    SLAConfigurationCreatedResponse,
    SLAConfigurationListResponse,
    SLAConfigurationOut,
    SLAConfigurationResponse,
    SLAConfigurationUpdate,
    ValidationIssueOut,
    ValidationResponse,
    ValidationResultOut,
)
from sla_engine.services.sla import SLAConfigurationEngine, SLAConfigurationFilters
from sla_engine.services.sla.results import BatchItemError, BulkUpdateResult, CsvLineIssue, ValidationIssue

router = APIRouter(dependencies=[Depends(rate_limit())])
_NULL_PRIORITY = "null"


def _out(configs) -> list[SLAConfigurationOut]:
    return [SLAConfigurationOut.model_validate(config) for config in configs]


def _issues(issues: list[ValidationIssue]) -> list[ValidationIssueOut]:
    return [ValidationIssueOut(field=issue.field, message=issue.message, code=issue.code) for issue in issues]


def _item_errors(errors: list[BatchItemError]) -> list[BatchItemErrorOut]:
    return [
        BatchItemErrorOut(
            index=error.index,
            item=error.item,
            code=error.code,
            message=error.message,
            errors=[ValidationIssueOut(**issue) for issue in error.errors],
        )
        for error in errors
    ]


def _csv_issues(lines: list[CsvLineIssue]) -> list[CsvLineIssueOut]:
    return [
        CsvLineIssueOut(line=line.line, message=line.message, errors=[ValidationIssueOut(**issue) for issue in line.errors])
        for line in lines
    ]


def _bulk_mutation_response(result: BulkUpdateResult) -> BulkMutationResponse:
    return BulkMutationResponse(
        data=_out(result.updated),
        count=len(result.updated),
        errors=_item_errors(result.errors),
        error_count=len(result.errors),
    )


def _parse_priority_filter(raw: str | None) -> tuple[int | None, bool]:
    if raw is None or not raw.strip():
        return None, False
    token = raw.strip().lower()
    if token == _NULL_PRIORITY:
        return None, True
    try:
        return int(token), False
    except ValueError:
        raise BadRequestError("invalid_priority_filter", details={"priorityId": raw})


@router.get("/", response_model=SLAConfigurationListResponse)
def list_sla_configurations(
    company_id: int = Query(..., alias="companyId", ge=1),
    department_id: int | None = Query(default=None, alias="departmentId", ge=1),
    incident_type_id: int | None = Query(default=None, alias="incidentTypeId", ge=1),
    priority_id: str | None = Query(
        default=None,
        alias="priorityId",
        description="Priority id, or 'null' for department-wide default rows only",
    ),
    is_active: bool | None = Query(default=None, alias="isActive"),
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> SLAConfigurationListResponse:
    priority, priority_is_null = _parse_priority_filter(priority_id)
    configs = engine.resolve(
        SLAConfigurationFilters(
            company_id=company_id,
            department_id=department_id,
            incident_type_id=incident_type_id,
            priority_id=priority,
            priority_is_null=priority_is_null,
            is_active=is_active,
        )
    )
    return SLAConfigurationListResponse(data=_out(configs), count=len(configs))


@router.post("/", response_model=SLAConfigurationCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_sla_configuration(
    payload: SLAConfigurationCandidate,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> SLAConfigurationCreatedResponse:
    config, warnings = engine.create(payload)
    return SLAConfigurationCreatedResponse(
        data=SLAConfigurationOut.model_validate(config),
        warnings=_issues(warnings),
    )


# Static paths are registered ahead of /{config_id} so they are not captured by it.


@router.post(
    "/bulk",
    response_model=BulkCreateResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def bulk_create_sla_configurations(
    payload: BulkCreateRequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> BulkCreateResponse:
    result = engine.bulk_create(payload.company_id, payload.department_id, payload.configurations)
    return BulkCreateResponse(
        data=BulkCreateData(
            created=_out(result.created),
            created_count=len(result.created),
            errors=_item_errors(result.errors),
            error_count=len(result.errors),
        )
    )


@router.put(
    "/bulk",
    response_model=BulkMutationResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def bulk_update_sla_configurations(
    payload: BulkUpdateRequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> BulkMutationResponse:
    result = engine.bulk_update(payload.company_id, payload.department_id, payload.updates)
    return _bulk_mutation_response(result)


@router.delete(
    "/bulk",
    response_model=BulkDeleteResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def bulk_delete_sla_configurations(
    payload: BulkDeleteRequest = Body(...),
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> BulkDeleteResponse:
    result = engine.bulk_delete(payload.ids)
    return BulkDeleteResponse(
        data=BulkDeleteData(deleted_count=result.deleted_count, requested_count=result.requested_count)
    )


@router.patch(
    "/bulk/toggle",
    response_model=BulkMutationResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def bulk_toggle_sla_configurations(
    payload: BulkToggleRequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> BulkMutationResponse:
    result = engine.bulk_toggle_active(payload.ids, payload.is_active)
    return _bulk_mutation_response(result)


@router.post(
    "/copy",
    response_model=CopyResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def copy_sla_configurations(
    payload: CopyRequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> CopyResponse:
    result = engine.copy(
        payload.from_department_id,
        payload.to_department_id,
        payload.company_id,
        payload.overwrite_existing,
    )
    return CopyResponse(
        data=CopyData(
            copied=_out(result.copied),
            copied_count=len(result.copied),
            skipped_count=result.skipped,
            errors=_item_errors(result.errors),
            error_count=len(result.errors),
        )
    )


@router.post("/validate", response_model=ValidationResponse)
def validate_sla_configuration(
    payload: SLAConfigurationCandidate,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> ValidationResponse:
    result = engine.validate(payload)
    return ValidationResponse(
        data=ValidationResultOut(
            is_valid=result.is_valid,
            errors=_issues(result.errors),
            warnings=_issues(result.warnings),
        )
    )


@router.post("/resolve", response_model=EffectiveSLAResponse)
def resolve_effective_sla(
    payload: EffectiveSLARequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> EffectiveSLAResponse:
    effective = engine.resolve_effective(
        payload.company_id,
        payload.department_id,
        payload.incident_type_id,
        payload.priority_id,
    )
    if effective is None:
        return EffectiveSLAResponse(data=None)
    return EffectiveSLAResponse(
        data=EffectiveSLAOut(
            response_time_hours=effective.response_time_hours,
            resolution_time_hours=effective.resolution_time_hours,
            source=effective.source,
            configuration_id=effective.configuration_id,
        )
    )


@router.post(
    "/import-csv",
    response_model=CsvImportResponse,
    dependencies=[Depends(rate_limit("bulk"))],
)
def import_sla_configurations_csv(
    payload: CsvImportRequest,
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> CsvImportResponse:
    result = engine.import_csv(payload.csv_data)
    return CsvImportResponse(
        data=CsvImportData(
            processed=result.processed,
            successful=len(result.success),
            errors=len(result.errors),
            duplicates=len(result.duplicates),
            details=CsvImportDetails(
                success=[CsvLineSuccessOut(line=line.line, id=line.id, message=line.message) for line in result.success],
                errors=_csv_issues(result.errors),
                duplicates=_csv_issues(result.duplicates),
            ),
        )
    )


@router.get("/{config_id}", response_model=SLAConfigurationResponse)
def get_sla_configuration(
    config_id: int = Path(..., ge=1),
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> SLAConfigurationResponse:
    return SLAConfigurationResponse(data=SLAConfigurationOut.model_validate(engine.get(config_id)))


@router.put("/{config_id}", response_model=SLAConfigurationResponse)
def update_sla_configuration(
    payload: SLAConfigurationUpdate,
    config_id: int = Path(..., ge=1),
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> SLAConfigurationResponse:
    config = engine.update(config_id, payload)
    return SLAConfigurationResponse(data=SLAConfigurationOut.model_validate(config))


@router.delete("/{config_id}", response_model=MessageResponse)
def delete_sla_configuration(
    config_id: int = Path(..., ge=1),
    engine: SLAConfigurationEngine = Depends(get_sla_engine),
) -> MessageResponse:
    engine.delete(config_id)
    return MessageResponse(message="sla_configuration_deleted")
