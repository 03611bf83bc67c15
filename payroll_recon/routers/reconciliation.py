from dataclasses import asdict

from fastapi import APIRouter, Depends, Request, Response, status

from payroll_recon.errors import ApiError
from payroll_recon.models import EngineConfig
from payroll_recon.schemas import (
    AdjustmentApplyRequest,
    AdjustmentRemoveRequest,
    EmployeePayload,
    EmployeeReconciliationRead,
    HolidaySelectionRequest,
    HolidaySelectionResponse,
    ReconcileRequest,
    ReconcileResponse,
    SheetParseResponse,
)
from payroll_recon.services.adjustments import apply_adjustment, apply_holidays, remove_adjustment
from payroll_recon.services.exports import export_comparison_xlsx
from payroll_recon.services.reconcile import EmployeeReconciliation, reconcile_roster
from payroll_recon.services.sheets import SHEET_READERS
from payroll_recon.settings import get_engine_config

router = APIRouter(tags=["reconciliation"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_SHEET_BYTES = 10 * 1024 * 1024


def _run_reconciliation(payload: ReconcileRequest, config: EngineConfig) -> list[EmployeeReconciliation]:
    employees = [item.to_domain() for item in payload.employees]
    return reconcile_roster(
        employees,
        payload.overrides.to_lookups(),
        base_holidays=payload.base_holidays,
        selected_holidays=payload.selected_holidays,
        config=config,
    )


@router.post("/api/reconcile", response_model=ReconcileResponse)
def reconcile(
    payload: ReconcileRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> ReconcileResponse:
    results = _run_reconciliation(payload, config)
    return ReconcileResponse(
        employee_count=len(results),
        employees=[EmployeeReconciliationRead.from_result(result) for result in results],
    )


@router.post("/api/reconcile/export")
def export_reconciliation(
    payload: ReconcileRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> Response:
    results = _run_reconciliation(payload, config)
    return Response(
        content=export_comparison_xlsx(results),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="payroll-comparison.xlsx"'},
    )


@router.post("/api/adjustments", response_model=EmployeePayload)
def create_adjustment(payload: AdjustmentApplyRequest) -> EmployeePayload:
    updated = apply_adjustment(payload.employee.to_domain(), payload.original_date, payload.adjusted_date)
    return EmployeePayload.model_validate(updated)


@router.post("/api/adjustments/remove", response_model=EmployeePayload)
def delete_adjustment(payload: AdjustmentRemoveRequest) -> EmployeePayload:
    updated = remove_adjustment(payload.employee.to_domain(), payload.index)
    return EmployeePayload.model_validate(updated)


@router.post("/api/holidays", response_model=HolidaySelectionResponse)
def select_holidays(payload: HolidaySelectionRequest) -> HolidaySelectionResponse:
    employees = [item.to_domain() for item in payload.employees]
    updated = apply_holidays(employees, payload.dates, payload.count)
    return HolidaySelectionResponse(
        dates=sorted(set(payload.dates)),
        employees=[EmployeePayload.model_validate(employee) for employee in updated],
    )


@router.post("/api/sheets/{kind}", response_model=SheetParseResponse)
async def parse_override_sheet(kind: str, request: Request) -> SheetParseResponse:
    reader = SHEET_READERS.get(kind)
    if reader is None:
        raise ApiError(
            status_code=status.HTTP_404_NOT_FOUND,
            code="UNKNOWN_SHEET_KIND",
            message=f"Unknown sheet kind '{kind}'. Expected one of: {', '.join(sorted(SHEET_READERS))}",
        )

    body = await request.body()
    if len(body) > MAX_SHEET_BYTES:
        raise ApiError(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            code="SHEET_TOO_LARGE",
            message="File size exceeds 10MB limit",
        )

    rows = reader(body)
    return SheetParseResponse(kind=kind, row_count=len(rows), rows=[asdict(row) for row in rows])
