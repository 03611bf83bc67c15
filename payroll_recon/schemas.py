from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from payroll_recon.models import (
    AdjustmentRecord,
    AttendanceDay,
    BreakPunch,
    DifferenceCategory,
    EmployeeRecord,
)
from payroll_recon.services.lookups import (
    CustomTimingRow,
    FullNightRow,
    GrantRow,
    HRReferenceRow,
    MaintenanceRow,
    OverrideLookups,
    PaidLeaveRow,
    PunchRow,
    build_override_lookups,
)
from payroll_recon.services.reconcile import EmployeeReconciliation
from payroll_recon.services.timeparse import parse_clock_minutes


class AttendanceDayPayload(BaseModel):
    date: int = Field(ge=1, le=31)
    day_of_week: str = ""
    status: str = ""
    in_time: str = "-"
    out_time: str = "-"
    late_mins: int | str = 0
    early_dep: int | str = 0
    ot_hrs: str = ""
    work_hrs: str = ""
    shift: str = ""
    original_status: str | None = None
    is_adjustment_original: bool = False
    is_adjustment_target: bool = False
    is_holiday: bool = False

    model_config = ConfigDict(from_attributes=True)

    def to_domain(self) -> AttendanceDay:
        return AttendanceDay(**self.model_dump())


class AdjustmentPayload(BaseModel):
    original_date: int = Field(ge=1, le=31)
    adjusted_date: int = Field(ge=1, le=31)
    applied_at: str | None = None

    model_config = ConfigDict(from_attributes=True)


class EmployeePayload(BaseModel):
    emp_code: str = Field(min_length=1)
    emp_name: str = ""
    company_name: str = ""
    department: str = ""
    present: float = 0
    absent: float = 0
    holiday: float = 0
    week_off: float = 0
    od: float = 0
    leave: float = 0
    total_ot_hours: str = "0:00"
    days: list[AttendanceDayPayload] = Field(default_factory=list)
    adjustments: list[AdjustmentPayload] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    def to_domain(self) -> EmployeeRecord:
        return EmployeeRecord(
            emp_code=self.emp_code.strip(),
            emp_name=self.emp_name.strip(),
            company_name=self.company_name,
            department=self.department,
            present=self.present,
            absent=self.absent,
            holiday=self.holiday,
            week_off=self.week_off,
            od=self.od,
            leave=self.leave,
            total_ot_hours=self.total_ot_hours,
            days=tuple(day.to_domain() for day in self.days),
            adjustments=tuple(AdjustmentRecord(**item.model_dump()) for item in self.adjustments),
        )


class EmployeeRef(BaseModel):
    emp_code: str = ""
    emp_name: str = ""

    @model_validator(mode="after")
    def _validate_identity(self) -> "EmployeeRef":
        self.emp_code = self.emp_code.strip()
        self.emp_name = self.emp_name.strip()
        if not self.emp_code and not self.emp_name:
            raise ValueError("Either emp_code or emp_name is required.")
        return self


class PaidLeavePayload(EmployeeRef):
    paid_days: float = 0
    adj_days: float = 0
    leave_days: float = 0


class GrantPayload(EmployeeRef):
    from_day: int | None = Field(default=None, ge=1, le=31)
    to_day: int | None = Field(default=None, ge=1, le=31)


class CustomTimingPayload(EmployeeRef):
    custom_time: str = ""


class FullNightPayload(EmployeeRef):
    hours: float = Field(default=0, ge=0)


class MaintenancePayload(EmployeeRef):
    pass


class BreakPunchPayload(BaseModel):
    kind: Literal["in", "out"]
    time: str


class LunchPunchPayload(EmployeeRef):
    date: int = Field(ge=1, le=31)
    punches: list[BreakPunchPayload] = Field(default_factory=list)


class HRReferencePayload(EmployeeRef):
    present_days: float | None = None
    late_hours: float | None = None
    ot_hours: float | None = None


class OverridesPayload(BaseModel):
    paid_leave: list[PaidLeavePayload] = Field(default_factory=list)
    custom_timings: list[CustomTimingPayload] = Field(default_factory=list)
    ot_grants: list[GrantPayload] = Field(default_factory=list)
    full_night: list[FullNightPayload] = Field(default_factory=list)
    maintenance: list[MaintenancePayload] = Field(default_factory=list)
    lunch_punches: list[LunchPunchPayload] = Field(default_factory=list)
    hr_reference: list[HRReferencePayload] = Field(default_factory=list)
    holiday_dates: list[int] = Field(default_factory=list)

    def to_lookups(self) -> OverrideLookups:
        return build_override_lookups(
            paid_leave=[PaidLeaveRow(**item.model_dump()) for item in self.paid_leave],
            custom_timings=[CustomTimingRow(**item.model_dump()) for item in self.custom_timings],
            ot_grants=[GrantRow(**item.model_dump()) for item in self.ot_grants],
            full_night=[FullNightRow(**item.model_dump()) for item in self.full_night],
            maintenance=[MaintenanceRow(**item.model_dump()) for item in self.maintenance],
            break_punches=[
                PunchRow(
                    emp_code=item.emp_code,
                    emp_name=item.emp_name,
                    date=item.date,
                    punches=tuple(BreakPunch(punch.kind, parse_clock_minutes(punch.time)) for punch in item.punches),
                )
                for item in self.lunch_punches
            ],
            hr_reference=[HRReferenceRow(**item.model_dump()) for item in self.hr_reference],
            holiday_dates=self.holiday_dates,
        )


class ReconcileRequest(BaseModel):
    employees: list[EmployeePayload] = Field(default_factory=list)
    overrides: OverridesPayload = Field(default_factory=OverridesPayload)
    base_holidays: float = Field(default=0, ge=0)
    selected_holidays: float | None = Field(default=None, ge=0)


class DeductionBreakdownRead(BaseModel):
    late_minutes: int
    early_departure_minutes: int
    break_excess_minutes: int
    less_than_4_hours_minutes: int
    subtotal: int
    staff_relaxation_minutes: int
    total: int
    is_staff: bool

    model_config = ConfigDict(from_attributes=True)


class GrantWindowRead(BaseModel):
    from_day: int
    to_day: int

    model_config = ConfigDict(from_attributes=True)


class OvertimeBreakdownRead(BaseModel):
    base_minutes: int
    after_haircut_minutes: int
    full_night_bonus_minutes: int
    total_minutes: int
    maintenance_haircut_applied: bool
    grant_window: GrantWindowRead | None = None
    counted_days: list[int] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class EmployeeStatsRead(BaseModel):
    full_present_days: int
    half_present_days: int
    adj_full_days: int
    paa: float
    h_base: float
    valid_holidays: int
    excluded_holidays: int
    total: float
    final_difference_minutes: int
    cross_deduction_days: float
    a_total: float
    paid_leave_days: float
    grand_total: float
    is_cash_employee: bool

    model_config = ConfigDict(from_attributes=True)


class MetricComparisonRead(BaseModel):
    software: float
    hr: float | None = None
    difference: float | Literal["N/A"]
    category: DifferenceCategory

    model_config = ConfigDict(from_attributes=True)


class ComparisonRead(BaseModel):
    present_days: MetricComparisonRead
    late_hours: MetricComparisonRead
    ot_hours: MetricComparisonRead

    model_config = ConfigDict(from_attributes=True)


class EmployeeReconciliationRead(BaseModel):
    emp_code: str
    emp_name: str
    department: str
    is_staff: bool
    deductions: DeductionBreakdownRead
    overtime: OvertimeBreakdownRead
    final_difference_minutes: int
    stats: EmployeeStatsRead
    comparison: ComparisonRead

    @classmethod
    def from_result(cls, result: EmployeeReconciliation) -> "EmployeeReconciliationRead":
        return cls(
            emp_code=result.employee.emp_code,
            emp_name=result.employee.emp_name,
            department=result.employee.department,
            is_staff=result.deductions.is_staff,
            deductions=DeductionBreakdownRead.model_validate(result.deductions),
            overtime=OvertimeBreakdownRead.model_validate(result.overtime),
            final_difference_minutes=result.final_difference_minutes,
            stats=EmployeeStatsRead.model_validate(result.stats),
            comparison=ComparisonRead.model_validate(result.comparison),
        )


class ReconcileResponse(BaseModel):
    employee_count: int
    employees: list[EmployeeReconciliationRead]


class AdjustmentApplyRequest(BaseModel):
    employee: EmployeePayload
    original_date: int = Field(ge=1, le=31)
    adjusted_date: int = Field(ge=1, le=31)


class AdjustmentRemoveRequest(BaseModel):
    employee: EmployeePayload
    index: int = Field(ge=0)


class HolidaySelectionRequest(BaseModel):
    employees: list[EmployeePayload] = Field(min_length=1)
    dates: list[int] = Field(default_factory=list)
    count: int

    @model_validator(mode="after")
    def _validate_dates(self) -> "HolidaySelectionRequest":
        for day_number in self.dates:
            if day_number < 1 or day_number > 31:
                raise ValueError("Holiday dates must be between 1 and 31.")
        return self


class HolidaySelectionResponse(BaseModel):
    dates: list[int]
    employees: list[EmployeePayload]


class SheetParseResponse(BaseModel):
    kind: str
    row_count: int
    rows: list[dict[str, Any]]
