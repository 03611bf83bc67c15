from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from math import ceil

from payroll_recon.models import (
    ABSENT_STATUSES,
    ADJ_HOLIDAY_PRESENT_STATUSES,
    ADJ_PRESENT_STATUSES,
    DEFAULT_ENGINE_CONFIG,
    HALF_DAY_STATUSES,
    SANDWICH_RUN_STATUSES,
    AttendanceDay,
    EmployeeRecord,
    EngineConfig,
)
from payroll_recon.services.classification import is_cash_employee
from payroll_recon.services.lookups import OverrideLookups

CROSS_DEDUCTION_BLOCK_HOURS = 4
CROSS_DEDUCTION_BLOCK_DAYS = 0.5


@dataclass(frozen=True)
class PresentDayCounts:
    full_present_days: int
    half_present_days: int
    adj_full_days: int

    @property
    def paa(self) -> float:
        return self.full_present_days + self.adj_full_days + 0.5 * self.half_present_days


@dataclass(frozen=True)
class HolidayCount:
    valid_holidays: int
    excluded_holidays: int


@dataclass(frozen=True)
class EmployeeStats:
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


def count_present_days(
    days: Sequence[AttendanceDay],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> PresentDayCounts:
    full = 0
    half = 0
    adj_full = 0
    for day in days:
        status = day.status_code
        if status == "P":
            full += 1
        elif status in HALF_DAY_STATUSES:
            half += 1
        elif status in ADJ_PRESENT_STATUSES and day.has_both_punches:
            worked = day.worked_minutes()
            if 0 < worked <= config.adj_p_half_day_minutes:
                half += 1
            else:
                adj_full += 1
        elif status in ADJ_HOLIDAY_PRESENT_STATUSES and day.has_both_punches:
            span = day.punch_span_minutes()
            if 0 < span <= config.adjusted_holiday_half_day_minutes:
                half += 1
            elif span > config.adjusted_holiday_half_day_minutes:
                adj_full += 1
    return PresentDayCounts(full_present_days=full, half_present_days=half, adj_full_days=adj_full)


def count_valid_holidays(days: Sequence[AttendanceDay]) -> HolidayCount:
    """Holiday credit after the sandwich rule.

    A maximal run of holiday-like days whose nearest ordinary neighbours on
    both sides are absences loses the credit of every "H" day in it. A run at
    either end of the month has no neighbour on that side and keeps its credit.
    """
    statuses = [day.status_code for day in days]
    valid = 0
    excluded = 0
    index = 0
    while index < len(statuses):
        if statuses[index] not in SANDWICH_RUN_STATUSES:
            index += 1
            continue

        run_end = index
        while run_end < len(statuses) and statuses[run_end] in SANDWICH_RUN_STATUSES:
            run_end += 1

        before = statuses[index - 1] if index > 0 else None
        after = statuses[run_end] if run_end < len(statuses) else None
        sandwiched = before in ABSENT_STATUSES and after in ABSENT_STATUSES

        holidays = sum(1 for status in statuses[index:run_end] if status == "H")
        if sandwiched:
            excluded += holidays
        else:
            valid += holidays
        index = run_end
    return HolidayCount(valid_holidays=valid, excluded_holidays=excluded)


def cross_deduction_days(final_difference_minutes: float) -> float:
    if final_difference_minutes >= 0:
        return 0.0
    hours = abs(final_difference_minutes) / 60
    return CROSS_DEDUCTION_BLOCK_DAYS * ceil(hours / CROSS_DEDUCTION_BLOCK_HOURS)


def calculate_employee_stats(
    employee: EmployeeRecord,
    base_holidays: float = 0,
    selected_holidays: float = 0,
    lookups: OverrideLookups | None = None,
    final_difference_minutes: float = 0,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> EmployeeStats:
    lookups = lookups if lookups is not None else OverrideLookups()
    cash = is_cash_employee(employee)

    counts = count_present_days(employee.days, config)
    holidays = count_valid_holidays(employee.days)
    valid_holidays = 0 if cash else holidays.valid_holidays
    h_base = 0.0 if cash else float(selected_holidays or base_holidays or 0)

    total = counts.paa + valid_holidays
    deduction = cross_deduction_days(final_difference_minutes)
    a_total = max(0.0, total - deduction)
    paid_leave_days = lookups.paid_leave_for(employee).total_days
    grand_total = max(0.0, a_total + paid_leave_days)

    return EmployeeStats(
        full_present_days=counts.full_present_days,
        half_present_days=counts.half_present_days,
        adj_full_days=counts.adj_full_days,
        paa=round(counts.paa, 1),
        h_base=h_base,
        valid_holidays=valid_holidays,
        excluded_holidays=holidays.excluded_holidays,
        total=round(total, 1),
        final_difference_minutes=int(round(final_difference_minutes)),
        cross_deduction_days=deduction,
        a_total=round(a_total, 1),
        paid_leave_days=round(paid_leave_days, 1),
        grand_total=round(grand_total, 1),
        is_cash_employee=cash,
    )
