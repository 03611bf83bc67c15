from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import replace

from payroll_recon.errors import AdjustmentError, HolidaySelectionError
from payroll_recon.models import AdjustmentRecord, AttendanceDay, DayStatus, EmployeeRecord

logger = logging.getLogger("payroll_recon.adjustments")


def recalculate_totals(employee: EmployeeRecord) -> EmployeeRecord:
    counts = Counter(day.status_code for day in employee.days)
    return replace(
        employee,
        present=counts[DayStatus.PRESENT.value] + counts[DayStatus.ADJ_PRESENT.value],
        absent=counts[DayStatus.ABSENT.value],
        holiday=counts[DayStatus.HOLIDAY.value] + counts[DayStatus.ADJ_HOLIDAY.value],
        week_off=counts[DayStatus.WEEK_OFF.value],
        od=counts[DayStatus.ON_DUTY.value],
        leave=counts[DayStatus.LEAVE.value],
    )


def _adjusted_dates(employee: EmployeeRecord) -> set[int]:
    dates: set[int] = set()
    for adjustment in employee.adjustments:
        dates.update((adjustment.original_date, adjustment.adjusted_date))
    for day in employee.days:
        if day.is_adjustment_original or day.is_adjustment_target:
            dates.add(day.date)
    return dates


def apply_adjustment(
    employee: EmployeeRecord,
    original_date: int,
    adjusted_date: int,
    *,
    applied_at: str | None = None,
) -> EmployeeRecord:
    """Swap a worked day off against a working day.

    The original date becomes ADJ-P and the adjusted date becomes ADJ-M/WO-I;
    both remember their previous status so the swap can be undone.
    """
    if original_date == adjusted_date:
        raise AdjustmentError("Dates cannot be the same")

    original_day = employee.day_for(original_date)
    adjusted_day = employee.day_for(adjusted_date)
    if original_day is None or adjusted_day is None:
        missing = original_date if original_day is None else adjusted_date
        raise AdjustmentError(f"Date {missing} not found for employee {employee.emp_code}")

    taken = _adjusted_dates(employee)
    if original_date in taken or adjusted_date in taken:
        raise AdjustmentError("One or both dates are already adjusted")

    days = []
    for day in employee.days:
        if day.date == original_date:
            day = replace(
                day,
                status=DayStatus.ADJ_PRESENT.value,
                original_status=day.status,
                is_adjustment_original=True,
            )
        elif day.date == adjusted_date:
            day = replace(
                day,
                status=DayStatus.ADJ_HOLIDAY.value,
                original_status=day.status,
                is_adjustment_target=True,
            )
        days.append(day)

    record = AdjustmentRecord(original_date=original_date, adjusted_date=adjusted_date, applied_at=applied_at)
    updated = employee.with_days(tuple(days), adjustments=employee.adjustments + (record,))
    logger.info(
        "adjustment_applied",
        extra={"emp_code": employee.emp_code, "original_date": original_date, "adjusted_date": adjusted_date},
    )
    return recalculate_totals(updated)


def _restore_day(day: AttendanceDay) -> AttendanceDay:
    return replace(
        day,
        status=day.original_status if day.original_status is not None else day.status,
        original_status=None,
        is_adjustment_original=False,
        is_adjustment_target=False,
    )


def remove_adjustment(employee: EmployeeRecord, index: int) -> EmployeeRecord:
    if index < 0 or index >= len(employee.adjustments):
        raise AdjustmentError(f"Adjustment {index} does not exist for employee {employee.emp_code}")

    adjustment = employee.adjustments[index]
    days = tuple(_restore_day(day) if adjustment.touches(day.date) else day for day in employee.days)
    remaining = employee.adjustments[:index] + employee.adjustments[index + 1 :]
    logger.info(
        "adjustment_removed",
        extra={
            "emp_code": employee.emp_code,
            "original_date": adjustment.original_date,
            "adjusted_date": adjustment.adjusted_date,
        },
    )
    return recalculate_totals(employee.with_days(days, adjustments=remaining))


def validate_holiday_selection(
    employees: Sequence[EmployeeRecord],
    dates: Iterable[int],
    count: int,
) -> list[int]:
    selected = sorted(set(int(day_number) for day_number in dates))
    if count <= 0:
        raise HolidaySelectionError("Holiday count must be greater than zero")
    if count != len(selected):
        raise HolidaySelectionError(f"Please select exactly {count} dates (selected {len(selected)})")

    known = {day.date for employee in employees for day in employee.days}
    unknown = [day_number for day_number in selected if day_number not in known]
    if unknown:
        raise HolidaySelectionError(f"Dates not present in the roster: {', '.join(str(d) for d in unknown)}")
    return selected


def apply_holidays(
    employees: Sequence[EmployeeRecord],
    dates: Iterable[int],
    count: int,
) -> list[EmployeeRecord]:
    selected = set(validate_holiday_selection(employees, dates, count))

    updated: list[EmployeeRecord] = []
    for employee in employees:
        days = tuple(
            replace(
                day,
                status=DayStatus.HOLIDAY.value,
                original_status=day.original_status if day.original_status is not None else day.status,
                is_holiday=True,
            )
            if day.date in selected
            else day
            for day in employee.days
        )
        updated.append(recalculate_totals(employee.with_days(days)))

    logger.info("holidays_applied", extra={"dates": sorted(selected), "employees": len(updated)})
    return updated
