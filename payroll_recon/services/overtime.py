from __future__ import annotations

from dataclasses import dataclass

from payroll_recon.models import (
    ADJ_PRESENT_STATUSES,
    DEFAULT_ENGINE_CONFIG,
    STAFF_OT_STATUSES,
    AttendanceDay,
    EmployeeRecord,
    EngineConfig,
    GrantWindow,
    ShiftWindow,
)
from payroll_recon.services.classification import is_staff
from payroll_recon.services.lookups import OverrideLookups
from payroll_recon.services.timeparse import parse_clock_minutes, parse_duration_minutes


@dataclass(frozen=True)
class OvertimeBreakdown:
    base_minutes: int
    after_haircut_minutes: int
    full_night_bonus_minutes: int
    total_minutes: int
    maintenance_haircut_applied: bool
    grant_window: GrantWindow | None
    counted_days: tuple[int, ...]


def day_overtime_minutes(
    day: AttendanceDay,
    *,
    custom_shift: ShiftWindow | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    if custom_shift is not None:
        if not day.has_out_punch:
            return 0
        extra = parse_clock_minutes(day.out_time) - custom_shift.end_minutes
        return extra if extra >= config.custom_shift_min_overtime_minutes else 0

    if day.status_code in ADJ_PRESENT_STATUSES:
        if not day.has_out_punch:
            return 0
        out_minutes = parse_clock_minutes(day.out_time)
        if out_minutes > config.shift_end_minutes + config.adj_p_overtime_buffer_minutes:
            return out_minutes - config.shift_end_minutes
        return 0

    return parse_duration_minutes(day.ot_hrs)


def _counts_for_overtime(day: AttendanceDay, *, staff: bool, grant: GrantWindow | None) -> bool:
    if grant is not None:
        return grant.contains(day.date)
    if staff:
        return day.is_saturday or day.status_code in STAFF_OT_STATUSES
    return True


def calculate_overtime_breakdown(
    employee: EmployeeRecord,
    lookups: OverrideLookups | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> OvertimeBreakdown:
    lookups = lookups if lookups is not None else OverrideLookups()
    staff = is_staff(employee, config)
    grant = lookups.grant_for(employee)
    custom_shift = lookups.custom_shift_for(employee)

    base = 0
    counted: list[int] = []
    for day in employee.days:
        if not _counts_for_overtime(day, staff=staff, grant=grant):
            continue
        minutes = day_overtime_minutes(day, custom_shift=custom_shift, config=config)
        if minutes > 0:
            base += minutes
            counted.append(day.date)

    maintenance = lookups.is_maintenance(employee)
    after_haircut = base * config.maintenance_ot_factor if maintenance else float(base)
    bonus = lookups.full_night_hours_for(employee) * 60

    return OvertimeBreakdown(
        base_minutes=base,
        after_haircut_minutes=int(round(after_haircut)),
        full_night_bonus_minutes=int(round(bonus)),
        total_minutes=max(0, int(round(after_haircut + bonus))),
        maintenance_haircut_applied=maintenance,
        grant_window=grant,
        counted_days=tuple(counted),
    )


def calculate_overtime_minutes(
    employee: EmployeeRecord,
    lookups: OverrideLookups | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    return calculate_overtime_breakdown(employee, lookups, config).total_minutes
