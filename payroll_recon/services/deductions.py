from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from payroll_recon.models import (
    ADJ_PRESENT_STATUSES,
    DEFAULT_ENGINE_CONFIG,
    HALF_DAY_STATUSES,
    M_WO_I_STATUSES,
    AttendanceDay,
    BreakPunch,
    BreakWindow,
    EmployeeRecord,
    EngineConfig,
    ShiftWindow,
)
from payroll_recon.services.classification import is_staff
from payroll_recon.services.lookups import OverrideLookups
from payroll_recon.services.timeparse import parse_clock_minutes, parse_minutes_count


@dataclass(frozen=True)
class DeductionBreakdown:
    late_minutes: int
    early_departure_minutes: int
    break_excess_minutes: int
    less_than_4_hours_minutes: int
    subtotal: int
    staff_relaxation_minutes: int
    total: int
    is_staff: bool


@dataclass(frozen=True)
class BreakInterval:
    start_minutes: int
    end_minutes: int

    @property
    def duration_minutes(self) -> int:
        return max(0, self.end_minutes - self.start_minutes)


def _is_half_day_adj_present(day: AttendanceDay, config: EngineConfig) -> bool:
    worked = day.worked_minutes()
    return 0 < worked <= config.adj_p_half_day_minutes


def day_late_minutes(
    day: AttendanceDay,
    *,
    staff: bool,
    custom_shift: ShiftWindow | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    """Lateness for one day before the grace rule is applied."""
    if not day.has_in_punch:
        return 0

    in_minutes = parse_clock_minutes(day.in_time)
    normal_start = custom_shift.start_minutes if custom_shift is not None else config.standard_start_minutes
    status = day.status_code

    if status in HALF_DAY_STATUSES:
        if in_minutes < config.morning_evening_cutoff_minutes:
            reference = normal_start
        else:
            reference = config.evening_shift_start_minutes
    elif status == "P":
        reference = normal_start
    elif status in ADJ_PRESENT_STATUSES and (staff or custom_shift is not None):
        reference = normal_start
    else:
        return 0

    return max(0, in_minutes - reference)


def calculate_late_minutes(
    employee: EmployeeRecord,
    *,
    custom_shift: ShiftWindow | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    staff = is_staff(employee, config)
    total = 0
    for day in employee.days:
        late = day_late_minutes(day, staff=staff, custom_shift=custom_shift, config=config)
        if late > config.late_grace_minutes:
            total += late
    return total


def day_early_departure_minutes(
    day: AttendanceDay,
    *,
    custom_shift: ShiftWindow | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    status = day.status_code
    if status in M_WO_I_STATUSES or status in HALF_DAY_STATUSES:
        return 0
    if status in ADJ_PRESENT_STATUSES and _is_half_day_adj_present(day, config):
        return 0

    if custom_shift is not None and day.has_out_punch:
        return max(0, custom_shift.end_minutes - parse_clock_minutes(day.out_time))
    return parse_minutes_count(day.early_dep)


def calculate_early_departure_minutes(
    employee: EmployeeRecord,
    *,
    custom_shift: ShiftWindow | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    return sum(
        day_early_departure_minutes(day, custom_shift=custom_shift, config=config)
        for day in employee.days
    )


def clean_punch_chain(punches: Iterable[BreakPunch]) -> list[BreakPunch]:
    """Sorted punches reduced to a strictly alternating chain that starts with an In."""
    chain: list[BreakPunch] = []
    expected = "in"
    for punch in sorted(punches, key=lambda item: item.minutes):
        if punch.minutes <= 0 or punch.kind != expected:
            continue
        chain.append(punch)
        expected = "out" if expected == "in" else "in"
    return chain


def break_intervals(punches: Iterable[BreakPunch]) -> list[BreakInterval]:
    chain = clean_punch_chain(punches)
    intervals: list[BreakInterval] = []
    for current, following in zip(chain, chain[1:]):
        if current.kind == "out" and following.kind == "in" and current.minutes < following.minutes:
            intervals.append(BreakInterval(current.minutes, following.minutes))
    return intervals


def allowed_break_minutes(interval: BreakInterval, windows: Sequence[BreakWindow]) -> int:
    allowed = 0
    for window in windows:
        overlap = min(interval.end_minutes, window.end_minutes) - max(interval.start_minutes, window.start_minutes)
        if overlap > 0:
            allowed += min(overlap, window.allowed_minutes)
    return allowed


def calculate_break_excess_minutes(
    employee: EmployeeRecord,
    lookups: OverrideLookups,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    staff = is_staff(employee, config)
    maintenance = lookups.is_maintenance(employee)
    punch_days = lookups.break_punch_days(employee)

    total = 0
    for day_number in sorted(punch_days):
        for interval in break_intervals(punch_days[day_number]):
            if staff and not maintenance and interval.start_minutes >= config.staff_break_evening_cutoff_minutes:
                continue
            allowed = allowed_break_minutes(interval, config.break_windows)
            total += max(0, interval.duration_minutes - allowed)
    return total


def calculate_less_than_4_hours_minutes(
    employee: EmployeeRecord,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> int:
    threshold = config.less_than_hours_threshold_minutes
    total = 0
    for day in employee.days:
        if day.status_code not in HALF_DAY_STATUSES:
            continue
        worked = day.worked_minutes()
        if worked < threshold:
            total += threshold - worked
    return total


def calculate_late_early_break_deductions(
    employee: EmployeeRecord,
    lookups: OverrideLookups | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DeductionBreakdown:
    lookups = lookups if lookups is not None else OverrideLookups()
    custom_shift = lookups.custom_shift_for(employee)
    staff = is_staff(employee, config)

    late = calculate_late_minutes(employee, custom_shift=custom_shift, config=config)
    early = calculate_early_departure_minutes(employee, custom_shift=custom_shift, config=config)
    break_excess = calculate_break_excess_minutes(employee, lookups, config)
    less_than_4_hours = calculate_less_than_4_hours_minutes(employee, config)

    subtotal = late + early + break_excess
    if config.include_less_than_4_hours:
        subtotal += less_than_4_hours

    relaxation = config.staff_relaxation_minutes if staff else 0
    return DeductionBreakdown(
        late_minutes=late,
        early_departure_minutes=early,
        break_excess_minutes=break_excess,
        less_than_4_hours_minutes=less_than_4_hours,
        subtotal=subtotal,
        staff_relaxation_minutes=relaxation,
        total=max(0, subtotal - relaxation),
        is_staff=staff,
    )
