from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Literal

from payroll_recon.errors import RosterValidationError
from payroll_recon.services.timeparse import (
    is_punch,
    parse_clock_minutes,
    parse_duration_minutes,
)


class DayStatus(str, enum.Enum):
    PRESENT = "P"
    ABSENT = "A"
    HALF_DAY = "P/A"
    HOLIDAY = "H"
    WEEK_OFF = "WO"
    ON_DUTY = "OD"
    LEAVE = "LEAVE"
    ADJ_PRESENT = "ADJ-P"
    ADJ_HALF_DAY = "ADJ-P/A"
    ADJ_HOLIDAY = "ADJ-M/WO-I"
    ADJ_M = "ADJ-M"
    WO_I = "WO-I"
    M_WO_I = "M/WO-I"


class DifferenceCategory(str, enum.Enum):
    NOT_AVAILABLE = "N/A"
    MATCH = "Match"
    MINOR = "Minor"
    MEDIUM = "Medium"
    MAJOR = "Major"


HALF_DAY_STATUSES = frozenset({"P/A", "PA", "ADJ-P/A", "ADJP/A", "ADJ-PA"})
ADJ_PRESENT_STATUSES = frozenset({"ADJ-P", "ADJP"})
M_WO_I_STATUSES = frozenset({"M/WO-I", "ADJ-M/WO-I"})
ADJ_HOLIDAY_PRESENT_STATUSES = frozenset({"ADJ-M/WO-I", "ADJ-M"})
STAFF_OT_STATUSES = frozenset({"ADJ-P", "WO-I", "ADJ-M"})
SANDWICH_RUN_STATUSES = frozenset({"H", "ADJ-M", "WO-I", "ADJ-M/WO-I"})
ABSENT_STATUSES = frozenset({"A", "NA", "ABSENT"})
SATURDAY_NAMES = frozenset({"sa", "sat", "saturday"})


@dataclass(frozen=True)
class BreakWindow:
    name: str
    start_minutes: int
    end_minutes: int
    allowed_minutes: int


DEFAULT_BREAK_WINDOWS: tuple[BreakWindow, ...] = (
    BreakWindow("Tea Break 1", 10 * 60 + 15, 10 * 60 + 30, 15),
    BreakWindow("Lunch Break", 12 * 60 + 30, 14 * 60, 30),
    BreakWindow("Tea Break 2", 15 * 60 + 15, 15 * 60 + 30, 15),
    BreakWindow("Dinner Break", 19 * 60 + 30, 21 * 60, 30),
)


@dataclass(frozen=True)
class EngineConfig:
    staff_by_default: bool = True
    standard_start_minutes: int = 8 * 60 + 30
    evening_shift_start_minutes: int = 13 * 60 + 15
    morning_evening_cutoff_minutes: int = 10 * 60
    late_grace_minutes: int = 5
    staff_relaxation_minutes: int = 4 * 60
    adj_p_half_day_minutes: int = 4 * 60
    adjusted_holiday_half_day_minutes: int = 4 * 60
    less_than_hours_threshold_minutes: int = 4 * 60
    include_less_than_4_hours: bool = False
    break_windows: tuple[BreakWindow, ...] = DEFAULT_BREAK_WINDOWS
    staff_break_evening_cutoff_minutes: int = 17 * 60 + 30
    shift_end_minutes: int = 17 * 60 + 30
    adj_p_overtime_buffer_minutes: int = 30
    custom_shift_min_overtime_minutes: int = 5
    maintenance_ot_factor: float = 0.95


DEFAULT_ENGINE_CONFIG = EngineConfig()


@dataclass(frozen=True)
class ShiftWindow:
    start_minutes: int
    end_minutes: int


@dataclass(frozen=True)
class GrantWindow:
    from_day: int = 1
    to_day: int = 31

    def contains(self, day_number: int) -> bool:
        return self.from_day <= day_number <= self.to_day


@dataclass(frozen=True)
class BreakPunch:
    kind: Literal["in", "out"]
    minutes: int


@dataclass(frozen=True)
class PaidLeave:
    paid_days: float = 0.0
    adj_days: float = 0.0
    leave_days: float = 0.0

    @property
    def total_days(self) -> float:
        return self.paid_days + self.adj_days + self.leave_days


@dataclass(frozen=True)
class HRReference:
    present_days: float | None = None
    late_hours: float | None = None
    ot_hours: float | None = None


@dataclass(frozen=True)
class AttendanceDay:
    date: int
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

    @property
    def status_code(self) -> str:
        return (self.status or "").strip().upper()

    @property
    def is_saturday(self) -> bool:
        return (self.day_of_week or "").strip().lower() in SATURDAY_NAMES

    @property
    def has_in_punch(self) -> bool:
        return is_punch(self.in_time)

    @property
    def has_out_punch(self) -> bool:
        return is_punch(self.out_time)

    @property
    def has_both_punches(self) -> bool:
        return self.has_in_punch and self.has_out_punch

    def punch_span_minutes(self) -> int:
        if not self.has_both_punches:
            return 0
        return max(0, parse_clock_minutes(self.out_time) - parse_clock_minutes(self.in_time))

    def worked_minutes(self) -> int:
        worked = parse_duration_minutes(self.work_hrs)
        if worked == 0:
            worked = self.punch_span_minutes()
        return worked


@dataclass(frozen=True)
class AdjustmentRecord:
    original_date: int
    adjusted_date: int
    applied_at: str | None = None

    def touches(self, day_number: int) -> bool:
        return day_number in (self.original_date, self.adjusted_date)


@dataclass(frozen=True)
class EmployeeRecord:
    emp_code: str
    emp_name: str
    company_name: str = ""
    department: str = ""
    present: float = 0
    absent: float = 0
    holiday: float = 0
    week_off: float = 0
    od: float = 0
    leave: float = 0
    total_ot_hours: str = "0:00"
    days: tuple[AttendanceDay, ...] = field(default_factory=tuple)
    adjustments: tuple[AdjustmentRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", tuple(self.days))
        object.__setattr__(self, "adjustments", tuple(self.adjustments))
        previous: int | None = None
        for day in self.days:
            if previous is not None and day.date <= previous:
                raise RosterValidationError(
                    f"Days for employee {self.emp_code} must be in ascending date order "
                    f"(day {day.date} follows day {previous})"
                )
            previous = day.date

    def day_for(self, day_number: int) -> AttendanceDay | None:
        for day in self.days:
            if day.date == day_number:
                return day
        return None

    def with_days(self, days: tuple[AttendanceDay, ...], **changes: object) -> EmployeeRecord:
        return replace(self, days=tuple(days), **changes)
