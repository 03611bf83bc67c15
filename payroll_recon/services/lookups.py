"""Employee-keyed override lookups.

Every override sheet (paid leave, OT grants, custom timings, full-night stay,
maintenance list, lunch punches, HR reference) is joined to the attendance
roster the same way: first by employee code in several normalized forms, then
by a name key. The indexes built here are read-only snapshots; rebuild them
whenever the source sheets change.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, Protocol, TypeVar

from payroll_recon.models import (
    BreakPunch,
    GrantWindow,
    HRReference,
    PaidLeave,
    ShiftWindow,
)
from payroll_recon.services.timeparse import parse_shift_window

logger = logging.getLogger("payroll_recon.lookups")

T = TypeVar("T")

DEFAULT_CUSTOM_TIMING = "9:00 TO 6:00"
_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]")
_NAME_NOISE_RE = re.compile(r"[^A-Z0-9\s]")
_DIGITS_RE = re.compile(r"\d+")


class EmployeeKey(Protocol):
    emp_code: str
    emp_name: str


def canonical(value: object) -> str:
    return str(value if value is not None else "").strip().upper()


def numeric_code(value: object) -> str:
    return "".join(_DIGITS_RE.findall(canonical(value)))


def code_keys(value: object) -> tuple[str, ...]:
    """Candidate keys for an employee code, most specific first.

    "EMP-0042" yields ("EMP-0042", "EMP0042", "0042", "42", "00042", "000042").
    """
    raw = canonical(value)
    strict = _NON_ALNUM_RE.sub("", raw)
    digits = numeric_code(raw)
    no_zeros = digits.lstrip("0")
    candidates = [raw, strict, digits, no_zeros]
    if digits:
        candidates.extend(digits.zfill(width) for width in (4, 5, 6))

    keys: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in keys:
            keys.append(candidate)
    return tuple(keys)


def name_key(value: object) -> str:
    tokens = _NAME_NOISE_RE.sub("", canonical(value)).split()
    return "".join(sorted(tokens))


def _row_identity(emp_code: str, emp_name: str) -> str:
    strict = _NON_ALNUM_RE.sub("", canonical(emp_code))
    if strict.isdigit():
        strict = strict.lstrip("0") or "0"
    if strict:
        return strict
    key = name_key(emp_name)
    return f"name:{key}" if key else ""


@dataclass(frozen=True)
class _Entry(Generic[T]):
    emp_code: str
    emp_name: str
    value: T


class EmployeeIndex(Generic[T]):
    """Code-then-name index over rows of one override sheet.

    Code keys resolve first-hit-wins. A name match is accepted only when it is
    unique, or when the numeric part of the code picks one of several rows.
    Rows for the same employee are combined with ``merge`` when given.
    """

    def __init__(
        self,
        entries: Iterable[tuple[str, str, T]] = (),
        *,
        merge: Callable[[T, T], T] | None = None,
    ) -> None:
        grouped: dict[str, _Entry[T]] = {}
        order: list[str] = []
        for emp_code, emp_name, value in entries:
            code = str(emp_code or "").strip()
            name = str(emp_name or "").strip()
            identity = _row_identity(code, name)
            if not identity:
                continue
            existing = grouped.get(identity)
            if existing is None:
                grouped[identity] = _Entry(code, name, value)
                order.append(identity)
            elif merge is not None:
                grouped[identity] = _Entry(existing.emp_code, existing.emp_name, merge(existing.value, value))

        self._entries: tuple[_Entry[T], ...] = tuple(grouped[identity] for identity in order)
        by_code: dict[str, _Entry[T]] = {}
        by_name: dict[str, list[_Entry[T]]] = {}
        for entry in self._entries:
            for key in code_keys(entry.emp_code):
                by_code.setdefault(key, entry)
            key = name_key(entry.emp_name)
            if key:
                by_name.setdefault(key, []).append(entry)
        self._by_code = MappingProxyType(by_code)
        self._by_name = MappingProxyType({key: tuple(rows) for key, rows in by_name.items()})

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, emp_code: object, emp_name: object = "") -> T | None:
        for key in code_keys(emp_code):
            hit = self._by_code.get(key)
            if hit is not None:
                return hit.value

        candidates = self._by_name.get(name_key(emp_name), ())
        if len(candidates) == 1:
            return candidates[0].value
        if len(candidates) > 1:
            digits = numeric_code(emp_code)
            for candidate in candidates:
                candidate_digits = numeric_code(candidate.emp_code)
                if digits and (
                    candidate_digits == digits or candidate_digits.lstrip("0") == digits.lstrip("0")
                ):
                    return candidate.value
            logger.debug(
                "override_lookup_ambiguous_name",
                extra={"emp_code": str(emp_code), "emp_name": str(emp_name), "candidates": len(candidates)},
            )
        return None

    def contains(self, emp_code: object, emp_name: object = "") -> bool:
        return self.get(emp_code, emp_name) is not None


@dataclass(frozen=True)
class PaidLeaveRow:
    emp_code: str
    emp_name: str
    paid_days: float = 0.0
    adj_days: float = 0.0
    leave_days: float = 0.0


@dataclass(frozen=True)
class GrantRow:
    emp_code: str
    emp_name: str
    from_day: int | None = None
    to_day: int | None = None


@dataclass(frozen=True)
class CustomTimingRow:
    emp_code: str
    emp_name: str
    custom_time: str = ""


@dataclass(frozen=True)
class FullNightRow:
    emp_code: str
    emp_name: str
    hours: float = 0.0


@dataclass(frozen=True)
class MaintenanceRow:
    emp_code: str
    emp_name: str


@dataclass(frozen=True)
class PunchRow:
    emp_code: str
    emp_name: str
    date: int
    punches: tuple[BreakPunch, ...] = ()


@dataclass(frozen=True)
class HRReferenceRow:
    emp_code: str
    emp_name: str
    present_days: float | None = None
    late_hours: float | None = None
    ot_hours: float | None = None


def _merge_punch_maps(
    left: Mapping[int, tuple[BreakPunch, ...]],
    right: Mapping[int, tuple[BreakPunch, ...]],
) -> Mapping[int, tuple[BreakPunch, ...]]:
    merged = dict(left)
    for day_number, punches in right.items():
        merged[day_number] = tuple(merged.get(day_number, ())) + tuple(punches)
    return MappingProxyType(merged)


def _grant_window(row: GrantRow) -> GrantWindow:
    return GrantWindow(from_day=row.from_day or 1, to_day=row.to_day or 31)


def _shift_window(row: CustomTimingRow) -> ShiftWindow | None:
    text = (row.custom_time or "").strip() or DEFAULT_CUSTOM_TIMING
    parsed = parse_shift_window(text)
    if parsed is None:
        return None
    return ShiftWindow(start_minutes=parsed[0], end_minutes=parsed[1])


@dataclass(frozen=True)
class OverrideLookups:
    paid_leave: EmployeeIndex[PaidLeave] = field(default_factory=EmployeeIndex)
    custom_shifts: EmployeeIndex[ShiftWindow] = field(default_factory=EmployeeIndex)
    ot_grants: EmployeeIndex[GrantWindow] = field(default_factory=EmployeeIndex)
    full_night_hours: EmployeeIndex[float] = field(default_factory=EmployeeIndex)
    maintenance: EmployeeIndex[bool] = field(default_factory=EmployeeIndex)
    break_punches: EmployeeIndex[Mapping[int, tuple[BreakPunch, ...]]] = field(default_factory=EmployeeIndex)
    hr_reference: EmployeeIndex[HRReference] = field(default_factory=EmployeeIndex)
    holiday_dates: frozenset[int] = frozenset()

    def paid_leave_for(self, employee: EmployeeKey) -> PaidLeave:
        return self.paid_leave.get(employee.emp_code, employee.emp_name) or PaidLeave()

    def custom_shift_for(self, employee: EmployeeKey) -> ShiftWindow | None:
        return self.custom_shifts.get(employee.emp_code, employee.emp_name)

    def grant_for(self, employee: EmployeeKey) -> GrantWindow | None:
        return self.ot_grants.get(employee.emp_code, employee.emp_name)

    def full_night_hours_for(self, employee: EmployeeKey) -> float:
        return float(self.full_night_hours.get(employee.emp_code, employee.emp_name) or 0.0)

    def is_maintenance(self, employee: EmployeeKey) -> bool:
        return self.maintenance.contains(employee.emp_code, employee.emp_name)

    def break_punch_days(self, employee: EmployeeKey) -> Mapping[int, tuple[BreakPunch, ...]]:
        return self.break_punches.get(employee.emp_code, employee.emp_name) or MappingProxyType({})

    def hr_reference_for(self, employee: EmployeeKey) -> HRReference | None:
        return self.hr_reference.get(employee.emp_code, employee.emp_name)


def build_override_lookups(
    *,
    paid_leave: Iterable[PaidLeaveRow] = (),
    custom_timings: Iterable[CustomTimingRow] = (),
    ot_grants: Iterable[GrantRow] = (),
    full_night: Iterable[FullNightRow] = (),
    maintenance: Iterable[MaintenanceRow] = (),
    break_punches: Iterable[PunchRow] = (),
    hr_reference: Iterable[HRReferenceRow] = (),
    holiday_dates: Iterable[int] = (),
) -> OverrideLookups:
    shift_entries = []
    for row in custom_timings:
        window = _shift_window(row)
        if window is not None:
            shift_entries.append((row.emp_code, row.emp_name, window))

    return OverrideLookups(
        paid_leave=EmployeeIndex(
            (row.emp_code, row.emp_name, PaidLeave(row.paid_days, row.adj_days, row.leave_days))
            for row in paid_leave
        ),
        custom_shifts=EmployeeIndex(shift_entries),
        ot_grants=EmployeeIndex((row.emp_code, row.emp_name, _grant_window(row)) for row in ot_grants),
        full_night_hours=EmployeeIndex(
            ((row.emp_code, row.emp_name, float(row.hours)) for row in full_night if row.hours > 0),
            merge=lambda left, right: left + right,
        ),
        maintenance=EmployeeIndex((row.emp_code, row.emp_name, True) for row in maintenance),
        break_punches=EmployeeIndex(
            (
                (row.emp_code, row.emp_name, MappingProxyType({row.date: tuple(row.punches)}))
                for row in break_punches
            ),
            merge=_merge_punch_maps,
        ),
        hr_reference=EmployeeIndex(
            (row.emp_code, row.emp_name, HRReference(row.present_days, row.late_hours, row.ot_hours))
            for row in hr_reference
        ),
        holiday_dates=frozenset(int(day_number) for day_number in holiday_dates),
    )
