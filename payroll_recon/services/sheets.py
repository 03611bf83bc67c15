"""Readers for the override workbooks uploaded alongside the attendance roster.

Each reader looks for a header row within the first rows of the first sheet,
maps columns by normalized header text and returns plain row records that
``build_override_lookups`` turns into lookups. Cells that do not parse are
treated as empty.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from io import BytesIO
from typing import Any, Union
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from payroll_recon.errors import SheetFormatError
from payroll_recon.models import BreakPunch
from payroll_recon.services.lookups import (
    CustomTimingRow,
    FullNightRow,
    GrantRow,
    HRReferenceRow,
    MaintenanceRow,
    PaidLeaveRow,
    PunchRow,
)
from payroll_recon.services.timeparse import parse_clock_minutes

logger = logging.getLogger("payroll_recon.sheets")

SheetSource = Union[bytes, BytesIO, Workbook]

MAX_HEADER_SCAN_ROWS = 20
_HEADER_NOISE_RE = re.compile(r"[^a-z0-9]")
_ISO_DATE_RE = re.compile(r"^\s*\d{4}-\d{1,2}-(\d{1,2})")
_LEADING_DAY_RE = re.compile(r"^\s*(\d{1,2})(?:\D|$)")
_TIME_SPLIT_RE = re.compile(r"[,;\s]+")


@dataclass(frozen=True)
class ColumnSpec:
    field: str
    aliases: tuple[str, ...]
    required: bool = True

    def matches(self, header: str) -> bool:
        for alias in self.aliases:
            if header == alias or (len(alias) >= 4 and alias in header):
                return True
        return False


CODE_COLUMN = ColumnSpec("code", ("empcode", "ecode", "employeecode", "employeeid", "empid", "empno", "code"))
NAME_COLUMN = ColumnSpec("name", ("empname", "employeename", "name"))


def normalize_header(value: object) -> str:
    return _HEADER_NOISE_RE.sub("", str(value if value is not None else "").lower())


def cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def cell_number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if number != number:
        return None
    return number


def cell_day_number(value: object) -> int | None:
    if isinstance(value, (datetime, date)):
        return value.day
    number = cell_number(value)
    if number is not None:
        day_number = int(number)
        return day_number if 1 <= day_number <= 31 else None
    text = cell_text(value)
    match = _ISO_DATE_RE.match(text) or _LEADING_DAY_RE.match(text)
    if match is None:
        return None
    day_number = int(match.group(1))
    return day_number if 1 <= day_number <= 31 else None


def cell_clock_minutes(value: object) -> list[int]:
    """All punch times in a cell; a cell may list several times separated by commas."""
    if value is None:
        return []
    if isinstance(value, (datetime, time, int, float)):
        minutes = parse_clock_minutes(value)
        return [minutes] if minutes > 0 else []
    found = []
    for part in _TIME_SPLIT_RE.split(str(value)):
        minutes = parse_clock_minutes(part.strip())
        if minutes > 0:
            found.append(minutes)
    return found


def open_workbook(source: SheetSource) -> Workbook:
    if isinstance(source, Workbook):
        return source
    stream = source if isinstance(source, BytesIO) else BytesIO(source)
    if not stream.getbuffer().nbytes:
        raise SheetFormatError("File is empty")
    try:
        return load_workbook(stream, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        raise SheetFormatError(f"Could not read workbook: {exc}") from exc


def _sheet_rows(source: SheetSource) -> list[tuple[Any, ...]]:
    workbook = open_workbook(source)
    if not workbook.worksheets:
        raise SheetFormatError("No worksheets found in the workbook")
    rows = list(workbook.worksheets[0].iter_rows(values_only=True))
    if not rows:
        raise SheetFormatError("The worksheet is empty")
    return rows


def find_header(
    rows: Sequence[Sequence[Any]],
    columns: Sequence[ColumnSpec],
    *,
    sheet: str,
) -> tuple[int, dict[str, int]]:
    for row_index, row in enumerate(rows[:MAX_HEADER_SCAN_ROWS]):
        headers = [normalize_header(value) for value in row]
        mapping: dict[str, int] = {}
        for spec in columns:
            for col_index, header in enumerate(headers):
                if not header or col_index in mapping.values():
                    continue
                if spec.matches(header):
                    mapping[spec.field] = col_index
                    break
        if all(spec.field in mapping for spec in columns if spec.required):
            return row_index, mapping

    required = [spec.field for spec in columns if spec.required]
    logger.warning("sheet_header_not_found", extra={"sheet": sheet, "required_columns": required})
    raise SheetFormatError(f"Could not find required headers in {sheet} sheet: {', '.join(required)}")


def _records(
    source: SheetSource,
    columns: Sequence[ColumnSpec],
    *,
    sheet: str,
) -> list[dict[str, Any]]:
    rows = _sheet_rows(source)
    header_index, mapping = find_header(rows, columns, sheet=sheet)

    records: list[dict[str, Any]] = []
    for row in rows[header_index + 1 :]:
        record = {field: (row[index] if index < len(row) else None) for field, index in mapping.items()}
        code = cell_text(record.get("code"))
        name = cell_text(record.get("name"))
        if not code and not name:
            continue
        if CODE_COLUMN.matches(normalize_header(code)):
            continue
        record["code"] = code
        record["name"] = name
        records.append(record)

    logger.info("sheet_parsed", extra={"sheet": sheet, "rows": len(records)})
    return records


def read_paid_leave_sheet(source: SheetSource) -> list[PaidLeaveRow]:
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("paid", ("paiddays", "paidday", "paidleavedays", "pldays", "paid", "pl")),
        ColumnSpec("adj", ("adjdays", "adjday", "adjustmentdays", "adjp"), required=False),
        ColumnSpec("leave", ("leavedays", "leave", "lv"), required=False),
    )
    return [
        PaidLeaveRow(
            emp_code=record["code"],
            emp_name=record["name"],
            paid_days=cell_number(record.get("paid")) or 0.0,
            adj_days=cell_number(record.get("adj")) or 0.0,
            leave_days=cell_number(record.get("leave")) or 0.0,
        )
        for record in _records(source, columns, sheet="paid leave")
        if record["code"]
    ]


def read_ot_grant_sheet(source: SheetSource) -> list[GrantRow]:
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("from", ("fromdate", "fromday", "from"), required=False),
        ColumnSpec("to", ("todate", "today", "upto", "till", "to"), required=False),
    )
    grants = []
    for record in _records(source, columns, sheet="OT grant"):
        grants.append(
            GrantRow(
                emp_code=record["code"],
                emp_name=record["name"],
                from_day=cell_day_number(record.get("from")),
                to_day=cell_day_number(record.get("to")),
            )
        )
    return grants


def read_full_night_sheet(source: SheetSource) -> list[FullNightRow]:
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("hours", ("fullnight", "nighthours", "nightot", "hours", "hrs")),
    )
    rows = []
    for record in _records(source, columns, sheet="full night"):
        hours = cell_number(record.get("hours")) or 0.0
        if hours > 0:
            rows.append(FullNightRow(emp_code=record["code"], emp_name=record["name"], hours=hours))
    return rows


def read_custom_timing_sheet(source: SheetSource) -> list[CustomTimingRow]:
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("timing", ("customtiming", "customtime", "shifttime", "timing", "time"), required=False),
    )
    return [
        CustomTimingRow(emp_code=record["code"], emp_name=record["name"], custom_time=cell_text(record.get("timing")))
        for record in _records(source, columns, sheet="custom timing")
    ]


def read_maintenance_sheet(source: SheetSource) -> list[MaintenanceRow]:
    columns = (CODE_COLUMN, ColumnSpec("name", NAME_COLUMN.aliases, required=False))
    return [
        MaintenanceRow(emp_code=record["code"], emp_name=record["name"])
        for record in _records(source, columns, sheet="maintenance")
    ]


def read_hr_reference_sheet(source: SheetSource) -> list[HRReferenceRow]:
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("present", ("presentdays", "salaryst", "salary", "actday", "days", "day"), required=False),
        ColumnSpec("late", ("latehours", "latehrs", "late"), required=False),
        ColumnSpec("ot", ("othours", "othrs", "overtime", "ot"), required=False),
    )
    return [
        HRReferenceRow(
            emp_code=record["code"],
            emp_name=record["name"],
            present_days=cell_number(record.get("present")),
            late_hours=cell_number(record.get("late")),
            ot_hours=cell_number(record.get("ot")),
        )
        for record in _records(source, columns, sheet="HR reference")
    ]


def read_break_punch_sheet(source: SheetSource) -> list[PunchRow]:
    """One row per employee and day; the In and Out cells list every punch of that day."""
    columns = (
        CODE_COLUMN,
        NAME_COLUMN,
        ColumnSpec("date", ("date", "day")),
        ColumnSpec("in", ("lunchin", "punchin", "intime", "in")),
        ColumnSpec("out", ("lunchout", "punchout", "outtime", "out")),
    )
    punch_rows = []
    for record in _records(source, columns, sheet="lunch punch"):
        day_number = cell_day_number(record.get("date"))
        if day_number is None:
            continue
        punches = [BreakPunch("in", minutes) for minutes in cell_clock_minutes(record.get("in"))]
        punches.extend(BreakPunch("out", minutes) for minutes in cell_clock_minutes(record.get("out")))
        if punches:
            punch_rows.append(
                PunchRow(emp_code=record["code"], emp_name=record["name"], date=day_number, punches=tuple(punches))
            )
    return punch_rows


SHEET_READERS: dict[str, Callable[[SheetSource], list[Any]]] = {
    "paid-leave": read_paid_leave_sheet,
    "ot-grant": read_ot_grant_sheet,
    "full-night": read_full_night_sheet,
    "custom-timing": read_custom_timing_sheet,
    "maintenance": read_maintenance_sheet,
    "hr-reference": read_hr_reference_sheet,
    "lunch-punches": read_break_punch_sheet,
}
