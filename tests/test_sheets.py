from __future__ import annotations

import unittest
from datetime import datetime
from io import BytesIO

from openpyxl import Workbook

from payroll_recon.errors import SheetFormatError
from payroll_recon.models import EmployeeRecord
from payroll_recon.services.deductions import calculate_break_excess_minutes
from payroll_recon.services.lookups import build_override_lookups
from payroll_recon.services.sheets import (
    SHEET_READERS,
    cell_day_number,
    read_break_punch_sheet,
    read_custom_timing_sheet,
    read_full_night_sheet,
    read_hr_reference_sheet,
    read_ot_grant_sheet,
    read_paid_leave_sheet,
)


def _workbook(*rows: list[object]) -> Workbook:
    workbook = Workbook()
    ws = workbook.active
    for row in rows:
        ws.append(row)
    return workbook


def _xlsx_bytes(*rows: list[object]) -> bytes:
    buffer = BytesIO()
    _workbook(*rows).save(buffer)
    return buffer.getvalue()


def _employee(code: str, name: str) -> EmployeeRecord:
    return EmployeeRecord(emp_code=code, emp_name=name, department="Staff")


class PaidLeaveSheetTests(unittest.TestCase):
    def test_header_below_title_row(self) -> None:
        payload = _xlsx_bytes(
            ["Paid Leave March"],
            ["Emp Code", "Name", "Paid Days", "ADJ Days", "Leave"],
            [7, "Asha Rao", 2, 0.5, 1],
            [],
            [None, "No Code", 1, 0, 0],
            ["Emp Code", "Name", "Paid Days", "ADJ Days", "Leave"],
            ["0012", "Vinod", "1.5", None, None],
        )
        rows = read_paid_leave_sheet(payload)

        self.assertEqual([row.emp_code for row in rows], ["7", "0012"])
        self.assertEqual((rows[0].paid_days, rows[0].adj_days, rows[0].leave_days), (2.0, 0.5, 1.0))
        self.assertEqual(rows[1].paid_days, 1.5)
        self.assertEqual(rows[1].adj_days, 0.0)

        lookups = build_override_lookups(paid_leave=rows)
        self.assertEqual(lookups.paid_leave_for(_employee("12", "Vinod")).total_days, 1.5)

    def test_missing_header_is_rejected(self) -> None:
        with self.assertLogs("payroll_recon.sheets", level="WARNING") as logs:
            with self.assertRaises(SheetFormatError) as ctx:
                read_paid_leave_sheet(_workbook(["Foo", "Bar"], [1, 2]))
        self.assertEqual(ctx.exception.code, "INVALID_SHEET")
        self.assertTrue(any("sheet_header_not_found" in line for line in logs.output))

    def test_unreadable_payloads(self) -> None:
        with self.assertRaises(SheetFormatError):
            read_paid_leave_sheet(b"")
        with self.assertRaises(SheetFormatError):
            read_paid_leave_sheet(b"not a workbook")


class HRReferenceSheetTests(unittest.TestCase):
    def test_reads_reference_columns(self) -> None:
        rows = read_hr_reference_sheet(
            _workbook(
                ["Emp. Code", "Employee Name", "Present Days", "Late Hours", "OT"],
                [101, "Meera", 24.5, 1.25, None],
            )
        )
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].emp_code, "101")
        self.assertEqual(rows[0].emp_name, "Meera")
        self.assertEqual(rows[0].present_days, 24.5)
        self.assertEqual(rows[0].late_hours, 1.25)
        self.assertIsNone(rows[0].ot_hours)


class GrantSheetTests(unittest.TestCase):
    def test_dates_become_day_numbers_and_blank_range_covers_month(self) -> None:
        rows = read_ot_grant_sheet(
            _workbook(
                ["Emp Code", "Name", "From Date", "To Date"],
                [3, "Kiran", datetime(2024, 3, 5), "2024-03-20"],
                [4, "Lata", None, None],
            )
        )
        self.assertEqual((rows[0].from_day, rows[0].to_day), (5, 20))
        self.assertEqual((rows[1].from_day, rows[1].to_day), (None, None))

        lookups = build_override_lookups(ot_grants=rows)
        window = lookups.grant_for(_employee("4", "Lata"))
        self.assertEqual((window.from_day, window.to_day), (1, 31))

    def test_cell_day_number(self) -> None:
        self.assertEqual(cell_day_number(12), 12)
        self.assertEqual(cell_day_number("07-Mar"), 7)
        self.assertIsNone(cell_day_number(45))
        self.assertIsNone(cell_day_number("later"))


class FullNightSheetTests(unittest.TestCase):
    def test_rows_for_the_same_employee_are_summed(self) -> None:
        rows = read_full_night_sheet(
            _workbook(
                ["Emp Code", "Name", "Full Night Hours"],
                [5, "Ravi", 2],
                [5, "Ravi", 3],
                [6, "Zed", 0],
            )
        )
        self.assertEqual(len(rows), 2)
        lookups = build_override_lookups(full_night=rows)
        self.assertEqual(lookups.full_night_hours_for(_employee("5", "Ravi")), 5.0)
        self.assertEqual(lookups.full_night_hours_for(_employee("6", "Zed")), 0.0)


class CustomTimingSheetTests(unittest.TestCase):
    def test_timing_text_becomes_shift_window(self) -> None:
        rows = read_custom_timing_sheet(
            _workbook(["Emp Code", "Name", "Custom Timing"], [9, "Noor", "9:00 TO 6:00"])
        )
        self.assertEqual(rows[0].custom_time, "9:00 TO 6:00")
        window = build_override_lookups(custom_timings=rows).custom_shift_for(_employee("9", "Noor"))
        self.assertEqual((window.start_minutes, window.end_minutes), (9 * 60, 18 * 60))


class BreakPunchSheetTests(unittest.TestCase):
    def test_cells_listing_several_punches_feed_break_excess(self) -> None:
        rows = read_break_punch_sheet(
            _workbook(
                ["Emp Code", "Name", "Date", "Lunch In", "Lunch Out"],
                [21, "Punch Person", 3, "09:00, 13:05", "12:30, 18:00"],
                [21, "Punch Person", "bad", "09:00", "18:00"],
            )
        )
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].date, 3)
        self.assertEqual(len(rows[0].punches), 4)

        lookups = build_override_lookups(break_punches=rows)
        self.assertEqual(calculate_break_excess_minutes(_employee("21", "Punch Person"), lookups), 5)

    def test_registry_names(self) -> None:
        self.assertEqual(
            sorted(SHEET_READERS),
            ["custom-timing", "full-night", "hr-reference", "lunch-punches", "maintenance", "ot-grant", "paid-leave"],
        )


if __name__ == "__main__":
    unittest.main()
