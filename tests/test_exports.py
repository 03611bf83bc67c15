from __future__ import annotations

import unittest
from datetime import datetime, timezone
from io import BytesIO

from openpyxl import load_workbook

from payroll_recon.models import AttendanceDay, DifferenceCategory, EmployeeRecord
from payroll_recon.services.exports import (
    CATEGORY_FILLS,
    COMPARISON_HEADERS,
    build_comparison_workbook,
    export_comparison_xlsx,
)
from payroll_recon.services.lookups import HRReferenceRow, PaidLeaveRow, build_override_lookups
from payroll_recon.services.reconcile import reconcile_roster

GENERATED_AT = datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc)


def _results():
    matched = EmployeeRecord(
        emp_code="77",
        emp_name="Recon Worker",
        department="Worker",
        days=(
            AttendanceDay(date=1, status="P", in_time="09:30", out_time="17:30"),
            AttendanceDay(date=2, status="P", in_time="09:30", out_time="17:30"),
            AttendanceDay(date=3, status="H"),
            AttendanceDay(date=4, status="P", in_time="08:30", out_time="19:30", ot_hrs="0:30"),
        ),
    )
    unmatched = EmployeeRecord(
        emp_code="78",
        emp_name="No Reference",
        department="Staff",
        days=(AttendanceDay(date=1, status="P", in_time="08:30", out_time="17:30"),),
    )
    lookups = build_override_lookups(
        paid_leave=[PaidLeaveRow("77", "Recon Worker", paid_days=1)],
        hr_reference=[HRReferenceRow("77", "Recon Worker", present_days=4, late_hours=2, ot_hours=0.5)],
    )
    return reconcile_roster([matched, unmatched], lookups, selected_holidays=1)


def _header_row(ws) -> int:
    for row_idx in range(1, ws.max_row + 1):
        if ws.cell(row=row_idx, column=1).value == "Emp Code":
            return row_idx
    raise AssertionError("header row not found")


class ComparisonWorkbookTests(unittest.TestCase):
    def test_sheets_and_header_layout(self) -> None:
        workbook = build_comparison_workbook(_results(), generated_at=GENERATED_AT)
        self.assertEqual(workbook.sheetnames, ["Comparison", "Details"])

        ws = workbook["Comparison"]
        self.assertEqual(ws.cell(row=1, column=1).value, "SOFTWARE VS HR COMPARISON")
        self.assertEqual(ws.cell(row=2, column=2).value, "2024-04-01 09:30:00")
        header_row = _header_row(ws)
        self.assertEqual(header_row, 6)
        self.assertEqual([cell.value for cell in ws[header_row]], COMPARISON_HEADERS)
        self.assertEqual(ws.freeze_panes, "A7")

    def test_comparison_rows_carry_categories(self) -> None:
        ws = build_comparison_workbook(_results(), generated_at=GENERATED_AT)["Comparison"]
        header_row = _header_row(ws)
        matched = [cell.value for cell in ws[header_row + 1]]
        unmatched = [cell.value for cell in ws[header_row + 2]]

        self.assertEqual(matched[:3], ["77", "Recon Worker", "Worker"])
        self.assertEqual(matched[3:7], [4.5, 4, 0.5, "Medium"])
        self.assertEqual(matched[10], "Match")
        self.assertEqual(matched[14], "Match")
        self.assertEqual(unmatched[4:7], ["N/A", "N/A", "N/A"])

        medium_cell = ws.cell(row=header_row + 1, column=7)
        self.assertEqual(medium_cell.fill.fgColor.rgb, CATEGORY_FILLS[DifferenceCategory.MEDIUM].fgColor.rgb)

    def test_detail_sheet_lists_breakdown(self) -> None:
        ws = build_comparison_workbook(_results(), generated_at=GENERATED_AT)["Details"]
        self.assertEqual(ws.cell(row=1, column=1).value, "Emp Code")
        self.assertEqual(ws.cell(row=2, column=3).value, "Worker")
        self.assertEqual(ws.cell(row=2, column=4).value, "2:00")
        self.assertEqual(ws.cell(row=2, column=12).value, -90)
        self.assertEqual(ws.cell(row=2, column=13).value, "-1.50")
        self.assertEqual(ws.cell(row=3, column=3).value, "Staff")

    def test_export_bytes_are_a_readable_workbook(self) -> None:
        payload = export_comparison_xlsx(_results(), generated_at=GENERATED_AT)
        workbook = load_workbook(BytesIO(payload))
        self.assertEqual(workbook.sheetnames, ["Comparison", "Details"])
        self.assertEqual(workbook["Comparison"].cell(row=7, column=1).value, "77")


if __name__ == "__main__":
    unittest.main()
