from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from payroll_recon.models import DifferenceCategory
from payroll_recon.services.comparison import MetricComparison
from payroll_recon.services.reconcile import EmployeeReconciliation
from payroll_recon.services.timeparse import minutes_to_decimal_hours, minutes_to_hhmm

COMPARISON_HEADERS = [
    "Emp Code",
    "Emp Name",
    "Department",
    "Software Present Days",
    "HR Present Days",
    "Present Days Difference",
    "Present Days Category",
    "Software Late Hours",
    "HR Late Hours",
    "Late Hours Difference",
    "Late Hours Category",
    "Software OT Hours",
    "HR OT Hours",
    "OT Hours Difference",
    "OT Hours Category",
]

DETAIL_HEADERS = [
    "Emp Code",
    "Emp Name",
    "Type",
    "Late",
    "Early Departure",
    "Break Excess",
    "Less Than 4 Hours",
    "Staff Relaxation",
    "Deduction Total",
    "Overtime",
    "Full Night Bonus",
    "Final Difference",
    "Final Difference (h)",
    "PAA",
    "Valid Holidays",
    "Total",
    "Cross Deduction (days)",
    "ATotal",
    "Paid Leave Days",
    "Grand Total",
]

HEADER_FILL = PatternFill(fill_type="solid", fgColor="0B4F73")
META_LABEL_FILL = PatternFill(fill_type="solid", fgColor="EAF4F9")
META_VALUE_FILL = PatternFill(fill_type="solid", fgColor="F8FCFF")
ZEBRA_FILL = PatternFill(fill_type="solid", fgColor="F7FBFE")

CATEGORY_FILLS = {
    DifferenceCategory.MATCH: PatternFill(fill_type="solid", fgColor="E6F4EA"),
    DifferenceCategory.MINOR: PatternFill(fill_type="solid", fgColor="FFF9DB"),
    DifferenceCategory.MEDIUM: PatternFill(fill_type="solid", fgColor="FFF3CD"),
    DifferenceCategory.MAJOR: PatternFill(fill_type="solid", fgColor="FDE2E4"),
    DifferenceCategory.NOT_AVAILABLE: PatternFill(fill_type="solid", fgColor="E2E8F0"),
}

HEADER_FONT = Font(bold=True, color="FFFFFF")
BOLD_FONT = Font(bold=True, color="0F172A")
TITLE_FONT = Font(bold=True, color="0B4F73", size=14)
MUTED_FONT = Font(color="334155")

THIN_SIDE = Side(style="thin", color="D5E2EC")
THIN_BORDER = Border(left=THIN_SIDE, right=THIN_SIDE, top=THIN_SIDE, bottom=THIN_SIDE)


def _style_header(ws: Worksheet, row: int = 1) -> None:
    for cell in ws[row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = THIN_BORDER


def _auto_width(ws: Worksheet) -> None:
    for column_cells in ws.iter_cols(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        max_len = 0
        col_letter = get_column_letter(column_cells[0].column)
        for cell in column_cells:
            if cell.coordinate in ws.merged_cells:
                continue
            value = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(value))
        ws.column_dimensions[col_letter].width = min(max_len + 2, 45)


def _merge_title(ws: Worksheet, row: int, text: str, width: int) -> None:
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=max(width, 1))
    cell = ws.cell(row=row, column=1, value=text)
    cell.font = TITLE_FONT
    cell.alignment = Alignment(horizontal="left", vertical="center")


def _write_metadata(ws: Worksheet, items: Sequence[tuple[str, object]]) -> None:
    for label, value in items:
        ws.append([label, value])
        row_idx = ws.max_row
        label_cell = ws.cell(row=row_idx, column=1)
        value_cell = ws.cell(row=row_idx, column=2)
        label_cell.font = BOLD_FONT
        label_cell.fill = META_LABEL_FILL
        label_cell.border = THIN_BORDER
        value_cell.font = MUTED_FONT
        value_cell.fill = META_VALUE_FILL
        value_cell.border = THIN_BORDER
    ws.append([])


def _metric_cells(metric: MetricComparison) -> list[object]:
    hr_value = "N/A" if metric.hr is None else metric.hr
    return [metric.software, hr_value, metric.difference, metric.category.value]


def _style_data_rows(ws: Worksheet, *, start_row: int, end_row: int) -> None:
    for row_idx in range(start_row, end_row + 1):
        for col_idx in range(1, ws.max_column + 1):
            cell = ws.cell(row=row_idx, column=col_idx)
            cell.border = THIN_BORDER
            if row_idx % 2 == 0:
                cell.fill = ZEBRA_FILL
            if isinstance(cell.value, (int, float)):
                cell.alignment = Alignment(horizontal="center", vertical="center")
            else:
                cell.alignment = Alignment(horizontal="left", vertical="center")


def _style_category_cells(ws: Worksheet, *, header_row: int, start_row: int, end_row: int) -> None:
    category_cols = [
        col_idx
        for col_idx in range(1, ws.max_column + 1)
        if str(ws.cell(row=header_row, column=col_idx).value or "").endswith("Category")
    ]
    for row_idx in range(start_row, end_row + 1):
        for col_idx in category_cols:
            cell = ws.cell(row=row_idx, column=col_idx)
            try:
                category = DifferenceCategory(cell.value)
            except ValueError:
                continue
            cell.fill = CATEGORY_FILLS[category]
            cell.font = BOLD_FONT
            cell.alignment = Alignment(horizontal="center", vertical="center")


def _build_comparison_sheet(ws: Worksheet, results: Sequence[EmployeeReconciliation], generated_at: datetime) -> None:
    ws.title = "Comparison"
    _merge_title(ws, 1, "SOFTWARE VS HR COMPARISON", len(COMPARISON_HEADERS))

    category_counts = {category: 0 for category in DifferenceCategory}
    for result in results:
        category_counts[result.comparison.present_days.category] += 1

    _write_metadata(
        ws,
        [
            ("Generated (UTC)", generated_at.strftime("%Y-%m-%d %H:%M:%S")),
            ("Employees", len(results)),
            ("Present Days Mismatches", len(results) - category_counts[DifferenceCategory.MATCH]),
        ],
    )

    ws.append(COMPARISON_HEADERS)
    header_row = ws.max_row
    _style_header(ws, header_row)

    for result in results:
        row = result.comparison
        ws.append(
            [row.emp_code, row.emp_name, row.department]
            + _metric_cells(row.present_days)
            + _metric_cells(row.late_hours)
            + _metric_cells(row.ot_hours)
        )

    data_start_row = header_row + 1
    data_end_row = ws.max_row
    if data_end_row >= data_start_row:
        ws.auto_filter.ref = f"A{header_row}:{get_column_letter(len(COMPARISON_HEADERS))}{data_end_row}"
        _style_data_rows(ws, start_row=data_start_row, end_row=data_end_row)
        _style_category_cells(ws, header_row=header_row, start_row=data_start_row, end_row=data_end_row)
    ws.freeze_panes = f"A{header_row + 1}"
    _auto_width(ws)


def _build_detail_sheet(ws: Worksheet, results: Sequence[EmployeeReconciliation]) -> None:
    ws.append(DETAIL_HEADERS)
    _style_header(ws, 1)

    for result in results:
        deductions = result.deductions
        stats = result.stats
        ws.append(
            [
                result.employee.emp_code,
                result.employee.emp_name,
                "Staff" if deductions.is_staff else "Worker",
                minutes_to_hhmm(deductions.late_minutes),
                minutes_to_hhmm(deductions.early_departure_minutes),
                minutes_to_hhmm(deductions.break_excess_minutes),
                minutes_to_hhmm(deductions.less_than_4_hours_minutes),
                minutes_to_hhmm(deductions.staff_relaxation_minutes),
                minutes_to_hhmm(deductions.total),
                minutes_to_hhmm(result.overtime.total_minutes),
                minutes_to_hhmm(result.overtime.full_night_bonus_minutes),
                result.final_difference_minutes,
                minutes_to_decimal_hours(result.final_difference_minutes),
                stats.paa,
                stats.valid_holidays,
                stats.total,
                stats.cross_deduction_days,
                stats.a_total,
                stats.paid_leave_days,
                stats.grand_total,
            ]
        )

    if ws.max_row >= 2:
        _style_data_rows(ws, start_row=2, end_row=ws.max_row)
    ws.freeze_panes = "A2"
    _auto_width(ws)


def build_comparison_workbook(
    results: Sequence[EmployeeReconciliation],
    *,
    generated_at: datetime | None = None,
) -> Workbook:
    workbook = Workbook()
    _build_comparison_sheet(workbook.active, results, generated_at or datetime.now(timezone.utc))
    _build_detail_sheet(workbook.create_sheet("Details"), results)
    return workbook


def export_comparison_xlsx(
    results: Sequence[EmployeeReconciliation],
    *,
    generated_at: datetime | None = None,
) -> bytes:
    workbook = build_comparison_workbook(results, generated_at=generated_at)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
