"""Per-employee reconciliation pass.

Deductions and overtime are computed independently from the same inputs; their
net (overtime minus deduction total) feeds the present-day cross deduction, and
every resulting figure is compared with the HR reference when one exists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from payroll_recon.models import DEFAULT_ENGINE_CONFIG, EmployeeRecord, EngineConfig
from payroll_recon.services.comparison import ComparisonRow, build_comparison_row
from payroll_recon.services.deductions import DeductionBreakdown, calculate_late_early_break_deductions
from payroll_recon.services.lookups import OverrideLookups
from payroll_recon.services.overtime import OvertimeBreakdown, calculate_overtime_breakdown
from payroll_recon.services.present_days import EmployeeStats, calculate_employee_stats

logger = logging.getLogger("payroll_recon.reconcile")


@dataclass(frozen=True)
class EmployeeReconciliation:
    employee: EmployeeRecord
    deductions: DeductionBreakdown
    overtime: OvertimeBreakdown
    final_difference_minutes: int
    stats: EmployeeStats
    comparison: ComparisonRow


def reconcile_employee(
    employee: EmployeeRecord,
    lookups: OverrideLookups | None = None,
    *,
    base_holidays: float = 0,
    selected_holidays: float = 0,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> EmployeeReconciliation:
    lookups = lookups if lookups is not None else OverrideLookups()

    deductions = calculate_late_early_break_deductions(employee, lookups, config)
    overtime = calculate_overtime_breakdown(employee, lookups, config)
    final_difference = overtime.total_minutes - deductions.total
    stats = calculate_employee_stats(
        employee,
        base_holidays,
        selected_holidays,
        lookups,
        final_difference,
        config,
    )
    comparison = build_comparison_row(
        emp_code=employee.emp_code,
        emp_name=employee.emp_name,
        department=employee.department,
        software_present_days=stats.grand_total,
        software_late_minutes=deductions.total,
        software_ot_minutes=overtime.total_minutes,
        hr=lookups.hr_reference_for(employee),
    )

    logger.debug(
        "employee_reconciled",
        extra={
            "emp_code": employee.emp_code,
            "deduction_minutes": deductions.total,
            "overtime_minutes": overtime.total_minutes,
            "grand_total": stats.grand_total,
        },
    )
    return EmployeeReconciliation(
        employee=employee,
        deductions=deductions,
        overtime=overtime,
        final_difference_minutes=final_difference,
        stats=stats,
        comparison=comparison,
    )


def reconcile_roster(
    employees: Iterable[EmployeeRecord],
    lookups: OverrideLookups | None = None,
    *,
    base_holidays: float = 0,
    selected_holidays: float | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[EmployeeReconciliation]:
    lookups = lookups if lookups is not None else OverrideLookups()
    if selected_holidays is None:
        selected_holidays = len(lookups.holiday_dates)

    results = [
        reconcile_employee(
            employee,
            lookups,
            base_holidays=base_holidays,
            selected_holidays=selected_holidays,
            config=config,
        )
        for employee in employees
    ]
    logger.info("roster_reconciled", extra={"employees": len(results)})
    return results
