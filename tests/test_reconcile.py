from __future__ import annotations

import unittest

from payroll_recon.models import AttendanceDay, DifferenceCategory, EmployeeRecord
from payroll_recon.services.lookups import HRReferenceRow, PaidLeaveRow, build_override_lookups
from payroll_recon.services.reconcile import reconcile_employee, reconcile_roster


def _worker(code: str = "77") -> EmployeeRecord:
    days = (
        AttendanceDay(date=1, day_of_week="Mo", status="P", in_time="09:30", out_time="17:30"),
        AttendanceDay(date=2, day_of_week="Tu", status="P", in_time="09:30", out_time="17:30"),
        AttendanceDay(date=3, day_of_week="We", status="H"),
        AttendanceDay(date=4, day_of_week="Th", status="P", in_time="08:30", out_time="19:30", ot_hrs="0:30"),
    )
    return EmployeeRecord(emp_code=code, emp_name="Recon Worker", department="Worker", days=days)


class ReconcileTests(unittest.TestCase):
    def test_final_difference_feeds_present_day_deduction(self) -> None:
        lookups = build_override_lookups(
            paid_leave=[PaidLeaveRow("77", "Recon Worker", paid_days=1)],
            hr_reference=[HRReferenceRow("77", "Recon Worker", present_days=4, late_hours=2, ot_hours=0.5)],
        )
        result = reconcile_employee(_worker(), lookups, selected_holidays=1)

        self.assertEqual(result.deductions.late_minutes, 120)
        self.assertEqual(result.deductions.total, 120)
        self.assertEqual(result.overtime.total_minutes, 30)
        self.assertEqual(result.final_difference_minutes, -90)
        self.assertEqual(result.stats.total, 4.0)
        self.assertEqual(result.stats.cross_deduction_days, 0.5)
        self.assertEqual(result.stats.grand_total, 4.5)

        self.assertEqual(result.comparison.present_days.difference, 0.5)
        self.assertEqual(result.comparison.present_days.category, DifferenceCategory.MEDIUM)
        self.assertEqual(result.comparison.late_hours.category, DifferenceCategory.MATCH)
        self.assertEqual(result.comparison.ot_hours.category, DifferenceCategory.MATCH)

    def test_roster_defaults_selected_holidays_to_lookup_dates(self) -> None:
        lookups = build_override_lookups(holiday_dates=[3, 10])
        results = reconcile_roster([_worker("1"), _worker("2")], lookups)

        self.assertEqual(len(results), 2)
        self.assertEqual(results[0].stats.h_base, 2.0)
        self.assertEqual(results[1].employee.emp_code, "2")

    def test_reconciliation_is_repeatable(self) -> None:
        employee = _worker()
        self.assertEqual(reconcile_employee(employee), reconcile_employee(employee))


if __name__ == "__main__":
    unittest.main()
