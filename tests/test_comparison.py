from __future__ import annotations

import unittest

from payroll_recon.models import DifferenceCategory, HRReference
from payroll_recon.services.comparison import (
    HOUR_THRESHOLDS,
    PRESENT_DAY_THRESHOLDS,
    DifferenceThresholds,
    build_comparison_row,
    categorize_difference,
    compute_difference,
)


class CategorizeDifferenceTests(unittest.TestCase):
    def test_fixed_points(self) -> None:
        for thresholds in (PRESENT_DAY_THRESHOLDS, HOUR_THRESHOLDS):
            self.assertEqual(categorize_difference("N/A", thresholds), DifferenceCategory.NOT_AVAILABLE)
            self.assertEqual(categorize_difference(None, thresholds), DifferenceCategory.NOT_AVAILABLE)
            self.assertEqual(categorize_difference(0, thresholds), DifferenceCategory.MATCH)
            self.assertEqual(categorize_difference(-0.0, thresholds), DifferenceCategory.MATCH)

    def test_present_day_thresholds_are_inclusive(self) -> None:
        self.assertEqual(categorize_difference(0.4, PRESENT_DAY_THRESHOLDS), DifferenceCategory.MINOR)
        self.assertEqual(categorize_difference(0.5, PRESENT_DAY_THRESHOLDS), DifferenceCategory.MEDIUM)
        self.assertEqual(categorize_difference(1.0, PRESENT_DAY_THRESHOLDS), DifferenceCategory.MAJOR)
        self.assertEqual(categorize_difference(-1.5, PRESENT_DAY_THRESHOLDS), DifferenceCategory.MAJOR)

    def test_hour_thresholds_are_exclusive(self) -> None:
        self.assertEqual(categorize_difference(1, HOUR_THRESHOLDS), DifferenceCategory.MINOR)
        self.assertEqual(categorize_difference(1.5, HOUR_THRESHOLDS), DifferenceCategory.MEDIUM)
        self.assertEqual(categorize_difference(-2, HOUR_THRESHOLDS), DifferenceCategory.MEDIUM)
        self.assertEqual(categorize_difference(2.01, HOUR_THRESHOLDS), DifferenceCategory.MAJOR)

    def test_custom_thresholds(self) -> None:
        thresholds = DifferenceThresholds(medium=10, major=20, inclusive=True)
        self.assertEqual(categorize_difference(10, thresholds), DifferenceCategory.MEDIUM)
        self.assertEqual(categorize_difference(9.99, thresholds), DifferenceCategory.MINOR)


class ComparisonRowTests(unittest.TestCase):
    def test_difference_is_software_minus_hr(self) -> None:
        self.assertEqual(compute_difference(None, 5), "N/A")
        self.assertEqual(compute_difference(9, 10), 1.0)
        self.assertEqual(compute_difference(22, 21.5), -0.5)
        self.assertEqual(compute_difference(1, 1.333), 0.33)

    def test_row_converts_minutes_to_hours(self) -> None:
        row = build_comparison_row(
            emp_code="9",
            emp_name="Row Person",
            department="Staff",
            software_present_days=24.5,
            software_late_minutes=90,
            software_ot_minutes=200,
            hr=HRReference(present_days=26, late_hours=1.5),
        )
        self.assertEqual(row.present_days.difference, -1.5)
        self.assertEqual(row.present_days.category, DifferenceCategory.MAJOR)
        self.assertEqual(row.late_hours.software, 1.5)
        self.assertEqual(row.late_hours.category, DifferenceCategory.MATCH)
        self.assertEqual(row.ot_hours.software, 3.33)
        self.assertEqual(row.ot_hours.difference, "N/A")
        self.assertEqual(row.ot_hours.category, DifferenceCategory.NOT_AVAILABLE)

    def test_missing_hr_reference(self) -> None:
        row = build_comparison_row(
            emp_code="9",
            emp_name="Row Person",
            department="",
            software_present_days=20,
            software_late_minutes=0,
            software_ot_minutes=0,
            hr=None,
        )
        self.assertEqual(row.present_days.category, DifferenceCategory.NOT_AVAILABLE)


if __name__ == "__main__":
    unittest.main()
