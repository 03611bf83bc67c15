from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

from payroll_recon.models import DifferenceCategory, HRReference
from payroll_recon.services.timeparse import minutes_to_hours

NOT_AVAILABLE = "N/A"

Difference = Union[float, Literal["N/A"], None]


@dataclass(frozen=True)
class DifferenceThresholds:
    medium: float
    major: float
    inclusive: bool = False

    def reaches(self, magnitude: float, threshold: float) -> bool:
        return magnitude >= threshold if self.inclusive else magnitude > threshold


PRESENT_DAY_THRESHOLDS = DifferenceThresholds(medium=0.5, major=1.0, inclusive=True)
HOUR_THRESHOLDS = DifferenceThresholds(medium=1, major=2, inclusive=False)


def categorize_difference(diff: Difference, thresholds: DifferenceThresholds) -> DifferenceCategory:
    if diff is None or diff == NOT_AVAILABLE:
        return DifferenceCategory.NOT_AVAILABLE
    magnitude = abs(float(diff))
    if magnitude == 0:
        return DifferenceCategory.MATCH
    if thresholds.reaches(magnitude, thresholds.major):
        return DifferenceCategory.MAJOR
    if thresholds.reaches(magnitude, thresholds.medium):
        return DifferenceCategory.MEDIUM
    return DifferenceCategory.MINOR


def compute_difference(hr_value: float | None, software_value: float) -> Difference:
    """Software minus HR, rounded to cents; "N/A" when HR has no value.

    A positive difference means the software counted more than HR.
    """
    if hr_value is None:
        return NOT_AVAILABLE
    return round(float(software_value) - float(hr_value), 2)


@dataclass(frozen=True)
class MetricComparison:
    software: float
    hr: float | None
    difference: Difference
    category: DifferenceCategory


def compare_metric(software_value: float, hr_value: float | None, thresholds: DifferenceThresholds) -> MetricComparison:
    difference = compute_difference(hr_value, software_value)
    return MetricComparison(
        software=software_value,
        hr=hr_value,
        difference=difference,
        category=categorize_difference(difference, thresholds),
    )


@dataclass(frozen=True)
class ComparisonRow:
    emp_code: str
    emp_name: str
    department: str
    present_days: MetricComparison
    late_hours: MetricComparison
    ot_hours: MetricComparison


def build_comparison_row(
    *,
    emp_code: str,
    emp_name: str,
    department: str,
    software_present_days: float,
    software_late_minutes: int,
    software_ot_minutes: int,
    hr: HRReference | None,
) -> ComparisonRow:
    hr = hr or HRReference()
    return ComparisonRow(
        emp_code=emp_code,
        emp_name=emp_name,
        department=department,
        present_days=compare_metric(round(software_present_days, 1), hr.present_days, PRESENT_DAY_THRESHOLDS),
        late_hours=compare_metric(minutes_to_hours(software_late_minutes), hr.late_hours, HOUR_THRESHOLDS),
        ot_hours=compare_metric(minutes_to_hours(software_ot_minutes), hr.ot_hours, HOUR_THRESHOLDS),
    )
