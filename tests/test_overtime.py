from __future__ import annotations

import unittest

from payroll_recon.models import AttendanceDay, EmployeeRecord, ShiftWindow
from payroll_recon.services.lookups import (
    CustomTimingRow,
    FullNightRow,
    GrantRow,
    MaintenanceRow,
    build_override_lookups,
)
from payroll_recon.services.overtime import (
    calculate_overtime_breakdown,
    calculate_overtime_minutes,
    day_overtime_minutes,
)


def _day(date: int, *, status: str = "P", dow: str = "Mo", ot: str = "", out_time: str = "17:30") -> AttendanceDay:
    return AttendanceDay(date=date, day_of_week=dow, status=status, in_time="08:30", out_time=out_time, ot_hrs=ot)


def _employee(*days: AttendanceDay, department: str = "Worker") -> EmployeeRecord:
    return EmployeeRecord(emp_code="55", emp_name="Ot Person", department=department, days=days)


class DayOvertimeTests(unittest.TestCase):
    def test_raw_field_is_used_without_custom_window(self) -> None:
        self.assertEqual(day_overtime_minutes(_day(1, ot="1:30")), 90)
        self.assertEqual(day_overtime_minutes(_day(1, ot="2.5")), 150)
        self.assertEqual(day_overtime_minutes(_day(1, ot="")), 0)

    def test_adjusted_present_needs_half_hour_past_shift_end(self) -> None:
        self.assertEqual(day_overtime_minutes(_day(1, status="ADJ-P", out_time="18:30", ot="5:00")), 60)
        self.assertEqual(day_overtime_minutes(_day(1, status="ADJ-P", out_time="17:50", ot="5:00")), 0)
        self.assertEqual(day_overtime_minutes(_day(1, status="ADJ-P", out_time="18:00")), 0)

    def test_custom_window_drops_small_overtime(self) -> None:
        window = ShiftWindow(9 * 60, 18 * 60)
        self.assertEqual(day_overtime_minutes(_day(1, out_time="18:04", ot="3:00"), custom_shift=window), 0)
        self.assertEqual(day_overtime_minutes(_day(1, out_time="18:45"), custom_shift=window), 45)
        self.assertEqual(day_overtime_minutes(_day(1, out_time="-", ot="3:00"), custom_shift=window), 0)


class OvertimeTotalTests(unittest.TestCase):
    def test_grant_window_includes_only_days_inside_range(self) -> None:
        employee = _employee(_day(15, ot="2:00"), _day(25, ot="2:00"), department="Staff")
        lookups = build_override_lookups(ot_grants=[GrantRow("55", "Ot Person", from_day=10, to_day=20)])

        breakdown = calculate_overtime_breakdown(employee, lookups)
        self.assertEqual(breakdown.base_minutes, 120)
        self.assertEqual(breakdown.counted_days, (15,))
        self.assertEqual(breakdown.total_minutes, 120)

    def test_staff_without_grant_counts_saturdays_and_special_days(self) -> None:
        employee = _employee(
            _day(1, dow="Sa", ot="1:00"),
            _day(3, dow="Mo", ot="1:00"),
            _day(4, dow="Tu", status="WO-I", ot="2:00"),
            department="Staff",
        )
        self.assertEqual(calculate_overtime_minutes(employee), 180)

    def test_worker_without_grant_counts_every_day(self) -> None:
        employee = _employee(_day(1, dow="Sa", ot="1:00"), _day(3, dow="Mo", ot="1:00"))
        self.assertEqual(calculate_overtime_minutes(employee), 120)

    def test_maintenance_haircut_applies_before_full_night_bonus(self) -> None:
        employee = _employee(_day(2, ot="10:00"))
        lookups = build_override_lookups(
            maintenance=[MaintenanceRow("55", "Ot Person")],
            full_night=[FullNightRow("55", "Ot Person", 2)],
        )

        breakdown = calculate_overtime_breakdown(employee, lookups)
        self.assertTrue(breakdown.maintenance_haircut_applied)
        self.assertEqual(breakdown.base_minutes, 600)
        self.assertEqual(breakdown.after_haircut_minutes, 570)
        self.assertEqual(breakdown.full_night_bonus_minutes, 120)
        self.assertEqual(breakdown.total_minutes, 690)

    def test_custom_timing_from_lookups(self) -> None:
        employee = _employee(_day(2, out_time="19:00", ot="0:10"))
        lookups = build_override_lookups(custom_timings=[CustomTimingRow("55", "Ot Person", "9:00 TO 6:00")])
        self.assertEqual(calculate_overtime_minutes(employee, lookups), 60)

    def test_overtime_is_never_negative(self) -> None:
        self.assertEqual(calculate_overtime_minutes(_employee()), 0)
        self.assertEqual(calculate_overtime_minutes(_employee(_day(1, ot="-1:00"))), 0)


if __name__ == "__main__":
    unittest.main()
