from __future__ import annotations

from payroll_recon.models import DEFAULT_ENGINE_CONFIG, EmployeeRecord, EngineConfig

CASH_EMPLOYEE_DEPARTMENT = "C CASH EMPLOYEE"


def _classification_text(employee: EmployeeRecord) -> str:
    return f"{employee.company_name or ''} {employee.department or ''}".lower()


def is_staff(employee: EmployeeRecord, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> bool:
    """Staff or Worker payroll policy, decided from company and department text.

    Checks run in priority order: cash employees and workers first, then staff.
    """
    text = _classification_text(employee)
    if "c cash" in text:
        return False
    if "worker" in text:
        return False
    if "staff" in text:
        return True
    return config.staff_by_default


def is_cash_employee(employee: EmployeeRecord) -> bool:
    return CASH_EMPLOYEE_DEPARTMENT in (employee.department or "").upper()
