"""Example: use the service layer directly, without Flask.

Controllers are thin; the rules live in the services built by the container.
"""

import importlib
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_engine.hr_engine.common.caller import CallerContext
from src.hr_engine.hr_engine.container import build_container
from src.hr_engine.hr_engine.core.enums import Role


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    today = date.today()
    for view in container.leave_engine.get_balances(1, today.year):
        print(view.leave_type_code, view.balance.total, view.balance.used, view.balance.remaining, view.accrued)
    print("score:", container.analytics.compute_attendance_score(1, today))

    admin = CallerContext(employee_id=None, role=Role.ADMIN)
    for payslip in container.payroll_engine.list_payslips(admin, year=today.year):
        print(payslip.employee_id, f"{payslip.month:02d}/{payslip.year}", payslip.net_salary, payslip.status.value)


if __name__ == "__main__":
    main()
