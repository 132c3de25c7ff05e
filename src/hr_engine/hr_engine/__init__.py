"""HR engine package.

Leave balances, attendance ledger, attendance scoring and payroll, organized by
feature modules (policies, employees, attendance, leave, analytics, payroll)
with a thin Flask controller layer over service/repository layers.
"""
