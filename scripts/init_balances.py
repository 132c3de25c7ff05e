"""Materialize leave balances for a year (idempotent).

Usage: python scripts/init_balances.py [YEAR]
"""

from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_engine.hr_engine.common.datetime_utils import now_local
from src.hr_engine.hr_engine.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    year = int(sys.argv[1]) if len(sys.argv) > 1 else now_local().year

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    report = container.leave_engine.initialize_balances_for_year(year)
    print(
        f"OK: year={report.year} employees={report.employees_processed} "
        f"leave types={report.leave_types_processed} balances created={report.balances_created}"
    )


if __name__ == "__main__":
    main()
