from datetime import date

import pytest

from src.hr_engine.hr_engine.common.datetime_utils import (
    days_in_month,
    inclusive_days,
    month_bounds,
    ranges_overlap,
    split_by_year,
    start_of_week,
)
from src.hr_engine.hr_engine.common.validators import parse_enum, require_month
from src.hr_engine.hr_engine.core.enums import EmployeeStatus, LeaveDecision
from src.hr_engine.hr_engine.core.exceptions import ValidationError


def test_inclusive_days_and_month_helpers():
    assert inclusive_days(date(2025, 3, 10), date(2025, 3, 10)) == 1
    assert days_in_month(2, 2024) == 29
    assert month_bounds(4, 2025) == (date(2025, 4, 1), date(2025, 4, 30))


def test_split_by_year():
    assert split_by_year(date(2025, 12, 31), date(2026, 1, 1)) == {2025: 1, 2026: 1}
    assert split_by_year(date(2025, 3, 1), date(2025, 3, 5)) == {2025: 5}


def test_week_starts_on_sunday():
    assert start_of_week(date(2025, 3, 2)) == date(2025, 3, 2)
    assert start_of_week(date(2025, 3, 8)) == date(2025, 3, 2)


def test_ranges_overlap_on_shared_boundary():
    assert ranges_overlap(date(2025, 3, 1), date(2025, 3, 5), date(2025, 3, 5), date(2025, 3, 9))
    assert not ranges_overlap(date(2025, 3, 1), date(2025, 3, 4), date(2025, 3, 5), date(2025, 3, 9))


def test_parse_enum_and_month_validation():
    assert parse_enum(LeaveDecision, "approve", "decision") == LeaveDecision.APPROVE
    assert parse_enum(EmployeeStatus, "On Leave", "status") == EmployeeStatus.ON_LEAVE
    with pytest.raises(ValidationError):
        parse_enum(LeaveDecision, "later", "decision")
    with pytest.raises(ValidationError):
        require_month("x", 2025)
