from datetime import date

import pytest

from app.domain.calendar import (
    add_months,
    add_years,
    days_between_inclusive,
    month_end,
    next_month,
    overlap_days,
    parse_month,
    period_bounds,
)


def test_same_day_interval_is_one_day():
    assert days_between_inclusive(date(2024, 1, 1), date(2024, 1, 1)) == 1


def test_days_between_counts_both_ends_in_either_order():
    assert days_between_inclusive(date(2024, 1, 1), date(2024, 3, 31)) == 91
    assert days_between_inclusive(date(2024, 3, 31), date(2024, 1, 1)) == 91


def test_overlap_days_partial_and_disjoint():
    assert overlap_days(date(2024, 1, 1), date(2024, 3, 31), date(2024, 3, 20), date(2024, 5, 1)) == 12
    assert overlap_days(date(2024, 1, 1), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 5)) == 0


def test_add_months_clamps_to_month_length():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


def test_add_years_on_leap_day():
    assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)


def test_month_end_and_next_month():
    assert month_end(2023, 1) == date(2023, 2, 28)
    assert next_month(2024, 11) == (2025, 0)
    assert next_month(2024, 4) == (2024, 5)


def test_period_bounds_for_quarter_and_year():
    assert period_bounds(2024, "Q2") == (date(2024, 4, 1), date(2024, 6, 30))
    assert period_bounds(2024) == (date(2024, 1, 1), date(2024, 12, 31))


def test_parse_month_returns_zero_based_index():
    assert parse_month("2024-03") == (2024, 2)


@pytest.mark.parametrize("value", ["2024-13", "2024", "2024-00"])
def test_parse_month_rejects_invalid_values(value):
    with pytest.raises(ValueError):
        parse_month(value)
