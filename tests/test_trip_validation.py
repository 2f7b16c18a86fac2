from datetime import date, timedelta

import pytest

from staytrack.errors import InvalidRange


def test_exit_before_entry_is_rejected(calculator):
    with pytest.raises(InvalidRange) as excinfo:
        calculator.validate_trip([], date(2024, 5, 10), date(2024, 5, 1), "FR")

    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.start == date(2024, 5, 10)
    assert excinfo.value.end == date(2024, 5, 1)


def test_ninety_day_trip_without_prior_travel(calculator):
    entry = date(2024, 6, 1)
    result = calculator.validate_trip([], entry, entry + timedelta(days=89), "ES")

    assert result.is_valid
    assert result.violations == ()
    assert result.schengen_days_after == 90


def test_single_day_trip(calculator):
    result = calculator.validate_trip([], date(2024, 6, 1), date(2024, 6, 1), "IT")
    assert result.is_valid
    assert result.schengen_days_after == 1


def test_trip_pushing_over_the_limit(calculator, stay):
    existing = [stay("FR", date(2024, 1, 1), date(2024, 3, 20))]

    result = calculator.validate_trip(existing, date(2024, 4, 1), date(2024, 4, 20), "DE")

    assert not result.is_valid
    assert result.schengen_days_after == 100
    assert len(result.violations) == 10
    assert result.violations[0].date == date(2024, 4, 11)
    assert result.violations[0].days_over_limit == 1
    assert result.violations[-1].date == date(2024, 4, 20)
    assert result.violations[-1].days_over_limit == 10


def test_non_schengen_trip_is_always_valid(calculator, stay):
    existing = [stay("FR", date(2024, 1, 1), date(2024, 3, 30))]

    result = calculator.validate_trip(existing, date(2024, 4, 1), date(2024, 4, 20), "GB")

    assert result.is_valid
    assert result.schengen_days_after == 90


def test_existing_stays_are_untouched(calculator, stay):
    existing = [stay("FR", date(2024, 1, 1), date(2024, 1, 10))]
    snapshot = list(existing)

    calculator.validate_trip(existing, date(2024, 2, 1), date(2024, 2, 5), "FR")

    assert existing == snapshot


class TestFindSafeTravelDates:
    def test_no_prior_travel(self, calculator):
        assert calculator.find_safe_travel_dates([], 14, date(2024, 5, 1)) == (date(2024, 5, 1), date(2024, 5, 14))

    def test_waits_for_days_to_leave_the_window(self, calculator, stay):
        existing = [stay("FR", date(2024, 1, 1), date(2024, 3, 30))]

        start, end = calculator.find_safe_travel_dates(existing, 10, date(2024, 4, 1))

        assert end - start == timedelta(days=9)
        assert start > date(2024, 4, 1)
        assert calculator.validate_trip(existing, start, end, "DE").is_valid
        assert not calculator.validate_trip(existing, start - timedelta(days=1), end - timedelta(days=1), "DE").is_valid

    def test_too_long(self, calculator):
        assert calculator.find_safe_travel_dates([], 91, date(2024, 5, 1)) is None

    def test_nothing_in_search_range(self, calculator, stay):
        existing = [stay("FR", date(2024, 1, 1), date(2024, 3, 30))]
        assert calculator.find_safe_travel_dates(existing, 1, date(2024, 3, 31), search_days=5) is None

    def test_duration_must_be_positive(self, calculator):
        with pytest.raises(ValueError):
            calculator.find_safe_travel_dates([], 0, date(2024, 5, 1))
