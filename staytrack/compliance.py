"""
Schengen 90/180 compliance.

Days are counted inclusively: a stay from the 1st to the 15th uses 15
days, and a same-day stay uses one. Presence is tracked per calendar day,
so overlapping stays in different member states count each day once.
"""

import logging
from bisect import bisect_left, bisect_right
from datetime import timedelta

from .countries import normalize_country_codes
from .errors import ConfigError, InvalidRange
from .models import ComplianceResult, StayPeriod, TravelPurpose, TripValidation, Violation

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

DEFAULT_MAX_DAYS = 90
DEFAULT_WINDOW_DAYS = 180

# Remaining allowance at or below which a warning is issued
LOW_ALLOWANCE_DAYS = 10

SAFE_DATE_SEARCH_DAYS = 365


class _DayIndex:
    """Sorted calendar days of Schengen presence."""

    def __init__(self, days):
        self._days = sorted(days)

    def count(self, start, end):
        return bisect_right(self._days, end) - bisect_left(self._days, start)

    def first(self, start, end):
        i = bisect_left(self._days, start)
        if i < len(self._days) and self._days[i] <= end:
            return self._days[i]
        return None

    @property
    def earliest(self):
        return self._days[0] if self._days else None


class ComplianceCalculator:
    """Evaluates stays against the rolling-window rule.

    Args:
        schengen_countries: Country codes that share the allowance. Required;
            membership changes over time so there is no implicit default.
        max_days: Allowance within one window
        window_days: Length of the rolling window, reference date included
    """

    def __init__(self, schengen_countries, max_days=DEFAULT_MAX_DAYS, window_days=DEFAULT_WINDOW_DAYS):
        if isinstance(schengen_countries, str):
            raise ConfigError(f"Schengen countries must be a collection of codes, got {schengen_countries!r}")
        countries = normalize_country_codes(schengen_countries or ())
        if not countries:
            raise ConfigError("At least one Schengen country code is required")
        if max_days <= 0 or window_days <= 0 or max_days > window_days:
            raise ConfigError(f"Invalid limits: {max_days} days in a {window_days}-day window")

        self.schengen_countries = countries
        self.max_days = max_days
        self.window_days = window_days

    def is_schengen(self, country_code):
        return (country_code or '').upper() in self.schengen_countries

    def _window(self, reference_date):
        return reference_date - timedelta(days=self.window_days - 1), reference_date

    def _index(self, stays, horizon):
        """Index every Schengen day up to ``horizon``.

        Ongoing stays run to the horizon; counting only days up to a
        reference date then clips them to that date.
        """
        days = set()
        for stay in stays:
            if not self.is_schengen(stay.country_code):
                continue
            end = stay.exit_date if stay.exit_date is not None else horizon
            day = stay.entry_date
            while day <= min(end, horizon):
                days.add(day)
                day += ONE_DAY
        return _DayIndex(days)

    def _violation(self, day, used):
        over = used - self.max_days
        return Violation(
            date=day,
            days_over_limit=over,
            description=(
                f"{used} days in the {self.window_days} days ending {day.isoformat()} "
                f"({over} over the {self.max_days}-day limit)"
            ),
        )

    def used_days(self, stays, reference_date):
        """Days of Schengen presence in the window ending on reference_date."""
        index = self._index(stays, reference_date)
        return index.count(*self._window(reference_date))

    def evaluate(self, stays, reference_date):
        """Compliance as of reference_date.

        Args:
            stays: StayPeriods in any order; non-Schengen ones are ignored
            reference_date: Last day of the evaluated window

        Returns:
            ComplianceResult
        """
        index = self._index(stays, reference_date)
        window_start, window_end = self._window(reference_date)
        used = index.count(window_start, window_end)

        # The earliest counted day is the first to leave the window
        first_counted = index.first(window_start, window_end)
        next_reset = first_counted + timedelta(days=self.window_days) if first_counted else None

        violations = []
        day = index.earliest
        while day is not None and day <= reference_date:
            used_then = index.count(*self._window(day))
            if used_then > self.max_days:
                violations.append(self._violation(day, used_then))
            day += ONE_DAY

        if violations:
            logger.debug(f"{len(violations)} day(s) over the limit up to {reference_date}")

        return ComplianceResult(
            reference_date=reference_date,
            used_days=used,
            remaining_days=max(0, self.max_days - used),
            next_reset_date=next_reset,
            is_compliant=used <= self.max_days,
            violations=tuple(violations),
        )

    def validate_trip(self, existing_stays, entry_date, exit_date, country_code):
        """Check whether a planned stay keeps the traveler compliant.

        Every day of the planned stay is evaluated with the stay added.

        Raises:
            InvalidRange: if exit_date is before entry_date

        Returns:
            TripValidation
        """
        if exit_date < entry_date:
            raise InvalidRange(entry_date, exit_date)

        planned = StayPeriod.between(
            country_code,
            entry_date,
            exit_date,
            purpose=TravelPurpose.OTHER,
            notes="Planned trip",
        )
        index = self._index(list(existing_stays) + [planned], exit_date)

        violations = []
        day = entry_date
        while day <= exit_date:
            used = index.count(*self._window(day))
            if used > self.max_days:
                violations.append(self._violation(day, used))
            day += ONE_DAY

        days_after = index.count(*self._window(exit_date))
        logger.debug(
            f"Planned {planned.country_code} {entry_date} - {exit_date}: "
            f"{days_after} days used after, {len(violations)} violation(s)"
        )
        return TripValidation(
            is_valid=not violations,
            violations=tuple(violations),
            schengen_days_after=days_after,
        )

    def generate_warnings(self, result):
        """Human-readable warnings for a ComplianceResult."""
        warnings = []
        if not result.is_compliant:
            warnings.append(
                f"Schengen rule violated: {result.used_days} days used, "
                f"limit is {self.max_days} in {self.window_days}"
            )
        if 0 < result.remaining_days <= LOW_ALLOWANCE_DAYS:
            warnings.append(f"Only {result.remaining_days} Schengen day(s) remaining")
        if result.remaining_days == 0 and result.is_compliant:
            warnings.append("Schengen allowance fully used; no further stay is possible")
        return warnings

    def max_stay_days(self, result):
        """Longest stay still allowed; 0 once the rule is already broken."""
        if not result.is_compliant:
            return 0
        return result.remaining_days

    def find_safe_travel_dates(self, existing_stays, duration_days, earliest_date,
                               search_days=SAFE_DATE_SEARCH_DAYS):
        """Find the first trip of the given length that stays compliant.

        Args:
            existing_stays: Stays already taken or planned
            duration_days: Trip length, both ends included
            earliest_date: First possible entry date
            search_days: How many start dates to try

        Returns:
            (entry_date, exit_date) tuple, or None if nothing fits
        """
        if duration_days <= 0:
            raise ValueError(f"duration_days must be positive, got {duration_days}")
        if duration_days > self.max_days:
            return None

        country = sorted(self.schengen_countries)[0]
        for offset in range(search_days):
            start = earliest_date + timedelta(days=offset)
            end = start + timedelta(days=duration_days - 1)
            if self.validate_trip(existing_stays, start, end, country).is_valid:
                return start, end
        return None
