from datetime import timedelta

import pytest

from staytrack.airports import get_airport
from staytrack.compliance import ComplianceCalculator
from staytrack.countries import DEFAULT_SCHENGEN_COUNTRIES
from staytrack.models import FlightRecord, StayPeriod


@pytest.fixture
def make_flight():
    """Factory for FlightRecords between known airports."""

    def _make(departure, arrival, departure_time, arrival_time=None, **kwargs):
        if arrival_time is None:
            arrival_time = departure_time + timedelta(hours=12)
        kwargs.setdefault('airline', 'Korean Air')
        return FlightRecord(
            departure_airport=get_airport(departure),
            arrival_airport=get_airport(arrival),
            departure_time=departure_time,
            arrival_time=arrival_time,
            **kwargs,
        )

    return _make


@pytest.fixture
def stay():
    """Factory for manual stays: stay('FR', date(...), date(...))."""

    def _make(country, entry, exit_date=None, **kwargs):
        return StayPeriod.between(country, entry, exit_date, **kwargs)

    return _make


@pytest.fixture
def calculator():
    return ComplianceCalculator(DEFAULT_SCHENGEN_COUNTRIES)


