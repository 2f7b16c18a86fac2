from datetime import date

import pytest

from staytrack.models import ExtractedRecord, FlightLeg, HotelBooking
from staytrack.scoring import (
    DATE_FIELD_WEIGHT,
    FLIGHT_FIELD_WEIGHT,
    HOTEL_RECORD_WEIGHT,
    REQUIRED_FIELD_WEIGHT,
    passes_score_threshold,
    score_extraction,
)


def _leg(code, day=date(2024, 3, 15)):
    return FlightLeg(location=code, airport_code=code, travel_date=day)


def test_weights():
    assert REQUIRED_FIELD_WEIGHT == 0.2
    assert FLIGHT_FIELD_WEIGHT == 0.15
    assert HOTEL_RECORD_WEIGHT == 0.3
    assert DATE_FIELD_WEIGHT == 0.2


def test_complete_flight_scores_full():
    record = ExtractedRecord(
        kind="flight",
        confirmation="ABC123",
        flight_number="KE901",
        departure=_leg("ICN"),
        arrival=_leg("CDG"),
    )
    assert score_extraction(record) == pytest.approx(1.0)


def test_flight_without_dates():
    record = ExtractedRecord(
        kind="flight",
        confirmation="ABC123",
        flight_number="KE901",
        departure=_leg("ICN", None),
        arrival=_leg("CDG", None),
    )
    assert score_extraction(record) == pytest.approx(0.85 / 1.05)


def test_flight_number_only():
    record = ExtractedRecord(kind="flight", flight_number="KE901")
    assert score_extraction(record) == pytest.approx(0.35 / 1.05)


def test_complete_hotel_scores_full():
    record = ExtractedRecord(
        kind="hotel",
        confirmation="4012345678",
        hotel=HotelBooking("Hotel Lumiere", "Paris", date(2024, 7, 1), date(2024, 7, 5)),
    )
    assert score_extraction(record) == pytest.approx(1.0)


def test_hotel_without_booking_dates():
    record = ExtractedRecord(kind="hotel", confirmation="4012345678")
    # Without check-in and check-out the hotel weight is neither earned nor possible
    assert score_extraction(record) == pytest.approx(0.4 / 0.6)
    assert passes_score_threshold(record)[0] is True


def test_flight_and_hotel_weights_never_mix():
    record = ExtractedRecord(
        kind="hotel",
        confirmation="4012345678",
        flight_number="KE901",
        hotel=HotelBooking("", "", date(2024, 7, 1), date(2024, 7, 5)),
    )
    assert score_extraction(record) == pytest.approx(1.0)


def test_missing_record():
    assert score_extraction(None) == 0.0


def test_passes_score_threshold():
    record = ExtractedRecord(kind="flight", flight_number="KE901")
    assert passes_score_threshold(record, threshold=0.6)[0] is False
    assert passes_score_threshold(record, threshold=0.3)[0] is True
