from datetime import date, datetime

import pytest

from staytrack.models import Closed, Ongoing, TravelPurpose
from staytrack.periods import (
    BuildMode,
    build_periods,
    build_single_flight_periods,
    build_trip_periods,
    infer_purpose,
    merge_periods,
)


class TestSingleFlightMode:
    def test_one_period_per_international_flight(self, make_flight):
        flights = [
            make_flight("CDG", "ICN", datetime(2024, 3, 25, 21, 0), confidence=0.8),
            make_flight("ICN", "CDG", datetime(2024, 3, 15, 10, 30), booking_reference="ABC123"),
            make_flight("GMP", "CJU", datetime(2024, 4, 1, 8, 0)),
        ]

        periods = build_single_flight_periods(flights)

        assert [p.country_code for p in periods] == ["KR", "FR"]
        korea, france = periods
        assert korea.entry_date == date(2024, 3, 15)
        assert korea.exit == Closed(date(2024, 3, 15))
        assert korea.country_name == "South Korea"
        assert "ICN → CDG" in korea.notes
        assert "Ref ABC123" in korea.notes
        assert "single flight" in korea.notes
        assert france.confidence == 0.8
        assert france.flights[0].departure_airport.code == "CDG"

    def test_domestic_flights_are_skipped(self, make_flight):
        flights = [make_flight("GMP", "PUS", datetime(2024, 1, 1, 9, 0))]
        assert build_single_flight_periods(flights) == []

    def test_empty(self):
        assert build_single_flight_periods([]) == []


class TestTripMode:
    def test_round_trip_with_two_destinations(self, make_flight):
        flights = [
            make_flight("FRA", "ICN", datetime(2024, 3, 12, 20, 0), datetime(2024, 3, 13, 14, 0)),
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0)),
            make_flight("CDG", "FRA", datetime(2024, 3, 10, 9, 0), datetime(2024, 3, 10, 10, 0)),
        ]

        periods = build_trip_periods(flights)

        assert len(periods) == 1
        trip = periods[0]
        # Nine days in France beat two in Germany
        assert trip.country_code == "FR"
        assert trip.entry_date == date(2024, 3, 1)
        assert trip.exit == Closed(date(2024, 3, 13))
        assert len(trip.flights) == 3
        assert trip.confidence == pytest.approx(1.0)
        assert trip.notes == "Route: ICN → CDG → FRA → ICN | 2 countries visited | 3 flights | 13-day trip"

    def test_confidence(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0), confidence=0.5),
            make_flight("CDG", "ICN", datetime(2024, 3, 3, 18, 0), datetime(2024, 3, 4, 12, 0), confidence=0.5),
        ]
        # base + average * weight + round trip + one extra flight
        assert build_trip_periods(flights)[0].confidence == pytest.approx(0.7 + 0.1 + 0.1 + 0.05)

    def test_revisits_add_weight(self, make_flight):
        flights = [
            make_flight("ICN", "FRA", datetime(2024, 5, 1, 10, 0), datetime(2024, 5, 1, 20, 0)),
            make_flight("FRA", "CDG", datetime(2024, 5, 2, 8, 0), datetime(2024, 5, 2, 9, 0)),
            make_flight("CDG", "FRA", datetime(2024, 5, 3, 8, 0), datetime(2024, 5, 3, 9, 0)),
            make_flight("FRA", "ICN", datetime(2024, 5, 3, 12, 0), datetime(2024, 5, 4, 6, 0)),
        ]
        assert build_trip_periods(flights)[0].country_code == "DE"

    def test_unterminated_trip_is_emitted(self, make_flight):
        flights = [make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0))]

        periods = build_trip_periods(flights)

        assert len(periods) == 1
        assert periods[0].country_code == "FR"
        assert periods[0].exit == Closed(date(2024, 3, 1))

    def test_arrival_not_after_departure_is_ongoing(self, make_flight):
        departure = datetime(2024, 3, 1, 10, 0)
        flights = [make_flight("ICN", "CDG", departure, departure)]
        assert [p.exit for p in build_trip_periods(flights)] == [Ongoing()]

    def test_domestic_segments_are_ignored(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0)),
            make_flight("CDG", "NCE", datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 10, 30)),
            make_flight("NCE", "ICN", datetime(2024, 3, 9, 12, 0), datetime(2024, 3, 10, 8, 0)),
        ]

        periods = build_trip_periods(flights)

        assert len(periods) == 1
        assert [f.arrival_airport.code for f in periods[0].flights] == ["CDG", "ICN"]

    def test_two_trips(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 1, 1, 10, 0)),
            make_flight("CDG", "ICN", datetime(2024, 1, 10, 10, 0)),
            make_flight("ICN", "NRT", datetime(2024, 2, 1, 10, 0), datetime(2024, 2, 1, 12, 0)),
            make_flight("NRT", "ICN", datetime(2024, 2, 5, 10, 0), datetime(2024, 2, 5, 12, 0)),
        ]
        assert [p.country_code for p in build_trip_periods(flights)] == ["FR", "JP"]

    def test_home_country_is_explicit(self, make_flight):
        flights = [
            make_flight("CDG", "ICN", datetime(2024, 2, 1, 10, 0)),
            make_flight("ICN", "CDG", datetime(2024, 2, 20, 10, 0)),
        ]

        # Inferred home is France: one trip to Korea and back
        assert [p.country_code for p in build_trip_periods(flights)] == ["KR"]
        # From Korea, the first flight is not a departure from home
        from_korea = build_trip_periods(flights, home_country="kr")
        assert [p.country_code for p in from_korea] == ["FR"]
        assert len(from_korea[0].flights) == 1

    def test_empty_and_single(self, make_flight):
        assert build_trip_periods([]) == []
        single = [make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0))]
        assert len(build_trip_periods(single)) == 1


class TestPurpose:
    def test_transit(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0)),
            make_flight("CDG", "ICN", datetime(2024, 3, 2, 9, 0), datetime(2024, 3, 3, 3, 0)),
        ]
        assert infer_purpose(flights) is TravelPurpose.TRANSIT

    def test_tourism(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0)),
            make_flight("CDG", "ICN", datetime(2024, 3, 3, 18, 0), datetime(2024, 3, 4, 12, 0)),
        ]
        assert infer_purpose(flights) is TravelPurpose.TOURISM

    def test_long_stay(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 18, 0)),
            make_flight("CDG", "ICN", datetime(2024, 3, 20, 18, 0), datetime(2024, 3, 21, 12, 0)),
        ]
        assert infer_purpose(flights) is TravelPurpose.EDUCATION

    def test_business_markers(self, make_flight):
        departure = datetime(2024, 3, 1, 10, 0)
        assert infer_purpose([make_flight("ICN", "CDG", departure, seat="2A")]) is TravelPurpose.BUSINESS
        assert infer_purpose([make_flight("ICN", "CDG", departure, seat="34C")]) is TravelPurpose.TOURISM
        assert infer_purpose([make_flight("ICN", "CDG", departure, airline="Business Jet Co")]) is TravelPurpose.BUSINESS
        assert infer_purpose([make_flight("ICN", "CDG", departure, booking_reference="CORP12345")]) is TravelPurpose.BUSINESS

    def test_single_flight_is_tourism(self, make_flight):
        assert infer_purpose([make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0))]) is TravelPurpose.TOURISM


class TestBuildPeriods:
    def test_dispatch(self, make_flight):
        flights = [
            make_flight("ICN", "CDG", datetime(2024, 3, 1, 10, 0)),
            make_flight("CDG", "ICN", datetime(2024, 3, 10, 10, 0)),
        ]
        assert [p.country_code for p in build_periods(flights, BuildMode.SINGLE_FLIGHT)] == ["KR", "FR"]
        assert [p.country_code for p in build_periods(flights, "trip")] == ["FR"]

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            build_periods([], "weekly")


class TestMergePeriods:
    def test_gap_over_one_day_is_kept_apart(self, stay):
        a = stay("DE", date(2024, 1, 20), date(2024, 2, 1))
        b = stay("DE", date(2024, 2, 5), date(2024, 2, 10))
        assert merge_periods([a, b]) == [a, b]

    def test_adjacent_days_merge(self, stay, make_flight):
        a = stay("DE", date(2024, 1, 20), date(2024, 2, 1), confidence=0.8, notes="first",
                 purpose=TravelPurpose.BUSINESS,
                 flights=(make_flight("ICN", "FRA", datetime(2024, 1, 20, 10, 0)),))
        b = stay("DE", date(2024, 2, 2), date(2024, 2, 10), confidence=0.6, notes="second",
                 purpose=TravelPurpose.TOURISM,
                 flights=(make_flight("FRA", "ICN", datetime(2024, 2, 10, 10, 0)),))

        merged = merge_periods([b, a])

        assert len(merged) == 1
        period = merged[0]
        assert period.entry_date == date(2024, 1, 20)
        assert period.exit_date == date(2024, 2, 10)
        assert period.flights == a.flights + b.flights
        assert period.confidence == pytest.approx(0.7)
        assert period.notes == "first | Merged with: second"
        assert period.purpose is TravelPurpose.BUSINESS

    def test_same_day_transfer_merges(self, stay):
        a = stay("FR", date(2024, 3, 1), date(2024, 3, 5))
        b = stay("FR", date(2024, 3, 5), date(2024, 3, 8))
        assert len(merge_periods([a, b])) == 1

    def test_overlap_keeps_later_exit(self, stay):
        a = stay("FR", date(2024, 3, 1), date(2024, 3, 20))
        b = stay("FR", date(2024, 3, 5), date(2024, 3, 8))
        assert merge_periods([a, b])[0].exit_date == date(2024, 3, 20)

    def test_different_countries_do_not_merge(self, stay):
        a = stay("FR", date(2024, 3, 1), date(2024, 3, 5))
        b = stay("DE", date(2024, 3, 6), date(2024, 3, 8))
        assert len(merge_periods([a, b])) == 2

    def test_ongoing_periods_do_not_merge(self, stay):
        a = stay("FR", date(2024, 3, 1))
        b = stay("FR", date(2024, 3, 2), date(2024, 3, 8))
        assert len(merge_periods([a, b])) == 2

    def test_chain_merges_in_one_pass(self, stay):
        periods = [
            stay("IT", date(2024, 6, 1), date(2024, 6, 3)),
            stay("IT", date(2024, 6, 4), date(2024, 6, 6)),
            stay("IT", date(2024, 6, 7), date(2024, 6, 9)),
        ]
        merged = merge_periods(periods)
        assert len(merged) == 1
        assert merged[0].exit_date == date(2024, 6, 9)

    def test_idempotent(self, stay):
        periods = [
            stay("FR", date(2024, 3, 1), date(2024, 3, 5)),
            stay("DE", date(2024, 3, 3), date(2024, 3, 4)),
            stay("FR", date(2024, 3, 6), date(2024, 3, 9)),
            stay("FR", date(2024, 3, 9), date(2024, 3, 12)),
            stay("DE", date(2024, 3, 20)),
            stay("ES", date(2024, 4, 1), date(2024, 4, 1)),
            stay("ES", date(2024, 4, 2), date(2024, 4, 2)),
        ]
        once = merge_periods(periods)
        assert merge_periods(once) == once

    def test_empty(self):
        assert merge_periods([]) == []
