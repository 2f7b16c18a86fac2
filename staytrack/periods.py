"""
Stay period construction from flight records.

Two build modes are offered and the caller picks one:

- SINGLE_FLIGHT: every international flight marks a same-day exit from its
  departure country.
- TRIP_GROUPING: flights are chained into round trips starting and ending
  in a home country, and each trip becomes one stay in its primary
  destination.

merge_periods() then collapses adjacent stays in the same country.
"""

import logging
import math
import re
from dataclasses import replace
from enum import Enum

from .models import Closed, Ongoing, StayPeriod, TravelPurpose

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

# Trip confidence weights
TRIP_BASE_CONFIDENCE = 0.7
FLIGHT_CONFIDENCE_WEIGHT = 0.2
ROUND_TRIP_BONUS = 0.1
EXTRA_FLIGHT_BONUS = 0.05      # per flight beyond the first
MAX_EXTRA_FLIGHT_BONUS = 0.2

# Purpose heuristics
TRANSIT_MAX_HOURS = 24
EDUCATION_MIN_HOURS = 90
BUSINESS_MAX_SEAT_ROW = 5      # front rows are business/first class
BOOKING_REFERENCE_LENGTH = 6   # standard PNR length; longer ones are corporate

# Stays this many days apart (or closer) are one continuous presence
MERGE_MAX_GAP_DAYS = 1


class BuildMode(Enum):
    SINGLE_FLIGHT = "single"
    TRIP_GROUPING = "trip"


def _sorted_flights(flights):
    return sorted(flights, key=lambda f: f.departure_time)


# ============================================================================
# PURPOSE INFERENCE
# ============================================================================

def _seat_row(seat):
    if not seat:
        return None
    match = re.match(r'\s*(\d+)', seat)
    return int(match.group(1)) if match else None


def _has_business_markers(flights):
    for flight in flights:
        row = _seat_row(flight.seat)
        if row is not None and row <= BUSINESS_MAX_SEAT_ROW:
            return True
        if 'business' in (flight.airline or '').lower():
            return True
        if flight.booking_reference and len(flight.booking_reference) > BOOKING_REFERENCE_LENGTH:
            return True
    return False


def _dwell_hours(flights):
    """Hours between the earliest arrival and the latest departure."""
    if len(flights) < 2:
        return None
    earliest_arrival = min(f.arrival_time for f in flights)
    latest_departure = max(f.departure_time for f in flights)
    return (latest_departure - earliest_arrival).total_seconds() / 3600


def infer_purpose(flights):
    """Guess why a trip was taken from its flights.

    Business markers win; otherwise the time on the ground decides between
    transit, education and tourism.
    """
    if _has_business_markers(flights):
        return TravelPurpose.BUSINESS

    dwell = _dwell_hours(flights)
    if dwell is not None:
        if dwell < TRANSIT_MAX_HOURS:
            return TravelPurpose.TRANSIT
        if dwell > EDUCATION_MIN_HOURS:
            return TravelPurpose.EDUCATION
    return TravelPurpose.TOURISM


# ============================================================================
# SINGLE-FLIGHT MODE
# ============================================================================

def _single_flight_notes(flight):
    parts = [
        f"Flight {flight.flight_number or 'unknown'}: "
        f"{flight.departure_airport.code} → {flight.arrival_airport.code}",
        flight.airline,
    ]
    if flight.booking_reference:
        parts.append(f"Ref {flight.booking_reference}")
    parts.append("single flight")
    return " | ".join(parts)


def build_single_flight_periods(flights):
    """One same-day stay in the departure country per international flight."""
    periods = []
    for flight in _sorted_flights(flights):
        if not flight.is_international:
            continue
        day = flight.departure_time.date()
        periods.append(StayPeriod(
            country_code=flight.departure_country,
            country_name=flight.departure_airport.country,
            entry_date=day,
            exit=Closed(day),
            flights=(flight,),
            purpose=infer_purpose([flight]),
            notes=_single_flight_notes(flight),
            confidence=flight.confidence,
        ))

    logger.debug(f"Single-flight mode: {len(periods)} period(s) from {len(flights)} flight(s)")
    return periods


# ============================================================================
# TRIP-GROUPING MODE
# ============================================================================

def group_trips(flights, home_country):
    """Chain sorted international flights into trips away from home.

    A trip opens on a flight leaving home and closes with the flight that
    lands back home. A trip that never returns is kept as is.
    """
    trips = []
    current = []

    for flight in flights:
        if not flight.is_international:
            continue
        if not current:
            if flight.departure_country == home_country:
                current = [flight]
            else:
                logger.debug(f"  -> Skipping {flight.flight_number}: not departing home ({home_country})")
            continue
        current.append(flight)
        if flight.arrival_country == home_country:
            trips.append(current)
            current = []

    if current:
        trips.append(current)
    return trips


def _primary_destination(trip, home_country):
    """Country with the most time on the ground, plus a day per visit."""
    scores = {}
    names = {}
    for i, flight in enumerate(trip):
        country = flight.arrival_country
        if country == home_country:
            continue
        dwell_ms = 0
        if i + 1 < len(trip):
            dwell_ms = max(0, (trip[i + 1].departure_time - flight.arrival_time).total_seconds() * 1000)
        scores[country] = scores.get(country, 0) + dwell_ms + DAY_MS
        names.setdefault(country, flight.arrival_airport.country)

    if not scores:
        flight = trip[0]
        return flight.arrival_country, flight.arrival_airport.country

    country = max(scores, key=scores.get)
    return country, names[country]


def _trip_confidence(trip):
    average = sum(f.confidence for f in trip) / len(trip)
    confidence = TRIP_BASE_CONFIDENCE + average * FLIGHT_CONFIDENCE_WEIGHT
    if trip[0].departure_country == trip[-1].arrival_country:
        confidence += ROUND_TRIP_BONUS
    confidence += min(MAX_EXTRA_FLIGHT_BONUS, EXTRA_FLIGHT_BONUS * (len(trip) - 1))
    return min(1.0, confidence)


def _trip_notes(trip, home_country):
    route = " → ".join([trip[0].departure_airport.code] + [f.arrival_airport.code for f in trip])
    countries = len({f.arrival_country for f in trip if f.arrival_country != home_country})
    seconds = (trip[-1].arrival_time - trip[0].departure_time).total_seconds()
    days = max(0, math.ceil(seconds / 86400))
    return f"Route: {route} | {countries} countries visited | {len(trip)} flights | {days}-day trip"


def _trip_period(trip, home_country):
    first, last = trip[0], trip[-1]
    country_code, name = _primary_destination(trip, home_country)

    if last.arrival_time > first.departure_time:
        exit_state = Closed(last.arrival_time.date())
    else:
        exit_state = Ongoing()

    return StayPeriod(
        country_code=country_code,
        country_name=name,
        entry_date=first.departure_time.date(),
        exit=exit_state,
        flights=tuple(trip),
        purpose=infer_purpose(trip),
        notes=_trip_notes(trip, home_country),
        confidence=_trip_confidence(trip),
    )


def build_trip_periods(flights, home_country=None):
    """Build one stay per trip away from home.

    Args:
        flights: FlightRecords in any order
        home_country: Country code trips start from; defaults to the
            departure country of the earliest flight

    Returns:
        List of StayPeriod, one per trip, in trip order
    """
    ordered = _sorted_flights(flights)
    if not ordered:
        return []

    home = (home_country or ordered[0].departure_country).upper()
    trips = group_trips(ordered, home)
    periods = [_trip_period(trip, home) for trip in trips]

    logger.debug(f"Trip mode (home {home}): {len(trips)} trip(s) from {len(ordered)} flight(s)")
    return periods


def build_periods(flights, mode=BuildMode.TRIP_GROUPING, home_country=None):
    """Build stay periods using the chosen mode.

    Args:
        flights: FlightRecords
        mode: BuildMode or its value ("single" / "trip")
        home_country: Only used in trip mode

    Returns:
        List of StayPeriod
    """
    mode = BuildMode(mode)
    if mode is BuildMode.SINGLE_FLIGHT:
        return build_single_flight_periods(flights)
    return build_trip_periods(flights, home_country=home_country)


# ============================================================================
# MERGING
# ============================================================================

def _can_merge(earlier, later):
    if earlier.country_code != later.country_code:
        return False
    if earlier.exit_date is None or later.exit_date is None:
        return False
    return (later.entry_date - earlier.exit_date).days <= MERGE_MAX_GAP_DAYS


def _merge_pair(earlier, later):
    return replace(
        earlier,
        exit=Closed(max(earlier.exit_date, later.exit_date)),
        flights=earlier.flights + later.flights,
        notes=f"{earlier.notes} | Merged with: {later.notes}",
        confidence=(earlier.confidence + later.confidence) / 2,
    )


def merge_periods(periods):
    """Collapse adjacent or overlapping stays in the same country.

    Single left-to-right pass over the stays sorted by entry date. The
    earlier stay's purpose is kept.

    Returns:
        New list of StayPeriod
    """
    merged = []
    for period in sorted(periods, key=lambda p: p.entry_date):
        if merged and _can_merge(merged[-1], period):
            logger.debug(f"  -> Merging {period.country_code} stays at {period.entry_date}")
            merged[-1] = _merge_pair(merged[-1], period)
        else:
            merged.append(period)
    return merged
