"""
Travel confirmation extraction and parsing.

Strategy:
1. Identify the provider template (sender domain, then subject)
2. Apply each of the provider's pattern groups to the body, keeping the
   group that fills the most fields
3. Parse dates natively (ISO, Korean and Japanese long forms) with a
   dateutil fallback for free text
4. Score the result and gate it on the confidence threshold

Nothing here raises for an email that cannot be parsed; that is reported
through ParseResult.status instead.
"""

import logging
import re
from datetime import date, datetime, time

from dateutil import parser as dateutil_parser

from .airports import get_airport, normalize_location
from .errors import ConfigError
from .models import (
    ExtractedRecord,
    FlightLeg,
    FlightRecord,
    HotelBooking,
    ParseResult,
    ParseStatus,
)
from .providers import FlightPatterns, HotelPatterns, airline_for_flight_number, identify_provider
from .scoring import DEFAULT_CONFIDENCE_THRESHOLD, score_extraction

# Set up logging
logger = logging.getLogger(__name__)


# ============================================================================
# DATE AND TIME PARSING
# ============================================================================

# 2024-03-15, 2024.03.15, 2024/03/15, 2024년 3월 15일
_NUMERIC_DATE_PATTERN = re.compile(
    r'(\d{4})\s*[-./년]\s*(\d{1,2})\s*[-./월]\s*(\d{1,2})\s*일?'
)
# 2024年3月15日
_JAPANESE_DATE_PATTERN = re.compile(r'(\d{4})\s*年\s*(\d{1,2})\s*月\s*(\d{1,2})\s*日')
_YEAR_PATTERN = re.compile(r'\d{4}')

_TIME_PATTERNS = (
    re.compile(r'(\d{1,2}):(\d{2})\s*(AM|PM)?', re.IGNORECASE),
    re.compile(r'(\d{1,2})시\s*(\d{2})분?'),
)


def _safe_date(year, month, day):
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date(text):
    """Parse a date string from an email into a date.

    Args:
        text: Raw date text, e.g. "2024-03-15", "2024년 3월 15일",
            "15 March 2024"

    Returns:
        date, or None if the text cannot be understood
    """
    if not text:
        return None
    text = text.strip()

    for pattern in (_NUMERIC_DATE_PATTERN, _JAPANESE_DATE_PATTERN):
        match = pattern.search(text)
        if match:
            return _safe_date(*match.groups())

    # dateutil fills a missing year from today, which would invent one
    if not _YEAR_PATTERN.search(text):
        return None

    try:
        return dateutil_parser.parse(text, fuzzy=False).date()
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Unparseable date '{text}': {e}")
        return None


def extract_time(text, start=0):
    """Find a clock time on the same line, after position ``start``.

    Returns:
        24-hour "HH:MM" string or None
    """
    if not text:
        return None
    line_end = text.find('\n', start)
    segment = text[start:] if line_end == -1 else text[start:line_end]

    for pattern in _TIME_PATTERNS:
        match = pattern.search(segment)
        if not match:
            continue
        hour, minute = int(match.group(1)), int(match.group(2))
        meridiem = match.group(3) if pattern.groups >= 3 else None
        meridiem = meridiem.upper() if meridiem else None
        if meridiem == 'PM' and hour < 12:
            hour += 12
        elif meridiem == 'AM' and hour == 12:
            hour = 0
        if hour > 23 or minute > 59:
            continue
        return f"{hour:02d}:{minute:02d}"
    return None


# ============================================================================
# FIELD EXTRACTION
# ============================================================================

def _extract_first(text, patterns):
    """Return the first match among patterns, tried in declaration order."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def _captured(match):
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def _extract_leg(body, location_patterns, date_patterns):
    """Build one end of a flight. Needs both a location and a date string."""
    location_match = _extract_first(body, location_patterns)
    date_match = _extract_first(body, date_patterns)
    if not location_match or not date_match:
        return None

    location, code = normalize_location(_captured(location_match))
    return FlightLeg(
        location=location,
        airport_code=code,
        travel_date=parse_date(date_match.group(1)),
        time=extract_time(body, date_match.end()),
    )


def _extract_flight(body, group):
    match_count = 0

    confirmation = _captured(_extract_first(body, group.confirmation))
    if confirmation:
        match_count += 1

    flight_number = _captured(_extract_first(body, group.flight_number))
    if flight_number:
        flight_number = re.sub(r'\s+', '', flight_number).upper()
        match_count += 1

    departure = _extract_leg(body, group.departure, group.departure_date)
    if departure:
        match_count += 1

    arrival = _extract_leg(body, group.arrival, group.arrival_date)
    if arrival:
        match_count += 1

    return ExtractedRecord(
        kind=group.kind,
        confirmation=confirmation,
        flight_number=flight_number,
        departure=departure,
        arrival=arrival,
        match_count=match_count,
    )


def _extract_hotel(body, group):
    match_count = 0

    confirmation = _captured(_extract_first(body, group.confirmation))
    if confirmation:
        match_count += 1

    hotel = None
    check_in = parse_date(_captured(_extract_first(body, group.check_in)))
    check_out = parse_date(_captured(_extract_first(body, group.check_out)))
    if check_in and check_out:
        hotel = HotelBooking(
            name=_captured(_extract_first(body, group.name)) or "",
            location=_captured(_extract_first(body, group.location)) or "",
            check_in=check_in,
            check_out=check_out,
        )
        # Check-in and check-out count as separate fields
        match_count += 2

    return ExtractedRecord(
        kind=group.kind,
        confirmation=confirmation,
        hotel=hotel,
        match_count=match_count,
    )


def extract(body, provider):
    """Apply a provider's pattern groups to an email body.

    Each group is tried independently and the one that fills the most
    fields wins; on a tie the earlier group is kept.

    Args:
        body: Plain-text email body
        provider: Provider from identify_provider()

    Returns:
        ExtractedRecord, or None if no group matched anything
    """
    body = body or ''
    best = None

    for group in provider.groups:
        if isinstance(group, FlightPatterns):
            record = _extract_flight(body, group)
        elif isinstance(group, HotelPatterns):
            record = _extract_hotel(body, group)
        else:
            raise TypeError(f"Unknown pattern group {type(group).__name__}")

        logger.debug(f"  -> {provider.name} {group.kind} group matched {record.match_count} field(s)")
        if record.match_count > (best.match_count if best else 0):
            best = record

    return best


# ============================================================================
# EMAIL PIPELINE
# ============================================================================

def _date_warnings(record):
    warnings = []
    for label, leg in (('departure', record.departure), ('arrival', record.arrival)):
        if leg and leg.travel_date is None:
            warnings.append(f"Could not parse {label} date")
    return warnings


class EmailParser:
    """Turns confirmation emails into extracted records.

    Args:
        confidence_threshold: Minimum score for an extraction to be accepted
    """

    def __init__(self, confidence_threshold=DEFAULT_CONFIDENCE_THRESHOLD):
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ConfigError(f"confidence_threshold must be between 0 and 1, got {confidence_threshold}")
        self.confidence_threshold = confidence_threshold

    def parse_email(self, subject, body, sender=None):
        """Parse a single email.

        Returns:
            ParseResult; status tells whether the email was usable
        """
        provider = identify_provider(sender, subject, body)
        if provider is None:
            logger.debug(f"No provider for '{(subject or '')[:50]}'")
            return ParseResult(status=ParseStatus.NO_PROVIDER)

        record = extract(body, provider)
        if record is None:
            logger.debug(f"{provider.name}: no fields matched in '{(subject or '')[:50]}'")
            return ParseResult(status=ParseStatus.NO_MATCH, provider=provider.name)

        confidence = score_extraction(record, subject, body)
        warnings = _date_warnings(record)

        if confidence < self.confidence_threshold:
            message = (
                f"Low confidence extraction from {provider.name}: "
                f"{confidence:.2f} < {self.confidence_threshold:.2f}"
            )
            logger.warning(message)
            return ParseResult(
                status=ParseStatus.LOW_CONFIDENCE,
                provider=provider.name,
                record=record,
                confidence=confidence,
                warnings=tuple([message] + warnings),
            )

        logger.debug(f"{provider.name}: accepted {record.kind} record (confidence {confidence:.2f})")
        return ParseResult(
            status=ParseStatus.OK,
            provider=provider.name,
            record=record,
            confidence=confidence,
            warnings=tuple(warnings),
        )

    def parse_emails(self, messages):
        """Parse a batch of emails.

        Args:
            messages: Iterable of (subject, body) or (subject, body, sender)

        Returns:
            List of ParseResult, one per message, in input order
        """
        results = [self.parse_email(*message) for message in messages]
        accepted = sum(1 for r in results if r.accepted)
        logger.info(f"Parsed {len(results)} email(s), {accepted} accepted")
        return results


# ============================================================================
# FLIGHT RECORD CONSTRUCTION
# ============================================================================

def _leg_datetime(travel_date, time_text):
    if time_text:
        hour, minute = (int(part) for part in time_text.split(':'))
        return datetime.combine(travel_date, time(hour, minute))
    return datetime.combine(travel_date, time())


def to_flight_record(record, provider_name=None, confidence=1.0):
    """Turn a flight extraction into a FlightRecord.

    Both ends must resolve to known airports and the departure date must
    have parsed. A missing arrival date is taken to be the departure date.

    Returns:
        FlightRecord or None
    """
    if record is None or record.kind != "flight":
        return None
    if not record.departure or not record.arrival:
        return None

    departure_airport = get_airport(record.departure.airport_code)
    arrival_airport = get_airport(record.arrival.airport_code)
    if not departure_airport or not arrival_airport:
        logger.debug(f"  -> Unknown airport in {record.departure.location} -> {record.arrival.location}")
        return None
    if record.departure.travel_date is None:
        return None

    departure_time = _leg_datetime(record.departure.travel_date, record.departure.time)
    arrival_time = _leg_datetime(record.arrival.travel_date or record.departure.travel_date, record.arrival.time)

    airline = airline_for_flight_number(record.flight_number) or provider_name or "Unknown"

    return FlightRecord(
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        departure_time=departure_time,
        arrival_time=arrival_time,
        airline=airline,
        flight_number=record.flight_number,
        booking_reference=record.confirmation,
        confidence=confidence,
    )
