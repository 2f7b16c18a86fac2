"""
Airline and booking site templates for travel confirmation emails.

Each provider is a fixed registry entry holding its sender domains and an
ordered list of pattern groups. A group is either FlightPatterns or
HotelPatterns; a provider may offer several groups for different email
layouts (booking confirmation vs. itinerary change).
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE

# Booking codes are matched case-sensitively even inside case-insensitive labels
_CODE = r'(?-i:[A-Z0-9]{6,})'
_NUMERIC_ID = r'(\d{6,})'
_KO_DATE = r'\d{4}[-년.]\s*\d{1,2}[-월.]\s*\d{1,2}일?'
_JA_DATE = r'\d{4}年\d{1,2}月\d{1,2}日'
_EN_DATE = r'[A-Za-z]+\s+\d{1,2},?\s+\d{4}'
_EU_DATE = r'\d{1,2}\s+[A-Za-z]+\s+\d{4}'
_ISO_DATE = r'\d{4}-\d{2}-\d{2}'
_PLACE_KO = r'[가-힣]+(?:\s*\([A-Z]{3}\))?'
_PLACE_EN = r'[A-Za-z][A-Za-z ]*(?:\([A-Z]{3}\))?'


def _compile(*patterns):
    return tuple(re.compile(p, _FLAGS) for p in patterns)


class ProviderId(Enum):
    KOREAN_AIR = "Korean Air"
    ASIANA = "Asiana Airlines"
    JAL = "Japan Airlines"
    LUFTHANSA = "Lufthansa"
    AIR_FRANCE = "Air France"
    BOOKING_COM = "Booking.com"
    AGODA = "Agoda"
    CHINESE_AIRLINES = "Chinese Airlines"


@dataclass(frozen=True)
class FlightPatterns:
    """Field patterns for a flight confirmation layout."""

    subject_patterns: Tuple[re.Pattern, ...]
    flight_number: Tuple[re.Pattern, ...] = ()
    confirmation: Tuple[re.Pattern, ...] = ()
    departure: Tuple[re.Pattern, ...] = ()
    departure_date: Tuple[re.Pattern, ...] = ()
    arrival: Tuple[re.Pattern, ...] = ()
    arrival_date: Tuple[re.Pattern, ...] = ()

    kind = "flight"


@dataclass(frozen=True)
class HotelPatterns:
    """Field patterns for a hotel booking layout."""

    subject_patterns: Tuple[re.Pattern, ...]
    check_in: Tuple[re.Pattern, ...] = ()
    check_out: Tuple[re.Pattern, ...] = ()
    location: Tuple[re.Pattern, ...] = ()
    name: Tuple[re.Pattern, ...] = ()
    confirmation: Tuple[re.Pattern, ...] = ()

    kind = "hotel"


@dataclass(frozen=True)
class Provider:
    id: ProviderId
    domains: Tuple[str, ...]
    groups: Tuple[object, ...]
    airline: Optional[str] = None

    @property
    def name(self):
        return self.id.value


# ============================================================================
# PROVIDER REGISTRY
# ============================================================================

KOREAN_AIR = Provider(
    id=ProviderId.KOREAN_AIR,
    domains=('koreanair.com', 'ke.com'),
    airline='Korean Air',
    groups=(
        FlightPatterns(
            subject_patterns=_compile(
                r'대한항공.*예약.*확인',
                r'Korean Air.*Confirmation',
                r'KE\d+.*confirmation',
                r'항공권.*발권.*완료',
            ),
            flight_number=_compile(
                r'항공편\s*(?:번호)?:?\s*(KE\s*\d{1,4})\b',
                r'\b(KE\s*\d{1,4})\b',
            ),
            departure_date=_compile(
                rf'출발\s*(?:일시|날짜)?:?\s*({_KO_DATE})',
                rf'Departure(?:\s*Date)?:?\s*({_EN_DATE})',
            ),
            arrival_date=_compile(
                rf'도착\s*(?:일시|날짜)?:?\s*({_KO_DATE})',
                rf'Arrival(?:\s*Date)?:?\s*({_EN_DATE})',
            ),
            departure=_compile(
                rf'출발지:?\s*({_PLACE_KO})',
                rf'\bFrom:\s*({_PLACE_EN})',
            ),
            arrival=_compile(
                rf'도착지:?\s*({_PLACE_KO})',
                rf'\bTo:\s*({_PLACE_EN})',
            ),
            confirmation=_compile(
                rf'예약\s*(?:번호|코드)?:?\s*({_CODE})',
                rf'Confirmation\s*(?:Number|Code)?:?\s*({_CODE})',
            ),
        ),
    ),
)

ASIANA = Provider(
    id=ProviderId.ASIANA,
    domains=('flyasiana.com', 'asiana.co.kr'),
    airline='Asiana Airlines',
    groups=(
        FlightPatterns(
            subject_patterns=_compile(
                r'아시아나항공.*예약.*확인',
                r'Asiana.*Confirmation',
                r'OZ\d+.*confirmation',
                r'전자.*항공권.*발권',
            ),
            flight_number=_compile(
                r'\b(OZ\s*\d{1,4})\b',
                r'항공편:?\s*(OZ\s*\d{1,4})\b',
            ),
            departure_date=_compile(
                rf'출발\s*(?:일자|날짜)?:?\s*({_KO_DATE})',
                rf'Departure\s*Date:?\s*({_EN_DATE})',
            ),
            arrival_date=_compile(
                rf'도착\s*(?:일자|날짜)?:?\s*({_KO_DATE})',
                rf'Arrival\s*Date:?\s*({_EN_DATE})',
            ),
            departure=_compile(
                rf'출발\s*공항:?\s*({_PLACE_KO})',
                r'\bFrom:\s*([A-Za-z][A-Za-z ]*\([A-Z]{3}\))',
            ),
            arrival=_compile(
                rf'도착\s*공항:?\s*({_PLACE_KO})',
                r'\bTo:\s*([A-Za-z][A-Za-z ]*\([A-Z]{3}\))',
            ),
            confirmation=_compile(
                rf'예약\s*번호:?\s*({_CODE})',
                rf'Booking\s*Reference:?\s*({_CODE})',
            ),
        ),
    ),
)

JAL = Provider(
    id=ProviderId.JAL,
    domains=('jal.com', 'jal.co.jp'),
    airline='Japan Airlines',
    groups=(
        FlightPatterns(
            subject_patterns=_compile(
                r'JAL.*予約.*確認',
                r'Japan Airlines.*Confirmation',
                r'JL\d+.*confirmation',
            ),
            flight_number=_compile(
                r'\b(JL\s*\d{1,4})\b',
                r'Flight:?\s*(JL\s*\d{1,4})\b',
            ),
            departure_date=_compile(
                rf'Departure:?\s*({_EU_DATE})',
                rf'出発日:?\s*({_JA_DATE})',
            ),
            confirmation=_compile(
                rf'Confirmation\s*Number:?\s*({_CODE})',
                rf'予約番号:?\s*({_CODE})',
            ),
        ),
    ),
)

LUFTHANSA = Provider(
    id=ProviderId.LUFTHANSA,
    domains=('lufthansa.com', 'booking-lufthansa.com'),
    airline='Lufthansa',
    groups=(
        # Booking confirmation
        FlightPatterns(
            subject_patterns=_compile(
                r'Lufthansa.*(?:booking|confirmation)',
                r'\bLH\s?\d+.*confirmation',
            ),
            flight_number=_compile(r'Flight:?\s*(LH\s*\d{1,4})\b', r'\b(LH\s*\d{1,4})\b'),
            departure_date=_compile(
                rf'Departure\s*date:?\s*({_ISO_DATE})',
                rf'Departure\s*date:?\s*({_EU_DATE})',
            ),
            arrival_date=_compile(
                rf'Arrival\s*date:?\s*({_ISO_DATE})',
                rf'Arrival\s*date:?\s*({_EU_DATE})',
            ),
            departure=_compile(rf'\bFrom:\s*({_PLACE_EN})'),
            arrival=_compile(rf'\bTo:\s*({_PLACE_EN})'),
            confirmation=_compile(rf'Booking\s*code:?\s*({_CODE})'),
        ),
        # Itinerary change notice
        FlightPatterns(
            subject_patterns=_compile(r'Lufthansa.*(?:schedule|itinerary)\s+change'),
            flight_number=_compile(r'New\s+flight:?\s*(LH\s*\d{1,4})\b'),
            departure_date=_compile(rf'New\s+departure:?\s*({_ISO_DATE})'),
            departure=_compile(rf'Departing\s+from:?\s*({_PLACE_EN})'),
            arrival=_compile(rf'Arriving\s+(?:at|in):?\s*({_PLACE_EN})'),
            arrival_date=_compile(rf'New\s+arrival:?\s*({_ISO_DATE})'),
            confirmation=_compile(rf'Booking\s*code:?\s*({_CODE})'),
        ),
    ),
)

AIR_FRANCE = Provider(
    id=ProviderId.AIR_FRANCE,
    domains=('airfrance.com', 'airfrance.fr'),
    airline='Air France',
    groups=(
        FlightPatterns(
            subject_patterns=_compile(
                r'Air France.*(?:booking|confirmation|e-?ticket)',
                r'\bAF\s?\d+.*confirmation',
            ),
            flight_number=_compile(r'\b(AF\s*\d{1,4})\b'),
            departure_date=_compile(rf'Departure:?\s*({_EU_DATE})', rf'Departure:?\s*({_ISO_DATE})'),
            arrival_date=_compile(rf'Arrival:?\s*({_EU_DATE})', rf'Arrival:?\s*({_ISO_DATE})'),
            departure=_compile(rf'\bFrom:\s*({_PLACE_EN})'),
            arrival=_compile(rf'\bTo:\s*({_PLACE_EN})'),
            confirmation=_compile(rf'Booking\s*reference:?\s*({_CODE})'),
        ),
    ),
)

BOOKING_COM = Provider(
    id=ProviderId.BOOKING_COM,
    domains=('booking.com', 'bstatic.com'),
    groups=(
        HotelPatterns(
            subject_patterns=_compile(
                r'Booking\.com.*예약.*확인',
                r'Your booking confirmation',
                r'숙소.*예약.*완료',
            ),
            check_in=_compile(
                r'체크인:?\s*(\d{4}년\s*\d{1,2}월\s*\d{1,2}일)',
                r'Check-in:?\s*([A-Za-z]+,?\s*\d{1,2}\s+[A-Za-z]+\s+\d{4})',
                rf'체크인\s*날짜:?\s*({_ISO_DATE})',
                rf'Check-in:?\s*({_ISO_DATE})',
            ),
            check_out=_compile(
                r'체크아웃:?\s*(\d{4}년\s*\d{1,2}월\s*\d{1,2}일)',
                r'Check-out:?\s*([A-Za-z]+,?\s*\d{1,2}\s+[A-Za-z]+\s+\d{4})',
                rf'체크아웃\s*날짜:?\s*({_ISO_DATE})',
                rf'Check-out:?\s*({_ISO_DATE})',
            ),
            location=_compile(
                r'호텔\s*위치:?\s*([가-힣 ,]+)',
                r'Address:?\s*([A-Za-z0-9 ,.\-]+)',
            ),
            name=_compile(r'Property:?\s*([A-Za-z0-9 &\-]+)'),
            confirmation=_compile(
                rf'예약\s*번호:?\s*{_NUMERIC_ID}',
                rf'Booking\s*number:?\s*{_NUMERIC_ID}',
            ),
        ),
    ),
)

AGODA = Provider(
    id=ProviderId.AGODA,
    domains=('agoda.com', 'agoda.net'),
    groups=(
        HotelPatterns(
            subject_patterns=_compile(
                r'Agoda.*예약.*확인',
                r'Your Agoda booking',
                r'아고다.*예약.*완료',
            ),
            check_in=_compile(
                r'체크인:?\s*(\d{4}년\s*\d{1,2}월\s*\d{1,2}일)',
                rf'Check-in:?\s*({_EU_DATE})',
            ),
            check_out=_compile(
                r'체크아웃:?\s*(\d{4}년\s*\d{1,2}월\s*\d{1,2}일)',
                rf'Check-out:?\s*({_EU_DATE})',
            ),
            location=_compile(
                r'호텔:?\s*([가-힣 ]+)',
                r'Property:?\s*([A-Za-z &\-]+)',
            ),
            name=_compile(r'Property:?\s*([A-Za-z &\-]+)'),
            confirmation=_compile(
                rf'예약\s*ID:?\s*{_NUMERIC_ID}',
                rf'Booking\s*ID:?\s*{_NUMERIC_ID}',
            ),
        ),
    ),
)

CHINESE_AIRLINES = Provider(
    id=ProviderId.CHINESE_AIRLINES,
    domains=('airchina.com', 'csair.com', 'ceair.com'),
    groups=(
        FlightPatterns(
            subject_patterns=_compile(
                r'Air China.*Confirmation',
                r'China Southern.*booking',
                r'(?:CA|CZ|MU)\d+.*confirmation',
            ),
            flight_number=_compile(r'\b((?:CA|CZ|MU)\s*\d{1,4})\b'),
            confirmation=_compile(
                rf'Confirmation\s*Code:?\s*({_CODE})',
                rf'PNR:?\s*({_CODE})',
            ),
        ),
    ),
)

PROVIDERS = (
    KOREAN_AIR,
    ASIANA,
    JAL,
    LUFTHANSA,
    AIR_FRANCE,
    BOOKING_COM,
    AGODA,
    CHINESE_AIRLINES,
)

# Airline IATA codes (2-letter) for naming flights found in emails
AIRLINE_CODES = {
    'KE': 'Korean Air',
    'OZ': 'Asiana Airlines',
    'JL': 'Japan Airlines',
    'NH': 'ANA',
    'CA': 'Air China',
    'CZ': 'China Southern',
    'MU': 'China Eastern',
    'CI': 'China Airlines',
    'BR': 'EVA Air',
    'CX': 'Cathay Pacific',
    'SQ': 'Singapore Airlines',
    'TG': 'Thai Airways',
    'VN': 'Vietnam Airlines',
    'LH': 'Lufthansa',
    'AF': 'Air France',
    'KL': 'KLM',
    'BA': 'British Airways',
    'LX': 'Swiss',
    'OS': 'Austrian',
    'IB': 'Iberia',
    'AZ': 'ITA Airways',
    'AY': 'Finnair',
    'SK': 'SAS',
    'TP': 'TAP Portugal',
    'TK': 'Turkish Airlines',
    'EK': 'Emirates',
    'QR': 'Qatar Airways',
    'AA': 'American Airlines',
    'DL': 'Delta',
    'UA': 'United',
}


def sender_domain_of(sender):
    """Get the lowercase domain of a sender address or bare domain."""
    sender = (sender or '').strip().lower()
    if '@' in sender:
        sender = sender.rsplit('@', 1)[1]
    return sender.strip('<> ')


def identify_provider(sender, subject, body=None):
    """Identify which provider template an email matches.

    Args:
        sender: Sender address or domain (may be None)
        subject: Email subject line
        body: Email body (not used for matching; kept for callers that
            pass the whole message)

    Returns:
        Provider or None if no template matches
    """
    domain = sender_domain_of(sender)
    if domain:
        for provider in PROVIDERS:
            if any(d.lower() in domain for d in provider.domains):
                logger.debug(f"Provider {provider.name} matched by domain {domain}")
                return provider

    subject = subject or ''
    for provider in PROVIDERS:
        for group in provider.groups:
            if any(p.search(subject) for p in group.subject_patterns):
                logger.debug(f"Provider {provider.name} matched by subject '{subject[:50]}'")
                return provider

    return None


def get_provider(name):
    """Look up a provider by its display name (case insensitive)."""
    for provider in PROVIDERS:
        if provider.name.lower() == (name or '').lower():
            return provider
    return None


def airline_for_flight_number(flight_number):
    """Get the airline name for a flight number like "KE901".

    Returns:
        Airline name or None if the prefix is unknown
    """
    if not flight_number:
        return None
    match = re.match(r'\s*([A-Z][A-Z0-9])\s*\d', flight_number.upper())
    if not match:
        return None
    return AIRLINE_CODES.get(match.group(1))
