"""
Value records shared across staytrack.

Every record is a frozen dataclass: components hand snapshots to each other
and never edit one in place. Merging or validating builds new records.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union

from .countries import country_name


@dataclass(frozen=True)
class Airport:
    code: str
    city: str
    country: str
    country_code: str


@dataclass(frozen=True)
class FlightRecord:
    """One directional flight, extracted from an email or supplied directly."""

    departure_airport: Airport
    arrival_airport: Airport
    departure_time: datetime
    arrival_time: datetime
    airline: str
    flight_number: Optional[str] = None
    booking_reference: Optional[str] = None
    seat: Optional[str] = None
    confidence: float = 1.0

    @property
    def departure_country(self) -> str:
        return self.departure_airport.country_code

    @property
    def arrival_country(self) -> str:
        return self.arrival_airport.country_code

    @property
    def is_international(self) -> bool:
        return self.departure_country != self.arrival_country


@dataclass(frozen=True)
class Ongoing:
    """Exit state for a stay that has not ended, or whose end is unknown."""


@dataclass(frozen=True)
class Closed:
    """Exit state for a stay that ended on a known date."""

    date: date


ExitState = Union[Ongoing, Closed]


class TravelPurpose(Enum):
    TOURISM = "tourism"
    BUSINESS = "business"
    TRANSIT = "transit"
    EDUCATION = "education"
    OTHER = "other"


@dataclass(frozen=True)
class StayPeriod:
    """A contiguous presence in one country.

    ``flights`` records provenance only; the same FlightRecord may back
    periods in several analyses.
    """

    country_code: str
    country_name: str
    entry_date: date
    exit: ExitState = field(default_factory=Ongoing)
    flights: Tuple[FlightRecord, ...] = ()
    purpose: TravelPurpose = TravelPurpose.OTHER
    notes: str = ""
    confidence: float = 1.0
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if isinstance(self.exit, Closed) and self.exit.date < self.entry_date:
            raise ValueError(
                f"Stay in {self.country_code} exits on {self.exit.date} "
                f"before its entry on {self.entry_date}"
            )

    @property
    def exit_date(self) -> Optional[date]:
        """The exit date, or None while the stay is ongoing."""
        if isinstance(self.exit, Closed):
            return self.exit.date
        return None

    @property
    def is_ongoing(self) -> bool:
        return isinstance(self.exit, Ongoing)

    @classmethod
    def between(cls, country_code, entry_date, exit_date=None, **kwargs) -> "StayPeriod":
        """Build a manually entered stay.

        Args:
            country_code: ISO country code
            entry_date: First day in the country
            exit_date: Last day in the country, or None if still there
            **kwargs: Any other StayPeriod field

        Returns:
            StayPeriod
        """
        code = country_code.upper()
        kwargs.setdefault('country_name', country_name(code))
        exit_state = Closed(exit_date) if exit_date is not None else Ongoing()
        return cls(country_code=code, entry_date=entry_date, exit=exit_state, **kwargs)


@dataclass(frozen=True)
class Violation:
    date: date
    days_over_limit: int
    description: str


@dataclass(frozen=True)
class ComplianceResult:
    reference_date: date
    used_days: int
    remaining_days: int
    next_reset_date: Optional[date]
    is_compliant: bool
    violations: Tuple[Violation, ...] = ()


@dataclass(frozen=True)
class TripValidation:
    is_valid: bool
    violations: Tuple[Violation, ...]
    schengen_days_after: int


# ============================================================================
# EMAIL EXTRACTION RECORDS
# ============================================================================

@dataclass(frozen=True)
class FlightLeg:
    """One end of a flight as read from an email."""

    location: str
    airport_code: Optional[str] = None
    travel_date: Optional[date] = None
    time: Optional[str] = None


@dataclass(frozen=True)
class HotelBooking:
    name: str
    location: str
    check_in: date
    check_out: date


@dataclass(frozen=True)
class ExtractedRecord:
    """Best partial record pulled out of one email body."""

    kind: str
    confirmation: Optional[str] = None
    flight_number: Optional[str] = None
    departure: Optional[FlightLeg] = None
    arrival: Optional[FlightLeg] = None
    hotel: Optional[HotelBooking] = None
    match_count: int = 0

    @property
    def has_date(self) -> bool:
        return bool(
            (self.departure and self.departure.travel_date)
            or (self.arrival and self.arrival.travel_date)
            or (self.hotel and self.hotel.check_in)
        )


class ParseStatus(Enum):
    OK = "ok"
    NO_PROVIDER = "no_provider"
    NO_MATCH = "no_match"
    LOW_CONFIDENCE = "low_confidence"


@dataclass(frozen=True)
class ParseResult:
    status: ParseStatus
    provider: Optional[str] = None
    record: Optional[ExtractedRecord] = None
    confidence: float = 0.0
    warnings: Tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.status is ParseStatus.OK
