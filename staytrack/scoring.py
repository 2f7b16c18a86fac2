"""
Confidence scoring for extracted travel records.

Scores are additive: each present field earns its weight, and the result is
normalized by the weight that was achievable for the record's type. Flight
and hotel field sets never count toward the same record.
"""

from .models import ExtractedRecord

# Score weights
REQUIRED_FIELD_WEIGHT = 0.2    # type and confirmation code, each
FLIGHT_FIELD_WEIGHT = 0.15     # flight number, departure, arrival, each
HOTEL_RECORD_WEIGHT = 0.3      # complete hotel sub-record
DATE_FIELD_WEIGHT = 0.2        # any parsed date

REQUIRED_FIELDS = ('kind', 'confirmation')
FLIGHT_FIELDS = ('flight_number', 'departure', 'arrival')

# Default minimum score for accepting an extraction
DEFAULT_CONFIDENCE_THRESHOLD = 0.6


def score_extraction(record: ExtractedRecord, subject: str = "", body: str = "") -> float:
    """Score how trustworthy an extracted record is.

    Args:
        record: The partial record from the field extractor
        subject: Email subject (context only)
        body: Email body (context only)

    Returns:
        Confidence in [0, 1]
    """
    if record is None:
        return 0.0

    score = 0.0
    possible = 0.0

    possible += len(REQUIRED_FIELDS) * REQUIRED_FIELD_WEIGHT
    score += sum(1 for f in REQUIRED_FIELDS if getattr(record, f)) * REQUIRED_FIELD_WEIGHT

    if record.kind == "flight":
        possible += len(FLIGHT_FIELDS) * FLIGHT_FIELD_WEIGHT
        score += sum(1 for f in FLIGHT_FIELDS if getattr(record, f)) * FLIGHT_FIELD_WEIGHT
    elif record.kind == "hotel":
        if record.hotel:
            possible += HOTEL_RECORD_WEIGHT
            score += HOTEL_RECORD_WEIGHT

    possible += DATE_FIELD_WEIGHT
    if record.has_date:
        score += DATE_FIELD_WEIGHT

    if possible <= 0:
        return 0.0
    return min(score / possible, 1.0)


def passes_score_threshold(record, subject="", body="", threshold=DEFAULT_CONFIDENCE_THRESHOLD):
    """Check if an extraction passes the confidence threshold.

    Returns:
        Tuple of (passes, score)
    """
    score = score_extraction(record, subject, body)
    return score >= threshold, score
