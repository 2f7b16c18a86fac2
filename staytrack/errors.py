"""
Exceptions raised by staytrack.

Unmatched emails, low-confidence extractions and unparseable dates are
normal outcomes and are reported through return values, not exceptions.
"""


class StaytrackError(Exception):
    """Base class for staytrack errors."""


class ConfigError(StaytrackError):
    """Configuration is missing or invalid."""


class InvalidRange(StaytrackError, ValueError):
    """A date range ends before it starts."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Exit date {end} is before entry date {start}")
