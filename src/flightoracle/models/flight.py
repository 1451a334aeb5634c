"""
FlightOracle Flight Models

Provider-agnostic flight records.

Key components:
- FlightIdentifier: Natural key used to query providers and match policies
- FlightObservation: Normalized snapshot of a flight's schedule and status
- compute_delay_minutes: The single place delay is derived from timestamps

Observations are created per request and never persisted by this package.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from ..canon import format_timestamp
from .enums import FlightStatus, ProviderSource


_AIRLINE_RE = re.compile(r"^[A-Z0-9]{2,3}$")
_FLIGHT_NUMBER_RE = re.compile(r"^(\d{1,5})([A-Z]?)$")
_STRIP_RE = re.compile(r"[\s\-]+")


# =============================================================================
# Delay Derivation
# =============================================================================

def compute_delay_minutes(
    scheduled: Optional[datetime],
    actual_or_estimated: Optional[datetime],
) -> int:
    """
    Whole minutes of lateness, never negative.

    Absent times yield 0: missing data is not evidence of a delay.
    Early arrivals also yield 0.
    """
    if scheduled is None or actual_or_estimated is None:
        return 0
    seconds = (actual_or_estimated - scheduled).total_seconds()
    return max(0, int(seconds // 60))


# =============================================================================
# Flight Identifier
# =============================================================================

@dataclass(frozen=True)
class FlightIdentifier:
    """
    Normalized natural key of a flight.

    Providers are case- and format-sensitive, so identifiers are only
    built through normalize(); "ua 0100" and "UA100" produce the same key.

    Attributes:
        airline_code: IATA/ICAO carrier code, upper case
        flight_number: Digits with an optional operational suffix letter
        scheduled_departure_date: Local departure date, when known
    """
    airline_code: str
    flight_number: str
    scheduled_departure_date: Optional[date] = None

    @classmethod
    def normalize(
        cls,
        airline: str,
        flight_number: Union[str, int],
        scheduled_departure_date: Union[date, datetime, str, None] = None,
    ) -> "FlightIdentifier":
        """
        Build a normalized identifier.

        Raises:
            ValueError: If the airline or flight number cannot be normalized
        """
        airline_code = _STRIP_RE.sub("", str(airline or "")).upper()
        if not _AIRLINE_RE.match(airline_code):
            raise ValueError(f"Invalid airline code: {airline!r}")

        number = _STRIP_RE.sub("", str(flight_number or "")).upper()
        # "UA100" given as flight number for airline "UA"
        if number.startswith(airline_code) and number[len(airline_code):][:1].isdigit():
            number = number[len(airline_code):]
        match = _FLIGHT_NUMBER_RE.match(number)
        if not match:
            raise ValueError(f"Invalid flight number: {flight_number!r}")
        digits, suffix = match.groups()
        number = str(int(digits)) + suffix

        return cls(
            airline_code=airline_code,
            flight_number=number,
            scheduled_departure_date=_coerce_date(scheduled_departure_date),
        )

    @property
    def designator(self) -> str:
        """Carrier code and number, e.g. 'UA100'."""
        return f"{self.airline_code}{self.flight_number}"

    @property
    def lookup_key(self) -> str:
        if self.scheduled_departure_date is None:
            return self.designator
        return f"{self.designator}@{self.scheduled_departure_date.isoformat()}"

    def matches(self, other: "FlightIdentifier") -> bool:
        """
        Same flight, treating an absent date on either side as a wildcard.
        """
        if self.designator != other.designator:
            return False
        if self.scheduled_departure_date is None or other.scheduled_departure_date is None:
            return True
        return self.scheduled_departure_date == other.scheduled_departure_date

    def to_dict(self) -> dict[str, Any]:
        return {
            "airline": self.airline_code,
            "flightNumber": self.flight_number,
            "date": (
                self.scheduled_departure_date.isoformat()
                if self.scheduled_departure_date else None
            ),
        }


def _coerce_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValueError(f"Invalid scheduled departure date: {value!r}")


# =============================================================================
# Flight Observation
# =============================================================================

@dataclass(frozen=True)
class FlightObservation:
    """
    Normalized snapshot of one flight from one provider.

    delay_minutes is derived from the timestamps and never taken from
    the provider. When no actual or estimated time exists the delay is 0
    and the status stays whatever the provider reported.

    Attributes:
        identifier: The flight this observation describes
        status: Normalized flight status
        scheduled_departure: Scheduled gate departure (UTC)
        scheduled_arrival: Scheduled gate arrival (UTC)
        source: Which slot of the fallback order produced this
        observed_at: When the oracle received the provider response
        actual_or_estimated_departure: Best known departure time
        actual_or_estimated_arrival: Best known arrival time
        departure_is_actual: True when the departure time is actual
        arrival_is_actual: True when the arrival time is actual
        last_updated: Provider's own last-update time, if reported
        provider_name: Provider that produced the data (e.g. 'flightaware')
    """
    identifier: FlightIdentifier
    status: FlightStatus
    scheduled_departure: datetime
    scheduled_arrival: datetime
    source: ProviderSource
    observed_at: datetime
    actual_or_estimated_departure: Optional[datetime] = None
    actual_or_estimated_arrival: Optional[datetime] = None
    departure_is_actual: bool = False
    arrival_is_actual: bool = False
    last_updated: Optional[datetime] = None
    provider_name: str = ""

    def __post_init__(self) -> None:
        for name in (
            "scheduled_departure",
            "scheduled_arrival",
            "observed_at",
            "actual_or_estimated_departure",
            "actual_or_estimated_arrival",
            "last_updated",
        ):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                raise ValueError(f"{name} must be timezone-aware")

    @property
    def departure_delay_minutes(self) -> int:
        return compute_delay_minutes(
            self.scheduled_departure, self.actual_or_estimated_departure
        )

    @property
    def arrival_delay_minutes(self) -> int:
        return compute_delay_minutes(
            self.scheduled_arrival, self.actual_or_estimated_arrival
        )

    @property
    def delay_minutes(self) -> int:
        """
        Arrival delay when an arrival time is known, else departure delay.
        """
        if self.actual_or_estimated_arrival is not None:
            return self.arrival_delay_minutes
        return self.departure_delay_minutes

    @property
    def has_actual_arrival(self) -> bool:
        return self.arrival_is_actual and self.actual_or_estimated_arrival is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with derived delay included (canonical-JSON friendly)."""
        def ts(value: Optional[datetime]) -> Optional[str]:
            return format_timestamp(value) if value is not None else None

        return {
            "identifier": self.identifier.to_dict(),
            "status": self.status.value,
            "scheduledDeparture": ts(self.scheduled_departure),
            "actualOrEstimatedDeparture": ts(self.actual_or_estimated_departure),
            "departureIsActual": self.departure_is_actual,
            "scheduledArrival": ts(self.scheduled_arrival),
            "actualOrEstimatedArrival": ts(self.actual_or_estimated_arrival),
            "arrivalIsActual": self.arrival_is_actual,
            "delayMinutes": self.delay_minutes,
            "source": self.source.value,
            "provider": self.provider_name,
            "observedAt": ts(self.observed_at),
            "lastUpdated": ts(self.last_updated),
        }
