"""
FlightOracle Policy Model

Policies are owned by the external ledger; this package only reads them.
All monetary values use Decimal for precision.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .enums import PolicyStatus
from .flight import FlightIdentifier


@dataclass(frozen=True)
class Policy:
    """
    A flight-delay insurance policy as read from the ledger.

    Attributes:
        id: Ledger policy id
        flight_identifier: The insured flight
        coverage_amount: Payout when the claim is eligible
        premium_amount: Premium paid (informational)
        delay_threshold_minutes: Minimum delay that triggers payout
        status: Ledger lifecycle state
        departure_airport: Origin airport code, if recorded
        arrival_airport: Destination airport code, if recorded
    """
    id: str
    flight_identifier: FlightIdentifier
    coverage_amount: Decimal
    premium_amount: Decimal
    delay_threshold_minutes: int
    status: PolicyStatus
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None

    def __post_init__(self) -> None:
        if not (self.coverage_amount.is_finite() and self.premium_amount.is_finite()):
            raise ValueError("amounts must be finite")
        if self.delay_threshold_minutes < 0:
            raise ValueError("delay_threshold_minutes must be >= 0")
        if self.coverage_amount < 0:
            raise ValueError("coverage_amount must be >= 0")

    @property
    def is_active(self) -> bool:
        return self.status is PolicyStatus.ACTIVE

    @classmethod
    def from_ledger(cls, data: Mapping[str, Any]) -> "Policy":
        """
        Build a Policy from a ledger record.

        Accepts camelCase (JSON API) and snake_case (on-chain fields).

        Raises:
            ValueError: If a required field is missing or invalid
        """
        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if name in data and data[name] is not None:
                    return data[name]
            return default

        policy_id = pick("id", "policyId", "policy_id")
        if policy_id is None:
            raise ValueError("Policy record has no id")

        flight = pick("flightIdentifier", "flight_identifier", default={})
        identifier = FlightIdentifier.normalize(
            airline=flight.get("airline") or pick("airline", "airlineCode", "airline_code"),
            flight_number=flight.get("flightNumber") or pick("flightNumber", "flight_number"),
            scheduled_departure_date=(
                flight.get("date") or pick("departureDate", "departure_date")
            ),
        )

        threshold = pick("delayThresholdMinutes", "delay_threshold_minutes")
        if threshold is None:
            raise ValueError("Policy record has no delay threshold")

        return cls(
            id=str(policy_id),
            flight_identifier=identifier,
            coverage_amount=_to_decimal(
                pick("coverageAmount", "coverage_amount"), "coverage_amount"
            ),
            premium_amount=_to_decimal(
                pick("premiumAmount", "premium_amount", default="0"), "premium_amount"
            ),
            delay_threshold_minutes=int(threshold),
            status=PolicyStatus.parse(pick("status", default="")),
            departure_airport=pick("departureAirport", "departure_airport"),
            arrival_airport=pick("arrivalAirport", "arrival_airport"),
        )


def _to_decimal(value: Any, name: str) -> Decimal:
    if value is None:
        raise ValueError(f"Policy record has no {name}")
    try:
        # str() first so floats keep their printed form (1.0 -> Decimal("1.0"))
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid {name}: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid {name}: {value!r}")
    return amount
