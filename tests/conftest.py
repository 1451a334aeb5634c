"""
Pytest configuration and fixtures for FlightOracle tests.

Provides factories for identifiers, policies and observations, plus a
FakeProvider test double that counts calls.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Union

import pytest

from flightoracle.models import (
    FlightIdentifier,
    FlightObservation,
    FlightStatus,
    Policy,
    PolicyStatus,
    ProviderSource,
)


# Scheduled gate departure / arrival of UA100 on 2024-06-15
SCHEDULED_DEPARTURE = datetime(2024, 6, 15, 14, 0, tzinfo=timezone.utc)
SCHEDULED_ARRIVAL = datetime(2024, 6, 15, 17, 0, tzinfo=timezone.utc)
OBSERVED_AT = datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return OBSERVED_AT


# =============================================================================
# Factory Helpers
# =============================================================================

def make_identifier(
    airline: str = "UA",
    flight_number: str = "100",
    date: Optional[str] = "2024-06-15",
) -> FlightIdentifier:
    """Create a normalized FlightIdentifier."""
    return FlightIdentifier.normalize(airline, flight_number, date)


def make_policy(
    id: str = "POL-001",
    status: PolicyStatus = PolicyStatus.ACTIVE,
    delay_threshold_minutes: int = 60,
    coverage_amount: str = "1.0",
    premium_amount: str = "0.05",
    identifier: Optional[FlightIdentifier] = None,
) -> Policy:
    """Create a Policy with required fields."""
    return Policy(
        id=id,
        flight_identifier=identifier or make_identifier(),
        coverage_amount=Decimal(coverage_amount),
        premium_amount=Decimal(premium_amount),
        delay_threshold_minutes=delay_threshold_minutes,
        status=status,
    )


def make_observation(
    status: FlightStatus = FlightStatus.LANDED,
    arrival_delay: Optional[int] = 0,
    departure_delay: Optional[int] = None,
    arrival_is_actual: bool = True,
    source: ProviderSource = ProviderSource.PRIMARY,
    identifier: Optional[FlightIdentifier] = None,
    observed_at: datetime = OBSERVED_AT,
    provider_name: str = "fake",
) -> FlightObservation:
    """
    Create a FlightObservation.

    Delays are minutes relative to the schedule; None leaves the
    actual/estimated time absent.
    """
    arrival = (
        SCHEDULED_ARRIVAL + timedelta(minutes=arrival_delay)
        if arrival_delay is not None else None
    )
    departure = (
        SCHEDULED_DEPARTURE + timedelta(minutes=departure_delay)
        if departure_delay is not None else None
    )
    return FlightObservation(
        identifier=identifier or make_identifier(),
        status=status,
        scheduled_departure=SCHEDULED_DEPARTURE,
        scheduled_arrival=SCHEDULED_ARRIVAL,
        source=source,
        observed_at=observed_at,
        actual_or_estimated_departure=departure,
        actual_or_estimated_arrival=arrival,
        departure_is_actual=departure is not None,
        arrival_is_actual=arrival is not None and arrival_is_actual,
        provider_name=provider_name,
    )


class FakeProvider:
    """
    FlightDataProvider test double.

    result is returned, or raised when it is an exception. delay makes
    fetch() sleep first so resolver timeouts can be exercised.
    """

    def __init__(
        self,
        result: Union[FlightObservation, BaseException],
        name: str = "fake",
        source: ProviderSource = ProviderSource.PRIMARY,
        delay: float = 0.0,
    ) -> None:
        self.result = result
        self.name = name
        self.source = source
        self.delay = delay
        self.calls: list[FlightIdentifier] = []
        self.cancelled = False

    async def fetch(self, identifier: FlightIdentifier) -> FlightObservation:
        self.calls.append(identifier)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def identifier() -> FlightIdentifier:
    return make_identifier()


@pytest.fixture
def policy() -> Policy:
    return make_policy()
