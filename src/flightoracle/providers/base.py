"""
Provider Client Base

The capability every flight data provider implements, plus the shared
HTTP plumbing that turns transport problems into typed ProviderErrors.

Providers:
- are stateless apart from their configuration and HTTP client
- never retry (retry and timeout budget belong to the resolver)
- never cache (flight status is time-sensitive)
- raise only ProviderError subclasses for anything provider-related
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, TypeVar

import httpx

from ..exceptions import (
    ProviderMalformed,
    ProviderNotFound,
    ProviderTimeout,
    ProviderUnreachable,
)
from ..models import FlightIdentifier, FlightObservation, ProviderSource
from .timestamps import parse_timestamp

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
T = TypeVar("T")

# A record may sit this far from the requested date (local vs UTC skew)
DATE_MATCH_WINDOW = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Provider Protocol
# =============================================================================

class FlightDataProvider(Protocol):
    """
    One external flight data source.

    Attributes:
        name: Stable provider name used in config and logs
        source: Slot in the fallback order (Primary / Secondary)
    """
    name: str
    source: ProviderSource

    async def fetch(self, identifier: FlightIdentifier) -> FlightObservation:
        """
        Fetch and normalize one flight.

        Raises:
            ProviderUnreachable, ProviderTimeout, ProviderMalformed,
            ProviderNotFound
        """
        ...


# =============================================================================
# HTTP Helpers
# =============================================================================

async def get_json(
    http: httpx.AsyncClient,
    url: str,
    *,
    provider_name: str,
    source: ProviderSource,
    params: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Any:
    """
    GET a JSON document, mapping failures onto the provider error union.

    404 means the provider has no such flight; any other error status is
    treated as the provider being unavailable.
    """
    context = {"provider": provider_name, "url": url}
    try:
        response = await http.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise ProviderTimeout(
            message=f"{provider_name} request timed out",
            details={**context, "error": type(e).__name__},
            source=source,
        )
    except httpx.HTTPError as e:
        raise ProviderUnreachable(
            message=f"{provider_name} request failed: {type(e).__name__}",
            details={**context, "error": str(e)},
            source=source,
        )

    if response.status_code == 404:
        raise ProviderNotFound(
            message=f"{provider_name} has no record of this flight",
            details={**context, "status_code": 404},
            source=source,
        )
    if response.status_code >= 400:
        raise ProviderUnreachable(
            message=f"{provider_name} returned HTTP {response.status_code}",
            details={**context, "status_code": response.status_code},
            source=source,
        )

    try:
        return response.json()
    except ValueError:
        raise ProviderMalformed(
            message=f"{provider_name} returned a non-JSON body",
            details=context,
            source=source,
        )


# =============================================================================
# Parsing Helpers
# =============================================================================

def required_timestamp(
    value: Any,
    field_name: str,
    *,
    provider_name: str,
    source: ProviderSource,
) -> datetime:
    """Parse a timestamp the observation cannot exist without."""
    try:
        parsed = parse_timestamp(value)
    except ValueError as e:
        raise ProviderMalformed(
            message=f"{provider_name} field '{field_name}' is not a timestamp",
            details={"field": field_name, "error": str(e)},
            source=source,
        )
    if parsed is None:
        raise ProviderMalformed(
            message=f"{provider_name} response is missing '{field_name}'",
            details={"field": field_name},
            source=source,
        )
    return parsed


def optional_timestamp(value: Any, field_name: str, provider_name: str) -> Optional[datetime]:
    """Best-effort parse; an unreadable optional field becomes None."""
    try:
        return parse_timestamp(value)
    except ValueError:
        logger.debug(
            "Ignoring unreadable %s field %s: %r", provider_name, field_name, value
        )
        return None


def select_by_departure_date(
    records: Iterable[T],
    target: Optional[date],
    scheduled_departure: Callable[[T], Optional[datetime]],
) -> Optional[T]:
    """
    Pick the record for the requested departure date.

    Without a date the first record wins, as the providers list the
    current or most recent operation first. With a date, the record whose
    scheduled departure is closest to midday UTC of that date wins,
    provided it lies inside DATE_MATCH_WINDOW.
    """
    items = list(records)
    if not items:
        return None
    if target is None:
        return items[0]

    anchor = datetime(target.year, target.month, target.day, 12, tzinfo=timezone.utc)
    best: Optional[T] = None
    best_distance: Optional[timedelta] = None
    for item in items:
        try:
            scheduled = scheduled_departure(item)
        except (ValueError, TypeError, AttributeError):
            continue
        if scheduled is None:
            continue
        distance = abs(scheduled - anchor)
        if distance > DATE_MATCH_WINDOW:
            continue
        if best_distance is None or distance < best_distance:
            best, best_distance = item, distance
    return best
