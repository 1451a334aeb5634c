"""
FlightAware AeroAPI client.

Auth: API key in the 'x-apikey' header.
Endpoint: GET {base}/flights/{ident}[?start=YYYY-MM-DD&end=YYYY-MM-DD]

AeroAPI reports gate times as scheduled_out / estimated_out / actual_out
(departure) and scheduled_in / estimated_in / actual_in (arrival), all as
ISO 8601 UTC strings with a 'Z' suffix. Status is free text such as
"En Route / On Time" or "Arrived / Gate Arrival", with separate
'cancelled' and 'diverted' booleans.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional

import httpx

from ..exceptions import ProviderMalformed, ProviderNotFound
from ..models import FlightIdentifier, FlightObservation, FlightStatus, ProviderSource
from .base import (
    Clock,
    get_json,
    optional_timestamp,
    required_timestamp,
    select_by_departure_date,
    utc_now,
)

DEFAULT_BASE_URL = "https://aeroapi.flightaware.com/aeroapi"


def map_flightaware_status(
    text: Optional[str],
    cancelled: bool = False,
    diverted: bool = False,
) -> FlightStatus:
    """Map AeroAPI free-text status (plus flags) onto FlightStatus."""
    if cancelled:
        return FlightStatus.CANCELLED
    if diverted:
        return FlightStatus.DIVERTED

    lowered = (text or "").strip().lower()
    if not lowered:
        return FlightStatus.UNKNOWN
    if "cancel" in lowered:
        return FlightStatus.CANCELLED
    if "divert" in lowered:
        return FlightStatus.DIVERTED
    # "Landed / Taxiing" must win over the taxiing keyword below
    if "landed" in lowered or "arrived" in lowered:
        return FlightStatus.LANDED
    if "en route" in lowered or "departed" in lowered or "taxiing" in lowered:
        return FlightStatus.ACTIVE
    if "scheduled" in lowered or "delayed" in lowered:
        return FlightStatus.SCHEDULED
    return FlightStatus.UNKNOWN


class FlightAwareClient:
    """FlightAware AeroAPI provider (usually the Primary slot)."""

    name = "flightaware"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        source: ProviderSource = ProviderSource.PRIMARY,
        clock: Clock = utc_now,
    ) -> None:
        self.http = http
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.clock = clock

    async def fetch(self, identifier: FlightIdentifier) -> FlightObservation:
        params: dict[str, str] = {}
        if identifier.scheduled_departure_date is not None:
            day = identifier.scheduled_departure_date
            params["start"] = (day - timedelta(days=1)).isoformat()
            params["end"] = (day + timedelta(days=2)).isoformat()

        payload = await get_json(
            self.http,
            f"{self.base_url}/flights/{identifier.designator}",
            provider_name=self.name,
            source=self.source,
            params=params or None,
            headers={"x-apikey": self.api_key},
        )
        observed_at = self.clock()

        flights = payload.get("flights") if isinstance(payload, Mapping) else None
        if not isinstance(flights, list):
            raise ProviderMalformed(
                message="flightaware response has no 'flights' list",
                source=self.source,
            )

        record = select_by_departure_date(
            (f for f in flights if isinstance(f, Mapping)),
            identifier.scheduled_departure_date,
            lambda f: optional_timestamp(
                f.get("scheduled_out") or f.get("scheduled_off"),
                "scheduled_out",
                self.name,
            ),
        )
        if record is None:
            raise ProviderNotFound(
                message=f"flightaware has no flight {identifier.lookup_key}",
                details={"flights_returned": len(flights)},
                source=self.source,
            )
        return self.parse_flight(record, identifier, observed_at)

    def parse_flight(
        self,
        record: Mapping[str, Any],
        identifier: FlightIdentifier,
        observed_at,
    ) -> FlightObservation:
        """Translate one AeroAPI flight record into an observation."""
        if "status" not in record:
            raise ProviderMalformed(
                message="flightaware flight has no status",
                details={"fa_flight_id": record.get("fa_flight_id")},
                source=self.source,
            )
        status = map_flightaware_status(
            record.get("status"),
            cancelled=bool(record.get("cancelled")),
            diverted=bool(record.get("diverted")),
        )

        scheduled_departure = required_timestamp(
            record.get("scheduled_out") or record.get("scheduled_off"),
            "scheduled_out",
            provider_name=self.name,
            source=self.source,
        )
        scheduled_arrival = required_timestamp(
            record.get("scheduled_in") or record.get("scheduled_on"),
            "scheduled_in",
            provider_name=self.name,
            source=self.source,
        )

        actual_out = optional_timestamp(record.get("actual_out"), "actual_out", self.name)
        estimated_out = optional_timestamp(record.get("estimated_out"), "estimated_out", self.name)
        actual_in = optional_timestamp(record.get("actual_in"), "actual_in", self.name)
        estimated_in = optional_timestamp(record.get("estimated_in"), "estimated_in", self.name)

        return FlightObservation(
            identifier=identifier,
            status=status,
            scheduled_departure=scheduled_departure,
            scheduled_arrival=scheduled_arrival,
            source=self.source,
            observed_at=observed_at,
            actual_or_estimated_departure=actual_out or estimated_out,
            actual_or_estimated_arrival=actual_in or estimated_in,
            departure_is_actual=actual_out is not None,
            arrival_is_actual=actual_in is not None,
            last_updated=self._last_updated(record),
            provider_name=self.name,
        )

    def _last_updated(self, record: Mapping[str, Any]):
        position = record.get("last_position")
        if isinstance(position, Mapping):
            position = position.get("timestamp")
        return optional_timestamp(position, "last_position", self.name)
