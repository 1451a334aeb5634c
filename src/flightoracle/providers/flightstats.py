"""
FlightStats Flex API client.

Auth: appId / appKey query parameters.
Endpoint: GET {base}/flightstatus/rest/v2/json/flight/status/{carrier}/{flight}
          [/dep/{year}/{month}/{day}]?appId=..&appKey=..&utc=true

Times arrive as {"dateLocal": "...", "dateUtc": "..."} objects; dateUtc is
preferred because dateLocal carries no offset. Status is a one- or
two-letter code.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

import httpx

from ..exceptions import ProviderMalformed, ProviderNotFound, ProviderUnreachable
from ..models import FlightIdentifier, FlightObservation, FlightStatus, ProviderSource
from .base import (
    Clock,
    get_json,
    optional_timestamp,
    required_timestamp,
    select_by_departure_date,
    utc_now,
)

DEFAULT_BASE_URL = "https://api.flightstats.com/flex"

FLIGHTSTATS_STATUS_CODES: dict[str, FlightStatus] = {
    "A": FlightStatus.ACTIVE,
    "C": FlightStatus.CANCELLED,
    "D": FlightStatus.DIVERTED,
    "DN": FlightStatus.UNKNOWN,      # Data source needed
    "L": FlightStatus.LANDED,
    "NO": FlightStatus.CANCELLED,    # Not operational
    "R": FlightStatus.DIVERTED,      # Redirected
    "S": FlightStatus.SCHEDULED,
    "U": FlightStatus.UNKNOWN,
}


def map_flightstats_status(code: Optional[str]) -> FlightStatus:
    return FLIGHTSTATS_STATUS_CODES.get(
        (code or "").strip().upper(), FlightStatus.UNKNOWN
    )


def flightstats_time(value: Any) -> Any:
    """Unwrap a {dateUtc, dateLocal} object; plain values pass through."""
    if isinstance(value, Mapping):
        return value.get("dateUtc") or value.get("dateLocal")
    return value


class FlightStatsClient:
    """FlightStats Flex provider (usually the Secondary slot)."""

    name = "flightstats"

    def __init__(
        self,
        http: httpx.AsyncClient,
        app_id: str,
        app_key: str,
        base_url: str = DEFAULT_BASE_URL,
        source: ProviderSource = ProviderSource.SECONDARY,
        clock: Clock = utc_now,
    ) -> None:
        self.http = http
        self.app_id = app_id
        self.app_key = app_key
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.clock = clock

    def build_url(self, identifier: FlightIdentifier) -> str:
        url = (
            f"{self.base_url}/flightstatus/rest/v2/json/flight/status/"
            f"{identifier.airline_code}/{identifier.flight_number}"
        )
        day = identifier.scheduled_departure_date
        if day is not None:
            url += f"/dep/{day.year}/{day.month}/{day.day}"
        return url

    async def fetch(self, identifier: FlightIdentifier) -> FlightObservation:
        payload = await get_json(
            self.http,
            self.build_url(identifier),
            provider_name=self.name,
            source=self.source,
            params={"appId": self.app_id, "appKey": self.app_key, "utc": "true"},
        )
        observed_at = self.clock()

        if not isinstance(payload, Mapping):
            raise ProviderMalformed(
                message="flightstats response is not an object",
                source=self.source,
            )
        self._raise_for_error(payload)

        statuses = payload.get("flightStatuses")
        if not isinstance(statuses, list):
            raise ProviderMalformed(
                message="flightstats response has no 'flightStatuses' list",
                source=self.source,
            )

        record = select_by_departure_date(
            (s for s in statuses if isinstance(s, Mapping)),
            identifier.scheduled_departure_date,
            lambda s: optional_timestamp(
                flightstats_time(self._scheduled_departure_raw(s)),
                "departureDate",
                self.name,
            ),
        )
        if record is None:
            raise ProviderNotFound(
                message=f"flightstats has no flight {identifier.lookup_key}",
                details={"statuses_returned": len(statuses)},
                source=self.source,
            )
        return self.parse_status(record, identifier, observed_at)

    def parse_status(
        self,
        record: Mapping[str, Any],
        identifier: FlightIdentifier,
        observed_at: datetime,
    ) -> FlightObservation:
        """Translate one flightStatuses entry into an observation."""
        if not record.get("status"):
            raise ProviderMalformed(
                message="flightstats flight has no status",
                details={"flightId": record.get("flightId")},
                source=self.source,
            )
        status = map_flightstats_status(record.get("status"))

        times = record.get("operationalTimes")
        if not isinstance(times, Mapping):
            times = {}

        scheduled_departure = required_timestamp(
            flightstats_time(self._scheduled_departure_raw(record)),
            "departureDate",
            provider_name=self.name,
            source=self.source,
        )
        scheduled_arrival = required_timestamp(
            flightstats_time(
                times.get("scheduledGateArrival")
                or times.get("publishedArrival")
                or record.get("arrivalDate")
            ),
            "arrivalDate",
            provider_name=self.name,
            source=self.source,
        )

        def op_time(key: str) -> Optional[datetime]:
            return optional_timestamp(flightstats_time(times.get(key)), key, self.name)

        actual_dep = op_time("actualGateDeparture") or op_time("actualRunwayDeparture")
        estimated_dep = op_time("estimatedGateDeparture") or op_time("estimatedRunwayDeparture")
        actual_arr = op_time("actualGateArrival") or op_time("actualRunwayArrival")
        estimated_arr = op_time("estimatedGateArrival") or op_time("estimatedRunwayArrival")

        return FlightObservation(
            identifier=identifier,
            status=status,
            scheduled_departure=scheduled_departure,
            scheduled_arrival=scheduled_arrival,
            source=self.source,
            observed_at=observed_at,
            actual_or_estimated_departure=actual_dep or estimated_dep,
            actual_or_estimated_arrival=actual_arr or estimated_arr,
            departure_is_actual=actual_dep is not None,
            arrival_is_actual=actual_arr is not None,
            last_updated=self._last_updated(record),
            provider_name=self.name,
        )

    def _raise_for_error(self, payload: Mapping[str, Any]) -> None:
        """FlightStats reports some failures as an 'error' object in a 200."""
        error = payload.get("error")
        if not isinstance(error, Mapping):
            return
        details = {
            "errorCode": error.get("errorCode"),
            "httpStatusCode": error.get("httpStatusCode"),
        }
        if error.get("httpStatusCode") == 404:
            raise ProviderNotFound(
                message="flightstats has no record of this flight",
                details=details,
                source=self.source,
            )
        raise ProviderUnreachable(
            message=f"flightstats error: {error.get('errorMessage') or error.get('errorCode')}",
            details=details,
            source=self.source,
        )

    @staticmethod
    def _scheduled_departure_raw(record: Mapping[str, Any]) -> Any:
        times = record.get("operationalTimes")
        if isinstance(times, Mapping):
            value = times.get("scheduledGateDeparture") or times.get("publishedDeparture")
            if value:
                return value
        return record.get("departureDate")

    def _last_updated(self, record: Mapping[str, Any]) -> Optional[datetime]:
        updates = record.get("flightStatusUpdates")
        if isinstance(updates, list) and updates and isinstance(updates[-1], Mapping):
            return optional_timestamp(
                flightstats_time(updates[-1].get("updatedAt")), "updatedAt", self.name
            )
        return optional_timestamp(record.get("lastUpdated"), "lastUpdated", self.name)
