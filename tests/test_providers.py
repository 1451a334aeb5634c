"""
Provider client tests.

Both clients run against httpx.MockTransport; no network access.
"""
import json
from datetime import datetime, timezone

import httpx
import pytest

from flightoracle.exceptions import (
    ProviderMalformed,
    ProviderNotFound,
    ProviderTimeout,
    ProviderUnreachable,
)
from flightoracle.models import FlightStatus, ProviderErrorKind, ProviderSource
from flightoracle.providers import (
    FlightAwareClient,
    FlightStatsClient,
    map_flightaware_status,
    map_flightstats_status,
)

from tests.conftest import OBSERVED_AT, fixed_clock, make_identifier


def mock_http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, json=body)


# =============================================================================
# FlightAware
# =============================================================================

def aeroapi_flight(**overrides):
    flight = {
        "ident": "UAL100",
        "fa_flight_id": "UAL100-1718300000-airline-0123",
        "status": "Arrived / Gate Arrival",
        "cancelled": False,
        "diverted": False,
        "scheduled_out": "2024-06-15T14:00:00Z",
        "estimated_out": "2024-06-15T15:25:00Z",
        "actual_out": "2024-06-15T15:25:00Z",
        "scheduled_in": "2024-06-15T17:00:00Z",
        "estimated_in": "2024-06-15T18:30:00Z",
        "actual_in": "2024-06-15T18:30:00Z",
        "last_position": {"timestamp": "2024-06-15T18:20:00Z"},
    }
    flight.update(overrides)
    return flight


class TestFlightAwareStatusMapping:

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Arrived / Gate Arrival", FlightStatus.LANDED),
            ("Landed / Taxiing", FlightStatus.LANDED),
            ("En Route / On Time", FlightStatus.ACTIVE),
            ("En Route / Delayed", FlightStatus.ACTIVE),
            ("Departed", FlightStatus.ACTIVE),
            ("Scheduled", FlightStatus.SCHEDULED),
            ("Scheduled / Delayed", FlightStatus.SCHEDULED),
            ("Cancelled", FlightStatus.CANCELLED),
            ("Diverted", FlightStatus.DIVERTED),
            ("", FlightStatus.UNKNOWN),
            (None, FlightStatus.UNKNOWN),
            ("Result unknown", FlightStatus.UNKNOWN),
        ],
    )
    def test_keywords(self, text, expected):
        assert map_flightaware_status(text) is expected

    def test_flags_win_over_text(self):
        assert map_flightaware_status("Scheduled", cancelled=True) is FlightStatus.CANCELLED
        assert map_flightaware_status("En Route", diverted=True) is FlightStatus.DIVERTED


class TestFlightAwareClient:

    @pytest.mark.asyncio
    async def test_fetch_landed_flight(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["apikey"] = request.headers.get("x-apikey")
            return json_response(200, {"flights": [aeroapi_flight()]})

        async with mock_http(handler) as http:
            client = FlightAwareClient(http, api_key="fa-key", clock=fixed_clock)
            obs = await client.fetch(make_identifier())

        assert seen["path"] == "/aeroapi/flights/UA100"
        assert seen["params"] == {"start": "2024-06-14", "end": "2024-06-17"}
        assert seen["apikey"] == "fa-key"

        assert obs.status is FlightStatus.LANDED
        assert obs.source is ProviderSource.PRIMARY
        assert obs.provider_name == "flightaware"
        assert obs.delay_minutes == 90
        assert obs.departure_delay_minutes == 85
        assert obs.arrival_is_actual
        assert obs.observed_at == OBSERVED_AT
        assert obs.last_updated == datetime(2024, 6, 15, 18, 20, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_no_date_sends_no_window(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return json_response(200, {"flights": [aeroapi_flight()]})

        async with mock_http(handler) as http:
            client = FlightAwareClient(http, api_key="k", clock=fixed_clock)
            await client.fetch(make_identifier(date=None))

        assert seen["params"] == {}

    @pytest.mark.asyncio
    async def test_picks_record_for_requested_date(self):
        flights = [
            aeroapi_flight(
                status="Scheduled",
                scheduled_out="2024-06-16T14:00:00Z",
                scheduled_in="2024-06-16T17:00:00Z",
                actual_out=None, estimated_out=None, actual_in=None, estimated_in=None,
            ),
            aeroapi_flight(),
        ]
        async with mock_http(lambda r: json_response(200, {"flights": flights})) as http:
            client = FlightAwareClient(http, api_key="k", clock=fixed_clock)
            obs = await client.fetch(make_identifier(date="2024-06-15"))

        assert obs.status is FlightStatus.LANDED
        assert obs.scheduled_departure == datetime(2024, 6, 15, 14, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_estimated_times_only(self):
        flight = aeroapi_flight(
            status="En Route / Delayed",
            actual_in=None,
            estimated_in="2024-06-15T18:10:00Z",
        )
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            obs = await FlightAwareClient(http, api_key="k", clock=fixed_clock).fetch(
                make_identifier()
            )

        assert obs.status is FlightStatus.ACTIVE
        assert obs.delay_minutes == 70
        assert not obs.arrival_is_actual

    @pytest.mark.asyncio
    async def test_cancelled_flag(self):
        flight = aeroapi_flight(
            status="Scheduled", cancelled=True,
            actual_out=None, estimated_out=None, actual_in=None, estimated_in=None,
        )
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            obs = await FlightAwareClient(http, api_key="k", clock=fixed_clock).fetch(
                make_identifier()
            )

        assert obs.status is FlightStatus.CANCELLED
        assert obs.delay_minutes == 0

    @pytest.mark.asyncio
    async def test_empty_flights_is_not_found(self):
        async with mock_http(lambda r: json_response(200, {"flights": []})) as http:
            client = FlightAwareClient(http, api_key="k")
            with pytest.raises(ProviderNotFound) as exc:
                await client.fetch(make_identifier())

        assert exc.value.kind is ProviderErrorKind.NOT_FOUND
        assert exc.value.source is ProviderSource.PRIMARY

    @pytest.mark.asyncio
    async def test_http_404_is_not_found(self):
        async with mock_http(lambda r: json_response(404, {"title": "Not found"})) as http:
            with pytest.raises(ProviderNotFound):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_http_503_is_unreachable(self):
        async with mock_http(lambda r: httpx.Response(503)) as http:
            with pytest.raises(ProviderUnreachable) as exc:
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

        assert exc.value.details["status_code"] == 503

    @pytest.mark.asyncio
    async def test_connect_error_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with mock_http(handler) as http:
            with pytest.raises(ProviderUnreachable):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_transport_timeout_is_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with mock_http(handler) as http:
            with pytest.raises(ProviderTimeout) as exc:
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

        assert exc.value.kind is ProviderErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_non_json_is_malformed(self):
        async with mock_http(lambda r: httpx.Response(200, text="<html>")) as http:
            with pytest.raises(ProviderMalformed):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_missing_flights_key_is_malformed(self):
        async with mock_http(lambda r: json_response(200, {"links": None})) as http:
            with pytest.raises(ProviderMalformed):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_missing_scheduled_arrival_is_malformed(self):
        flight = aeroapi_flight(scheduled_in=None)
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            with pytest.raises(ProviderMalformed, match="scheduled_in"):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_out_of_range_epoch_is_malformed(self):
        flight = aeroapi_flight(scheduled_out="99999999999999999999")
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            with pytest.raises(ProviderMalformed, match="scheduled_out"):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier(date=None))

    @pytest.mark.asyncio
    async def test_out_of_range_optional_epoch_ignored(self):
        flight = aeroapi_flight(actual_in=10**20, estimated_in=None)
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            obs = await FlightAwareClient(http, api_key="k", clock=fixed_clock).fetch(
                make_identifier()
            )

        assert obs.actual_or_estimated_arrival is None

    @pytest.mark.asyncio
    async def test_missing_status_is_malformed(self):
        flight = aeroapi_flight()
        del flight["status"]
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            with pytest.raises(ProviderMalformed):
                await FlightAwareClient(http, api_key="k").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_unreadable_optional_time_ignored(self):
        flight = aeroapi_flight(actual_in="garbage", estimated_in=None)
        async with mock_http(lambda r: json_response(200, {"flights": [flight]})) as http:
            obs = await FlightAwareClient(http, api_key="k", clock=fixed_clock).fetch(
                make_identifier()
            )

        assert obs.actual_or_estimated_arrival is None
        # Falls back to the departure delay
        assert obs.delay_minutes == 85

    @pytest.mark.asyncio
    async def test_slot_source_is_configurable(self):
        async with mock_http(lambda r: json_response(200, {"flights": [aeroapi_flight()]})) as http:
            client = FlightAwareClient(
                http, api_key="k", source=ProviderSource.SECONDARY, clock=fixed_clock
            )
            obs = await client.fetch(make_identifier())

        assert obs.source is ProviderSource.SECONDARY


# =============================================================================
# FlightStats
# =============================================================================

def fs_time(utc: str) -> dict:
    return {"dateLocal": utc.replace("Z", ""), "dateUtc": utc}


def flightstats_status(**overrides):
    status = {
        "flightId": 1234567890,
        "carrierFsCode": "UA",
        "flightNumber": "100",
        "departureDate": fs_time("2024-06-15T14:00:00.000Z"),
        "arrivalDate": fs_time("2024-06-15T17:00:00.000Z"),
        "status": "L",
        "operationalTimes": {
            "scheduledGateDeparture": fs_time("2024-06-15T14:00:00.000Z"),
            "actualGateDeparture": fs_time("2024-06-15T15:10:00.000Z"),
            "scheduledGateArrival": fs_time("2024-06-15T17:00:00.000Z"),
            "actualGateArrival": fs_time("2024-06-15T18:15:00.000Z"),
        },
        "flightStatusUpdates": [
            {"updatedAt": fs_time("2024-06-15T15:11:00.000Z")},
            {"updatedAt": fs_time("2024-06-15T18:16:00.000Z")},
        ],
    }
    status.update(overrides)
    return status


class TestFlightStatsStatusMapping:

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("A", FlightStatus.ACTIVE),
            ("C", FlightStatus.CANCELLED),
            ("D", FlightStatus.DIVERTED),
            ("DN", FlightStatus.UNKNOWN),
            ("L", FlightStatus.LANDED),
            ("NO", FlightStatus.CANCELLED),
            ("R", FlightStatus.DIVERTED),
            ("S", FlightStatus.SCHEDULED),
            ("U", FlightStatus.UNKNOWN),
            ("l", FlightStatus.LANDED),
            ("ZZ", FlightStatus.UNKNOWN),
            (None, FlightStatus.UNKNOWN),
        ],
    )
    def test_codes(self, code, expected):
        assert map_flightstats_status(code) is expected


class TestFlightStatsClient:

    @pytest.mark.asyncio
    async def test_fetch_landed_flight(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return json_response(200, {"flightStatuses": [flightstats_status()]})

        async with mock_http(handler) as http:
            client = FlightStatsClient(http, app_id="fs-id", app_key="fs-key", clock=fixed_clock)
            obs = await client.fetch(make_identifier())

        assert seen["path"] == "/flex/flightstatus/rest/v2/json/flight/status/UA/100/dep/2024/6/15"
        assert seen["params"] == {"appId": "fs-id", "appKey": "fs-key", "utc": "true"}

        assert obs.status is FlightStatus.LANDED
        assert obs.source is ProviderSource.SECONDARY
        assert obs.provider_name == "flightstats"
        assert obs.delay_minutes == 75
        assert obs.arrival_is_actual
        assert obs.last_updated == datetime(2024, 6, 15, 18, 16, tzinfo=timezone.utc)

    def test_url_without_date(self):
        client = FlightStatsClient(httpx.AsyncClient(), app_id="a", app_key="b")
        assert client.build_url(make_identifier(date=None)).endswith(
            "/flight/status/UA/100"
        )

    @pytest.mark.asyncio
    async def test_prefers_utc_over_local(self):
        status = flightstats_status(
            operationalTimes={
                "scheduledGateDeparture": {
                    "dateLocal": "2024-06-15T10:00:00.000",
                    "dateUtc": "2024-06-15T14:00:00.000Z",
                },
                "scheduledGateArrival": {
                    "dateLocal": "2024-06-15T13:00:00.000",
                    "dateUtc": "2024-06-15T17:00:00.000Z",
                },
            }
        )
        async with mock_http(lambda r: json_response(200, {"flightStatuses": [status]})) as http:
            obs = await FlightStatsClient(
                http, app_id="a", app_key="b", clock=fixed_clock
            ).fetch(make_identifier())

        assert obs.scheduled_departure == datetime(2024, 6, 15, 14, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_runway_times_used_when_gate_missing(self):
        status = flightstats_status(
            status="A",
            operationalTimes={
                "scheduledGateDeparture": fs_time("2024-06-15T14:00:00.000Z"),
                "actualRunwayDeparture": fs_time("2024-06-15T14:50:00.000Z"),
                "scheduledGateArrival": fs_time("2024-06-15T17:00:00.000Z"),
                "estimatedRunwayArrival": fs_time("2024-06-15T17:40:00.000Z"),
            },
        )
        async with mock_http(lambda r: json_response(200, {"flightStatuses": [status]})) as http:
            obs = await FlightStatsClient(
                http, app_id="a", app_key="b", clock=fixed_clock
            ).fetch(make_identifier())

        assert obs.status is FlightStatus.ACTIVE
        assert obs.delay_minutes == 40
        assert obs.departure_is_actual
        assert not obs.arrival_is_actual

    @pytest.mark.asyncio
    async def test_unknown_code_returns_unknown_observation(self):
        status = flightstats_status(status="DN")
        async with mock_http(lambda r: json_response(200, {"flightStatuses": [status]})) as http:
            obs = await FlightStatsClient(
                http, app_id="a", app_key="b", clock=fixed_clock
            ).fetch(make_identifier())

        assert obs.status is FlightStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_empty_statuses_is_not_found(self):
        async with mock_http(lambda r: json_response(200, {"flightStatuses": []})) as http:
            with pytest.raises(ProviderNotFound):
                await FlightStatsClient(http, app_id="a", app_key="b").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_error_object_404_is_not_found(self):
        body = {"error": {"httpStatusCode": 404, "errorCode": "NOT_FOUND", "errorMessage": "x"}}
        async with mock_http(lambda r: json_response(200, body)) as http:
            with pytest.raises(ProviderNotFound):
                await FlightStatsClient(http, app_id="a", app_key="b").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_error_object_auth_is_unreachable(self):
        body = {"error": {"httpStatusCode": 403, "errorCode": "AUTH_FAILURE"}}
        async with mock_http(lambda r: json_response(200, body)) as http:
            with pytest.raises(ProviderUnreachable, match="AUTH_FAILURE"):
                await FlightStatsClient(http, app_id="a", app_key="b").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_missing_scheduled_departure_is_malformed(self):
        status = flightstats_status(departureDate=None, operationalTimes={})
        async with mock_http(lambda r: json_response(200, {"flightStatuses": [status]})) as http:
            with pytest.raises(ProviderMalformed):
                await FlightStatsClient(
                    http, app_id="a", app_key="b"
                ).fetch(make_identifier(date=None))

    @pytest.mark.asyncio
    async def test_missing_status_is_malformed(self):
        status = flightstats_status(status="")
        async with mock_http(lambda r: json_response(200, {"flightStatuses": [status]})) as http:
            with pytest.raises(ProviderMalformed):
                await FlightStatsClient(http, app_id="a", app_key="b").fetch(make_identifier())

    @pytest.mark.asyncio
    async def test_statuses_not_a_list_is_malformed(self):
        body = json.loads('{"flightStatuses": {"oops": true}}')
        async with mock_http(lambda r: json_response(200, body)) as http:
            with pytest.raises(ProviderMalformed):
                await FlightStatsClient(http, app_id="a", app_key="b").fetch(make_identifier())
