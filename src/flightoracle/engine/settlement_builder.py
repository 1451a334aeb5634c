"""
FlightOracle Settlement Request Builder

Serializes engine results into the job-run response contract consumed by
the settlement pipeline.

Response shapes:
    success        {jobRunID, data: {...}, statusCode: 200}
    indeterminate  {jobRunID, status: "indeterminate", data: {...},
                    error: {code, message, retryable}, statusCode: 200}
    errored        {jobRunID, status: "errored", error, errorCode, statusCode}

Indeterminate is not a success with payout 0 and not an HTTP error: it
carries its own status so the pipeline can retry later instead of
finalizing a rejection.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..canon import format_timestamp
from ..models import (
    ClaimDecision,
    ClaimOutcome,
    FlightIdentifier,
    FlightObservation,
    Resolution,
    UnresolvedFlight,
)
from ..providers.timestamps import to_unix_seconds

STATUS_ERRORED = "errored"
STATUS_INDETERMINATE = "indeterminate"

INDETERMINATE_CODE = "FLIGHT_STATUS_UNAVAILABLE"
INVALID_REQUEST_CODE = "INVALID_REQUEST"
INTERNAL_FAULT_CODE = "INTERNAL_FAULT"
INTERNAL_FAULT_MESSAGE = "Internal error while processing the job request"


@dataclass(frozen=True)
class ExternalResponse:
    """HTTP status plus JSON body for the settlement pipeline."""
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def is_indeterminate(self) -> bool:
        return self.body.get("status") == STATUS_INDETERMINATE

    @property
    def is_errored(self) -> bool:
        return self.body.get("status") == STATUS_ERRORED


class SettlementRequestBuilder:
    """
    Builds ExternalResponse objects.

    Every response carries the caller's jobRunID, including failures.
    """

    def build(self, decision: ClaimDecision, job_run_id: Optional[str]) -> ExternalResponse:
        """Claim decision response."""
        data = {
            **self._flight_fields(decision.flight_identifier),
            "policyId": decision.policy_id,
            "status": decision.flight_status,
            "delayMinutes": decision.observed_delay_minutes,
            "payoutAmount": str(decision.payout_amount),
            "outcome": decision.outcome.value,
            "reasonCode": decision.reason_code.value,
            "decisionId": decision.decision_id,
            "source": (
                decision.source_observation.source.value
                if decision.source_observation else None
            ),
            "evaluatedAt": (
                format_timestamp(decision.evaluated_at) if decision.evaluated_at else None
            ),
        }
        if decision.outcome is ClaimOutcome.INDETERMINATE:
            return self._indeterminate(job_run_id, data, decision.unresolved)
        return ExternalResponse(
            status_code=200,
            body={"jobRunID": job_run_id, "data": data, "statusCode": 200},
        )

    def build_observation(
        self,
        resolution: Resolution,
        job_run_id: Optional[str],
    ) -> ExternalResponse:
        """Status-only oracle response (no policy involved)."""
        if isinstance(resolution, UnresolvedFlight):
            data = {
                **self._flight_fields(resolution.identifier),
                "status": None,
                "delayMinutes": 0,
                "actualArrival": None,
                "lastUpdated": None,
                "source": None,
                "outcome": ClaimOutcome.INDETERMINATE.value,
            }
            return self._indeterminate(job_run_id, data, resolution)

        observation: FlightObservation = resolution
        data = {
            **self._flight_fields(observation.identifier),
            "status": observation.status.value,
            "delayMinutes": observation.delay_minutes,
            "actualArrival": (
                to_unix_seconds(observation.actual_or_estimated_arrival)
                if observation.arrival_is_actual else None
            ),
            "estimatedArrival": to_unix_seconds(observation.actual_or_estimated_arrival),
            "scheduledArrival": to_unix_seconds(observation.scheduled_arrival),
            "lastUpdated": to_unix_seconds(observation.last_updated),
            "source": observation.source.value,
        }
        return ExternalResponse(
            status_code=200,
            body={"jobRunID": job_run_id, "data": data, "statusCode": 200},
        )

    def build_error(
        self,
        job_run_id: Optional[str],
        message: str,
        code: str,
        status_code: int = 500,
    ) -> ExternalResponse:
        return ExternalResponse(
            status_code=status_code,
            body={
                "jobRunID": job_run_id,
                "status": STATUS_ERRORED,
                "error": message,
                "errorCode": code,
                "statusCode": status_code,
            },
        )

    def build_invalid_request(self, job_run_id: Optional[str], message: str) -> ExternalResponse:
        return self.build_error(job_run_id, message, INVALID_REQUEST_CODE, status_code=400)

    def build_internal_fault(self, job_run_id: Optional[str]) -> ExternalResponse:
        """Generic 500; the real cause stays in server logs."""
        return self.build_error(job_run_id, INTERNAL_FAULT_MESSAGE, INTERNAL_FAULT_CODE)

    def _indeterminate(
        self,
        job_run_id: Optional[str],
        data: dict[str, Any],
        unresolved: Optional[UnresolvedFlight],
    ) -> ExternalResponse:
        failures = unresolved.failures if unresolved else ()
        return ExternalResponse(
            status_code=200,
            body={
                "jobRunID": job_run_id,
                "status": STATUS_INDETERMINATE,
                "data": {**data, "payoutAmount": "0"},
                "error": {
                    "code": INDETERMINATE_CODE,
                    "message": "No provider returned usable flight data",
                    "retryable": True,
                    "failures": [
                        {"source": f.source.value, "kind": f.kind.value}
                        for f in failures
                    ],
                },
                "statusCode": 200,
            },
        )

    @staticmethod
    def _flight_fields(identifier: FlightIdentifier) -> dict[str, Any]:
        return {
            "flightNumber": identifier.flight_number,
            "airline": identifier.airline_code,
            "date": (
                identifier.scheduled_departure_date.isoformat()
                if identifier.scheduled_departure_date else None
            ),
        }
