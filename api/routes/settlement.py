"""Job-run endpoints called by the settlement pipeline."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.schemas.requests import JobRequest
from api.schemas.responses import JobResponse
from flightoracle.engine import ExternalResponse, SettlementRequestBuilder
from flightoracle.exceptions import InvalidRequestError
from flightoracle.handler import RequestHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settlement"])

JOB_RESPONSES: dict[int, dict[str, Any]] = {
    200: {"model": JobResponse, "description": "Decision, observation or indeterminate"},
    400: {"model": JobResponse, "description": "Invalid job request"},
    500: {"model": JobResponse, "description": "Internal fault"},
}

_builder = SettlementRequestBuilder()


def get_handler(request: Request) -> RequestHandler:
    return request.app.state.handler


def _respond(response: ExternalResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.body)


def _job_run_id(body: Any) -> Optional[str]:
    if isinstance(body, dict) and body.get("id") is not None:
        return str(body["id"])
    return None


async def _parse_job(request: Request) -> JobRequest:
    """
    Decode and validate the job body.

    Raises:
        InvalidRequestError: details carry whatever jobRunID could be recovered
    """
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError(message="Request body is not valid JSON")

    try:
        return JobRequest.model_validate(body)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors(include_url=False)
        )
        raise InvalidRequestError(
            message=f"Invalid job request: {problems}",
            details={"job_run_id": _job_run_id(body)},
        )


@router.post("/flight-data", responses=JOB_RESPONSES)
async def flight_data(request: Request):
    """
    Resolve a flight and report its normalized status.

    Body: ``{id, flightNumber, airline, date?}``, fields optionally nested
    in ``data``.
    """
    job_run_id: Optional[str] = None
    try:
        job = await _parse_job(request)
        job_run_id = job.id
        identifier = job.flight_identifier()
    except InvalidRequestError as e:
        job_run_id = job_run_id or e.details.get("job_run_id")
        logger.info("Rejected flight-data request: %s", e.message,
                    extra={"job_run_id": job_run_id})
        return _respond(_builder.build_invalid_request(job_run_id, e.message))

    response = await get_handler(request).flight_data(job.id, identifier)
    return _respond(response)


@router.post("/claims/evaluate", responses=JOB_RESPONSES)
async def evaluate_claim(request: Request):
    """
    Evaluate a policy's claim against the live flight status.

    Body: ``{id, policyId}`` when a ledger is configured, otherwise
    ``{id, policy: {...}}``. flightNumber/airline/date, when present,
    must match the policy's flight.
    """
    job_run_id: Optional[str] = None
    try:
        job = await _parse_job(request)
        job_run_id = job.id
        requested = job.flight_identifier() if job.has_flight else None
        inline = job.policy.to_policy() if job.policy is not None else None
    except InvalidRequestError as e:
        job_run_id = job_run_id or e.details.get("job_run_id")
        logger.info("Rejected claim request: %s", e.message,
                    extra={"job_run_id": job_run_id})
        return _respond(_builder.build_invalid_request(job_run_id, e.message))

    response = await get_handler(request).evaluate_claim(
        job.id,
        policy_id=job.policy_id,
        inline_policy=inline,
        requested_flight=requested,
    )
    return _respond(response)
