"""
FlightOracle Request Handler

Drives Resolver -> ClaimEvaluator -> SettlementRequestBuilder for one job
request and turns every failure into a job response that still carries
the caller's jobRunID.

Failure mapping:
    InvalidRequestError    -> 400 errored, INVALID_REQUEST
    PolicyNotFoundError    -> 404 errored, POLICY_NOT_FOUND
    LedgerError            -> 500 errored, LEDGER_UNAVAILABLE
    anything else          -> 500 errored, INTERNAL_FAULT (detail in logs only)

asyncio.CancelledError is not an Exception and passes straight through,
so a disconnected caller never receives a partial decision.
"""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Optional

from .engine import ClaimEvaluator, ExternalResponse, FlightResolver, SettlementRequestBuilder
from .exceptions import (
    ConfigurationError,
    InvalidRequestError,
    LedgerError,
    PolicyNotFoundError,
)
from .ledger import LedgerClient
from .models import ClaimDecision, FlightIdentifier, Policy

logger = logging.getLogger(__name__)


class RequestHandler:
    """
    One instance serves all requests; it holds collaborators only.

    Attributes:
        resolver: Primary -> fallback flight resolution
        ledger: Policy source and decision sink; None when not configured
        submit_decisions: Hand final decisions to the ledger
    """

    def __init__(
        self,
        resolver: FlightResolver,
        ledger: Optional[LedgerClient] = None,
        evaluator: Optional[ClaimEvaluator] = None,
        builder: Optional[SettlementRequestBuilder] = None,
        submit_decisions: bool = False,
    ) -> None:
        if submit_decisions and ledger is None:
            raise ConfigurationError(message="Decision submission requires a ledger")
        self.resolver = resolver
        self.ledger = ledger
        self.evaluator = evaluator or ClaimEvaluator()
        self.builder = builder or SettlementRequestBuilder()
        self.submit_decisions = submit_decisions

    # =========================================================================
    # Operations
    # =========================================================================

    async def flight_data(
        self,
        job_run_id: Optional[str],
        identifier: FlightIdentifier,
    ) -> ExternalResponse:
        """Status-only lookup: resolve the flight and report it."""
        async def run() -> ExternalResponse:
            resolution = await self.resolver.resolve(identifier)
            return self.builder.build_observation(resolution, job_run_id)

        return await self._guarded(job_run_id, run)

    async def evaluate_claim(
        self,
        job_run_id: Optional[str],
        policy_id: Optional[str] = None,
        inline_policy: Optional[Policy] = None,
        requested_flight: Optional[FlightIdentifier] = None,
    ) -> ExternalResponse:
        """
        Full claim path for one policy.

        The policy comes from the ledger when one is configured, otherwise
        from the request. A requested flight must match the policy's flight.
        """
        async def run() -> ExternalResponse:
            started = time.monotonic()
            policy = await self._load_policy(policy_id, inline_policy)

            if requested_flight is not None and not requested_flight.matches(
                policy.flight_identifier
            ):
                raise InvalidRequestError(
                    message=(
                        f"Requested flight {requested_flight.lookup_key} does not match "
                        f"policy flight {policy.flight_identifier.lookup_key}"
                    ),
                    details={"policy_id": policy.id},
                )

            resolution = await self.resolver.resolve(policy.flight_identifier)
            decision = self.evaluator.evaluate(policy, resolution)
            submitted = await self._submit(decision)

            logger.info(
                "Claim decision for policy %s: %s",
                policy.id,
                decision.outcome.value,
                extra={
                    "job_run_id": job_run_id,
                    "policy_id": policy.id,
                    "outcome": decision.outcome.value,
                    "reason_code": decision.reason_code.value,
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                },
            )

            response = self.builder.build(decision, job_run_id)
            if submitted is not None:
                response.body["data"]["submitted"] = submitted
            return response

        return await self._guarded(job_run_id, run)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _load_policy(
        self,
        policy_id: Optional[str],
        inline_policy: Optional[Policy],
    ) -> Policy:
        if self.ledger is not None:
            if inline_policy is not None:
                raise InvalidRequestError(
                    message="Inline policies are not accepted when a ledger is configured"
                )
            if not policy_id:
                raise InvalidRequestError(message="policyId is required")
            return await self.ledger.get_policy(policy_id)

        if inline_policy is None:
            raise InvalidRequestError(
                message="No ledger is configured; supply the policy inline"
            )
        return inline_policy

    async def _submit(self, decision: ClaimDecision) -> Optional[bool]:
        """
        Hand a final decision to the ledger.

        Returns None when submission is disabled or not applicable, else
        whether the ledger acknowledged. Indeterminate is never submitted.
        """
        if not self.submit_decisions or not decision.outcome.is_final:
            return None
        try:
            ack = await self.ledger.submit_claim_decision(decision)
        except LedgerError as e:
            # The decision is replay-safe; the pipeline can resubmit
            logger.error(
                "Decision submission failed for policy %s: %s",
                decision.policy_id,
                e.message,
                extra={"policy_id": decision.policy_id, "error_kind": e.code},
            )
            return False
        return ack.accepted

    async def _guarded(
        self,
        job_run_id: Optional[str],
        run: Callable[[], Awaitable[ExternalResponse]],
    ) -> ExternalResponse:
        try:
            return await run()
        except InvalidRequestError as e:
            logger.info(
                "Invalid job request: %s", e.message, extra={"job_run_id": job_run_id}
            )
            return self.builder.build_invalid_request(job_run_id, e.message)
        except PolicyNotFoundError as e:
            logger.info(e.message, extra={"job_run_id": job_run_id})
            return self.builder.build_error(
                job_run_id, e.message, "POLICY_NOT_FOUND", status_code=404
            )
        except LedgerError as e:
            logger.error(
                "Ledger unavailable: %s",
                e.message,
                extra={"job_run_id": job_run_id, "error_kind": e.code},
            )
            return self.builder.build_error(
                job_run_id, "Ledger unavailable", "LEDGER_UNAVAILABLE"
            )
        except Exception:
            logger.exception(
                "Internal fault while handling job", extra={"job_run_id": job_run_id}
            )
            return self.builder.build_internal_fault(job_run_id)
