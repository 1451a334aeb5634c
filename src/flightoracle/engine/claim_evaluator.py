"""
FlightOracle Claim Evaluator

Maps (Policy, Resolution) onto a ClaimDecision.

Rules, first match wins:
1. Policy not Active                      -> NotEligible   PolicyNotActive
2. Flight unresolved                      -> Indeterminate FlightStatusUnavailable
3. Cancelled or Diverted                  -> Eligible      FlightDisrupted
4. Landed (or Active with an actual
   arrival) and delay >= threshold        -> Eligible      DelayThresholdMet
5. Anything else                          -> NotEligible   DelayThresholdNotMet

The evaluator is pure: no I/O, no clock, no randomness. evaluated_at is
taken from the resolution unless the caller supplies one, so identical
inputs give identical decisions.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models import (
    ClaimDecision,
    ClaimOutcome,
    FlightObservation,
    FlightStatus,
    Policy,
    ReasonCode,
    Resolution,
    UnresolvedFlight,
)

ZERO = Decimal("0")


@dataclass(frozen=True)
class ClaimEvaluator:
    """Stateless; instances exist only so the engine can be injected."""

    def evaluate(
        self,
        policy: Policy,
        resolution: Optional[Resolution],
        evaluated_at: Optional[datetime] = None,
    ) -> ClaimDecision:
        """
        Evaluate one policy against one resolver outcome.

        A resolution of None is treated like an UnresolvedFlight. This
        method does not raise for any combination of inputs.
        """
        observation = resolution if isinstance(resolution, FlightObservation) else None
        unresolved = resolution if isinstance(resolution, UnresolvedFlight) else None

        if evaluated_at is None:
            if observation is not None:
                evaluated_at = observation.observed_at
            elif unresolved is not None:
                evaluated_at = unresolved.resolved_at

        def decide(
            outcome: ClaimOutcome,
            reason: ReasonCode,
            payout: Decimal = ZERO,
        ) -> ClaimDecision:
            return ClaimDecision(
                policy_id=policy.id,
                flight_identifier=policy.flight_identifier,
                outcome=outcome,
                observed_delay_minutes=observation.delay_minutes if observation else 0,
                payout_amount=payout,
                reason_code=reason,
                evaluated_at=evaluated_at,
                source_observation=observation,
                unresolved=unresolved,
            )

        if not policy.is_active:
            return decide(ClaimOutcome.NOT_ELIGIBLE, ReasonCode.POLICY_NOT_ACTIVE)

        if observation is None:
            return decide(ClaimOutcome.INDETERMINATE, ReasonCode.FLIGHT_STATUS_UNAVAILABLE)

        if observation.status.is_disruption:
            return decide(
                ClaimOutcome.ELIGIBLE,
                ReasonCode.FLIGHT_DISRUPTED,
                policy.coverage_amount,
            )

        if (
            _has_arrived(observation)
            and observation.delay_minutes >= policy.delay_threshold_minutes
        ):
            return decide(
                ClaimOutcome.ELIGIBLE,
                ReasonCode.DELAY_THRESHOLD_MET,
                policy.coverage_amount,
            )

        # Still scheduled/airborne and under threshold: the caller re-queries later
        return decide(ClaimOutcome.NOT_ELIGIBLE, ReasonCode.DELAY_THRESHOLD_NOT_MET)


def _has_arrived(observation: FlightObservation) -> bool:
    if observation.status is FlightStatus.LANDED:
        return True
    return observation.status is FlightStatus.ACTIVE and observation.has_actual_arrival


def evaluate_claim(
    policy: Policy,
    resolution: Optional[Resolution],
    evaluated_at: Optional[datetime] = None,
) -> ClaimDecision:
    """Convenience wrapper around ClaimEvaluator().evaluate()."""
    return ClaimEvaluator().evaluate(policy, resolution, evaluated_at)
