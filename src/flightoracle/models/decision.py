"""
FlightOracle Decision Models

Key components:
- ProviderFailure: One failed provider attempt (source + error kind)
- UnresolvedFlight: Resolver outcome when no provider produced usable data
- ClaimDecision: Deterministic claim outcome for one policy

A ClaimDecision is a pure function of (Policy, observation). Its
decision_id hashes the fields that carry meaning, so replaying the same
settlement request yields the same id.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from ..canon import content_hash, format_timestamp
from .enums import ClaimOutcome, ProviderErrorKind, ProviderSource, ReasonCode
from .flight import FlightIdentifier, FlightObservation


# =============================================================================
# Resolution Failures
# =============================================================================

@dataclass(frozen=True)
class ProviderFailure:
    """Record of one provider attempt that did not yield an observation."""
    source: ProviderSource
    provider_name: str
    kind: ProviderErrorKind
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "provider": self.provider_name,
            "kind": self.kind.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class UnresolvedFlight:
    """
    No provider produced a usable observation.

    This is the Indeterminate resolver outcome. It is never a synthesized
    on-time observation.
    """
    identifier: FlightIdentifier
    failures: tuple[ProviderFailure, ...] = ()
    resolved_at: Optional[datetime] = None

    @property
    def all_not_found(self) -> bool:
        return bool(self.failures) and all(
            f.kind is ProviderErrorKind.NOT_FOUND for f in self.failures
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier.to_dict(),
            "failures": [f.to_dict() for f in self.failures],
            "resolvedAt": (
                format_timestamp(self.resolved_at) if self.resolved_at else None
            ),
        }


Resolution = Union[FlightObservation, UnresolvedFlight]


# =============================================================================
# Claim Decision
# =============================================================================

@dataclass(frozen=True)
class ClaimDecision:
    """
    Outcome of evaluating one policy against one resolution.

    Attributes:
        policy_id: Ledger policy id
        flight_identifier: The insured flight
        outcome: Eligible / NotEligible / Indeterminate
        observed_delay_minutes: Derived delay (0 when indeterminate)
        payout_amount: Coverage amount when eligible, else 0
        reason_code: Why this outcome was reached
        evaluated_at: Metadata only; never feeds into the outcome
        source_observation: Observation used, None when indeterminate
        unresolved: Resolver failure record when indeterminate
    """
    policy_id: str
    flight_identifier: FlightIdentifier
    outcome: ClaimOutcome
    observed_delay_minutes: int
    payout_amount: Decimal
    reason_code: ReasonCode
    evaluated_at: Optional[datetime] = None
    source_observation: Optional[FlightObservation] = None
    unresolved: Optional[UnresolvedFlight] = field(default=None, compare=False)

    @property
    def is_indeterminate(self) -> bool:
        return self.outcome is ClaimOutcome.INDETERMINATE

    @property
    def flight_status(self) -> Optional[str]:
        if self.source_observation is None:
            return None
        return self.source_observation.status.value

    @property
    def decision_id(self) -> str:
        """SHA-256 over the outcome-bearing fields (timestamps excluded)."""
        return content_hash({
            "policyId": self.policy_id,
            "flight": self.flight_identifier.to_dict(),
            "outcome": self.outcome.value,
            "observedDelayMinutes": self.observed_delay_minutes,
            "payoutAmount": self.payout_amount,
            "reasonCode": self.reason_code.value,
            "flightStatus": self.flight_status,
        })

    def to_dict(self) -> dict[str, Any]:
        return {
            "decisionId": self.decision_id,
            "policyId": self.policy_id,
            "flight": self.flight_identifier.to_dict(),
            "outcome": self.outcome.value,
            "observedDelayMinutes": self.observed_delay_minutes,
            "payoutAmount": str(self.payout_amount),
            "reasonCode": self.reason_code.value,
            "evaluatedAt": (
                format_timestamp(self.evaluated_at) if self.evaluated_at else None
            ),
            "sourceObservation": (
                self.source_observation.to_dict() if self.source_observation else None
            ),
        }
