"""
FlightOracle Domain Models

Frozen dataclasses shared by providers, the resolver, the claim evaluator
and the settlement builder.
"""
from __future__ import annotations

from .enums import (
    ClaimOutcome,
    FlightStatus,
    PolicyStatus,
    ProviderErrorKind,
    ProviderSource,
    ReasonCode,
)
from .flight import (
    FlightIdentifier,
    FlightObservation,
    compute_delay_minutes,
)
from .policy import Policy
from .decision import (
    ClaimDecision,
    ProviderFailure,
    Resolution,
    UnresolvedFlight,
)

__all__ = [
    # Enums
    "ClaimOutcome",
    "FlightStatus",
    "PolicyStatus",
    "ProviderErrorKind",
    "ProviderSource",
    "ReasonCode",
    # Flight
    "FlightIdentifier",
    "FlightObservation",
    "compute_delay_minutes",
    # Policy
    "Policy",
    # Decision
    "ClaimDecision",
    "ProviderFailure",
    "Resolution",
    "UnresolvedFlight",
]
