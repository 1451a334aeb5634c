"""
FlightOracle - Flight Status Resolution and Claim Decision Engine

The oracle bridge between external flight data providers and a
parametric flight-delay insurance ledger.

Core Principle: "No data is not a rejection." When no provider can say
what happened to a flight, the claim is Indeterminate, never NotEligible.

Key Features:
- Two provider clients (FlightAware AeroAPI, FlightStats Flex) behind one
  fetch(identifier) capability
- Ordered primary -> fallback resolution driven by a YAML plan
- Pure, replay-safe claim evaluation with content-hashed decision ids
- Job-run response contract for the settlement pipeline

Quick Start:
    from flightoracle.engine import (
        FlightResolver, ClaimEvaluator, SettlementRequestBuilder,
    )

    resolver = FlightResolver.from_plan(plan, providers)
    resolution = await resolver.resolve(policy.flight_identifier)
    decision = ClaimEvaluator().evaluate(policy, resolution)
    response = SettlementRequestBuilder().build(decision, job_run_id)

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    ClaimDecision,
    ClaimOutcome,
    FlightIdentifier,
    FlightObservation,
    FlightStatus,
    Policy,
    PolicyStatus,
    ProviderErrorKind,
    ProviderFailure,
    ProviderSource,
    ReasonCode,
    Resolution,
    UnresolvedFlight,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    ConfigurationError,
    FlightOracleError,
    InvalidRequestError,
    LedgerError,
    PlanLoadError,
    PlanValidationError,
    PolicyNotFoundError,
    ProviderError,
    ProviderMalformed,
    ProviderNotFound,
    ProviderTimeout,
    ProviderUnreachable,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    ClaimEvaluator,
    ExternalResponse,
    FlightResolver,
    SettlementRequestBuilder,
    evaluate_claim,
)

__all__ = [
    "__version__",
    # Models
    "ClaimDecision",
    "ClaimOutcome",
    "FlightIdentifier",
    "FlightObservation",
    "FlightStatus",
    "Policy",
    "PolicyStatus",
    "ProviderErrorKind",
    "ProviderFailure",
    "ProviderSource",
    "ReasonCode",
    "Resolution",
    "UnresolvedFlight",
    # Exceptions
    "ConfigurationError",
    "FlightOracleError",
    "InvalidRequestError",
    "LedgerError",
    "PlanLoadError",
    "PlanValidationError",
    "PolicyNotFoundError",
    "ProviderError",
    "ProviderMalformed",
    "ProviderNotFound",
    "ProviderTimeout",
    "ProviderUnreachable",
    # Engine
    "ClaimEvaluator",
    "ExternalResponse",
    "FlightResolver",
    "SettlementRequestBuilder",
    "evaluate_claim",
]
