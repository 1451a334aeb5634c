"""
FlightOracle Engine

Resolver -> ClaimEvaluator -> SettlementRequestBuilder, leaves first.
"""
from __future__ import annotations

from .claim_evaluator import ClaimEvaluator, evaluate_claim
from .resolver import FlightResolver, ProviderAttempt
from .settlement_builder import ExternalResponse, SettlementRequestBuilder

__all__ = [
    "ClaimEvaluator",
    "ExternalResponse",
    "FlightResolver",
    "ProviderAttempt",
    "SettlementRequestBuilder",
    "evaluate_claim",
]
