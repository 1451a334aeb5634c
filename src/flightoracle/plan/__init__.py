"""
FlightOracle Resolution Plan

The fallback order and timeout budget live in configuration, not in
control flow.
"""
from __future__ import annotations

from .loader import (
    DEFAULT_PLAN,
    PlannedAttempt,
    ResolutionPlan,
    load_resolution_plan,
    parse_resolution_plan,
)
from .schema import SCHEMA_VERSION, ResolutionPlanSchema

__all__ = [
    "DEFAULT_PLAN",
    "PlannedAttempt",
    "ResolutionPlan",
    "ResolutionPlanSchema",
    "SCHEMA_VERSION",
    "load_resolution_plan",
    "parse_resolution_plan",
]
