"""
FlightOracle Resolution Plan Loader

Loads and validates the resolution plan from YAML or JSON, and converts
the pydantic schema into the frozen ResolutionPlan used at runtime.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import PlanLoadError, PlanValidationError
from .schema import (
    SCHEMA_VERSION,
    ResolutionPlanSchema,
    check_schema_version,
    validate_resolution_plan,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Runtime Plan
# =============================================================================

@dataclass(frozen=True)
class PlannedAttempt:
    """Provider name plus its call budget; bound to a client by the resolver."""
    provider: str
    timeout_seconds: float
    fallback_on_not_found: bool = True


@dataclass(frozen=True)
class ResolutionPlan:
    """Ordered provider attempts, Primary first."""
    attempts: tuple[PlannedAttempt, ...]
    schema_version: str = SCHEMA_VERSION

    @property
    def provider_names(self) -> list[str]:
        return [a.provider for a in self.attempts]

    @property
    def worst_case_seconds(self) -> float:
        """Upper bound on resolver latency: the sum of all call budgets."""
        return sum(a.timeout_seconds for a in self.attempts)


DEFAULT_PLAN = ResolutionPlan(
    attempts=(
        PlannedAttempt(provider="flightaware", timeout_seconds=8.0),
        PlannedAttempt(provider="flightstats", timeout_seconds=8.0),
    )
)


def _convert_plan(schema: ResolutionPlanSchema) -> ResolutionPlan:
    return ResolutionPlan(
        attempts=tuple(
            PlannedAttempt(
                provider=a.provider,
                timeout_seconds=a.timeout_seconds,
                fallback_on_not_found=a.fallback_on_not_found,
            )
            for a in schema.attempts
        ),
        schema_version=schema.schema_version,
    )


# =============================================================================
# Loading
# =============================================================================

def parse_resolution_plan(data: Any, source: str = "<memory>") -> ResolutionPlan:
    """
    Validate an already-decoded plan document.

    Raises:
        PlanValidationError: Wrong version or schema violations
    """
    if not isinstance(data, dict):
        raise PlanValidationError(
            message="Resolution plan must be a mapping",
            details={"path": source},
        )

    if not check_schema_version(data):
        raise PlanValidationError(
            message=(
                f"Schema version mismatch: plan has {data.get('schema_version')}, "
                f"expected {SCHEMA_VERSION}"
            ),
            details={"path": source},
        )

    try:
        schema = validate_resolution_plan(data)
    except ValidationError as e:
        raise PlanValidationError(
            message=f"Resolution plan validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False), "path": source},
        )
    return _convert_plan(schema)


def load_resolution_plan(path: Optional[Union[str, Path]] = None) -> ResolutionPlan:
    """
    Load the resolution plan from a file.

    A missing path (or a path that does not exist) yields DEFAULT_PLAN.

    Raises:
        PlanLoadError: File exists but cannot be read or decoded
        PlanValidationError: File decoded but is not a valid plan
    """
    if path is None:
        return DEFAULT_PLAN

    path = Path(path)
    if not path.exists():
        logger.info("Resolution plan %s not found, using default plan", path)
        return DEFAULT_PLAN

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise PlanLoadError(
            message=f"Failed to load resolution plan: {e}",
            details={"path": str(path)},
        )

    plan = parse_resolution_plan(data, source=str(path))
    logger.info(
        "Loaded resolution plan: %s",
        " -> ".join(f"{a.provider}({a.timeout_seconds:g}s)" for a in plan.attempts),
    )
    return plan
