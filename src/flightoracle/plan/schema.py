"""
FlightOracle Resolution Plan Schemas

Pydantic models for validating the resolution plan YAML/JSON file.

The plan is the ordered list of provider attempts the resolver walks:
which provider is Primary, which is the fallback, and the timeout
budget of each call.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check major version compatibility
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"

MAX_ATTEMPTS = 2
MAX_TIMEOUT_SECONDS = 60.0

ProviderNameValue = Literal["flightaware", "flightstats"]


# =============================================================================
# Plan Schemas
# =============================================================================

class ProviderAttemptSchema(BaseModel):
    """One slot in the fallback order."""
    provider: ProviderNameValue = Field(..., description="Provider name")
    timeout_seconds: float = Field(
        8.0,
        gt=0,
        le=MAX_TIMEOUT_SECONDS,
        description="Time budget for this single call",
    )
    fallback_on_not_found: bool = Field(
        True,
        description="Try the next provider when this one has no record",
    )

    model_config = {"extra": "forbid"}


class ResolutionPlanSchema(BaseModel):
    """Complete resolution plan file."""
    schema_version: str = Field(SCHEMA_VERSION, description="Plan schema version")
    attempts: list[ProviderAttemptSchema] = Field(
        ...,
        min_length=1,
        max_length=MAX_ATTEMPTS,
        description="Ordered provider attempts, Primary first",
    )

    @field_validator("attempts")
    @classmethod
    def validate_unique_providers(
        cls, v: list[ProviderAttemptSchema]
    ) -> list[ProviderAttemptSchema]:
        """Each provider is called at most once per resolution."""
        names = [a.provider for a in v]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate provider in attempts: {names}")
        return v

    model_config = {"extra": "forbid"}


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_resolution_plan(data: dict[str, Any]) -> ResolutionPlanSchema:
    """
    Validate a plan dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return ResolutionPlanSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """True when the plan's major version matches SCHEMA_VERSION."""
    plan_version = str(data.get("schema_version", SCHEMA_VERSION))
    return plan_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
