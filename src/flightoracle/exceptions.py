"""
FlightOracle Exception Hierarchy

Domain-specific exceptions for flight status resolution and claim decisions.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: FO_<CATEGORY>_<SPECIFIC>

Provider errors form a tagged union: every ProviderError carries the
provider source and a ProviderErrorKind, so the resolver can decide on
fallback without inspecting exception types.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .models.enums import ProviderErrorKind, ProviderSource


@dataclass
class FlightOracleError(Exception):
    """
    Base exception for all FlightOracle errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (FO_*)
        details: Additional context about the error
    """
    message: str
    code: str = "FO_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Provider Errors
# =============================================================================

@dataclass
class ProviderError(FlightOracleError):
    """A flight data provider could not produce an observation."""
    code: str = "FO_PROVIDER_ERROR"
    source: Optional[ProviderSource] = None
    kind: ProviderErrorKind = ProviderErrorKind.UNREACHABLE

    def __str__(self) -> str:
        source = self.source.value if self.source else "unknown"
        return f"[{self.code}] {source}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind.value
        if self.source:
            result["source"] = self.source.value
        return result


@dataclass
class ProviderUnreachable(ProviderError):
    """Transport failure or a non-success HTTP status from the provider."""
    code: str = "FO_PROVIDER_UNREACHABLE"
    kind: ProviderErrorKind = ProviderErrorKind.UNREACHABLE


@dataclass
class ProviderTimeout(ProviderError):
    """Provider call exceeded its time budget."""
    code: str = "FO_PROVIDER_TIMEOUT"
    kind: ProviderErrorKind = ProviderErrorKind.TIMEOUT


@dataclass
class ProviderMalformed(ProviderError):
    """Provider response lacks the fields needed to build an observation."""
    code: str = "FO_PROVIDER_MALFORMED"
    kind: ProviderErrorKind = ProviderErrorKind.MALFORMED


@dataclass
class ProviderNotFound(ProviderError):
    """Provider has no record of the flight for the requested date."""
    code: str = "FO_PROVIDER_NOT_FOUND"
    kind: ProviderErrorKind = ProviderErrorKind.NOT_FOUND


# =============================================================================
# Request Errors
# =============================================================================

@dataclass
class InvalidRequestError(FlightOracleError):
    """Inbound job request is missing required fields or is inconsistent."""
    code: str = "FO_INVALID_REQUEST"


# =============================================================================
# Ledger Errors
# =============================================================================

@dataclass
class LedgerError(FlightOracleError):
    """Ledger collaborator could not be reached or rejected the call."""
    code: str = "FO_LEDGER_ERROR"


@dataclass
class PolicyNotFoundError(LedgerError):
    """Ledger has no policy with the requested id."""
    code: str = "FO_POLICY_NOT_FOUND"


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigurationError(FlightOracleError):
    """Service configuration is incomplete or inconsistent."""
    code: str = "FO_CONFIGURATION_ERROR"


@dataclass
class PlanLoadError(ConfigurationError):
    """Failed to read the resolution plan file."""
    code: str = "FO_PLAN_LOAD_ERROR"


@dataclass
class PlanValidationError(ConfigurationError):
    """Resolution plan failed schema validation."""
    code: str = "FO_PLAN_VALIDATION_ERROR"
