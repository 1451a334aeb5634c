"""
FlightOracle Enumerations

All enumeration types used throughout the FlightOracle system.
Organized by domain area for clarity.

All enums inherit from (str, Enum) for JSON serialization compatibility.
Values are the wire spellings consumed by the settlement pipeline.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Flight Status
# =============================================================================

class FlightStatus(str, Enum):
    """Normalized, provider-agnostic flight status."""
    SCHEDULED = "Scheduled"
    ACTIVE = "Active"
    LANDED = "Landed"
    CANCELLED = "Cancelled"
    DIVERTED = "Diverted"
    UNKNOWN = "Unknown"

    @property
    def is_disruption(self) -> bool:
        """Cancelled and diverted flights pay out regardless of delay."""
        return self in (FlightStatus.CANCELLED, FlightStatus.DIVERTED)


# =============================================================================
# Provider Source and Failure Kinds
# =============================================================================

class ProviderSource(str, Enum):
    """Position of a provider in the fallback order."""
    PRIMARY = "Primary"
    SECONDARY = "Secondary"


class ProviderErrorKind(str, Enum):
    """
    Tag for provider failures; drives the resolver's fallback decision.

    UNKNOWN_STATUS is never raised by a client. The resolver records it
    when a provider answers but only knows the status as Unknown.
    """
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    UNKNOWN_STATUS = "unknown_status"


# =============================================================================
# Policy Status
# =============================================================================

class PolicyStatus(str, Enum):
    """Lifecycle state of a policy as held by the ledger."""
    ACTIVE = "Active"
    CLAIMED = "Claimed"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: str) -> "PolicyStatus":
        """Parse a ledger status string case-insensitively."""
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown policy status: {value!r}")


# =============================================================================
# Claim Outcome and Reason Codes
# =============================================================================

class ClaimOutcome(str, Enum):
    """
    Result of evaluating a policy against a flight observation.

    INDETERMINATE means "no reliable data"; it is never a rejection.
    """
    ELIGIBLE = "Eligible"
    NOT_ELIGIBLE = "NotEligible"
    INDETERMINATE = "Indeterminate"

    @property
    def is_final(self) -> bool:
        return self is not ClaimOutcome.INDETERMINATE


class ReasonCode(str, Enum):
    """Machine-readable reason attached to every claim decision."""
    POLICY_NOT_ACTIVE = "PolicyNotActive"
    FLIGHT_STATUS_UNAVAILABLE = "FlightStatusUnavailable"
    FLIGHT_DISRUPTED = "FlightDisrupted"
    DELAY_THRESHOLD_MET = "DelayThresholdMet"
    DELAY_THRESHOLD_NOT_MET = "DelayThresholdNotMet"
