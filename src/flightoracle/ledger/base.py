"""Ledger collaborator interface."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..models import ClaimDecision, Policy


@dataclass(frozen=True)
class LedgerAck:
    """
    Ledger acknowledgement of a submitted decision.

    duplicate is True when the ledger already held this decision_id.
    """
    decision_id: str
    accepted: bool = True
    duplicate: bool = False
    reference: Optional[str] = None


class LedgerClient(Protocol):
    async def get_policy(self, policy_id: str) -> Policy:
        """
        Raises:
            PolicyNotFoundError: No such policy
            LedgerError: Ledger unreachable or returned garbage
        """
        ...

    async def submit_claim_decision(self, decision: ClaimDecision) -> LedgerAck:
        """
        Raises:
            LedgerError: Ledger unreachable or rejected the decision
        """
        ...
