"""In-process ledger, for tests and for running without a ledger service."""
from __future__ import annotations

from typing import Iterable, Optional

from ..exceptions import LedgerError, PolicyNotFoundError
from ..models import ClaimDecision, Policy
from .base import LedgerAck


class InMemoryLedger:
    """
    Dict-backed ledger.

    Submissions are idempotent by decision_id; an Indeterminate decision
    is refused, as a real ledger would refuse to settle on no data.
    """

    def __init__(self, policies: Optional[Iterable[Policy]] = None) -> None:
        self.policies: dict[str, Policy] = {p.id: p for p in policies or ()}
        self.decisions: dict[str, ClaimDecision] = {}

    def add_policy(self, policy: Policy) -> None:
        self.policies[policy.id] = policy

    async def get_policy(self, policy_id: str) -> Policy:
        try:
            return self.policies[policy_id]
        except KeyError:
            raise PolicyNotFoundError(
                message=f"Policy '{policy_id}' not found",
                details={"policy_id": policy_id},
            )

    async def submit_claim_decision(self, decision: ClaimDecision) -> LedgerAck:
        if decision.is_indeterminate:
            raise LedgerError(
                message="Indeterminate decisions cannot be settled",
                details={"policy_id": decision.policy_id},
            )
        decision_id = decision.decision_id
        if decision_id in self.decisions:
            return LedgerAck(decision_id=decision_id, duplicate=True)
        self.decisions[decision_id] = decision
        return LedgerAck(decision_id=decision_id)
