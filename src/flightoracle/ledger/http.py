"""
HTTP Ledger Client

Talks to the ledger service's REST facade:

    GET  {base}/policies/{policyId}     -> policy record
    POST {base}/claims/decisions        -> {decisionId, reference?}

A 409 on submission means the ledger already holds this decisionId,
which is an acknowledgement, not a failure.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..exceptions import LedgerError, PolicyNotFoundError
from ..models import ClaimDecision, Policy
from .base import LedgerAck

logger = logging.getLogger(__name__)


class HttpLedgerClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.http.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout_seconds,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise LedgerError(
                message=f"Ledger request failed: {type(e).__name__}",
                details={"url": url, "error": str(e)},
            )

    async def get_policy(self, policy_id: str) -> Policy:
        url = f"{self.base_url}/policies/{policy_id}"
        response = await self._request("GET", url)

        if response.status_code == 404:
            raise PolicyNotFoundError(
                message=f"Policy '{policy_id}' not found",
                details={"policy_id": policy_id},
            )
        if response.status_code >= 400:
            raise LedgerError(
                message=f"Ledger returned HTTP {response.status_code}",
                details={"policy_id": policy_id, "status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError:
            raise LedgerError(
                message="Ledger returned a non-JSON policy record",
                details={"policy_id": policy_id},
            )

        record = body.get("policy", body) if isinstance(body, dict) else None
        if not isinstance(record, dict):
            raise LedgerError(
                message="Ledger policy record is not an object",
                details={"policy_id": policy_id},
            )
        try:
            return Policy.from_ledger(record)
        except ValueError as e:
            raise LedgerError(
                message=f"Ledger policy record is invalid: {e}",
                details={"policy_id": policy_id},
            )

    async def submit_claim_decision(self, decision: ClaimDecision) -> LedgerAck:
        decision_id = decision.decision_id
        response = await self._request(
            "POST",
            f"{self.base_url}/claims/decisions",
            json=decision.to_dict(),
        )

        if response.status_code == 409:
            logger.info(
                "Ledger already holds decision %s",
                decision_id[:16],
                extra={"policy_id": decision.policy_id},
            )
            return LedgerAck(decision_id=decision_id, duplicate=True)
        if response.status_code >= 400:
            raise LedgerError(
                message=f"Ledger rejected decision with HTTP {response.status_code}",
                details={
                    "policy_id": decision.policy_id,
                    "status_code": response.status_code,
                },
            )

        reference = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            reference = body.get("reference") or body.get("txHash")
        return LedgerAck(decision_id=decision_id, reference=reference)
