"""Response schemas for the API."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class JobResponse(BaseModel):
    """
    Job-run response consumed by the settlement pipeline.

    status is absent on success, "indeterminate" when no provider had
    usable data, and "errored" for invalid requests and internal faults.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    jobRunID: Optional[str] = None
    status: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    error: Optional[Any] = None
    errorCode: Optional[str] = None
    statusCode: int


class HealthResponse(BaseModel):
    """Liveness probe response."""
    status: str


class ReadyResponse(BaseModel):
    """Readiness probe response."""
    status: str
    timestamp: str
    checks: dict[str, bool]
    providers: list[str]
    worst_case_seconds: float


class VersionResponse(BaseModel):
    """Version info response."""
    engine_version: str
    plan_schema_version: str
    providers: list[str]
    ledger_configured: bool
    submit_decisions: bool
