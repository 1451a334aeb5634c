"""Request schemas for the API."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from flightoracle.exceptions import InvalidRequestError
from flightoracle.models import FlightIdentifier, Policy, PolicyStatus


class InlinePolicy(BaseModel):
    """Policy supplied in the request when no ledger is configured."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    airline: str
    flight_number: str = Field(..., alias="flightNumber")
    date: Optional[str] = Field(default=None, description="Scheduled departure date (YYYY-MM-DD)")
    coverage_amount: str = Field(..., alias="coverageAmount")
    premium_amount: str = Field(default="0", alias="premiumAmount")
    delay_threshold_minutes: int = Field(..., alias="delayThresholdMinutes", ge=0)
    status: str = Field(default="Active")

    @field_validator("coverage_amount", "premium_amount", mode="before")
    @classmethod
    def _amount_as_text(cls, value: Any) -> Any:
        # Keep the printed form so 1.0 stays Decimal("1.0")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_policy(self) -> Policy:
        try:
            return Policy.from_ledger({
                "id": self.id,
                "airline": self.airline,
                "flightNumber": self.flight_number,
                "departureDate": self.date,
                "coverageAmount": self.coverage_amount,
                "premiumAmount": self.premium_amount,
                "delayThresholdMinutes": self.delay_threshold_minutes,
                "status": PolicyStatus.parse(self.status).value,
            })
        except ValueError as e:
            raise InvalidRequestError(message=f"Invalid inline policy: {e}")


class JobRequest(BaseModel):
    """
    Job request from the settlement pipeline.

    Identifying fields may sit at the top level or inside a nested
    ``data`` object (the job-run envelope); top-level values win.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "examples": [
                {
                    "id": "job-7f3a",
                    "data": {"flightNumber": "UA100", "airline": "UA", "date": "2024-06-15"},
                },
                {"id": "job-7f3b", "policyId": "POL-001"},
            ]
        },
    )

    id: str = Field(..., description="Job run id, echoed back as jobRunID")
    flight_number: Optional[str] = Field(default=None, alias="flightNumber")
    airline: Optional[str] = None
    date: Optional[str] = Field(default=None, description="Scheduled departure date (YYYY-MM-DD)")
    policy_id: Optional[str] = Field(default=None, alias="policyId")
    policy: Optional[InlinePolicy] = None

    @model_validator(mode="before")
    @classmethod
    def _merge_envelope(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        nested = values.get("data")
        if not isinstance(nested, dict):
            return values
        merged = dict(nested)
        merged.update({k: v for k, v in values.items() if k != "data" and v is not None})
        return merged

    @field_validator("id", "flight_number", "airline", "policy_id", "date", mode="before")
    @classmethod
    def _scalar_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def has_flight(self) -> bool:
        return bool(self.flight_number and self.airline)

    def flight_identifier(self) -> FlightIdentifier:
        """
        Normalized identifier for the requested flight.

        Raises:
            InvalidRequestError: Missing or unparseable flight fields
        """
        if not self.has_flight:
            raise InvalidRequestError(
                message="flightNumber and airline are required",
                details={"missing": [
                    name for name, value in
                    (("flightNumber", self.flight_number), ("airline", self.airline))
                    if not value
                ]},
            )
        try:
            return FlightIdentifier.normalize(self.airline, self.flight_number, self.date)
        except ValueError as e:
            raise InvalidRequestError(message=str(e))
