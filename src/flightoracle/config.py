"""
FlightOracle Configuration

Service settings read from FO_* environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import ConfigurationError
from .providers.flightaware import DEFAULT_BASE_URL as FLIGHTAWARE_BASE_URL
from .providers.flightstats import DEFAULT_BASE_URL as FLIGHTSTATS_BASE_URL

DEFAULT_PLAN_PATH = "config/resolution_plan.yaml"
DEFAULT_MAX_REQUEST_SIZE = 64 * 1024


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _number(env: Mapping[str, str], name: str, default: str, cast):
    raw = env.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(
            message=f"{name} must be a number, got {raw!r}",
            details={"variable": name},
        )


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Provider credentials are optional here; whether a missing credential
    is fatal depends on the resolution plan (see providers.registry).
    """
    flightaware_api_key: Optional[str] = None
    flightaware_base_url: str = FLIGHTAWARE_BASE_URL
    flightstats_app_id: Optional[str] = None
    flightstats_app_key: Optional[str] = None
    flightstats_base_url: str = FLIGHTSTATS_BASE_URL
    ledger_url: Optional[str] = None
    ledger_api_key: Optional[str] = None
    ledger_timeout_seconds: float = 5.0
    resolution_plan_path: str = DEFAULT_PLAN_PATH
    submit_decisions: bool = False
    log_level: str = "INFO"
    docs_enabled: bool = True
    max_request_size: int = DEFAULT_MAX_REQUEST_SIZE

    @property
    def ledger_configured(self) -> bool:
        return bool(self.ledger_url)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment (or an explicit mapping).

        Raises:
            ConfigurationError: A numeric variable does not parse
        """
        env = os.environ if env is None else env
        return cls(
            flightaware_api_key=env.get("FO_FLIGHTAWARE_API_KEY") or None,
            flightaware_base_url=env.get("FO_FLIGHTAWARE_BASE_URL", FLIGHTAWARE_BASE_URL),
            flightstats_app_id=env.get("FO_FLIGHTSTATS_APP_ID") or None,
            flightstats_app_key=env.get("FO_FLIGHTSTATS_APP_KEY") or None,
            flightstats_base_url=env.get("FO_FLIGHTSTATS_BASE_URL", FLIGHTSTATS_BASE_URL),
            ledger_url=env.get("FO_LEDGER_URL") or None,
            ledger_api_key=env.get("FO_LEDGER_API_KEY") or None,
            ledger_timeout_seconds=_number(env, "FO_LEDGER_TIMEOUT_SECONDS", "5", float),
            resolution_plan_path=env.get("FO_RESOLUTION_PLAN", DEFAULT_PLAN_PATH),
            submit_decisions=_flag(env.get("FO_SUBMIT_DECISIONS"), False),
            log_level=env.get("FO_LOG_LEVEL", "INFO").upper(),
            docs_enabled=_flag(env.get("FO_DOCS_ENABLED"), True),
            max_request_size=_number(
                env, "FO_MAX_REQUEST_SIZE", str(DEFAULT_MAX_REQUEST_SIZE), int
            ),
        )
