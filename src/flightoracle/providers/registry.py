"""
Provider Registry

Builds provider clients for the providers a resolution plan names. The
position in the plan decides the slot: first attempt is Primary, second
is Secondary.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from ..exceptions import ConfigurationError
from ..models import ProviderSource
from ..plan import ResolutionPlan
from .base import Clock, FlightDataProvider, utc_now
from .flightaware import FlightAwareClient
from .flightstats import FlightStatsClient

if TYPE_CHECKING:
    from ..config import Settings

SLOT_SOURCES = (ProviderSource.PRIMARY, ProviderSource.SECONDARY)


def build_provider(
    name: str,
    source: ProviderSource,
    settings: "Settings",
    http: httpx.AsyncClient,
    clock: Clock = utc_now,
) -> FlightDataProvider:
    """
    Build one provider client.

    Raises:
        ConfigurationError: Unknown provider or missing credentials
    """
    if name == FlightAwareClient.name:
        if not settings.flightaware_api_key:
            raise ConfigurationError(
                message="FO_FLIGHTAWARE_API_KEY is required when flightaware is in the plan",
                details={"provider": name},
            )
        return FlightAwareClient(
            http,
            api_key=settings.flightaware_api_key,
            base_url=settings.flightaware_base_url,
            source=source,
            clock=clock,
        )

    if name == FlightStatsClient.name:
        if not (settings.flightstats_app_id and settings.flightstats_app_key):
            raise ConfigurationError(
                message=(
                    "FO_FLIGHTSTATS_APP_ID and FO_FLIGHTSTATS_APP_KEY are required "
                    "when flightstats is in the plan"
                ),
                details={"provider": name},
            )
        return FlightStatsClient(
            http,
            app_id=settings.flightstats_app_id,
            app_key=settings.flightstats_app_key,
            base_url=settings.flightstats_base_url,
            source=source,
            clock=clock,
        )

    raise ConfigurationError(
        message=f"Unknown provider '{name}'",
        details={"provider": name},
    )


def build_providers(
    plan: ResolutionPlan,
    settings: "Settings",
    http: httpx.AsyncClient,
    clock: Clock = utc_now,
) -> dict[str, FlightDataProvider]:
    """Build every provider the plan names, keyed by provider name."""
    return {
        attempt.provider: build_provider(
            attempt.provider, SLOT_SOURCES[index], settings, http, clock
        )
        for index, attempt in enumerate(plan.attempts)
    }
