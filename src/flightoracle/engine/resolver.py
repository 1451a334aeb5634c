"""
FlightOracle Resolver

Walks an ordered list of provider attempts and yields a single
FlightObservation, or an UnresolvedFlight when no provider produced
usable data.

Policy:
- One call per provider, each bounded by its own timeout
- The first usable observation wins; later providers are not consulted
- Unreachable / Timeout / Malformed / Unknown status fall through to the
  next attempt; NotFound does when the attempt allows it
- Provider errors never escape; they become ProviderFailure records
- No retries and no backoff; a caller wanting a retry sends a new request
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ..exceptions import ConfigurationError, ProviderError
from ..models import (
    FlightIdentifier,
    FlightObservation,
    FlightStatus,
    ProviderErrorKind,
    ProviderFailure,
    Resolution,
    UnresolvedFlight,
)
from ..plan import ResolutionPlan
from ..providers.base import Clock, FlightDataProvider, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderAttempt:
    """A provider client bound to its slot's call budget."""
    provider: FlightDataProvider
    timeout_seconds: float
    fallback_on_not_found: bool = True


@dataclass
class FlightResolver:
    """
    Primary -> fallback flight resolution.

    The resolver holds no per-request state, so one instance can serve
    concurrent requests.

    Usage:
        resolver = FlightResolver.from_plan(plan, providers)
        result = await resolver.resolve(identifier)
        if isinstance(result, UnresolvedFlight):
            ...
    """
    attempts: Sequence[ProviderAttempt]
    clock: Clock = field(default=utc_now)

    @classmethod
    def from_plan(
        cls,
        plan: ResolutionPlan,
        providers: Mapping[str, FlightDataProvider],
        clock: Clock = utc_now,
    ) -> "FlightResolver":
        """
        Bind plan entries to provider clients by name.

        Raises:
            ConfigurationError: If the plan names a provider that was not built
        """
        attempts = []
        for planned in plan.attempts:
            provider = providers.get(planned.provider)
            if provider is None:
                raise ConfigurationError(
                    message=f"No client configured for provider '{planned.provider}'",
                    details={"available": sorted(providers)},
                )
            attempts.append(ProviderAttempt(
                provider=provider,
                timeout_seconds=planned.timeout_seconds,
                fallback_on_not_found=planned.fallback_on_not_found,
            ))
        return cls(attempts=tuple(attempts), clock=clock)

    async def resolve(self, identifier: FlightIdentifier) -> Resolution:
        failures: list[ProviderFailure] = []

        for attempt in self.attempts:
            provider = attempt.provider
            try:
                observation = await asyncio.wait_for(
                    provider.fetch(identifier),
                    timeout=attempt.timeout_seconds,
                )
            except asyncio.TimeoutError:
                failure = ProviderFailure(
                    source=provider.source,
                    provider_name=provider.name,
                    kind=ProviderErrorKind.TIMEOUT,
                    message=f"no response within {attempt.timeout_seconds:g}s",
                )
            except ProviderError as e:
                failure = ProviderFailure(
                    source=provider.source,
                    provider_name=provider.name,
                    kind=e.kind,
                    message=e.message,
                )
            else:
                if observation.status is not FlightStatus.UNKNOWN:
                    if observation.source is not provider.source:
                        observation = dataclasses.replace(observation, source=provider.source)
                    logger.info(
                        "Resolved %s via %s",
                        identifier.lookup_key,
                        provider.name,
                        extra={
                            "source": provider.source.value,
                            "flight_status": observation.status.value,
                        },
                    )
                    return observation
                failure = ProviderFailure(
                    source=provider.source,
                    provider_name=provider.name,
                    kind=ProviderErrorKind.UNKNOWN_STATUS,
                    message="provider reported an unknown flight status",
                )

            failures.append(failure)
            logger.warning(
                "Provider %s failed for %s: %s",
                provider.name,
                identifier.lookup_key,
                failure.message,
                extra={"source": failure.source.value, "error_kind": failure.kind.value},
            )
            if failure.kind is ProviderErrorKind.NOT_FOUND and not attempt.fallback_on_not_found:
                break

        logger.warning(
            "Flight %s unresolved after %d attempt(s)",
            identifier.lookup_key,
            len(failures),
            extra={"error_kind": ",".join(f.kind.value for f in failures)},
        )
        return UnresolvedFlight(
            identifier=identifier,
            failures=tuple(failures),
            resolved_at=self.clock(),
        )
