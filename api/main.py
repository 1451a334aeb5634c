"""
FlightOracle FastAPI Service

Oracle bridge between flight data providers and the settlement pipeline.

Endpoints:
    POST /flight-data      - Resolve a flight, report normalized status
    POST /claims/evaluate  - Resolve, evaluate a policy's claim, build the job response
    GET  /health           - Liveness probe (static body)
    GET  /ready            - Readiness probe (plan loaded, providers wired)
    GET  /version          - Version info
"""

import json
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import flightoracle
from flightoracle.config import Settings
from flightoracle.engine import FlightResolver
from flightoracle.exceptions import FlightOracleError
from flightoracle.handler import RequestHandler
from flightoracle.ledger import HttpLedgerClient
from flightoracle.plan import DEFAULT_PLAN, ResolutionPlan, load_resolution_plan
from flightoracle.providers import build_providers

from api.routes import settlement
from api.schemas.responses import HealthResponse, ReadyResponse, VersionResponse

PROJECT_ROOT = Path(__file__).parent.parent

# =============================================================================
# Logging Setup (Structured JSON)
# =============================================================================

LOG_EXTRA_FIELDS = (
    "request_id",
    "job_run_id",
    "source",
    "error_kind",
    "flight_status",
    "outcome",
    "reason_code",
    "policy_id",
    "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Add extra fields if present
        for name in LOG_EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level: str) -> None:
    """Install the JSON handler on the package and API loggers once."""
    for name in ("flightoracle", "api"):
        log = logging.getLogger(name)
        log.setLevel(getattr(logging, level.upper(), logging.INFO))
        if not any(isinstance(h.formatter, JSONFormatter) for h in log.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            log.addHandler(handler)


logger = logging.getLogger("api")


def resolve_plan_path(path: str) -> Path:
    plan_path = Path(path)
    if not plan_path.is_absolute():
        plan_path = PROJECT_ROOT / plan_path
    return plan_path


def build_handler(
    settings: Settings,
    http: httpx.AsyncClient,
) -> tuple[RequestHandler, ResolutionPlan]:
    """
    Wire plan, provider clients and ledger client into a RequestHandler.

    Raises:
        ConfigurationError: Missing credentials or an unusable plan
    """
    plan = load_resolution_plan(resolve_plan_path(settings.resolution_plan_path))
    providers = build_providers(plan, settings, http)
    resolver = FlightResolver.from_plan(plan, providers)

    ledger = None
    if settings.ledger_configured:
        ledger = HttpLedgerClient(
            http,
            base_url=settings.ledger_url,
            api_key=settings.ledger_api_key,
            timeout_seconds=settings.ledger_timeout_seconds,
        )
    handler = RequestHandler(
        resolver,
        ledger=ledger,
        submit_decisions=settings.submit_decisions,
    )
    return handler, plan


# =============================================================================
# App Factory
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    handler: Optional[RequestHandler] = None,
    plan: Optional[ResolutionPlan] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    With no handler, the lifespan loads the plan, builds the provider
    clients and ledger client from settings, and refuses to start on a
    configuration error. Passing a handler skips that wiring.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.handler is not None:
            yield
            return

        async with httpx.AsyncClient() as http:
            try:
                app.state.handler, loaded_plan = build_handler(settings, http)
            except FlightOracleError as e:
                logger.error("Startup failed: %s", e, extra={"error_kind": e.code})
                raise

            app.state.plan = loaded_plan
            logger.info(
                "FlightOracle ready: %s",
                " -> ".join(loaded_plan.provider_names),
            )
            yield
            app.state.handler = None

        logger.info("Shutting down...")

    app = FastAPI(
        title="FlightOracle",
        description="Flight status resolution and claim decision oracle",
        version=flightoracle.__version__,
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.handler = handler
    app.state.plan = plan or (DEFAULT_PLAN if handler is not None else None)

    # =========================================================================
    # Middleware
    # =========================================================================

    @app.middleware("http")
    async def limit_request_size(request: Request, call_next):
        """Limit request body size."""
        if request.method == "POST":
            content_length = request.headers.get("content-length")
            if (
                content_length
                and content_length.isdigit()
                and int(content_length) > settings.max_request_size
            ):
                return JSONResponse(
                    status_code=413,
                    content={
                        "error": "Request too large",
                        "code": "REQUEST_TOO_LARGE",
                        "details": {"max_size": settings.max_request_size},
                        "request_id": getattr(request.state, "request_id", "unknown"),
                    },
                )
        return await call_next(request)

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # Health Endpoints
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Liveness probe - static body, no dependency checks."""
        return HealthResponse(status="ok")

    @app.get("/ready", response_model=ReadyResponse, tags=["Health"])
    async def readiness_check():
        """Readiness probe - plan loaded and request handler wired."""
        current_plan: Optional[ResolutionPlan] = app.state.plan
        checks = {
            "plan_loaded": current_plan is not None,
            "handler_ready": app.state.handler is not None,
        }
        all_ready = all(checks.values())

        response = ReadyResponse(
            status="ready" if all_ready else "not_ready",
            timestamp=datetime.now(timezone.utc).isoformat(),
            checks=checks,
            providers=current_plan.provider_names if current_plan else [],
            worst_case_seconds=current_plan.worst_case_seconds if current_plan else 0.0,
        )
        if not all_ready:
            return JSONResponse(status_code=503, content=response.model_dump())
        return response

    @app.get("/version", response_model=VersionResponse, tags=["Info"])
    async def version_info():
        """Return version information."""
        current_plan: ResolutionPlan = app.state.plan or DEFAULT_PLAN
        return VersionResponse(
            engine_version=flightoracle.__version__,
            plan_schema_version=current_plan.schema_version,
            providers=current_plan.provider_names,
            ledger_configured=settings.ledger_configured,
            submit_decisions=settings.submit_decisions,
        )

    app.include_router(settlement.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
