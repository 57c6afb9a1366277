import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

# Routers
from .routers.valuation import router as valuation_router

# Core modules
from .core.config import settings
from .core.logging import configure_logging, CorrelationIdMiddleware
from .core.metrics import PromMiddleware, metrics_endpoint
from .exceptions import ConfigurationError, InsufficientDataError

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    """
    App factory so tests and ASGI servers can instantiate cleanly.
    """
    configure_logging()  # JSON logs + request-id filter

    app = FastAPI(
        title="GTA Assignment Valuation API",
        version="1.0.0",
        description="Estimates current assignment value of GTA pre-construction condos from curated PSF data, "
                    "optionally enriched by a web-grounded AI valuation.",
    )

    # CORS: the valuation widget is embedded on third-party sites.
    allow_origins = [o.strip() for o in settings.ALLOW_ORIGINS.split(",")] if settings.ALLOW_ORIGINS else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag","X-Request-Id"],
    )

    # Observability middlewares
    app.add_middleware(CorrelationIdMiddleware)  # Adds/propagates X-Request-Id
    if settings.PROMETHEUS_ENABLED:
        app.add_middleware(PromMiddleware)       # Records req/latency metrics

    # Error mapping: only these two reach the user as explicit failures
    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        logger.error("Configuration error: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(InsufficientDataError)
    async def insufficient_data(request: Request, exc: InsufficientDataError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def invalid_details(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": exc.errors(include_url=False, include_context=False)})

    # Meta routes
    @app.get("/v1/health", tags=["meta"])
    def health():
        return {"status": "ok", "provider": settings.VALUATION_PROVIDER}

    @app.get("/v1/ping", tags=["meta"])
    def ping():
        return {"pong": True}

    if settings.PROMETHEUS_ENABLED:
        # Standard Prometheus scrape endpoint
        app.add_route("/v1/metrics", metrics_endpoint, methods=["GET"])

    # Business routes
    app.include_router(valuation_router, prefix="/v1", tags=["valuation"])

    return app

app = create_app()
