"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, routers) so tests can
build fresh instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from admission.api.routes import health_router, limits_router
from admission.core.config import settings
from admission.core.logging import configure_logging
from admission.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Admission Control API",
        description=(
            "In-process admission control: a global token bucket in front of "
            "per-caller token buckets keyed by X-API-Key or client IP."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    app.include_router(limits_router, prefix="/v1")
    app.include_router(health_router)

    return app
