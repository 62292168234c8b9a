"""CoopCredit API application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from coopcredit.api.middleware import RequestIDMiddleware, MetricsMiddleware
from coopcredit.api.v1 import affiliates, applications, evaluations
from coopcredit.infrastructure.observability.logging import setup_logging
from coopcredit.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Build the app: tracing and metrics middleware, health, metrics and /v1 routers"""
    app = FastAPI(
        title="CoopCredit",
        description="Affiliates, credit applications and risk-based approval decisions",
        version="0.1.0",
    )

    # Last added runs first: the request ID is set before metrics are taken
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for router, tag in (
        (affiliates.router, "affiliates"),
        (applications.router, "applications"),
        (evaluations.router, "evaluations"),
    ):
        app.include_router(router, prefix="/v1", tags=[tag])

    return app


app = create_app()
