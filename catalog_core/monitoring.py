"""Métricas Prometheus y endpoints de salud compartidos por ambas variantes."""

import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger(__name__)

# Se registran una sola vez por proceso; el servicio va como etiqueta
REQUEST_COUNT = Counter(
    "catalog_requests_total",
    "Total requests processed by the catalog API",
    ["service", "method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "catalog_request_latency_seconds",
    "Request latency in seconds for the catalog API",
    ["service", "endpoint"]
)


def _endpoint_label(request: Request) -> str:
    # Plantilla de la ruta (/games/{game_id}) para no crear una serie por id
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def register_monitoring(app: FastAPI, service: str, ping_database: Optional[Callable[[], bool]] = None) -> None:
    """Instala el middleware de métricas y los endpoints /metrics y /health."""

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        response = None
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as exc:
            logger.error(f"Unhandled exception during request processing: {exc}", exc_info=True)
            response = JSONResponse({"error": "Error interno del servidor"}, status_code=500)
        finally:
            latency = time.time() - start_time
            endpoint = _endpoint_label(request)
            REQUEST_LATENCY.labels(service=service, endpoint=endpoint).observe(latency)
            REQUEST_COUNT.labels(
                service=service,
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
        return response

    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        """Exposes application metrics for Prometheus."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health", tags=["Monitoring"])
    def health_check():
        """Estado del servicio y de su base de datos."""
        database = "unknown"
        if ping_database is not None:
            database = "ok" if ping_database() else "unavailable"
        return {"status": "ok", "service": service, "database": database}
