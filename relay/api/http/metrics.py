"""Prometheus scrape endpoint for the relay's connection and message metrics."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
def scrape_metrics() -> Response:
    """
    Render the default Prometheus registry in text exposition format.

    Example:
        ```
        # HELP ws_connections_active Number of active WebSocket connections
        # TYPE ws_connections_active gauge
        ws_connections_active 3.0
        ```
    """
    return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
