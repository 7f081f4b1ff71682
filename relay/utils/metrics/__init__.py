"""
Prometheus metrics definitions and utilities.

Metrics live in per-subsystem submodules and are re-exported here:

    from relay.utils.metrics import ws_connections_active
"""

from relay.utils.metrics._helpers import _get_or_create_gauge
from relay.utils.metrics.websocket import (
    ws_broadcast_recipients,
    ws_connections_active,
    ws_connections_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_send_failures_total,
)

app_info = _get_or_create_gauge(
    "app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    # WebSocket metrics
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
    "ws_broadcast_recipients",
    # Application metrics
    "app_info",
]
