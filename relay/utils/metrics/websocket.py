"""
Prometheus metrics for WebSocket connection monitoring.

This module defines metrics for tracking relay connections, message rates,
send failures and broadcast fan-out size.
"""

from relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total", "Total accepted WebSocket connections"
)

ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total",
    "Total WebSocket messages received",
    ["result"],  # valid, invalid
)

ws_messages_sent_total = _get_or_create_counter(
    "ws_messages_sent_total",
    "Total WebSocket envelopes delivered",
    ["type"],  # system, echo, broadcast, error
)

ws_send_failures_total = _get_or_create_counter(
    "ws_send_failures_total", "Total failed sends to WebSocket connections"
)

ws_broadcast_recipients = _get_or_create_histogram(
    "ws_broadcast_recipients",
    "Number of connections reached by a single broadcast",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100, 250, 1000),
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_send_failures_total",
    "ws_broadcast_recipients",
]
