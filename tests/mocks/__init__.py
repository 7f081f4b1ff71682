"""
Centralized mock objects for testing.

This package provides reusable mock factories for WebSocket connections
and the broadcaster.
"""
