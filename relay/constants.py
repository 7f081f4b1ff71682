"""
Application-level constants for the relay protocol.

These values define what clients see on the wire and must not be changed
via environment variables. For configurable values see relay/settings.py.
"""

# ============================================================================
# System envelope texts
# ============================================================================

WELCOME_MESSAGE = "Welcome to the WebSocket server!"
JOIN_MESSAGE = "A new user has joined the chat"
LEAVE_MESSAGE = "A user has left the chat"
INVALID_MESSAGE = "Invalid message format"

# Prefix of the echo envelope sent back to the sender
ECHO_PREFIX = "Echo: "


# ============================================================================
# Static files
# ============================================================================

# Request path -> (file name, media type)
STATIC_FILES: dict[str, tuple[str, str]] = {
    "/": ("index.html", "text/html"),
    "/index.html": ("index.html", "text/html"),
    "/client.js": ("client.js", "application/javascript"),
    "/style.css": ("style.css", "text/css"),
}

NOT_FOUND_BODY = "Not found"


# ============================================================================
# Logging
# ============================================================================

# Max size for a single structured log line
MAX_LOG_SIZE_BYTES = 250_000
