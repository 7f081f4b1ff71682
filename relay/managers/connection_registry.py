import threading

from starlette.websockets import WebSocket, WebSocketState

from relay.logging import logger


def is_connection_open(websocket: WebSocket) -> bool:
    """
    Check whether both sides of the WebSocket are still connected.

    Args:
        websocket: The connection to check.

    Returns:
        True if the connection can still be written to.
    """
    return (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    )


def describe_client(websocket: WebSocket) -> str:
    """Remote address of a connection as ``host:port``, for logs only."""
    client = websocket.client
    if client is None:
        return "unknown"
    return f"{client.host}:{client.port}"


class ConnectionRegistry:
    """
    Registry of currently open WebSocket connections.

    Membership is by object identity with no ordering. Mutations are
    serialized with a lock that is never held across an ``await``, and
    readers iterate over ``snapshot()`` so a connection closing mid-broadcast
    cannot change the collection being iterated.
    """

    def __init__(self) -> None:
        self._connections: dict[int, WebSocket] = {}
        self._lock = threading.Lock()

    def add(self, websocket: WebSocket) -> None:
        """
        Adds a WebSocket connection to the registry.

        Adding the same connection twice keeps a single entry.

        Args:
            websocket: The WebSocket connection to be added.
        """
        with self._lock:
            self._connections[id(websocket)] = websocket
            size = len(self._connections)

        logger.debug(
            f"websocket object ({id(websocket)}) added to registry, "
            f"{size} connection(s) active"
        )

    def remove(self, websocket: WebSocket) -> bool:
        """
        Removes a WebSocket connection from the registry.

        Removing a connection that is not registered is a no-op.

        Args:
            websocket: The WebSocket connection to remove.

        Returns:
            True if the connection was a member, False otherwise.
        """
        with self._lock:
            removed = self._connections.pop(id(websocket), None)
            size = len(self._connections)

        if removed is None:
            return False

        logger.debug(
            f"websocket object ({id(websocket)}) removed from registry, "
            f"{size} connection(s) active"
        )
        return True

    def size(self) -> int:
        """Current number of registered connections."""
        with self._lock:
            return len(self._connections)

    def snapshot(self) -> list[WebSocket]:
        """
        Stable copy of the current members for iteration.

        Returns:
            List of registered connections at the time of the call.
        """
        with self._lock:
            return list(self._connections.values())

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, websocket: object) -> bool:
        with self._lock:
            return self._connections.get(id(websocket)) is websocket
