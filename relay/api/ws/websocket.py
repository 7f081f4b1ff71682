import uuid
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket, WebSocketDisconnect

from relay.constants import JOIN_MESSAGE, LEAVE_MESSAGE, WELCOME_MESSAGE
from relay.logging import clear_log_context, logger, set_log_context
from relay.managers.broadcaster import Broadcaster
from relay.managers.connection_registry import (
    ConnectionRegistry,
    describe_client,
)
from relay.middlewares.correlation_id import (
    CORRELATION_ID_HEADER,
    correlation_id,
    new_correlation_id,
)
from relay.schemas.envelope import Envelope
from relay.utils.metrics import ws_connections_active, ws_connections_total


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint that manages the relay connection lifecycle.

    On connect the client is registered, welcomed and announced to the other
    members. On disconnect (client close or transport error) it is removed
    and its departure is announced. Subclasses implement ``on_receive``.

    The registry and broadcaster are owned by the application and read from
    ``app.state``, so every app instance has its own set of members.
    """

    encoding = None  # Accept both text and binary frames

    @property
    def registry(self) -> ConnectionRegistry:
        return self.scope["app"].state.registry

    @property
    def broadcaster(self) -> Broadcaster:
        return self.scope["app"].state.broadcaster

    async def dispatch(self) -> None:
        """
        Runs the connection lifecycle until the client goes away.

        ``on_connect`` runs inside the guarded block so a client that drops
        during the welcome exchange is still cleaned up by ``on_disconnect``.
        Unexpected errors are logged and re-raised to the ASGI server, which
        closes only this connection.
        """
        websocket = WebSocket(self.scope, receive=self.receive, send=self.send)
        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            await self.on_connect(websocket)

            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except WebSocketDisconnect as exc:
            close_code = exc.code
        except Exception as exc:
            close_code = status.WS_1011_INTERNAL_ERROR
            logger.exception(
                f"Unexpected error on connection from "
                f"{describe_client(websocket)}: {exc}"
            )
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Returns the raw frame payload.

        Text frames are returned as ``str`` and binary frames as ``bytes``.
        Parsing and validation happen in ``on_receive`` so a malformed frame
        can be answered with an error envelope instead of closing the socket.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accepts and registers the connection, then greets it and announces it.

        Steps:
        1. Accept the upgrade
        2. Bind a correlation ID and the client address to the log context
        3. Add the connection to the registry
        4. Send a welcome envelope to the new client
        5. Announce the join to every other member
        """
        await websocket.accept()

        self.connection_id = str(uuid.uuid4())
        self.correlation_id = new_correlation_id(
            websocket.headers.get(CORRELATION_ID_HEADER.lower())
            or self.connection_id
        )
        correlation_id.set(self.correlation_id)
        set_log_context(
            client=describe_client(websocket),
            connection_id=self.connection_id,
        )

        self.registry.add(websocket)
        ws_connections_total.inc()
        ws_connections_active.inc()
        logger.info(f"New client connected from {describe_client(websocket)}")

        await self.broadcaster.send_direct(
            websocket,
            Envelope.system(WELCOME_MESSAGE, total_clients=self.registry.size()),
        )
        await self.broadcaster.broadcast(
            Envelope.system(JOIN_MESSAGE, total_clients=self.registry.size()),
            exclude=websocket,
        )

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Removes the connection and tells the remaining members.

        Nothing is sent to the departing connection. The departure is only
        announced if the connection was actually registered.
        """
        if self.registry.remove(websocket):
            ws_connections_active.dec()
            logger.info(
                f"Client disconnected from {describe_client(websocket)} "
                f"with code {close_code}"
            )
            await self.broadcaster.broadcast(
                Envelope.system(
                    LEAVE_MESSAGE, total_clients=self.registry.size()
                )
            )

        clear_log_context()
