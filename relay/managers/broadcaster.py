import asyncio

from pydantic_core import PydanticSerializationError
from starlette.websockets import WebSocket, WebSocketDisconnect

from relay.logging import logger
from relay.managers.connection_registry import (
    ConnectionRegistry,
    describe_client,
    is_connection_open,
)
from relay.schemas.envelope import Envelope
from relay.utils.metrics import (
    ws_broadcast_recipients,
    ws_messages_sent_total,
    ws_send_failures_total,
)


class Broadcaster:
    """
    Fan-out of envelopes to the members of a connection registry.

    Delivery is best-effort: each send is isolated, so one failing
    connection never stops delivery to the others. The broadcaster does not
    remove failed connections itself; the connection's own lifecycle does
    that once the transport reports the close.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        """
        Args:
            registry: Registry whose members receive broadcasts.
        """
        self.registry = registry

    def _serialize(self, envelope: Envelope) -> str | None:
        """
        Renders the envelope as wire text.

        Returns:
            The JSON text, or None if the envelope cannot be serialized.
        """
        try:
            return envelope.to_wire()
        except PydanticSerializationError as e:
            logger.error(
                f"Could not serialize {envelope.type.value} envelope: {e}"
            )
            ws_send_failures_total.inc()
            return None

    async def _send_text(
        self, websocket: WebSocket, text: str, envelope: Envelope
    ) -> bool:
        """
        Sends already-serialized text to a single connection.

        Returns:
            True if the frame was handed to the transport, False on failure.
        """
        try:
            await websocket.send_text(text)
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(
                f"Failed to send {envelope.type.value} envelope to "
                f"{describe_client(websocket)} ({id(websocket)}): {e}"
            )
            ws_send_failures_total.inc()
            return False
        except Exception as e:
            logger.warning(
                f"Unexpected error sending {envelope.type.value} envelope to "
                f"{describe_client(websocket)} ({id(websocket)}): {e}"
            )
            ws_send_failures_total.inc()
            return False

        ws_messages_sent_total.labels(type=envelope.type.value).inc()
        return True

    async def send_direct(
        self, websocket: WebSocket, envelope: Envelope
    ) -> bool:
        """
        Sends an envelope to one connection only.

        Args:
            websocket: Recipient connection.
            envelope: Envelope to deliver.

        Returns:
            True if delivered, False if the send failed.
        """
        text = self._serialize(envelope)
        if text is None:
            return False
        return await self._send_text(websocket, text, envelope)

    async def broadcast(
        self, envelope: Envelope, exclude: WebSocket | None = None
    ) -> int:
        """
        Broadcasts an envelope to every open member except ``exclude``.

        The envelope is serialized once and sent to a snapshot of the
        registry concurrently.

        Args:
            envelope: Envelope to deliver.
            exclude: Connection that must not receive it, usually the sender.

        Returns:
            Number of connections the envelope was delivered to.
        """
        recipients = [
            connection
            for connection in self.registry.snapshot()
            if connection is not exclude and is_connection_open(connection)
        ]
        if not recipients:
            ws_broadcast_recipients.observe(0)
            return 0

        text = self._serialize(envelope)
        if text is None:
            ws_broadcast_recipients.observe(0)
            return 0

        results = await asyncio.gather(
            *[self._send_text(conn, text, envelope) for conn in recipients],
            return_exceptions=True,
        )
        delivered = sum(1 for result in results if result is True)

        ws_broadcast_recipients.observe(delivered)
        logger.debug(
            f"Broadcast {envelope.type.value} envelope to "
            f"{delivered}/{len(recipients)} connection(s)"
        )
        return delivered
