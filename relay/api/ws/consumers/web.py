from fastapi import APIRouter
from starlette.websockets import WebSocket

from relay.api.ws.websocket import RelayWebSocketEndpoint
from relay.constants import ECHO_PREFIX
from relay.exceptions import InvalidMessageError
from relay.logging import logger
from relay.managers.connection_registry import describe_client
from relay.schemas.envelope import Envelope, parse_inbound
from relay.utils.metrics import ws_messages_received_total

router = APIRouter()


@router.websocket_route("/")
class Web(RelayWebSocketEndpoint):
    """
    Relay consumer mounted at the server root.

    Every valid message is echoed to its sender and broadcast to all other
    connected clients. Malformed messages get an error envelope back and are
    never broadcast.
    """

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        """
        Handles one inbound frame.

        Args:
            websocket: The sending connection.
            data: Raw frame payload as returned by ``decode``.
        """
        try:
            inbound = parse_inbound(data)
        except InvalidMessageError as ex:
            ws_messages_received_total.labels(result="invalid").inc()
            logger.warning(
                f"Error parsing message from {describe_client(websocket)}: "
                f"{ex.reason}"
            )
            await self.broadcaster.send_direct(websocket, Envelope.error(ex.message))
            return

        ws_messages_received_total.labels(result="valid").inc()
        logger.debug(f"Received: {inbound.text!r}")

        await self.broadcaster.send_direct(
            websocket, Envelope.echo(f"{ECHO_PREFIX}{inbound.text}")
        )
        await self.broadcaster.broadcast(
            Envelope.broadcast(inbound.text, total_clients=self.registry.size()),
            exclude=websocket,
        )
