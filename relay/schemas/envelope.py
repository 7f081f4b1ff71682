import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from relay.constants import INVALID_MESSAGE
from relay.exceptions import InvalidMessageError


def utc_timestamp() -> str:
    """
    Current UTC time as an ISO-8601 string with millisecond precision.

    Example:
        >>> utc_timestamp()
        '2024-05-01T12:30:45.123Z'
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MessageType(str, Enum):
    """Kinds of envelopes the server sends to clients."""

    SYSTEM = "system"
    ECHO = "echo"
    BROADCAST = "broadcast"
    ERROR = "error"


class Envelope(BaseModel):  # type: ignore[misc]
    """
    Server to client message unit, one per WebSocket text frame.

    ``total_clients`` goes over the wire as ``totalClients`` and is left out
    entirely when not set (echo and error envelopes).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: MessageType
    message: str
    timestamp: str = Field(default_factory=utc_timestamp)
    total_clients: int | None = Field(
        default=None, alias="totalClients", ge=0
    )

    def to_wire(self) -> str:
        """Serialize to the JSON text sent over the connection."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def system(cls, message: str, total_clients: int) -> "Envelope":
        return cls(
            type=MessageType.SYSTEM,
            message=message,
            total_clients=total_clients,
        )

    @classmethod
    def echo(cls, message: str) -> "Envelope":
        return cls(type=MessageType.ECHO, message=message)

    @classmethod
    def broadcast(cls, message: str, total_clients: int) -> "Envelope":
        return cls(
            type=MessageType.BROADCAST,
            message=message,
            total_clients=total_clients,
        )

    @classmethod
    def error(cls, message: str = INVALID_MESSAGE) -> "Envelope":
        return cls(type=MessageType.ERROR, message=message)


class InboundMessage(BaseModel):  # type: ignore[misc]
    """Client to server message: ``{"text": str, "timestamp": str}``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    text: str = Field(strict=True)
    timestamp: str | None = None

    @field_validator("text", "timestamp")
    @classmethod
    def must_encode_as_utf8(cls, value: str | None) -> str | None:
        # JSON escapes can produce lone surrogates, which cannot be sent back
        if value is not None:
            try:
                value.encode("utf-8")
            except UnicodeEncodeError as ex:
                raise ValueError("value is not valid Unicode") from ex
        return value


def parse_inbound(raw: str | bytes) -> InboundMessage:
    """
    Parse and validate one inbound frame.

    Args:
        raw: Frame payload, text or UTF-8 bytes.

    Returns:
        The validated inbound message.

    Raises:
        InvalidMessageError: If the payload is not valid UTF-8, not JSON (or
            nested too deeply to decode), not a JSON object, or does not
            match the inbound schema.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise InvalidMessageError(
                INVALID_MESSAGE, reason=f"undecodable bytes: {ex}"
            ) from ex

    try:
        data: Any = json.loads(raw)
    except (ValueError, RecursionError) as ex:
        raise InvalidMessageError(
            INVALID_MESSAGE, reason=f"invalid JSON: {ex}"
        ) from ex

    if not isinstance(data, dict):
        raise InvalidMessageError(
            INVALID_MESSAGE,
            reason=f"expected JSON object, got {type(data).__name__}",
        )

    try:
        return InboundMessage.model_validate(data)
    except ValidationError as ex:
        raise InvalidMessageError(
            INVALID_MESSAGE,
            reason=f"schema mismatch: {ex.errors(include_input=False)}",
        ) from ex
