"""Message and destination data transfer objects.

Destinations are a closed set of pydantic models tagged by ``kind``: a queue
(SQS, resolved to a queue URL) or a topic (SNS, resolved to a topic ARN).
Messages carry an opaque body, delivery metadata and a property bag.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator

from sqs_bus.errors import InternalError, SerializationError


class BusProperty(str, Enum):
    """Well-known keys in a message's property bag."""

    DISABLE_MESSAGE_ID = "DisableMessageID"
    SQS_RECEIPT_HANDLE = "SQSReceiptHandle"


class QueueDestination(BaseModel):
    """A point-to-point destination backed by an SQS queue."""

    kind: Literal["queue"] = "queue"
    name: str | None = Field(None, description="Logical queue name")
    queue_url: str | None = Field(None, description="SQS queue URL, once resolved")

    @model_validator(mode="after")
    def _name_from_url(self) -> "QueueDestination":
        if self.name is None:
            if self.queue_url is None:
                raise ValueError("A queue needs a name or a queue_url")
            self.name = self.queue_url.rstrip("/").rsplit("/", 1)[-1]
        return self

    @property
    def handle(self) -> str | None:
        return self.queue_url

    def bind_handle(self, queue_url: str) -> None:
        """Cache the resolved queue URL; a resolved URL never changes."""
        if self.queue_url is not None and self.queue_url != queue_url:
            raise InternalError(f"Queue {self.name} already bound to {self.queue_url}", f"refusing {queue_url}")
        self.queue_url = queue_url

    def __str__(self) -> str:
        return f"Queue[{self.name}]"


class TopicDestination(BaseModel):
    """A fan-out destination backed by an SNS topic."""

    kind: Literal["topic"] = "topic"
    name: str = Field(..., description="Logical topic name")
    arn: str | None = Field(None, description="SNS topic ARN, once resolved")

    @property
    def handle(self) -> str | None:
        return self.arn

    def bind_handle(self, arn: str) -> None:
        """Cache the resolved topic ARN; a resolved ARN never changes."""
        if self.arn is not None and self.arn != arn:
            raise InternalError(f"Topic {self.name} already bound to {self.arn}", f"refusing {arn}")
        self.arn = arn

    def __str__(self) -> str:
        return f"Topic[{self.name}]"


Destination = Annotated[Union[QueueDestination, TopicDestination], Field(discriminator="kind")]


def _property_key(key: BusProperty | str) -> str:
    return key.value if isinstance(key, BusProperty) else key


class MessageDTO(BaseModel):
    """A message as exchanged with callers.

    The body and property values are JSON values (finite numbers only), so
    every valid message survives the codec unchanged. Delivery metadata (message_id,
    timestamp) is filled in by the connector on send and receive.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    kind: Literal["message"] = "message"
    body: JsonValue = Field(None, description="Application payload (JSON value)")
    properties: dict[str, JsonValue] = Field(default_factory=dict, description="Property bag")
    message_id: str | None = Field(None, description="Provider-derived ID, prefixed with 'ID:'")
    timestamp: int | None = Field(None, description="Send time in epoch milliseconds")
    disable_message_id: bool = Field(False, description="Caller does not want an ID generated")
    disable_timestamp: bool = Field(False, description="Caller does not want a timestamp")
    correlation_id: str | None = Field(None, description="Correlation identifier")
    message_type: str | None = Field(None, description="Application-defined message type")
    destination: Destination | None = Field(None, description="Where the message was sent or received from")

    def get_property(self, key: BusProperty | str, default: Any = None) -> Any:
        return self.properties.get(_property_key(key), default)

    def set_property(self, key: BusProperty | str, value: Any) -> None:
        self.properties[_property_key(key)] = value

    def has_property(self, key: BusProperty | str) -> bool:
        return _property_key(key) in self.properties

    @property
    def receipt_handle(self) -> str | None:
        """SQS receipt handle; only present on messages obtained from a queue."""
        return self.get_property(BusProperty.SQS_RECEIPT_HANDLE)

    @property
    def is_message_id_disabled(self) -> bool:
        return bool(self.get_property(BusProperty.DISABLE_MESSAGE_ID, False))


class InvalidMessageDTO(MessageDTO):
    """Stand-in for a received message whose body could not be deserialized.

    Still carries the provider ID and receipt handle so it can be deleted.
    The triggering SerializationError is kept as error_context and
    error_detail; ``cause`` rebuilds it.
    """

    kind: Literal["invalid"] = "invalid"
    error: str = Field(..., description="Why deserialization failed")
    error_context: str | None = Field(None, description="Operation that failed")
    error_detail: str | None = Field(None, description="Decoder's own message")

    @classmethod
    def from_error(cls, error: SerializationError) -> "InvalidMessageDTO":
        return cls(error=error.message, error_context=error.context, error_detail=error.detail)

    @property
    def cause(self) -> SerializationError:
        return SerializationError(self.error_context or self.error, self.error_detail)
