"""Envelope codec: MessageDTO <-> SQS/SNS message body.

The body on the wire is the JSON form of the MessageDTO, including its
``kind`` tag so a foreign payload is recognised as such.
"""

import json
import logging

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from sqs_bus.errors import SerializationError
from sqs_bus.message_model_dto import MessageDTO

logger = logging.getLogger(__name__)


def serialize_message(message: MessageDTO) -> str:
    """Encode the message as a string suitable for an SQS body or SNS message.

    Raises:
        SerializationError: the message cannot be encoded, or would not decode
            back to an equal message (e.g. bytes, tuples or non-finite floats
            put into the body or property bag after construction).
    """
    try:
        serialized_message = message.model_dump_json()
        decoded = type(message).model_validate_json(serialized_message)
        if decoded.model_dump() != message.model_dump():
            raise ValueError("message does not survive a JSON round trip")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        error = SerializationError(f"Unable to serialize message of type {type(message).__name__}", str(e))
        logger.error(error.message, exc_info=e)
        raise error from e
    return serialized_message


def deserialize_message(serialized_message: str) -> MessageDTO:
    """Decode a body produced by serialize_message.

    Raises:
        SerializationError: the body is not JSON, decodes to null, or is not a message.
    """
    try:
        decoded = json.loads(serialized_message)
    except (ValueError, TypeError, RecursionError) as e:
        # ValueError covers JSONDecodeError and over-long integer literals.
        error = SerializationError("Unable to deserialize message", str(e))
        logger.error(error.message, exc_info=e)
        raise error from e

    if decoded is None:
        raise SerializationError("Deserialized object is null")
    if not isinstance(decoded, dict) or decoded.get("kind") != "message":
        raise SerializationError(f"Expected object of type MessageDTO, got: {type(decoded).__name__}")

    try:
        return MessageDTO.model_validate(decoded)
    except (ValidationError, RecursionError) as e:
        raise SerializationError("Expected object of type MessageDTO, got an invalid message", str(e)) from e
