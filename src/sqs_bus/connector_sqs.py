"""Messaging connector backed by Amazon SQS (queues) and SNS (topics).

Uses boto3 clients for both services. Queues are pulled with a polling
receive loop; topics are publish-only.
"""

import logging
import time
import uuid

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from sqs_bus.codec import deserialize_message, serialize_message
from sqs_bus.connection import RunningFlag
from sqs_bus.connector_base import ConnectorBase
from sqs_bus.errors import (
    InternalError,
    InvalidArgumentError,
    InvalidStateError,
    SerializationError,
    classify_aws_error,
)
from sqs_bus.message_model_dto import (
    BusProperty,
    InvalidMessageDTO,
    MessageDTO,
    QueueDestination,
    TopicDestination,
)
from sqs_bus.resolver import DestinationResolver

DEFAULT_RECEIVE_CHECK_INTERVAL_MS = 1000


class SQSConnector(ConnectorBase):
    """Connector implementation using SQS for queues and SNS for topics.

    Holds only the two boto3 clients and the poll interval, so one instance
    can be shared by every session and destination. Clients may be injected
    (e.g. for tests or a local endpoint); otherwise they are built from the
    given credentials.
    """

    def __init__(
        self,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        receive_check_interval_ms: int | None = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        receive_wait_seconds: int | None = None,
        sqs_client: BaseClient | None = None,
        sns_client: BaseClient | None = None,
    ) -> None:
        """Build the SQS and SNS clients and configure the receive poll interval."""
        self.logger = logging.getLogger(__name__)
        if receive_check_interval_ms is None:
            receive_check_interval_ms = DEFAULT_RECEIVE_CHECK_INTERVAL_MS
        else:
            self.logger.warning(
                "Reducing the receive check interval will increase your AWS costs. "
                "Amazon charges each time a check is made: http://aws.amazon.com/sqs/pricing/"
            )
        self.receive_check_interval_ms = receive_check_interval_ms
        self.receive_wait_seconds = receive_wait_seconds

        client_kwargs = {
            "aws_access_key_id": aws_access_key_id,
            "aws_secret_access_key": aws_secret_access_key,
            "region_name": region_name,
            "endpoint_url": endpoint_url,
        }
        self.sqs = sqs_client or boto3.client("sqs", **client_kwargs)
        self.sns = sns_client or boto3.client("sns", **client_kwargs)
        self.resolver = DestinationResolver(self.sqs, self.sns)

    def send_message(self, destination: QueueDestination | TopicDestination, message: MessageDTO) -> None:
        """Send the message to a queue (SQS) or topic (SNS).

        Stamps the timestamp and message ID on the message unless the caller
        disabled them. A disabled ID is recorded as a message property so the
        receiver does not assign one either.
        """
        if destination is None:
            raise InvalidArgumentError("Destination is null")

        if message.disable_message_id:
            message.set_property(BusProperty.DISABLE_MESSAGE_ID, True)
        if not message.disable_timestamp:
            message.timestamp = int(time.time() * 1000)

        match destination:
            case QueueDestination():
                queue_url = self.resolver.resolve_queue(destination)
                serialized_message = serialize_message(message)
                sqs_message_id = self._send_sqs_message(queue_url, serialized_message)
                if not message.disable_message_id:
                    message.message_id = f"ID:{sqs_message_id}"
                self.logger.info("Sent message to SQS %s", sqs_message_id)
            case TopicDestination():
                arn = self.resolver.resolve_topic(destination)
                if not message.disable_message_id:
                    # SNS publish does not hand back an ID we can reuse on the receiving side.
                    message.message_id = f"ID:{uuid.uuid4()}"
                serialized_message = serialize_message(message)
                self._send_sns_message(arn, serialized_message)
                self.logger.info("Published message %s to SNS %s", message.message_id, arn)
            case _:
                raise InternalError(f"Invalid destination: {type(destination).__name__}")

    def send_messages(self, destination: QueueDestination | TopicDestination, messages: list[MessageDTO]) -> None:
        """Send each message individually, in order."""
        for message in messages:
            self.send_message(destination, message)

    def receive_message(
        self, connection: RunningFlag, destination: QueueDestination, timeout_ms: int
    ) -> MessageDTO | None:
        """Poll the queue until a message arrives or timeout_ms elapses.

        The connection's running flag is read before each SQS call and again
        right after it returns. While the connection is stopped no call is
        made. A negative timeout_ms waits forever.
        """
        start_time = time.monotonic()
        queue_url = self.resolver.resolve_queue(destination)
        sqs_message = self._receive_sqs_message(connection, destination, queue_url, timeout_ms, start_time)
        if sqs_message is None:
            return None
        self.logger.info("Received message %s", sqs_message["MessageId"])
        return self._convert_sqs_message(sqs_message, destination)

    def delete_message(self, message: MessageDTO) -> None:
        """Delete a received message from its queue using its receipt handle."""
        receipt_handle = self._get_receipt_handle(message, "deleted")
        queue_url = self.resolver.resolve_queue(self._get_queue(message))
        try:
            self.sqs.delete_message(QueueUrl=queue_url, ReceiptHandle=receipt_handle)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(
                f"Unable to delete message ({message.message_id}) with receipt handle {receipt_handle}", e
            ) from e

    def reset_message(self, message: MessageDTO) -> None:
        """Set the message's visibility timeout to zero so any consumer can receive it again."""
        receipt_handle = self._get_receipt_handle(message, "reset")
        queue_url = self.resolver.resolve_queue(self._get_queue(message))
        try:
            self._reset_visibility(queue_url, receipt_handle)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(
                f"Unable to reset message visibility to zero ({message.message_id}) "
                f"with receipt handle {receipt_handle}",
                e,
            ) from e

    def test(self) -> None:
        """Make a trivial list-queues call to check connectivity and credentials."""
        try:
            self.sqs.list_queues()
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error("Connection test failed", e) from e

    def create_queue(self, queue_name: str) -> QueueDestination:
        """Create (or look up) a queue by name."""
        queue = QueueDestination(name=queue_name)
        self.resolver.resolve_queue(queue)
        return queue

    def delete_queue(self, queue: QueueDestination) -> None:
        """Delete the queue; a queue that no longer exists is an OperationError."""
        self.resolver.delete_queue(queue)

    def list_queues(self, prefix: str | None = None) -> list[QueueDestination]:
        """List queues, optionally restricted to names starting with prefix."""
        return self.resolver.list_queues(prefix)

    def _receive_sqs_message(
        self,
        connection: RunningFlag,
        destination: QueueDestination,
        queue_url: str,
        timeout_ms: int,
        start_time: float,
    ) -> dict | None:
        """Poll / evaluate / wait loop; returns the raw SQS message or None on timeout."""
        while True:
            # poll
            sqs_message = None
            if connection.is_running():
                sqs_message = self._poll_once(destination, queue_url)
                if sqs_message is not None and not connection.is_running():
                    # Connection was stopped while the SQS call was in flight.
                    self._release(queue_url, sqs_message)
                    sqs_message = None
            else:
                self.logger.debug("Not accepting messages. Connection is paused or not started.")

            # evaluate
            if sqs_message is not None:
                return sqs_message
            elapsed_ms = (time.monotonic() - start_time) * 1000
            if timeout_ms > -1 and elapsed_ms >= timeout_ms:
                return None

            # wait
            time.sleep(self.receive_check_interval_ms / 1000)

    def _poll_once(self, destination: QueueDestination, queue_url: str) -> dict | None:
        params = {
            "QueueUrl": queue_url,
            "MaxNumberOfMessages": 1,
        }
        if self.receive_wait_seconds is not None:
            params["WaitTimeSeconds"] = self.receive_wait_seconds
        try:
            response = self.sqs.receive_message(**params)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to receive message from '{destination}'", e) from e
        messages = response.get("Messages", [])
        return messages[0] if messages else None

    def _release(self, queue_url: str, sqs_message: dict) -> None:
        """Make a message we will not hand out immediately visible again."""
        try:
            self._reset_visibility(queue_url, sqs_message["ReceiptHandle"])
        except (ClientError, BotoCoreError) as e:
            # Non-fatal: the message stays hidden until its visibility timeout expires.
            self.logger.warning("Unable to reset visibility timeout for message: %s", e, exc_info=e)

    def _reset_visibility(self, queue_url: str, receipt_handle: str) -> None:
        self.sqs.change_message_visibility(
            QueueUrl=queue_url,
            ReceiptHandle=receipt_handle,
            VisibilityTimeout=0,
        )

    def _convert_sqs_message(self, sqs_message: dict, destination: QueueDestination) -> MessageDTO:
        """Turn a raw SQS message into a MessageDTO carrying the ID and receipt handle."""
        try:
            message = deserialize_message(sqs_message["Body"])
        except SerializationError as e:
            message = InvalidMessageDTO.from_error(e)

        if not message.is_message_id_disabled:
            message.message_id = f"ID:{sqs_message['MessageId']}"
        message.set_property(BusProperty.SQS_RECEIPT_HANDLE, sqs_message["ReceiptHandle"])
        # The receipt handle is only valid against the queue it came from.
        message.destination = destination
        return message

    def _send_sqs_message(self, queue_url: str, serialized_message: str) -> str:
        try:
            response = self.sqs.send_message(QueueUrl=queue_url, MessageBody=serialized_message)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to send message to queue {queue_url}", e) from e
        return response["MessageId"]

    def _send_sns_message(self, arn: str, serialized_message: str) -> None:
        try:
            self.sns.publish(TopicArn=arn, Message=serialized_message)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to send message to topic: {arn}", e) from e

    @staticmethod
    def _get_receipt_handle(message: MessageDTO, action: str) -> str:
        receipt_handle = message.receipt_handle
        if receipt_handle is None:
            raise InvalidStateError(
                f"Message does not contain an SQSReceiptHandle, so cannot be {action}. "
                "Did this come from an SQS queue?"
            )
        return receipt_handle

    @staticmethod
    def _get_queue(message: MessageDTO) -> QueueDestination:
        match message.destination:
            case QueueDestination():
                return message.destination
            case None:
                raise InvalidArgumentError("Message has no destination")
            case _:
                raise InternalError(f"Message destination is not a queue: {message.destination}")
