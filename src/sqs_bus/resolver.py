"""Resolve logical destinations to SQS queue URLs and SNS topic ARNs.

Both create_queue and create_topic are create-or-get on AWS, so resolving an
unknown name creates the resource. The resolved handle is cached on the
destination so repeated operations skip the lookup.
"""

import logging

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from sqs_bus.errors import InternalError, InvalidArgumentError, classify_aws_error
from sqs_bus.message_model_dto import QueueDestination, TopicDestination


class DestinationResolver:
    """Looks up, creates, lists and deletes provider-side destinations."""

    def __init__(self, sqs: BaseClient, sns: BaseClient) -> None:
        self.sqs = sqs
        self.sns = sns
        self.logger = logging.getLogger(__name__)

    def resolve(self, destination: QueueDestination | TopicDestination | None) -> str:
        """Return the queue URL or topic ARN for the destination."""
        match destination:
            case None:
                raise InvalidArgumentError("Destination is null")
            case QueueDestination():
                return self.resolve_queue(destination)
            case TopicDestination():
                return self.resolve_topic(destination)
            case _:
                raise InternalError(f"Invalid destination: {type(destination).__name__}")

    def resolve_queue(self, queue: QueueDestination | None) -> str:
        """Return the queue URL, creating the queue on first use."""
        if queue is None:
            raise InvalidArgumentError("Destination is null")
        if not isinstance(queue, QueueDestination):
            raise InternalError(f"Not a queue: {queue}")
        if queue.queue_url is not None:
            return queue.queue_url
        try:
            response = self.sqs.create_queue(QueueName=queue.name)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to get message queue '{queue}'", e) from e
        queue.bind_handle(response["QueueUrl"])
        self.logger.debug("Resolved %s to %s", queue, queue.queue_url)
        return queue.queue_url

    def resolve_topic(self, topic: TopicDestination | None) -> str:
        """Return the topic ARN, creating the topic on first use."""
        if topic is None:
            raise InvalidArgumentError("Destination is null")
        if topic.arn is not None:
            return topic.arn
        try:
            response = self.sns.create_topic(Name=topic.name)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to create/lookup topic: {topic}", e) from e
        topic.bind_handle(response["TopicArn"])
        self.logger.debug("Resolved %s to %s", topic, topic.arn)
        return topic.arn

    def list_queues(self, prefix: str | None = None) -> list[QueueDestination]:
        """List queues whose names start with prefix (all queues when prefix is None)."""
        params = {"QueueNamePrefix": prefix} if prefix else {}
        try:
            response = self.sqs.list_queues(**params)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to list queues with prefix '{prefix}'", e) from e
        urls = dict.fromkeys(response.get("QueueUrls", []))
        return [QueueDestination(queue_url=url) for url in urls]

    def delete_queue(self, queue: QueueDestination | None) -> None:
        """Delete the SQS queue behind the destination."""
        queue_url = self.resolve_queue(queue)
        try:
            self.sqs.delete_queue(QueueUrl=queue_url)
        except (ClientError, BotoCoreError) as e:
            raise classify_aws_error(f"Unable to delete message queue '{queue}'", e) from e
        self.logger.info("Deleted queue %s", queue_url)
