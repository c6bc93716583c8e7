"""Send a message to a queue or topic.

CLI that wraps a JSON payload in a message and sends it; queues and topics
are created if they do not exist.
"""

import json

import click
from pydantic import ValidationError

from sqs_bus.cli.common import load_settings, to_click_exception
from sqs_bus.connector_sqs import SQSConnector as QueueConnector
from sqs_bus.errors import BusError
from sqs_bus.message_model_dto import MessageDTO, QueueDestination, TopicDestination


@click.command()
@click.option("--queue-name", type=str, required=False, help="The name of the queue to send the message to")
@click.option("--topic-name", type=str, required=False, help="The name of the topic to publish the message to")
@click.option("--message", type=str, required=True, help="The message to send (JSON)")
@click.option("--disable-message-id", is_flag=True, default=False, help="Do not assign a message ID")
@click.option("--region", type=str, required=False, help="AWS region, overrides AWS_REGION")
@click.option("--endpoint-url", type=str, required=False, help="Custom endpoint, e.g. a local SQS emulator")
def main(
    queue_name: str,
    topic_name: str,
    message: str,
    disable_message_id: bool,
    region: str,
    endpoint_url: str,
) -> None:
    """Send a JSON message to exactly one of --queue-name or --topic-name."""
    if bool(queue_name) == bool(topic_name):
        raise click.ClickException("Give exactly one of --queue-name or --topic-name")

    try:
        body = json.loads(message)
    except json.JSONDecodeError as err:
        raise click.ClickException(f"Invalid JSON: {message}") from err

    if queue_name:
        destination = QueueDestination(name=queue_name)
    else:
        destination = TopicDestination(name=topic_name)
    click.echo(f"destination: {destination}")

    settings = load_settings(region, endpoint_url)
    connector = QueueConnector(**settings.connector_kwargs())
    try:
        outgoing = MessageDTO(body=body, disable_message_id=disable_message_id)
    except ValidationError as err:
        raise click.ClickException(f"Message is not a plain JSON value: {message}") from err
    try:
        connector.send_message(destination, outgoing)
    except BusError as e:
        raise to_click_exception(e) from e
    click.echo(f"Message sent with ID: {outgoing.message_id}")


if __name__ == "__main__":
    """Entry point for the send CLI."""
    main()
