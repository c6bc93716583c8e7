"""Receive one message from a queue.

CLI that waits for a message, prints it, and optionally deletes it or
makes it visible again.
"""

import click
from icecream import ic

from sqs_bus.cli.common import load_settings, to_click_exception
from sqs_bus.connection import ConnectionState
from sqs_bus.connector_sqs import SQSConnector as QueueConnector
from sqs_bus.errors import BusError
from sqs_bus.message_model_dto import InvalidMessageDTO, QueueDestination


@click.command()
@click.option("--queue-name", type=str, required=True, help="The name of the queue to receive from")
@click.option(
    "--timeout-ms",
    type=int,
    default=20000,
    help="How long to wait for a message in milliseconds, negative waits forever",
)
@click.option("--delete", "delete_message", is_flag=True, default=False, help="Delete the message after printing it")
@click.option("--reset", "reset_message", is_flag=True, default=False, help="Make the message visible again")
@click.option("--region", type=str, required=False, help="AWS region, overrides AWS_REGION")
@click.option("--endpoint-url", type=str, required=False, help="Custom endpoint, e.g. a local SQS emulator")
def main(
    queue_name: str,
    timeout_ms: int,
    delete_message: bool,
    reset_message: bool,
    region: str,
    endpoint_url: str,
) -> None:
    """Wait for one message on the queue and print it."""
    if delete_message and reset_message:
        raise click.ClickException("--delete and --reset are mutually exclusive")

    settings = load_settings(region, endpoint_url)
    connector = QueueConnector(**settings.connector_kwargs())
    connection = ConnectionState(running=True)
    try:
        message = connector.receive_message(connection, QueueDestination(name=queue_name), timeout_ms)
        if message is None:
            click.echo(f"No message on {queue_name}")
            return

        if isinstance(message, InvalidMessageDTO):
            click.secho(f"Invalid message {message.message_id}: {message.error}", err=True, fg="red")
        else:
            click.echo(f"Message {message.message_id}")
            ic(message.body)

        if delete_message:
            connector.delete_message(message)
            click.secho(f"Message {message.message_id} deleted", fg="green")
        elif reset_message:
            connector.reset_message(message)
            click.echo(f"Message {message.message_id} reset")
    except BusError as e:
        raise to_click_exception(e) from e
    finally:
        connection.stop()


if __name__ == "__main__":
    main()
