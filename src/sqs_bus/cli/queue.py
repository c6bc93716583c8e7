"""Administer SQS queues.

CLI that creates, lists or destroys queues, or tests the connection.
"""

import click

from sqs_bus.cli.common import load_settings, to_click_exception
from sqs_bus.connector_sqs import SQSConnector as QueueConnector
from sqs_bus.errors import BusError
from sqs_bus.message_model_dto import QueueDestination


@click.command()
@click.option("--action", type=str, required=True, help="The action to perform: create, list, destroy, test")
@click.option("--queue-name", type=str, required=False, help="The name of the queue (create, destroy)")
@click.option("--prefix", type=str, required=False, help="Only list queues whose names start with this prefix")
@click.option("--region", type=str, required=False, help="AWS region, overrides AWS_REGION")
@click.option("--endpoint-url", type=str, required=False, help="Custom endpoint, e.g. a local SQS emulator")
def main(action: str, queue_name: str, prefix: str, region: str, endpoint_url: str) -> None:
    """Create, list or destroy queues, or test the connection."""
    click.echo(f"Queue {action}")

    if action in ("create", "destroy") and not queue_name:
        raise click.ClickException(f"--queue-name is required for {action}")

    settings = load_settings(region, endpoint_url)
    connector = QueueConnector(**settings.connector_kwargs())
    try:
        match action:
            case "create":
                queue = connector.create_queue(queue_name)
                click.echo(f"Queue {queue_name} created: {queue.queue_url}")
            case "list":
                queues = connector.list_queues(prefix)
                for queue in queues:
                    click.echo(queue.queue_url)
                click.echo(f"{len(queues)} queue(s)")
            case "destroy":
                connector.delete_queue(QueueDestination(name=queue_name))
                click.echo(f"Queue {queue_name} destroyed")
            case "test":
                connector.test()
                click.echo("Connection OK")
            case _:
                raise click.ClickException(
                    f"Invalid action: {action}. Valid actions are: create, list, destroy, test"
                )
    except BusError as e:
        raise to_click_exception(e) from e


if __name__ == "__main__":
    main()
