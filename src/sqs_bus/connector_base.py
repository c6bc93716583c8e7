"""Abstract base for messaging connectors.

Defines the operations the connection/session layer performs against a
messaging backend: send, receive, acknowledge (delete), reset visibility,
and queue administration. Implementations (e.g. SQSConnector) talk to the
concrete services.
"""

from abc import ABC, abstractmethod

from sqs_bus.connection import RunningFlag
from sqs_bus.message_model_dto import MessageDTO, QueueDestination, TopicDestination


class ConnectorBase(ABC):
    """Abstract base class for messaging connectors.

    Implementations hold no per-destination state and must be safe to call
    from several threads at once.
    """

    @abstractmethod
    def send_message(self, destination: QueueDestination | TopicDestination, message: MessageDTO) -> None:
        """Send one message. Sets message_id and timestamp on the message unless disabled."""
        pass

    @abstractmethod
    def send_messages(self, destination: QueueDestination | TopicDestination, messages: list[MessageDTO]) -> None:
        """Send messages in order, stopping at the first failure."""
        pass

    @abstractmethod
    def receive_message(
        self, connection: RunningFlag, destination: QueueDestination, timeout_ms: int
    ) -> MessageDTO | None:
        """Block until a message arrives or timeout_ms elapses. A negative timeout waits forever."""
        pass

    @abstractmethod
    def delete_message(self, message: MessageDTO) -> None:
        """Acknowledge a received message so it is never redelivered."""
        pass

    @abstractmethod
    def reset_message(self, message: MessageDTO) -> None:
        """Make a received message immediately available for redelivery."""
        pass

    @abstractmethod
    def test(self) -> None:
        """Check that the backend is reachable and the credentials are accepted."""
        pass

    @abstractmethod
    def create_queue(self, queue_name: str) -> QueueDestination:
        """Create a queue if it does not exist and return it resolved."""
        pass

    @abstractmethod
    def delete_queue(self, queue: QueueDestination) -> None:
        """Delete the queue and its messages."""
        pass

    @abstractmethod
    def list_queues(self, prefix: str | None = None) -> list[QueueDestination]:
        """Return the queues whose names start with prefix."""
        pass
