"""Preview channel interface.

The rendering context is isolated from the host; the two only talk through
a channel that carries typed preview messages.
"""

from abc import ABC, abstractmethod
from typing import Any


class ChannelClosedError(ConnectionError):
    """The other end of a preview channel has gone away."""


class InvalidMessageError(ValueError):
    """A preview message could not be decoded."""


class BasePreviewChannel(ABC):
    """One end of a one-directional-per-message preview channel."""

    @abstractmethod
    async def send(self, message: Any) -> None:
        """Send a preview message to the other end.

        Args:
            message: A PreviewMessage model instance.

        Raises:
            ChannelClosedError: If the peer is gone.
        """

    @abstractmethod
    async def receive(self) -> Any:
        """Wait for the next preview message from the other end.

        Returns:
            A PreviewMessage model instance.

        Raises:
            ChannelClosedError: If the peer is gone.
        """
