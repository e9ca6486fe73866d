"""Preview channel implementations."""

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect

from studio.interfaces.preview import BasePreviewChannel, ChannelClosedError
from studio.strategies.preview.protocol import PreviewMessage, dump_message, parse_message

logger = logging.getLogger(__name__)


_CLOSED = object()


class QueueChannel(BasePreviewChannel):
    """In-process channel end backed by a pair of asyncio queues.

    Use ``QueueChannel.pair()`` to build two connected ends, one for the
    host and one for the rendering context.
    """

    def __init__(self, inbox: asyncio.Queue, outbox: asyncio.Queue) -> None:
        self._inbox = inbox
        self._outbox = outbox
        self._closed = False
        self._peer: "QueueChannel | None" = None

    @classmethod
    def pair(cls) -> tuple["QueueChannel", "QueueChannel"]:
        """Create two connected channel ends."""
        left_to_right: asyncio.Queue = asyncio.Queue()
        right_to_left: asyncio.Queue = asyncio.Queue()
        left = cls(inbox=right_to_left, outbox=left_to_right)
        right = cls(inbox=left_to_right, outbox=right_to_left)
        left._peer = right
        right._peer = left
        return left, right

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: PreviewMessage) -> None:
        if self._closed or (self._peer is not None and self._peer.closed):
            raise ChannelClosedError("Preview channel is closed")
        await self._outbox.put(message)

    async def receive(self) -> PreviewMessage:
        message = await self._inbox.get()
        if message is _CLOSED:
            self._closed = True
            raise ChannelClosedError("Preview channel is closed")
        return message

    def close(self) -> None:
        """Close this end, waking pending receives on both ends."""
        if not self._closed:
            self._outbox.put_nowait(_CLOSED)
            self._inbox.put_nowait(_CLOSED)
            self._closed = True


class WebSocketChannel(BasePreviewChannel):
    """Channel end speaking the JSON wire format over a FastAPI websocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, message: PreviewMessage) -> None:
        try:
            await self._websocket.send_json(dump_message(message))
        except (WebSocketDisconnect, RuntimeError) as e:
            raise ChannelClosedError("Preview websocket is closed") from e

    async def receive(self) -> PreviewMessage:
        try:
            data = await self._websocket.receive_text()
        except (WebSocketDisconnect, RuntimeError) as e:
            raise ChannelClosedError("Preview websocket is closed") from e
        return parse_message(data)
