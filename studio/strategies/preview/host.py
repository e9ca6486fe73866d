"""Preview host.

The editor side of the preview channel. Content is rendered from whatever
template and state the source returns at the moment of sending, so a push
never carries stale markup even if several edits landed in between.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from studio.interfaces.preview import BasePreviewChannel, ChannelClosedError
from studio.interfaces.template import TemplateSnapshot
from studio.strategies.preview.protocol import (
    ElementSelected,
    IframeLoaded,
    PreviewMessage,
    SetSelectedPath,
    UpdateHtml,
)
from studio.strategies.preview.renderer import PreviewRenderer

logger = logging.getLogger(__name__)


SnapshotSource = Callable[[], TemplateSnapshot]
SelectionCallback = Callable[[ElementSelected], Any]


class PreviewHost:
    """Pushes rendered content to one rendering context and handles its events."""

    def __init__(
        self,
        channel: BasePreviewChannel,
        source: SnapshotSource,
        renderer: PreviewRenderer | None = None,
        on_select: SelectionCallback | None = None,
    ) -> None:
        """Initialize the host.

        Args:
            channel: Channel end connected to the rendering context.
            source: Returns the latest template and state when called.
            renderer: Preview renderer. Defaults to a new PreviewRenderer.
            on_select: Called with every ELEMENT_SELECTED; may be async.
        """
        self._channel = channel
        self._source = source
        self._renderer = renderer or PreviewRenderer()
        self._on_select = on_select
        self.selected_path: str | None = None
        self.closed = False

    async def push(self) -> bool:
        """Render the latest snapshot and send it as UPDATE_HTML.

        Returns:
            False if the rendering context is gone, True otherwise.
        """
        snapshot = self._source()
        html = self._renderer.render(snapshot.template, snapshot.state)
        return await self._send(UpdateHtml(html=html))

    async def set_selected_path(self, path: str | None) -> bool:
        """Tell the rendering context which element is selected."""
        self.selected_path = path
        return await self._send(SetSelectedPath(path=path))

    async def handle(self, message: PreviewMessage) -> None:
        """React to one message from the rendering context."""
        if isinstance(message, IframeLoaded):
            await self.push()
        elif isinstance(message, ElementSelected):
            logger.debug(f"Preview element selected: {message.path} <{message.tag_name}>")
            if self._on_select is not None:
                result = self._on_select(message)
                if inspect.isawaitable(result):
                    await result
            await self.set_selected_path(message.path)
        else:
            logger.debug(f"Preview host ignoring {message.type}")

    async def run(self) -> None:
        """Handle rendering context messages until the channel closes."""
        try:
            while not self.closed:
                await self.handle(await self._channel.receive())
        except ChannelClosedError:
            self.closed = True
            logger.debug("Preview host channel closed")

    async def _send(self, message: PreviewMessage) -> bool:
        if self.closed:
            return False
        try:
            await self._channel.send(message)
        except ChannelClosedError:
            self.closed = True
            logger.debug(f"Dropped {message.type}: preview channel closed")
            return False
        return True
