"""Rendering context.

The isolated side of the preview. It owns the rendered page: it announces
readiness, swaps in markup pushed by the host, keeps the single site font
block in sync, and reports clicked elements back with their resolved
colours and font.
"""

import logging

from bs4 import BeautifulSoup
from bs4.element import Tag

from studio.interfaces.preview import BasePreviewChannel, ChannelClosedError
from studio.interfaces.template import ElementNotFoundError
from studio.strategies.preview.protocol import (
    ElementSelected,
    IframeLoaded,
    PreviewMessage,
    SetSelectedPath,
    UpdateHtml,
)
from studio.strategies.preview.renderer import PATH_ATTRIBUTE
from studio.strategies.template_engine.theme import parse_inline_style

logger = logging.getLogger(__name__)


SITE_FONT_ID = "site-font"
DEFAULT_COLOR = "rgb(0, 0, 0)"
TRANSPARENT = "rgba(0, 0, 0, 0)"


class RenderContext:
    """In-process model of the preview frame.

    Attributes:
        app_html: Markup currently shown in the app container.
        site_font_css: Text of the page's site font block, or None.
        selected_path: Last path the host marked as selected.
        updates: Number of UPDATE_HTML messages that changed the page.
    """

    def __init__(self, channel: BasePreviewChannel) -> None:
        self._channel = channel
        self.app_html = ""
        self.site_font_css: str | None = None
        self.selected_path: str | None = None
        self.updates = 0

    async def announce(self) -> None:
        """Tell the host the frame is ready for content."""
        await self._channel.send(IframeLoaded())

    async def run(self) -> None:
        """Announce readiness, then apply host messages until the channel closes."""
        try:
            await self.announce()
            while True:
                self.apply(await self._channel.receive())
        except ChannelClosedError:
            logger.debug("Render context channel closed")

    def apply(self, message: PreviewMessage) -> bool:
        """Apply one host message.

        Returns:
            True if the page or selection changed.
        """
        if isinstance(message, UpdateHtml):
            return self._update_html(message.html)
        if isinstance(message, SetSelectedPath):
            changed = message.path != self.selected_path
            self.selected_path = message.path
            return changed

        logger.debug(f"Render context ignoring {message.type}")
        return False

    def _update_html(self, html: str) -> bool:
        changed = False
        if html != self.app_html:
            self.app_html = html
            changed = True

        site_font = BeautifulSoup(html, "html.parser").find("style", id=SITE_FONT_ID)
        css = site_font.decode_contents() if site_font is not None else None
        if css != self.site_font_css:
            self.site_font_css = css
            changed = True

        if changed:
            self.updates += 1
        return changed

    # =========================================================================
    # Selection
    # =========================================================================

    def click(self, path: str) -> ElementSelected:
        """Describe the element at ``path`` the way a click would report it.

        Colour and font are inherited from ancestors when the element does not
        set them inline; the background is never inherited. A site font
        overrides every inline font family.

        Raises:
            ElementNotFoundError: If no rendered element carries ``path``.
        """
        root = BeautifulSoup(self.app_html, "html.parser", multi_valued_attributes=None)
        element = root.find(attrs={PATH_ATTRIBUTE: path})
        if element is None:
            raise ElementNotFoundError(path)

        own_style = parse_inline_style(element.get("style") or "")
        return ElementSelected(
            path=path,
            tag_name=element.name.upper(),
            color=self._inherited(element, "color") or DEFAULT_COLOR,
            bg_color=own_style.get("background-color", TRANSPARENT),
            font_family=self._font_family(element),
            class_list=(element.get("class") or "").split(),
        )

    async def select(self, path: str) -> ElementSelected:
        """Click the element at ``path`` and report it to the host."""
        message = self.click(path)
        await self._channel.send(message)
        return message

    def _inherited(self, element: Tag, prop: str) -> str | None:
        current = element
        while isinstance(current, Tag) and not isinstance(current, BeautifulSoup):
            value = parse_inline_style(current.get("style") or "").get(prop)
            if value:
                return value
            current = current.parent
        return None

    def _font_family(self, element: Tag) -> str:
        if self.site_font_css:
            style = parse_inline_style(self.site_font_css.split("{", 1)[-1].rstrip("} \n"))
            family = style.get("font-family", "")
            return family.replace("!important", "").strip()
        return self._inherited(element, "font-family") or ""
