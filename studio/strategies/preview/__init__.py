"""Live preview strategies.

Rendering, the typed message protocol and the host/context ends of the
preview channel.
"""

from studio.strategies.preview.channel import QueueChannel, WebSocketChannel
from studio.strategies.preview.context import RenderContext
from studio.strategies.preview.host import PreviewHost
from studio.strategies.preview.hub import PreviewHub
from studio.strategies.preview.protocol import (
    ElementSelected,
    IframeLoaded,
    PreviewMessage,
    SetSelectedPath,
    UpdateHtml,
    dump_message,
    parse_message,
)
from studio.strategies.preview.renderer import PreviewRenderer

__all__ = [
    "PreviewRenderer",
    "PreviewHost",
    "PreviewHub",
    "RenderContext",
    "QueueChannel",
    "WebSocketChannel",
    "PreviewMessage",
    "IframeLoaded",
    "UpdateHtml",
    "ElementSelected",
    "SetSelectedPath",
    "parse_message",
    "dump_message",
]
