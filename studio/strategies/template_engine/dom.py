"""Element tree helpers shared by the template engine and the preview.

Templates are parsed with BeautifulSoup's ``html.parser`` on every call and
serialized back to a string; no tree outlives the operation that built it.
Paths are dotted element-child indices counted from the document body,
matching what a browser would see for the same fragment.
"""

import logging
import re

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.element import NavigableString, Tag
from bs4.formatter import HTMLFormatter

from studio.interfaces.template import TemplateParseError

logger = logging.getLogger(__name__)


PLACEHOLDER_PATTERN = re.compile(
    r"(?:\{\{|%7[Bb]%7[Bb])\s*([A-Za-z0-9_-]+)\s*(?:\}\}|%7[Dd]%7[Dd])"
)

# Elements a browser hoists into <head> when they lead the fragment.
HEAD_ONLY_TAGS = frozenset({"base", "link", "meta", "noscript", "script", "style", "template", "title"})

BOOLEAN_ATTRIBUTES = frozenset(
    {
        "allowfullscreen", "async", "autofocus", "autoplay", "checked", "controls", "default",
        "defer", "disabled", "formnovalidate", "hidden", "inert", "ismap", "loop", "multiple",
        "muted", "nomodule", "novalidate", "open", "playsinline", "readonly", "required",
        "reversed", "selected",
    }
)


def token_pattern(key: str) -> re.Pattern[str]:
    """Build a pattern matching ``key`` in either placeholder spelling."""
    return re.compile(
        r"(?:\{\{|%7[Bb]%7[Bb])\s*" + re.escape(key) + r"\s*(?:\}\}|%7[Dd]%7[Dd])"
    )


def parse(template: str) -> BeautifulSoup:
    """Parse a template into an element tree.

    Multi-valued attributes such as ``class`` are kept as plain strings so
    the serialized output matches the input text as closely as possible.

    Args:
        template: The HTML fragment.

    Returns:
        The parsed document root.

    Raises:
        TemplateParseError: If the parser rejects the markup.
    """
    try:
        return BeautifulSoup(template, "html.parser", multi_valued_attributes=None)
    except Exception as e:
        logger.warning(f"Template parse failed: {e}")
        raise TemplateParseError(f"Template could not be parsed: {e}") from e


def _substitute_entities(text: str) -> str:
    return EntitySubstitution.substitute_xml(text).replace("\xa0", "&nbsp;")


class TemplateFormatter(HTMLFormatter):
    """HTML output that leaves untouched markup as the user wrote it.

    Non-breaking spaces go back out as ``&nbsp;`` and void elements keep
    the plain ``<br>`` form. Attributes stay in source order; empty boolean
    attributes are written bare.
    """

    def __init__(self):
        super().__init__(entity_substitution=_substitute_entities, void_element_close_prefix=None)

    def attributes(self, tag):
        for key, value in (tag.attrs or {}).items():
            if value == "" and key in BOOLEAN_ATTRIBUTES:
                yield key, None
            else:
                yield key, value


TEMPLATE_FORMATTER = TemplateFormatter()


def serialize(root: BeautifulSoup) -> str:
    """Serialize a parsed template back to markup."""
    return root.decode(formatter=TEMPLATE_FORMATTER)


def element_children(node: Tag) -> list[Tag]:
    """Return the element children of a node, skipping text."""
    return [child for child in node.children if isinstance(child, Tag)]


def body_children(root: BeautifulSoup) -> list[Tag]:
    """Return the top-level elements that would end up in the document body.

    Leading head-only elements (site font styles, links, metas) are left
    out until the first other element or non-blank text is reached.
    """
    children: list[Tag] = []
    in_head = True
    for child in root.children:
        if isinstance(child, Tag):
            if in_head and child.name in HEAD_ONLY_TAGS:
                continue
            in_head = False
            children.append(child)
        elif in_head and type(child) is NavigableString and child.strip():
            in_head = False
    return children


def element_path(root: BeautifulSoup, element: Tag) -> str | None:
    """Return the dotted body path of an element, or None if it has none."""
    indices: list[int] = []
    current: Tag = element
    while current.parent is not None and current.parent is not root:
        siblings = element_children(current.parent)
        indices.append(_index_of(siblings, current))
        current = current.parent
    if current.parent is None:
        return None

    top_level = body_children(root)
    position = _index_of(top_level, current)
    if position < 0:
        return None
    indices.append(position)
    return ".".join(str(i) for i in reversed(indices))


def find_by_path(root: BeautifulSoup, path: str) -> Tag | None:
    """Resolve a dotted body path to an element.

    Args:
        root: The parsed template.
        path: Dotted child indices, e.g. "2.0.1".

    Returns:
        The element at the path, or None if the path doesn't resolve.
    """
    try:
        indices = [int(part) for part in path.split(".")]
    except ValueError:
        return None

    candidates = body_children(root)
    current: Tag | None = None
    for index in indices:
        if index < 0 or index >= len(candidates):
            return None
        current = candidates[index]
        candidates = element_children(current)
    return current


def _index_of(elements: list[Tag], target: Tag) -> int:
    # Identity comparison; Tag.__eq__ compares markup.
    for i, element in enumerate(elements):
        if element is target:
            return i
    return -1
