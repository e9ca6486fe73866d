"""Placeholder scanner strategy.

Finds ``{{key}}`` and ``%7B%7Bkey%7D%7D`` placeholders in text nodes and
attribute values, in document order.
"""

import itertools
import logging

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from studio.interfaces.template import (
    BasePlaceholderScanner,
    PlaceholderOccurrence,
    TemplateParseError,
)
from studio.strategies.template_engine import dom

logger = logging.getLogger(__name__)


class PlaceholderScanner(BasePlaceholderScanner):
    """Scans a parsed template for placeholder occurrences.

    Text inside ``<style>`` and ``<script>`` is scanned like any other text;
    comments and declarations are not. If the template cannot be parsed the
    raw markup is scanned instead, with no nodes attached.
    """

    def scan(self, template: str) -> list[PlaceholderOccurrence]:
        """Return every placeholder occurrence in document order.

        Args:
            template: The HTML template.

        Returns:
            Occurrences in depth-first pre-order; an element's attribute
            matches come before anything inside it.
        """
        if not template:
            return []

        try:
            root = dom.parse(template)
        except TemplateParseError:
            logger.warning("Falling back to raw text placeholder scan")
            return self.scan_text(template)

        return self.scan_tree(root)

    def scan_tree(self, root: Tag) -> list[PlaceholderOccurrence]:
        """Scan an already parsed tree (or subtree) for placeholders."""
        occurrences: list[PlaceholderOccurrence] = []

        nodes = root.descendants
        if not isinstance(root, BeautifulSoup):
            nodes = itertools.chain([root], nodes)

        for node in nodes:
            if isinstance(node, Tag):
                for name, value in node.attrs.items():
                    text = value if isinstance(value, str) else " ".join(value)
                    for match in dom.PLACEHOLDER_PATTERN.finditer(text):
                        occurrences.append(
                            PlaceholderOccurrence(
                                key=match.group(1),
                                node=node,
                                attribute=name,
                                token=match.group(0),
                            )
                        )
            elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
                for match in dom.PLACEHOLDER_PATTERN.finditer(str(node)):
                    occurrences.append(
                        PlaceholderOccurrence(
                            key=match.group(1),
                            node=node,
                            attribute=None,
                            token=match.group(0),
                        )
                    )

        return occurrences

    def scan_text(self, template: str) -> list[PlaceholderOccurrence]:
        """Scan raw markup without building a tree."""
        return [
            PlaceholderOccurrence(
                key=match.group(1),
                node=None,
                attribute=None,
                token=match.group(0),
            )
            for match in dom.PLACEHOLDER_PATTERN.finditer(template)
        ]

    def first_occurrence(
        self, occurrences: list[PlaceholderOccurrence], key: str
    ) -> PlaceholderOccurrence | None:
        """Return the first occurrence of ``key``, if any."""
        return next((o for o in occurrences if o.key == key), None)
