"""Group inference strategy.

Works out which placeholders belong to the same repeatable unit (a list
item, a table row, one of several sibling cards) so the form can offer
duplicate and reorder actions without the author naming indices.
The heuristic is best-effort.
"""

import logging
from collections.abc import Iterable

from bs4 import BeautifulSoup
from bs4.element import Tag

from studio.interfaces.template import (
    BaseGroupInferrer,
    PlaceholderOccurrence,
    TemplateParseError,
)
from studio.strategies.template_engine import dom
from studio.strategies.template_engine.models import FieldGroup, GroupingResult
from studio.strategies.template_engine.scanner import PlaceholderScanner

logger = logging.getLogger(__name__)


BOUNDARY_TAGS = frozenset({"body", "html", "main", "section"})
CONFIDENT_TAGS = frozenset({"li", "tr"})
CONTAINER_TAGS = frozenset({"article", "aside", "div", "figure"})


class GroupInferrer(BaseGroupInferrer):
    """Groups placeholder keys by their nearest repeatable ancestor.

    Walking up from the node that holds a placeholder, a ``li`` or ``tr``
    is an anchor straight away, and a container element is an anchor when
    its parent has another child with the same tag. The walk gives up at a
    boundary tag or the document root, leaving the placeholder standalone.
    """

    def __init__(
        self,
        scanner: PlaceholderScanner | None = None,
        boundary_tags: Iterable[str] = BOUNDARY_TAGS,
        confident_tags: Iterable[str] = CONFIDENT_TAGS,
        container_tags: Iterable[str] = CONTAINER_TAGS,
    ) -> None:
        """Initialize the inferrer.

        Args:
            scanner: Scanner used to find occurrences. Defaults to a new one.
            boundary_tags: Tags treated as the top of the document.
            confident_tags: Tags that are always a repeatable unit.
            container_tags: Tags that are a repeatable unit when repeated.
        """
        self._scanner = scanner or PlaceholderScanner()
        self._boundary_tags = frozenset(boundary_tags)
        self._confident_tags = frozenset(confident_tags)
        self._container_tags = frozenset(container_tags)

    @property
    def scanner(self) -> PlaceholderScanner:
        return self._scanner

    def infer(self, template: str) -> GroupingResult:
        """Group the template's placeholder keys by anchor element.

        Args:
            template: The HTML template.

        Returns:
            GroupingResult with groups in order of first appearance. An
            unparsable template yields an empty result.
        """
        try:
            root = dom.parse(template)
        except TemplateParseError:
            logger.warning("Group inference skipped: template could not be parsed")
            return GroupingResult()

        return self.infer_tree(root)

    def infer_tree(self, root: BeautifulSoup) -> GroupingResult:
        """Group placeholder keys of an already parsed template."""
        items = [
            (occurrence.key, self.find_anchor(occurrence))
            for occurrence in self._scanner.scan_tree(root)
        ]

        groups: list[FieldGroup] = []
        processed_keys: set[str] = set()
        processed_anchors: set[int] = set()

        for key, anchor in items:
            if key in processed_keys:
                continue

            if anchor is None:
                groups.append(FieldGroup(keys=[key]))
                processed_keys.add(key)
                continue

            if id(anchor) in processed_anchors:
                continue

            keys: list[str] = []
            for other_key, other_anchor in items:
                if other_anchor is anchor and other_key not in processed_keys:
                    keys.append(other_key)
                    processed_keys.add(other_key)

            if keys:
                groups.append(FieldGroup(keys=keys, anchor_path=dom.element_path(root, anchor)))
                processed_anchors.add(id(anchor))

        repeatable = list(dict.fromkeys(key for key, anchor in items if anchor is not None))

        logger.debug(f"Inferred {len(groups)} field groups, {len(repeatable)} repeatable keys")
        return GroupingResult(groups=groups, repeatable_keys=repeatable)

    def find_anchor(self, occurrence: PlaceholderOccurrence) -> Tag | None:
        """Return the repeatable element enclosing an occurrence, if any.

        Args:
            occurrence: An occurrence from a tree scan.

        Returns:
            The anchor element, or None for a standalone placeholder.
        """
        if occurrence.node is None:
            return None

        current = occurrence.node if occurrence.attribute else occurrence.node.parent

        while (
            isinstance(current, Tag)
            and not isinstance(current, BeautifulSoup)
            and current.parent is not None
            and current.name not in self._boundary_tags
        ):
            if current.name in self._confident_tags:
                return current

            parent = current.parent
            if current.name in self._container_tags and any(
                sibling is not current and sibling.name == current.name
                for sibling in dom.element_children(parent)
            ):
                return current

            current = parent

        return None
