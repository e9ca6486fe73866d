"""Structural template mutator strategy.

Duplicates, deletes and reorders the repeatable elements that hold
placeholders. Every operation parses the template afresh, mutates the tree
and serializes it again; nothing is kept between calls.
"""

import copy
import logging
import random
import re
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from studio.interfaces.template import (
    AnchorNotFoundError,
    BaseTemplateMutator,
    CrossListSwapError,
    PlaceholderNotFoundError,
    PlaceholderOccurrence,
    TemplateParseError,
    TemplateSnapshot,
)
from studio.strategies.template_engine import dom
from studio.strategies.template_engine.grouping import GroupInferrer
from studio.strategies.template_engine.models import DeleteResult, DuplicateResult, SwapResult

logger = logging.getLogger(__name__)


NUMERIC_SUFFIX = re.compile(r"_\d+$")


class TemplateMutator(BaseTemplateMutator):
    """Applies duplicate, delete and swap to a template.

    Lookup failures raise before anything is changed, so a caller either
    gets a complete result or the original template and state untouched.
    """

    def __init__(
        self,
        inferrer: GroupInferrer | None = None,
        key_suffix_max: int = 9999,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the mutator.

        Args:
            inferrer: Anchor detection. Defaults to a new GroupInferrer.
            key_suffix_max: Largest random suffix for duplicated keys.
            rng: Random source for key suffixes, injectable for tests.
        """
        self._inferrer = inferrer or GroupInferrer()
        self._scanner = self._inferrer.scanner
        self._key_suffix_max = key_suffix_max
        self._rng = rng or random.Random()

    # =========================================================================
    # Duplicate
    # =========================================================================

    def duplicate(self, template: str, state: dict[str, Any], key: str) -> DuplicateResult:
        """Clone the repeatable element holding ``key``.

        Every placeholder inside the clone gets a fresh key that collides
        with no template or state key, and starts with an empty value.

        Args:
            template: The HTML template.
            state: The current state. Never mutated.
            key: Any key inside the element to duplicate.

        Returns:
            DuplicateResult with the new template, state and key mapping.

        Raises:
            TemplateParseError: If the template can't be parsed.
            PlaceholderNotFoundError: If ``key`` isn't in the template.
            AnchorNotFoundError: If ``key`` isn't inside a repeatable element.
        """
        root = dom.parse(template)
        occurrences = self._scanner.scan_tree(root)
        anchor = self._anchor_for(occurrences, key)

        clone = copy.copy(anchor)
        clone_occurrences = self._scanner.scan_tree(clone)

        taken = {occurrence.key for occurrence in occurrences} | set(state)
        key_map: dict[str, str] = {}
        for occurrence in clone_occurrences:
            if occurrence.key not in key_map:
                new_key = self._fresh_key(occurrence.key, taken)
                taken.add(new_key)
                key_map[occurrence.key] = new_key

        self._rewrite_keys(clone_occurrences, key_map)
        anchor.insert_after(clone)

        next_state = dict(state)
        for new_key in key_map.values():
            next_state[new_key] = ""

        focus_key = next(iter(key_map.values()), None)
        logger.info(f"Duplicated element holding '{key}': {key_map}")

        return DuplicateResult(
            template=dom.serialize(root),
            state=next_state,
            key_map=key_map,
            focus_key=focus_key,
        )

    def _fresh_key(self, key: str, taken: set[str]) -> str:
        """Generate ``<base>_<random>`` not present in ``taken``."""
        base = NUMERIC_SUFFIX.sub("", key)
        upper = self._key_suffix_max
        attempts = 0
        while True:
            candidate = f"{base}_{self._rng.randint(0, upper)}"
            if candidate not in taken:
                return candidate
            attempts += 1
            if attempts % 100 == 0:
                upper = upper * 10 + 9

    def _rewrite_keys(
        self, occurrences: list[PlaceholderOccurrence], key_map: dict[str, str]
    ) -> None:
        """Rename placeholders in place, keeping each one's spelling."""

        def replace(match: re.Match[str]) -> str:
            new_key = key_map.get(match.group(1))
            if new_key is None:
                return match.group(0)
            if match.group(0).startswith("%"):
                return f"%7B%7B{new_key}%7D%7D"
            return "{{" + new_key + "}}"

        done: set[tuple[int, str | None]] = set()
        for occurrence in occurrences:
            marker = (id(occurrence.node), occurrence.attribute)
            if marker in done:
                continue
            done.add(marker)

            node = occurrence.node
            if occurrence.attribute is not None:
                value = node[occurrence.attribute]
                text = value if isinstance(value, str) else " ".join(value)
                node[occurrence.attribute] = dom.PLACEHOLDER_PATTERN.sub(replace, text)
            else:
                node.replace_with(type(node)(dom.PLACEHOLDER_PATTERN.sub(replace, str(node))))

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, template: str, state: dict[str, Any], key: str) -> DeleteResult:
        """Remove a field from the state and its element from the template.

        The narrowest element whose own text holds the placeholder is
        removed. If there is none, or the template can't be parsed, only the
        placeholder text itself is removed.

        Args:
            template: The HTML template.
            state: The current state. Never mutated.
            key: The key to delete.

        Returns:
            DeleteResult with a snapshot of the template and state before
            the delete, for undo.
        """
        snapshot = TemplateSnapshot(template=template, state=dict(state))
        next_state = {k: v for k, v in state.items() if k != key}

        holder: Tag | None = None
        root: BeautifulSoup | None = None
        try:
            root = dom.parse(template)
            holder = self._text_holder(root, key)
        except TemplateParseError:
            logger.warning(f"Delete of '{key}' falling back to token removal")

        if root is not None and holder is not None:
            holder.decompose()
            next_template = dom.serialize(root)
            removed_element = True
        else:
            next_template = dom.token_pattern(key).sub("", template)
            removed_element = False

        logger.info(f"Deleted field '{key}' (element removed: {removed_element})")

        return DeleteResult(
            template=next_template,
            state=next_state,
            removed_element=removed_element,
            snapshot=snapshot,
        )

    def _text_holder(self, root: BeautifulSoup, key: str) -> Tag | None:
        """Find the element whose direct text holds the placeholder."""
        for occurrence in self._scanner.scan_tree(root):
            if occurrence.key != key or occurrence.attribute is not None:
                continue
            parent = occurrence.node.parent
            if isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
                return parent
        return None

    # =========================================================================
    # Swap
    # =========================================================================

    def swap(self, template: str, key_a: str, key_b: str) -> SwapResult:
        """Exchange the positions of the repeatable elements holding two keys.

        Other siblings keep their positions and no key is renamed.

        Args:
            template: The HTML template.
            key_a: A key inside the first element.
            key_b: A key inside the second element.

        Returns:
            SwapResult; ``swapped`` is False when both keys share an element.

        Raises:
            TemplateParseError: If the template can't be parsed.
            PlaceholderNotFoundError: If either key isn't in the template.
            AnchorNotFoundError: If either key isn't in a repeatable element.
            CrossListSwapError: If the elements have different parents.
        """
        if key_a == key_b:
            return SwapResult(template=template, swapped=False)

        root = dom.parse(template)
        occurrences = self._scanner.scan_tree(root)

        for key in (key_a, key_b):
            if self._scanner.first_occurrence(occurrences, key) is None:
                raise PlaceholderNotFoundError(key)

        anchors = []
        for key in (key_a, key_b):
            anchor = self._inferrer.find_anchor(self._scanner.first_occurrence(occurrences, key))
            if anchor is None:
                raise AnchorNotFoundError(
                    key, "Could not identify the list structure for these items."
                )
            anchors.append(anchor)

        anchor_a, anchor_b = anchors
        if anchor_a is anchor_b:
            return SwapResult(template=template, swapped=False)

        if anchor_a.parent is not anchor_b.parent:
            logger.info(f"Rejected swap of '{key_a}' and '{key_b}': different lists")
            raise CrossListSwapError(key_a, key_b)

        marker = root.new_tag("span")
        anchor_a.replace_with(marker)
        anchor_b.replace_with(anchor_a)
        marker.replace_with(anchor_b)

        logger.info(f"Swapped elements holding '{key_a}' and '{key_b}'")
        return SwapResult(template=dom.serialize(root), swapped=True)

    def _anchor_for(self, occurrences: list[PlaceholderOccurrence], key: str) -> Tag:
        occurrence = self._scanner.first_occurrence(occurrences, key)
        if occurrence is None:
            raise PlaceholderNotFoundError(key)

        anchor = self._inferrer.find_anchor(occurrence)
        if anchor is None:
            raise AnchorNotFoundError(key)
        return anchor
