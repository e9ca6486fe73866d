"""Preview renderer.

Produces the markup shown in the preview: every element is tagged with its
``data-path`` and every placeholder is replaced by its display value.
"""

import logging
from typing import Any

from bs4.element import Tag

from studio.interfaces.template import TemplateParseError
from studio.strategies.template_engine import dom

logger = logging.getLogger(__name__)


PATH_ATTRIBUTE = "data-path"


def display_value(value: Any) -> str:
    """Format a state value for the preview; missing values render empty."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PreviewRenderer:
    """Renders a template and state pair into preview markup."""

    def annotate(self, template: str) -> str:
        """Add a ``data-path`` attribute to every body element.

        Paths are dotted child indices from the body, e.g. ``"1.0.2"``, and
        resolve with ``dom.find_by_path`` against the same template.

        Args:
            template: The HTML template.

        Returns:
            The annotated markup. An unparsable template is returned as is.
        """
        try:
            root = dom.parse(template)
        except TemplateParseError:
            logger.warning("Preview annotation skipped: template could not be parsed")
            return template

        for index, element in enumerate(dom.body_children(root)):
            self._add_paths(element, str(index))
        return dom.serialize(root)

    def _add_paths(self, element: Tag, path: str) -> None:
        element[PATH_ATTRIBUTE] = path
        for index, child in enumerate(dom.element_children(element)):
            self._add_paths(child, f"{path}.{index}")

    def substitute(self, markup: str, state: dict[str, Any]) -> str:
        """Replace every placeholder, in either spelling, with its value.

        Values are inserted as is, without escaping. Keys missing from the
        state render as the empty string.
        """
        return dom.PLACEHOLDER_PATTERN.sub(
            lambda match: display_value(state.get(match.group(1))), markup
        )

    def render(self, template: str, state: dict[str, Any]) -> str:
        """Annotate then substitute."""
        return self.substitute(self.annotate(template), state)
