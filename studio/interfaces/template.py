"""Template engine interfaces.

Defines the abstract base classes for the template/state reconciliation
engine and the exceptions its strategies raise.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


# =============================================================================
# Exceptions
# =============================================================================


class TemplateEngineError(Exception):
    """Base class for template engine failures scoped to one operation."""


class TemplateParseError(TemplateEngineError):
    """The template could not be parsed into an element tree."""


class PlaceholderNotFoundError(TemplateEngineError):
    """No occurrence of a placeholder key exists in the template."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Could not find placeholder '{key}' in the template.")
        self.key = key


class AnchorNotFoundError(TemplateEngineError):
    """A placeholder is not inside any repeatable element."""

    def __init__(self, key: str, message: str | None = None) -> None:
        super().__init__(message or f"Placeholder '{key}' is not part of a list.")
        self.key = key


class CrossListSwapError(TemplateEngineError):
    """Two repeatable elements do not share a parent and cannot be swapped."""

    def __init__(self, key_a: str, key_b: str) -> None:
        super().__init__("Items must be in the same list to reorder.")
        self.key_a = key_a
        self.key_b = key_b


class ElementNotFoundError(TemplateEngineError):
    """No element exists at a preview path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No element at path '{path}'.")
        self.path = path


class BlueprintError(ValueError):
    """A project blueprint is missing required keys or is not valid JSON."""


# =============================================================================
# Value Types
# =============================================================================


@dataclass(frozen=True)
class PlaceholderOccurrence:
    """One placeholder found by a scan.

    Attributes:
        key: The placeholder key, without braces or whitespace.
        node: The parsed node holding the placeholder. A text node for
            text occurrences, the element itself for attribute occurrences.
        attribute: Attribute name for attribute occurrences, else None.
        token: The placeholder exactly as written, e.g. "{{ title }}".
    """

    key: str
    node: Any
    attribute: str | None
    token: str

    @property
    def is_encoded(self) -> bool:
        """Whether the placeholder uses the percent-encoded spelling."""
        return self.token.startswith("%")


@dataclass(frozen=True)
class TemplateSnapshot:
    """A template together with the state it was paired with."""

    template: str
    state: dict[str, Any]


# =============================================================================
# Strategy Interfaces
# =============================================================================


class BasePlaceholderScanner(ABC):
    """Finds placeholder occurrences in a template."""

    @abstractmethod
    def scan(self, template: str) -> list[PlaceholderOccurrence]:
        """Return every placeholder occurrence in document order.

        Args:
            template: The HTML template.

        Returns:
            Occurrences in depth-first, pre-order document order. An
            element's attribute occurrences precede its children's.
        """

    def find_keys(self, template: str) -> list[str]:
        """Return the unique placeholder keys in order of first appearance."""
        seen: dict[str, None] = {}
        for occurrence in self.scan(template):
            seen.setdefault(occurrence.key, None)
        return list(seen)


class BaseStateReconciler(ABC):
    """Derives the next state from the keys present in a template."""

    @abstractmethod
    def reconcile(self, found_keys: list[str], state: dict[str, Any]) -> Any:
        """Reconcile a state dictionary against the keys found in a template.

        Args:
            found_keys: Unique keys in template order.
            state: The current state. Never mutated.

        Returns:
            A ReconcileResult describing the next state.
        """


class BaseGroupInferrer(ABC):
    """Infers which placeholders belong to the same repeatable element."""

    @abstractmethod
    def infer(self, template: str) -> Any:
        """Group placeholder keys by their repeatable anchor element.

        Args:
            template: The HTML template.

        Returns:
            A GroupingResult with ordered groups and the repeatable keys.
        """


class BaseTemplateMutator(ABC):
    """Structural template transforms driven by placeholder keys."""

    @abstractmethod
    def duplicate(self, template: str, state: dict[str, Any], key: str) -> Any:
        """Clone the repeatable element holding ``key`` with fresh keys."""

    @abstractmethod
    def delete(self, template: str, state: dict[str, Any], key: str) -> Any:
        """Remove ``key`` from the state and its element from the template."""

    @abstractmethod
    def swap(self, template: str, key_a: str, key_b: str) -> Any:
        """Exchange the positions of the repeatable elements holding two keys."""


class BaseThemeRewriter(ABC):
    """Global theme token substitution over raw template text."""

    @abstractmethod
    def rewrite(self, template: str, old: str, new: str) -> Any:
        """Replace a theme token everywhere it occurs.

        Args:
            template: The HTML template.
            old: The token currently used (font, utility class or colour).
            new: The replacement value.

        Returns:
            A ThemeRewriteResult with the new template.
        """
