"""Template engine domain models.

Pydantic models returned by the template engine strategies.
These live here to avoid circular imports with the API layer.
"""

import enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from studio.interfaces.template import TemplateSnapshot


def default_value(key: str) -> str:
    """Return the auto-generated display value for a new key."""
    return f"[{key}]"


# =============================================================================
# Reconciliation
# =============================================================================


class KeyMigration(BaseModel):
    """A value moved from a vanished key to a newly found one."""

    old_key: str
    new_key: str
    confidence: Literal["substring", "sole_candidate"] = Field(
        description="'substring' when one key contains the other, "
        "'sole_candidate' when the old key was the only one left"
    )


class ReconcileResult(BaseModel):
    """Outcome of one reconciliation pass."""

    state: dict[str, Any]
    added: list[str] = Field(default_factory=list, description="Keys given a default value")
    pruned: list[str] = Field(default_factory=list, description="Unused default keys removed")
    retained: list[str] = Field(
        default_factory=list,
        description="Vanished keys kept because their value was customised",
    )
    migrations: list[KeyMigration] = Field(default_factory=list)
    ambiguous: bool = Field(
        default=False,
        description="New keys and customised vanished keys both remain unmatched",
    )
    changed: bool = False


# =============================================================================
# Grouping
# =============================================================================


class FieldGroup(BaseModel):
    """Keys sharing one repeatable anchor element, in document order."""

    keys: list[str]
    anchor_path: str | None = Field(
        default=None, description="Body path of the anchor; None for standalone keys"
    )

    @property
    def is_repeatable(self) -> bool:
        return self.anchor_path is not None


class GroupingResult(BaseModel):
    """Field groups inferred from a template."""

    groups: list[FieldGroup] = Field(default_factory=list)
    repeatable_keys: list[str] = Field(
        default_factory=list,
        description="Keys with at least one occurrence inside a repeatable anchor",
    )

    def key_lists(self) -> list[list[str]]:
        return [group.keys for group in self.groups]


# =============================================================================
# Structural Mutations
# =============================================================================


class DuplicateResult(BaseModel):
    """Outcome of duplicating a repeatable element."""

    template: str
    state: dict[str, Any]
    key_map: dict[str, str] = Field(description="Original key -> key used in the clone")
    focus_key: str | None = Field(default=None, description="First new key, for auto-focus")


class DeleteResult(BaseModel):
    """Outcome of deleting a field."""

    template: str
    state: dict[str, Any]
    removed_element: bool = Field(
        description="True if an element was removed, False if only the token text was"
    )
    snapshot: TemplateSnapshot = Field(description="Template and state before the delete")


class SwapResult(BaseModel):
    """Outcome of reordering two repeatable elements."""

    template: str
    swapped: bool


# =============================================================================
# Theme
# =============================================================================


class ThemeTokenKind(str, enum.Enum):
    """How a theme token was classified for replacement."""

    TYPOGRAPHY = "typography"
    UTILITY_CLASS = "utility_class"
    RAW_COLOR = "raw_color"
    LITERAL = "literal"
    NOOP = "noop"


class ThemeRewriteResult(BaseModel):
    """Outcome of a global theme token rewrite."""

    template: str
    kind: ThemeTokenKind
    replacements: int = 0


class ThemePalette(BaseModel):
    """Theme tokens currently used by a template."""

    bg: list[str] = Field(default_factory=list)
    text: list[str] = Field(default_factory=list)
    border: list[str] = Field(default_factory=list)
    fonts: list[str] = Field(default_factory=list)
