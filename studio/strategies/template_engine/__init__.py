"""Template engine strategies.

Implements placeholder scanning, state reconciliation, repeatable group
inference, structural edits and theme rewriting for HTML templates.
"""

from studio.strategies.template_engine.fields import (
    display_groups,
    normalize_link_value,
    ordered_keys,
)
from studio.strategies.template_engine.grouping import GroupInferrer
from studio.strategies.template_engine.mutator import TemplateMutator
from studio.strategies.template_engine.reconciler import StateReconciler, StrictReconciler
from studio.strategies.template_engine.scanner import PlaceholderScanner
from studio.strategies.template_engine.theme import (
    ThemeRewriter,
    rgb_to_hex,
    utility_to_hex,
)

__all__ = [
    "PlaceholderScanner",
    "StateReconciler",
    "StrictReconciler",
    "GroupInferrer",
    "TemplateMutator",
    "ThemeRewriter",
    "ordered_keys",
    "display_groups",
    "normalize_link_value",
    "rgb_to_hex",
    "utility_to_hex",
]
