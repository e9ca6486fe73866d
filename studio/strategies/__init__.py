"""Concrete strategy implementations."""

from studio.strategies.blueprint import (
    DEFAULT_BLUEPRINT,
    Blueprint,
    build_architect_prompt,
    parse_blueprint,
)
from studio.strategies.preview import (
    PreviewHost,
    PreviewHub,
    PreviewRenderer,
    RenderContext,
)
from studio.strategies.template_engine import (
    GroupInferrer,
    PlaceholderScanner,
    StateReconciler,
    StrictReconciler,
    TemplateMutator,
    ThemeRewriter,
)

__all__ = [
    "PlaceholderScanner",
    "StateReconciler",
    "StrictReconciler",
    "GroupInferrer",
    "TemplateMutator",
    "ThemeRewriter",
    "PreviewRenderer",
    "PreviewHost",
    "PreviewHub",
    "RenderContext",
    "Blueprint",
    "DEFAULT_BLUEPRINT",
    "parse_blueprint",
    "build_architect_prompt",
]
