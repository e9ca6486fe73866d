"""Abstract base classes for the editor's strategies and collaborators."""

from studio.interfaces.preview import BasePreviewChannel, ChannelClosedError, InvalidMessageError
from studio.interfaces.store import (
    BaseProjectStore,
    ProjectNotFoundError,
    ProjectRecord,
    StoreError,
)
from studio.interfaces.template import (
    AnchorNotFoundError,
    BaseGroupInferrer,
    BasePlaceholderScanner,
    BaseStateReconciler,
    BaseTemplateMutator,
    BaseThemeRewriter,
    BlueprintError,
    CrossListSwapError,
    ElementNotFoundError,
    PlaceholderNotFoundError,
    PlaceholderOccurrence,
    TemplateEngineError,
    TemplateParseError,
    TemplateSnapshot,
)

__all__ = [
    "BasePlaceholderScanner",
    "BaseStateReconciler",
    "BaseGroupInferrer",
    "BaseTemplateMutator",
    "BaseThemeRewriter",
    "BasePreviewChannel",
    "BaseProjectStore",
    "PlaceholderOccurrence",
    "TemplateSnapshot",
    "ProjectRecord",
    "TemplateEngineError",
    "TemplateParseError",
    "PlaceholderNotFoundError",
    "AnchorNotFoundError",
    "CrossListSwapError",
    "ElementNotFoundError",
    "BlueprintError",
    "ChannelClosedError",
    "InvalidMessageError",
    "StoreError",
    "ProjectNotFoundError",
]
