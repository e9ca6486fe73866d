"""Editing session: debounced reconciliation, history and undo."""

from studio.session.debounce import Debouncer
from studio.session.editor import EditorSession, Notice
from studio.session.history import TemplateHistory

__all__ = [
    "Debouncer",
    "EditorSession",
    "Notice",
    "TemplateHistory",
]
