"""Template Studio.

Keeps an HTML template and a flat key/value state in sync so the template
can be edited through a generated form.

``EditorSession`` is the in-process editing API for embedding the engine in
a form UI: it debounces reconciliation and grouping after template edits,
keeps undo/redo history and the timed delete-undo slot. The HTTP app in
``studio.main`` exposes the same engine as stateless transforms instead.
"""

__version__ = "0.1.0"

from studio.session import Debouncer, EditorSession, Notice, TemplateHistory  # noqa: E402

__all__ = [
    "Debouncer",
    "EditorSession",
    "Notice",
    "TemplateHistory",
]
