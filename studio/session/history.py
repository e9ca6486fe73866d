"""Bounded linear undo/redo history of template snapshots."""

import logging

logger = logging.getLogger(__name__)


class TemplateHistory:
    """Template snapshots with a cursor.

    Pushing a new snapshot drops everything after the cursor. When the
    limit is exceeded the oldest snapshot is discarded.
    """

    def __init__(self, initial: str, limit: int = 100) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._entries = [initial]
        self._cursor = 0
        self._limit = limit

    @property
    def current(self) -> str:
        return self._entries[self._cursor]

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, template: str) -> bool:
        """Record a new snapshot after the cursor.

        Returns:
            False if ``template`` equals the current snapshot.
        """
        if template == self.current:
            return False

        del self._entries[self._cursor + 1 :]
        self._entries.append(template)
        if len(self._entries) > self._limit:
            del self._entries[0]
        self._cursor = len(self._entries) - 1
        return True

    def undo(self) -> str | None:
        """Step back; returns the restored snapshot, or None at the start."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self.current

    def redo(self) -> str | None:
        """Step forward; returns the restored snapshot, or None at the end."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self.current
