"""Editing session.

Holds one project's template and state while it is being edited, and
wires the template engine together: template edits are reconciled and
regrouped after a quiet period, structural edits apply immediately, and
lookup failures become short-lived notices instead of errors.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from studio.core.config import Settings
from studio.core.factory import ComponentFactory, get_factory
from studio.interfaces.template import TemplateEngineError, TemplateSnapshot
from studio.session.debounce import Debouncer
from studio.session.history import TemplateHistory
from studio.strategies.template_engine.fields import (
    display_groups,
    normalize_link_value,
    ordered_keys,
)
from studio.strategies.template_engine.models import (
    DeleteResult,
    DuplicateResult,
    FieldGroup,
    GroupingResult,
    ReconcileResult,
    SwapResult,
    ThemePalette,
    ThemeRewriteResult,
)

logger = logging.getLogger(__name__)


Listener = Callable[["EditorSession"], Any]


@dataclass(frozen=True)
class Notice:
    """A transient message for the user.

    Attributes:
        message: Text to show.
        expires_at: Clock time after which the notice is hidden.
        undoable: Whether the notice offers to undo a delete.
    """

    message: str
    expires_at: float
    undoable: bool = False


class EditorSession:
    """Single-project editing session.

    All methods are meant to be called from one thread. When an event loop
    is running, reconciliation and regrouping are debounced on it; without
    one they run as soon as the template changes.
    """

    def __init__(
        self,
        template: str = "",
        state: dict[str, Any] | None = None,
        factory: ComponentFactory | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the session and reconcile the loaded pair once.

        Args:
            template: The loaded template.
            state: The loaded state.
            factory: Source of engine components. If None, uses the global one.
            settings: Session timings. If None, uses the factory's settings.
            clock: Monotonic clock used for notice and undo expiry.
        """
        factory = factory or get_factory()
        self._settings = settings or factory.settings
        self._scanner = factory.get_scanner()
        self._reconciler = factory.get_reconciler()
        self._inferrer = factory.get_group_inferrer()
        self._mutator = factory.get_mutator()
        self._theme = factory.get_theme_rewriter()
        self._clock = clock

        self._template = template
        self._state: dict[str, Any] = dict(state or {})
        self._history = TemplateHistory(template, limit=self._settings.history_limit)
        self._groups: list[FieldGroup] = []
        self._repeatable_keys: list[str] = []
        self._notice: Notice | None = None
        self._undo_slot: TemplateSnapshot | None = None
        self._undo_expires_at = 0.0
        self._listeners: list[Listener] = []
        self.focus_key: str | None = None
        self.last_reconcile: ReconcileResult | None = None

        self._reconcile_timer = Debouncer(
            self._settings.reconcile_debounce_seconds, self.reconcile, name="reconcile"
        )
        self._grouping_timer = Debouncer(
            self._settings.grouping_debounce_seconds, self.regroup, name="grouping"
        )

        self.reconcile()
        self.regroup()

    # =========================================================================
    # Read Access
    # =========================================================================

    @property
    def template(self) -> str:
        return self._template

    @property
    def state(self) -> dict[str, Any]:
        return dict(self._state)

    @property
    def history(self) -> TemplateHistory:
        return self._history

    @property
    def groups(self) -> list[FieldGroup]:
        return list(self._groups)

    @property
    def repeatable_keys(self) -> list[str]:
        return list(self._repeatable_keys)

    @property
    def notice(self) -> Notice | None:
        """The visible notice, or None once it has expired."""
        if self._notice is not None and self._clock() >= self._notice.expires_at:
            self._notice = None
        return self._notice

    @property
    def can_undo_delete(self) -> bool:
        return self._undo_slot is not None and self._clock() < self._undo_expires_at

    def snapshot(self) -> TemplateSnapshot:
        """Current template and a copy of the state."""
        return TemplateSnapshot(template=self._template, state=dict(self._state))

    def field_groups(self) -> list[list[str]]:
        """Keys as the form shows them: inferred groups, else one row per key."""
        return display_groups(self._groups, ordered_keys(self._template, self._state))

    def palette(self) -> ThemePalette:
        return self._theme.detect_palette(self._template)

    def consume_focus(self) -> str | None:
        """Return and clear the key the form should focus next."""
        key, self.focus_key = self.focus_key, None
        return key

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Template & State Edits
    # =========================================================================

    def edit_template(self, template: str) -> bool:
        """Replace the template, as the code editor does on every keystroke.

        Returns:
            False if the template didn't change.
        """
        return self._apply_template(template)

    def set_value(self, key: str, value: Any) -> None:
        """Set a field value from the form."""
        self._state = {**self._state, key: value}
        self._emit()

    def commit_value(self, key: str) -> Any:
        """Finish editing a field; link-like values get a scheme.

        Returns:
            The committed value.
        """
        value = self._state.get(key)
        normalized = normalize_link_value(key, value)
        if normalized != value:
            self.set_value(key, normalized)
        return normalized

    def undo(self) -> bool:
        """Step back through template history."""
        template = self._history.undo()
        if template is None:
            return False
        self._set_template(template)
        return True

    def redo(self) -> bool:
        """Step forward through template history."""
        template = self._history.redo()
        if template is None:
            return False
        self._set_template(template)
        return True

    # =========================================================================
    # Derived Passes
    # =========================================================================

    def reconcile(self) -> ReconcileResult:
        """Bring the state in line with the keys in the template now."""
        result = self._reconciler.reconcile(self._scanner.find_keys(self._template), self._state)
        self.last_reconcile = result
        if result.changed:
            self._state = result.state
            self._emit()
        return result

    def regroup(self) -> GroupingResult:
        """Recompute field groups from the template now."""
        result = self._inferrer.infer(self._template)
        self._groups = result.groups
        self._repeatable_keys = result.repeatable_keys
        self._emit()
        return result

    def flush(self) -> None:
        """Run any pending reconciliation and regrouping immediately."""
        self._reconcile_timer.flush()
        self._grouping_timer.flush()

    def close(self) -> None:
        """Cancel pending passes and drop listeners."""
        self._reconcile_timer.cancel()
        self._grouping_timer.cancel()
        self._listeners.clear()

    # =========================================================================
    # Structural Edits
    # =========================================================================

    def duplicate(self, key: str) -> DuplicateResult | None:
        """Duplicate the repeatable element holding ``key``.

        Returns:
            The result, or None if the key couldn't be duplicated. A notice
            explains why.
        """
        try:
            result = self._mutator.duplicate(self._template, self._state, key)
        except TemplateEngineError as e:
            logger.info(f"Duplicate of '{key}' rejected: {e}")
            self._show(str(e))
            return None

        self._state = result.state
        self._apply_template(result.template)
        self.focus_key = result.focus_key
        self._show("Duplicated item!")
        return result

    def delete(self, key: str) -> DeleteResult:
        """Delete a field and its element; can be undone for a short while."""
        result = self._mutator.delete(self._template, self._state, key)

        self._undo_slot = result.snapshot
        self._undo_expires_at = self._clock() + self._settings.undo_window_seconds
        self._state = result.state
        if not self._apply_template(result.template):
            self._emit()
        self._show(
            f'Deleted variable "{key}"',
            undoable=True,
            duration=self._settings.undo_window_seconds,
        )
        return result

    def undo_delete(self) -> bool:
        """Restore the template and state captured by the last delete.

        Returns:
            False if there is nothing to restore or the window has passed.
        """
        if not self.can_undo_delete:
            self._undo_slot = None
            return False

        snapshot, self._undo_slot = self._undo_slot, None
        self._notice = None
        self._state = dict(snapshot.state)
        if not self._apply_template(snapshot.template):
            self._emit()
        logger.info("Restored deleted field")
        return True

    def swap(self, key_a: str, key_b: str) -> SwapResult | None:
        """Exchange the list items holding two keys.

        Returns:
            The result, or None if the items can't be swapped. A notice
            explains why.
        """
        try:
            result = self._mutator.swap(self._template, key_a, key_b)
        except TemplateEngineError as e:
            logger.info(f"Swap of '{key_a}' and '{key_b}' rejected: {e}")
            self._show(str(e))
            return None

        if result.swapped:
            self._apply_template(result.template)
        return result

    # =========================================================================
    # Theme Edits
    # =========================================================================

    def rewrite_theme(self, old: str, new: str) -> ThemeRewriteResult:
        """Replace a colour, utility class or font everywhere."""
        result = self._theme.rewrite(self._template, old, new)
        self._apply_template(result.template)
        return result

    def set_page_font(self, font: str) -> bool:
        """Set or clear the page-wide font."""
        return self._apply_template(self._theme.set_page_font(self._template, font))

    def update_element_style(self, path: str, prop: str, value: str) -> bool:
        """Set an inline colour on the element selected in the preview.

        Returns:
            False if the element couldn't be found; a notice explains why.
        """
        try:
            template = self._theme.apply_element_style(self._template, path, prop, value)
        except TemplateEngineError as e:
            logger.info(f"Style update at {path} rejected: {e}")
            self._show(str(e))
            return False
        return self._apply_template(template)

    # =========================================================================
    # Internals
    # =========================================================================

    def _apply_template(self, template: str) -> bool:
        if template == self._template:
            return False
        self._history.push(template)
        self._set_template(template)
        return True

    def _set_template(self, template: str) -> None:
        self._template = template
        self._emit()
        self._reconcile_timer.trigger()
        self._grouping_timer.trigger()

    def _show(self, message: str, undoable: bool = False, duration: float | None = None) -> None:
        if duration is None:
            duration = self._settings.notice_seconds
        self._notice = Notice(
            message=message,
            expires_at=self._clock() + duration,
            undoable=undoable,
        )
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self)
