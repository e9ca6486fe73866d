"""State reconciler strategy.

Derives the next state dictionary from the keys currently present in the
template: new keys get a default value, renamed keys keep the value the user
typed, and untouched defaults whose key disappeared are dropped.
"""

import logging
from typing import Any

from studio.interfaces.template import BaseStateReconciler
from studio.strategies.template_engine.models import (
    KeyMigration,
    ReconcileResult,
    default_value,
)

logger = logging.getLogger(__name__)


def is_default_value(key: str, value: Any) -> bool:
    """Whether ``value`` is still the auto-generated default for ``key``."""
    return value == default_value(key)


class StateReconciler(BaseStateReconciler):
    """Reconciles state with rename detection.

    A vanished key whose value was customised is treated as renamed to a
    newly found key when either key contains the other, or when it is the
    only vanished key left. First match wins and each vanished key is used
    at most once. This is a heuristic: two simultaneous renames without a
    substring relation are left unmigrated and flagged as ambiguous, and
    the customised values are kept under their old keys.
    """

    migrate_renames = True

    def reconcile(self, found_keys: list[str], state: dict[str, Any]) -> ReconcileResult:
        """Reconcile ``state`` against the keys found in the template.

        Args:
            found_keys: Keys in template order. Duplicates are ignored.
            state: The current state. Never mutated.

        Returns:
            ReconcileResult holding the next state and what changed.
        """
        found = list(dict.fromkeys(found_keys))
        found_set = set(found)
        next_state = dict(state)

        added = [key for key in found if key not in state]
        removed = [key for key in state if key not in found_set]

        migrations: list[KeyMigration] = []
        if self.migrate_renames and added and removed:
            for new_key in added:
                source = self._find_rename_source(new_key, removed, next_state)
                if source is None:
                    continue

                old_key, confidence = source
                next_state[new_key] = next_state.pop(old_key)
                removed.remove(old_key)
                migrations.append(
                    KeyMigration(old_key=old_key, new_key=new_key, confidence=confidence)
                )

                if confidence == "sole_candidate":
                    logger.warning(
                        f"Low-confidence rename: moved value of '{old_key}' to '{new_key}' "
                        f"(only vanished key left)"
                    )
                else:
                    logger.debug(f"Rename detected: '{old_key}' -> '{new_key}'")

        defaulted: list[str] = []
        for key in found:
            if key not in next_state:
                next_state[key] = default_value(key)
                defaulted.append(key)

        pruned = [key for key in removed if is_default_value(key, next_state[key])]
        for key in pruned:
            del next_state[key]
        retained = [key for key in removed if key not in pruned]

        ambiguous = bool(defaulted and retained)
        if ambiguous:
            logger.warning(
                f"Ambiguous rename: no migration for new keys {defaulted}; "
                f"customised values kept under {retained}"
            )

        changed = bool(migrations or defaulted or pruned)
        if changed:
            logger.info(
                f"State reconciled: {len(defaulted)} added, {len(migrations)} migrated, "
                f"{len(pruned)} pruned, {len(retained)} retained"
            )

        return ReconcileResult(
            state=next_state if changed else dict(state),
            added=defaulted,
            pruned=pruned,
            retained=retained,
            migrations=migrations,
            ambiguous=ambiguous,
            changed=changed,
        )

    def _find_rename_source(
        self, new_key: str, removed: list[str], state: dict[str, Any]
    ) -> tuple[str, str] | None:
        """Pick the vanished key whose value should move to ``new_key``."""
        for old_key in removed:
            if is_default_value(old_key, state[old_key]):
                continue
            if old_key in new_key or new_key in old_key:
                return old_key, "substring"
            if len(removed) == 1:
                return old_key, "sole_candidate"
        return None


class StrictReconciler(StateReconciler):
    """Reconciles state without rename detection.

    New keys always start from their default value; customised values of
    vanished keys are retained and never moved.
    """

    migrate_renames = False
