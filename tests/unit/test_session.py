"""Unit tests for the editing session, its history and debouncing."""

import asyncio

import pytest

import studio
from studio.session import Debouncer, EditorSession, TemplateHistory


LIST_TEMPLATE = "<h1>{{title}}</h1><ul><li>{{item_a}}</li><li>{{item_b}}</li></ul>"


def test_session_api_exported_from_package():
    assert studio.EditorSession is EditorSession
    assert studio.Debouncer is Debouncer
    assert studio.TemplateHistory is TemplateHistory


# =============================================================================
# Debouncer Tests
# =============================================================================


class TestDebouncer:
    """Test suite for Debouncer."""

    def test_runs_immediately_without_loop(self):
        calls = []
        Debouncer(1.0, lambda: calls.append(1)).trigger()
        assert calls == [1]

    def test_coalesces_bursts(self):
        async def run_test():
            calls = []
            debouncer = Debouncer(0.05, lambda: calls.append(1))

            for _ in range(5):
                debouncer.trigger()
                await asyncio.sleep(0.01)
            assert calls == []
            assert debouncer.pending

            await asyncio.sleep(0.1)
            assert calls == [1]
            assert not debouncer.pending

        asyncio.run(run_test())

    def test_flush_and_cancel(self):
        async def run_test():
            calls = []
            debouncer = Debouncer(10.0, lambda: calls.append(1))

            debouncer.trigger()
            assert debouncer.flush()
            assert calls == [1]
            assert not debouncer.flush()

            debouncer.trigger()
            debouncer.cancel()
            assert not debouncer.pending
            assert calls == [1]

        asyncio.run(run_test())

    def test_callback_errors_are_contained(self):
        async def run_test():
            def boom():
                raise RuntimeError("boom")

            debouncer = Debouncer(0.01, boom)
            debouncer.trigger()
            await asyncio.sleep(0.05)
            assert not debouncer.pending

        asyncio.run(run_test())


# =============================================================================
# History Tests
# =============================================================================


class TestTemplateHistory:
    """Test suite for TemplateHistory."""

    def test_undo_redo(self):
        history = TemplateHistory("a")
        history.push("b")
        history.push("c")

        assert history.undo() == "b"
        assert history.undo() == "a"
        assert history.undo() is None
        assert history.redo() == "b"
        assert history.current == "b"

    def test_push_truncates_redo(self):
        history = TemplateHistory("a")
        history.push("b")
        history.undo()
        history.push("c")

        assert not history.can_redo
        assert len(history) == 2
        assert history.undo() == "a"

    def test_identical_push_ignored(self):
        history = TemplateHistory("a")
        assert not history.push("a")
        assert len(history) == 1

    def test_limit_drops_oldest(self):
        history = TemplateHistory("0", limit=3)
        for value in "1234":
            history.push(value)

        assert len(history) == 3
        assert history.current == "4"
        assert history.undo() == "3"
        assert history.undo() == "2"
        assert history.undo() is None

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            TemplateHistory("", limit=0)


# =============================================================================
# Editor Session Tests
# =============================================================================


class TestEditorSession:
    """Test suite for EditorSession."""

    @pytest.fixture
    def make_session(self, factory, clock):
        def build(template="", state=None):
            return EditorSession(template, state, factory=factory, clock=clock)

        return build

    # =========================================================================
    # Loading & Editing Tests
    # =========================================================================

    def test_reconciles_on_load(self, make_session):
        session = make_session("<h1>{{title}}</h1>", {})

        assert session.state == {"title": "[title]"}
        assert session.field_groups() == [["title"]]

    def test_edit_keeps_renamed_value(self, make_session):
        session = make_session("<h1>{{title}}</h1>", {"title": "Hello"})

        assert session.edit_template("<h1>{{title2}}</h1>")
        assert session.state == {"title2": "Hello"}
        assert session.last_reconcile.migrations[0].old_key == "title"

    def test_edit_same_template_is_noop(self, make_session):
        session = make_session("<p>{{a}}</p>", {})
        assert not session.edit_template("<p>{{a}}</p>")

    def test_undo_redo_template(self, make_session):
        session = make_session("<h1>{{title}}</h1>", {"title": "Hello"})
        session.edit_template("<h1>{{title2}}</h1>")

        assert session.undo()
        assert session.template == "<h1>{{title}}</h1>"
        assert session.state == {"title": "Hello"}

        assert session.redo()
        assert session.template == "<h1>{{title2}}</h1>"
        assert not session.redo()

    def test_commit_value_normalizes_links(self, make_session):
        session = make_session('<a href="{{websiteUrl}}">{{label}}</a>', {})
        session.set_value("websiteUrl", "example.com")

        assert session.commit_value("websiteUrl") == "https://example.com"
        assert session.state["websiteUrl"] == "https://example.com"

    def test_field_groups_fall_back_to_state_keys(self, make_session):
        session = make_session("<p>plain</p>", {"custom": "kept"})
        assert session.field_groups() == [["custom"]]

    def test_listeners_notified(self, make_session):
        session = make_session("<p>{{a}}</p>", {})
        seen = []
        unsubscribe = session.subscribe(lambda s: seen.append(s.template))

        session.edit_template("<p>{{b}}</p>")
        assert seen and seen[-1] == "<p>{{b}}</p>"

        unsubscribe()
        count = len(seen)
        session.set_value("b", "x")
        assert len(seen) == count

    def test_debounced_reconcile(self, factory, clock):
        """Inside an event loop, state catches up after the quiet period."""

        async def run_test():
            session = EditorSession("<p>{{a}}</p>", {}, factory=factory, clock=clock)
            session.edit_template("<p>{{a}}</p><p>{{b}}</p>")
            assert "b" not in session.state

            await asyncio.sleep(0.15)
            assert session.state == {"a": "[a]", "b": "[b]"}
            assert session.field_groups() == [["a"], ["b"]]
            session.close()

        asyncio.run(run_test())

    def test_flush_runs_pending_passes(self, factory, clock):
        async def run_test():
            session = EditorSession("", {}, factory=factory, clock=clock)
            session.edit_template("<p>{{x}}</p>")
            session.flush()

            assert session.state == {"x": "[x]"}
            session.close()

        asyncio.run(run_test())

    # =========================================================================
    # Structural Edit Tests
    # =========================================================================

    def test_duplicate(self, make_session):
        session = make_session(LIST_TEMPLATE, {"title": "T", "item_a": "A", "item_b": "B"})
        result = session.duplicate("item_b")

        assert result is not None
        new_key = result.key_map["item_b"]
        assert session.state[new_key] == ""
        assert session.template.count("<li>") == 3
        assert session.notice.message == "Duplicated item!"
        assert session.consume_focus() == new_key
        assert session.consume_focus() is None
        assert [new_key] in session.field_groups()

    def test_duplicate_standalone_shows_notice(self, make_session):
        session = make_session(LIST_TEMPLATE, {})
        template = session.template

        assert session.duplicate("title") is None
        assert session.template == template
        assert session.notice.message == "Placeholder 'title' is not part of a list."

    def test_notice_expires(self, make_session, clock):
        session = make_session(LIST_TEMPLATE, {})
        session.duplicate("title")

        clock.advance(1.9)
        assert session.notice is not None
        clock.advance(0.2)
        assert session.notice is None

    def test_delete_and_undo(self, make_session):
        state = {"title": "T", "item_a": "A", "item_b": "B"}
        session = make_session(LIST_TEMPLATE, state)

        session.delete("item_a")
        assert "{{item_a}}" not in session.template
        assert "item_a" not in session.state
        assert session.notice.message == 'Deleted variable "item_a"'
        assert session.notice.undoable

        assert session.undo_delete()
        assert session.template == LIST_TEMPLATE
        assert session.state == state
        assert session.notice is None

    def test_second_delete_replaces_undo_slot(self, make_session):
        """Only the most recent delete can be undone."""
        session = make_session("<ul><li>{{a}}</li><li>{{b}}</li></ul>", {"a": "A", "b": "B"})

        session.delete("a")
        session.delete("b")
        assert session.notice.message == 'Deleted variable "b"'

        assert session.undo_delete()
        assert session.template == "<ul><li>{{b}}</li></ul>"
        assert session.state == {"b": "B"}
        assert not session.undo_delete()

    def test_undo_delete_window(self, make_session, clock):
        session = make_session(LIST_TEMPLATE, {})
        session.delete("item_a")

        clock.advance(3.5)
        assert not session.can_undo_delete
        assert not session.undo_delete()
        assert "{{item_a}}" not in session.template

    def test_swap(self, make_session):
        session = make_session(LIST_TEMPLATE, {})
        result = session.swap("item_a", "item_b")

        assert result.swapped
        assert session.template == "<h1>{{title}}</h1><ul><li>{{item_b}}</li><li>{{item_a}}</li></ul>"

    def test_swap_across_lists_shows_notice(self, make_session):
        session = make_session("<ul><li>{{a}}</li></ul><ol><li>{{b}}</li></ol>", {})

        assert session.swap("a", "b") is None
        assert session.notice.message == "Items must be in the same list to reorder."

    # =========================================================================
    # Theme Edit Tests
    # =========================================================================

    def test_rewrite_theme(self, make_session):
        session = make_session('<div class="bg-white">{{a}}</div>', {})
        session.rewrite_theme("bg-white", "bg-zinc-900")

        assert session.template == '<div class="bg-zinc-900">{{a}}</div>'
        assert session.palette().bg == ["bg-zinc-900"]
        assert session.undo()

    def test_page_font(self, make_session):
        session = make_session("<p>{{a}}</p>", {})

        assert session.set_page_font("Nunito")
        assert session.template.startswith('<style id="site-font">')
        assert not session.set_page_font("Nunito")

    def test_element_style(self, make_session):
        session = make_session("<div><p>{{a}}</p></div>", {})

        assert session.update_element_style("0.0", "color", "#ff0000")
        assert '<p style="color: #ff0000;">' in session.template

        assert not session.update_element_style("5", "color", "#ff0000")
        assert session.notice.message == "No element at path '5'."
