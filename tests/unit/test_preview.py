"""Unit tests for the preview renderer, protocol, host and hub."""

import asyncio

import pytest
from bs4 import BeautifulSoup

from studio.interfaces.preview import ChannelClosedError, InvalidMessageError
from studio.interfaces.template import ElementNotFoundError, TemplateSnapshot
from studio.strategies.preview import (
    ElementSelected,
    IframeLoaded,
    PreviewHost,
    PreviewHub,
    PreviewRenderer,
    QueueChannel,
    RenderContext,
    SetSelectedPath,
    UpdateHtml,
    dump_message,
    parse_message,
)
from studio.strategies.template_engine import dom
from studio.strategies.template_engine.theme import ThemeRewriter


# =============================================================================
# Renderer Tests
# =============================================================================


class TestPreviewRenderer:
    """Test suite for PreviewRenderer."""

    @pytest.fixture
    def renderer(self):
        return PreviewRenderer()

    def test_annotate_adds_paths(self, renderer):
        markup = renderer.annotate("<div><h1>{{t}}</h1><p>x</p></div><footer></footer>")
        soup = BeautifulSoup(markup, "html.parser")

        assert soup.div["data-path"] == "0"
        assert soup.h1["data-path"] == "0.0"
        assert soup.p["data-path"] == "0.1"
        assert soup.footer["data-path"] == "1"

    def test_paths_resolve_against_template(self, renderer):
        """Every annotated path finds the same element in the template."""
        template = "<main><section><h2>A</h2><ul><li>1</li><li>2</li></ul></section></main>"
        soup = BeautifulSoup(renderer.annotate(template), "html.parser")
        root = dom.parse(template)

        for element in soup.find_all(attrs={"data-path": True}):
            found = dom.find_by_path(root, element["data-path"])
            assert found is not None
            assert found.name == element.name

    def test_site_font_block_not_numbered(self, renderer):
        template = ThemeRewriter().set_page_font("<div>x</div>", "Inter")
        soup = BeautifulSoup(renderer.annotate(template), "html.parser")

        assert soup.style.get("data-path") is None
        assert soup.div["data-path"] == "0"

    def test_substitute_both_spellings(self, renderer):
        markup = '<a href="%7B%7Burl%7D%7D">{{ label }}</a>'
        result = renderer.substitute(markup, {"url": "https://x.test", "label": "Go"})
        assert result == '<a href="https://x.test">Go</a>'

    @pytest.mark.parametrize(
        "value, expected",
        [(None, ""), (True, "true"), (False, "false"), (0, "0"), ("<b>hi</b>", "<b>hi</b>")],
    )
    def test_display_values(self, renderer, value, expected):
        assert renderer.substitute("{{v}}", {"v": value}) == expected

    def test_missing_key_renders_empty(self, renderer):
        assert renderer.substitute("<p>{{gone}}</p>", {}) == "<p></p>"

    def test_render_leaves_no_placeholders(self, renderer):
        template = '<h1>{{title}}</h1><img src="%7B%7Bpic%7D%7D"><p>{{missing}}</p>'
        rendered = renderer.render(template, {"title": "Hi", "pic": "a.png"})

        assert not dom.PLACEHOLDER_PATTERN.search(rendered)
        assert '<h1 data-path="0">Hi</h1>' in rendered


# =============================================================================
# Protocol Tests
# =============================================================================


class TestProtocol:
    """Test suite for message encoding."""

    def test_parse_element_selected(self):
        message = parse_message(
            '{"type": "ELEMENT_SELECTED", "path": "0.1", "tagName": "P", '
            '"color": "rgb(0, 0, 0)", "bgColor": "rgba(0, 0, 0, 0)", '
            '"fontFamily": "Inter", "classList": ["a"]}'
        )

        assert isinstance(message, ElementSelected)
        assert message.tag_name == "P"
        assert message.class_list == ["a"]

    def test_parse_dict(self):
        assert isinstance(parse_message({"type": "IFRAME_LOADED"}), IframeLoaded)

    def test_dump_uses_camel_case(self):
        message = ElementSelected(path="0", tag_name="DIV", bg_color="red")
        data = dump_message(message)

        assert data["type"] == "ELEMENT_SELECTED"
        assert data["tagName"] == "DIV"
        assert data["bgColor"] == "red"
        assert data["classList"] == []

    def test_dump_update_html(self):
        assert dump_message(UpdateHtml(html="<p>x</p>")) == {"type": "UPDATE_HTML", "html": "<p>x</p>"}

    def test_dump_cleared_selection(self):
        assert dump_message(SetSelectedPath()) == {"type": "SET_SELECTED_PATH", "path": None}

    @pytest.mark.parametrize(
        "data",
        ['{"type": "BOGUS"}', '{"type": "UPDATE_HTML"}', "not json", {"html": "x"}],
    )
    def test_invalid_messages(self, data):
        with pytest.raises(InvalidMessageError):
            parse_message(data)


# =============================================================================
# Channel Tests
# =============================================================================


class TestQueueChannel:
    """Test suite for QueueChannel."""

    def test_messages_cross_over(self):
        async def run_test():
            left, right = QueueChannel.pair()
            await left.send(IframeLoaded())
            assert isinstance(await right.receive(), IframeLoaded)

        asyncio.run(run_test())

    def test_close_wakes_both_ends(self):
        async def run_test():
            left, right = QueueChannel.pair()
            left.close()

            with pytest.raises(ChannelClosedError):
                await right.receive()
            with pytest.raises(ChannelClosedError):
                await left.receive()
            with pytest.raises(ChannelClosedError):
                await right.send(IframeLoaded())

        asyncio.run(run_test())


# =============================================================================
# Host & Context Tests
# =============================================================================


class TestPreviewHost:
    """Test suite for PreviewHost and RenderContext together."""

    def test_loaded_frame_receives_content(self):
        async def run_test():
            host_end, frame_end = QueueChannel.pair()
            host = PreviewHost(host_end, source=lambda: TemplateSnapshot("<p>{{name}}</p>", {"name": "Ann"}))
            context = RenderContext(frame_end)

            await context.announce()
            await host.handle(await host_end.receive())
            assert context.apply(await frame_end.receive())

            assert context.app_html == '<p data-path="0">Ann</p>'
            assert context.updates == 1

        asyncio.run(run_test())

    def test_push_renders_latest_snapshot(self):
        """Content is rendered when sent, not when the edit happened."""

        async def run_test():
            host_end, frame_end = QueueChannel.pair()
            current = {"snapshot": TemplateSnapshot("<p>{{v}}</p>", {"v": "old"})}
            host = PreviewHost(host_end, source=lambda: current["snapshot"])

            current["snapshot"] = TemplateSnapshot("<p>{{v}}</p>", {"v": "new"})
            assert await host.push()

            message = await frame_end.receive()
            assert message.html == '<p data-path="0">new</p>'

        asyncio.run(run_test())

    def test_selection_round_trip(self):
        async def run_test():
            host_end, frame_end = QueueChannel.pair()
            selections = []

            async def record(message):
                selections.append(message)

            host = PreviewHost(
                host_end,
                source=lambda: TemplateSnapshot('<ul class="list"><li>{{a}}</li></ul>', {"a": "x"}),
                on_select=record,
            )
            context = RenderContext(frame_end)

            await host.push()
            context.apply(await frame_end.receive())

            sent = await context.select("0.0")
            await host.handle(await host_end.receive())
            assert context.apply(await frame_end.receive())

            assert selections == [sent]
            assert sent.tag_name == "LI"
            assert host.selected_path == "0.0"
            assert context.selected_path == "0.0"

        asyncio.run(run_test())

    def test_push_after_frame_closed(self):
        async def run_test():
            host_end, frame_end = QueueChannel.pair()
            host = PreviewHost(host_end, source=lambda: TemplateSnapshot("", {}))

            frame_end.close()
            assert not await host.push()
            assert host.closed

        asyncio.run(run_test())

    def test_run_until_closed(self):
        async def run_test():
            host_end, frame_end = QueueChannel.pair()
            host = PreviewHost(host_end, source=lambda: TemplateSnapshot("<h1>{{t}}</h1>", {"t": "Hi"}))
            context = RenderContext(frame_end)

            host_task = asyncio.create_task(host.run())
            context_task = asyncio.create_task(context.run())
            for _ in range(100):
                if context.updates:
                    break
                await asyncio.sleep(0.01)

            assert context.app_html == '<h1 data-path="0">Hi</h1>'

            frame_end.close()
            await asyncio.wait_for(asyncio.gather(host_task, context_task), timeout=1)
            assert host.closed

        asyncio.run(run_test())


class TestRenderContext:
    """Test suite for RenderContext element inspection."""

    @pytest.fixture
    def context(self):
        _, frame_end = QueueChannel.pair()
        return RenderContext(frame_end)

    def test_click_resolves_styles(self, context):
        context.apply(
            UpdateHtml(
                html='<div data-path="0" style="color: red; background-color: yellow">'
                '<p data-path="0.0" class="a b" style="background-color: blue">x</p>'
                '<span data-path="0.1">y</span>'
                "</div>"
            )
        )

        selected = context.click("0.0")
        assert selected.tag_name == "P"
        assert selected.color == "red"
        assert selected.bg_color == "blue"
        assert selected.class_list == ["a", "b"]
        assert selected.font_family == ""

        span = context.click("0.1")
        assert span.bg_color == "rgba(0, 0, 0, 0)"

    def test_click_defaults(self, context):
        context.apply(UpdateHtml(html='<p data-path="0">x</p>'))
        selected = context.click("0")

        assert selected.color == "rgb(0, 0, 0)"
        assert selected.class_list == []

    def test_click_unknown_path(self, context):
        context.apply(UpdateHtml(html='<p data-path="0">x</p>'))
        with pytest.raises(ElementNotFoundError):
            context.click("9")

    def test_site_font_synced(self, context):
        """The site font block follows the pushed markup."""
        html = PreviewRenderer().render(ThemeRewriter().set_page_font("<p>x</p>", "Lato"), {})

        context.apply(UpdateHtml(html=html))
        assert "font-family: 'Lato'" in context.site_font_css
        assert context.click("0").font_family == "'Lato', sans-serif"

        context.apply(UpdateHtml(html='<p data-path="0" style="font-family: Lora">x</p>'))
        assert context.site_font_css is None
        assert context.click("0").font_family == "Lora"

    def test_unchanged_update_ignored(self, context):
        assert context.apply(UpdateHtml(html="<p>x</p>"))
        assert not context.apply(UpdateHtml(html="<p>x</p>"))
        assert context.updates == 1


# =============================================================================
# Hub Tests
# =============================================================================


class TestPreviewHub:
    """Test suite for PreviewHub."""

    def test_publish_reaches_every_preview(self):
        async def run_test():
            hub = PreviewHub()
            host_a_end, frame_a_end = QueueChannel.pair()
            host_b_end, frame_b_end = QueueChannel.pair()
            snapshot = TemplateSnapshot("<p>{{x}}</p>", {"x": "1"})

            host_a = hub.connect("p1", host_a_end, snapshot)
            hub.connect("p1", host_b_end, snapshot)
            assert hub.count("p1") == 2

            assert await hub.publish("p1", "<p>{{x}}</p>", {"x": "2"}) == 2
            for end in (frame_a_end, frame_b_end):
                message = await end.receive()
                assert message.html == '<p data-path="0">2</p>'

            frame_b_end.close()
            assert await hub.publish("p1", "<p>{{x}}</p>", {"x": "3"}) == 1
            assert hub.count("p1") == 1

            hub.disconnect("p1", host_a)
            assert hub.count("p1") == 0
            assert await hub.publish("p1", "<p></p>", {}) == 0

        asyncio.run(run_test())

    def test_new_preview_sees_latest_publish(self):
        async def run_test():
            hub = PreviewHub()
            first_end, _ = QueueChannel.pair()
            hub.connect("p1", first_end, TemplateSnapshot("<p>{{x}}</p>", {"x": "old"}))
            await hub.publish("p1", "<p>{{x}}</p>", {"x": "new"})

            second_end, second_frame = QueueChannel.pair()
            host = hub.connect("p1", second_end, TemplateSnapshot("<p>{{x}}</p>", {"x": "stale"}))
            await host.push()

            message = await second_frame.receive()
            assert message.html == '<p data-path="0">new</p>'

        asyncio.run(run_test())
