"""Unit tests for blueprint parsing and the architect prompt."""

import json

import pytest

from studio.interfaces.template import BlueprintError
from studio.strategies.blueprint import (
    DEFAULT_BLUEPRINT,
    INVALID_BLUEPRINT_MESSAGE,
    build_architect_prompt,
    parse_blueprint,
    strip_code_fence,
)
from studio.strategies.template_engine.scanner import PlaceholderScanner


# =============================================================================
# Blueprint Parsing Tests
# =============================================================================


class TestParseBlueprint:
    """Test suite for parse_blueprint."""

    def test_html_lines_joined(self):
        text = json.dumps({"htmlLines": ["<div>", "  <h1>{{title}}</h1>", "</div>"], "state": {"title": "Hi"}})
        blueprint = parse_blueprint(text)

        assert blueprint.html == "<div>\n  <h1>{{title}}</h1>\n</div>"
        assert blueprint.state == {"title": "Hi"}

    def test_html_string_accepted(self):
        blueprint = parse_blueprint('{"html": "<p>{{a}}</p>", "state": {"a": "x"}}')
        assert blueprint.html == "<p>{{a}}</p>"

    def test_html_lines_take_precedence(self):
        text = '{"htmlLines": ["<b>lines</b>"], "html": "<i>html</i>", "state": {}}'
        assert parse_blueprint(text).html == "<b>lines</b>"

    def test_code_fence_stripped(self):
        text = '```json\n{"html": "<p>x</p>", "state": {}}\n```'
        assert parse_blueprint(text).html == "<p>x</p>"

    def test_empty_state_accepted(self):
        assert parse_blueprint('{"html": "<p>x</p>", "state": {}}').state == {}

    @pytest.mark.parametrize(
        "text, reason",
        [
            ("not json", "Expecting value"),
            ("[1, 2]", "Expected a JSON object."),
            ('{"state": {}}', "Missing 'htmlLines' or 'html' key in JSON."),
            ('{"html": "<p></p>"}', "Missing 'state' key in JSON."),
            ('{"html": "<p></p>", "state": [1]}', "'state' must be a JSON object."),
        ],
    )
    def test_rejected(self, text, reason):
        with pytest.raises(BlueprintError) as exc_info:
            parse_blueprint(text)

        message = str(exc_info.value)
        assert message.startswith(INVALID_BLUEPRINT_MESSAGE)
        assert reason in message

    def test_strip_code_fence_without_fence(self):
        assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


class TestDefaultBlueprint:
    """The starter project."""

    def test_state_covers_template(self):
        keys = PlaceholderScanner().find_keys(DEFAULT_BLUEPRINT.html)

        assert keys == ["title", "description", "buttonText"]
        assert set(keys) == set(DEFAULT_BLUEPRINT.state)


# =============================================================================
# Architect Prompt Tests
# =============================================================================


class TestArchitectPrompt:
    """Test suite for build_architect_prompt."""

    def test_idea_inserted(self):
        prompt = build_architect_prompt("  a bakery menu  ")

        assert 'based on this idea: "a bakery menu".' in prompt
        assert '"htmlLines"' in prompt
        assert '"state"' in prompt

    def test_dollar_signs_in_idea_are_safe(self):
        prompt = build_architect_prompt("pricing page with $price tiers")
        assert "$price tiers" in prompt
