"""Project blueprint ingestion.

A blueprint is the JSON document an external generator returns for a new
project: the template as ``htmlLines`` (or a single ``html`` string) plus
the initial ``state``.
"""

import json
import logging
import re
import string
import textwrap
from typing import Any

from pydantic import BaseModel

from studio.interfaces.template import BlueprintError

logger = logging.getLogger(__name__)


FENCE_OPEN = re.compile(r"^```(json)?")
FENCE_CLOSE = re.compile(r"```$")

INVALID_BLUEPRINT_MESSAGE = (
    "Whoops! That didn't look like valid JSON. Did you paste the entire response? "
    "Try copying the code block again. Error: "
)


class Blueprint(BaseModel):
    """A template and its initial state."""

    html: str
    state: dict[str, Any]


DEFAULT_BLUEPRINT = Blueprint(
    html="""<div class="flex flex-col items-center justify-center min-h-screen bg-zinc-50 text-zinc-900 p-4">
  <div class="max-w-md text-center space-y-4">
    <h1 class="text-4xl font-bold tracking-tight">{{title}}</h1>
    <p class="text-zinc-500">{{description}}</p>
    <button class="px-6 py-3 bg-zinc-900 text-white font-semibold rounded-lg hover:bg-zinc-700 transition">
      {{buttonText}}
    </button>
  </div>
</div>""",
    state={
        "title": "Welcome to Built.at",
        "description": "This is your starting point. Edit the code on the left or the content form.",
        "buttonText": "Get Started",
    },
)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = FENCE_CLOSE.sub("", FENCE_OPEN.sub("", cleaned, count=1))
    return cleaned


def parse_blueprint(text: str) -> Blueprint:
    """Parse a pasted blueprint.

    Args:
        text: The JSON document, optionally wrapped in a ```json fence.

    Returns:
        The blueprint. ``htmlLines`` are joined with newlines and take
        precedence over ``html``.

    Raises:
        BlueprintError: If the text isn't JSON or required keys are missing.
            The message starts with the user-facing hint.
    """
    try:
        data = json.loads(strip_code_fence(text))
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object.")

        html_lines = data.get("htmlLines")
        if isinstance(html_lines, list):
            html = "\n".join(str(line) for line in html_lines)
        elif isinstance(data.get("html"), str):
            html = data["html"]
        else:
            raise ValueError("Missing 'htmlLines' or 'html' key in JSON.")

        state = data.get("state")
        if state is None:
            raise ValueError("Missing 'state' key in JSON.")
        if not isinstance(state, dict):
            raise ValueError("'state' must be a JSON object.")
    except ValueError as e:
        logger.warning(f"Rejected blueprint: {e}")
        raise BlueprintError(INVALID_BLUEPRINT_MESSAGE + str(e)) from e

    logger.info(f"Parsed blueprint with {len(state)} state keys")
    return Blueprint(html=html, state=state)


ARCHITECT_PROMPT = string.Template(
    textwrap.dedent(
        """\
        You are an expert web architect. I need you to build a single-page web application based on this idea: "$idea".

        Return a Single Valid JSON Object inside a Markdown code block ( ```json ).
        The JSON must have exactly two keys:
        1. "htmlLines": An ARRAY of strings, where each string represents a line of HTML code.
           - Break the HTML into many lines (e.g. one line per element).
           - Use Tailwind CSS classes for styling.
           - For ANY lists or repeated items (features, cards, links), you MUST use a consistent repeating structure (e.g. <ul><li>...</li></ul> or repeating <div class='card'>...</div>) so our "Duplicate Item" feature can scan and replicate them.
           - Do not include <html>, <head>, or <body> tags. Just the inner content.
           - Use single quotes for HTML attributes (e.g. class='text-red-500') or escape double quotes.
           - Mark every piece of editable content with a {{placeholder}} whose key uses only letters, digits, '_' and '-'.
        2. "state": A flat JSON object mapping every placeholder key to its default text, label or URL.
           - ALL media (images, audio, video) must be represented as TEXT URLs. Do NOT use file inputs.
           - Use placeholder URLs for default media (e.g. 'https://placehold.co/600x400' for images).

        Example Response:
        ```json
        {
          "htmlLines": [
            "<div class='p-4'>",
            "  <h1 class='text-2xl'>{{title}}</h1>",
            "</div>"
          ],
          "state": { "title": "My App" }
        }
        ```
        """
    )
)


def build_architect_prompt(idea: str) -> str:
    """Build the generation prompt for an app idea.

    The prompt asks for a blueprint in exactly the shape ``parse_blueprint``
    accepts, with repeated items laid out as consistent lists so they can be
    duplicated and reordered.
    """
    return ARCHITECT_PROMPT.safe_substitute(idea=idea.strip())
