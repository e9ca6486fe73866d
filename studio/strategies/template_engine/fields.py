"""Form field ordering and value normalisation."""

import re
from typing import Any

from studio.strategies.template_engine import dom
from studio.strategies.template_engine.models import FieldGroup

URL_KEY = re.compile(r"(url|link|href|src|website)$", re.IGNORECASE)
LABEL_KEY = re.compile(r"(label|text|title|name|desc|caption)$", re.IGNORECASE)
DOMAIN_VALUE = re.compile(r"^[a-zA-Z0-9-]+\.[a-zA-Z]{2,}(/.*)?$")
LINK_PREFIX = re.compile(r"^(?:https?://|mailto:|tel:|/)", re.IGNORECASE)


def ordered_keys(template: str, state: dict[str, Any]) -> list[str]:
    """Order state keys for display.

    Keys appear in template order first (only those present in the state),
    followed by state keys the template doesn't mention.

    Args:
        template: The HTML template.
        state: The current state.

    Returns:
        The display order of the state's keys.
    """
    in_template = list(
        dict.fromkeys(m.group(1) for m in dom.PLACEHOLDER_PATTERN.finditer(template))
    )
    remaining = [key for key in state if key not in in_template]
    return [key for key in in_template if key in state] + remaining


def display_groups(groups: list[FieldGroup], keys: list[str]) -> list[list[str]]:
    """Return the groups to render, or one group per key if there are none."""
    if groups:
        return [group.keys for group in groups]
    return [[key] for key in keys]


def normalize_link_value(key: str, value: Any) -> Any:
    """Prefix ``https://`` on link-like values when a field is committed.

    A value is treated as a link when its key ends like a URL field or the
    value itself looks like a bare domain, unless the key ends like a label.
    Values that already carry a scheme, ``mailto:``, ``tel:`` or a leading
    slash are left alone, as is anything that isn't a non-empty string.
    """
    if not isinstance(value, str) or not value:
        return value

    is_url_key = bool(URL_KEY.search(key))
    is_label_key = bool(LABEL_KEY.search(key))
    looks_like_domain = bool(DOMAIN_VALUE.match(value)) and " " not in value

    if (is_url_key or looks_like_domain) and not is_label_key:
        if not LINK_PREFIX.match(value):
            return f"https://{value}"
    return value
