"""Theme rewriter strategy.

Global colour and typography edits over the raw template text, plus the
page font block, palette detection and per-element inline styles used by
the theme panel.
"""

import logging
import re
from collections.abc import Iterable

from studio.interfaces.template import (
    BaseThemeRewriter,
    ElementNotFoundError,
    TemplateParseError,
)
from studio.strategies.template_engine import dom
from studio.strategies.template_engine.models import (
    ThemePalette,
    ThemeRewriteResult,
    ThemeTokenKind,
)

logger = logging.getLogger(__name__)


DEFAULT_THEME_FONTS = [
    "Inter",
    "Roboto",
    "Open Sans",
    "Montserrat",
    "Lato",
    "Poppins",
    "Playfair Display",
    "Lora",
    "Nunito",
    "Oswald",
]


UTILITY_PREFIX = re.compile(r"^(bg|text|border|ring|fill|stroke|outline)-")
HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
FUNCTIONAL_COLOR = re.compile(r"^(?:rgba?|hsla?)\([^()]*\)$", re.IGNORECASE)
RGB_VALUE = re.compile(r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*[\d.]+\s*)?\)$")

SITE_FONT_BLOCK = re.compile(
    r"""<style\s+id=["']site-font["']\s*>.*?</style>""", re.IGNORECASE | re.DOTALL
)
BODY_FONT_RULE = re.compile(r"""body\s*\{\s*font-family:\s*['"]?([^'",;]+)""")

PALETTE_LIMIT = 8

STYLE_PROPERTIES = {
    "color": "color",
    "bgColor": "background-color",
    "background-color": "background-color",
}

UTILITY_SWATCHES = [
    ("white", "#ffffff"),
    ("black", "#000000"),
    ("blue", "#3b82f6"),
    ("red", "#ef4444"),
    ("green", "#22c55e"),
    ("yellow", "#eab308"),
    ("purple", "#a855f7"),
    ("pink", "#ec4899"),
    ("indigo", "#6366f1"),
    ("zinc", "#71717a"),
    ("slate", "#71717a"),
    ("gray", "#71717a"),
]


# =============================================================================
# Colour & Style Helpers
# =============================================================================


def is_explicit_color(value: str) -> bool:
    """Whether ``value`` is a hex or functional colour literal."""
    value = value.strip()
    return bool(HEX_COLOR.match(value) or FUNCTIONAL_COLOR.match(value))


def rgb_to_hex(value: str, default: str = "#000000") -> str:
    """Convert ``rgb(r, g, b)`` to ``#rrggbb``; hex passes through."""
    if not value:
        return default
    value = value.strip()
    if value.startswith("#"):
        return value
    match = RGB_VALUE.match(value)
    if not match:
        return default
    r, g, b = (min(int(part), 255) for part in match.groups())
    return f"#{r:02x}{g:02x}{b:02x}"


def utility_to_hex(utility_class: str) -> str:
    """Best-guess swatch colour for a utility class."""
    if "#" in utility_class:
        match = re.search(r"#([a-fA-F0-9]{6}|[a-fA-F0-9]{3})", utility_class)
        return f"#{match.group(1)}" if match else "#3b82f6"
    for name, color in UTILITY_SWATCHES:
        if name in utility_class:
            return color
    return "#3b82f6"


def google_font_url(font: str) -> str:
    """Return the stylesheet URL loading ``font`` from Google Fonts."""
    return f"https://fonts.googleapis.com/css2?family={url_family(font)}&display=swap"


def url_family(font: str) -> str:
    """Spell a font family the way Google Fonts URLs do."""
    return re.sub(r"\s+", "+", font.strip())


def font_import_pattern(font: str) -> re.Pattern[str]:
    """Match the family of a Google Fonts @import that loads ``font``.

    Group 1 is everything up to the family name, so a substitution can swap
    the family and keep the rest of the URL.
    """
    words = [re.escape(word) for word in font.split()]
    return re.compile(
        r"""(@import\s+url\(\s*['"]?https://fonts\.googleapis\.com/css2?\?(?:[^'")]*&)?family=)"""
        + r"(?:\+|%20)".join(words)
        + r"""(?=[:&'")])""",
        re.IGNORECASE,
    )


def clean_font_name(font_family: str) -> str:
    """First family of a font-family value, without quotes."""
    if not font_family:
        return ""
    return font_family.split(",")[0].replace('"', "").replace("'", "").strip()


def parse_inline_style(style: str) -> dict[str, str]:
    """Parse a ``style`` attribute into an ordered property map."""
    declarations: dict[str, str] = {}
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        if sep and name.strip():
            declarations[name.strip().lower()] = value.strip()
    return declarations


def format_inline_style(declarations: dict[str, str]) -> str:
    return " ".join(f"{name}: {value};" for name, value in declarations.items())


# =============================================================================
# Rewriter
# =============================================================================


class ThemeRewriter(BaseThemeRewriter):
    """Rewrites theme tokens across a whole template.

    A token is classified as a known font family, a prefixed utility class
    or a raw colour, in that order. Only text that is the same token is
    replaced, never a longer token that merely starts with it.
    """

    def __init__(self, fonts: Iterable[str] = DEFAULT_THEME_FONTS) -> None:
        """Initialize the rewriter.

        Args:
            fonts: Font family names treated as typography tokens.
        """
        self._fonts = list(fonts)

    @property
    def fonts(self) -> list[str]:
        return list(self._fonts)

    def classify(self, token: str) -> ThemeTokenKind:
        """Classify a theme token."""
        if token in self._fonts:
            return ThemeTokenKind.TYPOGRAPHY
        if UTILITY_PREFIX.match(token) and not is_explicit_color(token):
            return ThemeTokenKind.UTILITY_CLASS
        if is_explicit_color(token):
            return ThemeTokenKind.RAW_COLOR
        return ThemeTokenKind.LITERAL

    def rewrite(self, template: str, old: str, new: str) -> ThemeRewriteResult:
        """Replace a theme token everywhere in the template.

        Args:
            template: The HTML template.
            old: Font family, utility class or colour currently used.
            new: Replacement font, class or colour.

        Returns:
            ThemeRewriteResult with the rewritten template, how ``old`` was
            classified and the number of replacements.
        """
        if not old or not new or old == new:
            return ThemeRewriteResult(template=template, kind=ThemeTokenKind.NOOP)

        kind = self.classify(old)
        match kind:
            case ThemeTokenKind.TYPOGRAPHY:
                next_template, count = self._rewrite_font(template, old, new)
            case ThemeTokenKind.UTILITY_CLASS:
                next_template, count = self._rewrite_utility(template, old, new)
            case ThemeTokenKind.RAW_COLOR:
                next_template, count = self._rewrite_color(template, old, new)
            case _:
                pattern = re.compile(re.escape(old), re.IGNORECASE)
                next_template, count = pattern.subn(lambda _: new, template)

        logger.info(f"Theme rewrite {kind.value}: '{old}' -> '{new}' ({count} replacements)")
        return ThemeRewriteResult(template=next_template, kind=kind, replacements=count)

    def _rewrite_font(self, template: str, old: str, new: str) -> tuple[str, int]:
        template, imports = font_import_pattern(old).subn(
            lambda m: m.group(1) + url_family(new), template
        )

        family = re.compile(
            r"""(font-family:\s*['"]?)""" + re.escape(old) + r"""(?=\s*(?:['",;}!]|$))""",
            re.IGNORECASE,
        )
        template, families = family.subn(lambda m: m.group(1) + new, template)
        return template, imports + families

    def _rewrite_utility(self, template: str, old: str, new: str) -> tuple[str, int]:
        prefix = UTILITY_PREFIX.match(old).group(1)
        if is_explicit_color(new):
            arbitrary = re.sub(r"\s+", "_", new.strip())
            replacement = f"{prefix}-[{arbitrary}]"
        else:
            replacement = new

        pattern = re.compile(r"\b" + re.escape(old) + r"""(?=[\s"'>\]]|$)""")
        return pattern.subn(lambda _: replacement, template)

    def _rewrite_color(self, template: str, old: str, new: str) -> tuple[str, int]:
        suffix = r"(?![0-9a-fA-F])" if old.startswith("#") else ""
        pattern = re.compile(re.escape(old) + suffix, re.IGNORECASE)
        return pattern.subn(lambda _: new, template)

    # =========================================================================
    # Page Font
    # =========================================================================

    def set_page_font(self, template: str, font: str) -> str:
        """Set or clear the single site-wide font block.

        Every existing ``<style id="site-font">`` block is removed; for a
        non-empty font one block is prepended that loads the font and
        applies it to the whole page.

        Args:
            template: The HTML template.
            font: Font family name, or "" to clear.

        Returns:
            The template with at most one site font block.
        """
        next_template = SITE_FONT_BLOCK.sub("", template)
        if font:
            css = (
                f"@import url('{google_font_url(font)}');\n"
                f"body, #app, #app * {{ font-family: '{font}', sans-serif !important; }}"
            )
            next_template = f'<style id="site-font">{css}</style>' + next_template
        logger.info(f"Page font set to '{font}'" if font else "Page font cleared")
        return next_template

    # =========================================================================
    # Palette & Element Styles
    # =========================================================================

    def detect_palette(self, template: str) -> ThemePalette:
        """Collect the colours and fonts a template uses.

        Args:
            template: The HTML template.

        Returns:
            ThemePalette with background, text and border tokens (at most
            eight each) and font families, in order of first use.
        """
        try:
            root = dom.parse(template)
        except TemplateParseError:
            return ThemePalette()

        bg: dict[str, None] = {}
        text: dict[str, None] = {}
        border: dict[str, None] = {}
        fonts: dict[str, None] = {}

        for element in root.find_all(True):
            for cls in (element.get("class") or "").split():
                if cls.startswith("bg-"):
                    bg.setdefault(cls)
                elif cls.startswith("text-"):
                    text.setdefault(cls)
                elif cls.startswith("border-"):
                    border.setdefault(cls)

            style = parse_inline_style(element.get("style") or "")
            if style.get("background-color"):
                bg.setdefault(rgb_to_hex(style["background-color"]))
            if style.get("color"):
                text.setdefault(rgb_to_hex(style["color"]))
            if style.get("border-color"):
                border.setdefault(rgb_to_hex(style["border-color"]))
            if style.get("font-family"):
                fonts.setdefault(clean_font_name(style["font-family"]))

        for match in BODY_FONT_RULE.finditer(template):
            fonts.setdefault(match.group(1).strip())

        return ThemePalette(
            bg=list(bg)[:PALETTE_LIMIT],
            text=list(text)[:PALETTE_LIMIT],
            border=list(border)[:PALETTE_LIMIT],
            fonts=[font for font in fonts if font],
        )

    def apply_element_style(self, template: str, path: str, prop: str, value: str) -> str:
        """Set an inline colour on the element at a preview path.

        Args:
            template: The HTML template.
            path: Dotted body path reported by the preview.
            prop: "color", "bgColor" or "background-color".
            value: CSS colour value.

        Returns:
            The template with the element's inline style updated.

        Raises:
            ValueError: If ``prop`` is not a supported property.
            TemplateParseError: If the template can't be parsed.
            ElementNotFoundError: If nothing exists at ``path``.
        """
        css_property = STYLE_PROPERTIES.get(prop)
        if css_property is None:
            raise ValueError(
                f"Unsupported style property: {prop}. "
                f"Valid options: {', '.join(sorted(STYLE_PROPERTIES))}"
            )

        root = dom.parse(template)
        element = dom.find_by_path(root, path)
        if element is None:
            raise ElementNotFoundError(path)

        declarations = parse_inline_style(element.get("style") or "")
        declarations[css_property] = value
        element["style"] = format_inline_style(declarations)

        logger.debug(f"Set {css_property}={value} on element {path}")
        return dom.serialize(root)
