"""
HTML sanitizer.

Strips disallowed tags and attributes from rendered markup so the result is
safe to embed in a page without further escaping.

Key behaviors:
- Only allow-listed tags and per-tag attributes survive
- script/style/iframe-like elements are dropped together with their content
- Links and images using a forbidden protocol (javascript:, data:) are removed
- Links get rel="noopener noreferrer"
- All text and attribute values are re-escaped
- Output is balanced: unclosed allowed tags are closed at the end
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser

# --- Configuration ---


@dataclass(frozen=True)
class RichTextConfig:
    """Sanitizer configuration, built once from rules."""

    allow_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            [
                "p",
                "h1",
                "h2",
                "h3",
                "h4",
                "h5",
                "h6",
                "blockquote",
                "ul",
                "ol",
                "li",
                "strong",
                "em",
                "code",
                "pre",
                "a",
                "img",
                "hr",
                "br",
            ]
        )
    )

    allow_attrs: dict[str, frozenset[str]] = field(
        default_factory=lambda: {
            "a": frozenset(["href", "title"]),
            "img": frozenset(["src", "alt", "title", "width", "height"]),
            "ol": frozenset(["start"]),
            "code": frozenset(["class"]),
        }
    )

    # Elements removed together with everything inside them
    drop_content_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            ["script", "style", "iframe", "object", "embed", "template", "noscript", "textarea"]
        )
    )

    add_noopener: bool = True
    add_noreferrer: bool = True
    add_ugc: bool = False

    forbid_protocols: frozenset[str] = field(
        default_factory=lambda: frozenset(["javascript:", "data:", "vbscript:"])
    )


DEFAULT_CONFIG = RichTextConfig()

VOID_TAGS = frozenset(["img", "hr", "br"])

URL_ATTRS = {"a": "href", "img": "src"}


@dataclass(frozen=True)
class SanitizeIssue:
    """Something the sanitizer removed."""

    code: str
    message: str


# --- URL handling ---

# Browsers ignore whitespace and control characters inside a scheme
_URL_NOISE = re.compile(r"[\x00-\x20\x7f]+")


def is_safe_url(url: str, config: RichTextConfig = DEFAULT_CONFIG) -> bool:
    """Return False if the URL uses a forbidden protocol."""
    if not url:
        return True

    normalized = _URL_NOISE.sub("", url).lower()
    return not any(normalized.startswith(protocol) for protocol in config.forbid_protocols)


def build_link_rel(config: RichTextConfig = DEFAULT_CONFIG) -> str:
    """Build rel attribute value for links."""
    parts = []
    if config.add_noopener:
        parts.append("noopener")
    if config.add_noreferrer:
        parts.append("noreferrer")
    if config.add_ugc:
        parts.append("ugc")
    return " ".join(parts)


# --- Sanitizer ---


class _SanitizingParser(HTMLParser):
    def __init__(self, config: RichTextConfig) -> None:
        super().__init__(convert_charrefs=True)
        self.config = config
        self.out: list[str] = []
        self.issues: list[SanitizeIssue] = []
        self._open: list[str] = []
        self._skip: list[str] = []

    # -- helpers --

    def _strip(self, code: str, message: str) -> None:
        self.issues.append(SanitizeIssue(code=code, message=message))

    def _filter_attrs(self, tag: str, attrs: list[tuple[str, str | None]]) -> dict[str, str] | None:
        allowed = self.config.allow_attrs.get(tag, frozenset())
        kept: dict[str, str] = {}
        for name, value in attrs:
            if name not in allowed:
                self._strip("stripped_attribute", f"Attribute '{name}' stripped from '{tag}'")
                continue
            kept[name] = value or ""

        url_attr = URL_ATTRS.get(tag)
        if url_attr and url_attr in kept:
            url = kept[url_attr].strip()
            if not is_safe_url(url, self.config):
                self._strip("unsafe_url", f"Unsafe URL in {url_attr}: {url[:50]}")
                return None
            kept[url_attr] = url

        if tag == "a":
            rel = build_link_rel(self.config)
            if rel:
                kept["rel"] = rel
        return kept

    def _emit_start(self, tag: str, attrs: dict[str, str]) -> None:
        if attrs:
            rendered = " ".join(
                f'{name}="{html.escape(value, quote=True)}"' for name, value in attrs.items()
            )
            self.out.append(f"<{tag} {rendered}>")
        else:
            self.out.append(f"<{tag}>")

    # -- parser callbacks --

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._skip:
            if tag == self._skip[-1]:
                self._skip.append(tag)
            return

        if tag in self.config.drop_content_tags:
            self._strip("dropped_element", f"Element '{tag}' dropped with its content")
            if tag not in VOID_TAGS:
                self._skip.append(tag)
            return

        if tag not in self.config.allow_tags:
            self._strip("stripped_tag", f"Tag '{tag}' was stripped")
            return

        kept = self._filter_attrs(tag, attrs)
        if kept is None:
            # Unsafe link: the link text survives as plain text
            return

        self._emit_start(tag, kept)
        if tag not in VOID_TAGS:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if self._skip:
            return
        if tag in self.config.drop_content_tags:
            self._strip("dropped_element", f"Element '{tag}' dropped")
            return

        depth = len(self._open)
        self.handle_starttag(tag, attrs)
        if len(self._open) > depth:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if self._skip:
            if tag == self._skip[-1]:
                self._skip.pop()
            return

        if tag not in self._open:
            return

        # Close anything left open inside this element
        while self._open:
            current = self._open.pop()
            self.out.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data: str) -> None:
        if self._skip:
            return
        self.out.append(html.escape(data, quote=False))

    def finish(self) -> str:
        self.close()
        while self._open:
            self.out.append(f"</{self._open.pop()}>")
        return "".join(self.out)


def sanitize_html(
    html_content: str,
    config: RichTextConfig = DEFAULT_CONFIG,
) -> tuple[str, list[SanitizeIssue]]:
    """
    Sanitize HTML content.

    Returns:
        Tuple of (sanitized_html, list of issues describing what was removed)
    """
    parser = _SanitizingParser(config)
    parser.feed(html_content)
    sanitized = parser.finish()
    return sanitized, parser.issues


class HtmlSanitizer:
    """Sanitizer bound to one configuration."""

    def __init__(self, config: RichTextConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> RichTextConfig:
        return self._config

    def sanitize(self, html_content: str) -> str:
        sanitized, _ = sanitize_html(html_content, self._config)
        return sanitized
