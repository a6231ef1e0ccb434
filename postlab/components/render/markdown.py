"""
Markdown renderer.

Converts a post body written in a small markdown dialect to HTML.

Key behaviors:
- Raw HTML in the source is escaped, never passed through
- Block syntax: ATX headings, paragraphs, blockquotes, bullet and ordered
  lists, fenced code blocks, horizontal rules
- Inline syntax: **strong**, *em* / _em_, `code`, [text](url), ![alt](src)
- Output is fed to the sanitizer; this module does not judge URLs
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

# --- Configuration ---


@dataclass(frozen=True)
class RenderConfig:
    """Rendering configuration."""

    code_language_prefix: str = "language-"
    # Deeper ">" markers render as literal text
    max_quote_depth: int = 32


DEFAULT_RENDER_CONFIG = RenderConfig()


# --- Block patterns ---

# FENCE and RULE match stripped lines
FENCE = re.compile(r"^(```|~~~)[ \t]*([\w+-]*)$")
HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
RULE = re.compile(r"^([-*_])(?:[ \t]*\1){2,}$")
QUOTE = re.compile(r"^\s*>\s?(.*)$")
BULLET = re.compile(r"^\s*[-*+]\s+(.*)$")
ORDERED = re.compile(r"^\s*(\d{1,9})[.)]\s+(.*)$")
CONTINUATION = re.compile(r"^\s{2,}\S")

# --- Inline patterns ---

CODE_SPAN = re.compile(r"(?<!`)((?>`+))([^`]+)\1(?!`)")
IMAGE = re.compile(r"!\[([^\[\]]*)\]\(([^)\s]+)(?:\s+&quot;([^)]*?)&quot;)?\)")
LINK = re.compile(r"\[([^\[\]]+)\]\(([^)\s]+)(?:\s+&quot;([^)]*?)&quot;)?\)")
# Delimiter-bounded: a match never scans past the next marker character
STRONG = re.compile(r"\*\*([^*]+?)\*\*|__([^_]+?)__")
EMPHASIS = re.compile(r"\*([^\s*](?:[^*]*[^\s*])?)\*|(?<!\w)_([^\s_](?:[^_]*[^\s_])?)_(?!\w)")
PLACEHOLDER = re.compile("\x00(\\d+)\x00")


# --- Inline rendering ---


class _Stash:
    """Holds rendered fragments that later inline passes must not touch."""

    def __init__(self) -> None:
        self._items: list[str] = []

    def put(self, fragment: str) -> str:
        self._items.append(fragment)
        return f"\x00{len(self._items) - 1}\x00"

    def restore(self, text: str) -> str:
        # Fragments may contain placeholders of their own (code inside a link)
        while PLACEHOLDER.search(text):
            text = PLACEHOLDER.sub(lambda m: self._items[int(m.group(1))], text)
        return text


def _title_attr(title: str | None) -> str:
    return f' title="{title}"' if title else ""


def _apply_emphasis(text: str) -> str:
    text = STRONG.sub(lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>", text)
    return EMPHASIS.sub(lambda m: f"<em>{m.group(1) or m.group(2)}</em>", text)


def render_inline(text: str) -> str:
    """Render inline markdown. Everything that is not markup is escaped."""
    stash = _Stash()

    # Code spans first: their content is literal
    parts: list[str] = []
    last = 0
    for match in CODE_SPAN.finditer(text):
        parts.append(html.escape(text[last : match.start()]))
        code = html.escape(match.group(2).strip())
        parts.append(stash.put(f"<code>{code}</code>"))
        last = match.end()
    parts.append(html.escape(text[last:]))
    escaped = "".join(parts)

    escaped = IMAGE.sub(
        lambda m: stash.put(f'<img src="{m.group(2)}" alt="{m.group(1)}"{_title_attr(m.group(3))}>'),
        escaped,
    )
    escaped = LINK.sub(
        lambda m: stash.put(
            f'<a href="{m.group(2)}"{_title_attr(m.group(3))}>{_apply_emphasis(m.group(1))}</a>'
        ),
        escaped,
    )
    escaped = _apply_emphasis(escaped)
    return stash.restore(escaped)


# --- Block renderers ---


def _strip_closing_hashes(text: str) -> str:
    text = text.strip()
    bare = text.rstrip("#")
    if bare != text and (not bare or bare[-1].isspace()):
        return bare.rstrip()
    return text


def render_heading(level: int, text: str) -> str:
    """Render a heading. An optional closing run of # is dropped."""
    level = max(1, min(6, level))
    text = _strip_closing_hashes(text)
    return f"<h{level}>{render_inline(text)}</h{level}>"


def render_paragraph(lines: list[str]) -> str:
    """Render a paragraph."""
    text = "\n".join(line.strip() for line in lines)
    return f"<p>{render_inline(text)}</p>"


def render_code_block(
    lines: list[str],
    language: str,
    config: RenderConfig = DEFAULT_RENDER_CONFIG,
) -> str:
    """Render a fenced code block."""
    code = html.escape("\n".join(lines))
    if language:
        return f'<pre><code class="{config.code_language_prefix}{language}">{code}</code></pre>'
    return f"<pre><code>{code}</code></pre>"


def render_list(items: list[str], ordered: bool, start: int = 1) -> str:
    """Render a bullet or ordered list."""
    rendered = "".join(f"<li>{render_inline(item)}</li>" for item in items)
    if not ordered:
        return f"<ul>{rendered}</ul>"
    if start != 1:
        return f'<ol start="{start}">{rendered}</ol>'
    return f"<ol>{rendered}</ol>"


def _collect_list(lines: list[str], i: int, pattern: re.Pattern[str]) -> tuple[list[str], int]:
    """Collect consecutive list items starting at line ``i``."""
    items: list[list[str]] = []
    while i < len(lines):
        line = lines[i]
        match = pattern.match(line)
        if match and not RULE.match(line.strip()):
            items.append([match.group(match.lastindex or 1)])
        elif items and CONTINUATION.match(line):
            items[-1].append(line.strip())
        else:
            break
        i += 1
    return ["\n".join(item) for item in items], i


def render_blocks(
    lines: list[str],
    config: RenderConfig = DEFAULT_RENDER_CONFIG,
    depth: int = 0,
) -> list[str]:
    """Render a sequence of source lines into HTML blocks. ``depth`` is the blockquote nesting."""
    blocks: list[str] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(render_paragraph(paragraph))
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i]

        fence = FENCE.match(line.strip())
        if fence:
            flush()
            marker, language = fence.group(1), fence.group(2)
            code: list[str] = []
            i += 1
            while i < len(lines) and lines[i].strip() != marker:
                code.append(lines[i])
                i += 1
            blocks.append(render_code_block(code, language, config))
            i += 1  # closing fence (or end of input)
            continue

        if not line.strip():
            flush()
            i += 1
            continue

        heading = HEADING.match(line)
        if heading:
            flush()
            blocks.append(render_heading(len(heading.group(1)), heading.group(2)))
            i += 1
            continue

        if RULE.match(line.strip()):
            flush()
            blocks.append("<hr>")
            i += 1
            continue

        if depth < config.max_quote_depth and QUOTE.match(line):
            flush()
            quoted: list[str] = []
            while i < len(lines):
                match = QUOTE.match(lines[i])
                if not match:
                    break
                quoted.append(match.group(1))
                i += 1
            inner = "".join(render_blocks(quoted, config, depth + 1))
            blocks.append(f"<blockquote>{inner}</blockquote>")
            continue

        if BULLET.match(line):
            flush()
            items, i = _collect_list(lines, i, BULLET)
            blocks.append(render_list(items, ordered=False))
            continue

        ordered = ORDERED.match(line)
        if ordered:
            flush()
            start = int(ordered.group(1))
            items, i = _collect_list(lines, i, ORDERED)
            blocks.append(render_list(items, ordered=True, start=start))
            continue

        paragraph.append(line)
        i += 1

    flush()
    return blocks


def render_markdown(
    source: str,
    config: RenderConfig = DEFAULT_RENDER_CONFIG,
) -> str:
    """Render a markdown document to HTML."""
    # NUL is reserved for inline placeholders
    text = source.replace("\r\n", "\n").replace("\r", "\n").replace("\x00", "�")
    return "\n".join(render_blocks(text.split("\n"), config))


class MarkdownRenderer:
    """Renderer bound to one configuration."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config or DEFAULT_RENDER_CONFIG

    def render(self, source: str) -> str:
        return render_markdown(source, self._config)
