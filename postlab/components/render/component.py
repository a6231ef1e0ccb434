"""
Render component - Post body to safe HTML.

Composes the two pure stages every post body goes through: render
(markdown -> HTML) then sanitize (HTML -> HTML). The pipeline is built once
at startup from the rules file and shared by reference.

Invariants:
- Both stages always run, in order
- Raw body text never reaches the output as markup
"""

from __future__ import annotations

import logging

from postlab.domain.sanitize import DEFAULT_CONFIG, HtmlSanitizer, RichTextConfig
from postlab.rules.models import SanitizerRules

from .markdown import MarkdownRenderer
from .ports import MarkupRendererPort, SanitizerPort

logger = logging.getLogger(__name__)


class ContentPipeline:
    """Render then sanitize."""

    def __init__(self, renderer: MarkupRendererPort, sanitizer: SanitizerPort) -> None:
        self._renderer = renderer
        self._sanitizer = sanitizer

    def process(self, body: str) -> str:
        rendered = self._renderer.render(body)
        sanitized = self._sanitizer.sanitize(rendered)
        logger.debug("Rendered body: %d source chars -> %d html chars", len(body), len(sanitized))
        return sanitized


def build_rich_text_config(rules: SanitizerRules | None) -> RichTextConfig:
    """Build sanitizer config from rules; defaults when no rules are given."""
    if rules is None:
        return DEFAULT_CONFIG

    return RichTextConfig(
        allow_tags=frozenset(rules.allow_tags),
        allow_attrs={tag: frozenset(attrs) for tag, attrs in rules.allow_attrs.items()},
        drop_content_tags=frozenset(rules.drop_content_tags),
        forbid_protocols=frozenset(p.lower() for p in rules.forbid_protocols),
        add_noopener=rules.link_rel.noopener,
        add_noreferrer=rules.link_rel.noreferrer,
        add_ugc=rules.link_rel.ugc,
    )


def create_pipeline(rules: SanitizerRules | None = None) -> ContentPipeline:
    """Create the default markdown + sanitizer pipeline."""
    return ContentPipeline(
        renderer=MarkdownRenderer(),
        sanitizer=HtmlSanitizer(build_rich_text_config(rules)),
    )
