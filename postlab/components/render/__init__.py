"""
Render component - Markdown rendering and HTML sanitization for post bodies.
"""

from .component import ContentPipeline, build_rich_text_config, create_pipeline
from .markdown import MarkdownRenderer, RenderConfig, render_inline, render_markdown
from .ports import MarkupRendererPort, SanitizerPort

__all__ = [
    "ContentPipeline",
    "build_rich_text_config",
    "create_pipeline",
    "MarkdownRenderer",
    "RenderConfig",
    "render_inline",
    "render_markdown",
    "MarkupRendererPort",
    "SanitizerPort",
]
