"""
Render component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class MarkupRendererPort(Protocol):
    """Pure function: raw markdown text -> HTML."""

    def render(self, source: str) -> str:
        ...


class SanitizerPort(Protocol):
    """Pure function: HTML -> HTML with unsafe elements and attributes removed."""

    def sanitize(self, html_content: str) -> str:
        ...
