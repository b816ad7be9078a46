"""Markdown rendering for question text shown to quiz takers.

Question and option text is authored as markdown. Only question bodies are
rendered; option texts double as answer identities and are sent verbatim so
that what a taker submits matches what the author stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown question text into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)


# Shared instance; MarkdownIt renders are read-only so concurrent requests can reuse it.
renderer = MarkdownRenderer()
