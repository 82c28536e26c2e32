"""Markdown rendering for question text shown on the host screen.

Question files are plain text with light markdown (emphasis, line breaks).
Raw HTML in question files is escaped rather than passed through.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from trivia_night.core.models import Question


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown question text into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html, "breaks": True})
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line, such as an option, without a wrapping paragraph."""

        return self._markdown.renderInline(markdown_text.strip())

    def render_question(self, question: Question, include_options: bool) -> dict[str, object]:
        options = None
        if include_options and question.options:
            options = {key: self.render_inline(text) for key, text in question.options.items()}
        return {
            "question_html": self.render_fragment(question.text),
            "options_html": options,
        }


# Shared instance; MarkdownIt is safe to reuse for read-only renders.
renderer = MarkdownRenderer()
