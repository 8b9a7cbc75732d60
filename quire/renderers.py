"""Content renderers for Quire.

Each renderer handles one content type.

Key classes:
- MarkdownRenderer: Renders Markdown to HTML with Pygments syntax highlighting.
- HTMLRenderer: Passes through HTML content.
- JinjaContentRenderer: Defers Jinja templates to the TemplateEngine.
- RendererRegistry: Picks the renderer for a source file.
"""

from __future__ import annotations

from pathlib import Path

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .config import MarkdownConfig
from .html_utils import escape_html
from .utils import is_html, is_markdown, is_template


class _HighlightRenderer(mistune.HTMLRenderer):
    """Markdown renderer that highlights fenced code blocks with Pygments."""

    def __init__(self, syntax: bool = True):
        super().__init__(escape=False)
        self.syntax = syntax

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block, highlighted when the language is known.

        Args:
            code: The code content.
            info: Language identifier from the fence (e.g., 'ruby', 'sh').

        Returns:
            HTML string with highlighted code.
        """
        lang = info.split()[0] if info else ""
        if lang and self.syntax:
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


class MarkdownRenderer:
    """Renders Markdown content to HTML."""

    def __init__(self, config: MarkdownConfig | None = None):
        self.config = config or MarkdownConfig()

    @property
    def source_type(self) -> str:
        return "markdown"

    def can_render(self, path: Path) -> bool:
        return is_markdown(path)

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(
            renderer=_HighlightRenderer(self.config.syntax),
            plugins=list(self.config.plugins),
        )
        return markdown(content)


class HTMLRenderer:
    """Passes through plain HTML content unchanged."""

    @property
    def source_type(self) -> str:
        return "html"

    def can_render(self, path: Path) -> bool:
        return is_html(path)

    def render(self, content: str) -> str:
        return content


class JinjaContentRenderer:
    """Identifies Jinja template files.

    The actual Jinja rendering is deferred to the TemplateEngine, which has
    the site collections in scope.
    """

    @property
    def source_type(self) -> str:
        return "jinja"

    def can_render(self, path: Path) -> bool:
        return is_template(path)

    def render(self, content: str) -> str:
        return content


class RendererRegistry:
    """Registry of content renderers, checked in registration order."""

    def __init__(self, markdown_config: MarkdownConfig | None = None):
        self._renderers: list = []
        self.register(MarkdownRenderer(markdown_config))
        self.register(JinjaContentRenderer())
        self.register(HTMLRenderer())

    def register(self, renderer) -> None:
        """Register a new renderer.

        Args:
            renderer: A ContentRenderer implementation.
        """
        self._renderers.append(renderer)

    def get_renderer(self, path: Path):
        """Get the appropriate renderer for a file.

        Args:
            path: Path to the source file.

        Returns:
            The first renderer that can handle the file, or None.
        """
        for renderer in self._renderers:
            if renderer.can_render(path):
                return renderer
        return None
