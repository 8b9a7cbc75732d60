"""Template rendering engine for Quire.

This module uses Jinja2 to render pages through their layouts. Layouts live
in ``_layouts/``, partials in ``_partials/``, and ``.html.jinja`` pages are
rendered with the site collections in scope.

Key class:
- TemplateEngine: Handles template rendering and provides context to templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound, select_autoescape
from markupsafe import Markup
from pygments.formatters import HtmlFormatter

from .collections import PageCollection, TagCollection
from .config import SiteConfig
from .content import Page
from .html_utils import join_root_url
from .pagination import slice_url

__all__ = ["TemplateEngine"]

_LAYOUT_SUFFIXES = (".html.jinja", ".jinja", ".html")


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        source_dir: Directory containing templates.
        config: Site configuration.
        env: Jinja2 environment.
        articles: Dated articles, newest first.
        tags: Mapping of tag name to articles.
    """

    def __init__(self, source_dir: Path, config: SiteConfig):
        self.source_dir = source_dir
        self.config = config
        self.env = Environment(
            loader=FileSystemLoader(
                [
                    source_dir / "_layouts",
                    source_dir / "_partials",
                    source_dir,
                ]
            ),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.articles = PageCollection([])
        self.tags = TagCollection({})
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables and functions in the Jinja environment."""
        self.env.globals["site"] = self.config
        self.env.globals["articles"] = self.articles
        self.env.globals["tags"] = self.tags
        self.env.globals["url_for"] = self.url_for
        self.env.globals["tag_url"] = self.tag_url
        self.env.globals["pygments_css"] = self._pygments_css

    @staticmethod
    def _pygments_css() -> str:
        """Return Pygments CSS styles for the .highlight class."""
        return HtmlFormatter().get_style_defs(".highlight")

    def update_collections(self, articles: PageCollection, tags: TagCollection) -> None:
        """Update the article and tag collections.

        Args:
            articles: Dated articles, newest first.
            tags: Mapping of tag name to articles.
        """
        self.articles = articles
        self.tags = tags
        self.env.globals["articles"] = self.articles
        self.env.globals["tags"] = self.tags

    def url_for(self, path: str) -> str:
        """Generate a URL for a path, absolute when a site url is configured.

        Args:
            path: Path to generate URL for.

        Returns:
            Full URL with the site url prefix if configured.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        path = path if path.startswith("/") else f"/{path}"
        if self.config.url:
            return join_root_url(self.config.url, path)
        return path

    def tag_url(self, tag: str, number: int = 1) -> str:
        """Return the URL of a tag page (or one of its slices)."""
        base = "/" + self.config.blog.taglink.format(tag=tag).lstrip("/")
        return slice_url(base, number, self.config.blog.page_link)

    def render_page(self, page: Page, extra: dict[str, Any] | None = None) -> str:
        """Render a page with its layout.

        Args:
            page: Page object to render.
            extra: Additional template variables (pagination, tag, calendar).

        Returns:
            Rendered HTML string.
        """
        context: dict[str, Any] = {
            "site": self.config,
            "current_page": page,
            "frontmatter": page.frontmatter,
            "articles": self.articles,
            "tags": self.tags,
        }
        if extra:
            context.update(extra)
        body_html = self._render_body(page, context)
        if not page.layout:
            return body_html
        layout_template = self._resolve_layout_template(page.layout)
        if layout_template is None:
            if page.layout != "default":
                print(f"Layout '{page.layout}' not found; rendering body only.")
            return body_html
        return layout_template.render(page_content=Markup(body_html), **context)

    def _render_body(self, page: Page, context: dict[str, Any]) -> str:
        """Render the page body; only Jinja sources are templated."""
        if page.source_type == "jinja":
            template = self.env.from_string(page.content)
            return template.render(**context)
        return page.content

    def _resolve_layout_template(self, layout: str) -> Template | None:
        """Resolve the layout template, falling back to ``default``.

        Args:
            layout: Layout name to resolve.

        Returns:
            Jinja2 Template object, or None when no candidate exists.
        """
        names = [layout] if layout == "default" else [layout, "default"]
        for name in names:
            for suffix in (*_LAYOUT_SUFFIXES, ""):
                try:
                    return self.env.get_template(f"{name}{suffix}")
                except TemplateNotFound:
                    continue
        return None
