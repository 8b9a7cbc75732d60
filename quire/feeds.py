"""Feed generation for Quire.

This module writes the machine-readable outputs of a build (sitemap.xml and
the Atom feed) from the loaded pages. Feed generation is kept apart from
build orchestration, and new formats are added by registering another
``FeedGenerator``.

Classes:
    FeedGenerator: Base class for feed generators.
    SitemapGenerator: Generates the sitemap from dated pages.
    AtomFeedGenerator: Generates an Atom feed of the newest articles.
    FeedRegistry: Registry for managing feed generators.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from .collections import PageCollection
from .html_utils import escape_html, join_root_url
from .index import collect_dated_pages
from .sitemap import generate_sitemap

if TYPE_CHECKING:
    from .config import SiteConfig
    from .content import Page

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"


class FeedGenerator(ABC):
    """Base class for feed generators.

    Attributes:
        path: Output path relative to the output directory.
    """

    def __init__(self, path: str):
        self.path = path

    @property
    def filename(self) -> str:
        return self.path

    @abstractmethod
    def generate(self, pages: Iterable[Page], config: SiteConfig) -> str | None:
        """Generate feed content from pages.

        Args:
            pages: All pages of the site, in source order.
            config: Site configuration.

        Returns:
            Feed content, or None if the feed cannot be generated
            (no root URL configured).
        """
        ...


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml for search engine indexing.

    Only dated articles are listed, after a fixed entry for the site root.
    Requires ``url`` in the site configuration.
    """

    def __init__(self, path: str = "sitemap.xml"):
        super().__init__(path)

    def generate(self, pages: Iterable[Page], config: SiteConfig) -> str | None:
        if not config.url:
            return None
        return generate_sitemap(config.url, pages, config.tz)


class AtomFeedGenerator(FeedGenerator):
    """Generates an Atom 1.0 feed of the newest articles.

    Requires ``url`` in the site configuration.
    """

    def __init__(self, path: str = "feed.xml", limit: int = 20):
        super().__init__(path)
        self.limit = limit

    def generate(self, pages: Iterable[Page], config: SiteConfig) -> str | None:
        """Generate Atom feed content.

        Articles without a publication date are left out.

        Args:
            pages: All pages of the site.
            config: Site configuration with ``url`` and ``title``.

        Returns:
            Atom XML content, or None if no root URL is configured.
        """
        if not config.url:
            return None
        articles = PageCollection(
            p for p in collect_dated_pages(pages) if p.date is not None
        ).latest(self.limit)

        root = join_root_url(config.url, "/")
        updated = (
            articles[0].date if articles else datetime.now(timezone.utc)
        ).isoformat()
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<feed xmlns="{ATOM_NAMESPACE}">',
            f"  <title>{escape_html(config.title)}</title>",
            f"  <id>{escape_html(root)}</id>",
            f'  <link href="{escape_html(root)}"/>',
            f'  <link href="{escape_html(join_root_url(config.url, self.filename))}" rel="self"/>',
            f"  <updated>{updated}</updated>",
        ]
        if config.author:
            lines.append(f"  <author><name>{escape_html(config.author)}</name></author>")
        for page in articles:
            link = escape_html(join_root_url(config.url, page.url))
            published = page.date.isoformat()
            lines.extend(
                [
                    "  <entry>",
                    f"    <title>{escape_html(page.title)}</title>",
                    f'    <link rel="alternate" href="{link}"/>',
                    f"    <id>{link}</id>",
                    f"    <published>{published}</published>",
                    f"    <updated>{published}</updated>",
                    f'    <summary type="html">{escape_html(page.summary)}</summary>',
                    f'    <content type="html">{escape_html(page.content)}</content>',
                    "  </entry>",
                ]
            )
        lines.append("</feed>")
        return "\n".join(lines) + "\n"


class FeedRegistry:
    """Registry for managing feed generators.

    Attributes:
        _generators: List of registered feed generators.
    """

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def render_all(self, pages: Iterable[Page], config: SiteConfig) -> dict[str, str]:
        """Generate the content of every registered feed.

        Nothing is written here, so a failing generator leaves the output
        directory untouched.

        Args:
            pages: All pages of the site.
            config: Site configuration.

        Returns:
            Mapping of feed filename to content, in registration order.

        Raises:
            FormatError: If the sitemap cannot be produced.
        """
        # Convert to list to allow multiple iterations
        pages_list = list(pages)
        rendered: dict[str, str] = {}
        for generator in self._generators:
            content = generator.generate(pages_list, config)
            if content is None:
                print(f"No site url configured; skipping {generator.filename}.")
                continue
            rendered[generator.filename] = content
        return rendered

    @staticmethod
    def write_all(output_dir: Path, rendered: dict[str, str]) -> list[str]:
        """Write feeds produced by ``render_all`` and return their filenames."""
        for filename, content in rendered.items():
            output_path = output_dir / filename
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        return list(rendered)


def create_default_feed_registry(config: SiteConfig) -> FeedRegistry:
    """Create a registry with the sitemap and Atom feed generators.

    Args:
        config: Site configuration providing output paths and feed limit.
    """
    registry = FeedRegistry()
    registry.register(SitemapGenerator(config.sitemap_path))
    registry.register(AtomFeedGenerator(config.feed.path, config.feed.limit))
    return registry
