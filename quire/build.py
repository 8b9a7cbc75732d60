"""Site building functionality for Quire.

This module contains the core logic for building a static blog from source
files. It loads configuration, processes content, renders pages, paginated
listings, tag pages and calendar archives, then writes the sitemap and feed.

Key functions:
- build_site: Main function to build the entire site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import TemplateSyntaxError

from .collections import PageCollection, TagCollection
from .config import SiteConfig, load_config
from .content import ContentError, ContentProcessor, Page
from .feeds import create_default_feed_registry
from .index import collect_dated_pages
from .pagination import paginate
from .sitemap import FormatError
from .templates import TemplateEngine
from .utils import ensure_clean_dir, output_path_for_url, strip_content_suffixes


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        pages: Every page loaded from the source directory.
        output_dir: Directory where the site was built.
        config: Configuration the site was built with.
        written: Site URLs of every rendered HTML file.
        feeds: Feed filenames that were generated.
    """

    pages: list[Page]
    output_dir: Path
    config: SiteConfig
    written: list[str] = field(default_factory=list)
    feeds: list[str] = field(default_factory=list)


def build_site(
    project_root: Path,
    include_drafts: bool = False,
    root_url: str | None = None,
    clean_output: bool = True,
    output_dir_override: Path | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        include_drafts: Whether to include draft pages (starting with _).
        root_url: Optional site url overriding quire.yaml.
        clean_output: Whether to wipe the output directory before building.
        output_dir_override: Optional path to write the build output instead of config output_dir.

    Returns:
        BuildResult describing what was built.

    Raises:
        BuildError: If a page cannot be loaded or rendered, two pages claim
            the same URL, or the sitemap cannot be produced.
    """
    config = load_config(project_root)
    if root_url is not None:
        config = config.with_url(root_url)
    source_dir = project_root / config.source_dir
    if not source_dir.exists():
        raise FileNotFoundError(f"Expected source directory at {source_dir}")
    output_dir = output_dir_override or (project_root / config.output_dir)

    try:
        pages = ContentProcessor(source_dir, config).load(include_drafts=include_drafts)
    except ContentError as exc:
        raise BuildError(exc.source_path, exc.message, exc) from exc

    template_ids = {
        "tag": strip_content_suffixes(config.blog.tag_template),
        "calendar": strip_content_suffixes(config.blog.calendar_template),
    }
    templates = {
        kind: next((p for p in pages if p.identifier == identifier), None)
        for kind, identifier in template_ids.items()
    }
    site_pages = [p for p in pages if p.identifier not in template_ids.values()]

    articles = PageCollection(collect_dated_pages(site_pages)).sorted()
    tags = TagCollection.from_pages(articles)
    engine = TemplateEngine(source_dir, config)
    engine.update_collections(articles, tags)

    writer = _PageWriter(output_dir)
    for page in site_pages:
        if page.pageable:
            _write_listing(engine, writer, page, articles, page.url, {})
        else:
            writer.add(page, page.url, _render(engine, page, None))

    if templates["tag"] is not None:
        for tag, tagged in tags.items():
            _write_listing(
                engine, writer, templates["tag"], tagged, engine.tag_url(tag),
                {"tagname": tag},
            )

    if templates["calendar"] is not None:
        _write_calendar(engine, writer, templates["calendar"], articles, config)

    registry = create_default_feed_registry(config)
    try:
        rendered_feeds = registry.render_all(site_pages, config)
    except FormatError as exc:
        source = getattr(exc.page, "path", project_root / config.sitemap_path)
        raise BuildError(source, exc.message, exc) from exc

    # Everything is rendered; only now is the previous build replaced
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    writer.flush()
    feeds = registry.write_all(output_dir, rendered_feeds)

    return BuildResult(
        pages=pages,
        output_dir=output_dir,
        config=config,
        written=writer.written,
        feeds=feeds,
    )


class _PageWriter:
    """Collects rendered HTML by URL, refusing collisions, and writes it on flush."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.written: list[str] = []
        self._rendered: dict[str, str] = {}
        self._owners: dict[str, Path] = {}

    def add(self, page: Page, url: str, rendered: str) -> None:
        """Queue a rendered page for the file serving ``url``.

        Raises:
            BuildError: If another page already produced this URL.
        """
        if url in self._owners:
            raise BuildError(
                page.path, f"URL {url} is also produced by {self._owners[url]}"
            )
        self._owners[url] = page.path
        self._rendered[url] = rendered

    def flush(self) -> None:
        """Write every queued page under the output directory."""
        for url, rendered in self._rendered.items():
            target = output_path_for_url(self.output_dir, url)
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                f.write(rendered)
            self.written.append(url)


def _write_listing(
    engine: TemplateEngine,
    writer: _PageWriter,
    page: Page,
    items: PageCollection,
    base_url: str,
    extra: dict[str, Any],
) -> None:
    """Render ``page`` once per pagination slice of ``items``."""
    for page_slice in paginate(items, base_url, engine.config.blog):
        context = dict(extra)
        context["pagination"] = page_slice
        context["page_articles"] = PageCollection(page_slice.items)
        writer.add(page, page_slice.url, _render(engine, page, context))


def _write_calendar(
    engine: TemplateEngine,
    writer: _PageWriter,
    template: Page,
    articles: PageCollection,
    config: SiteConfig,
) -> None:
    """Render the calendar template for every year, month and day with articles."""
    blog = config.blog
    for year, items in articles.by_year().items():
        url = "/" + blog.year_link.format(year=f"{year:04d}").lstrip("/")
        context = {"year": year, "month": None, "day": None}
        _write_listing(engine, writer, template, items, url, context)
    for (year, month), items in articles.by_month().items():
        url = "/" + blog.month_link.format(
            year=f"{year:04d}", month=f"{month:02d}"
        ).lstrip("/")
        context = {"year": year, "month": month, "day": None}
        _write_listing(engine, writer, template, items, url, context)
    for (year, month, day), items in articles.by_day().items():
        url = "/" + blog.day_link.format(
            year=f"{year:04d}", month=f"{month:02d}", day=f"{day:02d}"
        ).lstrip("/")
        context = {"year": year, "month": month, "day": day}
        _write_listing(engine, writer, template, items, url, context)


def _render(engine: TemplateEngine, page: Page, extra: dict[str, Any] | None) -> str:
    """Render a page, wrapping template failures in BuildError."""
    try:
        return engine.render_page(page, extra)
    except TemplateSyntaxError as exc:
        raise BuildError(
            page.path,
            f"Template syntax error on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    except Exception as exc:
        raise BuildError(page.path, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"

    return f"{error_type}: {error_msg}"
