"""Content processing for Quire.

This module loads source files, extracts their metadata, renders their
bodies and creates Page objects.

Key classes:
- Page: Dataclass representing a site page with all its metadata.
- FileContentLoader: Discovers content files in the source directory.
- UrlDeriver: Maps a source file to its site URL (permalinks for articles).
- DefaultPageBuilder: Builds a Page from one source file.
- ContentProcessor: Facade for loading every Page of a site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import BlogConfig, SiteConfig
from .extractors import CompositeMetadataExtractor
from .html_utils import escape_html
from .index import is_dated
from .renderers import RendererRegistry
from .utils import (
    coerce_datetime,
    first_paragraph,
    is_html,
    is_markdown,
    is_template,
    slugify,
    split_tags,
    strip_content_suffixes,
)


class ContentError(Exception):
    """A source file could not be turned into a Page.

    Attributes:
        source_path: Path to the offending source file.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


@dataclass
class Page:
    """Represents a site page with all its metadata and content.

    Attributes:
        identifier: Source filename without content extensions or draft marker.
        url: Site-relative URL path.
        date: Publication date (aware), or None for undated pages.
        title: Human-readable title of the page.
        body: Source text without frontmatter.
        content: Rendered HTML content.
        summary: Rendered HTML summary.
        tags: Tags from frontmatter.
        draft: Whether this is a draft page.
        layout: Layout template name; empty for no layout.
        path: Path to the source file.
        source_type: "markdown", "html" or "jinja".
        frontmatter: Raw frontmatter mapping.
    """

    identifier: str
    url: str
    date: datetime | None
    title: str
    body: str
    content: str
    summary: str
    tags: list[str]
    draft: bool
    layout: str
    path: Path
    source_type: str  # "markdown" | "html" | "jinja"
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def is_article(self) -> bool:
        return is_dated(self.identifier)

    @property
    def slug(self) -> str:
        return slugify(self.identifier)

    @property
    def pageable(self) -> bool:
        return bool(self.frontmatter.get("pageable", False))


def identifier_for(path: Path) -> str:
    """Return the page identifier for a source file.

    Examples:
        >>> identifier_for(Path("_2014-03-16-ninja.md"))
        '2014-03-16-ninja'
    """
    return strip_content_suffixes(path.name).lstrip("_")


class FileContentLoader:
    """Discovers content files in a source directory.

    Files inside ``_``-prefixed directories (layouts, partials) are skipped.
    ``_``-prefixed files are drafts and only returned on request.
    """

    def __init__(self, source_dir: Path):
        self.source_dir = source_dir

    def iter_files(self, include_drafts: bool = False) -> list[Path]:
        """List all content files in sorted order.

        Args:
            include_drafts: Whether to include draft files.

        Returns:
            List of paths to content files.
        """
        files: list[Path] = []
        for path in sorted(self.source_dir.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.source_dir)
            if any(part.startswith("_") for part in rel.parts[:-1]):
                continue
            if rel.name.startswith("_") and not include_drafts:
                continue
            if is_markdown(path) or is_template(path) or is_html(path):
                files.append(path)
        return files


class UrlDeriver:
    """Derives site URLs for pages.

    Dated articles use the blog permalink template. ``index`` files map to
    their directory and every other page maps to ``<dir>/<identifier>.html``.
    """

    def __init__(self, blog: BlogConfig | None = None):
        self.blog = blog or BlogConfig()

    def derive(self, rel: Path, identifier: str, date: datetime | None) -> str:
        """Derive the URL for a page.

        Args:
            rel: Source path relative to the source directory.
            identifier: Page identifier.
            date: Publication date, already in the site time zone.

        Returns:
            URL path for the page.
        """
        if is_dated(identifier) and date is not None:
            return "/" + self.blog.permalink.format(
                year=f"{date:%Y}",
                month=f"{date:%m}",
                day=f"{date:%d}",
                title=slugify(identifier),
            ).lstrip("/")
        parent = [p for p in rel.parent.parts if p]
        if identifier == "index":
            path = "/".join(parent)
            return f"/{path}/" if path else "/"
        return "/" + "/".join(parent + [f"{identifier}.html"])


class DefaultPageBuilder:
    """Builds Page objects from source files.

    Attributes:
        source_dir: Directory containing site content.
        config: Site configuration.
        renderer_registry: Registry of content renderers.
        metadata_extractor: Composite metadata extractor.
        url_deriver: URL deriver instance.
    """

    def __init__(
        self,
        source_dir: Path,
        config: SiteConfig,
        renderer_registry: RendererRegistry | None = None,
        metadata_extractor: CompositeMetadataExtractor | None = None,
    ):
        self.source_dir = source_dir
        self.config = config
        self.renderer_registry = renderer_registry or RendererRegistry(config.markdown)
        self.metadata_extractor = metadata_extractor or CompositeMetadataExtractor(
            tz=config.tz
        )
        self.url_deriver = UrlDeriver(config.blog)

    def build(self, path: Path, draft: bool = False) -> Page:
        """Build a Page object from a source file.

        Args:
            path: Path to the source file.
            draft: Whether this is a draft page.

        Returns:
            Page object.

        Raises:
            ValueError: If the frontmatter date is not an ISO date.
        """
        rel = path.relative_to(self.source_dir)
        raw = path.read_text(encoding="utf-8")
        identifier = identifier_for(path)

        metadata = self.metadata_extractor.extract(raw, path)
        frontmatter = metadata.get("frontmatter", {})
        body = metadata.get("body", raw)

        date = self._resolve_date(frontmatter.get("date"), metadata.get("date"))
        content, summary, source_type = self._render(path, body)

        return Page(
            identifier=identifier,
            url=self.url_deriver.derive(rel, identifier, date),
            date=date,
            title=str(frontmatter.get("title") or metadata.get("title", identifier)),
            body=body,
            content=content,
            summary=summary,
            tags=split_tags(frontmatter.get("tags")),
            draft=draft,
            layout=self._resolve_layout(frontmatter, identifier),
            path=path,
            source_type=source_type,
            frontmatter=frontmatter,
        )

    def _resolve_date(self, declared: Any, derived: datetime | None) -> datetime | None:
        """Prefer the frontmatter date over the filename date, in site time."""
        tz = self.config.tz
        date = coerce_datetime(declared, tz) or derived
        if date is not None:
            date = date.astimezone(tz)
        return date

    def _resolve_layout(self, frontmatter: dict[str, Any], identifier: str) -> str:
        """Resolve the layout name; ``layout: false`` disables the layout."""
        declared = frontmatter.get("layout")
        if declared is False:
            return ""
        if declared:
            return str(declared)
        return self.config.blog.layout if is_dated(identifier) else "default"

    def _render(self, path: Path, body: str) -> tuple[str, str, str]:
        """Render the body and summary.

        Returns:
            Tuple of (content HTML, summary HTML, source type).
        """
        renderer = self.renderer_registry.get_renderer(path)
        if renderer is None:
            return body, "", "unknown"
        source_type = renderer.source_type
        if source_type == "jinja":
            return body, "", source_type

        blog = self.config.blog
        separator = blog.summary_separator
        if separator and separator in body:
            head, _, tail = body.partition(separator)
            content = renderer.render(head + tail)
            summary = renderer.render(head)
        else:
            content = renderer.render(body)
            if blog.summary_length:
                summary = escape_html(first_paragraph(body, blog.summary_length))
            else:
                summary = content
        return content, summary, source_type


class ContentProcessor:
    """Facade for loading the content files of a site as Page objects.

    Attributes:
        source_dir: Directory containing site content.
    """

    def __init__(
        self,
        source_dir: Path,
        config: SiteConfig | None = None,
        content_loader: FileContentLoader | None = None,
        page_builder: DefaultPageBuilder | None = None,
    ):
        self.source_dir = source_dir
        self.config = config or SiteConfig()
        self._content_loader = content_loader or FileContentLoader(source_dir)
        self._page_builder = page_builder or DefaultPageBuilder(source_dir, self.config)

    def load(self, include_drafts: bool = False) -> list[Page]:
        """Load all content files and create Page objects.

        Args:
            include_drafts: Whether to include draft pages.

        Returns:
            List of Page objects in source order.

        Raises:
            ContentError: If a file is not UTF-8 or has an invalid date.
        """
        pages: list[Page] = []
        for path in self._content_loader.iter_files(include_drafts):
            draft = path.name.startswith("_")
            try:
                pages.append(self._page_builder.build(path, draft=draft))
            except UnicodeDecodeError as exc:
                raise ContentError(path, f"not valid UTF-8 ({exc.reason})") from exc
            except ValueError as exc:
                raise ContentError(path, f"invalid date: {exc}") from exc
        return pages
