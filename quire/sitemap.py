"""Sitemap emission for Quire.

Builds a sitemaps.org 0.9 document from the dated pages of a site: one fixed
entry for the root URL followed by one entry per article.

Every entry is constructed before any XML text is produced, so a malformed
page fails the whole document instead of leaving a truncated file behind.

Classes:
    ChangeFrequency: Allowed <changefreq> values.
    SitemapEntry: One <url> record.
    FormatError: Raised for a dated page without a publication date.

Functions:
    root_entry / page_entry: Build single entries.
    build_entries: Root entry plus one entry per page.
    render_sitemap: Serialize entries to XML.
    generate_sitemap: Collect dated pages and render their sitemap.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import Enum

from .html_utils import escape_html, join_root_url
from .index import collect_dated_pages, is_dated
from .protocols import IndexablePage

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

ROOT_PRIORITY = 1.0
PAGE_PRIORITY = 0.9


class FormatError(Exception):
    """A page cannot be turned into a sitemap entry.

    Attributes:
        page: The offending page.
        message: Human-readable error message.
    """

    def __init__(self, page: IndexablePage, message: str):
        self.page = page
        self.message = message
        super().__init__(f"{page.identifier}: {message}")


class ChangeFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class SitemapEntry:
    """One <url> element of a sitemap.

    Attributes:
        location: Absolute URL.
        last_modified: Date of last modification, if known.
        change_frequency: How often the page is expected to change.
        priority: Relative priority between 0.0 and 1.0.
    """

    location: str
    last_modified: date | None
    change_frequency: ChangeFrequency
    priority: float

    def __post_init__(self):
        if not 0.0 <= self.priority <= 1.0:
            raise ValueError(f"Sitemap priority out of range: {self.priority}")


def _truncate_to_date(value: date, tz: tzinfo | None) -> date:
    """Drop the time component, converting aware datetimes into ``tz`` first."""
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def root_entry(root_url: str) -> SitemapEntry:
    """Build the fixed entry for the site root."""
    return SitemapEntry(
        location=root_url,
        last_modified=None,
        change_frequency=ChangeFrequency.DAILY,
        priority=ROOT_PRIORITY,
    )


def page_entry(
    root_url: str, page: IndexablePage, tz: tzinfo | None = None
) -> SitemapEntry:
    """Build the entry for one dated page.

    Args:
        root_url: Absolute root URL of the site.
        page: A page whose identifier is date-prefixed.
        tz: Time zone in which aware publication dates are truncated.

    Returns:
        SitemapEntry for the page.

    Raises:
        FormatError: If the page is dated but has no publication date.
    """
    if page.date is None:
        if is_dated(page.identifier):
            raise FormatError(page, "date-prefixed page has no publication date")
        raise FormatError(page, "page has no publication date")
    return SitemapEntry(
        location=join_root_url(root_url, page.url),
        last_modified=_truncate_to_date(page.date, tz),
        change_frequency=ChangeFrequency.WEEKLY,
        priority=PAGE_PRIORITY,
    )


def build_entries(
    root_url: str, pages: Iterable[IndexablePage], tz: tzinfo | None = None
) -> list[SitemapEntry]:
    """Build the root entry followed by one entry per page.

    Args:
        root_url: Absolute root URL of the site.
        pages: Pages already filtered by the index collector.
        tz: Time zone for date truncation.

    Returns:
        Fully materialized list of entries.

    Raises:
        FormatError: If any page lacks a publication date.
    """
    entries = [root_entry(root_url)]
    entries.extend(page_entry(root_url, page, tz) for page in pages)
    return entries


def render_sitemap(entries: Iterable[SitemapEntry]) -> str:
    """Serialize sitemap entries to an XML document.

    Args:
        entries: Entries in output order.

    Returns:
        XML text with declaration and <urlset> root element.
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
    ]
    for entry in entries:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape_html(entry.location)}</loc>")
        if entry.last_modified is not None:
            lines.append(
                f"    <lastmod>{entry.last_modified.isoformat()}</lastmod>"
            )
        lines.append(f"    <changefreq>{entry.change_frequency.value}</changefreq>")
        lines.append(f"    <priority>{entry.priority:.1f}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def generate_sitemap(
    root_url: str, pages: Iterable[IndexablePage], tz: tzinfo | None = None
) -> str:
    """Collect the dated pages of a site and render their sitemap.

    Args:
        root_url: Absolute root URL of the site.
        pages: All pages known to the site, in output order.
        tz: Time zone for date truncation.

    Returns:
        Sitemap XML text.

    Raises:
        FormatError: If a dated page lacks a publication date.
    """
    entries = build_entries(root_url, collect_dated_pages(pages), tz)
    return render_sitemap(entries)
