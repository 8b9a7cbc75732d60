"""Site configuration for Quire.

Configuration is read from ``quire.yaml`` at the project root and merged over
``DEFAULT_CONFIG``. The result is a ``SiteConfig`` object that is passed
explicitly to every build stage.

Key names:
- SiteConfig: Top-level configuration (root URL, time zone, directories).
- BlogConfig: Blog engine settings (permalinks, pagination, templates).
- MarkdownConfig: Markdown renderer settings.
- FeedConfig: Atom feed settings.
- load_config: Load and validate ``quire.yaml``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

CONFIG_FILENAME = "quire.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "url": "",
    "title": "Blog",
    "author": "",
    "timezone": "UTC",
    "source_dir": "source",
    "output_dir": "build",
    "sitemap_path": "sitemap.xml",
    "blog": {
        "permalink": "{year}/{month}/{day}/{title}.html",
        "layout": "post",
        "summary_length": None,
        "summary_separator": "READMORE",
        "tag_template": "tag.html",
        "taglink": "tags/{tag}.html",
        "calendar_template": "calendar.html",
        "year_link": "{year}.html",
        "month_link": "{year}/{month}.html",
        "day_link": "{year}/{month}/{day}.html",
        "paginate": True,
        "per_page": 10,
        "page_link": "page/{num}",
    },
    "markdown": {
        "syntax": True,
        "plugins": ["strikethrough", "footnotes", "table", "url"],
    },
    "feed": {
        "path": "feed.xml",
        "limit": 20,
    },
}

# Placeholders each link template must carry
_REQUIRED_PLACEHOLDERS = {
    "permalink": ("{title}",),
    "taglink": ("{tag}",),
    "year_link": ("{year}",),
    "month_link": ("{year}", "{month}"),
    "day_link": ("{year}", "{month}", "{day}"),
    "page_link": ("{num}",),
}


class ConfigError(Exception):
    """Raised when ``quire.yaml`` holds an invalid value."""


@dataclass
class BlogConfig:
    """Blog engine settings.

    Attributes:
        permalink: URL template for articles.
        layout: Layout used for articles.
        summary_length: Plain-text summary length, or None for the whole article.
        summary_separator: Marker separating the summary from the rest.
        tag_template: Template rendered once per tag.
        taglink: URL template for tag pages.
        calendar_template: Template rendered per year, month and day.
        year_link: URL template for yearly archives.
        month_link: URL template for monthly archives.
        day_link: URL template for daily archives.
        paginate: Whether pageable pages are split into slices.
        per_page: Number of articles per slice.
        page_link: URL suffix template for slices after the first.
    """

    permalink: str = "{year}/{month}/{day}/{title}.html"
    layout: str = "post"
    summary_length: int | None = None
    summary_separator: str = "READMORE"
    tag_template: str = "tag.html"
    taglink: str = "tags/{tag}.html"
    calendar_template: str = "calendar.html"
    year_link: str = "{year}.html"
    month_link: str = "{year}/{month}.html"
    day_link: str = "{year}/{month}/{day}.html"
    paginate: bool = True
    per_page: int = 10
    page_link: str = "page/{num}"


@dataclass
class MarkdownConfig:
    """Markdown renderer settings."""

    syntax: bool = True
    plugins: list[str] = field(
        default_factory=lambda: ["strikethrough", "footnotes", "table", "url"]
    )


@dataclass
class FeedConfig:
    """Atom feed settings."""

    path: str = "feed.xml"
    limit: int = 20


@dataclass
class SiteConfig:
    """Top-level site configuration.

    Attributes:
        url: Absolute root URL of the site. Empty disables sitemap and feed.
        title: Site title.
        author: Default author name for the feed.
        timezone: IANA time zone name used for publication dates.
        source_dir: Content directory, relative to the project root.
        output_dir: Output directory, relative to the project root.
        sitemap_path: Sitemap path inside the output directory.
        blog: Blog engine settings.
        markdown: Markdown renderer settings.
        feed: Atom feed settings.
    """

    url: str = ""
    title: str = "Blog"
    author: str = ""
    timezone: str = "UTC"
    source_dir: str = "source"
    output_dir: str = "build"
    sitemap_path: str = "sitemap.xml"
    blog: BlogConfig = field(default_factory=BlogConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)

    @property
    def tz(self) -> ZoneInfo:
        """Return the configured time zone."""
        return ZoneInfo(self.timezone)

    def with_url(self, url: str) -> SiteConfig:
        """Return a copy of this configuration with a different root URL."""
        return replace(self, url=url)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> SiteConfig:
        """Build a validated configuration from a plain mapping.

        Args:
            mapping: Values merged over DEFAULT_CONFIG.

        Returns:
            SiteConfig instance.

        Raises:
            ConfigError: If a value is invalid.
        """
        merged = _merge(copy.deepcopy(DEFAULT_CONFIG), mapping)
        blog = merged.pop("blog")
        markdown = merged.pop("markdown")
        feed = merged.pop("feed")
        try:
            config = cls(
                blog=BlogConfig(**blog),
                markdown=MarkdownConfig(**markdown),
                feed=FeedConfig(**feed),
                **merged,
            )
        except TypeError as exc:
            raise ConfigError(f"Unknown configuration key: {exc}") from exc
        config.validate()
        return config

    def validate(self) -> None:
        """Check the configuration for invalid values.

        Raises:
            ConfigError: If a value is invalid.
        """
        try:
            ZoneInfo(str(self.timezone))
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown time zone: {self.timezone}") from exc
        if not isinstance(self.blog.per_page, int) or self.blog.per_page < 1:
            raise ConfigError(
                f"blog.per_page must be a positive integer, got {self.blog.per_page!r}"
            )
        length = self.blog.summary_length
        if length is not None and (not isinstance(length, int) or length < 1):
            raise ConfigError(
                f"blog.summary_length must be a positive integer or null, got {length!r}"
            )
        if not isinstance(self.feed.limit, int) or self.feed.limit < 1:
            raise ConfigError(
                f"feed.limit must be a positive integer, got {self.feed.limit!r}"
            )
        for name, placeholders in _REQUIRED_PLACEHOLDERS.items():
            template = getattr(self.blog, name)
            missing = [p for p in placeholders if p not in template]
            if missing:
                raise ConfigError(
                    f"blog.{name} is missing {', '.join(missing)}: {template!r}"
                )


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``.

    Args:
        base: Mapping to update in place.
        override: Values taking precedence.

    Returns:
        The updated base mapping.
    """
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(project_root: Path) -> SiteConfig:
    """Load site configuration from quire.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        SiteConfig with defaults applied for missing keys.

    Raises:
        ConfigError: If the file is not a mapping or holds invalid values.
    """
    config_path = project_root / CONFIG_FILENAME
    loaded: Any = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"{config_path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    return SiteConfig.from_mapping(loaded)
