"""Utility functions for Quire.

String processing, path handling and date helpers shared by the content,
template and build modules.

Key functions:
    slugify: Convert filenames to URL slugs.
    titleize: Convert filenames to human-readable titles.
    strip_content_suffixes: Drop content extensions from a filename.
    extract_date_from_name: Extract date from filename prefix.
    coerce_datetime: Normalize frontmatter dates to aware datetimes.
    split_tags: Normalize a frontmatter tag value into a list.
    is_markdown / is_template / is_html: Classify source files.
    ensure_clean_dir: Ensure a directory exists and is empty.
    output_path_for_url: Map a site URL to a file inside the output directory.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import Any

CONTENT_SUFFIXES = (".jinja", ".md", ".html")


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug.
    """
    cleaned = name
    if "-" in cleaned:
        parts = cleaned.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            cleaned = "-".join(parts[3:])
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Examples:
        >>> titleize("2014-03-16-ninja.md")
        'Ninja'

        >>> titleize("about-me.md")
        'About Me'
    """
    base = strip_content_suffixes(filename)
    if "-" in base:
        parts = base.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            base = "-".join(parts[3:])
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def strip_content_suffixes(filename: str) -> str:
    """Remove trailing content extensions (.md, .html, .jinja) from a filename.

    Examples:
        >>> strip_content_suffixes("index.html.jinja")
        'index'

        >>> strip_content_suffixes("2014-03-16-ninja.md")
        '2014-03-16-ninja'
    """
    name = filename
    while True:
        lowered = name.lower()
        for suffix in CONTENT_SUFFIXES:
            if lowered.endswith(suffix) and len(name) > len(suffix):
                name = name[: -len(suffix)]
                break
        else:
            return name


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        Naive datetime if a valid date prefix is found, None otherwise.
    """
    parts = name.split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def coerce_datetime(value: Any, tz: tzinfo) -> datetime | None:
    """Normalize a date-like value into an aware datetime.

    PyYAML already turns unquoted dates into ``date`` or ``datetime``
    objects; quoted strings are parsed with ``datetime.fromisoformat``.
    Naive values are interpreted in ``tz``.

    Args:
        value: A datetime, date, ISO string or None.
        tz: Time zone for naive values.

    Returns:
        Aware datetime, or None when value is empty.

    Raises:
        ValueError: If a string is not an ISO date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    else:
        result = datetime.fromisoformat(str(value).strip())
    if result.tzinfo is None:
        result = result.replace(tzinfo=tz)
    return result


def split_tags(value: Any) -> list[str]:
    """Normalize a frontmatter tag value into a list of unique tags.

    Examples:
        >>> split_tags("ruby, build tools")
        ['ruby', 'build tools']

        >>> split_tags(["shell", "shell", "zsh"])
        ['shell', 'zsh']

        >>> split_tags(2014)
        ['2014']
    """
    if value is None or value is False or value == "":
        return []
    if isinstance(value, str):
        raw = value.split(",")
    elif isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        # Scalars such as `tags: 2014` form a single tag
        raw = [value]
    tags: list[str] = []
    for item in raw:
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first non-heading paragraph from text.

    Strips HTML tags and Jinja syntax, collapses whitespace and truncates
    to the specified limit.

    Args:
        text: Text content to extract from.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "```", "![")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        para = re.sub(r"\{[%#{].*?[%#}]\}", "", para)
        collapsed = " ".join(para.split())
        return collapsed[:limit]
    return ""


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file."""
    return path.suffix.lower() == ".md"


def is_template(path: Path) -> bool:
    """Check if a path is a Jinja template file.

    Matches both .jinja and .html.jinja extensions.
    """
    return path.suffixes[-2:] == [".html", ".jinja"] or path.suffix == ".jinja"


def is_html(path: Path) -> bool:
    """Check if a path is a plain HTML file (not a Jinja template)."""
    return path.suffix.lower() == ".html" and not is_template(path)


def output_path_for_url(output_dir: Path, url: str) -> Path:
    """Map a site URL to the file that serves it.

    Args:
        output_dir: Base output directory.
        url: Site-relative URL such as ``/``, ``/about.html`` or ``/notes/``.

    Returns:
        Path inside output_dir.

    Examples:
        >>> output_path_for_url(Path("build"), "/2014/03/16/ninja.html").as_posix()
        'build/2014/03/16/ninja.html'

        >>> output_path_for_url(Path("build"), "/notes/").as_posix()
        'build/notes/index.html'
    """
    rel = url.strip("/")
    if not rel or url.endswith("/"):
        return output_dir / rel / "index.html"
    return output_dir / rel
