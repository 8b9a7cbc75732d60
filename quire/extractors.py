"""Metadata extractors for Quire.

Each extractor handles a single kind of metadata and returns a partial
dictionary; ``CompositeMetadataExtractor`` merges them.

Key classes:
- FrontmatterExtractor: Splits YAML frontmatter from the body.
- TitleExtractor: Extracts title from the first heading or the filename.
- DateExtractor: Extracts the publication date from a YYYY-MM-DD filename prefix.
- CompositeMetadataExtractor: Runs extractors in order and merges results.
"""

from __future__ import annotations

import re
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any

import yaml

from .utils import extract_date_from_name, strip_content_suffixes, titleize

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from content.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (frontmatter dict, remaining content).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        return {}, text
    if not isinstance(data, dict):
        return {}, text
    return data, text[match.end() :]


class FrontmatterExtractor:
    """Extracts YAML frontmatter (between --- markers) from content."""

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        frontmatter, body = extract_frontmatter(content)
        return {"frontmatter": frontmatter, "body": body}


class TitleExtractor:
    """Extracts title from content or filename.

    Looks for a level-1 heading (# Title) in the content,
    falling back to titleizing the filename.
    """

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        for line in content.splitlines():
            stripped = line.strip()
            if stripped.startswith("# "):
                return {"title": stripped[2:].strip()}
        return {"title": titleize(path.name)}


class DateExtractor:
    """Extracts the publication date from a YYYY-MM-DD filename prefix.

    Files without a full date prefix get ``None``; the file modification
    time is never used, since it changes on every checkout.
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        date = extract_date_from_name(strip_content_suffixes(path.name))
        if date is not None:
            date = date.replace(tzinfo=self.tz)
        return {"date": date}


class CompositeMetadataExtractor:
    """Combines multiple metadata extractors.

    Extractors run in order and their results are merged, later ones
    overriding earlier ones. Once an extractor yields a ``body`` key,
    subsequent extractors see that body instead of the raw content.
    """

    def __init__(self, extractors: list | None = None, tz: tzinfo = timezone.utc):
        """Initialize with a list of extractors.

        Args:
            extractors: MetadataExtractor implementations. If None, uses
                the default frontmatter, title and date extractors.
            tz: Time zone for dates derived from filenames.
        """
        if extractors is None:
            self._extractors = [
                FrontmatterExtractor(),
                TitleExtractor(),
                DateExtractor(tz),
            ]
        else:
            self._extractors = list(extractors)

    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract all metadata from content.

        Args:
            content: Source content.
            path: Path to the source file.

        Returns:
            Dictionary with all extracted metadata.
        """
        result: dict[str, Any] = {}
        text = content
        for extractor in self._extractors:
            result.update(extractor.extract(text, path))
            text = result.get("body", text)
        return result
