"""Protocol definitions for Quire.

These protocols describe the seams between the content pipeline and the
sitemap/feed emitters, so the emitters accept any page-like object a site
generator produces, and tests can pass lightweight fakes.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IndexablePage(Protocol):
    """Minimal view of a page needed by the index collector and sitemap.

    Attributes:
        identifier: Source name used to test the date-prefix convention.
        url: Site-relative URL path.
        date: Publication date, or None for undated pages.
    """

    identifier: str
    url: str
    date: date | None


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering content from source files."""

    @abstractmethod
    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file."""
        ...

    @abstractmethod
    def render(self, content: str) -> str:
        """Render content to HTML."""
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown', 'html', 'jinja')."""
        ...


@runtime_checkable
class MetadataExtractor(Protocol):
    """Protocol for extracting metadata from content.

    Implementations extract one kind of metadata (title, tags, date).
    """

    @abstractmethod
    def extract(self, content: str, path: Path) -> dict[str, Any]:
        """Extract metadata from content.

        Args:
            content: Source content.
            path: Path to the source file.

        Returns:
            Dictionary of extracted metadata.
        """
        ...
