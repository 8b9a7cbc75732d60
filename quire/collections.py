from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Page


def _sort_key(page: Page):
    # Undated pages sort as the oldest
    timestamp = page.date.timestamp() if page.date is not None else float("-inf")
    return (timestamp, page.identifier)


class PageCollection(Sequence[Page]):
    """Lightweight helper for working with lists of Pages in templates and code."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PageCollection(self._pages[item])
        return self._pages[item]

    def sorted(self, reverse: bool = True) -> PageCollection:
        """Sort pages by date, then by identifier.

        Args:
            reverse: If True (default), newest first.

        Returns:
            A new PageCollection with sorted pages.
        """
        return PageCollection(sorted(self._pages, key=_sort_key, reverse=reverse))

    def latest(self, count: int = 5) -> PageCollection:
        return self.sorted()[:count]

    def by_year(self) -> dict[int, PageCollection]:
        """Group dated pages by year, preserving collection order."""
        return self._group(lambda p: p.date.year)

    def by_month(self) -> dict[tuple[int, int], PageCollection]:
        """Group dated pages by (year, month)."""
        return self._group(lambda p: (p.date.year, p.date.month))

    def by_day(self) -> dict[tuple[int, int, int], PageCollection]:
        """Group dated pages by (year, month, day)."""
        return self._group(lambda p: (p.date.year, p.date.month, p.date.day))

    def _group(self, key) -> dict:
        groups: dict = {}
        for page in self._pages:
            if page.date is None:
                continue
            groups.setdefault(key(page), []).append(page)
        return {k: PageCollection(v) for k, v in groups.items()}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class TagCollection(Mapping[str, PageCollection]):
    """Mapping of tag name to PageCollection, in first-seen tag order."""

    def __init__(self, mapping: dict[str, Iterable[Page]]):
        self._mapping = {k: PageCollection(v) for k, v in mapping.items()}

    @classmethod
    def from_pages(cls, pages: Iterable[Page]) -> TagCollection:
        tags: dict[str, list[Page]] = {}
        for page in pages:
            for tag in page.tags:
                tags.setdefault(tag, []).append(page)
        return cls(tags)

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
