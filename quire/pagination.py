"""Pagination for Quire.

Pageable pages (the blog index, tag pages) are rendered once per slice of
articles. The first slice keeps the page's own URL; slice N lives at
``<base>/<page_link>.html``, e.g. ``/page/2.html`` or
``/tags/shell/page/2.html``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .config import BlogConfig


@dataclass
class PageSlice:
    """One page of a paginated listing.

    Attributes:
        number: 1-based slice number.
        total: Number of slices.
        items: Articles on this slice.
        url: URL of this slice.
        prev_url: URL of the previous slice, if any.
        next_url: URL of the next slice, if any.
    """

    number: int
    total: int
    items: Sequence[Any]
    url: str
    prev_url: str | None = None
    next_url: str | None = None

    @property
    def is_first(self) -> bool:
        return self.number == 1

    @property
    def is_last(self) -> bool:
        return self.number == self.total


def slice_url(base_url: str, number: int, page_link: str = "page/{num}") -> str:
    """Return the URL of slice ``number`` for a listing at ``base_url``.

    Examples:
        >>> slice_url("/", 2)
        '/page/2.html'

        >>> slice_url("/tags/shell.html", 3)
        '/tags/shell/page/3.html'

        >>> slice_url("/tags/shell.html", 1)
        '/tags/shell.html'
    """
    if number == 1:
        return base_url
    base = base_url.rstrip("/")
    if base.endswith(".html"):
        base = base[: -len(".html")]
    if base.endswith("/index"):
        base = base[: -len("/index")]
    return f"{base}/{page_link.format(num=number)}.html"


def paginate(
    items: Sequence[Any], base_url: str, blog: BlogConfig | None = None
) -> list[PageSlice]:
    """Split items into slices according to the blog settings.

    An empty listing still produces one (empty) slice so the page itself is
    rendered. With pagination disabled every item lands on a single slice.

    Args:
        items: Articles to split, already in display order.
        base_url: URL of the first slice.
        blog: Blog settings (``paginate``, ``per_page``, ``page_link``).

    Returns:
        List of slices with navigation URLs filled in.
    """
    blog = blog or BlogConfig()
    items = list(items)
    per_page = blog.per_page if blog.paginate else max(len(items), 1)
    chunks = [items[i : i + per_page] for i in range(0, len(items), per_page)] or [[]]
    total = len(chunks)
    urls = [slice_url(base_url, n, blog.page_link) for n in range(1, total + 1)]
    return [
        PageSlice(
            number=n,
            total=total,
            items=chunk,
            url=urls[n - 1],
            prev_url=urls[n - 2] if n > 1 else None,
            next_url=urls[n] if n < total else None,
        )
        for n, chunk in enumerate(chunks, start=1)
    ]
