"""Page index collection for Quire.

Blog articles are recognized purely by naming convention: an identifier that
starts with a year-month prefix (``2014-03``) marks a dated article. This
module holds that predicate and the lazy filter built on it.

Functions:
    is_dated: Test an identifier against the date-prefix convention.
    collect_dated_pages: Lazily keep the pages whose identifier is dated.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import TypeVar

from .protocols import IndexablePage

DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}")

P = TypeVar("P", bound=IndexablePage)


def is_dated(identifier: str) -> bool:
    """Check whether an identifier carries a year-month date prefix.

    Examples:
        >>> is_dated("2014-03-16-ninja")
        True

        >>> is_dated("about")
        False
    """
    return DATE_PREFIX_RE.match(identifier) is not None


def collect_dated_pages(pages: Iterable[P]) -> Iterator[P]:
    """Yield the pages whose identifier is date-prefixed.

    Input order is preserved and nothing is sorted. An input without any
    dated page yields nothing.

    Args:
        pages: All pages known to the site.

    Yields:
        Pages passing ``is_dated``.
    """
    for page in pages:
        if is_dated(page.identifier):
            yield page
