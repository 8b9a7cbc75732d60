from __future__ import annotations

from pathlib import Path

import pytest

from quire.content import Page


@pytest.fixture
def make_page():
    """Factory for Page objects with sensible defaults."""

    def factory(identifier: str, url: str | None = None, date=None, **kwargs) -> Page:
        values = {
            "identifier": identifier,
            "url": url or f"/{identifier}.html",
            "date": date,
            "title": identifier.title(),
            "body": "",
            "content": f"<p>{identifier}</p>",
            "summary": f"<p>{identifier}</p>",
            "tags": [],
            "draft": False,
            "layout": "default",
            "path": Path(f"{identifier}.md"),
            "source_type": "markdown",
        }
        values.update(kwargs)
        return Page(**values)

    return factory
