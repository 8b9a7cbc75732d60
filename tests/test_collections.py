from datetime import datetime, timezone

from quire.collections import PageCollection, TagCollection


def dt(*args):
    return datetime(*args, tzinfo=timezone.utc)


def test_page_collection_sorting_and_latest(make_page):
    pages = PageCollection(
        [
            make_page("2014-01-02-a", date=dt(2014, 1, 2), tags=["python"]),
            make_page("2014-01-03-b", date=dt(2014, 1, 3), draft=True),
            make_page("about"),
            make_page("2013-12-31-c", date=dt(2013, 12, 31), tags=["python", "shell"]),
        ]
    )
    assert len(pages) == 4
    assert pages.latest(1)[0].identifier == "2014-01-03-b"
    assert [p.identifier for p in pages.sorted(reverse=False)] == [
        "about",
        "2013-12-31-c",
        "2014-01-02-a",
        "2014-01-03-b",
    ]
    assert isinstance(pages[1:3], PageCollection)


def test_same_day_sorts_by_identifier(make_page):
    pages = PageCollection(
        [
            make_page("2014-01-01-b", date=dt(2014, 1, 1)),
            make_page("2014-01-01-a", date=dt(2014, 1, 1)),
        ]
    )
    assert [p.identifier for p in pages.sorted()] == ["2014-01-01-b", "2014-01-01-a"]
    assert [p.identifier for p in pages.sorted(reverse=False)] == [
        "2014-01-01-a",
        "2014-01-01-b",
    ]


def test_calendar_grouping(make_page):
    pages = PageCollection(
        [
            make_page("2014-04-02-zsh", date=dt(2014, 4, 2)),
            make_page("2014-03-16-ninja", date=dt(2014, 3, 16)),
            make_page("2014-03-16-make", date=dt(2014, 3, 16)),
            make_page("2013-07-01-orm", date=dt(2013, 7, 1)),
            make_page("2014-05-undated"),
        ]
    )
    years = pages.by_year()
    assert list(years) == [2014, 2013]
    assert len(years[2014]) == 3

    months = pages.by_month()
    assert list(months) == [(2014, 4), (2014, 3), (2013, 7)]
    assert [p.identifier for p in months[(2014, 3)]] == [
        "2014-03-16-ninja",
        "2014-03-16-make",
    ]

    days = pages.by_day()
    assert len(days[(2014, 3, 16)]) == 2
    assert (2013, 7, 1) in days


def test_tag_collection_from_pages(make_page):
    a = make_page("2014-01-01-a", tags=["shell", "zsh"])
    b = make_page("2014-01-02-b", tags=["shell"])
    tags = TagCollection.from_pages([a, b])
    assert list(tags) == ["shell", "zsh"]
    assert len(tags) == 2
    assert list(tags["shell"]) == [a, b]
    assert tags.get("missing") is None
    assert [name for name, _ in tags.items()] == ["shell", "zsh"]
