from zoneinfo import ZoneInfo

import pytest

from quire.config import ConfigError, SiteConfig, load_config


def test_defaults_without_config_file(tmp_path):
    config = load_config(tmp_path)
    assert config.url == ""
    assert config.timezone == "UTC"
    assert config.tz == ZoneInfo("UTC")
    assert config.source_dir == "source"
    assert config.output_dir == "build"
    assert config.sitemap_path == "sitemap.xml"
    assert config.blog.per_page == 10
    assert config.blog.paginate is True
    assert config.blog.layout == "post"
    assert config.blog.summary_length is None
    assert config.blog.tag_template == "tag.html"
    assert config.blog.calendar_template == "calendar.html"
    assert config.feed.path == "feed.xml"
    assert config.markdown.syntax is True


def test_nested_values_merge_over_defaults(tmp_path):
    (tmp_path / "quire.yaml").write_text(
        "url: http://example.com\n"
        "timezone: Europe/Berlin\n"
        "blog:\n"
        "  per_page: 5\n"
        "markdown:\n"
        "  syntax: false\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.url == "http://example.com"
    assert config.tz == ZoneInfo("Europe/Berlin")
    assert config.blog.per_page == 5
    assert config.blog.permalink == "{year}/{month}/{day}/{title}.html"
    assert config.markdown.syntax is False
    assert "footnotes" in config.markdown.plugins


def test_empty_config_file_uses_defaults(tmp_path):
    (tmp_path / "quire.yaml").write_text("", encoding="utf-8")
    assert load_config(tmp_path) == SiteConfig()


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "mapping"),
        ("timezone: Mars/Olympus\n", "time zone"),
        ("blog:\n  per_page: 0\n", "per_page"),
        ("blog:\n  summary_length: -3\n", "summary_length"),
        ("feed:\n  limit: 0\n", "feed.limit"),
        ("blog:\n  permalink: '{year}/{month}.html'\n", "{title}"),
        ("blog:\n  page_link: 'page'\n", "{num}"),
        ("colour: blue\n", "Unknown configuration key"),
        ("url: [unclosed\n", "quire.yaml"),
    ],
)
def test_invalid_config_raises(tmp_path, content, message):
    (tmp_path / "quire.yaml").write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)
    assert message in str(excinfo.value)


def test_with_url_returns_copy():
    config = SiteConfig()
    other = config.with_url("http://example.com")
    assert other.url == "http://example.com"
    assert config.url == ""
    assert other.blog is config.blog
