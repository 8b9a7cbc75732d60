import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from quire.build import BuildError, BuildResult, _format_error_message, build_site
from quire.config import ConfigError
from quire.sitemap import SITEMAP_NAMESPACE


def create_project(tmp_path: Path, config: str | None = None) -> Path:
    project = tmp_path
    source = project / "source"
    (source / "_layouts").mkdir(parents=True)

    (project / "quire.yaml").write_text(
        config
        if config is not None
        else "url: http://example.com\ntitle: Test Blog\nblog:\n  per_page: 1\n",
        encoding="utf-8",
    )
    (source / "_layouts" / "post.html.jinja").write_text(
        "<article>{{ page_content }}</article>", encoding="utf-8"
    )
    (source / "_layouts" / "default.html.jinja").write_text(
        "<main>{{ page_content }}</main>", encoding="utf-8"
    )
    (source / "index.html.jinja").write_text(
        "---\npageable: true\n---\n"
        "{% for a in page_articles %}<h2>{{ a.title }}</h2>{% endfor %}"
        '{% if pagination.next_url %}<a href="{{ pagination.next_url }}">next</a>{% endif %}',
        encoding="utf-8",
    )
    (source / "tag.html.jinja").write_text(
        "<h1>{{ tagname }}</h1>{% for a in page_articles %}{{ a.title }};{% endfor %}",
        encoding="utf-8",
    )
    (source / "calendar.html.jinja").write_text(
        "<h1>{{ year }}{% if month %}-{{ month }}{% endif %}"
        "{% if day %}-{{ day }}{% endif %}</h1>"
        "{% for a in page_articles %}{{ a.title }};{% endfor %}",
        encoding="utf-8",
    )
    (source / "2014-03-16-ninja.md").write_text(
        "---\ntags: build\n---\n# Ninja\n\nFast builds.\n", encoding="utf-8"
    )
    (source / "2014-04-02-zsh.md").write_text(
        "---\ntags: shell, build\n---\n# Zsh\n\nShell.\n", encoding="utf-8"
    )
    (source / "about.md").write_text("# About\n\nMe.\n", encoding="utf-8")
    return project


def read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def test_build_site_end_to_end(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)
    out = project / "build"

    assert isinstance(result, BuildResult)
    assert result.output_dir == out
    assert result.feeds == ["sitemap.xml", "feed.xml"]

    index = read(out / "index.html")
    assert index.startswith("<main>")
    assert "<h2>Zsh</h2>" in index
    assert "Ninja" not in index
    assert 'href="/page/2.html"' in index
    assert "<h2>Ninja</h2>" in read(out / "page" / "2.html")

    article = read(out / "2014" / "03" / "16" / "ninja.html")
    assert article.startswith("<article>")
    assert "Fast builds." in article
    assert read(out / "about.html").startswith("<main>")

    assert "Zsh;" in read(out / "tags" / "build.html")
    assert "Ninja;" in read(out / "tags" / "build" / "page" / "2.html")
    assert "<h1>shell</h1>" in read(out / "tags" / "shell.html")

    assert "<h1>2014</h1>" in read(out / "2014.html")
    assert "<h1>2014-3</h1>" in read(out / "2014" / "03.html")
    assert "<h1>2014-4-2</h1>Zsh;" in read(out / "2014" / "04" / "02.html")

    assert not (out / "tag.html").exists()
    assert not (out / "calendar.html").exists()
    assert "/tags/shell.html" in result.written


def test_build_writes_sitemap_of_dated_pages(tmp_path):
    project = create_project(tmp_path)
    build_site(project)
    root = ET.fromstring((project / "build" / "sitemap.xml").read_bytes())
    ns = {"sm": SITEMAP_NAMESPACE}
    locs = [node.text for node in root.findall("sm:url/sm:loc", ns)]
    assert locs == [
        "http://example.com",
        "http://example.com/2014/03/16/ninja.html",
        "http://example.com/2014/04/02/zsh.html",
    ]
    lastmods = [node.text for node in root.findall("sm:url/sm:lastmod", ns)]
    assert lastmods == ["2014-03-16", "2014-04-02"]


def test_build_without_url_skips_feeds(tmp_path, capsys):
    project = create_project(tmp_path, config="")
    result = build_site(project)
    assert result.feeds == []
    assert not (project / "build" / "sitemap.xml").exists()
    assert "skipping sitemap.xml" in capsys.readouterr().out

    result = build_site(project, root_url="http://override.test")
    assert result.config.url == "http://override.test"
    assert "http://override.test/2014/03/16/ninja.html" in read(
        project / "build" / "sitemap.xml"
    )


def test_build_output_override_and_clean(tmp_path):
    project = create_project(tmp_path)
    target = tmp_path / "elsewhere"
    target.mkdir()
    (target / "stale.html").write_text("old", encoding="utf-8")
    build_site(project, output_dir_override=target)
    assert (target / "index.html").exists()
    assert not (target / "stale.html").exists()

    (target / "keep.txt").write_text("keep", encoding="utf-8")
    build_site(project, output_dir_override=target, clean_output=False)
    assert (target / "keep.txt").exists()


def test_undated_article_fails_build_without_sitemap(tmp_path):
    project = create_project(tmp_path)
    broken = project / "source" / "2014-05-zsh.md"
    broken.write_text("# Zsh\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == broken
    assert "no publication date" in excinfo.value.message
    assert not (project / "build").exists()


def test_failed_build_keeps_previous_output(tmp_path):
    project = create_project(tmp_path)
    build_site(project)
    out = project / "build"
    before = sorted(p.relative_to(out) for p in out.rglob("*"))
    index = read(out / "index.html")

    (project / "source" / "2014-05-zsh.md").write_text("# Zsh\n", encoding="utf-8")
    with pytest.raises(BuildError):
        build_site(project)

    assert sorted(p.relative_to(out) for p in out.rglob("*")) == before
    assert read(out / "index.html") == index
    assert (out / "sitemap.xml").exists()
    assert not (out / "2014-05-zsh.html").exists()


def test_scalar_tag_value_builds(tmp_path):
    project = create_project(tmp_path)
    (project / "source" / "2014-06-01-year.md").write_text(
        "---\ntags: 2014\n---\n# Year\n", encoding="utf-8"
    )
    result = build_site(project)
    assert "/tags/2014.html" in result.written
    assert "Year;" in read(project / "build" / "tags" / "2014.html")


def test_template_errors_are_wrapped(tmp_path):
    project = create_project(tmp_path)
    bad = project / "source" / "broken.html.jinja"
    bad.write_text("{% for x in %}", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == bad
    assert "Template syntax error" in excinfo.value.message


def test_duplicate_urls_are_rejected(tmp_path):
    project = create_project(tmp_path)
    (project / "source" / "about.html").write_text("<p>again</p>", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert "/about.html" in excinfo.value.message


def test_invalid_content_is_reported(tmp_path):
    project = create_project(tmp_path)
    bad = project / "source" / "2014-06-01-bad.md"
    bad.write_text("---\ndate: someday\n---\n# Bad\n", encoding="utf-8")
    with pytest.raises(BuildError) as excinfo:
        build_site(project)
    assert excinfo.value.source_path == bad
    assert isinstance(excinfo.value.original_error, Exception)


def test_missing_source_dir_and_bad_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_site(tmp_path)
    (tmp_path / "quire.yaml").write_text("blog:\n  per_page: 0\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        build_site(tmp_path)


def test_format_error_message():
    class UndefinedError(Exception):
        pass

    assert _format_error_message(UndefinedError("x")) == "Undefined variable: x"
    assert _format_error_message(KeyError("k")) == "KeyError: 'k'"
