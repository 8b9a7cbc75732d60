from datetime import datetime, timezone

from quire.collections import PageCollection, TagCollection
from quire.config import SiteConfig
from quire.templates import TemplateEngine


def make_source(tmp_path):
    source = tmp_path / "source"
    (source / "_layouts").mkdir(parents=True)
    (source / "_partials").mkdir()
    (source / "_partials" / "footer.html.jinja").write_text(
        "<footer>{{ site.title }}</footer>", encoding="utf-8"
    )
    (source / "_layouts" / "default.html.jinja").write_text(
        "<title>{{ current_page.title }}</title>{{ page_content }}"
        "{% include 'footer.html.jinja' %}",
        encoding="utf-8",
    )
    return source


def test_template_engine_renders_with_layout(tmp_path, make_page):
    source = make_source(tmp_path)
    engine = TemplateEngine(source, SiteConfig(title="Notes"))
    page = make_page("about", title="About", content="<p>Hi & bye</p>")
    rendered = engine.render_page(page)
    assert rendered == "<title>About</title><p>Hi & bye</p><footer>Notes</footer>"


def test_missing_layout_falls_back_to_default_then_body(tmp_path, make_page, capsys):
    source = make_source(tmp_path)
    engine = TemplateEngine(source, SiteConfig())
    page = make_page("2014-03-16-ninja", title="Ninja", layout="post")
    assert engine.render_page(page).startswith("<title>Ninja</title>")

    bare = TemplateEngine(tmp_path / "empty", SiteConfig())
    assert bare.render_page(page) == "<p>2014-03-16-ninja</p>"
    assert "Layout 'post' not found" in capsys.readouterr().out


def test_disabled_layout_renders_body_only(tmp_path, make_page):
    engine = TemplateEngine(make_source(tmp_path), SiteConfig())
    page = make_page("raw", layout="", content="<p>raw</p>")
    assert engine.render_page(page) == "<p>raw</p>"


def test_jinja_pages_see_collections_and_extra_context(tmp_path, make_page):
    engine = TemplateEngine(make_source(tmp_path), SiteConfig())
    article = make_page(
        "2014-03-16-ninja",
        date=datetime(2014, 3, 16, tzinfo=timezone.utc),
        title="Ninja",
        tags=["build"],
    )
    engine.update_collections(
        PageCollection([article]), TagCollection.from_pages([article])
    )
    page = make_page(
        "index",
        url="/",
        layout="",
        source_type="jinja",
        content=(
            "{% for a in articles %}{{ a.title }}{% endfor %}|"
            "{% for t in tags %}{{ tag_url(t) }}{% endfor %}|{{ tagname }}"
        ),
    )
    rendered = engine.render_page(page, {"tagname": "build"})
    assert rendered == "Ninja|/tags/build.html|build"


def test_url_helpers(tmp_path):
    engine = TemplateEngine(tmp_path, SiteConfig())
    assert engine.url_for("feed.xml") == "/feed.xml"
    assert engine.url_for("http://cdn.com/lib.js") == "http://cdn.com/lib.js"
    assert engine.tag_url("shell", 2) == "/tags/shell/page/2.html"

    absolute = TemplateEngine(tmp_path, SiteConfig(url="http://example.com/"))
    assert absolute.url_for("/about.html") == "http://example.com/about.html"


def test_pygments_css_global(tmp_path, make_page):
    engine = TemplateEngine(tmp_path, SiteConfig())
    page = make_page(
        "style", layout="", source_type="jinja", content="{{ pygments_css() }}"
    )
    assert ".highlight" in engine.render_page(page)
