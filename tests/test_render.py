"""Tests for flatblog.render.ThemeRenderer."""

import datetime as dt

import pytest

from flatblog.cache import ThemeCache
from flatblog.config import BlogConfig, BuildOptions, Locale
from flatblog.content import PAGE, POST, Record
from flatblog.index import build_index
from flatblog.render import ThemeRenderer
from flatblog.utils import BuildError

NOW = dt.datetime(2026, 10, 17, 12, 0, 0)


def record(record_id, kind=POST, title=None, date="2020-01-15", tags=()):
    return Record(
        id=record_id,
        kind=kind,
        title=title or f"Record {record_id}",
        author="a",
        date=dt.date.fromisoformat(date),
        tags=tuple(tags),
        url=f"record-{record_id}",
    )


@pytest.fixture
def make_renderer(repo):
    def factory(theme=None, options=None, config=None, posts=None, pages=None):
        if theme is not None:
            repo.write_theme(theme)
        index = build_index(
            posts if posts is not None else [record(1, tags=["python"]), record(2, date="2020-02-01")],
            pages if pages is not None else [record(3, kind=PAGE, title="About")],
            Locale(),
        )
        return ThemeRenderer(
            repo.root,
            config or BlogConfig(title="Test Blog", name="Jane Doe", email="jane@example.com"),
            Locale(),
            options or BuildOptions(),
            index,
            ThemeCache(),
            now=NOW,
        )

    return factory


class TestGlobalPlaceholders:
    def test_blocks_are_filled(self, make_renderer):
        renderer = make_renderer()
        html = renderer.render("<p>hello</p>", "./", "Home")
        assert "<title>Home</title>" in html
        assert '<a href="./">Test Blog</a>' in html
        assert "charset=UTF-8" in html
        assert 'content="flatblog ' in html
        assert '<link rel="stylesheet" href="./default.css"' in html
        assert 'href="./index.rss"' in html
        assert "&copy; 2026 Jane Doe (jane@example.com)" in html
        assert "<p>hello</p>" in html
        assert "<!--" not in html

    def test_lists_use_page_root(self, make_renderer):
        renderer = make_renderer()
        html = renderer.render("", "../../")
        assert '<li><a href="../../2020/02/2-record-2/">Record 2</a></li>' in html
        assert '<li><a href="../../about/">About</a></li>' not in html
        assert '<li><a href="../../record-3/">About</a></li>' in html
        assert '<li><a href="../../tags/python/">python</a> (1)</li>' in html
        assert '<li><a href="../../2020/02/">February 2020</a> (1)</li>' in html

    def test_recent_posts_are_limited(self, make_renderer):
        posts = [record(n, date=f"2020-01-{n:02d}") for n in range(1, 9)]
        renderer = make_renderer(posts=posts)
        assert renderer.list_of_posts("./").count("<li>") == 5

    def test_disabled_features_are_left_out(self, make_renderer):
        renderer = make_renderer(options=BuildOptions(with_rss=False, with_tags=False, with_pages=False))
        html = renderer.render("", "./")
        assert "index.rss" not in html
        assert "tags/python" not in html
        assert "record-3" not in html

    def test_placeholders_are_case_insensitive(self, make_renderer):
        renderer = make_renderer(theme="<h1><!--TITLE--></h1><a href='%HOME%'>x</a><!--  Content  -->")
        assert renderer.render("body", "../") == "<h1>Test Blog</h1><a href='../'>x</a>body"

    def test_unknown_comments_are_kept(self, make_renderer):
        renderer = make_renderer(theme="<!-- keep me --><!-- content -->")
        assert renderer.render("x", "./") == "<!-- keep me -->x"


class TestCache:
    def test_theme_is_loaded_once(self, make_renderer, repo):
        renderer = make_renderer()
        renderer.render("one", "./")
        repo.write_theme("changed <!-- content -->")
        second = renderer.render("two", "../")
        assert renderer.cache.loads == 1
        assert "changed" not in second
        assert "two" in second

    def test_render_does_not_touch_cached_skeleton(self, make_renderer):
        renderer = make_renderer()
        renderer.render("first page", "./")
        skeleton = renderer.cache.get("default.html")
        assert "first page" not in skeleton
        assert "<!-- content -->" in skeleton
        assert "%root%" in skeleton

    def test_missing_theme_is_fatal(self, make_renderer):
        renderer = make_renderer(config=BlogConfig(theme="missing"))
        with pytest.raises(BuildError):
            renderer.render("", "./")


class TestReferences:
    def test_references_in_content(self, make_renderer):
        renderer = make_renderer()
        html = renderer.render('<a href="%post[2]%">p</a> <a href="%page[3]%">a</a> <a href="%tag[Python]%">t</a>', "../")
        assert '<a href="../2020/02/2-record-2/">p</a>' in html
        assert '<a href="../record-3/">a</a>' in html
        assert '<a href="../tags/python/">t</a>' in html

    def test_unresolved_reference_in_theme_warns_once(self, make_renderer, capsys):
        renderer = make_renderer(theme='<a href="%post[999]%">gone</a><!-- content -->')
        outputs = [renderer.render(f"page {n}", "../" * n) for n in range(4)]
        assert all(out.startswith('<a href="#">gone</a>') for out in outputs)
        warnings = [line for line in capsys.readouterr().err.splitlines() if "%post[999]%" in line]
        assert len(warnings) == 1

    def test_unresolved_reference_in_content(self, make_renderer, capsys):
        renderer = make_renderer()
        html = renderer.render('<a href="%tag[nope]%">x</a><a href="%page[abc]%">y</a>', "./")
        assert '<a href="#">x</a><a href="#">y</a>' in html
        err = capsys.readouterr().err
        assert "%tag[nope]%" in err
        assert "%page[abc]%" in err

    def test_resolved_text_is_not_rescanned(self, make_renderer):
        posts = [record(1, title="%post[1]%")]
        renderer = make_renderer(theme="<!-- posts -->|<!-- content -->", posts=posts)
        html = renderer.render("", "./")
        assert html == '<li><a href="./2020/01/1-record-1/">%post[1]%</a></li>|'


class TestPaths:
    def test_root_and_home(self, make_renderer):
        renderer = make_renderer(theme="%root%|%home%|<!-- content -->")
        assert renderer.render('<img src="%root%a.png">', "../../") == '../../|../../|<img src="../../a.png">'

    def test_full_paths_append_index_name(self, make_renderer):
        renderer = make_renderer(
            theme="%home%|<!-- content -->",
            options=BuildOptions(full_paths=True),
            config=BlogConfig(extension="htm"),
        )
        html = renderer.render('<a href="%post[1]%">x</a>', "../")
        assert html == '../index.htm|<a href="../2020/01/1-record-1/index.htm">x</a>'
