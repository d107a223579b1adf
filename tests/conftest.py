from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

THEME = """<!DOCTYPE html>
<html>
<head>
  <!-- content-type -->
  <!-- generator -->
  <!-- stylesheet -->
  <!-- feed -->
  <title><!-- page-title --></title>
</head>
<body>
  <h1><a href="%home%"><!-- title --></a></h1>
  <p class="subtitle"><!-- subtitle --></p>
  <ul class="recent"><!-- posts --></ul>
  <ul class="pages"><!-- pages --></ul>
  <ul class="tags"><!-- tags --></ul>
  <ul class="archive"><!-- archive --></ul>
  <div id="content">
<!-- content -->
  </div>
  <footer>&copy; <!-- year --> <!-- name --> (<!-- e-mail -->)</footer>
</body>
</html>
"""

LANG = """[lang]
january = January
february = February
march = March
more = Read more &raquo;
"""


class BlogRepo:
    """Throwaway blog repository laid out the way the generator expects it."""

    def __init__(self, root: Path) -> None:
        self.root = root
        for kind in ("posts", "pages"):
            (root / kind / "head").mkdir(parents=True)
            (root / kind / "body").mkdir(parents=True)
        (root / "theme").mkdir()
        (root / "style").mkdir()
        (root / "lang").mkdir()
        self.write_theme(THEME)
        (root / "style" / "default.css").write_text("body { color: black; }\n", encoding="utf-8")
        (root / "lang" / "en_GB").write_text(LANG, encoding="utf-8")
        self.write_config()

    def write_config(self, **sections: dict[str, str]) -> None:
        data = {
            "blog": {"title": "Test Blog", "subtitle": "testing", "posts": "10", "url": "http://example.com/blog/"},
            "user": {"name": "Jane Doe", "email": "jane@example.com"},
        }
        for section, values in sections.items():
            data.setdefault(section, {}).update(values)
        lines = []
        for section, values in data.items():
            lines.append(f"[{section}]")
            lines.extend(f"{key} = {value}" for key, value in values.items() if value is not None)
        (self.root / "config").write_text("\n".join(lines) + "\n", encoding="utf-8")

    def write_theme(self, text: str, name: str = "default.html") -> None:
        (self.root / "theme" / name).write_text(text, encoding="utf-8")

    def add(
        self,
        kind: str,
        record_id: int,
        title: Optional[str] = None,
        date: Optional[str] = "2020-01-01",
        tags: Optional[str] = None,
        url: Optional[str] = None,
        author: Optional[str] = "Jane Doe",
        body: str = "<p>Body text.</p>\n",
    ) -> None:
        fields = {"title": title, "author": author, "date": date, "tags": tags, "url": url}
        lines = ["[header]"]
        lines.extend(f"{key} = {value}" for key, value in fields.items() if value is not None)
        (self.root / f"{kind}s" / "head" / str(record_id)).write_text("\n".join(lines) + "\n", encoding="utf-8")
        (self.root / f"{kind}s" / "body" / str(record_id)).write_text(body, encoding="utf-8")

    def add_post(self, record_id: int, title: Optional[str] = None, **kwargs) -> None:
        if title is None:
            title = f"Post {record_id}"
        self.add("post", record_id, title, **kwargs)

    def add_page(self, record_id: int, title: Optional[str] = None, **kwargs) -> None:
        if title is None:
            title = f"Page {record_id}"
        self.add("page", record_id, title, **kwargs)


@pytest.fixture
def repo(tmp_path: Path) -> BlogRepo:
    return BlogRepo(tmp_path / "blog")


@pytest.fixture
def destdir(tmp_path: Path) -> Path:
    return tmp_path / "site"
