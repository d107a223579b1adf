from __future__ import annotations

import datetime as dt
import html
import re
import shutil
from pathlib import Path
from typing import Optional

from . import __version__
from .cache import ThemeCache
from .config import BlogConfig, BuildOptions, Locale
from .index import BlogIndex
from .utils import BuildError, warn

PLACEHOLDER_RE = re.compile(
    r"<!--\s*(?P<block>[\w-]+)\s*-->"
    r"|%(?P<path>root|home)%"
    r"|%(?P<ref>post|page|tag)\[(?P<arg>[^\]%]*)\]%",
    re.IGNORECASE,
)

RECENT_POSTS = 5
ROOT_TOKEN = "%root%"


def write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding=encoding)
    except (OSError, LookupError) as exc:
        raise BuildError(f"Unable to write `{path}': {exc}") from exc


def copy_file(source: Path, dest: Path) -> None:
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
    except OSError as exc:
        raise BuildError(f"Unable to copy `{source}' to `{dest}': {exc}") from exc


class ThemeRenderer:
    """Fills a theme skeleton with blog data.

    Global placeholders (meta elements, lists, blog identity) are resolved
    once per theme and kept in the cache; :meth:`render` then adds the page
    content and the page-relative paths to a copy of that skeleton.
    """

    def __init__(
        self,
        blogdir: Path,
        config: BlogConfig,
        locale: Locale,
        options: BuildOptions,
        index: BlogIndex,
        cache: Optional[ThemeCache] = None,
        now: Optional[dt.datetime] = None,
    ) -> None:
        self.blogdir = blogdir
        self.config = config
        self.locale = locale
        self.options = options
        self.index = index
        self.cache = cache if cache is not None else ThemeCache()
        self.now = now or dt.datetime.now()
        self._unresolved: set[str] = set()

    def fix_url(self, url: str) -> str:
        if self.options.full_paths:
            if not url.endswith("/"):
                url += "/"
            url += self.config.index_name
        return url

    def dir_url(self, root: str, path: str) -> str:
        return self.fix_url(f"{root}{path.strip('/')}/")

    def home_url(self, root: str) -> str:
        return self.fix_url(root)

    def list_of_tags(self, root: str = ROOT_TOKEN) -> str:
        if not self.options.with_tags:
            return ""
        return "\n".join(
            f'<li><a href="{self.dir_url(root, "tags/" + info.slug)}">'
            f"{html.escape(info.name)}</a> ({info.count})</li>"
            for info in self.index.sorted_tags()
        )

    def list_of_months(self, root: str = ROOT_TOKEN, year: Optional[int] = None) -> str:
        if not self.options.with_posts:
            return ""
        return "\n".join(
            f'<li><a href="{self.dir_url(root, info.slug)}">{info.label}</a> ({info.count})</li>'
            for info in self.index.sorted_months(year)
        )

    def list_of_pages(self, root: str = ROOT_TOKEN) -> str:
        if not self.options.with_pages:
            return ""
        return "\n".join(
            f'<li><a href="{self.dir_url(root, page.path)}">{page.title}</a></li>'
            for page in self.index.pages
        )

    def list_of_posts(self, root: str = ROOT_TOKEN) -> str:
        if not self.options.with_posts:
            return ""
        return "\n".join(
            f'<li><a href="{self.dir_url(root, post.path)}">{post.title}</a></li>'
            for post in self.index.posts[:RECENT_POSTS]
        )

    def global_blocks(self) -> dict[str, str]:
        config = self.config
        feed = ""
        if self.options.with_rss:
            feed = (
                f'<link rel="alternate" href="{ROOT_TOKEN}index.rss" '
                'title="RSS Feed" type="application/rss+xml">'
            )
        return {
            "content-type": (
                '<meta http-equiv="Content-Type" '
                f'content="text/html; charset={config.encoding}">'
            ),
            "generator": f'<meta name="Generator" content="flatblog {__version__}">',
            "date": f'<meta name="Date" content="{self.now.ctime()}">',
            "stylesheet": (
                f'<link rel="stylesheet" href="{ROOT_TOKEN}{config.style_file}" type="text/css">'
            ),
            "feed": feed,
            "rss": feed,
            "tags": self.list_of_tags(),
            "archive": self.list_of_months(),
            "pages": self.list_of_pages(),
            "posts": self.list_of_posts(),
            "title": config.title,
            "subtitle": config.subtitle,
            "name": config.name,
            "nickname": config.nickname,
            "e-mail": config.email,
            "year": str(self.now.year),
        }

    def resolve_reference(self, kind: str, arg: str, root: str) -> str:
        kind = kind.lower()
        target: Optional[str] = None
        if kind in ("post", "page") and arg.strip().isdigit():
            lookup = self.index.post_by_id if kind == "post" else self.index.page_by_id
            record = lookup(int(arg))
            if record is not None:
                target = self.dir_url(root, record.path)
        elif kind == "tag":
            info = self.index.tags.get(arg.strip().lower())
            if info is not None:
                target = self.dir_url(root, "tags/" + info.slug)
        if target is None:
            reference = f"%{kind}[{arg}]%"
            if reference not in self._unresolved:
                self._unresolved.add(reference)
                warn(f"Unable to resolve {reference}; linking to #.")
            return "#"
        return target

    def load_skeleton(self) -> str:
        name = self.config.theme_file
        skeleton = self.cache.get(name)
        if skeleton is not None:
            return skeleton
        path = self.blogdir / "theme" / name
        try:
            template = path.read_text(encoding=self.config.encoding)
        except (OSError, LookupError, UnicodeDecodeError) as exc:
            raise BuildError(f"Unable to read theme `{path}': {exc}") from exc

        blocks = self.global_blocks()

        def repl(match: re.Match) -> str:
            block = match.group("block")
            if block is not None:
                return blocks.get(block.lower(), match.group(0))
            if match.group("ref") is not None:
                return self.resolve_reference(match.group("ref"), match.group("arg"), ROOT_TOKEN)
            return match.group(0)

        skeleton = PLACEHOLDER_RE.sub(repl, template)
        self.cache.store(name, skeleton)
        return skeleton

    def resolve_inline(self, text: str, root: str) -> str:
        """Resolve path and cross-reference placeholders in page content."""
        home = self.home_url(root)

        def repl(match: re.Match) -> str:
            path = match.group("path")
            if path is not None:
                return root if path.lower() == "root" else home
            if match.group("ref") is not None:
                return self.resolve_reference(match.group("ref"), match.group("arg"), root)
            return match.group(0)

        return PLACEHOLDER_RE.sub(repl, text)

    def render(self, content: str, root: str, page_title: str = "") -> str:
        skeleton = self.load_skeleton()
        content = self.resolve_inline(content, root)
        home = self.home_url(root)
        page_title = page_title or self.config.title

        def repl(match: re.Match) -> str:
            block = match.group("block")
            if block is not None:
                block = block.lower()
                if block == "content":
                    return content
                if block == "page-title":
                    return page_title
                return match.group(0)
            path = match.group("path")
            if path is not None:
                return root if path.lower() == "root" else home
            return match.group(0)

        return PLACEHOLDER_RE.sub(repl, skeleton)
