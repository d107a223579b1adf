from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from pathlib import Path

from .utils import BuildError, parse_bool, parse_positive_int, warn

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

SECTION_RE = re.compile(r"^\s*\[([^\]]+)\]\s*$")
OPTION_RE = re.compile(r"^\s*([^\s=]+)\s*=\s*(\S.*?)\s*$")

DEFAULT_PAGE_SIZE = 10
DEFAULT_FEED_SIZE = 10

MONTH_KEYS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

LOCALE_DEFAULTS = {
    **{key: key.capitalize() for key in MONTH_KEYS},
    "more": "Read more &raquo;",
    "archive": "Archive for",
    "tags": "Posts tagged as",
    "taglist": "List of tags",
    "previous": "&laquo; previous",
    "next": "next &raquo;",
    "postedby": "by",
    "taggedas": "tagged as",
}


def parse_ini(text: str) -> dict[str, dict[str, str]]:
    """Parse ``[section]`` / ``key = value`` text.

    Options before the first section land in ``default``. Comment lines and
    options without a value are ignored; a repeated key keeps the last value.
    """
    data: dict[str, dict[str, str]] = {}
    section = "default"
    for line in text.lstrip("\ufeff").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", ";")):
            continue
        match = SECTION_RE.match(line)
        if match:
            section = match.group(1).strip().lower()
            continue
        match = OPTION_RE.match(line)
        if match:
            data.setdefault(section, {})[match.group(1).lower()] = match.group(2)
    return data


def read_ini(path: Path, encoding: str = "utf-8") -> dict[str, dict[str, str]]:
    return parse_ini(path.read_text(encoding=encoding))


def load_config(path: Path) -> dict:
    """Load the optional build-settings file (TOML, YAML or JSON)."""
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            raise BuildError("TOML settings require tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise BuildError(f"Invalid TOML in settings file {path}: {exc}") from exc
        return data
    if suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise BuildError("YAML settings require PyYAML.")
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise BuildError(f"Invalid YAML in settings file {path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise BuildError(f"YAML settings must be a mapping: {path}")
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BuildError(f"Invalid JSON in settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise BuildError(f"JSON settings must be an object: {path}")
    return data


@dataclass(frozen=True)
class BlogConfig:
    title: str = "My Blog"
    subtitle: str = "yet another blog"
    theme: str = "default.html"
    style: str = "default.css"
    lang: str = "en_GB"
    page_size: int = DEFAULT_PAGE_SIZE
    url: str = ""
    encoding: str = "UTF-8"
    extension: str = "html"
    processor: str = ""
    feed_size: int = DEFAULT_FEED_SIZE
    feed_full: bool = False
    name: str = "admin"
    nickname: str = "admin"
    email: str = "admin@localhost"

    @property
    def index_name(self) -> str:
        return f"index.{self.extension}"

    @property
    def theme_file(self) -> str:
        return self.theme if Path(self.theme).suffix else f"{self.theme}.html"

    @property
    def style_file(self) -> str:
        return self.style if Path(self.style).suffix else f"{self.style}.css"


def blog_config_from_ini(data: dict[str, dict[str, str]]) -> BlogConfig:
    defaults = BlogConfig()

    def option(section: str, key: str, default: str) -> str:
        value = data.get(section, {}).get(key, "").strip()
        return value or default

    name = option("user", "name", defaults.name)
    return BlogConfig(
        title=option("blog", "title", defaults.title),
        subtitle=option("blog", "subtitle", defaults.subtitle),
        theme=option("blog", "theme", defaults.theme),
        style=option("blog", "style", defaults.style),
        lang=option("blog", "lang", defaults.lang),
        page_size=parse_positive_int(data.get("blog", {}).get("posts"), DEFAULT_PAGE_SIZE, "blog.posts"),
        url=option("blog", "url", ""),
        encoding=option("core", "encoding", defaults.encoding),
        extension=option("core", "extension", defaults.extension).lstrip("."),
        processor=option("core", "processor", "").lower(),
        feed_size=parse_positive_int(data.get("feed", {}).get("posts"), DEFAULT_FEED_SIZE, "feed.posts"),
        feed_full=parse_bool(option("feed", "fullposts", "false")),
        name=name,
        nickname=option("user", "nickname", name),
        email=option("user", "email", defaults.email),
    )


def load_blog_config(blogdir: Path) -> BlogConfig:
    path = blogdir / "config"
    try:
        data = read_ini(path)
    except OSError:
        warn("Unable to read configuration.")
        data = {}
    return blog_config_from_ini(data)


@dataclass(frozen=True)
class Locale:
    strings: dict[str, str] = field(default_factory=dict)

    def text(self, key: str) -> str:
        return self.strings.get(key) or LOCALE_DEFAULTS.get(key, key)

    def month_name(self, month: int) -> str:
        return self.text(MONTH_KEYS[month - 1])


def load_locale(blogdir: Path, lang: str) -> Locale:
    path = blogdir / "lang" / lang
    try:
        data = read_ini(path)
    except OSError:
        warn(f"Unable to read language file `{path}'.")
        return Locale()
    return Locale(data.get("lang", {}))


@dataclass(frozen=True)
class BuildOptions:
    with_index: bool = True
    with_posts: bool = True
    with_pages: bool = True
    with_tags: bool = True
    with_rss: bool = True
    with_css: bool = True
    full_paths: bool = False
    verbose: int = 1

    def normalized(self) -> "BuildOptions":
        # Tags and the feed are views over posts.
        if self.with_posts:
            return self
        return replace(self, with_tags=False, with_rss=False)
