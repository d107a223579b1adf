from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import markdown

from .config import BlogConfig, read_ini
from .utils import BuildError, warn

POST = "post"
PAGE = "page"

DATE_RE = re.compile(r"^\d{4}-[01]\d-[0-3]\d$")
BREAK_RE = re.compile(r"<!--\s*break\s*-->", re.IGNORECASE)
URL_FORBIDDEN_RE = re.compile(r"[^A-Za-z0-9_-]")
SLUG_FORBIDDEN_RE = re.compile(r"[^A-Za-z0-9_\s-]")
WHITESPACE_RE = re.compile(r"\s+")
TAG_RE = re.compile(r"<[^>]+>")
ENTITY_RE = re.compile(r"&[^;\s]*;")

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
HEADER_FIELDS = ("title", "author", "date", "tags", "url")


@dataclass
class Record:
    id: int
    kind: str
    title: str
    author: str
    date: dt.date
    tags: tuple[str, ...]
    url: str
    body: str = ""
    excerpt: Optional[str] = None

    @property
    def slug(self) -> str:
        """Path segment of the record; posts carry their id for uniqueness."""
        if self.kind == POST:
            return f"{self.id}-{self.url}"
        return self.url

    @property
    def path(self) -> str:
        """Directory of the record relative to the site root."""
        if self.kind == POST:
            return f"{self.date.year:04d}/{self.date.month:02d}/{self.slug}"
        return self.slug

    @property
    def summary(self) -> str:
        return self.body if self.excerpt is None else self.excerpt


def slugify(text: str) -> str:
    text = SLUG_FORBIDDEN_RE.sub("", text)
    text = text.strip()
    return WHITESPACE_RE.sub("-", text)


def strip_tags(html_text: str) -> str:
    text = TAG_RE.sub("", html_text)
    return ENTITY_RE.sub("", text).replace("<", "").replace(">", "")


def normalize_tags(value: str) -> tuple[str, ...]:
    value = WHITESPACE_RE.sub(" ", value.lower())
    tags = {item.strip() for item in value.split(",")}
    return tuple(sorted(tag for tag in tags if tag))


def normalize_date(value: str) -> Optional[dt.date]:
    value = value.strip()
    if not DATE_RE.match(value):
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def normalize_header(
    header: dict[str, str],
    record_id: int,
    kind: str,
    config: BlogConfig,
    today: Optional[dt.date] = None,
) -> Record:
    """Build a record from raw header fields, repairing what is missing."""
    label = f"the {kind} with ID {record_id}"
    today = today or dt.date.today()

    title = header.get("title", "").strip()
    if not title:
        warn(f"Missing title in {label}.")
        title = f"Untitled {record_id}"

    author = header.get("author", "").strip()
    if not author:
        warn(f"Missing author in {label}.")
        author = config.name
    elif ":" in author:
        warn(f"Invalid author in {label}.")
        author = author.replace(":", "").strip() or config.name

    raw_date = header.get("date", "").strip()
    date = normalize_date(raw_date)
    if date is None:
        if raw_date:
            warn(f"Invalid date in {label}.")
        else:
            warn(f"Missing date in {label}.")
        date = today

    tags: tuple[str, ...] = ()
    raw_tags = header.get("tags", "")
    if kind == POST and raw_tags.strip():
        if ":" in raw_tags:
            warn(f"Invalid tags in {label}.")
            raw_tags = raw_tags.replace(":", "")
        tags = normalize_tags(raw_tags)

    url = header.get("url", "").strip()
    if url and URL_FORBIDDEN_RE.search(url):
        warn(f"Invalid URL in {label}.")
        url = slugify(url)
    if not url:
        url = slugify(title.lower())
    if not url:
        url = "post" if kind == POST else f"page-{record_id}"

    return Record(
        id=record_id,
        kind=kind,
        title=title,
        author=author,
        date=date,
        tags=tags,
        url=url,
    )


def format_header(record: Record) -> str:
    values = {
        "title": record.title,
        "author": record.author,
        "date": record.date.isoformat(),
        "tags": ", ".join(record.tags),
        "url": record.url,
    }
    lines = ["[header]"]
    lines.extend(f"{key:<6} = {values[key]}" for key in HEADER_FIELDS)
    return "\n".join(lines) + "\n"


def write_header(path: Path, record: Record) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_header(record), encoding="utf-8")


def split_excerpt(text: str) -> tuple[str, Optional[str]]:
    parts = BREAK_RE.split(text, maxsplit=1)
    if len(parts) == 1:
        return text, None
    return text, parts[0]


def render_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    return md.convert(text)


def process_body(text: str, processor: str) -> tuple[str, Optional[str]]:
    """Return the full body and the excerpt (``None`` without a break marker)."""
    if processor != "markdown":
        return split_excerpt(text)
    parts = BREAK_RE.split(text, maxsplit=1)
    if len(parts) == 1:
        return render_markdown(text), None
    excerpt = render_markdown(parts[0])
    rest = render_markdown(parts[1])
    return f"{excerpt}\n<!-- break -->\n{rest}", excerpt


def read_body(blogdir: Path, kind: str, record_id: int, config: BlogConfig) -> str:
    path = blogdir / f"{kind}s" / "body" / str(record_id)
    try:
        return path.read_text(encoding=config.encoding)
    except (OSError, LookupError, UnicodeDecodeError) as exc:
        raise BuildError(f"Unable to read `{path}': {exc}") from exc


def collect_records(
    blogdir: Path,
    kind: str,
    config: BlogConfig,
    with_bodies: bool = True,
    today: Optional[dt.date] = None,
) -> list[Record]:
    head = blogdir / f"{kind}s" / "head"
    if not head.is_dir():
        return []
    processor = config.processor
    if processor and processor != "markdown":
        warn(f"Unknown core.processor `{processor}'; leaving bodies as they are.")
        processor = ""

    records = []
    for path in sorted(head.iterdir(), key=lambda p: p.name):
        if path.name.startswith("."):
            continue
        if not path.name.isdigit() or str(int(path.name)) != path.name or int(path.name) <= 0:
            warn(f"Skipping `{path}': not a valid {kind} ID.")
            continue
        try:
            data = read_ini(path, encoding=config.encoding)
        except (OSError, LookupError, UnicodeDecodeError) as exc:
            warn(f"Unable to read `{path}': {exc}")
            continue
        record = normalize_header(data.get("header", {}), int(path.name), kind, config, today)
        if with_bodies:
            text = read_body(blogdir, kind, record.id, config)
            record.body, record.excerpt = process_body(text, processor)
        records.append(record)
    return records
