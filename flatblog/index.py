from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .cache import hash_text
from .config import Locale
from .content import Record, slugify


@dataclass
class TagInfo:
    name: str
    slug: str
    count: int = 0


@dataclass
class MonthInfo:
    year: int
    month: int
    label: str
    count: int = 0

    @property
    def slug(self) -> str:
        return f"{self.year:04d}/{self.month:02d}"


@dataclass
class BlogIndex:
    posts: list[Record] = field(default_factory=list)
    pages: list[Record] = field(default_factory=list)
    tags: dict[str, TagInfo] = field(default_factory=dict)
    months: dict[str, MonthInfo] = field(default_factory=dict)

    def post_by_id(self, record_id: int) -> Optional[Record]:
        for post in self.posts:
            if post.id == record_id:
                return post
        return None

    def page_by_id(self, record_id: int) -> Optional[Record]:
        for page in self.pages:
            if page.id == record_id:
                return page
        return None

    def sorted_tags(self) -> list[TagInfo]:
        return [self.tags[name] for name in sorted(self.tags)]

    def sorted_months(self, year: Optional[int] = None) -> list[MonthInfo]:
        """Months newest first, optionally limited to one year."""
        months = [info for info in self.months.values() if year is None or info.year == year]
        return sorted(months, key=lambda info: (info.year, info.month), reverse=True)

    def years(self) -> list[int]:
        return sorted({info.year for info in self.months.values()}, reverse=True)

    def posts_tagged(self, name: str) -> list[Record]:
        return [post for post in self.posts if name in post.tags]


def record_sort_key(record: Record) -> tuple:
    return (record.date, record.id)


def tag_slug(name: str) -> str:
    slug = slugify(name)
    if not slug:
        slug = f"tag-{hash_text(name)[:10]}"
    return slug


def build_index(posts: Iterable[Record], pages: Iterable[Record], locale: Locale) -> BlogIndex:
    index = BlogIndex(
        posts=sorted(posts, key=record_sort_key, reverse=True),
        pages=sorted(pages, key=record_sort_key),
    )
    used_slugs: set[str] = set()
    for post in index.posts:
        label = f"{locale.month_name(post.date.month)} {post.date.year}"
        month = index.months.get(label)
        if month is None:
            month = index.months[label] = MonthInfo(post.date.year, post.date.month, label)
        month.count += 1

        for name in post.tags:
            info = index.tags.get(name)
            if info is None:
                base = slug = tag_slug(name)
                counter = 2
                while slug in used_slugs:
                    slug = f"{base}-{counter}"
                    counter += 1
                used_slugs.add(slug)
                info = index.tags[name] = TagInfo(name, slug)
            info.count += 1
    return index
