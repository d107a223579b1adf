"""Bounded-size archive pages over a sorted record stream.

Records arrive newest first. The paginator accumulates them for the current
bucket and emits an :class:`ArchivePage` whenever the bucket key changes or
the page is full. A page is only flushed once the next record (or the end of
the stream) is known, so every page knows whether an older page follows it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Generic, Hashable, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class PagerState(enum.Enum):
    ACCUMULATING = "accumulating"
    FLUSHING = "flushing"


class FlushTrigger(enum.Enum):
    BUCKET_CHANGED = "bucket-changed"
    PAGE_FULL = "page-full"
    EXHAUSTED = "exhausted"


@dataclass
class ArchivePage(Generic[T]):
    key: Hashable
    index: int
    items: list[T]
    trigger: FlushTrigger

    @property
    def has_newer(self) -> bool:
        return self.index > 0

    @property
    def has_older(self) -> bool:
        return self.trigger is FlushTrigger.PAGE_FULL


def page_filename(index: int, extension: str = "html") -> str:
    if index == 0:
        return f"index.{extension}"
    return f"index{index}.{extension}"


@dataclass
class Paginator(Generic[T]):
    page_size: int
    state: PagerState = PagerState.ACCUMULATING
    key: Optional[Hashable] = None
    items: list[T] = field(default_factory=list)
    index: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be at least 1")

    def _trigger_for(self, key: Hashable) -> Optional[FlushTrigger]:
        if not self.items:
            return None
        if key != self.key:
            return FlushTrigger.BUCKET_CHANGED
        if len(self.items) >= self.page_size:
            return FlushTrigger.PAGE_FULL
        return None

    def _flush(self, trigger: FlushTrigger) -> ArchivePage[T]:
        self.state = PagerState.FLUSHING
        page = ArchivePage(self.key, self.index, self.items, trigger)
        self.items = []
        if trigger is FlushTrigger.PAGE_FULL:
            self.index += 1
        else:
            self.index = 0
        return page

    def feed(self, key: Hashable, item: T) -> Optional[ArchivePage[T]]:
        """Add one item; return the page this forced out, if any.

        The pager stays in ``FLUSHING`` after a call that emitted a page, until
        the next item arrives.
        """
        page = None
        self.state = PagerState.ACCUMULATING
        trigger = self._trigger_for(key)
        if trigger is not None:
            page = self._flush(trigger)
        self.key = key
        self.items.append(item)
        return page

    def close(self) -> Optional[ArchivePage[T]]:
        if not self.items:
            return None
        return self._flush(FlushTrigger.EXHAUSTED)


def paginate(
    items: Iterable[T],
    page_size: int,
    key: Callable[[T], Hashable] = lambda item: None,
) -> Iterator[ArchivePage[T]]:
    pager: Paginator[T] = Paginator(page_size)
    for item in items:
        page = pager.feed(key(item), item)
        if page is not None:
            yield page
    page = pager.close()
    if page is not None:
        yield page
