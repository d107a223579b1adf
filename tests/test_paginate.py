"""Tests for flatblog.paginate."""

import math

import pytest

from flatblog.paginate import FlushTrigger, PagerState, Paginator, page_filename, paginate


def test_twenty_five_items_in_pages_of_ten():
    items = list(range(25, 0, -1))
    pages = list(paginate(items, 10))

    assert [page.index for page in pages] == [0, 1, 2]
    assert [len(page.items) for page in pages] == [10, 10, 5]
    assert pages[0].items == list(range(25, 15, -1))
    assert pages[2].items == [5, 4, 3, 2, 1]
    assert (pages[0].has_newer, pages[0].has_older) == (False, True)
    assert (pages[1].has_newer, pages[1].has_older) == (True, True)
    assert (pages[2].has_newer, pages[2].has_older) == (True, False)


@pytest.mark.parametrize("count", [1, 2, 9, 10, 11, 20, 21, 37])
@pytest.mark.parametrize("size", [1, 3, 10])
def test_pages_partition_the_bucket(count, size):
    items = list(range(count, 0, -1))
    pages = list(paginate(items, size))

    assert len(pages) == math.ceil(count / size)
    flattened = [item for page in pages for item in page.items]
    assert flattened == items
    assert all(len(page.items) <= size for page in pages)
    assert not pages[0].has_newer
    assert not pages[-1].has_older
    for page in pages[1:-1]:
        assert page.has_newer and page.has_older


def test_exactly_one_full_page_has_no_navigation():
    (page,) = paginate(list(range(10)), 10)
    assert not page.has_newer
    assert not page.has_older
    assert page.trigger is FlushTrigger.EXHAUSTED


def test_empty_input_yields_nothing():
    assert list(paginate([], 10)) == []


def test_bucket_change_resets_page_index():
    items = [("2020-02", n) for n in range(3)] + [("2020-01", n) for n in range(2)]
    pages = list(paginate(items, 2, key=lambda item: item[0]))

    assert [(page.key, page.index) for page in pages] == [("2020-02", 0), ("2020-02", 1), ("2020-01", 0)]
    assert pages[0].trigger is FlushTrigger.PAGE_FULL
    assert pages[1].trigger is FlushTrigger.BUCKET_CHANGED
    assert not pages[1].has_older
    assert pages[1].has_newer
    assert not pages[2].has_newer


def test_full_page_followed_by_new_bucket_has_no_older_link():
    items = [("a", 1), ("a", 2), ("b", 3)]
    pages = list(paginate(items, 2, key=lambda item: item[0]))
    assert len(pages) == 2
    assert pages[0].trigger is FlushTrigger.BUCKET_CHANGED
    assert not pages[0].has_older


def test_paginator_feed_returns_flushed_page():
    pager = Paginator(2)
    assert pager.feed("k", 1) is None
    assert pager.feed("k", 2) is None
    assert pager.state is PagerState.ACCUMULATING
    page = pager.feed("k", 3)
    assert page.items == [1, 2]
    assert pager.index == 1
    last = pager.close()
    assert last.items == [3]
    assert pager.close() is None


def test_state_follows_flushes():
    pager = Paginator(1)
    pager.feed("a", 1)
    assert pager.state is PagerState.ACCUMULATING
    pager.feed("a", 2)
    assert pager.state is PagerState.FLUSHING
    pager.feed("b", 3)
    assert pager.state is PagerState.FLUSHING
    pager = Paginator(5)
    pager.feed("a", 1)
    pager.feed("a", 2)
    assert pager.state is PagerState.ACCUMULATING
    pager.close()
    assert pager.state is PagerState.FLUSHING


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        Paginator(0)


def test_page_filename():
    assert page_filename(0) == "index.html"
    assert page_filename(3) == "index3.html"
    assert page_filename(1, "htm") == "index1.htm"
