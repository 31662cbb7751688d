"""
Cursor pagination over YouTube list endpoints.

A page function takes the current continuation token (None for the first
page) and returns a Page. iter_pages() keeps calling it until the API stops
returning a token or a caller-supplied cap is hit. Caps are only checked once
a page is complete, so the final page may overshoot; callers that need an
exact size truncate themselves.
"""

import time
from typing import Callable, Iterator, NamedTuple, Optional

from errors import TransportError
from logger import get_logger

log = get_logger("pager")


class Page(NamedTuple):
    items: list
    next_cursor: Optional[str] = None


def iter_pages(
    fetch_page: Callable[[Optional[str]], Page],
    max_items: Optional[int] = None,
    max_pages: Optional[int] = None,
    page_delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[Page]:
    """
    Yield pages in API order until the cursor runs out or a cap is reached.

    Exceptions from fetch_page are not caught; pages already yielded stay
    with the consumer.
    """
    cursor = None
    item_count = 0
    page_count = 0

    while True:
        page = fetch_page(cursor)
        page_count += 1
        item_count += len(page.items)
        yield page

        if not page.next_cursor:
            log.debug(f"Pagination exhausted after {page_count} pages ({item_count} items)")
            return
        if max_items is not None and item_count >= max_items:
            log.debug(f"Reached max_items ({max_items}) after {page_count} pages, stopping")
            return
        if max_pages is not None and page_count >= max_pages:
            log.debug(f"Reached max_pages ({max_pages}), stopping")
            return

        if page_delay > 0:
            sleep(page_delay)
        cursor = page.next_cursor


def fetch_all(
    fetch_page: Callable[[Optional[str]], Page],
    max_items: Optional[int] = None,
    max_pages: Optional[int] = None,
    page_delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> list:
    """
    Concatenate the items of every page, preserving API order.

    Raises:
        TransportError: If any page fails. Items gathered before the failure
            are attached as `partial_items`.
    """
    items = []
    try:
        for page in iter_pages(fetch_page, max_items, max_pages, page_delay, sleep):
            items.extend(page.items)
    except TransportError as e:
        e.partial_items = items
        raise
    return items
