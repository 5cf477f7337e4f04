"""Lazy page streams threaded by an explicit cursor."""

from collections.abc import AsyncIterator, Awaitable, Callable

from dynaflex.base import Page
from dynaflex.keys import Item, LastEvaluatedKey

PageFetcher = Callable[[LastEvaluatedKey | None], Awaitable[Page]]


async def iter_pages(
    fetch_page: PageFetcher,
    start_key: LastEvaluatedKey | None = None,
) -> AsyncIterator[Page]:
    """Yield pages until the cursor is exhausted.

    Each page is fetched only when the consumer asks for it, so breaking out of
    the loop stops further requests.

    Example:
        async for page in iter_pages(fetch):
            print(page.items)
            if not keep_going():
                break

    """
    cursor = start_key or None
    while True:
        page = await fetch_page(cursor)
        yield page
        if page.last_evaluated_key is None:
            return
        cursor = page.last_evaluated_key


async def collect_items(pages: AsyncIterator[Page]) -> list[Item]:
    """Drain a page stream into a single list.

    There is no upper bound: on a large table bound the stream yourself.
    """
    items: list[Item] = []
    async for page in pages:
        items.extend(page.items)
    return items


__all__ = [
    "PageFetcher",
    "collect_items",
    "iter_pages",
]
