"""
Lazy traversal of listing endpoints that page with continuation tokens.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from kontent_management.core.errors import OperationCancelledError
from kontent_management.core.types import ListingPage

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[str | None], Awaitable[ListingPage[T]]]


class AsyncListing(Generic[T]):
    """
    Async iterator over every item of a paginated listing.

    Nothing is fetched until the first item is requested. Later pages are
    fetched only once the buffered page is used up. Once exhausted (or after
    a failed page fetch) the listing stays exhausted; list again for a fresh
    traversal.

    Example:
        async for user in client.subscription.list_users():
            print(user.email)

        users = await client.subscription.list_users().to_list()

    """

    def __init__(
        self,
        fetch_page: PageFetcher[T],
        resource: str = "",
        cancel_event: asyncio.Event | None = None,
    ):
        self._fetch_page = fetch_page
        self._resource = resource
        self._cancel_event = cancel_event
        self._page: tuple[T, ...] = ()
        self._position = 0
        self._token: str | None = None
        self._started = False
        self._done = False
        self.pages_fetched = 0

    @property
    def current_page(self) -> tuple[T, ...]:
        """Items of the most recently fetched page."""
        return self._page

    @property
    def exhausted(self) -> bool:
        return self._done

    def __aiter__(self) -> "AsyncListing[T]":
        return self

    async def __anext__(self) -> T:
        while self._position >= len(self._page):
            if self._done:
                raise StopAsyncIteration
            await self._next_page()

        item = self._page[self._position]
        self._position += 1
        return item

    async def _next_page(self) -> None:
        if self._started and not self._token:
            self._done = True
            return

        if self._cancel_event is not None and self._cancel_event.is_set():
            self._done = True
            raise OperationCancelledError(
                f"Listing of {self._resource or 'resources'} cancelled",
                details={"resource": self._resource, "pages_fetched": self.pages_fetched},
            )

        previous_token = self._token
        try:
            page = await self._fetch_page(previous_token)
        except BaseException:
            self._done = True
            raise

        self._started = True
        self.pages_fetched += 1
        self._page = tuple(page.items)
        self._position = 0
        self._token = page.continuation_token

        if previous_token is not None and not self._page:
            logger.warning(
                f"Empty page after continuation token while listing {self._resource or 'resources'}; stopping",
            )
            self._done = True
        elif self._token is not None and self._token == previous_token:
            logger.warning(
                f"Continuation token repeated while listing {self._resource or 'resources'}; stopping",
            )
            self._token = None

    async def to_list(self) -> list[T]:
        """Fetch all remaining items."""
        return [item async for item in self]
