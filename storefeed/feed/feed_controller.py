# storefeed/feed/feed_controller.py

"""Paginated product feed: debouncing, cancellation, filter resets."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from storefeed.client.catalog_client import CatalogClient
from storefeed.client.errors import CatalogError, UnknownError
from storefeed.config.settings import Settings
from storefeed.feed.feed_state import FeedSnapshot, FeedState
from storefeed.feed.visible_items import visible_items
from storefeed.models.product import Category, Product

logger = logging.getLogger("storefeed.feed")

FeedObserver = Callable[[FeedSnapshot], None]


class PurchaseLookup(Protocol):
    """The slice of the purchase collaborator the feed depends on."""

    def is_purchased(self, product_id: int) -> bool:
        ...


@dataclass(frozen=True)
class _FetchTicket:
    """Filter context a page fetch was issued under."""

    generation: int
    category_id: int | None
    page: int


class FeedController:
    """Owns a :class:`FeedState` and mediates every load against the client.

    All mutation happens on the event loop that drives the controller.
    Each page fetch carries a ticket (generation, category, page); any
    filter change or refresh bumps the generation, cancels outstanding
    work, and every completion re-checks its ticket before touching
    state, so a stale page is never applied.

    Observers registered with :meth:`subscribe` receive a
    :class:`FeedSnapshot` after each mutation.
    """

    def __init__(
        self,
        client: CatalogClient,
        purchases: PurchaseLookup | None = None,
        page_size: int | None = None,
        look_ahead: int | None = None,
        debounce_delay: float | None = None,
        prefetch_delay: float | None = None,
    ) -> None:
        self.settings = Settings()
        self.client = client
        self.purchases = purchases
        self.look_ahead = (
            self.settings.LOOK_AHEAD_THRESHOLD if look_ahead is None else look_ahead
        )
        self.debounce_delay = (
            self.settings.DEBOUNCE_DELAY
            if debounce_delay is None
            else debounce_delay
        )
        self.prefetch_delay = (
            self.settings.PREFETCH_DELAY
            if prefetch_delay is None
            else prefetch_delay
        )
        self.state = FeedState(page_size=page_size or self.settings.PAGE_SIZE)
        self.categories: list[Category] = []
        self.search_text: str = ""

        self._generation: int = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._fetch_task: asyncio.Task[bool] | None = None
        self._observers: list[FeedObserver] = []

    # ── Observation ──────────────────────────────────────

    def subscribe(self, observer: FeedObserver) -> Callable[[], None]:
        """Register *observer*; returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.state.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception as exc:
                logger.error(
                    "Feed observer %r failed: %s", observer, exc, exc_info=True
                )

    # ── Load-more triggers ───────────────────────────────

    def request_more(self, trigger_index: int) -> asyncio.Task[None] | None:
        """Note that the view is about to render row *trigger_index*.

        Must be called from the event loop.  Calls made while a page is
        loading are ignored; otherwise any pending evaluation is
        superseded and a new one runs after the debounce delay.  Returns
        the scheduled task, or ``None`` when the call was ignored.
        """
        if self.state.loading or self.state.loading_more:
            logger.debug("request_more(%d) ignored: page in flight", trigger_index)
            return None

        self._cancel_debounce()
        task = asyncio.create_task(
            self._debounced_request(trigger_index, self._generation)
        )
        self._debounce_task = task
        return task

    async def _debounced_request(self, trigger_index: int, generation: int) -> None:
        await asyncio.sleep(self.debounce_delay)
        if generation != self._generation:
            return

        state = self.state
        if state.last_error is not None:
            # Automatic loading stays halted until an explicit retry
            logger.debug("request_more(%d) skipped: last load failed", trigger_index)
            return
        if state.exhausted:
            return

        threshold_index = len(state.items) - self.look_ahead
        if trigger_index == 0 or trigger_index >= threshold_index:
            await self.load_page()

    def _cancel_debounce(self) -> None:
        task = self._debounce_task
        if task is not None and not task.done():
            task.cancel()
        self._debounce_task = None

    # ── Page loading ─────────────────────────────────────

    def _is_current(self, ticket: _FetchTicket) -> bool:
        return (
            ticket.generation == self._generation
            and ticket.category_id == self.state.active_category_id
        )

    async def load_page(self) -> bool:
        """Fetch the next page for the active filter.

        No-op while another page is loading or once the feed is
        exhausted.  Returns ``True`` when a page was applied.
        """
        state = self.state
        if state.loading or state.loading_more or state.exhausted:
            logger.debug(
                "load_page ignored (loading=%s, loading_more=%s, exhausted=%s)",
                state.loading,
                state.loading_more,
                state.exhausted,
            )
            return False

        ticket = _FetchTicket(
            generation=self._generation,
            category_id=state.active_category_id,
            page=state.page_cursor,
        )
        state.loading = True
        state.loading_more = True
        state.last_error = None
        self._notify()

        fetch = asyncio.create_task(self._fetch_page(ticket))
        self._fetch_task = fetch
        try:
            return await fetch
        except asyncio.CancelledError:
            if self._is_current(ticket):
                state.loading = False
                state.loading_more = False
                self._notify()
                raise
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug(
                "Page %d fetch for category %s superseded",
                ticket.page,
                ticket.category_id,
            )
            return False
        finally:
            if self._fetch_task is fetch:
                self._fetch_task = None

    async def _fetch_page(self, ticket: _FetchTicket) -> bool:
        state = self.state
        try:
            if self.prefetch_delay > 0:
                await asyncio.sleep(self.prefetch_delay)
            if not self._is_current(ticket):
                return False
            products = await self.client.fetch_products(
                state.page_size,
                ticket.page * state.page_size,
                ticket.category_id,
            )
        except CatalogError as exc:
            self._record_failure(ticket, exc)
            return False
        except Exception as exc:
            logger.error(
                "Unexpected error loading page %d: %s",
                ticket.page,
                exc,
                exc_info=True,
            )
            self._record_failure(ticket, UnknownError(str(exc)))
            return False

        if not self._is_current(ticket):
            logger.info(
                "Discarding stale page %d for category %s",
                ticket.page,
                ticket.category_id,
            )
            return False

        self._apply_page(ticket, products)
        return True

    def _apply_page(self, ticket: _FetchTicket, products: Sequence[Product]) -> None:
        state = self.state
        if ticket.page == 0:
            state.items = list(products)
        else:
            state.items.extend(products)
        state.page_cursor = ticket.page + 1
        state.exhausted = len(products) < state.page_size
        state.loading = False
        state.loading_more = False
        logger.info(
            "Loaded page %d (%d products, %d total, category=%s%s)",
            ticket.page,
            len(products),
            len(state.items),
            ticket.category_id,
            ", exhausted" if state.exhausted else "",
        )
        self._notify()

    def _record_failure(self, ticket: _FetchTicket, error: CatalogError) -> None:
        if not self._is_current(ticket):
            logger.debug(
                "Ignoring failure of stale page %d: %s", ticket.page, error
            )
            return
        state = self.state
        state.last_error = error
        state.loading = False
        state.loading_more = False
        logger.warning(
            "Failed to load page %d (category=%s): %s",
            ticket.page,
            ticket.category_id,
            error.message,
        )
        self._notify()

    # ── Filter changes ───────────────────────────────────

    def _reset(self, category_id: int | None) -> None:
        """Invalidate outstanding work and start a fresh filter session."""
        self._generation += 1
        self._cancel_debounce()
        fetch = self._fetch_task
        if fetch is not None and not fetch.done():
            fetch.cancel()
        self._fetch_task = None
        self.state.reset(category_id)
        self._notify()

    async def set_category_filter(self, category_id: int | None) -> bool:
        """Switch the server-side category filter and load its first page."""
        logger.info(
            "Category filter %s -> %s",
            self.state.active_category_id,
            category_id,
        )
        self.search_text = ""
        self._reset(category_id)
        return await self.load_page()

    async def refresh(self) -> bool:
        """Drop loaded pages and re-fetch page 0 of the current filter."""
        logger.info("Refreshing feed (category=%s)", self.state.active_category_id)
        self._reset(self.state.active_category_id)
        return await self.load_page()

    # ── Categories and startup ───────────────────────────

    def _is_valid_category(self, category: Category) -> bool:
        return (
            category.name not in self.settings.INVALID_CATEGORY_NAMES
            and self.settings.INVALID_CATEGORY_MARKER not in category.name
        )

    async def load_categories(self) -> list[Category]:
        """Fetch the filter categories, dropping upstream junk entries."""
        try:
            fetched = await self.client.fetch_categories()
        except CatalogError as exc:
            logger.error("Failed to load categories: %s", exc.message)
            self.categories = []
            return self.categories

        self.categories = sorted(
            (c for c in fetched if self._is_valid_category(c)),
            key=lambda c: c.name,
        )
        logger.info(
            "Loaded %d categories (%d dropped)",
            len(self.categories),
            len(fetched) - len(self.categories),
        )
        return self.categories

    async def load_initial_data(self) -> None:
        """Load categories, then the first page through the debounce path."""
        await self.load_categories()
        task = self.request_more(0)
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Initial load superseded by a filter change")

    # ── View helpers ─────────────────────────────────────

    def visible_items(self, search_text: str | None = None) -> Sequence[Product]:
        """Items to render for *search_text* (defaults to ``search_text``)."""
        text = self.search_text if search_text is None else search_text
        return visible_items(self.state, text)

    def is_purchased(self, product_id: int) -> bool:
        """Whether the user owns *product_id*; False without a collaborator."""
        if self.purchases is None:
            return False
        return self.purchases.is_purchased(product_id)

    async def close(self) -> None:
        """Cancel outstanding work and drop observers."""
        self._generation += 1
        pending = [
            task
            for task in (self._debounce_task, self._fetch_task)
            if task is not None and not task.done()
        ]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._debounce_task = None
        self._fetch_task = None
        self._observers.clear()
