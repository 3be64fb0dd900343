# storefeed/feed/feed_state.py

"""Mutable pagination state owned by the feed controller."""

from dataclasses import dataclass, field
from enum import Enum

from storefeed.client.errors import CatalogError
from storefeed.config.settings import Settings
from storefeed.models.product import Product


class FeedStatus(Enum):
    """Effective state derived from the feed's flags."""

    IDLE = "idle"
    INITIAL_LOADING = "initial_loading"
    LOADING_MORE = "loading_more"
    ERROR = "error"
    EXHAUSTED = "exhausted"


def _derive_status(
    has_items: bool,
    loading: bool,
    exhausted: bool,
    last_error: CatalogError | None,
) -> FeedStatus:
    if loading:
        return FeedStatus.LOADING_MORE if has_items else FeedStatus.INITIAL_LOADING
    if last_error is not None:
        return FeedStatus.ERROR
    if exhausted:
        return FeedStatus.EXHAUSTED
    return FeedStatus.IDLE


@dataclass(frozen=True)
class FeedSnapshot:
    """Read-only copy of the feed handed to observers."""

    items: tuple[Product, ...]
    page_cursor: int
    page_size: int
    exhausted: bool
    active_category_id: int | None
    loading: bool
    loading_more: bool
    last_error: CatalogError | None

    @property
    def status(self) -> FeedStatus:
        """Effective state of the feed at snapshot time."""
        return _derive_status(
            bool(self.items), self.loading, self.exhausted, self.last_error
        )


@dataclass
class FeedState:
    """Loaded items, page cursor, filter, and busy/error flags.

    ``items`` is append-only within one filter session and replaced
    wholesale when the filter changes or the feed is refreshed.
    """

    page_size: int = Settings.PAGE_SIZE
    items: list[Product] = field(default_factory=lambda: list[Product]())
    page_cursor: int = 0
    exhausted: bool = False
    active_category_id: int | None = None
    loading: bool = False
    loading_more: bool = False
    last_error: CatalogError | None = None

    @property
    def status(self) -> FeedStatus:
        """Effective state derived from the current flags."""
        return _derive_status(
            bool(self.items), self.loading, self.exhausted, self.last_error
        )

    def reset(self, category_id: int | None) -> None:
        """Start a new filter session for *category_id*."""
        self.items = []
        self.page_cursor = 0
        self.exhausted = False
        self.active_category_id = category_id
        self.loading = False
        self.loading_more = False
        self.last_error = None

    def snapshot(self) -> FeedSnapshot:
        """Return an immutable copy for observers."""
        return FeedSnapshot(
            items=tuple(self.items),
            page_cursor=self.page_cursor,
            page_size=self.page_size,
            exhausted=self.exhausted,
            active_category_id=self.active_category_id,
            loading=self.loading,
            loading_more=self.loading_more,
            last_error=self.last_error,
        )
