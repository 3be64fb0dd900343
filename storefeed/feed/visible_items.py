# storefeed/feed/visible_items.py

"""Client-side search over the already loaded feed."""

from collections.abc import Sequence

from storefeed.feed.feed_state import FeedSnapshot, FeedState
from storefeed.models.product import Product


def visible_items(
    state: FeedState | FeedSnapshot,
    search_text: str,
) -> Sequence[Product]:
    """Return the items to render for *search_text*.

    Category filtering already happened server side, so an empty search
    returns ``state.items`` itself.  Otherwise the result keeps the
    products whose title, description or category name contains the
    text, case-insensitively, in feed order.
    """
    if not search_text:
        return state.items

    needle = search_text.lower()
    return [
        product
        for product in state.items
        if needle in product.title.lower()
        or needle in product.description.lower()
        or needle in product.category.name.lower()
    ]
