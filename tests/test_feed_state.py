# tests/test_feed_state.py

"""Tests for FeedState flags, status derivation and snapshots."""

import dataclasses
import unittest

from storefeed.client.errors import HttpStatus
from storefeed.feed.feed_state import FeedState, FeedStatus
from storefeed.models.product import Category, Product


def _make_product(pid: int) -> Product:
    return Product(
        id=pid,
        title=f"Product {pid}",
        price=1.0,
        description="",
        category=Category(id=1, name="Misc"),
    )


class TestFeedStatus(unittest.TestCase):
    """Effective status derived from flags."""

    def test_new_state_is_idle(self) -> None:
        """A fresh feed is idle and empty."""
        state = FeedState()
        self.assertEqual(state.status, FeedStatus.IDLE)
        self.assertEqual(state.items, [])
        self.assertEqual(state.page_cursor, 0)

    def test_initial_loading(self) -> None:
        """Loading with no items is the initial load."""
        state = FeedState(loading=True, loading_more=True)
        self.assertEqual(state.status, FeedStatus.INITIAL_LOADING)

    def test_loading_more(self) -> None:
        """Loading with items present is a load-more."""
        state = FeedState(loading=True, loading_more=True)
        state.items.append(_make_product(1))
        self.assertEqual(state.status, FeedStatus.LOADING_MORE)

    def test_error(self) -> None:
        """A recorded error outranks exhaustion."""
        state = FeedState(exhausted=True, last_error=HttpStatus(500))
        self.assertEqual(state.status, FeedStatus.ERROR)

    def test_exhausted(self) -> None:
        """No more pages."""
        self.assertEqual(
            FeedState(exhausted=True).status, FeedStatus.EXHAUSTED
        )


class TestFeedStateReset(unittest.TestCase):
    """reset() and snapshot()."""

    def test_reset_clears_session(self) -> None:
        """Reset empties items and flags and sets the category."""
        state = FeedState(
            page_cursor=3,
            exhausted=True,
            loading=True,
            loading_more=True,
            last_error=HttpStatus(500),
        )
        state.items.append(_make_product(1))
        state.reset(7)

        self.assertEqual(state.items, [])
        self.assertEqual(state.page_cursor, 0)
        self.assertFalse(state.exhausted)
        self.assertFalse(state.loading)
        self.assertFalse(state.loading_more)
        self.assertIsNone(state.last_error)
        self.assertEqual(state.active_category_id, 7)

    def test_snapshot_is_detached(self) -> None:
        """Later mutations do not leak into an earlier snapshot."""
        state = FeedState()
        state.items.append(_make_product(1))
        snapshot = state.snapshot()
        state.items.append(_make_product(2))

        self.assertEqual(len(snapshot.items), 1)
        self.assertIsInstance(snapshot.items, tuple)

    def test_snapshot_is_frozen(self) -> None:
        """Observers cannot write through a snapshot."""
        snapshot = FeedState().snapshot()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            snapshot.page_cursor = 4  # type: ignore[misc]

    def test_snapshot_status_matches_state(self) -> None:
        """The snapshot derives the same status."""
        state = FeedState(loading=True, loading_more=True)
        self.assertEqual(state.snapshot().status, state.status)


if __name__ == "__main__":
    unittest.main()
