# tests/test_purchase_store.py

"""Tests for the JSON-file purchase store."""

import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from storefeed.config.settings import Settings
from storefeed.storage.purchase_store import PurchaseStore


class TestPurchaseStore(unittest.TestCase):
    """save / get_all / is_purchased / remove."""

    def setUp(self) -> None:
        """Give every test its own purchases file."""
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp_dir.cleanup)
        self.path = Path(self.tmp_dir.name) / "nested" / "purchases.json"
        self.store = PurchaseStore(self.path)

    def test_creates_parent_directory(self) -> None:
        """The store directory exists after construction."""
        self.assertTrue(self.path.parent.is_dir())

    def test_empty_store(self) -> None:
        """A missing file means no purchases."""
        self.assertEqual(self.store.get_all(), [])
        self.assertFalse(self.store.is_purchased(1))

    def test_save_and_lookup(self) -> None:
        """A saved product is reported as purchased."""
        record = self.store.save(5)
        self.assertEqual(record.product_id, 5)
        self.assertTrue(self.store.is_purchased(5))
        self.assertFalse(self.store.is_purchased(6))

    def test_keys_are_per_product(self) -> None:
        """Records are stored under purchased_product_{id}."""
        when = datetime(2026, 1, 2, 3, 4, 5)
        self.store.save(12, purchase_date=when)
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(
            data,
            {
                f"{Settings.PURCHASE_KEY_PREFIX}12": {
                    "product_id": 12,
                    "purchase_date": "2026-01-02T03:04:05",
                }
            },
        )

    def test_get_all_round_trips_dates(self) -> None:
        """Stored dates come back as datetimes."""
        when = datetime(2026, 5, 1, 12, 0, 0)
        self.store.save(1, purchase_date=when)
        self.store.save(2, purchase_date=when)
        records = sorted(self.store.get_all(), key=lambda r: r.product_id)
        self.assertEqual([r.product_id for r in records], [1, 2])
        self.assertEqual(records[0].purchase_date, when)

    def test_get_all_skips_foreign_and_broken_keys(self) -> None:
        """Unrelated keys and malformed entries are ignored."""
        self.path.write_text(
            json.dumps(
                {
                    "theme": "dark",
                    f"{Settings.PURCHASE_KEY_PREFIX}3": {"product_id": 3},
                    f"{Settings.PURCHASE_KEY_PREFIX}4": {
                        "product_id": 4,
                        "purchase_date": "2026-01-01T00:00:00",
                    },
                }
            ),
            encoding="utf-8",
        )
        self.assertEqual([r.product_id for r in self.store.get_all()], [4])

    def test_corrupt_file_reads_as_empty(self) -> None:
        """A file that is not JSON is logged and treated as empty."""
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("storefeed.storage", level="WARNING"):
            self.assertEqual(self.store.get_all(), [])
        self.assertFalse(self.store.is_purchased(1))

    def test_save_replaces_corrupt_file(self) -> None:
        """Saving over a corrupt file leaves a readable store."""
        self.path.write_text("{not json", encoding="utf-8")
        self.store.save(4)
        self.assertEqual([r.product_id for r in self.store.get_all()], [4])

    def test_remove(self) -> None:
        """remove() deletes an existing record only."""
        self.store.save(8)
        self.assertTrue(self.store.remove(8))
        self.assertFalse(self.store.is_purchased(8))
        self.assertFalse(self.store.remove(8))

    def test_default_path_from_settings(self) -> None:
        """Without a path the store uses Settings.PURCHASES_PATH."""
        store = PurchaseStore()
        self.assertEqual(store.path, Settings.PURCHASES_PATH)


if __name__ == "__main__":
    unittest.main()
