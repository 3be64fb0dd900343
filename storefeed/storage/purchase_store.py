# storefeed/storage/purchase_store.py

"""JSON-file key-value store for owned products."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from storefeed.config.settings import Settings
from storefeed.models.purchase import PurchaseRecord

logger = logging.getLogger("storefeed.storage")


class PurchaseStore:
    """Persist purchases under one key per product.

    Keys follow ``purchased_product_{id}``; each value is the JSON form
    of a :class:`PurchaseRecord`.  The whole file is rewritten on every
    change, which is fine for the handful of entries a user owns.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.PURCHASES_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.key_prefix: str = Settings.PURCHASE_KEY_PREFIX
        logger.debug("PurchaseStore opened at %s", self.path)

    def _key(self, product_id: int) -> str:
        return f"{self.key_prefix}{product_id}"

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read purchase file %s: %s",
                self.path,
                exc,
            )
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed purchase file %s", self.path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def save(
        self, product_id: int, purchase_date: datetime | None = None,
    ) -> PurchaseRecord:
        """Record *product_id* as owned and return the stored record."""
        record = PurchaseRecord(
            product_id=product_id,
            purchase_date=purchase_date or datetime.now(),
        )
        data = self._read()
        data[self._key(product_id)] = {
            "product_id": record.product_id,
            "purchase_date": record.purchase_date.isoformat(),
        }
        self._write(data)
        logger.info("Saved purchase of product %d", product_id)
        return record

    def get_all(self) -> list[PurchaseRecord]:
        """Return every stored purchase, skipping unreadable entries."""
        records: list[PurchaseRecord] = []
        for key, value in self._read().items():
            if not key.startswith(self.key_prefix):
                continue
            try:
                records.append(
                    PurchaseRecord(
                        product_id=int(value["product_id"]),
                        purchase_date=datetime.fromisoformat(
                            value["purchase_date"]
                        ),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping unreadable purchase entry %s", key)
        return records

    def is_purchased(self, product_id: int) -> bool:
        """Whether a record exists for *product_id*."""
        return self._key(product_id) in self._read()

    def remove(self, product_id: int) -> bool:
        """Delete the record for *product_id*; returns whether one existed."""
        data = self._read()
        if data.pop(self._key(product_id), None) is None:
            return False
        self._write(data)
        logger.info("Removed purchase of product %d", product_id)
        return True
