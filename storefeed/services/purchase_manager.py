# storefeed/services/purchase_manager.py

"""Simulated in-app purchases backed by local storage."""

import asyncio
import logging

from storefeed.config.settings import Settings
from storefeed.models.product import Product
from storefeed.models.purchase import PurchaseStatus
from storefeed.storage.purchase_store import PurchaseStore

logger = logging.getLogger("storefeed.purchases")


class PurchaseError(RuntimeError):
    """Raised when a simulated purchase cannot be recorded."""


class PurchaseManager:
    """Track owned products and run the mocked purchase flow.

    No payment happens: :meth:`purchase` waits ``PURCHASE_DELAY``
    seconds and then persists the product id.
    """

    def __init__(
        self,
        store: PurchaseStore | None = None,
        delay: float | None = None,
    ) -> None:
        self.store = store or PurchaseStore()
        self.delay = Settings.PURCHASE_DELAY if delay is None else delay
        self.status: PurchaseStatus = PurchaseStatus.NOT_PURCHASED
        self.purchased_ids: set[int] = set()
        self.refresh()

    def refresh(self) -> None:
        """Reload the owned-product set from storage."""
        self.purchased_ids = {r.product_id for r in self.store.get_all()}
        logger.debug("Loaded %d stored purchases", len(self.purchased_ids))

    def is_purchased(self, product_id: int) -> bool:
        """Whether the user owns *product_id*."""
        return product_id in self.purchased_ids

    async def purchase(self, product: Product) -> PurchaseStatus:
        """Simulate buying *product* and persist the result."""
        self.status = PurchaseStatus.PURCHASING
        logger.info("Purchasing product %d (%s)", product.id, product.title)
        await asyncio.sleep(self.delay)
        try:
            self.store.save(product.id)
        except OSError as exc:
            self.status = PurchaseStatus.FAILED
            logger.error(
                "Purchase of product %d failed: %s",
                product.id,
                exc,
                exc_info=True,
            )
            raise PurchaseError(str(exc)) from exc

        self.purchased_ids.add(product.id)
        self.status = PurchaseStatus.PURCHASED
        return self.status
