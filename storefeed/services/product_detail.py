# storefeed/services/product_detail.py

"""State behind a single-product detail screen."""

import logging

from storefeed.client.catalog_client import CatalogClient
from storefeed.client.errors import CatalogError, UnknownError
from storefeed.models.product import Product
from storefeed.models.purchase import PurchaseStatus
from storefeed.services.purchase_manager import PurchaseError, PurchaseManager

logger = logging.getLogger("storefeed.detail")


class ProductDetail:
    """Load one product and drive its purchase button."""

    def __init__(
        self,
        client: CatalogClient,
        purchases: PurchaseManager,
        product: Product | None = None,
    ) -> None:
        self.client = client
        self.purchases = purchases
        self.product = product
        self.loading: bool = False
        self.error: CatalogError | None = None
        self.purchase_status: PurchaseStatus = PurchaseStatus.NOT_PURCHASED
        self.failure_message: str = ""
        if product is not None:
            self.check_purchase_status(product.id)

    async def load_product(self, product_id: int) -> Product | None:
        """Fetch *product_id*; on failure keep the error for display."""
        self.loading = True
        self.error = None
        try:
            self.product = await self.client.fetch_product(product_id)
        except CatalogError as exc:
            self.error = exc
            logger.warning("Could not load product %d: %s", product_id, exc.message)
            return None
        except Exception as exc:
            self.error = UnknownError(str(exc))
            logger.error(
                "Unexpected error loading product %d: %s",
                product_id,
                exc,
                exc_info=True,
            )
            return None
        finally:
            self.loading = False

        self.check_purchase_status(product_id)
        return self.product

    def check_purchase_status(self, product_id: int) -> PurchaseStatus:
        """Sync ``purchase_status`` with the purchase manager."""
        if self.purchases.is_purchased(product_id):
            self.purchase_status = PurchaseStatus.PURCHASED
        else:
            self.purchase_status = PurchaseStatus.NOT_PURCHASED
        return self.purchase_status

    async def purchase(self) -> PurchaseStatus:
        """Buy the loaded product; no-op when nothing is loaded."""
        if self.product is None:
            return self.purchase_status

        self.purchase_status = PurchaseStatus.PURCHASING
        try:
            self.purchase_status = await self.purchases.purchase(self.product)
        except PurchaseError as exc:
            self.purchase_status = PurchaseStatus.FAILED
            self.failure_message = str(exc)
        return self.purchase_status

    @property
    def is_purchased(self) -> bool:
        """Whether the loaded product is owned."""
        if self.product is None:
            return False
        return self.purchases.is_purchased(self.product.id)
