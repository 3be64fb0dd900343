# storefeed/models/purchase.py

"""Purchase status and persisted purchase records."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PurchaseStatus(Enum):
    """Lifecycle of a single simulated purchase."""

    NOT_PURCHASED = "not_purchased"
    PURCHASING = "purchasing"
    PURCHASED = "purchased"
    FAILED = "failed"


@dataclass
class PurchaseRecord:
    """A product the user owns, with the time it was bought."""

    product_id: int
    purchase_date: datetime
