# storefeed/models/product.py

"""Catalog data models shared by the client, the feed, and purchases."""

import random
from dataclasses import dataclass

from storefeed.config.settings import Settings

# Upstream names that map onto a fixed display label
_KNOWN_CATEGORY_LABELS: dict[str, str] = {
    "electronics": "Electronics",
    "jewelery": "Jewelery",
    "jewelry": "Jewelery",
    "men's clothing": "Men's Clothing",
    "women's clothing": "Women's Clothing",
}

# The upstream API names two categories "clothes"; the id tells them apart
_CLOTHES_LABELS_BY_ID: dict[int, str] = {
    1: "Men's Clothing",
    2: "Women's Clothing",
}


@dataclass(frozen=True)
class Rating:
    """Average review score and number of reviews for a product."""

    rate: float
    count: int

    @classmethod
    def generate_random(cls, rng: random.Random) -> "Rating":
        """Synthesize a plausible rating for a product that has none."""
        low_rate, high_rate = Settings.RATING_RATE_RANGE
        low_count, high_count = Settings.RATING_COUNT_RANGE
        return cls(
            rate=round(rng.uniform(low_rate, high_rate), 1),
            count=rng.randint(low_count, high_count),
        )


@dataclass(frozen=True)
class Category:
    """A product category as served by the catalog API."""

    id: int
    name: str
    image: str | None = None

    @property
    def display_name(self) -> str:
        """Human-facing label for filter chips and product cards."""
        lowered = self.name.lower()
        if lowered == "clothes" and self.id in _CLOTHES_LABELS_BY_ID:
            return _CLOTHES_LABELS_BY_ID[self.id]
        if lowered in _KNOWN_CATEGORY_LABELS:
            return _KNOWN_CATEGORY_LABELS[lowered]
        return self.name[:1].upper() + self.name[1:]


@dataclass(frozen=True)
class Product:
    """A single catalog product; immutable once decoded."""

    id: int
    title: str
    price: float
    description: str
    category: Category
    images: tuple[str, ...] = ()
    rating: Rating | None = None
