# storefeed/client/catalog_client.py

"""Async HTTP client for the remote product catalog API."""

import logging
import random
from types import TracebackType
from typing import Any
from urllib.parse import urlparse

from curl_cffi import CurlError
from curl_cffi import requests as curl_requests

from storefeed.client.errors import (
    DecodeFailure,
    HttpStatus,
    InvalidRequest,
    TransportFailure,
    UnknownError,
)
from storefeed.config.settings import Settings
from storefeed.models.product import Category, Product, Rating

logger = logging.getLogger("storefeed.client")


class CatalogClient:
    """Fetch products and categories from the catalog REST API.

    The client never retries: every failure is mapped onto the
    :mod:`storefeed.client.errors` taxonomy and raised to the caller.

    Two upstream data-quality workarounds live here, at the boundary,
    so the rest of the code only ever sees clean products:

    * products titled with one of ``Settings.POISONED_TITLES`` are
      dropped from lists and reported as HTTP 404 when fetched by id;
    * products without a rating get one synthesized from ``rng`` the
      first time they are decoded; later fetches of the same id reuse
      it for the lifetime of the client.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: curl_requests.AsyncSession | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = Settings()
        self.base_url = (base_url or self.settings.BASE_URL).rstrip("/")
        self.session = session or curl_requests.AsyncSession(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self.rng = rng or random.Random()
        self._synthesized_ratings: dict[int, Rating] = {}
        self.poisoned_titles: frozenset[str] = self.settings.POISONED_TITLES
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        await self.session.close()

    # ── Public API ───────────────────────────────────────

    async def fetch_products(
        self,
        page_size: int,
        page_offset: int,
        category_id: int | None = None,
    ) -> list[Product]:
        """Fetch one page of products, optionally within a category."""
        if page_size <= 0 or page_offset < 0:
            raise self._invalid(
                f"Invalid page request (limit={page_size}, skip={page_offset})"
            )
        params: dict[str, int] = {"limit": page_size, "skip": page_offset}
        if category_id is not None:
            params["categoryId"] = category_id

        payload = await self._get_json("/products", params)
        if not isinstance(payload, list):
            raise DecodeFailure("Expected a JSON array of products")

        products: list[Product] = []
        dropped = 0
        for raw in payload:
            product = self._decode_product(raw)
            if product.title in self.poisoned_titles:
                dropped += 1
                continue
            products.append(product)

        if dropped:
            logger.info(
                "Dropped %d poisoned products from page (skip=%d)",
                dropped,
                page_offset,
            )
        logger.debug(
            "Fetched %d products (limit=%d, skip=%d, category=%s)",
            len(products),
            page_size,
            page_offset,
            category_id,
        )
        return products

    async def fetch_product(self, product_id: int) -> Product:
        """Fetch a single product by id."""
        if isinstance(product_id, bool) or not isinstance(product_id, int):
            raise self._invalid(f"Invalid product id: {product_id!r}")

        payload = await self._get_json(f"/products/{product_id}")
        product = self._decode_product(payload)
        if product.title in self.poisoned_titles:
            logger.info(
                "Product %d is a poisoned fixture, reporting not found",
                product_id,
            )
            raise HttpStatus(404)
        return product

    async def fetch_categories(self) -> list[Category]:
        """Fetch every category the catalog knows about."""
        payload = await self._get_json("/categories")
        if not isinstance(payload, list):
            raise DecodeFailure("Expected a JSON array of categories")
        return [self._decode_category(raw) for raw in payload]

    # ── Transport ────────────────────────────────────────

    def _invalid(self, message: str) -> InvalidRequest:
        """Log and build an InvalidRequest (a caller bug, not a runtime fault)."""
        logger.error(message)
        return InvalidRequest(message)

    def _build_url(self, path: str) -> str:
        """Join the base URL and *path*, rejecting malformed bases."""
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise self._invalid(f"Invalid base URL: {self.base_url!r}")
        return f"{self.base_url}{path}"

    async def _get_json(
        self,
        path: str,
        params: dict[str, int] | None = None,
    ) -> Any:
        """GET *path* and return the decoded JSON body."""
        url = self._build_url(path)
        try:
            resp = await self.session.get(
                url,
                params=params,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except CurlError as exc:
            logger.warning(
                "Transport error for %s: %s", url, exc, exc_info=True
            )
            raise TransportFailure(str(exc)) from exc
        except Exception as exc:
            logger.error(
                "Unexpected error for %s: %s", url, exc, exc_info=True
            )
            raise UnknownError(str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("HTTP %d for %s", resp.status_code, url)
            raise HttpStatus(resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("Invalid JSON from %s: %s", url, exc)
            raise DecodeFailure() from exc

    # ── Decoding ─────────────────────────────────────────

    @staticmethod
    def _field(raw: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
        """Return ``raw[key]`` if present and of the expected type."""
        if key not in raw:
            raise DecodeFailure(f"Missing field '{key}'")
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, kind):
            raise DecodeFailure(
                f"Field '{key}' has unexpected type {type(value).__name__}"
            )
        return value

    def _decode_category(self, raw: Any) -> Category:
        """Decode a ``{id, name, image}`` object."""
        if not isinstance(raw, dict):
            raise DecodeFailure("Expected a category object")
        image = raw.get("image")
        if image is not None and not isinstance(image, str):
            raise DecodeFailure("Field 'image' has unexpected type")
        return Category(
            id=self._field(raw, "id", int),
            name=self._field(raw, "name", str),
            image=image,
        )

    def _decode_rating(self, raw: Any) -> Rating:
        """Decode a ``{rate, count}`` object."""
        if not isinstance(raw, dict):
            raise DecodeFailure("Expected a rating object")
        rate = float(self._field(raw, "rate", (int, float)))
        count = self._field(raw, "count", int)
        if not 0.0 <= rate <= 5.0 or count < 0:
            raise DecodeFailure(f"Rating out of range ({rate}, {count})")
        return Rating(rate=rate, count=count)

    def _decode_product(self, raw: Any) -> Product:
        """Decode a product object, synthesizing a missing rating."""
        if not isinstance(raw, dict):
            raise DecodeFailure("Expected a product object")

        price = float(self._field(raw, "price", (int, float)))
        if price < 0:
            raise DecodeFailure(f"Negative price: {price}")

        images = self._field(raw, "images", list)
        if not all(isinstance(url, str) for url in images):
            raise DecodeFailure("Field 'images' must hold strings")

        product_id = self._field(raw, "id", int)
        raw_rating = raw.get("rating")
        if raw_rating is None:
            rating = self._synthesized_ratings.get(product_id)
            if rating is None:
                rating = Rating.generate_random(self.rng)
                self._synthesized_ratings[product_id] = rating
        else:
            rating = self._decode_rating(raw_rating)

        return Product(
            id=product_id,
            title=self._field(raw, "title", str),
            price=price,
            description=self._field(raw, "description", str),
            category=self._decode_category(raw.get("category")),
            images=tuple(images),
            rating=rating,
        )
