# tests/test_cli_runner.py

"""Tests for the headless CLI driver."""

import io
import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from storefeed.cli.runner import cli_browse, cli_categories
from storefeed.client.errors import HttpStatus
from storefeed.config.settings import Settings
from storefeed.models.product import Category, Product

CLIENT_PATH = "storefeed.cli.runner.CatalogClient"


def _page(start: int, count: int) -> list[Product]:
    return [
        Product(
            id=start + i,
            title=f"Phone {start + i}" if i % 2 == 0 else f"Shoe {start + i}",
            price=5.0,
            description="",
            category=Category(id=1, name="Misc"),
        )
        for i in range(count)
    ]


def _make_client_cls(client: MagicMock) -> MagicMock:
    """Build a CatalogClient replacement usable with ``async with``."""
    client_cls = MagicMock()
    client_cls.return_value.__aenter__ = AsyncMock(return_value=client)
    client_cls.return_value.__aexit__ = AsyncMock(return_value=None)
    return client_cls


@patch.object(Settings, "PREFETCH_DELAY", 0.0)
class TestCliBrowse(unittest.IsolatedAsyncioTestCase):
    """cli_browse end to end against a mocked client."""

    async def test_json_output_pages_until_exhausted(self) -> None:
        """Pages load until a short page, then JSON is printed."""
        client = MagicMock()
        client.fetch_products = AsyncMock(
            side_effect=[_page(1, 10), _page(11, 3)]
        )
        with patch(CLIENT_PATH, _make_client_cls(client)), patch(
            "sys.stdout", new_callable=io.StringIO
        ) as out:
            code = await cli_browse(None, 5, "", "json")

        self.assertEqual(code, 0)
        data = json.loads(out.getvalue())
        self.assertEqual(len(data), 13)
        self.assertEqual(data[0]["id"], 1)
        self.assertFalse(data[0]["purchased"])
        self.assertEqual(client.fetch_products.await_count, 2)

    async def test_search_filters_output(self) -> None:
        """The search text narrows the printed products."""
        client = MagicMock()
        client.fetch_products = AsyncMock(return_value=_page(1, 4))
        with patch(CLIENT_PATH, _make_client_cls(client)), patch(
            "sys.stdout", new_callable=io.StringIO
        ) as out:
            code = await cli_browse(None, 1, "phone", "json")

        self.assertEqual(code, 0)
        titles = [p["title"] for p in json.loads(out.getvalue())]
        self.assertEqual(titles, ["Phone 1", "Phone 3"])

    async def test_error_without_items_fails(self) -> None:
        """A failed first page returns exit code 1."""
        client = MagicMock()
        client.fetch_products = AsyncMock(side_effect=HttpStatus(500))
        with patch(CLIENT_PATH, _make_client_cls(client)):
            code = await cli_browse(3, 1, "", "table")

        self.assertEqual(code, 1)
        _args = client.fetch_products.await_args.args
        self.assertEqual(_args, (10, 0, 3))


class TestCliCategories(unittest.IsolatedAsyncioTestCase):
    """cli_categories."""

    async def test_lists_categories(self) -> None:
        """Valid categories print and exit 0."""
        client = MagicMock()
        client.fetch_categories = AsyncMock(
            return_value=[Category(id=1, name="Clothes")]
        )
        with patch(CLIENT_PATH, _make_client_cls(client)):
            self.assertEqual(await cli_categories(), 0)

    async def test_no_categories(self) -> None:
        """An empty list exits 1."""
        client = MagicMock()
        client.fetch_categories = AsyncMock(return_value=[])
        with patch(CLIENT_PATH, _make_client_cls(client)):
            self.assertEqual(await cli_categories(), 1)


if __name__ == "__main__":
    unittest.main()
