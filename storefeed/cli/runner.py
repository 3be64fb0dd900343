# storefeed/cli/runner.py

"""Headless CLI driver: pages through the feed and prints the result."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from storefeed.client.catalog_client import CatalogClient
from storefeed.feed.feed_controller import FeedController
from storefeed.feed.feed_state import FeedSnapshot
from storefeed.models.product import Category, Product
from storefeed.services.purchase_manager import PurchaseManager

logger = logging.getLogger("storefeed.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _products_to_dicts(
    products: list[Product],
    purchases: PurchaseManager,
) -> list[dict[str, object]]:
    """Serialise a product list to plain dicts for JSON output."""
    return [
        {
            "id": p.id,
            "title": p.title,
            "price": p.price,
            "category": p.category.display_name,
            "rating": p.rating.rate if p.rating else None,
            "reviews": p.rating.count if p.rating else 0,
            "images": list(p.images),
            "purchased": purchases.is_purchased(p.id),
        }
        for p in products
    ]


def _print_table(products: list[Product], purchases: PurchaseManager) -> None:
    """Render a Rich table of products to stdout, in feed order."""
    table = Table(
        title="Catalog",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("ID", justify="right")
    table.add_column("Title", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Category", style="magenta")
    table.add_column("Owned", justify="center")

    for idx, p in enumerate(products, 1):
        rating = (
            f"{p.rating.rate:.1f} ({p.rating.count})" if p.rating else "—"
        )
        table.add_row(
            str(idx),
            str(p.id),
            p.title[:50],
            f"${p.price:,.2f}",
            rating,
            p.category.display_name,
            "✓" if purchases.is_purchased(p.id) else "",
        )

    Console().print(table)


def _print_categories(categories: list[Category]) -> None:
    """Render the category list to stdout."""
    table = Table(title="Categories", title_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    for category in categories:
        table.add_row(str(category.id), category.display_name)
    Console().print(table)


def _log_status(snapshot: FeedSnapshot) -> None:
    """Feed observer that mirrors state changes into the log."""
    logger.debug(
        "Feed %s: %d items, page_cursor=%d",
        snapshot.status.value,
        len(snapshot.items),
        snapshot.page_cursor,
    )


async def cli_browse(
    category_id: int | None,
    pages: int,
    search_text: str,
    output_format: str,
    base_url: str | None = None,
) -> int:
    """Load up to *pages* pages and print them (0=ok, 1=fail)."""
    purchases = PurchaseManager()
    async with CatalogClient(base_url=base_url) as client:
        controller = FeedController(client, purchases=purchases)
        controller.subscribe(_log_status)

        _err.print(
            f"[bold]Browsing catalog[/bold] "
            f"[dim]category={category_id if category_id is not None else 'all'}"
            f" pages={pages}[/dim]"
        )

        await controller.set_category_filter(category_id)
        while (
            controller.state.page_cursor < pages
            and not controller.state.exhausted
            and controller.state.last_error is None
        ):
            await controller.load_page()

        await controller.close()

    state = controller.state
    if state.last_error is not None:
        _err.print(f"[red]Error: {state.last_error.message}[/red]")
        if not state.items:
            return 1

    products = list(controller.visible_items(search_text))
    if not products:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    detail = f" matching '{search_text}'" if search_text else ""
    _err.print(
        f"[green]✓ {len(products)} products{detail}"
        f" of {len(state.items)} loaded[/green]"
    )

    if output_format == "table":
        _print_table(products, purchases)
    else:
        json.dump(
            _products_to_dicts(products, purchases),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


async def cli_categories(base_url: str | None = None) -> int:
    """Print the filterable categories (0=ok, 1=fail)."""
    async with CatalogClient(base_url=base_url) as client:
        controller = FeedController(client)
        categories = await controller.load_categories()

    if not categories:
        _err.print("[yellow]No categories available.[/yellow]")
        return 1
    _print_categories(categories)
    return 0
