"""
Storefront CLI.

Command-line support tool for inspecting inventory and canonical carts.
"""

import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="storefront",
    help="Storefront cart and inventory CLI",
    add_completion=False,
)
console = Console()


def _identity(token: str, user: int | None):
    from storefront.services.cart import CartIdentity

    return CartIdentity(cart_token=token, user_id=user)


def _parse_item(raw: str):
    """Parse OFFER:QTY into a CartLineInput."""
    from storefront.schemas.cart import CartLineInput

    offer, sep, qty = raw.partition(":")
    if not sep:
        raise typer.BadParameter(f"Expected OFFER:QTY, got {raw!r}")
    try:
        return CartLineInput(offer_id=int(offer), quantity=int(qty))
    except ValueError as e:
        raise typer.BadParameter(f"Invalid item {raw!r}: {e}")


def _print_cart(cart) -> None:
    table = Table(title=f"Cart {cart.cart_token}")
    table.add_column("Offer", style="cyan")
    table.add_column("Name")
    table.add_column("Qty", justify="right", style="green")
    table.add_column("Unit", justify="right")
    table.add_column("Discounted", justify="right", style="yellow")

    for line in cart.items:
        table.add_row(
            str(line.offer_id),
            line.name,
            str(line.quantity),
            str(line.unit_price),
            "-" if line.discount_price is None else str(line.discount_price),
        )

    console.print(table)
    if cart.delivery_slot:
        console.print(f"Delivery slot: {cart.delivery_slot}")
    console.print(
        f"Subtotal: {cart.totals.subtotal}  "
        f"Discount: {cart.totals.discount_total}  "
        f"[bold]Total: {cart.totals.total}[/bold]"
    )


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init():
    """Create database tables."""
    from shared.infrastructure.db import engine
    from storefront.models import Base

    console.print("[blue]Creating tables...[/blue]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created/verified[/green]")


@app.command()
def inventory(
    include_inactive: bool = typer.Option(False, "--all", "-a", help="Include retired items"),
):
    """List inventory items with price and free stock."""
    from shared.infrastructure.db import get_db_context
    from storefront.repositories import InventoryRepository

    with get_db_context() as db:
        items = InventoryRepository(db).list_all(include_inactive=include_inactive)

        table = Table(title="Inventory")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Price", justify="right")
        table.add_column("Discount %", justify="right", style="yellow")
        table.add_column("Active")
        table.add_column("Available")
        table.add_column("Free stock", justify="right", style="green")

        for item in items:
            table.add_row(
                str(item.id),
                item.name,
                str(item.unit_price),
                "-" if item.discount_percent is None else str(item.discount_percent),
                "✓" if item.is_active else "✗",
                "✓" if item.is_available else "✗",
                str(item.free_stock),
            )

    console.print(table)


# =============================================================================
# Cart Commands
# =============================================================================

@app.command()
def cart_show(
    token: str = typer.Option(..., "--token", "-t", help="Anonymous cart token"),
    user: Optional[int] = typer.Option(None, "--user", "-u", help="Authenticated user id"),
):
    """Print the cached canonical cart of an identity."""
    from shared.infrastructure.redis import get_redis_sync_client
    from storefront.services.cart import CartCache, CartError

    identity = _identity(token, user)
    cache = CartCache(get_redis_sync_client())

    try:
        cart = cache.load(identity)
    except CartError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    if cart is None:
        console.print(f"[yellow]No cached cart for {identity.cache_key}[/yellow]")
        return

    _print_cart(cart)


@app.command()
def cart_validate(
    token: str = typer.Option(..., "--token", "-t", help="Anonymous cart token"),
    user: Optional[int] = typer.Option(None, "--user", "-u", help="Authenticated user id"),
    item: List[str] = typer.Option([], "--item", "-i", help="Desired line as OFFER:QTY (repeatable)"),
    delivery_slot: Optional[str] = typer.Option(None, "--slot", help="Delivery slot"),
):
    """Reconcile a declared cart against inventory and persist it."""
    from shared.infrastructure.db import get_db_context
    from shared.infrastructure.redis import get_redis_sync_client
    from storefront.schemas.cart import CartValidateRequest
    from storefront.services.cart import CartCache, CartError, CartReconciliationService

    identity = _identity(token, user)
    request = CartValidateRequest(
        delivery_slot=delivery_slot,
        items=[_parse_item(raw) for raw in item],
    )

    with get_db_context() as db:
        service = CartReconciliationService(db, CartCache(get_redis_sync_client()))
        try:
            result = service.validate_and_persist_cart(identity, request)
        except CartError as e:
            console.print(f"[red]✗ Reconciliation failed: {e}[/red]")
            raise typer.Exit(1)

    _print_cart(result.cart)

    if result.changes:
        changes = Table(title="Changes")
        changes.add_column("Type", style="yellow")
        changes.add_column("Offer", style="cyan")
        changes.add_column("Message")
        for change in result.changes:
            changes.add_row(change.type, str(change.offer_id), change.message)
        console.print(changes)

    stock = Table(title="Free stock after reconciliation")
    stock.add_column("Offer", style="cyan")
    stock.add_column("Free stock", justify="right", style="green")
    for offer_id, free in result.stock_by_offer_id.items():
        stock.add_row(str(offer_id), str(free))
    console.print(stock)

    if not result.is_min_order_reached:
        console.print(f"[yellow]Minimum order sum {result.min_order_sum} not reached[/yellow]")


@app.command()
def version():
    """Show version information."""
    table = Table(title="Storefront Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
