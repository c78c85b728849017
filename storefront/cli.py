# Overview: Flask CLI command groups for catalog, cart and device maintenance.

# Commands Legend:
# - flask --app storefront catalog refresh
#   Fetch the catalog from the Storefront API and print bucket counts.
# - flask --app storefront cart show
#   Print the persisted cart lines and totals.
# - flask --app storefront device reset --yes
#   Delete every stored device value (cart and customer token).

import click
from flask import current_app
from flask.cli import AppGroup

from .errors import NetworkFailure


def _storefront():
    return current_app.extensions["storefront"]


catalog_group = AppGroup('catalog', help="Catalog commands.")


@catalog_group.command('refresh')
def refresh_catalog():
    """Fetch every product page and print bucket sizes."""
    from .services.catalog import BUCKETS
    try:
        snapshot = _storefront().catalog.refresh()
    except NetworkFailure as e:
        raise click.ClickException(f"Catalog refresh failed: {e.message}")

    for bucket in BUCKETS:
        click.echo(f"{bucket}: {len(snapshot.bucket(bucket))}")


cart_group = AppGroup('cart', help="Cart inspection commands.")


@cart_group.command('show')
def show_cart():
    cart = _storefront().cart
    if cart.is_empty:
        click.echo("Cart is empty")
        return

    for item in cart.items:
        variant = f" ({item.variant_title})" if item.variant_title else ""
        click.echo(f"{item.quantity} x {item.title}{variant} @ ${item.price} = ${item.subtotal}")
    click.echo(f"Subtotal: ${cart.subtotal:.2f}")
    click.echo(f"Tax: ${cart.estimated_tax:.2f}")
    click.echo(f"Shipping: ${cart.estimated_shipping:.2f}")
    click.echo(f"Total: ${cart.total:.2f}")


device_group = AppGroup('device', help="Device storage commands.")


@device_group.command('reset')
@click.option('--yes', is_flag=True, help="Confirm deletion of all stored values.")
def reset_device(yes):
    if not yes:
        raise click.ClickException("Refusing to reset without --yes")

    storefront = _storefront()
    for key in storefront.storage.keys():
        storefront.storage.delete(key)
    storefront.cart.clear()
    storefront.session.sign_out()
    click.echo("Device storage cleared.")


def register_commands(app):
    app.cli.add_command(catalog_group)
    app.cli.add_command(cart_group)
    app.cli.add_command(device_group)
