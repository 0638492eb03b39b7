# Overview: Flask CLI command group for inspecting reservation pricing.

# backend/boxoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Pricing inspection:
# - python -m flask pricing total <reservation_id>
#   Print the total, VAT and discount of a reservation.
# - python -m flask pricing summary <reservation_id> [--lang de]
#   Print the itemized order summary of a reservation.

import click
from flask import current_app
from flask.cli import with_appcontext

from .money import format_cents
from .services import order_summary_service, reservation_cost_service
from .services.reservation_cost_service import ReservationNotFoundError


@click.group('pricing')
def pricing_group():
    """Reservation pricing inspection."""
    pass


@pricing_group.command('total')
@click.argument('reservation_id')
@with_appcontext
def total_cmd(reservation_id):
    """Print the total cost of a reservation."""
    try:
        total, discount = reservation_cost_service.total_reservation_cost_with_vat(reservation_id)
    except ReservationNotFoundError:
        click.echo(f"FAIL Reservation '{reservation_id}' not found")
        raise SystemExit(1)

    currency = total.currency_code
    click.echo(f"Reservation: {reservation_id}")
    click.echo(f"Total:       {format_cents(total.price_with_vat_cts, currency)} {currency}")
    click.echo(f"VAT:         {format_cents(total.vat_cts, currency)} {currency}")
    if discount is not None:
        label = "dynamic discount" if discount.dynamic else discount.code
        click.echo(f"Discount:    {format_cents(total.discount_cts, currency)} {currency} ({label}, x{total.discount_applied_count})")
    if total.free:
        click.echo("FREE")


@pricing_group.command('summary')
@click.argument('reservation_id')
@click.option('--lang', default=None, help='Language of titles (defaults to the reservation language)')
@with_appcontext
def summary_cmd(reservation_id, lang):
    """Print the order summary of a reservation."""
    try:
        summary = order_summary_service.order_summary_for_reservation(
            reservation_id,
            lang,
            default_locale=current_app.config["DEFAULT_LOCALE"],
            dynamic_discount_label=current_app.config["DYNAMIC_DISCOUNT_LABEL"],
        )
    except ReservationNotFoundError:
        click.echo(f"FAIL Reservation '{reservation_id}' not found")
        raise SystemExit(1)

    click.echo("\n" + "="*90)
    click.echo(f"{'Type':<22} {'Description':<30} {'Unit':>10} {'Qty':>5} {'Subtotal':>12}")
    click.echo("="*90)
    for row in summary.summary:
        click.echo(
            f"{row.type.value:<22} {(row.description or '-'):<30} {row.unit_price:>10} "
            f"{row.quantity:>5} {row.sub_total:>12}"
        )
    click.echo("="*90)
    click.echo(f"Total: {summary.total_price_formatted}  VAT: {summary.total_vat_formatted}")
    click.echo("")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(pricing_group)
