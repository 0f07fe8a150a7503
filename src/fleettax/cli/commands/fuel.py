"""Fuel purchase commands."""

import click
from fleettax.cli.context import get_ifta_service
from fleettax.cli.date_filters import record_filter_options, resolve_cli_date_range
from fleettax.cli.error_handling import handle_domain_error
from fleettax.cli.tenant_resolution import resolve_organization_or_exit, resolve_vehicle_or_exit
from fleettax.utils.amount_parser import parse_quantity
from fleettax.utils.date_parser import parse_date


@click.group("fuel")
def fuel_group():
    """Log fuel purchases per jurisdiction."""
    pass


@fuel_group.command("add")
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.option("--vehicle", required=True, help="Vehicle unit number or ID")
@click.option("--date", "purchase_date", required=True, help="Purchase date")
@click.option("--jurisdiction", required=True, help="Jurisdiction where fuel was bought")
@click.option("--gallons", required=True, help="Gallons purchased")
@click.option("--cost", required=True, help="Total amount paid (e.g., 412.80)")
@click.option("--vendor", help="Fuel vendor")
@click.option("--receipt", "receipt_number", help="Receipt number")
@click.option("--notes", help="Notes")
@click.pass_context
def add_fuel_purchase(
    ctx,
    organization: str,
    vehicle: str,
    purchase_date: str,
    jurisdiction: str,
    gallons: str,
    cost: str,
    vendor: str | None,
    receipt_number: str | None,
    notes: str | None,
):
    """Record a fuel purchase.

    Examples:
        fleettax fuel add --org "Desert Haulers" --vehicle 101 --date 2025-02-03 --jurisdiction NM --gallons 120 --cost 455.40
    """
    organization_id = resolve_organization_or_exit(ctx, organization)
    vehicle_id = resolve_vehicle_or_exit(ctx, organization_id, vehicle)

    try:
        day = parse_date(purchase_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        volume = parse_quantity(gallons)
        amount = parse_quantity(cost)
    except ValueError as e:
        click.echo(f"Error: Invalid quantity: {e}", err=True)
        ctx.exit(1)

    service = get_ifta_service(ctx)
    try:
        purchase_id = service.log_fuel_purchase(
            organization_id=organization_id,
            vehicle_id=vehicle_id,
            date=day,
            jurisdiction=jurisdiction,
            gallons=volume,
            cost=amount,
            vendor=vendor,
            receipt_number=receipt_number,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Logged fuel purchase {purchase_id}")
    click.echo(f"  Date: {day}")
    click.echo(f"  Jurisdiction: {jurisdiction.strip().upper()}")
    click.echo(f"  Gallons: {volume:,.3f}")
    click.echo(f"  Cost: ${amount:,.2f}")


@fuel_group.command("list")
@record_filter_options
@click.pass_context
def list_fuel_purchases(
    ctx,
    organization: str,
    vehicle: str | None,
    jurisdiction: str | None,
    start_date: str | None,
    end_date: str | None,
    quarter: str | None,
    year: int | None,
):
    """List fuel purchases, newest first."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    vehicle_id = resolve_vehicle_or_exit(ctx, organization_id, vehicle) if vehicle else None
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, quarter=quarter, year=year
    )

    purchases = get_ifta_service(ctx).list_fuel_purchases(
        organization_id,
        start_date=start,
        end_date=end,
        vehicle_id=vehicle_id,
        jurisdiction=jurisdiction,
    )
    if not purchases:
        click.echo("No fuel purchases found.")
        return

    click.echo(f"{'ID':>5}  {'Date':10}  {'Vehicle':>7}  {'Jur.':6}  {'Gallons':>10}  {'Cost':>10}  Vendor")
    click.echo("-" * 70)
    for p in purchases:
        click.echo(
            f"{p.id:5d}  {p.date.isoformat():10}  {p.vehicle_id:7d}  {p.jurisdiction:6}  "
            f"{p.gallons:10,.3f}  {p.cost:10,.2f}  {p.vendor or ''}"
        )


@fuel_group.command("delete")
@click.argument("purchase_id", type=int)
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.pass_context
def delete_fuel_purchase(ctx, purchase_id: int, organization: str):
    """Delete a fuel purchase."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    try:
        get_ifta_service(ctx).delete_fuel_purchase(organization_id, purchase_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted fuel purchase {purchase_id}")


def register_commands(cli):
    """Register fuel commands with main CLI."""
    cli.add_command(fuel_group)
