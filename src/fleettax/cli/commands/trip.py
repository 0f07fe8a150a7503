"""IFTA trip logging commands."""

import click
from fleettax.cli.context import get_ifta_service
from fleettax.cli.date_filters import record_filter_options, resolve_cli_date_range
from fleettax.cli.error_handling import handle_domain_error
from fleettax.cli.tenant_resolution import resolve_organization_or_exit, resolve_vehicle_or_exit
from fleettax.utils.amount_parser import parse_quantity
from fleettax.utils.date_parser import parse_date


@click.group("trip")
def trip_group():
    """Log miles driven per jurisdiction."""
    pass


@trip_group.command("add")
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.option("--vehicle", required=True, help="Vehicle unit number or ID")
@click.option(
    "--date", "trip_date", required=True, help="Trip date (YYYY-MM-DD or relative like 'today')"
)
@click.option("--jurisdiction", required=True, help="Jurisdiction code (e.g., TX, NM)")
@click.option("--miles", required=True, help="Miles driven in the jurisdiction")
@click.option("--fuel-used", help="Gallons burned (optional)")
@click.option("--notes", help="Notes")
@click.pass_context
def add_trip(
    ctx,
    organization: str,
    vehicle: str,
    trip_date: str,
    jurisdiction: str,
    miles: str,
    fuel_used: str | None,
    notes: str | None,
):
    """Record miles driven in a jurisdiction.

    Examples:
        fleettax trip add --org "Desert Haulers" --vehicle 101 --date 2025-02-03 --jurisdiction TX --miles 412.5
    """
    organization_id = resolve_organization_or_exit(ctx, organization)
    vehicle_id = resolve_vehicle_or_exit(ctx, organization_id, vehicle)

    try:
        day = parse_date(trip_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        distance = parse_quantity(miles)
        burned = parse_quantity(fuel_used) if fuel_used else None
    except ValueError as e:
        click.echo(f"Error: Invalid quantity: {e}", err=True)
        ctx.exit(1)

    service = get_ifta_service(ctx)
    try:
        trip_id = service.log_trip(
            organization_id=organization_id,
            vehicle_id=vehicle_id,
            date=day,
            jurisdiction=jurisdiction,
            miles=distance,
            fuel_used=burned,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Logged trip {trip_id}")
    click.echo(f"  Date: {day}")
    click.echo(f"  Jurisdiction: {jurisdiction.strip().upper()}")
    click.echo(f"  Miles: {distance:,.1f}")


@trip_group.command("list")
@record_filter_options
@click.pass_context
def list_trips(
    ctx,
    organization: str,
    vehicle: str | None,
    jurisdiction: str | None,
    start_date: str | None,
    end_date: str | None,
    quarter: str | None,
    year: int | None,
):
    """List logged trips, newest first."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    vehicle_id = resolve_vehicle_or_exit(ctx, organization_id, vehicle) if vehicle else None
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, quarter=quarter, year=year
    )

    trips = get_ifta_service(ctx).list_trips(
        organization_id,
        start_date=start,
        end_date=end,
        vehicle_id=vehicle_id,
        jurisdiction=jurisdiction,
    )
    if not trips:
        click.echo("No trips found.")
        return

    click.echo(f"{'ID':>5}  {'Date':10}  {'Vehicle':>7}  {'Jur.':6}  {'Miles':>12}")
    click.echo("-" * 48)
    for t in trips:
        click.echo(
            f"{t.id:5d}  {t.date.isoformat():10}  {t.vehicle_id:7d}  {t.jurisdiction:6}  {t.miles:12,.1f}"
        )
    total = sum(t.miles for t in trips)
    click.echo("-" * 48)
    click.echo(f"{'Total':>34}  {total:12,.1f}")


@trip_group.command("delete")
@click.argument("trip_id", type=int)
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.pass_context
def delete_trip(ctx, trip_id: int, organization: str):
    """Delete a logged trip."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    try:
        get_ifta_service(ctx).delete_trip(organization_id, trip_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted trip {trip_id}")


def register_commands(cli):
    """Register trip commands with main CLI."""
    cli.add_command(trip_group)
