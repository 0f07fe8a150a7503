"""Vehicle management commands."""

import click
from fleettax.cli.error_handling import handle_domain_error
from fleettax.cli.tenant_resolution import resolve_organization_or_exit
from fleettax.domain.organization import VehicleService


@click.group("vehicle")
def vehicle_group():
    """Manage fleet vehicles."""
    pass


@vehicle_group.command("create")
@click.argument("unit_number", metavar="UNIT_NUMBER")
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.option("--make", help="Manufacturer")
@click.option("--model", help="Model")
@click.pass_context
def create_vehicle(ctx, unit_number: str, organization: str, make: str | None, model: str | None):
    """Add a vehicle to an organization.

    Examples:
        fleettax vehicle create 101 --org "Desert Haulers" --make Freightliner --model Cascadia
    """
    organization_id = resolve_organization_or_exit(ctx, organization)
    service = VehicleService(ctx.obj["db"])
    try:
        vehicle_id = service.create_vehicle(
            organization_id=organization_id,
            unit_number=unit_number,
            make=make,
            model=model,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created vehicle '{unit_number.strip()}' (ID: {vehicle_id})")


@vehicle_group.command("list")
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.pass_context
def list_vehicles(ctx, organization: str):
    """List an organization's vehicles."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    service = VehicleService(ctx.obj["db"])

    vehicles = service.list_vehicles(organization_id)
    if not vehicles:
        click.echo("No vehicles found.")
        return

    click.echo("\nVehicles:")
    click.echo("-" * 60)
    for v in vehicles:
        description = " ".join(part for part in (v.make, v.model) if part) or "-"
        click.echo(f"ID: {v.id:3d} | Unit {v.unit_number:10s} | {description}")


def register_commands(cli):
    """Register vehicle commands with main CLI."""
    cli.add_command(vehicle_group)
