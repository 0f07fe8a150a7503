"""Organization management commands."""

import click
from fleettax.cli.error_handling import handle_domain_error
from fleettax.domain.organization import OrganizationService


@click.group("org")
def organization_group():
    """Manage organizations."""
    pass


@organization_group.command("create")
@click.argument("name", metavar="ORG_NAME")
@click.pass_context
def create_organization(ctx, name: str):
    """Create a new organization.

    Examples:
        fleettax org create "Desert Haulers"
    """
    service = OrganizationService(ctx.obj["db"])
    try:
        organization_id = service.create_organization(name=name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created organization '{name.strip()}' (ID: {organization_id})")


@organization_group.command("list")
@click.pass_context
def list_organizations(ctx):
    """List all organizations."""
    service = OrganizationService(ctx.obj["db"])

    organizations = service.list_organizations()
    if not organizations:
        click.echo("No organizations found.")
        return

    click.echo("\nOrganizations:")
    click.echo("-" * 60)
    for org in organizations:
        click.echo(f"ID: {org.id:3d} | {org.name}")


def register_commands(cli):
    """Register organization commands with main CLI."""
    cli.add_command(organization_group)
