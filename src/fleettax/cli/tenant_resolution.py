"""CLI helpers for organization and vehicle resolution."""

from __future__ import annotations

import click
from fleettax.cli.error_handling import handle_domain_error
from fleettax.domain.organization import OrganizationService, VehicleService
from fleettax.utils.tenant_resolver import resolve_organization, resolve_vehicle


def resolve_organization_or_exit(ctx: click.Context, organization: str | int) -> int:
    """Resolve organization name or ID, or exit with a CLI error."""
    try:
        return resolve_organization(OrganizationService(ctx.obj["db"]), organization)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_vehicle_or_exit(
    ctx: click.Context, organization_id: int, vehicle: str | int
) -> int:
    """Resolve vehicle unit number or ID within an organization, or exit."""
    try:
        return resolve_vehicle(VehicleService(ctx.obj["db"]), organization_id, vehicle)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
