"""IFTA quarterly reporting commands."""

import json
from datetime import date
from decimal import Decimal

import click
from fleettax.cli.context import get_ifta_service
from fleettax.cli.date_filters import resolve_cli_period
from fleettax.cli.error_handling import handle_domain_error
from fleettax.cli.tenant_resolution import resolve_organization_or_exit
from fleettax.domain.entities import IftaPeriodData, ReportStatus


def _period_options(func):
    func = click.option("--year", type=int, help="Year (defaults to last closed quarter)")(func)
    func = click.option("--quarter", help="Quarter 1-4 or Q1-Q4 (defaults to last closed)")(func)
    func = click.option("--org", "organization", required=True, help="Organization name or ID")(func)
    return func


def _json_default(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _print_period(data: IftaPeriodData) -> None:
    summary = data.summary
    click.echo(f"\nIFTA summary for {data.period.label}")
    click.echo("=" * 86)
    click.echo(f"Total miles:     {summary.total_miles:>14,.1f}")
    click.echo(f"Total gallons:   {summary.total_gallons:>14,.3f}")
    click.echo(f"Average MPG:     {summary.average_mpg:>14,.2f}")
    click.echo(f"Total fuel cost: {summary.total_fuel_cost:>14,.2f}")
    if data.report is not None:
        click.echo(f"Report:          #{data.report.id} ({data.report.status.value}), due {data.report.due_date}")
    else:
        click.echo(f"Report:          not generated (due {data.period.due_date})")

    if not data.jurisdiction_summary:
        click.echo("\nNo activity in this period.")
        return

    click.echo(
        f"\n{'Jur.':6}  {'Miles':>11}  {'Taxable gal':>11}  {'Paid gal':>10}  "
        f"{'Rate':>6}  {'Liability':>10}  {'Paid':>9}  {'Owed':>10}"
    )
    click.echo("-" * 86)
    for line in data.jurisdiction_summary:
        flag = " *" if line.rate_unknown else ""
        click.echo(
            f"{line.jurisdiction:6}  {line.total_miles:11,.1f}  {line.taxable_gallons:11,.3f}  "
            f"{line.total_gallons:10,.3f}  {line.tax_rate:6.3f}  {line.tax_liability:10,.2f}  "
            f"{line.tax_paid:9,.2f}  {line.tax_owed:10,.2f}{flag}"
        )
    net = sum(line.tax_owed for line in data.jurisdiction_summary)
    click.echo("-" * 86)
    click.echo(f"{'Net tax due':>74}  {net:10,.2f}")
    if not data.apportioned:
        click.echo(
            "\nNo fuel purchased this period; miles cannot be apportioned "
            "and no report can be generated.",
            err=True,
        )
    if data.unknown_jurisdictions:
        click.echo(
            f"\n* No rate for {', '.join(data.unknown_jurisdictions)}; taxed at 0.",
            err=True,
        )


@click.group("ifta")
def ifta_group():
    """Compute and file quarterly IFTA reports."""
    pass


@ifta_group.command("summary")
@_period_options
@click.option("--json", "as_json", is_flag=True, help="Print the period data as JSON")
@click.pass_context
def show_summary(ctx, organization: str, quarter: str | None, year: int | None, as_json: bool):
    """Show per-jurisdiction miles, gallons and tax for a quarter.

    Examples:
        fleettax ifta summary --org "Desert Haulers" --quarter Q1 --year 2025
        fleettax --rate-mode lenient ifta summary --org 1 --quarter 2 --year 2025 --json
    """
    organization_id = resolve_organization_or_exit(ctx, organization)
    period = resolve_cli_period(ctx, quarter=quarter, year=year)
    service = get_ifta_service(ctx)

    try:
        if as_json:
            exported = service.export_period_data(organization_id, period.quarter, period.year)
            click.echo(json.dumps(exported, indent=2, default=_json_default))
            return
        data = service.get_period_data(organization_id, period.quarter, period.year)
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_period(data)


@ifta_group.command("generate")
@_period_options
@click.pass_context
def generate_report(ctx, organization: str, quarter: str | None, year: int | None):
    """Compute a quarter and save it as a draft report."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    period = resolve_cli_period(ctx, quarter=quarter, year=year)

    try:
        report = get_ifta_service(ctx).generate_report(
            organization_id, period.quarter, period.year
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Generated IFTA report {report.id} for {period.label} (status: {report.status.value})")
    click.echo(f"  Jurisdictions: {len(report.lines)}")
    click.echo(f"  Net tax due: ${report.net_tax_due:,.2f}")
    click.echo(f"  Due date: {report.due_date}")


@ifta_group.command("reports")
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.option("--year", type=int, help="Only show reports for this year")
@click.pass_context
def list_reports(ctx, organization: str, year: int | None):
    """List an organization's IFTA reports."""
    organization_id = resolve_organization_or_exit(ctx, organization)
    reports = get_ifta_service(ctx).list_reports(organization_id, year=year)
    if not reports:
        click.echo("No IFTA reports found.")
        return

    click.echo(f"{'ID':>4}  {'Period':8}  {'Status':10}  {'Due':10}  {'Miles':>12}  {'Net tax':>10}")
    click.echo("-" * 64)
    for r in reports:
        click.echo(
            f"{r.id:4d}  {r.period.label:8}  {r.status.value:10}  {r.due_date.isoformat():10}  "
            f"{r.total_miles:12,.1f}  {r.net_tax_due:10,.2f}"
        )


@ifta_group.command("status")
@click.argument("report_id", type=int)
@click.argument(
    "status",
    type=click.Choice([s.value for s in ReportStatus], case_sensitive=False),
)
@click.option("--org", "organization", required=True, help="Organization name or ID")
@click.pass_context
def set_status(ctx, report_id: int, status: str, organization: str):
    """Change a report's filing status.

    Allowed: draft -> submitted -> accepted | rejected, rejected -> draft.
    """
    organization_id = resolve_organization_or_exit(ctx, organization)
    try:
        report = get_ifta_service(ctx).set_report_status(organization_id, report_id, status)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"IFTA report {report.id} is now {report.status.value}")


def register_commands(cli):
    """Register IFTA commands with main CLI."""
    cli.add_command(ifta_group)
