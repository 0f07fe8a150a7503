"""CLI helpers for date range and period resolution."""

from datetime import date

import click

from fleettax.domain.entities import Period
from fleettax.domain.errors import InvalidPeriod
from fleettax.utils.date_parser import parse_date, parse_quarter, previous_quarter


def resolve_cli_period(ctx, *, quarter: str | None, year: int | None) -> Period:
    """Resolve --quarter/--year, defaulting to the last closed quarter."""
    default_quarter, default_year = previous_quarter()
    try:
        quarter_num = parse_quarter(quarter) if quarter else default_quarter
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        return Period(quarter=quarter_num, year=year if year is not None else default_year)
    except InvalidPeriod as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    quarter: str | None,
    year: int | None,
) -> tuple[date | None, date | None]:
    """Resolve a listing range from explicit dates or a quarter."""
    if (quarter or year) and (start_date or end_date):
        click.echo(
            "Error: --quarter/--year cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if quarter or year:
        period = resolve_cli_period(ctx, quarter=quarter, year=year)
        return period.start_date, period.end_date

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    return start, end


def record_filter_options(func):
    """Attach the shared listing filters to a command."""
    options = [
        click.option("--org", "organization", required=True, help="Organization name or ID"),
        click.option("--vehicle", help="Vehicle unit number or ID"),
        click.option("--jurisdiction", help="Jurisdiction code (e.g., TX)"),
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative)"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative)"),
        click.option("--quarter", help="Quarter (1-4 or Q1-Q4)"),
        click.option("--year", type=int, help="Year for --quarter"),
    ]
    for option in reversed(options):
        func = option(func)
    return func
