"""Main CLI entry point."""

import logging

import click
from fleettax.database.factories import create_database
from fleettax.domain.entities import RateMode
from fleettax.domain.rates import default_rate_table, load_rate_table
from fleettax.logging_config import configure_logging
from fleettax.utils.request_cache import RequestCache

# Import and register all commands at module level
from fleettax.cli.commands import (
    organization,
    vehicle,
    trip,
    fuel,
    ifta,
    rates,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Database file or SQLAlchemy URL (overrides FLEETTAX_DB_PATH environment variable)",
    envvar="FLEETTAX_DB_PATH",
)
@click.option(
    "--rates",
    "rates_path",
    type=click.Path(exists=True, dir_okay=False),
    help="CSV rate table (jurisdiction,rate[,effective_from,effective_to,name])",
    envvar="FLEETTAX_RATES_PATH",
)
@click.option(
    "--rate-mode",
    type=click.Choice([mode.value for mode in RateMode], case_sensitive=False),
    default=RateMode.STRICT.value,
    show_default=True,
    help="How to treat jurisdictions missing from the rate table",
    envvar="FLEETTAX_RATE_MODE",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Log level for diagnostic output on stderr",
    envvar="FLEETTAX_LOG_LEVEL",
)
@click.option("-v", "--verbose", is_flag=True, help="Shortcut for --log-level debug")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    rates_path: str | None,
    rate_mode: str,
    log_level: str,
    verbose: bool,
):
    """Fleettax - IFTA fuel-tax reporting for fleets.

    Log trips and fuel purchases per jurisdiction, then compute and file
    quarterly IFTA reports for each organization.
    """
    ctx.ensure_object(dict)
    configure_logging(logging.DEBUG if verbose else log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            rate_table = load_rate_table(rates_path) if rates_path else default_rate_table()
        except ValueError as e:
            click.echo(f"Error: Invalid rate table: {e}", err=True)
            ctx.exit(1)

        db = create_database(db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        cache = RequestCache()
        ctx.call_on_close(cache.clear)

        ctx.obj["db"] = db
        ctx.obj["cache"] = cache
        ctx.obj["rate_table"] = rate_table
        ctx.obj["rate_mode"] = RateMode(rate_mode.lower())


# Register all commands
organization.register_commands(cli)
vehicle.register_commands(cli)
trip.register_commands(cli)
fuel.register_commands(cli)
ifta.register_commands(cli)
rates.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
