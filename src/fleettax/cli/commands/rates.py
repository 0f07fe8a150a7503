"""Rate table commands."""

import click


@click.group("rates")
def rates_group():
    """Inspect the jurisdiction tax-rate table."""
    pass


@rates_group.command("list")
@click.pass_context
def list_rates(ctx):
    """List configured per-gallon rates."""
    entries = ctx.obj["rate_table"].entries()
    if not entries:
        click.echo("Rate table is empty.")
        return

    click.echo(f"{'Jurisdiction':12}  {'Rate':>7}  {'From':10}  {'To':10}  Name")
    click.echo("-" * 70)
    for entry in entries:
        start = entry.effective_from.isoformat() if entry.effective_from else "-"
        end = entry.effective_to.isoformat() if entry.effective_to else "-"
        click.echo(
            f"{entry.jurisdiction:12}  {entry.rate:7.3f}  {start:10}  {end:10}  {entry.name or ''}"
        )


def register_commands(cli):
    """Register rate commands with main CLI."""
    cli.add_command(rates_group)
