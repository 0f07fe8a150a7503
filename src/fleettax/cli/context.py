"""Service construction from the click context."""

import click

from fleettax.domain.ifta import IftaService


def get_ifta_service(ctx: click.Context) -> IftaService:
    """Build the IFTA service for this invocation.

    The service shares the invocation's database, rate table and request
    cache, so repeated reads within one command are computed once.
    """
    return IftaService(
        ctx.obj["db"],
        rate_table=ctx.obj["rate_table"],
        mode=ctx.obj["rate_mode"],
        cache=ctx.obj["cache"],
    )
