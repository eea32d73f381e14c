"""CLI subpackage for the swap escrow app.

Create the Typer application and register the interactive command.
"""

import typer

from swap_escrow.apps.escrow.cli.swap_cmd import swap

app = typer.Typer(help="Peer-to-peer token swap escrow on Solana")

app.command()(swap)

__all__ = ["app"]
