"""Shared helpers for the escrow CLI.

Centralise the thin I/O wrappers the command needs: verbose logging setup,
keypair-file loading, settings construction, and the prompt-driven
selection policy used by every flow.
"""

import json
import logging
from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Generic, NoReturn, TypeVar, cast

import typer
from solders.keypair import Keypair

from swap_escrow.apps.escrow.models import Confirmation, OfferView
from swap_escrow.apps.escrow.selection import Candidates
from swap_escrow.clients.solana.models import TokenAccountHandle
from swap_escrow.core.config import ConfigError, EscrowSettings, get_config
from swap_escrow.core.validation import format_amount, parse_index

T = TypeVar("T")

_SEPARATOR = "-" * 34
_KEYPAIR_LENGTH = 64


def configure_verbose_logging() -> None:
    """Enable INFO-level logging for RPC and transaction progress."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(message)s",
        datefmt="%H:%M:%S",
    )


def load_keypair(path: Path) -> Keypair:
    """Load a wallet keypair from a JSON file of secret-key bytes.

    The file holds a JSON array of 64 integers, as written by
    ``solana-keygen``.  Abort with an error if the file is missing or
    does not contain a valid keypair.

    Args:
        path: Path to the keypair file.

    Returns:
        The wallet keypair.

    """
    if not path.is_file():
        typer.echo("Error: The provided user keypair file path is invalid.", err=True)
        raise typer.Exit(code=1)
    try:
        secret: object = json.loads(path.read_text(encoding="utf-8"))
    except ValueError:
        _invalid_keypair()
    # bytes(n) on a bare integer would allocate n zero bytes
    if not isinstance(secret, list):
        _invalid_keypair()
    values = cast("list[int]", secret)
    if len(values) != _KEYPAIR_LENGTH:
        _invalid_keypair()
    try:
        return Keypair.from_bytes(bytes(values))
    except (ValueError, TypeError):
        _invalid_keypair()


def _invalid_keypair() -> NoReturn:
    """Report an unreadable keypair file and abort."""
    typer.echo("Error: Could not retrieve keypair from the provided file.", err=True)
    typer.echo("Check that the file content is a valid keypair.", err=True)
    raise typer.Exit(code=1) from None


def build_settings(rpc_url: str | None = None) -> EscrowSettings:
    """Build the escrow settings from configuration, aborting on errors.

    Args:
        rpc_url: Optional endpoint overriding the configured one.

    Returns:
        Immutable settings for this run.

    """
    try:
        return get_config().get_escrow_settings(rpc_url=rpc_url)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _quantity(value: Decimal) -> str:
    """Render a quantity without trailing zeros or exponent notation."""
    return f"{value.normalize():f}"


def echo_token_account(account: TokenAccountHandle, decimals: int) -> None:
    """Print a token account's address and balance."""
    typer.echo(f"Address: {account.address}")
    typer.echo(f"Token balance: {_quantity(format_amount(account.amount, decimals))}")


def echo_incoming_offer(view: OfferView) -> None:
    """Print an offer from the counterparty's point of view."""
    offer = view.offer
    typer.echo(f"Requester: {offer.party_one}")
    typer.echo(f"Offering {_quantity(view.offer_quantity)} of {offer.offer_token}")
    typer.echo(f"Wants {_quantity(view.ask_quantity)} of {offer.ask_token}")


def echo_outgoing_offer(view: OfferView) -> None:
    """Print an offer from the creator's point of view."""
    offer = view.offer
    typer.echo(f"Party 2: {offer.party_two}")
    typer.echo(f"Offering {_quantity(view.offer_quantity)} of {offer.offer_token}")
    typer.echo(f"In exchange of {_quantity(view.ask_quantity)} of {offer.ask_token}")


class PromptSelectionPolicy(Generic[T]):
    """Pick a candidate by prompting the user.

    A single candidate is shown and chosen automatically, after an optional
    y/n confirmation.  Several candidates are listed with 1-based numbers
    and the user types one.

    Args:
        render: Prints one candidate.
        item_label: Word shown before each number, e.g. ``"Offer"``.
        heading: Line printed above an enumerated list.
        single_heading: Line printed above a lone candidate.
        prompt: Question asking for the number.
        confirm: Question asked before accepting a lone candidate, if any.

    """

    def __init__(  # noqa: PLR0913
        self,
        render: Callable[[T], None],
        *,
        item_label: str,
        heading: str,
        single_heading: str,
        prompt: str,
        confirm: str | None = None,
    ) -> None:
        """Initialize the policy.

        Args:
            render: Prints one candidate.
            item_label: Word shown before each number, e.g. ``"Offer"``.
            heading: Line printed above an enumerated list.
            single_heading: Line printed above a lone candidate.
            prompt: Question asking for the number.
            confirm: Question asked before accepting a lone candidate, if any.

        """
        self.render = render
        self.item_label = item_label
        self.heading = heading
        self.single_heading = single_heading
        self.prompt = prompt
        self.confirm = confirm

    def choose(self, candidates: Candidates[T]) -> T | None:
        """Show the candidates and return the chosen one, or ``None`` if declined.

        Raises:
            InvalidInputError: When the typed number or answer is invalid.

        """
        items = candidates.list()
        if len(items) == 1:
            typer.echo(self.single_heading)
            self.render(items[0])
            if self.confirm is not None:
                answer = Confirmation.parse(typer.prompt(self.confirm))
                if answer is Confirmation.NO:
                    typer.echo("Exiting...")
                    return None
            return items[0]

        typer.echo(self.heading)
        for position, item in enumerate(items, start=1):
            typer.echo(f"{self.item_label} {position}")
            self.render(item)
            typer.echo(_SEPARATOR)
        index = parse_index(typer.prompt(self.prompt).strip(), len(candidates))
        return candidates.select(index)
