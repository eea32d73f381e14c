"""Typed inputs and views for the escrow lifecycle flows.

Menu and confirmation answers are decoded into enums once, at the prompt
boundary, so the flows never compare raw strings.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from solders.pubkey import Pubkey

from swap_escrow.clients.escrow_program.models import Offer
from swap_escrow.clients.solana.models import MintInfo, TokenAccountHandle
from swap_escrow.core.exceptions import InvalidInputError
from swap_escrow.core.validation import format_amount


class MenuAction(Enum):
    """Top-level action chosen from the interactive menu."""

    CREATE = "1"
    ACCEPT = "2"
    CLOSE = "3"

    @property
    def label(self) -> str:
        """Return the menu text for this action."""
        return _MENU_LABELS[self]

    @classmethod
    def parse(cls, raw: str) -> "MenuAction":
        """Decode a menu answer.

        Raises:
            InvalidInputError: When the answer is not one of the menu numbers.

        """
        try:
            return cls(raw.strip())
        except ValueError:
            msg = "Invalid input"
            raise InvalidInputError(msg) from None


_MENU_LABELS = {
    MenuAction.CREATE: "Create an offer",
    MenuAction.ACCEPT: "Accept an offer",
    MenuAction.CLOSE: "Cancel an offer",
}


class Confirmation(Enum):
    """Answer to a yes/no question."""

    YES = "y"
    NO = "n"

    @classmethod
    def parse(cls, raw: str) -> "Confirmation":
        """Decode a ``y``/``n`` answer, ignoring case and surrounding spaces.

        Raises:
            InvalidInputError: When the answer is neither ``y`` nor ``n``.

        """
        try:
            return cls(raw.strip().lower())
        except ValueError:
            msg = "Invalid input"
            raise InvalidInputError(msg) from None


@dataclass(frozen=True)
class CreateOfferRequest:
    """Validated inputs for a new offer.

    Args:
        counterparty: Wallet allowed to accept the offer.
        send_mint: Mint of the offered tokens.
        send_account: Creator's token account the offered tokens leave from.
        send_amount: Offered amount in base units.
        ask_mint: Mint of the tokens wanted in return.
        ask_amount: Wanted amount in base units.

    """

    counterparty: Pubkey
    send_mint: MintInfo
    send_account: TokenAccountHandle
    send_amount: int
    ask_mint: MintInfo
    ask_amount: int


@dataclass(frozen=True)
class OfferView:
    """An offer together with both mints' precision, for display."""

    offer: Offer
    offer_decimals: int
    ask_decimals: int

    @property
    def offer_quantity(self) -> Decimal:
        """Return the offered amount in human units."""
        return format_amount(self.offer.offer_amount, self.offer_decimals)

    @property
    def ask_quantity(self) -> Decimal:
        """Return the wanted amount in human units."""
        return format_amount(self.offer.ask_amount, self.ask_decimals)
