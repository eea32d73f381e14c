"""Client-side model of the on-ledger swap escrow program."""

from swap_escrow.clients.escrow_program.addresses import AddressDeriver
from swap_escrow.clients.escrow_program.exceptions import EscrowProgramError, OfferDecodeError
from swap_escrow.clients.escrow_program.layout import OfferRole, decode_offer, offer_filters
from swap_escrow.clients.escrow_program.models import Offer

__all__ = [
    "AddressDeriver",
    "EscrowProgramError",
    "Offer",
    "OfferDecodeError",
    "OfferRole",
    "decode_offer",
    "offer_filters",
]
