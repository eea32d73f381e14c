"""Binary layout of the offer record and the discovery filters built on it.

The escrow program serialises ``OfferDetails`` as an Anchor account: an
8-byte discriminator followed by the Borsh-encoded fields.  The layout
must match the deployed program exactly; changing the record on the
program side breaks discovery.
"""

import hashlib
from enum import Enum

from construct import (  # pyright: ignore[reportMissingTypeStubs]
    Const,
    ConstError,
    ConstructError,
    Int64ul,
    Struct,
)
from solders.pubkey import Pubkey

from swap_escrow.clients.escrow_program.exceptions import OfferDecodeError
from swap_escrow.clients.escrow_program.models import Offer
from swap_escrow.clients.solana.layouts import PUBKEY, field_offset
from swap_escrow.clients.solana.models import MemcmpFilter

OFFER_ACCOUNT_NAME = "OfferDetails"
OFFER_DISCRIMINATOR = hashlib.sha256(f"account:{OFFER_ACCOUNT_NAME}".encode()).digest()[:8]

OFFER_DETAILS_LAYOUT = Struct(
    "discriminator" / Const(OFFER_DISCRIMINATOR),
    "party_one" / PUBKEY,
    "party_two" / PUBKEY,
    "receive_account" / PUBKEY,
    "offer_token" / PUBKEY,
    "offer_amount" / Int64ul,
    "ask_token" / PUBKEY,
    "ask_amount" / Int64ul,
)

PARTY_ONE_OFFSET = field_offset(OFFER_DETAILS_LAYOUT, "party_one")
PARTY_TWO_OFFSET = field_offset(OFFER_DETAILS_LAYOUT, "party_two")
OFFER_ACCOUNT_SIZE: int = OFFER_DETAILS_LAYOUT.sizeof()

_OFFER_FIELDS = (
    "party_one",
    "party_two",
    "receive_account",
    "offer_token",
    "offer_amount",
    "ask_token",
    "ask_amount",
)


class OfferRole(Enum):
    """Which party field discovery matches on; the value is its byte offset."""

    PARTY_ONE = PARTY_ONE_OFFSET
    PARTY_TWO = PARTY_TWO_OFFSET


def offer_filters(party: Pubkey, role: OfferRole) -> list[MemcmpFilter]:
    """Build the byte filters selecting offers where ``party`` plays ``role``."""
    return [
        MemcmpFilter(offset=0, data=OFFER_DISCRIMINATOR),
        MemcmpFilter(offset=role.value, data=bytes(party)),
    ]


def decode_offer(data: bytes) -> Offer:
    """Deserialize an offer record.

    Args:
        data: Raw account data.

    Returns:
        The decoded offer.

    Raises:
        OfferDecodeError: When the data is too short or carries another
            record type's discriminator.

    """
    if len(data) < OFFER_ACCOUNT_SIZE:
        msg = f"Offer account data is {len(data)} bytes, expected {OFFER_ACCOUNT_SIZE}"
        raise OfferDecodeError(msg)
    try:
        parsed = OFFER_DETAILS_LAYOUT.parse(data)
    except ConstError as exc:
        msg = f"Unexpected account discriminator {data[:8].hex()}"
        raise OfferDecodeError(msg) from exc
    except ConstructError as exc:
        msg = f"Malformed offer account: {exc}"
        raise OfferDecodeError(msg) from exc
    return Offer(**{name: parsed[name] for name in _OFFER_FIELDS})


def encode_offer(offer: Offer) -> bytes:
    """Serialize an offer record in the program's layout."""
    return OFFER_DETAILS_LAYOUT.build({name: getattr(offer, name) for name in _OFFER_FIELDS})
