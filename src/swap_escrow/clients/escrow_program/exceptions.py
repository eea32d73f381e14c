"""Exceptions for escrow program account handling."""


class EscrowProgramError(Exception):
    """Base exception for escrow program client errors."""


class OfferDecodeError(EscrowProgramError):
    """An account returned by offer discovery does not match the offer layout.

    Raised instead of skipping the account: a mismatch means the client and
    the on-ledger program disagree about the record schema.
    """
