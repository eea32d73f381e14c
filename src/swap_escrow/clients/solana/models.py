"""Typed data models for Solana accounts.

Provide frozen dataclasses that insulate the rest of the codebase from the
untyped dictionaries returned by the JSON-RPC API.  Token amounts stay in
raw base units (``int``); scaling to human quantities happens at display time.
"""

from dataclasses import dataclass

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class AccountInfo:
    """Raw ledger account as returned by the RPC API.

    Args:
        address: Address of the account.
        owner: Program that owns the account.
        lamports: Native balance of the account.
        data: Decoded account data bytes.

    """

    address: Pubkey
    owner: Pubkey
    lamports: int
    data: bytes


@dataclass(frozen=True)
class MemcmpFilter:
    """Exact byte match at an offset, used to narrow program account scans.

    Args:
        offset: Byte offset into the account data.
        data: Bytes that must appear at ``offset``.

    """

    offset: int
    data: bytes


@dataclass(frozen=True)
class MintInfo:
    """Decoded SPL token mint.

    Args:
        address: Address of the mint account.
        decimals: Number of decimal places in a human token quantity.
        supply: Total supply in base units.

    """

    address: Pubkey
    decimals: int
    supply: int


@dataclass(frozen=True)
class TokenAccountHandle:
    """Decoded SPL token account paired with its address.

    Fetched fresh for every operation and never cached.

    Args:
        address: Address of the token account.
        mint: Mint of the tokens the account holds.
        owner: Wallet that controls the account.
        amount: Balance in base units.

    """

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int
