"""Solana JSON-RPC client and SPL token helpers."""

from swap_escrow.clients.solana.client import SolanaClient
from swap_escrow.clients.solana.exceptions import (
    SolanaDecodeError,
    SolanaError,
    SolanaRPCError,
    SolanaTransactionError,
)
from swap_escrow.clients.solana.models import (
    AccountInfo,
    MemcmpFilter,
    MintInfo,
    TokenAccountHandle,
)

__all__ = [
    "AccountInfo",
    "MemcmpFilter",
    "MintInfo",
    "SolanaClient",
    "SolanaDecodeError",
    "SolanaError",
    "SolanaRPCError",
    "SolanaTransactionError",
    "TokenAccountHandle",
]
