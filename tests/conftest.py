"""Shared test configuration and fixtures."""

import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_escrow.core.config import EscrowSettings

_OVERRIDE_ENV_VARS = (
    "SOLANA_CLUSTER",
    "SOLANA_RPC_URL",
    "SOLANA_COMMITMENT",
    "ESCROW_PROGRAM_ID",
)

PROGRAM_ID = Pubkey.from_string("GR9ho64CPNcvYFFMxd8F3GxgjApBmJc2xR78NRyCYRZ8")


@pytest.fixture(autouse=True)
def _clear_override_env_vars() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Hide environment overrides so settings.yaml defaults apply in every test.

    A developer shell pointing ``SOLANA_RPC_URL`` at mainnet (or a custom
    program id) would otherwise change what the default configuration
    resolves to.
    """
    present = {k: os.environ[k] for k in _OVERRIDE_ENV_VARS if k in os.environ}
    if not present:
        yield
        return
    with patch.dict(os.environ, clear=False):
        for key in present:
            del os.environ[key]
        yield


@pytest.fixture
def settings() -> EscrowSettings:
    """Create devnet settings pointing at the escrow program."""
    return EscrowSettings(
        rpc_url="https://api.devnet.solana.com",
        cluster="devnet",
        commitment="confirmed",
        program_id=PROGRAM_ID,
        poll_interval=0.0,
        max_confirm_attempts=3,
    )


@pytest.fixture
def wallet() -> Keypair:
    """Create a fresh signing wallet."""
    return Keypair()
