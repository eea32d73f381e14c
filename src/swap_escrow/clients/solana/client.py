"""Async JSON-RPC client for a Solana cluster.

Wrap the handful of RPC methods the escrow client needs in a typed async
interface.  Follow the same shape as the other HTTP clients: an
``httpx.AsyncClient`` behind an async context manager, with every
transport or RPC failure surfaced as ``SolanaRPCError``.

Transactions are assembled and signed locally with ``solders`` and
submitted as base64 wire bytes, then polled until they reach the
configured commitment.
"""

import asyncio
import base64
import itertools
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from swap_escrow.clients.solana.exceptions import SolanaRPCError, SolanaTransactionError
from swap_escrow.clients.solana.models import AccountInfo, MemcmpFilter
from swap_escrow.core.config import EscrowSettings

logger = logging.getLogger(__name__)

_HTTP_BAD_REQUEST = 400
_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaClient:
    """Typed async client for the Solana JSON-RPC API.

    Args:
        rpc_url: JSON-RPC endpoint URL.
        commitment: Commitment level for reads and confirmation.
        timeout: Request timeout in seconds.
        poll_interval: Seconds between confirmation polls.
        max_confirm_attempts: Confirmation polls before giving up.

    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        timeout: float = 30.0,
        poll_interval: float = 1.0,
        max_confirm_attempts: int = 60,
    ) -> None:
        """Initialize the Solana RPC client.

        Args:
            rpc_url: JSON-RPC endpoint URL.
            commitment: Commitment level for reads and confirmation.
            timeout: Request timeout in seconds.
            poll_interval: Seconds between confirmation polls.
            max_confirm_attempts: Confirmation polls before giving up.

        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.poll_interval = poll_interval
        self.max_confirm_attempts = max_confirm_attempts
        self._http_client = httpx.AsyncClient(timeout=timeout)
        self._request_ids = itertools.count(1)

    @classmethod
    def from_settings(cls, settings: EscrowSettings) -> "SolanaClient":
        """Create a client from the shared escrow settings.

        Returns:
            Configured SolanaClient instance.

        """
        return cls(
            rpc_url=settings.rpc_url,
            commitment=settings.commitment,
            timeout=settings.timeout,
            poll_interval=settings.poll_interval,
            max_confirm_attempts=settings.max_confirm_attempts,
        )

    async def get_account_info(self, address: Pubkey) -> AccountInfo | None:
        """Fetch a single account.

        Args:
            address: Address of the account.

        Returns:
            The account, or ``None`` when it does not exist.

        Raises:
            SolanaRPCError: When the RPC call fails.

        """
        result = await self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.commitment}],
        )
        value = result.get("value")
        if value is None:
            return None
        return _parse_account(address, value)

    async def get_token_accounts_by_owner(self, owner: Pubkey, mint: Pubkey) -> list[AccountInfo]:
        """Fetch every token account ``owner`` holds for ``mint``.

        Args:
            owner: Wallet address.
            mint: Token mint address.

        Returns:
            Raw token accounts in RPC enumeration order.

        Raises:
            SolanaRPCError: When the RPC call fails.

        """
        result = await self._call(
            "getTokenAccountsByOwner",
            [
                str(owner),
                {"mint": str(mint)},
                {"encoding": "base64", "commitment": self.commitment},
            ],
        )
        return [
            _parse_account(Pubkey.from_string(item["pubkey"]), item["account"])
            for item in result.get("value", [])
        ]

    async def get_program_accounts(
        self,
        program_id: Pubkey,
        filters: Sequence[MemcmpFilter],
    ) -> list[AccountInfo]:
        """Scan accounts owned by a program, narrowed by byte filters.

        Args:
            program_id: Program whose accounts to scan.
            filters: Exact byte matches that every returned account satisfies.

        Returns:
            Matching accounts in RPC enumeration order.

        Raises:
            SolanaRPCError: When the RPC call fails.

        """
        rpc_filters = [
            {
                "memcmp": {
                    "offset": f.offset,
                    "bytes": base64.b64encode(f.data).decode(),
                    "encoding": "base64",
                }
            }
            for f in filters
        ]
        result = await self._call(
            "getProgramAccounts",
            [
                str(program_id),
                {"encoding": "base64", "commitment": self.commitment, "filters": rpc_filters},
            ],
        )
        return [
            _parse_account(Pubkey.from_string(item["pubkey"]), item["account"]) for item in result
        ]

    async def get_latest_blockhash(self) -> Hash:
        """Fetch a recent blockhash for signing a transaction.

        Raises:
            SolanaRPCError: When the RPC call fails.

        """
        result = await self._call("getLatestBlockhash", [{"commitment": self.commitment}])
        return Hash.from_string(result["value"]["blockhash"])

    async def submit(self, instructions: Sequence[Instruction], payer: Keypair) -> str:
        """Sign, send, and confirm a transaction.

        Args:
            instructions: Instructions to execute atomically.
            payer: Fee payer and only signer.

        Returns:
            The transaction signature.

        Raises:
            SolanaTransactionError: When the transaction is rejected, fails
                on-chain, or does not confirm in time.

        """
        blockhash = await self.get_latest_blockhash()
        message = Message.new_with_blockhash(list(instructions), payer.pubkey(), blockhash)
        transaction = Transaction([payer], message, blockhash)
        wire = base64.b64encode(bytes(transaction)).decode()
        try:
            signature: str = await self._call(
                "sendTransaction",
                [wire, {"encoding": "base64", "preflightCommitment": self.commitment}],
            )
        except SolanaRPCError as exc:
            raise SolanaTransactionError(msg=exc.msg, code=exc.code) from exc
        logger.info("Sent transaction %s", signature)
        await self.confirm_transaction(signature)
        return signature

    async def confirm_transaction(self, signature: str) -> None:
        """Poll a signature until it reaches the configured commitment.

        Args:
            signature: Signature returned by ``sendTransaction``.

        Raises:
            SolanaTransactionError: When the transaction failed on-chain or
                did not confirm within ``max_confirm_attempts`` polls.

        """
        target = _COMMITMENT_RANK.get(self.commitment, _COMMITMENT_RANK["confirmed"])
        for _ in range(self.max_confirm_attempts):
            result = await self._call("getSignatureStatuses", [[signature]])
            status = (result.get("value") or [None])[0]
            if status is not None:
                if status.get("err") is not None:
                    msg = f"Transaction failed: {status['err']}"
                    raise SolanaTransactionError(msg=msg, signature=signature)
                reached = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "", -1)
                if reached >= target:
                    logger.info("Transaction %s reached %s", signature, self.commitment)
                    return
            await asyncio.sleep(self.poll_interval)
        msg = f"Transaction {signature} was not confirmed after {self.max_confirm_attempts} polls"
        raise SolanaTransactionError(msg=msg, signature=signature)

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Send a JSON-RPC request and return its ``result``.

        Args:
            method: JSON-RPC method name.
            params: Positional parameters.

        Returns:
            The ``result`` member of the reply.

        Raises:
            SolanaRPCError: When the transport fails or the reply carries an error.

        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._http_client.request("POST", self.rpc_url, json=payload)
        except httpx.HTTPError as exc:
            raise SolanaRPCError(
                msg=f"HTTP request failed: {exc}",
                code=_HTTP_BAD_REQUEST,
            ) from exc

        if response.status_code >= _HTTP_BAD_REQUEST:
            self._handle_error(response)

        try:
            data: dict[str, Any] = response.json()
        except ValueError as exc:
            raise SolanaRPCError(
                msg=f"Invalid JSON-RPC reply to {method}",
                code=response.status_code,
            ) from exc
        error = data.get("error")
        if error is not None:
            raise SolanaRPCError(
                msg=str(error.get("message", "Unknown RPC error")),
                code=int(error.get("code", 0)),
            )
        return data.get("result")

    @staticmethod
    def _handle_error(response: httpx.Response) -> None:
        """Raise a SolanaRPCError from an HTTP error response.

        Args:
            response: HTTP response with a non-2xx status code.

        Raises:
            SolanaRPCError: Always raised with status code and message.

        """
        try:
            data = response.json()
            msg: str = data.get("error", {}).get("message", f"HTTP {response.status_code}")
        except Exception:
            msg = f"HTTP {response.status_code}"
        raise SolanaRPCError(msg=msg, code=response.status_code)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()

    async def __aenter__(self) -> "SolanaClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()


def _parse_account(address: Pubkey, raw: dict[str, Any]) -> AccountInfo:
    """Convert an RPC account object with base64 data into ``AccountInfo``."""
    encoded, _encoding = raw["data"]
    return AccountInfo(
        address=address,
        owner=Pubkey.from_string(raw["owner"]),
        lamports=int(raw["lamports"]),
        data=base64.b64decode(encoded),
    )
