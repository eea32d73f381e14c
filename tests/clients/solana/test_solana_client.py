"""Tests for the Solana JSON-RPC client."""

import base64
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from swap_escrow.clients.solana.client import SolanaClient
from swap_escrow.clients.solana.exceptions import SolanaRPCError, SolanaTransactionError
from swap_escrow.clients.solana.models import MemcmpFilter
from swap_escrow.core.config import EscrowSettings

_STATUS_OK = 200
_STATUS_SERVER_ERROR = 500
_RPC_INVALID_PARAMS = -32602
_RPC_PREFLIGHT_FAILURE = -32002
_LAMPORTS = 2039280
_SIGNATURE = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"  # noqa: E501


def _rpc_response(result: Any = None, *, error: dict[str, Any] | None = None) -> MagicMock:
    """Build a mock HTTP response carrying a JSON-RPC reply."""
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": 1}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    response = MagicMock()
    response.status_code = _STATUS_OK
    response.json.return_value = body
    return response


def _raw_account(owner: Pubkey, data: bytes) -> dict[str, Any]:
    """Build an RPC account object with base64 data."""
    return {
        "owner": str(owner),
        "lamports": _LAMPORTS,
        "data": [base64.b64encode(data).decode(), "base64"],
        "executable": False,
    }


def _sent_payload(mock_request: AsyncMock, call: int = 0) -> dict[str, Any]:
    """Return the JSON-RPC payload of a recorded request."""
    return mock_request.call_args_list[call].kwargs["json"]


class TestSolanaClient:
    """Test suite for SolanaClient."""

    @pytest.fixture
    def client(self) -> SolanaClient:
        """Create a SolanaClient that polls without sleeping."""
        return SolanaClient(
            rpc_url="https://rpc.example.com", poll_interval=0.0, max_confirm_attempts=3
        )

    def test_from_settings(self, settings: EscrowSettings) -> None:
        """Copy connection values from the shared settings."""
        client = SolanaClient.from_settings(settings)
        assert client.rpc_url == settings.rpc_url
        assert client.commitment == settings.commitment
        assert client.max_confirm_attempts == settings.max_confirm_attempts

    @pytest.mark.asyncio
    async def test_get_account_info(self, client: SolanaClient) -> None:
        """Decode base64 account data into AccountInfo."""
        address = Pubkey.new_unique()
        owner = Pubkey.new_unique()
        mock_request = AsyncMock(
            return_value=_rpc_response({"value": _raw_account(owner, b"\x01\x02")})
        )

        with patch.object(client._http_client, "request", new=mock_request):
            account = await client.get_account_info(address)

        assert account is not None
        assert account.address == address
        assert account.owner == owner
        assert account.lamports == _LAMPORTS
        assert account.data == b"\x01\x02"
        payload = _sent_payload(mock_request)
        assert payload["method"] == "getAccountInfo"
        assert payload["params"][0] == str(address)
        assert payload["params"][1]["encoding"] == "base64"

    @pytest.mark.asyncio
    async def test_get_account_info_missing(self, client: SolanaClient) -> None:
        """Return None when the account does not exist."""
        with patch.object(
            client._http_client,
            "request",
            new=AsyncMock(return_value=_rpc_response({"value": None})),
        ):
            assert await client.get_account_info(Pubkey.new_unique()) is None

    @pytest.mark.asyncio
    async def test_get_token_accounts_by_owner(self, client: SolanaClient) -> None:
        """Return every account for the owner and mint in reply order."""
        owner = Pubkey.new_unique()
        mint = Pubkey.new_unique()
        first, second = Pubkey.new_unique(), Pubkey.new_unique()
        token_program = Pubkey.new_unique()
        mock_request = AsyncMock(
            return_value=_rpc_response(
                {
                    "value": [
                        {"pubkey": str(first), "account": _raw_account(token_program, b"a")},
                        {"pubkey": str(second), "account": _raw_account(token_program, b"b")},
                    ]
                }
            )
        )

        with patch.object(client._http_client, "request", new=mock_request):
            accounts = await client.get_token_accounts_by_owner(owner, mint)

        assert [a.address for a in accounts] == [first, second]
        params = _sent_payload(mock_request)["params"]
        assert params[0] == str(owner)
        assert params[1] == {"mint": str(mint)}

    @pytest.mark.asyncio
    async def test_get_program_accounts_sends_memcmp_filters(self, client: SolanaClient) -> None:
        """Encode memcmp filter bytes as base64."""
        program_id = Pubkey.new_unique()
        party = Pubkey.new_unique()
        record = Pubkey.new_unique()
        mock_request = AsyncMock(
            return_value=_rpc_response(
                [{"pubkey": str(record), "account": _raw_account(program_id, b"offer")}]
            )
        )
        filters = [MemcmpFilter(offset=0, data=b"\xaa" * 8), MemcmpFilter(40, bytes(party))]

        with patch.object(client._http_client, "request", new=mock_request):
            accounts = await client.get_program_accounts(program_id, filters)

        assert [a.address for a in accounts] == [record]
        options = _sent_payload(mock_request)["params"][1]
        assert options["filters"][1] == {
            "memcmp": {
                "offset": 40,
                "bytes": base64.b64encode(bytes(party)).decode(),
                "encoding": "base64",
            }
        }

    @pytest.mark.asyncio
    async def test_rpc_error_reply(self, client: SolanaClient) -> None:
        """Raise SolanaRPCError carrying the JSON-RPC code and message."""
        reply = _rpc_response(error={"code": _RPC_INVALID_PARAMS, "message": "Invalid param"})

        with (
            patch.object(client._http_client, "request", new=AsyncMock(return_value=reply)),
            pytest.raises(SolanaRPCError, match="Invalid param") as exc_info,
        ):
            await client.get_account_info(Pubkey.new_unique())

        assert exc_info.value.code == _RPC_INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_http_error_status(self, client: SolanaClient) -> None:
        """Raise SolanaRPCError with the HTTP status for non-2xx replies."""
        response = MagicMock()
        response.status_code = _STATUS_SERVER_ERROR
        response.json.return_value = {"error": {"message": "Internal error"}}

        with (
            patch.object(client._http_client, "request", new=AsyncMock(return_value=response)),
            pytest.raises(SolanaRPCError, match="Internal error") as exc_info,
        ):
            await client.get_latest_blockhash()

        assert exc_info.value.code == _STATUS_SERVER_ERROR

    @pytest.mark.asyncio
    async def test_transport_failure(self, client: SolanaClient) -> None:
        """Wrap httpx transport errors in SolanaRPCError."""
        failing = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with (
            patch.object(client._http_client, "request", new=failing),
            pytest.raises(SolanaRPCError, match="HTTP request failed"),
        ):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_invalid_json_reply(self, client: SolanaClient) -> None:
        """Raise SolanaRPCError when the reply body is not JSON."""
        response = MagicMock()
        response.status_code = _STATUS_OK
        response.json.side_effect = ValueError("not json")

        with (
            patch.object(client._http_client, "request", new=AsyncMock(return_value=response)),
            pytest.raises(SolanaRPCError, match="Invalid JSON-RPC reply"),
        ):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_submit_signs_sends_and_confirms(self, client: SolanaClient) -> None:
        """Sign with the payer, send base64 wire bytes, and wait for confirmation."""
        payer = Keypair()
        program_id = Pubkey.new_unique()
        instruction = Instruction(
            program_id,
            b"\x00",
            [AccountMeta(pubkey=payer.pubkey(), is_signer=True, is_writable=True)],
        )
        mock_request = AsyncMock(
            side_effect=[
                _rpc_response({"value": {"blockhash": str(Hash.default())}}),
                _rpc_response(_SIGNATURE),
                _rpc_response({"value": [None]}),
                _rpc_response({"value": [{"err": None, "confirmationStatus": "confirmed"}]}),
            ]
        )

        with patch.object(client._http_client, "request", new=mock_request):
            signature = await client.submit([instruction], payer)

        assert signature == _SIGNATURE
        methods = [call.kwargs["json"]["method"] for call in mock_request.call_args_list]
        assert methods == [
            "getLatestBlockhash",
            "sendTransaction",
            "getSignatureStatuses",
            "getSignatureStatuses",
        ]
        wire = _sent_payload(mock_request, 1)["params"][0]
        transaction = Transaction.from_bytes(base64.b64decode(wire))
        assert transaction.message.account_keys[0] == payer.pubkey()
        assert transaction.message.recent_blockhash == Hash.default()

    @pytest.mark.asyncio
    async def test_submit_rejected(self, client: SolanaClient) -> None:
        """Raise SolanaTransactionError when sendTransaction is rejected."""
        payer = Keypair()
        instruction = Instruction(
            Pubkey.new_unique(),
            b"",
            [AccountMeta(pubkey=payer.pubkey(), is_signer=True, is_writable=True)],
        )
        mock_request = AsyncMock(
            side_effect=[
                _rpc_response({"value": {"blockhash": str(Hash.default())}}),
                _rpc_response(
                    error={"code": _RPC_PREFLIGHT_FAILURE, "message": "insufficient funds"}
                ),
            ]
        )

        with (
            patch.object(client._http_client, "request", new=mock_request),
            pytest.raises(SolanaTransactionError, match="insufficient funds") as exc_info,
        ):
            await client.submit([instruction], payer)

        assert exc_info.value.code == _RPC_PREFLIGHT_FAILURE

    @pytest.mark.asyncio
    async def test_confirm_transaction_failure(self, client: SolanaClient) -> None:
        """Raise SolanaTransactionError when the status carries an error."""
        status = {"err": {"InstructionError": [0, "Custom"]}, "confirmationStatus": "processed"}

        with (
            patch.object(
                client._http_client,
                "request",
                new=AsyncMock(return_value=_rpc_response({"value": [status]})),
            ),
            pytest.raises(SolanaTransactionError, match="Transaction failed") as exc_info,
        ):
            await client.confirm_transaction(_SIGNATURE)

        assert exc_info.value.signature == _SIGNATURE

    @pytest.mark.asyncio
    async def test_confirm_transaction_timeout(self, client: SolanaClient) -> None:
        """Give up after the configured number of polls."""
        mock_request = AsyncMock(
            return_value=_rpc_response(
                {"value": [{"err": None, "confirmationStatus": "processed"}]}
            )
        )

        with (
            patch.object(client._http_client, "request", new=mock_request),
            pytest.raises(SolanaTransactionError, match="not confirmed after 3 polls"),
        ):
            await client.confirm_transaction(_SIGNATURE)

        assert mock_request.await_count == client.max_confirm_attempts

    @pytest.mark.asyncio
    async def test_finalized_satisfies_confirmed(self, client: SolanaClient) -> None:
        """Accept a status beyond the requested commitment."""
        mock_request = AsyncMock(
            return_value=_rpc_response(
                {"value": [{"err": None, "confirmationStatus": "finalized"}]}
            )
        )

        with patch.object(client._http_client, "request", new=mock_request):
            await client.confirm_transaction(_SIGNATURE)

        assert mock_request.await_count == 1

    @pytest.mark.asyncio
    async def test_context_manager_closes_http_client(self) -> None:
        """Close the HTTP client when leaving the context."""
        client = SolanaClient(rpc_url="https://rpc.example.com")
        with patch.object(client._http_client, "aclose", new=AsyncMock()) as mock_close:
            async with client:
                pass
        mock_close.assert_awaited_once()
