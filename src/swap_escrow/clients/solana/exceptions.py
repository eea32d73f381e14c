"""Exception hierarchy for Solana JSON-RPC client errors.

Follow the same pattern as the other clients: a base exception class with
a specialised RPC error that carries the JSON-RPC error code and message.
"""


class SolanaError(Exception):
    """Base exception for all Solana client errors."""


class SolanaRPCError(SolanaError):
    """Error returned by a JSON-RPC call or by the HTTP transport.

    Carry a human-readable message and the JSON-RPC error code (or the
    HTTP status code when the request never produced a JSON-RPC reply).

    Args:
        msg: Human-readable description of the error.
        code: JSON-RPC error code or HTTP status code.

    """

    def __init__(self, msg: str, code: int) -> None:
        """Initialize Solana RPC error.

        Args:
            msg: Human-readable description of the error.
            code: JSON-RPC error code or HTTP status code.

        """
        super().__init__(f"[{code}] {msg}")
        self.msg = msg
        self.code = code


class SolanaTransactionError(SolanaRPCError):
    """A submitted transaction was rejected, failed on-chain, or never confirmed.

    Not recoverable by the client; callers let it propagate.

    Args:
        msg: Human-readable description of the error.
        code: JSON-RPC error code, or 0 when the failure came from the
            transaction status rather than the RPC call.
        signature: Signature of the failed transaction, when known.

    """

    def __init__(self, msg: str, code: int = 0, signature: str | None = None) -> None:
        """Initialize the transaction error.

        Args:
            msg: Human-readable description of the error.
            code: JSON-RPC error code.
            signature: Signature of the failed transaction, when known.

        """
        super().__init__(msg, code)
        self.signature = signature


class SolanaDecodeError(SolanaError):
    """Account data does not match the expected binary layout."""
