"""Exception hierarchy for locally detectable escrow failures.

Every error here is raised before a transaction is built, so none of them
leaves partial state on the ledger.  The CLI reports them and aborts the
current operation.  Failures of the ledger itself during submission are
raised by the RPC client (``SolanaTransactionError``) instead.
"""


class EscrowError(Exception):
    """Base exception for all escrow client errors."""


class InvalidInputError(EscrowError):
    """User input is malformed: bad address, number, menu choice, or index."""


class ExternalLookupError(EscrowError):
    """An on-ledger lookup failed, e.g. the address is not a token mint."""


class InsufficientResourcesError(EscrowError):
    """No qualifying token account exists, or its balance is too low."""


class AccountProvisioningError(EscrowError):
    """A required token account could not be created.

    Carry a hint so the CLI can tell the user how to recover (usually by
    funding the wallet to cover rent and fees).

    Args:
        msg: Human-readable description of the error.
        hint: Suggested remedy shown after the error.

    """

    def __init__(self, msg: str, hint: str) -> None:
        """Initialize the provisioning error.

        Args:
            msg: Human-readable description of the error.
            hint: Suggested remedy shown after the error.

        """
        super().__init__(msg)
        self.msg = msg
        self.hint = hint
