"""
Signer abstraction.

A signer wraps one signing backend (a local Solana keypair, a local EVM key or
a custodial Privy wallet). Tools never talk to a backend directly, they ask the
signer bound to the current request to sign and send.
"""

from typing import Any, Dict, Union

from solders.transaction import Transaction, VersionedTransaction

SolanaTransaction = Union[Transaction, VersionedTransaction]


class SignerError(RuntimeError):
    """Signing or submission failed."""


class UnsupportedTransactionError(SignerError):
    """The signer has no backend for the requested chain."""


class TransactionSigner:
    """Base class for signing backends.

    Every method raises UnsupportedTransactionError unless the backend
    overrides it.
    """

    def address(self) -> str:
        """EVM address of the wallet."""
        raise UnsupportedTransactionError("EVM address not available for this signer")

    def pubkey(self) -> str:
        """Solana public key (base58) of the wallet."""
        raise UnsupportedTransactionError(
            "Solana public key not available for this signer"
        )

    async def sign_and_send_solana_transaction(
        self, transaction: SolanaTransaction
    ) -> str:
        raise UnsupportedTransactionError(
            "Solana transactions not supported by this signer"
        )

    async def sign_and_send_encoded_solana_transaction(self, encoded: str) -> str:
        raise UnsupportedTransactionError(
            "Solana transactions not supported by this signer"
        )

    async def sign_and_send_evm_transaction(self, transaction: Dict[str, Any]) -> str:
        raise UnsupportedTransactionError(
            "EVM transactions not supported by this signer"
        )

    async def sign_and_send_json_evm_transaction(
        self, transaction: Dict[str, Any]
    ) -> str:
        raise UnsupportedTransactionError(
            "EVM transactions not supported by this signer"
        )
