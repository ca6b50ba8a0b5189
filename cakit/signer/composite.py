from typing import Any, Dict, Optional

from cakit.signer.base import SolanaTransaction, TransactionSigner


class CompositeSigner(TransactionSigner):
    """Routes Solana calls to one signer and EVM calls to another.

    A missing side falls back to the base class, which raises
    UnsupportedTransactionError.
    """

    def __init__(
        self,
        solana: Optional[TransactionSigner] = None,
        evm: Optional[TransactionSigner] = None,
    ):
        self.solana = solana
        self.evm = evm

    def address(self) -> str:
        if self.evm is None:
            return super().address()
        return self.evm.address()

    def pubkey(self) -> str:
        if self.solana is None:
            return super().pubkey()
        return self.solana.pubkey()

    async def sign_and_send_solana_transaction(
        self, transaction: SolanaTransaction
    ) -> str:
        if self.solana is None:
            return await super().sign_and_send_solana_transaction(transaction)
        return await self.solana.sign_and_send_solana_transaction(transaction)

    async def sign_and_send_encoded_solana_transaction(self, encoded: str) -> str:
        if self.solana is None:
            return await super().sign_and_send_encoded_solana_transaction(encoded)
        return await self.solana.sign_and_send_encoded_solana_transaction(encoded)

    async def sign_and_send_evm_transaction(self, transaction: Dict[str, Any]) -> str:
        if self.evm is None:
            return await super().sign_and_send_evm_transaction(transaction)
        return await self.evm.sign_and_send_evm_transaction(transaction)

    async def sign_and_send_json_evm_transaction(
        self, transaction: Dict[str, Any]
    ) -> str:
        if self.evm is None:
            return await super().sign_and_send_json_evm_transaction(transaction)
        return await self.evm.sign_and_send_json_evm_transaction(transaction)
