import logging
from typing import Optional

from solders.keypair import Keypair

from cakit.signer.base import SignerError, SolanaTransaction, TransactionSigner
from cakit.utils.transaction import decode_transaction, sign_transaction
from cakit.utils.wallet import DEFAULT_SOLANA_RPC_URL, send_raw_transaction_with_priority

logger = logging.getLogger(__name__)


class LocalSolanaSigner(TransactionSigner):
    """Signs with a local Solana keypair and submits through an RPC node."""

    def __init__(self, private_key: str, rpc_url: Optional[str] = None):
        self.keypair = Keypair.from_base58_string(private_key)
        self.rpc_url = rpc_url or DEFAULT_SOLANA_RPC_URL

    def pubkey(self) -> str:
        return str(self.keypair.pubkey())

    async def sign_and_send_solana_transaction(
        self, transaction: SolanaTransaction
    ) -> str:
        try:
            signed = sign_transaction(transaction, self.keypair)
        except ValueError as e:
            raise SignerError(str(e))

        result = await send_raw_transaction_with_priority(
            rpc_url=self.rpc_url,
            tx_bytes=bytes(signed),
        )
        if not result.get("success"):
            raise SignerError(result.get("error", "Failed to send transaction"))
        return result["signature"]

    async def sign_and_send_encoded_solana_transaction(self, encoded: str) -> str:
        try:
            transaction = decode_transaction(encoded)
        except ValueError as e:
            raise SignerError(str(e))
        return await self.sign_and_send_solana_transaction(transaction)
