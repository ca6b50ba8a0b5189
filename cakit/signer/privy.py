from typing import Any, Dict

from cakit.signer.base import SignerError, SolanaTransaction, TransactionSigner
from cakit.utils.transaction import encode_transaction
from cakit.utils.wallet_manager import UserSession, WalletManager


class PrivySigner(TransactionSigner):
    """Signs through the Privy wallets of an authenticated user session."""

    def __init__(self, wallet_manager: WalletManager, session: UserSession):
        self.wallet_manager = wallet_manager
        self.session = session

    @classmethod
    async def from_access_token(
        cls, wallet_manager: WalletManager, access_token: str
    ) -> "PrivySigner":
        session = await wallet_manager.authenticate_user(access_token)
        return cls(wallet_manager, session)

    def address(self) -> str:
        return self.session.wallet_address

    def pubkey(self) -> str:
        return self.session.pubkey

    async def sign_and_send_solana_transaction(
        self, transaction: SolanaTransaction
    ) -> str:
        return await self.sign_and_send_encoded_solana_transaction(
            encode_transaction(transaction)
        )

    async def sign_and_send_encoded_solana_transaction(self, encoded: str) -> str:
        try:
            return await self.wallet_manager.sign_and_send_encoded_solana_transaction(
                self.session.solana_wallet_id, encoded
            )
        except Exception as e:
            raise SignerError(str(e))

    async def sign_and_send_evm_transaction(self, transaction: Dict[str, Any]) -> str:
        return await self.sign_and_send_json_evm_transaction(transaction)

    async def sign_and_send_json_evm_transaction(
        self, transaction: Dict[str, Any]
    ) -> str:
        try:
            return await self.wallet_manager.sign_and_send_json_evm_transaction(
                self.session.evm_wallet_id,
                self.session.wallet_address,
                transaction,
            )
        except Exception as e:
            raise SignerError(str(e))
