import logging
from typing import Any, Dict, Optional

from eth_account import Account
from web3 import Web3

from cakit.signer.base import SignerError, TransactionSigner
from cakit.utils.evm import create_web3, prepare_transaction, rpc_url_for, to_int

logger = logging.getLogger(__name__)


class LocalEvmSigner(TransactionSigner):
    """Signs with a local EVM private key and broadcasts via the chain's RPC."""

    def __init__(self, private_key: str, rpc_urls: Optional[Dict[Any, str]] = None):
        self.account = Account.from_key(private_key)
        self.rpc_urls = rpc_urls or {}

    def address(self) -> str:
        return self.account.address

    async def sign_and_send_evm_transaction(self, transaction: Dict[str, Any]) -> str:
        if "chainId" not in transaction:
            raise SignerError("EVM transaction is missing chainId")
        try:
            chain_id = to_int(transaction["chainId"])
            w3 = create_web3(rpc_url_for(chain_id, self.rpc_urls))
            tx = await prepare_transaction(w3, transaction, self.address())
            signed = self.account.sign_transaction(tx)
            tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise SignerError(f"Failed to send EVM transaction: {e}")

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"EVM transaction sent on chain {chain_id}: {tx_hash}")
        return tx_hash

    async def sign_and_send_json_evm_transaction(
        self, transaction: Dict[str, Any]
    ) -> str:
        return await self.sign_and_send_evm_transaction(transaction)
