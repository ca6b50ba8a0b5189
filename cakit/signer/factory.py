"""
Build a signer from configuration.

Example config:

    {
        "signer": {
            "type": "local",
            "solana_private_key": "<base58>",
            "evm_private_key": "0x...",
            "rpc_url": "https://mainnet.helius-rpc.com/?api-key=...",
            "evm_rpc_urls": {"42161": "https://arb1.arbitrum.io/rpc"},
        }
    }

`type` is one of local_solana, local_evm, local (both keys) or privy. The
privy type needs the user's access token.
"""

from typing import Any, Dict, Optional

from cakit.signer.base import SignerError, TransactionSigner
from cakit.signer.composite import CompositeSigner
from cakit.signer.evm import LocalEvmSigner
from cakit.signer.privy import PrivySigner
from cakit.signer.solana import LocalSolanaSigner
from cakit.utils.wallet_manager import PrivyConfig, WalletManager


async def signer_from_config(
    config: Dict[str, Any], access_token: Optional[str] = None
) -> TransactionSigner:
    signer_cfg = config.get("signer", {})
    signer_type = signer_cfg.get("type", "local")
    rpc_url = signer_cfg.get("rpc_url")
    evm_rpc_urls = signer_cfg.get("evm_rpc_urls", {})

    if signer_type == "local_solana":
        if not signer_cfg.get("solana_private_key"):
            raise SignerError("Solana private key not configured.")
        return LocalSolanaSigner(signer_cfg["solana_private_key"], rpc_url)

    if signer_type == "local_evm":
        if not signer_cfg.get("evm_private_key"):
            raise SignerError("EVM private key not configured.")
        return LocalEvmSigner(signer_cfg["evm_private_key"], evm_rpc_urls)

    if signer_type == "local":
        solana = None
        evm = None
        if signer_cfg.get("solana_private_key"):
            solana = LocalSolanaSigner(signer_cfg["solana_private_key"], rpc_url)
        if signer_cfg.get("evm_private_key"):
            evm = LocalEvmSigner(signer_cfg["evm_private_key"], evm_rpc_urls)
        if solana is None and evm is None:
            raise SignerError("No private keys configured.")
        return CompositeSigner(solana=solana, evm=evm)

    if signer_type == "privy":
        privy_config = PrivyConfig.from_dict(signer_cfg.get("privy", {}))
        if not all([privy_config.app_id, privy_config.app_secret]):
            raise SignerError("Privy config missing.")
        if not access_token:
            raise SignerError("Privy signer requires an access token.")
        wallet_manager = WalletManager(privy_config, evm_rpc_urls)
        return await PrivySigner.from_access_token(wallet_manager, access_token)

    raise SignerError(f"Unknown signer type: {signer_type}")
