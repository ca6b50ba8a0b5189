import base64
import logging
import os
from typing import Any, Dict, Optional

import httpx
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.pubkey import Pubkey

logger = logging.getLogger(__name__)

DEFAULT_SOLANA_RPC_URL = os.getenv(
    "SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com"
)
LAMPORTS_PER_SOL = 10**9
WSOL_MINT = "So11111111111111111111111111111111111111112"
SPL_TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"


def create_rpc(rpc_url: Optional[str] = None) -> AsyncClient:
    return AsyncClient(rpc_url or DEFAULT_SOLANA_RPC_URL)


async def get_token_program_id(client: AsyncClient, mint: Pubkey) -> Pubkey:
    """Return the token program owning the mint (SPL Token or Token-2022)."""
    resp = await client.get_account_info(mint)
    if resp.value is None:
        raise ValueError(f"Mint account not found: {mint}")
    owner = str(resp.value.owner)
    if owner == SPL_TOKEN_PROGRAM_ID:
        return Pubkey.from_string(SPL_TOKEN_PROGRAM_ID)
    if owner == TOKEN_2022_PROGRAM_ID:
        return Pubkey.from_string(TOKEN_2022_PROGRAM_ID)
    raise ValueError(
        f"Unsupported token program: {owner}. Supported programs are SPL Token and Token 2022."
    )


async def get_priority_fee_estimate_helius(  # pragma: no cover
    rpc_url: str, tx_bytes: bytes
) -> Optional[int]:
    payload = {
        "jsonrpc": "2.0",
        "id": "1",
        "method": "getPriorityFeeEstimate",
        "params": [
            {
                "transaction": base64.b64encode(tx_bytes).decode("utf-8"),
                "options": {"recommended": True, "transactionEncoding": "base64"},
            }
        ],
    }
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(rpc_url, json=payload)
        if response.status_code != 200:
            return None
        result = response.json()
        if "result" not in result:
            return None
        return int(result["result"].get("priorityFeeEstimate", 0))


async def send_raw_transaction_with_priority(  # pragma: no cover
    rpc_url: str,
    tx_bytes: bytes,
    skip_preflight: bool = False,
    max_retries: int = 5,
) -> Dict[str, Any]:
    """
    Send a signed transaction to a Solana RPC node and wait for confirmation.

    Logs the Helius priority fee estimate when the endpoint is Helius.

    Args:
        rpc_url: The RPC endpoint URL
        tx_bytes: The serialized signed transaction bytes
        skip_preflight: Skip preflight simulation
        max_retries: Number of retries for the RPC call

    Returns:
        Dict with 'success' and 'signature' on success, or 'error' on failure.
    """
    try:
        client = AsyncClient(rpc_url)
        try:
            if "helius" in rpc_url.lower():
                try:
                    priority_fee = await get_priority_fee_estimate_helius(
                        rpc_url, tx_bytes
                    )
                    logger.info(f"Helius priority fee estimate: {priority_fee}")
                except httpx.HTTPError as fee_error:
                    logger.debug(f"Could not get priority fee estimate: {fee_error}")

            result = await client.send_raw_transaction(
                tx_bytes,
                opts=TxOpts(
                    skip_preflight=skip_preflight,
                    preflight_commitment=Confirmed,
                    max_retries=max_retries,
                ),
            )

            signature = str(result.value)
            logger.info(f"Transaction sent: {signature}")

            confirmation = await client.confirm_transaction(
                result.value,
                commitment=Confirmed,
                sleep_seconds=0.5,
            )
            if confirmation.value and confirmation.value[0].err:
                return {
                    "success": False,
                    "error": f"Transaction failed: {confirmation.value[0].err}",
                }

            return {"success": True, "signature": signature}

        finally:
            await client.close()

    except Exception as e:
        logger.error(f"RPC error sending transaction: {e}")
        return {"success": False, "error": str(e)}
