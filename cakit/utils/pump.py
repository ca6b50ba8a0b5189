"""
pump.fun helpers.

Metadata goes to pump.fun's IPFS endpoint; create, buy and sell transactions
are built by PumpPortal's trade-local API, which returns an unsigned
serialized transaction for the owner to sign.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from cakit.utils.transaction import sign_transaction
from cakit.utils.wallet import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)

PUMP_IPFS_URL = "https://pump.fun/api/ipfs"
PUMPPORTAL_API = "https://pumpportal.fun/api"
PUMP_TOKEN_DECIMALS = 6
DEFAULT_PRIORITY_FEE_SOL = 0.00005


@dataclass
class DeployTokenParams:
    name: str
    symbol: str
    description: str
    image_url: str
    twitter: Optional[str] = None
    website: Optional[str] = None
    telegram: Optional[str] = None
    dev_buy: Optional[int] = None  # lamports


class PumpPortal:
    def __init__(
        self,
        base_url: Optional[str] = None,
        ipfs_url: Optional[str] = None,
        priority_fee: float = DEFAULT_PRIORITY_FEE_SOL,
    ):
        self.base_url = base_url or PUMPPORTAL_API
        self.ipfs_url = ipfs_url or PUMP_IPFS_URL
        self.priority_fee = priority_fee

    @classmethod
    def from_config(cls, tool_cfg: Dict[str, Any]) -> "PumpPortal":
        return cls(
            base_url=tool_cfg.get("pumpportal_url"),
            ipfs_url=tool_cfg.get("pump_ipfs_url"),
            priority_fee=tool_cfg.get("priority_fee", DEFAULT_PRIORITY_FEE_SOL),
        )

    async def upload_metadata(self, params: DeployTokenParams) -> str:
        """Fetch the token image and upload it with the metadata, return the URI."""
        async with httpx.AsyncClient(timeout=60.0, follow_redirects=True) as client:
            image = await client.get(params.image_url)
            if image.status_code != 200:
                raise Exception(
                    f"Failed to fetch image: {image.status_code} - {params.image_url}"
                )
            content_type = image.headers.get("content-type", "image/png")
            form = {
                "name": params.name,
                "symbol": params.symbol,
                "description": params.description,
                "twitter": params.twitter or "",
                "telegram": params.telegram or "",
                "website": params.website or "",
                "showName": "true",
            }
            response = await client.post(
                self.ipfs_url,
                data=form,
                files={"file": ("image", image.content, content_type)},
            )
        if response.status_code != 200:
            raise Exception(
                f"Failed to upload metadata: {response.status_code} - {response.text}"
            )
        metadata_uri = response.json().get("metadataUri")
        if not metadata_uri:
            raise Exception("pump.fun IPFS returned no metadata URI")
        return metadata_uri

    async def trade_local(self, payload: Dict[str, Any]) -> VersionedTransaction:
        body = {"priorityFee": self.priority_fee, "pool": "pump", **payload}
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(f"{self.base_url}/trade-local", json=body)
        if response.status_code != 200:
            raise Exception(
                f"PumpPortal error: {response.status_code} - {response.text}"
            )
        return VersionedTransaction.from_bytes(response.content)


def bps_to_percent(slippage_bps: int) -> float:
    return slippage_bps / 100


async def create_deploy_token_tx(
    params: DeployTokenParams,
    owner: Pubkey,
    pump: Optional[PumpPortal] = None,
    mint_keypair: Optional[Keypair] = None,
) -> VersionedTransaction:
    """
    Build a pump.fun create transaction, partially signed by a fresh mint.

    The returned transaction still needs the owner's signature.
    """
    pump = pump or PumpPortal()
    mint_keypair = mint_keypair or Keypair()
    metadata_uri = await pump.upload_metadata(params)
    dev_buy_sol = (params.dev_buy or 0) / LAMPORTS_PER_SOL

    tx = await pump.trade_local(
        {
            "publicKey": str(owner),
            "action": "create",
            "tokenMetadata": {
                "name": params.name,
                "symbol": params.symbol,
                "uri": metadata_uri,
            },
            "mint": str(mint_keypair.pubkey()),
            "denominatedInSol": "true",
            "amount": dev_buy_sol,
            "slippage": 10,
        }
    )
    logger.info(f"pump.fun create transaction built for mint {mint_keypair.pubkey()}")
    return sign_transaction(tx, mint_keypair)


async def create_buy_pump_fun_tx(
    mint: str,
    lamports: int,
    slippage_bps: int,
    owner: Pubkey,
    pump: Optional[PumpPortal] = None,
) -> VersionedTransaction:
    if lamports <= 0:
        raise ValueError("Buy amount must be positive")
    pump = pump or PumpPortal()
    return await pump.trade_local(
        {
            "publicKey": str(owner),
            "action": "buy",
            "mint": mint,
            "denominatedInSol": "true",
            "amount": lamports / LAMPORTS_PER_SOL,
            "slippage": bps_to_percent(slippage_bps),
        }
    )


async def create_sell_pump_fun_tx(
    mint: str,
    token_amount: int,
    owner: Pubkey,
    slippage_bps: int = 500,
    pump: Optional[PumpPortal] = None,
) -> VersionedTransaction:
    """Build a sell of `token_amount` raw units (pump.fun tokens have 6 decimals)."""
    if token_amount <= 0:
        raise ValueError("Sell amount must be positive")
    pump = pump or PumpPortal()
    return await pump.trade_local(
        {
            "publicKey": str(owner),
            "action": "sell",
            "mint": mint,
            "denominatedInSol": "false",
            "amount": token_amount / 10**PUMP_TOKEN_DECIMALS,
            "slippage": bps_to_percent(slippage_bps),
        }
    )
