"""
EVM helpers shared by the local and Privy signers, approvals and LI.FI.

Transactions move through three shapes:
- JSON-RPC (hex-string quantities, as returned by aggregators)
- web3 (int quantities, checksum addresses, `gas` instead of `gasLimit`)
- Privy (snake_case fields for the wallet RPC)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

SOLANA_CHAIN_ID = 1151111081099710

CHAIN_IDS = {
    "sol": SOLANA_CHAIN_ID,
    "eth": 1,
    "arb": 42161,
    "base": 8453,
    "bsc": 56,
    "sonic": 146,
}

EVM_CHAINS = [chain for chain in CHAIN_IDS if chain != "sol"]

DEFAULT_EVM_RPC_URLS = {
    1: "https://eth.llamarpc.com",
    42161: "https://arb1.arbitrum.io/rpc",
    8453: "https://mainnet.base.org",
    56: "https://bsc-dataseed.binance.org",
    146: "https://rpc.soniclabs.com",
}

QUANTITY_FIELDS = (
    "value",
    "gas",
    "gasPrice",
    "nonce",
    "chainId",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "type",
)


def chain_id_for(chain: str) -> int:
    try:
        return CHAIN_IDS[chain.lower()]
    except KeyError:
        supported = ", ".join(CHAIN_IDS)
        raise ValueError(f"Unsupported chain: {chain}. Supported chains: {supported}")


def parse_amount(amount: Union[str, int]) -> int:
    """Parse a raw token amount, accepting scientific notation ("1e6")."""
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount}")
    if not value.is_finite() or value < 0 or value != value.to_integral_value():
        raise ValueError(f"Invalid amount: {amount}")
    return int(value)


def to_int(value: Union[str, int]) -> int:
    if isinstance(value, int):
        return value
    value = str(value)
    if value.startswith(("0x", "0X")):
        return int(value, 16)
    return parse_amount(value)


def rpc_url_for(chain_id: int, rpc_urls: Optional[Dict[Any, str]] = None) -> str:
    rpc_urls = rpc_urls or {}
    url = rpc_urls.get(chain_id) or rpc_urls.get(str(chain_id))
    url = url or DEFAULT_EVM_RPC_URLS.get(chain_id)
    if not url:
        raise ValueError(f"No RPC URL configured for chain id {chain_id}")
    return url


def create_web3(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


def normalize_transaction(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a JSON-RPC shaped transaction into the web3 shape."""
    normalized: Dict[str, Any] = {}
    for key, value in transaction.items():
        if value is None:
            continue
        if key == "gasLimit":
            key = "gas"
        if key in QUANTITY_FIELDS:
            value = to_int(value)
        elif key in ("to", "from"):
            value = Web3.to_checksum_address(value)
        normalized[key] = value
    return normalized


def to_json_rpc(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a web3 shaped transaction into JSON-RPC hex quantities."""
    result: Dict[str, Any] = {}
    for key, value in normalize_transaction(transaction).items():
        if key in QUANTITY_FIELDS:
            value = hex(value)
        result[key] = value
    return result


def to_privy_transaction(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a prepared web3 transaction into a legacy Privy transaction."""
    tx = normalize_transaction(transaction)
    # Privy signs legacy transactions; price them at the EIP-1559 fee cap.
    if "gasPrice" not in tx and "maxFeePerGas" in tx:
        tx["gasPrice"] = tx["maxFeePerGas"]
    privy_tx: Dict[str, Any] = {"type": 0}
    field_map = {
        "to": "to",
        "from": "from",
        "data": "data",
        "value": "value",
        "nonce": "nonce",
        "chainId": "chain_id",
        "gas": "gas_limit",
        "gasPrice": "gas_price",
    }
    for key, privy_key in field_map.items():
        if key not in tx:
            continue
        value = tx[key]
        if key in ("value", "gas", "gasPrice"):
            value = hex(value)
        privy_tx[privy_key] = value
    return privy_tx


async def prepare_transaction(
    w3: AsyncWeb3, transaction: Dict[str, Any], sender: str
) -> Dict[str, Any]:
    """Fill chain id, nonce, gas price and gas limit when missing."""
    tx = normalize_transaction(transaction)
    tx.setdefault("from", Web3.to_checksum_address(sender))
    tx.setdefault("value", 0)
    if "chainId" not in tx:
        tx["chainId"] = await w3.eth.chain_id
    if "nonce" not in tx:
        tx["nonce"] = await w3.eth.get_transaction_count(tx["from"], "pending")
    if "gasPrice" not in tx and "maxFeePerGas" not in tx:
        tx["gasPrice"] = await w3.eth.gas_price
    if "gas" not in tx:
        tx["gas"] = await w3.eth.estimate_gas(tx)
    return tx
