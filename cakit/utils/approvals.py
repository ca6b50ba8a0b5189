from typing import Any, Dict

from web3 import Web3

from cakit.utils.evm import create_web3, to_json_rpc

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

MAX_UINT256 = 2**256 - 1


async def get_allowance(
    token_address: str, owner_address: str, spender_address: str, rpc_url: str
) -> int:
    w3 = create_web3(rpc_url)
    contract = w3.eth.contract(
        address=Web3.to_checksum_address(token_address), abi=ERC20_ABI
    )
    return await contract.functions.allowance(
        Web3.to_checksum_address(owner_address),
        Web3.to_checksum_address(spender_address),
    ).call()


def create_approval_transaction(
    token_address: str,
    spender_address: str,
    amount: int,
    owner_address: str,
    chain_id: int,
) -> Dict[str, Any]:
    """Build a JSON-RPC shaped ERC-20 approve transaction."""
    if amount < 0 or amount > MAX_UINT256:
        raise ValueError(f"Invalid approval amount: {amount}")
    contract = Web3().eth.contract(
        address=Web3.to_checksum_address(token_address), abi=ERC20_ABI
    )
    data = contract.encode_abi(
        "approve", args=[Web3.to_checksum_address(spender_address), amount]
    )
    return to_json_rpc(
        {
            "from": owner_address,
            "to": token_address,
            "data": data,
            "value": 0,
            "chainId": chain_id,
        }
    )
