"""
LI.FI aggregator client.

Fetches cross-chain swap and bridge quotes. A quote carries the transaction
request to execute: a base64 serialized transaction for Solana sources, a
JSON-RPC transaction for EVM sources.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from cakit.utils.evm import SOLANA_CHAIN_ID, chain_id_for, parse_amount, to_int, to_json_rpc

logger = logging.getLogger(__name__)

LIFI_API = "https://li.quest/v1"


class LiFiError(Exception):
    pass


@dataclass
class TransactionRequest:
    data: str
    to: Optional[str] = None
    value: Optional[str] = None
    from_address: Optional[str] = None
    chain_id: Optional[int] = None
    gas_price: Optional[str] = None
    gas_limit: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRequest":
        chain_id = data.get("chainId")
        return cls(
            data=data.get("data", ""),
            to=data.get("to"),
            value=data.get("value"),
            from_address=data.get("from"),
            chain_id=to_int(chain_id) if chain_id is not None else None,
            gas_price=data.get("gasPrice"),
            gas_limit=data.get("gasLimit"),
        )

    def is_solana(self) -> bool:
        if self.chain_id is not None:
            return self.chain_id == SOLANA_CHAIN_ID
        return self.to is None

    def to_json_rpc(self) -> Dict[str, Any]:
        if self.is_solana():
            raise LiFiError("Solana transaction requests have no JSON-RPC form")
        if not self.to or self.chain_id is None:
            raise LiFiError("Transaction request is missing 'to' or 'chainId'")
        return to_json_rpc(
            {
                "from": self.from_address,
                "to": self.to,
                "data": self.data,
                "value": self.value or "0x0",
                "chainId": self.chain_id,
                "gasPrice": self.gas_price,
                "gasLimit": self.gas_limit,
            }
        )


def _summarize_costs(costs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "name": cost.get("name"),
            "amount": cost.get("amount"),
            "amount_usd": cost.get("amountUSD"),
            "token": (cost.get("token") or {}).get("symbol"),
        }
        for cost in costs or []
    ]


@dataclass
class LiFiQuote:
    id: str
    tool: str
    action: Dict[str, Any]
    estimate: Dict[str, Any]
    transaction_request: Optional[TransactionRequest]
    raw_response: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiFiQuote":
        tx_request = data.get("transactionRequest")
        return cls(
            id=data.get("id", ""),
            tool=data.get("tool", ""),
            action=data.get("action", {}),
            estimate=data.get("estimate", {}),
            transaction_request=(
                TransactionRequest.from_dict(tx_request) if tx_request else None
            ),
            raw_response=data,
        )

    def summary(self) -> Dict[str, Any]:
        from_token = self.action.get("fromToken", {})
        to_token = self.action.get("toToken", {})
        return {
            "tool": self.tool,
            "from_chain": self.action.get("fromChainId"),
            "to_chain": self.action.get("toChainId"),
            "from_token": {
                "symbol": from_token.get("symbol"),
                "address": from_token.get("address"),
                "decimals": from_token.get("decimals"),
            },
            "to_token": {
                "symbol": to_token.get("symbol"),
                "address": to_token.get("address"),
                "decimals": to_token.get("decimals"),
            },
            "from_amount": self.action.get("fromAmount"),
            "to_amount": self.estimate.get("toAmount"),
            "to_amount_min": self.estimate.get("toAmountMin"),
            "from_amount_usd": self.estimate.get("fromAmountUSD"),
            "to_amount_usd": self.estimate.get("toAmountUSD"),
            "approval_address": self.estimate.get("approvalAddress"),
            "execution_duration": self.estimate.get("executionDuration"),
            "fee_costs": _summarize_costs(self.estimate.get("feeCosts")),
            "gas_costs": _summarize_costs(self.estimate.get("gasCosts")),
        }


class LiFi:
    """LI.FI API client."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.base_url = base_url or LIFI_API
        self._headers = {"accept": "application/json"}
        if api_key:
            self._headers["x-lifi-api-key"] = api_key

    async def get_quote(
        self,
        from_chain: str,
        to_chain: str,
        from_token: str,
        to_token: str,
        from_address: str,
        to_address: str,
        amount: str,
    ) -> LiFiQuote:
        """
        Get a quote for swapping or bridging tokens.

        Args:
            from_chain: Source chain key (sol, arb, ...)
            to_chain: Destination chain key
            from_token: Symbol or address of the token to send
            to_token: Symbol or address of the token to receive
            from_address: Sender wallet on the source chain
            to_address: Receiver wallet on the destination chain
            amount: Raw amount accounting for decimals, as a string

        Returns:
            LiFiQuote

        Raises:
            ValueError: If a chain key or the amount is invalid
            LiFiError: If LI.FI rejects the request
        """
        params = {
            "fromChain": str(chain_id_for(from_chain)),
            "toChain": str(chain_id_for(to_chain)),
            "fromToken": from_token,
            "toToken": to_token,
            "fromAddress": from_address,
            "toAddress": to_address,
            "fromAmount": str(parse_amount(amount)),
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(
                f"{self.base_url}/quote", params=params, headers=self._headers
            )

        if response.status_code != 200:
            raise LiFiError(
                f"Failed to get quote: {response.status_code} - {response.text}"
            )

        quote = LiFiQuote.from_dict(response.json())
        logger.info(
            f"LI.FI quote {quote.id} via {quote.tool}: {from_chain} -> {to_chain}"
        )
        return quote


def wallet_address_for(signer, chain: str) -> str:
    """The signer's Solana pubkey for `sol`, its EVM address otherwise."""
    if chain.lower() == "sol":
        return signer.pubkey()
    return signer.address()


def truncate_error(error: Exception, limit: int = 300) -> str:
    return str(error)[:limit]
