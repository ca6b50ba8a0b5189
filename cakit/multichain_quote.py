import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry

from cakit.signer.context import SignerContext
from cakit.utils.evm import CHAIN_IDS
from cakit.utils.lifi import LiFi, truncate_error, wallet_address_for

logger = logging.getLogger(__name__)

DESCRIPTION = """Get a quote for a multichain swap (or bridge).

Use this when the user wonders how much a swap or bridge would cost, or to
validate token addresses and other params with the user before executing.

from_token_symbol and to_token_symbol can be a Solana public key, an EVM
address or a symbol.

The amount is a string to avoid precision loss and accounts for decimals,
e.g. 1e6 for 1 USDC but 1e9 for 1 SOL.

The quote may include an approval address; in that case use the
approve_token tool before swapping."""


class MultichainQuoteTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="get_multichain_quote",
            description=DESCRIPTION,
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._lifi_api_key: Optional[str] = None
        self._lifi_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "from_token_symbol": {
                    "type": "string",
                    "description": "Symbol or address of the token to swap from.",
                },
                "to_token_symbol": {
                    "type": "string",
                    "description": "Symbol or address of the token to swap to.",
                },
                "amount": {
                    "type": "string",
                    "description": "Amount to swap in smallest units, as a string.",
                },
                "from_chain": {
                    "type": "string",
                    "enum": list(CHAIN_IDS),
                    "description": "Chain to swap from.",
                },
                "to_chain": {
                    "type": "string",
                    "enum": list(CHAIN_IDS),
                    "description": "Chain to swap to.",
                },
            },
            "required": [
                "from_token_symbol",
                "to_token_symbol",
                "amount",
                "from_chain",
                "to_chain",
            ],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("get_multichain_quote", {})
        self._lifi_api_key = tool_cfg.get("lifi_api_key")
        self._lifi_url = tool_cfg.get("lifi_url")

    async def execute(
        self,
        from_token_symbol: str,
        to_token_symbol: str,
        amount: str,
        from_chain: str,
        to_chain: str,
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            lifi = LiFi(api_key=self._lifi_api_key, base_url=self._lifi_url)
            quote = await lifi.get_quote(
                from_chain,
                to_chain,
                from_token_symbol,
                to_token_symbol,
                wallet_address_for(signer, from_chain),
                wallet_address_for(signer, to_chain),
                amount,
            )
            return {"status": "success", "quote": quote.summary()}
        except Exception as e:
            logger.exception(f"Multichain quote failed: {str(e)}")
            return {"status": "error", "message": truncate_error(e)}


class MultichainQuotePlugin:
    def __init__(self):
        self.name = "get_multichain_quote"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for multichain swap and bridge quotes via LI.FI."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = MultichainQuoteTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return MultichainQuotePlugin()
