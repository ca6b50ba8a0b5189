import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry

from cakit.utils.price import fetch_token_price

logger = logging.getLogger(__name__)


class FetchTokenPriceTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="fetch_token_price",
            description="Get the USD price of a Solana token by its mint address.",
            registry=registry,
        )
        self._price_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "mint": {
                    "type": "string",
                    "description": "Mint of the token to price.",
                },
            },
            "required": ["mint"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._price_url = (
            config.get("tools", {}).get("fetch_token_price", {}).get("price_url")
        )

    async def execute(self, mint: str) -> Dict[str, Any]:
        try:
            price = await fetch_token_price(mint, self._price_url)
            return {"status": "success", "mint": mint, "price": price}
        except Exception as e:
            logger.exception(f"Failed to fetch price: {str(e)}")
            return {"status": "error", "message": str(e)}


class FetchTokenPricePlugin:
    def __init__(self):
        self.name = "fetch_token_price"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for Solana token USD prices."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = FetchTokenPriceTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return FetchTokenPricePlugin()
