import logging
from dataclasses import asdict
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.portfolio import get_holdings, holdings_to_portfolio
from cakit.utils.wallet import create_rpc

logger = logging.getLogger(__name__)


class GetPortfolioTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="get_portfolio",
            description=(
                "Get the current user's Solana portfolio: SOL and every token held, "
                "with UI amounts, USD prices and USD values where a price exists."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._rpc_url: Optional[str] = None
        self._price_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("get_portfolio", {})
        self._rpc_url = tool_cfg.get("rpc_url")
        self._price_url = tool_cfg.get("price_url")

    async def execute(self) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            async with create_rpc(self._rpc_url) as client:
                holdings = await get_holdings(client, owner)
            portfolio = await holdings_to_portfolio(holdings, self._price_url)
            total = sum(item.value for item in portfolio if item.value is not None)
            return {
                "status": "success",
                "portfolio": [asdict(item) for item in portfolio],
                "total_value": total,
            }
        except Exception as e:
            logger.exception(f"Failed to get portfolio: {str(e)}")
            return {"status": "error", "message": str(e)}


class GetPortfolioPlugin:
    def __init__(self):
        self.name = "get_portfolio"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for the current wallet's priced holdings."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = GetPortfolioTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return GetPortfolioPlugin()
