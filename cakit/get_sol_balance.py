import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.wallet import LAMPORTS_PER_SOL, create_rpc

logger = logging.getLogger(__name__)


class GetSolBalanceTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="get_sol_balance",
            description="Get the SOL balance of the current user's wallet, in SOL.",
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._rpc_url: Optional[str] = None

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
        self._rpc_url = (
            config.get("tools", {}).get("get_sol_balance", {}).get("rpc_url")
        )

    async def execute(self) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            async with create_rpc(self._rpc_url) as client:
                resp = await client.get_balance(owner)
            return {"status": "success", "balance": resp.value / LAMPORTS_PER_SOL}
        except Exception as e:
            logger.exception(f"Failed to get SOL balance: {str(e)}")
            return {"status": "error", "message": str(e)}


class GetSolBalancePlugin:
    def __init__(self):
        self.name = "get_sol_balance"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for reading the current wallet's SOL balance."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = GetSolBalanceTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return GetSolBalancePlugin()
