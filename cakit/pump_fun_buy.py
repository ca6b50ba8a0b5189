import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.pump import PumpPortal, create_buy_pump_fun_tx
from cakit.utils.wallet import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)


def sol_to_lamports(sol_amount: float) -> int:
    return int(round(sol_amount * LAMPORTS_PER_SOL))


class PumpFunBuyTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="buy_pump_fun_token",
            description=(
                "Buy a pump.fun token with SOL. sol_amount is in SOL (not lamports), "
                "slippage_bps is the slippage in basis points."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._pump = PumpPortal()

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "mint": {
                    "type": "string",
                    "description": "Mint of the pump.fun token to buy.",
                },
                "sol_amount": {
                    "type": "number",
                    "description": "Amount of SOL to spend.",
                },
                "slippage_bps": {
                    "type": "integer",
                    "description": "Slippage tolerance in basis points.",
                },
            },
            "required": ["mint", "sol_amount", "slippage_bps"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("buy_pump_fun_token", {})
        self._pump = PumpPortal.from_config(tool_cfg)

    async def execute(
        self, mint: str, sol_amount: float, slippage_bps: int
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            transaction = await create_buy_pump_fun_tx(
                mint, sol_to_lamports(sol_amount), slippage_bps, owner, pump=self._pump
            )
            signature = await signer.sign_and_send_solana_transaction(transaction)
            logger.info(f"Bought {mint} for {sol_amount} SOL: {signature}")
            return {"status": "success", "signature": signature}
        except Exception as e:
            logger.exception(f"pump.fun buy failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class PumpFunBuyPlugin:
    def __init__(self):
        self.name = "buy_pump_fun_token"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for buying pump.fun tokens."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = PumpFunBuyTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return PumpFunBuyPlugin()
