import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.pump import PumpPortal, create_sell_pump_fun_tx

logger = logging.getLogger(__name__)


class PumpFunSellTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="sell_pump_fun_token",
            description=(
                "Sell a pump.fun token for SOL. token_amount is the raw amount; "
                "pump.fun tokens have 6 decimals, so 1 token is 1000000."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._pump = PumpPortal()
        self._slippage_bps = 500

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "mint": {
                    "type": "string",
                    "description": "Mint of the pump.fun token to sell.",
                },
                "token_amount": {
                    "type": "integer",
                    "description": "Raw amount of tokens to sell.",
                },
            },
            "required": ["mint", "token_amount"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("sell_pump_fun_token", {})
        self._pump = PumpPortal.from_config(tool_cfg)
        self._slippage_bps = tool_cfg.get("slippage_bps", 500)

    async def execute(self, mint: str, token_amount: int) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            transaction = await create_sell_pump_fun_tx(
                mint,
                token_amount,
                owner,
                slippage_bps=self._slippage_bps,
                pump=self._pump,
            )
            signature = await signer.sign_and_send_solana_transaction(transaction)
            logger.info(f"Sold {token_amount} of {mint}: {signature}")
            return {"status": "success", "signature": signature}
        except Exception as e:
            logger.exception(f"pump.fun sell failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class PumpFunSellPlugin:
    def __init__(self):
        self.name = "sell_pump_fun_token"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for selling pump.fun tokens."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = PumpFunSellTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return PumpFunSellPlugin()
