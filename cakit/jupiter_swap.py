import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.jupiter import create_trade_transaction
from cakit.utils.wallet import create_rpc

logger = logging.getLogger(__name__)

DESCRIPTION = """Perform a swap from input_mint to output_mint on Jupiter.

The input_amount has to account for decimals, e.g. 1 token with 6 decimals
is 1000000.

Both input_mint and output_mint have to be valid Solana token mints.

slippage_bps is the slippage in basis points; 50-100 bps is fine for most
tokens."""


class JupiterSwapTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="perform_jupiter_swap",
            description=DESCRIPTION,
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._rpc_url: Optional[str] = None
        self._jupiter_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "input_mint": {
                    "type": "string",
                    "description": "Mint of the token to sell.",
                },
                "input_amount": {
                    "type": "integer",
                    "description": "Raw amount of input_mint to swap, accounting for decimals.",
                },
                "output_mint": {
                    "type": "string",
                    "description": "Mint of the token to buy.",
                },
                "slippage_bps": {
                    "type": "integer",
                    "description": "Slippage tolerance in basis points.",
                },
            },
            "required": ["input_mint", "input_amount", "output_mint", "slippage_bps"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("perform_jupiter_swap", {})
        self._rpc_url = tool_cfg.get("rpc_url")
        self._jupiter_url = tool_cfg.get("jupiter_url")

    async def execute(
        self,
        input_mint: str,
        input_amount: int,
        output_mint: str,
        slippage_bps: int,
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            async with create_rpc(self._rpc_url) as client:
                transaction = await create_trade_transaction(
                    input_mint,
                    input_amount,
                    output_mint,
                    slippage_bps,
                    owner,
                    client,
                    jupiter_url=self._jupiter_url,
                )
            signature = await signer.sign_and_send_solana_transaction(transaction)
            logger.info(f"Jupiter swap {input_mint} -> {output_mint} sent: {signature}")
            return {"status": "success", "signature": signature}
        except Exception as e:
            logger.exception(f"Jupiter swap failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class JupiterSwapPlugin:
    def __init__(self):
        self.name = "perform_jupiter_swap"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for swapping Solana tokens through Jupiter."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = JupiterSwapTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return JupiterSwapPlugin()
