import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.transfer import create_transfer_spl_tx
from cakit.utils.wallet import create_rpc

logger = logging.getLogger(__name__)


class TransferSplTokenTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="transfer_spl_token",
            description=(
                "Transfer an SPL or Token-2022 token to a wallet. amount is the raw "
                "amount accounting for decimals, e.g. 1 USDC is 1000000. The "
                "recipient's token account is created when missing."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._rpc_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "to": {
                    "type": "string",
                    "description": "Recipient wallet address (not a token account).",
                },
                "amount": {
                    "type": "integer",
                    "description": "Raw token amount to send.",
                },
                "mint": {
                    "type": "string",
                    "description": "Mint of the token to send.",
                },
                "memo": {
                    "type": "string",
                    "description": "Optional memo for the transaction, empty for none.",
                },
            },
            "required": ["to", "amount", "mint", "memo"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        self._rpc_url = (
            config.get("tools", {}).get("transfer_spl_token", {}).get("rpc_url")
        )

    async def execute(
        self, to: str, amount: int, mint: str, memo: str = ""
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            async with create_rpc(self._rpc_url) as client:
                transaction = await create_transfer_spl_tx(
                    Pubkey.from_string(to),
                    amount,
                    Pubkey.from_string(mint),
                    owner,
                    client,
                    memo=memo,
                )
            signature = await signer.sign_and_send_solana_transaction(transaction)
            logger.info(f"Transferred {amount} of {mint} to {to}: {signature}")
            return {"status": "success", "signature": signature}
        except Exception as e:
            logger.exception(f"SPL transfer failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class TransferSplTokenPlugin:
    def __init__(self):
        self.name = "transfer_spl_token"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for transferring SPL tokens."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = TransferSplTokenTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return TransferSplTokenPlugin()
