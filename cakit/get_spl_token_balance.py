import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.pubkey import Pubkey
from spl.token.async_client import AsyncToken
from spl.token.instructions import get_associated_token_address

from cakit.signer.context import SignerContext
from cakit.utils.wallet import create_rpc, get_token_program_id

logger = logging.getLogger(__name__)


class GetSplTokenBalanceTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="get_spl_token_balance",
            description=(
                "Get the current user's balance of a token. Returns the raw amount "
                "as a string and the decimals; the UI amount is "
                "amount / 10^decimals."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._rpc_url: Optional[str] = None

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "mint": {
                    "type": "string",
                    "description": "Mint of the token.",
                },
            },
            "required": ["mint"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        self._rpc_url = (
            config.get("tools", {}).get("get_spl_token_balance", {}).get("rpc_url")
        )

    async def execute(self, mint: str) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            mint_pubkey = Pubkey.from_string(mint)
            async with create_rpc(self._rpc_url) as client:
                program_id = await get_token_program_id(client, mint_pubkey)
                ata = get_associated_token_address(owner, mint_pubkey, program_id)
                account = await client.get_account_info(ata)
                if account.value is None:
                    # no token account yet
                    token = AsyncToken(client, mint_pubkey, program_id, None)
                    mint_info = await token.get_mint_info()
                    return {
                        "status": "success",
                        "amount": "0",
                        "decimals": mint_info.decimals,
                    }
                resp = await client.get_token_account_balance(ata)
            return {
                "status": "success",
                "amount": resp.value.amount,
                "decimals": resp.value.decimals,
            }
        except Exception as e:
            logger.exception(f"Failed to get token balance: {str(e)}")
            return {"status": "error", "message": str(e)}


class GetSplTokenBalancePlugin:
    def __init__(self):
        self.name = "get_spl_token_balance"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for reading the current wallet's token balances."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = GetSplTokenBalanceTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return GetSplTokenBalancePlugin()
