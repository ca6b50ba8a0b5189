import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry

from cakit.signer.context import SignerContext
from cakit.utils.approvals import get_allowance
from cakit.utils.evm import EVM_CHAINS, chain_id_for, parse_amount, rpc_url_for

logger = logging.getLogger(__name__)


class CheckApprovalTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="check_approval",
            description=(
                "Check if an ERC-20 token has enough approval for a spender. "
                "token_address is the token contract, spender_address the address "
                "that needs approval and amount the raw amount (accounting for "
                "decimals) to check. Returns approved true or false."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._evm_rpc_urls: Dict[Any, str] = {}

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "token_address": {
                    "type": "string",
                    "description": "ERC-20 token contract address.",
                },
                "spender_address": {
                    "type": "string",
                    "description": "Address that needs the approval.",
                },
                "amount": {
                    "type": "string",
                    "description": "Raw amount to check, as a string.",
                },
                "chain": {
                    "type": "string",
                    "enum": EVM_CHAINS,
                    "description": "EVM chain the token lives on.",
                },
            },
            "required": ["token_address", "spender_address", "amount", "chain"],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("check_approval", {})
        self._evm_rpc_urls = tool_cfg.get("evm_rpc_urls", {})

    async def execute(
        self, token_address: str, spender_address: str, amount: str, chain: str
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            required = parse_amount(amount)
            rpc_url = rpc_url_for(chain_id_for(chain), self._evm_rpc_urls)
            allowance = await get_allowance(
                token_address, signer.address(), spender_address, rpc_url
            )
            return {
                "status": "success",
                "approved": allowance >= required,
                "allowance": str(allowance),
            }
        except Exception as e:
            logger.exception(f"Approval check failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class CheckApprovalPlugin:
    def __init__(self):
        self.name = "check_approval"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for checking ERC-20 allowances."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = CheckApprovalTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return CheckApprovalPlugin()
