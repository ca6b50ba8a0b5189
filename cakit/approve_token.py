import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry

from cakit.signer.context import SignerContext
from cakit.utils.approvals import create_approval_transaction
from cakit.utils.evm import EVM_CHAINS, chain_id_for, parse_amount

logger = logging.getLogger(__name__)


class ApproveTokenTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="approve_token",
            description=(
                "Approve an ERC-20 token for a spender, e.g. the approval address "
                "of a multichain quote. token_address is the token contract, "
                "spender_address the address that needs approval and amount the "
                "raw amount (accounting for decimals) to approve."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}

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
                    "description": "Raw amount to approve, as a string.",
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

    async def execute(
        self, token_address: str, spender_address: str, amount: str, chain: str
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            transaction = create_approval_transaction(
                token_address,
                spender_address,
                parse_amount(amount),
                signer.address(),
                chain_id_for(chain),
            )
            tx_hash = await signer.sign_and_send_json_evm_transaction(transaction)
            logger.info(f"Approved {spender_address} for {token_address}: {tx_hash}")
            return {"status": "success", "message": "Approved", "transaction": tx_hash}
        except Exception as e:
            logger.exception(f"Token approval failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class ApproveTokenPlugin:
    def __init__(self):
        self.name = "approve_token"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for granting ERC-20 approvals."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = ApproveTokenTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return ApproveTokenPlugin()
