import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry

from cakit.signer.context import SignerContext

logger = logging.getLogger(__name__)


class GetPublicKeyTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="get_public_key",
            description="Get the Solana public key (wallet address) of the current user.",
            registry=registry,
        )
        self._config: Dict[str, Any] = {}

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

    async def execute(self) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            return {"status": "success", "pubkey": signer.pubkey()}
        except Exception as e:
            logger.exception(f"Failed to get public key: {str(e)}")
            return {"status": "error", "message": str(e)}


class GetPublicKeyPlugin:
    def __init__(self):
        self.name = "get_public_key"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for reading the current wallet's public key."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = GetPublicKeyTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return GetPublicKeyPlugin()
