import logging
from typing import Dict, Any, List, Optional

from solana_agent import AutoTool, ToolRegistry
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from cakit.signer.context import SignerContext
from cakit.utils.pump import DeployTokenParams, PumpPortal, create_deploy_token_tx

logger = logging.getLogger(__name__)


class PumpFunDeployTool(AutoTool):
    def __init__(self, registry: Optional[ToolRegistry] = None):
        super().__init__(
            name="deploy_pump_fun_token",
            description=(
                "Deploy a new token on pump.fun. The image is fetched from image_url "
                "and uploaded with the metadata. dev_buy is an optional initial buy "
                "in lamports (0 for none); pass empty strings for missing socials."
            ),
            registry=registry,
        )
        self._config: Dict[str, Any] = {}
        self._pump = PumpPortal()

    def get_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Token name."},
                "symbol": {"type": "string", "description": "Token ticker."},
                "twitter": {"type": "string", "description": "Twitter/X link."},
                "website": {"type": "string", "description": "Website link."},
                "dev_buy": {
                    "type": "integer",
                    "description": "Initial dev buy in lamports, 0 for none.",
                },
                "telegram": {"type": "string", "description": "Telegram link."},
                "image_url": {
                    "type": "string",
                    "description": "URL of the token image.",
                },
                "description": {
                    "type": "string",
                    "description": "Token description.",
                },
            },
            "required": [
                "name",
                "symbol",
                "twitter",
                "website",
                "dev_buy",
                "telegram",
                "image_url",
                "description",
            ],
            "additionalProperties": False,
        }

    def configure(self, config: Dict[str, Any]) -> None:
        super().configure(config)
        self._config = config
        tool_cfg = config.get("tools", {}).get("deploy_pump_fun_token", {})
        self._pump = PumpPortal.from_config(tool_cfg)

    async def execute(
        self,
        name: str,
        symbol: str,
        twitter: str,
        website: str,
        dev_buy: int,
        telegram: str,
        image_url: str,
        description: str,
    ) -> Dict[str, Any]:
        try:
            signer = await SignerContext.current_or(self._config)
            owner = Pubkey.from_string(signer.pubkey())
            mint_keypair = Keypair()
            params = DeployTokenParams(
                name=name,
                symbol=symbol,
                description=description,
                image_url=image_url,
                twitter=twitter or None,
                website=website or None,
                telegram=telegram or None,
                dev_buy=dev_buy or None,
            )
            transaction = await create_deploy_token_tx(
                params, owner, pump=self._pump, mint_keypair=mint_keypair
            )
            signature = await signer.sign_and_send_solana_transaction(transaction)
            mint = str(mint_keypair.pubkey())
            logger.info(f"Deployed pump.fun token {symbol} at {mint}: {signature}")
            return {"status": "success", "signature": signature, "mint": mint}
        except Exception as e:
            logger.exception(f"pump.fun deploy failed: {str(e)}")
            return {"status": "error", "message": str(e)}


class PumpFunDeployPlugin:
    def __init__(self):
        self.name = "deploy_pump_fun_token"
        self.config = None
        self.tool_registry = None
        self._tool = None

    @property
    def description(self):
        return "Plugin for deploying tokens on pump.fun."

    def initialize(self, tool_registry: ToolRegistry) -> None:
        self.tool_registry = tool_registry
        self._tool = PumpFunDeployTool(registry=tool_registry)

    def configure(self, config: Dict[str, Any]) -> None:
        self.config = config
        if self._tool:
            self._tool.configure(self.config)

    def get_tools(self) -> List[AutoTool]:
        return [self._tool] if self._tool else []


def get_plugin():
    return PumpFunDeployPlugin()
