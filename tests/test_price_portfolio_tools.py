"""
Tests for the token price and portfolio tools.
"""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from solders.keypair import Keypair

from cakit.fetch_token_price import FetchTokenPriceTool, FetchTokenPricePlugin
from cakit.get_portfolio import GetPortfolioTool, GetPortfolioPlugin
from cakit.signer.context import SignerContext
from cakit.utils.portfolio import PortfolioItem

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class TestFetchTokenPriceTool:
    @pytest.mark.asyncio
    async def test_success(self):
        tool = FetchTokenPriceTool()
        tool.configure(
            {"tools": {"fetch_token_price": {"price_url": "https://price.test"}}}
        )
        with patch(
            "cakit.fetch_token_price.fetch_token_price",
            new_callable=AsyncMock,
            return_value=1.0001,
        ) as mock_price:
            result = await tool.execute(USDC)

        assert result == {"status": "success", "mint": USDC, "price": 1.0001}
        mock_price.assert_awaited_once_with(USDC, "https://price.test")

    @pytest.mark.asyncio
    async def test_no_price(self):
        with patch(
            "cakit.fetch_token_price.fetch_token_price",
            new_callable=AsyncMock,
            side_effect=ValueError("No price available for Unknown"),
        ):
            result = await FetchTokenPriceTool().execute("Unknown")

        assert result == {
            "status": "error",
            "message": "No price available for Unknown",
        }


class TestGetPortfolioTool:
    @pytest.mark.asyncio
    async def test_success(self):
        signer = MagicMock()
        signer.pubkey.return_value = str(Keypair().pubkey())
        rpc = MagicMock()
        rpc.__aenter__ = AsyncMock(return_value=MagicMock())
        rpc.__aexit__ = AsyncMock(return_value=None)
        portfolio = [
            PortfolioItem(mint=USDC, amount=5.0, decimals=6, price=1.0, value=5.0),
            PortfolioItem(mint="X", amount=1.0, decimals=0, price=None, value=None),
        ]

        with (
            patch("cakit.get_portfolio.create_rpc", return_value=rpc),
            patch(
                "cakit.get_portfolio.get_holdings",
                new_callable=AsyncMock,
                return_value=[],
            ),
            patch(
                "cakit.get_portfolio.holdings_to_portfolio",
                new_callable=AsyncMock,
                return_value=portfolio,
            ),
        ):
            result = await SignerContext.with_signer(
                signer, GetPortfolioTool().execute()
            )

        assert result["status"] == "success"
        assert result["total_value"] == 5.0
        assert result["portfolio"][0] == {
            "mint": USDC,
            "amount": 5.0,
            "decimals": 6,
            "price": 1.0,
            "value": 5.0,
        }

    @pytest.mark.asyncio
    async def test_no_signer(self):
        result = await GetPortfolioTool().execute()
        assert result["status"] == "error"


class TestPricePortfolioPlugins:
    def test_plugins(self):
        for plugin_class, name in (
            (FetchTokenPricePlugin, "fetch_token_price"),
            (GetPortfolioPlugin, "get_portfolio"),
        ):
            plugin = plugin_class()
            assert plugin.name == name
            plugin.initialize(MagicMock())
            assert len(plugin.get_tools()) == 1
