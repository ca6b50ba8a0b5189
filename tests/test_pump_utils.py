"""
Tests for the pump.fun helpers.
"""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message, to_bytes_versioned
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from cakit.utils.pump import (
    DEFAULT_PRIORITY_FEE_SOL,
    DeployTokenParams,
    PumpPortal,
    bps_to_percent,
    create_buy_pump_fun_tx,
    create_deploy_token_tx,
    create_sell_pump_fun_tx,
)


def unsigned_tx(payer, *signers):
    ixs = [
        transfer(
            TransferParams(
                from_pubkey=key.pubkey(), to_pubkey=payer.pubkey(), lamports=1
            )
        )
        for key in signers
    ]
    ixs.insert(
        0,
        transfer(
            TransferParams(
                from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=1
            )
        ),
    )
    msg = Message.new_with_blockhash(ixs, payer.pubkey(), Hash.default())
    return VersionedTransaction.populate(
        msg, [Signature.default()] * msg.header.num_required_signatures
    )


def mock_pump(tx):
    pump = MagicMock()
    pump.upload_metadata = AsyncMock(return_value="https://ipfs.io/ipfs/meta")
    pump.trade_local = AsyncMock(return_value=tx)
    return pump


class TestPumpPortal:
    def test_from_config(self):
        pump = PumpPortal.from_config(
            {"pumpportal_url": "https://pp.test", "priority_fee": 0.001}
        )
        assert pump.base_url == "https://pp.test"
        assert pump.priority_fee == 0.001

    def test_defaults(self):
        pump = PumpPortal.from_config({})
        assert pump.base_url == "https://pumpportal.fun/api"
        assert pump.priority_fee == DEFAULT_PRIORITY_FEE_SOL

    @pytest.mark.asyncio
    async def test_trade_local(self):
        tx = unsigned_tx(Keypair())
        response = MagicMock(status_code=200, content=bytes(tx))
        with patch("httpx.AsyncClient") as MockClient:
            http = AsyncMock()
            http.post = AsyncMock(return_value=response)
            http.__aenter__ = AsyncMock(return_value=http)
            http.__aexit__ = AsyncMock(return_value=None)
            MockClient.return_value = http

            result = await PumpPortal().trade_local({"action": "buy"})

        assert bytes(result) == bytes(tx)
        body = http.post.call_args.kwargs["json"]
        assert body["action"] == "buy"
        assert body["pool"] == "pump"
        assert body["priorityFee"] == DEFAULT_PRIORITY_FEE_SOL

    @pytest.mark.asyncio
    async def test_trade_local_error(self):
        response = MagicMock(status_code=400, text="Bad Request")
        with patch("httpx.AsyncClient") as MockClient:
            http = AsyncMock()
            http.post = AsyncMock(return_value=response)
            http.__aenter__ = AsyncMock(return_value=http)
            http.__aexit__ = AsyncMock(return_value=None)
            MockClient.return_value = http

            with pytest.raises(Exception, match="Bad Request"):
                await PumpPortal().trade_local({"action": "buy"})


class TestDeploy:
    @pytest.mark.asyncio
    async def test_partially_signed_by_mint(self):
        owner = Keypair()
        mint = Keypair()
        pump = mock_pump(unsigned_tx(owner, mint))
        params = DeployTokenParams(
            name="Test",
            symbol="TST",
            description="A test token",
            image_url="https://example.com/img.png",
            dev_buy=500000000,
        )

        tx = await create_deploy_token_tx(
            params, owner.pubkey(), pump=pump, mint_keypair=mint
        )

        message_bytes = to_bytes_versioned(tx.message)
        assert tx.signatures[0] == Signature.default()
        assert tx.signatures[1] == mint.sign_message(message_bytes)
        payload = pump.trade_local.call_args.args[0]
        assert payload["action"] == "create"
        assert payload["mint"] == str(mint.pubkey())
        assert payload["amount"] == 0.5
        assert payload["tokenMetadata"]["uri"] == "https://ipfs.io/ipfs/meta"


class TestTrade:
    @pytest.mark.asyncio
    async def test_buy_payload(self):
        owner = Keypair().pubkey()
        pump = mock_pump(MagicMock())

        await create_buy_pump_fun_tx("MintAddr", 250000000, 300, owner, pump=pump)

        payload = pump.trade_local.call_args.args[0]
        assert payload == {
            "publicKey": str(owner),
            "action": "buy",
            "mint": "MintAddr",
            "denominatedInSol": "true",
            "amount": 0.25,
            "slippage": 3.0,
        }

    @pytest.mark.asyncio
    async def test_sell_payload(self):
        pump = mock_pump(MagicMock())

        await create_sell_pump_fun_tx(
            "MintAddr", 2500000, Keypair().pubkey(), pump=pump
        )

        payload = pump.trade_local.call_args.args[0]
        assert payload["action"] == "sell"
        assert payload["denominatedInSol"] == "false"
        assert payload["amount"] == 2.5
        assert payload["slippage"] == 5.0

    @pytest.mark.asyncio
    async def test_rejects_zero_amounts(self):
        with pytest.raises(ValueError):
            await create_buy_pump_fun_tx("MintAddr", 0, 300, Keypair().pubkey())
        with pytest.raises(ValueError):
            await create_sell_pump_fun_tx("MintAddr", 0, Keypair().pubkey())

    def test_bps_to_percent(self):
        assert bps_to_percent(50) == 0.5
