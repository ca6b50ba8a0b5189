"""
Tests for the Privy wallet manager.

Covers access token validation, delegated wallet lookup, user and wallet
endpoints, and signing through the Privy wallet RPC.
"""

import time

import jwt
import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from cakit.utils.wallet_manager import (
    SOLANA_MAINNET_CAIP2,
    PrivyConfig,
    UserSession,
    WalletManager,
    WalletManagerError,
    convert_key_to_pkcs8_pem,
    find_wallet,
)

APP_ID = "test-app-id"


def pem_body(pem: bytes) -> str:
    return "".join(pem.decode("utf-8").strip().split("\n")[1:-1])


@pytest.fixture
def signing_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def manager(signing_key):
    verification_key = signing_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return WalletManager(
        PrivyConfig(
            app_id=APP_ID,
            app_secret="test-app-secret",
            verification_key=verification_key.decode("utf-8"),
        ),
        evm_rpc_urls={42161: "https://arb.test"},
    )


def make_token(key, **overrides):
    claims = {
        "sub": "did:privy:user123",
        "sid": "session-1",
        "iss": "privy.io",
        "aud": APP_ID,
        "iat": int(time.time()),
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, key, algorithm="ES256")


LINKED_ACCOUNTS = [
    {"type": "email", "address": "user@example.com"},
    {
        "type": "wallet",
        "id": "sol-wallet",
        "address": "SolPubkey123",
        "chain_type": "solana",
        "wallet_client": "privy",
        "delegated": True,
    },
    {
        "type": "wallet",
        "id": "evm-wallet",
        "address": "0x" + "33" * 20,
        "chain_type": "ethereum",
        "wallet_client_type": "privy",
        "delegated": True,
    },
]


def mock_http(response):
    mock_instance = AsyncMock()
    mock_instance.post = AsyncMock(return_value=response)
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=None)
    return mock_instance


class TestPrivyConfig:
    def test_from_dict_maps_signing_key(self):
        config = PrivyConfig.from_dict(
            {"app_id": "a", "app_secret": "b", "signing_key": "wallet-auth:c"}
        )
        assert config.authorization_key == "wallet-auth:c"
        assert config.verification_key == ""


class TestFindWallet:
    """Test delegated wallet lookup."""

    def test_finds_solana_wallet(self):
        assert find_wallet(LINKED_ACCOUNTS, "solana")["id"] == "sol-wallet"

    def test_accepts_wallet_client_type(self):
        assert find_wallet(LINKED_ACCOUNTS, "ethereum")["id"] == "evm-wallet"

    def test_ignores_non_delegated(self):
        accounts = [dict(LINKED_ACCOUNTS[1], delegated=False)]
        with pytest.raises(WalletManagerError, match="delegated solana wallet"):
            find_wallet(accounts, "solana")

    def test_ignores_other_clients(self):
        accounts = [dict(LINKED_ACCOUNTS[1], wallet_client="phantom")]
        with pytest.raises(WalletManagerError):
            find_wallet(accounts, "solana")


class TestValidateAccessToken:
    """Test ES256 access token validation."""

    def test_valid_token(self, manager, signing_key):
        claims = manager.validate_access_token(make_token(signing_key))
        assert claims["sub"] == "did:privy:user123"

    def test_wrong_audience(self, manager, signing_key):
        with pytest.raises(WalletManagerError, match="Failed to authenticate"):
            manager.validate_access_token(make_token(signing_key, aud="other-app"))

    def test_wrong_issuer(self, manager, signing_key):
        with pytest.raises(WalletManagerError, match="Failed to authenticate"):
            manager.validate_access_token(make_token(signing_key, iss="evil.io"))

    def test_expired(self, manager, signing_key):
        with pytest.raises(WalletManagerError):
            manager.validate_access_token(
                make_token(signing_key, exp=int(time.time()) - 60)
            )

    def test_wrong_key(self, manager):
        other_key = ec.generate_private_key(ec.SECP256R1())
        with pytest.raises(WalletManagerError):
            manager.validate_access_token(make_token(other_key))


class TestAuthenticateUser:
    @pytest.mark.asyncio
    async def test_builds_session(self, manager, signing_key):
        with patch.object(
            manager,
            "get_user_by_id",
            new_callable=AsyncMock,
            return_value={"id": "did:privy:user123", "linked_accounts": LINKED_ACCOUNTS},
        ) as mock_get_user:
            session = await manager.authenticate_user(make_token(signing_key))

        mock_get_user.assert_awaited_once_with("did:privy:user123")
        assert session == UserSession(
            user_id="did:privy:user123",
            session_id="session-1",
            wallet_address="0x" + "33" * 20,
            pubkey="SolPubkey123",
            evm_wallet_id="evm-wallet",
            solana_wallet_id="sol-wallet",
        )

    @pytest.mark.asyncio
    async def test_missing_wallet(self, manager, signing_key):
        with patch.object(
            manager,
            "get_user_by_id",
            new_callable=AsyncMock,
            return_value={"id": "did:privy:user123", "linked_accounts": []},
        ):
            with pytest.raises(WalletManagerError, match="delegated"):
                await manager.authenticate_user(make_token(signing_key))

    @pytest.mark.asyncio
    async def test_get_user_by_id(self, manager):
        user = MagicMock()
        user.model_dump.return_value = {"id": "did:privy:user123"}
        client = MagicMock()
        client.users.get = AsyncMock(return_value=user)
        manager._privy_client = client

        assert await manager.get_user_by_id("did:privy:user123") == {
            "id": "did:privy:user123"
        }


class TestUserEndpoints:
    """Test the REST endpoints used for onboarding."""

    @pytest.mark.asyncio
    async def test_get_user_by_telegram(self, manager):
        response = MagicMock(status_code=200, json=lambda: {"id": "did:privy:abc"})
        with patch("httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_http(response)
            result = await manager.get_user_by_telegram("12345")

        assert result == {"id": "did:privy:abc"}

    @pytest.mark.asyncio
    async def test_get_user_by_telegram_not_found(self, manager):
        response = MagicMock(status_code=404)
        with patch("httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_http(response)
            assert await manager.get_user_by_telegram("12345") is None

    @pytest.mark.asyncio
    async def test_get_user_by_telegram_error(self, manager):
        response = MagicMock(status_code=500, text="Internal Error")
        with patch("httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_http(response)
            with pytest.raises(WalletManagerError, match="Internal Error"):
                await manager.get_user_by_telegram("12345")

    @pytest.mark.asyncio
    async def test_create_wallet(self, manager):
        response = MagicMock(status_code=200, json=lambda: {"id": "wallet-1"})
        with patch("httpx.AsyncClient") as MockClient:
            http = mock_http(response)
            MockClient.return_value = http
            result = await manager.create_wallet("did:privy:abc")

        assert result == {"id": "wallet-1"}
        body = http.post.call_args.kwargs["json"]
        assert body == {"chain_type": "solana", "owner": {"user_id": "did:privy:abc"}}
        headers = http.post.call_args.kwargs["headers"]
        assert headers["privy-app-id"] == APP_ID
        assert headers["Authorization"].startswith("Basic ")


class TestWalletRpc:
    """Test signing through the Privy wallet RPC."""

    @pytest.mark.asyncio
    async def test_solana_sign_and_send(self, manager):
        result = MagicMock()
        result.model_dump.return_value = {"data": {"hash": "SolHash123"}}
        client = MagicMock()
        client.wallets.rpc = AsyncMock(return_value=result)
        manager._privy_client = client

        tx_hash = await manager.sign_and_send_encoded_solana_transaction(
            "sol-wallet", "AQID"
        )

        assert tx_hash == "SolHash123"
        kwargs = client.wallets.rpc.call_args.kwargs
        assert kwargs["wallet_id"] == "sol-wallet"
        assert kwargs["method"] == "signAndSendTransaction"
        assert kwargs["params"] == {"transaction": "AQID", "encoding": "base64"}
        assert kwargs["caip2"] == SOLANA_MAINNET_CAIP2
        assert "privy_authorization_signature" not in kwargs

    @pytest.mark.asyncio
    async def test_solana_missing_hash(self, manager):
        result = MagicMock()
        result.model_dump.return_value = {"data": {}}
        client = MagicMock()
        client.wallets.rpc = AsyncMock(return_value=result)
        manager._privy_client = client

        with pytest.raises(WalletManagerError, match="no transaction hash"):
            await manager.sign_and_send_encoded_solana_transaction("sol-wallet", "AQID")

    @pytest.mark.asyncio
    async def test_rpc_error_wrapped(self, manager):
        client = MagicMock()
        client.wallets.rpc = AsyncMock(side_effect=Exception("Wallet not delegated"))
        manager._privy_client = client

        with pytest.raises(WalletManagerError, match="Wallet not delegated"):
            await manager.sign_and_send_encoded_solana_transaction("sol-wallet", "AQID")

    @pytest.mark.asyncio
    async def test_authorization_signature_added(self, manager):
        manager.privy_config.authorization_key = "wallet-auth:key"
        result = MagicMock()
        result.model_dump.return_value = {"data": {"hash": "SolHash123"}}
        client = MagicMock()
        client.wallets.rpc = AsyncMock(return_value=result)
        manager._privy_client = client

        with (
            patch(
                "cakit.utils.wallet_manager.convert_key_to_pkcs8_pem",
                return_value="pkcs8",
            ),
            patch(
                "cakit.utils.wallet_manager.get_authorization_signature",
                return_value="auth-signature",
            ) as mock_sign,
        ):
            await manager.sign_and_send_encoded_solana_transaction("sol-wallet", "AQID")

        assert mock_sign.call_args.kwargs["private_key"] == "pkcs8"
        assert mock_sign.call_args.kwargs["url"].endswith("/wallets/sol-wallet/rpc")
        kwargs = client.wallets.rpc.call_args.kwargs
        assert kwargs["privy_authorization_signature"] == "auth-signature"

    @pytest.mark.asyncio
    async def test_evm_sign_then_broadcast(self, manager):
        prepared = {
            "from": "0x" + "33" * 20,
            "to": "0x" + "44" * 20,
            "value": 0,
            "data": "0x",
            "chainId": 42161,
            "nonce": 1,
            "gas": 21000,
            "gasPrice": 100,
        }
        result = MagicMock()
        result.model_dump.return_value = {"data": {"signed_transaction": "0xf86c"}}
        client = MagicMock()
        client.wallets.rpc = AsyncMock(return_value=result)
        manager._privy_client = client
        mock_w3 = MagicMock()
        mock_w3.eth.send_raw_transaction = AsyncMock(return_value=b"\xab" * 32)

        with (
            patch(
                "cakit.utils.wallet_manager.create_web3", return_value=mock_w3
            ) as mock_create,
            patch(
                "cakit.utils.wallet_manager.prepare_transaction",
                new_callable=AsyncMock,
                return_value=prepared,
            ),
        ):
            tx_hash = await manager.sign_and_send_json_evm_transaction(
                "evm-wallet", prepared["from"], {"chainId": "0xa4b1"}
            )

        assert tx_hash == "0x" + "ab" * 32
        mock_create.assert_called_once_with("https://arb.test")
        mock_w3.eth.send_raw_transaction.assert_awaited_once_with("0xf86c")
        kwargs = client.wallets.rpc.call_args.kwargs
        assert kwargs["method"] == "eth_signTransaction"
        assert kwargs["chain_type"] == "ethereum"
        privy_tx = kwargs["params"]["transaction"]
        assert privy_tx["type"] == 0
        assert privy_tx["chain_id"] == 42161
        assert privy_tx["gas_limit"] == hex(21000)

    @pytest.mark.asyncio
    async def test_evm_missing_chain_id(self, manager):
        with pytest.raises(WalletManagerError, match="chainId"):
            await manager.sign_and_send_json_evm_transaction("evm-wallet", "0x0", {})


class TestConvertKeyToPkcs8Pem:
    """Test authorization key normalization."""

    def test_pkcs8_passthrough(self, signing_key):
        body = pem_body(
            signing_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        assert convert_key_to_pkcs8_pem(f"wallet-auth:{body}") == body

    def test_sec1_converted(self, signing_key):
        pkcs8 = pem_body(
            signing_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        sec1 = pem_body(
            signing_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        assert convert_key_to_pkcs8_pem(sec1) == pkcs8
