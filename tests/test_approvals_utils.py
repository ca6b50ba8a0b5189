"""
Tests for ERC-20 allowance and approval helpers.
"""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from web3 import Web3

from cakit.utils.approvals import (
    MAX_UINT256,
    create_approval_transaction,
    get_allowance,
)

TOKEN = "0x" + "aa" * 20
SPENDER = "0x" + "bb" * 20
OWNER = "0x" + "cc" * 20


class TestCreateApprovalTransaction:
    def test_builds_approve_calldata(self):
        tx = create_approval_transaction(TOKEN, SPENDER, 1000, OWNER, 42161)

        assert tx["to"] == Web3.to_checksum_address(TOKEN)
        assert tx["from"] == Web3.to_checksum_address(OWNER)
        assert tx["chainId"] == "0xa4b1"
        assert tx["value"] == "0x0"
        # approve(address,uint256) selector
        assert tx["data"].startswith("0x095ea7b3")
        assert tx["data"].endswith(format(1000, "064x"))
        assert "bb" * 20 in tx["data"]

    def test_max_amount(self):
        tx = create_approval_transaction(TOKEN, SPENDER, MAX_UINT256, OWNER, 1)
        assert tx["data"].endswith("f" * 64)

    @pytest.mark.parametrize("amount", [-1, MAX_UINT256 + 1])
    def test_out_of_range(self, amount):
        with pytest.raises(ValueError, match="Invalid approval amount"):
            create_approval_transaction(TOKEN, SPENDER, amount, OWNER, 1)


class TestGetAllowance:
    @pytest.mark.asyncio
    async def test_reads_allowance(self):
        mock_w3 = MagicMock()
        contract = MagicMock()
        contract.functions.allowance.return_value.call = AsyncMock(return_value=500)
        mock_w3.eth.contract.return_value = contract

        with patch("cakit.utils.approvals.create_web3", return_value=mock_w3):
            allowance = await get_allowance(TOKEN, OWNER, SPENDER, "https://rpc.test")

        assert allowance == 500
        contract.functions.allowance.assert_called_once_with(
            Web3.to_checksum_address(OWNER), Web3.to_checksum_address(SPENDER)
        )
