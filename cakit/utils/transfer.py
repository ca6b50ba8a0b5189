import logging
from typing import List

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Finalized
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction
from spl.token.async_client import AsyncToken
from spl.token.instructions import (
    TransferCheckedParams as SPLTransferParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer_checked as spl_transfer,
)

from cakit.utils.wallet import get_token_program_id

logger = logging.getLogger(__name__)

MEMO_PROGRAM_ID = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"


def make_memo_instruction(memo: str) -> Instruction:
    return Instruction(
        program_id=Pubkey.from_string(MEMO_PROGRAM_ID),
        accounts=[],
        data=memo.encode("utf-8"),
    )


async def _build_unsigned(
    client: AsyncClient, instructions: List[Instruction], payer: Pubkey
) -> Transaction:
    blockhash_response = await client.get_latest_blockhash(commitment=Finalized)
    msg = Message.new_with_blockhash(
        instructions, payer, blockhash_response.value.blockhash
    )
    return Transaction.new_unsigned(msg)


async def create_transfer_sol_tx(
    to: Pubkey,
    lamports: int,
    owner: Pubkey,
    client: AsyncClient,
    memo: str = "",
) -> Transaction:
    """Build an unsigned SOL transfer of `lamports` from owner to `to`."""
    if lamports <= 0:
        raise ValueError("Transfer amount must be positive")
    ixs = [transfer(TransferParams(from_pubkey=owner, to_pubkey=to, lamports=lamports))]
    if memo:
        ixs.append(make_memo_instruction(memo))
    return await _build_unsigned(client, ixs, owner)


async def create_transfer_spl_tx(
    to: Pubkey,
    amount: int,
    mint: Pubkey,
    owner: Pubkey,
    client: AsyncClient,
    memo: str = "",
) -> Transaction:
    """
    Build an unsigned SPL or Token-2022 transfer.

    :param to: Recipient wallet (not token account)
    :param amount: Raw token amount, accounting for decimals
    :param mint: Token mint
    :param owner: Sender wallet, also the fee payer
    :param client: Solana RPC client
    :param memo: Optional memo
    :return: Unsigned Transaction
    """
    if amount <= 0:
        raise ValueError("Transfer amount must be positive")
    program_id = await get_token_program_id(client, mint)
    token = AsyncToken(client, mint, program_id, None)
    mint_info = await token.get_mint_info()

    from_ata = get_associated_token_address(owner, mint, program_id)
    to_ata = get_associated_token_address(to, mint, program_id)

    ixs = []
    to_account = await client.get_account_info(to_ata)
    if to_account.value is None:
        logger.info(f"Creating associated token account {to_ata} for {to}")
        ixs.append(create_associated_token_account(owner, to, mint, program_id))

    ixs.append(
        spl_transfer(
            SPLTransferParams(
                program_id=program_id,
                source=from_ata,
                mint=mint,
                dest=to_ata,
                owner=owner,
                amount=amount,
                decimals=mint_info.decimals,
            )
        )
    )
    if memo:
        ixs.append(make_memo_instruction(memo))
    return await _build_unsigned(client, ixs, owner)
