import base64
import logging
from typing import Any, Dict, List, Optional

import httpx
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Finalized
from solders.address_lookup_table_account import (
    AddressLookupTable,
    AddressLookupTableAccount,
)
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

logger = logging.getLogger(__name__)

JUP_API = "https://quote-api.jup.ag/v6"


class Jupiter:
    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or JUP_API

    @staticmethod
    def parse_instruction(ix_obj: Dict[str, Any]) -> Instruction:
        program_id = Pubkey.from_string(ix_obj["programId"])
        accounts = [
            AccountMeta(
                pubkey=Pubkey.from_string(acc["pubkey"]),
                is_signer=acc["isSigner"],
                is_writable=acc["isWritable"],
            )
            for acc in ix_obj["accounts"]
        ]
        data = base64.b64decode(ix_obj["data"])
        return Instruction(program_id=program_id, accounts=accounts, data=data)

    @staticmethod
    def parse_instruction_list(ix_list: List[Dict[str, Any]]) -> List[Instruction]:
        return [Jupiter.parse_instruction(ix) for ix in ix_list or []]

    @staticmethod
    async def fetch_address_lookup_tables(
        client: AsyncClient, addresses: List[str]
    ) -> List[AddressLookupTableAccount]:
        if not addresses:
            return []
        keys = [Pubkey.from_string(addr) for addr in addresses]
        resp = await client.get_multiple_accounts(keys)
        tables = []
        for key, account in zip(keys, resp.value):
            if account is None:
                raise ValueError(f"Address lookup table not found: {key}")
            table = AddressLookupTable.deserialize(bytes(account.data))
            tables.append(AddressLookupTableAccount(key, list(table.addresses)))
        return tables

    async def fetch_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> Dict[str, Any]:
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
        }
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(f"{self.base_url}/quote", params=params)
        if response.status_code != 200:
            raise Exception(
                f"Jupiter Quote Error: {response.status_code} - {response.text}"
            )
        return response.json()

    async def swap(
        self, quote: Dict[str, Any], owner: Pubkey, client: AsyncClient
    ) -> VersionedTransaction:
        """
        Build an unsigned swap transaction for a quote.

        Setup instructions returned by Jupiter create the owner's token
        accounts when they do not exist yet.
        """
        async with httpx.AsyncClient(timeout=30.0) as http_client:
            response = await http_client.post(
                f"{self.base_url}/swap-instructions",
                json={
                    "quoteResponse": quote,
                    "userPublicKey": str(owner),
                    "wrapAndUnwrapSol": True,
                    "dynamicComputeUnitLimit": True,
                    "prioritizationFeeLamports": "auto",
                },
            )
        if response.status_code != 200:
            raise Exception(f"Jupiter Swap Error: {response.text}")
        data = response.json()
        if "error" in data:
            raise Exception(f"Jupiter Swap Error: {data['error']}")

        instructions = []
        instructions += self.parse_instruction_list(
            data.get("computeBudgetInstructions")
        )
        instructions += self.parse_instruction_list(data.get("setupInstructions"))
        if data.get("tokenLedgerInstruction"):
            instructions.append(self.parse_instruction(data["tokenLedgerInstruction"]))
        instructions.append(self.parse_instruction(data["swapInstruction"]))
        if data.get("cleanupInstruction"):
            instructions.append(self.parse_instruction(data["cleanupInstruction"]))
        instructions += self.parse_instruction_list(data.get("otherInstructions"))

        address_table_lookups = await self.fetch_address_lookup_tables(
            client, data.get("addressLookupTableAddresses", [])
        )

        blockhash_response = await client.get_latest_blockhash(commitment=Finalized)
        msg = MessageV0.try_compile(
            owner,
            instructions,
            address_table_lookups,
            blockhash_response.value.blockhash,
        )
        logger.info(f"Jupiter swap transaction built with {len(instructions)} instructions")
        return VersionedTransaction.populate(
            msg, [Signature.default()] * msg.header.num_required_signatures
        )


async def create_trade_transaction(
    input_mint: str,
    input_amount: int,
    output_mint: str,
    slippage_bps: int,
    owner: Pubkey,
    client: AsyncClient,
    jupiter_url: Optional[str] = None,
) -> VersionedTransaction:
    jupiter = Jupiter(jupiter_url)
    try:
        quote = await jupiter.fetch_quote(
            input_mint, output_mint, input_amount, slippage_bps
        )
    except Exception as e:
        raise Exception(f"Failed to fetch quote: {e}")
    try:
        return await jupiter.swap(quote, owner, client)
    except Exception as e:
        raise Exception(f"Failed to swap: {e}")
