from dataclasses import dataclass
from typing import List, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.types import TokenAccountOpts
from solders.pubkey import Pubkey

from cakit.utils.price import fetch_token_prices
from cakit.utils.wallet import (
    SPL_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    WSOL_MINT,
)


@dataclass
class Holding:
    mint: str
    amount: int
    decimals: int


@dataclass
class PortfolioItem:
    mint: str
    amount: float
    decimals: int
    price: Optional[float]
    value: Optional[float]


async def get_holdings(client: AsyncClient, owner: Pubkey) -> List[Holding]:
    """Native SOL (as wrapped SOL) plus every non-empty token account."""
    balance = await client.get_balance(owner)
    holdings = [Holding(mint=WSOL_MINT, amount=balance.value, decimals=9)]

    for program_id in (SPL_TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID):
        resp = await client.get_token_accounts_by_owner_json_parsed(
            owner, TokenAccountOpts(program_id=Pubkey.from_string(program_id))
        )
        for account in resp.value:
            info = account.account.data.parsed["info"]
            token_amount = info["tokenAmount"]
            amount = int(token_amount["amount"])
            if amount == 0:
                continue
            holdings.append(
                Holding(
                    mint=info["mint"],
                    amount=amount,
                    decimals=int(token_amount["decimals"]),
                )
            )
    return holdings


async def holdings_to_portfolio(
    holdings: List[Holding], price_url: Optional[str] = None
) -> List[PortfolioItem]:
    prices = await fetch_token_prices(
        list(dict.fromkeys(h.mint for h in holdings)), price_url
    )
    portfolio = []
    for holding in holdings:
        ui_amount = holding.amount / 10**holding.decimals
        price = prices.get(holding.mint)
        portfolio.append(
            PortfolioItem(
                mint=holding.mint,
                amount=ui_amount,
                decimals=holding.decimals,
                price=price,
                value=ui_amount * price if price is not None else None,
            )
        )
    return portfolio
