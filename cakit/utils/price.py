from typing import Dict, List, Optional

import httpx

JUPITER_PRICE_API = "https://lite-api.jup.ag/price/v3"
MAX_IDS_PER_REQUEST = 50


async def fetch_token_prices(
    mints: List[str], price_url: Optional[str] = None
) -> Dict[str, float]:
    """Fetch USD prices for mints; mints without a price are left out."""
    if not mints:
        return {}
    url = price_url or JUPITER_PRICE_API
    prices = {}
    async with httpx.AsyncClient(timeout=10.0) as client:
        for start in range(0, len(mints), MAX_IDS_PER_REQUEST):
            batch = mints[start : start + MAX_IDS_PER_REQUEST]
            response = await client.get(url, params={"ids": ",".join(batch)})
            if response.status_code != 200:
                raise Exception(
                    f"Failed to fetch prices: {response.status_code} - {response.text}"
                )
            data = response.json()
            for mint in batch:
                entry = data.get(mint)
                if entry and entry.get("usdPrice") is not None:
                    prices[mint] = float(entry["usdPrice"])
    return prices


async def fetch_token_price(mint: str, price_url: Optional[str] = None) -> float:
    prices = await fetch_token_prices([mint], price_url)
    if mint not in prices:
        raise ValueError(f"No price available for {mint}")
    return prices[mint]
