"""
Gas Reporter
Summarises gas spent by a deployment run when REPORT_GAS is set
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

import aiohttp
from web3 import Web3

logger = logging.getLogger(__name__)

COINGECKO_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"


async def fetch_token_price(price_feed_id: str, currency: str = "USD",
                            timeout: float = 10.0) -> Optional[Decimal]:
    """Get the native token price from CoinGecko, or None when unavailable"""
    params = {"ids": price_feed_id, "vs_currencies": currency.lower()}
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(COINGECKO_PRICE_URL, params=params) as response:
                if response.status != 200:
                    logger.warning(f"Price lookup for {price_feed_id} returned HTTP {response.status}")
                    return None
                data = await response.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"Failed to fetch {price_feed_id} price: {e}")
        return None

    quote = data.get(price_feed_id) if isinstance(data, dict) else None
    price = quote.get(currency.lower()) if isinstance(quote, dict) else None
    if not isinstance(price, (int, float, str)):
        logger.warning(f"No {currency} price for {price_feed_id}")
        return None

    try:
        return Decimal(str(price))
    except InvalidOperation:
        logger.warning(f"Unparseable {currency} price for {price_feed_id}: {price!r}")
        return None


class GasReporter:
    def __init__(self, currency: str = "USD", price_feed_id: Optional[str] = None):
        self.currency = currency
        self.price_feed_id = price_feed_id
        self.entries: List[Tuple[str, int]] = []

    def reset(self):
        self.entries = []

    def record(self, label: str, gas_used: Optional[int]):
        if gas_used is None:
            return
        self.entries.append((label, gas_used))

    @property
    def total_gas(self) -> int:
        return sum(gas for _, gas in self.entries)

    async def render(self, gas_price: int) -> str:
        """Build the gas usage table"""
        token_price = None
        if self.price_feed_id:
            token_price = await fetch_token_price(self.price_feed_id, self.currency)

        rows = list(self.entries) + [("Total", self.total_gas)]
        lines = [f"\n=== Gas Report (gas price {Web3.from_wei(gas_price, 'gwei')} gwei) ==="]
        for label, gas in rows:
            cost = Web3.from_wei(gas * gas_price, 'ether')
            line = f"{label:<28}{gas:>12,} gas  {cost:.6f} native"
            if token_price is not None:
                line += f"  {Decimal(cost) * token_price:.2f} {self.currency}"
            lines.append(line)
        return "\n".join(lines)
