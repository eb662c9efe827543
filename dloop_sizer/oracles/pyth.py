"""Pyth Network price oracle service."""
import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig

logger = logging.getLogger(__name__)

PRICE_DECIMALS = 8


def normalize_price(price_raw: int, expo: int, decimals: int = PRICE_DECIMALS) -> int:
    """Rescale a Pyth ``price * 10^expo`` pair to an integer with ``decimals`` decimals.

    Precision finer than ``decimals`` is truncated. Negative prices map to 0,
    which the engine treats as "price unavailable".
    """
    if price_raw <= 0:
        return 0
    shift = expo + decimals
    if shift >= 0:
        return price_raw * 10**shift
    return price_raw // 10**-shift


class PythOracle:
    """Fetch prices from Pyth Network oracle."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]:
        """Fetch current prices from Pyth Network as 8-decimal integers.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.

        Symbols missing from the result had no usable price; callers must not
        substitute a default.
        """
        prices: dict[str, int] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    id_to_assets: dict[str, list[str]] = {}
                    for asset, feed_id in feeds.items():
                        id_to_assets.setdefault(feed_id.lower().removeprefix("0x"), []).append(asset)

                    for item in parsed:
                        feed_id = str(item.get("id", "")).lower().removeprefix("0x")
                        price_data = item.get("price", {})
                        price = normalize_price(
                            int(price_data.get("price", 0)), int(price_data.get("expo", 0))
                        )
                        if price == 0:
                            logger.warning("Pyth returned no usable price for feed %s", feed_id)
                            continue

                        for asset in id_to_assets.get(feed_id, []):
                            prices[asset] = price

                    logger.info("Fetched prices from Pyth Network:")
                    for asset, price in sorted(prices.items()):
                        logger.info("  %s: %d (1e-%d USD)", asset, price, PRICE_DECIMALS)

        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return prices
