"""Price oracle protocol — price feed abstraction."""
from typing import Protocol


class PriceOracle(Protocol):
    """Abstract interface for fetching integer asset prices (8 decimals)."""

    async def fetch_prices(self, symbols: list[str] | None = None) -> dict[str, int]: ...
