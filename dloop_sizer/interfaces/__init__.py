"""Protocol interfaces for the sizing service collaborators."""
from .notifier import Notifier
from .price_oracle import PriceOracle
from .swap_venue import SwapVenue

__all__ = ["Notifier", "PriceOracle", "SwapVenue"]
