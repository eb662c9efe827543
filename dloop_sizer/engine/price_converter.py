"""Oracle-price conversion between assets and slippage adjustments (no I/O)."""
from __future__ import annotations

from ..errors import DivisionByZero, InvalidSlippage, ZeroPrice
from ..models import Asset
from .fixed_point import BPS_SCALE, mul_div, require_uint256


def is_same_asset(a: Asset, b: Asset) -> bool:
    return a.address.lower() == b.address.lower()


def convert(amount: int, from_asset: Asset, to_asset: Asset, round_up: bool = False) -> int:
    """Convert ``amount`` of ``from_asset`` into the equivalent amount of ``to_asset``.

        converted = amount * price_from * 10^dec_to / (price_to * 10^dec_from)

    Converting an asset into itself returns ``amount`` without reading any
    price, so an unpriced asset still converts to itself.

    Raises:
        ZeroPrice: either oracle price is zero.
    """
    require_uint256("amount", amount)
    if is_same_asset(from_asset, to_asset):
        return amount

    from_asset_price = _require_price(from_asset)
    to_asset_price = _require_price(to_asset)

    return mul_div(
        amount,
        from_asset_price * 10**to_asset.decimals,
        to_asset_price * 10**from_asset.decimals,
        round_up=round_up,
    )


def value_in_base(amount: int, asset: Asset) -> int:
    """Value of ``amount`` in the oracle's price unit, rounded down."""
    return mul_div(amount, _require_price(asset), 10**asset.decimals)


def with_slippage_buffer(amount: int, slippage_bps: int) -> int:
    """Inflate ``amount`` by a slippage tolerance, rounding up.

    Used for ceilings (``amountInMaximum``). A tolerance of 100% or more is
    rejected.
    """
    _require_slippage(slippage_bps)
    if slippage_bps >= BPS_SCALE:
        raise InvalidSlippage(f"Slippage must be below {BPS_SCALE} bps, got {slippage_bps}")
    return mul_div(amount, BPS_SCALE + slippage_bps, BPS_SCALE, round_up=True)


def with_slippage_discount(amount: int, slippage_bps: int) -> int:
    """Deflate ``amount`` by a slippage tolerance, rounding down.

    Used for floors (minimum output shares or collateral).
    """
    _require_slippage(slippage_bps)
    if slippage_bps > BPS_SCALE:
        raise InvalidSlippage(f"Slippage must not exceed {BPS_SCALE} bps, got {slippage_bps}")
    return mul_div(amount, BPS_SCALE - slippage_bps, BPS_SCALE)


def estimated_slippage_bps(current_amount: int, min_amount: int) -> int:
    """Overall slippage implied by accepting ``min_amount`` instead of ``current_amount``."""
    require_uint256("current_amount", current_amount)
    require_uint256("min_amount", min_amount)
    if min_amount > current_amount:
        raise InvalidSlippage(
            f"Minimum amount {min_amount} exceeds current amount {current_amount}"
        )
    if current_amount == 0:
        raise DivisionByZero("current_amount is zero")
    return mul_div(BPS_SCALE, current_amount - min_amount, current_amount)


def _require_slippage(slippage_bps: int) -> None:
    if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int) or slippage_bps < 0:
        raise InvalidSlippage(f"Slippage must be a non-negative integer, got {slippage_bps!r}")


def _require_price(asset: Asset) -> int:
    if asset.price == 0:
        raise ZeroPrice(asset.label)
    return asset.price
