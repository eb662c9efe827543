"""Leverage arithmetic for dLOOP vaults. Pure functions, no I/O.

Leverage is expressed in basis points of net value:

    leverage_bps = collateral * 10000 / (collateral - debt)

so 10000 is 1.00x (unlevered) and 30000 is 3.00x.
"""
from __future__ import annotations

from ..errors import InvalidAmount, Undercollateralized
from .fixed_point import BPS_SCALE, mul_div, require_uint256


def current_leverage_bps(collateral: int, debt: int) -> int:
    """Current leverage of a position, rounded down.

    An empty vault (no collateral, no debt) reports 0.

    Raises:
        Undercollateralized: ``debt >= collateral`` on a non-empty vault.
    """
    require_uint256("collateral", collateral)
    require_uint256("debt", debt)
    if collateral == 0 and debt == 0:
        return 0
    if debt >= collateral:
        raise Undercollateralized(collateral, debt)
    return mul_div(collateral, BPS_SCALE, collateral - debt)


def leveraged_deposit_amount(deposit_amount: int, target_leverage_bps: int) -> int:
    """Total collateral a vault holds after a leveraged deposit of ``deposit_amount``."""
    return mul_div(deposit_amount, target_leverage_bps, BPS_SCALE)


def collateral_to_remove_for_redeem(assets_to_withdraw: int, target_leverage_bps: int) -> int:
    """Collateral withdrawn from the lending pool to release ``assets_to_withdraw``."""
    return mul_div(assets_to_withdraw, target_leverage_bps, BPS_SCALE)


def unleveraged_amount(
    leveraged_amount: int, leverage_bps: int, round_up: bool = False
) -> int:
    """Own-funds part of a leveraged amount: ``leveraged * 10000 / leverage``."""
    return mul_div(leveraged_amount, BPS_SCALE, leverage_bps, round_up=round_up)


def required_additional_collateral(leveraged_amount: int, deposit_amount: int) -> int:
    """Collateral that has to be sourced on top of the user's deposit."""
    require_uint256("leveraged_amount", leveraged_amount)
    require_uint256("deposit_amount", deposit_amount)
    if deposit_amount > leveraged_amount:
        raise InvalidAmount(
            f"Deposit {deposit_amount} exceeds leveraged amount {leveraged_amount}"
        )
    return leveraged_amount - deposit_amount


def debt_for_leveraged_collateral(leveraged_amount: int, target_leverage_bps: int) -> int:
    """Part of ``leveraged_amount`` the vault funds by borrowing, in collateral units.

    The own-funds part rounds up so the borrowed part, which the vault pays
    out, rounds down.
    """
    equity = unleveraged_amount(leveraged_amount, target_leverage_bps, round_up=True)
    return required_additional_collateral(leveraged_amount, min(equity, leveraged_amount))


def is_within_bounds(current_bps: int, lower_bps: int, upper_bps: int) -> bool:
    return lower_bps <= current_bps <= upper_bps


def is_too_imbalanced(current_bps: int, lower_bps: int, upper_bps: int) -> bool:
    """Vault gate for deposit/mint/redeem. An empty vault is never imbalanced."""
    if current_bps == 0:
        return False
    return not is_within_bounds(current_bps, lower_bps, upper_bps)


def current_subsidy_bps(
    current_bps: int,
    target_bps: int,
    max_subsidy_bps: int,
    min_deviation_bps: int = 0,
) -> int:
    """Rebalance subsidy offered for moving leverage back toward target.

        subsidy = |current - target| * 10000 / target, capped at max_subsidy_bps

    Deviations below ``min_deviation_bps`` earn nothing.
    """
    require_uint256("current_bps", current_bps)
    require_uint256("target_bps", target_bps)
    deviation = abs(current_bps - target_bps)
    if deviation < min_deviation_bps:
        return 0
    return min(mul_div(deviation, BPS_SCALE, target_bps), max_subsidy_bps)
