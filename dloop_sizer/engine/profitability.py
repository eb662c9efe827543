"""Sizing decisions for flash-loan funded vault operations.

A compounding run flash-borrows the debt token, swaps it exact-out into the
collateral the vault needs, deposits it (the vault lends ``K`` debt tokens
against it), claims the rewards worth ``netZ`` after the protocol fee and
repays principal ``X`` plus the flash fee. It is worth running when

    K + netZ >= X + fee

and the margin clears the caller's profit threshold.
"""
from __future__ import annotations

import logging

from ..errors import InvalidFee, QuoteExpired
from ..models import (
    Asset,
    LeverageConfig,
    Proceed,
    Proceeds,
    Reject,
    RejectReason,
    SizingDecision,
    SwapRequest,
    VaultPosition,
)
from .fixed_point import BPS_SCALE, bps_of, require_uint256
from .leverage import (
    collateral_to_remove_for_redeem,
    current_leverage_bps,
    debt_for_leveraged_collateral,
    is_too_imbalanced,
    required_additional_collateral,
)
from .price_converter import convert, with_slippage_discount
from .swap_sizer import max_input_for_exact_output, min_output_for_exact_input

logger = logging.getLogger(__name__)


def _require_fee_bps(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= BPS_SCALE:
        raise InvalidFee(f"{name} must be an integer in [0, {BPS_SCALE}], got {value!r}")
    return value


def _check_bounds(position: VaultPosition, config: LeverageConfig) -> Reject | None:
    leverage = current_leverage_bps(position.collateral, position.debt)
    if is_too_imbalanced(leverage, config.lower_bound_bps, config.upper_bound_bps):
        return Reject(
            RejectReason.OUT_OF_BOUNDS,
            f"leverage {leverage} bps outside "
            f"[{config.lower_bound_bps}, {config.upper_bound_bps}]",
        )
    return None


def _margin_verdict(
    net_profit: int,
    principal: int,
    min_profit_bps: int,
    accept_break_even: bool,
) -> Reject | None:
    if net_profit < 0:
        return Reject(RejectReason.NEGATIVE_MARGIN, f"net profit {net_profit}")
    if net_profit == 0 and not (accept_break_even and min_profit_bps == 0):
        return Reject(RejectReason.BELOW_THRESHOLD, "break-even operation")
    # net * 10000 / principal >= min_profit_bps, without the truncating division
    if net_profit * BPS_SCALE < min_profit_bps * principal:
        return Reject(
            RejectReason.BELOW_THRESHOLD,
            f"net profit {net_profit} on principal {principal} is below {min_profit_bps} bps",
        )
    return None


def evaluate(
    position: VaultPosition,
    config: LeverageConfig,
    request: SwapRequest,
    proceeds: Proceeds | None = None,
    *,
    flash_fee_bps: int,
    protocol_fee_bps: int,
    min_profit_bps: int,
    accept_break_even: bool = False,
    now: int | None = None,
) -> SizingDecision:
    """Size a flash-funded leveraged deposit and decide whether it pays.

    ``request`` swaps the debt token (input, also the flash-loaned token) into
    the vault collateral (output). All margins are computed in the input
    asset.

    Args:
        position: Vault snapshot in the vault's base unit.
        config: Vault leverage bounds.
        request: Exact-output (preferred) or exact-input swap of debt token
            into collateral. Only an exact-output request gets an
            oracle-derived swap ceiling; an exact-input request spends
            ``amount_in`` as given, and that caller amount becomes both the
            principal and ``max_swap_input``.
        proceeds: Value the run collects besides the vault borrow, e.g. the
            claimed rewards before the protocol fee.
        flash_fee_bps: Flash lender fee, charged on the principal.
        protocol_fee_bps: Treasury fee, charged on ``proceeds``.
        min_profit_bps: Minimum net profit relative to the principal.
        accept_break_even: Proceed on a zero net profit when
            ``min_profit_bps`` is zero.
        now: Current unix time; when given, an expired quote is refused.

    Raises:
        QuoteExpired, ZeroPrice, Undercollateralized, ArithmeticOverflow and
        the other ``SizingError`` subclasses. A business "no" is returned as
        ``Reject``, never raised.
    """
    _require_fee_bps("flash_fee_bps", flash_fee_bps)
    _require_fee_bps("protocol_fee_bps", protocol_fee_bps)
    require_uint256("min_profit_bps", min_profit_bps)
    if now is not None and now > request.deadline:
        raise QuoteExpired(request.deadline, now)

    rejection = _check_bounds(position, config)
    if rejection is not None:
        return rejection

    debt_asset = request.input_asset
    collateral_asset = request.output_asset

    if request.amount_out is not None:
        collateral_amount = request.amount_out
        max_swap_input = max_input_for_exact_output(
            collateral_amount, debt_asset, collateral_asset, request.slippage_bps
        )
    else:
        max_swap_input = request.amount_in
        collateral_amount = min_output_for_exact_input(
            max_swap_input, debt_asset, collateral_asset, request.slippage_bps
        )

    principal = max_swap_input
    if principal == 0:
        return Reject(RejectReason.ZERO_PRINCIPAL, "nothing to borrow")

    borrowed_collateral = debt_for_leveraged_collateral(
        collateral_amount, config.target_leverage_bps
    )
    # What the vault lends back is a payout: round down
    borrowed = convert(borrowed_collateral, collateral_asset, debt_asset, round_up=False)
    flash_fee = bps_of(principal, flash_fee_bps, round_up=True)

    gross_proceeds = 0
    if proceeds is not None:
        gross_proceeds = convert(proceeds.amount, proceeds.asset, debt_asset, round_up=False)
    protocol_fee = bps_of(gross_proceeds, protocol_fee_bps, round_up=True)

    net_profit = borrowed + gross_proceeds - protocol_fee - principal - flash_fee

    logger.debug(
        "Sizing: collateral=%d principal=%d borrowed=%d proceeds=%d "
        "protocol_fee=%d flash_fee=%d net=%d",
        collateral_amount,
        principal,
        borrowed,
        gross_proceeds,
        protocol_fee,
        flash_fee,
        net_profit,
    )

    rejection = _margin_verdict(net_profit, principal, min_profit_bps, accept_break_even)
    if rejection is not None:
        return rejection

    return Proceed(
        flash_principal=principal,
        max_swap_input=max_swap_input,
        expected_net_profit=net_profit,
        flash_fee=flash_fee,
        protocol_fee=protocol_fee,
    )


def evaluate_redeem(
    position: VaultPosition,
    config: LeverageConfig,
    assets_to_withdraw: int,
    collateral_asset: Asset,
    debt_asset: Asset,
    *,
    slippage_bps: int,
    flash_fee_bps: int,
    output_slippage_bps: int = BPS_SCALE,
) -> SizingDecision:
    """Size a flash-funded leveraged redeem.

    The flash loan repays the vault debt attached to ``assets_to_withdraw``;
    the released collateral is swapped exact-out into ``principal + fee``
    debt tokens and the rest goes to the receiver. ``expected_net_profit``
    of the ``Proceed`` is that remainder, in collateral units.

    ``output_slippage_bps`` sets the minimum the receiver accepts:
    ``assets_to_withdraw * (10000 - output_slippage_bps) / 10000``.

    The redeem must fit inside ``position`` (collateral units): an empty
    vault has nothing to redeem, and a redeem that releases more collateral
    or repays more debt than the vault holds is refused.
    """
    _require_fee_bps("flash_fee_bps", flash_fee_bps)

    if position.is_empty:
        return Reject(RejectReason.ZERO_PRINCIPAL, "empty vault, nothing to redeem")

    rejection = _check_bounds(position, config)
    if rejection is not None:
        return rejection

    released = collateral_to_remove_for_redeem(assets_to_withdraw, config.target_leverage_bps)
    debt_part = required_additional_collateral(released, min(assets_to_withdraw, released))
    if released > position.collateral or debt_part > position.debt:
        return Reject(
            RejectReason.OUT_OF_BOUNDS,
            f"redeem releases {released} collateral and repays {debt_part} debt, "
            f"vault holds {position.collateral} / {position.debt}",
        )
    # Debt owed to the pool: round up in the lender's favor
    principal = convert(debt_part, collateral_asset, debt_asset, round_up=True)
    if principal == 0:
        return Reject(RejectReason.ZERO_PRINCIPAL, "no debt to repay")

    flash_fee = bps_of(principal, flash_fee_bps, round_up=True)
    max_swap_input = max_input_for_exact_output(
        principal + flash_fee, collateral_asset, debt_asset, slippage_bps
    )
    kept = released - max_swap_input
    min_kept = with_slippage_discount(assets_to_withdraw, output_slippage_bps)

    logger.debug(
        "Redeem sizing: released=%d principal=%d flash_fee=%d max_input=%d kept=%d min=%d",
        released,
        principal,
        flash_fee,
        max_swap_input,
        kept,
        min_kept,
    )

    if kept < 0:
        return Reject(RejectReason.NEGATIVE_MARGIN, f"swap cost exceeds released collateral by {-kept}")
    if kept == 0 or kept < min_kept:
        return Reject(
            RejectReason.BELOW_THRESHOLD,
            f"receiver keeps {kept}, minimum is {min_kept}",
        )

    return Proceed(
        flash_principal=principal,
        max_swap_input=max_swap_input,
        expected_net_profit=kept,
        flash_fee=flash_fee,
    )
