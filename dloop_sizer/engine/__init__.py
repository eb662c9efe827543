"""Pure sizing engine: fixed-point math, price conversion, leverage, swaps, profitability."""
from .fixed_point import mul_div, scale_decimals
from .leverage import (
    collateral_to_remove_for_redeem,
    current_leverage_bps,
    is_within_bounds,
    leveraged_deposit_amount,
)
from .price_converter import convert, with_slippage_buffer
from .profitability import evaluate, evaluate_redeem
from .swap_sizer import max_input_for_exact_output, validate_swap_result

__all__ = [
    "collateral_to_remove_for_redeem",
    "convert",
    "current_leverage_bps",
    "evaluate",
    "evaluate_redeem",
    "is_within_bounds",
    "leveraged_deposit_amount",
    "max_input_for_exact_output",
    "mul_div",
    "scale_decimals",
    "validate_swap_result",
    "with_slippage_buffer",
]
