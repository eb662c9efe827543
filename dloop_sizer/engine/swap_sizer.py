"""Bounds for exact-output swaps and validation of realized swap results."""
from __future__ import annotations

from ..errors import ExcessiveInput, InsufficientOutput
from ..models import Asset, SwapCheck, SwapResult
from .fixed_point import require_uint256
from .price_converter import convert, with_slippage_buffer, with_slippage_discount


def max_input_for_exact_output(
    output_amount: int,
    input_asset: Asset,
    output_asset: Asset,
    slippage_bps: int,
) -> int:
    """Ceiling to pass to the venue as ``amountInMaximum``.

    Derived from oracle prices only: the oracle cost of the output, rounded
    up, plus the slippage buffer.
    """
    cost = convert(output_amount, output_asset, input_asset, round_up=True)
    return with_slippage_buffer(cost, slippage_bps)


def min_output_for_exact_input(
    input_amount: int,
    input_asset: Asset,
    output_asset: Asset,
    slippage_bps: int,
) -> int:
    """Floor on what an exact-input swap of ``input_amount`` must deliver."""
    value = convert(input_amount, input_asset, output_asset, round_up=False)
    return with_slippage_discount(value, slippage_bps)


def validate_swap_result(result: SwapResult, expected_output: int, max_input: int) -> SwapCheck:
    """Check a realized exact-output swap against its bounds.

    The exact output is a floor on what was received and ``max_input`` is a
    ceiling on what was spent. Output beyond the request is reported as
    ``surplus``; disposing of it is the caller's decision.

    Raises:
        InsufficientOutput: fewer output tokens than requested arrived.
        ExcessiveInput: more input tokens than allowed were spent.
    """
    require_uint256("expected_output", expected_output)
    require_uint256("max_input", max_input)

    if result.amount_received < expected_output:
        raise InsufficientOutput(expected_output, result.amount_received)
    if result.amount_spent > max_input:
        raise ExcessiveInput(max_input, result.amount_spent)

    return SwapCheck(
        amount_spent=result.amount_spent,
        amount_received=result.amount_received,
        surplus=result.amount_received - expected_output,
        unused_input=max_input - result.amount_spent,
    )
