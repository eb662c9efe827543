"""Integer fixed-point arithmetic with explicit rounding direction.

Values follow uint256 semantics so that every result matches the on-chain
ray-math and ``Math.mulDiv`` implementations bit for bit. Python ints give an
unbounded intermediate, which covers the 512-bit product ``mulDiv`` needs.
There is no floating point in this package.
"""
from __future__ import annotations

from ..errors import ArithmeticOverflow, DivisionByZero, InvalidAmount

UINT256_MAX = 2**256 - 1

BPS_SCALE = 10_000
WAD = 10**18
RAY = 10**27


def require_uint256(name: str, value: object) -> int:
    """Return ``value`` if it is an int in [0, 2**256 - 1], else raise."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {value}")
    if value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name} does not fit in uint256")
    return value


def mul_div(a: int, b: int, denominator: int, round_up: bool = False) -> int:
    """Compute ``a * b / denominator`` rounded toward +inf or toward zero.

    Raises:
        DivisionByZero: ``denominator`` is zero.
        ArithmeticOverflow: an operand or the result exceeds uint256.
    """
    require_uint256("a", a)
    require_uint256("b", b)
    require_uint256("denominator", denominator)
    if denominator == 0:
        raise DivisionByZero("mul_div denominator is zero")

    quotient, remainder = divmod(a * b, denominator)
    if round_up and remainder:
        quotient += 1
    if quotient > UINT256_MAX:
        raise ArithmeticOverflow(f"mul_div result overflows uint256: {a} * {b} / {denominator}")
    return quotient


def ceil_div(numerator: int, denominator: int) -> int:
    """Ceiling division of two uint256 values."""
    return mul_div(numerator, 1, denominator, round_up=True)


def scale_decimals(
    amount: int, from_decimals: int, to_decimals: int, round_up: bool = False
) -> int:
    """Rescale ``amount`` from ``from_decimals`` to ``to_decimals``.

    Scaling up is exact. Scaling down loses precision and rounds down unless
    ``round_up`` is set.
    """
    require_uint256("amount", amount)
    require_uint256("from_decimals", from_decimals)
    require_uint256("to_decimals", to_decimals)

    if from_decimals == to_decimals:
        return amount
    if to_decimals > from_decimals:
        scaled = amount * 10 ** (to_decimals - from_decimals)
        if scaled > UINT256_MAX:
            raise ArithmeticOverflow(
                f"Scaling {amount} from {from_decimals} to {to_decimals} decimals overflows uint256"
            )
        return scaled
    return mul_div(amount, 1, 10 ** (from_decimals - to_decimals), round_up=round_up)


def bps_of(value: int, bps: int, round_up: bool = False) -> int:
    """Return ``value * bps / 10000``."""
    return mul_div(value, bps, BPS_SCALE, round_up=round_up)


# ---------------------------------------------------------------------------
# Ray / wad helpers with explicit rounding
# ---------------------------------------------------------------------------


def ray_mul(a: int, b: int, round_up: bool = False) -> int:
    return mul_div(a, b, RAY, round_up=round_up)


def ray_div(a: int, b: int, round_up: bool = False) -> int:
    return mul_div(a, RAY, b, round_up=round_up)


def wad_mul(a: int, b: int, round_up: bool = False) -> int:
    return mul_div(a, b, WAD, round_up=round_up)


def wad_div(a: int, b: int, round_up: bool = False) -> int:
    return mul_div(a, WAD, b, round_up=round_up)
