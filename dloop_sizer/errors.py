"""Error taxonomy for the sizing engine.

Hard failures are exceptions: the engine cannot answer. Business outcomes
("don't proceed") are never raised; they come back as ``Reject`` values.
"""
from __future__ import annotations


class SizingError(Exception):
    """Base class for every hard failure raised by the engine."""


# ---------------------------------------------------------------------------
# Arithmetic errors
# ---------------------------------------------------------------------------


class ArithmeticOverflow(SizingError, OverflowError):
    """An operand or a result does not fit in uint256."""


class DivisionByZero(SizingError, ZeroDivisionError):
    """Denominator was zero."""


# ---------------------------------------------------------------------------
# Input-validity errors
# ---------------------------------------------------------------------------


class InvalidAmount(SizingError, ValueError):
    """Amount is negative or not an integer."""


class ZeroPrice(SizingError, ValueError):
    """Oracle price is zero, i.e. unavailable."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"Zero oracle price for asset {asset}")
        self.asset = asset


class InvalidSlippage(SizingError, ValueError):
    """Slippage tolerance outside the accepted range."""


class InvalidFee(SizingError, ValueError):
    """Fee or threshold basis points outside [0, 10000]."""


class Undercollateralized(SizingError, ValueError):
    """Debt is greater than or equal to collateral."""

    def __init__(self, collateral: int, debt: int) -> None:
        super().__init__(
            f"Position is undercollateralized: collateral={collateral} debt={debt}"
        )
        self.collateral = collateral
        self.debt = debt


class InvalidLeverageConfig(SizingError, ValueError):
    """Leverage bounds are not ordered lower <= target <= upper."""


class InvalidSwapRequest(SizingError, ValueError):
    """Swap request does not set exactly one of amount_in / amount_out."""


class UnknownVault(SizingError, ValueError):
    """Vault name is not in the configuration."""

    def __init__(self, vault_name: str) -> None:
        super().__init__(f"Unknown vault '{vault_name}'")
        self.vault_name = vault_name


class QuoteExpired(SizingError):
    """The swap quote deadline has passed."""

    def __init__(self, deadline: int, now: int) -> None:
        super().__init__(f"Quote expired: deadline={deadline} now={now}")
        self.deadline = deadline
        self.now = now


# ---------------------------------------------------------------------------
# Swap validation errors
# ---------------------------------------------------------------------------


class SwapValidationError(SizingError):
    """A realized swap violated its exact-output bounds."""


class InsufficientOutput(SwapValidationError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Swap delivered {actual}, less than the exact output {expected}"
        )
        self.expected = expected
        self.actual = actual


class ExcessiveInput(SwapValidationError):
    def __init__(self, maximum: int, actual: int) -> None:
        super().__init__(f"Swap spent {actual}, more than the maximum {maximum}")
        self.max = maximum
        self.actual = actual
