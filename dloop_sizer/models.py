"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidAmount, InvalidLeverageConfig, InvalidSwapRequest

MAX_DECIMALS = 77


def _require_uint(name: str, value: object) -> None:
    # bool is an int subclass; a True amount is always a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True)
class Asset:
    """Token with its decimal count and an oracle price (8-decimal USD)."""

    address: str
    decimals: int
    price: int
    symbol: str = ""

    def __post_init__(self) -> None:
        _require_uint("decimals", self.decimals)
        if self.decimals > MAX_DECIMALS:
            raise InvalidAmount(f"decimals must be <= {MAX_DECIMALS}, got {self.decimals}")
        _require_uint("price", self.price)

    @property
    def label(self) -> str:
        return self.symbol or self.address


@dataclass(frozen=True)
class LeverageConfig:
    """Immutable leverage bounds of a vault, in basis points (30000 = 3.00x)."""

    target_leverage_bps: int
    lower_bound_bps: int
    upper_bound_bps: int
    max_subsidy_bps: int = 0

    def __post_init__(self) -> None:
        for name in ("target_leverage_bps", "lower_bound_bps", "upper_bound_bps", "max_subsidy_bps"):
            _require_uint(name, getattr(self, name))
        if not self.lower_bound_bps <= self.target_leverage_bps <= self.upper_bound_bps:
            raise InvalidLeverageConfig(
                "Leverage bounds must satisfy lower <= target <= upper, got "
                f"{self.lower_bound_bps} / {self.target_leverage_bps} / {self.upper_bound_bps}"
            )


@dataclass(frozen=True)
class VaultPosition:
    """Collateral and debt of a vault, valued in its base asset (the collateral token)."""

    collateral: int
    debt: int

    def __post_init__(self) -> None:
        _require_uint("collateral", self.collateral)
        _require_uint("debt", self.debt)

    @property
    def is_empty(self) -> bool:
        return self.collateral == 0 and self.debt == 0


@dataclass(frozen=True)
class SwapRequest:
    """A swap to size: exactly one of ``amount_in`` / ``amount_out`` is set."""

    input_asset: Asset
    output_asset: Asset
    slippage_bps: int
    deadline: int
    amount_in: int | None = None
    amount_out: int | None = None

    def __post_init__(self) -> None:
        if (self.amount_in is None) == (self.amount_out is None):
            raise InvalidSwapRequest("Exactly one of amount_in / amount_out must be set")
        if self.amount_in is not None:
            _require_uint("amount_in", self.amount_in)
        if self.amount_out is not None:
            _require_uint("amount_out", self.amount_out)
        _require_uint("slippage_bps", self.slippage_bps)
        _require_uint("deadline", self.deadline)

    @property
    def is_exact_output(self) -> bool:
        return self.amount_out is not None


@dataclass(frozen=True)
class SwapResult:
    """Realized amounts reported by the swap venue."""

    amount_spent: int
    amount_received: int

    def __post_init__(self) -> None:
        _require_uint("amount_spent", self.amount_spent)
        _require_uint("amount_received", self.amount_received)


@dataclass(frozen=True)
class SwapCheck:
    """Outcome of a successful exact-output validation."""

    amount_spent: int
    amount_received: int
    # Output delivered beyond the exact amount requested
    surplus: int
    # Headroom left under amountInMaximum
    unused_input: int


@dataclass(frozen=True)
class Proceeds:
    """Value returned by the operation besides the vault borrow (e.g. a reward claim)."""

    asset: Asset
    amount: int

    def __post_init__(self) -> None:
        _require_uint("amount", self.amount)


class RejectReason(str, Enum):
    OUT_OF_BOUNDS = "OutOfBounds"
    BELOW_THRESHOLD = "BelowThreshold"
    NEGATIVE_MARGIN = "NegativeMargin"
    ZERO_PRINCIPAL = "ZeroPrincipal"


@dataclass(frozen=True)
class Proceed:
    """Go decision: amounts to request from the flash lender and the swap venue."""

    flash_principal: int
    max_swap_input: int
    expected_net_profit: int
    flash_fee: int = 0
    protocol_fee: int = 0


@dataclass(frozen=True)
class Reject:
    """No-go decision. A legitimate answer, not an error."""

    reason: RejectReason
    detail: str = ""


SizingDecision = Proceed | Reject
