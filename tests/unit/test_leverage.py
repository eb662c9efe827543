"""Unit tests for vault leverage arithmetic."""
from __future__ import annotations

import pytest

from dloop_sizer.engine.leverage import (
    collateral_to_remove_for_redeem,
    current_leverage_bps,
    current_subsidy_bps,
    debt_for_leveraged_collateral,
    is_too_imbalanced,
    is_within_bounds,
    leveraged_deposit_amount,
    required_additional_collateral,
    unleveraged_amount,
)
from dloop_sizer.errors import InvalidAmount, Undercollateralized


class TestCurrentLeverage:
    def test_three_x(self) -> None:
        assert current_leverage_bps(300, 200) == 30000

    def test_unlevered(self) -> None:
        assert current_leverage_bps(100, 0) == 10000

    def test_rounds_down(self) -> None:
        # 10 / 7 = 1.428571...x
        assert current_leverage_bps(10, 3) == 14285

    def test_empty_vault_is_zero(self) -> None:
        assert current_leverage_bps(0, 0) == 0

    def test_debt_equal_to_collateral_raises(self) -> None:
        with pytest.raises(Undercollateralized) as exc_info:
            current_leverage_bps(100, 100)
        assert exc_info.value.collateral == 100
        assert exc_info.value.debt == 100

    def test_debt_without_collateral_raises(self) -> None:
        with pytest.raises(Undercollateralized):
            current_leverage_bps(0, 5)


class TestDepositAndRedeemAmounts:
    def test_leveraged_deposit(self) -> None:
        assert leveraged_deposit_amount(100, 30000) == 300

    def test_collateral_to_remove_for_redeem(self) -> None:
        assert collateral_to_remove_for_redeem(100, 30000) == 300

    def test_unleveraged_amount(self) -> None:
        assert unleveraged_amount(300, 30000) == 100

    def test_unleveraged_amount_rounding(self) -> None:
        assert unleveraged_amount(100, 30000) == 33
        assert unleveraged_amount(100, 30000, round_up=True) == 34

    def test_required_additional_collateral(self) -> None:
        assert required_additional_collateral(300, 100) == 200

    def test_deposit_above_leveraged_raises(self) -> None:
        with pytest.raises(InvalidAmount):
            required_additional_collateral(100, 300)


class TestDebtForLeveragedCollateral:
    def test_three_x(self) -> None:
        assert debt_for_leveraged_collateral(300, 30000) == 200

    def test_borrowed_part_rounds_down(self) -> None:
        # Own funds ceil(33.3) = 34, so the vault lends 66
        assert debt_for_leveraged_collateral(100, 30000) == 66

    def test_unlevered_vault_lends_nothing(self) -> None:
        assert debt_for_leveraged_collateral(100, 10000) == 0

    def test_sub_one_x_target_lends_nothing(self) -> None:
        assert debt_for_leveraged_collateral(100, 5000) == 0


class TestBounds:
    def test_within_bounds_is_inclusive(self) -> None:
        assert is_within_bounds(20000, 20000, 40000)
        assert is_within_bounds(40000, 20000, 40000)
        assert not is_within_bounds(19999, 20000, 40000)
        assert not is_within_bounds(40001, 20000, 40000)

    def test_empty_vault_never_imbalanced(self) -> None:
        assert is_too_imbalanced(0, 20000, 40000) is False

    def test_imbalanced_outside_bounds(self) -> None:
        assert is_too_imbalanced(19999, 20000, 40000) is True
        assert is_too_imbalanced(40001, 20000, 40000) is True

    def test_balanced_at_edges(self) -> None:
        assert is_too_imbalanced(20000, 20000, 40000) is False
        assert is_too_imbalanced(40000, 20000, 40000) is False


class TestSubsidy:
    def test_at_target_is_zero(self) -> None:
        assert current_subsidy_bps(30000, 30000, 500) == 0

    def test_proportional_to_deviation(self) -> None:
        # 300 / 30000 = 1%
        assert current_subsidy_bps(30300, 30000, 500) == 100
        assert current_subsidy_bps(29700, 30000, 500) == 100

    def test_capped_at_max(self) -> None:
        assert current_subsidy_bps(33000, 30000, 100) == 100

    def test_below_min_deviation_is_zero(self) -> None:
        assert current_subsidy_bps(30300, 30000, 500, min_deviation_bps=500) == 0


class TestBoundSymmetry:
    @pytest.mark.parametrize("current", [0, 1, 19_999, 20_000, 30_000, 40_000, 40_001, 10**30])
    def test_within_bounds_matches_interval(self, current: int) -> None:
        assert is_within_bounds(current, 20_000, 40_000) == (20_000 <= current <= 40_000)
