"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from dloop_sizer.config import (
    AppConfig,
    AssetConfig,
    PolicyConfig,
    VaultConfig,
    _interpolate_env,
    load_config,
)
from dloop_sizer.errors import InvalidLeverageConfig
from dloop_sizer.models import LeverageConfig

MINIMAL_ASSETS = """\
assets:
  coll:
    address: "0xC0"
  debt:
    address: "0xD0"
"""

MINIMAL_VAULTS = """\
vaults:
  v:
    collateral_asset: coll
    debt_asset: debt
"""


def _write_config(tmp_path: Path, *parts: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("".join(textwrap.dedent(part) for part in parts))
    return cfg_file


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.policy.slippage_bps == 30
        assert cfg.policy.min_profit_bps == 15
        assert cfg.policy.accept_break_even is True
        assert cfg.policy.surplus_policy == "retain"
        assert cfg.notifications.telegram.chat_id == "999"

    def test_asset_symbols_uppercased(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert set(cfg.assets) == {"SFRXUSD", "DUSD"}
        vault = cfg.vaults["sfrxusd-3x"]
        assert vault.collateral_asset == "SFRXUSD"
        assert vault.debt_asset == "DUSD"

    def test_vault_leverage_config(self, sample_yaml_path: Path) -> None:
        leverage = load_config(sample_yaml_path).vaults["sfrxusd-3x"].leverage()
        assert leverage == LeverageConfig(
            target_leverage_bps=30000,
            lower_bound_bps=25000,
            upper_bound_bps=35000,
            max_subsidy_bps=100,
        )

    def test_feeds_from_assets_with_override(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert cfg.price_oracle.pyth.hermes_url == "https://hermes.example.com"
        assert cfg.price_oracle.pyth.feeds == {"SFRXUSD": "aaa111", "DUSD": "ccc333"}

    def test_policy_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(_write_config(tmp_path, MINIMAL_ASSETS + MINIMAL_VAULTS))
        assert cfg.policy == PolicyConfig()
        assert cfg.policy.flash_fee_bps == 9
        assert cfg.policy.protocol_fee_bps == 500
        assert cfg.assets["COLL"].decimals == 18
        assert cfg.notifications.telegram.enabled is False

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_ADDR", "0xABCDEF")
        cfg_file = _write_config(
            tmp_path,
            """\
            assets:
              coll:
                address: "${TEST_ADDR}"
              debt:
                address: "0xD0"
            """,
            MINIMAL_VAULTS,
        )
        cfg = load_config(cfg_file)
        assert cfg.assets["COLL"].address == "0xABCDEF"


class TestValidation:
    def test_no_vaults_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(tmp_path, MINIMAL_ASSETS + "vaults: {}\n")
        with pytest.raises(ValueError, match="At least one vault"):
            load_config(cfg_file)

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="At least one vault"):
            load_config(_write_config(tmp_path, ""))

    def test_unknown_asset_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path,
            MINIMAL_ASSETS,
            """\
            vaults:
              v:
                collateral_asset: wbtc
                debt_asset: debt
            """,
        )
        with pytest.raises(ValueError, match="unknown collateral_asset"):
            load_config(cfg_file)

    def test_unknown_reward_asset_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path,
            MINIMAL_ASSETS,
            """\
            vaults:
              v:
                collateral_asset: coll
                debt_asset: debt
                reward_asset: crv
            """,
        )
        with pytest.raises(ValueError, match="unknown reward_asset"):
            load_config(cfg_file)

    def test_empty_address_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path,
            """\
            assets:
              coll:
                address: ""
              debt:
                address: "0xD0"
            """,
            MINIMAL_VAULTS,
        )
        with pytest.raises(ValueError, match="no address"):
            load_config(cfg_file)

    def test_fee_out_of_range_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path, "policy:\n  flash_fee_bps: 10001\n" + MINIMAL_ASSETS + MINIMAL_VAULTS
        )
        with pytest.raises(ValueError, match="flash_fee_bps"):
            load_config(cfg_file)

    def test_full_slippage_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path, "policy:\n  slippage_bps: 10000\n" + MINIMAL_ASSETS + MINIMAL_VAULTS
        )
        with pytest.raises(ValueError, match="slippage_bps"):
            load_config(cfg_file)

    def test_unknown_surplus_policy_raises(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path, "policy:\n  surplus_policy: burn\n" + MINIMAL_ASSETS + MINIMAL_VAULTS
        )
        with pytest.raises(ValueError, match="surplus_policy"):
            load_config(cfg_file)

    def test_unordered_leverage_bounds_raise(self, tmp_path: Path) -> None:
        cfg_file = _write_config(
            tmp_path,
            MINIMAL_ASSETS,
            """\
            vaults:
              v:
                collateral_asset: coll
                debt_asset: debt
                target_leverage_bps: 30000
                lower_bound_bps: 35000
            """,
        )
        with pytest.raises(InvalidLeverageConfig, match="lower <= target"):
            load_config(cfg_file)


class TestFrozenConfigs:
    def test_policy_immutable(self) -> None:
        p = PolicyConfig()
        with pytest.raises(AttributeError):
            p.slippage_bps = 99  # type: ignore[misc]

    def test_asset_config_immutable(self) -> None:
        a = AssetConfig(address="0x1")
        with pytest.raises(AttributeError):
            a.decimals = 6  # type: ignore[misc]

    def test_vault_config_immutable(self) -> None:
        v = VaultConfig(collateral_asset="A", debt_asset="B")
        with pytest.raises(AttributeError):
            v.target_leverage_bps = 1  # type: ignore[misc]
