"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from dloop_sizer.config import (
    AppConfig,
    AssetConfig,
    EmailConfig,
    NotificationsConfig,
    PolicyConfig,
    PriceOracleConfig,
    PythConfig,
    TelegramConfig,
    VaultConfig,
)
from dloop_sizer.models import Asset, LeverageConfig, VaultPosition

ONE = 10**18
USD = 10**8  # oracle prices carry 8 decimals


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def collateral_asset() -> Asset:
    return Asset(address="0xC011A7E4A1", decimals=18, price=USD, symbol="SFRXUSD")


@pytest.fixture()
def debt_asset() -> Asset:
    return Asset(address="0xDEB7A55E7", decimals=18, price=USD, symbol="DUSD")


@pytest.fixture()
def eth_asset() -> Asset:
    return Asset(address="0xE7E7", decimals=18, price=3000 * USD, symbol="ETH")


@pytest.fixture()
def usdc_asset() -> Asset:
    return Asset(address="0xA0B8", decimals=6, price=USD, symbol="USDC")


@pytest.fixture()
def leverage_config() -> LeverageConfig:
    return LeverageConfig(
        target_leverage_bps=30000,
        lower_bound_bps=20000,
        upper_bound_bps=40000,
        max_subsidy_bps=100,
    )


@pytest.fixture()
def position() -> VaultPosition:
    """A vault sitting exactly at 3x."""
    return VaultPosition(collateral=300 * ONE, debt=200 * ONE)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_policy() -> PolicyConfig:
    return PolicyConfig(
        slippage_bps=0,
        min_profit_bps=10,
        flash_fee_bps=9,
        protocol_fee_bps=0,
        quote_ttl_seconds=60,
    )


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.pyth.network/v2/updates/price/latest",
        feeds={"SFRXUSD": "aaa111", "DUSD": "bbb222"},
    )


@pytest.fixture()
def sample_app_config(sample_policy: PolicyConfig, sample_pyth_config: PythConfig) -> AppConfig:
    return AppConfig(
        policy=sample_policy,
        assets={
            "SFRXUSD": AssetConfig(address="0xC011A7E4A1", decimals=18, feed="aaa111"),
            "DUSD": AssetConfig(address="0xDEB7A55E7", decimals=18, feed="bbb222"),
        },
        vaults={
            "sfrxusd-3x": VaultConfig(
                collateral_asset="SFRXUSD",
                debt_asset="DUSD",
                reward_asset="DUSD",
                target_leverage_bps=30000,
                lower_bound_bps=20000,
                upper_bound_bps=40000,
                max_subsidy_bps=100,
            ),
        },
        price_oracle=PriceOracleConfig(provider="pyth", pyth=sample_pyth_config),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
            email=EmailConfig(enabled=False),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    policy:
      slippage_bps: 30
      min_profit_bps: 15
      flash_fee_bps: 5
      protocol_fee_bps: 400
      accept_break_even: true
      quote_ttl_seconds: 120
      surplus_policy: retain
    assets:
      sfrxUSD:
        address: "0xC011A7E4A1"
        decimals: 18
        feed: "aaa111"
      dUSD:
        address: "0xDEB7A55E7"
        decimals: 18
        feed: "bbb222"
    vaults:
      sfrxusd-3x:
        collateral_asset: sfrxUSD
        debt_asset: dUSD
        reward_asset: dUSD
        target_leverage_bps: 30000
        lower_bound_bps: 25000
        upper_bound_bps: 35000
        max_subsidy_bps: 100
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {dUSD: "ccc333"}
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: "999"
      email:
        enabled: false
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
