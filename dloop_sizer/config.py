"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import LeverageConfig

logger = logging.getLogger(__name__)

SURPLUS_POLICIES = ("refund", "retain")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyConfig:
    slippage_bps: int = 50
    min_profit_bps: int = 10
    flash_fee_bps: int = 9
    protocol_fee_bps: int = 500
    accept_break_even: bool = False
    quote_ttl_seconds: int = 60
    surplus_policy: str = "refund"


@dataclass(frozen=True)
class AssetConfig:
    address: str = ""
    decimals: int = 18
    feed: str = ""


@dataclass(frozen=True)
class VaultConfig:
    collateral_asset: str = ""
    debt_asset: str = ""
    reward_asset: str = ""
    target_leverage_bps: int = 30000
    lower_bound_bps: int = 20000
    upper_bound_bps: int = 40000
    max_subsidy_bps: int = 0

    def leverage(self) -> LeverageConfig:
        return LeverageConfig(
            target_leverage_bps=self.target_leverage_bps,
            lower_bound_bps=self.lower_bound_bps,
            upper_bound_bps=self.upper_bound_bps,
            max_subsidy_bps=self.max_subsidy_bps,
        )


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class EmailConfig:
    enabled: bool = False
    alert_email: str = ""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    sender_email: str = ""
    sender_password: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    email: EmailConfig = field(default_factory=EmailConfig)


@dataclass(frozen=True)
class AppConfig:
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    assets: dict[str, AssetConfig] = field(default_factory=dict)
    vaults: dict[str, VaultConfig] = field(default_factory=dict)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_policy(raw: dict[str, Any]) -> PolicyConfig:
    return PolicyConfig(
        slippage_bps=int(raw.get("slippage_bps", 50)),
        min_profit_bps=int(raw.get("min_profit_bps", 10)),
        flash_fee_bps=int(raw.get("flash_fee_bps", 9)),
        protocol_fee_bps=int(raw.get("protocol_fee_bps", 500)),
        accept_break_even=bool(raw.get("accept_break_even", False)),
        quote_ttl_seconds=int(raw.get("quote_ttl_seconds", 60)),
        surplus_policy=str(raw.get("surplus_policy", "refund")),
    )


def _build_assets(raw: dict[str, Any]) -> dict[str, AssetConfig]:
    assets: dict[str, AssetConfig] = {}
    for symbol, cfg in raw.items():
        assets[symbol.upper()] = AssetConfig(
            address=cfg.get("address", ""),
            decimals=int(cfg.get("decimals", 18)),
            feed=cfg.get("feed", ""),
        )
    return assets


def _build_vaults(raw: dict[str, Any]) -> dict[str, VaultConfig]:
    vaults: dict[str, VaultConfig] = {}
    for name, cfg in raw.items():
        vaults[name] = VaultConfig(
            collateral_asset=cfg.get("collateral_asset", "").upper(),
            debt_asset=cfg.get("debt_asset", "").upper(),
            reward_asset=cfg.get("reward_asset", "").upper(),
            target_leverage_bps=int(cfg.get("target_leverage_bps", 30000)),
            lower_bound_bps=int(cfg.get("lower_bound_bps", 20000)),
            upper_bound_bps=int(cfg.get("upper_bound_bps", 40000)),
            max_subsidy_bps=int(cfg.get("max_subsidy_bps", 0)),
        )
    return vaults


def _build_price_oracle(
    raw: dict[str, Any], assets: dict[str, AssetConfig]
) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    # Feed ids come from the asset table; an explicit feeds map overrides it
    feeds = {symbol: a.feed for symbol, a in assets.items() if a.feed}
    feeds.update({k.upper(): v for k, v in pyth_raw.get("feeds", {}).items()})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=feeds,
        ),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    em = raw.get("email", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
        email=EmailConfig(
            enabled=bool(em.get("enabled", False)),
            alert_email=em.get("alert_email", ""),
            smtp_server=em.get("smtp_server", "smtp.gmail.com"),
            smtp_port=int(em.get("smtp_port", 587)),
            sender_email=em.get("sender_email", ""),
            sender_password=em.get("sender_password", ""),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    assets = _build_assets(raw.get("assets", {}))
    cfg = AppConfig(
        policy=_build_policy(raw.get("policy", {})),
        assets=assets,
        vaults=_build_vaults(raw.get("vaults", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}), assets),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    policy = cfg.policy
    for name in ("flash_fee_bps", "protocol_fee_bps"):
        value = getattr(policy, name)
        if not 0 <= value <= 10_000:
            raise ValueError(f"policy.{name} must be within [0, 10000], got {value}")
    if not 0 <= policy.slippage_bps < 10_000:
        raise ValueError(f"policy.slippage_bps must be within [0, 10000), got {policy.slippage_bps}")
    if policy.min_profit_bps < 0:
        raise ValueError("policy.min_profit_bps must be non-negative")
    if policy.surplus_policy not in SURPLUS_POLICIES:
        raise ValueError(
            f"policy.surplus_policy must be one of {SURPLUS_POLICIES}, got '{policy.surplus_policy}'"
        )

    for symbol, asset in cfg.assets.items():
        if not asset.address:
            raise ValueError(f"Asset '{symbol}' has no address")

    if not cfg.vaults:
        raise ValueError("At least one vault must be configured")

    for name, vault in cfg.vaults.items():
        for role in ("collateral_asset", "debt_asset"):
            symbol = getattr(vault, role)
            if symbol not in cfg.assets:
                raise ValueError(f"Vault '{name}' references unknown {role} '{symbol}'")
        if vault.reward_asset and vault.reward_asset not in cfg.assets:
            raise ValueError(
                f"Vault '{name}' references unknown reward_asset '{vault.reward_asset}'"
            )
        # Raises InvalidLeverageConfig (a ValueError) on unordered bounds
        vault.leverage()
