"""Sizing orchestration: fetch prices, run the engine, report the decision."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from ..config import AppConfig, VaultConfig
from ..engine.leverage import current_leverage_bps, current_subsidy_bps
from ..engine.price_converter import value_in_base
from ..engine.profitability import evaluate, evaluate_redeem
from ..engine.swap_sizer import validate_swap_result
from ..errors import SizingError, SwapValidationError, UnknownVault
from ..interfaces.notifier import Notifier
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.swap_venue import SwapVenue
from ..models import (
    Asset,
    Proceed,
    Proceeds,
    Reject,
    SizingDecision,
    SwapCheck,
    SwapRequest,
    VaultPosition,
)
from ..notifications import EmailNotifier, TelegramNotifier
from ..oracles import PythOracle
from ..oracles.pyth import PRICE_DECIMALS

logger = logging.getLogger(__name__)


def format_units(amount: int, decimals: int) -> str:
    """Render an integer token amount with its decimal point, e.g. 1.5."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole:,}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole:,}.{frac_str}"


class SizingService:
    """Gathers prices for a vault, runs the engine and reports the outcome.

    Business rejections go to the log channel; hard failures (bad prices,
    stale quotes, swap bound violations) go to the alert channel and are
    re-raised so the caller can retry with fresh inputs.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._policy = config.policy

        self._oracle: PriceOracle = PythOracle(config.price_oracle.pyth)

        self._notifiers: list[Notifier] = []
        if config.notifications.telegram.enabled:
            self._notifiers.append(
                TelegramNotifier(config.notifications.telegram)
            )
        if config.notifications.email.enabled:
            self._notifiers.append(EmailNotifier(config.notifications.email))

    # ------------------------------------------------------------------
    # Input assembly
    # ------------------------------------------------------------------

    def _vault(self, vault_name: str) -> VaultConfig:
        try:
            return self._config.vaults[vault_name]
        except KeyError:
            raise UnknownVault(vault_name) from None

    async def _load_assets(self, vault: VaultConfig) -> dict[str, Asset]:
        """Fresh prices for the vault's assets. Missing prices become 0 (ZeroPrice later)."""
        symbols = sorted(
            {vault.collateral_asset, vault.debt_asset, vault.reward_asset} - {""}
        )
        prices = await self._oracle.fetch_prices(symbols)
        assets: dict[str, Asset] = {}
        for symbol in symbols:
            asset_cfg = self._config.assets[symbol]
            assets[symbol] = Asset(
                address=asset_cfg.address,
                decimals=asset_cfg.decimals,
                price=prices.get(symbol, 0),
                symbol=symbol,
            )
        return assets

    @staticmethod
    def _now() -> int:
        return int(time.time())

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    # ------------------------------------------------------------------
    # Formatting helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _format_leverage(position: VaultPosition, vault: VaultConfig) -> str:
        leverage = current_leverage_bps(position.collateral, position.debt)
        if leverage == 0:
            return "empty vault"
        subsidy = current_subsidy_bps(
            leverage, vault.target_leverage_bps, vault.max_subsidy_bps
        )
        return (
            f"{format_units(leverage, 4)}x (target {format_units(vault.target_leverage_bps, 4)}x, "
            f"subsidy {subsidy} bps)"
        )

    def _build_proceed_message(
        self,
        vault_name: str,
        vault: VaultConfig,
        position: VaultPosition,
        decision: Proceed,
        principal_asset: Asset,
        swap_input_asset: Asset,
        profit_asset: Asset,
    ) -> str:
        profit_usd = value_in_base(decision.expected_net_profit, profit_asset)
        return (
            f"✅ PROCEED · {vault_name}\n"
            f"\n"
            f"Flash principal: {format_units(decision.flash_principal, principal_asset.decimals)} "
            f"{principal_asset.label}\n"
            f"Max swap input: {format_units(decision.max_swap_input, swap_input_asset.decimals)} "
            f"{swap_input_asset.label}\n"
            f"Flash fee: {format_units(decision.flash_fee, principal_asset.decimals)}\n"
            f"Net profit: {format_units(decision.expected_net_profit, profit_asset.decimals)} "
            f"{profit_asset.label} (${format_units(profit_usd, PRICE_DECIMALS)})\n"
            f"Leverage: {self._format_leverage(position, vault)}\n"
            f"\n"
            f"{self._now_str()} UTC"
        )

    def _build_reject_message(
        self,
        vault_name: str,
        vault: VaultConfig,
        position: VaultPosition,
        decision: Reject,
    ) -> str:
        return (
            f"⏭️ SKIP · {vault_name}\n"
            f"\n"
            f"Reason: {decision.reason.value}\n"
            f"{decision.detail}\n"
            f"Leverage: {self._format_leverage(position, vault)}\n"
            f"\n"
            f"{self._now_str()} UTC"
        )

    def _build_failure_alert(self, vault_name: str, error: Exception) -> str:
        return (
            f"🚨 SIZING FAILURE · {vault_name}\n"
            f"\n"
            f"{type(error).__name__}: {error}\n"
            f"\n"
            f"Check price feeds and vault state before the next cycle.\n"
            f"{self._now_str()} UTC"
        )

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def _send_log(self, message: str, silent: bool = True) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=silent)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    async def _report_failure(self, vault_name: str, error: SizingError) -> None:
        logger.error("Sizing failed for %s: %s", vault_name, error)
        await self._send_alert(
            self._build_failure_alert(vault_name, error),
            subject="🚨 Sizing failure",
        )

    async def _report(
        self,
        vault_name: str,
        vault: VaultConfig,
        position: VaultPosition,
        decision: SizingDecision,
        principal_asset: Asset,
        swap_input_asset: Asset,
        profit_asset: Asset,
    ) -> None:
        if isinstance(decision, Proceed):
            logger.info(
                "%s: proceed, principal=%d max_input=%d net_profit=%d",
                vault_name,
                decision.flash_principal,
                decision.max_swap_input,
                decision.expected_net_profit,
            )
            message = self._build_proceed_message(
                vault_name,
                vault,
                position,
                decision,
                principal_asset,
                swap_input_asset,
                profit_asset,
            )
            await self._send_log(message, silent=False)
        else:
            logger.info(
                "%s: rejected, %s (%s)", vault_name, decision.reason.value, decision.detail
            )
            await self._send_log(
                self._build_reject_message(vault_name, vault, position, decision)
            )

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    async def _size(
        self,
        vault_name: str,
        position: VaultPosition,
        amount_out: int,
        reward_amount: int,
    ) -> tuple[SwapRequest, SizingDecision]:
        vault = self._vault(vault_name)
        try:
            assets = await self._load_assets(vault)
            now = self._now()
            request = SwapRequest(
                input_asset=assets[vault.debt_asset],
                output_asset=assets[vault.collateral_asset],
                slippage_bps=self._policy.slippage_bps,
                deadline=now + self._policy.quote_ttl_seconds,
                amount_out=amount_out,
            )
            proceeds = None
            if vault.reward_asset and reward_amount:
                proceeds = Proceeds(asset=assets[vault.reward_asset], amount=reward_amount)

            decision = evaluate(
                position,
                vault.leverage(),
                request,
                proceeds,
                flash_fee_bps=self._policy.flash_fee_bps,
                protocol_fee_bps=self._policy.protocol_fee_bps,
                min_profit_bps=self._policy.min_profit_bps,
                accept_break_even=self._policy.accept_break_even,
                now=now,
            )
        except SizingError as e:
            await self._report_failure(vault_name, e)
            raise

        debt_asset = request.input_asset
        await self._report(
            vault_name, vault, position, decision, debt_asset, debt_asset, debt_asset
        )
        return request, decision

    async def evaluate(
        self,
        vault_name: str,
        position: VaultPosition,
        amount_out: int,
        reward_amount: int = 0,
    ) -> SizingDecision:
        """Size a compounding run buying exactly ``amount_out`` collateral."""
        _, decision = await self._size(vault_name, position, amount_out, reward_amount)
        return decision

    async def evaluate_redeem(
        self,
        vault_name: str,
        position: VaultPosition,
        assets_to_withdraw: int,
        output_slippage_bps: int = 10_000,
    ) -> SizingDecision:
        """Size a flash-funded redeem of ``assets_to_withdraw`` collateral."""
        vault = self._vault(vault_name)
        try:
            assets = await self._load_assets(vault)
            decision = evaluate_redeem(
                position,
                vault.leverage(),
                assets_to_withdraw,
                assets[vault.collateral_asset],
                assets[vault.debt_asset],
                slippage_bps=self._policy.slippage_bps,
                flash_fee_bps=self._policy.flash_fee_bps,
                output_slippage_bps=output_slippage_bps,
            )
        except SizingError as e:
            await self._report_failure(vault_name, e)
            raise

        await self._report(
            vault_name,
            vault,
            position,
            decision,
            assets[vault.debt_asset],
            assets[vault.collateral_asset],
            assets[vault.collateral_asset],
        )
        return decision

    async def execute(
        self,
        vault_name: str,
        position: VaultPosition,
        amount_out: int,
        venue: SwapVenue,
        reward_amount: int = 0,
    ) -> SwapCheck | None:
        """Evaluate, then drive the exact-output swap only on ``Proceed``.

        Returns the validated swap outcome, or None when nothing was executed.
        The surplus is reported per ``policy.surplus_policy``; this service
        never moves funds itself.
        """
        request, decision = await self._size(vault_name, position, amount_out, reward_amount)
        if isinstance(decision, Reject):
            return None

        quoted_input = await venue.quote_exact_output(request)
        if quoted_input > decision.max_swap_input:
            logger.warning(
                "%s: venue quote %d exceeds max input %d, skipping",
                vault_name,
                quoted_input,
                decision.max_swap_input,
            )
            await self._send_log(
                f"⏭️ SKIP · {vault_name}\n\nVenue quote {quoted_input} exceeds "
                f"max input {decision.max_swap_input}\n\n{self._now_str()} UTC"
            )
            return None

        result = await venue.execute_exact_output(request, decision.max_swap_input)
        try:
            check = validate_swap_result(result, amount_out, decision.max_swap_input)
        except SwapValidationError as e:
            await self._report_failure(vault_name, e)
            raise

        if check.surplus:
            action = "refund to receiver" if self._policy.surplus_policy == "refund" else "retain"
            logger.info("%s: swap surplus %d (%s)", vault_name, check.surplus, action)
        return check
