"""Command-line interface for the dLOOP flash-loan sizer."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_config
from .errors import SizingError
from .logging_setup import configure_logging
from .models import Proceed, VaultPosition
from .services import SizingService

logger = logging.getLogger(__name__)

EXIT_PROCEED = 0
EXIT_REJECT = 1
EXIT_FAILURE = 2


def _uint(value: str) -> int:
    """argparse type for raw integer token amounts (wei-level)."""
    try:
        parsed = int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value!r}")
    return parsed


def _add_position_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("vault", help="Vault name from config.yaml")
    parser.add_argument(
        "--collateral", type=_uint, required=True, help="Vault collateral in base units"
    )
    parser.add_argument("--debt", type=_uint, required=True, help="Vault debt in base units")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="dloop-sizer",
        description="Flash-loan sizing and profitability checks for dLOOP vaults",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    evaluate_parser = sub.add_parser(
        "evaluate", help="Size a compounding run buying an exact collateral amount"
    )
    _add_position_args(evaluate_parser)
    evaluate_parser.add_argument(
        "--amount-out",
        type=_uint,
        required=True,
        help="Exact collateral output of the swap, in collateral wei",
    )
    evaluate_parser.add_argument(
        "--proceeds",
        type=_uint,
        default=0,
        help="Reward claim before the protocol fee, in reward-asset wei",
    )

    redeem_parser = sub.add_parser("redeem", help="Size a flash-funded leveraged redeem")
    _add_position_args(redeem_parser)
    redeem_parser.add_argument(
        "--assets",
        type=_uint,
        required=True,
        help="Collateral to withdraw for the receiver, in collateral wei",
    )
    redeem_parser.add_argument(
        "--output-slippage-bps",
        type=int,
        default=10_000,
        help="Slippage the receiver accepts on the withdrawn assets (default: 10000)",
    )

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and map the outcome to an exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    service = SizingService(config)
    position = VaultPosition(collateral=args.collateral, debt=args.debt)

    try:
        if args.command == "evaluate":
            decision = await service.evaluate(
                args.vault, position, args.amount_out, reward_amount=args.proceeds
            )
        else:
            decision = await service.evaluate_redeem(
                args.vault, position, args.assets, output_slippage_bps=args.output_slippage_bps
            )
    except SizingError as e:
        logger.error("%s %s failed: %s", args.command, args.vault, e)
        return EXIT_FAILURE

    print(decision)
    return EXIT_PROCEED if isinstance(decision, Proceed) else EXIT_REJECT


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
