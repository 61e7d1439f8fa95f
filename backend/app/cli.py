"""Command-line entry point.

Usage:
    okx-analysis signal
    okx-analysis ma --inst-id ETH-USDT --bar 4H
    okx-analysis macd --limit 300 --json
"""

import argparse
import asyncio
import json
import logging
import sys

from app.clients import OkxRestClient
from app.config import get_settings
from app.services import AnalysisResult, AnalysisService
from core.models import Action, Timeframe


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="okx-analysis",
        description="Technical analysis (MA/RSI/MACD) and composite signal for OKX instruments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  okx-analysis signal
  okx-analysis ma --inst-id ETH-USDT --bar 4H
  okx-analysis macd --limit 300 --json
        """,
    )
    parser.add_argument(
        "action",
        choices=[a.value for a in Action],
        help="kline, ma, rsi, macd or signal",
    )
    parser.add_argument(
        "--inst-id",
        type=str,
        default=settings.default_inst_id,
        help=f"Instrument (default: {settings.default_inst_id})",
    )
    parser.add_argument(
        "--bar",
        choices=[t.value for t in Timeframe],
        default=settings.default_bar,
        help=f"Candle period (default: {settings.default_bar})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.default_limit,
        help=f"Number of candles, max {settings.max_limit} (default: {settings.default_limit})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> AnalysisResult:
    settings = get_settings()
    client = OkxRestClient(
        base_url=settings.base_url,
        timeout=settings.request_timeout,
        calls_per_minute=settings.calls_per_minute,
    )
    try:
        service = AnalysisService(client, settings=settings)
        return await service.execute(
            args.action, inst_id=args.inst_id, bar=args.bar, limit=args.limit
        )
    finally:
        await client.close()


def print_result(result: AnalysisResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
    elif result.success:
        print(result.summary)
        reasons = (result.data or {}).get("reasons")
        if reasons:
            print("Reasons: " + ", ".join(reasons))
    else:
        print(f"Error: {result.error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    result = asyncio.run(run(args))
    print_result(result, args.json)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
