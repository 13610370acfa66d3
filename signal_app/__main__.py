"""CLI entry point: analyse snapshot JSON files and print recommendations.

Usage:
    python -m signal_app btcusdt.json
    python -m signal_app btcusdt.json ethusdt.json --hour 12
    python -m signal_app snapshot.json --symbol SOLUSDT --balance 5000 --risk 1
    python -m signal_app snapshot.json --config ensemble.yaml --explain
    python -m signal_app snapshots/            # every TARGET_SYMBOLS file in the directory
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import orjson

from signal_app.config import get_settings
from signal_app.services import AnalysisService, JsonFileSnapshotProvider

logger = logging.getLogger(__name__)


def parse_hour(value: str) -> int:
    """Parse an hour of day (0-23)."""
    try:
        hour = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hour: {value}")
    if not 0 <= hour <= 23:
        raise argparse.ArgumentTypeError(f"Hour out of range: {hour} (expected 0-23)")
    return hour


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="signal_app",
        description="Ensemble trading-signal analysis of market snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Snapshot files are JSON objects with candle lists keyed by timeframe
("1m", "15m", "1h", "4h") and optional "orderbook" / "ticker" entries.
The symbol defaults to the upper-cased file name. Given a directory, the
CLI analyses <symbol>.json for each symbol in TARGET_SYMBOLS.
        """,
    )
    parser.add_argument(
        "snapshots",
        nargs="+",
        type=Path,
        help="Snapshot JSON file(s), or one directory of <symbol>.json files",
    )
    parser.add_argument(
        "--symbol",
        type=str,
        default=None,
        help="Symbol for a single snapshot file (default: file name)",
    )
    parser.add_argument(
        "--hour",
        type=parse_hour,
        default=None,
        help="Local hour of day for the time multiplier (default: now)",
    )
    parser.add_argument(
        "--balance",
        type=float,
        default=None,
        help="Account balance for position sizing (default: ACCOUNT_BALANCE)",
    )
    parser.add_argument(
        "--risk",
        type=float,
        default=None,
        help="Risk percent per trade (default: RISK_PERCENT)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Ensemble YAML config (default: ENSEMBLE_CONFIG)",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Include per-detector verdicts and features in the output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args(argv)
    if args.symbol and len(args.snapshots) > 1:
        parser.error("--symbol only applies to a single snapshot file")
    if len(args.snapshots) > 1 and any(p.is_dir() for p in args.snapshots):
        parser.error("a snapshot directory cannot be combined with other paths")
    if args.symbol and args.snapshots[0].is_dir():
        parser.error("--symbol only applies to a single snapshot file")
    return args


def build_service(args: argparse.Namespace) -> AnalysisService:
    settings = get_settings()
    overrides = {}
    if args.balance is not None:
        overrides["account_balance"] = args.balance
    if args.risk is not None:
        overrides["risk_percent"] = args.risk
    if args.config is not None:
        overrides["ensemble_config"] = args.config
    if overrides:
        settings = settings.model_copy(update=overrides)

    if args.snapshots[0].is_dir():
        provider = JsonFileSnapshotProvider.from_directory(args.snapshots[0], settings.target_symbols)
    elif args.symbol:
        provider = JsonFileSnapshotProvider({args.symbol: args.snapshots[0]})
    else:
        provider = JsonFileSnapshotProvider.from_files(args.snapshots)

    return AnalysisService.from_settings(provider=provider, settings=settings)


def render(recommendation, explain: bool) -> dict:
    data = recommendation.model_dump(mode="json")
    if not explain:
        data["decision"].pop("explain", None)
        data.pop("features", None)
    return data


async def run(args: argparse.Namespace) -> int:
    service = build_service(args)
    recommendations = await service.analyze_symbols(service.provider.symbols, hour=args.hour)

    output = [render(r, args.explain) for r in recommendations]
    payload = output[0] if len(output) == 1 else output
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())

    errors = [r for r in recommendations if r.decision.reason.startswith("Analysis error")]
    return 0 if len(errors) < len(recommendations) else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(
        logging, get_settings().log_level.upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
