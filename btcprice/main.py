#!/usr/bin/env python3
"""Bitcoin Price.

Fetches the Bitcoin/USD price from several public sources at once and prints
the average together with the range and spread across the sources that
answered.

Exits 0 when at least one source succeeded, 1 otherwise.
"""

import argparse
import asyncio
import json
import logging
import sys

from .src.BitcoinPrice import NamedSourceNotFoundError, format_report, get_btc_average
from .src.PriceAggregator import AllSourcesFailedError
from .src.sources import DEFAULT_TIMEOUT, get_available_sources, get_source

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    available_sources = get_available_sources()

    parser = argparse.ArgumentParser(
        description="Bitcoin Price: average BTC/USD across public sources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available price sources:
  {', '.join(available_sources)}

Examples:
  # Average across all sources
  python -m btcprice.main

  # Full report as JSON
  python -m btcprice.main --json

  # A single source's price
  python -m btcprice.main --source Coinbase
""",
    )

    parser.add_argument(
        "--sources",
        type=str,
        help=f"Comma-separated price sources. Available: {', '.join(available_sources)}",
        default=",".join(available_sources),
    )

    parser.add_argument(
        "--source",
        type=str,
        help="Print only this source's price (case-sensitive, e.g. Coinbase)",
        default=None,
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help=f"Timeout for each source request in seconds (default: {DEFAULT_TIMEOUT})",
        default=DEFAULT_TIMEOUT,
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full report as JSON",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the Bitcoin Price CLI.

    :param argv: Command line arguments (default: sys.argv[1:]).
    :returns: Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout must be positive")

    names = [s.strip() for s in args.sources.split(",") if s.strip()]
    if not names:
        parser.error("At least one source must be specified")

    available_sources = get_available_sources()
    invalid_sources = [s for s in names if s not in available_sources]
    if invalid_sources:
        parser.error(
            f"Unknown sources: {invalid_sources}. "
            f"Available: {', '.join(available_sources)}"
        )
    if len(set(names)) != len(names):
        parser.error(f"Duplicate sources: {names}")

    sources = [get_source(name) for name in names]

    try:
        report = asyncio.run(get_btc_average(sources, timeout=args.fetch_timeout))
        if args.source is not None:
            price = report.get_price(args.source)
            if price is None:
                raise NamedSourceNotFoundError(args.source)
            print(price)
        elif args.json:
            print(json.dumps(report.to_dict(), indent=2))
        else:
            print(format_report(report))
    except AllSourcesFailedError as e:
        logger.error(str(e))
        for name, reason in e.failures.items():
            logger.error(f"  {name}: {reason}")
        return 1
    except NamedSourceNotFoundError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
