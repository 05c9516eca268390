#!/usr/bin/env python3
"""
Adaptive Hull Moving Average - Demo Runner

Generates the synthetic price series, computes the AHMA indicator with the
requested parameters and prints the summary report. Optionally writes the
dataset (CSV) and the full report (JSON).

EXECUTION
    python run_demo.py
    python run_demo.py --period 30 --sensitivity 0.6
    python run_demo.py --trailing-window 40 --output outputs

OUTPUT ARTIFACTS
    {output}/ahma_dataset.csv   Per-point close, AHMA, bias, volatility
    {output}/ahma_report.json   Parameters, metrics, zones and dataset
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from ahma.config import VERSION, Config


# =============================================================================
# DISPLAY COMPONENTS
# =============================================================================

BANNER = r'''
╔═══════════════════════════════════════════════════════════════════════════════╗
║                                                                               ║
║                 AHMA INDICATOR STUDIO                                         ║
║                 Adaptive Hull Moving Average                                  ║
║                                                                               ║
╚═══════════════════════════════════════════════════════════════════════════════╝
'''


def print_section_header(title: str, char: str = "═") -> None:
    """Print a formatted section header."""
    width = 79
    print()
    print(char * width)
    print(f"  {title}")
    print(char * width)
    print()


# =============================================================================
# MAIN
# =============================================================================

def main() -> int:
    """
    Main entry point for the demo runner.

    Returns
    -------
    int
        Exit code (0 for success, 1 for failure)
    """
    start_time = time.time()

    parser = argparse.ArgumentParser(
        description="Adaptive Hull Moving Average - Demo Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_demo.py                               # Defaults (55, 0.35)
  python run_demo.py --period 14                   # Fastest Hull
  python run_demo.py --sensitivity 0.85            # Heaviest smoothing
  python run_demo.py --trailing-window 40          # No lookahead
        """
    )

    parser.add_argument(
        "--period", "-p",
        type=float,
        default=Config.DEFAULT_BASE_PERIOD,
        help=f"Base Hull period, {Config.MIN_BASE_PERIOD}-{Config.MAX_BASE_PERIOD} "
             f"(default: {Config.DEFAULT_BASE_PERIOD})"
    )

    parser.add_argument(
        "--sensitivity", "-s",
        type=float,
        default=Config.DEFAULT_SENSITIVITY,
        help=f"Adaptive sensitivity, {Config.MIN_SENSITIVITY}-{Config.MAX_SENSITIVITY} "
             f"(default: {Config.DEFAULT_SENSITIVITY})"
    )

    parser.add_argument(
        "--length", "-n",
        type=int,
        default=Config.DATA_LENGTH,
        help=f"Number of simulated days (default: {Config.DATA_LENGTH})"
    )

    parser.add_argument(
        "--seed",
        type=float,
        default=Config.DEFAULT_SEED,
        help=f"Series seed (default: {Config.DEFAULT_SEED})"
    )

    parser.add_argument(
        "--trailing-window",
        type=int,
        default=None,
        help="Normalize volatility by a trailing maximum of this many bars "
             "instead of the whole-series maximum"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Directory for ahma_dataset.csv and ahma_report.json"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}"
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="  %(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%H:%M:%S"
    )
    logger = logging.getLogger(__name__)

    print(BANNER)
    print(f"  Execution Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Series:            {args.length} days, seed {args.seed:g}")
    print(f"  Base Period:       {args.period:g}")
    print(f"  Sensitivity:       {args.sensitivity:.2f}")
    print(f"  Version:           {VERSION}")
    print()

    try:
        from ahma.ahma_engine import AHMAEngine
        from ahma.report_generator import (
            export_dataset_csv,
            generate_json_report,
            print_ahma_report,
        )
        from ahma.volatility import GlobalMaxNormalizer, TrailingMaxNormalizer

        if args.trailing_window is not None:
            normalizer = TrailingMaxNormalizer(args.trailing_window)
        else:
            normalizer = GlobalMaxNormalizer()

        print_section_header("AHMA COMPUTATION")

        engine = AHMAEngine(length=args.length, seed=args.seed, normalizer=normalizer)
        output = engine.process(args.period, args.sensitivity)

        logger.info(
            f"Computed {len(output.points)} points, "
            f"{len(output.zones)} trend zones, bias {output.metrics.bias.value}"
        )

        print_ahma_report(output)

        if args.output:
            output_dir = Path(args.output)
            export_dataset_csv(output, output_dir / "ahma_dataset.csv")
            generate_json_report(output, output_dir / "ahma_report.json")

    except Exception as e:
        logger.error(f"AHMA run failed: {e}")
        import traceback
        traceback.print_exc()
        return 1

    logger.info(f"Completed in {time.time() - start_time:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
