"""
streamta - Bar Replay Entry Point

Feeds an OHLCV CSV through the confluence engine and prints the bias label.

Usage:
    python main.py bars.csv                       # Final label only
    python main.py bars.csv --per-bar             # One label per bar
    python main.py bars.csv --env prod            # config/base.yaml + config/prod.yaml
    python main.py bars.csv --plot-json out.json  # Also export plot data
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from streamta.config import AppConfig, ConfigManager
from streamta.domain.exceptions import (
    DivisionByZeroError,
    InvalidInputError,
    NotReadyError,
    ProviderError,
    StreamTAError,
)
from streamta.domain.signals import ConfluenceEngine, build_default_engine
from streamta.domain.signals.reporting import format_plot_data_csv, format_plot_data_json
from streamta.utils.logging_setup import get_logger, setup_from_config, shutdown_logging

logger = get_logger(__name__)

REQUIRED_COLUMNS = ["high", "low", "close", "volume"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay OHLCV bars through the streamta confluence engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py data/spy_5m.csv
  python main.py data/spy_5m.csv --per-bar --verbose
  python main.py data/spy_5m.csv --plot-csv plots.csv
        """,
    )

    parser.add_argument(
        "csv",
        type=str,
        help="CSV file with high, low, close and volume columns",
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        default="config",
        help="Directory containing base.yaml and environment overrides (default: config)",
    )

    parser.add_argument(
        "--env",
        type=str,
        default="dev",
        help="Environment override file to merge over base.yaml (default: dev)",
    )

    parser.add_argument(
        "--per-bar",
        action="store_true",
        help="Print the label after every bar instead of only the last one",
    )

    parser.add_argument(
        "--plot-json",
        type=str,
        help="Write indicator plot data as JSON to this path",
    )

    parser.add_argument(
        "--plot-csv",
        type=str,
        help="Write indicator plot data as CSV to this path",
    )

    parser.add_argument(
        "--log-dir",
        type=str,
        help="Override the log directory from the config",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level for all categories)",
    )

    return parser.parse_args(argv)


def load_bars(path: str) -> pd.DataFrame:
    """
    Read the bar file and normalise its columns.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a required column is missing. Volume is required:
            a zero-volume feed leaves the volume-weighted providers undefined.
    """
    frame = pd.read_csv(path)
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {', '.join(missing)}")
    return frame[REQUIRED_COLUMNS].astype(float)


def current_label(engine: ConfluenceEngine) -> str:
    """Label of the latest bar, or the reason there is none yet."""
    try:
        return engine.get_combined_signal().value
    except NotReadyError:
        return "warming up"
    except DivisionByZeroError:
        return "undefined"


def replay(engine: ConfluenceEngine, bars: pd.DataFrame, per_bar: bool = False) -> int:
    """
    Feed every row through the engine.

    Rows the engine rejects are skipped and counted.

    Returns:
        Number of rejected rows.
    """
    rejected = 0
    for index, row in enumerate(bars.itertuples(index=False)):
        try:
            engine.add(row.high, row.low, row.close, row.volume)
        except (InvalidInputError, ProviderError) as e:
            rejected += 1
            logger.warning("Bar skipped", extra={"row": index, "error": str(e)})
            continue
        if per_bar:
            print(f"{index}\t{row.close:.4f}\t{current_label(engine)}")
    return rejected


def export_plots(engine: ConfluenceEngine, json_path: Optional[str], csv_path: Optional[str]) -> None:
    plots = engine.get_plot_data()
    if json_path:
        Path(json_path).write_text(format_plot_data_json(plots), encoding="utf-8")
        logger.info("Plot data written", extra={"path": json_path, "format": "json", "series": len(plots)})
    if csv_path:
        Path(csv_path).write_text(format_plot_data_csv(plots), encoding="utf-8")
        logger.info("Plot data written", extra={"path": csv_path, "format": "csv", "series": len(plots)})


def run(args: argparse.Namespace) -> int:
    """Load config, replay the file, print the result. Returns the exit code."""
    config: AppConfig = ConfigManager(config_dir=args.config_dir, env=args.env).load()
    if args.log_dir:
        config.logging.directory = args.log_dir
    setup_from_config(config.logging, verbose=args.verbose)

    logger.info("Starting replay", extra={"csv": args.csv, "env": args.env})
    try:
        bars = load_bars(args.csv)
        engine = build_default_engine(config.indicators, config.confluence, config.providers)
        rejected = replay(engine, bars, per_bar=args.per_bar)

        score_label = current_label(engine)
        print(f"bars={engine.bar_count} rejected={rejected} label={score_label}")
        if engine.bar_count:
            divergences = engine.get_divergence_signals()
            for name, divergence in divergences.items():
                print(f"divergence {name}: {divergence.value}")

        export_plots(engine, args.plot_json, args.plot_csv)
        logger.info(
            "Replay finished",
            extra={"bars": engine.bar_count, "rejected": rejected, "label": score_label},
        )
        return 0
    finally:
        shutdown_logging()


def main() -> None:
    """Main entry point."""
    args = parse_args()
    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        print("Interrupted")
        sys.exit(130)
    except (FileNotFoundError, ValueError, StreamTAError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
