from __future__ import annotations

"""Build the all-time ranking of averages for one event.

Reads the results table of the WCA TSV export and writes every valid average
of the event, fastest first, to a JSON file.
"""

import argparse
import logging
import sys

from wca_stats.config import load_config
from wca_stats.errors import WcaStatsError
from wca_stats.rankings import format_summary, run_rankings


LOGGER = logging.getLogger(__name__)


def main() -> int:
    ap = argparse.ArgumentParser(description="Rank all valid averages of one WCA event.")
    ap.add_argument("--config", default=None, help="Config file (default: config/default.yaml)")
    ap.add_argument("--input", default=None, help="Results TSV (overrides config)")
    ap.add_argument("--output", default=None, help="Ranking JSON (overrides config)")
    ap.add_argument("--event", default=None, help="Event id (overrides config)")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s %(message)s")

    try:
        cfg = load_config(args.config).rankings
        run = run_rankings(
            args.input or cfg.input_path,
            args.output or cfg.output_path,
            event_id=args.event or cfg.event_id,
            chunk_size=cfg.chunk_size,
        )
    except (WcaStatsError, OSError) as e:
        LOGGER.error("Error processing rankings: %s", e)
        return 1

    for line in format_summary(run, top_n=cfg.top_n):
        print(line)
    print("Rankings generated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
