from __future__ import annotations

"""Download the WCA SQL export and load it into a local PostgreSQL database.

Needs mysqld, the mysql client, pgloader and (by default) sudo on the PATH.
"""

import argparse
import logging
import sys

from wca_stats.config import load_config
from wca_stats.database import provision_database
from wca_stats.errors import WcaStatsError


LOGGER = logging.getLogger(__name__)


def main() -> int:
    ap = argparse.ArgumentParser(description="Provision the wca_stats PostgreSQL database.")
    ap.add_argument("--config", default=None, help="Config file (default: config/default.yaml)")
    ap.add_argument("--keep-files", action="store_true", help="Keep the downloaded zip and SQL dump")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(levelname)s %(message)s")

    try:
        cfg = load_config(args.config).database
        provision_database(cfg, keep_files=args.keep_files)
    except (WcaStatsError, OSError) as e:
        LOGGER.error("Setup failed: %s", e)
        return 1

    LOGGER.info("Setup completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
