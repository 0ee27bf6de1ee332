"""Transient MySQL server used to load the WCA SQL dump.

The export is a MySQL dump, so it is loaded into a local ``mysqld`` started
with ``--skip-grant-tables`` and then migrated to PostgreSQL by pgloader.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import Optional

from ..config import MySqlConfig
from ..errors import ProvisioningError
from .commands import run_command


LOGGER = logging.getLogger(__name__)

ERROR_LOG_TAIL_LINES = 20


class MySqlServer:
    """Start, probe, use and stop a local mysqld."""

    def __init__(self, config: MySqlConfig):
        self.config = config
        self.run_dir = Path(config.run_dir)
        self.pid_file = self.run_dir / "mysqld.pid"
        self.socket = self.run_dir / "mysqld.sock"

    def _sudo(self, *args: str) -> list[str]:
        return ["sudo", *args] if self.config.use_sudo else list(args)

    def _client(self, *args: str) -> list[str]:
        return ["mysql", "-u", "root", *args]

    def stop(self) -> bool:
        """Shut the server down; returns False if it was not running."""
        try:
            run_command(self._sudo("mysqladmin", "-u", "root", "shutdown"), capture=True)
        except ProvisioningError as e:
            LOGGER.debug("mysqladmin shutdown failed (server not running?): %s", e)
            return False
        time.sleep(self.config.settle_seconds)
        return True

    def start(self) -> None:
        """Launch mysqld in the background, stopping a running instance first."""
        LOGGER.info("Starting MySQL")
        self.stop()

        if self.config.use_sudo:
            run_command(["sudo", "chown", "-R", "mysql:mysql", self.config.data_dir, self.config.run_dir])
            prefix = ["sudo", "-u", "mysql"]
        else:
            prefix = []

        args = prefix + [
            "mysqld",
            f"--datadir={self.config.data_dir}",
            f"--pid-file={self.pid_file}",
            f"--socket={self.socket}",
            "--skip-grant-tables",
            "--skip-networking=0",
        ]
        try:
            subprocess.Popen(
                args,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise ProvisioningError(f"Could not start mysqld: {e}") from e
        time.sleep(self.config.settle_seconds)

    def is_ready(self) -> bool:
        if not self.pid_file.exists():
            return False
        try:
            run_command(self._client("-e", "SELECT 1"), capture=True)
        except ProvisioningError:
            return False
        return True

    def wait_until_ready(self) -> None:
        """Poll until the server answers queries.

        Raises:
            ProvisioningError: If it is not ready after ``ready_attempts`` polls
        """
        LOGGER.info("Waiting for MySQL to be ready...")
        for attempt in range(self.config.ready_attempts):
            if self.is_ready():
                LOGGER.info("MySQL is ready")
                return
            if attempt == 0:
                LOGGER.info("MySQL not ready, waiting...")
            elif attempt % 5 == 0:
                LOGGER.info("Still waiting for MySQL... (%d attempts)", attempt)
            time.sleep(self.config.ready_interval_seconds)

        tail = self.error_log_tail()
        if tail:
            LOGGER.error("MySQL error log:\n%s", tail)
        else:
            LOGGER.error("Could not read MySQL error log")
        raise ProvisioningError("Timeout waiting for MySQL to be ready")

    def error_log_tail(self) -> Optional[str]:
        try:
            return run_command(
                self._sudo("tail", "-n", str(ERROR_LOG_TAIL_LINES), self.config.error_log), capture=True
            )
        except ProvisioningError:
            return None

    def execute(self, sql: str) -> None:
        run_command(self._client("-e", sql))

    def recreate_database(self, name: str) -> None:
        self.execute(f"DROP DATABASE IF EXISTS {name}; CREATE DATABASE {name};")

    def drop_database(self, name: str) -> None:
        self.execute(f"DROP DATABASE {name};")

    def import_dump(self, name: str, sql_path: str | Path) -> None:
        """Load a SQL dump into database ``name``."""
        LOGGER.info("Importing %s into MySQL database %s", sql_path, name)
        run_command(self._client(name), stdin_path=Path(sql_path))
