"""Provisioning flow: WCA SQL export -> local PostgreSQL database.

Steps run strictly in sequence:
download -> extract -> ensure Postgres database -> load dump into MySQL ->
pgloader -> clean up MySQL -> remove temporary files.

Temporary files are removed after success and after failure (unless
``keep_files`` is set); the original error is re-raised.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..config import DatabaseConfig
from ..errors import ProvisioningError
from .downloader import download_export, extract_sql, remove_files
from .mysql import MySqlServer
from .pgloader import run_pgloader, write_load_file
from .postgres import ensure_database


LOGGER = logging.getLogger(__name__)


class DatabaseProvisioner:
    """Run the complete provisioning flow."""

    def __init__(
        self,
        config: DatabaseConfig,
        keep_files: bool = False,
        mysql: Optional[MySqlServer] = None,
    ):
        """Initialize provisioner.

        Args:
            config: Database settings
            keep_files: Keep the downloaded zip and extracted SQL dump
            mysql: MySQL server handle (built from config if omitted)
        """
        self.config = config
        self.keep_files = keep_files
        self.mysql = mysql if mysql is not None else MySqlServer(config.mysql)

    def run(self) -> dict:
        """Provision the database.

        Returns:
            Dictionary with run statistics

        Raises:
            ProvisioningError: If any step fails
        """
        start_time = datetime.now()
        try:
            download_export(self.config.export_url, self.config.zip_path)
            extract_sql(self.config.zip_path, self.config.sql_path)
            created = ensure_database(self.config)
            self.import_database()
        finally:
            self.cleanup()

        elapsed = (datetime.now() - start_time).total_seconds()
        LOGGER.info("Setup completed in %.1fs", elapsed)
        return {
            "database": self.config.name,
            "created": created,
            "elapsed_seconds": round(elapsed, 2),
        }

    def import_database(self) -> None:
        """Load the dump into MySQL and migrate it to PostgreSQL."""
        name = self.config.name
        load_path = write_load_file(self.config)

        self.mysql.start()
        self.mysql.wait_until_ready()

        LOGGER.info("Setting up MySQL database %s", name)
        self.mysql.recreate_database(name)
        self.mysql.import_dump(name, self.config.sql_path)

        run_pgloader(load_path, self.config)

        LOGGER.info("Cleaning up MySQL database and load file")
        self.mysql.drop_database(name)
        remove_files([load_path])

        if not self.mysql.stop():
            LOGGER.warning("MySQL did not shut down cleanly")

    def cleanup(self) -> None:
        # The load file holds the Postgres password, so it never survives
        remove_files([self.config.load_file_path])
        if self.keep_files:
            LOGGER.info("Keeping %s and %s", self.config.zip_path, self.config.sql_path)
            return
        LOGGER.info("Cleaning up temporary files...")
        remove_files([self.config.zip_path, self.config.sql_path])


def provision_database(config: DatabaseConfig, keep_files: bool = False) -> dict:
    """Download the WCA export and load it into PostgreSQL.

    Args:
        config: Database settings
        keep_files: Keep the downloaded archive and SQL dump

    Returns:
        Dictionary with run statistics
    """
    try:
        return DatabaseProvisioner(config, keep_files=keep_files).run()
    except ProvisioningError:
        LOGGER.error("Setup failed")
        raise
