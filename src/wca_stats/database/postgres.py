"""PostgreSQL helpers for the provisioning flow."""

from __future__ import annotations

import logging
import re

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from ..config import DatabaseConfig
from ..errors import ConfigError, ProvisioningError


LOGGER = logging.getLogger(__name__)

MAINTENANCE_DATABASE = "postgres"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def ensure_database(config: DatabaseConfig) -> bool:
    """Create the target database if it does not exist yet.

    Connects to the ``postgres`` maintenance database; CREATE DATABASE
    cannot run inside a transaction, hence AUTOCOMMIT.

    Args:
        config: Database settings

    Returns:
        True if the database was created, False if it already existed

    Raises:
        ConfigError: If the database name is not a plain identifier
        ProvisioningError: If the server cannot be reached or the statement fails
    """
    if not _IDENTIFIER_RE.match(config.name):
        raise ConfigError(f"Database name must be a plain identifier, got {config.name!r}")

    engine = create_engine(config.postgres_url(MAINTENANCE_DATABASE), isolation_level="AUTOCOMMIT")
    try:
        with engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": config.name},
            ).first()
            if exists is not None:
                LOGGER.info("Database %s already exists", config.name)
                return False
            LOGGER.info("Creating database %s", config.name)
            conn.execute(text(f'CREATE DATABASE "{config.name}"'))
            return True
    except SQLAlchemyError as e:
        raise ProvisioningError(f"Could not create database {config.name}: {e}") from e
    finally:
        engine.dispose()
