"""pgloader command file and invocation (MySQL -> PostgreSQL)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config import DatabaseConfig
from .commands import run_command


LOGGER = logging.getLogger(__name__)


LOAD_TEMPLATE = """
LOAD DATABASE
     FROM mysql://root@localhost/{mysql_database}
     INTO postgresql://{user}:{password}@{host}:{port}/{database}

WITH include drop, create tables, create indexes, reset sequences,
     preserve index names

SET maintenance_work_mem to '{maintenance_work_mem}',
    work_mem to '{work_mem}',
    search_path to 'public'

BEFORE LOAD DO
     $$ DROP SCHEMA IF EXISTS public CASCADE; CREATE SCHEMA public; $$,
     $$ SET SESSION AUTHORIZATION '{user}'; $$;
"""


def render_load_file(config: DatabaseConfig) -> str:
    """Render the pgloader command file for the configured databases."""
    return LOAD_TEMPLATE.format(
        mysql_database=config.name,
        user=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        database=config.name,
        maintenance_work_mem=config.pgloader.maintenance_work_mem,
        work_mem=config.pgloader.work_mem,
    )


def write_load_file(config: DatabaseConfig, path: str | Path | None = None) -> Path:
    path = Path(path) if path is not None else config.load_file_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_load_file(config), encoding="utf-8")
    return path


def run_pgloader(load_path: str | Path, config: DatabaseConfig) -> None:
    """Run pgloader on a command file, stopping at the first error."""
    env = dict(os.environ)
    env["PGLOADER_HARD_WORK_MEMORY"] = config.pgloader.hard_work_memory
    env["PGLOADER_SOFT_WORK_MEMORY"] = config.pgloader.soft_work_memory

    LOGGER.info("Converting MySQL to PostgreSQL with pgloader")
    run_command(["pgloader", "--on-error-stop", "--debug", str(load_path)], env=env)
