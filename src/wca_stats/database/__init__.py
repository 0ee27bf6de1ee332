"""Database provisioning: WCA SQL export -> PostgreSQL via MySQL and pgloader."""

from .downloader import download_export, extract_sql, remove_files
from .postgres import ensure_database
from .mysql import MySqlServer
from .pgloader import render_load_file, write_load_file, run_pgloader
from .provision import DatabaseProvisioner, provision_database

__all__ = [
    "download_export",
    "extract_sql",
    "remove_files",
    "ensure_database",
    "MySqlServer",
    "render_load_file",
    "write_load_file",
    "run_pgloader",
    "DatabaseProvisioner",
    "provision_database",
]
