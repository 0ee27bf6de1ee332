"""Configuration for the rankings pipeline and database provisioning.

Settings live in ``config/default.yaml``. A missing file or missing keys fall
back to the defaults below, so the CLI works from a bare checkout. The
Postgres password can be supplied through ``WCA_DB_PASSWORD`` instead of the
file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError


# Default path for the config file, relative to project root.
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "default.yaml"

PASSWORD_ENV_VAR = "WCA_DB_PASSWORD"

WCA_EXPORT_URL = "https://www.worldcubeassociation.org/export/results/WCA_export.sql.zip"


@dataclass(frozen=True)
class RankingsConfig:
    input_path: Path = Path("WCA_export") / "WCA_export_Results.tsv"
    output_path: Path = Path("data") / "3x3_all_averages.json"

    # 3x3x3 cube
    event_id: str = "333"

    # Rows per pandas chunk while streaming the export
    chunk_size: int = 100_000

    # Entries echoed to the console after a run
    top_n: int = 3


@dataclass(frozen=True)
class MySqlConfig:
    use_sudo: bool = True
    data_dir: str = "/var/lib/mysql"
    run_dir: str = "/run/mysqld"
    error_log: str = "/var/log/mysql/error.log"
    ready_attempts: int = 30
    ready_interval_seconds: float = 1.0
    # Pause after start/stop so the daemon can settle
    settle_seconds: float = 2.0


@dataclass(frozen=True)
class PgLoaderConfig:
    maintenance_work_mem: str = "1024MB"
    work_mem: str = "512MB"
    hard_work_memory: str = "512MB"
    soft_work_memory: str = "256MB"


@dataclass(frozen=True)
class DatabaseConfig:
    export_url: str = WCA_EXPORT_URL
    data_dir: Path = Path("data")
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = "postgres"
    name: str = "wca_stats"
    mysql: MySqlConfig = field(default_factory=MySqlConfig)
    pgloader: PgLoaderConfig = field(default_factory=PgLoaderConfig)

    @property
    def zip_path(self) -> Path:
        return self.data_dir / "WCA_export.sql.zip"

    @property
    def sql_path(self) -> Path:
        return self.data_dir / "WCA_export.sql"

    @property
    def load_file_path(self) -> Path:
        return self.data_dir / "import.load"

    def postgres_url(self, database: Optional[str] = None) -> str:
        """Build a SQLAlchemy URL for the Postgres server.

        Args:
            database: Database to connect to (defaults to the target database)

        Returns:
            ``postgresql+psycopg2://`` connection URL
        """
        db = database or self.name
        return f"postgresql+psycopg2://{self.user}:{self.password}@{self.host}:{self.port}/{db}"


@dataclass(frozen=True)
class AppConfig:
    rankings: RankingsConfig = field(default_factory=RankingsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def load_config(config_path: Path | str | None = None) -> AppConfig:
    """Load configuration from YAML.

    Args:
        config_path: Path to the YAML file; ``None`` uses ``config/default.yaml``

    Returns:
        Parsed AppConfig (defaults if the default file does not exist)

    Raises:
        ConfigError: If the file is unreadable YAML or a value is invalid
        FileNotFoundError: If an explicitly given file does not exist
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        if not config_path.exists():
            return _apply_env(AppConfig())
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")

    return _apply_env(parse_config(raw))


def parse_config(raw: dict[str, Any]) -> AppConfig:
    """Map a raw config dict onto the typed config objects."""
    rankings_raw = _section(raw, "rankings")
    database_raw = _section(raw, "database")
    mysql_raw = _section(database_raw, "mysql")
    pgloader_raw = _section(database_raw, "pgloader")

    defaults = RankingsConfig()
    rankings = RankingsConfig(
        input_path=Path(rankings_raw.get("input", defaults.input_path)),
        output_path=Path(rankings_raw.get("output", defaults.output_path)),
        event_id=str(rankings_raw.get("event_id", defaults.event_id)),
        chunk_size=_positive_int(rankings_raw.get("chunk_size", defaults.chunk_size), "rankings.chunk_size"),
        top_n=_positive_int(rankings_raw.get("top_n", defaults.top_n), "rankings.top_n", allow_zero=True),
    )

    mysql_defaults = MySqlConfig()
    mysql = MySqlConfig(
        use_sudo=bool(mysql_raw.get("use_sudo", mysql_defaults.use_sudo)),
        data_dir=str(mysql_raw.get("data_dir", mysql_defaults.data_dir)),
        run_dir=str(mysql_raw.get("run_dir", mysql_defaults.run_dir)),
        error_log=str(mysql_raw.get("error_log", mysql_defaults.error_log)),
        ready_attempts=_positive_int(
            mysql_raw.get("ready_attempts", mysql_defaults.ready_attempts), "database.mysql.ready_attempts"
        ),
        ready_interval_seconds=_non_negative_float(
            mysql_raw.get("ready_interval_seconds", mysql_defaults.ready_interval_seconds),
            "database.mysql.ready_interval_seconds",
        ),
        settle_seconds=_non_negative_float(
            mysql_raw.get("settle_seconds", mysql_defaults.settle_seconds), "database.mysql.settle_seconds"
        ),
    )

    pg_defaults = PgLoaderConfig()
    pgloader = PgLoaderConfig(
        **{name: str(pgloader_raw.get(name, getattr(pg_defaults, name))) for name in pg_defaults.__dataclass_fields__}
    )

    db_defaults = DatabaseConfig()
    database = DatabaseConfig(
        export_url=str(database_raw.get("export_url", db_defaults.export_url)),
        data_dir=Path(database_raw.get("data_dir", db_defaults.data_dir)),
        host=str(database_raw.get("host", db_defaults.host)),
        port=_positive_int(database_raw.get("port", db_defaults.port), "database.port"),
        user=str(database_raw.get("user", db_defaults.user)),
        password=str(database_raw.get("password", db_defaults.password)),
        name=str(database_raw.get("name", db_defaults.name)),
        mysql=mysql,
        pgloader=pgloader,
    )

    return AppConfig(rankings=rankings, database=database)


def _apply_env(cfg: AppConfig) -> AppConfig:
    password = os.getenv(PASSWORD_ENV_VAR)
    if not password:
        return cfg
    return replace(cfg, database=replace(cfg.database, password=password))


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return value


def _positive_int(value: Any, key: str, allow_zero: bool = False) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Config value '{key}' must be an integer, got {value!r}") from e
    if parsed < 0 or (parsed == 0 and not allow_zero):
        raise ConfigError(f"Config value '{key}' must be positive, got {parsed}")
    return parsed


def _non_negative_float(value: Any, key: str) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Config value '{key}' must be a number, got {value!r}") from e
    if parsed < 0:
        raise ConfigError(f"Config value '{key}' must not be negative, got {parsed}")
    return parsed
