"""Command-line interface for the WCA stats tooling.

Usage:
    wca-stats rankings --config config/default.yaml --event 333
    wca-stats rankings --input WCA_export/WCA_export_Results.tsv --output data/3x3_all_averages.json
    wca-stats setup-db --config config/default.yaml
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer

from .config import AppConfig, load_config
from .errors import WcaStatsError

app = typer.Typer(
    name="wca-stats",
    help="WCA results export tooling: event rankings and database setup",
    add_completion=False,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: str) -> None:
    """Configure root logging for a CLI run."""
    if level.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"Log level must be one of {', '.join(LOG_LEVELS)}")
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(levelname)s %(message)s")


def _load(config: Optional[str]) -> AppConfig:
    try:
        return load_config(config)
    except (WcaStatsError, OSError) as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def rankings(
    config: Optional[str] = typer.Option(
        None,
        "--config", "-c",
        help="Path to configuration file (default: config/default.yaml)",
    ),
    input_path: Optional[str] = typer.Option(None, "--input", "-i", help="Results TSV file"),
    output_path: Optional[str] = typer.Option(None, "--output", "-o", help="Ranking JSON file"),
    event: Optional[str] = typer.Option(None, "--event", "-e", help="Event id (e.g. 333)"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Rows per read chunk"),
    top: Optional[int] = typer.Option(None, "--top", min=0, help="Entries to print"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
):
    """Rank all valid averages of one event and write them as JSON."""
    from .rankings import run_rankings, format_summary

    configure_logging(log_level)
    cfg = _load(config).rankings
    cfg = replace(
        cfg,
        input_path=Path(input_path) if input_path else cfg.input_path,
        output_path=Path(output_path) if output_path else cfg.output_path,
        event_id=event or cfg.event_id,
        chunk_size=chunk_size or cfg.chunk_size,
        top_n=top if top is not None else cfg.top_n,
    )

    try:
        run = run_rankings(
            cfg.input_path,
            cfg.output_path,
            event_id=cfg.event_id,
            chunk_size=cfg.chunk_size,
        )
    except (WcaStatsError, OSError) as e:
        typer.echo(f"Error processing rankings: {e}", err=True)
        raise typer.Exit(code=1)

    for line in format_summary(run, top_n=cfg.top_n):
        typer.echo(line)
    typer.echo(f"\nRankings written to {run.output_path}")


@app.command("setup-db")
def setup_db(
    config: Optional[str] = typer.Option(
        None,
        "--config", "-c",
        help="Path to configuration file (default: config/default.yaml)",
    ),
    keep_files: bool = typer.Option(False, "--keep-files", help="Keep the downloaded zip and SQL dump"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
):
    """Download the WCA SQL export and load it into PostgreSQL."""
    from .database import provision_database

    configure_logging(log_level)
    cfg = _load(config).database

    typer.echo(f"Setting up database {cfg.name} on {cfg.host}:{cfg.port}")
    try:
        stats = provision_database(cfg, keep_files=keep_files)
    except (WcaStatsError, OSError) as e:
        typer.echo(f"Setup failed: {e}", err=True)
        raise typer.Exit(code=1)

    status = "created" if stats.get("created") else "already existed, reloaded"
    typer.echo(f"Database {stats['database']} ({status}) in {stats['elapsed_seconds']:.1f}s")
    typer.echo("Setup completed successfully!")


def main() -> None:
    """Entrypoint for the console script."""
    app()


if __name__ == "__main__":
    main()
