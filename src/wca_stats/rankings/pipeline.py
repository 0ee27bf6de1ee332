"""Rankings pipeline: results export -> ranked JSON artifact.

Streams the export, keeps the target event's results with a real average,
ranks them and writes the artifact. Nothing is written until the complete
set has been built and sorted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator

from .json_writer import RankingWriter
from .ranking import (
    RankingSet,
    RankingStatistics,
    RawRecord,
    aggregate,
    rank,
    select_entries,
    summarize,
)
from .results_reader import ResultsReader, ResultsSource


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingRun:
    """Outcome of one pipeline run."""

    event_id: str
    rankings: RankingSet
    statistics: RankingStatistics
    rows_processed: int
    output_path: Path
    elapsed_seconds: float


class _RowCounter:
    """Pass-through iterator that counts the records it yields."""

    def __init__(self, records: Iterable[RawRecord]):
        self._records = records
        self.count = 0

    def __iter__(self) -> Iterator[RawRecord]:
        for record in self._records:
            self.count += 1
            yield record


class RankingPipeline:
    """Complete ingest-filter-sort pipeline for one event."""

    def __init__(
        self,
        input_path: ResultsSource,
        output_path: str | Path,
        event_id: str = "333",
        chunk_size: int = 100000,
    ):
        """Initialize pipeline.

        Args:
            input_path: Results TSV path (or open text buffer)
            output_path: Destination of the ranking JSON
            event_id: Event to rank (e.g. "333")
            chunk_size: Chunk size for streaming reads
        """
        self.input_path = input_path
        self.output_path = Path(output_path)
        self.event_id = event_id
        self.chunk_size = chunk_size

        self.reader = ResultsReader(chunk_size=chunk_size)
        self.writer = RankingWriter()

    def build(self, records: Iterable[RawRecord]) -> RankingSet:
        """Filter, normalize, aggregate and rank records for the event."""
        return rank(aggregate(select_entries(records, self.event_id)))

    def run(self) -> RankingRun:
        """Run the pipeline end to end and write the artifact.

        Returns:
            RankingRun with the ranked set and its statistics

        Raises:
            FormatError: If the export cannot be parsed (no output written)
            SerializationError: If the artifact cannot be written
            OSError: If the export cannot be read
        """
        start_time = datetime.now()
        LOGGER.info("Ranking event %s from %s", self.event_id, self.input_path)

        counter = _RowCounter(self.reader.iter_records(self.input_path))
        rankings = self.build(counter)
        LOGGER.info("Matched %d of %d rows for event %s", len(rankings), counter.count, self.event_id)

        written = self.writer.write_rankings(rankings, self.output_path)
        statistics = summarize(rankings)

        elapsed = (datetime.now() - start_time).total_seconds()
        return RankingRun(
            event_id=self.event_id,
            rankings=rankings,
            statistics=statistics,
            rows_processed=counter.count,
            output_path=written,
            elapsed_seconds=round(elapsed, 2),
        )


def run_rankings(
    input_path: ResultsSource,
    output_path: str | Path,
    event_id: str = "333",
    chunk_size: int = 100000,
) -> RankingRun:
    """Run the rankings pipeline for one event.

    Args:
        input_path: Results TSV path
        output_path: Destination of the ranking JSON
        event_id: Event to rank
        chunk_size: Chunk size for streaming reads

    Returns:
        RankingRun describing the written artifact
    """
    pipeline = RankingPipeline(input_path, output_path, event_id=event_id, chunk_size=chunk_size)
    return pipeline.run()


def format_summary(run: RankingRun, top_n: int = 3) -> list[str]:
    """Human-readable summary lines for a finished run."""
    lines = [f"Processed {len(run.rankings)} averages"]
    top = run.rankings.top(top_n)
    if top:
        lines.append(f"Top {len(top)} averages of all time:")
        for i, entry in enumerate(top, start=1):
            lines.append(f"{i}. {entry.person_id}: {entry.average:.2f}s ({entry.competition_id})")

    stats = run.statistics
    lines.append("")
    lines.append("Statistics:")
    lines.append(f"- Unique competitors: {stats.distinct_competitors}")
    lines.append(f"- Unique competitions: {stats.distinct_competitions}")
    lines.append(f"- Average solves per competitor: {stats.format_entries_per_competitor()}")
    return lines
