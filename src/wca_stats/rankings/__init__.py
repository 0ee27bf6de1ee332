"""Rankings: stream the results export, rank one event, write JSON."""

from .ranking import (
    RawRecord,
    RankingEntry,
    RankingSet,
    RankingStatistics,
    matches_event,
    normalize,
    select_entries,
    aggregate,
    rank,
    summarize,
)
from .results_reader import ResultsReader, iter_results
from .json_writer import RankingWriter, read_rankings
from .pipeline import RankingPipeline, RankingRun, run_rankings, format_summary

__all__ = [
    "RawRecord",
    "RankingEntry",
    "RankingSet",
    "RankingStatistics",
    "matches_event",
    "normalize",
    "select_entries",
    "aggregate",
    "rank",
    "summarize",
    "ResultsReader",
    "iter_results",
    "RankingWriter",
    "read_rankings",
    "RankingPipeline",
    "RankingRun",
    "run_rankings",
    "format_summary",
]
