"""Streaming TSV reader for the WCA results export.

Reads the export in pandas chunks so memory is bounded by the chunk size,
not by the file, and yields typed records one at a time.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import IO, Iterator, Union

import pandas as pd

from ..errors import FormatError
from .ranking import RawRecord


LOGGER = logging.getLogger(__name__)

ResultsSource = Union[str, Path, IO[str]]

# Canonical column names, in RawRecord field order
REQUIRED_COLUMNS = ["eventId", "average", "personId", "competitionId", "roundTypeId", "pos"]
INTEGER_COLUMNS = ["average", "pos"]

# Newer exports use snake_case headers
COLUMN_ALIASES = {
    "event_id": "eventId",
    "person_id": "personId",
    "competition_id": "competitionId",
    "round_type_id": "roundTypeId",
}


def canonical_columns(header: list[str]) -> dict[str, str]:
    """Map header names to canonical names.

    Args:
        header: Column names as read from the file

    Returns:
        Rename mapping for the columns that need it

    Raises:
        FormatError: If a required column is missing
    """
    rename = {name: COLUMN_ALIASES[name] for name in header if name in COLUMN_ALIASES}
    present = {rename.get(name, name) for name in header}
    missing = [col for col in REQUIRED_COLUMNS if col not in present]
    if missing:
        raise FormatError(
            f"Results header is missing required column(s): {', '.join(missing)}. "
            f"Found: {', '.join(header) if header else '(empty header)'}"
        )
    return rename


class ResultsReader:
    """Chunked reader for tab-separated results exports."""

    def __init__(self, chunk_size: int = 100000):
        """Initialize reader.

        Args:
            chunk_size: Number of rows per chunk
        """
        self.chunk_size = chunk_size

    def iter_chunks(self, source: ResultsSource) -> Iterator[pd.DataFrame]:
        """Iterate over the export in validated chunks.

        Args:
            source: File path or open text buffer

        Yields:
            DataFrames with the canonical required columns; ``average`` and
            ``pos`` as int64, everything else as str

        Raises:
            FormatError: On a bad header, a row with the wrong field count,
                or a non-integer ``average``/``pos``
            OSError: If the file cannot be read
        """
        try:
            reader = pd.read_csv(
                source,
                sep="\t",
                dtype=str,
                keep_default_na=False,
                quoting=csv.QUOTE_NONE,
                index_col=False,
                chunksize=self.chunk_size,
            )
        except pd.errors.EmptyDataError as e:
            raise FormatError(f"Results export has no header row: {_describe(source)}") from e
        except pd.errors.ParserError as e:
            raise FormatError(f"Could not parse results export {_describe(source)}: {e}") from e

        rows_before = 0
        rename: dict[str, str] | None = None
        with reader:
            while True:
                try:
                    chunk = next(reader)
                except StopIteration:
                    break
                except pd.errors.ParserError as e:
                    raise FormatError(f"Could not parse results export {_describe(source)}: {e}") from e

                if rename is None:
                    rename = canonical_columns([str(c) for c in chunk.columns])
                chunk = chunk.rename(columns=rename)[REQUIRED_COLUMNS]

                yield self._coerce_chunk(chunk, rows_before)
                rows_before += len(chunk)
                LOGGER.debug("Read %d rows from %s", rows_before, _describe(source))

    def iter_records(self, source: ResultsSource) -> Iterator[RawRecord]:
        """Lazily yield one RawRecord per export row."""
        for chunk in self.iter_chunks(source):
            for event_id, average, person_id, competition_id, round_type_id, pos in chunk.itertuples(
                index=False, name=None
            ):
                yield RawRecord(
                    event_id=event_id,
                    average=int(average),
                    person_id=person_id,
                    competition_id=competition_id,
                    round_type_id=round_type_id,
                    pos=int(pos),
                )

    def read_frame(self, source: ResultsSource) -> pd.DataFrame:
        """Read the whole export into one DataFrame."""
        chunks = list(self.iter_chunks(source))
        if not chunks:
            return pd.DataFrame(columns=REQUIRED_COLUMNS)
        return pd.concat(chunks, ignore_index=True)

    def _coerce_chunk(self, chunk: pd.DataFrame, rows_before: int) -> pd.DataFrame:
        # Rows with too few fields come back as NaN even with keep_default_na off
        short = chunk.isna().any(axis=1)
        if short.any():
            row = rows_before + int(short.to_numpy().argmax()) + 1
            raise FormatError(
                f"Results row {row} has fewer fields than the header "
                f"({len(REQUIRED_COLUMNS)} required columns)"
            )

        chunk = chunk.copy()
        for col in INTEGER_COLUMNS:
            values = pd.to_numeric(chunk[col], errors="coerce")
            bad = values.isna() | (values % 1 != 0)
            if bad.any():
                idx = int(bad.to_numpy().argmax())
                row = rows_before + idx + 1
                raise FormatError(
                    f"Results row {row}: column '{col}' must be an integer, got {chunk[col].iloc[idx]!r}"
                )
            chunk[col] = values.astype("int64")
        return chunk


def iter_results(source: ResultsSource, chunk_size: int = 100000) -> Iterator[RawRecord]:
    """Stream RawRecords from a results export.

    Args:
        source: File path or open text buffer
        chunk_size: Chunk size for reading

    Yields:
        One RawRecord per row, in file order
    """
    reader = ResultsReader(chunk_size=chunk_size)
    yield from reader.iter_records(source)


def _describe(source: ResultsSource) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", "<stream>")
