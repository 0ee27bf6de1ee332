"""Ranking model: filter, normalize, aggregate, rank and summarize results.

Key principles:
- An entry exists only for a result of the target event with a real average
  (``average > 0``); zero and negative values are "no result" sentinels.
- Ranking is a single stable sort by average, so equal averages keep the
  order in which they were read and reruns are reproducible.
- The accumulated entries live in a ``RankingSet`` owned by the caller, so
  several events can be ranked in one process.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import pandas as pd


# Field order of a serialized ranking entry
ENTRY_FIELDS = ["personId", "average", "competitionId", "roundTypeId", "pos", "date"]

_TRAILING_YEAR_RE = re.compile(r"(\d{4})\D*$")


@dataclass(frozen=True)
class RawRecord:
    """One row of the results export."""

    event_id: str
    average: int
    person_id: str
    competition_id: str
    round_type_id: str
    pos: int


@dataclass(frozen=True)
class RankingEntry:
    """A normalized result eligible for the ranking."""

    person_id: str
    average: float
    competition_id: str
    round_type_id: str
    pos: int
    date: str

    def to_dict(self) -> dict:
        """Serialize with the public field names, in output order."""
        return {
            "personId": self.person_id,
            "average": self.average,
            "competitionId": self.competition_id,
            "roundTypeId": self.round_type_id,
            "pos": self.pos,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RankingEntry":
        return cls(
            person_id=str(data["personId"]),
            average=float(data["average"]),
            competition_id=str(data["competitionId"]),
            round_type_id=str(data["roundTypeId"]),
            pos=int(data["pos"]),
            date=str(data["date"]),
        )


@dataclass(frozen=True)
class RankingStatistics:
    """Summary of a ranking set."""

    total_entries: int
    distinct_competitors: int
    distinct_competitions: int
    entries_per_competitor: float

    def format_entries_per_competitor(self) -> str:
        if math.isnan(self.entries_per_competitor):
            return "n/a"
        return f"{self.entries_per_competitor:.2f}"


class RankingSet:
    """Ordered, growable collection of ranking entries."""

    def __init__(self, entries: Optional[Iterable[RankingEntry]] = None):
        self._entries: list[RankingEntry] = list(entries) if entries is not None else []

    def append(self, entry: RankingEntry) -> None:
        self._entries.append(entry)

    def extend(self, entries: Iterable[RankingEntry]) -> None:
        self._entries.extend(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RankingEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> RankingEntry:
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RankingSet):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"RankingSet({len(self._entries)} entries)"

    def top(self, n: int) -> list[RankingEntry]:
        """Return the first ``n`` entries in current order."""
        return self._entries[: max(n, 0)]

    def to_records(self) -> list[dict]:
        return [entry.to_dict() for entry in self._entries]

    def to_frame(self) -> pd.DataFrame:
        """Return entries as a DataFrame with the serialized column names."""
        return pd.DataFrame(self.to_records(), columns=ENTRY_FIELDS)


def matches_event(record: RawRecord, event_id: str) -> bool:
    """Keep a record iff it belongs to ``event_id`` and has a real average."""
    return record.event_id == event_id and record.average > 0


def competition_year(competition_id: str) -> str:
    """Derive the 4-character year of a competition id.

    Uses the first four characters when they are digits, otherwise the
    trailing 4-digit year (``WC2019`` -> ``2019``). Ids with neither fall
    back to their first four characters.
    """
    prefix = competition_id[:4]
    if len(prefix) == 4 and prefix.isdigit():
        return prefix
    match = _TRAILING_YEAR_RE.search(competition_id)
    if match:
        return match.group(1)
    return prefix


def normalize(record: RawRecord) -> RankingEntry:
    """Convert a raw record into a ranking entry (average in seconds)."""
    return RankingEntry(
        person_id=record.person_id,
        average=record.average / 100.0,
        competition_id=record.competition_id,
        round_type_id=record.round_type_id,
        pos=int(record.pos),
        date=competition_year(record.competition_id),
    )


def select_entries(records: Iterable[RawRecord], event_id: str) -> Iterator[RankingEntry]:
    """Lazily filter and normalize records for one event."""
    for record in records:
        if matches_event(record, event_id):
            yield normalize(record)


def aggregate(entries: Iterable[RankingEntry], into: Optional[RankingSet] = None) -> RankingSet:
    """Collect entries into a ranking set.

    Args:
        entries: Normalized entries
        into: Existing set to append to (a new one is created if omitted)

    Returns:
        The set holding all entries
    """
    ranking_set = into if into is not None else RankingSet()
    ranking_set.extend(entries)
    return ranking_set


def rank(ranking_set: RankingSet) -> RankingSet:
    """Return a new set sorted ascending by average.

    ``sorted`` is stable, so ties keep their encounter order.
    """
    return RankingSet(sorted(ranking_set, key=lambda entry: entry.average))


def summarize(ranking_set: RankingSet) -> RankingStatistics:
    """Compute entry, competitor and competition counts for a ranking set."""
    df = ranking_set.to_frame()
    total = len(df)
    competitors = int(df["personId"].nunique())
    competitions = int(df["competitionId"].nunique())
    per_competitor = total / competitors if competitors else float("nan")

    return RankingStatistics(
        total_entries=total,
        distinct_competitors=competitors,
        distinct_competitions=competitions,
        entries_per_competitor=per_competitor,
    )
