"""Tests for the streaming results reader."""

import io
from pathlib import Path

import pytest

from wca_stats.errors import FormatError
from wca_stats.rankings.ranking import RawRecord
from wca_stats.rankings.results_reader import (
    REQUIRED_COLUMNS,
    ResultsReader,
    canonical_columns,
    iter_results,
)


FIXTURE = Path(__file__).parent / "fixtures" / "WCA_export_Results.tsv"

HEADER = "eventId\taverage\tpersonId\tcompetitionId\troundTypeId\tpos\n"


def _tsv(*rows: str, header: str = HEADER) -> io.StringIO:
    return io.StringIO(header + "".join(row + "\n" for row in rows))


class TestHeader:
    """Tests for header validation and column aliases."""

    def test_camel_case_header(self):
        assert canonical_columns(list(REQUIRED_COLUMNS)) == {}

    def test_snake_case_header(self):
        rename = canonical_columns(["event_id", "average", "person_id", "competition_id", "round_type_id", "pos"])
        assert rename["event_id"] == "eventId"
        assert rename["round_type_id"] == "roundTypeId"

    def test_missing_column(self):
        with pytest.raises(FormatError, match="average"):
            canonical_columns(["eventId", "personId", "competitionId", "roundTypeId", "pos"])

    def test_missing_column_aborts_iteration(self):
        source = _tsv("333\tA\tComp2020\tf\t1", header="eventId\tpersonId\tcompetitionId\troundTypeId\tpos\n")
        with pytest.raises(FormatError):
            list(ResultsReader().iter_records(source))

    def test_misnamed_column_aborts_iteration(self):
        source = _tsv("333\t550\tA\tComp2020\tf\t1", header="event\taverage\tpersonId\tcompetitionId\troundTypeId\tpos\n")
        with pytest.raises(FormatError, match="eventId"):
            list(ResultsReader().iter_records(source))

    def test_empty_input(self):
        with pytest.raises(FormatError):
            list(ResultsReader().iter_records(io.StringIO("")))

    def test_header_only(self):
        assert list(ResultsReader().iter_records(_tsv())) == []


class TestRows:
    """Tests for row parsing."""

    def test_parses_records_in_file_order(self):
        source = _tsv("333\t550\tA\tComp2020\tf\t1", "444\t100\tX\tComp2020\tf\t1")
        records = list(ResultsReader().iter_records(source))
        assert records == [
            RawRecord("333", 550, "A", "Comp2020", "f", 1),
            RawRecord("444", 100, "X", "Comp2020", "f", 1),
        ]
        assert isinstance(records[0].average, int)
        assert isinstance(records[0].pos, int)

    def test_negative_average_parses(self):
        records = list(ResultsReader().iter_records(_tsv("333\t-1\tY\tComp2020\tf\t3")))
        assert records[0].average == -1

    def test_ids_stay_strings(self):
        """Leading zeros and numeric-looking ids are not mangled."""
        records = list(ResultsReader().iter_records(_tsv("333\t550\t007\t2020\t1\t1")))
        assert records[0].event_id == "333"
        assert records[0].person_id == "007"
        assert records[0].round_type_id == "1"

    def test_non_integer_average(self):
        with pytest.raises(FormatError, match="average"):
            list(ResultsReader().iter_records(_tsv("333\tfast\tA\tComp2020\tf\t1")))

    def test_fractional_average(self):
        with pytest.raises(FormatError, match="average"):
            list(ResultsReader().iter_records(_tsv("333\t5.5\tA\tComp2020\tf\t1")))

    def test_non_integer_pos(self):
        with pytest.raises(FormatError, match="pos"):
            list(ResultsReader().iter_records(_tsv("333\t550\tA\tComp2020\tf\tfirst")))

    def test_short_row(self):
        source = _tsv("333\t550\tA\tComp2020\tf\t1", "333\t620\tB\tComp2019\tc")
        with pytest.raises(FormatError):
            list(ResultsReader().iter_records(source))

    def test_extra_columns_ignored(self):
        source = _tsv(
            "333\t550\tA\tComp2020\tf\t1\tMax Park",
            header="eventId\taverage\tpersonId\tcompetitionId\troundTypeId\tpos\tpersonName\n",
        )
        assert len(list(ResultsReader().iter_records(source))) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(OSError):
            list(ResultsReader().iter_records(tmp_path / "missing.tsv"))


class TestFixture:
    """Tests against the export excerpt in tests/fixtures."""

    def test_reads_all_rows(self):
        records = list(iter_results(FIXTURE))
        assert len(records) == 8
        assert records[0] == RawRecord("333", 562, "2012PARK03", "WC2019", "f", 1)

    def test_quoted_names_do_not_break_parsing(self):
        records = list(iter_results(FIXTURE))
        assert records[-1].person_id == "2014DOEJ01"
        assert records[-1].event_id == "444"

    def test_chunk_size_does_not_change_records(self):
        whole = list(ResultsReader(chunk_size=100000).iter_records(FIXTURE))
        chunked = list(ResultsReader(chunk_size=3).iter_records(FIXTURE))
        assert chunked == whole

    def test_read_frame(self):
        df = ResultsReader(chunk_size=2).read_frame(FIXTURE)
        assert list(df.columns) == REQUIRED_COLUMNS
        assert len(df) == 8
        assert df["average"].dtype == "int64"
