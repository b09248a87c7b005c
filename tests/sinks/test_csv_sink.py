"""Tests for the CSV sink backend."""

import csv

import pytest

from lteconsole.core.exceptions import SinkError
from lteconsole.parsing.registry import TableKindConfig
from lteconsole.routing.router import SinkRouter, schema_hash
from lteconsole.sinks.csv_sink import CsvRowSink, CsvSinkBackend

SCHEMA = ("UE_ID", "RRC", "DL", "UL")


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


@pytest.fixture
def ue_kind():
    return TableKindConfig(
        name="ue", delimiter="--ue--", header_token="UE_ID", sink="lte_metrics.csv"
    ).to_kind()


class TestCsvRowSink:
    """Tests for a single CSV file sink."""

    def test_new_file(self, tmp_path):
        sink = CsvRowSink(tmp_path / "out.csv")
        assert sink.is_new
        assert sink.existing_header() is None
        sink.write_row(["a", "b"])
        sink.flush()
        sink.close()
        assert read_csv(tmp_path / "out.csv") == [["a", "b"]]

    def test_existing_file_is_appended(self, tmp_path):
        path = tmp_path / "out.csv"
        path.write_text("A,B\n1,2\n")
        sink = CsvRowSink(path)
        assert not sink.is_new
        assert sink.existing_header() == ["A", "B"]
        sink.write_row(["3", "4"])
        sink.close()
        assert read_csv(path) == [["A", "B"], ["1", "2"], ["3", "4"]]

    def test_empty_existing_file_counts_as_new(self, tmp_path):
        path = tmp_path / "out.csv"
        path.touch()
        assert CsvRowSink(path).is_new

    def test_creates_output_directory(self, tmp_path):
        sink = CsvRowSink(tmp_path / "a" / "b" / "out.csv")
        sink.close()
        assert (tmp_path / "a" / "b" / "out.csv").exists()

    def test_write_after_close(self, tmp_path):
        sink = CsvRowSink(tmp_path / "out.csv")
        sink.close()
        sink.close()
        with pytest.raises(SinkError):
            sink.write_row(["x"])
        with pytest.raises(SinkError):
            sink.flush()

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(SinkError):
            CsvRowSink(blocker / "out.csv")

    def test_undecodable_existing_file(self, tmp_path):
        path = tmp_path / "out.csv"
        path.write_bytes(b"\xff\xfeU\x00E\x00\n")
        sink = CsvRowSink(path)
        assert not sink.is_new
        assert sink.existing_header() == []
        sink.close()

    def test_fields_with_commas_are_quoted(self, tmp_path):
        sink = CsvRowSink(tmp_path / "out.csv", fsync=False)
        sink.write_row(["1/1/1", "a,b"])
        sink.close()
        assert read_csv(tmp_path / "out.csv") == [["1/1/1", "a,b"]]


class TestCsvSinkBackend:
    """Tests for CsvSinkBackend with the router."""

    def test_open_is_idempotent(self, tmp_path):
        backend = CsvSinkBackend(tmp_path)
        assert backend.open("x.csv") is backend.open("x.csv")
        assert backend.describe("x.csv") == str(tmp_path / "x.csv")

    def test_reopen_after_close(self, tmp_path):
        backend = CsvSinkBackend(tmp_path)
        first = backend.open("x.csv")
        first.close()
        assert backend.open("x.csv") is not first

    def test_header_once_across_runs(self, tmp_path, ue_kind):
        for run in range(2):
            router = SinkRouter(CsvSinkBackend(tmp_path))
            handle = router.register(ue_kind, SCHEMA)
            router.append_rows(handle, [[str(run), "CONNECTED", "10", "5"]])
            router.close_all()

        assert read_csv(tmp_path / "lte_metrics.csv") == [
            list(SCHEMA),
            ["0", "CONNECTED", "10", "5"],
            ["1", "CONNECTED", "10", "5"],
        ]

    def test_changed_header_across_runs(self, tmp_path, ue_kind):
        (tmp_path / "lte_metrics.csv").write_text("UE_ID,OLD\n1,2\n")
        router = SinkRouter(CsvSinkBackend(tmp_path))
        handle = router.register(ue_kind, SCHEMA)
        router.close_all()

        assert handle.name != "lte_metrics.csv"
        assert read_csv(tmp_path / "lte_metrics.csv") == [["UE_ID", "OLD"], ["1", "2"]]
        assert read_csv(tmp_path / handle.name) == [list(SCHEMA)]

    def test_undecodable_file_is_left_alone(self, tmp_path, ue_kind):
        original = b"\xff\xfe binary junk\n"
        (tmp_path / "lte_metrics.csv").write_bytes(original)
        router = SinkRouter(CsvSinkBackend(tmp_path))
        handle = router.register(ue_kind, SCHEMA)
        assert handle is not None
        assert router.append_rows(handle, [["1", "CONNECTED", "10", "5"]])
        router.close_all()

        assert handle.name == f"lte_metrics-{schema_hash(SCHEMA)}.csv"
        assert (tmp_path / "lte_metrics.csv").read_bytes() == original
        assert read_csv(tmp_path / handle.name) == [list(SCHEMA), ["1", "CONNECTED", "10", "5"]]
