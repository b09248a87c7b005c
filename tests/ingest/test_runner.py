"""Tests for the capture runner."""

import csv

import pytest
from conftest import CONFIG_FILE

from lteconsole.core.config import Settings
from lteconsole.core.models.base import RoutingPolicy, SourceStatus
from lteconsole.ingest.runner import RunConfig, build_sources, run
from lteconsole.parsing.registry import UE_TABLE_DELIMITER
from lteconsole.sinks.memory import MemorySinkBackend
from lteconsole.sources.memory import ListLineSource
from lteconsole.sources.stream import StreamLineSource
from lteconsole.sources.tail import FileTailSource

CPU_TABLE_DELIMITER = "----CPU---------------------------------------------------"

CAPTURE = "\n".join(
    [
        "[ bs-isp4-01:root ~]# ./lteenb enb.cfg",
        "Press Return to stop the trace",
        "(enb) t",
        UE_TABLE_DELIMITER,
        "UE_ID CL RNTI C cqi",
        "1 001 4601 1 15",
        "2 [stopped]",
        "PRACH: cell=01 seq=21 ta=0",
        "",
        UE_TABLE_DELIMITER,
        "UE_ID CL RNTI C cqi",
        "3 001 4603 1 12",
        CPU_TABLE_DELIMITER,
        "TOTAL RX TX",
        "12.5% 3% 9%",
        "Unknown command: foo",
        "",
    ]
)


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


@pytest.fixture
def capture_file(tmp_path):
    path = tmp_path / "enb.log"
    path.write_text(CAPTURE)
    return path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


def make_config(sources, output_dir, **kwargs):
    return RunConfig(
        sources=[str(s) for s in sources],
        output_dir=output_dir,
        table_kinds_path=CONFIG_FILE,
        install_signal_handlers=False,
        **kwargs,
    )


class TestRun:
    """End-to-end runs over files."""

    def test_capture_to_csv(self, capture_file, output_dir):
        result = run(make_config([capture_file], output_dir))

        assert result.success
        run_result = result.unwrap()
        assert run_result.success
        assert run_result.output_dir == output_dir
        assert run_result.total_rows_written == 4
        assert run_result.total_rows_dropped == 0

        assert read_csv(output_dir / "lte_metrics.csv") == [
            ["UE_ID", "CL", "RNTI", "C", "cqi"],
            ["1", "001", "4601", "1", "15"],
            ["2", "[stopped]", "-", "-", "-"],
            ["3", "001", "4603", "1", "12"],
        ]
        assert read_csv(output_dir / "cpu.csv") == [
            ["TOTAL", "RX", "TX"],
            ["12.5%", "3%", "9%"],
        ]
        assert {s.name for s in run_result.sinks} == {"lte_metrics.csv", "cpu.csv"}

    def test_second_run_appends_without_header(self, capture_file, output_dir):
        run(make_config([capture_file], output_dir)).unwrap()
        run(make_config([capture_file], output_dir)).unwrap()

        rows = read_csv(output_dir / "lte_metrics.csv")
        assert rows.count(["UE_ID", "CL", "RNTI", "C", "cqi"]) == 1
        assert len(rows) == 7

    def test_by_schema(self, capture_file, output_dir):
        run(make_config([capture_file], output_dir, routing_policy=RoutingPolicy.BY_SCHEMA))
        assert len(list(output_dir.glob("schema-*.csv"))) == 2
        assert not (output_dir / "lte_metrics.csv").exists()

    def test_per_source(self, tmp_path, output_dir):
        for name in ("enb1.log", "enb2.log"):
            (tmp_path / name).write_text(CAPTURE)
        run(
            make_config(
                [tmp_path / "enb1.log", tmp_path / "enb2.log"], output_dir, per_source_sinks=True
            )
        ).unwrap()

        assert len(list(output_dir.glob("enb1.log-*_lte_metrics.csv"))) == 1
        assert len(list(output_dir.glob("enb2.log-*_cpu.csv"))) == 1

    def test_per_source_same_file_name(self, tmp_path, output_dir):
        paths = []
        for site in ("site0", "site1", "site2"):
            (tmp_path / site).mkdir()
            path = tmp_path / site / "console.log"
            path.write_text(CAPTURE)
            paths.append(path)

        run_result = run(make_config(paths, output_dir, per_source_sinks=True)).unwrap()

        assert run_result.success
        assert run_result.total_rows_written == 12
        sinks = sorted(output_dir.glob("console.log-*_lte_metrics.csv"))
        assert len(sinks) == 3
        for sink in sinks:
            assert len(read_csv(sink)) == 4

    def test_missing_file(self, tmp_path, capture_file, output_dir):
        result = run(make_config([tmp_path / "missing.log", capture_file], output_dir))

        run_result = result.unwrap()
        assert not run_result.success
        assert run_result.sources_failed == 1
        [failed] = run_result.get_failed_sources()
        assert failed.status is SourceStatus.UNAVAILABLE
        assert (output_dir / "lte_metrics.csv").exists()

    def test_in_memory(self):
        backend = MemorySinkBackend()
        source = ListLineSource(CAPTURE.splitlines(), name="fixture")
        result = run(
            RunConfig(sources=[], table_kinds_path=CONFIG_FILE, install_signal_handlers=False),
            backend=backend,
            sources=[source],
        )

        run_result = result.unwrap()
        assert run_result.output_dir is None
        assert len(backend.rows("lte_metrics.csv")) == 4


class TestRunConfiguration:
    """Configuration errors and settings."""

    def test_no_sources(self):
        result = run(RunConfig(sources=[], install_signal_handlers=False))
        assert not result.success
        assert "No sources" in result.error

    def test_stdin_twice(self):
        result = run(RunConfig(sources=["-", "-"], install_signal_handlers=False))
        assert not result.success
        assert "Standard input" in result.error

    def test_invalid_table_kinds(self, tmp_path, capture_file):
        bad = tmp_path / "kinds.yaml"
        bad.write_text("table_kinds:\n  - name: broken\n")
        config = RunConfig(
            sources=[str(capture_file)], table_kinds_path=bad, install_signal_handlers=False
        )
        assert not run(config).success

    def test_build_sources(self, capture_file):
        config = RunConfig(sources=["-", str(capture_file)], follow=True, read_from_start=False)
        stdin, tail = build_sources(config)
        assert isinstance(stdin, StreamLineSource)
        assert isinstance(tail, FileTailSource)
        assert tail.follow
        assert not tail.from_start

    def test_from_settings(self, tmp_path):
        settings = Settings(
            output_dir=tmp_path,
            config_path=tmp_path,
            routing_policy=RoutingPolicy.BY_SCHEMA,
            poll_interval=2.0,
        )
        config = RunConfig.from_settings(
            ["enb.log"], settings, follow=True, routing_policy=None, output_dir=None
        )

        assert config.sources == ["enb.log"]
        assert config.output_dir == tmp_path
        assert config.table_kinds_path == tmp_path / "table_kinds.yaml"
        assert config.routing_policy is RoutingPolicy.BY_SCHEMA
        assert config.poll_interval == 2.0
        assert config.follow
