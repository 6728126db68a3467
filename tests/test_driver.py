"""
Tests for the resolution driver — queueing, sweeping and forced output.
"""

import itertools
import logging
from pathlib import Path

import pytest

from confdoc.core.engine.driver import ResolutionDriver
from confdoc.core.models import Declaration, OutcomeStatus, OutputConfig, OutputFormat
from confdoc.core.services.document import DocumentError


class RecordingWriter:
    """Stand-in document writer that keeps rendered content in memory."""

    def __init__(self, fail_on: set[str] | None = None):
        self.fail_on = fail_on or set()
        self.writes: list[tuple[Path, str]] = []

    def __call__(self, path: Path, rendered: str) -> None:
        if path.name in self.fail_on:
            raise DocumentError(path, "write", PermissionError("read-only"))
        self.writes.append((path, rendered))

    def last(self, name: str) -> str:
        return [content for path, content in self.writes if path.name == name][-1]


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def driver(tmp_path: Path, writer: RecordingWriter) -> ResolutionDriver:
    return ResolutionDriver(root=tmp_path, writer=writer)


def _out(target: str = "README.md", fmt: OutputFormat = OutputFormat.FLAT) -> OutputConfig:
    return OutputConfig(target=target, format=fmt)


class TestImmediateGeneration:
    def test_no_flatten_generates_at_once(self, driver, writer, make_record, table_rows):
        record = make_record(
            "Server",
            [("host", "String", {}), ("port", "u16", {"default_expr": "5432"})],
        )
        outcome = driver.request(record, _out())

        assert outcome.status == OutcomeStatus.WRITTEN
        assert table_rows(writer.last("README.md")) == [
            ["host", "String", "Yes", "-", "", "Server"],
            ["port", "u16", "No", "5432", "", "Server"],
        ]

    def test_relative_target_resolves_under_root(self, driver, writer, tmp_path, database_config):
        driver.request(database_config, _out("docs/CONFIG.md"))
        assert writer.writes[0][0] == tmp_path / "docs" / "CONFIG.md"

    def test_absolute_target_unchanged(self, driver, writer, tmp_path, database_config):
        target = tmp_path / "elsewhere" / "CONFIG.md"
        driver.request(database_config, _out(str(target)))
        assert writer.writes[0][0] == target

    def test_dependencies_registered_first(self, driver, writer, main_config, database_config, cache_config):
        driver.register(database_config)
        driver.register(cache_config)
        outcome = driver.request(main_config, _out())
        assert outcome.status == OutcomeStatus.WRITTEN
        assert len(driver.pending) == 0


class TestDeferredGeneration:
    def test_queued_until_dependency_registered(self, driver, writer, make_record, database_config, table_rows):
        main = make_record(
            "MainConfig",
            [("port", "int", {}), ("database", "DatabaseConfig", {"flatten": True})],
        )
        outcome = driver.request(main, _out())

        assert outcome.status == OutcomeStatus.QUEUED
        assert outcome.missing == ["DatabaseConfig"]
        assert writer.writes == []
        assert driver.pending_report() == {"README.md": ["MainConfig"]}

        outcomes = driver.register(database_config)

        assert [o.record for o in outcomes] == ["MainConfig"]
        assert outcomes[0].status == OutcomeStatus.WRITTEN
        assert driver.pending_report() == {}
        assert [r[0] for r in table_rows(writer.last("README.md"))] == [
            "port",
            "postgres-host",
            "postgres-port",
        ]

    def test_partial_registration_keeps_waiting(self, driver, writer, main_config, database_config):
        driver.request(main_config, _out())
        assert driver.register(database_config) == []
        assert driver.pending_report() == {"README.md": ["MainConfig"]}
        assert writer.writes == []

    def test_unrelated_registration_leaves_queue(self, driver, main_config, make_record):
        driver.request(main_config, _out())
        driver.register(make_record("Unrelated", [("x", "int", {})]))
        assert len(driver.pending) == 1

    def test_one_registration_releases_many(self, driver, writer, make_record, database_config):
        first = make_record("First", [("db", "DatabaseConfig", {"flatten": True})])
        second = make_record("Second", [("db", "DatabaseConfig", {"flatten": True})])
        driver.request(first, _out("first.md"))
        driver.request(second, _out("second.md"))

        outcomes = driver.register(database_config)

        assert [o.record for o in outcomes] == ["First", "Second"]
        assert {p.name for p, _ in writer.writes} == {"first.md", "second.md"}


class TestOrderIndependence:
    def _declarations(self, main_config, database_config, cache_config):
        return [
            Declaration(record=main_config, registered=True, output=_out()),
            Declaration(record=database_config, registered=True),
            Declaration(record=cache_config, registered=True),
        ]

    def test_every_order_gives_same_document(self, tmp_path, main_config, database_config, cache_config):
        declarations = self._declarations(main_config, database_config, cache_config)
        results = set()
        for order in itertools.permutations(declarations):
            writer = RecordingWriter()
            driver = ResolutionDriver(root=tmp_path, writer=writer)
            for declaration in order:
                driver.process(declaration)
            assert len(driver.pending) == 0
            results.add(writer.last("README.md"))
        assert len(results) == 1

    def test_rerun_produces_identical_file(self, tmp_path, main_config, database_config, cache_config):
        declarations = self._declarations(main_config, database_config, cache_config)
        contents = []
        for _ in range(2):
            driver = ResolutionDriver(root=tmp_path)
            for declaration in declarations:
                driver.process(declaration)
            contents.append((tmp_path / "README.md").read_bytes())
        assert contents[0] == contents[1]


class TestProcess:
    def test_register_and_generate_same_declaration(self, driver, writer, database_config):
        outcomes = driver.process(
            Declaration(record=database_config, registered=True, output=_out())
        )
        assert [o.status for o in outcomes] == [OutcomeStatus.WRITTEN]
        assert "DatabaseConfig" in driver.registry

    def test_generate_only_is_not_registered(self, driver, database_config):
        driver.process(Declaration(record=database_config, output=_out()))
        assert "DatabaseConfig" not in driver.registry

    def test_registration_sweep_precedes_own_request(self, driver, main_config, database_config, cache_config):
        driver.request(main_config, _out("main.md"))
        driver.register(database_config)
        outcomes = driver.process(
            Declaration(record=cache_config, registered=True, output=_out("cache.md"))
        )
        assert [(o.record, o.target) for o in outcomes] == [
            ("MainConfig", "main.md"),
            ("CacheConfig", "cache.md"),
        ]


class TestForcePending:
    def test_placeholder_rows(self, driver, writer, main_config, database_config):
        driver.register(database_config)
        driver.request(main_config, _out())

        outcomes = driver.force_pending()

        assert len(outcomes) == 1
        assert outcomes[0].forced
        assert outcomes[0].missing == ["CacheConfig"]
        assert len(driver.pending) == 0
        content = writer.last("README.md")
        assert "Note: This field is flattened from CacheConfig (not registered)" in content
        assert "postgres-host" in content

    def test_logs_warning(self, driver, main_config, caplog):
        driver.request(main_config, _out())
        with caplog.at_level(logging.WARNING):
            driver.force_pending()
        assert "Force-rendering MainConfig" in caplog.text

    def test_nothing_pending(self, driver):
        assert driver.force_pending() == []


class TestFailures:
    def test_write_failure_reported(self, tmp_path, database_config):
        driver = ResolutionDriver(root=tmp_path, writer=RecordingWriter(fail_on={"README.md"}))
        outcome = driver.request(database_config, _out())
        assert outcome.status == OutcomeStatus.FAILED
        assert not outcome.ok
        assert "read-only" in outcome.error

    def test_failure_does_not_stop_sweep(self, tmp_path, make_record, database_config):
        writer = RecordingWriter(fail_on={"broken.md"})
        driver = ResolutionDriver(root=tmp_path, writer=writer)
        first = make_record("First", [("db", "DatabaseConfig", {"flatten": True})])
        second = make_record("Second", [("db", "DatabaseConfig", {"flatten": True})])
        driver.request(first, _out("broken.md"))
        driver.request(second, _out("good.md"))

        outcomes = driver.register(database_config)

        assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.WRITTEN]
        assert [p.name for p, _ in writer.writes] == ["good.md"]
        assert len(driver.pending) == 0

    def test_real_writer_failure(self, tmp_path, database_config):
        (tmp_path / "blocker").write_text("not a directory")
        driver = ResolutionDriver(root=tmp_path)
        outcome = driver.request(database_config, _out("blocker/README.md"))
        assert outcome.status == OutcomeStatus.FAILED
        assert "Failed to write" in outcome.error


class TestSharedTarget:
    def test_last_writer_wins(self, driver, writer, database_config, cache_config, caplog):
        driver.request(database_config, _out())
        with caplog.at_level(logging.WARNING):
            driver.request(cache_config, _out())
        assert "CacheConfig overwrites the DatabaseConfig table" in caplog.text
        assert "cache-host" in writer.last("README.md")
        assert "postgres-host" not in writer.last("README.md")

    def test_same_record_rewrite_is_quiet(self, driver, database_config, caplog):
        driver.request(database_config, _out())
        with caplog.at_level(logging.WARNING):
            driver.request(database_config, _out())
        assert "overwrites" not in caplog.text


class TestGroupedOutput:
    def test_grouped_format(self, driver, writer, main_config, database_config, cache_config):
        driver.register(database_config)
        driver.register(cache_config)
        driver.request(main_config, _out(fmt=OutputFormat.GROUPED))
        content = writer.last("README.md")
        assert content.startswith("## MainConfig Configuration")
        assert "## CacheConfig Configuration" in content
