"""Tests for batch export."""

import asyncio
import io
import zipfile

import pytest

from pagepress.errors import BatchPartialFailure
from pagepress.models import (
    BatchJob,
    DatabaseRequest,
    FaultKind,
    PageRequest,
    RejectedRequest,
    RenderPhase,
)
from pagepress.pipeline.stage_batch import (
    BatchExporter,
    batch_title,
    normalize_entry_name,
    unique_entry_names,
)
from pagepress.pipeline.stage_render import PDFRenderer


def page(title):
    return PageRequest(id=f"id-{title}", title=title, blocks=[{"kind": "paragraph"}])


def archive_names(data):
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.namelist()


def fail_on(engine, title):
    """Make the engine reject any document whose markup contains ``title``."""

    async def set_content(html, **kwargs):
        if f"<title>{title}</title>" in html:
            raise RuntimeError(f"cannot load {title}")

    engine.page.set_content.side_effect = set_content


class TestEntryNames:
    """Tests for archive entry naming."""

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Quarterly Report", "quarterly_report"),
            ("Q3/Q4 Plan!", "q3_q4_plan_"),
            ("Ünïcode", "_n_code"),
        ],
    )
    def test_normalize(self, title, expected):
        assert normalize_entry_name(title) == expected

    def test_collisions_suffixed(self):
        names = unique_entry_names(["Report", "report", "REPORT", "Other"])
        assert names == ["report.pdf", "report_2.pdf", "report_3.pdf", "other.pdf"]

    def test_batch_title_defaults(self):
        untitled_page = PageRequest(blocks=[])
        untitled_db = DatabaseRequest(schema={})
        assert batch_title(0, untitled_page) == "Untitled-1"
        assert batch_title(4, untitled_db) == "Database-5"
        assert batch_title(0, page("Named")) == "Named"


class TestBatchExporter:
    """Tests for concurrent batch export."""

    def test_all_succeed(self, engine, letterhead):
        job = BatchJob(documents=[page("One"), page("Two")], letterhead=letterhead)
        result = asyncio.run(BatchExporter(renderer=PDFRenderer()).export(job))

        assert result.entries == ["one.pdf", "two.pdf"]
        assert archive_names(result.archive) == ["one.pdf", "two.pdf"]
        assert result.failures == []
        assert result.total == 2
        assert not result.is_partial

    def test_failure_isolated(self, engine, letterhead):
        """The second of three documents fails; the others are still archived."""
        fail_on(engine, "Second")
        job = BatchJob(documents=[page("First"), page("Second"), page("Third")], letterhead=letterhead)
        renderer = PDFRenderer()

        result = asyncio.run(BatchExporter(renderer=renderer, fail_fast=False).export(job))

        assert archive_names(result.archive) == ["first.pdf", "third.pdf"]
        assert result.succeeded == 2
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.index == 1
        assert failure.title == "Second"
        assert failure.document_id == "id-Second"
        assert failure.kind == FaultKind.ENGINE_FAILURE
        assert failure.phase == RenderPhase.LOAD
        assert "cannot load Second" in failure.message
        assert renderer.active_engines == 0
        assert engine.browser.close.await_count == 3

    def test_fail_fast_raises(self, engine, letterhead):
        """Under fail-fast nothing starts after the first failure."""
        fail_on(engine, "Second")
        job = BatchJob(documents=[page("First"), page("Second"), page("Third")], letterhead=letterhead)
        exporter = BatchExporter(renderer=PDFRenderer(), max_concurrency=1, fail_fast=True)

        with pytest.raises(BatchPartialFailure) as exc_info:
            asyncio.run(exporter.export(job))

        result = exc_info.value.result
        assert archive_names(result.archive) == ["first.pdf"]
        kinds = {f.title: f.kind for f in result.failures}
        assert kinds == {"Second": FaultKind.ENGINE_FAILURE, "Third": FaultKind.SKIPPED}
        assert engine.playwright.chromium.launch.await_count == 2
        assert exc_info.value.to_dict()["kind"] == "batch_partial_failure"
        assert len(exc_info.value.to_dict()["failures"]) == 2

    def test_fail_fast_per_call_override(self, engine, letterhead):
        fail_on(engine, "Second")
        job = BatchJob(documents=[page("First"), page("Second")], letterhead=letterhead)
        exporter = BatchExporter(renderer=PDFRenderer(), fail_fast=True)

        result = asyncio.run(exporter.export(job, fail_fast=False))

        assert result.is_partial
        assert result.entries == ["first.pdf"]

    def test_concurrency_bounded(self, engine, letterhead):
        """No more than max_concurrency browsers are open at once."""
        renderer = PDFRenderer()
        peak = []

        async def set_content(html, **kwargs):
            peak.append(renderer.active_engines)
            await asyncio.sleep(0.01)

        engine.page.set_content.side_effect = set_content
        job = BatchJob(documents=[page(f"Doc {i}") for i in range(6)], letterhead=letterhead)

        asyncio.run(BatchExporter(renderer=renderer, max_concurrency=2).export(job))

        assert max(peak) <= 2
        assert renderer.active_engines == 0

    def test_untitled_documents_named_by_position(self, engine, letterhead):
        job = BatchJob(
            documents=[PageRequest(blocks=[]), PageRequest(blocks=[])],
            letterhead=letterhead,
        )
        result = asyncio.run(BatchExporter(renderer=PDFRenderer()).export(job))
        assert result.entries == ["untitled_1.pdf", "untitled_2.pdf"]

    def test_empty_batch(self, engine, letterhead):
        result = asyncio.run(
            BatchExporter(renderer=PDFRenderer()).export(BatchJob(documents=[], letterhead=letterhead))
        )
        assert result.total == 0
        assert archive_names(result.archive) == []

    def test_rejected_request_reported(self, engine, letterhead):
        """A rejected item becomes a malformed-request failure at its position."""
        rejected = RejectedRequest(
            id="bad-1", title="Broken", reason="request is missing its 'type' discriminant"
        )
        job = BatchJob(documents=[page("First"), rejected, page("Third")], letterhead=letterhead)

        result = asyncio.run(BatchExporter(renderer=PDFRenderer()).export(job))

        assert result.entries == ["first.pdf", "third.pdf"]
        failure = result.failures[0]
        assert failure.index == 1
        assert failure.document_id == "bad-1"
        assert failure.kind == FaultKind.MALFORMED_REQUEST
        assert engine.playwright.chromium.launch.await_count == 2
