"""Tests for the PDF render stage."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from pagepress.errors import EngineFailureFault, EngineTimeoutFault
from pagepress.models import RenderedDocument, RenderPhase
from pagepress.pipeline.stage_render import (
    PDFRenderer,
    RenderSession,
    compute_digest,
    inspect_pdf,
)

DOCUMENT = RenderedDocument(document_id="doc-1", title="Report", html="<html><body>hi</body></html>")


def render(renderer, document=DOCUMENT):
    return asyncio.run(renderer.render(document))


class TestPDFRenderer:
    """Tests for the render engine adapter."""

    def test_render_success(self, engine):
        """A render returns the engine's PDF bytes with inspection results."""
        renderer = PDFRenderer()
        artifact = render(renderer)

        pdf_bytes = engine.page.pdf.return_value
        assert artifact.data == pdf_bytes
        assert artifact.document_id == "doc-1"
        assert artifact.title == "Report"
        assert artifact.media_type == "application/pdf"
        assert artifact.page_count == 2
        assert artifact.sha256 == compute_digest(pdf_bytes)
        assert artifact.size_bytes == len(pdf_bytes)

        engine.page.set_content.assert_awaited_once()
        assert engine.page.set_content.await_args.args[0] == DOCUMENT.html
        assert engine.page.set_content.await_args.kwargs["wait_until"] == "networkidle"
        engine.fitz.open.assert_called_once_with(stream=pdf_bytes, filetype="pdf")
        engine.pdf_doc.close.assert_called_once()

    def test_page_options(self, engine):
        margins = {"top": "1cm", "right": "1cm", "bottom": "1cm", "left": "1cm"}
        render(PDFRenderer(page_format="Letter", margins=margins))

        kwargs = engine.page.pdf.await_args.kwargs
        assert kwargs["format"] == "Letter"
        assert kwargs["margin"] == margins
        assert kwargs["print_background"] is True

    def test_engine_args_passed(self, engine):
        render(PDFRenderer(engine_args=["--no-sandbox"]))

        kwargs = engine.playwright.chromium.launch.await_args.kwargs
        assert kwargs["headless"] is True
        assert kwargs["args"] == ["--no-sandbox"]

    def test_fresh_engine_per_document(self, engine):
        """Every render launches and releases its own browser."""
        renderer = PDFRenderer()
        render(renderer)
        render(renderer)

        assert engine.playwright.chromium.launch.await_count == 2
        assert engine.browser.close.await_count == 2
        assert engine.playwright.stop.await_count == 2
        assert renderer.active_engines == 0

    def test_load_timeout_releases_engine(self, engine):
        """A load that outlives its timeout fails in the load phase and releases the browser."""

        async def slow_load(*args, **kwargs):
            await asyncio.sleep(1)

        engine.page.set_content.side_effect = slow_load
        renderer = PDFRenderer(load_timeout=0.05)

        with pytest.raises(EngineTimeoutFault) as exc_info:
            render(renderer)

        assert exc_info.value.phase == RenderPhase.LOAD
        assert exc_info.value.document_id == "doc-1"
        assert exc_info.value.timeout == 0.05
        engine.browser.close.assert_awaited_once()
        engine.playwright.stop.assert_awaited_once()
        engine.page.pdf.assert_not_awaited()
        assert renderer.active_engines == 0

    def test_launch_failure(self, engine):
        engine.playwright.chromium.launch.side_effect = RuntimeError("no chromium")

        with pytest.raises(EngineFailureFault) as exc_info:
            render(PDFRenderer())

        assert exc_info.value.phase == RenderPhase.LAUNCH
        assert "no chromium" in exc_info.value.message
        # The driver started before launch failed, so it is stopped
        engine.playwright.stop.assert_awaited_once()
        engine.browser.close.assert_not_awaited()

    def test_rasterize_failure(self, engine):
        engine.page.pdf.side_effect = RuntimeError("crashed")

        with pytest.raises(EngineFailureFault) as exc_info:
            render(PDFRenderer())

        assert exc_info.value.phase == RenderPhase.RASTERIZE
        assert isinstance(exc_info.value.cause, RuntimeError)
        engine.browser.close.assert_awaited_once()

    def test_empty_pdf_rejected(self, engine):
        """Output without pages is an engine failure, not an artifact."""
        engine.pdf_doc.__len__.return_value = 0

        with pytest.raises(EngineFailureFault) as exc_info:
            render(PDFRenderer())

        assert exc_info.value.phase == RenderPhase.RASTERIZE
        engine.browser.close.assert_awaited_once()

    def test_close_errors_do_not_mask_result(self, engine):
        engine.browser.close.side_effect = RuntimeError("already gone")

        artifact = render(PDFRenderer())

        assert artifact.page_count == 2
        engine.playwright.stop.assert_awaited_once()


class TestRenderSession:
    """Tests for render session state."""

    def test_phase_history(self):
        session = RenderSession("doc-1")
        for phase in (RenderPhase.LAUNCH, RenderPhase.LOAD, RenderPhase.CLOSED):
            session.enter(phase)

        assert session.phase == RenderPhase.CLOSED
        assert session.history == [
            RenderPhase.IDLE,
            RenderPhase.LAUNCH,
            RenderPhase.LOAD,
            RenderPhase.CLOSED,
        ]
        assert session.is_released


class TestInspectPdf:
    """Tests for artifact inspection."""

    @patch("pagepress.pipeline.stage_render.fitz")
    def test_not_a_pdf(self, mock_fitz):
        pdf_doc = MagicMock()
        pdf_doc.__len__.return_value = 1
        pdf_doc.is_pdf = False
        mock_fitz.open.return_value = pdf_doc

        with pytest.raises(ValueError):
            inspect_pdf(b"not a pdf")
        pdf_doc.close.assert_called_once()

    def test_digest(self):
        assert compute_digest(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )
