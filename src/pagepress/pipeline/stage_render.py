"""PDF Rendering Stage - Rasterize a styled document into a paginated PDF.

This is the only stage that does out-of-process work. It drives a headless
Chromium through Playwright, one browser instance per document:

    idle -> launch -> load -> rasterize -> closed

Each of launch, load and rasterize has its own timeout. Every exit path,
including timeouts and engine crashes, releases the browser before the
call returns or raises.
"""

import asyncio
import hashlib
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Optional

import fitz  # PyMuPDF
from loguru import logger
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from pagepress.config import settings
from pagepress.errors import EngineFailureFault, EngineTimeoutFault, PagePressError
from pagepress.models import ExportArtifact, RenderedDocument, RenderPhase


def compute_digest(data: bytes) -> str:
    """SHA-256 hex digest of an artifact."""
    return hashlib.sha256(data).hexdigest()


def inspect_pdf(data: bytes) -> int:
    """Open rasterized bytes as a PDF and return the page count.

    Raises:
        ValueError: if the bytes are not a PDF with at least one page
    """
    pdf_doc = fitz.open(stream=data, filetype="pdf")
    try:
        page_count = len(pdf_doc)
        if not pdf_doc.is_pdf or page_count < 1:
            raise ValueError("render engine produced no PDF pages")
        return page_count
    finally:
        pdf_doc.close()


class RenderSession:
    """State of one render: the phase it is in and the handles it owns."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        self.phase = RenderPhase.IDLE
        self.history: list[RenderPhase] = [RenderPhase.IDLE]
        self.playwright: Any = None
        self.browser: Any = None

    def enter(self, phase: RenderPhase) -> None:
        logger.debug(f"{self.document_id}: {self.phase.value} -> {phase.value}")
        self.phase = phase
        self.history.append(phase)

    @property
    def is_released(self) -> bool:
        return self.browser is None and self.playwright is None


class PDFRenderer:
    """Renders composed documents to PDF with a fresh browser per document.

    Timeouts are in seconds and default to the values in settings.
    """

    def __init__(
        self,
        launch_timeout: Optional[float] = None,
        load_timeout: Optional[float] = None,
        rasterize_timeout: Optional[float] = None,
        page_format: Optional[str] = None,
        margins: Optional[dict[str, str]] = None,
        engine_args: Optional[list[str]] = None,
    ):
        self.launch_timeout = launch_timeout or settings.launch_timeout
        self.load_timeout = load_timeout or settings.load_timeout
        self.rasterize_timeout = rasterize_timeout or settings.rasterize_timeout
        self.page_format = page_format or settings.page_format
        self.margins = margins or settings.margins
        self.engine_args = engine_args if engine_args is not None else list(settings.engine_args)
        self.active_engines = 0

    async def render(self, document: RenderedDocument) -> ExportArtifact:
        """Rasterize one document.

        Raises:
            EngineTimeoutFault: a phase exceeded its timeout
            EngineFailureFault: the engine crashed or produced no PDF
        """
        session = RenderSession(document.document_id)
        async with self._engine(session):
            session.enter(RenderPhase.LOAD)
            page = await self._step(session, self.load_timeout, self._load(session, document.html))

            session.enter(RenderPhase.RASTERIZE)
            data = await self._step(session, self.rasterize_timeout, self._rasterize(page))
            try:
                page_count = inspect_pdf(data)
            except Exception as e:
                raise EngineFailureFault(RenderPhase.RASTERIZE, e, document.document_id) from e

        logger.info(
            f"Rendered '{document.title}' ({page_count} page(s), {len(data)} bytes)"
        )
        return ExportArtifact(
            document_id=document.document_id,
            title=document.title,
            data=data,
            page_count=page_count,
            sha256=compute_digest(data),
        )

    @asynccontextmanager
    async def _engine(self, session: RenderSession) -> AsyncIterator[Any]:
        """Scoped browser instance, released on every exit path."""
        self.active_engines += 1
        try:
            session.enter(RenderPhase.LAUNCH)
            await self._step(session, self.launch_timeout, self._launch(session))
            yield session.browser
        finally:
            await self._release(session)
            self.active_engines -= 1
            session.enter(RenderPhase.CLOSED)

    async def _launch(self, session: RenderSession) -> None:
        # Handles are stored as soon as they exist so a timeout mid-launch
        # still releases whatever was acquired.
        session.playwright = await async_playwright().start()
        session.browser = await session.playwright.chromium.launch(
            headless=True,
            args=self.engine_args,
            timeout=self.launch_timeout * 1000,
        )

    async def _load(self, session: RenderSession, html: str) -> Any:
        page = await session.browser.new_page()
        await page.set_content(html, wait_until="networkidle", timeout=self.load_timeout * 1000)
        return page

    async def _rasterize(self, page: Any) -> bytes:
        return await page.pdf(
            format=self.page_format,
            margin=self.margins,
            print_background=settings.print_background,
        )

    async def _step(self, session: RenderSession, timeout: float, work: Awaitable[Any]) -> Any:
        """Run one phase under its timeout and map engine errors to faults."""
        try:
            return await asyncio.wait_for(work, timeout)
        except (asyncio.TimeoutError, PlaywrightTimeoutError):
            raise EngineTimeoutFault(session.phase, timeout, session.document_id) from None
        except PagePressError:
            raise
        except Exception as e:
            raise EngineFailureFault(session.phase, e, session.document_id) from e

    async def _release(self, session: RenderSession) -> None:
        browser, session.browser = session.browser, None
        playwright, session.playwright = session.playwright, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"{session.document_id}: error closing browser: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"{session.document_id}: error stopping playwright: {e}")
