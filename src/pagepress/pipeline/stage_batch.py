"""Batch Export Stage - Fan document requests out and zip the artifacts.

Each document runs its own compose -> render pipeline. Renders run
concurrently up to ``max_concurrency`` browser instances. A failure in
one document never cancels its siblings; under the fail-fast policy no
new document is started after the first failure, and the partial result
is raised as ``BatchPartialFailure``.
"""

import asyncio
import io
import re
import zipfile
from typing import Iterable, Optional, Union

from loguru import logger

from pagepress.config import settings
from pagepress.errors import BatchPartialFailure, MalformedRequestFault, PagePressError
from pagepress.models import (
    UNTITLED,
    BatchJob,
    BatchResult,
    DatabaseRequest,
    DocumentFailure,
    ExportArtifact,
    FaultKind,
    PageRequest,
    RejectedRequest,
)
from pagepress.pipeline.stage_compose import DocumentComposer
from pagepress.pipeline.stage_render import PDFRenderer

ENTRY_FILLER = "_"
ENTRY_EXTENSION = ".pdf"


def normalize_entry_name(title: str) -> str:
    """Archive entry name: non-alphanumerics to ``_``, lower-cased."""
    return re.sub(r"[^a-z0-9]", ENTRY_FILLER, title, flags=re.IGNORECASE).lower()


def unique_entry_names(titles: Iterable[str]) -> list[str]:
    """Entry names in order, suffixing ``_2``, ``_3``... on collisions."""
    names: list[str] = []
    used: set[str] = set()
    for title in titles:
        base = normalize_entry_name(title)
        name, n = base, 1
        while name in used:
            n += 1
            name = f"{base}{ENTRY_FILLER}{n}"
        used.add(name)
        names.append(name + ENTRY_EXTENSION)
    return names


def batch_title(
    index: int, request: Union[PageRequest, DatabaseRequest, RejectedRequest]
) -> str:
    """Title used for reporting and naming; untitled items get a position name."""
    if request.title and request.title != UNTITLED:
        return request.title
    prefix = "Database" if isinstance(request, DatabaseRequest) else UNTITLED
    return f"{prefix}-{index + 1}"


def build_archive(
    artifacts: list[tuple[str, ExportArtifact]],
    compression_level: Optional[int] = None,
) -> bytes:
    """Zip artifacts under their titles' normalized entry names."""
    level = compression_level if compression_level is not None else settings.archive_compression_level
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=level) as archive:
        for name, artifact in artifacts:
            archive.writestr(name, artifact.data)
    return buffer.getvalue()


class BatchExporter:
    """Coordinates a batch job over one shared renderer configuration."""

    def __init__(
        self,
        renderer: Optional[PDFRenderer] = None,
        max_concurrency: Optional[int] = None,
        fail_fast: Optional[bool] = None,
        compression_level: Optional[int] = None,
    ):
        """Initialize exporter.

        Args:
            renderer: Render engine adapter (default: PDFRenderer from settings)
            max_concurrency: Maximum simultaneous browser instances
            fail_fast: Stop scheduling and raise on the first failure
            compression_level: zlib level for the archive
        """
        self.renderer = renderer or PDFRenderer()
        self.max_concurrency = max(1, max_concurrency or settings.max_concurrency)
        self.fail_fast = settings.fail_fast if fail_fast is None else fail_fast
        self.compression_level = compression_level

    async def export(self, job: BatchJob, fail_fast: Optional[bool] = None) -> BatchResult:
        """Render every document of the job and package the successes.

        Raises:
            BatchPartialFailure: only under the fail-fast policy
        """
        fail_fast = self.fail_fast if fail_fast is None else fail_fast
        composer = DocumentComposer(job.letterhead)
        semaphore = asyncio.Semaphore(self.max_concurrency)
        stop = asyncio.Event()
        titles = [batch_title(i, request) for i, request in enumerate(job.documents)]

        async def run(index: int, request: Union[PageRequest, DatabaseRequest, RejectedRequest]):
            async with semaphore:
                if stop.is_set():
                    return DocumentFailure(
                        index=index,
                        title=titles[index],
                        document_id=request.id,
                        kind=FaultKind.SKIPPED,
                        message="not started after an earlier failure",
                    )
                try:
                    return await self._export_one(composer, job, request)
                except Exception as e:
                    failure = _failure_report(index, titles[index], request, e)
                    logger.error(
                        f"Batch document {index + 1}/{len(titles)} '{titles[index]}' failed: "
                        f"{failure.kind.value} ({failure.message})"
                    )
                    if fail_fast:
                        stop.set()
                    return failure

        logger.info(f"Exporting {len(titles)} document(s), concurrency {self.max_concurrency}")
        outcomes = await asyncio.gather(*(run(i, r) for i, r in enumerate(job.documents)))

        succeeded = [(i, o) for i, o in enumerate(outcomes) if isinstance(o, ExportArtifact)]
        failures = [o for o in outcomes if isinstance(o, DocumentFailure)]
        names = unique_entry_names(titles[i] for i, _ in succeeded)
        archive = build_archive(
            [(name, artifact) for name, (_, artifact) in zip(names, succeeded)],
            self.compression_level,
        )
        result = BatchResult(archive=archive, entries=names, failures=failures, total=len(titles))
        logger.info(f"Batch finished: {result.succeeded}/{result.total} exported, {len(failures)} failed")

        if fail_fast and failures:
            raise BatchPartialFailure(result)
        return result

    async def _export_one(
        self,
        composer: DocumentComposer,
        job: BatchJob,
        request: Union[PageRequest, DatabaseRequest, RejectedRequest],
    ) -> ExportArtifact:
        if isinstance(request, RejectedRequest):
            raise MalformedRequestFault(request.reason, request.id)
        if isinstance(request, DatabaseRequest):
            hidden = job.hidden_columns
        else:
            hidden = job.hidden_properties
        document = composer.compose(request, hidden)
        return await self.renderer.render(document)


def _failure_report(
    index: int,
    title: str,
    request: Union[PageRequest, DatabaseRequest, RejectedRequest],
    error: Exception,
) -> DocumentFailure:
    if isinstance(error, PagePressError):
        return DocumentFailure(
            index=index,
            title=title,
            document_id=error.document_id or request.id,
            kind=error.kind,
            phase=error.phase,
            message=error.message,
        )
    return DocumentFailure(
        index=index,
        title=title,
        document_id=request.id,
        kind=FaultKind.INTERNAL,
        message=str(error) or type(error).__name__,
    )
