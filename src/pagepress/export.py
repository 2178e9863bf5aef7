"""Public entry points: render one document, or a batch into one archive.

Both take already-fetched content. Fetching, authorization and request
validation belong to the callers.
"""

from typing import Any, Iterable, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from pagepress.errors import MalformedRequestFault
from pagepress.models import (
    BatchJob,
    BatchResult,
    DatabaseRequest,
    DocumentRequest,
    ExportArtifact,
    LetterheadSpec,
    PageRequest,
    RejectedRequest,
)
from pagepress.pipeline.stage_batch import BatchExporter
from pagepress.pipeline.stage_compose import compose_document
from pagepress.pipeline.stage_render import PDFRenderer

_request_adapter = TypeAdapter(DocumentRequest)


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        where = ".".join(str(part) for part in item["loc"]) or "request"
        problems.append(f"{where}: {item['msg']}")
    return "; ".join(problems)


def parse_request(raw: Any) -> Union[PageRequest, DatabaseRequest]:
    """Validate a raw document request.

    Raises:
        MalformedRequestFault: missing ``type`` discriminant or required field
    """
    if isinstance(raw, (PageRequest, DatabaseRequest)):
        return raw
    if not isinstance(raw, dict) or not raw.get("type"):
        document_id = raw.get("id") if isinstance(raw, dict) else None
        raise MalformedRequestFault("request is missing its 'type' discriminant", document_id)
    try:
        return _request_adapter.validate_python(raw)
    except ValidationError as e:
        raise MalformedRequestFault(
            f"malformed {raw.get('type')} request: {_describe(e)}",
            document_id=raw.get("id") or raw.get("pageId"),
        ) from e


def parse_batch_item(raw: Any) -> Union[PageRequest, DatabaseRequest, RejectedRequest]:
    """Validate one batch item; a malformed item is kept as a rejection."""
    if isinstance(raw, RejectedRequest):
        return raw
    try:
        return parse_request(raw)
    except MalformedRequestFault as e:
        title = raw.get("title") if isinstance(raw, dict) else None
        logger.warning(f"Rejected batch item '{title or 'untitled'}': {e.message}")
        document_id = None if e.document_id is None else str(e.document_id)
        return RejectedRequest(id=document_id, title=title, reason=e.message)


def parse_batch(raw: Any) -> BatchJob:
    """Validate a raw batch job.

    Malformed documents do not reject the job; each one is reported as a
    failure of its own when the batch runs.
    """
    if isinstance(raw, BatchJob):
        return raw
    if not isinstance(raw, dict):
        raise MalformedRequestFault("batch job must be an object")
    documents = [parse_batch_item(item) for item in raw.get("documents") or raw.get("pages") or []]
    try:
        return BatchJob.model_validate({**raw, "documents": documents})
    except ValidationError as e:
        raise MalformedRequestFault(f"malformed batch job: {_describe(e)}") from e


async def render_one(
    request: Any,
    letterhead: LetterheadSpec,
    hidden: Iterable[str] = (),
    renderer: Optional[PDFRenderer] = None,
) -> ExportArtifact:
    """Render one document request to a PDF artifact.

    Raises:
        MalformedRequestFault: the request is structurally invalid
        EngineTimeoutFault: a render engine phase timed out
        EngineFailureFault: the render engine failed
    """
    request = parse_request(request)
    document = compose_document(request, letterhead, hidden)
    renderer = renderer or PDFRenderer()
    return await renderer.render(document)


async def render_batch(
    documents: Iterable[Any],
    letterhead: LetterheadSpec,
    hidden_properties: Iterable[str] = (),
    hidden_columns: Iterable[str] = (),
    fail_fast: Optional[bool] = None,
    max_concurrency: Optional[int] = None,
    renderer: Optional[PDFRenderer] = None,
) -> BatchResult:
    """Render documents into one archive plus a per-document failure report.

    A structurally invalid request fails only its own document, with kind
    ``malformed_request``.

    Raises:
        BatchPartialFailure: a document failed and ``fail_fast`` is set
    """
    job = BatchJob(
        documents=[parse_batch_item(item) for item in documents],
        letterhead=letterhead,
        hidden_properties=frozenset(hidden_properties),
        hidden_columns=frozenset(hidden_columns),
    )
    exporter = BatchExporter(renderer=renderer, max_concurrency=max_concurrency, fail_fast=fail_fast)
    return await exporter.export(job)
