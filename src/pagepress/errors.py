"""Fault taxonomy for the export pipeline.

Block and cell level faults are recovered inside a document and only show
up as diagnostics. Document level faults propagate to the caller of a
single render; batch level faults are collected per document.
"""

from typing import Any, Optional

from pagepress.models.base import FaultKind, RenderPhase


class PagePressError(Exception):
    """Base exception for all PagePress faults."""

    kind: FaultKind = FaultKind.INTERNAL

    def __init__(
        self,
        message: str,
        document_id: Optional[str] = None,
        phase: Optional[RenderPhase] = None,
    ):
        super().__init__(message)
        self.message = message
        self.document_id = document_id
        self.phase = phase

    def to_dict(self) -> dict[str, Any]:
        """Structured context for reports and logs."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "document_id": self.document_id,
            "phase": self.phase.value if self.phase else None,
        }


class UnsupportedContentFault(PagePressError):
    """A block, property or column kind has no specific handler."""

    kind = FaultKind.UNSUPPORTED_CONTENT


class MalformedRequestFault(PagePressError):
    """A document request is missing its type or a required field."""

    kind = FaultKind.MALFORMED_REQUEST


class ValidationFault(PagePressError):
    """Caller-supplied letterhead or field list failed validation."""

    kind = FaultKind.VALIDATION


class RenderEngineFault(PagePressError):
    """Base class for faults raised by the render engine adapter."""

    kind = FaultKind.ENGINE_FAILURE


class EngineTimeoutFault(RenderEngineFault):
    """A render engine phase did not finish within its timeout."""

    kind = FaultKind.ENGINE_TIMEOUT

    def __init__(self, phase: RenderPhase, timeout: float, document_id: Optional[str] = None):
        super().__init__(
            f"Render engine timed out during {phase.value} after {timeout:g}s",
            document_id=document_id,
            phase=phase,
        )
        self.timeout = timeout


class EngineFailureFault(RenderEngineFault):
    """The render engine crashed or rejected the document."""

    kind = FaultKind.ENGINE_FAILURE

    def __init__(
        self,
        phase: RenderPhase,
        cause: BaseException,
        document_id: Optional[str] = None,
    ):
        super().__init__(
            f"Render engine failed during {phase.value}: {cause}",
            document_id=document_id,
            phase=phase,
        )
        self.cause = cause


class BatchPartialFailure(PagePressError):
    """One or more documents in a batch failed under the fail-fast policy."""

    kind = FaultKind.BATCH_PARTIAL_FAILURE

    def __init__(self, result: Any):
        failed = ", ".join(f.title for f in result.failures)
        super().__init__(f"{len(result.failures)} document(s) failed: {failed}")
        self.result = result

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["failures"] = [f.model_dump(mode="json") for f in self.result.failures]
        return data
