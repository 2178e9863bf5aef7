"""IR (Intermediate Representation) models for the PagePress pipeline.

These Pydantic models describe the data flowing between pipeline stages:

- DocumentRequest (page | database) → RenderedDocument → ExportArtifact
- BatchJob → BatchResult (archive + per-document failure report)

Request-side models are frozen. No stage mutates caller-owned input.
"""

from .base import (
    BaseIRModel,
    BlockKind,
    FaultKind,
    ListKind,
    PropertyKind,
    RenderPhase,
    RequestType,
)
from .block import (
    Annotations,
    BlockModel,
    CalloutBlock,
    ChecklistBlock,
    CodeBlock,
    CollapsibleBlock,
    ContentBlock,
    DividerBlock,
    HeadingBlock,
    ListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    RichTextSpan,
    UnsupportedBlock,
    parse_block,
)
from .document import (
    UNTITLED,
    BatchItem,
    BatchJob,
    BatchResult,
    DatabaseRequest,
    DocumentFailure,
    DocumentRequest,
    ExportArtifact,
    LetterheadSpec,
    PageRequest,
    PropertyValue,
    RejectedRequest,
    RenderedDocument,
)
from .table import (
    ColumnSpec,
    TabularRow,
    TabularSchema,
)

__all__ = [
    # Base types
    "BaseIRModel",
    "BlockKind",
    "FaultKind",
    "ListKind",
    "PropertyKind",
    "RenderPhase",
    "RequestType",
    # Blocks
    "Annotations",
    "BlockModel",
    "CalloutBlock",
    "ChecklistBlock",
    "CodeBlock",
    "CollapsibleBlock",
    "ContentBlock",
    "DividerBlock",
    "HeadingBlock",
    "ListItemBlock",
    "ParagraphBlock",
    "QuoteBlock",
    "RichTextSpan",
    "UnsupportedBlock",
    "parse_block",
    # Tables
    "ColumnSpec",
    "TabularRow",
    "TabularSchema",
    # Documents
    "UNTITLED",
    "BatchItem",
    "BatchJob",
    "BatchResult",
    "DatabaseRequest",
    "DocumentFailure",
    "DocumentRequest",
    "ExportArtifact",
    "LetterheadSpec",
    "PageRequest",
    "PropertyValue",
    "RejectedRequest",
    "RenderedDocument",
]
