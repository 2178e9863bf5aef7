"""Document-level IR models: requests, letterhead, and export outputs."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, ValidationInfo, field_validator

from .base import BaseIRModel, FaultKind, PropertyKind, RenderPhase, RequestType
from .block import ContentBlock, parse_block
from .table import TabularRow, TabularSchema

UNTITLED = "Untitled"


class PropertyValue(BaseIRModel):
    """Typed display value of a page property.

    Always reduced to a single display string; this is a display projection,
    not round-trippable storage.
    """

    kind: PropertyKind = Field(default=PropertyKind.TEXT, alias="type")
    display: str = ""

    @field_validator("kind", mode="before")
    @classmethod
    def _known_or_unknown(cls, value: Any) -> PropertyKind:
        return PropertyKind.parse(value)

    @field_validator("display", mode="before")
    @classmethod
    def _as_string(cls, value: Any) -> str:
        return "" if value is None else str(value)


def _property_value(prop: Any) -> Any:
    """Coerce one incoming property to a ``PropertyValue`` or its fields."""
    if isinstance(prop, str) or prop is None:
        return {"display": prop}
    if isinstance(prop, dict) and "display" not in prop and prop.get("type"):
        # Imported here: the pipeline package imports these models
        from pagepress.pipeline.stage_properties import project_property

        return project_property(prop)
    return prop


def _is_raw_row(row: Any) -> bool:
    """A row page whose properties are still raw typed payloads."""
    if not isinstance(row, dict):
        return False
    properties = row.get("properties")
    return bool(properties) and isinstance(properties, dict) and all(
        isinstance(prop, dict) for prop in properties.values()
    )


class LetterheadSpec(BaseIRModel):
    """Branding header prefixed to every rendered document."""

    company_name: str = Field(..., alias="companyName")
    logo: Optional[str] = Field(None, alias="logoUrl", description="data: URI or http(s) URL")
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class PageRequest(BaseIRModel):
    """A page: title, ordered body blocks and typed properties.

    Properties may arrive as display values or as raw typed payloads from
    the content source; raw payloads are projected on the way in. A missing
    title falls back to the first title-kind property.
    """

    type: Literal["page"] = RequestType.PAGE.value
    id: Optional[str] = Field(None, alias="pageId")
    # Validated before title so the title can fall back to it
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    title: str = Field(UNTITLED, validate_default=True)
    blocks: list[ContentBlock]
    hidden_properties: frozenset[str] = Field(default_factory=frozenset, alias="hiddenProperties")

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any, info: ValidationInfo) -> Any:
        if value and value != UNTITLED:
            return value
        from pagepress.pipeline.stage_properties import title_of

        return title_of(info.data.get("properties") or {}, UNTITLED)

    @field_validator("blocks", mode="before")
    @classmethod
    def _typed_blocks(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [parse_block(raw) for raw in value]
        return value

    @field_validator("properties", mode="before")
    @classmethod
    def _typed_properties(cls, value: Any) -> Any:
        if not value:
            return {}
        if isinstance(value, dict):
            return {name: _property_value(prop) for name, prop in value.items()}
        return value

    @field_validator("hidden_properties", mode="before")
    @classmethod
    def _hidden_names(cls, value: Any) -> Any:
        return frozenset() if value is None else value

    @property
    def document_id(self) -> str:
        return self.id or self.title


class DatabaseRequest(BaseIRModel):
    """A database: title, icon, column schema and ordered rows."""

    type: Literal["database"] = RequestType.DATABASE.value
    id: Optional[str] = None
    title: str = UNTITLED
    icon: Optional[str] = None
    table_schema: TabularSchema = Field(..., alias="schema")
    rows: list[TabularRow] = Field(default_factory=list)
    hidden_columns: frozenset[str] = Field(default_factory=frozenset, alias="hiddenColumns")

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value or UNTITLED

    @field_validator("table_schema", mode="before")
    @classmethod
    def _wrap_column_mapping(cls, value: Any) -> Any:
        if isinstance(value, dict):
            columns = value.get("columns")
            wrapped = (
                len(value) == 1
                and isinstance(columns, dict)
                and all(isinstance(spec, dict) for spec in columns.values())
            )
            if not wrapped:
                return {"columns": value}
        return value

    @field_validator("rows", mode="before")
    @classmethod
    def _typed_rows(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)) and any(_is_raw_row(row) for row in value):
            from pagepress.pipeline.stage_properties import project_row

            return [project_row(row) if _is_raw_row(row) else row for row in value]
        return value

    @field_validator("hidden_columns", mode="before")
    @classmethod
    def _hidden_names(cls, value: Any) -> Any:
        return frozenset() if value is None else value

    @property
    def document_id(self) -> str:
        return self.id or self.title


DocumentRequest = Annotated[Union[PageRequest, DatabaseRequest], Field(discriminator="type")]


class RejectedRequest(BaseIRModel):
    """Stand-in for a batch item that failed request validation.

    Keeps the item's position in the batch so the failure is reported
    alongside the other documents instead of aborting the whole job.
    """

    type: Literal["rejected"] = "rejected"
    id: Optional[str] = None
    title: str = UNTITLED
    reason: str

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value if isinstance(value, str) and value else UNTITLED


BatchItem = Annotated[
    Union[PageRequest, DatabaseRequest, RejectedRequest], Field(discriminator="type")
]


class RenderedDocument(BaseIRModel):
    """Styled markup for one document, ready for the render engine."""

    document_id: str
    title: str
    html: str
    unsupported_blocks: int = 0
    faulted_blocks: int = 0


class ExportArtifact(BaseIRModel):
    """Paginated binary output for one document request."""

    document_id: str
    title: str
    data: bytes = Field(repr=False)
    media_type: str = "application/pdf"
    page_count: int = Field(default=0, ge=0)
    sha256: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class BatchJob(BaseIRModel):
    """Ordered document requests sharing one letterhead and hidden sets."""

    documents: list[BatchItem]
    letterhead: LetterheadSpec
    hidden_properties: frozenset[str] = Field(default_factory=frozenset, alias="hiddenProperties")
    hidden_columns: frozenset[str] = Field(default_factory=frozenset, alias="hiddenColumns")


class DocumentFailure(BaseIRModel):
    """Per-document entry of a batch failure report."""

    index: int = Field(..., ge=0)
    title: str
    document_id: Optional[str] = None
    kind: FaultKind
    phase: Optional[RenderPhase] = None
    message: str


class BatchResult(BaseIRModel):
    """Archive of successful artifacts plus a report of the failed ones."""

    archive: bytes = Field(repr=False)
    entries: list[str] = Field(default_factory=list)
    failures: list[DocumentFailure] = Field(default_factory=list)
    total: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.entries)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)
