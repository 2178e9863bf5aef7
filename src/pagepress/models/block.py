"""Content block IR models.

A page body is an ordered sequence of blocks. Each supported kind has its
own model; anything else becomes an :class:`UnsupportedBlock` that keeps
the original kind tag for diagnostics.
"""

from typing import Any, ClassVar, Optional, Union

from loguru import logger
from pydantic import Field, ValidationError, field_validator

from .base import BaseIRModel, BlockKind, ListKind


class Annotations(BaseIRModel):
    """Formatting flags of a rich text span. Missing or null means not set."""

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    monospace: bool = Field(default=False, alias="code")

    @field_validator("bold", "italic", "strikethrough", "underline", "monospace", mode="before")
    @classmethod
    def _unset_when_null(cls, value: Any) -> bool:
        return bool(value)


class RichTextSpan(BaseIRModel):
    """A run of text with its annotations and optional hyperlink."""

    text: str = ""
    annotations: Annotations = Field(default_factory=Annotations)
    href: Optional[str] = None

    @field_validator("annotations", mode="before")
    @classmethod
    def _default_annotations(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "RichTextSpan":
        """Build a span from a content source rich text item."""
        text = item.get("plain_text")
        if text is None:
            text = (item.get("text") or {}).get("content", "")
        href = item.get("href")
        if href is None:
            href = ((item.get("text") or {}).get("link") or {}).get("url")
        return cls(text=text or "", annotations=item.get("annotations"), href=href)


class BlockModel(BaseIRModel):
    """Common base of every block model."""

    KINDS: ClassVar[tuple[BlockKind, ...]] = ()

    kind: BlockKind

    @field_validator("kind")
    @classmethod
    def _kind_allowed(cls, value: BlockKind) -> BlockKind:
        if cls.KINDS and value not in cls.KINDS:
            raise ValueError(f"{cls.__name__} cannot carry kind {value.value!r}")
        return value


class TextBlock(BlockModel):
    """Shared shape of every block that carries rich text."""

    rich_text: list[RichTextSpan] = Field(default_factory=list)

    @property
    def plain_text(self) -> str:
        return "".join(span.text for span in self.rich_text)


class ParagraphBlock(TextBlock):
    KINDS = (BlockKind.PARAGRAPH,)

    kind: BlockKind = BlockKind.PARAGRAPH


class HeadingBlock(TextBlock):
    kind: BlockKind = BlockKind.HEADING_1

    KINDS = (BlockKind.HEADING_1, BlockKind.HEADING_2, BlockKind.HEADING_3)

    @property
    def level(self) -> int:
        return int(self.kind.value[-1])


class ListItemBlock(TextBlock):
    kind: BlockKind = BlockKind.BULLETED_ITEM

    KINDS = (BlockKind.BULLETED_ITEM, BlockKind.NUMBERED_ITEM)

    @property
    def list_kind(self) -> ListKind:
        if self.kind == BlockKind.NUMBERED_ITEM:
            return ListKind.NUMBERED
        return ListKind.BULLETED


class ChecklistBlock(TextBlock):
    KINDS = (BlockKind.CHECKLIST_ITEM,)

    kind: BlockKind = BlockKind.CHECKLIST_ITEM
    checked: bool = False


class CollapsibleBlock(TextBlock):
    """Toggle block. Only the summary is rendered; children are not."""

    KINDS = (BlockKind.COLLAPSIBLE,)

    kind: BlockKind = BlockKind.COLLAPSIBLE
    has_children: bool = False


class CodeBlock(TextBlock):
    KINDS = (BlockKind.CODE,)

    kind: BlockKind = BlockKind.CODE
    language: str = "plaintext"


class QuoteBlock(TextBlock):
    KINDS = (BlockKind.QUOTE,)

    kind: BlockKind = BlockKind.QUOTE


class CalloutBlock(TextBlock):
    KINDS = (BlockKind.CALLOUT,)

    kind: BlockKind = BlockKind.CALLOUT
    icon: Optional[str] = None


class DividerBlock(BlockModel):
    KINDS = (BlockKind.DIVIDER,)

    kind: BlockKind = BlockKind.DIVIDER


class UnsupportedBlock(BlockModel):
    """Placeholder for a kind without a renderer (or a malformed payload)."""

    KINDS = (BlockKind.UNSUPPORTED,)

    kind: BlockKind = BlockKind.UNSUPPORTED
    original_kind: str = "unknown"


ContentBlock = Union[
    ParagraphBlock,
    HeadingBlock,
    ListItemBlock,
    ChecklistBlock,
    CollapsibleBlock,
    CodeBlock,
    QuoteBlock,
    CalloutBlock,
    DividerBlock,
    UnsupportedBlock,
]

BLOCK_MODELS: dict[str, type] = {
    BlockKind.PARAGRAPH.value: ParagraphBlock,
    BlockKind.HEADING_1.value: HeadingBlock,
    BlockKind.HEADING_2.value: HeadingBlock,
    BlockKind.HEADING_3.value: HeadingBlock,
    BlockKind.BULLETED_ITEM.value: ListItemBlock,
    BlockKind.NUMBERED_ITEM.value: ListItemBlock,
    BlockKind.CHECKLIST_ITEM.value: ChecklistBlock,
    BlockKind.COLLAPSIBLE.value: CollapsibleBlock,
    BlockKind.CODE.value: CodeBlock,
    BlockKind.QUOTE.value: QuoteBlock,
    BlockKind.CALLOUT.value: CalloutBlock,
    BlockKind.DIVIDER.value: DividerBlock,
    BlockKind.UNSUPPORTED.value: UnsupportedBlock,
}


def _tag(value: Any) -> str:
    if isinstance(value, BlockKind):
        return value.value
    return str(value or "unknown")


def _payload_from_api(tag: str, raw: dict[str, Any]) -> dict[str, Any]:
    """Flatten a content source block payload into model fields."""
    body = raw.get(tag) or {}
    data: dict[str, Any] = {
        "kind": tag,
        "rich_text": [RichTextSpan.from_api(item) for item in body.get("rich_text") or []],
    }
    if tag == BlockKind.CHECKLIST_ITEM.value:
        data["checked"] = bool(body.get("checked"))
    elif tag == BlockKind.CODE.value:
        data["language"] = body.get("language") or "plaintext"
    elif tag == BlockKind.CALLOUT.value:
        icon = body.get("icon") or {}
        data["icon"] = icon.get("emoji") if icon.get("type") == "emoji" else None
    elif tag == BlockKind.COLLAPSIBLE.value:
        data["has_children"] = bool(raw.get("has_children"))
    elif tag == BlockKind.DIVIDER.value:
        data.pop("rich_text")
    return data


def parse_block(raw: Any) -> ContentBlock:
    """Turn a raw block into a typed block. Never raises.

    Accepts typed blocks, the internal ``{"kind": ...}`` shape and the
    content source's ``{"type": ..., <type>: {...}}`` payload shape.
    Unknown kinds and malformed payloads degrade to ``UnsupportedBlock``.
    """
    if isinstance(raw, BlockModel):
        return raw
    if not isinstance(raw, dict):
        return UnsupportedBlock(original_kind=type(raw).__name__)

    if "kind" in raw:
        tag = _tag(raw.get("kind"))
        data = raw
    else:
        tag = _tag(raw.get("type"))
        data = None

    model = BLOCK_MODELS.get(tag)
    if model is None:
        return UnsupportedBlock(original_kind=tag)
    if model is UnsupportedBlock:
        return UnsupportedBlock(original_kind=str(raw.get("original_kind") or tag))

    try:
        if data is None:
            data = _payload_from_api(tag, raw)
        return model.model_validate(data)
    except (ValidationError, AttributeError, TypeError) as e:
        logger.warning(f"Malformed {tag} block degraded to placeholder: {e}")
        return UnsupportedBlock(original_kind=tag)
