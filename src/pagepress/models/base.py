"""Base enums and common types for the PagePress IR."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RequestType(str, Enum):
    """Discriminant of a document request."""

    PAGE = "page"
    DATABASE = "database"


class BlockKind(str, Enum):
    """Content block kinds with a dedicated renderer.

    Values follow the content source's block type tags so raw payloads
    map one to one.
    """

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_ITEM = "bulleted_list_item"
    NUMBERED_ITEM = "numbered_list_item"
    CHECKLIST_ITEM = "to_do"
    COLLAPSIBLE = "toggle"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"
    DIVIDER = "divider"
    UNSUPPORTED = "unsupported"


class ListKind(str, Enum):
    """List container kinds, valued by their container tag."""

    BULLETED = "ul"
    NUMBERED = "ol"


class PropertyKind(str, Enum):
    """Declared kinds of page properties and database columns."""

    TITLE = "title"
    TEXT = "rich_text"
    NUMBER = "number"
    SINGLE_CHOICE = "select"
    MULTI_CHOICE = "multi_select"
    STATUS = "status"
    DATE = "date"
    BOOLEAN = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone_number"
    PERSON_LIST = "people"
    FILE_LIST = "files"
    CREATED_TIMESTAMP = "created_time"
    EDITED_TIMESTAMP = "last_edited_time"
    CREATED_BY = "created_by"
    EDITED_BY = "last_edited_by"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "PropertyKind":
        """Map any declared type tag to a kind, unknown tags included."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


class RenderPhase(str, Enum):
    """Render engine adapter states."""

    IDLE = "idle"
    LAUNCH = "launch"
    LOAD = "load"
    RASTERIZE = "rasterize"
    CLOSED = "closed"


class FaultKind(str, Enum):
    """Classification carried by every PagePress fault."""

    UNSUPPORTED_CONTENT = "unsupported_content"
    MALFORMED_REQUEST = "malformed_request"
    VALIDATION = "validation"
    ENGINE_TIMEOUT = "engine_timeout"
    ENGINE_FAILURE = "engine_failure"
    BATCH_PARTIAL_FAILURE = "batch_partial_failure"
    SKIPPED = "skipped"
    INTERNAL = "internal"


class BaseIRModel(BaseModel):
    """Base class for all request-side IR models.

    Models are frozen: a request is read-only for the duration of a render.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)
