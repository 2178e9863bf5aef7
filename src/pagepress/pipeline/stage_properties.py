"""Property Projection - Reduce typed property payloads to display strings.

The projection is lossy on purpose: every property becomes one display
string. Multi-valued kinds are joined with ``MULTI_VALUE_DELIMITER``,
which the tabular renderer splits on again for tag chips.
"""

from typing import Any, Callable, Mapping, Optional

from pagepress.models import PropertyKind, PropertyValue, TabularRow

# Shared with stage_table: join here, split there
MULTI_VALUE_DELIMITER = ", "
# A delimiter inside one token is rewritten so it can never split
DELIMITER_SUBSTITUTE = ",\u00a0"

CHECKED_DISPLAY = "Yes"
UNCHECKED_DISPLAY = "No"
USER_DISPLAY = "User"
UNKNOWN_PERSON = "Unknown"


def join_values(values: list[str]) -> str:
    """Join multiple values so that ``split_values`` recovers each token."""
    return MULTI_VALUE_DELIMITER.join(
        v.replace(MULTI_VALUE_DELIMITER, DELIMITER_SUBSTITUTE) for v in values if v
    )


def split_values(display: str) -> list[str]:
    """Split a joined multi-value display string back into tokens."""
    if not display:
        return []
    return [token for token in display.split(MULTI_VALUE_DELIMITER) if token]


def _plain_text(items: Optional[list[dict]]) -> str:
    return "".join(item.get("plain_text", "") for item in items or [])


def _named(option: Optional[dict]) -> str:
    return (option or {}).get("name") or ""


def _number(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


PROJECTORS: dict[PropertyKind, Callable[[Any], str]] = {
    PropertyKind.TITLE: _plain_text,
    PropertyKind.TEXT: _plain_text,
    PropertyKind.NUMBER: _number,
    PropertyKind.SINGLE_CHOICE: _named,
    PropertyKind.STATUS: _named,
    PropertyKind.MULTI_CHOICE: lambda options: join_values([_named(o) for o in options or []]),
    PropertyKind.DATE: lambda date: (date or {}).get("start") or "",
    PropertyKind.BOOLEAN: lambda checked: CHECKED_DISPLAY if checked else UNCHECKED_DISPLAY,
    PropertyKind.URL: lambda value: value or "",
    PropertyKind.EMAIL: lambda value: value or "",
    PropertyKind.PHONE: lambda value: value or "",
    PropertyKind.PERSON_LIST: lambda people: join_values(
        [(p or {}).get("name") or UNKNOWN_PERSON for p in people or []]
    ),
    PropertyKind.FILE_LIST: lambda files: join_values([_named(f) for f in files or []]),
    PropertyKind.CREATED_TIMESTAMP: lambda value: value or "",
    PropertyKind.EDITED_TIMESTAMP: lambda value: value or "",
    PropertyKind.CREATED_BY: lambda _: USER_DISPLAY,
    PropertyKind.EDITED_BY: lambda _: USER_DISPLAY,
}


def project_property(raw: Optional[Mapping[str, Any]]) -> PropertyValue:
    """Project one raw typed property payload to a display value.

    Unknown kinds and malformed payloads project to an empty display string.
    """
    if not raw:
        return PropertyValue(kind=PropertyKind.UNKNOWN, display="")
    kind = PropertyKind.parse(raw.get("type"))
    projector = PROJECTORS.get(kind)
    if projector is None:
        return PropertyValue(kind=kind, display="")
    try:
        display = projector(raw.get(kind.value))
    except (AttributeError, TypeError):
        display = ""
    return PropertyValue(kind=kind, display=display)


def project_properties(raw: Mapping[str, Any]) -> dict[str, PropertyValue]:
    """Project a page's raw property mapping, preserving order."""
    return {name: project_property(prop) for name, prop in (raw or {}).items()}


def project_row(raw_page: Mapping[str, Any]) -> TabularRow:
    """Project one database row page into a ``TabularRow``."""
    properties = project_properties(raw_page.get("properties") or {})
    return TabularRow(
        id=raw_page.get("id") or "",
        properties={name: value.display for name, value in properties.items()},
    )


def title_of(properties: Mapping[str, PropertyValue], default: str = "Untitled") -> str:
    """Display string of the first title-kind property, if any."""
    for value in properties.values():
        if value.kind == PropertyKind.TITLE and value.display:
            return value.display
    return default
