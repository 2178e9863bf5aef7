"""Tabular Renderer - Render a column schema plus rows as a typed table.

Cell formatting dispatches on the column's declared kind, never on the
shape of the row value. Rows and columns keep their input order; hidden
columns are the only ones left out.
"""

from typing import Callable, Iterable, Optional

from pagepress.models import PropertyKind, TabularRow, TabularSchema
from pagepress.pipeline.stage_properties import CHECKED_DISPLAY, split_values
from pagepress.pipeline.stage_richtext import escape_text

EMPTY_CELL = '<span class="empty-cell">—</span>'
NO_COLUMNS_MESSAGE = (
    '<p class="empty-state"><em>No columns to display (all columns are hidden)</em></p>'
)
EMPTY_TABLE_MESSAGE = "This database is empty"

TRUTHY_DISPLAYS = frozenset({CHECKED_DISPLAY.lower(), "true", "checked"})

COLUMN_LABELS: dict[PropertyKind, str] = {
    PropertyKind.TITLE: "Title",
    PropertyKind.TEXT: "Text",
    PropertyKind.NUMBER: "Number",
    PropertyKind.SINGLE_CHOICE: "Select",
    PropertyKind.MULTI_CHOICE: "Multi-select",
    PropertyKind.STATUS: "Status",
    PropertyKind.DATE: "Date",
    PropertyKind.BOOLEAN: "Checkbox",
    PropertyKind.URL: "URL",
    PropertyKind.EMAIL: "Email",
    PropertyKind.PHONE: "Phone",
    PropertyKind.PERSON_LIST: "Person",
    PropertyKind.FILE_LIST: "Files",
    PropertyKind.CREATED_TIMESTAMP: "Created Time",
    PropertyKind.EDITED_TIMESTAMP: "Last Edited",
    PropertyKind.CREATED_BY: "Created By",
    PropertyKind.EDITED_BY: "Last Edited By",
    PropertyKind.UNKNOWN: "Unknown",
}


def column_label(kind: PropertyKind) -> str:
    """Human label for a declared column kind."""
    return COLUMN_LABELS.get(kind, kind.value)


def is_checked(value: str) -> bool:
    """Normalize a boolean display string ("Yes"/"No")."""
    return value.strip().lower() in TRUTHY_DISPLAYS


def _link(prefix: str) -> Callable[[str], str]:
    def render(value: str) -> str:
        escaped = escape_text(value)
        return f'<a href="{prefix}{escaped}">{escaped}</a>'

    return render


def _url(value: str) -> str:
    target = value if "://" in value else f"https://{value}"
    escaped = escape_text(value)
    return (
        f'<a href="{escape_text(target)}" target="_blank" rel="noopener noreferrer">'
        f"{escaped}</a>"
    )


def _checkbox(value: str) -> str:
    if is_checked(value):
        return '<span class="checkbox checked">☑</span>'
    return '<span class="checkbox unchecked">☐</span>'


def _tag(value: str) -> str:
    return f'<span class="tag">{escape_text(value)}</span>'


def _tags(value: str) -> str:
    return " ".join(_tag(token) for token in split_values(value))


def _wrapped(css_class: str) -> Callable[[str], str]:
    return lambda value: f'<span class="{css_class}">{escape_text(value)}</span>'


CELL_FORMATTERS: dict[PropertyKind, Callable[[str], str]] = {
    PropertyKind.URL: _url,
    PropertyKind.EMAIL: _link("mailto:"),
    PropertyKind.PHONE: _link("tel:"),
    PropertyKind.BOOLEAN: _checkbox,
    PropertyKind.SINGLE_CHOICE: _tag,
    PropertyKind.STATUS: _tag,
    PropertyKind.MULTI_CHOICE: _tags,
    PropertyKind.DATE: _wrapped("date"),
    PropertyKind.NUMBER: _wrapped("number"),
}


def format_cell(value: Optional[str], kind: PropertyKind) -> str:
    """Format one cell by its column's declared kind."""
    if value is None or not str(value).strip():
        return EMPTY_CELL
    formatter = CELL_FORMATTERS.get(kind, escape_text)
    return formatter(str(value)) or EMPTY_CELL


class TableRenderer:
    """Renders a database schema and its rows as an HTML table."""

    def __init__(self, schema: TabularSchema, hidden_columns: Iterable[str] = ()):
        self.schema = schema
        self.hidden_columns = frozenset(hidden_columns)
        self.columns = schema.visible_columns(self.hidden_columns)

    def render(self, rows: Iterable[TabularRow]) -> str:
        """Render the table, or an explicit message when no column is visible."""
        if not self.columns:
            return NO_COLUMNS_MESSAGE

        rows = list(rows)
        parts = ['<table class="database-table">', self._render_header()]
        if rows:
            parts.append(self._render_body(rows))
        else:
            parts.append(
                f'<tbody><tr class="empty-row"><td colspan="{len(self.columns)}">'
                f"<em>{EMPTY_TABLE_MESSAGE}</em></td></tr></tbody>"
            )
        parts.append("</table>")
        return "\n".join(parts)

    def _render_header(self) -> str:
        cells = []
        for name in self.columns:
            kind = self.schema.kind_of(name)
            cells.append(
                f'<th data-type="{kind.value}" title="{column_label(kind)}">'
                f"{escape_text(name)}</th>"
            )
        return f"<thead><tr>{''.join(cells)}</tr></thead>"

    def _render_body(self, rows: list[TabularRow]) -> str:
        lines = ["<tbody>"]
        for index, row in enumerate(rows):
            parity = "even" if index % 2 == 0 else "odd"
            cells = []
            for name in self.columns:
                kind = self.schema.kind_of(name)
                cells.append(f'<td data-type="{kind.value}">{format_cell(row.value(name), kind)}</td>')
            lines.append(f'<tr class="{parity}">{"".join(cells)}</tr>')
        lines.append("</tbody>")
        return "\n".join(lines)


def render_table(
    schema: TabularSchema,
    rows: Iterable[TabularRow],
    hidden_columns: Iterable[str] = (),
) -> str:
    """Render a schema and ordered rows as a type-aware table."""
    return TableRenderer(schema, hidden_columns).render(rows)
