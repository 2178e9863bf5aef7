"""Document Composer - Assemble letterhead, title, projection panel and body.

Layout, in order: letterhead, divider, title heading (left out when the
title is the ``Untitled`` sentinel), property or column panel, body.
Every externally sourced value is escaped here, exactly once, before it is
embedded.
"""

from typing import Iterable, Union

from loguru import logger

from pagepress.models import (
    UNTITLED,
    DatabaseRequest,
    LetterheadSpec,
    PageRequest,
    PropertyKind,
    RenderedDocument,
    RequestType,
)
from pagepress.pipeline.stage_blocks import render_blocks, visible_fragments
from pagepress.pipeline.stage_lists import group_lists
from pagepress.pipeline.stage_richtext import escape_text
from pagepress.pipeline.stage_table import EMPTY_CELL, column_label, render_table
from pagepress.pipeline.styles import stylesheet

DEFAULT_DATABASE_ICON = "📊"
TITLE_PROPERTY_NAME = "title"


def render_letterhead(letterhead: LetterheadSpec) -> str:
    """Letterhead block: logo, company name, address, phone/email line."""
    parts = ['<div class="letterhead">', '<div class="letterhead-content">']
    if letterhead.logo:
        parts.append(f'<img src="{escape_text(letterhead.logo)}" alt="Logo" class="letterhead-logo" />')
    parts.append('<div class="letterhead-info">')
    parts.append(f'<div class="company-name">{escape_text(letterhead.company_name)}</div>')
    if letterhead.address:
        parts.append(f'<div class="contact-line">{escape_text(letterhead.address)}</div>')
    contacts = [escape_text(v) for v in (letterhead.phone, letterhead.email) if v]
    if contacts:
        spans = " • ".join(f"<span>{c}</span>" for c in contacts)
        parts.append(f'<div class="contact-line">{spans}</div>')
    parts.append("</div></div>")
    parts.append('<div class="letterhead-divider"></div>')
    parts.append("</div>")
    return "\n".join(parts)


def render_title(title: str, icon: str = "") -> str:
    """Title heading, or nothing for the ``Untitled`` sentinel."""
    if not title or title == UNTITLED:
        return ""
    prefix = f'<span class="title-icon">{escape_text(icon)}</span> ' if icon else ""
    return f'<h1 class="page-title">{prefix}{escape_text(title)}</h1>'


def render_property_panel(request: PageRequest, hidden: frozenset[str]) -> str:
    """Visible properties, minus hidden ones and the title property."""
    rows = []
    for name, value in request.properties.items():
        if name in hidden or name == TITLE_PROPERTY_NAME or value.kind == PropertyKind.TITLE:
            continue
        display = escape_text(value.display) if value.display else EMPTY_CELL
        rows.append(
            '<div class="property-row">'
            f'<span class="property-label">{escape_text(name)}:</span>'
            f'<span class="property-value">{display}</span>'
            "</div>"
        )
    if not rows:
        return ""
    return '<div class="properties-section">\n' + "\n".join(rows) + "\n</div>"


def render_column_panel(request: DatabaseRequest, hidden: frozenset[str]) -> str:
    """Visible columns with their declared kind, in schema order."""
    schema = request.table_schema
    chips = [
        f'<span class="column-chip">{escape_text(name)}'
        f"<small>{column_label(schema.kind_of(name))}</small></span>"
        for name in schema.visible_columns(hidden)
    ]
    if not chips:
        return ""
    return (
        '<div class="properties-section columns-section">'
        f'<span class="property-label">Columns:</span> {"".join(chips)}</div>'
    )


def _html_document(title: str, request_type: RequestType, body: Iterable[str]) -> str:
    content = "\n".join(part for part in body if part)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        f"<title>{escape_text(title)}</title>\n"
        f"<style>{stylesheet(request_type)}</style>\n"
        "</head>\n"
        f"<body>\n{content}\n</body>\n"
        "</html>\n"
    )


class DocumentComposer:
    """Composes styled documents under one shared letterhead."""

    def __init__(self, letterhead: LetterheadSpec):
        self.letterhead = letterhead
        self._letterhead_html = render_letterhead(letterhead)

    def compose(
        self,
        request: Union[PageRequest, DatabaseRequest],
        hidden: Iterable[str] = (),
    ) -> RenderedDocument:
        """Compose one request. ``hidden`` adds to the request's own hidden set."""
        if isinstance(request, DatabaseRequest):
            return self.compose_database(request, hidden)
        return self.compose_page(request, hidden)

    def compose_page(self, request: PageRequest, hidden: Iterable[str] = ()) -> RenderedDocument:
        hidden_names = request.hidden_properties | frozenset(hidden)
        fragments = render_blocks(request.blocks)
        unsupported = sum(1 for f in fragments if f.is_unsupported)
        faulted = sum(1 for f in fragments if f.is_error)
        if unsupported or faulted:
            logger.debug(
                f"{request.document_id}: {unsupported} unsupported, {faulted} faulted block(s)"
            )
        grouped = group_lists(visible_fragments(fragments))
        body = '<div class="content">\n' + "\n".join(f.html for f in grouped) + "\n</div>"

        html = _html_document(
            request.title,
            RequestType.PAGE,
            [
                self._letterhead_html,
                render_title(request.title),
                render_property_panel(request, hidden_names),
                body,
            ],
        )
        return RenderedDocument(
            document_id=request.document_id,
            title=request.title,
            html=html,
            unsupported_blocks=unsupported,
            faulted_blocks=faulted,
        )

    def compose_database(
        self, request: DatabaseRequest, hidden: Iterable[str] = ()
    ) -> RenderedDocument:
        hidden_names = request.hidden_columns | frozenset(hidden)
        table = render_table(request.table_schema, request.rows, hidden_names)
        body = f'<div class="content database-container">\n{table}\n</div>'

        html = _html_document(
            request.title,
            RequestType.DATABASE,
            [
                self._letterhead_html,
                render_title(request.title, request.icon or DEFAULT_DATABASE_ICON),
                render_column_panel(request, hidden_names),
                body,
            ],
        )
        return RenderedDocument(document_id=request.document_id, title=request.title, html=html)


def compose_document(
    request: Union[PageRequest, DatabaseRequest],
    letterhead: LetterheadSpec,
    hidden: Iterable[str] = (),
) -> RenderedDocument:
    """Compose one request into a styled document."""
    return DocumentComposer(letterhead).compose(request, hidden)
