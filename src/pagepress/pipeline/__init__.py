"""Pipeline stages for PagePress export.

Pure stages (no I/O, safe on any thread):
1. stage_richtext - annotated spans to inline markup
2. stage_blocks - one content block to one fragment
3. stage_lists - group adjacent list items into containers
4. stage_properties - typed property payloads to display strings
5. stage_table - column schema + rows to a typed table
6. stage_compose - letterhead + title + panel + body into one document

Engine stages (async):
7. stage_render - rasterize a composed document to PDF
8. stage_batch - fan a batch out over 6-7 and zip the artifacts
"""

from .stage_batch import BatchExporter, build_archive, normalize_entry_name, unique_entry_names
from .stage_blocks import Fragment, render_block, render_blocks, visible_fragments
from .stage_compose import DocumentComposer, compose_document, render_letterhead
from .stage_lists import ListGrouper, group_lists
from .stage_properties import (
    MULTI_VALUE_DELIMITER,
    join_values,
    project_properties,
    project_property,
    project_row,
    split_values,
)
from .stage_render import PDFRenderer, RenderSession, compute_digest, inspect_pdf
from .stage_richtext import compose_rich_text, escape_text
from .stage_table import TableRenderer, format_cell, render_table

__all__ = [
    # Rich text
    "compose_rich_text",
    "escape_text",
    # Blocks
    "Fragment",
    "render_block",
    "render_blocks",
    "visible_fragments",
    # Lists
    "ListGrouper",
    "group_lists",
    # Properties
    "MULTI_VALUE_DELIMITER",
    "join_values",
    "split_values",
    "project_property",
    "project_properties",
    "project_row",
    # Tables
    "TableRenderer",
    "format_cell",
    "render_table",
    # Composition
    "DocumentComposer",
    "compose_document",
    "render_letterhead",
    # Rendering
    "PDFRenderer",
    "RenderSession",
    "compute_digest",
    "inspect_pdf",
    # Batch
    "BatchExporter",
    "build_archive",
    "normalize_entry_name",
    "unique_entry_names",
]
