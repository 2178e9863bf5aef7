"""Pytest configuration and fixtures."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pagepress.models import LetterheadSpec

FAKE_PDF = b"%PDF-1.4\n% pagepress test artifact\n%%EOF"


def make_engine(pdf_bytes=FAKE_PDF):
    """Fake Playwright entry point with one browser and one page."""
    page = MagicMock()
    page.set_content = AsyncMock()
    page.pdf = AsyncMock(return_value=pdf_bytes)

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    entry = MagicMock()
    entry.return_value.start = AsyncMock(return_value=playwright)
    return SimpleNamespace(entry=entry, playwright=playwright, browser=browser, page=page)


@pytest.fixture
def engine():
    """Patch the render engine and PDF inspection in stage_render."""
    fake = make_engine()
    with patch("pagepress.pipeline.stage_render.async_playwright", fake.entry), patch(
        "pagepress.pipeline.stage_render.fitz"
    ) as mock_fitz:
        mock_pdf_doc = MagicMock()
        mock_pdf_doc.__len__ = MagicMock(return_value=2)
        mock_pdf_doc.is_pdf = True
        mock_fitz.open.return_value = mock_pdf_doc
        fake.fitz = mock_fitz
        fake.pdf_doc = mock_pdf_doc
        yield fake


@pytest.fixture
def letterhead():
    """Letterhead with every optional field set."""
    return LetterheadSpec(
        company_name="Acme Corp",
        logo="https://example.com/logo.png",
        address="1 Main Street, Springfield",
        phone="+1 555 0100",
        email="hello@acme.test",
    )


@pytest.fixture
def page_payload():
    """Raw page request in the content source's block payload shape."""
    return {
        "type": "page",
        "pageId": "page-1",
        "title": "Quarterly Report",
        "properties": {
            "Name": {"type": "title", "display": "Quarterly Report"},
            "Status": {"type": "status", "display": "Done"},
            "Owner": "Dana",
        },
        "blocks": [
            {
                "type": "heading_1",
                "heading_1": {"rich_text": [{"plain_text": "Summary", "annotations": {}}]},
            },
            {
                "type": "paragraph",
                "paragraph": {"rich_text": [{"plain_text": "Revenue grew.", "annotations": {}}]},
            },
            {
                "type": "bulleted_list_item",
                "bulleted_list_item": {"rich_text": [{"plain_text": "North", "annotations": {}}]},
            },
            {
                "type": "bulleted_list_item",
                "bulleted_list_item": {"rich_text": [{"plain_text": "South", "annotations": {}}]},
            },
            {"type": "image", "image": {"type": "external"}},
        ],
    }


@pytest.fixture
def database_payload():
    """Raw database request with three columns and two rows."""
    return {
        "type": "database",
        "id": "db-1",
        "title": "Tasks",
        "icon": "✅",
        "schema": {
            "Name": {"id": "title", "type": "title"},
            "Done": {"id": "a1", "type": "checkbox"},
            "Tags": {"id": "b2", "type": "multi_select"},
        },
        "rows": [
            {"id": "r1", "properties": {"Name": "Write report", "Done": "Yes", "Tags": "ops, q3"}},
            {"id": "r2", "properties": {"Name": "Review", "Done": "No", "Tags": ""}},
        ],
    }
