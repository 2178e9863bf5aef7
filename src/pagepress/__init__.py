"""PagePress - branded PDF export for structured page and database content."""

__version__ = "0.1.0"
