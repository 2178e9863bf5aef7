"""Rich Text Composer - Turn annotated text spans into inline markup.

Annotations nest in a fixed order so output is deterministic whatever
subset is set: monospace innermost, then bold, italic, strikethrough,
underline, and the hyperlink outermost so it wraps the formatted label.
"""

import html
from typing import Iterable, Optional
from urllib.parse import urlsplit

from pagepress.models import Annotations, RichTextSpan

# (annotation field, tag) from innermost to outermost
ANNOTATION_TAGS: tuple[tuple[str, str], ...] = (
    ("monospace", "code"),
    ("bold", "strong"),
    ("italic", "em"),
    ("strikethrough", "s"),
    ("underline", "u"),
)

SAFE_LINK_SCHEMES = frozenset({"http", "https", "mailto", "tel"})


def escape_text(value: Optional[str]) -> str:
    """Escape an externally sourced value for embedding in markup.

    Every raw value passes through here exactly once, at the point it is
    embedded. Composed markup is never fed back in.
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def safe_href(href: Optional[str]) -> Optional[str]:
    """Return the escaped link target, or None for unusable targets.

    Only absolute links with a safe scheme are kept. Relative and fragment
    references point inside the content source and have no target in a PDF.
    """
    if not href or not href.strip():
        return None
    scheme = urlsplit(href.strip()).scheme.lower()
    if scheme not in SAFE_LINK_SCHEMES:
        return None
    return escape_text(href.strip())


def apply_annotations(label: str, annotations: Annotations) -> str:
    """Wrap already-escaped text in annotation tags, innermost first."""
    for field, tag in ANNOTATION_TAGS:
        if getattr(annotations, field, False):
            label = f"<{tag}>{label}</{tag}>"
    return label


def compose_span(span: RichTextSpan) -> str:
    """Render one span to inline markup."""
    label = apply_annotations(escape_text(span.text), span.annotations)
    href = safe_href(span.href)
    if href is not None:
        label = f'<a href="{href}">{label}</a>'
    return label


def compose_rich_text(spans: Optional[Iterable[RichTextSpan]]) -> str:
    """Render an ordered span sequence. Empty input yields an empty string."""
    if not spans:
        return ""
    return "".join(compose_span(span) for span in spans)
