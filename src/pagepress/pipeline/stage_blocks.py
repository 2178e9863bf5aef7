"""Block Renderer - Dispatch one content block to a markup fragment.

Dispatch is total: every kind maps to a fragment, and any fault while
rendering one block is caught at the block boundary and replaced with a
generic placeholder so sibling blocks still render.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from loguru import logger

from pagepress.models import (
    BlockKind,
    BlockModel,
    CalloutBlock,
    ChecklistBlock,
    CodeBlock,
    HeadingBlock,
    ListItemBlock,
    ListKind,
    UnsupportedBlock,
)
from pagepress.pipeline.stage_richtext import compose_rich_text, escape_text

DEFAULT_CALLOUT_ICON = "💡"
ERROR_PLACEHOLDER = "<!-- block could not be rendered -->"
UNSUPPORTED_PREFIX = "unsupported"
ERROR_PREFIX = "error"


@dataclass(frozen=True)
class Fragment:
    """Rendered markup for one block.

    ``list_kind`` marks list items awaiting a container. ``diagnostic`` is
    set on placeholder fragments: ``unsupported:<kind>`` for kinds without a
    renderer, ``error:<kind>`` for blocks whose renderer faulted.
    """

    html: str
    list_kind: Optional[ListKind] = None
    diagnostic: Optional[str] = None

    @property
    def is_list_item(self) -> bool:
        return self.list_kind is not None

    @property
    def is_unsupported(self) -> bool:
        return bool(self.diagnostic and self.diagnostic.startswith(UNSUPPORTED_PREFIX))

    @property
    def is_error(self) -> bool:
        return bool(self.diagnostic and self.diagnostic.startswith(ERROR_PREFIX))


def _paragraph(block: BlockModel) -> Fragment:
    content = compose_rich_text(block.rich_text)
    # An empty paragraph keeps its line so vertical rhythm survives
    return Fragment(f"<p>{content}</p>" if content else "<p><br/></p>")


def _heading(block: HeadingBlock) -> Fragment:
    level = block.level
    return Fragment(f"<h{level}>{compose_rich_text(block.rich_text)}</h{level}>")


def _list_item(block: ListItemBlock) -> Fragment:
    return Fragment(f"<li>{compose_rich_text(block.rich_text)}</li>", list_kind=block.list_kind)


def _checklist(block: ChecklistBlock) -> Fragment:
    state = "checked" if block.checked else "unchecked"
    marker = "☑" if block.checked else "☐"
    return Fragment(
        f'<div class="todo {state}"><span class="todo-box">{marker}</span> '
        f"{compose_rich_text(block.rich_text)}</div>"
    )


def _collapsible(block: BlockModel) -> Fragment:
    # Nested children are not rendered, only the summary line
    return Fragment(f"<details><summary>{compose_rich_text(block.rich_text)}</summary></details>")


def _code(block: CodeBlock) -> Fragment:
    language = escape_text(block.language or "plaintext")
    return Fragment(
        f'<pre><code class="language-{language}">{compose_rich_text(block.rich_text)}</code></pre>'
    )


def _quote(block: BlockModel) -> Fragment:
    return Fragment(f"<blockquote>{compose_rich_text(block.rich_text)}</blockquote>")


def _callout(block: CalloutBlock) -> Fragment:
    icon = escape_text(block.icon or DEFAULT_CALLOUT_ICON)
    return Fragment(
        f'<div class="callout"><span class="callout-icon">{icon}</span>'
        f"<div>{compose_rich_text(block.rich_text)}</div></div>"
    )


def _divider(block: BlockModel) -> Fragment:
    return Fragment("<hr />")


def _unsupported(block: UnsupportedBlock) -> Fragment:
    kind = block.original_kind
    logger.debug(f"Skipping unsupported block kind: {kind}")
    return Fragment(
        f"<!-- unsupported block: {escape_text(kind).replace('--', '')} -->",
        diagnostic=f"{UNSUPPORTED_PREFIX}:{kind}",
    )


RENDERERS: dict[BlockKind, Callable[..., Fragment]] = {
    BlockKind.PARAGRAPH: _paragraph,
    BlockKind.HEADING_1: _heading,
    BlockKind.HEADING_2: _heading,
    BlockKind.HEADING_3: _heading,
    BlockKind.BULLETED_ITEM: _list_item,
    BlockKind.NUMBERED_ITEM: _list_item,
    BlockKind.CHECKLIST_ITEM: _checklist,
    BlockKind.COLLAPSIBLE: _collapsible,
    BlockKind.CODE: _code,
    BlockKind.QUOTE: _quote,
    BlockKind.CALLOUT: _callout,
    BlockKind.DIVIDER: _divider,
    BlockKind.UNSUPPORTED: _unsupported,
}


def _kind_tag(block: object) -> str:
    kind = getattr(block, "kind", None)
    if isinstance(kind, BlockKind):
        return kind.value
    return type(block).__name__


def render_block(block: BlockModel) -> Fragment:
    """Render a single block. Never raises."""
    kind = getattr(block, "kind", None)
    renderer = RENDERERS.get(kind) if isinstance(kind, BlockKind) else None
    try:
        if renderer is None:
            return _unsupported(UnsupportedBlock(original_kind=_kind_tag(block)))
        return renderer(block)
    except Exception as e:
        tag = _kind_tag(block)
        logger.opt(exception=e).warning(f"Failed to render {tag} block")
        return Fragment(ERROR_PLACEHOLDER, diagnostic=f"{ERROR_PREFIX}:{tag}")


def render_blocks(blocks: Iterable[BlockModel]) -> list[Fragment]:
    """Render blocks in order, one fragment per block."""
    return [render_block(block) for block in blocks]


def visible_fragments(fragments: Iterable[Fragment]) -> list[Fragment]:
    """Drop unsupported-kind placeholders before list grouping."""
    return [fragment for fragment in fragments if not fragment.is_unsupported]
