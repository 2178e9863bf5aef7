"""List Grouping Pass - Merge adjacent list items into list containers.

Two states: no open list, or an open list of kind K with buffered items.
A list item of the open kind is buffered; a different kind closes the
open list and opens a new one; any other fragment closes the open list
and is emitted unchanged. The end of input closes whatever is open.
"""

from typing import Iterable, Optional

from pagepress.models import ListKind
from pagepress.pipeline.stage_blocks import Fragment


class ListGrouper:
    """Single-pass state machine over an ordered fragment sequence."""

    def __init__(self):
        self.output: list[Fragment] = []
        self.open_kind: Optional[ListKind] = None
        self.items: list[str] = []

    def feed(self, fragment: Fragment) -> None:
        if fragment.is_list_item:
            if self.open_kind is not None and self.open_kind != fragment.list_kind:
                self.close()
            self.open_kind = fragment.list_kind
            self.items.append(fragment.html)
        else:
            self.close()
            self.output.append(fragment)

    def close(self) -> None:
        """Emit the open list, if any, as one container."""
        if self.open_kind is None:
            return
        tag = self.open_kind.value
        self.output.append(Fragment(f"<{tag}>{''.join(self.items)}</{tag}>"))
        self.open_kind = None
        self.items = []

    def finish(self) -> list[Fragment]:
        self.close()
        return self.output


def group_lists(fragments: Iterable[Fragment]) -> list[Fragment]:
    """Wrap runs of same-kind list items in ``<ul>``/``<ol>`` containers."""
    grouper = ListGrouper()
    for fragment in fragments:
        grouper.feed(fragment)
    return grouper.finish()
