import re
from typing import List, Optional

from highlight_extractor.core.types import Highlight

BLOCK_REFERENCE = re.compile(r" \^([a-z0-9-]+)$")


def _split_cr(line: str):
    # CRLF documents are split on "\n"; keep the "\r" after any reference
    if line.endswith("\r"):
        return line[:-1], "\r"
    return line, ""


def existing_anchor(line: str) -> Optional[str]:
    """Return the block reference a line already ends with, if any."""
    body, _ = _split_cr(line)
    m = BLOCK_REFERENCE.search(body)
    return m.group(1) if m else None


def annotate_document(text: str, highlights: List[Highlight]) -> str:
    """Append ` ^<anchor>` to every highlighted line that has no reference yet.

    Highlights are applied last to first. Lines that already end in a block
    reference are left byte-identical, so re-running over an annotated note
    changes nothing. Line numbers outside the document are ignored.
    """
    lines = text.split("\n")
    for h in reversed(highlights):
        anchor = h.get("anchor_id")
        idx = h.get("line_number", 0) - 1
        if not anchor or idx < 0 or idx >= len(lines) or not lines[idx]:
            continue
        if existing_anchor(lines[idx]) is not None:
            continue
        body, cr = _split_cr(lines[idx])
        lines[idx] = f"{body} ^{anchor}{cr}"
    return "\n".join(lines)


def bind_anchors(text: str, highlights: List[Highlight]) -> List[Highlight]:
    """Point each highlight at the reference its line actually carries.

    Several highlights on one line share the single reference written for
    that line; a line annotated by an earlier run keeps its old reference.
    """
    lines = text.split("\n")
    bound: List[Highlight] = []
    for h in highlights:
        item: Highlight = dict(h)  # type: ignore[assignment]
        idx = h.get("line_number", 0) - 1
        if item.get("anchor_id") and 0 <= idx < len(lines):
            anchor = existing_anchor(lines[idx])
            if anchor:
                item["anchor_id"] = anchor
        bound.append(item)
    return bound
