import re
from typing import Any, Dict, List, Optional

from highlight_extractor.core.anchors import AnchorGenerator
from highlight_extractor.core.types import Highlight

HIGHLIGHT_PATTERN = re.compile(r"==(.*?)==")


def paragraph_context(lines: List[str], line_index: int) -> str:
    """Return the run of non-blank lines around `line_index`, joined by newlines."""
    start = line_index
    end = line_index
    while start > 0 and lines[start - 1].strip() != "":
        start -= 1
    while end < len(lines) - 1 and lines[end + 1].strip() != "":
        end += 1
    return "\n".join(lines[start:end + 1])


def scan_highlights(
    text: str,
    include_context: bool = False,
    anchors: Optional[AnchorGenerator] = None,
) -> List[Highlight]:
    """Collect `==...==` spans in document order.

    One record per match, left to right within a line. Captured text is kept
    verbatim; `====` gives an empty capture. Passing `anchors=None` skips
    anchor generation (used for previews, which must not advance the counter).
    """
    out: List[Highlight] = []
    lines = text.split("\n")
    for i, line in enumerate(lines):
        for match in HIGHLIGHT_PATTERN.finditer(line):
            item: Highlight = {"text": match.group(1), "line_number": i + 1}
            if anchors is not None:
                item["anchor_id"] = anchors.next_anchor()
            if include_context:
                item["context"] = paragraph_context(lines, i)
            out.append(item)
    return out


def summarize_highlights(highlights: List[Highlight]) -> List[Dict[str, Any]]:
    """JSON-ready view of a batch, keeping only the keys each record carries."""
    keys = ("text", "line_number", "anchor_id", "context")
    return [{k: h[k] for k in keys if k in h} for h in highlights]
