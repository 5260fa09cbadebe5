from datetime import date
from typing import Dict, List, Optional

from highlight_extractor.core.types import Highlight

DEFAULT_TEMPLATE = """# {{title}} - Extracted Highlights

**Source:** [[{{source}}]]
**Date Extracted:** {{date}}
**Total Highlights:** {{count}}

---

{{highlights}}"""

TEMPLATE_VARIABLES: Dict[str, str] = {
    "{{title}}": "Source note title",
    "{{source}}": "Source note name (for linking)",
    "{{date}}": "Current date",
    "{{count}}": "Number of highlights",
    "{{highlights}}": "The formatted highlights",
}

BLOCK_SEPARATOR = "\n---\n\n"


def format_highlight(
    highlight: Highlight, position: int, source_name: str, include_context: bool
) -> str:
    block = f"## Highlight {position}\n\n"
    block += f"> {highlight.get('text', '')}\n\n"
    anchor = highlight.get("anchor_id")
    if anchor:
        block += f"**Location:** [[{source_name}#^{anchor}]]\n"
    else:
        block += f"**Location:** [[{source_name}]] (Line {highlight.get('line_number')})\n"
    context = highlight.get("context")
    if context and include_context:
        block += f"\n**Context:**\n{context}\n"
    return block


def render_note(
    highlights: List[Highlight],
    source_name: str,
    template: str,
    include_context: bool = False,
    today: Optional[date] = None,
) -> str:
    """Fill `template` for a batch of highlights taken from `source_name`.

    Each placeholder is replaced once, at its first occurrence; a template
    repeating a token keeps the later copies verbatim. Missing tokens are
    simply not substituted.
    """
    formatted = BLOCK_SEPARATOR.join(
        format_highlight(h, i + 1, source_name, include_context)
        for i, h in enumerate(highlights)
    )
    stamp = (today or date.today()).strftime("%x")

    content = template
    content = content.replace("{{title}}", source_name, 1)
    content = content.replace("{{source}}", source_name, 1)
    content = content.replace("{{date}}", stamp, 1)
    content = content.replace("{{count}}", str(len(highlights)), 1)
    content = content.replace("{{highlights}}", formatted, 1)
    return content
