from typing import TypedDict, List, Optional

class Highlight(TypedDict, total=False):
    text: str
    line_number: int      # 1-based, at scan time
    anchor_id: str        # digits only, e.g. "2024010112000001"
    context: str          # enclosing paragraph, only when requested

class ExtractorSettings(TypedDict):
    template_path: str            # "" = built-in template
    extracted_notes_folder: str   # "" = beside the source note
    include_paragraph_context: bool

class ExtractionResult(TypedDict):
    status: str           # "extracted", "no_active_document", "no_highlights"
    count: int
    source: Optional[str]
    note_path: Optional[str]
    messages: List[str]
