"""Extraction pipeline: scan a note, anchor its highlights, write the summary note."""

import logging
import posixpath
from datetime import date
from typing import Callable, List, Optional

from highlight_extractor.core.anchors import AnchorGenerator
from highlight_extractor.core.annotator import annotate_document, bind_anchors
from highlight_extractor.core.renderer import DEFAULT_TEMPLATE, render_note
from highlight_extractor.core.scanner import scan_highlights
from highlight_extractor.core.settings import merge_settings
from highlight_extractor.core.types import ExtractionResult, ExtractorSettings

logger = logging.getLogger(__name__)

NO_ACTIVE_FILE = "No active file"
NO_HIGHLIGHTS = "No highlights found in the current note"
TEMPLATE_FALLBACK = "Template file not found, using default template"


def note_basename(path: str) -> str:
    """'Folder/My Note.md' -> 'My Note'."""
    name = posixpath.basename(path)
    stem, ext = posixpath.splitext(name)
    return stem if ext.lower() == ".md" else name


def summary_note_path(source_path: str, folder: str) -> str:
    """Where the summary for `source_path` goes: `folder`, or beside the source when empty."""
    name = f"{note_basename(source_path)} - Highlights.md"
    target_dir = folder.strip("/") if folder else posixpath.dirname(source_path)
    return posixpath.join(target_dir, name) if target_dir else name


class HighlightExtractor:
    """Runs one extraction at a time against a vault.

    `vault` is any object with read/modify/get_file/exists/create_folder/create
    (see FileSystemVault). Notices go to `notify` and are collected in the
    result; storage errors propagate and stop the run where they happen.
    """

    def __init__(
        self,
        settings: Optional[ExtractorSettings] = None,
        anchors: Optional[AnchorGenerator] = None,
        notify: Optional[Callable[[str], None]] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.settings = merge_settings(settings)  # type: ignore[arg-type]
        self.anchors = anchors or AnchorGenerator()
        self._notify = notify
        self._today = today or date.today
        self._messages: List[str] = []

    def initialize(self, settings: Optional[ExtractorSettings]) -> None:
        self.settings = merge_settings(settings)  # type: ignore[arg-type]

    def notify(self, message: str) -> None:
        logger.info(message)
        self._messages.append(message)
        if self._notify:
            self._notify(message)

    def load_template(self, vault) -> str:
        template_path = self.settings["template_path"]
        if not template_path:
            return DEFAULT_TEMPLATE
        if vault.get_file(template_path) is not None:
            return vault.read(template_path)
        self.notify(TEMPLATE_FALLBACK)
        return DEFAULT_TEMPLATE

    def _result(self, status: str, count: int = 0, source=None, note_path=None) -> ExtractionResult:
        return {
            "status": status,
            "count": count,
            "source": source,
            "note_path": note_path,
            "messages": list(self._messages),
        }

    def extract(self, vault, document: Optional[str]) -> ExtractionResult:
        self._messages = []
        if document is None:
            self.notify(NO_ACTIVE_FILE)
            return self._result("no_active_document")

        include_context = self.settings["include_paragraph_context"]

        # 1. scan one snapshot
        content = vault.read(document)
        highlights = scan_highlights(content, include_context, self.anchors)
        if not highlights:
            self.notify(NO_HIGHLIGHTS)
            return self._result("no_highlights", source=document)
        logger.debug(f"Found {len(highlights)} highlights in {document}")

        # 2. anchor the source note
        updated = annotate_document(content, highlights)
        vault.modify(document, updated)
        highlights = bind_anchors(updated, highlights)

        # 3. render and create the summary note
        template = self.load_template(vault)
        source_name = note_basename(document)
        note_content = render_note(highlights, source_name, template, include_context, self._today())

        folder = self.settings["extracted_notes_folder"]
        if folder and not vault.exists(folder):
            vault.create_folder(folder)
        note_path = vault.create(summary_note_path(document, folder), note_content)

        self.notify(f"Extracted {len(highlights)} highlights to {posixpath.basename(note_path)}")
        return self._result("extracted", len(highlights), document, note_path)
