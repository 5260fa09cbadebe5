import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from highlight_extractor.core import paths as _paths
from highlight_extractor.core.paths import (
    find_file,
    list_markdown_files_text,
    vault_root_for,
    ALLOWED_EXTENSIONS,
)
from highlight_extractor.core.extraction import HighlightExtractor
from highlight_extractor.core.renderer import TEMPLATE_VARIABLES
from highlight_extractor.core.scanner import scan_highlights, summarize_highlights
from highlight_extractor.core.settings import merge_settings, save_settings
from highlight_extractor.core.types import ExtractorSettings
from highlight_extractor.backends.filesystem_backend import FileSystemVault

logger = logging.getLogger(__name__)

mcp = FastMCP("Highlight Extractor")

# One extractor (and anchor generator) for the lifetime of the server
EXTRACTOR = HighlightExtractor()
SETTINGS_FILE: Optional[str] = None


def configure(settings: ExtractorSettings, settings_file: Optional[str] = None) -> None:
    """Install the settings the tools run with (called once at startup)."""
    global SETTINGS_FILE
    SETTINGS_FILE = settings_file
    EXTRACTOR.initialize(settings)


def _open_vault(file_path: str, fuzzy: bool = True):
    path = find_file(file_path, fuzzy=fuzzy)
    if not path:
        return None, None
    root = vault_root_for(path)
    if root is None:
        return None, None
    vault = FileSystemVault(root)
    return vault, vault.relative(path)


# ---------- Extraction ----------
@mcp.tool()
async def extract_highlights(file_path: Optional[str] = None) -> str:
    """Extract ==highlights== from a note into a new "<note> - Highlights" note.

    Parameters
    ----------
    file_path: Optional[str]
        Vault-relative path ("Notes/Book" or "Notes/Book.md") or absolute path.
        No substring search is done: the note is rewritten, so the path must
        name it exactly. The note must live within the configured vault directories.

    The source note is rewritten so every highlighted line ends with a block
    reference (` ^<anchor>`); lines that already carry one are left alone.
    The new note links back to each highlight through those references.
    """
    if not file_path:
        result = EXTRACTOR.extract(None, None)
        return "\n".join(result["messages"])

    vault, document = _open_vault(file_path, fuzzy=False)
    if vault is None:
        return (
            "Error: Could not find note '{file}'. Provide an absolute path or the exact path relative to a vault directory."
        ).format(file=file_path)

    try:
        result = EXTRACTOR.extract(vault, document)
    except Exception as e:
        logger.error(f"Extraction failed for {document}: {e}")
        return f"Error: {e}"

    lines = list(result["messages"])
    if result["status"] == "extracted":
        summary = {
            "file_name": document,
            "note_path": result["note_path"],
            "total_highlights": result["count"],
        }
        lines.append(json.dumps(summary, indent=2, ensure_ascii=False))
    return "\n".join(lines)


@mcp.tool()
async def preview_highlights(file_path: str, include_context: Optional[bool] = None) -> str:
    """List the highlights of a note without modifying anything.

    Returns JSON: file_name, total_highlights, highlights[{text, line_number, context?}].
    `include_context` defaults to the configured setting.
    """
    vault, document = _open_vault(file_path)
    if vault is None:
        return f"Error: Could not find note '{file_path}'."
    if include_context is None:
        include_context = EXTRACTOR.settings["include_paragraph_context"]
    try:
        highlights = scan_highlights(vault.read(document), include_context)
    except Exception as e:
        logger.error(f"Preview failed for {document}: {e}")
        return f"Error: {e}"
    if not highlights:
        return f"No highlights found in '{document}'."
    result = {
        "file_name": document,
        "total_highlights": len(highlights),
        "highlights": summarize_highlights(highlights),
    }
    return json.dumps(result, indent=2, ensure_ascii=False)


# ---------- Settings ----------
@mcp.tool()
async def show_settings() -> str:
    """Return the extraction settings currently in effect as JSON."""
    return json.dumps(dict(EXTRACTOR.settings), indent=2, ensure_ascii=False)


@mcp.tool()
async def update_settings(
    template_path: Optional[str] = None,
    extracted_notes_folder: Optional[str] = None,
    include_paragraph_context: Optional[bool] = None,
) -> str:
    """Change and persist extraction settings. Omitted values stay as they are.

    Parameters
    ----------
    template_path: Optional[str]
        Template note relative to the vault root, e.g. "Templates/Highlight Template.md".
        Empty string = built-in template.
    extracted_notes_folder: Optional[str]
        Folder for extracted notes, e.g. "Extracted Highlights". Empty string = beside the source note.
    include_paragraph_context: Optional[bool]
        Include the full paragraph containing each highlight.
    """
    updated = merge_settings(
        dict(EXTRACTOR.settings),
        {
            "template_path": template_path,
            "extracted_notes_folder": extracted_notes_folder,
            "include_paragraph_context": include_paragraph_context,
        },
    )
    try:
        saved_to = save_settings(updated, SETTINGS_FILE)
    except OSError as e:
        logger.error(f"Saving settings failed: {e}")
        return f"Error: {e}"
    EXTRACTOR.initialize(updated)
    return json.dumps({"saved_to": str(saved_to), "settings": dict(updated)}, indent=2, ensure_ascii=False)


@mcp.tool()
async def list_template_variables() -> str:
    """Describe the placeholders a template note may use."""
    lines = ["Available variables for your template:"]
    lines.extend(f"- {token} - {desc}" for token, desc in TEMPLATE_VARIABLES.items())
    return "\n".join(lines)


# ---------- Other tools ----------
@mcp.tool()
async def list_markdown_files(directory: str = "all", depth: int = 0, limit: int = 50) -> str:
    """
    List Markdown notes under the configured vault directories.

    Parameters
    ----------
    directory : str, default "all"
        "all" → scan every vault root. Otherwise a substring filter on each
        root (basename first, then absolute path).
    depth : int, default 0
        0 = only the root. 1 = include one subdirectory level, etc. (max 5).
    limit: int, default 50
        Maximum number of notes listed per root, most recent first (1..200).
    """
    try:
        return list_markdown_files_text(directory, depth, limit)
    except Exception as e:
        logger.error(f"Error listing notes: {e}")
        return f"Error: {e}"


@mcp.tool()
async def show_accessible_directories() -> str:
    """Return the current directory/configuration constraints as JSON."""
    info = {
        "accessible_directories": _paths.SEARCH_DIRECTORIES,
        "directory_count": len(_paths.SEARCH_DIRECTORIES),
        "max_file_size_mb": _paths.MAX_FILE_SIZE / (1024 * 1024),
        "allowed_extensions": ALLOWED_EXTENSIONS,
    }
    return json.dumps(info, indent=2, ensure_ascii=False)
