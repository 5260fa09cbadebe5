import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# Limits and filters
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_EXTENSIONS = [".md"]

# Default vault directories (used when no args are provided)
DEFAULT_SEARCH_DIRECTORIES = [
    os.path.expanduser("~/Documents"),
    os.getcwd(),
]

# Actual configured vault roots (initialized at runtime)
SEARCH_DIRECTORIES: List[str] = []


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse CLI arguments for vault directories, limits and extraction settings."""
    parser = argparse.ArgumentParser(
        description="Highlight Extractor MCP Server: pull ==highlights== out of Markdown notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "\nExamples:\n"
            "  python main.py ~/Notes\n"
            "  python main.py --allow-dir ~/Vault --notes-folder Highlights\n"
            "  python main.py ~/Notes --include-context --log-level DEBUG\n"
        ),
    )

    # 1) Positional vault directories
    parser.add_argument(
        "directories",
        nargs="*",
        help="Vault directories containing Markdown notes (space-separated)",
    )

    # 2) Repeated --allow-dir option
    parser.add_argument(
        "--allow-dir",
        action="append",
        dest="allowed_dirs",
        help="Add a vault directory (can be used multiple times)",
    )

    parser.add_argument(
        "--max-file-size",
        type=int,
        default=10 * 1024 * 1024,
        help="Maximum note size in bytes (default: 10MB)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    # 3) Extraction settings (override the stored settings file)
    parser.add_argument(
        "--settings-file",
        default=None,
        help="JSON settings file (default: ~/.highlight_extractor.json)",
    )
    parser.add_argument(
        "--template",
        dest="template_path",
        default=None,
        help="Template note, relative to the vault root (empty = built-in template)",
    )
    parser.add_argument(
        "--notes-folder",
        dest="extracted_notes_folder",
        default=None,
        help="Folder for extracted notes, relative to the vault root (empty = beside the source)",
    )
    parser.add_argument(
        "--include-context",
        dest="include_paragraph_context",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include the paragraph around each highlight",
    )

    return parser.parse_args(argv)


def _is_within(base: str, target: str) -> bool:
    base = os.path.join(os.path.realpath(base), "")  # ensure trailing separator
    target = os.path.realpath(target)
    return target.startswith(base) or target == base[:-1]


def setup_search_directories(args) -> None:
    """Configure SEARCH_DIRECTORIES and MAX_FILE_SIZE from parsed args.
    Falls back to DEFAULT_SEARCH_DIRECTORIES when none are provided.
    """
    global MAX_FILE_SIZE

    MAX_FILE_SIZE = int(args.max_file_size)

    provided: List[str] = []
    if getattr(args, "directories", None):
        provided.extend(args.directories)
    if getattr(args, "allowed_dirs", None):
        provided.extend(args.allowed_dirs)

    validated: List[str] = []
    for d in provided:
        try:
            real_path = os.path.realpath(os.path.abspath(os.path.expanduser(d)))
            if not os.path.exists(real_path):
                logger.info(f"Creating directory: {real_path}")
                os.makedirs(real_path, exist_ok=True)
            if not os.path.isdir(real_path):
                logger.warning(f"Not a directory, skipped: {d} -> {real_path}")
                continue
            if not os.access(real_path, os.R_OK | os.W_OK):
                logger.warning(f"Directory not readable/writable, skipped: {d} -> {real_path}")
                continue
            validated.append(real_path)
        except OSError as e:
            logger.error(f"Failed to process directory '{d}': {e}")

    if not validated:
        if provided:
            logger.warning("No valid directories from arguments; falling back to defaults.")
        else:
            logger.info("Using default vault directories.")
        validated = [
            os.path.realpath(os.path.abspath(os.path.expanduser(d)))
            for d in DEFAULT_SEARCH_DIRECTORIES
            if os.path.isdir(os.path.expanduser(d))
        ]

    # mutate in place so other modules see the update
    SEARCH_DIRECTORIES.clear()
    SEARCH_DIRECTORIES.extend(validated)


def vault_root_for(path: Path) -> Optional[str]:
    """Return the configured root that contains `path` (deepest match wins)."""
    roots = [d for d in SEARCH_DIRECTORIES if _is_within(d, str(path))]
    if not roots:
        return None
    return max(roots, key=len)


def validate_and_resolve_path(file_path: str) -> Optional[Path]:
    """Validate a candidate note path and return an absolute Path if allowed and safe."""
    try:
        abs_path = os.path.expanduser(file_path) if file_path.startswith("~") else os.path.abspath(file_path)
        real_path = os.path.realpath(abs_path)

        # Must be within one of the vault roots; block traversal
        is_safe = any(_is_within(root, real_path) for root in SEARCH_DIRECTORIES)
        if not is_safe or ".." in Path(file_path).parts:
            logger.warning(f"Security risk detected (outside vault directories): {file_path}")
            return None

        resolved = Path(real_path)
        if not resolved.is_file():
            return None
        if resolved.suffix.lower() not in ALLOWED_EXTENSIONS:
            logger.warning(f"Disallowed file extension: {file_path}")
            return None
        if resolved.stat().st_size > MAX_FILE_SIZE:
            logger.warning(f"File too large: {file_path}")
            return None
        return resolved
    except OSError as e:
        logger.error(f"Error validating path {file_path}: {e}")
        return None


def find_file(file_name: str, fuzzy: bool = True) -> Optional[Path]:
    """Resolve an absolute path, a vault-relative path, or a note name within the vaults.

    With `fuzzy=False` only the exact path (optionally without ".md") is
    accepted; tools that rewrite the note must not guess which one was meant.
    """
    if not file_name or not file_name.strip():
        logger.warning("Empty note name")
        return None

    if os.path.isabs(file_name) or file_name.startswith("~"):
        path = validate_and_resolve_path(file_name)
        if path:
            return path

    candidates = [file_name]
    if not file_name.lower().endswith(".md"):
        candidates.append(f"{file_name}.md")

    for directory in SEARCH_DIRECTORIES:
        dir_path = Path(directory)
        # Direct match, with or without the extension
        for name in candidates:
            path = validate_and_resolve_path(str(dir_path / name))
            if path:
                return path
        if not fuzzy:
            continue
        # Fuzzy match on the note name anywhere under the root
        try:
            for note in sorted(dir_path.rglob("*.md")):
                if file_name.lower() in note.name.lower():
                    path = validate_and_resolve_path(str(note))
                    if path:
                        return path
        except OSError as e:
            logger.error(f"Error searching directory {directory}: {e}")
            continue

    logger.warning(f"File not found: {file_name}")
    return None


def _gather_notes_under(root: str, depth: int):
    """Yield Paths of Markdown notes under `root` up to `depth` levels (0 = only root)."""
    root = os.path.realpath(root)
    for dirpath, dirnames, filenames in os.walk(root, topdown=True, followlinks=False):
        rel = os.path.relpath(dirpath, root)
        current_depth = 0 if rel == "." else rel.count(os.sep) + 1
        if current_depth >= depth:
            dirnames[:] = []  # stop descending further
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for fn in filenames:
            if fn.lower().endswith(".md"):
                f = Path(dirpath) / fn
                if f.is_file():
                    yield f


def list_markdown_files_text(directory: str = "all", depth: int = 0, limit: int = 50) -> str:
    """
    Build the human-readable listing used by `list_markdown_files`.

    `directory` is a substring filter on vault roots (basename first, then
    absolute path); "all" scans every root. `depth` controls recursion
    (0 = root only), clamped to 5.
    """
    depth_clamped = max(0, min(int(depth), 5))
    limit_clamped = max(1, min(int(limit), 200))

    dirs = SEARCH_DIRECTORIES
    if directory != "all":
        dirs = [
            d for d in SEARCH_DIRECTORIES
            if directory.lower() in os.path.basename(d).lower() or directory in d
        ]
        if not dirs:
            return f"Error: No vault directory matched '{directory}'."

    results: List[str] = []
    total = 0
    for d in dirs:
        if not Path(d).is_dir():
            continue
        files = list(_gather_notes_under(d, depth_clamped))
        files_sorted = sorted(files, key=lambda x: x.stat().st_mtime, reverse=True)[:limit_clamped]
        label = os.path.basename(d) or d
        results.append(
            f"[{label}] Markdown notes (depth={depth_clamped}; "
            f"showing up to {limit_clamped} most recent of {len(files)} total):"
        )
        for note in files_sorted:
            results.append(f"- {note.relative_to(d).as_posix()} ({note.stat().st_size / 1024:.1f} KB)")
        results.append("")
        total += len(files)

    if not results:
        return "No Markdown notes found in the vault directories."

    header = [
        f"Directories scanned: {len(dirs)} of {len(SEARCH_DIRECTORIES)} configured",
        f"Total notes: {total}",
        "=" * 40,
    ]
    return "\n".join(header + results)
