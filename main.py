#!/usr/bin/env python3
"""
Highlight Extractor MCP Server
Extracts ==highlighted== passages from Markdown notes into a linked summary
note, anchoring each highlighted line with a block reference.
"""

import locale
import logging

from highlight_extractor.core import paths as _paths
from highlight_extractor.core.paths import parse_arguments, setup_search_directories
from highlight_extractor.core.settings import load_settings, merge_settings
from highlight_extractor.tools.mcp_tools import configure, mcp

# --- Basic Configuration ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("HighlightExtractor")


def setup_locale() -> str:
    """Adopt the user's date format for {{date}}; keep "C" if the locale is unavailable."""
    try:
        return locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning(f"Could not apply the system locale ({e}); dates use the C format.")
        return locale.setlocale(locale.LC_TIME)


def main(argv=None):
    args = parse_arguments(argv)
    logging.getLogger().setLevel(getattr(logging, args.log_level))

    setup_locale()
    setup_search_directories(args)

    # Command line values take precedence over the stored settings
    settings = merge_settings(
        load_settings(args.settings_file),
        {
            "template_path": args.template_path,
            "extracted_notes_folder": args.extracted_notes_folder,
            "include_paragraph_context": args.include_paragraph_context,
        },
    )
    configure(settings, args.settings_file)

    logger.info("Starting Highlight Extractor MCP Server...")
    logger.info(f"Vault directories: {_paths.SEARCH_DIRECTORIES}")
    logger.info(f"Maximum file size: {_paths.MAX_FILE_SIZE // (1024 * 1024)} MB")
    logger.info(f"Date locale: {locale.setlocale(locale.LC_TIME)}")
    logger.info(f"Settings: {settings}")

    mcp.run()


if __name__ == "__main__":
    main()
