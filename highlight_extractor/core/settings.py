import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from highlight_extractor.core.types import ExtractorSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: ExtractorSettings = {
    "template_path": "",
    "extracted_notes_folder": "Extracted Highlights",
    "include_paragraph_context": False,
}

DEFAULT_SETTINGS_FILE = os.path.expanduser("~/.highlight_extractor.json")


def merge_settings(*overrides: Optional[Dict[str, Any]]) -> ExtractorSettings:
    """Layer `overrides` over the defaults; unknown keys and None values are ignored."""
    merged: Dict[str, Any] = dict(DEFAULT_SETTINGS)
    for layer in overrides:
        for key, value in (layer or {}).items():
            if key in DEFAULT_SETTINGS and value is not None:
                merged[key] = value
    merged["include_paragraph_context"] = bool(merged["include_paragraph_context"])
    return merged  # type: ignore[return-value]


def load_settings(path: Optional[str] = None) -> ExtractorSettings:
    """Read stored settings from JSON, falling back to defaults when absent."""
    settings_path = Path(path or DEFAULT_SETTINGS_FILE)
    if not settings_path.is_file():
        logger.info(f"No settings file at {settings_path}; using defaults.")
        return merge_settings()
    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read settings {settings_path}: {e}")
        raise
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must hold a JSON object: {settings_path}")
    return merge_settings(data)


def save_settings(settings: ExtractorSettings, path: Optional[str] = None) -> Path:
    settings_path = Path(path or DEFAULT_SETTINGS_FILE)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(dict(settings), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Saved settings to {settings_path}")
    return settings_path
