"""Settings defaults, merging and JSON persistence."""

from __future__ import annotations

import json

import pytest

from highlight_extractor.core.settings import (
    DEFAULT_SETTINGS,
    load_settings,
    merge_settings,
    save_settings,
)


class TestMergeSettings:
    def test_defaults(self) -> None:
        assert merge_settings() == DEFAULT_SETTINGS
        assert DEFAULT_SETTINGS["extracted_notes_folder"] == "Extracted Highlights"

    def test_later_layers_win_and_none_is_ignored(self) -> None:
        merged = merge_settings(
            {"template_path": "T.md", "include_paragraph_context": True},
            {"template_path": None, "extracted_notes_folder": ""},
        )
        assert merged == {
            "template_path": "T.md",
            "extracted_notes_folder": "",
            "include_paragraph_context": True,
        }

    def test_unknown_keys_dropped(self) -> None:
        assert "colour" not in merge_settings({"colour": "yellow"})


class TestPersistence:
    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        assert load_settings(str(tmp_path / "none.json")) == DEFAULT_SETTINGS

    def test_round_trip(self, tmp_path) -> None:
        path = tmp_path / "cfg" / "settings.json"
        settings = merge_settings({"template_path": "Templates/H.md"})

        save_settings(settings, str(path))

        assert json.loads(path.read_text(encoding="utf-8"))["template_path"] == "Templates/H.md"
        assert load_settings(str(path)) == settings

    def test_partial_file_merged_over_defaults(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        path.write_text('{"include_paragraph_context": true}', encoding="utf-8")

        loaded = load_settings(str(path))
        assert loaded["include_paragraph_context"] is True
        assert loaded["extracted_notes_folder"] == "Extracted Highlights"

    def test_corrupt_file_raises(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_settings(str(path))

    def test_non_object_rejected(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(str(path))
