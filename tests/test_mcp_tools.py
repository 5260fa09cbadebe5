"""MCP tool surface, exercised by calling the tool coroutines directly."""

from __future__ import annotations

import json

import pytest

from highlight_extractor.core.anchors import AnchorGenerator
from highlight_extractor.core.settings import merge_settings
from highlight_extractor.tools import mcp_tools


@pytest.fixture
def tools(vault_dir, tmp_path, clock, monkeypatch):
    monkeypatch.setattr(mcp_tools.EXTRACTOR, "anchors", AnchorGenerator(clock))
    mcp_tools.configure(merge_settings(), str(tmp_path / "settings.json"))
    yield mcp_tools
    mcp_tools.configure(merge_settings(), None)


class TestExtractTool:
    @pytest.mark.asyncio
    async def test_extracts_and_reports(self, tools, vault_dir) -> None:
        (vault_dir / "Book.md").write_text("This is ==important== text", encoding="utf-8")

        out = await tools.extract_highlights("Book")

        first_line, payload = out.split("\n", 1)
        assert first_line == "Extracted 1 highlights to Book - Highlights.md"
        assert json.loads(payload) == {
            "file_name": "Book.md",
            "note_path": "Extracted Highlights/Book - Highlights.md",
            "total_highlights": 1,
        }
        assert (vault_dir / "Book.md").read_text(encoding="utf-8") == (
            "This is ==important== text ^2024010112000001"
        )

    @pytest.mark.asyncio
    async def test_no_file_is_no_active_document(self, tools) -> None:
        assert await tools.extract_highlights() == "No active file"

    @pytest.mark.asyncio
    async def test_unknown_note(self, tools) -> None:
        assert (await tools.extract_highlights("missing")).startswith("Error: Could not find note")

    @pytest.mark.asyncio
    async def test_no_highlights(self, tools, vault_dir) -> None:
        (vault_dir / "Plain.md").write_text("nothing", encoding="utf-8")
        assert await tools.extract_highlights("Plain.md") == "No highlights found in the current note"

    @pytest.mark.asyncio
    async def test_collision_reported_as_error(self, tools, vault_dir) -> None:
        (vault_dir / "S.md").write_text("==x==", encoding="utf-8")
        (vault_dir / "Extracted Highlights").mkdir()
        (vault_dir / "Extracted Highlights" / "S - Highlights.md").write_text("old", encoding="utf-8")

        out = await tools.extract_highlights("S.md")
        assert out.startswith("Error:")
        assert "already exists" in out

    @pytest.mark.asyncio
    async def test_rewrites_only_the_named_note(self, tools, vault_dir) -> None:
        """A bare name must not resolve to a summary note that contains it."""
        tools.EXTRACTOR.initialize({"include_paragraph_context": True})
        (vault_dir / "Notes").mkdir()
        (vault_dir / "Notes" / "Book.md").write_text("a ==x== b", encoding="utf-8")
        await tools.extract_highlights("Notes/Book")
        summary = vault_dir / "Extracted Highlights" / "Book - Highlights.md"
        before = summary.read_text(encoding="utf-8")

        out = await tools.extract_highlights("Book")

        assert out.startswith("Error: Could not find note 'Book'")
        assert summary.read_text(encoding="utf-8") == before
        assert not (vault_dir / "Extracted Highlights" / "Book - Highlights - Highlights.md").exists()

    @pytest.mark.asyncio
    async def test_accepts_vault_relative_and_absolute_paths(self, tools, vault_dir) -> None:
        (vault_dir / "Notes").mkdir()
        note = vault_dir / "Notes" / "Book.md"
        note.write_text("==x==", encoding="utf-8")
        tools.EXTRACTOR.initialize({"extracted_notes_folder": ""})

        out = await tools.extract_highlights(str(note))

        assert out.startswith("Extracted 1 highlights to Book - Highlights.md")
        assert (vault_dir / "Notes" / "Book - Highlights.md").is_file()


class TestPreviewTool:
    @pytest.mark.asyncio
    async def test_preview_does_not_modify(self, tools, vault_dir) -> None:
        note = vault_dir / "P.md"
        note.write_text("one ==a==\ntwo ==b==", encoding="utf-8")

        data = json.loads(await tools.preview_highlights("P.md", include_context=True))

        assert data["total_highlights"] == 2
        assert data["highlights"][0] == {
            "text": "a",
            "line_number": 1,
            "context": "one ==a==\ntwo ==b==",
        }
        assert note.read_text(encoding="utf-8") == "one ==a==\ntwo ==b=="

    @pytest.mark.asyncio
    async def test_preview_empty(self, tools, vault_dir) -> None:
        (vault_dir / "E.md").write_text("", encoding="utf-8")
        assert await tools.preview_highlights("E.md") == "No highlights found in 'E.md'."

    @pytest.mark.asyncio
    async def test_preview_still_matches_by_name(self, tools, vault_dir) -> None:
        (vault_dir / "deep").mkdir()
        (vault_dir / "deep" / "Reading Log.md").write_text("==r==", encoding="utf-8")

        data = json.loads(await tools.preview_highlights("reading"))
        assert data["file_name"] == "deep/Reading Log.md"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   "])
    async def test_preview_blank_name_rejected(self, tools, vault_dir, name) -> None:
        (vault_dir / "any.md").write_text("==x==", encoding="utf-8")
        assert (await tools.preview_highlights(name)).startswith("Error: Could not find note")


class TestSettingsTools:
    @pytest.mark.asyncio
    async def test_update_persists_and_applies(self, tools, tmp_path) -> None:
        out = json.loads(await tools.update_settings(extracted_notes_folder="", include_paragraph_context=True))

        assert out["settings"]["extracted_notes_folder"] == ""
        assert out["settings"]["include_paragraph_context"] is True
        stored = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
        assert stored == out["settings"]
        assert json.loads(await tools.show_settings()) == out["settings"]

    @pytest.mark.asyncio
    async def test_template_variables(self, tools) -> None:
        out = await tools.list_template_variables()
        assert "- {{highlights}} - The formatted highlights" in out


class TestDirectoryTools:
    @pytest.mark.asyncio
    async def test_show_accessible_directories(self, tools, vault_dir) -> None:
        info = json.loads(await tools.show_accessible_directories())
        assert info["accessible_directories"] == [str(vault_dir.resolve())]
        assert info["allowed_extensions"] == [".md"]

    @pytest.mark.asyncio
    async def test_list_markdown_files(self, tools, vault_dir) -> None:
        (vault_dir / "a.md").write_text("x", encoding="utf-8")
        assert "- a.md" in await tools.list_markdown_files()
