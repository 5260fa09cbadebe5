from pathlib import Path, PurePosixPath
from typing import Optional
import logging

from highlight_extractor.core.paths import _is_within

logger = logging.getLogger(__name__)


class FileSystemVault:
    """Storage over a directory of Markdown notes.

    Every path is vault-relative and POSIX-style ("Folder/Note.md"), the way
    notes link to each other. Paths escaping the root raise ValueError.
    """

    def __init__(self, root):
        self.root = Path(root).resolve()

    def _abs(self, path: str) -> Path:
        rel = PurePosixPath(path)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Path escapes the vault: {path}")
        target = self.root.joinpath(*rel.parts)
        if not _is_within(str(self.root), str(target)):
            raise ValueError(f"Path escapes the vault: {path}")
        return target

    def relative(self, path: Path) -> str:
        """Vault-relative POSIX path for an absolute path inside the root."""
        return Path(path).resolve().relative_to(self.root).as_posix()

    def read(self, path: str) -> str:
        # newline="" keeps "\r\n" intact so the rewrite preserves it
        with open(self._abs(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def modify(self, path: str, text: str) -> None:
        target = self._abs(path)
        if not target.is_file():
            raise FileNotFoundError(f"Note no longer exists: {path}")
        try:
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise

    def get_file(self, path: str) -> Optional[Path]:
        try:
            target = self._abs(path)
        except ValueError as e:
            logger.warning(f"{e}")
            return None
        return target if target.is_file() else None

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def create_folder(self, path: str) -> None:
        self._abs(path).mkdir(parents=True, exist_ok=True)
        logger.info(f"Created folder: {path}")

    def create(self, path: str, text: str) -> str:
        """Create a new note; an existing file is never overwritten."""
        target = self._abs(path)
        try:
            with open(target, "x", encoding="utf-8", newline="") as f:
                f.write(text)
        except FileExistsError:
            logger.error(f"Note already exists: {path}")
            raise FileExistsError(f"File already exists: {path}") from None
        return path
