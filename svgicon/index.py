"""Index files that reference every generated icon module of a group."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .logging import get_logger
from .models import SourceFile


class IndexEmitter:
    """Renders and writes ``index.<ext>`` files.

    Each line references one module relative to the index's own directory and
    without an extension, so the consuming bundler resolves it.
    """

    def __init__(self, extension: str = "js", *, es6: bool = False) -> None:
        self.extension = extension
        self.es6 = es6
        self.logger = get_logger("index")

    @property
    def filename(self) -> str:
        return f"index.{self.extension}"

    def reference(self, entry: SourceFile, base: str = "") -> str:
        module = entry.module_name
        if base and module.startswith(base):
            module = module[len(base):]
        return f"./{module}"

    def statement(self, entry: SourceFile, base: str = "") -> str:
        target = self.reference(entry, base)
        if self.es6:
            return f"import '{target}'"
        return f"require('{target}')"

    def render(self, entries: Sequence[SourceFile], base: str = "") -> str:
        """Return one newline-terminated statement per entry, in the given order."""
        return "".join(f"{self.statement(entry, base)}\n" for entry in entries)

    def write(self, entries: Sequence[SourceFile], target_dir: Path, base: str = "") -> Path:
        """Write the index for ``entries`` into ``target_dir``; ``OSError`` propagates."""
        target_dir.mkdir(parents=True, exist_ok=True)
        index_path = target_dir / self.filename
        index_path.write_text(self.render(entries, base), encoding="utf-8")
        self.logger.info("Generated %s%s", base, index_path.name)
        return index_path


__all__ = ["IndexEmitter"]
