"""Core data models shared across svgicon components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

# Group key of files directly under the source root. ``None`` cannot collide
# with a directory name, including one literally called ``root``.
ROOT_GROUP: Optional[str] = None


@dataclass(frozen=True)
class SourceFile:
    """An SVG discovered under the source root."""

    path: Path
    source_root: Path

    @property
    def relative_path(self) -> PurePosixPath:
        return PurePosixPath(self.path.relative_to(self.source_root).as_posix())

    @property
    def name(self) -> str:
        return self.relative_path.stem

    @property
    def relative_group(self) -> str:
        """Sub-path between the source root and the file, with a trailing ``/``."""
        parent = self.relative_path.parent
        if parent == PurePosixPath("."):
            return ""
        return f"{parent.as_posix()}/"

    @property
    def is_root(self) -> bool:
        return len(self.relative_path.parts) == 1

    @property
    def group_key(self) -> Optional[str]:
        """First-level directory holding the file, or :data:`ROOT_GROUP`."""
        if self.is_root:
            return ROOT_GROUP
        return self.relative_path.parts[0]

    @property
    def module_name(self) -> str:
        return f"{self.relative_group}{self.name}"

    def output_path(self, target_root: Path, extension: str) -> Path:
        return target_root / self.relative_path.parent / f"{self.name}.{extension}"


@dataclass(frozen=True)
class NormalizedIcon:
    """Geometry and markup extracted from one SVG."""

    markup: str
    view_box: Optional[str]
    width: float
    height: float

    def template_context(self, name: str) -> Dict[str, object]:
        """Return the mapping consumed by :func:`svgicon.template.compile_template`."""
        return {
            "name": name,
            "width": format_number(self.width),
            "height": format_number(self.height),
            "viewBox": f"'{self.view_box}'" if self.view_box else None,
            "data": self.markup,
        }


@dataclass
class IconOutcome:
    """Result of converting a single source file."""

    source: SourceFile
    output: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ConversionReport:
    """Summary of a batch run."""

    icons: List[IconOutcome] = field(default_factory=list)
    indexes: List[Path] = field(default_factory=list)
    index_failures: List[str] = field(default_factory=list)

    @property
    def generated(self) -> List[IconOutcome]:
        return [outcome for outcome in self.icons if outcome.ok]

    @property
    def failures(self) -> List[IconOutcome]:
        return [outcome for outcome in self.icons if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failures and not self.index_failures


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


__all__ = [
    "ConversionReport",
    "IconOutcome",
    "NormalizedIcon",
    "ROOT_GROUP",
    "SourceFile",
    "format_number",
]
