"""Split discovered icons into the root group and first-level directory groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence


@dataclass
class GroupedFiles:
    """Files directly under the source root plus one list per first-level directory."""

    root_files: List[Path] = field(default_factory=list)
    groups: Dict[str, List[Path]] = field(default_factory=dict)

    def all_files(self) -> List[Path]:
        files = list(self.root_files)
        for members in self.groups.values():
            files.extend(members)
        return files


def list_groups(source_root: Path) -> List[str]:
    """Return the sorted names of the directories directly under ``source_root``."""
    return sorted(entry.name for entry in source_root.iterdir() if entry.is_dir())


def group_files(
    all_files: Iterable[Path],
    source_root: Path,
    groups: Optional[Sequence[str]] = None,
) -> GroupedFiles:
    """Assign every file to exactly one group.

    A file belongs to group ``g`` when the first path segment below
    ``source_root`` is exactly ``g``. Deeper files fold into their first-level
    ancestor; files sitting directly in the root (or under a directory that is
    not a known group) go to ``root_files``. Input order is preserved.
    """
    group_names = list(groups) if groups is not None else list_groups(source_root)
    result = GroupedFiles(groups={name: [] for name in group_names})

    for path in all_files:
        try:
            parts = path.relative_to(source_root).parts
        except ValueError as exc:
            raise ValueError(f"{path} is not inside source root {source_root}") from exc
        if len(parts) > 1 and parts[0] in result.groups:
            result.groups[parts[0]].append(path)
        else:
            result.root_files.append(path)

    return result


__all__ = ["GroupedFiles", "group_files", "list_groups"]
