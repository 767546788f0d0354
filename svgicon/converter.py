"""Batch conversion of an SVG tree into icon modules and index files."""

from __future__ import annotations

import glob
import shutil
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set

from .config import ConfigError
from .grouping import group_files, list_groups
from .index import IndexEmitter
from .logging import get_logger
from .models import ROOT_GROUP, ConversionReport, IconOutcome, SourceFile
from .normalizer import SvgNormalizer
from .optimizer import SvgOptimizeError
from .template import compile_template

class DiscoveryError(RuntimeError):
    """Raised when the source tree cannot be listed."""


class GroupCompletion:
    """Counts finished conversion attempts per group.

    :meth:`complete` returns ``True`` exactly once per group: for the call
    that accounts for its last outstanding file.
    """

    def __init__(self, sizes: Mapping[Optional[str], int]) -> None:
        self._remaining: Dict[Optional[str], int] = dict(sizes)
        self._lock = threading.Lock()

    def complete(self, key: Optional[str]) -> bool:
        with self._lock:
            remaining = self._remaining.get(key, 0)
            if remaining <= 0:
                raise KeyError(f"No outstanding files for group {key!r}")
            self._remaining[key] = remaining - 1
            return remaining == 1

    def outstanding(self, key: Optional[str]) -> int:
        with self._lock:
            return self._remaining.get(key, 0)


class BatchConverter:
    """Clears the target tree, converts every SVG and writes group indexes."""

    def __init__(
        self,
        source_root: Path,
        target_root: Path,
        template: str,
        extension: str = "js",
        *,
        normalizer: SvgNormalizer | None = None,
        index_emitter: IndexEmitter | None = None,
        workers: int | None = None,
    ) -> None:
        self.source_root = Path(source_root).expanduser().resolve()
        self.target_root = Path(target_root).expanduser().resolve()
        self.template = template
        self.extension = extension
        self.normalizer = normalizer or SvgNormalizer()
        self.index_emitter = index_emitter or IndexEmitter(extension)
        self.workers = workers
        self.logger = get_logger("converter")

    def run(self) -> ConversionReport:
        """Regenerate the whole target tree and return what happened."""
        self._validate_roots()
        self._clear_target()

        paths = self.discover()
        self.logger.debug("Discovered %d SVG files under %s", len(paths), self.source_root)
        try:
            group_names = list_groups(self.source_root)
        except OSError as exc:
            raise DiscoveryError(f"Failed to list {self.source_root}: {exc}") from exc
        grouped = group_files(paths, self.source_root, group_names)

        members: Dict[Optional[str], List[SourceFile]] = {
            ROOT_GROUP: [SourceFile(path, self.source_root) for path in grouped.root_files]
        }
        for name, group_paths in grouped.groups.items():
            if not group_paths:
                self.logger.debug("Skipping index for empty group %s", name)
            members[name] = [SourceFile(path, self.source_root) for path in group_paths]

        report = ConversionReport()
        if not paths:
            self.logger.warning("No SVG files found under %s", self.source_root)
            return report

        completion = GroupCompletion({key: len(files) for key, files in members.items()})
        order = {path: position for position, path in enumerate(paths)}
        succeeded: Set[Path] = set()

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures: Dict[Future[IconOutcome], SourceFile] = {}
            for files in members.values():
                for source in files:
                    futures[pool.submit(self.convert_file, source)] = source

            for future in as_completed(futures):
                source = futures[future]
                key = source.group_key
                outcome = self._outcome(future, source)
                report.icons.append(outcome)
                if outcome.ok:
                    succeeded.add(source.path)
                if completion.complete(key):
                    generated = [entry for entry in members[key] if entry.path in succeeded]
                    self._write_index(key, generated, report)

        report.icons.sort(key=lambda outcome: order[outcome.source.path])
        self.logger.info(
            "Converted %d of %d icons (%d failed)",
            len(report.generated),
            len(report.icons),
            len(report.failures),
        )
        return report

    def discover(self) -> List[Path]:
        """Return every ``*.svg`` below the source root in stable POSIX order."""
        try:
            matches = glob.glob("**/*.svg", root_dir=self.source_root, recursive=True)
        except OSError as exc:
            raise DiscoveryError(f"Failed to search {self.source_root}: {exc}") from exc
        files = [self.source_root / match for match in matches if (self.source_root / match).is_file()]
        return sorted(files, key=lambda path: path.as_posix())

    def convert_file(self, source: SourceFile) -> IconOutcome:
        """Read, normalize, render and write one icon; failures are logged, never raised."""
        outcome = IconOutcome(source=source)
        try:
            raw = source.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return self._fail(outcome, f"Failed to read {source.path}: {exc}")

        try:
            icon = self.normalizer.normalize(raw, name=source.module_name)
        except SvgOptimizeError as exc:
            return self._fail(outcome, f"Failed to optimize {source.module_name}: {exc}")

        content = compile_template(self.template, icon.template_context(source.module_name))
        output = source.output_path(self.target_root, self.extension)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(content, encoding="utf-8")
        except OSError as exc:
            return self._fail(outcome, f"Failed to write {output}: {exc}")

        outcome.output = output
        self.logger.info("Generated icon: %s", source.module_name)
        return outcome

    def _outcome(self, future: Future[IconOutcome], source: SourceFile) -> IconOutcome:
        try:
            return future.result()
        except Exception as exc:  # pragma: no cover - defensive guard
            self.logger.exception("Unexpected failure converting %s", source.module_name)
            return IconOutcome(source=source, error=str(exc))

    def _fail(self, outcome: IconOutcome, message: str) -> IconOutcome:
        self.logger.error(message)
        outcome.error = message
        return outcome

    def _write_index(
        self, key: Optional[str], files: List[SourceFile], report: ConversionReport
    ) -> None:
        if key is ROOT_GROUP:
            target_dir, base = self.target_root, ""
        else:
            target_dir, base = self.target_root / key, f"{key}/"
        if not files:
            self.logger.warning("No icons generated for %s; index not written", base or "./")
            return
        try:
            report.indexes.append(self.index_emitter.write(files, target_dir, base))
        except OSError as exc:
            message = f"Failed to write index for {base or './'}: {exc}"
            self.logger.error(message)
            report.index_failures.append(message)

    def _validate_roots(self) -> None:
        if not self.source_root.exists():
            raise DiscoveryError(f"Source path not found: {self.source_root}")
        if not self.source_root.is_dir():
            raise DiscoveryError(f"Source path is not a directory: {self.source_root}")
        if self.source_root == self.target_root or self.source_root.is_relative_to(self.target_root):
            raise ConfigError(
                f"Target {self.target_root} contains the source tree and would be deleted"
            )

    def _clear_target(self) -> None:
        try:
            shutil.rmtree(self.target_root)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise ConfigError(f"Failed to clear target {self.target_root}: {exc}") from exc
        self.logger.debug("Removed previous output at %s", self.target_root)


def run(
    source_root: Path,
    target_root: Path,
    template: str,
    extension: str = "js",
    **kwargs: object,
) -> ConversionReport:
    """Convenience wrapper around :class:`BatchConverter`."""
    return BatchConverter(source_root, target_root, template, extension, **kwargs).run()  # type: ignore[arg-type]


__all__ = ["BatchConverter", "DiscoveryError", "GroupCompletion", "run"]
