"""Tests for svgicon.converter."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import pytest

from svgicon.config import ConfigError
from svgicon.converter import BatchConverter, DiscoveryError, GroupCompletion, run
from svgicon.index import IndexEmitter
from svgicon.models import ROOT_GROUP, SourceFile
from tests._fixtures.icon_tree import HOME_SVG, MENU_SVG, IconTreeBuilder


def test_end_to_end_scenario(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "nav/menu.svg": MENU_SVG})

    report = icon_tree.convert()

    assert report.ok
    assert icon_tree.outputs() == ["home.js", "index.js", "nav/index.js", "nav/menu.js"]

    home = icon_tree.read("home.js")
    assert "'home': {" in home
    assert "width: 24," in home
    assert "height: 24," in home
    assert "viewBox: '0 0 24 24'," in home
    assert 'pid="0"' in home
    assert home.count("<path") == 1

    menu = icon_tree.read("nav/menu.js")
    assert "'nav/menu': {" in menu
    assert "width: 16," in menu
    assert "height: 16," in menu
    assert "viewBox: ,\n" in menu
    assert '<path pid="0" d="M2 4H22V6H2z"/>' in menu

    assert icon_tree.read("index.js") == "require('./home')\n"
    assert icon_tree.read("nav/index.js") == "require('./menu')\n"


def test_nested_directories_fold_into_first_level_index(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write(
        {
            "nav/menu.svg": MENU_SVG,
            "nav/arrows/left.svg": MENU_SVG,
            "nav/arrows/right.svg": MENU_SVG,
        }
    )

    icon_tree.convert()

    assert icon_tree.outputs() == [
        "nav/arrows/left.js",
        "nav/arrows/right.js",
        "nav/index.js",
        "nav/menu.js",
    ]
    assert icon_tree.read("nav/index.js") == (
        "require('./arrows/left')\nrequire('./arrows/right')\nrequire('./menu')\n"
    )
    assert "'nav/arrows/left'" in icon_tree.read("nav/arrows/left.js")


def test_repeated_runs_produce_identical_trees(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "nav/menu.svg": MENU_SVG, "brand/logo.svg": HOME_SVG})

    icon_tree.convert()
    first = {rel: icon_tree.read(rel) for rel in icon_tree.outputs()}
    (icon_tree.target / "stale.js").write_text("old", encoding="utf-8")
    (icon_tree.target / "gone").mkdir()

    icon_tree.convert()
    second = {rel: icon_tree.read(rel) for rel in icon_tree.outputs()}

    assert first == second
    assert not (icon_tree.target / "gone").exists()


def test_ids_are_unique_across_icons(icon_tree: IconTreeBuilder) -> None:
    svg = """
    <svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">
      <defs><path id="p" d="M0 0h2"/></defs>
      <use xlink:href="#p"/>
    </svg>
    """
    icon_tree.write({"a.svg": svg, "nav/a.svg": svg})

    icon_tree.convert()

    assert 'id="svgicon-a-0"' in icon_tree.read("a.js")
    assert 'id="svgicon-nav-a-0"' in icon_tree.read("nav/a.js")


def test_broken_file_is_isolated(icon_tree: IconTreeBuilder, caplog: pytest.LogCaptureFixture) -> None:
    icon_tree.write(
        {
            "home.svg": HOME_SVG,
            "broken.svg": "<svg><path></svg>",
            "nav/menu.svg": MENU_SVG,
        }
    )
    caplog.set_level(logging.INFO, logger="svgicon")

    report = icon_tree.convert()

    assert not report.ok
    assert [outcome.source.name for outcome in report.failures] == ["broken"]
    assert [outcome.source.module_name for outcome in report.generated] == ["home", "nav/menu"]
    assert icon_tree.outputs() == ["home.js", "index.js", "nav/index.js", "nav/menu.js"]
    assert icon_tree.read("index.js") == "require('./home')\n"
    assert "Failed to optimize broken" in caplog.text
    assert "Generated icon: nav/menu" in caplog.text
    assert "Generated index.js" in caplog.text
    assert "Generated nav/index.js" in caplog.text


def test_group_without_generated_icons_gets_no_index(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "bad/x.svg": "nope"})

    report = icon_tree.convert()

    assert len(report.failures) == 1
    assert icon_tree.outputs() == ["home.js", "index.js"]


def test_custom_extension_and_template(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG})
    template = "export const name = '${name}'\nexport const viewBox = ${viewBox}\n"

    icon_tree.convert(template=template, extension="ts", workers=1)

    assert icon_tree.outputs() == ["home.ts", "index.ts"]
    assert icon_tree.read("home.ts") == "export const name = 'home'\nexport const viewBox = '0 0 24 24'\n"


def test_report_lists_outcomes_in_discovery_order(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"b.svg": MENU_SVG, "a.svg": MENU_SVG, "z/c.svg": MENU_SVG, "m.svg": MENU_SVG})

    report = icon_tree.convert()

    assert [outcome.source.module_name for outcome in report.icons] == ["a", "b", "m", "z/c"]
    assert sorted(path.name for path in report.indexes) == ["index.js", "index.js"]


class _CheckingEmitter(IndexEmitter):
    """Records whether every module of a group existed when its index was written."""

    def __init__(self, target_root: Path) -> None:
        super().__init__("js")
        self.target_root = target_root
        self.snapshots: dict[str, bool] = {}

    def write(self, entries: Sequence[SourceFile], target_dir: Path, base: str = "") -> Path:
        self.snapshots[base] = all(
            entry.output_path(self.target_root, self.extension).exists() for entry in entries
        )
        return super().write(entries, target_dir, base)


def test_indexes_wait_for_every_file_in_their_group(icon_tree: IconTreeBuilder) -> None:
    files = {f"icon{i}.svg": MENU_SVG for i in range(12)}
    files.update({f"nav/icon{i}.svg": MENU_SVG for i in range(12)})
    icon_tree.write(files)
    emitter = _CheckingEmitter(icon_tree.target.resolve())

    icon_tree.convert(index_emitter=emitter, workers=4)

    assert emitter.snapshots == {"": True, "nav/": True}


def test_empty_source_tree_produces_nothing(icon_tree: IconTreeBuilder) -> None:
    report = icon_tree.convert()

    assert report.icons == []
    assert report.indexes == []
    assert not icon_tree.target.exists()


def test_missing_source_is_a_discovery_error(tmp_path: Path) -> None:
    with pytest.raises(DiscoveryError):
        run(tmp_path / "missing", tmp_path / "out", "${name}")


def test_source_must_be_a_directory(tmp_path: Path) -> None:
    source = tmp_path / "icon.svg"
    source.write_text("<svg/>", encoding="utf-8")

    with pytest.raises(DiscoveryError):
        run(source, tmp_path / "out", "${name}")


def test_target_containing_source_is_refused(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG})
    converter = BatchConverter(icon_tree.source, icon_tree.source.parent, "${name}")

    with pytest.raises(ConfigError):
        converter.run()

    assert (icon_tree.source / "home.svg").exists()


def test_group_completion_fires_once_per_group() -> None:
    completion = GroupCompletion({ROOT_GROUP: 2, "nav": 1})

    assert completion.complete(ROOT_GROUP) is False
    assert completion.complete("nav") is True
    assert completion.outstanding(ROOT_GROUP) == 1
    assert completion.complete(ROOT_GROUP) is True

    with pytest.raises(KeyError):
        completion.complete(ROOT_GROUP)


def test_source_path_with_glob_characters_is_discovered(tmp_path: Path) -> None:
    source = tmp_path / "icons[v2]"
    (source / "nav").mkdir(parents=True)
    (source / "home.svg").write_text(HOME_SVG.strip(), encoding="utf-8")
    (source / "nav" / "menu.svg").write_text(MENU_SVG.strip(), encoding="utf-8")

    report = run(source, tmp_path / "build", "${name}")

    assert [outcome.source.module_name for outcome in report.icons] == ["home", "nav/menu"]
    assert (tmp_path / "build" / "nav" / "index.js").read_text(encoding="utf-8") == "require('./menu')\n"


def test_unreadable_file_is_isolated(icon_tree: IconTreeBuilder, caplog: pytest.LogCaptureFixture) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "nav/menu.svg": MENU_SVG})
    (icon_tree.source / "nav" / "latin1.svg").write_bytes(b"<svg>\xe9\xff</svg>")
    caplog.set_level(logging.INFO, logger="svgicon")

    report = icon_tree.convert()

    assert not report.ok
    assert [outcome.source.module_name for outcome in report.failures] == ["nav/latin1"]
    assert icon_tree.outputs() == ["home.js", "index.js", "nav/index.js", "nav/menu.js"]
    assert icon_tree.read("nav/index.js") == "require('./menu')\n"
    assert "Failed to read" in caplog.text


def test_unwritable_output_is_isolated(
    icon_tree: IconTreeBuilder, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "nav/menu.svg": MENU_SVG, "nav/close.svg": MENU_SVG})
    original_write_text = Path.write_text

    def write_text(self: Path, *args, **kwargs):
        if self.name == "close.js":
            raise PermissionError(13, "Permission denied", str(self))
        return original_write_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", write_text)
    caplog.set_level(logging.INFO, logger="svgicon")

    report = icon_tree.convert()

    assert not report.ok
    assert [outcome.source.module_name for outcome in report.failures] == ["nav/close"]
    assert report.failures[0].output is None
    assert icon_tree.outputs() == ["home.js", "index.js", "nav/index.js", "nav/menu.js"]
    assert icon_tree.read("nav/index.js") == "require('./menu')\n"
    assert "Failed to write" in caplog.text


class _FailingEmitter(IndexEmitter):
    """Raises for one group's index and writes the rest."""

    def __init__(self, failing_base: str) -> None:
        super().__init__("js")
        self.failing_base = failing_base

    def write(self, entries: Sequence[SourceFile], target_dir: Path, base: str = "") -> Path:
        if base == self.failing_base:
            raise OSError(28, "No space left on device")
        return super().write(entries, target_dir, base)


def test_index_write_failure_is_reported(
    icon_tree: IconTreeBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "nav/menu.svg": MENU_SVG})
    caplog.set_level(logging.INFO, logger="svgicon")

    report = icon_tree.convert(index_emitter=_FailingEmitter("nav/"))

    assert not report.ok
    assert report.failures == []
    assert len(report.index_failures) == 1
    assert "Failed to write index for nav/" in report.index_failures[0]
    assert icon_tree.outputs() == ["home.js", "index.js", "nav/menu.js"]
    assert "Failed to write index for nav/" in caplog.text


def test_directory_named_root_is_its_own_group(icon_tree: IconTreeBuilder) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "root/menu.svg": MENU_SVG})

    report = icon_tree.convert()

    assert report.ok
    assert icon_tree.read("index.js") == "require('./home')\n"
    assert icon_tree.read("root/index.js") == "require('./menu')\n"


def test_directory_without_svgs_gets_no_index(
    icon_tree: IconTreeBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    icon_tree.write({"home.svg": HOME_SVG, "docs/readme.txt": "not an icon"})
    caplog.set_level(logging.DEBUG, logger="svgicon")

    report = icon_tree.convert()

    assert report.ok
    assert icon_tree.outputs() == ["home.js", "index.js"]
    assert "Skipping index for empty group docs" in caplog.text
