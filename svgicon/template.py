"""Placeholder substitution for icon module templates."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

from .config import ConfigError

TEMPLATE_FIELDS = ("name", "width", "height", "viewBox", "data")

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")
_BUNDLED_TEMPLATE = Path(__file__).with_name("templates") / "icon.tpl.txt"


def compile_template(template: str, context: Mapping[str, object]) -> str:
    """Replace every ``${identifier}`` in ``template`` with ``context[identifier]``.

    Absent or falsy values become the empty string. Anything that does not
    match the exact placeholder syntax is left as-is.
    """

    def _substitute(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        return str(value) if value else ""

    return _PLACEHOLDER.sub(_substitute, template)


def load_template(path: Path | None = None) -> str:
    """Return template text from ``path``, or the bundled template when omitted."""
    template_path = path if path is not None else _BUNDLED_TEMPLATE
    try:
        return template_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Template file not found: {template_path}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read template {template_path}: {exc}") from exc


__all__ = ["TEMPLATE_FIELDS", "compile_template", "load_template"]
