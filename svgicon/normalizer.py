"""Turn raw SVG documents into markup ready for icon modules."""

from __future__ import annotations

import itertools
import re
from typing import Optional

from .config import DEFAULT_SIZE
from .models import NormalizedIcon
from .optimizer import DEFAULT_OPTIONS, OptimizerOptions, optimize

SHAPE_TAGS = ("path", "rect", "circle", "polygon", "line", "polyline", "ellipse")
SHAPE_ID_ATTR = "pid"

_SVG_OPEN_TAG = re.compile(r"<svg[^>]*>", re.IGNORECASE)
_SVG_CLOSE_TAG = re.compile(r"</svg>", re.IGNORECASE)
_NUM = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_VIEW_BOX = re.compile(rf'viewBox\s*=\s*"\s*({_NUM}(?:[\s,]+{_NUM}){{3}})\s*"')
_SHAPE_OPEN_TAG = re.compile(rf"<({'|'.join(SHAPE_TAGS)})(?=[\s/>])", re.IGNORECASE)
_EXISTING_SHAPE_ID = re.compile(rf'\s+{SHAPE_ID_ATTR}\s*=\s*"[^"]*"')
_LEADING_FLOAT = re.compile(rf"^\s*({_NUM})")
_ID_NAMESPACE_JUNK = re.compile(r"[^A-Za-z0-9_-]+")


class SvgNormalizer:
    """Runs the optimizer and extracts markup, viewBox and size.

    The optimizer configuration is fixed per instance so one normalizer can be
    shared between worker threads.
    """

    def __init__(
        self,
        options: OptimizerOptions = DEFAULT_OPTIONS,
        *,
        default_size: float = DEFAULT_SIZE,
    ) -> None:
        self.options = options
        self.default_size = default_size

    def normalize(self, raw_svg: str, *, name: str = "") -> NormalizedIcon:
        """Return the :class:`NormalizedIcon` for ``raw_svg``.

        ``name`` namespaces rewritten ids. Raises
        :class:`svgicon.optimizer.SvgOptimizeError` for unusable input.
        """
        result = optimize(raw_svg, self.options, id_namespace=id_namespace(name))
        return NormalizedIcon(
            markup=inject_shape_ids(strip_outer_svg(result.data)),
            view_box=extract_view_box(result.data),
            width=self._dimension(result.info.width),
            height=self._dimension(result.info.height),
        )

    def _dimension(self, raw: Optional[str]) -> float:
        value = parse_leading_float(raw)
        if value is None or value <= 0:
            return self.default_size
        return value


def normalize(raw_svg: str, *, name: str = "") -> NormalizedIcon:
    """Normalize ``raw_svg`` with the default optimizer configuration."""
    return SvgNormalizer().normalize(raw_svg, name=name)


def strip_outer_svg(data: str) -> str:
    return _SVG_CLOSE_TAG.sub("", _SVG_OPEN_TAG.sub("", data))


def extract_view_box(data: str) -> Optional[str]:
    """Return the root viewBox as four space-separated numbers, if present."""
    opening = _SVG_OPEN_TAG.search(data)
    if opening is None:
        return None
    match = _VIEW_BOX.search(opening.group(0))
    if match is None:
        return None
    return " ".join(re.split(r"[\s,]+", match.group(1)))


def inject_shape_ids(markup: str) -> str:
    """Number shape tags ``pid="0"``, ``pid="1"``... in document order."""
    cleaned = _EXISTING_SHAPE_ID.sub("", markup)
    counter = itertools.count()

    def _tag(match: re.Match[str]) -> str:
        return f'<{match.group(1)} {SHAPE_ID_ATTR}="{next(counter)}"'

    return _SHAPE_OPEN_TAG.sub(_tag, cleaned)


def parse_leading_float(raw: Optional[str]) -> Optional[float]:
    """Parse the numeric prefix of ``raw`` ("24px" -> 24.0); ``None`` if there is none."""
    if raw is None:
        return None
    match = _LEADING_FLOAT.match(raw)
    if match is None:
        return None
    return float(match.group(1))


def id_namespace(name: str) -> str:
    return _ID_NAMESPACE_JUNK.sub("-", name).strip("-")


__all__ = [
    "SHAPE_ID_ATTR",
    "SHAPE_TAGS",
    "SvgNormalizer",
    "extract_view_box",
    "id_namespace",
    "inject_shape_ids",
    "normalize",
    "parse_leading_float",
    "strip_outer_svg",
]
