"""SVG clean-up pass applied before markup is embedded in icon modules.

The optimizer parses the document with lxml, removes presentation and
editor noise, turns basic shapes into ``<path>`` elements and rewrites ids so
that icons can be inlined side by side without clashing. It returns the
serialized document plus the raw ``width``/``height`` of the root element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Sequence, Set, Tuple

from lxml import etree

EDITOR_NAMESPACES = (
    "http://www.inkscape.org/namespaces/inkscape",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://www.bohemiancoding.com/sketch/ns",
    "http://ns.adobe.com/AdobeIllustrator/10.0/",
)

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")
_NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_NUMBER_TOKEN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_URL_REF = re.compile(r"url\(\s*(['\"]?)#([^)'\"\s]+)\1\s*\)")


class SvgOptimizeError(ValueError):
    """Raised when an input document cannot be optimized."""


@dataclass(frozen=True)
class OptimizerOptions:
    """Which clean-up steps run and how ids are rewritten."""

    strip_attrs: Tuple[str, ...] = ("fill", "stroke")
    strip_attr_tags: Tuple[str, ...] = (
        "path",
        "rect",
        "circle",
        "polygon",
        "line",
        "polyline",
        "g",
        "ellipse",
    )
    remove_title: bool = True
    remove_desc: bool = True
    remove_style: bool = True
    remove_comments: bool = True
    remove_metadata: bool = True
    remove_editor_data: bool = True
    remove_useless_defs: bool = True
    convert_shapes: bool = True
    cleanup_ids: bool = True
    id_prefix: str = "svgicon-"
    precision: int = 3


DEFAULT_OPTIONS = OptimizerOptions()


@dataclass(frozen=True)
class SvgInfo:
    """Raw intrinsic size attributes of the root ``<svg>`` element."""

    width: Optional[str]
    height: Optional[str]


@dataclass(frozen=True)
class OptimizeResult:
    data: str
    info: SvgInfo


def optimize(
    svg_text: str,
    options: OptimizerOptions = DEFAULT_OPTIONS,
    *,
    id_namespace: str = "",
) -> OptimizeResult:
    """Optimize ``svg_text`` and return the serialized result.

    ``id_namespace`` is inserted after ``options.id_prefix`` in every
    rewritten id, which keeps ids unique across icons built in one run.
    """
    root = _parse(svg_text, remove_comments=options.remove_comments)
    if _local_name(root) != "svg":
        raise SvgOptimizeError(f"Root element is <{_local_name(root)}>, expected <svg>")

    removable: Set[str] = set()
    if options.remove_title:
        removable.add("title")
    if options.remove_desc:
        removable.add("desc")
    if options.remove_style:
        removable.add("style")
    if options.remove_metadata:
        removable.add("metadata")
    _remove_elements(root, removable)

    if options.remove_editor_data:
        _remove_editor_data(root)
    _strip_presentation(root, options.strip_attr_tags, options.strip_attrs)
    if options.remove_useless_defs:
        _remove_useless_defs(root)
    if options.convert_shapes:
        _convert_shapes(root, options.precision)
    if options.cleanup_ids:
        _cleanup_ids(root, options.id_prefix, id_namespace)

    _strip_blank_text(root)
    etree.cleanup_namespaces(root)

    data = etree.tostring(root, encoding="unicode")
    return OptimizeResult(data=data, info=SvgInfo(width=root.get("width"), height=root.get("height")))


def _parse(svg_text: str, *, remove_comments: bool) -> etree._Element:
    if not svg_text or not svg_text.strip():
        raise SvgOptimizeError("SVG document is empty")
    # lxml refuses str input that still carries an encoding declaration.
    text = _XML_DECLARATION.sub("", svg_text.lstrip("\ufeff"), count=1)
    parser = etree.XMLParser(
        remove_comments=remove_comments,
        remove_pis=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )
    try:
        return etree.fromstring(text, parser)
    except etree.XMLSyntaxError as exc:
        raise SvgOptimizeError(f"Invalid SVG markup: {exc}") from exc


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _namespace(element: etree._Element) -> Optional[str]:
    return etree.QName(element).namespace


def _elements(root: etree._Element) -> Iterator[etree._Element]:
    """Yield element nodes only (comments and entities have non-string tags)."""
    for element in root.iter():
        if isinstance(element.tag, str):
            yield element


def _drop(element: etree._Element) -> None:
    """Remove ``element`` while keeping its tail text in the document."""
    parent = element.getparent()
    if parent is None:
        return
    tail = element.tail
    if tail and tail.strip():
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)


def _remove_elements(root: etree._Element, names: Set[str]) -> None:
    if not names:
        return
    doomed = [el for el in _elements(root) if el is not root and _local_name(el) in names]
    for element in doomed:
        _drop(element)


def _remove_editor_data(root: etree._Element) -> None:
    doomed = [el for el in _elements(root) if _namespace(el) in EDITOR_NAMESPACES]
    for element in doomed:
        _drop(element)
    for element in _elements(root):
        for name in list(element.attrib):
            if etree.QName(name).namespace in EDITOR_NAMESPACES:
                del element.attrib[name]


def _strip_presentation(
    root: etree._Element, tags: Sequence[str], attrs: Sequence[str]
) -> None:
    tag_set = set(tags)
    for element in _elements(root):
        if _local_name(element) not in tag_set:
            continue
        for attr in attrs:
            element.attrib.pop(attr, None)


def _has_id(element: etree._Element) -> bool:
    return any(el.get("id") for el in _elements(element))


def _remove_useless_defs(root: etree._Element) -> None:
    for defs in [el for el in _elements(root) if _local_name(el) == "defs"]:
        for child in list(defs):
            if not isinstance(child.tag, str) or not _has_id(child):
                _drop(child)
        if len(defs) == 0:
            _drop(defs)


def _convert_shapes(root: etree._Element, precision: int) -> None:
    for element in [el for el in _elements(root) if _local_name(el) in _SHAPE_BUILDERS]:
        builder, geometry = _SHAPE_BUILDERS[_local_name(element)]
        path_data = builder(element, precision)
        if path_data is None:
            continue
        if path_data == "":
            _drop(element)
            continue
        _replace_with_path(element, path_data, geometry)


def _replace_with_path(element: etree._Element, path_data: str, geometry: Set[str]) -> None:
    namespace = _namespace(element)
    tag = f"{{{namespace}}}path" if namespace else "path"
    path = etree.Element(tag)
    for name, value in element.attrib.items():
        if name not in geometry:
            path.set(name, value)
    path.set("d", path_data)
    path.text = element.text
    for child in list(element):
        path.append(child)
    path.tail = element.tail
    element.getparent().replace(element, path)


def _number(element: etree._Element, name: str, default: Optional[float] = None) -> Optional[float]:
    raw = element.get(name)
    if raw is None:
        return default
    raw = raw.strip()
    if not _NUMBER.match(raw):
        return None
    return float(raw)


def _fmt(value: float, precision: int) -> str:
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.{precision}f}".rstrip("0").rstrip(".")


def _rect_path(element: etree._Element, precision: int) -> Optional[str]:
    # Rounded corners need arcs; leave those rects alone.
    if element.get("rx") is not None or element.get("ry") is not None:
        return None
    x = _number(element, "x", 0.0)
    y = _number(element, "y", 0.0)
    width = _number(element, "width")
    height = _number(element, "height")
    if None in (x, y, width, height):
        return None

    def f(value: float) -> str:
        return _fmt(value, precision)

    return f"M{f(x)} {f(y)}H{f(x + width)}V{f(y + height)}H{f(x)}z"


def _line_path(element: etree._Element, precision: int) -> Optional[str]:
    coords = [_number(element, name, 0.0) for name in ("x1", "y1", "x2", "y2")]
    if None in coords:
        return None
    x1, y1, x2, y2 = (_fmt(value, precision) for value in coords)
    return f"M{x1} {y1}L{x2} {y2}"


def _points_path(closed: bool) -> Callable[[etree._Element, int], Optional[str]]:
    def _build(element: etree._Element, precision: int) -> Optional[str]:
        tokens = _NUMBER_TOKEN.findall(element.get("points", ""))
        if len(tokens) < 4:
            # Fewer than two points draw nothing; the element is dropped.
            return ""
        values = [_fmt(float(token), precision) for token in tokens[: len(tokens) // 2 * 2]]
        pairs = [f"{values[i]} {values[i + 1]}" for i in range(0, len(values), 2)]
        data = f"M{pairs[0]}" + "".join(f"L{pair}" for pair in pairs[1:])
        return data + "z" if closed else data

    return _build


def _ellipse_arcs(cx: float, cy: float, rx: float, ry: float, precision: int) -> str:
    def f(value: float) -> str:
        return _fmt(value, precision)

    radii = f"{f(rx)} {f(ry)}"
    return (
        f"M{f(cx - rx)} {f(cy)}"
        f"A{radii} 0 1 0 {f(cx + rx)} {f(cy)}"
        f"A{radii} 0 1 0 {f(cx - rx)} {f(cy)}z"
    )


def _circle_path(element: etree._Element, precision: int) -> Optional[str]:
    cx = _number(element, "cx", 0.0)
    cy = _number(element, "cy", 0.0)
    r = _number(element, "r")
    if None in (cx, cy, r):
        return None
    return _ellipse_arcs(cx, cy, r, r, precision)


def _ellipse_path(element: etree._Element, precision: int) -> Optional[str]:
    cx = _number(element, "cx", 0.0)
    cy = _number(element, "cy", 0.0)
    rx = _number(element, "rx")
    ry = _number(element, "ry")
    if None in (cx, cy, rx, ry):
        return None
    return _ellipse_arcs(cx, cy, rx, ry, precision)


_SHAPE_BUILDERS: Dict[str, Tuple[Callable[[etree._Element, int], Optional[str]], Set[str]]] = {
    "rect": (_rect_path, {"x", "y", "width", "height"}),
    "line": (_line_path, {"x1", "y1", "x2", "y2"}),
    "polyline": (_points_path(closed=False), {"points"}),
    "polygon": (_points_path(closed=True), {"points"}),
    "circle": (_circle_path, {"cx", "cy", "r"}),
    "ellipse": (_ellipse_path, {"cx", "cy", "rx", "ry"}),
}


def _is_href(name: str) -> bool:
    return etree.QName(name).localname == "href"


def _collect_references(root: etree._Element) -> Set[str]:
    referenced: Set[str] = set()
    for element in _elements(root):
        for name, value in element.attrib.items():
            if _is_href(name) and value.startswith("#"):
                referenced.add(value[1:])
            for match in _URL_REF.finditer(value):
                referenced.add(match.group(2))
    return referenced


def _cleanup_ids(root: etree._Element, prefix: str, namespace: str) -> None:
    referenced = _collect_references(root)
    stem = f"{prefix}{namespace}-" if namespace else prefix
    renamed: Dict[str, str] = {}
    for element in _elements(root):
        current = element.get("id")
        if current is None:
            continue
        if current not in referenced or current in renamed:
            # Unreferenced or duplicate ids carry no meaning in an inlined icon.
            del element.attrib["id"]
            continue
        renamed[current] = f"{stem}{len(renamed)}"
        element.set("id", renamed[current])

    if not renamed:
        return

    def _rewrite_url(match: re.Match[str]) -> str:
        target = renamed.get(match.group(2))
        if target is None:
            return match.group(0)
        return f"url(#{target})"

    for element in _elements(root):
        for name, value in list(element.attrib.items()):
            if _is_href(name) and value.startswith("#") and value[1:] in renamed:
                element.set(name, f"#{renamed[value[1:]]}")
            elif "url(" in value:
                element.set(name, _URL_REF.sub(_rewrite_url, value))


def _strip_blank_text(root: etree._Element) -> None:
    for element in root.iter():
        if len(element) and element.text is not None and not element.text.strip():
            element.text = None
        if element.tail is not None and not element.tail.strip():
            element.tail = None


__all__ = [
    "DEFAULT_OPTIONS",
    "OptimizeResult",
    "OptimizerOptions",
    "SvgInfo",
    "SvgOptimizeError",
    "optimize",
]
