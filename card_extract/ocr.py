"""
OCR response helpers.

OCR providers return text boxes in many JSON shapes. These helpers walk an
arbitrary decoded response and collect positioned text boxes, so the UI can
offer per-box selection without knowing the provider's schema.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TEXT_KEYS = ("text", "content", "value", "utf8", "word", "line")
BOX_KEYS = ("bbox", "bounding_box", "boundingBox", "box", "bounds", "rect", "rectangle", "polygon")
MAX_BOX_TEXT = 240


@dataclass
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class OcrBox:
    """A text fragment with its position; level is word, line, block or unknown."""
    id: str
    text: str
    level: str
    bbox: BoundingBox = field(default_factory=lambda: BoundingBox(0, 0, 0, 0))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "level": self.level, "bbox": self.bbox.to_dict()}


@dataclass
class OcrDimensions:
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def _first_number(record: Dict[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if record.get(key) is not None:
            return _to_number(record[key])
    return None


def _box_from_numbers(values: List[float]) -> Optional[BoundingBox]:
    """[x0, y0, x1, y1] corners, else [x, y, width, height]."""
    if len(values) < 4:
        return None
    a, b, c, d = values[:4]
    if c > a and d > b:
        return BoundingBox(a, b, c - a, d - b)
    if c >= 0 and d >= 0:
        return BoundingBox(a, b, c, d)
    return None


def parse_box(value: Any) -> Optional[BoundingBox]:
    """Interpret one bounding-box value in any of the shapes providers use."""
    if not value:
        return None

    if isinstance(value, list):
        numbers = [_to_number(v) for v in value]
        if all(n is not None for n in numbers):
            return _box_from_numbers(numbers)

        if all(isinstance(item, list) for item in value):
            # [[x, y], [x, y], ...] point lists
            flat = [_to_number(n) for item in value for n in item]
            flat = [n for n in flat if n is not None]
            if len(flat) >= 4:
                xs, ys = flat[0::2], flat[1::2]
                return BoundingBox(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

        if len(value) >= 2 and isinstance(value[0], dict):
            xs = [n for n in (_to_number(point.get("x")) for point in value if isinstance(point, dict)) if n is not None]
            ys = [n for n in (_to_number(point.get("y")) for point in value if isinstance(point, dict)) if n is not None]
            if xs and ys:
                return BoundingBox(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))
        return None

    if isinstance(value, dict):
        x = _first_number(value, "x", "left", "x0", "minX")
        y = _first_number(value, "y", "top", "y0", "minY")
        width = _to_number(value.get("width"))
        height = _to_number(value.get("height"))
        right = _first_number(value, "right", "x1", "maxX")
        bottom = _first_number(value, "bottom", "y1", "maxY")
        if None not in (x, y, width, height):
            return BoundingBox(x, y, width, height)
        if None not in (x, y, right, bottom):
            return BoundingBox(x, y, right - x, bottom - y)
        nested = value.get("vertices") or value.get("polygon")
        if isinstance(nested, list):
            return parse_box(nested)

    return None


def _node_text(node: Dict[str, Any]) -> Optional[str]:
    for key in TEXT_KEYS:
        candidate = node.get(key)
        if isinstance(candidate, str) and candidate.strip():
            text = candidate.strip()
            return text if len(text) <= MAX_BOX_TEXT else None
    return None


def _guess_level(path: List[str]) -> str:
    joined = ".".join(path).lower()
    for level in ("word", "line", "block"):
        if level in joined:
            return level
    return "unknown"


def extract_ocr_boxes(raw: Any) -> List[OcrBox]:
    """
    Collect positioned text boxes from a raw OCR response.

    Args:
        raw: Decoded JSON response (dicts, lists, scalars)

    Returns:
        Boxes with positive area, deduplicated on text and geometry,
        in discovery order
    """
    candidates = []
    visited = set()

    def walk(node: Any, path: List[str]) -> None:
        if not isinstance(node, (dict, list)) or id(node) in visited:
            return
        visited.add(id(node))

        if isinstance(node, list):
            for index, item in enumerate(node):
                walk(item, path + [str(index)])
            return

        text = _node_text(node)
        if text:
            bbox = None
            for key in BOX_KEYS:
                bbox = parse_box(node.get(key))
                if bbox:
                    break
            if bbox and bbox.width > 0 and bbox.height > 0:
                candidates.append((text, _guess_level(path), bbox))

        for key, value in node.items():
            if isinstance(value, (dict, list)):
                walk(value, path + [str(key)])

    walk(raw, [])

    boxes: Dict[tuple, OcrBox] = {}
    for index, (text, level, bbox) in enumerate(candidates):
        key = (text, bbox.x, bbox.y, bbox.width, bbox.height)
        if key not in boxes:
            boxes[key] = OcrBox(id=f"box-{index}", text=text, level=level, bbox=bbox)

    logger.debug(f"Found {len(boxes)} OCR boxes")
    return list(boxes.values())


def extract_ocr_dimensions(raw: Any) -> Optional[OcrDimensions]:
    """Page size from ``pages[0].dimensions``, if the response carries it."""
    if not isinstance(raw, dict):
        return None
    pages = raw.get("pages")
    if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
        return None
    dims = pages[0].get("dimensions")
    if not isinstance(dims, dict):
        return None
    width = _to_number(dims.get("width"))
    height = _to_number(dims.get("height"))
    if not width or not height:
        return None
    return OcrDimensions(width=width, height=height)
