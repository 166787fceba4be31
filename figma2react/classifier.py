"""
Node Classifier — Figma node type + 圖層命名 → (kind, tag)

命名推斷的語意標籤優先於型別預設值。
"""

import re
from typing import Optional, Tuple

# 依序比對，先符合者勝出
SEMANTIC_TAG_RULES = [
    (re.compile(r"\bheader\b", re.I), "header"),
    (re.compile(r"\bfooter\b", re.I), "footer"),
    (re.compile(r"\bnav(igation)?\b", re.I), "nav"),
    (re.compile(r"\bmain\b", re.I), "main"),
    (re.compile(r"\barticle\b", re.I), "article"),
    (re.compile(r"\bsection\b", re.I), "section"),
    (re.compile(r"\b(btn|button)\b", re.I), "button"),
    (re.compile(r"\blink\b", re.I), "a"),
    (re.compile(r"\blist\b", re.I), "ul"),
    (re.compile(r"\bitem\b", re.I), "li"),
]

_HEADING_KEYWORD_RE = re.compile(r"\b(h[1-6])\b", re.I)
_SUBTITLE_RE = re.compile(r"\b(subtitle|subheading|sub[-_ ]title)\b", re.I)
_TITLE_RE = re.compile(r"\b(title|heading)\b", re.I)

# (最小字級, tag)，由大到小
HEADING_SIZE_THRESHOLDS = [
    (40, "h1"),
    (32, "h2"),
    (24, "h3"),
    (20, "h4"),
]

_SHAPE_TYPES = ("RECTANGLE", "ELLIPSE", "POLYGON", "STAR")
_VECTOR_TYPES = ("VECTOR", "BOOLEAN_OPERATION", "STAR_VECTOR", "REGULAR_POLYGON_VECTOR")
_CONTAINER_TYPES = ("FRAME", "GROUP", "SECTION", "CANVAS")


def semantic_tag(name: str) -> Optional[str]:
    for pattern, tag in SEMANTIC_TAG_RULES:
        if pattern.search(name or ""):
            return tag
    return None


def text_tag(name: str, font_size: Optional[float]) -> str:
    """命名關鍵字優先；否則依字級門檻；預設 p."""
    match = _HEADING_KEYWORD_RE.search(name or "")
    if match:
        return match.group(1).lower()
    if _SUBTITLE_RE.search(name or ""):
        return "h3"
    if _TITLE_RE.search(name or ""):
        return "h2"
    if font_size is not None:
        for threshold, tag in HEADING_SIZE_THRESHOLDS:
            if font_size >= threshold:
                return tag
    return "p"


def has_image_fill(node: dict) -> bool:
    return any(
        f.get("type") == "IMAGE" and f.get("visible") is not False
        for f in node.get("fills") or []
    )


def is_divider(node: dict) -> bool:
    if node.get("type") == "LINE":
        return True
    if node.get("type") != "RECTANGLE" or node.get("children"):
        return False
    bbox = node.get("absoluteBoundingBox") or {}
    w, h = bbox.get("width", 0), bbox.get("height", 0)
    return (0 < h <= 2 and w >= 8 * h) or (0 < w <= 2 and h >= 8 * w)


def classify(node: dict) -> Tuple[str, str]:
    """回傳 (kind, tag)."""
    node_type = node.get("type", "FRAME")
    name = node.get("name", "")

    if node_type in ("COMPONENT", "COMPONENT_SET"):
        return "component", semantic_tag(name) or "div"
    if node_type == "INSTANCE":
        return "instance", "div"
    if node_type == "TEXT":
        font_size = (node.get("style") or {}).get("fontSize")
        return "text", text_tag(name, font_size)
    if is_divider(node):
        return "divider", "hr"
    if node_type in _SHAPE_TYPES:
        if has_image_fill(node):
            return "image", "img"
        return "container", "div"
    if node_type in _VECTOR_TYPES:
        return "icon", "svg"
    if node_type == "SECTION":
        return "container", semantic_tag(name) or "section"
    if node_type in _CONTAINER_TYPES:
        return "container", semantic_tag(name) or "div"
    return "container", "div"
