"""
Layout Normalizer — Figma auto-layout / sizing → IRLayout (flex box model)
"""

import logging
from typing import Optional

from .ir import IRLayout, IRSize

logger = logging.getLogger(__name__)

PRIMARY_ALIGN = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "SPACE_BETWEEN": "space-between",
}

COUNTER_ALIGN = {
    "MIN": "flex-start",
    "CENTER": "center",
    "MAX": "flex-end",
    "BASELINE": "baseline",
}

# 手動排版容器：其子節點是以座標擺放
_MANUAL_LAYOUT_TYPES = ("FRAME", "GROUP")


def _num(value: float) -> float:
    value = round(float(value), 2)
    return int(value) if value.is_integer() else value


def has_auto_layout(node: dict) -> bool:
    return node.get("layoutMode") in ("HORIZONTAL", "VERTICAL")


def is_manual_layout(node: dict) -> bool:
    return (
        node.get("type") in _MANUAL_LAYOUT_TYPES
        and node.get("layoutMode", "NONE") in (None, "NONE")
        and bool(node.get("children"))
    )


def parse_size(node: dict, axis: str) -> IRSize:
    """axis 為 'width' 或 'height'."""
    key = "layoutSizingHorizontal" if axis == "width" else "layoutSizingVertical"
    sizing = node.get(key)
    raw = (node.get("absoluteBoundingBox") or {}).get(axis)
    if sizing == "FILL":
        return IRSize.fill()
    if sizing == "HUG":
        return IRSize.hug()
    if raw is None:
        return IRSize.auto()
    # FIXED 或未指定 → 以 bounding box 為準
    return IRSize.fixed(_num(raw))


def absolute_offsets(child: dict, parent: dict) -> dict:
    """子節點相對於 parent bounding box 的 top / left."""
    cb = child.get("absoluteBoundingBox") or {}
    pb = parent.get("absoluteBoundingBox") or {}
    return {
        "top": _num(cb.get("y", 0) - pb.get("y", 0)),
        "left": _num(cb.get("x", 0) - pb.get("x", 0)),
    }


def _is_absolute_child(node: dict, parent: Optional[dict]) -> bool:
    if node.get("layoutPositioning") == "ABSOLUTE":
        return True
    if parent is None or node.get("type") == "TEXT":
        return False
    return is_manual_layout(parent)


def parse_layout(node: dict, parent: Optional[dict] = None) -> IRLayout:
    """將單一節點的排版屬性轉成 IRLayout.

    parent 為原始 parent 節點（若有），用來判斷是否為手動定位的子節點。
    """
    kwargs = {
        "width": parse_size(node, "width"),
        "height": parse_size(node, "height"),
    }

    if node.get("visible") is False:
        kwargs["display"] = "none"
    elif has_auto_layout(node):
        kwargs["display"] = "flex"
        kwargs["direction"] = "row" if node["layoutMode"] == "HORIZONTAL" else "column"
        kwargs["justify"] = PRIMARY_ALIGN.get(node.get("primaryAxisAlignItems", "MIN"), "flex-start")
        kwargs["align"] = COUNTER_ALIGN.get(node.get("counterAxisAlignItems", "MIN"), "flex-start")
        spacing = node.get("itemSpacing")
        if spacing:
            kwargs["gap"] = _num(spacing)
        if node.get("layoutWrap") == "WRAP":
            kwargs["wrap"] = True
            if node.get("counterAxisSpacing"):
                kwargs["row_gap"] = _num(node["counterAxisSpacing"])
                if spacing:
                    kwargs["column_gap"] = _num(spacing)
    elif node.get("type") == "TEXT":
        kwargs["display"] = "inline"
    else:
        kwargs["display"] = "block"

    padding = tuple(
        _num(node.get(key) or 0)
        for key in ("paddingTop", "paddingRight", "paddingBottom", "paddingLeft")
    )
    if any(padding):
        kwargs["padding"] = padding

    if _is_absolute_child(node, parent):
        kwargs["position"] = "absolute"
        if parent is not None:
            kwargs.update(absolute_offsets(node, parent))
    elif is_manual_layout(node) or any(
        child.get("layoutPositioning") == "ABSOLUTE" for child in node.get("children") or []
    ):
        kwargs["position"] = "relative"

    return IRLayout(**kwargs)
