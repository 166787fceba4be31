"""
Style Normalizer — fills / strokes / effects / typography → IRStyle

Fill 與 stroke 的取用規則不對稱：
  fill   取「最後一個」visible（最上層繪製）
  stroke 取「第一個」visible
"""

import logging
import math
from typing import List, Optional

from .errors import Diagnostics
from .ir import (
    IRBorder,
    IRColor,
    IRFont,
    IRGradient,
    IRGradientStop,
    IRImageFill,
    IRShadow,
    IRStyle,
)

logger = logging.getLogger(__name__)

_GRADIENT_TYPES = {
    "GRADIENT_LINEAR": "linear",
    "GRADIENT_RADIAL": "radial",
    "GRADIENT_ANGULAR": "angular",
    "GRADIENT_DIAMOND": "angular",
}
_SCALE_MODES = {"FIT": "fit", "CROP": "crop", "TILE": "tile"}
_STROKE_ALIGN = {"INSIDE": "inside", "OUTSIDE": "outside"}
_SHADOW_TYPES = {"DROP_SHADOW": "drop", "INNER_SHADOW": "inner"}
_TEXT_ALIGN = {"CENTER": "center", "RIGHT": "right", "JUSTIFIED": "justify"}
_TEXT_DECORATION = {"UNDERLINE": "underline", "STRIKETHROUGH": "line-through"}
_TEXT_CASE = {"UPPER": "uppercase", "LOWER": "lowercase", "TITLE": "capitalize"}


def _visible(paint: dict) -> bool:
    return bool(paint) and paint.get("visible") is not False


def parse_color(color: Optional[dict], opacity: float = 1.0) -> IRColor:
    color = color or {}
    alpha = color.get("a", 1.0) * (1.0 if opacity is None else opacity)
    return IRColor(
        r=int(round(color.get("r", 0) * 255)),
        g=int(round(color.get("g", 0) * 255)),
        b=int(round(color.get("b", 0) * 255)),
        a=round(alpha, 3),
    )


def gradient_angle(handles: Optional[list]) -> Optional[float]:
    """由 gradientHandlePositions 推算 CSS 角度（0deg = 往上，順時針）."""
    if not handles or len(handles) < 2:
        return None
    start, end = handles[0], handles[1]
    dx = end.get("x", 0) - start.get("x", 0)
    dy = end.get("y", 0) - start.get("y", 0)
    if dx == 0 and dy == 0:
        return None
    angle = round(math.degrees(math.atan2(dy, dx))) + 90
    return angle % 360


# ─── Fill ──────────────────────────────────────────────────────────────────

def pick_visible_fill(fills: Optional[List[dict]]) -> Optional[dict]:
    for fill in reversed(fills or []):
        if _visible(fill):
            return fill
    return None


def parse_fill(fill: dict, diagnostics: Optional[Diagnostics] = None, node_id: Optional[str] = None):
    fill_type = fill.get("type")
    opacity = fill.get("opacity", 1.0)
    if fill_type == "SOLID":
        return parse_color(fill.get("color"), opacity)
    if fill_type in _GRADIENT_TYPES:
        stops = [
            IRGradientStop(parse_color(s.get("color"), opacity), round(s.get("position", 0), 4))
            for s in fill.get("gradientStops", [])
        ]
        kind = _GRADIENT_TYPES[fill_type]
        angle = gradient_angle(fill.get("gradientHandlePositions")) if kind == "linear" else None
        if fill_type == "GRADIENT_DIAMOND" and diagnostics is not None:
            diagnostics.unsupported("diamond gradient (approximated as angular)", node_id)
        return IRGradient(kind, stops, angle)
    if fill_type == "IMAGE":
        return IRImageFill(
            url=f"figma://image/{fill.get('imageRef', '')}",
            scale_mode=_SCALE_MODES.get(fill.get("scaleMode"), "fill"),
        )
    if diagnostics is not None:
        diagnostics.unsupported(f"{fill_type} fill", node_id)
    return None


def pick_background(fills: Optional[List[dict]], diagnostics: Optional[Diagnostics] = None,
                    node_id: Optional[str] = None):
    """最後一個 visible fill；空陣列或全部隱藏 → None."""
    fill = pick_visible_fill(fills)
    if fill is None:
        return None
    return parse_fill(fill, diagnostics, node_id)


# ─── Stroke ────────────────────────────────────────────────────────────────

def pick_border(node: dict) -> Optional[IRBorder]:
    weight = node.get("strokeWeight")
    if not weight:
        return None
    stroke = next((s for s in node.get("strokes") or [] if _visible(s)), None)
    if stroke is None:
        return None
    if stroke.get("color"):
        color = parse_color(stroke["color"], stroke.get("opacity", 1.0))
    elif stroke.get("gradientStops"):
        color = parse_color(stroke["gradientStops"][0].get("color"))
    else:
        color = IRColor(0, 0, 0)
    return IRBorder(
        width=weight,
        color=color,
        style="dashed" if node.get("strokeDashes") else "solid",
        position=_STROKE_ALIGN.get(node.get("strokeAlign"), "center"),
    )


# ─── Radius / Effects ──────────────────────────────────────────────────────

def parse_corner_radius(node: dict):
    radii = node.get("rectangleCornerRadii")
    if radii and len(radii) == 4:
        tl, tr, br, bl = radii
        if tl == tr == br == bl:
            return tl if tl > 0 else None
        return (tl, tr, br, bl)
    radius = node.get("cornerRadius")
    if radius and radius > 0:
        return radius
    return None


def parse_shadows(effects: Optional[List[dict]], diagnostics: Optional[Diagnostics] = None,
                  node_id: Optional[str] = None) -> List[IRShadow]:
    shadows = []
    for effect in effects or []:
        if not _visible(effect):
            continue
        kind = _SHADOW_TYPES.get(effect.get("type"))
        if kind is None:
            # LAYER_BLUR / BACKGROUND_BLUR 無法以 box-shadow 表達
            if diagnostics is not None:
                diagnostics.unsupported(f"{effect.get('type')} effect", node_id)
            continue
        offset = effect.get("offset") or {}
        kwargs = dict(
            type=kind,
            x=offset.get("x", 0),
            y=offset.get("y", 0),
            blur=effect.get("radius", 0),
            spread=effect.get("spread", 0),
        )
        if effect.get("color"):
            kwargs["color"] = parse_color(effect["color"])
        shadows.append(IRShadow(**kwargs))
    return shadows


# ─── Typography ────────────────────────────────────────────────────────────

def parse_font(node: dict) -> Optional[IRFont]:
    style = node.get("style")
    if node.get("type") != "TEXT" or not style:
        return None
    size = style.get("fontSize", 16)
    if style.get("lineHeightPx") is not None:
        line_height = round(style["lineHeightPx"], 1)
    elif style.get("lineHeightPercentFontSize") is not None:
        line_height = round(style["lineHeightPercentFontSize"] / 100 * size, 1)
    else:
        line_height = "auto"

    color = None
    fill = pick_visible_fill(node.get("fills"))
    if fill is not None and fill.get("type") == "SOLID":
        color = parse_color(fill.get("color"), fill.get("opacity", 1.0))

    return IRFont(
        family=style.get("fontFamily", "Inter"),
        size=size,
        weight=int(style.get("fontWeight", 400)),
        line_height=line_height,
        letter_spacing=style.get("letterSpacing", 0) or 0,
        align=_TEXT_ALIGN.get(style.get("textAlignHorizontal")),
        decoration=_TEXT_DECORATION.get(style.get("textDecoration")),
        case=_TEXT_CASE.get(style.get("textCase")),
        color=color,
    )


def parse_style(node: dict, diagnostics: Optional[Diagnostics] = None) -> IRStyle:
    node_id = node.get("id")
    style = IRStyle()

    opacity = node.get("opacity")
    if opacity is not None and opacity < 1:
        style.opacity = round(opacity, 3)

    if node.get("type") == "TEXT":
        # 文字的 fill 是字色，放在 font.color
        style.font = parse_font(node)
    else:
        style.background = pick_background(node.get("fills"), diagnostics, node_id)

    style.border = pick_border(node)
    style.border_radius = parse_corner_radius(node)
    style.shadow = parse_shadows(node.get("effects"), diagnostics, node_id)
    if node.get("clipContent") is True:
        style.overflow = "hidden"
    return style
