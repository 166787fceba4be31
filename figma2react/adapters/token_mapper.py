"""
Token Mapper — 原始數值 / 顏色 → design token key，找不到時回傳 None 讓 adapter 輸出 arbitrary value

所有 adapter 共用。每次 fallback 都會累加 Diagnostics.fallback_count（品質指標，非錯誤）。
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import Diagnostics
from ..ir import DesignTokens, IRColor, IRGradient, IRImageFill, IRShadow, IRSize

TOLERANCE = 2

# 8 個方位，每個 45° 扇區以方位為中心
GRADIENT_DIRECTIONS = ("t", "tr", "r", "br", "b", "bl", "l", "tl")

_LAYER_SPLIT_RE = re.compile(r",(?![^(]*\))")
_IMAGE_SIZES = {"fill": "cover", "fit": "contain", "tile": "auto", "crop": "cover"}


def fmt_num(value: float) -> str:
    value = round(float(value), 3)
    return str(int(value)) if value.is_integer() else f"{value:g}"


def px(value: float) -> str:
    return "0" if value == 0 else f"{fmt_num(value)}px"


def color_to_hex(color: IRColor) -> str:
    return color.to_hex()


def color_to_rgba(color: IRColor) -> str:
    if color.a >= 1:
        return f"rgb({color.r}, {color.g}, {color.b})"
    return f"rgba({color.r}, {color.g}, {color.b}, {color.a:.2f})"


def color_to_css(color: IRColor) -> str:
    """不透明 → hex；半透明 → rgba()."""
    return color.to_hex() if color.a >= 1 else color_to_rgba(color)


def collapse_box(values: Sequence[float]) -> Tuple[float, ...]:
    """[t, r, b, l] → (all,) / (vertical, horizontal) / (t, r, b, l)."""
    t, r, b, l = values
    if t == r == b == l:
        return (t,)
    if t == b and r == l:
        return (t, r)
    return (t, r, b, l)


def _parse_shadow_layer(css: str) -> Optional[Tuple[float, float, float, float]]:
    first = _LAYER_SPLIT_RE.split(css)[0].strip()
    if first.startswith("inset"):
        return None
    numbers = []
    for part in first.split():
        if part.startswith(("rgb", "#", "hsl")):
            break
        try:
            numbers.append(float(part.replace("px", "")))
        except ValueError:
            return None
    if len(numbers) < 3:
        return None
    x, y, blur = numbers[:3]
    spread = numbers[3] if len(numbers) > 3 else 0.0
    return (x, y, blur, spread)


class TokenMapper:
    """DesignTokens 上的查找；回傳 None 代表應輸出 raw 值."""

    def __init__(self, tokens: DesignTokens, diagnostics: Optional[Diagnostics] = None):
        self.tokens = tokens
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._hex_index = self._build_hex_index(tokens)
        self._shadow_presets = self._build_shadow_presets(tokens)

    @staticmethod
    def _build_hex_index(tokens: DesignTokens) -> Dict[str, str]:
        index: Dict[str, str] = {}
        for group, shades in tokens.colors.items():
            for shade, value in shades.items():
                key = group if shade == "DEFAULT" else f"{group}-{shade}"
                index.setdefault(str(value).lower(), key)
        return index

    @staticmethod
    def _build_shadow_presets(tokens: DesignTokens) -> List[Tuple[Tuple[float, float, float, float], str]]:
        presets = []
        for name, css in tokens.shadows.items():
            parsed = _parse_shadow_layer(css)
            if parsed is not None:
                presets.append((parsed, name))
        return presets

    def _miss(self, what: str) -> None:
        self.diagnostics.fallback(what)

    # ─── Color ───

    def color_token(self, color: IRColor) -> Optional[str]:
        """tokenRef 優先，其次 hex 完全比對（不分大小寫）；token key 如 'gray-500'."""
        if color.token_ref:
            return color.token_ref
        key = self._hex_index.get(color.to_hex().lower())
        if key is None:
            self._miss(f"color {color.to_hex()}")
        return key

    # ─── Numeric ───

    @staticmethod
    def _nearest(value: float, table: Dict[str, float]) -> Optional[str]:
        closest, closest_diff = None, None
        for key, candidate in table.items():
            diff = abs(float(candidate) - value)
            if closest_diff is None or diff < closest_diff:
                closest, closest_diff = key, diff
        if closest_diff is not None and closest_diff <= TOLERANCE:
            return closest
        return None

    def spacing_token(self, value: float) -> Optional[str]:
        key = self._nearest(value, self.tokens.spacing)
        if key is None:
            self._miss(f"spacing {value}")
        return key

    def radius_token(self, value: float) -> Optional[str]:
        if value >= 9999 and "full" in self.tokens.border_radius:
            return "full"
        key = self._nearest(value, self.tokens.border_radius)
        if key is None:
            self._miss(f"radius {value}")
        return key

    # ─── Gradient / Shadow ───

    @staticmethod
    def angle_direction(angle: float) -> str:
        normalized = angle % 360
        return GRADIENT_DIRECTIONS[int(((normalized + 22.5) % 360) // 45)]

    def gradient_direction(self, gradient: IRGradient) -> Optional[str]:
        """2-stop linear 且角度可解析 → 方位代號；其餘 None（輸出 raw CSS）."""
        if gradient.type != "linear" or len(gradient.stops) != 2 or gradient.angle is None:
            self._miss(f"{gradient.type} gradient")
            return None
        return self.angle_direction(gradient.angle)

    def shadow_preset(self, shadows: List[IRShadow]) -> Optional[str]:
        """單一 drop shadow 且 offset/blur/spread 完全符合 → shadow token 名稱."""
        if len(shadows) == 1 and shadows[0].type == "drop":
            s = shadows[0]
            for (x, y, blur, spread), name in self._shadow_presets:
                if (s.x, s.y, s.blur, s.spread) == (x, y, blur, spread):
                    return name
        self._miss("shadow")
        return None


# ════════════════════════════════════════════════════════════
# CSS value helpers
# ════════════════════════════════════════════════════════════

def _stops_css(gradient: IRGradient) -> str:
    return ", ".join(f"{color_to_rgba(s.color)} {round(s.position * 100)}%" for s in gradient.stops)


def background_to_css(background) -> str:
    if background is None:
        return ""
    if isinstance(background, IRColor):
        return color_to_css(background)
    if isinstance(background, IRGradient):
        if background.type == "linear":
            angle = background.angle if background.angle is not None else 180
            return f"linear-gradient({fmt_num(angle)}deg, {_stops_css(background)})"
        if background.type == "radial":
            return f"radial-gradient(circle, {_stops_css(background)})"
        return f"conic-gradient({_stops_css(background)})"
    if isinstance(background, IRImageFill):
        size = _IMAGE_SIZES.get(background.scale_mode, "cover")
        repeat = "repeat" if background.scale_mode == "tile" else "no-repeat"
        return f'url("{background.url}") center / {size} {repeat}'
    return ""


def shadow_to_css(shadows: List[IRShadow]) -> str:
    return ", ".join(
        f"{'inset ' if s.type == 'inner' else ''}{px(s.x)} {px(s.y)} {px(s.blur)} {px(s.spread)} {color_to_rgba(s.color)}"
        for s in shadows
    )


def radius_to_css(radius) -> str:
    if radius is None:
        return ""
    if isinstance(radius, (tuple, list)):
        return " ".join(px(r) for r in radius)
    return px(radius)


def size_to_css(size: IRSize) -> str:
    if size.type == "fixed":
        return px(size.value)
    if size.type == "fill":
        return "100%"
    if size.type == "hug":
        return "fit-content"
    return "auto"
