"""
Style Adapter 介面與共用元件

每個 adapter 實作四個操作：
  generate_style(node)        → StyleOutput
  get_imports()               → 檔案頂部 import（依序、每檔一次）
  requires_separate_file()    → 只有外部樣式表 backend 為 True
  generate_style_file(nodes)  → 外部樣式表內容或 None
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

from ..ir import IRColor, IRGradient, IRImageFill, IRNode
from .token_mapper import (
    TokenMapper,
    background_to_css,
    collapse_box,
    color_to_css,
    fmt_num,
    px,
    radius_to_css,
    shadow_to_css,
    size_to_css,
)


@dataclass
class StyleOutput:
    inline_props: Dict[str, str] = field(default_factory=dict)
    # class name → CSS body（外部樣式表用）
    style_rules: Optional[Dict[str, str]] = None
    # CSS-in-JS 定義，如 "const Card = styled.div`...`;"
    styled_definition: Optional[str] = None
    # 取代 node.tag 的元素名稱（styled 元件）
    element: Optional[str] = None


class StyleAdapter(Protocol):
    name: str

    def generate_style(self, node: IRNode) -> StyleOutput: ...

    def get_imports(self) -> List[str]: ...

    def requires_separate_file(self) -> bool: ...

    def generate_style_file(self, nodes: Sequence[IRNode]) -> Optional[str]: ...


# ════════════════════════════════════════════════════════════
# Token rendering
# ════════════════════════════════════════════════════════════

class LiteralRenderer:
    """token 命中時仍輸出原始值."""

    def render(self, category: str, path: Tuple[str, ...], raw: str) -> str:
        return raw


class CSSVarRenderer:
    """colors / gray / 500 → var(--color-gray-500)."""

    _PREFIX = {"colors": "color", "spacing": "spacing", "borderRadius": "radius", "shadows": "shadow"}

    def render(self, category: str, path: Tuple[str, ...], raw: str) -> str:
        parts = [p for p in path if p != "DEFAULT"]
        name = "-".join([self._PREFIX.get(category, category)] + parts)
        return f"var(--{css_var_name(name)})"


class ThemePathRenderer:
    """colors / gray / 500 → ${({ theme }) => theme.colors.gray['500']}."""

    # 非 None 時，定義需包成 (theme) => css`...`
    theme_arg = None

    def __init__(self, template: str = "${{({{ theme }}) => {expr}}}"):
        self.template = template

    def render(self, category: str, path: Tuple[str, ...], raw: str) -> str:
        return self.template.format(expr=theme_access(category, path))


def css_var_name(name: str) -> str:
    return re.sub(r"[^0-9A-Za-z_-]", "_", name)


def theme_access(category: str, path: Tuple[str, ...]) -> str:
    access = f"theme.{category}"
    for i, part in enumerate(path):
        if i == len(path) - 1 or not part.isidentifier():
            access += f"['{part}']"
        else:
            access += f".{part}"
    return access


# ════════════════════════════════════════════════════════════
# Shared CSS declaration builder
# ════════════════════════════════════════════════════════════

class CSSBuilder:
    """IRNode → [(property, value)]；token 命中時交給 renderer 決定輸出形式."""

    def __init__(self, mapper: TokenMapper, renderer=None):
        self.mapper = mapper
        self.renderer = renderer or LiteralRenderer()

    # ─── token helpers ───

    def color(self, color: IRColor) -> str:
        raw = color_to_css(color)
        key = self.mapper.color_token(color)
        if key is None:
            return raw
        return self.renderer.render("colors", self._color_path(key), raw)

    def _color_path(self, key: str) -> Tuple[str, ...]:
        if "." in key:
            parts = key.split(".")
            if parts[0] == "colors":
                parts = parts[1:]
            return tuple(parts)
        for group, shades in self.mapper.tokens.colors.items():
            for shade in shades:
                if key == (group if shade == "DEFAULT" else f"{group}-{shade}"):
                    return (group, shade)
        return tuple(key.rsplit("-", 1))

    def spacing(self, value: float) -> str:
        key = self.mapper.spacing_token(value)
        if key is None:
            return px(value)
        return self.renderer.render("spacing", (key,), px(value))

    def radius(self, value) -> str:
        if isinstance(value, (tuple, list)):
            self.mapper.diagnostics.fallback("per-corner radius")
            return radius_to_css(value)
        key = self.mapper.radius_token(value)
        if key is None:
            return px(value)
        return self.renderer.render("borderRadius", (key,), px(value))

    # ─── declarations ───

    def declarations(self, node: IRNode) -> List[Tuple[str, str]]:
        layout, style = node.layout, node.style
        decls: List[Tuple[str, str]] = []

        if layout.display == "flex":
            decls.append(("display", "flex"))
            decls.append(("flex-direction", layout.direction or "row"))
            if layout.wrap:
                decls.append(("flex-wrap", "wrap"))
            if layout.justify and layout.justify != "flex-start":
                decls.append(("justify-content", layout.justify))
            if layout.align and layout.align != "flex-start":
                decls.append(("align-items", layout.align))
        elif layout.display == "none":
            decls.append(("display", "none"))

        if layout.position != "static":
            decls.append(("position", layout.position))
            for side in ("top", "right", "bottom", "left"):
                value = getattr(layout, side)
                if value is not None:
                    decls.append((side, px(value)))

        if layout.gap is not None:
            decls.append(("gap", self.spacing(layout.gap)))
        if layout.row_gap is not None:
            decls.append(("row-gap", self.spacing(layout.row_gap)))
        if layout.column_gap is not None:
            decls.append(("column-gap", self.spacing(layout.column_gap)))
        if layout.padding:
            decls.append(("padding", " ".join(self.spacing(v) for v in collapse_box(layout.padding))))

        for dimension in ("width", "height"):
            size = getattr(layout, dimension)
            if size.type != "auto":
                decls.append((dimension, size_to_css(size)))

        background = style.background
        if isinstance(background, IRColor):
            decls.append(("background-color", self.color(background)))
        elif isinstance(background, (IRGradient, IRImageFill)):
            if isinstance(background, IRGradient):
                self.mapper.diagnostics.fallback(f"{background.type} gradient")
            decls.append(("background", background_to_css(background)))

        if style.border:
            border = style.border
            decls.append(("border", f"{px(border.width)} {border.style} {self.color(border.color)}"))
            if border.position == "inside":
                decls.append(("box-sizing", "border-box"))
            elif border.position == "outside":
                decls.append(("box-sizing", "content-box"))

        if style.border_radius is not None:
            decls.append(("border-radius", self.radius(style.border_radius)))

        if style.shadow:
            raw = shadow_to_css(style.shadow)
            preset = self.mapper.shadow_preset(style.shadow)
            value = raw if preset is None else self.renderer.render("shadows", (preset,), raw)
            decls.append(("box-shadow", value))

        if style.opacity is not None:
            decls.append(("opacity", fmt_num(style.opacity)))
        if style.overflow:
            decls.append(("overflow", style.overflow))

        font = style.font
        if font:
            decls.append(("font-family", f"'{font.family}', sans-serif"))
            decls.append(("font-size", px(font.size)))
            decls.append(("font-weight", str(font.weight)))
            if font.line_height != "auto":
                decls.append(("line-height", px(font.line_height)))
            if font.letter_spacing:
                decls.append(("letter-spacing", px(font.letter_spacing)))
            if font.align:
                decls.append(("text-align", font.align))
            if font.decoration:
                decls.append(("text-decoration", font.decoration))
            if font.case:
                decls.append(("text-transform", font.case))
            if font.color:
                decls.append(("color", self.color(font.color)))
        return decls

    def body(self, node: IRNode, indent: str = "  ") -> str:
        return "\n".join(f"{indent}{prop}: {value};" for prop, value in self.declarations(node))


# ════════════════════════════════════════════════════════════
# Per-run accumulator
# ════════════════════════════════════════════════════════════

class CSSCollector:
    """一次轉換中產生的樣式定義（node id → 名稱 / 定義）。

    重複使用 adapter 做下一次轉換前必須呼叫 reset()。
    """

    def __init__(self):
        self._names: Dict[str, str] = {}
        self._definitions: Dict[str, str] = {}
        self._used: Dict[str, int] = {}
        self._taken: Set[str] = set()

    def name_for(self, node_id: str, base: str) -> str:
        if node_id in self._names:
            return self._names[node_id]
        count = self._used.get(base, 0) + 1
        name = base if count == 1 else f"{base}{count}"
        # 後綴可能撞到字面上就叫 title2 的節點
        while name in self._taken:
            count += 1
            name = f"{base}{count}"
        self._used[base] = count
        self._taken.add(name)
        self._names[node_id] = name
        return name

    def add(self, name: str, definition: str) -> None:
        self._definitions.setdefault(name, definition)

    def definitions(self) -> List[str]:
        return list(self._definitions.values())

    def items(self) -> List[Tuple[str, str]]:
        return list(self._definitions.items())

    def reset(self) -> None:
        self._names.clear()
        self._definitions.clear()
        self._used.clear()
        self._taken.clear()

    def __len__(self) -> int:
        return len(self._definitions)
