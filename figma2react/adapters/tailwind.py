"""
Tailwind adapter — IRNode → utility class 字串

策略：token 參照優先 → 容差內的近似 token → arbitrary value（bg-[#ff0000]）
"""

import json
from typing import List, Optional, Sequence

from ..errors import Diagnostics
from ..ir import DesignTokens, IRColor, IRGradient, IRImageFill, IRNode
from ..tokens import DEFAULT_TOKENS
from .base import StyleOutput
from .token_mapper import TokenMapper, collapse_box, color_to_rgba, fmt_num

FLEX_ALIGN = {
    "flex-start": "start",
    "flex-end": "end",
    "center": "center",
    "space-between": "between",
    "space-around": "around",
    "space-evenly": "evenly",
    "baseline": "baseline",
    "stretch": "stretch",
}

FONT_SIZES = {
    12: "xs", 14: "sm", 16: "base", 18: "lg", 20: "xl",
    24: "2xl", 30: "3xl", 36: "4xl", 48: "5xl", 60: "6xl", 72: "7xl",
}

FONT_WEIGHTS = {
    100: "thin", 200: "extralight", 300: "light", 400: "normal",
    500: "medium", 600: "semibold", 700: "bold", 800: "extrabold", 900: "black",
}

# line-height / font-size 比例
LEADING = {1.0: "none", 1.2: "tight", 1.4: "snug", 1.5: "normal", 1.6: "relaxed", 2.0: "loose"}


def _arb(value: float) -> str:
    return f"[{fmt_num(value)}px]"


class TailwindAdapter:
    name = "tailwind"

    def __init__(self, tokens: DesignTokens = DEFAULT_TOKENS, diagnostics: Optional[Diagnostics] = None):
        self.tokens = tokens
        self.mapper = TokenMapper(tokens, diagnostics)

    def generate_style(self, node: IRNode) -> StyleOutput:
        classes: List[str] = []
        classes += self._layout_classes(node)
        style = node.style
        if style.background is not None:
            classes += self._background_classes(style.background)
        if style.border:
            classes += self._border_classes(node)
        if style.border_radius is not None:
            classes += self._radius_classes(style.border_radius)
        if style.shadow:
            classes += self._shadow_classes(node)
        if style.opacity is not None:
            classes.append(f"opacity-{round(style.opacity * 100)}")
        if style.overflow == "hidden":
            classes.append("overflow-hidden")
        elif style.overflow in ("scroll", "auto"):
            classes.append("overflow-auto")
        if style.font:
            classes += self._font_classes(node)

        class_name = " ".join(c for c in classes if c)
        return StyleOutput(inline_props={"className": class_name} if class_name else {})

    def get_imports(self) -> List[str]:
        return []

    def requires_separate_file(self) -> bool:
        return False

    def generate_style_file(self, nodes: Sequence[IRNode]) -> Optional[str]:
        return None

    def reset(self) -> None:
        """class 字串不累積狀態."""

    # ─── token helpers ───

    def _spacing(self, prefix: str, value: float) -> str:
        key = self.mapper.spacing_token(value)
        return f"{prefix}-{key}" if key is not None else f"{prefix}-{_arb(value)}"

    def _color(self, prefix: str, color: IRColor) -> str:
        key = self.mapper.color_token(color)
        base = f"{prefix}-{key}" if key is not None else f"{prefix}-[{color.to_hex()}]"
        if color.a < 1:
            pct = round(color.a * 100)
            base += f"/{pct}" if pct % 5 == 0 else f"/[{color.a:.2f}]"
        return base

    # ─── Layout ───

    def _layout_classes(self, node: IRNode) -> List[str]:
        layout = node.layout
        classes = []
        if layout.display == "flex":
            classes.append("flex")
            if layout.direction == "column":
                classes.append("flex-col")
            if layout.wrap:
                classes.append("flex-wrap")
            if layout.justify:
                classes.append(f"justify-{FLEX_ALIGN.get(layout.justify, layout.justify)}")
            if layout.align:
                classes.append(f"items-{FLEX_ALIGN.get(layout.align, layout.align)}")
        elif layout.display == "none":
            classes.append("hidden")
        elif layout.display == "grid":
            classes.append("grid")

        if layout.position == "absolute":
            classes.append("absolute")
            for side in ("top", "right", "bottom", "left"):
                value = getattr(layout, side)
                if value is not None:
                    classes.append(self._spacing(side, value))
        elif layout.position == "relative":
            classes.append("relative")

        if layout.gap is not None:
            classes.append(self._spacing("gap", layout.gap))
        if layout.row_gap is not None:
            classes.append(self._spacing("gap-y", layout.row_gap))
        if layout.column_gap is not None:
            classes.append(self._spacing("gap-x", layout.column_gap))

        if layout.padding:
            box = collapse_box(layout.padding)
            if len(box) == 1:
                classes.append(self._spacing("p", box[0]))
            elif len(box) == 2:
                classes += [self._spacing("py", box[0]), self._spacing("px", box[1])]
            else:
                classes += [self._spacing(p, v) for p, v in zip(("pt", "pr", "pb", "pl"), box)]

        for prefix, size in (("w", layout.width), ("h", layout.height)):
            if size.type == "fill":
                classes.append(f"{prefix}-full")
            elif size.type == "hug":
                classes.append(f"{prefix}-fit")
            elif size.type == "fixed":
                classes.append(self._spacing(prefix, size.value))
        return classes

    # ─── Background ───

    def _background_classes(self, background) -> List[str]:
        if isinstance(background, IRColor):
            return [self._color("bg", background)]
        if isinstance(background, IRGradient):
            direction = self.mapper.gradient_direction(background)
            if direction is None:
                return ["[background:var(--bg-gradient)]"]
            start, end = background.stops[0].color, background.stops[1].color
            return [f"bg-gradient-to-{direction}", self._color("from", start), self._color("to", end)]
        if isinstance(background, IRImageFill):
            size = "bg-contain" if background.scale_mode == "fit" else "bg-cover"
            repeat = "bg-repeat" if background.scale_mode == "tile" else "bg-no-repeat"
            return [size, "bg-center", repeat]
        return []

    # ─── Border / Radius / Shadow ───

    def _border_classes(self, node: IRNode) -> List[str]:
        border = node.style.border
        width = "border" if border.width == 1 else f"border-{_arb(border.width)}"
        classes = [width, f"border-{border.style}", self._color("border", border.color)]
        if border.position == "inside":
            classes.append("box-border")
        elif border.position == "outside":
            classes.append("box-content")
        return classes

    def _radius_classes(self, radius) -> List[str]:
        if isinstance(radius, (tuple, list)):
            self.mapper.diagnostics.fallback("per-corner radius")
            return ["rounded-[" + "_".join(f"{fmt_num(r)}px" for r in radius) + "]"]
        key = self.mapper.radius_token(radius)
        if key is None:
            return [f"rounded-{_arb(radius)}"]
        return ["rounded" if key == "DEFAULT" else f"rounded-{key}"]

    def _shadow_classes(self, node: IRNode) -> List[str]:
        shadows = node.style.shadow
        preset = self.mapper.shadow_preset(shadows)
        if preset is not None:
            return ["shadow" if preset == "DEFAULT" else f"shadow-{preset}"]
        layers = []
        for s in shadows:
            inset = "inset_" if s.type == "inner" else ""
            color = color_to_rgba(s.color).replace(", ", ",")
            layers.append(
                f"{inset}{fmt_num(s.x)}px_{fmt_num(s.y)}px_{fmt_num(s.blur)}px_{fmt_num(s.spread)}px_{color}"
            )
        return [f"shadow-[{','.join(layers)}]"]

    # ─── Font ───

    def _font_classes(self, node: IRNode) -> List[str]:
        font = node.style.font
        classes = []
        size_key = FONT_SIZES.get(font.size)
        classes.append(f"text-{size_key}" if size_key else f"text-{_arb(font.size)}")
        weight = FONT_WEIGHTS.get(font.weight)
        classes.append(f"font-{weight}" if weight else f"font-[{font.weight}]")
        if font.align:
            classes.append(f"text-{font.align}")
        if font.line_height != "auto":
            ratio = round(font.line_height / font.size, 1)
            leading = LEADING.get(ratio)
            classes.append(f"leading-{leading}" if leading else f"leading-{_arb(font.line_height)}")
        if font.letter_spacing:
            classes.append(f"tracking-[{font.letter_spacing / font.size:.3f}em]")
        if font.decoration:
            classes.append("underline" if font.decoration == "underline" else "line-through")
        if font.case:
            classes.append(font.case)
        if font.color:
            classes.append(self._color("text", font.color))
        return classes


def generate_tailwind_extend(tokens: DesignTokens) -> str:
    """tokens → tailwind.config 的 theme.extend 片段（CommonJS）."""
    data = tokens.to_dict()
    extend = {
        "colors": data["colors"],
        "spacing": {k: f"{fmt_num(v)}px" for k, v in data["spacing"].items()},
        "borderRadius": {k: f"{fmt_num(v)}px" for k, v in data["borderRadius"].items()},
        "boxShadow": data["shadows"],
        "screens": {k: f"{v}px" for k, v in data["breakpoints"].items()},
    }
    return "module.exports = " + json.dumps({"theme": {"extend": extend}}, indent=2) + ";\n"
