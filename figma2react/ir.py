"""
IR 資料模型 — 與任何樣式方案無關的中介設計節點樹

Builder 產生一次，之後 adapter / markup builder 只讀取。
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

NODE_KINDS = ("container", "text", "image", "icon", "component", "instance", "divider")
SIZE_TYPES = ("fixed", "fill", "hug", "auto")
POSITIONS = ("static", "relative", "absolute")
PROP_TYPES = ("string", "boolean", "enum", "node")


# ════════════════════════════════════════════════════════════
# Layout
# ════════════════════════════════════════════════════════════

@dataclass
class IRSize:
    """單軸尺寸策略；value 只在 fixed 時存在."""
    type: str = "auto"
    value: Optional[float] = None

    def __post_init__(self) -> None:
        if self.type not in SIZE_TYPES:
            raise ValueError(f"unknown size type: {self.type!r}")
        if (self.type == "fixed") != (self.value is not None):
            raise ValueError(f"IRSize value must be set iff type is fixed (got {self.type}, {self.value})")

    @classmethod
    def fixed(cls, value: float) -> "IRSize":
        return cls("fixed", value)

    @classmethod
    def fill(cls) -> "IRSize":
        return cls("fill")

    @classmethod
    def hug(cls) -> "IRSize":
        return cls("hug")

    @classmethod
    def auto(cls) -> "IRSize":
        return cls("auto")


@dataclass
class IRLayout:
    display: str = "block"
    position: str = "static"
    direction: Optional[str] = None
    wrap: Optional[bool] = None
    gap: Optional[float] = None
    row_gap: Optional[float] = None
    column_gap: Optional[float] = None
    padding: Optional[Tuple[float, float, float, float]] = None
    justify: Optional[str] = None
    align: Optional[str] = None
    width: IRSize = field(default_factory=IRSize.auto)
    height: IRSize = field(default_factory=IRSize.auto)
    top: Optional[float] = None
    right: Optional[float] = None
    bottom: Optional[float] = None
    left: Optional[float] = None

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"unknown position: {self.position!r}")
        offsets = (self.top, self.right, self.bottom, self.left)
        if self.position != "absolute" and any(v is not None for v in offsets):
            raise ValueError("offsets are only allowed on absolutely positioned nodes")


# ════════════════════════════════════════════════════════════
# Style
# ════════════════════════════════════════════════════════════

@dataclass
class IRColor:
    r: int
    g: int
    b: int
    a: float = 1.0
    token_ref: Optional[str] = None

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


@dataclass
class IRGradientStop:
    color: IRColor
    position: float


@dataclass
class IRGradient:
    type: str  # linear | radial | angular
    stops: List[IRGradientStop] = field(default_factory=list)
    angle: Optional[float] = None


@dataclass
class IRImageFill:
    url: str
    scale_mode: str = "fill"  # fill | fit | crop | tile


Background = Union[IRColor, IRGradient, IRImageFill]


@dataclass
class IRBorder:
    width: float
    color: IRColor
    style: str = "solid"
    position: str = "center"  # inside | outside | center


@dataclass
class IRShadow:
    type: str  # drop | inner
    x: float
    y: float
    blur: float
    spread: float = 0
    color: IRColor = field(default_factory=lambda: IRColor(0, 0, 0, 0.15))


@dataclass
class IRFont:
    family: str
    size: float
    weight: int = 400
    line_height: Union[float, str] = "auto"
    letter_spacing: float = 0
    align: Optional[str] = None
    decoration: Optional[str] = None
    case: Optional[str] = None
    color: Optional[IRColor] = None


@dataclass
class IRStyle:
    background: Optional[Background] = None
    border: Optional[IRBorder] = None
    border_radius: Optional[Union[float, Tuple[float, float, float, float]]] = None
    shadow: List[IRShadow] = field(default_factory=list)
    opacity: Optional[float] = None
    overflow: Optional[str] = None
    font: Optional[IRFont] = None

    def is_empty(self) -> bool:
        return not any((
            self.background, self.border, self.border_radius is not None, self.shadow,
            self.opacity is not None, self.overflow, self.font,
        ))


# ════════════════════════════════════════════════════════════
# Content / Props / Meta
# ════════════════════════════════════════════════════════════

@dataclass
class IRContent:
    text: str
    is_prop_candidate: bool = False
    prop_name: Optional[str] = None


@dataclass
class IRPropDef:
    name: str
    type: str = "string"
    values: Optional[List[str]] = None
    default_value: Optional[Union[str, bool]] = None

    def __post_init__(self) -> None:
        if self.type not in PROP_TYPES:
            raise ValueError(f"unknown prop type: {self.type!r}")
        if self.type == "enum" and not self.values:
            raise ValueError(f"enum prop '{self.name}' needs at least one value")


@dataclass
class IRMeta:
    is_component_root: bool = False
    is_variant_container: bool = False
    is_repeating: bool = False
    has_absolute_children: bool = False
    warnings: List[str] = field(default_factory=list)
    figma_styles: Dict[str, str] = field(default_factory=dict)
    component_id: Optional[str] = None
    overrides: Dict[str, str] = field(default_factory=dict)
    repeat_indices: List[int] = field(default_factory=list)


@dataclass
class IRNode:
    id: str
    source_id: str
    kind: str
    tag: str
    name: str
    layout: IRLayout = field(default_factory=IRLayout)
    style: IRStyle = field(default_factory=IRStyle)
    content: Optional[IRContent] = None
    children: List["IRNode"] = field(default_factory=list)
    props: Optional[List[IRPropDef]] = None
    meta: IRMeta = field(default_factory=IRMeta)

    def __post_init__(self) -> None:
        if self.kind not in NODE_KINDS:
            raise ValueError(f"unknown node kind: {self.kind!r}")

    def walk(self) -> Iterator["IRNode"]:
        """Pre-order 走訪（含自己）."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        return _prune(asdict(self))


def _prune(value):
    if isinstance(value, dict):
        return {k: _prune(v) for k, v in value.items() if v is not None and v != [] and v != {}}
    if isinstance(value, (list, tuple)):
        return [_prune(v) for v in value]
    return value


# ════════════════════════════════════════════════════════════
# Design Tokens
# ════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TypographyToken:
    font_family: str
    font_size: float
    font_weight: int = 400
    line_height: Union[float, str] = "auto"
    letter_spacing: float = 0


@dataclass(frozen=True)
class DesignTokens:
    """唯讀 token 查找表：colors[group][shade] 與扁平的 spacing / radius / shadow / breakpoint."""
    colors: Dict[str, Dict[str, str]] = field(default_factory=dict)
    spacing: Dict[str, float] = field(default_factory=dict)
    border_radius: Dict[str, float] = field(default_factory=dict)
    shadows: Dict[str, str] = field(default_factory=dict)
    breakpoints: Dict[str, int] = field(default_factory=dict)
    typography: Dict[str, TypographyToken] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """輸出為外部 JSON 形狀（camelCase key）."""
        return {
            "colors": {g: dict(s) for g, s in self.colors.items()},
            "spacing": dict(self.spacing),
            "borderRadius": dict(self.border_radius),
            "shadows": dict(self.shadows),
            "breakpoints": dict(self.breakpoints),
            "typography": {
                name: {
                    "fontFamily": t.font_family,
                    "fontSize": t.font_size,
                    "fontWeight": t.font_weight,
                    "lineHeight": t.line_height,
                    "letterSpacing": t.letter_spacing,
                }
                for name, t in self.typography.items()
            },
        }
