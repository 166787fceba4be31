"""
Design tokens — 預設 token 表、合併、由 Figma Variables 抽取、JSON 載入

'primary/500' 之類的變數名稱 → colors['primary']['500']
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError
from .ir import DesignTokens, TypographyToken

logger = logging.getLogger(__name__)

DEFAULT_TOKENS = DesignTokens(
    colors={
        "white": {"DEFAULT": "#ffffff"},
        "black": {"DEFAULT": "#000000"},
        "gray": {
            "50": "#f9fafb",
            "100": "#f3f4f6",
            "200": "#e5e7eb",
            "300": "#d1d5db",
            "400": "#9ca3af",
            "500": "#6b7280",
            "600": "#4b5563",
            "700": "#374151",
            "800": "#1f2937",
            "900": "#111827",
        },
    },
    spacing={
        "px": 1, "0": 0, "0.5": 2, "1": 4, "1.5": 6, "2": 8, "2.5": 10, "3": 12,
        "3.5": 14, "4": 16, "5": 20, "6": 24, "7": 28, "8": 32, "9": 36, "10": 40,
        "12": 48, "14": 56, "16": 64, "20": 80, "24": 96,
    },
    border_radius={"none": 0, "sm": 2, "DEFAULT": 4, "md": 6, "lg": 8, "xl": 12, "2xl": 16, "full": 9999},
    shadows={
        "sm": "0 1px 2px 0 rgba(0,0,0,0.05)",
        "DEFAULT": "0 1px 3px 0 rgba(0,0,0,0.1),0 1px 2px -1px rgba(0,0,0,0.1)",
        "md": "0 4px 6px -1px rgba(0,0,0,0.1),0 2px 4px -2px rgba(0,0,0,0.1)",
        "lg": "0 10px 15px -3px rgba(0,0,0,0.1),0 4px 6px -4px rgba(0,0,0,0.1)",
        "xl": "0 20px 25px -5px rgba(0,0,0,0.1),0 8px 10px -6px rgba(0,0,0,0.1)",
    },
    breakpoints={"sm": 640, "md": 768, "lg": 1024, "xl": 1280, "2xl": 1536},
)


def default_tokens() -> DesignTokens:
    return DEFAULT_TOKENS


def merge_tokens(base: DesignTokens, override: DesignTokens) -> DesignTokens:
    """以 override 覆蓋 base（色彩以 group 為單位）."""
    return DesignTokens(
        colors={**base.colors, **override.colors},
        spacing={**base.spacing, **override.spacing},
        border_radius={**base.border_radius, **override.border_radius},
        shadows={**base.shadows, **override.shadows},
        breakpoints={**base.breakpoints, **override.breakpoints},
        typography={**base.typography, **override.typography},
    )


# ════════════════════════════════════════════════════════════
# Figma Variables → DesignTokens
# ════════════════════════════════════════════════════════════

def _slug(value: str) -> str:
    return "-".join(value.strip().lower().split())


def parse_token_path(variable_name: str, collection_name: str):
    """'primary/500' → ('primary', '500')；沒有 '/' 時以 collection 名稱為 group."""
    parts = [_slug(p) for p in variable_name.split("/")]
    if len(parts) >= 2:
        return "-".join(parts[:-1]), parts[-1]
    return _slug(collection_name), _slug(variable_name)


def _color_hex(value: Dict[str, float]) -> str:
    r, g, b = (int(round(value.get(c, 0) * 255)) for c in ("r", "g", "b"))
    alpha = value.get("a", 1)
    if alpha < 1:
        return f"#{r:02x}{g:02x}{b:02x}{int(round(alpha * 255)):02x}"
    return f"#{r:02x}{g:02x}{b:02x}"


def tokens_from_variables(response: dict) -> DesignTokens:
    """Figma Variables API 回應 → DesignTokens（只取各 collection 的預設 mode）."""
    colors: Dict[str, Dict[str, str]] = {}
    spacing: Dict[str, float] = {}
    radius: Dict[str, float] = {}
    breakpoints: Dict[str, int] = {}
    typography: Dict[str, Dict[str, Any]] = {}

    meta = response.get("meta", response)
    collections = meta.get("variableCollections") or {}
    for variable in (meta.get("variables") or {}).values():
        collection = collections.get(variable.get("variableCollectionId"))
        if not collection:
            continue
        value = (variable.get("valuesByMode") or {}).get(collection.get("defaultModeId"))
        name = variable.get("name", "")
        collection_name = collection.get("name", "")
        group, key = parse_token_path(name, collection_name)
        lowered = collection_name.lower()
        resolved = variable.get("resolvedType")

        if resolved == "COLOR" and isinstance(value, dict) and "r" in value:
            colors.setdefault(group, {})[key] = _color_hex(value)
        elif resolved == "FLOAT" and isinstance(value, (int, float)):
            if "spacing" in lowered or "space" in lowered:
                spacing[key] = value
            elif "radius" in lowered or "radius" in name.lower():
                radius[key] = value
            elif "breakpoint" in lowered or "screen" in lowered:
                breakpoints[key] = int(value)
            elif "font" in lowered or "typo" in lowered:
                entry = typography.setdefault(group, {})
                if "size" in key:
                    entry["font_size"] = value
                elif "weight" in key:
                    entry["font_weight"] = int(value)
                elif "line" in key or "height" in key:
                    entry["line_height"] = value
                elif "letter" in key or "spacing" in key:
                    entry["letter_spacing"] = value
        elif resolved == "STRING" and isinstance(value, str):
            if "font" in name.lower() or "family" in name.lower():
                typography.setdefault(group, {})["font_family"] = value

    logger.debug("extracted %d color group(s) from variables", len(colors))
    return DesignTokens(
        colors=colors,
        spacing=spacing,
        border_radius=radius,
        breakpoints=breakpoints,
        typography={
            name: TypographyToken(
                font_family=entry.get("font_family", "sans-serif"),
                font_size=entry.get("font_size", 16),
                font_weight=entry.get("font_weight", 400),
                line_height=entry.get("line_height", 1.5),
                letter_spacing=entry.get("letter_spacing", 0),
            )
            for name, entry in typography.items()
        },
    )


# ════════════════════════════════════════════════════════════
# JSON I/O
# ════════════════════════════════════════════════════════════

def tokens_from_dict(data: dict) -> DesignTokens:
    """外部 JSON 形狀（camelCase）→ DesignTokens."""
    if not isinstance(data, dict):
        raise ConfigError("token file must contain a JSON object")
    colors = data.get("colors") or {}
    for group, shades in colors.items():
        if not isinstance(shades, dict):
            raise ConfigError(f"colors.{group} must be an object of shade → color")
    return DesignTokens(
        colors={g: {str(k): v for k, v in s.items()} for g, s in colors.items()},
        spacing={str(k): v for k, v in (data.get("spacing") or {}).items()},
        border_radius={str(k): v for k, v in (data.get("borderRadius") or {}).items()},
        shadows=dict(data.get("shadows") or {}),
        breakpoints=dict(data.get("breakpoints") or {}),
        typography={
            name: TypographyToken(
                font_family=t.get("fontFamily", "sans-serif"),
                font_size=t.get("fontSize", 16),
                font_weight=t.get("fontWeight", 400),
                line_height=t.get("lineHeight", "auto"),
                letter_spacing=t.get("letterSpacing", 0),
            )
            for name, t in (data.get("typography") or {}).items()
        },
    )


def load_tokens(path: Optional[str] = None, merge_defaults: bool = True) -> DesignTokens:
    """讀取 token JSON；不指定路徑時回傳預設表."""
    if not path:
        return DEFAULT_TOKENS
    with open(Path(path), "r", encoding="utf-8") as f:
        loaded = tokens_from_dict(json.load(f))
    return merge_tokens(DEFAULT_TOKENS, loaded) if merge_defaults else loaded


def save_tokens(tokens: DesignTokens, path: str) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(tokens.to_dict(), f, indent=2, ensure_ascii=False)
