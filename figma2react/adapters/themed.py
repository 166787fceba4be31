"""
Themed decorator — 包住任一 CSS-in-JS / 外部樣式表 adapter

與被包的 adapter 只差在兩處：
  get_imports()   多出 theme 相關 import
  token 渲染      theme 路徑（或 CSS 變數），而非直接輸出原始值
"""

from typing import List, Optional, Sequence

from ..ir import DesignTokens, IRNode
from .base import CSSVarRenderer, StyleOutput, ThemePathRenderer, css_var_name

_THEME_TYPE = {
    "styled-components": ("DefaultTheme", "import type { DefaultTheme } from 'styled-components';"),
    "emotion": ("Theme", "import type { Theme } from '@emotion/react';"),
    "emotion-css": ("Theme", "import type { Theme } from '@emotion/react';"),
}


class ThemedAdapter:

    def __init__(self, base, tokens_css_path: str = "../theme/tokens.css"):
        syntax = getattr(base, "token_syntax", None)
        if syntax is None:
            raise ValueError(f"adapter '{base.name}' has no themed variant")
        self.base = base
        self.name = f"{base.name}-themed"
        self.tokens_css_path = tokens_css_path
        if syntax == "css":
            self.renderer = CSSVarRenderer()
        elif syntax == "emotion-css":
            type_name = _THEME_TYPE[base.name][0]
            self.renderer = ThemePathRenderer("${{{expr}}}")
            self.renderer.theme_arg = f"theme: {type_name}"
        else:
            type_name = _THEME_TYPE.get(base.name, _THEME_TYPE["styled-components"])[0]
            self.renderer = ThemePathRenderer(f"${{{{({{{{ theme }}}}: {{{{ theme: {type_name} }}}}) => {{expr}}}}}}")

    # ─── delegated operations ───

    def generate_style(self, node: IRNode) -> StyleOutput:
        return self.base.generate_style(node, self.renderer)

    def get_imports(self) -> List[str]:
        imports = list(self.base.get_imports())
        if self.base.token_syntax == "css":
            imports.append(f"import '{self.tokens_css_path}';")
        else:
            imports.append(_THEME_TYPE.get(self.base.name, _THEME_TYPE["styled-components"])[1])
        return imports

    def requires_separate_file(self) -> bool:
        return self.base.requires_separate_file()

    def generate_style_file(self, nodes: Sequence[IRNode]) -> Optional[str]:
        return self.base.generate_style_file(nodes, self.renderer)

    def reset(self) -> None:
        self.base.reset()

    @property
    def collector(self):
        return self.base.collector

    @property
    def mapper(self):
        return self.base.mapper

    @property
    def component_name(self) -> str:
        return getattr(self.base, "component_name", "")

    @component_name.setter
    def component_name(self, value: str) -> None:
        if hasattr(self.base, "component_name"):
            self.base.component_name = value

    def collected_definitions(self) -> str:
        # 外部樣式表 backend 的 rule 寫在 .module.css，不放進元件檔
        definitions = getattr(self.base, "collected_definitions", None)
        return definitions() if definitions is not None else ""

    # ─── theme file ───

    def generate_theme_file(self, tokens: DesignTokens) -> str:
        """CSS 變數版 → :root { --color-... }；theme 物件版 → theme.ts."""
        if self.base.token_syntax == "css":
            return generate_tokens_css(tokens)
        return generate_theme_ts(tokens)


def generate_tokens_css(tokens: DesignTokens) -> str:
    lines = [":root {"]
    for group, shades in tokens.colors.items():
        for shade, value in shades.items():
            suffix = "" if shade == "DEFAULT" else f"-{shade}"
            lines.append(f"  --{css_var_name(f'color-{group}{suffix}')}: {value};")
    for key, value in tokens.spacing.items():
        lines.append(f"  --{css_var_name(f'spacing-{key}')}: {value}px;")
    for key, value in tokens.border_radius.items():
        name = "radius" if key == "DEFAULT" else f"radius-{key}"
        lines.append(f"  --{css_var_name(name)}: {value}px;")
    for key, value in tokens.shadows.items():
        name = "shadow" if key == "DEFAULT" else f"shadow-{key}"
        lines.append(f"  --{css_var_name(name)}: {value};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _ts_object(mapping: dict, indent: int) -> List[str]:
    pad = "  " * indent
    lines = []
    for key, value in mapping.items():
        ts_key = key if str(key).isidentifier() else f"'{key}'"
        if isinstance(value, dict):
            lines.append(f"{pad}{ts_key}: {{")
            lines.extend(_ts_object(value, indent + 1))
            lines.append(f"{pad}}},")
        elif isinstance(value, str):
            lines.append(f"{pad}{ts_key}: '{value}',")
        else:
            lines.append(f"{pad}{ts_key}: {value},")
    return lines


def generate_theme_ts(tokens: DesignTokens) -> str:
    data = tokens.to_dict()
    body = {
        "colors": data["colors"],
        "spacing": {k: f"{v}px" for k, v in data["spacing"].items()},
        "borderRadius": {k: f"{v}px" for k, v in data["borderRadius"].items()},
        "shadows": data["shadows"],
        "breakpoints": {k: f"{v}px" for k, v in data["breakpoints"].items()},
    }
    lines = ["export const theme = {"]
    lines.extend(_ts_object(body, 1))
    lines.append("} as const;")
    lines.append("")
    lines.append("export type AppTheme = typeof theme;")
    return "\n".join(lines) + "\n"
