"""Style adapters：四個可互換的樣式 backend + themed decorator."""

from typing import Optional

from ..errors import Diagnostics
from ..ir import DesignTokens
from ..tokens import DEFAULT_TOKENS
from .base import CSSBuilder, CSSCollector, StyleAdapter, StyleOutput
from .css_modules import CSSModulesAdapter
from .styled import EmotionCSSAdapter, EmotionStyledAdapter, StyledComponentsAdapter
from .tailwind import TailwindAdapter
from .themed import ThemedAdapter
from .token_mapper import TokenMapper

ADAPTERS = {
    "tailwind": TailwindAdapter,
    "css-modules": CSSModulesAdapter,
    "styled-components": StyledComponentsAdapter,
    "emotion": EmotionStyledAdapter,
    "emotion-css": EmotionCSSAdapter,
}


def create_adapter(
    name: str,
    tokens: DesignTokens = DEFAULT_TOKENS,
    diagnostics: Optional[Diagnostics] = None,
    themed: bool = False,
):
    """依名稱建立 adapter；themed=True 時以 ThemedAdapter 包裝."""
    try:
        cls = ADAPTERS[name]
    except KeyError:
        valid = ", ".join(sorted(ADAPTERS))
        raise ValueError(f"unknown style strategy '{name}' (expected one of: {valid})") from None
    adapter = cls(tokens, diagnostics)
    if themed:
        return ThemedAdapter(adapter)
    return adapter


__all__ = [
    "ADAPTERS",
    "CSSBuilder",
    "CSSCollector",
    "CSSModulesAdapter",
    "EmotionCSSAdapter",
    "EmotionStyledAdapter",
    "StyleAdapter",
    "StyleOutput",
    "StyledComponentsAdapter",
    "TailwindAdapter",
    "ThemedAdapter",
    "TokenMapper",
    "create_adapter",
]
