"""
CSS-in-JS adapters

  StyledComponentsAdapter  const StyledCard = styled.div`...`;      (styled-components)
  EmotionStyledAdapter     同上，import 自 @emotion/styled
  EmotionCSSAdapter        const cardStyles = css`...`;  + css={cardStyles}

產生的定義累積在 CSSCollector（每次轉換一份），由 generator 取出放在元件上方。
"""

from typing import List, Optional, Sequence

from ..errors import Diagnostics
from ..ir import DesignTokens, IRNode
from ..naming import to_camel_case, to_pascal_case
from ..tokens import DEFAULT_TOKENS
from .base import CSSBuilder, CSSCollector, StyleOutput
from .token_mapper import TokenMapper


class _CSSInJSAdapter:
    name = ""
    token_syntax = "styled"

    def __init__(
        self,
        tokens: DesignTokens = DEFAULT_TOKENS,
        diagnostics: Optional[Diagnostics] = None,
        collector: Optional[CSSCollector] = None,
    ):
        self.tokens = tokens
        self.mapper = TokenMapper(tokens, diagnostics)
        self.collector = collector if collector is not None else CSSCollector()

    def requires_separate_file(self) -> bool:
        return False

    def generate_style_file(self, nodes: Sequence[IRNode], renderer=None) -> Optional[str]:
        return None

    def collected_definitions(self) -> str:
        return "\n\n".join(self.collector.definitions())

    def reset(self) -> None:
        self.collector.reset()


class StyledComponentsAdapter(_CSSInJSAdapter):
    name = "styled-components"
    package = "styled-components"

    def generate_style(self, node: IRNode, renderer=None) -> StyleOutput:
        if node.kind == "instance":
            return StyleOutput()
        body = CSSBuilder(self.mapper, renderer).body(node)
        if not body:
            return StyleOutput()
        element = self.collector.name_for(node.id, f"Styled{to_pascal_case(node.name) or 'Node'}")
        definition = f"const {element} = styled.{node.tag}`\n{body}\n`;"
        self.collector.add(element, definition)
        return StyleOutput(styled_definition=definition, element=element)

    def get_imports(self) -> List[str]:
        return [f"import styled from '{self.package}';"]


class EmotionStyledAdapter(StyledComponentsAdapter):
    name = "emotion"
    package = "@emotion/styled"


class EmotionCSSAdapter(_CSSInJSAdapter):
    name = "emotion-css"
    token_syntax = "emotion-css"

    def generate_style(self, node: IRNode, renderer=None) -> StyleOutput:
        if node.kind == "instance":
            return StyleOutput()
        body = CSSBuilder(self.mapper, renderer).body(node)
        if not body:
            return StyleOutput()
        var_name = self.collector.name_for(node.id, f"{to_camel_case(node.name) or 'node'}Styles")
        if getattr(renderer, "theme_arg", None):
            definition = f"const {var_name} = ({renderer.theme_arg}) => css`\n{body}\n`;"
        else:
            definition = f"const {var_name} = css`\n{body}\n`;"
        self.collector.add(var_name, definition)
        return StyleOutput(inline_props={"css": f"{{{var_name}}}"}, styled_definition=definition)

    def get_imports(self) -> List[str]:
        return [
            "/** @jsxImportSource @emotion/react */",
            "import { css } from '@emotion/react';",
        ]
