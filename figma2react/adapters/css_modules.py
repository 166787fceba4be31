"""
CSS Modules adapter — className={styles.x} + 外部 {Name}.module.css

唯一需要額外樣式檔的 backend。
"""

from typing import List, Optional, Sequence

from ..errors import Diagnostics
from ..ir import DesignTokens, IRNode
from ..naming import to_css_class_name
from ..tokens import DEFAULT_TOKENS
from .base import CSSBuilder, CSSCollector, StyleOutput
from .token_mapper import TokenMapper


class CSSModulesAdapter:
    name = "css-modules"
    token_syntax = "css"

    def __init__(
        self,
        tokens: DesignTokens = DEFAULT_TOKENS,
        diagnostics: Optional[Diagnostics] = None,
        collector: Optional[CSSCollector] = None,
        styles_import: str = "./{name}.module.css",
    ):
        self.tokens = tokens
        self.mapper = TokenMapper(tokens, diagnostics)
        self.collector = collector if collector is not None else CSSCollector()
        self.styles_import = styles_import
        self.component_name = "Component"

    def generate_style(self, node: IRNode, renderer=None) -> StyleOutput:
        body = CSSBuilder(self.mapper, renderer).body(node)
        if not body:
            return StyleOutput()
        class_name = self.collector.name_for(node.id, to_css_class_name(node.name))
        self.collector.add(class_name, f".{class_name} {{\n{body}\n}}")
        return StyleOutput(
            inline_props={"className": f"{{styles.{class_name}}}"},
            style_rules={class_name: body},
        )

    def get_imports(self) -> List[str]:
        path = self.styles_import.format(name=self.component_name)
        return [f"import styles from '{path}';"]

    def requires_separate_file(self) -> bool:
        return True

    def generate_style_file(self, nodes: Sequence[IRNode], renderer=None) -> Optional[str]:
        """markup 已渲染過時直接輸出累積的 rule；否則先走訪 nodes."""
        if not len(self.collector):
            for root in nodes:
                for node in root.walk():
                    self.generate_style(node, renderer)
        blocks = self.collector.definitions()
        return "\n\n".join(blocks) + "\n" if blocks else ""

    def reset(self) -> None:
        self.collector.reset()
