"""
ir_builder.py — Figma node tree → IR tree

  ✅ Layout / Style / Classifier 三個 normalizer 組合
  ✅ 手動排版容器 → 子節點 absolute + parent 警告
  ✅ [prop:name] 文字 → prop 候選
  ✅ COMPONENT_SET → variant props
  ✅ INSTANCE → registry lookup key + overrides
  ✅ 單一節點失敗不影響兄弟節點（placeholder + 診斷）
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from .classifier import classify
from .errors import NODE_NOT_FOUND, PARSE_FAILED, Diagnostics
from .ir import IRContent, IRMeta, IRNode, IRPropDef
from .layout_parser import has_auto_layout, parse_layout
from .naming import sanitize_name, should_ignore, to_camel_case
from .patterns import apply_patterns
from .style_parser import parse_style
from .variants import ComponentInfo, extract_variant_props, parse_instance, parse_prop_marker

logger = logging.getLogger(__name__)

LAYOUT_REVIEW = "LAYOUT_REVIEW"
INTERACTION_HINT = "INTERACTION_HINT"

MAX_PROP_TEXT_LENGTH = 50

_INTERACTIVE_RE = re.compile(
    r"\b(dropdown|modal|dialog|toggle|switch|tabs?|accordion|tooltip|popover|menu|carousel)\b", re.I
)
_LEAF_KINDS = ("text", "image", "icon", "instance", "divider")
_PROPERTY_TYPES = {"TEXT": "string", "BOOLEAN": "boolean", "INSTANCE_SWAP": "node", "VARIANT": "enum"}


def make_node_id(source_id: str) -> str:
    """'12:34' → 'f-12-34'."""
    return "f-" + (source_id or "unknown").replace(":", "-").replace(";", "_")


def find_node_by_id(node: dict, node_id: str) -> Optional[dict]:
    if node.get("id") == node_id:
        return node
    for child in node.get("children") or []:
        found = find_node_by_id(child, node_id)
        if found is not None:
            return found
    return None


class IRBuilder:

    def __init__(
        self,
        diagnostics: Optional[Diagnostics] = None,
        registry: Optional[Dict[str, ComponentInfo]] = None,
        detect_patterns: bool = True,
    ):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.registry = registry or {}
        self.detect_patterns = detect_patterns
        self.node_count = 0

    def build(self, raw_tree: dict) -> IRNode:
        self.node_count = 0
        root = self._convert_node(raw_tree, parent=None)
        if self.detect_patterns:
            apply_patterns(root)
        logger.debug("built IR for %s (%d nodes)", root.name, self.node_count)
        return root

    def build_by_id(self, document: dict, node_id: str) -> Optional[IRNode]:
        raw = find_node_by_id(document, node_id)
        if raw is None:
            self.diagnostics.warn(NODE_NOT_FOUND, f"node {node_id} not found in document", node_id)
            return None
        return self.build(raw)

    # ════════════════════════════════════════════════════════════
    # Node Conversion
    # ════════════════════════════════════════════════════════════

    def _convert_node(self, raw: dict, parent: Optional[dict]) -> IRNode:
        self.node_count += 1
        source_id = raw.get("id", "")
        kind, tag = classify(raw)
        fallback_name = kind.capitalize()

        node = IRNode(
            id=make_node_id(source_id),
            source_id=source_id,
            kind=kind,
            tag=tag,
            name=sanitize_name(raw.get("name", ""), fallback=fallback_name),
            layout=parse_layout(raw, parent),
            style=parse_style(raw, self.diagnostics),
            meta=IRMeta(figma_styles=self._style_refs(raw)),
        )

        # ─── Per-kind payload ───
        if kind == "text":
            node.content = self._text_content(raw, node)
        elif kind == "component":
            node.meta.is_component_root = True
            if raw.get("type") == "COMPONENT_SET":
                node.meta.is_variant_container = True
                node.props = extract_variant_props(raw)
        elif kind == "instance":
            component_id, overrides = parse_instance(raw)
            node.meta.component_id = component_id
            node.meta.overrides = overrides
            info = self.registry.get(component_id)
            if info is not None:
                node.name = info.name

        if _INTERACTIVE_RE.search(raw.get("name", "")):
            self._warn(node, INTERACTION_HINT, "interactive behavior likely needed (state/handlers not generated)")

        # ─── Children ───
        if kind not in _LEAF_KINDS:
            node.children = self._convert_children(raw)
            if any(c.layout.position == "absolute" for c in node.children):
                node.meta.has_absolute_children = True
            if node.meta.has_absolute_children and not has_auto_layout(raw):
                self._warn(node, LAYOUT_REVIEW, "no auto-layout, review responsiveness")

        if kind == "component" and not node.props:
            node.props = self._component_props(raw, node)
        return node

    def _convert_children(self, raw: dict) -> List[IRNode]:
        children = []
        for child in raw.get("children") or []:
            if child.get("visible") is False or should_ignore(child.get("name")):
                continue
            try:
                children.append(self._convert_node(child, raw))
            except Exception as e:
                # 單一節點失敗：placeholder + 診斷，繼續處理兄弟節點
                children.append(self._placeholder(child, e))
        return children

    def _placeholder(self, raw: dict, error: Exception) -> IRNode:
        source_id = raw.get("id", "")
        reason = f"{type(error).__name__}: {error}"
        self.diagnostics.warn(PARSE_FAILED, f"node '{raw.get('name', '')}' skipped ({reason})", source_id)
        return IRNode(
            id=make_node_id(source_id),
            source_id=source_id,
            kind="container",
            tag="div",
            name=sanitize_name(raw.get("name", ""), fallback="Placeholder"),
            meta=IRMeta(warnings=[f"failed to convert node: {reason}"]),
        )

    def _warn(self, node: IRNode, code: str, message: str) -> None:
        node.meta.warnings.append(message)
        self.diagnostics.warn(code, f"{node.name}: {message}", node.source_id)

    # ─── Helpers ───

    @staticmethod
    def _style_refs(raw: dict) -> Dict[str, str]:
        refs = dict(raw.get("styles") or {})
        for key, ref in (("fill", "fillStyleId"), ("stroke", "strokeStyleId"), ("text", "textStyleId")):
            if raw.get(ref):
                refs[key] = raw[ref]
        return refs

    def _text_content(self, raw: dict, node: IRNode) -> IRContent:
        text = raw.get("characters", "")
        prop_name = parse_prop_marker(raw.get("name", ""))
        if raw.get("styleOverrideTable"):
            self._warn(node, LAYOUT_REVIEW, "mixed text styles, only the base style is applied")
        return IRContent(
            text=text,
            is_prop_candidate=prop_name is not None or (len(text) <= MAX_PROP_TEXT_LENGTH and "\n" not in text),
            prop_name=prop_name,
        )

    def _component_props(self, raw: dict, node: IRNode) -> List[IRPropDef]:
        """COMPONENT 的 props：componentPropertyDefinitions，再補上 [prop:x] 文字."""
        props: List[IRPropDef] = []
        seen = set()
        for key, definition in (raw.get("componentPropertyDefinitions") or {}).items():
            prop_type = _PROPERTY_TYPES.get(definition.get("type"))
            name = to_camel_case(key.split("#", 1)[0])
            if prop_type is None or not name or name in seen:
                continue
            values = definition.get("variantOptions") or None
            if prop_type == "enum" and not values:
                prop_type = "string"
            default = definition.get("defaultValue")
            if prop_type == "node":
                default = None
            props.append(IRPropDef(name=name, type=prop_type, values=values if prop_type == "enum" else None,
                                   default_value=default))
            seen.add(name)
        for descendant in node.walk():
            content = descendant.content
            if content is not None and content.prop_name and content.prop_name not in seen:
                props.append(IRPropDef(name=content.prop_name, type="string", default_value=content.text))
                seen.add(content.prop_name)
        return props


def save_ir(root: IRNode, output_path: str) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(root.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info("IR saved to %s", output_path)
