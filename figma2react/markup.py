"""
Markup Builder — IR tree + style adapter → JSX 字串（遞迴，依 kind 分派）

輸出形式：
  <div className="flex flex-col gap-4 p-6 bg-white rounded-xl">
    <h2 className="text-2xl font-bold">Title</h2>
    <p className="text-base">{label}</p>
  </div>
"""

import logging
import re
from typing import Dict, List, Optional

from .ir import IRNode
from .naming import to_camel_case, to_kebab_case, to_pascal_case
from .patterns import base_name

logger = logging.getLogger(__name__)

_JSX_UNSAFE_RE = re.compile(r"[{}<>]")
_ATTR_UNSAFE_RE = re.compile(r'["{}\\\n]')
_LEAF_KINDS = ("text", "image", "icon", "instance", "divider")


def format_props(props: Dict[str, str]) -> str:
    """{'className': 'a b', 'css': '{x}'} → ' className="a b" css={x}'."""
    parts = []
    for key, value in props.items():
        if value is None or value == "":
            continue
        if value.startswith("{") and value.endswith("}"):
            parts.append(f" {key}={value}")
        else:
            parts.append(f' {key}="{value}"')
    return "".join(parts)


def text_literal(text: str) -> str:
    """純文字 → JSX 子節點；含換行或 JSX 保留字元時改用 template literal."""
    if "\n" in text or _JSX_UNSAFE_RE.search(text):
        escaped = text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
        return "{`" + escaped + "`}"
    return text


def render_text_content(node: IRNode) -> str:
    content = node.content
    if content is None:
        return ""
    if content.prop_name:
        return f"{{{content.prop_name}}}"
    return text_literal(content.text)


def repeat_names(parent: IRNode, template: IRNode):
    """重複群組的資料變數名與項目型別名：('cardListItems', 'CardData')."""
    items = f"{to_camel_case(parent.name) or 'list'}Items"
    item_type = f"{to_pascal_case(base_name(template.name)) or 'Item'}Data"
    return items, item_type


def alt_text(name: str) -> str:
    return " ".join(to_kebab_case(name).split("-")) or "image"


def ts_literal(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "'" + str(value).replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n") + "'"


def instance_component_name(node: IRNode, registry: dict, prefix: str = "") -> str:
    """instance 對應的元件名稱；import 與 JSX tag 共用，確保一致."""
    info = registry.get(node.meta.component_id or "")
    name = info.name if info is not None else to_pascal_case(node.name) or "Component"
    return f"{prefix}{name}"


class MarkupBuilder:

    def __init__(
        self,
        adapter,
        asset_paths: Optional[Dict[str, str]] = None,
        icon_components: Optional[Dict[str, str]] = None,
        registry: Optional[dict] = None,
        include_warnings: bool = True,
        component_prefix: str = "",
        expand_repeating: bool = True,
        indent_size: int = 2,
    ):
        self.adapter = adapter
        # source id → 本地圖片路徑
        self.asset_paths = asset_paths or {}
        # source id → icon 元件名稱
        self.icon_components = icon_components or {}
        self.registry = registry or {}
        self.include_warnings = include_warnings
        self.component_prefix = component_prefix
        self.expand_repeating = expand_repeating
        self.indent_size = indent_size

    def _pad(self, depth: int) -> str:
        return " " * (depth * self.indent_size)

    def render(self, node: IRNode, depth: int = 0, extra_props: Optional[Dict[str, str]] = None) -> str:
        """渲染單一節點（含子樹）；extra_props 會加在樣式 props 之前（例如 key）."""
        extra_props = extra_props or {}
        if node.kind == "text":
            return self._render_text(node, depth, extra_props)
        if node.kind == "image":
            return self._render_image(node, depth, extra_props)
        if node.kind == "icon":
            return self._render_icon(node, depth, extra_props)
        if node.kind == "instance":
            return self._render_instance(node, depth, extra_props)
        if node.kind == "divider":
            tag, props = self._style(node, extra_props)
            return f"{self._pad(depth)}<{tag}{format_props(props)} />"
        return self._render_container(node, depth, extra_props)

    # ─── helpers ───

    def _style(self, node: IRNode, extra_props: Dict[str, str]):
        output = self.adapter.generate_style(node)
        props = dict(extra_props)
        props.update(output.inline_props)
        return output.element or node.tag, props

    def _warning_lines(self, node: IRNode, depth: int) -> List[str]:
        if not self.include_warnings:
            return []
        pad = self._pad(depth)
        return [f"{pad}{{/* ⚠️ {w} */}}" for w in node.meta.warnings]

    # ─── kinds ───

    def _render_text(self, node: IRNode, depth: int, extra_props: Dict[str, str]) -> str:
        tag, props = self._style(node, extra_props)
        return f"{self._pad(depth)}<{tag}{format_props(props)}>{render_text_content(node)}</{tag}>"

    def _render_image(self, node: IRNode, depth: int, extra_props: Dict[str, str]) -> str:
        tag, props = self._style(node, extra_props)
        if tag == node.tag:
            tag = "img"
        props["src"] = self.asset_paths.get(node.source_id) or f"./assets/images/{to_kebab_case(node.name) or 'image'}.png"
        props["alt"] = alt_text(node.name)
        return f"{self._pad(depth)}<{tag}{format_props(props)} />"

    def _render_icon(self, node: IRNode, depth: int, extra_props: Dict[str, str]) -> str:
        pad = self._pad(depth)
        component = self.icon_components.get(node.source_id)
        if component:
            props = dict(extra_props)
            props.update(self.adapter.generate_style(node).inline_props)
            return f"{pad}<{component}{format_props(props)} />"
        tag, props = self._style(node, extra_props)
        props.update({"width": "24", "height": "24", "viewBox": "0 0 24 24", "fill": "none"})
        return "\n".join([
            f"{pad}<{tag}{format_props(props)}>",
            f"{pad}{' ' * self.indent_size}{{/* {node.name} icon */}}",
            f"{pad}</{tag}>",
        ])

    def _render_instance(self, node: IRNode, depth: int, extra_props: Dict[str, str]) -> str:
        component = instance_component_name(node, self.registry, self.component_prefix)
        props = dict(extra_props)
        props.update(self.adapter.generate_style(node).inline_props)
        rendered = format_props(props)
        for key, value in node.meta.overrides.items():
            if value == "true":
                rendered += f" {key}"
            elif value == "false":
                rendered += f" {key}={{false}}"
            elif _ATTR_UNSAFE_RE.search(value):
                rendered += f" {key}={{{ts_literal(value)}}}"
            else:
                rendered += f' {key}="{value}"'
        return f"{self._pad(depth)}<{component}{rendered} />"

    def _render_container(self, node: IRNode, depth: int, extra_props: Dict[str, str]) -> str:
        pad = self._pad(depth)
        tag, props = self._style(node, extra_props)
        opening = f"<{tag}{format_props(props)}"
        warnings = self._warning_lines(node, depth + 1)

        if not node.children and not warnings:
            return f"{pad}{opening} />"

        if (
            len(node.children) == 1
            and not warnings
            and node.children[0].kind == "text"
            and not node.children[0].meta.warnings
        ):
            child = self.render(node.children[0], 0)
            return f"{pad}{opening}>{child}</{tag}>"

        lines = [f"{pad}{opening}>"] + warnings
        lines += self._render_children(node, depth + 1)
        lines.append(f"{pad}</{tag}>")
        return "\n".join(lines)

    def _render_children(self, node: IRNode, depth: int) -> List[str]:
        repeat = node.meta.repeat_indices if (self.expand_repeating and node.meta.is_repeating) else []
        lines = []
        for index, child in enumerate(node.children):
            if repeat and index == repeat[0]:
                lines.append(self._render_repeating(node, child, len(repeat), depth))
            elif index in repeat:
                continue
            else:
                if child.kind in _LEAF_KINDS:
                    lines.extend(self._warning_lines(child, depth))
                lines.append(self.render(child, depth))
        return lines

    def _render_repeating(self, parent: IRNode, template: IRNode, count: int, depth: int) -> str:
        pad = self._pad(depth)
        items, item_type = repeat_names(parent, template)
        return "\n".join([
            f"{pad}{{/* {count} items: replace with real data */}}",
            f"{pad}{{{items}.map((item: {item_type}, index: number) => (",
            self.render(template, depth + 1, extra_props={"key": "{index}"}),
            f"{pad}))}}",
        ])
