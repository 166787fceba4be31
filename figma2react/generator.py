"""
generator.py — IR component → 一組可獨立寫入的檔案

  Button/Button.tsx          元件本體（header + imports + 樣式定義 + function）
  Button/types.ts            ButtonProps interface
  Button/index.ts            barrel
  Button/Button.module.css   只有 CSS Modules
  Button/Button.stories.tsx  只有 include_stories=True

每個 .tsx 在 return 前保留一個空的使用者區塊，重新產生時由 merge 放回內容。
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from .errors import Diagnostics
from .ir import IRNode, IRPropDef
from .markup import MarkupBuilder, instance_component_name, repeat_names, ts_literal
from .merge import END_MARKER, START_MARKER
from .naming import to_pascal_case
from .stories import generate_stories
from .types_gen import generate_types_file

logger = logging.getLogger(__name__)

GENERATED_HEADER = "// Generated by figma2react — do not edit outside user blocks"

_IMPORT_SOURCE_RE = re.compile(r"""(?:from\s+|^import\s+)['"]([^'"]+)['"]""")


@dataclass
class GeneratedFile:
    path: str       # 相對於輸出目錄
    content: str
    kind: str       # component | types | barrel | stylesheet | stories


@dataclass
class GeneratedComponent:
    name: str
    files: List[GeneratedFile] = field(default_factory=list)
    props: List[IRPropDef] = field(default_factory=list)

    def file(self, kind: str) -> Optional[GeneratedFile]:
        for f in self.files:
            if f.kind == kind:
                return f
        return None


# ─── Imports ───────────────────────────────────────────────────────────────

def _import_group(line: str) -> int:
    if not line.startswith("import"):
        return 0  # pragma 註解必須在最前面
    match = _IMPORT_SOURCE_RE.search(line)
    source = match.group(1) if match else ""
    if source.startswith("@/"):
        return 2
    if source.startswith("."):
        return 3
    return 1


def _import_source(line: str) -> str:
    match = _IMPORT_SOURCE_RE.search(line)
    return match.group(1) if match else line


def resolve_imports(lines: Sequence[str]) -> List[str]:
    """去重並排序：pragma → 外部套件 → @/ alias → 相對路徑."""
    unique = list(dict.fromkeys(line.strip() for line in lines if line and line.strip()))
    return sorted(unique, key=lambda line: (_import_group(line), _import_source(line), line))


# ─── Props ─────────────────────────────────────────────────────────────────

def collect_props(node: IRNode) -> List[IRPropDef]:
    """元件宣告的 props + 子樹內 [prop:x] 文字引用到但未宣告的 string props."""
    props = list(node.props or [])
    names = {p.name for p in props}
    for descendant in node.walk():
        content = descendant.content
        if content is not None and content.prop_name and content.prop_name not in names:
            props.append(IRPropDef(name=content.prop_name, type="string", default_value=content.text))
            names.add(content.prop_name)
    return props


def destructure_props(props: Sequence[IRPropDef]) -> str:
    parts = []
    for p in props:
        if p.default_value is None or p.type == "node":
            parts.append(p.name)
        else:
            parts.append(f"{p.name} = {ts_literal(p.default_value)}")
    return "{ " + ", ".join(parts) + " }" if parts else "_props"


def _variant_root(node: IRNode) -> IRNode:
    """COMPONENT_SET 以第一個 variant 的樹當作 markup 來源（沿用 set 的名稱與語意 tag）."""
    if node.meta.is_variant_container and node.children:
        first = node.children[0]
        tag = first.tag if first.tag != "div" else node.tag
        return replace(first, name=node.name, tag=tag)
    return node


def _repeat_declarations(root: IRNode) -> List[str]:
    lines = []
    seen = set()
    for node in root.walk():
        if not (node.meta.is_repeating and node.meta.repeat_indices):
            continue
        template = node.children[node.meta.repeat_indices[0]]
        items, item_type = repeat_names(node, template)
        if items in seen:
            continue
        seen.add(items)
        count = len(node.meta.repeat_indices)
        if item_type not in seen:
            lines.append(f"type {item_type} = Record<string, unknown>;")
            seen.add(item_type)
        lines.append(f"const {items}: {item_type}[] = Array.from({{ length: {count} }}, () => ({{}}));")
    return lines


# ════════════════════════════════════════════════════════════
# ComponentGenerator
# ════════════════════════════════════════════════════════════

class ComponentGenerator:

    def __init__(
        self,
        adapter,
        diagnostics: Optional[Diagnostics] = None,
        asset_paths: Optional[Dict[str, str]] = None,
        icon_components: Optional[Dict[str, str]] = None,
        icon_import_path: str = "@/components/icons",
        include_stories: bool = False,
        include_warnings: bool = True,
        component_prefix: str = "",
        component_import_path: str = "../{name}",
    ):
        self.adapter = adapter
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.asset_paths = asset_paths or {}
        self.icon_components = icon_components or {}
        self.icon_import_path = icon_import_path
        self.include_stories = include_stories
        self.include_warnings = include_warnings
        self.component_prefix = component_prefix
        self.component_import_path = component_import_path

    def component_name(self, node: IRNode) -> str:
        return f"{self.component_prefix}{to_pascal_case(node.name) or 'Component'}"

    def generate(self, node: IRNode, registry: Optional[dict] = None) -> GeneratedComponent:
        registry = registry or {}
        name = self.component_name(node)
        root = _variant_root(node)
        props = collect_props(node)

        # adapter 的 collector 屬於這一次轉換
        self.adapter.reset()
        if hasattr(self.adapter, "component_name"):
            self.adapter.component_name = name

        builder = MarkupBuilder(
            self.adapter,
            asset_paths=self.asset_paths,
            icon_components=self.icon_components,
            registry=registry,
            include_warnings=self.include_warnings,
            component_prefix=self.component_prefix,
        )
        markup = builder.render(root, depth=2)

        result = GeneratedComponent(name=name, props=props)
        result.files.append(GeneratedFile(
            f"{name}/{name}.tsx", self._component_source(name, root, props, markup, registry), "component"))
        result.files.append(GeneratedFile(f"{name}/types.ts", generate_types_file(name, props), "types"))
        result.files.append(GeneratedFile(f"{name}/index.ts", generate_barrel(name), "barrel"))

        if self.adapter.requires_separate_file():
            stylesheet = self.adapter.generate_style_file([root]) or ""
            result.files.append(GeneratedFile(f"{name}/{name}.module.css", stylesheet, "stylesheet"))
        if self.include_stories:
            result.files.append(GeneratedFile(f"{name}/{name}.stories.tsx", generate_stories(name, props), "stories"))

        logger.debug("generated %s (%d files)", name, len(result.files))
        return result

    # ─── component source ───

    def _component_imports(self, name: str, root: IRNode, registry: dict) -> List[str]:
        imports = list(self.adapter.get_imports())
        imports.append(f"import type {{ {name}Props }} from './types';")
        for node in root.walk():
            if node.kind == "instance":
                child = instance_component_name(node, registry, self.component_prefix)
                if child != name:
                    path = self.component_import_path.format(name=child)
                    imports.append(f"import {{ {child} }} from '{path}';")
            elif node.kind == "icon" and node.source_id in self.icon_components:
                icon = self.icon_components[node.source_id]
                imports.append(f"import {{ {icon} }} from '{self.icon_import_path}';")
        return resolve_imports(imports)

    def _component_source(
        self, name: str, root: IRNode, props: Sequence[IRPropDef], markup: str, registry: dict
    ) -> str:
        sections = [GENERATED_HEADER, "\n".join(self._component_imports(name, root, registry))]

        definitions = getattr(self.adapter, "collected_definitions", None)
        if definitions is not None and definitions():
            sections.append(definitions())
        data = _repeat_declarations(root)
        if data:
            sections.append("\n".join(data))

        sections.append("\n".join([
            f"export function {name}({destructure_props(props)}: {name}Props) {{",
            f"  {START_MARKER}",
            f"  {END_MARKER}",
            "",
            "  return (",
            markup,
            "  );",
            "}",
        ]))
        return "\n\n".join(sections) + "\n"


def generate_barrel(name: str) -> str:
    return (
        f"export {{ {name} }} from './{name}';\n"
        f"export type {{ {name}Props }} from './types';\n"
    )
