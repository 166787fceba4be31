"""
pipeline.py — Figma document → 所有產出檔案

  document ─► registry ─► IRBuilder ─► ComponentGenerator ─► GeneratedFile[]
                                                        └─► theme 檔（themed / tailwind）
  write_files() 逐檔走 merge.write_generated_file()，單檔失敗不影響其他檔。

同一次轉換共用一個 Diagnostics 與一個 adapter（每個元件開頭 reset）。
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .adapters import create_adapter
from .adapters.tailwind import generate_tailwind_extend
from .assets import asset_paths, collect_assets, icon_mapping_from_assets
from .config import GenerateOptions
from .errors import FILE_WRITE_FAILED, NODE_NOT_FOUND, PARSE_FAILED, Diagnostics, FileWriteError
from .generator import ComponentGenerator, GeneratedComponent, GeneratedFile
from .ir import DesignTokens
from .ir_builder import IRBuilder, find_node_by_id
from .merge import write_generated_file
from .tokens import load_tokens
from .variants import parse_component_registry

logger = logging.getLogger(__name__)

_COMPONENT_TYPES = ("COMPONENT", "COMPONENT_SET")
_FRAME_TYPES = ("FRAME", "COMPONENT", "COMPONENT_SET", "INSTANCE", "GROUP")


@dataclass
class ConversionResult:
    components: List[GeneratedComponent] = field(default_factory=list)
    files: List[GeneratedFile] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def component_names(self) -> List[str]:
        return [c.name for c in self.components]


def find_component_roots(root: dict) -> List[dict]:
    """文件中的 COMPONENT_SET 與不屬於任何 set 的 COMPONENT；沒有元件時回傳 root 本身."""
    found: List[dict] = []

    def visit(node: dict) -> None:
        if node.get("type") in _COMPONENT_TYPES:
            found.append(node)
            return  # variant 成員由 set 處理
        for child in node.get("children") or []:
            visit(child)

    visit(root)
    if not found and root.get("type") in _FRAME_TYPES:
        return [root]
    return found


def _document_root(document: dict) -> dict:
    # GET /files 回傳 {"document": ...}；GET /files/:key/nodes 的單一 entry 也是
    return document.get("document", document)


def _icon_components(assets, configured: Dict[str, str]) -> Dict[str, str]:
    """設定檔 iconMapping（key 為 node id 或節點名稱）優先，其餘依名稱產生."""
    mapping = {}
    generated = icon_mapping_from_assets(assets)
    for asset in assets:
        if asset.kind != "icon":
            continue
        name = configured.get(asset.source_id) or configured.get(asset.name)
        if name:
            mapping[asset.source_id] = name
        elif configured:
            # 設定了 mapping 但沒涵蓋的 icon 保留 inline svg
            continue
        else:
            mapping[asset.source_id] = generated[asset.source_id]
    return mapping


def convert_document(
    document: dict,
    options: Optional[GenerateOptions] = None,
    tokens: Optional[DesignTokens] = None,
    node_ids: Optional[Sequence[str]] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> ConversionResult:
    options = options or GenerateOptions()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    tokens = tokens or load_tokens(options.tokens_path)
    result = ConversionResult(diagnostics=diagnostics)

    root = _document_root(document)
    registry = parse_component_registry(document)
    adapter = create_adapter(options.style_strategy, tokens, diagnostics, themed=options.themed)
    builder = IRBuilder(diagnostics, registry)
    generator = ComponentGenerator(
        adapter,
        diagnostics,
        include_stories=options.stories,
        include_warnings=options.include_warnings,
        component_prefix=options.component_prefix,
    )

    if node_ids:
        targets = []
        for node_id in node_ids:
            raw = find_node_by_id(root, node_id)
            if raw is None:
                diagnostics.warn(NODE_NOT_FOUND, f"node {node_id} not found in document", node_id)
            else:
                targets.append(raw)
    else:
        targets = find_component_roots(root)

    seen_names = set()
    for raw in targets:
        label = raw.get("name", raw.get("id", "?"))
        try:
            ir = builder.build(raw)
            assets = collect_assets(ir, options.image_dir)
            generator.asset_paths = asset_paths(assets)
            generator.icon_components = _icon_components(assets, options.icon_mapping)
            name = generator.component_name(ir)
            if name in seen_names:
                diagnostics.warn(PARSE_FAILED, f"duplicate component name '{name}', skipped", raw.get("id"))
                continue
            component = generator.generate(ir, registry)
        except Exception as e:
            # 單一元件失敗：記錄後繼續其他元件
            diagnostics.error(PARSE_FAILED, f"component '{label}' failed: {type(e).__name__}: {e}", raw.get("id"))
            logger.warning("component %s failed: %s", label, e, exc_info=logger.isEnabledFor(logging.DEBUG))
            continue
        seen_names.add(name)
        result.components.append(component)
        result.files.extend(component.files)

    if result.components:
        result.files.append(GeneratedFile("index.ts", generate_root_barrel(result.component_names), "barrel"))
    result.files.extend(theme_files(adapter, tokens, options))
    logger.info("converted %d component(s): %s", len(result.components), diagnostics.summary())
    return result


def generate_root_barrel(names: Sequence[str]) -> str:
    return "".join(f"export * from './{name}';\n" for name in sorted(names))


def theme_files(adapter, tokens: DesignTokens, options: GenerateOptions) -> List[GeneratedFile]:
    if options.style_strategy == "tailwind":
        return [GeneratedFile("theme/tailwind.tokens.js", generate_tailwind_extend(tokens), "theme")]
    if not options.themed:
        return []
    filename = "theme/tokens.css" if options.style_strategy == "css-modules" else "theme/theme.ts"
    return [GeneratedFile(filename, adapter.generate_theme_file(tokens), "theme")]


def write_files(
    result: ConversionResult,
    output_dir: str,
    on_conflict: str = "merge",
    dry_run: bool = False,
) -> Dict[str, str]:
    """寫入所有產出檔，回傳 path → 動作；寫入失敗記為 FILE_WRITE_FAILED 錯誤."""
    actions: Dict[str, str] = {}
    base = Path(output_dir)
    for generated in result.files:
        path = base / generated.path
        try:
            actions[str(path)] = write_generated_file(
                path, generated.content, on_conflict, result.diagnostics, dry_run=dry_run
            )
        except FileWriteError as e:
            result.diagnostics.error(FILE_WRITE_FAILED, e.message)
            actions[str(path)] = "failed"
    return actions
