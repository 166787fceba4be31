"""
Variant Extractor — COMPONENT_SET 的 variant 子節點 → 型別化的 IRPropDef

也負責元件註冊表（component id → 元件名稱）與 instance override 解析。
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .ir import IRPropDef
from .naming import sanitize_name, to_camel_case

logger = logging.getLogger(__name__)

_PROP_MARKER_RE = re.compile(r"\[prop:(\w+)\]", re.I)


@dataclass
class ComponentInfo:
    name: str
    figma_id: str
    is_variant: bool = False
    props: List[IRPropDef] = field(default_factory=list)
    variant_key: Optional[str] = None


# ─── Variant 名稱解析 ───────────────────────────────────────────────────────

def parse_variant_name(name: str) -> Dict[str, str]:
    """'State=Hover, Size=Small' → {'State': 'Hover', 'Size': 'Small'}."""
    result: Dict[str, str] = {}
    for part in (name or "").split(","):
        part = part.strip()
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        if key.strip():
            result[key.strip()] = value.strip()
    return result


def infer_prop_type(values: List[str]) -> str:
    lowered = {v.lower() for v in values}
    if lowered == {"true", "false"}:
        return "boolean"
    if len(values) == 1:
        return "string"
    return "enum"


def _variant_properties(child: dict) -> Dict[str, str]:
    if child.get("variantProperties"):
        return dict(child["variantProperties"])
    return parse_variant_name(child.get("name", ""))


def extract_variant_props(variant_set: dict) -> List[IRPropDef]:
    """由 variant set 的 COMPONENT 子節點整理 props；沒有子節點時回傳空 list."""
    collected: Dict[str, List[str]] = {}
    for child in variant_set.get("children") or []:
        if child.get("type") != "COMPONENT":
            continue
        for key, value in _variant_properties(child).items():
            values = collected.setdefault(key, [])
            if value not in values:
                values.append(value)

    props = []
    for key, values in collected.items():
        prop_type = infer_prop_type(values)
        if prop_type == "boolean":
            props.append(IRPropDef(
                name=to_camel_case(key),
                type="boolean",
                default_value=values[0].lower() == "true",
            ))
        elif prop_type == "string":
            props.append(IRPropDef(name=to_camel_case(key), type="string", default_value=values[0]))
        else:
            props.append(IRPropDef(
                name=to_camel_case(key),
                type="enum",
                values=list(values),
                default_value=values[0],
            ))
    logger.debug("variant set %s → %d prop(s)", variant_set.get("name"), len(props))
    return props


# ─── [prop:name] 命名慣例 ───────────────────────────────────────────────────

def parse_prop_marker(name: str) -> Optional[str]:
    """'Label [prop:label]' → 'label'."""
    match = _PROP_MARKER_RE.search(name or "")
    return match.group(1) if match else None


# ─── Registry / Instance ───────────────────────────────────────────────────

def _find_nodes(node: dict, types: Tuple[str, ...], found: Dict[str, dict]) -> None:
    if node.get("type") in types:
        found[node.get("id", "")] = node
    for child in node.get("children") or []:
        _find_nodes(child, types, found)


def parse_component_registry(file: dict) -> Dict[str, ComponentInfo]:
    """由 Figma file JSON 建立 component id → ComponentInfo 查找表.

    Variant 成員以其所屬 set 的名稱註冊，instance 因此會渲染成 set 元件。
    """
    set_nodes: Dict[str, dict] = {}
    document = file.get("document")
    if document:
        _find_nodes(document, ("COMPONENT_SET",), set_nodes)

    registry: Dict[str, ComponentInfo] = {}
    for set_id, meta in (file.get("componentSets") or {}).items():
        set_node = set_nodes.get(set_id)
        registry[set_id] = ComponentInfo(
            name=sanitize_name(meta.get("name", "")),
            figma_id=set_id,
            is_variant=True,
            props=extract_variant_props(set_node) if set_node else [],
            variant_key=meta.get("key"),
        )

    for comp_id, meta in (file.get("components") or {}).items():
        parent = registry.get(meta.get("componentSetId") or "")
        if parent is not None:
            registry[comp_id] = ComponentInfo(
                name=parent.name,
                figma_id=comp_id,
                is_variant=True,
                props=parent.props,
                variant_key=meta.get("name"),
            )
        else:
            registry[comp_id] = ComponentInfo(
                name=sanitize_name(meta.get("name", "")),
                figma_id=comp_id,
                variant_key=meta.get("key"),
            )
    return registry


def parse_instance(node: dict) -> Tuple[str, Dict[str, str]]:
    """回傳 (componentId, overrides)；override 的 key 轉為 camelCase prop 名稱."""
    overrides: Dict[str, str] = {}
    for key, value in (node.get("variantProperties") or {}).items():
        overrides[to_camel_case(key)] = str(value)
    for key, prop in (node.get("componentProperties") or {}).items():
        if not isinstance(prop, dict) or prop.get("type") not in ("VARIANT", "TEXT", "BOOLEAN"):
            continue
        value = prop.get("value")
        if isinstance(value, bool):
            value = "true" if value else "false"
        # "Label#12:3" → "label"
        overrides[to_camel_case(key.split("#", 1)[0])] = str(value)
    return node.get("componentId", ""), overrides
