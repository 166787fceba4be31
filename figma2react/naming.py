"""命名工具 — 圖層名稱 → 元件 / prop / class / 檔名."""

import re
from typing import Optional

_MARKER_RE = re.compile(r"\[[^\]]*\]")
_SPLIT_RE = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


def _words(name: str) -> list:
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", name or "")
    return [w for w in _SPLIT_RE.split(spaced) if w]


def to_pascal_case(name: str) -> str:
    return "".join(w[:1].upper() + w[1:] for w in _words(name))


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def to_kebab_case(name: str) -> str:
    return "-".join(w.lower() for w in _words(name))


def to_css_class_name(name: str) -> str:
    """CSS class 不可用數字或連字號開頭，必要時補 '_'."""
    camel = to_camel_case(name) or "node"
    if re.match(r"^[0-9-]", camel):
        return "_" + camel
    return camel


def sanitize_name(name: str, fallback: str = "Component") -> str:
    """去掉 [prop:x] 之類的標記後轉 PascalCase，數字開頭時加前綴."""
    stripped = _MARKER_RE.sub(" ", name or "")
    pascal = to_pascal_case(stripped)
    if not pascal:
        return fallback
    if pascal[0].isdigit():
        return fallback + pascal
    return pascal


def should_ignore(name: Optional[str]) -> bool:
    """以 '_' 或 '.' 開頭的圖層視為設計師私用，不產生程式碼."""
    return bool(name) and name[0] in ("_", ".")


def preview_tree(node, indent: int = 0) -> str:
    """除錯用：印出 IR 樹."""
    lines = []
    prefix = "  " * indent
    label = f"{prefix}├─ {node.name}  [{node.kind}]  <{node.tag}>"
    flags = []
    if node.meta.is_repeating:
        flags.append("repeating")
    if node.meta.component_id:
        flags.append(f"→ {node.meta.component_id}")
    if node.content and node.content.prop_name:
        flags.append(f"{{{node.content.prop_name}}}")
    if flags:
        label += "  " + " ".join(flags)
    lines.append(label)
    for child in node.children:
        lines.append(preview_tree(child, indent + 1))
    return "\n".join(lines)
