"""
types_gen.py — IRPropDef[] → TypeScript Props interface

  export interface ButtonProps {
    state?: 'default' | 'hover';
    disabled?: boolean;
    label?: string;
    className?: string;
  }
"""

from typing import List, Sequence

from .ir import IRPropDef


def _quote(value) -> str:
    return "'" + str(value).replace("\\", "\\\\").replace("'", "\\'") + "'"


def prop_to_ts_type(prop: IRPropDef) -> str:
    if prop.type == "boolean":
        return "boolean"
    if prop.type == "enum":
        return " | ".join(_quote(v) for v in prop.values or []) or "string"
    if prop.type == "node":
        return "React.ReactNode"
    return "string"


def _default_comment(prop: IRPropDef) -> str:
    if prop.default_value is None or prop.type == "node":
        return ""
    if isinstance(prop.default_value, bool):
        value = "true" if prop.default_value else "false"
    else:
        value = _quote(prop.default_value)
    return f"  /** @default {value} */"


def generate_props_interface(name: str, props: Sequence[IRPropDef], include_children: bool = False) -> str:
    """產生 `export interface {name}Props`；className 一律附上."""
    lines: List[str] = [f"export interface {name}Props {{"]
    names = set()
    for prop in props:
        comment = _default_comment(prop)
        if comment:
            lines.append(comment)
        lines.append(f"  {prop.name}?: {prop_to_ts_type(prop)};")
        names.add(prop.name)
    if include_children and "children" not in names:
        lines.append("  children?: React.ReactNode;")
    if "className" not in names:
        lines.append("  className?: string;")
    lines.append("}")
    return "\n".join(lines)


def needs_react_types(props: Sequence[IRPropDef]) -> bool:
    return any(p.type == "node" for p in props)


def generate_types_file(name: str, props: Sequence[IRPropDef]) -> str:
    has_node = needs_react_types(props)
    parts = []
    if has_node:
        parts.append("import type React from 'react';\n")
    parts.append(generate_props_interface(name, props, include_children=has_node))
    return "\n".join(parts) + "\n"
