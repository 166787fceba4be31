"""
stories.py — Storybook CSF 3 `{Name}.stories.tsx`

  argTypes：enum → select，boolean → boolean，string → text，node → 不可控
  Default story + 第一個 enum prop（優先 `variant`）每個值一個 story
"""

from typing import Dict, List, Optional, Sequence

from .ir import IRPropDef
from .naming import to_pascal_case

_PLACEHOLDERS = {
    "label": "Button",
    "title": "Title",
    "text": "Text",
    "description": "Description",
    "placeholder": "Placeholder",
    "value": "Value",
    "href": "#",
    "alt": "Image",
}


def _controllable(props: Sequence[IRPropDef]) -> List[IRPropDef]:
    return [p for p in props if p.name not in ("className", "children")]


def build_arg_types(props: Sequence[IRPropDef]) -> List[str]:
    arg_types = []
    for p in _controllable(props):
        if p.type == "enum":
            options = ", ".join(f"'{v}'" for v in p.values or [])
            arg_types.append(f"{p.name}: {{ control: 'select', options: [{options}] }}")
        elif p.type == "boolean":
            arg_types.append(f"{p.name}: {{ control: 'boolean' }}")
        elif p.type == "node":
            arg_types.append(f"{p.name}: {{ control: false }}")
        else:
            arg_types.append(f"{p.name}: {{ control: 'text' }}")
    return arg_types


def build_default_args(props: Sequence[IRPropDef]) -> Dict[str, object]:
    args: Dict[str, object] = {}
    for p in _controllable(props):
        if p.type == "node":
            continue
        if p.default_value is not None:
            args[p.name] = p.default_value
        elif p.type == "boolean":
            args[p.name] = False
        elif p.type == "enum":
            args[p.name] = (p.values or [None])[0]
        else:
            args[p.name] = _PLACEHOLDERS.get(p.name, to_pascal_case(p.name) or "Text")
    return args


def format_args(args: Dict[str, object]) -> str:
    entries = []
    for key, value in args.items():
        if value is None:
            continue
        if isinstance(value, bool):
            entries.append(f"{key}: {'true' if value else 'false'}")
        else:
            escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
            entries.append(f"{key}: '{escaped}'")
    if not entries:
        return "{}"
    return "{ args: { " + ", ".join(entries) + " } }"


def _variant_prop(props: Sequence[IRPropDef]) -> Optional[IRPropDef]:
    enums = [p for p in props if p.type == "enum" and p.values and len(p.values) > 1]
    for p in enums:
        if p.name == "variant":
            return p
    return enums[0] if enums else None


def generate_stories(name: str, props: Sequence[IRPropDef], category: str = "Components") -> str:
    default_args = build_default_args(props)
    arg_types = build_arg_types(props)

    lines = [
        "import type { Meta, StoryObj } from '@storybook/react';",
        f"import {{ {name} }} from './{name}';",
        "",
        f"type Story = StoryObj<typeof {name}>;",
        "",
        f"const meta: Meta<typeof {name}> = {{",
        f"  title: '{category}/{name}',",
        f"  component: {name},",
        "  parameters: { layout: 'centered' },",
    ]
    if arg_types:
        lines.append("  argTypes: {")
        lines.extend(f"    {a}," for a in arg_types)
        lines.append("  },")
    lines += ["};", "", "export default meta;", "", f"export const Default: Story = {format_args(default_args)};"]

    variant = _variant_prop(props)
    if variant is not None:
        seen = {"Default"}
        for value in variant.values:
            story_name = to_pascal_case(value) or "Variant"
            if not story_name[0].isalpha():
                story_name = f"{variant.name.capitalize()}{story_name}"
            if story_name in seen:
                continue
            seen.add(story_name)
            args = dict(default_args)
            args[variant.name] = value
            lines += ["", f"export const {story_name}: Story = {format_args(args)};"]
    return "\n".join(lines) + "\n"
