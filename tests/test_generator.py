"""
ComponentGenerator：IR → {Name}.tsx / types.ts / index.ts（/ .module.css / .stories.tsx）
端對端：Figma JSON → IRBuilder → adapter → markup → 元件原始碼
"""
from figma2react.adapters import CSSModulesAdapter, EmotionCSSAdapter, StyledComponentsAdapter, TailwindAdapter
from figma2react.generator import (
    GENERATED_HEADER,
    ComponentGenerator,
    collect_props,
    destructure_props,
    generate_barrel,
    resolve_imports,
)
from figma2react.ir import IRContent, IRNode, IRPropDef
from figma2react.ir_builder import IRBuilder
from figma2react.merge import END_MARKER, START_MARKER, extract_blocks, merge
from figma2react.variants import ComponentInfo


# ─── helper ──────────────────────────────────────────────────────────────────

def solid(r, g, b):
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": 1}}


def make_raw(node_id, name, node_type="FRAME", children=None, **extra):
    node = {
        "id": node_id, "name": name, "type": node_type,
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 120, "height": 40},
        "children": children or [],
    }
    node.update(extra)
    return node


def make_button_raw():
    label = make_raw("1:3", "Label [prop:label]", "TEXT", characters="Click me",
                     style={"fontFamily": "Inter", "fontSize": 16, "fontWeight": 600},
                     fills=[solid(1, 1, 1)])
    return make_raw("1:2", "Primary Button", "COMPONENT", children=[label],
                    layoutMode="HORIZONTAL", itemSpacing=8,
                    paddingTop=8, paddingBottom=8, paddingLeft=16, paddingRight=16,
                    fills=[solid(0x6B / 255, 0x72 / 255, 0x80 / 255)], cornerRadius=4)


def build(raw, registry=None):
    return IRBuilder(registry=registry).build(raw)


# ─── imports / props ─────────────────────────────────────────────────────────

def test_resolve_imports_dedupes_and_groups():
    lines = [
        "import type { CardProps } from './types';",
        "import { Button } from '@/components/Button';",
        "import styled from 'styled-components';",
        "/** @jsxImportSource @emotion/react */",
        "import styled from 'styled-components';",
        "import { Icon } from '../Icon';",
    ]
    assert resolve_imports(lines) == [
        "/** @jsxImportSource @emotion/react */",
        "import styled from 'styled-components';",
        "import { Button } from '@/components/Button';",
        "import { Icon } from '../Icon';",
        "import type { CardProps } from './types';",
    ]


def test_collect_props_adds_referenced_text():
    text = IRNode(id="f-2", source_id="2", kind="text", tag="p", name="Title",
                  content=IRContent("Hello", True, "title"))
    root = IRNode(id="f-1", source_id="1", kind="component", tag="div", name="Card", children=[text],
                  props=[IRPropDef("tone", "enum", ["light", "dark"], "light")])
    assert [(p.name, p.default_value) for p in collect_props(root)] == [("tone", "light"), ("title", "Hello")]


def test_destructure_props():
    props = [
        IRPropDef("label", "string", default_value="It's"),
        IRPropDef("disabled", "boolean", default_value=False),
        IRPropDef("icon", "node"),
    ]
    assert destructure_props(props) == "{ label = 'It\\'s', disabled = false, icon }"
    assert destructure_props([]) == "_props"


def test_barrel():
    assert generate_barrel("Card") == (
        "export { Card } from './Card';\nexport type { CardProps } from './types';\n"
    )


# ════════════════════════════════════════════════════════════
# 端對端
# ════════════════════════════════════════════════════════════

class TestTailwindButton:
    def setup_method(self):
        self.component = ComponentGenerator(TailwindAdapter()).generate(build(make_button_raw()))
        self.source = self.component.file("component").content

    def test_file_set(self):
        assert [f.path for f in self.component.files] == [
            "PrimaryButton/PrimaryButton.tsx",
            "PrimaryButton/types.ts",
            "PrimaryButton/index.ts",
        ]

    def test_component_source(self):
        assert self.source.startswith(GENERATED_HEADER + "\n\nimport type { PrimaryButtonProps } from './types';")
        assert "export function PrimaryButton({ label = 'Click me' }: PrimaryButtonProps) {" in self.source
        assert "<button className=" in self.source
        assert "bg-gray-500" in self.source
        assert "{label}" in self.source
        assert self.source.endswith("  );\n}\n")

    def test_user_block_before_return(self):
        lines = self.source.split("\n")
        start = lines.index(f"  {START_MARKER}")
        assert lines[start + 1] == f"  {END_MARKER}"
        assert lines[start + 3] == "  return ("
        assert len(extract_blocks(self.source)) == 1

    def test_types(self):
        types = self.component.file("types").content
        assert "export interface PrimaryButtonProps {" in types
        assert "  /** @default 'Click me' */" in types
        assert "  label?: string;" in types
        assert "  className?: string;" in types

    def test_regeneration_keeps_user_code(self):
        edited = self.source.replace(
            f"  {START_MARKER}\n", f"  {START_MARKER}\n  const [count, setCount] = useState(0);\n"
        )
        again = ComponentGenerator(TailwindAdapter()).generate(build(make_button_raw()))
        merged = merge(edited, again.file("component").content)
        assert "const [count, setCount] = useState(0);" in merged
        assert merged.count(START_MARKER) == 1


def test_css_modules_writes_stylesheet():
    component = ComponentGenerator(CSSModulesAdapter()).generate(build(make_button_raw()))
    source = component.file("component").content
    sheet = component.file("stylesheet")
    assert "import styles from './PrimaryButton.module.css';" in source
    assert "className={styles.primaryButton}" in source
    assert sheet.path == "PrimaryButton/PrimaryButton.module.css"
    assert ".primaryButton {" in sheet.content
    assert "background-color: #6b7280;" in sheet.content


def test_styled_definitions_above_component():
    component = ComponentGenerator(StyledComponentsAdapter()).generate(build(make_button_raw()))
    source = component.file("component").content
    assert "import styled from 'styled-components';" in source
    assert source.index("const StyledPrimaryButton = styled.button`") < source.index("export function")
    assert "<StyledPrimaryButton>" in source


def test_adapter_state_does_not_leak_between_components():
    generator = ComponentGenerator(EmotionCSSAdapter())
    first = generator.generate(build(make_button_raw()))
    second = generator.generate(build(make_raw("5:0", "Empty Box", "COMPONENT")))
    assert "primaryButtonStyles" in first.file("component").content
    assert "primaryButtonStyles" not in second.file("component").content


def test_instance_imports_sibling_component():
    card = make_raw("3:0", "Card", "COMPONENT", layoutMode="VERTICAL", children=[
        make_raw("3:1", "Primary Button", "INSTANCE", componentId="1:2"),
    ])
    registry = {"1:2": ComponentInfo(name="PrimaryButton", figma_id="1:2")}
    source = ComponentGenerator(TailwindAdapter()).generate(build(card, registry), registry).file("component").content
    assert "import { PrimaryButton } from '../PrimaryButton';" in source
    assert "<PrimaryButton" in source


def test_instance_tag_uses_component_prefix():
    card = make_raw("3:0", "Card", "COMPONENT", layoutMode="VERTICAL", children=[
        make_raw("3:1", "Primary Button", "INSTANCE", componentId="1:2"),
        make_raw("3:2", "Chip", "INSTANCE"),
    ])
    registry = {"1:2": ComponentInfo(name="PrimaryButton", figma_id="1:2")}
    generator = ComponentGenerator(TailwindAdapter(), component_prefix="Ui")
    source = generator.generate(build(card, registry), registry).file("component").content
    assert "export function UiCard(" in source
    assert "import { UiPrimaryButton } from '../UiPrimaryButton';" in source
    assert "import { UiChip } from '../UiChip';" in source
    assert "<UiPrimaryButton" in source
    assert "<UiChip" in source
    assert "<PrimaryButton" not in source


def test_variant_set_renders_first_variant():
    variants = [
        make_raw("7:1", "Size=Small", "COMPONENT", children=[
            make_raw("7:3", "Text", "TEXT", characters="Small", style={"fontSize": 12})]),
        make_raw("7:2", "Size=Large", "COMPONENT", children=[
            make_raw("7:4", "Text", "TEXT", characters="Large", style={"fontSize": 16})]),
    ]
    component = ComponentGenerator(TailwindAdapter()).generate(
        build(make_raw("7:0", "Tag", "COMPONENT_SET", children=variants)))
    source = component.file("component").content
    assert "export function Tag({ size = 'Small' }: TagProps) {" in source
    assert ">Small</p>" in source
    assert "Large</p>" not in source
    assert "size?: 'Small' | 'Large';" in component.file("types").content


def test_repeating_list_has_data_declaration():
    cards = [make_raw(f"9:{i}", f"Card {i}", layoutMode="VERTICAL") for i in range(1, 4)]
    section = make_raw("9:0", "Card List", "COMPONENT", layoutMode="HORIZONTAL", children=cards)
    source = ComponentGenerator(TailwindAdapter()).generate(build(section)).file("component").content
    assert "type CardData = Record<string, unknown>;" in source
    assert "const cardListItems: CardData[] = Array.from({ length: 3 }, () => ({}));" in source
    assert "{cardListItems.map((item: CardData, index: number) => (" in source


def test_stories_and_prefix():
    generator = ComponentGenerator(TailwindAdapter(), include_stories=True, component_prefix="Ds")
    component = generator.generate(build(make_button_raw()))
    assert component.name == "DsPrimaryButton"
    stories = component.file("stories")
    assert stories.path == "DsPrimaryButton/DsPrimaryButton.stories.tsx"
    assert "title: 'Components/DsPrimaryButton'," in stories.content
