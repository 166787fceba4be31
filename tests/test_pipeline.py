"""
pipeline：整份文件 → 所有產出檔 → 寫入輸出目錄
"""
from unittest.mock import patch

from figma2react.config import GenerateOptions
from figma2react.errors import FILE_WRITE_FAILED, NODE_NOT_FOUND, PARSE_FAILED
from figma2react.ir_builder import IRBuilder
from figma2react.pipeline import convert_document, find_component_roots, generate_root_barrel, write_files


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


def make_document(*components):
    return {
        "name": "Design System",
        "document": {"id": "0:0", "type": "DOCUMENT", "name": "Document", "children": [
            make_raw("0:1", "Page 1", "CANVAS", children=list(components)),
        ]},
        "components": {c["id"]: {"name": c["name"], "key": f"k-{c['id']}"} for c in components},
        "componentSets": {},
    }


BUTTON = make_raw("1:2", "Button", "COMPONENT", layoutMode="HORIZONTAL", fills=[solid(1, 1, 1)], children=[
    make_raw("1:3", "Label [prop:label]", "TEXT", characters="OK", style={"fontSize": 14}),
])
CARD = make_raw("2:0", "Card", "COMPONENT", layoutMode="VERTICAL", children=[
    make_raw("2:1", "Button", "INSTANCE", componentId="1:2"),
])


# ─── roots ───────────────────────────────────────────────────────────────────

def test_find_component_roots_stops_at_components():
    variant_set = make_raw("5:0", "Toggle", "COMPONENT_SET", children=[make_raw("5:1", "On=True", "COMPONENT")])
    root = make_document(BUTTON, variant_set)["document"]
    assert [n["id"] for n in find_component_roots(root)] == ["1:2", "5:0"]


def test_frame_without_components_is_its_own_root():
    frame = make_raw("9:0", "Landing", children=[make_raw("9:1", "Hero")])
    assert find_component_roots(frame) == [frame]
    assert find_component_roots({"type": "DOCUMENT", "children": []}) == []


# ─── convert_document ────────────────────────────────────────────────────────

class TestConvertDocument:
    def test_tailwind_document(self):
        result = convert_document(make_document(BUTTON, CARD))
        assert result.component_names == ["Button", "Card"]
        paths = [f.path for f in result.files]
        assert "Button/Button.tsx" in paths
        assert "Card/index.ts" in paths
        assert "index.ts" in paths
        assert "theme/tailwind.tokens.js" in paths
        card_source = next(f.content for f in result.files if f.path == "Card/Card.tsx")
        assert "import { Button } from '../Button';" in card_source
        assert result.diagnostics.ok

    def test_node_ids_select_targets(self):
        result = convert_document(make_document(BUTTON, CARD), node_ids=["2:0", "404:1"])
        assert result.component_names == ["Card"]
        assert [w.code for w in result.diagnostics.warnings] == [NODE_NOT_FOUND]

    def test_duplicate_names_skipped(self):
        twin = make_raw("3:0", "Button", "COMPONENT")
        result = convert_document(make_document(BUTTON, twin))
        assert result.component_names == ["Button"]
        assert PARSE_FAILED in [w.code for w in result.diagnostics.warnings]

    def test_one_failure_does_not_stop_others(self):
        real_build = IRBuilder.build

        def flaky(self, raw):
            if raw.get("name") == "Card":
                raise RuntimeError("boom")
            return real_build(self, raw)

        with patch.object(IRBuilder, "build", flaky):
            result = convert_document(make_document(BUTTON, CARD))
        assert result.component_names == ["Button"]
        assert [e.code for e in result.diagnostics.errors] == [PARSE_FAILED]
        assert "boom" in result.diagnostics.errors[0].message

    def test_themed_css_modules_emit_tokens_css(self):
        options = GenerateOptions(style_strategy="css-modules", themed=True)
        result = convert_document(make_document(BUTTON), options)
        paths = [f.path for f in result.files]
        assert "Button/Button.module.css" in paths
        assert "theme/tokens.css" in paths
        source = next(f.content for f in result.files if f.path == "Button/Button.tsx")
        assert "import '../theme/tokens.css';" in source

    def test_themed_styled_emits_theme_ts(self):
        options = GenerateOptions(style_strategy="styled-components", themed=True)
        paths = [f.path for f in convert_document(make_document(BUTTON), options).files]
        assert "theme/theme.ts" in paths

    def test_plain_css_in_js_has_no_theme_file(self):
        options = GenerateOptions(style_strategy="emotion")
        paths = [f.path for f in convert_document(make_document(BUTTON), options).files]
        assert not any(p.startswith("theme/") for p in paths)


def test_root_barrel_sorted():
    assert generate_root_barrel(["Card", "Button"]) == "export * from './Button';\nexport * from './Card';\n"


# ─── write_files ─────────────────────────────────────────────────────────────

class TestWriteFiles:
    def test_write_then_skip(self, tmp_path):
        result = convert_document(make_document(BUTTON))
        first = write_files(result, str(tmp_path))
        assert set(first.values()) == {"created"}
        assert (tmp_path / "Button" / "Button.tsx").exists()

        second = write_files(convert_document(make_document(BUTTON)), str(tmp_path))
        assert set(second.values()) == {"skip"}

    def test_user_code_survives_rewrite(self, tmp_path):
        write_files(convert_document(make_document(BUTTON)), str(tmp_path))
        path = tmp_path / "Button" / "Button.tsx"
        text = path.read_text(encoding="utf-8")
        path.write_text(text.replace("// @f2r-user-start\n", "// @f2r-user-start\n  const x = 1;\n"),
                        encoding="utf-8")

        actions = write_files(convert_document(make_document(BUTTON)), str(tmp_path))
        assert actions[str(path)] == "merge"
        assert "const x = 1;" in path.read_text(encoding="utf-8")

    def test_dry_run(self, tmp_path):
        actions = write_files(convert_document(make_document(BUTTON)), str(tmp_path), dry_run=True)
        assert set(actions.values()) == {"created"}
        assert not any(tmp_path.iterdir())

    def test_failed_write_recorded(self, tmp_path):
        (tmp_path / "Button").write_text("blocking file", encoding="utf-8")
        result = convert_document(make_document(BUTTON))
        actions = write_files(result, str(tmp_path))
        assert actions[str(tmp_path / "Button" / "Button.tsx")] == "failed"
        assert actions[str(tmp_path / "index.ts")] == "created"
        assert FILE_WRITE_FAILED in [e.code for e in result.diagnostics.errors]
