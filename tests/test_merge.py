"""
Diff / Merge：使用者區塊保留、整行 marker 比對、更新策略、寫檔
"""
import pytest

from figma2react.errors import UNTERMINATED_BLOCK, Diagnostics, FileWriteError
from figma2react.merge import (
    MERGE,
    OVERWRITE,
    SKIP,
    extract_blocks,
    has_markers,
    is_content_equal,
    merge,
    merge_user_blocks,
    parse_start_marker,
    wrap_block,
    resolve_update_strategy,
    write_generated_file,
)

FRESH = """\
// Generated by figma2react
export function Card() {
  // @f2r-user-start
  // @f2r-user-end

  return <div />;
}
"""

EDITED = """\
// Generated by figma2react
export function Card() {
  // @f2r-user-start
  const [open, setOpen] = useState(false);
  // @f2r-user-end

  return <div className="old" />;
}
"""


def block(label, *body):
    start = f"// @f2r-user-start {label}" if label else "// @f2r-user-start"
    return "\n".join([start, *body, "// @f2r-user-end"])


# ─── scanner ─────────────────────────────────────────────────────────────────

class TestMarkers:
    def test_whole_line_only(self):
        assert parse_start_marker("  // @f2r-user-start  ") == ""
        assert parse_start_marker("// @f2r-user-start hooks") == "hooks"
        assert parse_start_marker("// @f2r-user-starting") is None
        assert parse_start_marker('const s = "// @f2r-user-start";') is None

    def test_extract_blocks(self):
        text = "\n".join(["a", block("hooks", "x", "y"), "b", block(None, "z")])
        blocks = extract_blocks(text)
        assert [(b.id, b.content) for b in blocks] == [("hooks", "x\ny"), ("block_1", "z")]

    def test_unterminated_block_reported(self):
        diagnostics = Diagnostics()
        assert extract_blocks("// @f2r-user-start\nfoo", diagnostics) == []
        assert diagnostics.warnings[0].code == UNTERMINATED_BLOCK

    def test_has_markers(self):
        assert has_markers(FRESH)
        assert not has_markers("export const a = 1;")

    @pytest.mark.parametrize("content,label", [
        ("const a = 1;", "hooks"),
        ("const a = 1;\n\n  useEffect(() => {}, []);", None),
        ("", "empty"),
    ])
    def test_wrap_then_extract_returns_content(self, content, label):
        wrapped = wrap_block(content, label)
        assert wrapped.splitlines()[0] == ("// @f2r-user-start " + label if label else "// @f2r-user-start")
        (extracted,) = extract_blocks("before\n" + wrapped + "\nafter")
        assert extracted.id == (label or "block_0")
        assert extracted.content == content


# ─── merge ───────────────────────────────────────────────────────────────────

class TestMerge:
    def test_user_code_survives_regeneration(self):
        merged = merge(EDITED, FRESH)
        assert "const [open, setOpen] = useState(false);" in merged
        assert "return <div />;" in merged
        assert 'className="old"' not in merged

    def test_idempotent(self):
        once = merge(EDITED, FRESH)
        assert merge(once, FRESH) == once

    def test_labels_match_regardless_of_order(self):
        previous = "\n".join([block("hooks", "useHook();"), block("handlers", "onClick();")])
        fresh = "\n".join([block("handlers"), "mid", block("hooks")])
        merged = merge(previous, fresh)
        assert merged == "\n".join([
            block("handlers", "onClick();"), "mid", block("hooks", "useHook();"),
        ])

    def test_positional_fallback(self):
        merged = merge(block(None, "keep();"), block("effects"))
        assert merged == block("effects", "keep();")

    def test_id_match_wins_over_position(self):
        previous = "\n".join([block("a", "A();"), block("b", "B();")])
        fresh = "\n".join([block("x"), block("a")])
        result = merge_user_blocks(previous, fresh)
        blocks = {b.id: b.content for b in extract_blocks(result.merged)}
        assert blocks["a"] == "A();"
        # x 的位置上的舊區塊已被 a 認領，x 保留新產生的內容
        assert blocks["x"] == ""
        # 沒有對應的 b 變成 orphan 附加在檔尾
        assert result.merged.endswith(block("b", "B();") + "\n")
        assert result.preserved_count == 2

    def test_position_fills_only_unclaimed_blocks(self):
        previous = "\n".join([block(None, "first();"), block("b", "B();")])
        fresh = "\n".join([block("b"), block("y")])
        blocks = extract_blocks(merge(previous, fresh))
        # block_0 的位置 (0) 沒有未配對的新區塊，只能當 orphan 保留
        assert [(b.id, b.content) for b in blocks] == [("b", "B();"), ("y", ""), ("block_2", "first();")]

    def test_orphaned_blocks_appended(self):
        previous = "\n".join([block("a", "one();"), block("b", "two();")])
        result = merge_user_blocks(previous, block("a"))
        assert result.preserved_count == 2
        assert result.merged.endswith(block("b", "two();") + "\n")

    def test_empty_block_adds_no_lines(self):
        assert merge(FRESH, FRESH) == FRESH

    def test_previous_without_markers_uses_fresh(self):
        result = merge_user_blocks("old content", FRESH)
        assert result.merged == FRESH
        assert not result.had_user_blocks

    def test_unterminated_previous_kept_as_is(self):
        previous = "export function Card() {\n  // @f2r-user-start\n  mine();\n}\n"
        diagnostics = Diagnostics()
        assert merge(previous, FRESH, diagnostics) == previous
        assert [w.code for w in diagnostics.warnings] == [UNTERMINATED_BLOCK]


# ─── strategy ────────────────────────────────────────────────────────────────

class TestStrategy:
    def test_equal_ignores_whitespace_and_header(self):
        assert is_content_equal("// Generated by figma2react v1\nconst a = 1;", "const  a = 1;\n")

    def test_resolve(self):
        assert resolve_update_strategy(FRESH, FRESH + "\n") == SKIP
        assert resolve_update_strategy(EDITED, FRESH) == MERGE
        assert resolve_update_strategy("const legacy = true;", FRESH) == OVERWRITE


class TestWriteGeneratedFile:
    def test_create_then_skip(self, tmp_path):
        path = tmp_path / "Card" / "Card.tsx"
        assert write_generated_file(path, FRESH) == "created"
        assert path.read_text(encoding="utf-8") == FRESH
        assert write_generated_file(path, FRESH) == SKIP

    def test_merge_preserves_user_code(self, tmp_path):
        path = tmp_path / "Card.tsx"
        path.write_text(EDITED, encoding="utf-8")
        assert write_generated_file(path, FRESH) == MERGE
        assert "useState(false)" in path.read_text(encoding="utf-8")

    def test_on_conflict_overwrite(self, tmp_path):
        path = tmp_path / "Card.tsx"
        path.write_text(EDITED, encoding="utf-8")
        assert write_generated_file(path, FRESH, on_conflict=OVERWRITE) == OVERWRITE
        assert path.read_text(encoding="utf-8") == FRESH

    def test_on_conflict_skip(self, tmp_path):
        path = tmp_path / "Card.tsx"
        path.write_text(EDITED, encoding="utf-8")
        assert write_generated_file(path, FRESH, on_conflict=SKIP) == SKIP
        assert path.read_text(encoding="utf-8") == EDITED

    def test_dry_run_writes_nothing(self, tmp_path):
        path = tmp_path / "Card.tsx"
        assert write_generated_file(path, FRESH, dry_run=True) == "created"
        assert not path.exists()

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "Card"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(FileWriteError):
            write_generated_file(blocker / "Card.tsx", FRESH)
