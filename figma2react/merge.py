"""
Diff / Merge — 重新產生時保留使用者手寫區塊

標記（整行比對，前後空白忽略）：
  // @f2r-user-start [label]
  ... 使用者程式碼 ...
  // @f2r-user-end

流程：resolve_update_strategy() 決定 skip / merge / overwrite，merge 時把舊檔的
區塊內容放回新產生檔案中同 id（或同位置）的標記之間。
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import UNTERMINATED_BLOCK, Diagnostics, FileWriteError

logger = logging.getLogger(__name__)

START_MARKER = "// @f2r-user-start"
END_MARKER = "// @f2r-user-end"

SKIP = "skip"
MERGE = "merge"
OVERWRITE = "overwrite"

_GENERATED_COMMENT_RE = re.compile(r"//\s*(Generated by figma2react|@generated)[^\n]*")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class UserBlock:
    id: str
    content: str


@dataclass
class MergeResult:
    merged: str
    preserved_count: int = 0
    had_user_blocks: bool = False
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


# ════════════════════════════════════════════════════════════
# Scanner（兩狀態：區塊外 / 區塊內）
# ════════════════════════════════════════════════════════════

def parse_start_marker(line: str) -> Optional[str]:
    """整行是 start marker → 回傳 label（可能為 ''）；否則 None."""
    trimmed = line.strip()
    if trimmed == START_MARKER:
        return ""
    if trimmed.startswith(START_MARKER) and trimmed[len(START_MARKER)].isspace():
        return trimmed[len(START_MARKER):].strip()
    return None


def is_end_marker(line: str) -> bool:
    return line.strip() == END_MARKER


@dataclass
class _Span:
    id: str
    start: int  # start marker 行號
    end: int    # end marker 行號


def _scan(lines: List[str]) -> Tuple[List[_Span], Optional[int]]:
    """回傳完整區塊與未結束區塊的起始行號（若有）."""
    spans: List[_Span] = []
    inside = False
    current_id, current_start = "", -1
    for i, line in enumerate(lines):
        if not inside:
            label = parse_start_marker(line)
            if label is not None:
                inside = True
                current_id = label or f"block_{len(spans)}"
                current_start = i
        elif is_end_marker(line):
            spans.append(_Span(current_id, current_start, i))
            inside = False
    return spans, (current_start if inside else None)


def _report_unterminated(diagnostics: Optional[Diagnostics], line_no: int, what: str) -> None:
    message = f"{what}: user block starting at line {line_no + 1} has no end marker"
    if diagnostics is not None:
        diagnostics.warn(UNTERMINATED_BLOCK, message)
    else:
        logger.warning(message)


def extract_blocks(text: str, diagnostics: Optional[Diagnostics] = None) -> List[UserBlock]:
    """依序取出完整的使用者區塊；未標 label 的 id 依位置為 block_N."""
    lines = text.split("\n")
    spans, dangling = _scan(lines)
    if dangling is not None:
        _report_unterminated(diagnostics, dangling, "extract")
    return [UserBlock(s.id, "\n".join(lines[s.start + 1:s.end])) for s in spans]


def has_markers(text: str) -> bool:
    spans, dangling = _scan(text.split("\n"))
    return bool(spans) or dangling is not None


def wrap_block(content: str, label: Optional[str] = None) -> str:
    start = f"{START_MARKER} {label}" if label else START_MARKER
    return "\n".join([start, content, END_MARKER])


# ════════════════════════════════════════════════════════════
# Merge
# ════════════════════════════════════════════════════════════

def merge_user_blocks(previous: str, fresh: str) -> MergeResult:
    diagnostics = Diagnostics()
    prev_lines = previous.split("\n")
    prev_spans, prev_dangling = _scan(prev_lines)
    if prev_dangling is not None:
        # 舊檔結構不完整：不動它，交給使用者修正
        _report_unterminated(diagnostics, prev_dangling, "merge (previous file kept as-is)")
        return MergeResult(previous, 0, bool(prev_spans), diagnostics)

    if not prev_spans:
        return MergeResult(fresh, 0, False, diagnostics)

    prev_blocks = [UserBlock(s.id, "\n".join(prev_lines[s.start + 1:s.end])) for s in prev_spans]
    by_id: Dict[str, int] = {}
    for index, block in enumerate(prev_blocks):
        by_id.setdefault(block.id, index)

    fresh_lines = fresh.split("\n")
    fresh_spans, fresh_dangling = _scan(fresh_lines)
    if fresh_dangling is not None:
        _report_unterminated(diagnostics, fresh_dangling, "merge (generated file)")

    used = set()
    matches: List[Optional[int]] = []
    for span in fresh_spans:
        match = by_id.get(span.id)
        if match is not None and match not in used:
            used.add(match)
            matches.append(match)
        else:
            matches.append(None)
    # id 都對完之後，剩下的才依位置補上（只取尚未被認領的舊區塊）
    for position, match in enumerate(matches):
        if match is None and position < len(prev_blocks) and position not in used:
            used.add(position)
            matches[position] = position

    out: List[str] = []
    preserved = 0
    cursor = 0
    for span, match in zip(fresh_spans, matches):
        out.extend(fresh_lines[cursor:span.start + 1])
        if match is not None:
            if prev_blocks[match].content:
                out.extend(prev_blocks[match].content.split("\n"))
            preserved += 1
        else:
            out.extend(fresh_lines[span.start + 1:span.end])
        out.append(fresh_lines[span.end])
        cursor = span.end + 1
    out.extend(fresh_lines[cursor:])
    merged = "\n".join(out)

    # 新檔沒有對應標記的舊區塊 → 重新包裝附加在檔尾
    orphans = [
        wrap_block(block.content, None if block.id.startswith("block_") else block.id)
        for index, block in enumerate(prev_blocks)
        if index not in used and block.content.strip()
    ]
    if orphans:
        merged = merged.rstrip() + "\n\n" + "\n\n".join(orphans) + "\n"
        preserved += len(orphans)
    return MergeResult(merged, preserved, True, diagnostics)


def merge(previous: str, fresh: str, diagnostics: Optional[Diagnostics] = None) -> str:
    result = merge_user_blocks(previous, fresh)
    if diagnostics is not None:
        diagnostics.merge_from(result.diagnostics)
    return result.merged


# ════════════════════════════════════════════════════════════
# Update strategy
# ════════════════════════════════════════════════════════════

def _normalize(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", _GENERATED_COMMENT_RE.sub("", text)).strip()


def is_content_equal(a: str, b: str) -> bool:
    """忽略空白差異與產生時間註解後是否相同."""
    return _normalize(a) == _normalize(b)


def resolve_update_strategy(previous: str, fresh: str) -> str:
    if is_content_equal(previous, fresh):
        return SKIP
    if has_markers(previous):
        return MERGE
    return OVERWRITE


def write_generated_file(
    path: Path,
    content: str,
    on_conflict: str = MERGE,
    diagnostics: Optional[Diagnostics] = None,
    dry_run: bool = False,
) -> str:
    """寫入單一產出檔，回傳實際動作（created / skip / merge / overwrite）.

    on_conflict 只影響「內容不同且舊檔存在」的情況：merge 依標記合併，
    overwrite 一律覆寫，skip 保留舊檔。寫入失敗時丟 FileWriteError。
    """
    path = Path(path)
    action = "created"
    if path.exists():
        previous = path.read_text(encoding="utf-8")
        action = resolve_update_strategy(previous, content)
        if action == SKIP:
            return SKIP
        if on_conflict == SKIP:
            return SKIP
        if on_conflict == OVERWRITE:
            action = OVERWRITE
        elif action == MERGE:
            content = merge(previous, content, diagnostics)
    if dry_run:
        return action
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise FileWriteError(str(path), str(e)) from e
    logger.debug("%s %s", action, path)
    return action
