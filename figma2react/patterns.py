"""
Pattern Detector — 同構兄弟節點 ≥ 3 個 → 標記 parent 為 repeating（items.map 候選）
"""

import logging
import re
from typing import List

from .ir import IRNode

logger = logging.getLogger(__name__)

MIN_REPEAT = 3

_TRAILING_NUMBER_RE = re.compile(r"[\s_-]*\d+$")


def base_name(name: str) -> str:
    """'Card 3' / 'Card3' / 'card-3' → 'card'."""
    return _TRAILING_NUMBER_RE.sub("", name or "").strip().lower()


def same_structure(a: IRNode, b: IRNode) -> bool:
    if a.kind != b.kind:
        return False
    if base_name(a.name) and base_name(a.name) == base_name(b.name):
        return True
    return (
        len(a.children) == len(b.children)
        and a.layout.direction == b.layout.direction
        and a.tag == b.tag
    )


def detect_repeating(children: List[IRNode]) -> List[int]:
    """回傳第一組 ≥ MIN_REPEAT 個同構兄弟的 index（第一個即 template）；沒有則回傳 []."""
    if len(children) < MIN_REPEAT:
        return []
    claimed = set()
    for i, first in enumerate(children):
        if i in claimed:
            continue
        group = [i] + [
            j for j in range(i + 1, len(children))
            if j not in claimed and same_structure(first, children[j])
        ]
        if len(group) >= MIN_REPEAT:
            return group
        claimed.update(group)
    return []


def apply_patterns(node: IRNode) -> IRNode:
    """由下而上標記整棵樹的 repeating container."""
    for child in node.children:
        apply_patterns(child)
    if node.kind in ("container", "component") and node.children:
        indices = detect_repeating(node.children)
        node.meta.is_repeating = bool(indices)
        node.meta.repeat_indices = indices
        if indices:
            logger.debug("%s: %d repeating children", node.name, len(indices))
    return node
