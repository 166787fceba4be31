"""
Pattern Detector：≥ 3 個同構兄弟 → repeating
"""
from figma2react.ir import IRLayout, IRNode
from figma2react.patterns import apply_patterns, base_name, detect_repeating, same_structure


# ─── helper ──────────────────────────────────────────────────────────────────

_counter = iter(range(10_000))


def make_ir(name, kind="container", tag="div", children=None, direction=None):
    n = next(_counter)
    return IRNode(
        id=f"f-{n}", source_id=str(n), kind=kind, tag=tag, name=name,
        layout=IRLayout(display="flex" if direction else "block", direction=direction),
        children=children or [],
    )


def make_card(name):
    return make_ir(name, children=[make_ir("Title", "text", "h3"), make_ir("Body", "text", "p")],
                   direction="column")


# ─── base_name / same_structure ──────────────────────────────────────────────

def test_base_name_strips_trailing_numbers():
    assert base_name("Card 3") == "card"
    assert base_name("Card3") == "card"
    assert base_name("card-12") == "card"
    assert base_name("Card") == "card"


def test_same_structure_by_name_or_shape():
    assert same_structure(make_ir("Card 1"), make_ir("Card 2"))
    assert same_structure(make_card("Alpha"), make_card("Beta"))
    assert not same_structure(make_ir("Card"), make_ir("Card", kind="text", tag="p"))
    assert not same_structure(make_card("Alpha"), make_ir("Beta", direction="row"))


# ─── detect_repeating ────────────────────────────────────────────────────────

class TestDetectRepeating:
    def test_three_similar_children(self):
        children = [make_card("Card 1"), make_card("Card 2"), make_card("Card 3")]
        assert detect_repeating(children) == [0, 1, 2]

    def test_two_is_not_enough(self):
        assert detect_repeating([make_card("Card 1"), make_card("Card 2")]) == []

    def test_group_after_header(self):
        header = make_ir("Heading", "text", "h2")
        children = [header, make_card("Item 1"), make_card("Item 2"), make_card("Item 3")]
        assert detect_repeating(children) == [1, 2, 3]

    def test_mixed_children_not_repeating(self):
        children = [make_ir("Logo", "image", "img"), make_ir("Nav", tag="nav", direction="row"),
                    make_ir("Cta", "instance")]
        assert detect_repeating(children) == []


def test_apply_patterns_marks_parent_bottom_up():
    inner = make_ir("Tags", children=[make_ir("Tag 1"), make_ir("Tag 2"), make_ir("Tag 3")])
    root = make_ir("Page", children=[inner, make_ir("Footer", tag="footer")])
    apply_patterns(root)
    assert inner.meta.is_repeating
    assert inner.meta.repeat_indices == [0, 1, 2]
    assert not root.meta.is_repeating


def test_text_nodes_never_marked():
    text = make_ir("Label", "text", "p")
    apply_patterns(text)
    assert not text.meta.is_repeating
