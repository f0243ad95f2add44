from remix.engine.tree import (
    SegmentIndex,
    collect_ids,
    deep_clone,
    flatten_to_list,
    flatten_to_map,
)
from remix.engine.types import Segment

from tests.helpers.trees import heading, ids, leaf, sample_tree


def test_flatten_to_list_is_preorder_with_wrappers():
    order = [s.id for s in flatten_to_list(sample_tree())]
    assert order == ["a", "b", "c", "d", "e", "f", "g"]


def test_flatten_to_map_includes_wrappers_and_later_duplicate_wins():
    m = flatten_to_map(sample_tree())
    assert set(m) == {"a", "b", "c", "d", "e", "f", "g"}
    assert m["e"].title == "Sub"

    dup = [leaf("x", "first"), heading("h", "H", leaf("x", "second"))]
    assert flatten_to_map(dup)["x"].text == "second"


def test_collect_ids_empty_forest():
    assert collect_ids([]) == set()


def test_deep_clone_is_structurally_equal_but_independent():
    tree = sample_tree()
    clone = deep_clone(tree)
    assert clone == tree

    clone[0].children[0].text = "changed"
    clone[1].children.append(leaf("z"))
    assert tree[0].children[0].text == "Hello"
    assert ids(tree) == ["a", ["b", "c"], "d", ["e", ["f"]], "g"]


def test_is_leaf():
    assert leaf("x").is_leaf
    assert not heading("h", "H", leaf("x")).is_leaf
    assert Segment(id="w", type="heading", title="empty").is_leaf


# ------------- SegmentIndex -------------


def test_index_find_nested_and_miss():
    idx = SegmentIndex(sample_tree())
    assert idx.find("f").text == "deep"
    assert idx.parent_of("f").id == "e"
    assert idx.parent_of("a") is None
    assert idx.find("nope") is None
    assert "nope" not in idx
    assert len(idx) == 7


def test_index_insert_after_at_anchor_level():
    roots = sample_tree()
    idx = SegmentIndex(roots)
    assert idx.insert_after("b", leaf("n", "new"))
    assert ids(roots) == ["a", ["b", "n", "c"], "d", ["e", ["f"]], "g"]
    assert idx.parent_of("n").id == "a"
    assert not idx.insert_after("missing", leaf("m"))


def test_index_prepend_root_and_into_parent():
    roots = sample_tree()
    idx = SegmentIndex(roots)
    assert idx.prepend(None, leaf("r0"))
    assert idx.prepend("e", leaf("e0"))
    assert idx.prepend("g", leaf("g0"))  # a leaf can grow children
    assert ids(roots) == ["r0", "a", ["b", "c"], "d", ["e", ["e0", "f"]], "g", ["g0"]]
    assert not idx.prepend("missing", leaf("m"))


def test_index_remove_drops_whole_subtree_from_index():
    roots = sample_tree()
    idx = SegmentIndex(roots)
    removed = idx.remove("d")
    assert removed.id == "d"
    assert ids(roots) == ["a", ["b", "c"], "g"]
    for gone in ("d", "e", "f"):
        assert idx.find(gone) is None
    assert idx.remove("d") is None


def test_index_tracks_inserted_subtrees():
    roots = [leaf("a")]
    idx = SegmentIndex(roots)
    idx.insert_after("a", heading("h", "H", leaf("inner")))
    assert idx.insert_after("inner", leaf("after-inner"))
    assert ids(roots) == ["a", "h", ["inner", "after-inner"]]
