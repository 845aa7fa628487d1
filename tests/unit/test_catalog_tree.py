"""
Unit tests: category tree builder, search filter, parent options, cycle check.
"""
from types import SimpleNamespace

from online_catalog.services.catalog_tree import (
    OPTION_INDENT,
    build_category_tree,
    category_options,
    filter_tree,
    flatten_items,
    subtree_ids,
    would_create_cycle,
)


def row(id, name, parent=None):
    return SimpleNamespace(id=id, name=name, parent_category_id=parent)


def card(id, category_id, name, description=None):
    return {
        "id": id,
        "category_id": category_id,
        "name": name,
        "description": description,
        "price": "10",
        "price_label": "10 ج.م",
        "href": f"/shop/item/{id}",
    }


ROWS = [row(1, "Drinks"), row(2, "Hot", 1), row(3, "Snacks"), row(4, "Tea", 2)]


def test_build_tree_nests_children_under_parents():
    tree = build_category_tree(ROWS)
    assert [n.id for n in tree] == [1, 3]
    assert [n.id for n in tree[0].subcategories] == [2]
    assert [n.id for n in tree[0].subcategories[0].subcategories] == [4]
    assert tree[1].subcategories == []


def test_orphans_and_self_parents_become_roots_in_input_order():
    rows = [row(5, "Orphan", 99), row(6, "Self", 6), row(7, "Root")]
    tree = build_category_tree(rows)
    assert [n.id for n in tree] == [5, 6, 7]


def test_child_listed_before_parent_is_still_attached():
    rows = [row(2, "Child", 1), row(1, "Parent")]
    tree = build_category_tree(rows)
    assert [n.id for n in tree] == [1]
    assert [n.id for n in tree[0].subcategories] == [2]


def test_build_tree_is_repeatable_and_does_not_mutate_rows():
    first = build_category_tree(ROWS)
    second = build_category_tree(ROWS)
    assert [n.model_dump() for n in first] == [n.model_dump() for n in second]
    assert ROWS[1].parent_category_id == 1
    assert not hasattr(ROWS[0], "subcategories")


def test_items_attached_and_flattened_depth_first():
    items = {1: [card(10, 1, "Water")], 2: [card(11, 2, "Latte")], 3: [card(12, 3, "Cookie")]}
    tree = build_category_tree(ROWS, items)
    assert [i.name for i in flatten_items(tree)] == ["Water", "Latte", "Cookie"]


def test_filter_is_case_insensitive_and_matches_description():
    items = {
        2: [card(11, 2, "Latte", "Steamed MILK"), card(13, 2, "Americano")],
        3: [card(12, 3, "Cookie")],
    }
    tree = build_category_tree(ROWS, items)

    by_name = filter_tree(tree, "LAT")
    assert [i.name for i in flatten_items(by_name)] == ["Latte"]

    by_description = filter_tree(tree, "milk")
    assert [i.name for i in flatten_items(by_description)] == ["Latte"]


def test_filter_prunes_empty_branches():
    items = {2: [card(11, 2, "Latte")], 3: [card(12, 3, "Cookie")]}
    tree = build_category_tree(ROWS, items)
    result = filter_tree(tree, "cookie")
    assert [n.id for n in result] == [3]

    nested = filter_tree(tree, "latte")
    assert [n.id for n in nested] == [1]
    assert [n.id for n in nested[0].subcategories] == [2]
    # Tea has no matching items
    assert nested[0].subcategories[0].subcategories == []


def test_blank_query_returns_tree_unchanged():
    items = {2: [card(11, 2, "Latte")]}
    tree = build_category_tree(ROWS, items)
    assert filter_tree(tree, "   ") == tree
    assert filter_tree(tree, None) == tree


def test_category_options_labels_and_levels():
    options = category_options(build_category_tree(ROWS))
    assert [(o.id, o.level) for o in options] == [(1, 0), (2, 1), (4, 2), (3, 0)]
    assert options[0].label == "• Drinks"
    assert options[1].label == f"{OPTION_INDENT}└─ Hot"
    assert options[2].label == f"{OPTION_INDENT * 2}└─ Tea"
    assert OPTION_INDENT == "\u00a0" * 4


def test_category_options_exclude_edited_subtree():
    options = category_options(build_category_tree(ROWS), exclude_id=2)
    assert [o.id for o in options] == [1, 3]


def test_cycle_check():
    parents = {1: None, 2: 1, 3: None, 4: 2}
    assert would_create_cycle(1, 1, parents)
    assert would_create_cycle(1, 4, parents)
    assert would_create_cycle(2, 4, parents)
    assert not would_create_cycle(4, 3, parents)
    assert not would_create_cycle(3, 4, parents)
    assert not would_create_cycle(1, None, parents)
    assert not would_create_cycle(None, 4, parents)


def test_cycle_check_terminates_on_corrupt_data():
    parents = {1: 2, 2: 1, 3: None}
    assert would_create_cycle(3, 1, parents)


def test_subtree_ids():
    parents = {1: None, 2: 1, 3: None, 4: 2, 5: 4}
    assert sorted(subtree_ids(2, parents)) == [2, 4, 5]
    assert subtree_ids(3, parents) == [3]
    assert subtree_ids(2, parents)[0] == 2
