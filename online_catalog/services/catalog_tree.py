"""
Category hierarchy: one shared builder for the flat category rows of a catalog.
Used by the storefront, the dashboard category page and the item forms.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional, Sequence

from online_catalog.schemas.catalog import CategoryNode, CategoryOption

OPTION_INDENT = "\u00a0" * 4


def build_category_tree(
    categories: Iterable[Any],
    items_by_category: Optional[Mapping[int, Sequence[Any]]] = None,
) -> list[CategoryNode]:
    """
    Two passes: id -> fresh node, then attach each node to its parent's subcategories.
    A node whose parent is null, unknown or itself becomes a root. Input order is kept
    at every level, and the input rows are never mutated.
    """
    items_by_category = items_by_category or {}
    rows = list(categories)
    nodes: dict[int, CategoryNode] = {}
    for row in rows:
        nodes[row.id] = CategoryNode(
            id=row.id,
            name=row.name,
            parent_category_id=row.parent_category_id,
            items=list(items_by_category.get(row.id, ())),
        )

    roots: list[CategoryNode] = []
    for row in rows:
        node = nodes[row.id]
        parent_id = row.parent_category_id
        if parent_id is not None and parent_id != row.id and parent_id in nodes:
            nodes[parent_id].subcategories.append(node)
        else:
            roots.append(node)
    return roots


def flatten_items(tree: Sequence[CategoryNode]) -> list[Any]:
    """Depth-first: a category's own items, then its subcategories'."""
    out: list[Any] = []
    for node in tree:
        out.extend(node.items)
        out.extend(flatten_items(node.subcategories))
    return out


def _matches(item: Any, needle: str) -> bool:
    name = getattr(item, "name", None) or ""
    description = getattr(item, "description", None) or ""
    return needle in name.casefold() or needle in description.casefold()


def filter_tree(tree: Sequence[CategoryNode], query: Optional[str]) -> list[CategoryNode]:
    """Keep items whose name or description contains `query` (case-insensitive), prune empty branches."""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(tree)

    def prune(nodes: Sequence[CategoryNode]) -> list[CategoryNode]:
        kept: list[CategoryNode] = []
        for node in nodes:
            items = [i for i in node.items if _matches(i, needle)]
            children = prune(node.subcategories)
            if items or children:
                kept.append(node.model_copy(update={"items": items, "subcategories": children}))
        return kept

    return prune(tree)


def category_options(
    tree: Sequence[CategoryNode], exclude_id: Optional[int] = None, level: int = 0
) -> list[CategoryOption]:
    """Parent dropdown entries; the category being edited and its subtree are left out."""
    options: list[CategoryOption] = []
    for node in tree:
        if node.id == exclude_id:
            continue
        prefix = "└─ " if level > 0 else "• "
        options.append(
            CategoryOption(id=node.id, level=level, label=f"{OPTION_INDENT * level}{prefix}{node.name}")
        )
        options.extend(category_options(node.subcategories, exclude_id, level + 1))
    return options


def would_create_cycle(
    category_id: Optional[int],
    new_parent_id: Optional[int],
    parents: Mapping[int, Optional[int]],
) -> bool:
    """
    True if making `new_parent_id` the parent of `category_id` closes a loop.
    Walks ancestor pointers from the proposed parent; the walk is bounded by the row count.
    """
    if new_parent_id is None:
        return False
    if category_id is None:
        return False
    current: Optional[int] = new_parent_id
    for _ in range(len(parents) + 1):
        if current is None:
            return False
        if current == category_id:
            return True
        current = parents.get(current)
    # More steps than rows: the existing data already loops.
    return True


def subtree_ids(root_id: int, parents: Mapping[int, Optional[int]]) -> list[int]:
    children: dict[int, list[int]] = defaultdict(list)
    for child, parent in parents.items():
        if parent is not None and parent != child:
            children[parent].append(child)
    seen: set[int] = set()
    order: list[int] = []
    stack = [root_id]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        order.append(current)
        stack.extend(children.get(current, ()))
    return order
