"""Reply thread assembly.

Turns the flat, creation-ordered reply list of a forum into a forest of
reply nodes, and walks that forest without recursion so that deep or
malformed threads cannot exhaust the interpreter stack.

The functions here are pure: they keep no state between calls and work
on any object exposing ``reply_id`` and ``parent_reply_id``.
"""

from collections.abc import Callable, Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol


class ReplyLike(Protocol):
    """Anything that can be placed in a reply tree."""

    @property
    def reply_id(self) -> Hashable: ...

    @property
    def parent_reply_id(self) -> Hashable | None: ...


@dataclass(eq=False)
class ReplyNode:
    """A reply plus its direct answers, in input order."""

    reply: Any
    children: list["ReplyNode"] = field(default_factory=list)

    @property
    def reply_id(self) -> Hashable:
        return self.reply.reply_id


def build_reply_tree(replies: Iterable[ReplyLike]) -> list[ReplyNode]:
    """Assemble replies into a forest.

    Every input reply appears exactly once in the result. A reply whose
    parent is absent from the input (deleted, or from another thread) is
    a root. Children keep the order in which they appear in the input.

    Replies caught in a parent cycle are unreachable from any root; the
    first of them in input order is detached from its parent and
    promoted to a root, which breaks the cycle.
    """
    nodes: list[ReplyNode] = []
    index: dict[Hashable, ReplyNode] = {}
    for reply in replies:
        node = ReplyNode(reply)
        nodes.append(node)
        index.setdefault(reply.reply_id, node)

    forest: list[ReplyNode] = []
    parent_of: dict[int, ReplyNode] = {}
    for node in nodes:
        parent_id = node.reply.parent_reply_id
        parent = index.get(parent_id) if parent_id is not None else None
        if parent is None or parent is node:
            forest.append(node)
        else:
            parent.children.append(node)
            parent_of[id(node)] = parent

    reached = {id(node) for node, _ in walk_thread(forest)}
    if len(reached) == len(nodes):
        return forest

    for node in nodes:
        if id(node) in reached:
            continue
        parent_of[id(node)].children.remove(node)
        forest.append(node)
        reached.update(id(n) for n, _ in walk_thread([node]))

    return forest


def walk_thread(forest: Iterable[ReplyNode]) -> Iterator[tuple[ReplyNode, int]]:
    """Yield ``(node, depth)`` in pre-order, roots at depth 0.

    Uses an explicit stack. A node is yielded at most once, so a
    hand-built forest containing a cycle still terminates.
    """
    stack = [(node, 0) for node in reversed(list(forest))]
    visited: set[int] = set()
    while stack:
        node, depth = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.children))


def count_nodes(forest: Iterable[ReplyNode]) -> int:
    """Number of distinct nodes reachable from the roots."""
    return sum(1 for _ in walk_thread(forest))


def render_thread(
    forest: Iterable[ReplyNode],
    max_depth: int,
    serialize: Callable[[Any], dict[str, Any]],
) -> list[dict[str, Any]]:
    """Render a forest as nested dicts with ``depth`` and ``children`` keys.

    Nesting stops at ``max_depth``: replies below that level are listed,
    in pre-order, next to their ancestor at ``max_depth``.
    """
    if max_depth < 0:
        msg = "max_depth must be >= 0"
        raise ValueError(msg)

    rendered: list[dict[str, Any]] = []
    # (node, rendered depth, list the rendered node goes into)
    stack = [(node, 0, rendered) for node in reversed(list(forest))]
    visited: set[int] = set()
    while stack:
        node, depth, target = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))

        item = {**serialize(node.reply), "depth": depth, "children": []}
        target.append(item)

        if depth < max_depth:
            child_depth, child_target = depth + 1, item["children"]
        else:
            child_depth, child_target = depth, target
        stack.extend(
            (child, child_depth, child_target) for child in reversed(node.children)
        )

    return rendered
