"""Tests for reply tree assembly and traversal."""

from dataclasses import dataclass

import pytest

from invested.forums.threads import (
    ReplyNode,
    build_reply_tree,
    count_nodes,
    render_thread,
    walk_thread,
)


@dataclass(frozen=True)
class Reply:
    reply_id: int
    parent_reply_id: int | None = None


def shape(forest: list[ReplyNode]) -> list[tuple]:
    """(id, children shape) tuples; recursion is fine for small fixtures."""
    return [(node.reply_id, shape(node.children)) for node in forest]


def serialize(reply: Reply) -> dict:
    return {"reply_id": reply.reply_id}


class TestBuildReplyTree:
    """Tests for build_reply_tree."""

    def test_reference_thread(self) -> None:
        replies = [Reply(1), Reply(2, 1), Reply(3, 1), Reply(4, 2)]

        forest = build_reply_tree(replies)

        assert shape(forest) == [(1, [(2, [(4, [])]), (3, [])])]

    def test_empty_input(self) -> None:
        assert build_reply_tree([]) == []

    def test_children_keep_input_order(self) -> None:
        replies = [Reply(10), Reply(30, 10), Reply(20, 10), Reply(25, 10)]

        forest = build_reply_tree(replies)

        assert [child.reply_id for child in forest[0].children] == [30, 20, 25]

    def test_child_before_parent_in_input(self) -> None:
        forest = build_reply_tree([Reply(2, 1), Reply(1)])

        assert shape(forest) == [(1, [(2, [])])]

    def test_missing_parent_becomes_root(self) -> None:
        replies = [Reply(1), Reply(2, 99), Reply(3, 2)]

        forest = build_reply_tree(replies)

        assert shape(forest) == [(1, []), (2, [(3, [])])]

    def test_self_parent_is_root(self) -> None:
        assert shape(build_reply_tree([Reply(1, 1)])) == [(1, [])]

    def test_every_reply_appears_once(self) -> None:
        replies = [Reply(1), Reply(2, 1), Reply(3), Reply(4, 3), Reply(5, 4), Reply(6, 1)]

        forest = build_reply_tree(replies)

        ids = [node.reply_id for node, _ in walk_thread(forest)]
        assert sorted(ids) == [1, 2, 3, 4, 5, 6]
        assert count_nodes(forest) == len(replies)

    def test_deterministic(self) -> None:
        replies = [Reply(1), Reply(2, 1), Reply(3, 7), Reply(4, 2), Reply(5, 1)]

        assert shape(build_reply_tree(replies)) == shape(build_reply_tree(replies))

    @pytest.mark.parametrize(
        "replies",
        [
            [Reply(1, 2), Reply(2, 1)],
            [Reply(1, 3), Reply(2, 1), Reply(3, 2)],
            [Reply(0), Reply(1, 2), Reply(2, 1), Reply(3, 2)],
        ],
    )
    def test_cycles_terminate_and_keep_every_reply(self, replies: list[Reply]) -> None:
        forest = build_reply_tree(replies)

        ids = [node.reply_id for node, _ in walk_thread(forest)]
        assert sorted(ids) == sorted(r.reply_id for r in replies)

    def test_cycle_broken_at_first_reply_in_input(self) -> None:
        forest = build_reply_tree([Reply(1, 3), Reply(2, 1), Reply(3, 2)])

        assert shape(forest) == [(1, [(2, [(3, [])])])]

    def test_deep_chain_does_not_recurse(self) -> None:
        depth = 5000
        replies = [Reply(0)] + [Reply(i, i - 1) for i in range(1, depth)]

        forest = build_reply_tree(replies)

        assert count_nodes(forest) == depth
        assert max(d for _, d in walk_thread(forest)) == depth - 1


class TestWalkThread:
    """Tests for walk_thread."""

    def test_preorder_with_depths(self) -> None:
        forest = build_reply_tree([Reply(1), Reply(2, 1), Reply(3, 1), Reply(4, 2), Reply(5)])

        walked = [(node.reply_id, depth) for node, depth in walk_thread(forest)]

        assert walked == [(1, 0), (2, 1), (4, 2), (3, 1), (5, 0)]

    def test_hand_built_cycle_terminates(self) -> None:
        a = ReplyNode(Reply(1))
        b = ReplyNode(Reply(2, 1))
        a.children.append(b)
        b.children.append(a)

        assert [node.reply_id for node, _ in walk_thread([a])] == [1, 2]
        assert count_nodes([a]) == 2


class TestRenderThread:
    """Tests for render_thread."""

    def test_nested_output(self) -> None:
        forest = build_reply_tree([Reply(1), Reply(2, 1), Reply(3, 2)])

        rendered = render_thread(forest, max_depth=8, serialize=serialize)

        assert rendered == [
            {
                "reply_id": 1,
                "depth": 0,
                "children": [
                    {
                        "reply_id": 2,
                        "depth": 1,
                        "children": [{"reply_id": 3, "depth": 2, "children": []}],
                    }
                ],
            }
        ]

    def test_depth_cap_flattens_deeper_replies(self) -> None:
        replies = [Reply(1), Reply(2, 1), Reply(3, 2), Reply(4, 3), Reply(5, 2)]
        forest = build_reply_tree(replies)

        rendered = render_thread(forest, max_depth=1, serialize=serialize)

        second_level = rendered[0]["children"]
        assert [(r["reply_id"], r["depth"]) for r in second_level] == [
            (2, 1),
            (3, 1),
            (4, 1),
            (5, 1),
        ]
        assert all(r["children"] == [] for r in second_level)

    def test_zero_depth_lists_everything_flat(self) -> None:
        forest = build_reply_tree([Reply(1), Reply(2, 1), Reply(3)])

        rendered = render_thread(forest, max_depth=0, serialize=serialize)

        assert [r["reply_id"] for r in rendered] == [1, 2, 3]

    def test_negative_depth_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            render_thread([], max_depth=-1, serialize=serialize)
