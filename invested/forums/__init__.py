"""Discussion forum module.

Provides:
- Forum threads
- Nested replies
- Reply tree assembly and iterative traversal

Note: Router is not exported here to avoid circular imports.
Import directly from invested.forums.router when needed.
"""

from .models import Forum, ForumReply
from .threads import ReplyNode, build_reply_tree, count_nodes, walk_thread


__all__ = [
    "Forum",
    "ForumReply",
    "ReplyNode",
    "build_reply_tree",
    "count_nodes",
    "walk_thread",
]
