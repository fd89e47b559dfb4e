# apps/reactions/services/live_counts.py
import logging

from apps.reactions.constants import OP_CREATE, OP_UPDATE, OP_DELETE
from apps.reactions.services import queue
from apps.reactions.services.cache import get_cached_counts
from apps.reactions.types import ReactionCounts, ReactionTarget

logger = logging.getLogger(__name__)


def merge_pending(counts: ReactionCounts, target: ReactionTarget, pending) -> ReactionCounts:
    for op in pending:
        # only entries of this exact target; None is the blog itself
        if op.comment_id != target.comment_id:
            continue

        if op.operation == OP_CREATE:
            counts = counts.incremented(op.type)
        elif op.operation == OP_DELETE:
            counts = counts.decremented(op.type)
        elif op.operation == OP_UPDATE and op.previous_type:
            counts = counts.decremented(op.previous_type).incremented(op.type)
    return counts


def get_live_reaction_counts(target: ReactionTarget) -> ReactionCounts:
    """
    Best-effort fresh counts: cached aggregate plus not-yet-reconciled queue entries.

    The submit path already moves the cached aggregate, so until the reconciler drains
    the queue a pending entry is counted on both sides (a fresh "like" reads cached 1,
    live 2). Treat this as an upper bound for activity indicators; the cached and
    reconciled counts are the reference.
    """
    counts = get_cached_counts(target)
    return merge_pending(counts, target, queue.read_all(target.blog_id))
