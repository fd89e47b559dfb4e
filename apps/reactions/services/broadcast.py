# apps/reactions/services/broadcast.py
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from apps.reactions.types import ReactionCounts, ReactionTarget

logger = logging.getLogger(__name__)

EVENT_TYPE = "reaction.updated"


def build_reaction_payload(target: ReactionTarget, counts: ReactionCounts, visitor_id: str) -> dict:
    return {
        "blog_id": target.blog_id,
        "comment_id": target.comment_id,
        "counts": counts.to_dict(),
        "exclude_visitor": visitor_id,
    }


def broadcast_reaction_update(target: ReactionTarget, counts: ReactionCounts, visitor_id: str) -> bool:
    """
    Send WS event safely (won't break HTTP if Redis/Channels is down).
    The submitting visitor is named in `exclude_visitor`; its own socket skips the event.
    """
    try:
        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning("Channel layer not configured; skip WS send.")
            return False
        async_to_sync(channel_layer.group_send)(
            target.group_name,
            {"type": EVENT_TYPE, "data": build_reaction_payload(target, counts, visitor_id)},
        )
        return True
    except Exception:
        logger.exception("WS broadcast failed (ignored)")
        return False
