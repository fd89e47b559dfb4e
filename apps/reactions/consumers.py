# apps/reactions/consumers.py
import logging
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from apps.reactions.types import ReactionTarget

logger = logging.getLogger(__name__)


class ReactionCountsConsumer(AsyncJsonWebsocketConsumer):
    """
    Live reaction counts for one target.
    ws/blogs/<blog_id>/reactions/?comment_id=<id>&visitor_id=<id>
    BE → FE: {type: "reaction.updated", data: {blog_id, comment_id, counts}}
    """

    async def connect(self):
        blog_id = self.scope["url_route"]["kwargs"]["blog_id"]

        qs = parse_qs(self.scope.get("query_string", b"").decode())
        raw_comment = (qs.get("comment_id", [""])[0] or "").strip()
        self.visitor_id = (qs.get("visitor_id", [""])[0] or "").strip() or None

        if raw_comment and not raw_comment.isdigit():
            logger.warning("[ReactionCounts] invalid comment_id: %r", raw_comment)
            await self.close(code=4400)
            return

        self.target = ReactionTarget(int(blog_id), int(raw_comment) if raw_comment else None)
        self.group_name = self.target.group_name

        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        group = getattr(self, "group_name", None)
        if group:
            await self.channel_layer.group_discard(group, self.channel_name)

    async def receive_json(self, content, **kwargs):
        # keepalive only
        if content.get("type") == "ping":
            await self.send_json({"type": "pong"})

    # ------------------------------------------------------------------
    # Group messages (from backend via group_send)
    # ------------------------------------------------------------------
    async def reaction_updated(self, event):
        data = dict(event.get("data") or {})
        excluded = data.pop("exclude_visitor", None)

        # the submitting visitor already got the counts in its HTTP response
        if excluded and excluded == self.visitor_id:
            return

        await self.send_json({"type": "reaction.updated", "data": data})
