# apps/reactions/tests/base.py
import time
from unittest import mock

import fakeredis
from django.core.cache import cache

from apps.blogs.models import Site, Blog, Comment
from apps.reactions.services import queue
from apps.reactions.types import PendingOperation


class ReactionTestMixin:
    """
    Fresh cache + in-memory Redis for the pending queues, and celery dispatch captured.
    """

    def setUp(self):
        super().setUp()
        cache.clear()

        self.redis = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
        redis_patcher = mock.patch(
            "apps.reactions.services.queue.get_redis_connection",
            return_value=self.redis,
        )
        redis_patcher.start()
        self.addCleanup(redis_patcher.stop)

        dispatch_patcher = mock.patch("apps.reactions.services.coordinator.process_bulk_reaction_updates")
        self.apply_async = dispatch_patcher.start().apply_async
        self.addCleanup(dispatch_patcher.stop)

        broadcast_patcher = mock.patch("apps.reactions.services.coordinator.broadcast_reaction_update")
        self.broadcast = broadcast_patcher.start()
        self.addCleanup(broadcast_patcher.stop)

        self.site = Site.objects.create(name="Example", domain="example.com", token="tok-example")
        self.blog = Blog.objects.create(site=self.site, url="/posts/hello-world")
        self.other_blog = Blog.objects.create(site=self.site, url="/posts/second")
        self.comment = Comment.objects.create(blog=self.blog, name="Ann", body="Nice post!")

    def queue_op(self, visitor_id, type, operation, comment_id=None, previous_type=None, timestamp=None, blog=None):
        op = PendingOperation(
            blog_id=(blog or self.blog).pk,
            comment_id=comment_id,
            visitor_id=visitor_id,
            type=type,
            operation=operation,
            previous_type=previous_type,
            timestamp=int(time.time()) if timestamp is None else timestamp,
        )
        queue.push(op)
        return op
