import time

from django.test import TestCase

from apps.reactions.models import Reaction
from apps.reactions.services import queue
from apps.reactions.services.cache import acquire_processing_lock
from apps.reactions.tasks import cleanup_old_reaction_queues, process_bulk_reaction_updates
from apps.reactions.tests.base import ReactionTestMixin


class ReactionTasksTests(ReactionTestMixin, TestCase):
    def test_process_task_reconciles_and_reports(self):
        self.queue_op("v1", "like", "create")

        result = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(result["batches"], 1)
        self.assertEqual(result["blog_id"], self.blog.pk)
        self.assertTrue(Reaction.objects.filter(visitor_id="v1").exists())

    def test_process_task_accepts_string_blog_id(self):
        result = process_bulk_reaction_updates.apply(args=[str(self.blog.pk)]).get()

        self.assertEqual(result["operations"], 0)

    def test_process_task_is_a_noop_while_locked(self):
        acquire_processing_lock(self.blog.pk)

        result = process_bulk_reaction_updates(self.blog.pk)

        self.assertIn("already processing", result)

    def test_cleanup_task(self):
        self.queue_op("old", "like", "create", timestamp=int(time.time()) - 3600)

        result = cleanup_old_reaction_queues()

        self.assertEqual(result, "1 stale pending reaction(s) dropped.")
        self.assertEqual(queue.queue_length(self.blog.pk), 0)
