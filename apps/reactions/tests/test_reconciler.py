from unittest import mock

from django.test import SimpleTestCase, TestCase, override_settings

from apps.reactions.models import Reaction
from apps.reactions.services import queue, reconciler
from apps.reactions.services.cache import (
    acquire_processing_lock, count_by_type, peek_counts, put_counts, release_processing_lock,
)
from apps.reactions.services.coordinator import submit_reaction
from apps.reactions.services.reconciler import process_bulk_reaction_updates, collapse_operations
from apps.reactions.tests.base import ReactionTestMixin
from apps.reactions.types import PendingOperation, ReactionCounts, ReactionTarget


class ProcessBulkReactionUpdatesTests(ReactionTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.target = ReactionTarget(self.blog.pk)

    def test_150_queued_creates_run_as_two_batches(self):
        for i in range(150):
            self.queue_op(f"visitor-{i}", "like", "create")

        with mock.patch.object(reconciler, "apply_batch", wraps=reconciler.apply_batch) as spy:
            report = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual([len(call.args[0]) for call in spy.call_args_list], [100, 50])
        self.assertEqual(report.batches, 2)
        self.assertEqual(report.operations, 150)
        self.assertEqual(Reaction.objects.for_target(self.target).count(), 150)
        self.assertEqual(peek_counts(self.target).like, 150)
        self.assertEqual(queue.queue_length(self.blog.pk), 0)

    @override_settings(REACTION_BATCH_SIZE=10)
    def test_batch_size_comes_from_settings(self):
        for i in range(25):
            self.queue_op(f"visitor-{i}", "sad", "create")

        report = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(report.batches, 3)

    def test_replay_of_immediate_writes_keeps_one_row_per_visitor(self):
        submit_reaction(self.target, "v1", "like")
        submit_reaction(self.target, "v2", "love")

        process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(Reaction.objects.for_target(self.target).count(), 2)
        self.assertEqual(peek_counts(self.target).to_dict(), count_by_type(self.target).to_dict())

    def test_like_then_love(self):
        submit_reaction(self.target, "v1", "like")
        submit_reaction(self.target, "v1", "love")

        process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(Reaction.objects.for_visitor(self.target, "v1").get().type, "love")
        self.assertEqual(
            peek_counts(self.target).to_dict(),
            {"like": 0, "love": 1, "laugh": 0, "surprised": 0, "sad": 0},
        )

    def test_like_then_remove(self):
        submit_reaction(self.target, "v1", "like")
        submit_reaction(self.target, "v1", "remove")

        process_bulk_reaction_updates(self.blog.pk)

        self.assertFalse(Reaction.objects.for_visitor(self.target, "v1").exists())
        self.assertEqual(peek_counts(self.target), ReactionCounts())

    def test_remove_then_react_again_keeps_the_row(self):
        submit_reaction(self.target, "v1", "like")
        submit_reaction(self.target, "v1", "remove")
        submit_reaction(self.target, "v1", "laugh")

        process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(Reaction.objects.for_visitor(self.target, "v1").get().type, "laugh")

    def test_queued_update_fixes_stale_row(self):
        Reaction.objects.create(blog=self.blog, visitor_id="v1", type="like")
        self.queue_op("v1", "sad", "update", previous_type="like")

        report = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(report.updated, 1)
        self.assertEqual(Reaction.objects.get(visitor_id="v1").type, "sad")

    def test_queued_delete_removes_only_matching_target(self):
        Reaction.objects.create(blog=self.blog, visitor_id="v1", type="like")
        Reaction.objects.create(blog=self.blog, comment=self.comment, visitor_id="v1", type="like")
        self.queue_op("v1", "like", "delete", comment_id=self.comment.pk)

        report = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(report.deleted, 1)
        self.assertTrue(Reaction.objects.for_visitor(self.target, "v1").exists())
        self.assertEqual(peek_counts(ReactionTarget(self.blog.pk, self.comment.pk)).like, 0)

    def test_refreshes_every_comment_target_of_the_blog(self):
        comment_target = ReactionTarget(self.blog.pk, self.comment.pk)
        Reaction.objects.create(blog=self.blog, comment=self.comment, visitor_id="v9", type="love")
        put_counts(comment_target, ReactionCounts(love=40))

        report = process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(report.targets_refreshed, 2)
        self.assertEqual(peek_counts(comment_target).love, 1)

    def test_empty_queue_is_an_idempotent_refresh(self):
        Reaction.objects.create(blog=self.blog, visitor_id="v1", type="like")
        put_counts(self.target, ReactionCounts(like=99))

        for _ in range(2):
            report = process_bulk_reaction_updates(self.blog.pk)
            self.assertEqual(report.batches, 0)
            self.assertEqual(Reaction.objects.count(), 1)
            self.assertEqual(peek_counts(self.target), count_by_type(self.target))

    def test_sum_of_counts_matches_rows_after_reconciliation(self):
        for i, reaction_type in enumerate(["like", "love", "love", "sad", "laugh", "like"]):
            submit_reaction(self.target, f"v{i}", reaction_type)
        submit_reaction(self.target, "v1", "remove")
        submit_reaction(self.target, "v2", "surprised")

        process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(peek_counts(self.target).total, Reaction.objects.for_target(self.target).count())

    def test_runs_while_locked_return_without_touching_storage(self):
        self.queue_op("v1", "like", "create")
        self.assertTrue(acquire_processing_lock(self.blog.pk))

        results = [process_bulk_reaction_updates(self.blog.pk) for _ in range(5)]

        self.assertEqual(results, [None] * 5)
        self.assertFalse(Reaction.objects.exists())
        self.assertEqual(queue.queue_length(self.blog.pk), 1)

        release_processing_lock(self.blog.pk)
        self.assertIsNotNone(process_bulk_reaction_updates(self.blog.pk))
        self.assertEqual(Reaction.objects.count(), 1)

    def test_failed_batch_releases_lock_and_stays_queued(self):
        for i in range(150):
            self.queue_op(f"visitor-{i}", "like", "create")

        real_apply = reconciler.apply_batch
        calls = []

        def flaky_apply(ops, report):
            calls.append(len(ops))
            if len(calls) == 2:
                raise RuntimeError("database went away")
            return real_apply(ops, report)

        with mock.patch.object(reconciler, "apply_batch", side_effect=flaky_apply):
            with self.assertRaises(RuntimeError):
                process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(Reaction.objects.count(), 100)
        self.assertEqual(queue.queue_length(self.blog.pk), 50)
        self.assertTrue(acquire_processing_lock(self.blog.pk))
        release_processing_lock(self.blog.pk)

        report = process_bulk_reaction_updates(self.blog.pk)
        self.assertEqual(report.batches, 1)
        self.assertEqual(Reaction.objects.count(), 150)

    def test_other_blog_queue_is_untouched(self):
        self.queue_op("v1", "like", "create", blog=self.other_blog)

        process_bulk_reaction_updates(self.blog.pk)

        self.assertEqual(queue.queue_length(self.other_blog.pk), 1)


class CollapseOperationsTests(SimpleTestCase):
    def _op(self, visitor_id, operation, type="like", comment_id=None, previous_type=None):
        return PendingOperation(
            blog_id=1, comment_id=comment_id, visitor_id=visitor_id,
            type=type, operation=operation, previous_type=previous_type,
        )

    def test_latest_operation_per_visitor_and_target_wins(self):
        ops = [
            self._op("v1", "create"),
            self._op("v2", "create"),
            self._op("v1", "delete"),
            self._op("v1", "create", type="love"),
            self._op("v1", "create", comment_id=3),
        ]

        collapsed = collapse_operations(ops)

        self.assertEqual(
            [(op.visitor_id, op.comment_id, op.type) for op in collapsed],
            [("v2", None, "like"), ("v1", None, "love"), ("v1", 3, "like")],
        )
