from unittest import mock

from django.core.cache import cache
from django.test import TestCase, override_settings

from apps.reactions.services.cache import flush_blog_tags, peek_counts, put_counts
from apps.reactions.tests.base import ReactionTestMixin
from apps.reactions.types import ReactionCounts, ReactionTarget


class BlogTagTests(ReactionTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.target = ReactionTarget(self.blog.pk)
        self.comment_target = ReactionTarget(self.blog.pk, self.comment.pk)

    @override_settings(REACTION_CACHE_TTL=120)
    def test_every_write_renews_the_tag_list(self):
        with mock.patch("apps.reactions.services.cache.cache", wraps=cache) as spy:
            put_counts(self.target, ReactionCounts(like=1))
            put_counts(self.target, ReactionCounts(like=2))

        tag_writes = [c for c in spy.set.call_args_list if c.args[0] == f"cache_tags:blog_{self.blog.pk}"]
        self.assertEqual(len(tag_writes), 2)
        self.assertEqual(tag_writes[-1].args[1:], ([self.target.counts_key], 120))

    def test_flush_drops_every_key_of_the_blog_only(self):
        other_target = ReactionTarget(self.other_blog.pk)
        put_counts(self.target, ReactionCounts(like=1))
        put_counts(self.comment_target, ReactionCounts(sad=1))
        put_counts(other_target, ReactionCounts(love=1))

        self.assertEqual(flush_blog_tags(self.blog.pk), 2)

        self.assertIsNone(peek_counts(self.target))
        self.assertIsNone(peek_counts(self.comment_target))
        self.assertEqual(peek_counts(other_target).love, 1)

    def test_flush_after_the_tag_list_was_lost_rebuilds_it_on_next_write(self):
        put_counts(self.target, ReactionCounts(like=1))
        cache.delete(f"cache_tags:blog_{self.blog.pk}")

        put_counts(self.target, ReactionCounts(like=2))
        flush_blog_tags(self.blog.pk)

        self.assertIsNone(peek_counts(self.target))
