# apps/reactions/models.py
from django.db import models
from django.db.models import Q

from apps.blogs.models import Blog, Comment
from apps.reactions.constants import REACTION_TYPE_CHOICES


class ReactionQuerySet(models.QuerySet):
    def for_target(self, target):
        """Rows of one target; blog-level target matches comment IS NULL."""
        qs = self.filter(blog_id=target.blog_id)
        if target.comment_id is None:
            return qs.filter(comment__isnull=True)
        return qs.filter(comment_id=target.comment_id)

    def for_visitor(self, target, visitor_id):
        return self.for_target(target).filter(visitor_id=visitor_id)


# Reaction Models ---------------------------------------------------------------------------------
class Reaction(models.Model):
    """
    One visitor's current reaction on a target.
    Target is the blog itself when `comment` is null, otherwise the comment.
    """
    id = models.BigAutoField(primary_key=True)
    blog = models.ForeignKey(Blog, on_delete=models.CASCADE, related_name='reactions')
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reactions',
    )
    visitor_id = models.CharField(max_length=64, verbose_name='Visitor')
    type = models.CharField(max_length=20, choices=REACTION_TYPE_CHOICES, verbose_name='Reaction Type')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReactionQuerySet.as_manager()

    def __str__(self):
        return f'{self.visitor_id} reacted with {self.type}'

    class Meta:
        verbose_name = "Reaction"
        verbose_name_plural = "Reactions"
        # NULLs are distinct in unique indexes, so blog-level rows need their own constraint
        constraints = [
            models.UniqueConstraint(
                fields=['blog', 'visitor_id'],
                condition=Q(comment__isnull=True),
                name='uniq_reaction_blog_visitor',
            ),
            models.UniqueConstraint(
                fields=['blog', 'comment', 'visitor_id'],
                condition=Q(comment__isnull=False),
                name='uniq_reaction_comment_visitor',
            ),
        ]
        indexes = [
            models.Index(fields=['blog', 'comment', 'type'], name='reaction_target_type_idx'),
        ]
