# apps/reactions/views.py
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.blogs.models import Blog, Comment
from apps.core.api_exceptions import VisitorRequired
from apps.reactions.exceptions import ReactionProcessingError
from apps.reactions.serializers import (
    ReactionSerializer, ReactionSubmitSerializer, ReactionCountsSerializer,
)
from apps.reactions.services.cache import get_cached_counts
from apps.reactions.services.coordinator import submit_reaction
from apps.reactions.services.live_counts import get_live_reaction_counts
from apps.reactions.types import ReactionTarget

logger = logging.getLogger(__name__)

VISITOR_HEADER = "HTTP_X_VISITOR_ID"


def resolve_visitor_id(request) -> str:
    """Visitor identity is assigned by the embedding script and sent on every request."""
    visitor_id = (request.META.get(VISITOR_HEADER) or "").strip()
    if not visitor_id or len(visitor_id) > 64:
        raise VisitorRequired()
    return visitor_id


# REACTIONS Viewset --------------------------------------------------------------------------
class BlogReactionViewSet(viewsets.ViewSet):
    """
    Reactions on a blog post or one of its comments.
    POST /blogs/<blog>/reactions/                                   (create / change / remove)
    GET  /blogs/<blog>/reactions/counts/                            (cached counts)
    GET  /blogs/<blog>/comments/<comment>/reactions/counts/
    GET  /blogs/<blog>/reactions/live/                              (cached + pending)
    GET  /blogs/<blog>/comments/<comment>/reactions/live/
    """
    permission_classes = [AllowAny]

    def _target(self, blog_id, comment_id=None) -> ReactionTarget:
        blog = get_object_or_404(Blog, pk=blog_id)
        if comment_id is not None:
            get_object_or_404(Comment, pk=comment_id, blog=blog)
        return ReactionTarget(blog.pk, comment_id)

    def create(self, request, blog_id=None):
        blog = get_object_or_404(Blog, pk=blog_id)
        visitor_id = resolve_visitor_id(request)

        serializer = ReactionSubmitSerializer(data=request.data, context={'blog': blog, 'request': request})
        serializer.is_valid(raise_exception=True)

        target = ReactionTarget(blog.pk, serializer.validated_data.get('comment_id'))

        try:
            result = submit_reaction(target, visitor_id, serializer.validated_data['type'])
        except ReactionProcessingError as exc:
            return Response({'error': str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'message': result.message,
            'reaction': ReactionSerializer(result.reaction).data if result.reaction else None,
            'counts': ReactionCountsSerializer(result.counts).data,
        }, status=status.HTTP_200_OK)

    def counts(self, request, blog_id=None, comment_id=None):
        target = self._target(blog_id, comment_id)
        return Response({'reaction_counts': ReactionCountsSerializer(get_cached_counts(target)).data})

    def live(self, request, blog_id=None, comment_id=None):
        target = self._target(blog_id, comment_id)
        return Response({'reaction_counts': ReactionCountsSerializer(get_live_reaction_counts(target)).data})
