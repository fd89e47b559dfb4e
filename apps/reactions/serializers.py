# apps/reactions/serializers.py
from rest_framework import serializers

from apps.blogs.models import Comment
from apps.reactions.constants import REACTION_TYPES, REMOVE
from apps.reactions.models import Reaction


# REACTION Serializer --------------------------------------------------------------------------
class ReactionSerializer(serializers.ModelSerializer):
    blog_id = serializers.IntegerField(read_only=True)
    comment_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Reaction
        fields = ['id', 'blog_id', 'comment_id', 'visitor_id', 'type', 'created_at', 'updated_at']
        read_only_fields = fields


# REACTION SUBMIT Serializer -------------------------------------------------------------------
class ReactionSubmitSerializer(serializers.Serializer):
    """
    Input for POST /blogs/<blog>/reactions/.
    `blog` comes from the URL via serializer context.
    """
    comment_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    type = serializers.ChoiceField(choices=[*REACTION_TYPES, REMOVE])

    def validate_comment_id(self, value):
        if value is None:
            return None
        blog = self.context['blog']
        if not Comment.objects.filter(pk=value, blog=blog).exists():
            raise serializers.ValidationError('Comment not found on this blog.')
        return value


# COUNTS Serializer ----------------------------------------------------------------------------
class ReactionCountsSerializer(serializers.Serializer):
    def to_representation(self, instance):
        # instance is a ReactionCounts
        return instance.to_dict()
