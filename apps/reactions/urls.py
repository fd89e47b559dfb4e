# apps/reactions/urls.py
from django.urls import path

from apps.reactions.views import BlogReactionViewSet


app_name = 'reactions'

reaction_submit = BlogReactionViewSet.as_view({'post': 'create'})
reaction_counts = BlogReactionViewSet.as_view({'get': 'counts'})
reaction_live = BlogReactionViewSet.as_view({'get': 'live'})

urlpatterns = [
    path('<int:blog_id>/reactions/', reaction_submit, name='reaction-submit'),
    path('<int:blog_id>/reactions/counts/', reaction_counts, name='reaction-counts'),
    path('<int:blog_id>/reactions/live/', reaction_live, name='reaction-live'),
    path('<int:blog_id>/comments/<int:comment_id>/reactions/counts/', reaction_counts, name='comment-reaction-counts'),
    path('<int:blog_id>/comments/<int:comment_id>/reactions/live/', reaction_live, name='comment-reaction-live'),
]
