# apps/reactions/routing.py
from django.urls import re_path
from .consumers import ReactionCountsConsumer

websocket_urlpatterns = [
    re_path(r"^ws/blogs/(?P<blog_id>\d+)/reactions/$", ReactionCountsConsumer.as_asgi()),
]
