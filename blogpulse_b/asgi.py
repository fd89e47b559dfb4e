# blogpulse_b/asgi.py
import os
import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'blogpulse_b.settings')
django.setup()

from django.core.asgi import get_asgi_application
from channels.routing import ProtocolTypeRouter, URLRouter
from apps.reactions.routing import websocket_urlpatterns


# ASGI HTTP
django_asgi_app = get_asgi_application()

# Main application
# Visitors are anonymous; no auth middleware on the socket.
application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": URLRouter(websocket_urlpatterns),
})
