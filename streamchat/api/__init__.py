"""FastAPI host for the chat interface.

Endpoints:
    - GET /health: Service health status
    - GET /: NiceGUI chat page (mounted by streamchat.main)
"""

from streamchat.api.app import create_app

__all__ = ["create_app"]
