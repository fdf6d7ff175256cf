"""
Client for the todo REST API.

``TodoClient`` talks HTTP; ``TodoViewModel`` holds the list screen's
state on top of it.
"""

from .api import ApiError, TodoClient
from .models import Session
from .view_model import TodoViewModel

__all__ = ["ApiError", "Session", "TodoClient", "TodoViewModel"]
