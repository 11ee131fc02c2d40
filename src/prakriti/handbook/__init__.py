"""Admin-editable handbook: repository, editing sessions and navigation."""

from .repository import ContentRepository, IdGenerator
from .session import EditingSession, SessionState
from .store import HandbookStore
from .view import ResolvedView, ViewProjection

__all__ = [
    "ContentRepository",
    "EditingSession",
    "HandbookStore",
    "IdGenerator",
    "ResolvedView",
    "SessionState",
    "ViewProjection",
]
