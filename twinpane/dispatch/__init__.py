"""Event dispatch: key, mouse and background events applied to ``Status``."""

from .actions import ACTIONS
from .dispatcher import EventDispatcher
from .leave_menu import leave_menu

__all__ = ["ACTIONS", "EventDispatcher", "leave_menu"]
