"""Terminal, input, background refresher, renderer and the application driver."""

from .app import Application, AppOptions, build_status
from .refresher import Refresher

__all__ = ["AppOptions", "Application", "Refresher", "build_status"]
