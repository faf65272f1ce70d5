"""Exception hierarchy shared by the runtime, dispatcher, and workers."""

from __future__ import annotations


class TwinpaneError(Exception):
    """Base class for every error raised by twinpane itself."""


class DispatchError(TwinpaneError):
    """Unrecoverable failure while applying one event to the status."""


class WorkerDisconnectedError(TwinpaneError):
    """A background worker's completion channel closed unexpectedly."""


class StartupError(TwinpaneError):
    """The terminal or IPC socket could not be set up."""


class ChannelClosed(TwinpaneError):
    """Raised when sending into an event channel that was closed."""
