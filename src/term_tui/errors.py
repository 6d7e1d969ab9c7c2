"""
Exception types raised by the toolkit.

Lookups that find nothing return None instead of raising.
"""


class TuiError(Exception):
    """Base class for all toolkit errors."""


class InitError(TuiError):
    """The backend is unavailable or the terminal lacks color support."""


class AllocationError(TuiError):
    """A surface or buffer could not be allocated.

    The window tree is left exactly as it was before the failing call.
    """


class BackendError(TuiError):
    """A backend call failed."""


class DuplicateNameError(TuiError, ValueError):
    """A window or menu name is already taken within its owner."""
