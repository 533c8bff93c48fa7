"""
Controllers Package

Request handlers of the application listener, grouped by concern.
"""

from .echo_controller import router as echo_router
from .probe_controller import router as probe_router
from .load_controller import router as load_router

__all__ = [
    "echo_router",
    "probe_router",
    "load_router",
]
