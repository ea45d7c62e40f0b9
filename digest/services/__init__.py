"""Session orchestration."""

from .app_initializer import create_session_controller, create_storage
from .session_controller import SessionController

__all__ = ["SessionController", "create_session_controller", "create_storage"]
