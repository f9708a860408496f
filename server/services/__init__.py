from .auth_service import AuthService
from .message_service import MessageService
from .presence_service import PresenceService

__all__ = ["AuthService", "MessageService", "PresenceService"]
