from .network import NetworkClient
from .session import ClientSession, ClientState

__all__ = ["NetworkClient", "ClientSession", "ClientState"]
