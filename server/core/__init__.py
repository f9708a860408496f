from .connection import Connection, ConnectionState
from .connection_manager import ConnectionManager
from .router import CommandRouter
from .server import SocketServer

__all__ = ["Connection", "ConnectionState", "ConnectionManager", "CommandRouter", "SocketServer"]
