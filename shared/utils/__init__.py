from .ticker import TickCallback, TickLoop

__all__ = ["TickLoop", "TickCallback"]
