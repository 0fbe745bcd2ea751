"""Schema package exports."""
from .log import LogCreate, LogRead, LogUpdate

__all__ = ["LogCreate", "LogRead", "LogUpdate"]
