from .protocol import Mutex
from .file import FileMutex
from .sqlalchemy import SqlAlchemyMutex

__all__ = ["Mutex", "FileMutex", "SqlAlchemyMutex"]
