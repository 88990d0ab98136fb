"""Result storage: the ResultStore protocol and its backends."""

from pluginguard.storage.base import ResultStore
from pluginguard.storage.memory import MemoryResultStore

__all__ = ["MemoryResultStore", "ResultStore"]
