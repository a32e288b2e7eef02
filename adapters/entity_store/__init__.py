from .json_store import JsonDirectoryEntityStore
from .memory_store import InMemoryEntityStore

__all__ = [
    "JsonDirectoryEntityStore",
    "InMemoryEntityStore",
]
