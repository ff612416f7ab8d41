"""Entry sources backed by local files."""

from .base import EntrySource, StorageError
from .json_store import JsonEntryStore

__all__ = ["EntrySource", "JsonEntryStore", "StorageError"]
