"""Article store backends.

SQLiteArticleStore persists across restarts and is the default.
MemoryArticleStore keeps everything in dicts and is used by tests and
``STORE_BACKEND=memory``.
"""

from ironwatch.providers.store.memory_store import MemoryArticleStore
from ironwatch.providers.store.sqlite_store import SQLiteArticleStore

__all__ = ["MemoryArticleStore", "SQLiteArticleStore"]
