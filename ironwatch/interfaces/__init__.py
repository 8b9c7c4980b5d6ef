"""Public interface definitions for all external collaborators.

Every remote site, storage engine and chat platform is reached through the
abstract base classes in this package.  Concrete adapters live in
``ironwatch/providers/`` and are wired together in ``ironwatch/main.py``;
tests inject fakes instead.

    Interface        →  Concrete implementations (in ironwatch/providers/)
    ─────────────────────────────────────────────────────────────────────
    IPageScraper     →  IThomeTeamScraper
    IArticleStore    →  SQLiteArticleStore, MemoryArticleStore
    IChatProvider    →  LineMessagingProvider
"""

from ironwatch.interfaces.article_store import IArticleStore
from ironwatch.interfaces.chat_provider import IChatProvider
from ironwatch.interfaces.page_scraper import IPageScraper

__all__ = [
    "IArticleStore",
    "IChatProvider",
    "IPageScraper",
]
