"""Live, queryable view of a Tournament Manager division.

`TMScraper` is the entry point. The caches (`books`), program detection
(`formats`) and queued-match resolution (`resolver`) are usable on their own
with any object that provides `fetch_rows()` and `first_row_width()`.
"""

from tmscraper.books import CacheStatus, MatchBook, TeamBook
from tmscraper.formats import FormatDetector, ProgramFormat
from tmscraper.models import CoopMatch, ResolvedMatch, SoloMatch, StandardMatch, Team
from tmscraper.resolver import MatchResolver
from tmscraper.tm_scraper import TMScraper

__all__ = [
    "CacheStatus",
    "CoopMatch",
    "FormatDetector",
    "MatchBook",
    "MatchResolver",
    "ProgramFormat",
    "ResolvedMatch",
    "SoloMatch",
    "StandardMatch",
    "TMScraper",
    "Team",
    "TeamBook",
]
