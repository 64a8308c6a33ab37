"""In-memory tables of the division's teams and matches."""

import logging
from enum import Enum
from typing import Generic, Iterator, Optional, TypeVar

from tmapi.tmapi import PageFetcher, endpoint
from tmscraper.formats import FormatDetector, ProgramFormat
from tmscraper.models import Match, Team, strip_whitespace

logger = logging.getLogger("tmscraper.books")

Record = TypeVar("Record")


class CacheStatus(Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    REFRESHING = "refreshing"


class Book(Generic[Record]):
    """A table fetched from one TM page.

    The table is filled the first time it is read and rebuilt from scratch on
    every refresh. A refresh builds a new dict and swaps it in, so readers never
    see a half-parsed table.
    """

    page = ""

    def __init__(self, fetcher: PageFetcher, division: str):
        self.fetcher = fetcher
        self.division = division
        self._records: dict[str, Record] = {}
        self.status = CacheStatus.EMPTY

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._records.values()))

    def __len__(self):
        return len(self._records)

    def __contains__(self, key):
        return strip_whitespace(key) in self._records

    def __str__(self):
        return f"{type(self).__name__}({self.division}, {len(self)} rows, {self.status.value})"

    def _key(self, record: Record) -> str:
        raise NotImplementedError

    def _parse_row(self, cells: list[str]) -> Record:
        raise NotImplementedError

    def _prepare(self) -> None:
        """Hook run before each refresh."""

    def refresh(self) -> list[Record]:
        previous_status = self.status
        self.status = CacheStatus.REFRESHING
        try:
            self._prepare()
            rows = self.fetcher.fetch_rows(endpoint(self.page, division=self.division))
            records = {}
            for cells in rows:
                record = self._parse_row(cells)
                records[self._key(record)] = record
        except Exception:
            self.status = previous_status
            raise
        self._records = records
        self.status = CacheStatus.POPULATED
        logger.info("Fetched %s %s from %s", len(records), self.page, self.division)
        return list(records.values())

    def get_all(self, force_refresh: bool = False) -> list[Record]:
        if force_refresh or self.status == CacheStatus.EMPTY:
            return self.refresh()
        return list(self._records.values())

    def get(self, key: str) -> Optional[Record]:
        if self.status == CacheStatus.EMPTY:
            self.refresh()
        return self._records.get(strip_whitespace(key))


def strip_country(raw_location: str) -> str:
    '''
    Drops the country from a location when a state/province is also present.

    "USA, California, Springfield" -> "California, Springfield"
    "Canada" -> "Canada"
    '''
    segments = raw_location.split(",")
    if len(segments) > 2:
        return ",".join(segments[1:]).strip()
    return raw_location


class TeamBook(Book[Team]):
    page = "teams"

    def __init__(self, fetcher: PageFetcher, division: str, omit_country: bool = False):
        super().__init__(fetcher, division)
        self.omit_country = omit_country

    def _key(self, team: Team) -> str:
        return strip_whitespace(team.number)

    def _parse_row(self, cells: list[str]) -> Team:
        location = cells[2].strip()
        if self.omit_country:
            location = strip_country(location)
        return Team(
            number=strip_whitespace(cells[0]),
            name=cells[1].strip(),
            location=location,
            organization=cells[3].strip(),
        )


class MatchBook(Book[Match]):
    page = "matches"

    def __init__(self, fetcher: PageFetcher, division: str, detector: FormatDetector):
        super().__init__(fetcher, division)
        self.detector = detector
        self._program: Optional[ProgramFormat] = None

    def _prepare(self) -> None:
        # The program never changes for the life of the connection, so the row
        # layout is picked once.
        if self._program is None:
            self._program = self.detector.detect()

    def _key(self, match: Match) -> str:
        return match.match_num

    def _parse_row(self, cells: list[str]) -> Match:
        return self._program.parse_row(cells)
