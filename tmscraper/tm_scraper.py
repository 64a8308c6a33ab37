"""Client for the Tournament Manager web interface.

Combines page scraping (teams, matches, rankings) with the field set websocket
to keep a queryable view of one division.
"""

from typing import Callable, Optional

from fieldset.fieldset import FieldsetStream
from tmapi.tmapi import PageFetcher, SessionManager, defaults
from tmscraper.books import MatchBook, TeamBook
from tmscraper.formats import FormatDetector, ProgramFormat
from tmscraper.models import Match, ResolvedMatch, Team
from tmscraper.resolver import MatchResolver


class TMScraper:
    """Gets data from one TM division and field set.

    Every instance owns its own session, caches, and websocket, so separate
    instances never share state.
    """

    def __init__(
        self,
        address: str,
        password: str,
        division: str = defaults["division"],
        fieldset_id: int = defaults["fieldset_id"],
        omit_country: bool = defaults["omit_country"],
        user: str = defaults["user"],
    ):
        '''
        :param address: Address of the TM server, e.g. "192.168.1.10" or "tm.local:8080".
        :param password: TM admin password.
        :param division: Division name as used in the web interface URLs, e.g. "division1".
        :param fieldset_id: ID of the field set to listen to (starts at 1).
        :param omit_country: Omit the country from team locations that also have a state/province.
        '''
        self.division = division
        self.session_manager = SessionManager(address=address, password=password, user=user)
        self.fetcher = PageFetcher(self.session_manager)
        self.detector = FormatDetector(self.fetcher, division)
        self.teams = TeamBook(self.fetcher, division, omit_country=omit_country)
        self.matches = MatchBook(self.fetcher, division, self.detector)
        self.resolver = MatchResolver(self.matches, self.teams, self.detector)
        self.stream = FieldsetStream(self.session_manager, fieldset_id, self.resolver.resolve)

    @property
    def program(self) -> Optional[ProgramFormat]:
        return self.detector.program

    def get_teams(self) -> list[Team]:
        return self.teams.get_all()

    def get_matches(self, force_refresh: bool = False) -> list[Match]:
        return self.matches.get_all(force_refresh=force_refresh)

    def get_match_teams(self, match_num: str) -> ResolvedMatch:
        '''
        Gets the teams playing in a match, e.g. "Q20".
        Raises MatchNotFoundError when the match is missing even after refreshing the match list.
        '''
        return self.resolver.resolve(match_num)

    async def on_match_queued(self, callback: Callable[[ResolvedMatch], object]) -> None:
        await self.stream.on_match_queued(callback)

    async def on_match_started(self, callback: Callable[[], object]) -> None:
        await self.stream.on_match_started(callback)

    async def close(self) -> None:
        await self.stream.close()
