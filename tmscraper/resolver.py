import logging
import warnings

from shared.errors import MatchNotFoundError, PartialJoinWarning
from tmscraper.books import MatchBook, TeamBook
from tmscraper.formats import FormatDetector
from tmscraper.models import ResolvedMatch, strip_whitespace

logger = logging.getLogger("tmscraper.resolver")


class MatchResolver:
    """Joins a match from the match list with the teams playing in it."""

    def __init__(self, matches: MatchBook, teams: TeamBook, detector: FormatDetector):
        self.matches = matches
        self.teams = teams
        self.detector = detector

    def find_match(self, match_num: str):
        match = self.matches.get(match_num)
        if match is None:
            # The match may have been created since the list was last fetched.
            logger.info("Match %s not in cached list, refreshing matches", match_num)
            self.matches.refresh()
            match = self.matches.get(match_num)
            if match is None:
                raise MatchNotFoundError(match_num)
        return match

    def resolve(self, raw_match_num: str) -> ResolvedMatch:
        # Match names sent over the websocket sometimes contain spaces.
        match_num = strip_whitespace(raw_match_num)
        match = self.find_match(match_num)
        program = self.detector.detect()

        team_numbers = match.slots()
        resolved = ResolvedMatch(match_num=match_num, program=program.program)
        for slot in program.slots:
            resolved.teams[slot] = self.teams.get(team_numbers[slot])

        if resolved.missing_slots:
            warnings.warn(
                f"Match {match_num}: no team data for {', '.join(resolved.missing_slots)}",
                PartialJoinWarning,
                stacklevel=2,
            )
        return resolved
