"""Program format detection.

TM renders a different match table for each competition program and never
says which one it is serving, so the program is inferred from the number of
cells in the first row of the matches and rankings tables:

    matches cells | rankings cells | format
    --------------+----------------+--------------
          4       |       -        | COOP
          5       |       -        | SOLO
          7       |       6        | STANDARD_ALT
          7       |     other      | STANDARD

This ties detection to how TM lays out its tables. A TM release that adds or
removes a column will show up as an UnrecognizedFormatError.
"""

import logging
from enum import Enum
from typing import Optional

from shared.errors import UnrecognizedFormatError
from tmapi.tmapi import PageFetcher, endpoint
from tmscraper.models import CoopMatch, Match, SoloMatch, StandardMatch, strip_whitespace

logger = logging.getLogger("tmscraper.formats")


## ---------------------------- Row parsers ---------------------------- ##
def parse_standard_row(cells: list[str]) -> StandardMatch:
    return StandardMatch(
        match_num=strip_whitespace(cells[0]),
        red1=strip_whitespace(cells[1]),
        red2=strip_whitespace(cells[2]),
        blue1=strip_whitespace(cells[3]),
        blue2=strip_whitespace(cells[4]),
    )


def parse_solo_row(cells: list[str]) -> SoloMatch:
    return SoloMatch(
        match_num=strip_whitespace(cells[0]),
        red1=strip_whitespace(cells[1]),
        blue1=strip_whitespace(cells[2]),
    )


def parse_coop_row(cells: list[str]) -> CoopMatch:
    return CoopMatch(
        match_num=strip_whitespace(cells[0]),
        team1=strip_whitespace(cells[1]),
        team2=strip_whitespace(cells[2]),
    )


## ---------------------------- Formats ---------------------------- ##
class ProgramFormat(Enum):
    """Match table layouts. Values are the program names TM uses."""
    STANDARD = "VRC"
    SOLO = "VEXU"
    COOP = "VIQC"
    STANDARD_ALT = "RADC"

    @property
    def program(self) -> str:
        return self.value

    @property
    def slots(self) -> tuple[str, ...]:
        return _SLOTS[self]

    def parse_row(self, cells: list[str]) -> Match:
        return _ROW_PARSERS[self](cells)


_ROW_PARSERS = {
    ProgramFormat.STANDARD: parse_standard_row,
    ProgramFormat.STANDARD_ALT: parse_standard_row,
    ProgramFormat.SOLO: parse_solo_row,
    ProgramFormat.COOP: parse_coop_row,
}

_SLOTS = {
    ProgramFormat.STANDARD: ("red1", "red2", "blue1", "blue2"),
    ProgramFormat.STANDARD_ALT: ("red1", "red2", "blue1", "blue2"),
    ProgramFormat.SOLO: ("red1", "blue1"),
    ProgramFormat.COOP: ("team1", "team2"),
}


def classify(matches_cells: int, rankings_cells: int, source: str = None) -> ProgramFormat:
    if matches_cells == 4:
        return ProgramFormat.COOP
    if matches_cells == 5:
        return ProgramFormat.SOLO
    if matches_cells == 7:
        if rankings_cells == 6:
            return ProgramFormat.STANDARD_ALT
        return ProgramFormat.STANDARD
    raise UnrecognizedFormatError(matches_cells, rankings_cells, source)


class FormatDetector:
    """Works out which program the division is running, once."""

    def __init__(self, fetcher: PageFetcher, division: str):
        self.fetcher = fetcher
        self.division = division
        self._program: Optional[ProgramFormat] = None

    @property
    def program(self) -> Optional[ProgramFormat]:
        return self._program

    def detect(self) -> ProgramFormat:
        if self._program is not None:
            return self._program

        matches_page = endpoint("matches", division=self.division)
        rankings_page = endpoint("rankings", division=self.division)
        matches_cells = self.fetcher.first_row_width(matches_page)
        rankings_cells = self.fetcher.first_row_width(rankings_page)

        program = classify(matches_cells, rankings_cells, source=matches_page)
        logger.info(
            "Detected program %s for %s (match cells: %s, ranking cells: %s)",
            program.program, self.division, matches_cells, rankings_cells,
        )
        self._program = program
        return program
