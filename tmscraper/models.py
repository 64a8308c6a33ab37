"""Records produced from Tournament Manager pages."""

import re
from dataclasses import asdict, dataclass, field
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def strip_whitespace(value: str) -> str:
    """Remove every whitespace character, including ones inside the string."""
    return _WHITESPACE.sub("", value or "")


@dataclass(frozen=True)
class Team:
    number: str
    name: str
    location: str
    organization: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class StandardMatch:
    """Two alliances of two teams."""
    match_num: str
    red1: str
    red2: str
    blue1: str
    blue2: str

    def slots(self) -> dict[str, str]:
        return {"red1": self.red1, "red2": self.red2, "blue1": self.blue1, "blue2": self.blue2}


@dataclass(frozen=True)
class SoloMatch:
    """One team per alliance."""
    match_num: str
    red1: str
    blue1: str

    def slots(self) -> dict[str, str]:
        return {"red1": self.red1, "blue1": self.blue1}


@dataclass(frozen=True)
class CoopMatch:
    """Two teams playing together."""
    match_num: str
    team1: str
    team2: str

    def slots(self) -> dict[str, str]:
        return {"team1": self.team1, "team2": self.team2}


Match = StandardMatch | SoloMatch | CoopMatch


@dataclass
class ResolvedMatch:
    """A match joined with the roster.

    `teams` holds exactly the role slots of the match's layout. A slot maps to
    None when its team number has no row on the teams page.
    """
    match_num: str
    program: str
    teams: dict[str, Optional[Team]] = field(default_factory=dict)

    @property
    def missing_slots(self) -> list[str]:
        return [slot for slot, team in self.teams.items() if team is None]

    def __getitem__(self, slot: str) -> Optional[Team]:
        return self.teams[slot]

    def to_dict(self) -> dict:
        result = {"match_num": self.match_num, "program": self.program}
        for slot, team in self.teams.items():
            result[slot] = team.to_dict() if team else None
        return result
