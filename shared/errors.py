"""Exceptions and warnings raised by the Tournament Manager client."""

import requests


# Network and HTTP failures are not wrapped. Whatever requests raises reaches
# the caller as-is; this name only exists so callers can catch it by role.
TransportError = requests.RequestException


class TMScraperError(Exception):
    """Base class for errors raised by this project."""


class AuthenticationError(TMScraperError):
    """The login endpoint did not hand back a usable session cookie."""

    def __init__(self, message: str, endpoint: str = None):
        self.endpoint = endpoint
        if endpoint:
            message = f"{message} (endpoint: {endpoint})"
        super().__init__(message)


class UnrecognizedFormatError(TMScraperError):
    """The match table shape does not correspond to any known program."""

    def __init__(self, matches_cells: int, rankings_cells: int = None, endpoint: str = None):
        self.matches_cells = matches_cells
        self.rankings_cells = rankings_cells
        self.endpoint = endpoint
        message = (
            f"Unrecognized program format: match rows have {matches_cells} cells, "
            f"ranking rows have {rankings_cells} cells"
        )
        if endpoint:
            message += f" (endpoint: {endpoint})"
        super().__init__(message)


class MatchNotFoundError(TMScraperError):
    """A match number is still missing after the match list was refreshed."""

    def __init__(self, match_num: str):
        self.match_num = match_num
        super().__init__(f"Match {match_num} not found")


class PartialJoinWarning(UserWarning):
    """A resolved match has a slot whose team is missing from the roster."""
