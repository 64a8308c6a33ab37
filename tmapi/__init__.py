"""Session handling and page fetching for the Tournament Manager web interface."""

from tmapi.tmapi import (
    PageFetcher,
    Session,
    SessionManager,
    defaults,
    endpoint,
    parse_session_cookie,
    parse_table_rows,
)

__all__ = [
    "PageFetcher",
    "Session",
    "SessionManager",
    "defaults",
    "endpoint",
    "parse_session_cookie",
    "parse_table_rows",
]
