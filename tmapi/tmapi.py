"""Authenticated access to the Tournament Manager web interface."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

import requests
from bs4 import BeautifulSoup

from shared.errors import AuthenticationError

logger = logging.getLogger("tmscraper.tmapi")

'''
    Default configuration values.
    These can be modified as needed.
'''

defaults = {
    "address": "localhost",               #Host (and optional port) of the TM server, without a scheme.
    "user": "admin",                      #TM only has one account that can log in to the web interface.
    "division": "division1",              #Division name as it appears in the web interface URLs.
    "fieldset_id": 1,                     #Field set IDs start at 1 and count up.
    "omit_country": False,                #Drop the country from team locations that also have a state/province.
}

'''
Pages served by TM. The division pages are formatted with the division name.
'''
endpoints = {
    "login": "admin/login",
    "teams": "{division}/teams",
    "matches": "{division}/matches",
    "rankings": "{division}/rankings",
    "fieldset": "fieldsets/{fieldset_id}",
}

TABLE_ROW_SELECTOR = "table.table-striped > tbody > tr"


def endpoint(name: str, **values) -> str:
    return endpoints[name].format(**values)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


## <------------------------------------- Session handling -------------------------------------> ##

@dataclass(frozen=True)
class Session:
    credential: str
    expires_at: datetime

    @property
    def cookie_header(self) -> str:
        return f'user="{self.credential}"'

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


def parse_session_cookie(cookie_text: Optional[str], login_url: str = None) -> Session:
    '''
    Builds a Session from the Set-Cookie header returned by the login page.

    TM answers with something like:
        user="<token>"; expires=Mon, 20 Oct 2026 14:03:11 GMT; Path=/
    The first directive carries the quoted token and the second the expiry
    (the cookie is good for one hour).
    '''
    if not cookie_text:
        raise AuthenticationError("Login response carried no Set-Cookie header", login_url)

    directives = cookie_text.split(";")
    try:
        credential = directives[0].split('"')[1]
        attribute, expires_text = directives[1].split("=", 1)
    except (IndexError, ValueError):
        raise AuthenticationError(f"Unexpected Set-Cookie header: {cookie_text!r}", login_url) from None

    if not credential or attribute.strip().lower() != "expires":
        raise AuthenticationError(f"Unexpected Set-Cookie header: {cookie_text!r}", login_url)

    try:
        expires_at = parsedate_to_datetime(expires_text.strip())
    except (TypeError, ValueError):
        raise AuthenticationError(f"Unreadable cookie expiry: {expires_text!r}", login_url) from None
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    return Session(credential=credential, expires_at=expires_at)


class SessionManager:
    """Owns the TM session cookie and logs in again whenever it has expired."""

    def __init__(
        self,
        address: str = defaults["address"],
        password: str = "",
        user: str = defaults["user"],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.address = address
        self.password = password
        self.user = user
        self.clock = clock
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def login_url(self) -> str:
        return f"http://{self.address}/{endpoint('login')}"

    def authenticate(self) -> Session:
        '''
        Logs in to TM with the admin password and stores the resulting session.
        Transport errors propagate untouched; a response without the expected
        cookie raises AuthenticationError and is not retried.
        '''
        logger.info("Authenticating with TM server at http://%s...", self.address)
        form = {
            "user": (None, self.user),
            "password": (None, self.password),
            "submit": (None, ""),
        }
        # TM redirects after login; the cookie is only on the first response.
        response = requests.post(self.login_url, files=form, allow_redirects=False)
        session = parse_session_cookie(response.headers.get("Set-Cookie"), self.login_url)
        self._session = session
        logger.debug("Session valid until %s", session.expires_at.isoformat())
        return session

    def ensure_valid(self) -> Session:
        session = self._session
        if session is None or not session.is_valid(self.clock()):
            session = self.authenticate()
        return session

    def invalidate(self) -> None:
        self._session = None


## <------------------------------------- Page fetching -------------------------------------> ##

def parse_table_rows(page_data: str) -> list[list[str]]:
    '''
    Returns the cell text of every data row in the page's striped table.
    '''
    soup = BeautifulSoup(page_data, "html.parser")
    rows = []
    for row in soup.select(TABLE_ROW_SELECTOR):
        rows.append([cell.get_text() for cell in row.find_all("td")])
    return rows


class PageFetcher:
    """Issues cookie-authenticated GET requests against the TM web interface."""

    def __init__(self, session_manager: SessionManager):
        self.session_manager = session_manager

    @property
    def base_url(self) -> str:
        return f"http://{self.session_manager.address}"

    def fetch(self, path: str) -> str:
        session = self.session_manager.ensure_valid()
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s", url)
        response = requests.get(url, headers={"Cookie": session.cookie_header})
        response.raise_for_status()
        return response.text

    def fetch_rows(self, path: str) -> list[list[str]]:
        return parse_table_rows(self.fetch(path))

    def first_row_width(self, path: str) -> int:
        rows = self.fetch_rows(path)
        return len(rows[0]) if rows else 0
