"""
Authenticated HTTP session for the qBittorrent Web API.

Session owns the one requests.Session used by every command: the normalized
API base URL, the cookie jar holding the login cookie and the authenticated
flag. get() and post() are the only two ways a request leaves this package.

Usage:
    session = connect("http://localhost:8080")
    session.login("admin", "adminadmin")
    response = session.get("app/version")
"""

import threading
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests
from requests.cookies import RequestsCookieJar

from .config import Config
from .exceptions import (
    AuthenticationRejectedError,
    MissingSessionCookieError,
    RequestBuildError,
    TransportError,
)
from .logger import logger


API_PATH = "api/v2/"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# requests raises these while preparing a request, before anything is sent
_BUILD_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


def normalize_url(base_url: str) -> str:
    """Return base_url with exactly one trailing slash followed by the API prefix."""
    if not base_url or not base_url.strip():
        raise RequestBuildError("A base URL is required")
    return base_url.strip().rstrip("/") + "/" + API_PATH


class Session:
    def __init__(
        self,
        base_url: str = Config.QBITTORRENT_URL,
        timeout: Optional[float] = Config.QBITTORRENT_TIMEOUT,
        verify: bool = Config.QBITTORRENT_VERIFY_SSL,
        http: Optional[requests.Session] = None,
    ):
        self.url = normalize_url(base_url)
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()
        self.http.verify = verify
        self.authenticated = False
        # Serializes jar replacement in login/logout against in-flight requests
        self._lock = threading.RLock()

    def __repr__(self):
        return f"<Session url={self.url!r} authenticated={self.authenticated}>"

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        """Release pooled connections held by the underlying requests session."""
        self.http.close()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = self.url + endpoint.lstrip("/")
        headers = kwargs.pop("headers", {})
        headers["Referer"] = self.url
        try:
            with self._lock:
                return self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except _BUILD_ERRORS as e:
            raise RequestBuildError(f"Failed to build the request to {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to execute the {method} request to {url}: {e}") from e

    def get(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> requests.Response:
        """
        Send a GET request with params encoded as the query string.

        The response is returned as is; its status is not checked.
        """
        logger.debug(f"Sending GET request to {self.url}{endpoint} with params {sorted(params or {})}")
        return self._request("GET", endpoint, params=params)

    def post(
        self,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        files: Optional[Any] = None,
    ) -> requests.Response:
        """
        Send a POST request with params as a form-encoded body.

        When files are given the body is multipart instead, which is what
        torrents/add expects for .torrent uploads. The response is returned
        as is; its status is not checked.
        """
        # Only names are logged; values may hold credentials
        logger.debug(f"Sending POST request to {self.url}{endpoint} with fields {sorted(params or {})}")
        if files:
            return self._request("POST", endpoint, data=params or {}, files=files)
        return self._request(
            "POST",
            endpoint,
            data=urlencode(params or {}),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        """
        Log in and keep the session cookie for every later request.

        Only the first cookie of the response is kept, in a fresh jar that
        replaces whatever the session held before.

        Returns:
            True once the session is authenticated

        Raises:
            MissingSessionCookieError: The response set no cookie
            AuthenticationRejectedError: The response status was not 200
            TransportError: The server could not be reached
        """
        with self._lock:
            # requests stores every Set-Cookie on its own; undo that if login fails
            previous = self.http.cookies.copy()
            response = self.post("auth/login", {"username": username, "password": password})

            cookies = list(response.cookies)
            if not cookies or response.status_code != 200:
                self.http.cookies = previous
            if not cookies:
                raise MissingSessionCookieError(
                    f"No cookies in login response (HTTP {response.status_code})",
                    status_code=response.status_code,
                )
            if response.status_code != 200:
                raise AuthenticationRejectedError(
                    f"Login rejected with HTTP {response.status_code}; "
                    "the client IP may be banned for too many failed login attempts",
                    status_code=response.status_code,
                )

            jar = RequestsCookieJar()
            jar.set_cookie(cookies[0])
            self.http.cookies = jar
            self.authenticated = True

        logger.info(f"Logged in successfully to {self.url}")
        return True

    def logout(self, clear_session: bool = False) -> requests.Response:
        """
        Invalidate the session on the server.

        The local cookie jar and authenticated flag are left untouched
        unless clear_session is True.
        """
        response = self.get("auth/logout")
        if clear_session:
            with self._lock:
                self.http.cookies.clear()
                self.authenticated = False
            logger.info(f"Cleared local session for {self.url}")
        return response


def connect(base_url: str = Config.QBITTORRENT_URL, **kwargs) -> Session:
    """Create a Session for base_url. No request is made."""
    return Session(base_url, **kwargs)
