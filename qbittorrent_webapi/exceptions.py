"""
Exceptions raised by the qBittorrent Web API client.

- QBittorrentError: Base exception for everything raised by this package
- RequestBuildError: The request could not be constructed (bad URL, bad params)
- TransportError: The request was built but never got a response
- AuthenticationError: Login failed; subclassed by the two ways it can fail
- ResponseDecodeError: A response body did not have the expected shape
"""

from typing import Optional


class QBittorrentError(Exception):
    """Base exception for qBittorrent Web API errors."""
    pass


class RequestBuildError(QBittorrentError):
    """Raised when a request cannot be built."""
    pass


class TransportError(QBittorrentError):
    """Raised on DNS failures, refused connections and timeouts."""
    pass


class AuthenticationError(QBittorrentError):
    """Raised when login does not produce an authenticated session."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationRejectedError(AuthenticationError):
    """
    Raised when the login endpoint answers with anything but 200 OK.

    qBittorrent returns 403 once the caller's IP is banned for too many
    failed attempts. This is server policy, so it is never retried.
    """
    pass


class MissingSessionCookieError(AuthenticationError):
    """Raised when the login response carries no session cookie."""
    pass


class ResponseDecodeError(QBittorrentError):
    """Raised when a response body is not valid JSON or does not fit the expected schema."""

    def __init__(self, message: str, body: str = ""):
        super().__init__(message)
        self.body = body
