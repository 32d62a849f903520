"""
Shared fixtures: a Session whose HTTP traffic goes to an in-memory adapter.

FakeAdapter records every prepared request and answers with queued canned
responses, so tests see the exact URL, headers, body and cookies that
requests would put on the wire.
"""

from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.cookies import create_cookie
from requests.structures import CaseInsensitiveDict

from qbittorrent_webapi import QBittorrentClient, Session


BASE_URL = "http://127.0.0.1:8080"
API_URL = BASE_URL + "/api/v2/"


class FakeAdapter(BaseAdapter):
    def __init__(self):
        super().__init__()
        self.requests = []
        self.kwargs = []
        self._queue = []

    def queue(self, body="Ok.", status=200, cookies=None):
        """Queue a response; cookies is a dict of name -> value set by the server."""
        self._queue.append((status, body, cookies or {}))

    def queue_error(self, error):
        self._queue.append(error)

    @property
    def last(self):
        return self.requests[-1]

    def send(self, request, **kwargs):
        self.requests.append(request)
        self.kwargs.append(kwargs)
        item = self._queue.pop(0) if self._queue else (200, "Ok.", {})
        if isinstance(item, Exception):
            raise item
        status, body, cookies = item

        response = requests.Response()
        response.status_code = status
        response.reason = "OK" if status == 200 else "Error"
        response._content = body.encode("utf-8")
        response.encoding = "utf-8"
        response.headers = CaseInsensitiveDict({"Content-Type": "text/plain; charset=UTF-8"})
        response.url = request.url
        response.request = request
        host = urlsplit(request.url).hostname
        for name, value in cookies.items():
            response.cookies.set_cookie(create_cookie(name, value, domain=host))
        return response

    def close(self):
        pass


def endpoint(request) -> str:
    """Path of a recorded request relative to the API prefix."""
    return urlsplit(request.url).path[len("/api/v2/"):]


def query(request) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(request.url).query, keep_blank_values=True).items()}


def form(request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.body or "", keep_blank_values=True).items()}


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def session(adapter):
    qbt_session = Session(BASE_URL, timeout=5)
    qbt_session.http.mount("http://", adapter)
    yield qbt_session
    qbt_session.close()


@pytest.fixture
def client(session):
    return QBittorrentClient(session=session, ignore_decode_errors=False)


@pytest.fixture
def lenient_client(session):
    """Client that returns zero values instead of raising on undecodable bodies."""
    return QBittorrentClient(session=session, ignore_decode_errors=True)
