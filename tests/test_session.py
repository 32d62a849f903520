"""
Tests for the authenticated session: URL normalization, request encoding,
headers, login/logout and error wrapping.
"""

import pytest
import requests

from qbittorrent_webapi import (
    AuthenticationError,
    AuthenticationRejectedError,
    MissingSessionCookieError,
    RequestBuildError,
    Session,
    TransportError,
    connect,
)
from qbittorrent_webapi.session import normalize_url

from conftest import API_URL, endpoint, form, query


class TestNormalizeUrl:
    def test_appends_api_prefix(self):
        assert normalize_url("http://localhost:8080") == "http://localhost:8080/api/v2/"

    def test_existing_trailing_slash_is_not_doubled(self):
        assert normalize_url("http://localhost:8080/") == "http://localhost:8080/api/v2/"
        assert normalize_url("http://localhost:8080//") == "http://localhost:8080/api/v2/"

    def test_keeps_reverse_proxy_path(self):
        assert normalize_url("https://seedbox.example/qbt") == "https://seedbox.example/qbt/api/v2/"

    def test_empty_url_is_a_build_error(self):
        with pytest.raises(RequestBuildError):
            normalize_url("")

    def test_connect_makes_no_request(self, adapter):
        """connect() only builds the session."""
        qbt_session = connect("http://localhost:8080")
        assert qbt_session.url == "http://localhost:8080/api/v2/"
        assert qbt_session.authenticated is False
        assert adapter.requests == []


class TestDispatch:
    def test_get_encodes_params_as_query(self, session, adapter):
        session.get("torrents/info", {"filter": "downloading", "category": "My category"})

        request = adapter.last
        assert request.method == "GET"
        assert endpoint(request) == "torrents/info"
        assert query(request) == {"filter": "downloading", "category": "My category"}
        assert request.body is None

    def test_get_without_params(self, session, adapter):
        session.get("app/version")
        assert adapter.last.url == API_URL + "app/version"

    def test_post_encodes_params_as_form_body(self, session, adapter):
        session.post("torrents/setCategory", {"hashes": "abc", "category": "tv"})

        request = adapter.last
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert form(request) == {"hashes": "abc", "category": "tv"}
        assert "?" not in request.url

    def test_post_body_is_deterministic(self, session, adapter):
        params = {"hashes": "a|b", "value": "true"}
        session.post("torrents/setForceStart", params)
        session.post("torrents/setForceStart", params)
        assert adapter.requests[0].body == adapter.requests[1].body == "hashes=a%7Cb&value=true"

    def test_post_without_params_still_sets_content_type(self, session, adapter):
        session.post("app/shutdown")
        assert adapter.last.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_referer_is_base_url(self, session, adapter):
        session.get("app/version")
        session.post("app/shutdown")
        assert all(r.headers["Referer"] == API_URL for r in adapter.requests)

    def test_timeout_is_passed_to_transport(self, session, adapter):
        session.get("app/version")
        assert adapter.kwargs[-1]["timeout"] == 5

    def test_status_is_not_validated(self, session, adapter):
        """Non-2xx responses are handed back, not raised."""
        adapter.queue("Forbidden", status=403)
        response = session.get("app/preferences")
        assert response.status_code == 403
        assert response.text == "Forbidden"

    def test_connection_error_is_wrapped(self, session, adapter):
        adapter.queue_error(requests.exceptions.ConnectionError("connection refused"))
        with pytest.raises(TransportError) as exc_info:
            session.get("app/version")
        assert "app/version" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_timeout_is_wrapped(self, session, adapter):
        adapter.queue_error(requests.exceptions.ReadTimeout("timed out"))
        with pytest.raises(TransportError):
            session.post("torrents/pause", {"hashes": "all"})

    def test_errors_are_not_retried(self, session, adapter):
        adapter.queue_error(requests.exceptions.ConnectionError("connection refused"))
        with pytest.raises(TransportError):
            session.get("app/version")
        assert len(adapter.requests) == 1

    def test_url_without_scheme_is_a_build_error(self):
        qbt_session = Session("example.com")
        with pytest.raises(RequestBuildError):
            qbt_session.get("app/version")


class TestLogin:
    def test_login_success(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "abc123"})

        assert session.login("admin", "secret") is True
        assert session.authenticated is True

        request = adapter.last
        assert endpoint(request) == "auth/login"
        assert request.method == "POST"
        assert form(request) == {"username": "admin", "password": "secret"}

    def test_cookie_is_sent_after_login(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "abc123"})
        session.login("admin", "secret")

        session.get("app/version")
        session.post("torrents/pause", {"hashes": "all"})
        assert adapter.requests[1].headers["Cookie"] == "SID=abc123"
        assert adapter.requests[2].headers["Cookie"] == "SID=abc123"

    def test_only_first_cookie_is_kept(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "abc123", "tracking": "xyz"})
        session.login("admin", "secret")

        session.get("app/version")
        assert adapter.last.headers["Cookie"] == "SID=abc123"

    def test_login_replaces_previous_cookie(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "first"})
        adapter.queue("Ok.", cookies={"SID": "second"})
        session.login("admin", "secret")
        session.login("admin", "secret")

        session.get("app/version")
        assert adapter.last.headers["Cookie"] == "SID=second"

    def test_missing_cookie_fails(self, session, adapter):
        """qBittorrent answers a wrong password with 200 "Fails." and no cookie."""
        adapter.queue("Fails.", status=200)

        with pytest.raises(MissingSessionCookieError) as exc_info:
            session.login("admin", "wrong")
        assert exc_info.value.status_code == 200
        assert session.authenticated is False

    def test_missing_cookie_fails_regardless_of_status(self, session, adapter):
        adapter.queue("Forbidden", status=403)
        with pytest.raises(MissingSessionCookieError):
            session.login("admin", "secret")

    def test_non_200_is_rejected_even_with_cookie(self, session, adapter):
        adapter.queue("Your IP address has been banned", status=403, cookies={"SID": "abc123"})

        with pytest.raises(AuthenticationRejectedError) as exc_info:
            session.login("admin", "secret")
        assert exc_info.value.status_code == 403
        assert session.authenticated is False

    def test_rejected_login_does_not_attach_cookie(self, session, adapter):
        adapter.queue("Forbidden", status=403, cookies={"SID": "abc123"})
        with pytest.raises(AuthenticationError):
            session.login("admin", "secret")

        session.get("app/version")
        assert "Cookie" not in adapter.last.headers

    def test_login_transport_error(self, session, adapter):
        adapter.queue_error(requests.exceptions.ConnectionError("no route to host"))
        with pytest.raises(TransportError):
            session.login("admin", "secret")
        assert session.authenticated is False


class TestLogout:
    def test_logout_keeps_local_state_by_default(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "abc123"})
        session.login("admin", "secret")

        response = session.logout()
        assert response.status_code == 200
        assert endpoint(adapter.last) == "auth/logout"
        assert adapter.last.method == "GET"
        assert session.authenticated is True

        session.get("app/version")
        assert adapter.last.headers["Cookie"] == "SID=abc123"

    def test_logout_can_clear_local_state(self, session, adapter):
        adapter.queue("Ok.", cookies={"SID": "abc123"})
        session.login("admin", "secret")

        session.logout(clear_session=True)
        assert session.authenticated is False

        session.get("app/version")
        assert "Cookie" not in adapter.last.headers
