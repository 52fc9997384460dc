"""Tests for the session module."""

import requests
from requests.adapters import HTTPAdapter

from nami_api.session import USER_AGENT, create_session


class TestCreateSession:
    """Test HTTP session creation."""

    def test_returns_requests_session(self):
        session = create_session()
        assert isinstance(session, requests.Session)
        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["Accept"] == "application/json"

    def test_no_retries_by_default(self):
        session = create_session()
        adapter = session.get_adapter("https://nami.dpsg.de")
        assert adapter.max_retries.total == 0

    def test_retries_mounted_for_both_schemes(self):
        session = create_session(retries=3)
        for url in ("https://nami.dpsg.de", "http://localhost"):
            adapter = session.get_adapter(url)
            assert isinstance(adapter, HTTPAdapter)
            assert adapter.max_retries.total == 3
            assert 503 in adapter.max_retries.status_forcelist

    def test_sessions_do_not_share_cookies(self):
        a = create_session()
        b = create_session()
        a.cookies.set("JSESSIONID", "abc")
        assert "JSESSIONID" not in b.cookies
