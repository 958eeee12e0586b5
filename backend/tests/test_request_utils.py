"""Tests for request utility functions."""

from unittest.mock import MagicMock

import pytest

from urlmini.core.request_utils import (
    MAX_USER_AGENT_LENGTH,
    _is_valid_ip,
    get_client_ip,
    get_user_agent,
)


class TestIsValidIP:
    """Tests for _is_valid_ip function."""

    @pytest.mark.parametrize("ip", ["192.168.1.1", "8.8.8.8", "::1", "2001:db8::1"])
    def test_valid_addresses(self, ip):
        assert _is_valid_ip(ip) is True

    @pytest.mark.parametrize(
        "ip", ["", "not-an-ip", "256.1.1.1", "192.168.1.1:8080", " 192.168.1.1"]
    )
    def test_invalid_addresses(self, ip):
        assert _is_valid_ip(ip) is False


def _request(client_host=None, headers=None):
    """Create a mock FastAPI request."""
    request = MagicMock()
    request.headers = headers or {}
    if client_host is None:
        request.client = None
    else:
        request.client = MagicMock()
        request.client.host = client_host
    return request


class TestGetClientIP:
    """Tests for get_client_ip function."""

    def test_client_host(self):
        assert get_client_ip(_request("203.0.113.9")) == "203.0.113.9"

    def test_no_client_is_empty_string(self):
        assert get_client_ip(_request()) == ""

    def test_x_real_ip_from_localhost(self):
        request = _request("127.0.0.1", {"X-Real-IP": " 198.51.100.4 "})
        assert get_client_ip(request) == "198.51.100.4"

    def test_x_real_ip_not_trusted_from_external(self):
        request = _request("203.0.113.9", {"X-Real-IP": "198.51.100.4"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_invalid_x_real_ip_skipped(self):
        request = _request("127.0.0.1", {"X-Real-IP": "garbage"})
        assert get_client_ip(request) == "127.0.0.1"

    def test_x_forwarded_for_ignored(self):
        request = _request("127.0.0.1", {"X-Forwarded-For": "198.51.100.4"})
        assert get_client_ip(request) == "127.0.0.1"


class TestGetUserAgent:
    def test_missing_header(self):
        assert get_user_agent(_request("127.0.0.1")) == ""

    def test_long_header_truncated(self):
        request = _request("127.0.0.1", {"User-Agent": "x" * 2000})
        assert get_user_agent(request) == "x" * MAX_USER_AGENT_LENGTH
