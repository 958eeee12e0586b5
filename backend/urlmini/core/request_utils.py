"""Request helpers for session provenance metadata."""

import ipaddress
import logging

from fastapi import Request

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = ("127.0.0.1", "::1", "localhost")


def _is_valid_ip(ip_str: str) -> bool:
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """Get the client IP address recorded on a new session.

    X-Real-IP is only honoured when the direct peer is a local reverse proxy;
    X-Forwarded-For is never trusted since clients can forge it.
    Returns an empty string when no peer address is known.
    """
    if request.client and request.client.host in LOOPBACK_HOSTS:
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            ip = real_ip.strip()
            if _is_valid_ip(ip):
                return ip
            logger.warning(f"Invalid X-Real-IP: {real_ip}")

    if request.client:
        return request.client.host

    return ""


MAX_USER_AGENT_LENGTH = 512


def get_user_agent(request: Request) -> str:
    """User-Agent header, truncated to fit the sessions.user_agent column."""
    return request.headers.get("User-Agent", "")[:MAX_USER_AGENT_LENGTH]
