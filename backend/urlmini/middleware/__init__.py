"""Middleware module for urlmini."""

from urlmini.middleware.authentication import AuthenticationMiddleware
from urlmini.middleware.context import RequestContext, get_request_context
from urlmini.middleware.identity import IdentityLivenessMiddleware

__all__ = [
    "AuthenticationMiddleware",
    "IdentityLivenessMiddleware",
    "RequestContext",
    "get_request_context",
]
