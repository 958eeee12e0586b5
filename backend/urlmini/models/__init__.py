# urlmini Models
from urlmini.models.link import Link
from urlmini.models.session import Session
from urlmini.models.user import User

__all__ = [
    "Link",
    "Session",
    "User",
]
