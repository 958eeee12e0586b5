"""Authenticated-encryption token codec.

Tokens look like ``urlmini.v1.local.<base64url(nonce || ciphertext || tag)>``.
The plaintext is a JSON claim envelope holding the standard ``sub``, ``iat``,
``exp`` and ``nbf`` claims next to the full payload under ``payload``.
Everything after the header is sealed with AES-256-GCM; the header itself is
bound as associated data so a token cannot be replayed under another version.
"""

import binascii
import secrets
from base64 import urlsafe_b64decode, urlsafe_b64encode
from datetime import UTC, datetime, timedelta
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import AwareDatetime, BaseModel, ValidationError

from urlmini.services.payload import Payload, new_payload

TOKEN_HEADER = "urlmini.v1.local."

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16


class TokenError(Exception):
    """Base exception for token operations."""


class KeyTooShortError(TokenError):
    """Raised when the symmetric key is not exactly KEY_SIZE bytes."""


class InvalidTokenError(TokenError):
    """Token is invalid."""


class DecodeError(InvalidTokenError):
    """Token failed authentication, is malformed, or has expired.

    These causes are deliberately indistinguishable to callers.
    """


class TokenClaims(BaseModel):
    """Claim envelope sealed inside a token."""

    sub: str
    iat: AwareDatetime
    exp: AwareDatetime
    nbf: AwareDatetime
    payload: dict[str, Any]


def _b64encode(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return urlsafe_b64decode(data + padding)


class TokenCodec:
    """Seals payloads into tokens and opens them again.

    Construct once at startup and share; the key never changes afterwards.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise KeyTooShortError(
                f"Token symmetric key must be exactly {KEY_SIZE} bytes, got {len(key)}"
            )
        self._aead = AESGCM(key)
        self._aad = TOKEN_HEADER.encode("ascii")

    def encode(self, payload: Payload) -> str:
        """Encode a payload into a token string. Uses a fresh nonce per call."""
        claims = TokenClaims(
            sub=str(payload.subject_id),
            iat=payload.issued_at,
            exp=payload.expires_at,
            nbf=datetime.now(UTC),
            payload=payload.model_dump(mode="json"),
        )
        nonce = secrets.token_bytes(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, claims.model_dump_json().encode("utf-8"), self._aad)
        return TOKEN_HEADER + _b64encode(nonce + sealed)

    def decode(self, token: str) -> Payload:
        """Verify a token and return the payload it carries.

        Raises:
            DecodeError: Malformed, tampered, expired or not-yet-valid token.
            InvalidTokenError: The verified envelope has no usable payload.
        """
        claims = self._open(token)

        now = datetime.now(UTC)
        if claims.exp <= now:
            raise DecodeError("Token has expired")
        if claims.nbf > now:
            raise DecodeError("Token is not valid yet")

        try:
            payload = Payload.model_validate(claims.payload)
        except ValidationError as e:
            raise InvalidTokenError("Token payload is invalid") from e
        # The sealed payload carries its own expiry; it must agree with the envelope
        if payload.is_expired(now):
            raise DecodeError("Token has expired")
        return payload

    def create_token(self, subject_id: int, duration: timedelta) -> tuple[str, Payload]:
        """Mint a new token for `subject_id`. Returns (token, payload)."""
        payload = new_payload(subject_id, duration)
        return self.encode(payload), payload

    def _open(self, token: str) -> TokenClaims:
        if not token.startswith(TOKEN_HEADER):
            raise DecodeError("Token has an unsupported header")

        body = token[len(TOKEN_HEADER) :]
        try:
            raw = _b64decode(body)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Token is not valid base64") from e
        # Reject non-canonical encodings (stray characters, non-zero padding bits)
        if _b64encode(raw) != body:
            raise DecodeError("Token is not canonically encoded")

        if len(raw) < NONCE_SIZE + TAG_SIZE:
            raise DecodeError("Token is too short")

        nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            plaintext = self._aead.decrypt(nonce, sealed, self._aad)
        except InvalidTag as e:
            raise DecodeError("Token authentication failed") from e

        try:
            return TokenClaims.model_validate_json(plaintext)
        except ValidationError as e:
            raise DecodeError("Token claims are malformed") from e
