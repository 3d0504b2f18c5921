"""Bearer credential extraction from the ``Authorization`` header."""

from __future__ import annotations

from typing import Final

from chirpy.services._shared.errors import MalformedCredentialError, MissingCredentialError

BEARER_PREFIX: Final[str] = "Bearer "


def extract_bearer_token(header_value: str | None) -> str:
    """
    Return the credential carried by an ``Authorization: Bearer <token>`` header.

    The scheme match is case-sensitive and expects exactly one space.

    :param header_value: Raw header value, ``None`` when the header is absent.
    :returns: The trimmed token.
    :raises MissingCredentialError: Header absent or empty.
    :raises MalformedCredentialError: Wrong scheme or empty token.
    """
    if not header_value:
        raise MissingCredentialError()
    if not header_value.startswith(BEARER_PREFIX):
        raise MalformedCredentialError()
    token = header_value[len(BEARER_PREFIX):].strip()
    if not token:
        raise MalformedCredentialError()
    return token
