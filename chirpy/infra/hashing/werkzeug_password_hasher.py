# chirpy/infra/hashing/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from chirpy.services._shared.errors import HashingError
from chirpy.services._shared.ports import PasswordHasher

DEFAULT_METHOD = "scrypt"
DEFAULT_SALT_LENGTH = 16


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security`.

    :param method: Werkzeug method string with optional cost parameters,
        e.g. ``"scrypt:32768:8:1"`` or ``"pbkdf2:sha256:600000"``.
    :param salt_length: Length of the random salt embedded in each digest.
    """

    method: str = DEFAULT_METHOD
    salt_length: int = DEFAULT_SALT_LENGTH

    def hash(self, plaintext: str) -> str:
        try:
            return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)
        except (ValueError, OSError) as exc:
            # Unknown method, scrypt memory limit or entropy source failure
            raise HashingError(f"Password hashing failed ({type(exc).__name__}).") from exc

    def verify(self, plaintext: str, digest: str) -> bool:
        if not digest:
            return False
        try:
            # ``check_password_hash`` compares with ``hmac.compare_digest``
            return bool(check_password_hash(digest, plaintext))
        except (ValueError, TypeError):
            # Unparseable digest or unknown method: same outcome as a mismatch
            return False
