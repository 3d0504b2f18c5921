from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way, salted, adaptive password hashing.

    Implementations hold no state beyond their cost configuration.
    """

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext`` with a fresh salt.

        :raises HashingError: On internal faults only, never because of the input.
        """
        ...

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check ``plaintext`` against ``digest``.

        :returns: ``False`` both for a mismatch and for a digest that cannot be parsed.
        """
        ...
