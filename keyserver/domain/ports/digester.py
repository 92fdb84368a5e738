from typing import Protocol


class DigesterPort(Protocol):
    def of(self, email: str) -> bytes:
        """Deterministic, salted, one-way digest of an email address."""
