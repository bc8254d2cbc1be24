import secrets
import time
from dataclasses import dataclass
from typing import Callable

VERIFIED = "verified"
MISSING = "missing"
EXPIRED = "expired"
MISMATCH = "mismatch"


@dataclass
class _Entry:
    code: str
    expires_at: float


def normalize_phone(phone: str) -> str:
    """Indian mobile key: 91 + last ten digits."""
    digits = "".join(ch for ch in phone if ch.isdigit())
    return f"91{digits[-10:]}"


class OtpStore:
    """One-time codes keyed by phone number, each valid for ttl_seconds and usable once."""

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def __len__(self) -> int:
        self._purge()
        return len(self._entries)

    def _purge(self) -> None:
        t = self._clock()
        for key in [k for k, e in self._entries.items() if e.expires_at < t]:
            del self._entries[key]

    def issue(self, phone: str) -> str:
        self._purge()
        key = normalize_phone(phone)
        code = f"{secrets.randbelow(900000) + 100000}"
        self._entries[key] = _Entry(code=code, expires_at=self._clock() + self.ttl_seconds)
        return code

    def verify(self, phone: str, code: str) -> str:
        key = normalize_phone(phone)
        entry = self._entries.get(key)
        if entry is None:
            return MISSING

        if self._clock() > entry.expires_at:
            del self._entries[key]
            return EXPIRED

        if not secrets.compare_digest(entry.code, str(code)):
            return MISMATCH

        del self._entries[key]
        return VERIFIED
