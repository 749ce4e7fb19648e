"""In-process cache for notification preferences."""

import time
from collections.abc import Callable, Iterable

from domain.entities.notification import NotificationPreference


def _key(tenant_id: str, email: str) -> tuple[str, str]:
    return tenant_id, email.strip().casefold()


class PreferenceCache:
    """TTL cache of preferences keyed by (tenant_id, email).

    Emails are matched case-insensitively. Owned by whoever builds the
    engine, so each test or process can construct its own instance.
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, NotificationPreference]] = {}

    def get(self, tenant_id: str, email: str) -> NotificationPreference | None:
        """Return a cached preference, or None when absent or expired."""
        key = _key(tenant_id, email)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, pref = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return pref

    def put(self, pref: NotificationPreference) -> None:
        if self._ttl <= 0:
            return
        self._entries[_key(pref.tenant_id, pref.user_email)] = (self._clock() + self._ttl, pref)

    def put_many(self, prefs: Iterable[NotificationPreference]) -> None:
        for pref in prefs:
            self.put(pref)

    def invalidate(self, tenant_id: str, email: str | None = None) -> int:
        """Drop one user's entry, or every entry of a tenant when email is None.

        Returns:
            Number of entries removed.
        """
        if email is not None:
            return 1 if self._entries.pop(_key(tenant_id, email), None) else 0

        keys = [k for k in self._entries if k[0] == tenant_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()
