"""Abstract base class for cache service providers.

Defines the contract for the short-lived key-value store that holds
pending interaction state (extraction results waiting for a button
click, preview-to-record mappings, in-flight claims).  The bot ships an
in-memory implementation; the interface keeps the orchestrators
unaware of how entries expire.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services with per-entry expiry.

    All operations are async so a network-backed store could be dropped
    in without changing callers.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Does not refresh the entry's expiry and does not copy the value.

        Returns
        -------
        Any or None
            The cached value if present and not expired; ``None`` otherwise.
        """

    @abstractmethod
    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* under *key*, replacing any existing entry.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store (kept by reference).
        ttl:
            Time-to-live in seconds.  ``None`` uses the provider default.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key*; a no-op if it is absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""

    @abstractmethod
    async def claim(self, key: str, ttl: float | None = None) -> bool:
        """Atomically create *key* if it is absent.

        Returns
        -------
        bool
            ``True`` if this caller created the entry, ``False`` if a live
            entry already existed.  Used as an advisory lock.
        """
