"""Cache providers.

MemoryCacheProvider keeps entries in process memory with per-entry TTLs;
pending interactions do not survive a restart.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
