from __future__ import annotations

from .cache import (
    CacheError,
    CacheExpired,
    CacheManager,
    EncodingError,
    FileError,
    InvalidCache,
    NotAvailable,
)
from .host import PluginError, PluginHost, PluginNotFound

__all__ = [
    "CacheError",
    "CacheExpired",
    "CacheManager",
    "EncodingError",
    "FileError",
    "InvalidCache",
    "NotAvailable",
    "PluginError",
    "PluginHost",
    "PluginNotFound",
]
