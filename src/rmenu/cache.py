from __future__ import annotations

import getpass
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from urllib.parse import quote

import cbor2
import psutil
from loguru import logger

from rmenu.config.models import CachePolicy, PluginConfig
from rmenu.plugin.protocol import ENTRIES_ADAPTER, Entry

DEFAULT_CACHE_DIR = Path("~/.config/rmenu")


class CacheError(Exception):
    """Cached results cannot be used; the plugin must be run again."""


class NotAvailable(CacheError):
    """No cache artifact exists for the plugin."""


class InvalidCache(CacheError):
    """The plugin's cache setting disables caching."""


class CacheExpired(CacheError):
    """The artifact is older than the cache setting allows."""


class FileError(CacheError):
    """The artifact could not be read or written."""


class EncodingError(CacheError):
    """The artifact could not be encoded or decoded."""


def last_login_time() -> Optional[float]:
    """Start time of the current user's latest login session, if known."""

    try:
        user = getpass.getuser()
        sessions = [u.started for u in psutil.users() if u.name == user]
    except (OSError, KeyError, psutil.Error) as exc:
        logger.warning(f"Cannot determine last login time: {exc}")
        return None
    if not sessions:
        return None
    return max(sessions)


class CacheManager:
    """Per-plugin result cache stored as one CBOR file per plugin."""

    def __init__(
        self,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        *,
        clock: Callable[[], float] = time.time,
        last_login: Callable[[], Optional[float]] = last_login_time,
    ) -> None:
        self._cache_dir = Path(cache_dir).expanduser()
        self._clock = clock
        self._last_login = last_login

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def cache_file(self, name: str) -> Path:
        # quoting keeps "/" and friends out of the file name, and is injective
        return self._cache_dir / f"{quote(name, safe='')}.cache"

    def read_cache(self, name: str, cfg: PluginConfig) -> List[Entry]:
        """Return the cached entries for a plugin if its cache is still valid.

        Raises one of the CacheError subclasses otherwise.
        """

        path = self.cache_file(name)
        if not path.exists():
            raise NotAvailable(f"no cache for plugin {name!r}")

        try:
            modified = path.stat().st_mtime
        except OSError as exc:
            raise FileError(f"cannot stat {path}: {exc}") from exc

        self._check_expiry(name, cfg, modified)

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileError(f"cannot read {path}: {exc}") from exc
        try:
            entries = ENTRIES_ADAPTER.validate_python(cbor2.loads(data))
        except (cbor2.CBORDecodeError, ValueError) as exc:
            raise EncodingError(f"corrupt cache for plugin {name!r}: {exc}") from exc

        logger.debug(f"Cache hit for {name!r}: {len(entries)} entries")
        return entries

    def _check_expiry(self, name: str, cfg: PluginConfig, modified: float) -> None:
        policy = cfg.cache.policy
        if policy is CachePolicy.NO_CACHE:
            raise InvalidCache(f"caching disabled for plugin {name!r}")
        if policy is CachePolicy.ON_LOGIN:
            last = self._last_login()
            if last is not None and last > modified:
                raise CacheExpired(f"cache for plugin {name!r} predates last login")
        elif policy is CachePolicy.AFTER_SECONDS:
            elapsed = max(0.0, self._clock() - modified)
            if elapsed >= (cfg.cache.seconds or 0):
                raise CacheExpired(
                    f"cache for plugin {name!r} is {elapsed:.0f}s old "
                    f"(limit {cfg.cache.seconds}s)"
                )

    def write_cache(self, name: str, cfg: PluginConfig, entries: Sequence[Entry]) -> None:
        """Persist entries for a plugin unless its cache is disabled.

        The artifact is replaced atomically so readers never see a partial file.
        """

        if cfg.cache.policy is CachePolicy.NO_CACHE:
            return

        try:
            data = cbor2.dumps(
                [entry.model_dump(mode="json", exclude_none=True) for entry in entries]
            )
        except cbor2.CBOREncodeError as exc:
            raise EncodingError(f"cannot encode cache for plugin {name!r}: {exc}") from exc

        path = self.cache_file(name)
        tmp_name: str | None = None
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self._cache_dir, prefix=f".{path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise FileError(f"cannot write {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug(f"Wrote {len(entries)} entries to cache for {name!r}")
