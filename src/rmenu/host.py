from __future__ import annotations

import os
import subprocess
import threading
from typing import List, Tuple

from loguru import logger

from rmenu.cache import CacheError, CacheManager
from rmenu.config.models import Config, PluginConfig
from rmenu.plugin.protocol import Entry, Options
from rmenu.plugin.stream import iter_messages


class PluginError(RuntimeError):
    """A plugin process could not be run or exited unsuccessfully."""


class PluginNotFound(KeyError):
    """No plugin with the requested name is configured."""


class PluginHost:
    """Load plugin results into the shared config, using the cache when valid."""

    def __init__(self, config: Config, cache: CacheManager) -> None:
        self.config = config
        self.cache = cache
        self._overlay_lock = threading.Lock()

    def plugin(self, name: str) -> PluginConfig:
        try:
            return self.config.plugins[name]
        except KeyError:
            raise PluginNotFound(name) from None

    def overlay(self, options: Options) -> None:
        """Apply an Options message; overlays never interleave."""

        with self._overlay_lock:
            self.config.update(options)

    def load(self, name: str) -> List[Entry]:
        plugin = self.plugin(name)
        with self._overlay_lock:
            self.config.apply_plugin(plugin)

        try:
            return self.cache.read_cache(name, plugin)
        except CacheError as exc:
            logger.debug(f"Cache miss for {name!r}: {type(exc).__name__}: {exc}")

        entries, overlays = self.run(name, plugin)
        self.cache.write_cache(name, plugin, entries)
        for options in overlays:
            self.overlay(options)
        return entries

    def run(self, name: str, plugin: PluginConfig) -> Tuple[List[Entry], List[Options]]:
        """Run a plugin process and collect its entries and options messages.

        Nothing is applied to the config here; a plugin that fails leaves no trace.
        """

        if not plugin.exec:
            raise PluginError(f"plugin {name!r} has no command configured")
        argv = [os.path.expanduser(plugin.exec[0]), *plugin.exec[1:]]
        logger.debug(f"Running plugin {name!r}: {argv}")

        entries: List[Entry] = []
        overlays: List[Options] = []
        try:
            proc = subprocess.Popen(argv, stdout=subprocess.PIPE)
        except OSError as exc:
            raise PluginError(f"cannot start plugin {name!r}: {exc}") from exc

        with proc:
            assert proc.stdout is not None
            try:
                for message in iter_messages(proc.stdout):
                    if isinstance(message, Entry):
                        entries.append(message)
                    else:
                        overlays.append(message)
            except BaseException:
                proc.kill()
                raise

        if proc.returncode != 0:
            raise PluginError(f"plugin {name!r} exited with status {proc.returncode}")

        logger.debug(
            f"Plugin {name!r} produced {len(entries)} entries, {len(overlays)} options"
        )
        return entries, overlays
