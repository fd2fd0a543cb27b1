from __future__ import annotations

from pathlib import Path
import argparse
import sys

from loguru import logger

from rmenu.cache import DEFAULT_CACHE_DIR, CacheError, CacheManager
from rmenu.config.keybind import KeybindError
from rmenu.config.loader import ConfigLoader
from rmenu.host import PluginError, PluginHost, PluginNotFound
from rmenu.plugin.stream import ProtocolError, dump_message


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run rmenu plugins and print their entries as JSON lines."
    )
    parser.add_argument("-c", "--config", help="Settings file (YAML or TOML)")
    parser.add_argument(
        "--cache-dir",
        default=str(DEFAULT_CACHE_DIR),
        help=f"Plugin result cache directory (default: {DEFAULT_CACHE_DIR})",
    )
    parser.add_argument(
        "-r", "--run", dest="plugins", action="append", required=True, metavar="PLUGIN",
        help="Plugin to run (repeatable, runs in order)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    loader = ConfigLoader()
    try:
        config = loader.load(args.config) if args.config else loader.load_default()
    except (OSError, ValueError) as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 1

    host = PluginHost(config, CacheManager(Path(args.cache_dir)))
    for name in args.plugins:
        try:
            entries = host.load(name)
        except PluginNotFound:
            logger.error(f"Unknown plugin: {name}")
            return 1
        except (PluginError, ProtocolError, KeybindError, CacheError) as exc:
            logger.error(f"Plugin {name!r} failed: {exc}")
            return 1
        for entry in entries:
            print(dump_message(entry))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
