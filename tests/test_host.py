from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from rmenu.cache import CacheManager
from rmenu.cli import main
from rmenu.config.keybind import KeyCode, KeybindError
from rmenu.config.models import CacheSetting, Config, PluginConfig
from rmenu.host import PluginError, PluginHost, PluginNotFound
from rmenu.plugin.protocol import Entry, Options
from rmenu.plugin.stream import ProtocolError, dump_message


def _plugin_script(tmp_path: Path, lines: list[str], *, status: int = 0) -> list[str]:
    script = tmp_path / "plugin.py"
    script.write_text(
        "import sys\n"
        f"for line in {lines!r}:\n"
        "    print(line)\n"
        f"sys.exit({status})\n",
        encoding="utf-8",
    )
    return [sys.executable, str(script)]


def _host(tmp_path: Path, exec_: list[str], cache: CacheSetting) -> PluginHost:
    config = Config(plugins={"test": PluginConfig(exec=exec_, cache=cache)})
    return PluginHost(config, CacheManager(tmp_path / "cache"))


def test_load_partitions_entries_and_options(tmp_path: Path) -> None:
    exec_ = _plugin_script(
        tmp_path,
        [
            dump_message(Entry.new("a", "run-a")),
            dump_message(Options(title="Plugin", key_exec=["ctrl+enter"])),
            dump_message(Entry.echo("b")),
        ],
    )
    host = _host(tmp_path, exec_, CacheSetting.no_cache())

    entries = host.load("test")

    assert [e.name for e in entries] == ["a", "b"]
    assert host.config.window.title == "Plugin"
    assert [b.key for b in host.config.keybinds.exec] == [KeyCode.Enter]
    assert host.config.keybinds.exec[0].modifiers


def test_load_uses_cache_on_second_run(tmp_path: Path) -> None:
    exec_ = _plugin_script(tmp_path, [dump_message(Entry.echo("cached"))])
    host = _host(tmp_path, exec_, CacheSetting.never())

    first = host.load("test")
    # a broken command proves the second load never runs the plugin
    host.config.plugins["test"].exec = [str(tmp_path / "missing")]
    second = host.load("test")

    assert first == second == [Entry.echo("cached")]


def test_unknown_plugin(tmp_path: Path) -> None:
    host = _host(tmp_path, ["true"], CacheSetting.no_cache())

    with pytest.raises(PluginNotFound):
        host.load("nope")


def test_failing_plugin(tmp_path: Path) -> None:
    exec_ = _plugin_script(tmp_path, [dump_message(Entry.echo("x"))], status=3)
    host = _host(tmp_path, exec_, CacheSetting.never())

    with pytest.raises(PluginError):
        host.load("test")
    assert not host.cache.cache_file("test").exists()


def test_missing_executable(tmp_path: Path) -> None:
    host = _host(tmp_path, [str(tmp_path / "missing")], CacheSetting.no_cache())

    with pytest.raises(PluginError):
        host.load("test")


def test_bad_options_keybind_aborts(tmp_path: Path) -> None:
    exec_ = _plugin_script(
        tmp_path,
        [json.dumps({"type": "options", "title": "x", "key_exit": ["a+b"]})],
    )
    host = _host(tmp_path, exec_, CacheSetting.no_cache())

    with pytest.raises(KeybindError):
        host.load("test")
    assert host.config.window.title == "RMenu - App Launcher"


def test_cli_prints_entries(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exec_ = _plugin_script(tmp_path, [dump_message(Entry.new("a", "run-a"))])
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "plugins:\n"
        "  test:\n"
        f"    exec: {json.dumps(exec_)}\n",
        encoding="utf-8",
    )

    status = main(["-c", str(config_path), "--cache-dir", str(tmp_path / "cache"), "-r", "test"])

    assert status == 0
    lines = capsys.readouterr().out.splitlines()
    assert [json.loads(line)["name"] for line in lines] == ["a"]


def test_cli_unknown_plugin(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("", encoding="utf-8")

    assert main(["-c", str(config_path), "--cache-dir", str(tmp_path), "-r", "nope"]) == 1


def test_failing_plugin_options_are_not_applied(tmp_path: Path) -> None:
    exec_ = _plugin_script(
        tmp_path,
        [dump_message(Options(title="Half done", page_size=3))],
        status=2,
    )
    host = _host(tmp_path, exec_, CacheSetting.no_cache())

    with pytest.raises(PluginError):
        host.load("test")
    assert host.config.window.title == "RMenu - App Launcher"
    assert host.config.page_size == 50


def test_options_applied_after_cache_write(tmp_path: Path) -> None:
    exec_ = _plugin_script(
        tmp_path,
        [dump_message(Entry.echo("a")), json.dumps({"type": "options", "key_exit": ["a+b"]})],
    )
    host = _host(tmp_path, exec_, CacheSetting.never())

    with pytest.raises(KeybindError):
        host.load("test")
    assert host.cache.read_cache("test", host.plugin("test")) == [Entry.echo("a")]


def _raw_plugin_script(tmp_path: Path, data: bytes) -> list[str]:
    script = tmp_path / "raw_plugin.py"
    script.write_text(
        "import sys\n"
        f"sys.stdout.buffer.write({data!r})\n",
        encoding="utf-8",
    )
    return [sys.executable, str(script)]


def test_invalid_utf8_is_protocol_error(tmp_path: Path) -> None:
    host = _host(tmp_path, _raw_plugin_script(tmp_path, b"\xff\xfe\n"), CacheSetting.no_cache())

    with pytest.raises(ProtocolError):
        host.load("test")


def test_cli_invalid_utf8_plugin(tmp_path: Path) -> None:
    exec_ = _raw_plugin_script(tmp_path, b"\xff\xfe\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "plugins:\n"
        "  t:\n"
        f"    exec: {json.dumps(exec_)}\n",
        encoding="utf-8",
    )

    assert main(["-c", str(config_path), "--cache-dir", str(tmp_path / "cache"), "-r", "t"]) == 1


def test_cli_malformed_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("plugins: [unclosed\n", encoding="utf-8")

    assert main(["-c", str(config_path), "--cache-dir", str(tmp_path), "-r", "t"]) == 1
