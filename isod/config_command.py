"""The 'config' command: show, edit, validate and change the configuration."""

from __future__ import annotations

import copy
import json
import os
import subprocess
import sys
import tomllib
from argparse import Namespace
from functools import partial
from pathlib import Path
from typing import Any, Callable, TextIO

import tomli_w

from isod.cli import ConfigFormat, ValueType
from isod.config import Config, ConfigError, ConfigManager, save_config

SECTIONS = ("general", "usb", "sources", "distros")

_SECTION_HEADERS = {
    "general": "🔧 General configuration:",
    "usb": "💾 USB configuration:",
    "sources": "🌐 Source configuration:",
    "distros": "📦 Distribution configuration:",
}

_SECTION_DOCS = {
    "general": "General behaviour: download concurrency, torrents, cleanup and update interval.",
    "usb": "Ventoy USB device: mount point, ISO directory and metadata file location.",
    "sources": "Download sources: mirrors and mirror timeout in seconds.",
    "distros": "Configured distributions with their variants and architectures.",
}

_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0")

Say = Callable[..., None]


def _write(out: TextIO, text: str = "") -> None:
    out.write(f"{text}\n")


def _ask(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def _fail(say: Say, message: str, hint: str | None = None) -> None:
    say(f"❌ {message}")
    if hint is not None:
        say(f"💡 {hint}")
    raise SystemExit(1)


def _lookup(data: Any, key: str) -> Any:
    node = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(key)
        node = node[part]
    return node


def _parse_value(text: str, value_type: ValueType | None, current: Any) -> Any:
    if value_type is None:
        if isinstance(current, bool):
            value_type = ValueType.BOOL
        elif isinstance(current, int):
            value_type = ValueType.INT
        elif isinstance(current, list):
            value_type = ValueType.ARRAY
        else:
            value_type = ValueType.STRING
    if value_type is ValueType.BOOL:
        lowered = text.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise ValueError(f"'{text}' is not a boolean")
    if value_type is ValueType.INT:
        try:
            return int(text.strip())
        except ValueError:
            raise ValueError(f"'{text}' is not an integer") from None
    if value_type is ValueType.ARRAY:
        return [item.strip() for item in text.split(",") if item.strip()]
    return text


def _plain(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ", ".join(_plain(item) for item in value)
    if isinstance(value, dict):
        return tomli_w.dumps(value).rstrip("\n")
    return str(value)


def _deep_merge(base: dict, overlay: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _apply_fixes(config: Config) -> list[str]:
    defaults = Config()
    fixes = []
    if config.general.max_concurrent_downloads == 0:
        config.general.max_concurrent_downloads = defaults.general.max_concurrent_downloads
        fixes.append("general.max_concurrent_downloads reset to default")
    if config.general.check_interval_days == 0:
        config.general.check_interval_days = defaults.general.check_interval_days
        fixes.append("general.check_interval_days reset to default")
    if not config.usb.iso_path:
        config.usb.iso_path = defaults.usb.iso_path
        fixes.append("usb.iso_path reset to default")
    for name, distro in config.distros.items():
        if distro.check_interval_days == 0:
            distro.check_interval_days = defaults.general.check_interval_days
            fixes.append(f"distros.{name}.check_interval_days reset to default")
    return fixes


def _collect_warnings(config: Config) -> list[str]:
    warnings = []
    if config.general.max_concurrent_downloads > 10:
        warnings.append("max_concurrent_downloads is above 10")
    if config.usb.mount_point is not None and not Path(config.usb.mount_point).exists():
        warnings.append(f"USB mount point does not exist: {config.usb.mount_point}")
    for name, distro in config.distros.items():
        if not distro.enabled:
            continue
        if not distro.variants:
            warnings.append(f"distro '{name}' is enabled but has no variants")
        if not distro.architectures:
            warnings.append(f"distro '{name}' is enabled but has no architectures")
    return warnings


def _documented_toml(data: dict) -> str:
    parts = ["# isod configuration file", ""]
    for section in SECTIONS:
        parts.append(f"# {_SECTION_DOCS[section]}")
        parts.append(tomli_w.dumps({section: data.get(section, {})}))
    return "\n".join(parts)


def _show(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    section = args.section
    if section is None:
        header = "⚙️ Current configuration:"
    elif section in _SECTION_HEADERS:
        header = _SECTION_HEADERS[section]
    else:
        _fail(say, f"Unknown section: {section}")
    if args.format is ConfigFormat.YAML:
        _fail(say, "YAML output is not supported")

    content = manager.config_file.read_text(encoding="utf-8")
    if section is None and args.format is not ConfigFormat.JSON:
        body = content.rstrip("\n")
    else:
        data = tomllib.loads(content)
        if section is not None:
            data = {section: data.get(section, {})}
        if args.format is ConfigFormat.JSON:
            body = json.dumps(data, indent=2)
        else:
            body = tomli_w.dumps(data).rstrip("\n")

    say(header)
    say()
    say(body)


def _edit(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    say(f"📝 Config file location: {manager.config_file}")
    editor = args.editor
    if editor is None:
        editor = os.environ.get("EDITOR")
    if editor is None:
        editor = "notepad" if os.name == "nt" else "nano"
    say(f"🚀 Opening with {editor}...")
    completed = subprocess.run([editor, str(manager.config_file)])
    if completed.returncode == 0:
        say("✅ Configuration edited")
        say("💡 Run 'isod config validate' to check for issues")
    else:
        say("❌ Editor exited with error")


def _validate(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    say("🔍 Validating configuration...")
    try:
        manager.validate()
        say("✅ Configuration is valid")
    except ConfigError as exc:
        say("❌ Configuration validation failed:")
        say(f"   {exc}")
        if not args.fix:
            say("💡 Run with --fix to automatically fix common issues")
            raise SystemExit(1)
        for fix in _apply_fixes(manager.config):
            say(f"🔧 Fixed: {fix}")
        manager.save()
        try:
            manager.validate()
        except ConfigError as again:
            _fail(say, f"Configuration is still invalid: {again}")
        say("✅ Configuration is now valid")

    if args.warnings:
        warnings = _collect_warnings(manager.config)
        for warning in warnings:
            say(f"⚠️ {warning}")
        if not warnings:
            say("✅ No warnings")


def _sample(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    if args.output is not None:
        path = Path(args.output)
        if path.exists() and not args.force:
            _fail(say, f"File already exists: {path}", "Use --force to overwrite")
        try:
            save_config(path, Config())
        except ConfigError as exc:
            _fail(say, str(exc))
        sample_file = path
    else:
        sample_file = manager.create_sample_config()
    say(f"✅ Sample configuration created at: {sample_file}")


def _set(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    key = args.key
    say(f"🔧 Setting {key} = {args.value}")
    if args.value_type is not None:
        say(f"🏷️ Value type: {args.value_type}")

    data = manager.config.to_dict()
    *parents, leaf = key.split(".")
    node = data
    for part in parents:
        child = node.get(part) if isinstance(node, dict) else None
        if not isinstance(child, dict):
            _fail(say, f"Unknown configuration key: {key}")
        node = child

    try:
        node[leaf] = _parse_value(args.value, args.value_type, node.get(leaf))
        updated = Config.from_dict(data)
    except (ValueError, ConfigError) as exc:
        _fail(say, f"Invalid value for {key}: {exc}")

    try:
        _lookup(updated.to_dict(), key)
    except KeyError:
        _fail(say, f"Unknown configuration key: {key}")

    manager.config = updated
    manager.save()
    say("✅ Configuration updated")


def _get(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    key = args.key
    try:
        value = _lookup(manager.config.to_dict(), key)
    except KeyError:
        _fail(say, f"Unknown configuration key: {key}")
    if args.format is ConfigFormat.YAML:
        _fail(say, "YAML output is not supported")
    if args.format is ConfigFormat.JSON:
        say(json.dumps(value, indent=2))
    elif args.format is ConfigFormat.TOML:
        table = value if isinstance(value, dict) else {key.split(".")[-1]: value}
        say(tomli_w.dumps(table).rstrip("\n"))
    else:
        say(_plain(value))


def _reset(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    section = args.section
    if section is not None and section not in SECTIONS:
        _fail(say, f"Unknown section: {section}")
    target = section if section is not None else "all configuration"
    if not args.yes and not confirm(f"Are you sure you want to reset {target}?"):
        say("❌ Operation cancelled")
        return
    say(f"🔄 Resetting {target}...")
    defaults = Config()
    if section is None:
        manager.config = defaults
    else:
        setattr(manager.config, section, getattr(defaults, section))
    manager.save()
    say("✅ Reset complete")


def _import(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    say(f"📥 Importing configuration from: {args.file}")
    if args.merge:
        say("🔀 Merge mode: existing config will be preserved where possible")
    else:
        say("🔄 Replace mode: existing config will be overwritten")
    try:
        data = tomllib.loads(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        _fail(say, f"Failed to read {args.file}: {exc}")
    if args.merge:
        data = _deep_merge(manager.config.to_dict(), data)
    try:
        imported = Config.from_dict(data)
    except ConfigError as exc:
        _fail(say, f"Invalid configuration in {args.file}: {exc}")
    manager.config = imported
    manager.save()
    say("✅ Configuration imported")


def _export(manager: ConfigManager, args: Namespace, say: Say, confirm) -> None:
    say(f"📤 Exporting configuration to: {args.file}")
    say(f"📄 Format: {args.format}")
    if args.documented:
        say("📝 Including documentation and comments")
    data = manager.config.to_dict()
    if args.format is ConfigFormat.TOML:
        text = _documented_toml(data) if args.documented else tomli_w.dumps(data)
    elif args.format is ConfigFormat.JSON:
        text = json.dumps(data, indent=2) + "\n"
    else:
        _fail(say, f"Export format '{args.format}' is not supported")
    try:
        Path(args.file).write_text(text, encoding="utf-8")
    except OSError as exc:
        _fail(say, f"Failed to write {args.file}: {exc}")
    say("✅ Configuration exported")


_HANDLERS = {
    "show": _show,
    "edit": _edit,
    "validate": _validate,
    "sample": _sample,
    "set": _set,
    "get": _get,
    "reset": _reset,
    "import": _import,
    "export": _export,
}


def handle_config(
    config_manager: ConfigManager,
    args: Namespace,
    out: TextIO | None = None,
    confirm: Callable[[str], bool] | None = None,
) -> None:
    """Run a 'config' action; exits with status 1 where the action fails."""
    say = partial(_write, sys.stdout if out is None else out)
    _HANDLERS[args.action](config_manager, args, say, _ask if confirm is None else confirm)