"""Configuration model and on-disk storage for isod."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir

APP_NAME = "isod"
CONFIG_FILE_NAME = "config.toml"
SAMPLE_FILE_NAME = "config.sample.toml"

_U8_MAX = 2**8 - 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


class ConfigError(Exception):
    """Raised when a configuration cannot be read, written or validated."""


_MISSING = object()


def _fail(section: str, key: str, expected: str, value: Any) -> ConfigError:
    return ConfigError(f"invalid value for '{section}.{key}': expected {expected}, got {value!r}")


def _bool(data: dict, section: str, key: str, default: bool) -> bool:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return default
    if not isinstance(value, bool):
        raise _fail(section, key, "a boolean", value)
    return value


def _int(data: dict, section: str, key: str, default: int, maximum: int) -> int:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(section, key, "an integer", value)
    if not 0 <= value <= maximum:
        raise _fail(section, key, f"an integer between 0 and {maximum}", value)
    return value


def _str(data: dict, section: str, key: str, default: str) -> str:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return default
    if not isinstance(value, str):
        raise _fail(section, key, "a string", value)
    return value


def _opt_str(data: dict, section: str, key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise _fail(section, key, "a string", value)
    return value


def _str_list(data: dict, section: str, key: str) -> list[str]:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _fail(section, key, "a list of strings", value)
    return list(value)


def _table(data: dict, key: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"invalid section '{key}': expected a table, got {value!r}")
    return value


@dataclass
class GeneralConfig:
    max_concurrent_downloads: int = 3
    prefer_torrents: bool = True
    auto_cleanup_old_versions: bool = True
    check_interval_days: int = 7

    @classmethod
    def from_dict(cls, data: dict) -> GeneralConfig:
        s = "general"
        return cls(
            max_concurrent_downloads=_int(data, s, "max_concurrent_downloads", 3, _U8_MAX),
            prefer_torrents=_bool(data, s, "prefer_torrents", True),
            auto_cleanup_old_versions=_bool(data, s, "auto_cleanup_old_versions", True),
            check_interval_days=_int(data, s, "check_interval_days", 7, _U32_MAX),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_concurrent_downloads": self.max_concurrent_downloads,
            "prefer_torrents": self.prefer_torrents,
            "auto_cleanup_old_versions": self.auto_cleanup_old_versions,
            "check_interval_days": self.check_interval_days,
        }


@dataclass
class UsbConfig:
    mount_point: str | None = None
    iso_path: str = "iso"
    metadata_file: str = "isod/metadata.toml"

    @classmethod
    def from_dict(cls, data: dict) -> UsbConfig:
        s = "usb"
        return cls(
            mount_point=_opt_str(data, s, "mount_point"),
            iso_path=_str(data, s, "iso_path", "iso"),
            metadata_file=_str(data, s, "metadata_file", "isod/metadata.toml"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.mount_point is not None:
            result["mount_point"] = self.mount_point
        result["iso_path"] = self.iso_path
        result["metadata_file"] = self.metadata_file
        return result


@dataclass
class SourcesConfig:
    enable_mirrors: bool = True
    custom_mirrors: list[str] = field(default_factory=list)
    mirror_timeout_secs: int = 30

    @classmethod
    def from_dict(cls, data: dict) -> SourcesConfig:
        s = "sources"
        return cls(
            enable_mirrors=_bool(data, s, "enable_mirrors", True),
            custom_mirrors=_str_list(data, s, "custom_mirrors"),
            mirror_timeout_secs=_int(data, s, "mirror_timeout_secs", 30, _U64_MAX),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enable_mirrors": self.enable_mirrors,
            "custom_mirrors": list(self.custom_mirrors),
            "mirror_timeout_secs": self.mirror_timeout_secs,
        }


@dataclass
class DistroConfig:
    variants: list[str] = field(default_factory=list)
    architectures: list[str] = field(default_factory=list)
    check_interval_days: int = 7
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict, name: str = "distro") -> DistroConfig:
        s = f"distros.{name}"
        return cls(
            variants=_str_list(data, s, "variants"),
            architectures=_str_list(data, s, "architectures"),
            check_interval_days=_int(data, s, "check_interval_days", 7, _U32_MAX),
            enabled=_bool(data, s, "enabled", True),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "variants": list(self.variants),
            "architectures": list(self.architectures),
            "check_interval_days": self.check_interval_days,
            "enabled": self.enabled,
        }


def _default_distros() -> dict[str, DistroConfig]:
    return {
        "ubuntu": DistroConfig(variants=["desktop", "server"], architectures=["amd64"]),
        "fedora": DistroConfig(variants=["workstation", "server"], architectures=["x86_64"]),
    }


@dataclass
class Config:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    usb: UsbConfig = field(default_factory=UsbConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    distros: dict[str, DistroConfig] = field(default_factory=_default_distros)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Build a config from parsed TOML data; missing fields take their defaults."""
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be a table, got {data!r}")
        distros_data = _table(data, "distros")
        distros = {}
        for name, entry in distros_data.items():
            if not isinstance(entry, dict):
                raise ConfigError(f"invalid section 'distros.{name}': expected a table")
            distros[name] = DistroConfig.from_dict(entry, name)
        return cls(
            general=GeneralConfig.from_dict(_table(data, "general")),
            usb=UsbConfig.from_dict(_table(data, "usb")),
            sources=SourcesConfig.from_dict(_table(data, "sources")),
            distros=distros,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "general": self.general.to_dict(),
            "usb": self.usb.to_dict(),
            "sources": self.sources.to_dict(),
            "distros": {name: d.to_dict() for name, d in self.distros.items()},
        }


def load_config(path: str | Path) -> Config:
    """Read and parse a TOML configuration file."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {path}: {exc}") from exc
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config file: {path}: {exc}") from exc
    try:
        return Config.from_dict(data)
    except ConfigError as exc:
        raise ConfigError(f"Failed to parse config file: {path}: {exc}") from exc


def save_config(path: str | Path, config: Config) -> None:
    """Serialise a configuration to a TOML file."""
    path = Path(path)
    content = tomli_w.dumps(config.to_dict())
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to write config file: {path}: {exc}") from exc


class ConfigManager:
    """Owns the configuration file and the configuration loaded from it."""

    def __init__(self, config_dir: str | Path | None = None) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else Path(user_config_dir(APP_NAME))
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Failed to create config directory: {self.config_dir}: {exc}") from exc

        if self.config_file.exists():
            self.config = load_config(self.config_file)
        else:
            self.config = Config()
            save_config(self.config_file, self.config)

    def save(self) -> None:
        save_config(self.config_file, self.config)

    def reload(self) -> None:
        self.config = load_config(self.config_file)

    def set_distro_config(self, distro: str, config: DistroConfig) -> None:
        self.config.distros[distro] = config

    def remove_distro_config(self, distro: str) -> DistroConfig | None:
        return self.config.distros.pop(distro, None)

    def get_distro_config(self, distro: str) -> DistroConfig | None:
        return self.config.distros.get(distro)

    def create_sample_config(self) -> Path:
        """Write a default configuration next to the real one and return its path."""
        sample_file = self.config_dir / SAMPLE_FILE_NAME
        save_config(sample_file, Config())
        return sample_file

    def validate(self) -> None:
        """Raise ConfigError describing the first problem found."""
        general = self.config.general
        if general.max_concurrent_downloads == 0:
            raise ConfigError("max_concurrent_downloads must be greater than 0")
        if general.check_interval_days == 0:
            raise ConfigError("check_interval_days must be greater than 0")
        if not self.config.usb.iso_path:
            raise ConfigError("iso_path cannot be empty")
        for name, distro in self.config.distros.items():
            if distro.check_interval_days == 0:
                raise ConfigError(
                    f"check_interval_days for distro '{name}' must be greater than 0"
                )