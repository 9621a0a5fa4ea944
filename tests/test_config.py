import pytest

from isod.config import (
    Config,
    ConfigError,
    ConfigManager,
    DistroConfig,
    GeneralConfig,
    SourcesConfig,
    UsbConfig,
    load_config,
    save_config,
)


def test_default_values_match_documented_defaults():
    config = Config()
    assert config.general.max_concurrent_downloads == 3
    assert config.general.prefer_torrents is True
    assert config.general.auto_cleanup_old_versions is True
    assert config.general.check_interval_days == 7
    assert config.usb.mount_point is None
    assert config.usb.iso_path == "iso"
    assert config.usb.metadata_file == "isod/metadata.toml"
    assert config.sources.enable_mirrors is True
    assert config.sources.custom_mirrors == []
    assert config.sources.mirror_timeout_secs == 30


def test_default_distros():
    config = Config()
    assert set(config.distros) == {"ubuntu", "fedora"}
    assert config.distros["ubuntu"].variants == ["desktop", "server"]
    assert config.distros["ubuntu"].architectures == ["amd64"]
    assert config.distros["fedora"].variants == ["workstation", "server"]
    assert config.distros["fedora"].architectures == ["x86_64"]
    assert all(d.enabled for d in config.distros.values())


def test_from_empty_dict_has_no_distros_but_default_sections():
    config = Config.from_dict({})
    assert config.distros == {}
    assert config.general == GeneralConfig()
    assert config.usb == UsbConfig()
    assert config.sources == SourcesConfig()


def test_partial_section_fills_defaults():
    config = Config.from_dict({"general": {"prefer_torrents": False}, "distros": {"arch": {}}})
    assert config.general.prefer_torrents is False
    assert config.general.max_concurrent_downloads == 3
    assert config.distros["arch"] == DistroConfig()


def test_dict_round_trip():
    config = Config()
    config.usb.mount_point = "/media/usb"
    config.sources.custom_mirrors = ["http://mirror.example.com"]
    assert Config.from_dict(config.to_dict()) == config


def test_none_mount_point_is_omitted():
    assert "mount_point" not in Config().to_dict()["usb"]


@pytest.mark.parametrize(
    "data",
    [
        {"general": {"max_concurrent_downloads": "three"}},
        {"general": {"max_concurrent_downloads": 300}},
        {"general": {"prefer_torrents": 1}},
        {"usb": {"iso_path": 5}},
        {"sources": {"custom_mirrors": "not-a-list"}},
        {"distros": {"ubuntu": {"enabled": "yes"}}},
        {"general": "oops"},
    ],
)
def test_wrong_types_are_rejected(data):
    with pytest.raises(ConfigError):
        Config.from_dict(data)


def test_file_round_trip(tmp_path):
    path = tmp_path / "config.toml"
    config = Config()
    config.general.check_interval_days = 14
    config.distros["debian"] = DistroConfig(variants=["netinst"], enabled=False)
    save_config(path, config)
    assert load_config(path) == config


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path / "missing.toml")


def test_load_invalid_toml_raises(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("this is = = not toml", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(path)


def test_manager_creates_default_file(tmp_path):
    config_dir = tmp_path / "nested" / "isod"
    manager = ConfigManager(config_dir)
    assert manager.config_file == config_dir / "config.toml"
    assert manager.config_file.exists()
    assert load_config(manager.config_file) == Config()


def test_manager_loads_existing_file(tmp_path):
    (tmp_path / "config.toml").write_text(
        "[general]\nmax_concurrent_downloads = 5\n", encoding="utf-8"
    )
    manager = ConfigManager(tmp_path)
    assert manager.config.general.max_concurrent_downloads == 5
    assert manager.config.distros == {}


def test_manager_distro_operations_and_save_reload(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.set_distro_config("arch", DistroConfig(architectures=["x86_64"]))
    assert manager.get_distro_config("arch").architectures == ["x86_64"]
    manager.save()

    removed = manager.remove_distro_config("ubuntu")
    assert removed.variants == ["desktop", "server"]
    assert manager.get_distro_config("ubuntu") is None
    assert manager.remove_distro_config("ubuntu") is None

    manager.reload()
    assert "ubuntu" in manager.config.distros
    assert manager.get_distro_config("arch").architectures == ["x86_64"]


def test_create_sample_config(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.config.general.max_concurrent_downloads = 9
    sample = manager.create_sample_config()
    assert sample == tmp_path / "config.sample.toml"
    assert load_config(sample) == Config()


def test_validate_accepts_defaults(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.validate()
    assert manager.config == Config()


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda c: setattr(c.general, "max_concurrent_downloads", 0), "max_concurrent_downloads"),
        (lambda c: setattr(c.general, "check_interval_days", 0), "check_interval_days"),
        (lambda c: setattr(c.usb, "iso_path", ""), "iso_path cannot be empty"),
        (lambda c: setattr(c.distros["fedora"], "check_interval_days", 0), "'fedora'"),
    ],
)
def test_validate_rejects_bad_values(tmp_path, mutate, message):
    manager = ConfigManager(tmp_path)
    mutate(manager.config)
    with pytest.raises(ConfigError, match=message):
        manager.validate()