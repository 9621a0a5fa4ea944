import pytest

from isod.cli import (
    ConfigFormat,
    ValueType,
    build_parser,
    get_distro_name,
    modifies_config,
    parse_args,
    requires_usb,
    should_skip_config_validation,
    validate,
)


def test_cli_parsing():
    args = parse_args(["list"])
    assert args.command == "list"

    args = parse_args(["add", "ubuntu"])
    assert args.command == "add"
    assert get_distro_name(args) == "ubuntu"


def test_add_command_options():
    args = parse_args(
        ["add", "ubuntu", "--variant", "desktop", "--arch", "amd64", "--version", "24.04"]
    )
    assert args.command == "add"
    assert args.distro == "ubuntu"
    assert args.variant == "desktop"
    assert args.arch == "amd64"
    assert args.version == "24.04"
    assert args.all_variants is False
    assert args.all_archs is False


def test_config_subcommands():
    args = parse_args(["config", "show"])
    assert args.command == "config"
    assert args.action == "show"
    assert args.format is ConfigFormat.TOML


def test_validation():
    validate(parse_args(["add", "ubuntu"]))
    with pytest.raises(ValueError, match="Keep count"):
        validate(parse_args(["clean", "--keep", "0"]))


def test_helper_methods():
    args = parse_args(["sync"])
    assert requires_usb(args) is True
    assert modifies_config(args) is False

    args = parse_args(["add", "ubuntu"])
    assert requires_usb(args) is False
    assert modifies_config(args) is True


@pytest.mark.parametrize(
    "alias, command",
    [
        ("a", "add"),
        ("rm", "remove"),
        ("dl", "download"),
    ],
)
def test_aliases_with_distro(alias, command):
    args = parse_args([alias, "fedora"])
    assert args.command == command
    assert get_distro_name(args) == "fedora"


@pytest.mark.parametrize(
    "argv, command",
    [
        (["u"], "update"),
        (["ls"], "list"),
        (["s"], "sync"),
        (["cleanup"], "clean"),
        (["cfg", "show"], "config"),
    ],
)
def test_aliases(argv, command):
    assert parse_args(argv).command == command


def test_config_validate_alias():
    args = parse_args(["config", "check", "--fix"])
    assert args.action == "validate"
    assert args.fix is True


def test_clean_defaults():
    args = parse_args(["clean"])
    assert args.keep == 2
    assert args.min_age == 30
    assert args.dry_run is False
    assert args.distro is None
    assert args.cache is False


def test_download_defaults():
    args = parse_args(["download", "arch"])
    assert args.max_concurrent == 3
    assert args.torrent is False
    assert args.output_dir is None


def test_search_defaults():
    args = parse_args(["search", "linux"])
    assert args.query == "linux"
    assert args.limit == 20
    assert args.detailed is False


def test_global_config_option_positions():
    assert parse_args(["--config", "a.toml", "list"]).config == "a.toml"
    assert parse_args(["list", "-c", "b.toml"]).config == "b.toml"
    assert parse_args(["config", "show", "-c", "c.toml"]).config == "c.toml"
    assert parse_args(["list"]).config is None


def test_config_get_and_set_options():
    args = parse_args(["config", "get", "general.prefer_torrents"])
    assert args.key == "general.prefer_torrents"
    assert args.format is ConfigFormat.PLAIN

    args = parse_args(["config", "set", "general.max_concurrent_downloads", "5", "-v", "int"])
    assert args.value == "5"
    assert args.value_type is ValueType.INT


def test_config_export_format():
    args = parse_args(["config", "export", "out.json", "--format", "json", "-d"])
    assert args.file == "out.json"
    assert args.format is ConfigFormat.JSON
    assert args.documented is True


def test_enum_display():
    args = parse_args(["config", "show", "--format", "yaml"])
    assert str(args.format) == "yaml"
    args = parse_args(["config", "set", "k", "a,b", "--value-type", "array"])
    assert str(args.value_type) == "array"


def test_invalid_format_rejected():
    with pytest.raises(SystemExit):
        parse_args(["config", "show", "--format", "xml"])


def test_missing_command_rejected():
    with pytest.raises(SystemExit):
        parse_args([])


def test_negative_keep_rejected():
    with pytest.raises(SystemExit):
        parse_args(["clean", "--keep", "-1"])


def test_max_concurrent_above_u8_rejected():
    with pytest.raises(SystemExit):
        parse_args(["download", "ubuntu", "-m", "256"])


def test_remove_version_and_all_conflict():
    with pytest.raises(ValueError, match="--version and --all"):
        validate(parse_args(["remove", "ubuntu", "-V", "22.04", "--all"]))


def test_add_empty_distro():
    with pytest.raises(ValueError, match="cannot be empty"):
        validate(parse_args(["add", ""]))


def test_clean_min_age_limit():
    validate(parse_args(["clean", "--min-age", "365"]))
    with pytest.raises(ValueError, match="365 days"):
        validate(parse_args(["clean", "--min-age", "366"]))


@pytest.mark.parametrize("value", ["0", "11"])
def test_download_concurrency_limits(value):
    with pytest.raises(ValueError, match="between 1 and 10"):
        validate(parse_args(["download", "ubuntu", "-m", value]))


@pytest.mark.parametrize("value", ["0", "101"])
def test_search_limit_bounds(value):
    with pytest.raises(ValueError, match="between 1 and 100"):
        validate(parse_args(["search", "x", "--limit", value]))


def test_search_limit_upper_bound_accepted():
    args = parse_args(["search", "x", "--limit", "100"])
    validate(args)
    assert args.limit == 100


def test_get_distro_name_optional():
    assert get_distro_name(parse_args(["update"])) is None
    assert get_distro_name(parse_args(["update", "debian"])) == "debian"
    assert get_distro_name(parse_args(["list", "-d", "arch"])) == "arch"
    assert get_distro_name(parse_args(["clean", "--distro", "mint"])) == "mint"
    assert get_distro_name(parse_args(["info", "kali"])) == "kali"
    assert get_distro_name(parse_args(["sync"])) is None


def test_requires_usb_cases():
    assert requires_usb(parse_args(["list", "--installed"])) is True
    assert requires_usb(parse_args(["list"])) is False
    assert requires_usb(parse_args(["remove", "ubuntu"])) is True
    assert requires_usb(parse_args(["clean"])) is True
    assert requires_usb(parse_args(["download", "ubuntu"])) is False


def test_modifies_config_cases():
    assert modifies_config(parse_args(["config", "set", "k", "v"])) is True
    assert modifies_config(parse_args(["config", "reset"])) is True
    assert modifies_config(parse_args(["config", "import", "f.toml"])) is True
    assert modifies_config(parse_args(["config", "show"])) is False
    assert modifies_config(parse_args(["info", "ubuntu"])) is False


def test_should_skip_config_validation():
    assert should_skip_config_validation(parse_args(["config", "validate", "--fix"])) is True
    assert should_skip_config_validation(parse_args(["config", "validate"])) is False
    assert should_skip_config_validation(parse_args(["config", "reset", "-y"])) is True
    assert should_skip_config_validation(parse_args(["config", "import", "x.toml"])) is True
    assert should_skip_config_validation(parse_args(["config", "show"])) is False
    assert should_skip_config_validation(parse_args(["add", "ubuntu"])) is False


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert "0.1.0" in capsys.readouterr().out