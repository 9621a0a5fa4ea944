"""Command-line interface definition and argument helpers."""

from __future__ import annotations

import argparse
from enum import Enum
from typing import Callable, Sequence

PROG = "isod"
VERSION = "0.1.0"

_DESCRIPTION = "A tool to manage bootable ISOs on Ventoy USB keys"
_EPILOG = """\
isod is a command-line tool for automatically downloading, updating, and managing
bootable ISO files on Ventoy USB drives. It supports multiple Linux distributions
with automatic version detection, torrent/mirror downloads, and USB synchronization.

Examples:
  isod add ubuntu                    # Add Ubuntu with defaults
  isod add fedora --variant workstation --arch x86_64
  isod update                        # Update all configured ISOs
  isod sync                          # Sync with Ventoy USB device
  isod list --installed              # Show ISOs on USB device
"""

_U8_MAX = 2**8 - 1
_U32_MAX = 2**32 - 1
_USIZE_MAX = 2**64 - 1


class ConfigFormat(Enum):
    TOML = "toml"
    JSON = "json"
    YAML = "yaml"
    PLAIN = "plain"

    def __str__(self) -> str:
        return self.value


class ValueType(Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    ARRAY = "array"

    def __str__(self) -> str:
        return self.value


def _unsigned(maximum: int) -> Callable[[str], int]:
    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid digit found in string: {text!r}") from None
        if not 0 <= value <= maximum:
            raise argparse.ArgumentTypeError(f"{value} is not in 0..={maximum}")
        return value

    return parse


def _enum_type(enum_cls: type[Enum]) -> Callable[[str], Enum]:
    def parse(text: str) -> Enum:
        try:
            return enum_cls(text.lower())
        except ValueError:
            choices = ", ".join(member.value for member in enum_cls)
            raise argparse.ArgumentTypeError(
                f"invalid value {text!r} (choose from {choices})"
            ) from None

    return parse


def _add_global_options(parser: argparse.ArgumentParser, top_level: bool) -> None:
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        default=None if top_level else argparse.SUPPRESS,
        help="Override config file path",
    )


def _subparser(
    subparsers: argparse._SubParsersAction,
    name: str,
    help_text: str,
    aliases: Sequence[str] = (),
    **defaults: object,
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, aliases=list(aliases), help=help_text, description=help_text)
    _add_global_options(parser, top_level=False)
    parser.set_defaults(**defaults)
    return parser


def _add_config_actions(config: argparse.ArgumentParser) -> None:
    actions = config.add_subparsers(dest="action_alias", metavar="ACTION", required=True)

    show = _subparser(actions, "show", "Show current configuration", action="show")
    show.add_argument(
        "-s", "--section", metavar="SECTION",
        help="Show only specific section (general, usb, sources, distros)",
    )
    show.add_argument(
        "-f", "--format", type=_enum_type(ConfigFormat), default=ConfigFormat.TOML,
        help="Output format",
    )

    edit = _subparser(actions, "edit", "Edit configuration file", action="edit")
    edit.add_argument(
        "-e", "--editor", metavar="EDITOR",
        help="Editor to use (overrides $EDITOR environment variable)",
    )

    validate_cmd = _subparser(
        actions, "validate", "Validate configuration", aliases=["check"], action="validate"
    )
    validate_cmd.add_argument(
        "-f", "--fix", action="store_true",
        help="Fix common configuration issues automatically",
    )
    validate_cmd.add_argument(
        "-w", "--warnings", action="store_true", help="Show warnings as well as errors"
    )

    sample = _subparser(actions, "sample", "Create sample configuration", action="sample")
    sample.add_argument("-o", "--output", metavar="FILE", help="Output file path")
    sample.add_argument("-f", "--force", action="store_true", help="Overwrite existing file")

    set_cmd = _subparser(actions, "set", "Set a configuration value", action="set")
    set_cmd.add_argument("key", help="Configuration key (e.g., general.max_concurrent_downloads)")
    set_cmd.add_argument("value", help="Configuration value")
    set_cmd.add_argument(
        "-v", "--value-type", type=_enum_type(ValueType), default=None,
        help="Value type hint for parsing",
    )

    get = _subparser(actions, "get", "Get a configuration value", action="get")
    get.add_argument("key", help="Configuration key")
    get.add_argument(
        "-f", "--format", type=_enum_type(ConfigFormat), default=ConfigFormat.PLAIN,
        help="Output format",
    )

    reset = _subparser(actions, "reset", "Reset configuration to defaults", action="reset")
    reset.add_argument(
        "-s", "--section", metavar="SECTION",
        help="Section to reset (general, usb, sources, distros)",
    )
    reset.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")

    import_cmd = _subparser(actions, "import", "Import configuration from file", action="import")
    import_cmd.add_argument("file", help="Configuration file to import")
    import_cmd.add_argument(
        "-m", "--merge", action="store_true", help="Merge with existing configuration"
    )

    export = _subparser(actions, "export", "Export configuration to file", action="export")
    export.add_argument("file", help="Output file")
    export.add_argument(
        "-f", "--format", type=_enum_type(ConfigFormat), default=ConfigFormat.TOML,
        help="Export format",
    )
    export.add_argument(
        "-d", "--documented", action="store_true", help="Include comments and documentation"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every isod command."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"{PROG} {VERSION}")
    _add_global_options(parser, top_level=True)
    commands = parser.add_subparsers(dest="command_alias", metavar="COMMAND", required=True)

    add = _subparser(commands, "add", "Add ISO to download list", aliases=["a"], command="add")
    add.add_argument("distro", help="Distribution name (e.g., ubuntu, fedora, debian, arch)")
    add.add_argument(
        "-v", "--variant", metavar="VARIANT",
        help="Distribution variant (e.g., desktop, server, workstation)",
    )
    add.add_argument(
        "-a", "--arch", metavar="ARCH", help="Architecture (e.g., amd64, x86_64, arm64)"
    )
    add.add_argument(
        "-V", "--version", metavar="VERSION", help="Specific version (defaults to latest)"
    )
    add.add_argument(
        "--all-variants", action="store_true",
        help="Add all supported variants for this distribution",
    )
    add.add_argument(
        "--all-archs", action="store_true",
        help="Add all supported architectures for this distribution",
    )

    update = _subparser(
        commands, "update", "Update specific or all ISOs", aliases=["u"], command="update"
    )
    update.add_argument(
        "distro", nargs="?", default=None,
        help="Specific distro to update (updates all if not specified)",
    )
    update.add_argument(
        "-f", "--force", action="store_true",
        help="Force update even if current version is recent",
    )
    update.add_argument(
        "--check-only", action="store_true", help="Check for updates without downloading"
    )
    update.add_argument(
        "--include-beta", action="store_true", help="Include beta and development versions"
    )

    list_cmd = _subparser(
        commands, "list", "List available/installed ISOs", aliases=["ls"], command="list"
    )
    list_cmd.add_argument(
        "-i", "--installed", action="store_true", help="Show ISOs installed on USB device"
    )
    list_cmd.add_argument(
        "-v", "--versions", action="store_true",
        help="Show available versions for each distribution",
    )
    list_cmd.add_argument(
        "-d", "--distro", metavar="DISTRO", help="Filter results by distribution name"
    )
    list_cmd.add_argument("-l", "--long", action="store_true", help="Show detailed information")

    remove = _subparser(
        commands, "remove", "Remove ISO from USB device", aliases=["rm"], command="remove"
    )
    remove.add_argument("distro", help="Distribution name to remove")
    remove.add_argument("-v", "--variant", metavar="VARIANT", help="Remove only specific variant")
    remove.add_argument("-V", "--version", metavar="VERSION", help="Remove only specific version")
    remove.add_argument(
        "--all", action="store_true", help="Remove all versions of this distribution"
    )
    remove.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")

    sync = _subparser(commands, "sync", "Sync with USB key", aliases=["s"], command="sync")
    sync.add_argument("-m", "--mount-point", metavar="PATH", help="Override USB mount point")
    sync.add_argument(
        "-a", "--auto", action="store_true", help="Automatically select first Ventoy device"
    )
    sync.add_argument("--verify", action="store_true", help="Verify checksums of existing ISOs")
    sync.add_argument(
        "-d", "--download", action="store_true", help="Download missing ISOs after sync"
    )

    config = _subparser(
        commands, "config", "Manage configuration", aliases=["cfg"], command="config"
    )
    _add_config_actions(config)

    clean = _subparser(
        commands, "clean", "Clean old versions", aliases=["cleanup"], command="clean"
    )
    clean.add_argument(
        "-k", "--keep", type=_unsigned(_U32_MAX), default=2, metavar="N",
        help="Number of versions to keep per distribution",
    )
    clean.add_argument(
        "-d", "--dry-run", action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    clean.add_argument(
        "--min-age", type=_unsigned(_U32_MAX), default=30, metavar="DAYS",
        help="Minimum age in days before considering for cleanup",
    )
    clean.add_argument("--distro", metavar="DISTRO", help="Clean only specific distribution")
    clean.add_argument(
        "--cache", action="store_true", help="Also clean downloaded files in cache directory"
    )

    download = _subparser(
        commands, "download", "Download ISOs without USB operations", aliases=["dl"],
        command="download",
    )
    download.add_argument("distro", help="Distribution name to download")
    download.add_argument(
        "-o", "--output-dir", metavar="DIR", help="Download to specific directory"
    )
    download.add_argument("-v", "--variant", metavar="VARIANT", help="Specific variant to download")
    download.add_argument("-a", "--arch", metavar="ARCH", help="Target architecture")
    download.add_argument(
        "-V", "--version", metavar="VERSION", help="Specific version to download"
    )
    download.add_argument(
        "-t", "--torrent", action="store_true", help="Prefer torrent downloads over HTTP"
    )
    download.add_argument(
        "-m", "--max-concurrent", type=_unsigned(_U8_MAX), default=3, metavar="N",
        help="Maximum concurrent downloads",
    )
    download.add_argument(
        "--verify", action="store_true", help="Verify checksum after download"
    )

    search = _subparser(commands, "search", "Search for distributions", command="search")
    search.add_argument("query", help="Search query (searches name and description)")
    search.add_argument(
        "-d", "--detailed", action="store_true", help="Show detailed information for matches"
    )
    search.add_argument(
        "-l", "--limit", type=_unsigned(_USIZE_MAX), default=20, metavar="N",
        help="Maximum number of results to show",
    )

    info = _subparser(
        commands, "info", "Show information about a distribution", command="info"
    )
    info.add_argument("distro", help="Distribution name")
    info.add_argument("-v", "--versions", action="store_true", help="Show available versions")
    info.add_argument("-s", "--sources", action="store_true", help="Show download sources")
    info.add_argument(
        "-d", "--details", action="store_true",
        help="Show supported architectures and variants",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments (without the program name)."""
    return build_parser().parse_args(argv)


def validate(args: argparse.Namespace) -> None:
    """Raise ValueError with a helpful message when arguments are inconsistent."""
    command = args.command
    if command == "add":
        if not args.distro:
            raise ValueError("Distribution name cannot be empty")
    elif command == "remove":
        if not args.distro:
            raise ValueError("Distribution name cannot be empty")
        if args.version is not None and args.all:
            raise ValueError("Cannot specify both --version and --all")
    elif command == "clean":
        if args.keep == 0:
            raise ValueError("Keep count must be greater than 0")
        if args.min_age > 365:
            raise ValueError("Minimum age cannot be more than 365 days")
    elif command == "download":
        if not 1 <= args.max_concurrent <= 10:
            raise ValueError("Max concurrent downloads must be between 1 and 10")
    elif command == "search":
        if not 1 <= args.limit <= 100:
            raise ValueError("Search limit must be between 1 and 100")


def get_distro_name(args: argparse.Namespace) -> str | None:
    """Return the distribution named by the command, if any."""
    if args.command in ("add", "remove", "download", "info", "list", "update", "clean"):
        return args.distro
    return None


def requires_usb(args: argparse.Namespace) -> bool:
    """Whether the command needs a USB device."""
    if args.command in ("sync", "remove", "clean"):
        return True
    return args.command == "list" and args.installed


def modifies_config(args: argparse.Namespace) -> bool:
    """Whether the command changes the stored configuration."""
    if args.command == "add":
        return True
    return args.command == "config" and args.action in ("set", "reset", "import")


def should_skip_config_validation(args: argparse.Namespace) -> bool:
    """Whether configuration validation should be skipped before running the command."""
    if args.command != "config":
        return False
    if args.action == "validate":
        return args.fix
    return args.action in ("reset", "import")