# isod

Building blocks for keeping bootable ISO images on a Ventoy USB drive up to date:
a TOML configuration, an HTTP download engine with resume and retries, checksum
verification, progress formatting, a command-line parser and the handling of the
`config` subcommand.

## Modules

- **`isod.config`**: the configuration model (`Config`, `GeneralConfig`,
  `UsbConfig`, `SourcesConfig`, `DistroConfig`) with `from_dict` / `to_dict`,
  plus `load_config(path)` and `save_config(path, config)`. Missing keys take
  their defaults; values of the wrong type raise `ConfigError`.
  `ConfigManager(config_dir=None)` uses the user configuration directory for
  `isod` unless given another directory, creates `config.toml` with defaults when
  it is missing, and offers `save`, `reload`, `get_distro_config`,
  `set_distro_config`, `remove_distro_config`, `create_sample_config` (writes
  `config.sample.toml` next to the real file) and `validate`, which raises
  `ConfigError` for the first problem found.
- **`isod.checksum`**: `calculate_checksum(file_path, checksum_type)` streams a
  file through MD5, SHA-1, SHA-256 or SHA-512 (`ChecksumType`) and returns the
  lowercase hex digest; `verify_file` compares it with an expected digest,
  ignoring case.
- **`isod.request`**: `DownloadRequest`, an immutable description of one file to
  fetch (URL, output path, optional checksum, user agent `isod/0.1.0` by default,
  resume on by default), with `with_checksum`, `with_user_agent` and `no_resume`
  returning modified copies.
- **`isod.engine`**: `DownloadEngine(max_retries=3, retry_delay=2 s, timeout=30 s,
  session=None)` downloads a `DownloadTask` with `requests`. It resumes a partial
  file with a `Range` header, retries failed attempts after a delay, verifies the
  checksum when the request carries one, sends progress events to the task's
  `progress_sender` callable and returns a `DownloadResult`.
- **`isod.progress`**: the progress events (`Started`, `ProgressUpdate`,
  `VerifyingChecksum`, `ChecksumVerified`, `ChecksumFailed`, `Completed`, `Failed`,
  `Retry`, `Cancelled`, `Error`) and the helpers `format_bytes`, `format_speed`,
  `calculate_eta` and `format_duration`.
- **`isod.cli`**: `build_parser()` and `parse_args(argv)` for the `add`, `update`,
  `list`, `remove`, `sync`, `config`, `clean`, `download`, `search` and `info`
  subcommands and their aliases; `validate(args)` raises `ValueError` for
  inconsistent arguments; `get_distro_name`, `requires_usb`, `modifies_config`
  and `should_skip_config_validation` answer questions about parsed arguments.
  `ConfigFormat` and `ValueType` are the choices for `--format` and `--value-type`.
- **`isod.config_command`**: `handle_config(config_manager, args, out=None,
  confirm=None)` carries out a parsed `config` action:
  - `show` prints the file or one section as TOML or JSON;
  - `edit` opens the file in `--editor`, `$EDITOR`, or `nano` (`notepad` on Windows);
  - `validate` checks the configuration, `--fix` resets invalid values to their
    defaults and `--warnings` lists suspicious settings;
  - `sample` writes a default configuration, to `--output` if given;
  - `set` and `get` work on dotted keys such as `general.max_concurrent_downloads`;
  - `reset` restores defaults for everything or one section, after confirmation
    unless `--yes` is given;
  - `import` replaces or, with `--merge`, merges a TOML file;
  - `export` writes TOML (optionally with comments) or JSON.

  Output goes to `out` (standard output by default); failures print a message
  and raise `SystemExit(1)`. YAML is not supported for output.

## Configuration

The default configuration file:

```toml
[general]
max_concurrent_downloads = 3
prefer_torrents = true
auto_cleanup_old_versions = true
check_interval_days = 7

[usb]
iso_path = "iso"
metadata_file = "isod/metadata.toml"

[sources]
enable_mirrors = true
custom_mirrors = []
mirror_timeout_secs = 30

[distros.ubuntu]
variants = ["desktop", "server"]
architectures = ["amd64"]
check_interval_days = 7
enabled = true

[distros.fedora]
variants = ["workstation", "server"]
architectures = ["x86_64"]
check_interval_days = 7
enabled = true
```

## Examples

Load and validate a configuration kept in a directory of your choice:

```python
from pathlib import Path

from isod.config import ConfigManager

manager = ConfigManager(Path("./isod-config"))
manager.validate()
print(manager.get_distro_config("ubuntu"))
```

Run a `config` action from parsed arguments:

```python
from isod.cli import parse_args
from isod.config_command import handle_config

args = parse_args(["config", "get", "general.max_concurrent_downloads"])
handle_config(manager, args)  # prints 3
```

Download a file and collect progress events:

```python
from isod.checksum import ChecksumType
from isod.engine import DownloadEngine, DownloadTask
from isod.request import DownloadRequest

events = []
request = DownloadRequest("https://example.com/image.iso", "image.iso").with_checksum(
    "ab12...", ChecksumType.SHA256
)
result = DownloadEngine().download(DownloadTask("image", request, events.append))
print(result.success, result.checksum_verified)
```

Format progress values:

```python
from isod.progress import format_bytes, format_speed

print(format_bytes(1536))         # 1.5 KB
print(format_speed(2 * 1024**2))  # 2.0 MB/s
```

## What the package does not do

There is no installed `isod` command: `parse_args` parses every subcommand, but
only the `config` subcommand has a handler. Adding, updating, listing, removing,
searching and cleaning ISOs, syncing with a USB drive, the catalogue of supported
distributions and their versions, concurrent download management and torrent
downloads are not provided.

## Running the tests

Install the `test` extra and run pytest from the project directory.