"""Download progress events and formatting helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

_UNITS = ("B", "KB", "MB", "GB", "TB")


@dataclass(frozen=True)
class Started:
    id: str
    url: str
    output_path: Path


@dataclass(frozen=True)
class ProgressUpdate:
    id: str
    bytes_downloaded: int
    total_bytes: int
    progress_percent: int
    speed_bps: int


@dataclass(frozen=True)
class VerifyingChecksum:
    id: str


@dataclass(frozen=True)
class ChecksumVerified:
    id: str


@dataclass(frozen=True)
class ChecksumFailed:
    id: str
    expected: str


@dataclass(frozen=True)
class Completed:
    id: str
    bytes_downloaded: int
    checksum_verified: bool


@dataclass(frozen=True)
class Failed:
    id: str
    error: str
    attempts: int


@dataclass(frozen=True)
class Retry:
    id: str
    attempt: int
    max_attempts: int
    delay: timedelta


@dataclass(frozen=True)
class Cancelled:
    id: str


@dataclass(frozen=True)
class Error:
    id: str
    error: str


DownloadProgress = (
    Started
    | ProgressUpdate
    | VerifyingChecksum
    | ChecksumVerified
    | ChecksumFailed
    | Completed
    | Failed
    | Retry
    | Cancelled
    | Error
)


def format_bytes(num_bytes: int) -> str:
    """Render a byte count with a binary unit, one decimal above bytes."""
    size = float(num_bytes)
    unit = 0
    while size >= 1024.0 and unit < len(_UNITS) - 1:
        size /= 1024.0
        unit += 1
    if unit == 0:
        return f"{int(size)} {_UNITS[0]}"
    return f"{size:.1f} {_UNITS[unit]}"


def format_speed(bytes_per_second: int) -> str:
    return f"{format_bytes(bytes_per_second)}/s"


def calculate_eta(bytes_downloaded: int, total_bytes: int, speed_bps: int) -> timedelta | None:
    """Estimate remaining time in whole seconds, or None when it cannot be known."""
    if speed_bps == 0 or total_bytes == 0 or bytes_downloaded >= total_bytes:
        return None
    remaining = total_bytes - bytes_downloaded
    return timedelta(seconds=remaining // speed_bps)


def format_duration(duration: timedelta) -> str:
    total_seconds = int(duration.total_seconds())
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"