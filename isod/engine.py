"""HTTP download engine with resume, retries and checksum verification."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

import requests

from isod.checksum import verify_file
from isod.progress import (
    ChecksumFailed,
    ChecksumVerified,
    Completed,
    DownloadProgress,
    Error,
    Failed,
    ProgressUpdate,
    Retry,
    Started,
    VerifyingChecksum,
)
from isod.request import DEFAULT_USER_AGENT, DownloadRequest

_CHUNK_SIZE = 8192
_PROGRESS_INTERVAL = 0.25
_U8_MAX = 255


class DownloadError(Exception):
    """Raised when a single download attempt fails."""


@dataclass
class DownloadResult:
    success: bool
    bytes_downloaded: int
    duration: timedelta
    error: str | None
    checksum_verified: bool


@dataclass
class DownloadTask:
    id: str
    request: DownloadRequest
    progress_sender: Callable[[DownloadProgress], None] | None = None


def _emit(task: DownloadTask, event: DownloadProgress) -> None:
    if task.progress_sender is not None:
        task.progress_sender(event)


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _total_from_content_range(header: str | None) -> int | None:
    """Extract the total size from a value such as 'bytes 1024-2047/2048'."""
    if header is None:
        return None
    parts = header.split("/")
    if len(parts) < 2:
        return None
    return _parse_int(parts[1])


class DownloadEngine:
    """Downloads one request at a time, reporting progress through the task's sender."""

    def __init__(
        self,
        max_retries: int = 3,
        retry_delay: timedelta = timedelta(seconds=2),
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = DEFAULT_USER_AGENT
        self.session = session

    def download(self, task: DownloadTask) -> DownloadResult:
        """Download the task's request, retrying on failure, and verify its checksum."""
        start = time.monotonic()
        _emit(task, Started(id=task.id, url=task.request.url, output_path=task.request.output_path))

        attempt = 0
        while True:
            attempt += 1
            try:
                downloaded = self._attempt(task)
            except (requests.RequestException, OSError, DownloadError) as exc:
                if attempt >= self.max_retries:
                    _emit(task, Failed(id=task.id, error=str(exc), attempts=attempt))
                    return DownloadResult(
                        success=False,
                        bytes_downloaded=0,
                        duration=timedelta(seconds=time.monotonic() - start),
                        error=str(exc),
                        checksum_verified=False,
                    )
                _emit(
                    task,
                    Retry(
                        id=task.id,
                        attempt=attempt,
                        max_attempts=self.max_retries,
                        delay=self.retry_delay,
                    ),
                )
                time.sleep(self.retry_delay.total_seconds())
                continue

            duration = timedelta(seconds=time.monotonic() - start)
            verified = self._verify(task)
            _emit(
                task,
                Completed(id=task.id, bytes_downloaded=downloaded, checksum_verified=verified),
            )
            return DownloadResult(
                success=True,
                bytes_downloaded=downloaded,
                duration=duration,
                error=None,
                checksum_verified=verified,
            )

    def _verify(self, task: DownloadTask) -> bool:
        request = task.request
        if request.expected_checksum is None or request.checksum_type is None:
            return True
        _emit(task, VerifyingChecksum(id=task.id))
        try:
            verified = verify_file(
                request.output_path, request.expected_checksum, request.checksum_type
            )
        except OSError as exc:
            _emit(task, Error(id=task.id, error=f"Checksum verification failed: {exc}"))
            return False
        if verified:
            _emit(task, ChecksumVerified(id=task.id))
        else:
            _emit(task, ChecksumFailed(id=task.id, expected=request.expected_checksum))
        return verified

    def _attempt(self, task: DownloadTask) -> int:
        request = task.request
        path = request.output_path

        existing = path.stat().st_size if request.resume and path.exists() else 0

        headers: dict[str, str] = {}
        if request.user_agent is not None:
            headers["User-Agent"] = request.user_agent
        if existing > 0:
            headers["Range"] = f"bytes={existing}-"

        try:
            response = self.session.get(
                request.url, headers=headers, stream=True, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise DownloadError(f"Failed to send HTTP request: {exc}") from exc

        with response:
            if not 200 <= response.status_code < 300:
                raise DownloadError(
                    f"HTTP request failed with status: {response.status_code} {response.reason}"
                )

            content_length = _parse_int(response.headers.get("Content-Length")) or 0
            if existing > 0:
                total = _total_from_content_range(response.headers.get("Content-Range"))
                if total is None:
                    total = existing + content_length
            else:
                total = content_length

            if existing > 0:
                handle = open(path, "ab")
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                handle = open(path, "wb")

            downloaded = existing
            last_update = time.monotonic()
            last_bytes = downloaded
            with handle:
                try:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                        if not chunk:
                            continue
                        handle.write(chunk)
                        downloaded += len(chunk)

                        elapsed = time.monotonic() - last_update
                        if elapsed >= _PROGRESS_INTERVAL:
                            percent = (
                                min(int(downloaded / total * 100), _U8_MAX) if total > 0 else 0
                            )
                            speed = int((downloaded - last_bytes) / elapsed) if elapsed > 0 else 0
                            _emit(
                                task,
                                ProgressUpdate(
                                    id=task.id,
                                    bytes_downloaded=downloaded,
                                    total_bytes=total,
                                    progress_percent=percent,
                                    speed_bps=speed,
                                ),
                            )
                            last_update = time.monotonic()
                            last_bytes = downloaded
                except requests.RequestException as exc:
                    raise DownloadError(f"Failed to read chunk from response: {exc}") from exc
                handle.flush()
            return downloaded