"""Description of a single file download."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from isod.checksum import ChecksumType

DEFAULT_USER_AGENT = "isod/0.1.0"


@dataclass(frozen=True)
class DownloadRequest:
    url: str
    output_path: Path
    expected_checksum: str | None = None
    checksum_type: ChecksumType | None = None
    user_agent: str | None = DEFAULT_USER_AGENT
    resume: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_path", Path(self.output_path))

    def with_checksum(self, checksum: str, checksum_type: ChecksumType) -> DownloadRequest:
        return replace(self, expected_checksum=checksum, checksum_type=checksum_type)

    def with_user_agent(self, user_agent: str) -> DownloadRequest:
        return replace(self, user_agent=user_agent)

    def no_resume(self) -> DownloadRequest:
        return replace(self, resume=False)