from pathlib import Path

from isod.checksum import ChecksumType
from isod.request import DownloadRequest


def test_defaults():
    request = DownloadRequest("http://example.com/a.iso", "out/a.iso")
    assert request.output_path == Path("out/a.iso")
    assert request.expected_checksum is None
    assert request.checksum_type is None
    assert request.user_agent == "isod/0.1.0"
    assert request.resume is True


def test_with_checksum_returns_updated_copy():
    base = DownloadRequest("http://example.com/a.iso", Path("a.iso"))
    updated = base.with_checksum("ABC", ChecksumType.SHA256)
    assert updated.expected_checksum == "ABC"
    assert updated.checksum_type is ChecksumType.SHA256
    assert base.expected_checksum is None
    assert updated.url == base.url


def test_with_user_agent():
    request = DownloadRequest("http://example.com/a.iso", Path("a.iso")).with_user_agent("agent")
    assert request.user_agent == "agent"


def test_no_resume_chains():
    request = (
        DownloadRequest("http://example.com/a.iso", Path("a.iso"))
        .no_resume()
        .with_checksum("ff", ChecksumType.MD5)
    )
    assert request.resume is False
    assert request.checksum_type is ChecksumType.MD5