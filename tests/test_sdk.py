"""
Tests for the SDK resolver and the SDK repository adapter.
"""

import hashlib
import io
import zipfile
from pathlib import Path

import pytest

from oribuild.adapters.sdk_repository import SdkRepository, find_archive, host_os
from oribuild.core.errors import SdkDownloadError, SdkOfflineError
from oribuild.core.services.sdk import ensure_sdk, platform_jar_path

INDEX = b"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<sdk:sdk-repository xmlns:sdk="http://schemas.android.com/sdk/android/repo/repository2/03"
                    xmlns:common="http://schemas.android.com/repository/android/common/02">
  <remotePackage path="platforms;android-33">
    <archives>
      <archive>
        <complete>
          <size>1</size>
          <checksum type="sha1">0000</checksum>
          <url>platform-33_r02.zip</url>
        </complete>
      </archive>
    </archives>
  </remotePackage>
  <remotePackage path="platforms;android-34">
    <archives>
      <archive>
        <complete>
          <size>1</size>
          <checksum type="sha1">%(sha1)s</checksum>
          <url>platform-34-ext7_r03.zip</url>
        </complete>
      </archive>
    </archives>
  </remotePackage>
  <remotePackage path="build-tools;34.0.0">
    <archives>
      <archive>
        <complete><url>build-tools_r34-windows.zip</url></complete>
        <host-os>windows</host-os>
      </archive>
      <archive>
        <complete><url>build-tools_r34-linux.zip</url></complete>
        <host-os>linux</host-os>
      </archive>
    </archives>
  </remotePackage>
</sdk:sdk-repository>
"""


def _platform_zip() -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("android-14/android.jar", b"JAR CONTENT")
        zf.writestr("android-14/framework.aidl", b"aidl")
    return buf.getvalue()


class FakeRepository:
    """Counts download requests instead of touching the network."""

    def __init__(self):
        self.calls = []

    def download_and_extract(self, package_path, dest_dir, names, os_name=None):
        self.calls.append(package_path)
        dest_dir.mkdir(parents=True, exist_ok=True)
        for name in names:
            (dest_dir / name).write_bytes(b"JAR")
        return [dest_dir / name for name in names]


class ServedRepository(SdkRepository):
    """SdkRepository whose HTTP responses come from a dict."""

    def __init__(self, responses: dict[str, bytes]):
        super().__init__("https://example.test/repo")
        self.responses = responses
        self.requested = []

    def _open(self, url):
        self.requested.append(url)
        if url not in self.responses:
            raise OSError(f"404 {url}")
        return io.BytesIO(self.responses[url])


# ── SDK resolver ─────────────────────────────────────────────────────


class TestEnsureSdk:
    def test_cache_path(self, tmp_path: Path):
        assert platform_jar_path(tmp_path) == tmp_path / "apk/platforms/android-34/android.jar"

    def test_downloads_once(self, tmp_path: Path):
        repo = FakeRepository()
        first = ensure_sdk(tmp_path, repository=repo)
        second = ensure_sdk(tmp_path, repository=repo)
        assert first == second == platform_jar_path(tmp_path)
        assert repo.calls == ["platforms;android-34"]

    def test_cached_jar_used_offline(self, tmp_path: Path):
        jar = platform_jar_path(tmp_path)
        jar.parent.mkdir(parents=True)
        jar.write_bytes(b"JAR")
        repo = FakeRepository()
        assert ensure_sdk(tmp_path, offline=True, repository=repo) == jar
        assert repo.calls == []

    def test_offline_without_cache(self, tmp_path: Path):
        repo = FakeRepository()
        with pytest.raises(SdkOfflineError, match="offline"):
            ensure_sdk(tmp_path, offline=True, repository=repo)
        assert repo.calls == []

    def test_directory_without_jar_is_not_cached(self, tmp_path: Path):
        platform_jar_path(tmp_path).parent.mkdir(parents=True)
        repo = FakeRepository()
        ensure_sdk(tmp_path, repository=repo)
        assert repo.calls == ["platforms;android-34"]


# ── Repository index ─────────────────────────────────────────────────


class TestFindArchive:
    def test_platform_any_host(self):
        url, sha1 = find_archive(INDEX % {b"sha1": b"abc123"}, "platforms;android-34", "linux")
        assert url == "platform-34-ext7_r03.zip"
        assert sha1 == "abc123"

    def test_host_specific_archive(self):
        index = INDEX % {b"sha1": b"x"}
        assert find_archive(index, "build-tools;34.0.0", "linux")[0] == "build-tools_r34-linux.zip"
        assert find_archive(index, "build-tools;34.0.0", "windows")[0] == "build-tools_r34-windows.zip"

    def test_no_archive_for_host(self):
        with pytest.raises(SdkDownloadError, match="macosx"):
            find_archive(INDEX % {b"sha1": b"x"}, "build-tools;34.0.0", "macosx")

    def test_unknown_package(self):
        with pytest.raises(SdkDownloadError, match="not found"):
            find_archive(INDEX % {b"sha1": b"x"}, "platforms;android-99", "linux")

    def test_malformed_index(self):
        with pytest.raises(SdkDownloadError, match="Malformed"):
            find_archive(b"<not xml", "platforms;android-34", "linux")


class TestHostOs:
    def test_known(self, monkeypatch):
        monkeypatch.setattr("platform.system", lambda: "Darwin")
        assert host_os() == "macosx"


# ── Repository downloads ─────────────────────────────────────────────


class TestDownloadAndExtract:
    def _repo(self, archive: bytes, sha1: str | None = None) -> ServedRepository:
        sha1 = sha1 or hashlib.sha1(archive).hexdigest()
        return ServedRepository({
            "https://example.test/repo/repository2-3.xml": INDEX % {b"sha1": sha1.encode()},
            "https://example.test/repo/platform-34-ext7_r03.zip": archive,
        })

    def test_extracts_named_file_flat(self, tmp_path: Path):
        repo = self._repo(_platform_zip())
        dest = tmp_path / "platforms" / "android-34"
        extracted = repo.download_and_extract("platforms;android-34", dest, ("android.jar",), "linux")
        assert extracted == [dest / "android.jar"]
        assert (dest / "android.jar").read_bytes() == b"JAR CONTENT"
        assert sorted(p.name for p in dest.iterdir()) == ["android.jar"]

    def test_checksum_mismatch(self, tmp_path: Path):
        repo = self._repo(_platform_zip(), sha1="0" * 40)
        dest = tmp_path / "out"
        with pytest.raises(SdkDownloadError, match="Checksum"):
            repo.download_and_extract("platforms;android-34", dest, ("android.jar",), "linux")
        assert not (dest / "android.jar").exists()

    def test_missing_entry(self, tmp_path: Path):
        repo = self._repo(_platform_zip())
        with pytest.raises(SdkDownloadError, match="core.jar"):
            repo.download_and_extract("platforms;android-34", tmp_path, ("core.jar",), "linux")

    def test_corrupt_archive(self, tmp_path: Path):
        repo = self._repo(b"not a zip")
        with pytest.raises(SdkDownloadError, match="Corrupt"):
            repo.download_and_extract("platforms;android-34", tmp_path, ("android.jar",), "linux")

    def test_index_unreachable(self, tmp_path: Path):
        repo = ServedRepository({})
        with pytest.raises(SdkDownloadError, match="repository2-3.xml"):
            repo.download_and_extract("platforms;android-34", tmp_path, ("android.jar",), "linux")

    def test_base_url_from_env(self, monkeypatch):
        monkeypatch.setenv("ORI_SDK_REPOSITORY", "https://mirror.test/android")
        assert SdkRepository().base_url == "https://mirror.test/android/"
