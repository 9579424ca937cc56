"""
Android SDK repository adapter — downloads platform packages.

Google publishes the SDK package index as ``repository2-3.xml``. Each
``<remotePackage path="platforms;android-34">`` lists one archive per
host OS with its URL and SHA-1 checksum. This adapter reads the index,
downloads the archive for the current host, verifies it, and extracts
only the named files.
"""

from __future__ import annotations

import hashlib
import logging
import os
import platform
import shutil
import tempfile
import urllib.request
import zipfile
from pathlib import Path
from xml.etree import ElementTree

from oribuild.core.errors import HostEnvironmentError, SdkDownloadError

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY = "https://dl.google.com/android/repository/"
REPOSITORY_INDEX = "repository2-3.xml"

_HOST_OS = {
    "Linux": "linux",
    "Windows": "windows",
    "Darwin": "macosx",
}


def host_os() -> str:
    """SDK host-os name for this machine (linux, windows, macosx)."""
    system = platform.system()
    try:
        return _HOST_OS[system]
    except KeyError:
        raise HostEnvironmentError(f"Host os not supported: {system}") from None


def _local(tag: str) -> str:
    """Strip the XML namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def find_archive(index_xml: bytes, package_path: str, os_name: str) -> tuple[str, str | None]:
    """Locate the archive of ``package_path`` for ``os_name``.

    Archives without a ``host-os`` element apply to every host.

    Returns:
        (url, sha1) where url is relative to the repository base.

    Raises:
        SdkDownloadError: The package or a matching archive is missing.
    """
    try:
        root = ElementTree.fromstring(index_xml)
    except ElementTree.ParseError as e:
        raise SdkDownloadError(f"Malformed SDK repository index: {e}") from e

    for package in root.iter():
        if _local(package.tag) != "remotePackage" or package.get("path") != package_path:
            continue

        archives = _child(package, "archives")
        for archive in archives if archives is not None else ():
            host = _child(archive, "host-os")
            if host is not None and (host.text or "").strip() != os_name:
                continue
            complete = _child(archive, "complete")
            url = _child(complete, "url") if complete is not None else None
            if url is None or not (url.text or "").strip():
                continue
            checksum = _child(complete, "checksum")
            sha1 = (checksum.text or "").strip() if checksum is not None else None
            return url.text.strip(), sha1 or None

        raise SdkDownloadError(f"No {os_name} archive for SDK package '{package_path}'")

    raise SdkDownloadError(f"SDK package '{package_path}' not found in repository index")


def _verify_sha1(path: Path, expected: str) -> bool:
    h = hashlib.sha1()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest() == expected.lower()


class SdkRepository:
    """Downloads packages from an Android SDK repository."""

    def __init__(self, base_url: str | None = None, timeout: int = 60):
        base = base_url or os.environ.get("ORI_SDK_REPOSITORY") or DEFAULT_REPOSITORY
        self.base_url = base if base.endswith("/") else base + "/"
        self.timeout = timeout

    def _open(self, url: str):
        req = urllib.request.Request(url, headers={"User-Agent": "ori-build/1.0"})
        return urllib.request.urlopen(req, timeout=self.timeout)

    def fetch_index(self) -> bytes:
        url = self.base_url + REPOSITORY_INDEX
        logger.debug("Fetching SDK index %s", url)
        try:
            with self._open(url) as resp:
                return resp.read()
        except OSError as e:
            raise SdkDownloadError(f"Failed to fetch {url}: {e}") from e

    def download(self, url: str, dest: Path, sha1: str | None = None) -> None:
        """Download ``url`` (relative or absolute) to ``dest`` and verify it."""
        if "://" not in url:
            url = self.base_url + url
        logger.info("Downloading %s", url)
        try:
            with self._open(url) as resp, open(dest, "wb") as out:
                shutil.copyfileobj(resp, out)
        except OSError as e:
            raise SdkDownloadError(f"Failed to download {url}: {e}") from e

        if sha1 and not _verify_sha1(dest, sha1):
            raise SdkDownloadError(f"Checksum mismatch for {url}")

    def download_and_extract(
        self,
        package_path: str,
        dest_dir: Path,
        names: tuple[str, ...],
        os_name: str | None = None,
    ) -> list[Path]:
        """Fetch ``package_path`` and extract the entries named ``names``.

        Entries are matched on their file name, wherever they sit in the
        archive, and written flat into ``dest_dir``. Each file is written
        under a temporary name and renamed into place, so an interrupted
        run never leaves a truncated file at the final path.

        Returns:
            The extracted paths.
        """
        url, sha1 = find_archive(self.fetch_index(), package_path, os_name or host_os())
        dest_dir.mkdir(parents=True, exist_ok=True)

        extracted: list[Path] = []
        with tempfile.TemporaryDirectory(dir=dest_dir) as tmp:
            archive_path = Path(tmp) / "package.zip"
            self.download(url, archive_path, sha1)

            try:
                with zipfile.ZipFile(archive_path) as archive:
                    for info in archive.infolist():
                        name = Path(info.filename).name
                        if info.is_dir() or name not in names:
                            continue
                        partial = Path(tmp) / name
                        with archive.open(info) as src, open(partial, "wb") as out:
                            shutil.copyfileobj(src, out)
                        final = dest_dir / name
                        os.replace(partial, final)
                        extracted.append(final)
                        logger.debug("Extracted %s", final)
            except zipfile.BadZipFile as e:
                raise SdkDownloadError(f"Corrupt SDK archive {url}: {e}") from e

        missing = set(names) - {p.name for p in extracted}
        if missing:
            raise SdkDownloadError(
                f"SDK package '{package_path}' has no {', '.join(sorted(missing))}"
            )
        return extracted
