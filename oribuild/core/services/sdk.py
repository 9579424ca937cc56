"""
SDK resolver — makes sure ``android.jar`` for the platform is cached.

The cache lives under the Cargo target directory:

    <target>/apk/platforms/android-<N>/android.jar

The check is on the jar itself, not the directory, so a half-finished
earlier download is retried instead of trusted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from oribuild.adapters.sdk_repository import SdkRepository
from oribuild.core.errors import SdkOfflineError

logger = logging.getLogger(__name__)

PLATFORM_VERSION = 34
ANDROID_JAR = "android.jar"


def sdk_cache_dir(target_dir: Path) -> Path:
    return target_dir / "apk"


def platform_jar_path(target_dir: Path, version: int = PLATFORM_VERSION) -> Path:
    return sdk_cache_dir(target_dir) / "platforms" / f"android-{version}" / ANDROID_JAR


def ensure_sdk(
    target_dir: Path,
    version: int = PLATFORM_VERSION,
    offline: bool = False,
    repository: SdkRepository | None = None,
) -> Path:
    """Return the cached ``android.jar``, downloading it on first use.

    Raises:
        SdkOfflineError: Not cached and ``offline`` is set. No network
            access is attempted.
        SdkDownloadError: The download or extraction failed.
    """
    jar = platform_jar_path(target_dir, version)
    if jar.is_file():
        logger.debug("Using cached %s", jar)
        return jar

    if offline:
        raise SdkOfflineError(jar)

    repository = repository or SdkRepository()
    logger.info("Downloading Android platform %d", version)
    repository.download_and_extract(
        f"platforms;android-{version}",
        jar.parent,
        (ANDROID_JAR,),
    )
    return jar
