"""
Target model — the four Android ABIs and their compiler triples.

Each Target maps one-to-one to a Rust target triple and to the ABI
string a device reports through ``getprop ro.product.cpu.abi``.
Lookups on either side fail loudly; there is no fallback target.
"""

from __future__ import annotations

from enum import StrEnum

from oribuild.core.errors import UnknownAbiError, UnsupportedTargetError


class Target(StrEnum):
    """Android target architecture, valued by its ABI string."""

    ARM64_V8A = "arm64-v8a"
    ARMV7A = "armeabi-v7a"
    X86 = "x86"
    X86_64 = "x86_64"

    @property
    def abi(self) -> str:
        return self.value

    @property
    def triple(self) -> str:
        """Rust target triple used by ``cross build --target``."""
        return _TRIPLES[self]

    @property
    def lib_dir(self) -> str:
        """Directory inside the APK holding native libraries for this ABI."""
        return f"lib/{self.value}"

    @classmethod
    def from_triple(cls, triple: str) -> Target:
        for target, candidate in _TRIPLES.items():
            if candidate == triple:
                return target
        raise UnsupportedTargetError(triple)

    @classmethod
    def from_abi(cls, abi: str) -> Target:
        try:
            return cls(abi)
        except ValueError:
            raise UnknownAbiError(abi) from None


_TRIPLES: dict[Target, str] = {
    Target.ARM64_V8A: "aarch64-linux-android",
    Target.ARMV7A: "armv7-linux-androideabi",
    Target.X86: "i686-linux-android",
    Target.X86_64: "x86_64-linux-android",
}

SUPPORTED_TRIPLES: tuple[str, ...] = tuple(_TRIPLES.values())
