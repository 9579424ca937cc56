"""
Signing identity — a private key and certificate loaded from PEM.

The PEM text holds both blocks, in any order. ``apksigner`` wants the
key as PKCS#8 DER and the certificate as DER, which is what
``write_to()`` produces.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from oribuild.core.errors import SigningError

#: Bundled development key. Never use it for a published package.
DEBUG_PEM = "debug.pem"


class Signer:
    """Private key + certificate used to sign a package."""

    def __init__(self, key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey, certificate: x509.Certificate):
        self.key = key
        self.certificate = certificate

    @classmethod
    def from_pem(cls, pem: str) -> Signer:
        """Parse a PEM bundle with one private key and one certificate.

        Raises:
            SigningError: A block is missing, malformed, or of an
                unsupported key type.
        """
        data = pem.encode("utf-8")

        key_block = _pem_block(data, (b"PRIVATE KEY", b"RSA PRIVATE KEY", b"EC PRIVATE KEY"))
        cert_block = _pem_block(data, (b"CERTIFICATE",))
        if key_block is None:
            raise SigningError("PEM has no private key")
        if cert_block is None:
            raise SigningError("PEM has no certificate")

        try:
            key = serialization.load_pem_private_key(key_block, password=None)
        except (ValueError, TypeError) as e:
            raise SigningError(f"Invalid private key: {e}") from e
        if not isinstance(key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)):
            raise SigningError(f"Unsupported key type {type(key).__name__}")

        try:
            certificate = x509.load_pem_x509_certificate(cert_block)
        except ValueError as e:
            raise SigningError(f"Invalid certificate: {e}") from e

        return cls(key, certificate)

    @classmethod
    def from_file(cls, path: Path) -> Signer:
        try:
            pem = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SigningError(f"Failed to load PEM file {path}: {e}") from e
        return cls.from_pem(pem)

    @classmethod
    def debug(cls) -> Signer:
        """The bundled development-only signer."""
        pem = resources.files("oribuild").joinpath("data", DEBUG_PEM).read_text(encoding="utf-8")
        return cls.from_pem(pem)

    def key_der(self) -> bytes:
        return self.key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def certificate_der(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.DER)

    def write_to(self, directory: Path) -> tuple[Path, Path]:
        """Write ``key.pk8`` and ``cert.der`` into ``directory``."""
        key_path = directory / "key.pk8"
        cert_path = directory / "cert.der"
        key_path.write_bytes(self.key_der())
        key_path.chmod(0o600)
        cert_path.write_bytes(self.certificate_der())
        return key_path, cert_path


def _pem_block(data: bytes, labels: tuple[bytes, ...]) -> bytes | None:
    """Extract the first PEM block whose label is one of ``labels``."""
    for label in labels:
        begin = b"-----BEGIN " + label + b"-----"
        end = b"-----END " + label + b"-----"
        start = data.find(begin)
        if start == -1:
            continue
        stop = data.find(end, start)
        if stop == -1:
            return None
        return data[start:stop + len(end)] + b"\n"
    return None
