"""
In-memory representations of key pairs and signed certificates.

A signed certificate exists in two forms:

- CertAndKey: PEM-encoded certificate and private key, the form handed to
  test harnesses and stored in chains.
- NativeCertAndKey: parsed cryptography objects, the form needed while an
  issuer signs the next certificate.

Both forms are all-or-nothing: either certificate and key are present, or
neither is (the placeholder used for "self-signed, no issuer").
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa

from .errors import InvalidInputError

PrivateKey = Union[
    ec.EllipticCurvePrivateKey,
    rsa.RSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
]


@dataclass(frozen=True)
class RawKeyPair:
    """DER-encoded private key (traditional format) and public key (SubjectPublicKeyInfo)."""

    private_key_der: bytes
    public_key_der: bytes


@dataclass(frozen=True)
class KeyPair:
    """A freshly generated private key and its public half."""

    private_key: PrivateKey

    @property
    def public_key(self):
        return self.private_key.public_key()


@dataclass(frozen=True)
class CertAndKey:
    """PEM certificate plus PEM private key."""

    cert_pem: bytes = b""
    private_key_pem: bytes = b""

    def __post_init__(self):
        if bool(self.cert_pem) != bool(self.private_key_pem):
            raise InvalidInputError(
                "certificate and private key must be both set or both empty"
            )

    def empty(self) -> bool:
        return not self.cert_pem and not self.private_key_pem

    def copy(self) -> "CertAndKey":
        """Return an independent copy of this certificate and key."""
        return CertAndKey(
            cert_pem=bytes(bytearray(self.cert_pem)),
            private_key_pem=bytes(bytearray(self.private_key_pem)),
        )


@dataclass(frozen=True)
class NativeCertAndKey:
    """Parsed certificate plus private key, used as a signing issuer."""

    cert: Optional[x509.Certificate] = None
    private_key: Optional[PrivateKey] = None

    def valid(self) -> bool:
        return self.cert is not None and self.private_key is not None

    def null(self) -> bool:
        return self.cert is None and self.private_key is None


# Ordered leaf first, root last.
CertChain = List[CertAndKey]


__all__ = [
    "PrivateKey",
    "RawKeyPair",
    "KeyPair",
    "CertAndKey",
    "NativeCertAndKey",
    "CertChain",
]
