"""
Conversions between native certificate/key objects and their encodings.
"""

import logging
from typing import Iterable, Optional, TextIO

from .certs import CertAndKey, KeyPair, NativeCertAndKey, RawKeyPair
from .crypto.provider import CryptoProvider, get_default_provider
from .errors import InvalidInputError

logger = logging.getLogger(__name__)


def encode(native: NativeCertAndKey, provider: Optional[CryptoProvider] = None) -> CertAndKey:
    """
    Encode a native certificate and key as PEM.

    A null native value (no cert, no key) encodes to an empty CertAndKey.
    Encoding freshly generated material should never fail, so any provider
    failure raises CertificateGenerationError.
    """
    if native.null():
        return CertAndKey()
    if not native.valid():
        raise InvalidInputError("certificate and private key must be both set or both absent")
    provider = provider or get_default_provider()
    return CertAndKey(
        cert_pem=provider.encode_cert_pem(native.cert),
        private_key_pem=provider.encode_key_pem(native.private_key),
    )


def decode(cert_and_key: CertAndKey, provider: Optional[CryptoProvider] = None) -> NativeCertAndKey:
    """Parse PEM material back into native objects; empty input decodes to a null value."""
    if cert_and_key.empty():
        return NativeCertAndKey()
    provider = provider or get_default_provider()
    return NativeCertAndKey(
        cert=provider.decode_cert_pem(cert_and_key.cert_pem),
        private_key=provider.decode_key_pem(cert_and_key.private_key_pem),
    )


def concat_cert_chain(chain: Iterable[CertAndKey]) -> bytes:
    """
    Concatenate the certificate PEMs of a chain, in chain order.

    Private keys are left out. An empty chain gives b"".
    """
    return b"".join(entry.cert_pem for entry in chain)


def export_key_pair_der(key_pair: KeyPair, provider: Optional[CryptoProvider] = None) -> RawKeyPair:
    """Raw DER bytes of a key pair, for callers that do not want a certificate wrapper."""
    provider = provider or get_default_provider()
    return RawKeyPair(
        private_key_der=provider.encode_private_key_der(key_pair.private_key),
        public_key_der=provider.encode_public_key_der(key_pair.public_key),
    )


def make_raw_key_pair(provider: Optional[CryptoProvider] = None) -> RawKeyPair:
    """Generate a key pair and export it as raw DER."""
    provider = provider or get_default_provider()
    return export_key_pair_der(provider.generate_key_pair(), provider)


def print_cert(cert_pem: bytes, out: TextIO, provider: Optional[CryptoProvider] = None) -> None:
    """Write a human-readable dump of a PEM certificate to out."""
    provider = provider or get_default_provider()
    provider.print_cert(provider.decode_cert_pem(cert_pem), out)


def print_private_key(private_key_pem: bytes, out: TextIO, provider: Optional[CryptoProvider] = None) -> None:
    """Write a human-readable dump of a PEM private key to out."""
    provider = provider or get_default_provider()
    provider.print_private_key(provider.decode_key_pem(private_key_pem), out)


__all__ = [
    "encode",
    "decode",
    "concat_cert_chain",
    "export_key_pair_der",
    "make_raw_key_pair",
    "print_cert",
    "print_private_key",
]
