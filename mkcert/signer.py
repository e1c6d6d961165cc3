"""
Certificate signer.

Produces one signed certificate, with its own fresh key pair, from a
CertSpec. Without an issuer the certificate is self-signed: its issuer
name is its subject name and it is signed with its own key.
"""

import logging
from typing import Optional

from .certs import CertAndKey, NativeCertAndKey
from .crypto.provider import CryptoProvider, get_default_provider
from .errors import InvalidInputError
from .serialization import decode, encode
from .spec import CertSpec

logger = logging.getLogger(__name__)


def sign_native(
    spec: CertSpec,
    issuer: Optional[NativeCertAndKey] = None,
    provider: Optional[CryptoProvider] = None,
) -> NativeCertAndKey:
    """
    Generate a key pair and a certificate for it.

    Args:
        spec: What to certify
        issuer: Issuing certificate and key; None or null for self-signed
        provider: Crypto provider (defaults to the shared one)

    Returns:
        The new certificate with its private key

    Raises:
        InvalidInputError: If issuer has a certificate but no key, or vice versa
        CertificateGenerationError: If key generation or signing fails
    """
    issuer = issuer or NativeCertAndKey()
    if not (issuer.valid() or issuer.null()):
        raise InvalidInputError("issuer certificate and key must be both set or both absent")
    provider = provider or get_default_provider()

    key_pair = provider.generate_key_pair()
    if issuer.null():
        cert = provider.sign_certificate(spec, key_pair)
    else:
        cert = provider.sign_certificate(spec, key_pair, issuer.cert, issuer.private_key)

    logger.debug(
        f"Signed certificate: serial={spec.serial_number}, "
        f"subject={cert.subject.rfc4514_string()}, issuer={cert.issuer.rfc4514_string()}"
    )
    return NativeCertAndKey(cert=cert, private_key=key_pair.private_key)


def sign(
    spec: CertSpec,
    issuer: Optional[CertAndKey] = None,
    provider: Optional[CryptoProvider] = None,
) -> CertAndKey:
    """PEM in, PEM out variant of sign_native."""
    provider = provider or get_default_provider()
    native_issuer = decode(issuer, provider) if issuer is not None else NativeCertAndKey()
    return encode(sign_native(spec, native_issuer, provider), provider)


__all__ = ["sign_native", "sign"]
