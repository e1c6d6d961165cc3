"""
Crypto provider adapter.

Everything that touches key generation, signing and PEM/DER encoding goes
through CryptoProvider, which is backed by the `cryptography` package.
Spec, signer and chain code only see the narrow interface below:

    provider = CryptoProvider()
    key_pair = provider.generate_key_pair()
    cert = provider.sign_certificate(spec, key_pair)                 # self-signed
    cert = provider.sign_certificate(spec, key_pair, ca_cert, ca_key)  # issued
    pem = provider.encode_cert_pem(cert)

All failures surface as CertificateGenerationError.
"""

import functools
import logging
from datetime import datetime, timezone
from typing import Optional, TextIO

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519

from ..certs import KeyPair, PrivateKey
from ..config import MkCertConfig
from ..errors import InvalidInputError, provider_fault
from . import text
from .x509v3 import ExtensionContext, build_name, parse_extension

logger = logging.getLogger(__name__)

CURVES = {
    "secp256r1": ec.SECP256R1,
    "prime256v1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
}

DIGESTS = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


class CryptoProvider:
    """
    Key generation, certificate signing and encoding.

    Holds no mutable state; one instance can be shared between threads.
    """

    def __init__(self, curve: str = "secp256r1", digest: str = "sha256"):
        """
        Args:
            curve: Elliptic curve for generated key pairs
            digest: Signature digest for EC and RSA issuers
        """
        if curve not in CURVES:
            raise InvalidInputError(f"Unsupported curve: {curve}. Choose from {sorted(CURVES)}")
        if digest not in DIGESTS:
            raise InvalidInputError(f"Unsupported digest: {digest}. Choose from {sorted(DIGESTS)}")
        self.curve = curve
        self.digest = digest

    @classmethod
    def from_config(cls, config: MkCertConfig) -> "CryptoProvider":
        return cls(curve=config.curve, digest=config.digest)

    def generate_key_pair(self) -> KeyPair:
        """Generate a fresh elliptic-curve key pair."""
        with provider_fault("generate key pair"):
            return KeyPair(ec.generate_private_key(CURVES[self.curve]()))

    def _signature_hash(self, signing_key: PrivateKey) -> Optional[hashes.HashAlgorithm]:
        # EdDSA signs the message directly
        if isinstance(signing_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
            return None
        return DIGESTS[self.digest]()

    def sign_certificate(
        self,
        spec,
        subject_key: KeyPair,
        issuer_cert: Optional[x509.Certificate] = None,
        issuer_key: Optional[PrivateKey] = None,
    ) -> x509.Certificate:
        """
        Build and sign one v3 certificate.

        Args:
            spec: CertSpec describing serial, validity, subject and extensions
            subject_key: Key pair whose public half is certified
            issuer_cert: Issuing certificate, None for self-signed
            issuer_key: Issuing private key, None for self-signed

        Returns:
            The signed certificate
        """
        if (issuer_cert is None) != (issuer_key is None):
            raise InvalidInputError("issuer certificate and key must be both set or both absent")
        self_signed = issuer_cert is None

        with provider_fault("sign certificate"):
            now = datetime.now(timezone.utc)
            subject = build_name(spec.subject_name)
            public_key = subject_key.public_key

            builder = (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(subject if self_signed else issuer_cert.subject)
                .public_key(public_key)
                .serial_number(spec.serial_number)
                .not_valid_before(now + spec.not_before_offset)
                .not_valid_after(now + spec.not_after_offset)
            )

            if self_signed:
                ctx = ExtensionContext.self_signed(subject, spec.serial_number, public_key)
            else:
                ctx = ExtensionContext.issued_by(issuer_cert, public_key)
            for name, value in spec.extensions:
                extension, critical = parse_extension(name, value, ctx)
                builder = builder.add_extension(extension, critical=critical)

            signing_key = subject_key.private_key if self_signed else issuer_key
            return builder.sign(signing_key, self._signature_hash(signing_key))

    def encode_cert_pem(self, cert: x509.Certificate) -> bytes:
        with provider_fault("write certificate PEM"):
            return cert.public_bytes(serialization.Encoding.PEM)

    def encode_key_pem(self, private_key: PrivateKey) -> bytes:
        with provider_fault("write private key PEM"):
            return private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )

    def decode_cert_pem(self, cert_pem: bytes) -> x509.Certificate:
        if not cert_pem:
            raise InvalidInputError("certificate PEM is empty")
        with provider_fault("read certificate PEM"):
            return x509.load_pem_x509_certificate(cert_pem)

    def decode_key_pem(self, private_key_pem: bytes) -> PrivateKey:
        if not private_key_pem:
            raise InvalidInputError("private key PEM is empty")
        with provider_fault("read private key PEM"):
            return serialization.load_pem_private_key(private_key_pem, password=None)

    def encode_private_key_der(self, private_key: PrivateKey) -> bytes:
        """Private key in traditional DER (SEC1 for EC keys)."""
        fmt = serialization.PrivateFormat.TraditionalOpenSSL
        if isinstance(private_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
            fmt = serialization.PrivateFormat.PKCS8
        with provider_fault("write private key DER"):
            return private_key.private_bytes(
                encoding=serialization.Encoding.DER,
                format=fmt,
                encryption_algorithm=serialization.NoEncryption(),
            )

    def encode_public_key_der(self, public_key) -> bytes:
        """Public key as DER SubjectPublicKeyInfo."""
        with provider_fault("write public key DER"):
            return public_key.public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )

    def print_cert(self, cert: x509.Certificate, out: TextIO) -> None:
        with provider_fault("print certificate"):
            text.print_certificate(cert, out)

    def print_private_key(self, private_key: PrivateKey, out: TextIO) -> None:
        with provider_fault("print private key"):
            text.print_private_key(private_key, out)


@functools.lru_cache(maxsize=None)
def get_default_provider() -> CryptoProvider:
    """Shared provider configured from MKCERT_* environment variables."""
    provider = CryptoProvider.from_config(MkCertConfig.from_env())
    logger.debug(f"Using crypto provider: curve={provider.curve}, digest={provider.digest}")
    return provider


__all__ = ["CryptoProvider", "CURVES", "DIGESTS", "get_default_provider"]
