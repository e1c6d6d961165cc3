"""
Chain verification for generated fixtures.

Checks the structural promises of a generated chain: every entry is
issued by the next one, every private key belongs to its certificate, and
the last entry is a self-signed root. Used by tests and by the CLI to
sanity-check output; it is not a path validator.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Sequence, Tuple

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .certs import CertAndKey

logger = logging.getLogger(__name__)


def is_self_signed(cert: x509.Certificate) -> bool:
    """True if cert names itself as issuer and verifies with its own key."""
    if cert.issuer != cert.subject:
        return False
    try:
        cert.verify_directly_issued_by(cert)
    except (ValueError, TypeError, InvalidSignature):
        return False
    return True


def _public_der(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def verify_cert_chain(
    chain: Sequence[CertAndKey],
    check_validity: bool = True,
    require_self_signed_root: bool = True,
) -> Tuple[bool, Dict[str, Any]]:
    """
    Verify a chain ordered leaf first.

    Args:
        chain: Chain to check
        check_validity: Also require every certificate to be valid now
        require_self_signed_root: Require the last entry to be self-signed

    Returns:
        (is_valid, details)
    """
    result = {
        "valid": False,
        "length": len(chain),
        "subjects": [],
        "errors": [],
    }

    if not chain:
        result["errors"].append("Empty chain")
        return False, result

    try:
        certs = [x509.load_pem_x509_certificate(entry.cert_pem) for entry in chain]
        keys = [
            serialization.load_pem_private_key(entry.private_key_pem, password=None)
            for entry in chain
        ]
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        result["errors"].append(f"Unreadable chain entry: {e}")
        return False, result

    result["subjects"] = [cert.subject.rfc4514_string() for cert in certs]
    now = datetime.now(timezone.utc)

    for i, (cert, key) in enumerate(zip(certs, keys)):
        if _public_der(cert.public_key()) != _public_der(key.public_key()):
            result["errors"].append(f"Entry {i}: private key does not match certificate")
        if check_validity:
            if now < cert.not_valid_before_utc:
                result["errors"].append(f"Entry {i}: certificate not yet valid")
            if now > cert.not_valid_after_utc:
                result["errors"].append(f"Entry {i}: certificate expired")

    for i in range(len(certs) - 1):
        try:
            certs[i].verify_directly_issued_by(certs[i + 1])
        except ValueError:
            result["errors"].append(f"Entry {i}: issuer name does not match entry {i + 1}")
        except InvalidSignature:
            result["errors"].append(f"Entry {i}: signature does not verify with entry {i + 1}")

    if require_self_signed_root and not is_self_signed(certs[-1]):
        result["errors"].append("Last entry is not a self-signed root")

    if result["errors"]:
        logger.debug(f"Chain verification failed: {result['errors']}")
        return False, result

    result["valid"] = True
    return True, result


__all__ = ["is_self_signed", "verify_cert_chain"]
