"""
Error types for mkcert.

Two kinds of failure are kept apart so callers can tell bad usage from a
broken crypto backend:

- InvalidInputError: the caller handed in contradictory state (a half-set
  issuer, an empty spec list, an unknown curve name).
- CertificateGenerationError: the crypto provider failed while generating,
  signing, encoding or decoding material.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class MkCertError(Exception):
    """Base class for all mkcert errors."""
    pass


class InvalidInputError(MkCertError, ValueError):
    """Raised on caller programming errors."""
    pass


class CertificateGenerationError(MkCertError):
    """Raised when the crypto provider fails to produce key or certificate material."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"certificate/key generation failed at {operation}: {detail}")


@contextmanager
def provider_fault(operation: str) -> Iterator[None]:
    """
    Wrap a block of provider calls.

    Any exception escaping the block is logged and re-raised as a
    CertificateGenerationError naming the failed operation. Caller errors
    and already wrapped faults pass through untouched.
    """
    try:
        yield
    except (InvalidInputError, CertificateGenerationError):
        raise
    except Exception as e:
        detail = str(e) or type(e).__name__
        logger.warning(f"TLS key or certificate generation failed: operation={operation}, error={detail}")
        raise CertificateGenerationError(operation, detail) from e


__all__ = [
    "MkCertError",
    "InvalidInputError",
    "CertificateGenerationError",
    "provider_fault",
]
