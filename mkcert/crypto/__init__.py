"""
Crypto provider bindings.

Contains:
- CryptoProvider: key generation, signing, PEM/DER encoding
- x509v3: subject-field and extension configuration strings
- text: human-readable certificate and key dumps
"""

from .provider import CURVES, DIGESTS, CryptoProvider, get_default_provider
from .x509v3 import ExtensionContext, X509ConfigError, build_name, parse_extension

__all__ = [
    "CryptoProvider",
    "CURVES",
    "DIGESTS",
    "get_default_provider",
    "ExtensionContext",
    "X509ConfigError",
    "build_name",
    "parse_extension",
]
