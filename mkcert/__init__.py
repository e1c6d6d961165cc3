"""
mkcert - synthetic X.509 material for TLS tests

Generates elliptic-curve key pairs, single certificates and multi-level
certificate chains (root CA -> intermediate CAs -> leaf) for configuring
TLS endpoints in tests. It is a fixture generator, not a certificate
authority: no revocation, no policy, no key storage.

Quick Start:
    from mkcert import Side, make_cert_chain, concat_cert_chain

    # Server chain: leaf, one intermediate, self-signed root
    chain = make_cert_chain(3, Side.SERVER)
    leaf_pem = chain[0].cert_pem
    leaf_key = chain[0].private_key_pem
    ca_bundle = concat_cert_chain(chain[1:])

    # Graft a new leaf onto an existing root
    from mkcert import CertKind, build_spec, build_chain
    chain = build_chain([build_spec(CertKind.client())], root_authority=chain[-1])

Package Structure:
    mkcert/
    ├── certs.py          # KeyPair, CertAndKey, NativeCertAndKey
    ├── spec.py           # Certificate specs by role
    ├── signer.py         # Signing one certificate
    ├── chain.py          # Building chains
    ├── serialization.py  # PEM/DER conversions, bundles
    ├── verify.py         # Chain sanity checks
    ├── crypto/           # cryptography-backed provider
    └── cli.py            # mkcert command
"""

# =============================================================================
# Core API
# =============================================================================

from .certs import (
    KeyPair,
    RawKeyPair,
    CertAndKey,
    NativeCertAndKey,
    CertChain,
)
from .spec import (
    Side,
    Role,
    CertKind,
    CertSpec,
    build_spec,
    build_spec_chain,
)
from .signer import sign, sign_native
from .chain import build_chain, make_cert_chain
from .serialization import (
    encode,
    decode,
    concat_cert_chain,
    export_key_pair_der,
    make_raw_key_pair,
    print_cert,
    print_private_key,
)
from .verify import is_self_signed, verify_cert_chain

# =============================================================================
# Provider, configuration and errors
# =============================================================================

from .crypto import CryptoProvider, get_default_provider
from .config import MkCertConfig
from .errors import MkCertError, InvalidInputError, CertificateGenerationError

__version__ = "0.1.0"

__all__ = [
    # Data model
    "KeyPair",
    "RawKeyPair",
    "CertAndKey",
    "NativeCertAndKey",
    "CertChain",
    # Specs
    "Side",
    "Role",
    "CertKind",
    "CertSpec",
    "build_spec",
    "build_spec_chain",
    # Signing and chains
    "sign",
    "sign_native",
    "build_chain",
    "make_cert_chain",
    # Serialization
    "encode",
    "decode",
    "concat_cert_chain",
    "export_key_pair_der",
    "make_raw_key_pair",
    "print_cert",
    "print_private_key",
    # Verification
    "is_self_signed",
    "verify_cert_chain",
    # Provider and config
    "CryptoProvider",
    "get_default_provider",
    "MkCertConfig",
    # Errors
    "MkCertError",
    "InvalidInputError",
    "CertificateGenerationError",
]
