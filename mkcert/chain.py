"""
Certificate chain builder.

Specs are given leaf first, root last. Signing has to go the other way:
the root must exist before anything it issues, so the builder walks the
specs in reverse, carrying the most recent certificate as the issuer of
the next one, and stores each result at its spec's index.

    chain = build_chain(build_spec_chain(3, Side.SERVER))
    # chain[0] leaf, chain[1] intermediate, chain[2] self-signed root

    chain = build_chain([leaf_spec], root_authority=existing_root)
    # chain[0] leaf signed by existing_root, chain[1] copy of existing_root
"""

import logging
import random
from typing import Optional, Sequence

from .certs import CertAndKey, CertChain, NativeCertAndKey
from .config import MkCertConfig
from .crypto.provider import CryptoProvider, get_default_provider
from .errors import InvalidInputError
from .serialization import decode, encode
from .signer import sign_native
from .spec import CertSpec, Side, build_spec_chain

logger = logging.getLogger(__name__)


def build_chain(
    specs: Sequence[CertSpec],
    root_authority: Optional[CertAndKey] = None,
    provider: Optional[CryptoProvider] = None,
) -> CertChain:
    """
    Sign a chain of certificates.

    Args:
        specs: One spec per certificate to create, leaf first
        root_authority: Existing CA to sign the last spec with. When absent
            (None or empty) the last spec becomes a self-signed root.
        provider: Crypto provider (defaults to the shared one)

    Returns:
        Chain ordered leaf first. It has len(specs) entries without a root
        authority, len(specs) + 1 with one (the root authority comes last).

    Raises:
        InvalidInputError: If specs is empty
        CertificateGenerationError: If any certificate fails to generate
    """
    specs = list(specs)
    if not specs:
        raise InvalidInputError("certificate chain needs at least one spec")
    provider = provider or get_default_provider()

    if root_authority is None or root_authority.empty():
        chain = [None] * len(specs)
        issuer = NativeCertAndKey()
    else:
        chain = [None] * (len(specs) + 1)
        issuer = decode(root_authority, provider)
        chain[-1] = root_authority.copy()

    for i in reversed(range(len(specs))):
        native = sign_native(specs[i], issuer, provider)
        chain[i] = encode(native, provider)
        issuer = native

    logger.info(
        f"Built certificate chain: length={len(chain)}, "
        f"root={'self-signed' if len(chain) == len(specs) else 'supplied'}"
    )
    return chain


def make_cert_chain(
    length: int,
    side: Side,
    rng: Optional[random.Random] = None,
    provider: Optional[CryptoProvider] = None,
    config: Optional[MkCertConfig] = None,
) -> CertChain:
    """
    Generate a self-rooted chain of the given length in one call.

    A length of 0 returns an empty chain. Without an explicit provider,
    curve and digest come from config when one is given.
    """
    if provider is None and config is not None:
        provider = CryptoProvider.from_config(config)
    if length == 0:
        return []
    specs = build_spec_chain(length, side, rng=rng, config=config)
    return build_chain(specs, provider=provider)


__all__ = ["build_chain", "make_cert_chain"]
