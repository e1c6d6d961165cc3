"""
Certificate specs: the declarative description of one certificate.

A spec is derived from the certificate's role in a chain. Roles form a
small tagged variant (CertKind): a leaf, an intermediate CA at some
level, or a root CA, each on either the server or the client side.

    specs = build_spec_chain(3, Side.SERVER)
    # [leaf, intermediate 1, root]
"""

import random
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import List, Optional, Tuple

from .config import MkCertConfig

# Process-wide default; SystemRandom is safe to share between threads.
_default_rng = random.SystemRandom()


class Side(Enum):
    SERVER = "server"
    CLIENT = "client"


class Role(Enum):
    LEAF = "leaf"
    INTERMEDIATE_CA = "intermediate_ca"
    ROOT_CA = "root_ca"


@dataclass(frozen=True)
class CertKind:
    """Role of a certificate within a chain."""

    role: Role
    side: Side
    level: int = 0  # intermediate CAs only

    @classmethod
    def server(cls) -> "CertKind":
        return cls(Role.LEAF, Side.SERVER)

    @classmethod
    def client(cls) -> "CertKind":
        return cls(Role.LEAF, Side.CLIENT)

    @classmethod
    def server_intermediate_ca(cls, level: int) -> "CertKind":
        return cls(Role.INTERMEDIATE_CA, Side.SERVER, level)

    @classmethod
    def client_intermediate_ca(cls, level: int) -> "CertKind":
        return cls(Role.INTERMEDIATE_CA, Side.CLIENT, level)

    @classmethod
    def server_root_ca(cls) -> "CertKind":
        return cls(Role.ROOT_CA, Side.SERVER)

    @classmethod
    def client_root_ca(cls) -> "CertKind":
        return cls(Role.ROOT_CA, Side.CLIENT)

    def is_ca(self) -> bool:
        return self.role is not Role.LEAF

    def is_root_ca(self) -> bool:
        return self.role is Role.ROOT_CA

    def common_name(self, prefix: str) -> str:
        side = "Client" if self.side is Side.CLIENT else "Server"
        if self.role is Role.INTERMEDIATE_CA:
            return f"{prefix} {side} Intermediate {self.level}"
        if self.role is Role.ROOT_CA:
            return f"{prefix} {side} Root"
        return f"{prefix} {side}"


@dataclass(frozen=True)
class CertSpec:
    """Everything needed to produce one certificate, except key material."""

    serial_number: int
    not_before_offset: timedelta = timedelta(0)
    not_after_offset: timedelta = timedelta(days=365)
    subject_name: Tuple[Tuple[str, str], ...] = ()
    extensions: Tuple[Tuple[str, str], ...] = ()


_CA_EXTENSIONS = [
    ("basicConstraints", "critical, CA:TRUE"),
    ("keyUsage", "critical, digitalSignature, keyCertSign, cRLSign"),
]

_LEAF_EXTENSIONS = [
    ("basicConstraints", "critical, CA:FALSE"),
    ("keyUsage", "critical, digitalSignature, keyEncipherment"),
    ("extendedKeyUsage", "serverAuth, clientAuth"),
]

_ROLE_EXTENSIONS = {
    Role.LEAF: _LEAF_EXTENSIONS,
    Role.INTERMEDIATE_CA: _CA_EXTENSIONS,
    Role.ROOT_CA: _CA_EXTENSIONS,
}


def role_extensions(kind: CertKind) -> Tuple[Tuple[str, str], ...]:
    """Extension configuration for a certificate of the given kind."""
    extensions = list(_ROLE_EXTENSIONS[kind.role])
    extensions.append(("subjectKeyIdentifier", "hash"))
    if not kind.is_root_ca():
        extensions.append(("authorityKeyIdentifier", "keyid, issuer"))
    return tuple(extensions)


def build_spec(
    kind: CertKind,
    rng: Optional[random.Random] = None,
    config: Optional[MkCertConfig] = None,
) -> CertSpec:
    """
    Build the CertSpec for one certificate.

    Args:
        kind: Role of the certificate in its chain
        rng: Source for the serial number (defaults to a shared SystemRandom)
        config: Subject and validity defaults (defaults to MKCERT_* environment)

    Returns:
        A fresh CertSpec valid from now for config.validity
    """
    rng = rng or _default_rng
    config = config or MkCertConfig.from_env()
    return CertSpec(
        serial_number=rng.randrange(1, config.serial_upper_bound),
        not_before_offset=timedelta(0),
        not_after_offset=config.validity,
        subject_name=(
            ("countryName", config.country),
            ("localityName", config.locality),
            ("organizationName", config.organization),
            ("commonName", kind.common_name(config.common_name_prefix)),
        ),
        extensions=role_extensions(kind),
    )


def chain_kinds(length: int, side: Side) -> List[CertKind]:
    """Roles for a chain of the given length, leaf first."""
    kinds = []
    for i in range(length):
        if i == 0:
            kind = CertKind(Role.LEAF, side)
        elif i == length - 1:
            kind = CertKind(Role.ROOT_CA, side)
        else:
            kind = CertKind(Role.INTERMEDIATE_CA, side, i)
        kinds.append(kind)
    return kinds


def build_spec_chain(
    length: int,
    side: Side,
    rng: Optional[random.Random] = None,
    config: Optional[MkCertConfig] = None,
) -> List[CertSpec]:
    """
    Specs for a whole chain: leaf at index 0, root last, intermediates between.

    A length of 1 yields a single leaf spec; a length of 0 yields no specs.
    """
    config = config or MkCertConfig.from_env()
    return [build_spec(kind, rng=rng, config=config) for kind in chain_kinds(length, side)]


__all__ = [
    "Side",
    "Role",
    "CertKind",
    "CertSpec",
    "role_extensions",
    "build_spec",
    "chain_kinds",
    "build_spec_chain",
]
