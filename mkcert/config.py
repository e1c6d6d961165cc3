"""
Defaults for generated certificate material.

Every value can be overridden through MKCERT_* environment variables so a
test harness can change the subject fields or key parameters without
touching code.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Optional

from .errors import InvalidInputError


@dataclass(frozen=True)
class MkCertConfig:
    """Subject, validity and key parameters used when building specs."""

    country: str = "DE"
    locality: str = "Berlin"
    organization: str = "FoundationDB"
    common_name_prefix: str = "FDB Testing Services"
    validity: timedelta = timedelta(days=365)
    serial_upper_bound: int = 10 ** 10
    curve: str = "secp256r1"
    digest: str = "sha256"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MkCertConfig":
        """Build a config, taking overrides from the environment."""
        if environ is None:
            environ = os.environ
        defaults = cls()

        validity = defaults.validity
        days = environ.get("MKCERT_VALIDITY_DAYS")
        if days:
            try:
                validity = timedelta(days=int(days))
            except ValueError as e:
                raise InvalidInputError(f"MKCERT_VALIDITY_DAYS must be an integer, got {days!r}") from e

        return cls(
            country=environ.get("MKCERT_COUNTRY", defaults.country),
            locality=environ.get("MKCERT_LOCALITY", defaults.locality),
            organization=environ.get("MKCERT_ORGANIZATION", defaults.organization),
            common_name_prefix=environ.get("MKCERT_COMMON_NAME_PREFIX", defaults.common_name_prefix),
            validity=validity,
            curve=environ.get("MKCERT_CURVE", defaults.curve),
            digest=environ.get("MKCERT_DIGEST", defaults.digest),
        )


__all__ = ["MkCertConfig"]
