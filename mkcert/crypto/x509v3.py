"""
Subject names and extensions from OpenSSL-style configuration strings.

Certificate specs carry their subject fields as (field, value) pairs and
their extensions as (name, value) pairs written in the same mini-language
as an openssl.cnf [v3_ca] section, for example:

    basicConstraints       = critical, CA:TRUE
    keyUsage               = critical, digitalSignature, keyCertSign, cRLSign
    extendedKeyUsage       = serverAuth, clientAuth
    subjectKeyIdentifier   = hash
    authorityKeyIdentifier = keyid, issuer
    subjectAltName         = DNS:localhost, IP:127.0.0.1

Only this module interprets those strings. Values that reference "the
issuer" (authorityKeyIdentifier) or "the subject" (subjectKeyIdentifier)
are resolved against an ExtensionContext.
"""

import ipaddress
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID


class X509ConfigError(ValueError):
    """Raised when a name field or extension string cannot be understood."""
    pass


NAME_FIELDS: Dict[str, x509.ObjectIdentifier] = {
    "countryName": NameOID.COUNTRY_NAME,
    "C": NameOID.COUNTRY_NAME,
    "stateOrProvinceName": NameOID.STATE_OR_PROVINCE_NAME,
    "ST": NameOID.STATE_OR_PROVINCE_NAME,
    "localityName": NameOID.LOCALITY_NAME,
    "L": NameOID.LOCALITY_NAME,
    "organizationName": NameOID.ORGANIZATION_NAME,
    "O": NameOID.ORGANIZATION_NAME,
    "organizationalUnitName": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "OU": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "commonName": NameOID.COMMON_NAME,
    "CN": NameOID.COMMON_NAME,
    "emailAddress": NameOID.EMAIL_ADDRESS,
}

# keyUsage token -> x509.KeyUsage keyword
KEY_USAGE_FLAGS: Dict[str, str] = {
    "digitalSignature": "digital_signature",
    "nonRepudiation": "content_commitment",
    "keyEncipherment": "key_encipherment",
    "dataEncipherment": "data_encipherment",
    "keyAgreement": "key_agreement",
    "keyCertSign": "key_cert_sign",
    "cRLSign": "crl_sign",
    "encipherOnly": "encipher_only",
    "decipherOnly": "decipher_only",
}

KEY_PURPOSES: Dict[str, x509.ObjectIdentifier] = {
    "serverAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "clientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "codeSigning": ExtendedKeyUsageOID.CODE_SIGNING,
    "emailProtection": ExtendedKeyUsageOID.EMAIL_PROTECTION,
    "timeStamping": ExtendedKeyUsageOID.TIME_STAMPING,
    "OCSPSigning": ExtendedKeyUsageOID.OCSP_SIGNING,
}


@dataclass(frozen=True)
class ExtensionContext:
    """
    The certificates an extension value may refer to.

    For a self-signed certificate the issuer side is the certificate being
    built; otherwise it is the issuing certificate.
    """

    subject_public_key: object
    issuer_public_key: object
    authority_issuer_name: x509.Name
    authority_serial_number: int
    issuer_key_identifier: Optional[bytes] = None

    @classmethod
    def self_signed(cls, subject_name: x509.Name, serial_number: int, public_key) -> "ExtensionContext":
        return cls(
            subject_public_key=public_key,
            issuer_public_key=public_key,
            authority_issuer_name=subject_name,
            authority_serial_number=serial_number,
        )

    @classmethod
    def issued_by(cls, issuer_cert: x509.Certificate, subject_public_key) -> "ExtensionContext":
        key_identifier = None
        try:
            ski = issuer_cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
            key_identifier = ski.value.digest
        except x509.ExtensionNotFound:
            pass
        return cls(
            subject_public_key=subject_public_key,
            issuer_public_key=issuer_cert.public_key(),
            authority_issuer_name=issuer_cert.issuer,
            authority_serial_number=issuer_cert.serial_number,
            issuer_key_identifier=key_identifier,
        )


def build_name(fields: Sequence[Tuple[str, str]]) -> x509.Name:
    """Build a distinguished name from (field, value) pairs, keeping their order."""
    attributes = []
    for field_name, value in fields:
        oid = NAME_FIELDS.get(field_name)
        if oid is None:
            raise X509ConfigError(f"unknown subject field {field_name!r}")
        attributes.append(x509.NameAttribute(oid, value))
    return x509.Name(attributes)


def _split_tokens(value: str) -> List[str]:
    return [token.strip() for token in value.split(",") if token.strip()]


def _basic_constraints(tokens: List[str], ctx: ExtensionContext) -> x509.BasicConstraints:
    ca = False
    path_length = None
    for token in tokens:
        key, _, arg = token.partition(":")
        if key.upper() == "CA" and arg.upper() in ("TRUE", "FALSE"):
            ca = arg.upper() == "TRUE"
        elif key == "pathlen" and arg.isdigit():
            path_length = int(arg)
        else:
            raise X509ConfigError(f"bad basicConstraints token {token!r}")
    return x509.BasicConstraints(ca=ca, path_length=path_length)


def _key_usage(tokens: List[str], ctx: ExtensionContext) -> x509.KeyUsage:
    flags = {keyword: False for keyword in KEY_USAGE_FLAGS.values()}
    for token in tokens:
        if token not in KEY_USAGE_FLAGS:
            raise X509ConfigError(f"unknown keyUsage {token!r}")
        flags[KEY_USAGE_FLAGS[token]] = True
    return x509.KeyUsage(**flags)


def _extended_key_usage(tokens: List[str], ctx: ExtensionContext) -> x509.ExtendedKeyUsage:
    usages = []
    for token in tokens:
        if token in KEY_PURPOSES:
            usages.append(KEY_PURPOSES[token])
        elif token.replace(".", "").isdigit():
            usages.append(x509.ObjectIdentifier(token))
        else:
            raise X509ConfigError(f"unknown extendedKeyUsage {token!r}")
    if not usages:
        raise X509ConfigError("extendedKeyUsage needs at least one purpose")
    return x509.ExtendedKeyUsage(usages)


def _subject_key_identifier(tokens: List[str], ctx: ExtensionContext) -> x509.SubjectKeyIdentifier:
    if tokens != ["hash"]:
        raise X509ConfigError(f"subjectKeyIdentifier only supports 'hash', got {tokens!r}")
    return x509.SubjectKeyIdentifier.from_public_key(ctx.subject_public_key)


def _authority_key_identifier(tokens: List[str], ctx: ExtensionContext) -> x509.AuthorityKeyIdentifier:
    keyid = None
    issuer = None
    for token in tokens:
        key, _, arg = token.partition(":")
        if arg not in ("", "always") or key not in ("keyid", "issuer"):
            raise X509ConfigError(f"bad authorityKeyIdentifier token {token!r}")
        if key == "keyid":
            keyid = arg or "on"
        else:
            issuer = arg or "on"

    key_identifier = None
    if keyid:
        key_identifier = ctx.issuer_key_identifier
        if key_identifier is None:
            key_identifier = x509.SubjectKeyIdentifier.from_public_key(ctx.issuer_public_key).digest

    include_issuer = issuer == "always" or (issuer is not None and key_identifier is None)
    if key_identifier is None and not include_issuer:
        raise X509ConfigError("authorityKeyIdentifier needs keyid or issuer")

    return x509.AuthorityKeyIdentifier(
        key_identifier=key_identifier,
        authority_cert_issuer=[x509.DirectoryName(ctx.authority_issuer_name)] if include_issuer else None,
        authority_cert_serial_number=ctx.authority_serial_number if include_issuer else None,
    )


def _subject_alt_name(tokens: List[str], ctx: ExtensionContext) -> x509.SubjectAlternativeName:
    names: List[x509.GeneralName] = []
    for token in tokens:
        kind, _, value = token.partition(":")
        kind = kind.lower()
        if not value:
            raise X509ConfigError(f"bad subjectAltName entry {token!r}")
        if kind == "dns":
            names.append(x509.DNSName(value))
        elif kind == "ip":
            names.append(x509.IPAddress(ipaddress.ip_address(value)))
        elif kind == "uri":
            names.append(x509.UniformResourceIdentifier(value))
        elif kind == "email":
            names.append(x509.RFC822Name(value))
        else:
            raise X509ConfigError(f"unsupported subjectAltName type {kind!r}")
    return x509.SubjectAlternativeName(names)


_EXTENSION_PARSERS: Dict[str, Callable[[List[str], ExtensionContext], x509.ExtensionType]] = {
    "basicConstraints": _basic_constraints,
    "keyUsage": _key_usage,
    "extendedKeyUsage": _extended_key_usage,
    "extKeyUsage": _extended_key_usage,
    "subjectKeyIdentifier": _subject_key_identifier,
    "authorityKeyIdentifier": _authority_key_identifier,
    "subjectAltName": _subject_alt_name,
    "subjectAlternativeName": _subject_alt_name,
}


def parse_extension(name: str, value: str, ctx: ExtensionContext) -> Tuple[x509.ExtensionType, bool]:
    """
    Turn one (name, value) configuration pair into an extension.

    Args:
        name: Extension name, e.g. "basicConstraints"
        value: Configuration string, e.g. "critical, CA:TRUE"
        ctx: Certificates the value may refer to

    Returns:
        (extension, critical)

    Raises:
        X509ConfigError: If the name or any token is not understood
    """
    parser = _EXTENSION_PARSERS.get(name)
    if parser is None:
        raise X509ConfigError(f"unknown extension {name!r}")
    tokens = _split_tokens(value)
    critical = "critical" in tokens
    tokens = [token for token in tokens if token != "critical"]
    return parser(tokens, ctx), critical


__all__ = [
    "X509ConfigError",
    "ExtensionContext",
    "NAME_FIELDS",
    "KEY_USAGE_FLAGS",
    "KEY_PURPOSES",
    "build_name",
    "parse_extension",
]
