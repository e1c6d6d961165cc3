"""
Human-readable dumps of certificates and private keys.

The layout follows `openssl x509 -text` / `openssl pkey -text` closely
enough to eyeball generated fixtures; it is meant for debugging only.
Extension values are printed back in the configuration mini-language
understood by mkcert.crypto.x509v3.
"""

from typing import List, TextIO

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .x509v3 import KEY_PURPOSES, KEY_USAGE_FLAGS

_PURPOSE_NAMES = {oid: name for name, oid in KEY_PURPOSES.items()}


def _hex_bytes(data: bytes) -> str:
    return ":".join(f"{b:02X}" for b in data)


def _hex_block(data: bytes, indent: str, width: int = 15) -> List[str]:
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        lines.append(indent + ":".join(f"{b:02x}" for b in chunk))
    return lines


def _key_usage_tokens(usage: x509.KeyUsage) -> List[str]:
    tokens = []
    for token, keyword in KEY_USAGE_FLAGS.items():
        # encipher_only/decipher_only raise unless key_agreement is set
        if keyword in ("encipher_only", "decipher_only") and not usage.key_agreement:
            continue
        if getattr(usage, keyword):
            tokens.append(token)
    return tokens


def format_extension(ext: x509.Extension) -> str:
    """Render an extension value as a configuration string."""
    value = ext.value
    if isinstance(value, x509.BasicConstraints):
        text = "CA:TRUE" if value.ca else "CA:FALSE"
        if value.path_length is not None:
            text += f", pathlen:{value.path_length}"
        return text
    if isinstance(value, x509.KeyUsage):
        return ", ".join(_key_usage_tokens(value))
    if isinstance(value, x509.ExtendedKeyUsage):
        return ", ".join(_PURPOSE_NAMES.get(oid, oid.dotted_string) for oid in value)
    if isinstance(value, x509.SubjectKeyIdentifier):
        return _hex_bytes(value.digest)
    if isinstance(value, x509.AuthorityKeyIdentifier):
        parts = []
        if value.key_identifier is not None:
            parts.append(f"keyid:{_hex_bytes(value.key_identifier)}")
        if value.authority_cert_issuer:
            for name in value.authority_cert_issuer:
                if isinstance(name, x509.DirectoryName):
                    parts.append(f"DirName:{name.value.rfc4514_string()}")
        if value.authority_cert_serial_number is not None:
            parts.append(f"serial:{value.authority_cert_serial_number:X}")
        return ", ".join(parts)
    if isinstance(value, x509.SubjectAlternativeName):
        parts = []
        for name in value:
            if isinstance(name, x509.DNSName):
                parts.append(f"DNS:{name.value}")
            elif isinstance(name, x509.IPAddress):
                parts.append(f"IP:{name.value}")
            elif isinstance(name, x509.UniformResourceIdentifier):
                parts.append(f"URI:{name.value}")
            elif isinstance(name, x509.RFC822Name):
                parts.append(f"email:{name.value}")
            else:
                parts.append(repr(name))
        return ", ".join(parts)
    return repr(value)


def _public_key_lines(public_key, indent: str) -> List[str]:
    lines = []
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        point = public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
        lines.append(f"{indent}Public-Key: ({public_key.curve.key_size} bit)")
        lines.append(f"{indent}pub:")
        lines.extend(_hex_block(point, indent + "    "))
        lines.append(f"{indent}ASN1 OID: {public_key.curve.name}")
    elif isinstance(public_key, rsa.RSAPublicKey):
        numbers = public_key.public_numbers()
        lines.append(f"{indent}Public-Key: ({public_key.key_size} bit)")
        lines.append(f"{indent}Exponent: {numbers.e} (0x{numbers.e:x})")
    else:
        raw = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        lines.append(f"{indent}pub:")
        lines.extend(_hex_block(raw, indent + "    "))
    return lines


def print_certificate(cert: x509.Certificate, out: TextIO) -> None:
    """Write a textual description of cert to out."""
    hash_algorithm = cert.signature_hash_algorithm
    signature = cert.signature_algorithm_oid.dotted_string
    if hash_algorithm is not None:
        signature = f"{signature} ({hash_algorithm.name})"

    lines = [
        "Certificate:",
        "    Data:",
        f"        Version: {cert.version.value + 1} (0x{cert.version.value:x})",
        f"        Serial Number: {cert.serial_number} (0x{cert.serial_number:x})",
        f"        Signature Algorithm: {signature}",
        f"        Issuer: {cert.issuer.rfc4514_string()}",
        "        Validity",
        f"            Not Before: {cert.not_valid_before_utc:%b %d %H:%M:%S %Y} GMT",
        f"            Not After : {cert.not_valid_after_utc:%b %d %H:%M:%S %Y} GMT",
        f"        Subject: {cert.subject.rfc4514_string()}",
        "        Subject Public Key Info:",
    ]
    lines.extend(_public_key_lines(cert.public_key(), "            "))
    if len(cert.extensions):
        lines.append("        X509v3 extensions:")
        for ext in cert.extensions:
            name = type(ext.value).__name__
            lines.append(f"            {name}:{' critical' if ext.critical else ''}")
            lines.append(f"                {format_extension(ext)}")
    lines.append(f"    Signature Algorithm: {signature}")
    lines.extend(_hex_block(cert.signature, "         ", width=18))
    out.write("\n".join(lines) + "\n")


def print_private_key(private_key, out: TextIO) -> None:
    """Write a textual description of private_key to out."""
    lines = []
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        value = private_key.private_numbers().private_value
        size = (private_key.curve.key_size + 7) // 8
        lines.append(f"Private-Key: ({private_key.curve.key_size} bit)")
        lines.append("priv:")
        lines.extend(_hex_block(value.to_bytes(size, "big"), "    "))
    elif isinstance(private_key, rsa.RSAPrivateKey):
        lines.append(f"Private-Key: ({private_key.key_size} bit, 2 primes)")
    else:
        raw = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        lines.append("priv:")
        lines.extend(_hex_block(raw, "    "))
    lines.extend(_public_key_lines(private_key.public_key(), ""))
    out.write("\n".join(lines) + "\n")


__all__ = ["format_extension", "print_certificate", "print_private_key"]
