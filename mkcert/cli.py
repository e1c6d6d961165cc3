"""
Command line tool for generating TLS test material.

Usage:
    mkcert chain --side server --length 3 --cert-file server.pem --key-file server.key --ca-file ca.pem
    mkcert chain --side client --length 1 --expire --print
    mkcert print --cert server.pem --key server.key
    mkcert keypair --private-key-file key.der --public-key-file pub.der
"""

import argparse
import logging
import random
import sys
from dataclasses import replace
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from .chain import build_chain
from .errors import MkCertError
from .serialization import concat_cert_chain, make_raw_key_pair, print_cert, print_private_key
from .spec import Side, build_spec_chain

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mkcert",
        description="Generate X.509 certificate chains and keys for TLS tests"
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Chain command
    chain_parser = subparsers.add_parser("chain", help="Generate a certificate chain")
    chain_parser.add_argument("--side", "-s", choices=[s.value for s in Side],
                              default=Side.SERVER.value, help="Server or client chain")
    chain_parser.add_argument("--length", "-n", type=int, default=3,
                              help="Number of certificates including the root")
    chain_parser.add_argument("--cert-file", help="Output for leaf and intermediate certificates")
    chain_parser.add_argument("--key-file", help="Output for the leaf private key")
    chain_parser.add_argument("--ca-file", help="Output for the root certificate")
    chain_parser.add_argument("--expire", action="store_true",
                              help="Make the leaf certificate already expired")
    chain_parser.add_argument("--seed", type=int,
                              help="Seed serial numbers for reproducible output")
    chain_parser.add_argument("--print", dest="print_chain", action="store_true",
                              help="Print every certificate in the chain")

    # Print command
    print_parser = subparsers.add_parser("print", help="Print a certificate or private key")
    print_parser.add_argument("--cert", help="PEM certificate file")
    print_parser.add_argument("--key", help="PEM private key file")

    # Keypair command
    keypair_parser = subparsers.add_parser("keypair", help="Generate a raw DER key pair")
    keypair_parser.add_argument("--private-key-file", required=True, help="Output for DER private key")
    keypair_parser.add_argument("--public-key-file", required=True, help="Output for DER public key")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "chain":
            cmd_chain(args)
        elif args.command == "print":
            cmd_print(args)
        elif args.command == "keypair":
            cmd_keypair(args)
    except MkCertError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _write(path: str, data: bytes):
    Path(path).write_bytes(data)
    logger.info(f"Wrote {len(data)} bytes to {path}")


def cmd_chain(args):
    """Generate a chain and write its leaf, key and root."""
    if args.length < 1:
        print(f"Error: chain length must be at least 1, got {args.length}", file=sys.stderr)
        sys.exit(1)

    rng = random.Random(args.seed) if args.seed is not None else None
    specs = build_spec_chain(args.length, Side(args.side), rng=rng)
    if args.expire:
        specs[0] = replace(
            specs[0],
            not_before_offset=-timedelta(days=365),
            not_after_offset=-timedelta(days=1),
        )

    chain = build_chain(specs)
    leaf = chain[0]
    root = chain[-1]
    bundle = concat_cert_chain(chain[:-1]) if len(chain) > 1 else leaf.cert_pem

    if args.cert_file:
        _write(args.cert_file, bundle)
    if args.key_file:
        _write(args.key_file, leaf.private_key_pem)
    if args.ca_file:
        _write(args.ca_file, root.cert_pem)

    print(f"Generated {args.side} chain of length {len(chain)}")
    if args.print_chain:
        for i, entry in enumerate(chain):
            print(f"\n{'='*60}")
            print(f"Certificate {i}")
            print(f"{'='*60}")
            print_cert(entry.cert_pem, sys.stdout)
        print(f"\n{'='*60}")
        print("Leaf private key")
        print(f"{'='*60}")
        print_private_key(leaf.private_key_pem, sys.stdout)


def cmd_print(args):
    """Print certificate and/or key files."""
    if not args.cert and not args.key:
        print("Error: nothing to print, pass --cert and/or --key", file=sys.stderr)
        sys.exit(1)

    for option, printer in ((args.cert, print_cert), (args.key, print_private_key)):
        if not option:
            continue
        path = Path(option)
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            sys.exit(1)
        printer(path.read_bytes(), sys.stdout)


def cmd_keypair(args):
    """Generate a key pair and write it as raw DER."""
    raw = make_raw_key_pair()
    _write(args.private_key_file, raw.private_key_der)
    _write(args.public_key_file, raw.public_key_der)
    print(f"Private key: {len(raw.private_key_der)} bytes, public key: {len(raw.public_key_der)} bytes")


if __name__ == "__main__":
    main()
