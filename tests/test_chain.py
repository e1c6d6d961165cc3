"""
Tests for the certificate chain builder.

Tests cover:
- Chains with a generated self-signed root
- Chains grafted onto a supplied root authority
- Ordering and linkage of chain entries
- Empty input handling
"""

import pytest
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID

from mkcert import (
    CertAndKey,
    CertKind,
    InvalidInputError,
    MkCertConfig,
    Side,
    build_chain,
    build_spec,
    build_spec_chain,
    is_self_signed,
    make_cert_chain,
    sign,
    verify_cert_chain,
)


def _load(entry: CertAndKey) -> x509.Certificate:
    return x509.load_pem_x509_certificate(entry.cert_pem)


def _is_ca(cert: x509.Certificate) -> bool:
    return cert.extensions.get_extension_for_class(x509.BasicConstraints).value.ca


def _assert_linked(certs):
    for i in range(len(certs) - 1):
        assert certs[i].issuer == certs[i + 1].subject
        certs[i].verify_directly_issued_by(certs[i + 1])


class TestBuildChain:
    """Tests for chains with a generated root."""

    @pytest.mark.parametrize("length", [1, 2, 3, 5])
    def test_length_and_linkage(self, length, rng, config, provider):
        """Test N specs give N linked entries ending in a self-signed root."""
        specs = build_spec_chain(length, Side.SERVER, rng=rng, config=config)
        chain = build_chain(specs, provider=provider)

        assert len(chain) == length
        certs = [_load(entry) for entry in chain]
        assert is_self_signed(certs[-1])
        _assert_linked(certs)

    def test_entries_follow_spec_order(self, rng, config, provider):
        """Test entry i is produced from spec i."""
        specs = build_spec_chain(4, Side.CLIENT, rng=rng, config=config)
        chain = build_chain(specs, provider=provider)

        assert [_load(entry).serial_number for entry in chain] == [s.serial_number for s in specs]

    def test_server_chain_of_three(self, rng, config, provider):
        """Test leaf, one intermediate and a self-signed root."""
        chain = build_chain(build_spec_chain(3, Side.SERVER, rng=rng, config=config), provider=provider)
        leaf, intermediate, root = [_load(entry) for entry in chain]

        assert len(chain) == 3
        assert not _is_ca(leaf)
        eku = leaf.extensions.get_extension_for_class(x509.ExtendedKeyUsage).value
        assert list(eku) == [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]
        assert _is_ca(intermediate)
        assert _is_ca(root)
        assert is_self_signed(root)
        assert leaf.issuer == intermediate.subject

    def test_single_client_leaf(self, rng, config, provider):
        """Test a one-entry chain is a self-signed end-entity certificate."""
        chain = build_chain(build_spec_chain(1, Side.CLIENT, rng=rng, config=config), provider=provider)

        assert len(chain) == 1
        cert = _load(chain[0])
        assert is_self_signed(cert)
        assert not _is_ca(cert)

    def test_root_has_no_authority_key_identifier(self, rng, config, provider):
        """Test only non-root entries link to their authority."""
        chain = build_chain(build_spec_chain(2, Side.SERVER, rng=rng, config=config), provider=provider)
        leaf, root = [_load(entry) for entry in chain]

        with pytest.raises(x509.ExtensionNotFound):
            root.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier)
        aki = leaf.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier).value
        ski = root.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
        assert aki.key_identifier == ski.digest

    def test_every_entry_has_its_own_key(self, rng, config, provider):
        """Test no two entries share a private key."""
        chain = build_chain(build_spec_chain(3, Side.SERVER, rng=rng, config=config), provider=provider)

        assert len({entry.private_key_pem for entry in chain}) == 3

    def test_chain_verifies(self, rng, config, provider):
        """Test the generated chain passes verify_cert_chain."""
        chain = build_chain(build_spec_chain(3, Side.CLIENT, rng=rng, config=config), provider=provider)

        valid, details = verify_cert_chain(chain)
        assert valid is True, details["errors"]


class TestRootAuthority:
    """Tests for chains grafted onto a supplied root."""

    @pytest.fixture
    def root(self, rng, config, provider):
        """Externally generated root authority."""
        return sign(build_spec(CertKind.server_root_ca(), rng=rng, config=config), provider=provider)

    def test_one_spec_gives_two_entries(self, root, rng, config, provider):
        """Test M specs plus a root give M + 1 entries, root last."""
        spec = build_spec(CertKind.server(), rng=rng, config=config)
        chain = build_chain([spec], root_authority=root, provider=provider)

        assert len(chain) == 2
        assert chain[1] == root
        assert chain[1] is not root
        _load(chain[0]).verify_directly_issued_by(_load(root))

    def test_root_is_not_regenerated(self, root, rng, config, provider):
        """Test the supplied root key is reused, not replaced."""
        specs = build_spec_chain(2, Side.CLIENT, rng=rng, config=config)
        chain = build_chain(specs, root_authority=root, provider=provider)

        assert len(chain) == 3
        assert chain[-1].cert_pem == root.cert_pem
        assert chain[-1].private_key_pem == root.private_key_pem
        certs = [_load(entry) for entry in chain]
        _assert_linked(certs)

    def test_empty_root_authority_means_self_signed(self, rng, config, provider):
        """Test an empty CertAndKey behaves like no root authority."""
        specs = build_spec_chain(2, Side.SERVER, rng=rng, config=config)
        chain = build_chain(specs, root_authority=CertAndKey(), provider=provider)

        assert len(chain) == 2
        assert is_self_signed(_load(chain[-1]))

    def test_grafted_chain_verifies(self, root, rng, config, provider):
        """Test a grafted chain passes verify_cert_chain."""
        specs = build_spec_chain(2, Side.SERVER, rng=rng, config=config)
        chain = build_chain(specs, root_authority=root, provider=provider)

        valid, details = verify_cert_chain(chain)
        assert valid is True, details["errors"]


class TestChainInput:
    """Tests for empty and invalid input."""

    def test_empty_specs_rejected(self, provider):
        """Test zero specs without a root is a caller error."""
        with pytest.raises(InvalidInputError):
            build_chain([], provider=provider)

    def test_empty_specs_with_root_rejected(self, rng, config, provider):
        """Test zero specs is rejected even with a root authority."""
        root = sign(build_spec(CertKind.server_root_ca(), rng=rng, config=config), provider=provider)
        with pytest.raises(InvalidInputError):
            build_chain([], root_authority=root, provider=provider)

    def test_zero_length_convenience_chain(self, rng, config, provider):
        """Test the convenience entry point returns an empty chain for length 0."""
        assert make_cert_chain(0, Side.SERVER, rng=rng, provider=provider, config=config) == []

    def test_negative_length_rejected(self, rng, config, provider):
        """Test a negative length is not silently turned into an empty chain."""
        with pytest.raises(InvalidInputError):
            make_cert_chain(-1, Side.CLIENT, rng=rng, provider=provider, config=config)

    def test_convenience_chain(self, rng, config, provider):
        """Test make_cert_chain builds a linked self-rooted chain."""
        chain = make_cert_chain(3, Side.CLIENT, rng=rng, provider=provider, config=config)

        assert len(chain) == 3
        subjects = [_load(entry).subject.rfc4514_string() for entry in chain]
        assert "CN=FDB Testing Services Client" in subjects[0]
        assert "CN=FDB Testing Services Client Root" in subjects[2]

    def test_convenience_chain_uses_config_key_parameters(self, rng):
        """Test curve and digest from config reach every certificate."""
        config = MkCertConfig(curve="secp384r1", digest="sha384")
        chain = make_cert_chain(2, Side.SERVER, rng=rng, config=config)

        for entry in chain:
            cert = _load(entry)
            assert cert.public_key().curve.name == "secp384r1"
            assert cert.signature_hash_algorithm.name == "sha384"

    def test_convenience_chain_rejects_unknown_curve(self, rng):
        """Test an unknown curve in config is reported, not ignored."""
        with pytest.raises(InvalidInputError):
            make_cert_chain(2, Side.CLIENT, rng=rng, config=MkCertConfig(curve="bogus"))
