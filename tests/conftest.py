"""
Shared test fixtures for mkcert tests.

Provides a seeded random source for reproducible serial numbers, a fixed
configuration (independent of MKCERT_* variables in the environment),
a crypto provider and temporary directories.
"""

import random
import shutil
import tempfile
from pathlib import Path

import pytest

from mkcert import CryptoProvider, MkCertConfig


@pytest.fixture
def rng():
    """Seeded random source.

    Usage:
        def test_something(rng):
            spec = build_spec(CertKind.server(), rng=rng)
    """
    return random.Random(1234)


@pytest.fixture
def config():
    """Default configuration, ignoring the environment."""
    return MkCertConfig()


@pytest.fixture
def provider(config):
    """Crypto provider built from the default configuration."""
    return CryptoProvider.from_config(config)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for output files.

    The directory is automatically cleaned up after the test.
    """
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)
