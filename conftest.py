"""
Shared fixtures. Key generation is the expensive part of a run, so keys are
generated once per session and per parameter set.
"""

import pytest

from bfv_psi.custom_fhe import SchemeParameters
from bfv_psi.receiver import generate_keys


@pytest.fixture(scope="session")
def params():
    """Default parameters: N=4096, 20-bit plaintext modulus."""
    return SchemeParameters(4096)


@pytest.fixture(scope="session")
def keys(params):
    return generate_keys(params)


@pytest.fixture(scope="session")
def deep_params():
    """N=4096 with a 16-bit plaintext modulus, leaving room for one
    ciphertext multiplication plus masking."""
    return SchemeParameters(4096, plain_modulus_bits=16)


@pytest.fixture(scope="session")
def deep_keys(deep_params):
    return generate_keys(deep_params)


@pytest.fixture(scope="session")
def small_params():
    """N=2048: enough budget for encryption and subtraction only."""
    return SchemeParameters(2048)


@pytest.fixture(scope="session")
def small_keys(small_params):
    return generate_keys(small_params)
