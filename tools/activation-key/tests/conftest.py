from __future__ import annotations

import pytest

from activation_key.algorithms import Algorithm
from activation_key.keys import generate_key_pair

# Key generation (P-521 in particular) is the slow part of the suite, so
# pairs are shared across the session; KeyPair is immutable.


@pytest.fixture(scope="session")
def es256_pair():
    return generate_key_pair(Algorithm.ES256, "Test ES256", key_id="es256")


@pytest.fixture(scope="session")
def es256_other_pair():
    return generate_key_pair(Algorithm.ES256, "Other ES256", key_id="es256-other")


@pytest.fixture(scope="session")
def es512_pair():
    return generate_key_pair(Algorithm.ES512, "Test ES512", key_id="es512")


@pytest.fixture(scope="session")
def es512_other_pair():
    return generate_key_pair(Algorithm.ES512, "Other ES512", key_id="es512-other")


@pytest.fixture(params=["ES256", "ES512"])
def signing_pair(request, es256_pair, es512_pair):
    """(algorithm, pair) for each supported algorithm."""
    if request.param == "ES256":
        return Algorithm.ES256, es256_pair
    return Algorithm.ES512, es512_pair
