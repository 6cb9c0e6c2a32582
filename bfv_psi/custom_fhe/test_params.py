"""
Tests for parameter derivation.
"""

import pytest

from bfv_psi.custom_fhe.params import (
    COEFF_MODULUS_BITS,
    SchemeParameters,
    find_batching_prime,
    is_prime,
)
from bfv_psi.exceptions import ParameterError


class TestPrimes:
    def test_is_prime(self):
        assert [n for n in range(30) if is_prime(n)] == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
        assert is_prime(65537)
        assert is_prime(1032193)
        assert not is_prime(561)  # Carmichael number
        assert not is_prime(1040385)

    def test_batching_prime_for_4096(self):
        # Same prime SEAL's PlainModulus::Batching(4096, 20) returns
        assert find_batching_prime(20, 4096) == 1032193
        assert find_batching_prime(16, 4096) == 40961

    @pytest.mark.parametrize("N", [1024, 2048, 4096, 8192])
    def test_batching_prime_properties(self, N):
        t = find_batching_prime(20, N)
        assert t < 2 ** 20
        assert t % (2 * N) == 1
        assert is_prime(t)

    def test_no_prime_small_bits(self):
        with pytest.raises(ParameterError):
            find_batching_prime(8, 4096)


class TestSchemeParameters:
    def test_derived_from_degree(self):
        params = SchemeParameters(4096)
        assert params.N == 4096
        assert params.slot_count == 4096
        assert params.row_size == 2048
        assert params.q == 2 ** 109 - 1
        assert params.coeff_modulus_bits == 109
        assert params.t == 1032193
        assert params.plain_modulus == params.t
        assert params.delta == params.q // params.t

    @pytest.mark.parametrize("N,bits", sorted(COEFF_MODULUS_BITS.items())[:4])
    def test_coeff_modulus_table(self, N, bits):
        assert SchemeParameters(N).q.bit_length() == bits

    def test_decomposition(self):
        params = SchemeParameters(4096)
        assert params.T == 2 ** 24
        assert params.decomposition_count == 5  # ceil(109 / 24)
        assert params.T ** params.decomposition_count > params.q

    def test_max_bit_length(self):
        params = SchemeParameters(4096)
        L = params.max_bit_length()
        assert L == 19
        assert (1 << L) < params.t <= (1 << (L + 1))

    @pytest.mark.parametrize("N", [0, 100, 512, 65536])
    def test_invalid_degree(self, N):
        with pytest.raises(ParameterError):
            SchemeParameters(N)

    def test_invalid_plain_modulus_bits(self):
        with pytest.raises(ParameterError):
            SchemeParameters(1024, plain_modulus_bits=27)
        with pytest.raises(ParameterError):
            SchemeParameters(4096, plain_modulus_bits=1)

    def test_invalid_decomposition_bits(self):
        with pytest.raises(ParameterError):
            SchemeParameters(4096, decomposition_bit_count=0)

    def test_parameter_error_is_value_error(self):
        with pytest.raises(ValueError):
            SchemeParameters(3000)

    def test_fingerprint_and_equality(self):
        a = SchemeParameters(4096)
        b = SchemeParameters(4096)
        c = SchemeParameters(2048)
        assert a == b
        assert hash(a) == hash(b)
        assert a.fingerprint() == {'N': 4096, 't': 1032193, 'q': 2 ** 109 - 1}
        assert a.fingerprint() != c.fingerprint()

    def test_immutable(self):
        params = SchemeParameters(4096)
        with pytest.raises(AttributeError):
            params.poly_modulus_degree = 8192
