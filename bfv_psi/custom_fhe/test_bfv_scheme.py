"""
Test Suite for the BFV scheme: encryption, homomorphic operations,
relinearization and the noise budget.
"""

import pickle

import pytest

from bfv_psi.custom_fhe import BatchEncoder, BFVScheme, Ciphertext, Plaintext, PublicKey
from bfv_psi.exceptions import MissingKeyError, ParameterMismatchError, SerializationError


@pytest.fixture(scope="module")
def fhe(params):
    return BFVScheme(params)


@pytest.fixture(scope="module")
def encoder(params):
    return BatchEncoder(params)


@pytest.fixture(scope="module")
def deep_fhe(deep_params):
    return BFVScheme(deep_params)


@pytest.fixture(scope="module")
def deep_encoder(deep_params):
    return BatchEncoder(deep_params)


def encrypt(fhe, encoder, keys, values):
    return fhe.encrypt(encoder.encode(values), keys.public_key)


def decrypt(fhe, encoder, keys, ct, num):
    return encoder.decode(fhe.decrypt(ct, keys.secret_key))[:num]


def test_key_generation(fhe, params):
    sk, pk = fhe.key_generation()
    assert set(int(c) for c in sk.get_polynomial()) <= {-1, 0, 1}
    b, a = pk.get_components()
    assert len(b) == len(a) == params.N
    assert pk.params == params.fingerprint()


def test_relin_key_parts(keys, params):
    assert len(keys.relin_keys) == params.decomposition_count
    assert keys.relin_keys.decomposition_bit_count == params.decomposition_bit_count


def test_basic_operations(fhe, encoder, keys, params):
    """Encryption/Decryption, addition and subtraction"""
    ct = encrypt(fhe, encoder, keys, [42, 7])
    assert ct.size == 2
    assert decrypt(fhe, encoder, keys, ct, 2) == [42, 7]

    ct1 = encrypt(fhe, encoder, keys, [100])
    ct2 = encrypt(fhe, encoder, keys, [200])
    assert decrypt(fhe, encoder, keys, fhe.add(ct1, ct2), 1) == [300]

    # 100 - 200 wraps around the plaintext modulus
    assert decrypt(fhe, encoder, keys, fhe.sub(ct1, ct2), 1) == [params.t - 100]


def test_plain_operations(fhe, encoder, keys, params):
    ct = encrypt(fhe, encoder, keys, [10, 20, 30])
    plain = encoder.encode([1, 20, 3])

    assert decrypt(fhe, encoder, keys, fhe.add_plain(ct, plain), 3) == [11, 40, 33]
    assert decrypt(fhe, encoder, keys, fhe.sub_plain(ct, plain), 3) == [9, 0, 27]
    assert decrypt(fhe, encoder, keys, fhe.multiply_plain(ct, plain), 3) == [10, 400, 90]


def test_exact_match_scenario(fhe, encoder, keys):
    """Subtraction yields zero exactly where values match."""
    dates = [20205, 20215, 20225, 20228]
    enc_dates = encrypt(fhe, encoder, keys, dates)
    enc_target = fhe.encrypt(encoder.encode_constant(20225), keys.public_key)

    diff = decrypt(fhe, encoder, keys, fhe.sub(enc_dates, enc_target), len(dates))
    assert [i for i, d in enumerate(diff) if d == 0] == [2]


@pytest.mark.parametrize("a,b,expected", [
    (5, 7, 35),
    (12, 8, 96),
    (3, 11, 33),
    (10, 10, 100),
    (2, 50, 100),
])
def test_multiplication(deep_fhe, deep_encoder, deep_keys, a, b, expected):
    ct1 = encrypt(deep_fhe, deep_encoder, deep_keys, [a, b])
    ct2 = encrypt(deep_fhe, deep_encoder, deep_keys, [b, a])

    ct_mult = deep_fhe.multiply(ct1, ct2)
    assert ct_mult.size == 3
    # A size 3 ciphertext still decrypts (with s^2)
    assert decrypt(deep_fhe, deep_encoder, deep_keys, ct_mult, 2) == [expected, expected]

    ct_relin = deep_fhe.relinearize(ct_mult, deep_keys.relin_keys)
    assert ct_relin.size == 2
    assert decrypt(deep_fhe, deep_encoder, deep_keys, ct_relin, 2) == [expected, expected]


def test_noise_budget(deep_fhe, deep_encoder, deep_keys):
    ct = encrypt(deep_fhe, deep_encoder, deep_keys, [3, 4])
    fresh = deep_fhe.invariant_noise_budget(ct, deep_keys.secret_key)
    assert fresh > 0

    product = deep_fhe.relinearize(deep_fhe.multiply(ct, ct), deep_keys.relin_keys)
    after = deep_fhe.invariant_noise_budget(product, deep_keys.secret_key)
    assert 0 < after < fresh


def test_noise_budget_of_empty_ciphertext(fhe, keys, params):
    assert fhe.invariant_noise_budget(Ciphertext.empty(params.fingerprint()), keys.secret_key) == 0


def test_relinearize_is_noop_on_size_two(fhe, encoder, keys):
    ct = encrypt(fhe, encoder, keys, [1])
    assert fhe.relinearize(ct, keys.relin_keys) is ct


def test_relinearize_requires_key(deep_fhe, deep_encoder, deep_keys):
    ct = encrypt(deep_fhe, deep_encoder, deep_keys, [2])
    with pytest.raises(MissingKeyError):
        deep_fhe.relinearize(deep_fhe.multiply(ct, ct), None)


def test_mismatched_parameters_rejected(fhe, encoder, keys, small_params, small_keys):
    ct = encrypt(fhe, encoder, keys, [1])
    with pytest.raises(ParameterMismatchError):
        fhe.decrypt(ct, small_keys.secret_key)

    foreign = BFVScheme(small_params)
    with pytest.raises(ParameterMismatchError):
        foreign.add(ct, ct)
    with pytest.raises(ParameterMismatchError):
        fhe.encrypt(encoder.encode([1]), small_keys.public_key)


def test_secret_key_is_protected(keys):
    assert "redacted" in repr(keys.secret_key)
    assert "secret_key" not in repr(keys)
    with pytest.raises(SerializationError):
        pickle.dumps(keys.secret_key)


def test_missing_fingerprint_rejected(fhe, encoder, keys, params):
    ct = encrypt(fhe, encoder, keys, [1])
    with pytest.raises(ParameterMismatchError):
        fhe.decrypt(Ciphertext(ct.get_components()), keys.secret_key)
    b, a = keys.public_key.get_components()
    with pytest.raises(ParameterMismatchError):
        fhe.encrypt(encoder.encode([1]), PublicKey(b, a))

    # Locally built plaintexts may omit it
    plain = Plaintext(encoder.encode([5]).get_poly())
    assert decrypt(fhe, encoder, keys, fhe.add_plain(ct, plain), 1) == [6]
