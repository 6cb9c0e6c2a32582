"""
BFV (Brakerski-Fan-Vercauteren) Encryption Scheme
Scale-invariant RLWE encryption with base-T relinearization and the
SEAL-style invariant noise budget.

Keys are never stored on the scheme object: the Receiver and the Sender share
one set of parameters, but only the Receiver ever holds a secret key.
"""

import logging

import numpy as np

from ..exceptions import MissingKeyError, ParameterMismatchError
from .ciphertext import Ciphertext, Plaintext
from .keys import PublicKey, RelinearizationKey, SecretKey
from .polynomial import DiscreteGaussian, PolynomialRing, negacyclic_convolve

logger = logging.getLogger(__name__)


class BFVScheme:
    def __init__(self, params, rng=None):
        self.params = params
        self.N = params.N
        self.t = params.t
        self.q = params.q
        self.sigma = params.sigma
        self.poly_ring = PolynomialRing(self.N, self.q, rng=rng)
        self.gaussian = DiscreteGaussian(self.sigma, self.N, rng=rng)
        self.delta = params.delta

        # Decomposition base T for relinearization
        self.T = params.T
        self.n_slots = params.slot_count

        logger.debug(
            f"BFV parameters: N={self.N}, t={self.t}, q=2^{params.coeff_modulus_bits}-1, "
            f"T=2^{params.decomposition_bit_count}"
        )

    # ------------------------------------------------------------------
    # Parameter checks
    # ------------------------------------------------------------------

    def fingerprint(self):
        return self.params.fingerprint()

    def check_compatible(self, obj, what="ciphertext"):
        """Raise ParameterMismatchError unless obj was made under these parameters.

        Ciphertexts and keys without a fingerprint are rejected; only plaintexts
        built locally (e.g. for tests) may omit it.
        """
        expected = self.fingerprint()
        if not obj.params and isinstance(obj, Plaintext):
            return
        if obj.params != expected:
            raise ParameterMismatchError(expected, obj.params, what)

    def _error(self):
        return self.gaussian.sample_bounded(bound=self.params.error_bound)

    # ------------------------------------------------------------------
    # Key generation
    # ------------------------------------------------------------------

    def key_generation(self):
        """Generate a fresh (secret key, public key) pair."""
        s = self.poly_ring.random_ternary()
        a = self.poly_ring.random_uniform()
        e = self._error()
        # b = -(as + e)
        b = self.poly_ring.neg(self.poly_ring.add(self.poly_ring.mul(a, s), e))

        fingerprint = self.fingerprint()
        return SecretKey(s, params=fingerprint), PublicKey(b, a, params=fingerprint)

    def _encrypt_poly_internal(self, poly_msg, s):
        """Symmetric encryption of a raw polynomial under s (used for the relin key)."""
        a = self.poly_ring.random_uniform()
        e = self._error()

        # b = -(as + e) + message
        noise = self.poly_ring.add(self.poly_ring.mul(a, s), e)
        b = self.poly_ring.add(self.poly_ring.neg(noise), poly_msg)
        return (b, a)

    def generate_relin_key(self, secret_key):
        """Relinearization key: encryptions of T^i * s^2, one per base-T digit of q."""
        self.check_compatible(secret_key, "secret key")
        s = secret_key.get_polynomial()
        s_squared = self.poly_ring.mul(s, s)

        parts = []
        for i in range(self.params.decomposition_count):
            parts.append(self._encrypt_poly_internal(
                self.poly_ring.mul_scalar(s_squared, self.T ** i), s))

        return RelinearizationKey(
            parts, self.params.decomposition_bit_count, params=self.fingerprint())

    # ------------------------------------------------------------------
    # Encryption / decryption
    # ------------------------------------------------------------------

    def encrypt(self, plaintext, public_key):
        if public_key is None:
            raise MissingKeyError("No Public Key")
        self.check_compatible(public_key, "public key")
        self.check_compatible(plaintext, "plaintext")

        m = np.asarray(plaintext.get_poly(), dtype=object) % self.t
        pk0, pk1 = public_key.get_components()

        u = self.poly_ring.random_ternary()
        e1 = self._error()
        e2 = self._error()

        # c0 = pk0*u + e1 + delta*m
        c0 = self.poly_ring.add(self.poly_ring.mul(pk0, u), e1)
        c0 = self.poly_ring.add(c0, self.poly_ring.mul_scalar(m, self.delta))

        # c1 = pk1*u + e2
        c1 = self.poly_ring.add(self.poly_ring.mul(pk1, u), e2)

        return Ciphertext([c0, c1], params=self.fingerprint())

    def _evaluate_at_secret(self, ciphertext, secret_key):
        """c0 + c1*s + c2*s^2 + ... mod q."""
        s = secret_key.get_polynomial()
        components = ciphertext.get_components()
        result = components[0] % self.q
        s_power = s
        for c in components[1:]:
            result = self.poly_ring.add(result, self.poly_ring.mul(c, s_power))
            s_power = self.poly_ring.mul(s_power, s)
        return result

    def decrypt(self, ciphertext, secret_key):
        if secret_key is None:
            raise MissingKeyError("No Secret Key")
        self.check_compatible(secret_key, "secret key")
        self.check_compatible(ciphertext)

        noisy_m = self._evaluate_at_secret(ciphertext, secret_key)

        # Scale: round(noisy * t / q)
        scaled = (noisy_m * self.t + (self.q // 2)) // self.q
        m = scaled % self.t
        return Plaintext(m, params=self.fingerprint())

    def invariant_noise_budget(self, ciphertext, secret_key):
        """Bits of noise budget left: log2(q) - log2(||[t * ct(s)]_q||) - 1, floored at 0."""
        if ciphertext.is_empty():
            return 0
        self.check_compatible(secret_key, "secret key")
        self.check_compatible(ciphertext)

        noise_poly = self.poly_ring.mod_center(
            self._evaluate_at_secret(ciphertext, secret_key) * self.t)
        norm = max(abs(int(c)) for c in noise_poly)
        return max(0, self.q.bit_length() - norm.bit_length() - 1)

    # ------------------------------------------------------------------
    # Homomorphic operations
    # ------------------------------------------------------------------

    def _check_pair(self, ct1, ct2):
        self.check_compatible(ct1)
        self.check_compatible(ct2)

    def add(self, ct1, ct2):
        self._check_pair(ct1, ct2)
        size = max(ct1.size, ct2.size)
        zero = self.poly_ring.zero()
        c1 = ct1.get_components() + [zero] * (size - ct1.size)
        c2 = ct2.get_components() + [zero] * (size - ct2.size)
        return Ciphertext([self.poly_ring.add(a, b) for a, b in zip(c1, c2)],
                          params=self.fingerprint())

    def negate(self, ct):
        self.check_compatible(ct)
        return Ciphertext([self.poly_ring.neg(c) for c in ct.get_components()],
                          params=self.fingerprint())

    def sub(self, ct1, ct2):
        return self.add(ct1, self.negate(ct2))

    def _scaled_plain(self, plaintext):
        self.check_compatible(plaintext, "plaintext")
        m = np.asarray(plaintext.get_poly(), dtype=object) % self.t
        return self.poly_ring.mul_scalar(m, self.delta)

    def add_plain(self, ct, plaintext):
        self.check_compatible(ct)
        components = list(ct.get_components())
        components[0] = self.poly_ring.add(components[0], self._scaled_plain(plaintext))
        return Ciphertext(components, params=self.fingerprint())

    def sub_plain(self, ct, plaintext):
        self.check_compatible(ct)
        components = list(ct.get_components())
        components[0] = self.poly_ring.sub(components[0], self._scaled_plain(plaintext))
        return Ciphertext(components, params=self.fingerprint())

    def multiply_plain(self, ct, plaintext):
        """Slot-wise product with a plaintext; noise grows by about ||m||."""
        self.check_compatible(ct)
        self.check_compatible(plaintext, "plaintext")
        m = np.asarray(plaintext.get_poly(), dtype=object) % self.t
        half_t = self.t // 2
        m[m > half_t] -= self.t
        return Ciphertext([self.poly_ring.mul(c, m) for c in ct.get_components()],
                          params=self.fingerprint())

    def multiply(self, ct1, ct2):
        """Homomorphic Multiplication with Correct Scaling (t/q)

        The tensor product is computed exactly on centered representatives,
        scaled by t/q and rounded. Two size-2 inputs give a size-3 result.
        """
        self._check_pair(ct1, ct2)
        lhs = [self.poly_ring.mod_center(c) for c in ct1.get_components()]
        rhs = [self.poly_ring.mod_center(c) for c in ct2.get_components()]

        tensor = [self.poly_ring.zero() for _ in range(len(lhs) + len(rhs) - 1)]
        for i, a in enumerate(lhs):
            for j, b in enumerate(rhs):
                tensor[i + j] = tensor[i + j] + negacyclic_convolve(a, b)

        # Scale: (val * t + q/2) // q
        scaled = [((d * self.t + (self.q // 2)) // self.q) % self.q for d in tensor]
        return Ciphertext(scaled, params=self.fingerprint())

    def relinearize(self, ciphertext, relin_key):
        """Relinearization with Base Decomposition: size 3 -> size 2."""
        if ciphertext.size <= 2:
            return ciphertext
        if ciphertext.size != 3:
            raise ValueError(f"can only relinearize size 3 ciphertexts, got size {ciphertext.size}")
        if relin_key is None:
            raise MissingKeyError("No Relinearization Key")
        self.check_compatible(ciphertext)
        self.check_compatible(relin_key, "relinearization key")

        d0, d1, d2 = ciphertext.get_components()
        T = 1 << relin_key.decomposition_bit_count
        new_c0, new_c1 = d0, d1

        # d2 = sum_i d2_i * T^i, then sum_i d2_i * Enc(T^i * s^2) replaces d2 * s^2
        digits = d2 % self.q
        for k_b, k_a in relin_key.get_components():
            d2_i = digits % T
            digits = digits // T
            new_c0 = self.poly_ring.add(new_c0, self.poly_ring.mul(d2_i, k_b))
            new_c1 = self.poly_ring.add(new_c1, self.poly_ring.mul(d2_i, k_a))

        return Ciphertext([new_c0, new_c1], params=self.fingerprint())
