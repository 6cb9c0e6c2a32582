"""
Polynomial Ring Operations
Implements polynomial arithmetic in R_q = Z_q[X]/(X^N + 1)

Coefficients are kept in numpy arrays of dtype object (Python integers), since
the coefficient moduli of the larger parameter sets exceed 64 bits.
Multiplication uses Kronecker substitution: both polynomials are packed into
one big integer each, multiplied with CPython's big-integer arithmetic and
unpacked again, which is much faster than an object-dtype convolution.
"""

import secrets

import numpy as np


def as_poly(values, N=None):
    """Convert coefficients to an object array, zero-padded to length N."""
    coeffs = np.array([int(v) for v in values], dtype=object)
    if N is not None and len(coeffs) < N:
        coeffs = np.concatenate((coeffs, np.zeros(N - len(coeffs), dtype=object)))
    return coeffs


def _max_abs(a):
    return max((abs(int(c)) for c in a), default=0)


def _pack(a, width):
    """Evaluate polynomial a at X = 2^(8*width)."""
    zero = bytes(width)
    pos = b''.join(int(c).to_bytes(width, 'little') if c > 0 else zero for c in a)
    value = int.from_bytes(pos, 'little')
    if any(c < 0 for c in a):
        neg = b''.join(int(-c).to_bytes(width, 'little') if c < 0 else zero for c in a)
        value -= int.from_bytes(neg, 'little')
    return value


def _unpack(value, width, count):
    """Inverse of _pack for signed coefficients of magnitude < 2^(8*width - 1)."""
    bias = 1 << (8 * width - 1)
    offset = int.from_bytes(bias.to_bytes(width, 'little') * count, 'little')
    data = (value + offset).to_bytes(width * count, 'little')
    return np.array(
        [int.from_bytes(data[i:i + width], 'little') - bias for i in range(0, width * count, width)],
        dtype=object,
    )


def negacyclic_convolve(a, b):
    """Exact product of a and b in Z[X]/(X^N + 1), no modular reduction."""
    N = len(a)
    bound = _max_abs(a) * _max_abs(b) * N
    width = (bound.bit_length() + 2 + 7) // 8
    product = _unpack(_pack(a, width) * _pack(b, width), width, 2 * N - 1)

    # Negacyclic reduction (X^N = -1)
    result = product[:N].copy()
    result[:N - 1] -= product[N:]
    return result


class PolynomialRing:
    def __init__(self, N, q, rng=None):
        self.N = N
        self.q = q
        if N & (N - 1) != 0:
            raise ValueError("N must be a power of 2")
        self.rng = rng if rng is not None else np.random.default_rng()

    def add(self, a, b):
        return (a + b) % self.q

    def sub(self, a, b):
        return (a - b) % self.q

    def neg(self, a):
        return (-a) % self.q

    def mul_scalar(self, a, scalar):
        return (a * int(scalar)) % self.q

    def mul(self, a, b):
        """Multiply two polynomials in R_q."""
        return negacyclic_convolve(a, b) % self.q

    def mod_center(self, a):
        """Representatives in (-q/2, q/2]."""
        result = a % self.q
        half_q = self.q // 2
        mask = result > half_q
        result[mask] -= self.q
        return result

    def zero(self):
        return np.zeros(self.N, dtype=object)

    def random_uniform(self):
        return np.array([secrets.randbelow(self.q) for _ in range(self.N)], dtype=object)

    def random_ternary(self):
        return self.rng.integers(-1, 2, size=self.N).astype(object)


class DiscreteGaussian:
    def __init__(self, sigma, N, rng=None):
        self.sigma = sigma
        self.N = N
        self.rng = rng if rng is not None else np.random.default_rng()

    def sample(self):
        samples = self.rng.normal(0, self.sigma, self.N)
        return np.round(samples).astype(np.int64)

    def sample_bounded(self, bound):
        samples = self.sample()
        return np.clip(samples, -bound, bound).astype(object)
