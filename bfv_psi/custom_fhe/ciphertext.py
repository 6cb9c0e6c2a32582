"""
Plaintext and Ciphertext containers.

Both carry the parameter fingerprint ({'N', 't', 'q'}) they were produced
under, so a party can refuse material created with different parameters.
"""

import numpy as np


class Plaintext:
    """Polynomial with coefficients in Z_t."""

    def __init__(self, poly, params=None):
        self.poly = poly
        self.params = dict(params or {})

    def get_poly(self):
        return self.poly

    def __repr__(self):
        return f"Plaintext(N={len(self.poly)}, params={self.params})"


class Ciphertext:
    """List of polynomials (c0, c1, ...) in R_q.

    A freshly encrypted ciphertext has size 2, the product of two ciphertexts
    has size 3 until relinearized. Size 0 is the empty ciphertext, standing
    for "nothing was encrypted".
    """

    def __init__(self, components, params=None):
        self.components = list(components)
        self.params = dict(params or {})

    @classmethod
    def empty(cls, params=None):
        return cls([], params=params)

    @property
    def size(self):
        return len(self.components)

    def is_empty(self):
        return self.size == 0

    def get_components(self):
        return self.components

    def __eq__(self, other):
        if not isinstance(other, Ciphertext):
            return NotImplemented
        return (
            self.params == other.params
            and self.size == other.size
            and all(np.array_equal(a, b) for a, b in zip(self.components, other.components))
        )

    def __repr__(self):
        return f"Ciphertext(size={self.size}, params={self.params})"
