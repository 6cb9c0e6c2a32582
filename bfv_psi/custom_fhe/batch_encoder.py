"""
SIMD batch encoder.

With t prime and t = 1 (mod 2N), X^N + 1 splits into N linear factors mod t,
so a plaintext polynomial is equivalent to N independent values in Z_t (its
evaluations at the odd powers of a primitive 2N-th root of unity psi).
Slots are laid out as a 2 x (N/2) matrix like SEAL's BatchEncoder: slot i of
row 0 is the evaluation at psi^(3^i), slot i of row 1 at psi^(-3^i).

Additions and multiplications of plaintexts (and ciphertexts) then act
slot-wise, which is what lets one ciphertext carry a whole dataset.
"""

import numpy as np

from ..exceptions import ParameterError
from .ciphertext import Plaintext


def _ntt(values, powers, mod):
    """Cyclic NTT of `values` (length n dividing len(powers)) over Z_mod.

    `powers[k]` holds w^k for a primitive len(powers)-th root of unity w.
    """
    n = len(values)
    if n == 1:
        return values.copy()
    even = _ntt(values[0::2], powers, mod)
    odd = _ntt(values[1::2], powers, mod)
    step = len(powers) // n
    twiddled = odd * powers[0:step * (n // 2):step] % mod
    return np.concatenate(((even + twiddled) % mod, (even - twiddled) % mod))


def _power_table(base, count, mod):
    table = np.empty(count, dtype=object)
    acc = 1
    for k in range(count):
        table[k] = acc
        acc = acc * base % mod
    return table


def find_primitive_root(order, mod):
    """Smallest-base primitive `order`-th root of unity mod a prime (order a power of 2)."""
    if (mod - 1) % order != 0:
        raise ParameterError(f"{mod} has no primitive {order}-th root of unity")
    cofactor = (mod - 1) // order
    for x in range(2, mod):
        root = pow(x, cofactor, mod)
        if pow(root, order // 2, mod) == mod - 1:
            return root
    raise ParameterError(f"no primitive {order}-th root of unity mod {mod}")


class BatchEncoder:
    def __init__(self, params):
        self.params = params
        self.N = params.N
        self.t = params.t

        psi = find_primitive_root(2 * self.N, self.t)
        psi_inv = pow(psi, -1, self.t)
        omega = psi * psi % self.t
        omega_inv = psi_inv * psi_inv % self.t

        self._psi_powers = _power_table(psi, self.N, self.t)
        self._psi_inv_powers = _power_table(psi_inv, self.N, self.t)
        self._omega_powers = _power_table(omega, self.N, self.t)
        self._omega_inv_powers = _power_table(omega_inv, self.N, self.t)
        self._n_inv = pow(self.N, -1, self.t)

        # slot index -> index k of the evaluation point psi^(2k+1)
        two_n = 2 * self.N
        row_size = self.N // 2
        index_map = np.empty(self.N, dtype=np.int64)
        exponent = 1
        for i in range(row_size):
            index_map[i] = (exponent - 1) // 2
            index_map[row_size + i] = (two_n - exponent - 1) // 2
            exponent = exponent * 3 % two_n
        self._index_map = index_map

    @property
    def slot_count(self):
        return self.N

    @property
    def row_size(self):
        return self.N // 2

    def encode(self, values):
        """Encode up to slot_count integers in [0, t); missing slots are zero."""
        values = list(values)
        if len(values) > self.N:
            raise ParameterError(f"cannot encode {len(values)} values into {self.N} slots")
        evaluations = np.zeros(self.N, dtype=object)
        for slot, value in enumerate(values):
            value = int(value)
            if not 0 <= value < self.t:
                raise ParameterError(f"slot value {value} outside plaintext modulus [0, {self.t})")
            evaluations[self._index_map[slot]] = value

        twisted = _ntt(evaluations, self._omega_inv_powers, self.t) * self._n_inv % self.t
        poly = twisted * self._psi_inv_powers % self.t
        return Plaintext(poly, params=self.params.fingerprint())

    def encode_constant(self, value):
        """Plaintext holding `value` in every slot (the constant polynomial)."""
        value = int(value)
        if not 0 <= value < self.t:
            raise ParameterError(f"slot value {value} outside plaintext modulus [0, {self.t})")
        poly = np.zeros(self.N, dtype=object)
        poly[0] = value
        return Plaintext(poly, params=self.params.fingerprint())

    def decode(self, plaintext):
        """Return the list of slot_count slot values of a plaintext."""
        poly = np.asarray(plaintext.get_poly(), dtype=object) % self.t
        evaluations = _ntt(poly * self._psi_powers % self.t, self._omega_powers, self.t)
        return [int(v) for v in evaluations[self._index_map]]
