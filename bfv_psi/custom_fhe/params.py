"""
Encryption parameters for the batched BFV scheme.

Everything is derived from the polynomial modulus degree N, which is the only
value the Receiver and the Sender have to agree on:

- slot_count: N plaintext slots, organized as 2 rows of N/2 (row_size)
- q: coefficient modulus 2^b - 1, b taken from the SEAL BFV defaults for N
- t: plaintext modulus, the largest prime below 2^plain_modulus_bits
  with t = 1 (mod 2N), required for batching
- T: relinearization decomposition base, 2^decomposition_bit_count

Tradeoffs:
- Larger N gives more slots and a larger q, hence more noise budget
  (more multiplicative levels) at the cost of slower polynomial arithmetic
- Larger t admits longer bitstrings but consumes noise budget faster
- Smaller T adds less noise during relinearization but needs more key parts
"""

from dataclasses import dataclass, field
from typing import Dict

from ..exceptions import ParameterError

# Total coefficient modulus bit counts of SEAL's BFVDefault (128-bit security)
COEFF_MODULUS_BITS = {
    1024: 27,
    2048: 54,
    4096: 109,
    8192: 218,
    16384: 438,
    32768: 881,
}

DEFAULT_PLAIN_MODULUS_BITS = 20
DEFAULT_DECOMPOSITION_BITS = 24
MAX_PLAIN_MODULUS_BITS = 60

_MR_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)


def is_prime(n: int) -> bool:
    """Deterministic Miller-Rabin, exact for n < 3.3 * 10^24."""
    if n < 2:
        return False
    for p in _MR_BASES:
        if n % p == 0:
            return n == p
    d, r = n - 1, 0
    while d % 2 == 0:
        d //= 2
        r += 1
    for a in _MR_BASES:
        x = pow(a, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(r - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def find_batching_prime(bits: int, N: int) -> int:
    """Find the largest prime t < 2^bits satisfying t = 1 mod 2N."""
    m = 2 * N
    t = ((1 << bits) - 1) // m * m + 1
    while t > m:
        if is_prime(t):
            return t
        t -= m
    raise ParameterError(f"No {bits}-bit prime t = 1 mod {m} exists")


@dataclass(frozen=True)
class SchemeParameters:
    """Parameters of the batched BFV scheme, derived from N."""

    poly_modulus_degree: int
    plain_modulus_bits: int = DEFAULT_PLAIN_MODULUS_BITS
    decomposition_bit_count: int = DEFAULT_DECOMPOSITION_BITS
    sigma: float = 3.2

    _q: int = field(init=False, repr=False, compare=False)
    _t: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        N = self.poly_modulus_degree
        if N not in COEFF_MODULUS_BITS:
            raise ParameterError(
                f"poly_modulus_degree must be one of {sorted(COEFF_MODULUS_BITS)}, got {N}"
            )
        q_bits = COEFF_MODULUS_BITS[N]
        if not 2 <= self.plain_modulus_bits <= min(MAX_PLAIN_MODULUS_BITS, q_bits - 1):
            raise ParameterError(
                f"plain_modulus_bits must be in [2, {min(MAX_PLAIN_MODULUS_BITS, q_bits - 1)}] "
                f"for N={N}, got {self.plain_modulus_bits}"
            )
        if not 1 <= self.decomposition_bit_count <= q_bits:
            raise ParameterError(
                f"decomposition_bit_count must be in [1, {q_bits}], got {self.decomposition_bit_count}"
            )
        if self.sigma <= 0:
            raise ParameterError("sigma must be positive")

        object.__setattr__(self, "_q", (1 << q_bits) - 1)
        object.__setattr__(self, "_t", find_batching_prime(self.plain_modulus_bits, N))

    @property
    def N(self) -> int:
        return self.poly_modulus_degree

    @property
    def q(self) -> int:
        """Coefficient modulus."""
        return self._q

    @property
    def t(self) -> int:
        """Plaintext modulus (batching prime)."""
        return self._t

    @property
    def plain_modulus(self) -> int:
        return self._t

    @property
    def coeff_modulus_bits(self) -> int:
        return self._q.bit_length()

    @property
    def delta(self) -> int:
        """Scaling factor floor(q/t) applied to encrypted messages."""
        return self._q // self._t

    @property
    def slot_count(self) -> int:
        return self.poly_modulus_degree

    @property
    def row_size(self) -> int:
        """Slots per batching row (slots form a 2 x N/2 matrix)."""
        return self.poly_modulus_degree // 2

    @property
    def T(self) -> int:
        """Relinearization decomposition base."""
        return 1 << self.decomposition_bit_count

    @property
    def decomposition_count(self) -> int:
        """Number of base-T digits of a coefficient mod q."""
        return -(-self.coeff_modulus_bits // self.decomposition_bit_count)

    @property
    def error_bound(self) -> int:
        return int(6 * self.sigma)

    def fingerprint(self) -> Dict[str, int]:
        """Values both parties must share for ciphertexts to be compatible."""
        return {'N': self.poly_modulus_degree, 't': self._t, 'q': self._q}

    def max_bit_length(self) -> int:
        """Longest bitstring whose values (plus one padding value) fit below t."""
        return (self._t - 1).bit_length() - 1
