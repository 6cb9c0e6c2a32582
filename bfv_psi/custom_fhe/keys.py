"""
Key containers for the BFV scheme.

The secret key redacts itself from repr and refuses to be pickled, so it
cannot leak through logs or through the serialization used to hand public
material to the Sender.
"""

from ..exceptions import SerializationError


class SecretKey:
    def __init__(self, s, params=None):
        self._s = s
        self.params = dict(params or {})

    def get_polynomial(self):
        return self._s

    def __reduce__(self):
        raise SerializationError("secret keys must never leave the Receiver")

    def __repr__(self):
        return f"SecretKey(<redacted>, params={self.params})"


class PublicKey:
    """Public key (b, a) with b = -(a*s + e)."""

    def __init__(self, b, a, params=None):
        self.b = b
        self.a = a
        self.params = dict(params or {})

    def get_components(self):
        return self.b, self.a

    def __repr__(self):
        return f"PublicKey(params={self.params})"


class RelinearizationKey:
    """Encryptions of T^i * s^2 for i < decomposition_count, as (b_i, a_i) pairs."""

    def __init__(self, parts, decomposition_bit_count, params=None):
        self.parts = list(parts)
        self.decomposition_bit_count = decomposition_bit_count
        self.params = dict(params or {})

    def get_components(self):
        return self.parts

    def __len__(self):
        return len(self.parts)

    def __repr__(self):
        return (
            f"RelinearizationKey(parts={len(self.parts)}, "
            f"decomposition_bits={self.decomposition_bit_count}, params={self.params})"
        )
