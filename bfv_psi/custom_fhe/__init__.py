"""
Pure numpy/Python batched BFV homomorphic encryption.
"""

from .params import SchemeParameters, find_batching_prime, is_prime
from .polynomial import DiscreteGaussian, PolynomialRing
from .ciphertext import Ciphertext, Plaintext
from .keys import PublicKey, RelinearizationKey, SecretKey
from .batch_encoder import BatchEncoder
from .bfv_scheme import BFVScheme

__all__ = [
    "SchemeParameters",
    "find_batching_prime",
    "is_prime",
    "DiscreteGaussian",
    "PolynomialRing",
    "Ciphertext",
    "Plaintext",
    "PublicKey",
    "RelinearizationKey",
    "SecretKey",
    "BatchEncoder",
    "BFVScheme",
]
