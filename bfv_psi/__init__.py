"""
BFV-PSI: two-party Private Set Intersection over batched BFV homomorphic encryption.

The Receiver encrypts its bitstrings into one batched ciphertext, the Sender
computes homomorphically a ciphertext whose slots are zero exactly where the
Receiver's elements match, and the Receiver decrypts to learn the intersection.
"""

from .custom_fhe import Ciphertext, SchemeParameters
from .dataset import Dataset, encode_dataset, load_dataset
from .exceptions import (
    CapacityError,
    DatasetError,
    MissingKeyError,
    ParameterError,
    ParameterMismatchError,
    PSIError,
    SenderServiceError,
    SerializationError,
)
from .receiver import (
    KeyMaterial,
    PublicBundle,
    Receiver,
    decrypt_and_intersect,
    encrypt_dataset,
    generate_keys,
    remaining_noise_budget,
)
from .result import ComputationResult, IntersectionStatus
from .sender import MatchMode, Sender

__version__ = "0.1.0"
__all__ = [
    "Ciphertext",
    "SchemeParameters",
    "Dataset",
    "encode_dataset",
    "load_dataset",
    "CapacityError",
    "DatasetError",
    "MissingKeyError",
    "ParameterError",
    "ParameterMismatchError",
    "PSIError",
    "SenderServiceError",
    "SerializationError",
    "KeyMaterial",
    "PublicBundle",
    "Receiver",
    "decrypt_and_intersect",
    "encrypt_dataset",
    "generate_keys",
    "remaining_noise_budget",
    "ComputationResult",
    "IntersectionStatus",
    "MatchMode",
    "Sender",
]
