"""
Receiver logic: the first actor of the PSI scheme, who wants to learn the
intersection between the two datasets.

1. generate_keys: secret key, public key and relinearization keys
2. encrypt_dataset: pack the dataset into one plaintext matrix and encrypt it;
   this ciphertext and the public bundle are handed to the Sender
3. decrypt_and_intersect: decrypt the Sender's result; the elements whose
   slot decrypts to 0 are in the intersection

The secret key never leaves this module's objects.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, Optional, Union

from .custom_fhe import BatchEncoder, BFVScheme, Ciphertext, SchemeParameters
from .custom_fhe.keys import PublicKey, RelinearizationKey, SecretKey
from .dataset import Dataset, encode_dataset
from .exceptions import CapacityError, ParameterError
from .result import ComputationResult, IntersectionStatus

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_scheme(params: SchemeParameters) -> BFVScheme:
    return BFVScheme(params)


@lru_cache(maxsize=None)
def get_encoder(params: SchemeParameters) -> BatchEncoder:
    return BatchEncoder(params)


@dataclass(frozen=True)
class PublicBundle:
    """What the Receiver hands to the Sender: never contains the secret key.

    `bit_length` is the length L of the Receiver's bitstrings (0 if unknown),
    so the Sender can refuse elements of another length that would parse to
    the same integers.
    """

    params: SchemeParameters
    public_key: PublicKey
    relin_keys: RelinearizationKey
    bit_length: int = 0


@dataclass(frozen=True)
class KeyMaterial:
    params: SchemeParameters
    secret_key: SecretKey = field(repr=False)
    public_key: PublicKey
    relin_keys: RelinearizationKey

    def public_bundle(self, bit_length: int = 0) -> PublicBundle:
        return PublicBundle(self.params, self.public_key, self.relin_keys, bit_length)


def generate_keys(params: SchemeParameters) -> KeyMaterial:
    """Generate public and secret keys for the Receiver, and the
    relinearization keys the Sender needs after each multiplication."""
    scheme = get_scheme(params)
    secret_key, public_key = scheme.key_generation()
    relin_keys = scheme.generate_relin_key(secret_key)
    logger.debug(f"Generated keys ({len(relin_keys)} relinearization key parts)")
    return KeyMaterial(params, secret_key, public_key, relin_keys)


def check_fits(dataset: Dataset, params: SchemeParameters) -> None:
    """Raise if the dataset cannot be packed into one ciphertext under params."""
    if len(dataset) > params.slot_count:
        raise CapacityError(len(dataset), params.slot_count)
    if dataset.bit_length and (1 << dataset.bit_length) >= params.t:
        raise ParameterError(
            f"{dataset.bit_length}-bit elements do not fit plaintext modulus t={params.t}; "
            f"at most {params.max_bit_length()} bits are supported"
        )


def encrypt_dataset(dataset: Dataset, public_key: PublicKey, params: SchemeParameters) -> Ciphertext:
    """Encrypt the Receiver's dataset into a single [matrix] ciphertext.

    Slot i holds dataset value i, remaining slots are zero. An empty dataset
    gives the empty ciphertext without encoding or encrypting anything.
    """
    if dataset.is_empty():
        logger.info("Receiver dataset is empty")
        return Ciphertext.empty(params=params.fingerprint())

    check_fits(dataset, params)
    scheme = get_scheme(params)
    encoder = get_encoder(params)

    plain_matrix = [0] * encoder.slot_count
    plain_matrix[:len(dataset)] = dataset.values

    ciphertext = scheme.encrypt(encoder.encode(plain_matrix), public_key)
    logger.info(f"First step completed: {len(dataset)} elements encrypted into one ciphertext")
    return ciphertext


def remaining_noise_budget(ciphertext: Ciphertext, secret_key: SecretKey, params: SchemeParameters) -> int:
    """Noise budget left in ciphertext, in bits. 0 means it no longer decrypts reliably."""
    return get_scheme(params).invariant_noise_budget(ciphertext, secret_key)


def decrypt_and_intersect(result_cipher: Ciphertext, dataset: Dataset,
                          secret_key: SecretKey, params: SchemeParameters) -> ComputationResult:
    """Last part of the PSI scheme: decrypt the Sender's computation and keep
    every dataset element whose slot decrypted to zero.

    Raises:
        ParameterMismatchError: the result was computed under other parameters.
    """
    if result_cipher.is_empty():
        logger.info("Sender ciphertext size is 0")
        return ComputationResult.no_computation()

    scheme = get_scheme(params)
    scheme.check_compatible(result_cipher)
    scheme.check_compatible(secret_key, "secret key")
    if len(dataset) > params.slot_count:
        raise CapacityError(len(dataset), params.slot_count)

    noise_budget = scheme.invariant_noise_budget(result_cipher, secret_key)
    logger.debug(f"noise budget in result ciphertext: {noise_budget} bits")
    noise_exhausted = noise_budget <= 0
    if noise_exhausted:
        logger.warning("Result ciphertext has no noise budget left; the intersection is unreliable")

    slots = get_encoder(params).decode(scheme.decrypt(result_cipher, secret_key))
    intersection = tuple(raw for raw, value in zip(dataset.raw, slots) if value == 0)
    logger.info("Last step completed")

    if intersection:
        status = IntersectionStatus.NON_EMPTY
        logger.info(f"Intersection between sender and receiver has {len(intersection)} elements")
    else:
        status = IntersectionStatus.EMPTY
        logger.info("The intersection between sender and receiver is null")

    return ComputationResult(
        noise_budget=noise_budget,
        intersection=intersection,
        status=status,
        noise_exhausted=noise_exhausted,
    )


class Receiver:
    """Holds one protocol run's key material and dataset."""

    def __init__(self, params: Union[SchemeParameters, int],
                 dataset: Union[Dataset, Iterable[str]],
                 keys: Optional[KeyMaterial] = None):
        if isinstance(params, int):
            params = SchemeParameters(params)
        if not isinstance(dataset, Dataset):
            dataset = encode_dataset(dataset)
        if keys is not None and keys.params != params:
            raise ParameterError("key material was generated under different parameters")

        self.params = params
        self.dataset = dataset
        self._keys = keys if keys is not None else generate_keys(params)

    def public_bundle(self) -> PublicBundle:
        return self._keys.public_bundle(self.dataset.bit_length)

    def encrypt_dataset(self) -> Ciphertext:
        return encrypt_dataset(self.dataset, self._keys.public_key, self.params)

    def decrypt_and_intersect(self, result_cipher: Ciphertext) -> ComputationResult:
        return decrypt_and_intersect(result_cipher, self.dataset, self._keys.secret_key, self.params)

    def noise_budget(self, ciphertext: Ciphertext) -> int:
        return remaining_noise_budget(ciphertext, self._keys.secret_key, self.params)

    def __repr__(self):
        return f"Receiver(params={self.params!r}, dataset_size={len(self.dataset)})"
