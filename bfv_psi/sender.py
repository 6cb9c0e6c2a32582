"""
Sender logic: the homomorphic matcher.

The Sender receives the Receiver's encrypted matrix C_r and the public bundle,
and returns exactly one ciphertext with the same slot layout in which slot i
decrypts to zero if and only if the Receiver's element i matches.

Two matching rules are available:

- MatchMode.SET: true set membership. For every Sender element y_j the
  Sender computes C_r - y_j (y_j broadcast to every slot) and multiplies all
  differences together with a balanced product tree, relinearizing after
  every multiplication. Multiplicative depth is ceil(log2 |S|), so the
  parameters must afford that many levels of noise.
- MatchMode.POSITIONAL: slot-to-slot equality, C_r - encode(S). Both
  datasets must be aligned by index beforehand. Depth 0.

Unless disabled, the result is multiplied slot-wise by uniformly random
non-zero values, so a non-matching slot decrypts to a random value instead
of leaking a difference with the Sender's elements.
"""

import logging
import secrets
from enum import Enum
from typing import Iterable, Union

from .custom_fhe import Ciphertext, SchemeParameters
from .dataset import Dataset, encode_dataset
from .exceptions import DatasetError, ParameterError, ParameterMismatchError
from .receiver import PublicBundle, check_fits, get_encoder, get_scheme

logger = logging.getLogger(__name__)


class MatchMode(Enum):
    SET = "set"
    POSITIONAL = "positional"


class Sender:
    def __init__(self, params: Union[SchemeParameters, int],
                 dataset: Union[Dataset, Iterable[str]],
                 mode: Union[MatchMode, str] = MatchMode.SET,
                 mask: bool = True):
        if isinstance(params, int):
            params = SchemeParameters(params)
        if not isinstance(dataset, Dataset):
            dataset = encode_dataset(dataset)
        self.params = params
        self.dataset = dataset
        self.mode = MatchMode(mode)
        self.mask = mask

        if self.mode is MatchMode.POSITIONAL:
            check_fits(dataset, params)
        elif dataset.bit_length and (1 << dataset.bit_length) >= params.t:
            raise ParameterError(
                f"{dataset.bit_length}-bit elements do not fit plaintext modulus t={params.t}"
            )

        self.scheme = get_scheme(params)
        self.encoder = get_encoder(params)

    @property
    def multiplicative_depth(self) -> int:
        if self.mode is MatchMode.POSITIONAL or len(self.dataset) <= 1:
            return 0
        return (len(self.dataset) - 1).bit_length()

    def compute(self, query: Ciphertext, bundle: PublicBundle) -> Ciphertext:
        """Homomorphic matching of the Receiver's ciphertext against the Sender's dataset.

        Raises:
            ParameterMismatchError: the query or the bundle use other parameters.
            DatasetError: the Receiver's bitstrings differ in length from the Sender's.
        """
        expected = self.params.fingerprint()
        if bundle.params.fingerprint() != expected:
            raise ParameterMismatchError(expected, bundle.params.fingerprint(), "public bundle")
        if bundle.bit_length and self.dataset.bit_length and bundle.bit_length != self.dataset.bit_length:
            raise DatasetError(
                f"receiver elements have {bundle.bit_length} bits, "
                f"sender elements have {self.dataset.bit_length}"
            )
        if query.is_empty():
            logger.info("Receiver ciphertext is empty, nothing to compute")
            return Ciphertext.empty(params=expected)
        self.scheme.check_compatible(query)

        logger.info(
            f"Matching against {len(self.dataset)} sender elements "
            f"(mode={self.mode.value}, depth={self.multiplicative_depth})"
        )
        if self.mode is MatchMode.POSITIONAL:
            result = self._match_positional(query)
        else:
            result = self._match_set(query, bundle)

        if self.mask:
            result = self.scheme.multiply_plain(result, self._random_nonzero_plain())
        return result

    def _match_positional(self, query):
        # Padding value t - 1 is never an element value (elements are < 2^L < t - 1)
        padding = self.params.t - 1
        values = list(self.dataset.values)
        values += [padding] * (self.params.slot_count - len(values))
        return self.scheme.sub_plain(query, self.encoder.encode(values))

    def _match_set(self, query, bundle):
        if self.dataset.is_empty():
            # Nothing can match: all ones, freshly encrypted
            return self.scheme.encrypt(self.encoder.encode_constant(1), bundle.public_key)

        level = [self.scheme.sub_plain(query, self.encoder.encode_constant(value))
                 for value in self.dataset.values]
        while len(level) > 1:
            products = []
            for i in range(0, len(level) - 1, 2):
                product = self.scheme.multiply(level[i], level[i + 1])
                products.append(self.scheme.relinearize(product, bundle.relin_keys))
            if len(level) % 2:
                products.append(level[-1])
            level = products
        return level[0]

    def _random_nonzero_plain(self):
        t = self.params.t
        return self.encoder.encode([secrets.randbelow(t - 1) + 1 for _ in range(self.params.slot_count)])
