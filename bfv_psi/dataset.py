"""
Dataset encoding.

A dataset is an ordered sequence of equal-length bitstrings. Each element is
kept both as its original string (reported back in the intersection) and as
its base-2 integer value (written into a plaintext slot). Index i of the
dataset is slot i of the encrypted matrix.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

from .exceptions import DatasetError

logger = logging.getLogger(__name__)

_BINARY_DIGITS = frozenset("01")


@dataclass(frozen=True)
class Dataset:
    """Immutable encoded dataset."""

    raw: Tuple[str, ...]
    values: Tuple[int, ...]
    bit_length: int

    def __len__(self) -> int:
        return len(self.raw)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(zip(self.raw, self.values))

    def __getitem__(self, index: int) -> Tuple[str, int]:
        return self.raw[index], self.values[index]

    def is_empty(self) -> bool:
        return len(self.raw) == 0


def encode_dataset(raw_strings: Iterable[str]) -> Dataset:
    """Parse bitstrings into a Dataset, failing fast on malformed input.

    Raises:
        DatasetError: an element is empty, contains characters other than
            0 and 1, or differs in length from the first element.
    """
    raw = tuple(raw_strings)
    if not raw:
        return Dataset(raw=(), values=(), bit_length=0)

    bit_length = len(raw[0])
    for index, bits in enumerate(raw):
        if not isinstance(bits, str) or not bits:
            raise DatasetError(f"element {index} is not a non-empty bitstring: {bits!r}")
        if not set(bits) <= _BINARY_DIGITS:
            raise DatasetError(f"element {index} contains non-binary characters: {bits!r}")
        if len(bits) != bit_length:
            raise DatasetError(
                f"element {index} has length {len(bits)}, expected {bit_length} "
                f"(all elements must share the length of the first)"
            )

    values = tuple(int(bits, 2) for bits in raw)
    return Dataset(raw=raw, values=values, bit_length=bit_length)


def load_dataset(path: Union[str, Path]) -> Dataset:
    """Read one bitstring per line; blank lines are ignored."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    dataset = encode_dataset(line for line in lines if line)
    logger.info(f"Loaded {len(dataset)} elements of {dataset.bit_length} bits from {path}")
    return dataset
