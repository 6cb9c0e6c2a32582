"""
Outcome of one PSI run, as seen by the Receiver.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class IntersectionStatus(Enum):
    NO_COMPUTATION = "no_computation"  # the Sender returned the empty ciphertext
    EMPTY = "empty"
    NON_EMPTY = "non_empty"


@dataclass(frozen=True)
class ComputationResult:
    """Intersection plus the noise budget the result ciphertext had left.

    `noise_exhausted` is set when the budget reached zero: decryption is then
    unreliable and the intersection must not be trusted.
    """

    noise_budget: int
    intersection: Tuple[str, ...]
    status: IntersectionStatus
    noise_exhausted: bool = False

    @classmethod
    def no_computation(cls) -> "ComputationResult":
        return cls(noise_budget=0, intersection=(), status=IntersectionStatus.NO_COMPUTATION)

    @property
    def is_empty(self) -> bool:
        return self.status is not IntersectionStatus.NON_EMPTY

    @property
    def reliable(self) -> bool:
        return not self.noise_exhausted

    def __contains__(self, bits) -> bool:
        return bits in self.intersection

    def __len__(self) -> int:
        return len(self.intersection)
