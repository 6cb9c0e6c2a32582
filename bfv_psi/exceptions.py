"""
Exceptions raised by the PSI protocol.

Empty datasets and empty result ciphertexts are not errors: they resolve to
the empty ciphertext and an empty ComputationResult. Noise exhaustion is a
flag on the result. Everything below signals a result that cannot be trusted
or an input that cannot be processed.
"""


class PSIError(Exception):
    """Base class for all protocol errors."""


class ParameterError(PSIError, ValueError):
    """Invalid scheme parameters, or a value outside the plaintext modulus."""


class ParameterMismatchError(ParameterError):
    """Two parties (or a key and a ciphertext) use different scheme parameters."""

    def __init__(self, expected, actual, what="ciphertext"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} was produced under parameters {actual}, expected {expected}"
        )


class DatasetError(PSIError, ValueError):
    """Malformed dataset: non-binary characters or elements of different length."""


class CapacityError(DatasetError):
    """The dataset has more elements than the ciphertext has slots."""

    def __init__(self, size, slot_count):
        self.size = size
        self.slot_count = slot_count
        super().__init__(
            f"dataset has {size} elements but a ciphertext only holds {slot_count} slots"
        )


class MissingKeyError(PSIError):
    """An operation needs a key that was not provided."""


class SerializationError(PSIError):
    """A serialized payload is corrupt or contains disallowed objects."""


class SenderServiceError(PSIError):
    """The remote Sender service failed to answer a request."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)
