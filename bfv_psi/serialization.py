"""
Serialization of the values passed between Receiver and Sender.

Ciphertexts and public bundles are pickled. Loading goes through a restricted
unpickler that only resolves the container classes of this package and the
numpy helpers needed to rebuild coefficient arrays, so a payload received
from the other party cannot execute arbitrary code. Secret keys refuse to be
pickled at all.
"""

import io
import pickle

from .exceptions import SerializationError

_ALLOWED = {
    ("bfv_psi.custom_fhe.ciphertext", "Ciphertext"),
    ("bfv_psi.custom_fhe.ciphertext", "Plaintext"),
    ("bfv_psi.custom_fhe.keys", "PublicKey"),
    ("bfv_psi.custom_fhe.keys", "RelinearizationKey"),
    ("bfv_psi.custom_fhe.params", "SchemeParameters"),
    ("bfv_psi.receiver", "PublicBundle"),
}

_NUMPY_NAMES = {"_reconstruct", "ndarray", "dtype", "scalar", "_frombuffer"}


class _RestrictedUnpickler(pickle.Unpickler):
    def find_class(self, module, name):
        if (module, name) in _ALLOWED:
            return super().find_class(module, name)
        if module.split(".")[0] == "numpy" and name in _NUMPY_NAMES:
            return super().find_class(module, name)
        raise SerializationError(f"refusing to load {module}.{name}")


def dumps(obj) -> bytes:
    try:
        return pickle.dumps(obj, protocol=pickle.HIGHEST_PROTOCOL)
    except pickle.PicklingError as e:
        raise SerializationError(str(e)) from e


def loads(data: bytes, expected_type=None):
    """Load a payload produced by dumps, optionally checking its type."""
    try:
        obj = _RestrictedUnpickler(io.BytesIO(data)).load()
    except SerializationError:
        raise
    except (pickle.UnpicklingError, EOFError, AttributeError, TypeError, ValueError) as e:
        raise SerializationError(f"corrupt payload: {e}") from e
    if expected_type is not None and not isinstance(obj, expected_type):
        raise SerializationError(
            f"expected {expected_type.__name__}, got {type(obj).__name__}")
    return obj
