"""
SenderClient against the FastAPI app, through the in-process test client.
"""

import pytest
import requests
from fastapi.testclient import TestClient

from bfv_psi.client import SenderClient
from bfv_psi.exceptions import SenderServiceError
from bfv_psi.receiver import Receiver
from bfv_psi.sender import MatchMode, Sender
from server_api import create_app


@pytest.fixture(scope="module")
def client(params):
    sender = Sender(params, ["0110", "1111"], mode=MatchMode.POSITIONAL)
    return SenderClient("http://testserver", session=TestClient(create_app(sender)))


def test_status(client, params):
    status = client.status()
    assert status["poly_modulus_degree"] == 4096
    assert status["plain_modulus"] == params.t
    assert status["dataset_size"] == 2
    assert status["match_mode"] == "positional"


def test_intersect(client, params, keys):
    receiver = Receiver(params, ["0001", "1111"], keys=keys)
    result_cipher = client.intersect(receiver.public_bundle(), receiver.encrypt_dataset())
    assert receiver.decrypt_and_intersect(result_cipher).intersection == ("1111",)


def test_mismatched_parameters(client, small_params, small_keys):
    receiver = Receiver(small_params, ["0001"], keys=small_keys)
    with pytest.raises(SenderServiceError) as excinfo:
        client.intersect(receiver.public_bundle(), receiver.encrypt_dataset())
    assert excinfo.value.status_code == 409


def test_unreachable_sender():
    class RefusingSession:
        def get(self, url, **kwargs):
            raise requests.ConnectionError("connection refused")

    client = SenderClient("http://sender.invalid", session=RefusingSession())
    with pytest.raises(SenderServiceError) as excinfo:
        client.status()
    assert excinfo.value.status_code is None
