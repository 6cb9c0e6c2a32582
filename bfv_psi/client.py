"""
Receiver-side client for the HTTP Sender service (server_api.py).
"""

import logging

import requests

from . import serialization
from .custom_fhe import Ciphertext
from .exceptions import SenderServiceError

logger = logging.getLogger(__name__)

DEFAULT_SENDER_URL = "http://localhost:8000"


class SenderClient:
    def __init__(self, base_url=DEFAULT_SENDER_URL, timeout=300, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def status(self):
        """Parameters and dataset size advertised by the Sender."""
        response = self._request("get", "/")
        return response.json()

    def intersect(self, bundle, query):
        """Send the public bundle and encrypted dataset; return the result ciphertext."""
        files = {
            'bundle_file': ('bundle.bin', serialization.dumps(bundle), 'application/octet-stream'),
            'query_file': ('query.bin', serialization.dumps(query), 'application/octet-stream'),
        }
        logger.info(f"Sending encrypted dataset to {self.base_url}/intersect")
        response = self._request("post", "/intersect", files=files)
        return serialization.loads(response.content, expected_type=Ciphertext)

    def _request(self, method, path, **kwargs):
        url = self.base_url + path
        try:
            response = getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise SenderServiceError(f"cannot reach sender at {url}: {e}") from e
        if response.status_code != 200:
            raise SenderServiceError(
                f"sender answered {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response
