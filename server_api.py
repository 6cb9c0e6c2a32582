# server_api.py
"""
HTTP Sender service.

Run with:  PSI_SENDER_DATASET=sender.txt fastapi run server_api.py

The Sender holds its own dataset and scheme parameters, never a secret key.
It receives the Receiver's public bundle and encrypted dataset, runs the
homomorphic matching and returns the single result ciphertext.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Response, UploadFile
from pydantic import BaseModel

from bfv_psi import serialization
from bfv_psi.custom_fhe import Ciphertext, SchemeParameters
from bfv_psi.dataset import encode_dataset, load_dataset
from bfv_psi.exceptions import ParameterMismatchError, PSIError, SerializationError
from bfv_psi.receiver import PublicBundle
from bfv_psi.sender import MatchMode, Sender

logger = logging.getLogger(__name__)


class SenderSettings(BaseModel):
    dataset_path: Optional[str] = None
    poly_modulus_degree: int = 4096
    match_mode: MatchMode = MatchMode.SET
    mask: bool = True

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        values = {
            'dataset_path': environ.get("PSI_SENDER_DATASET"),
            'poly_modulus_degree': environ.get("PSI_POLY_MODULUS_DEGREE", 4096),
            'match_mode': environ.get("PSI_MATCH_MODE", MatchMode.SET.value),
            'mask': environ.get("PSI_MASK", "true").lower() not in ("0", "false", "no"),
        }
        return cls(**values)


class StatusResponse(BaseModel):
    status: str
    backend: str
    poly_modulus_degree: int
    plain_modulus: int
    coeff_modulus_bits: int
    dataset_size: int
    match_mode: str


def build_sender(settings: SenderSettings) -> Sender:
    params = SchemeParameters(settings.poly_modulus_degree)
    if settings.dataset_path:
        dataset = load_dataset(settings.dataset_path)
    else:
        logger.warning("PSI_SENDER_DATASET not set, serving an empty dataset")
        dataset = encode_dataset([])
    return Sender(params, dataset, mode=settings.match_mode, mask=settings.mask)


def create_app(sender: Optional[Sender] = None) -> FastAPI:
    # The server DOES NOT need a secret key, just the parameters and its dataset
    sender = sender if sender is not None else build_sender(SenderSettings.from_env())
    app = FastAPI(title="PSI Sender")

    @app.get("/", response_model=StatusResponse)
    def home():
        params = sender.params
        return StatusResponse(
            status="PSI Sender Online",
            backend="Pure Python BFV",
            poly_modulus_degree=params.poly_modulus_degree,
            plain_modulus=params.t,
            coeff_modulus_bits=params.coeff_modulus_bits,
            dataset_size=len(sender.dataset),
            match_mode=sender.mode.value,
        )

    @app.post("/intersect")
    def intersect(bundle_file: UploadFile = File(...), query_file: UploadFile = File(...)):
        """
        Receives: public bundle + encrypted Receiver dataset
        Returns: one encrypted result ciphertext (zero slots = matches)
        """
        try:
            bundle = serialization.loads(bundle_file.file.read(), expected_type=PublicBundle)
            query = serialization.loads(query_file.file.read(), expected_type=Ciphertext)
        except SerializationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            result = sender.compute(query, bundle)
        except ParameterMismatchError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except (PSIError, ValueError) as e:
            # Malformed but well-typed payload, e.g. a size 3 query or missing relin keys
            raise HTTPException(status_code=400, detail=str(e))

        return Response(content=serialization.dumps(result), media_type="application/octet-stream")

    return app


app = create_app()
