from __future__ import annotations

import base64
from typing import Any, Dict

import numpy as np


def ndarray_to_payload(arr: np.ndarray) -> Dict[str, Any]:
    """
    Serialize a NumPy ndarray into a JSON-safe payload.

    Returns
    -------
    dict
        {"b64": "<base64>", "dtype": "<numpy dtype str>", "shape": [...]}
    """
    a = np.ascontiguousarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes(order="C")).decode("ascii"),
        "dtype": a.dtype.str,  # e.g. "<f4"
        "shape": list(a.shape),
    }


def payload_to_ndarray(payload: Dict[str, Any]) -> np.ndarray:
    """
    Deserialize a payload produced by `ndarray_to_payload`.

    Raises
    ------
    KeyError
        If a required payload field is missing.
    """
    raw = base64.b64decode(str(payload["b64"]).encode("ascii"))
    dtype = np.dtype(str(payload["dtype"]))
    shape = tuple(int(x) for x in payload["shape"])

    # frombuffer returns a read-only view on `raw`; copy to own the memory.
    return np.frombuffer(raw, dtype=dtype).reshape(shape).copy()
