"""
Flat-order parameter checkpointing.

This module saves and restores the parameters of a module tree by flat
parameter position. The flat order of a container is stable as long as no
child is added or removed, so a checkpoint written from one instance can be
loaded into any structurally identical instance.

File format
-----------
{
  "format": "arbornn.params",
  "version": 1,
  "params": [<payload>, <payload>, ...]   # one per flat position
}

Loading copies each value into the existing variable and then passes it
through `set_params`, so children stay in sync and gradient hooks survive.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np

from ...domain._module import IModule
from ..encoding._b64 import ndarray_to_payload, payload_to_ndarray

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "arbornn.params"
CHECKPOINT_VERSION = 1


def extract_param_payloads(model: IModule) -> List[Dict[str, Any]]:
    """
    Encode every flat parameter of `model` as a JSON-safe payload.

    Returns
    -------
    List[Dict[str, Any]]
        Payloads in flat parameter order.
    """
    return [ndarray_to_payload(np.asarray(p.data)) for p in model.params()]


def load_param_payloads_(model: IModule, payloads: List[Dict[str, Any]]) -> None:
    """
    In-place load of flat parameters from payloads.

    Values are written into the existing variables, so gradient flags,
    gradient hooks and references held by optimizers stay attached.

    Raises
    ------
    ValueError
        If the payload count or any shape does not match the model. The
        check covers every position before the first write.
    """
    params = model.params()
    if len(payloads) != len(params):
        raise ValueError(
            f"Checkpoint holds {len(payloads)} parameter(s), "
            f"model has {len(params)}"
        )

    arrays = [payload_to_ndarray(payload) for payload in payloads]
    for i, (arr, p) in enumerate(zip(arrays, params)):
        target_shape = tuple(np.shape(p.data))
        if tuple(arr.shape) != target_shape:
            raise ValueError(
                f"Shape mismatch at position {i}: model {target_shape} vs "
                f"checkpoint {tuple(arr.shape)}"
            )

    for i, (arr, p) in enumerate(zip(arrays, params)):
        p.data = arr
        model.set_params(p, i)


def save_params(path: Union[str, Path], model: IModule) -> None:
    """
    Write the flat parameters of `model` to a JSON checkpoint file.
    """
    path = Path(path)
    doc = {
        "format": CHECKPOINT_FORMAT,
        "version": CHECKPOINT_VERSION,
        "params": extract_param_payloads(model),
    }
    path.write_text(json.dumps(doc), encoding="utf-8")
    logger.info("Saved %d parameter(s) to %s", len(doc["params"]), path)


def load_params(path: Union[str, Path], model: IModule) -> None:
    """
    Restore the flat parameters of `model` from a JSON checkpoint file.

    Raises
    ------
    ValueError
        If the file is not an ArborNN parameter checkpoint or does not
        match the model.
    """
    path = Path(path)
    doc = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(doc, dict) or doc.get("format") != CHECKPOINT_FORMAT:
        raise ValueError(f"{path} is not an ArborNN parameter checkpoint")
    if doc.get("version") != CHECKPOINT_VERSION:
        raise ValueError(
            f"Unsupported checkpoint version {doc.get('version')!r} in {path}"
        )

    load_param_payloads_(model, doc["params"])
    logger.info("Loaded %d parameter(s) from %s", len(doc["params"]), path)
