"""
Lightweight hashing helpers.

Provides a stable fingerprint (lru_cache) for repeated keys such as the
serialized model/params signature of a grid combination.
"""

import json
from functools import lru_cache
from hashlib import sha256
from typing import Any, Dict

from pipelearner.utils.serialization import NumpyEncoder


class _SignatureEncoder(NumpyEncoder):
    """Falls back to repr() for values JSON cannot express (estimators, callables)."""
    def default(self, obj):
        try:
            return super().default(obj)
        except TypeError:
            return repr(obj)


@lru_cache(maxsize=256)
def fingerprint(key: str) -> str:
    """
    Deterministically hash a string key (cached to avoid repeated hashing).
    """
    return sha256(key.encode("utf-8")).hexdigest()


def config_signature(model_name: str, params: Dict[str, Any]) -> str:
    """
    Hash a (model, params) pair independent of dict ordering.
    """
    signature = json.dumps({'model': model_name, 'params': params}, sort_keys=True, cls=_SignatureEncoder)
    return fingerprint(signature)
